#!/usr/bin/env python
"""
Use to install a pinned version of the Terraform CLI.

Expected operations:
    1. Release archive for the current platform is downloaded from releases.hashicorp.com.
    2. The [terraform] binary is extracted from the archive.
    3. Binary is written to the install path and made executable.

"""

import io
import os
import platform
import zipfile
from pathlib import Path

import requests

from drone_terraform.exceptions import InstallError
from utilities.logging import debug, info

RELEASES_URL = "https://releases.hashicorp.com/terraform/{version}/terraform_{version}_{os}_{arch}.zip"
INSTALL_PATH = "/bin/terraform"
DOWNLOAD_TIMEOUT = 120

ARCHITECTURES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "armv7l": "arm",
}


def release_url(version: str, system: str = None, machine: str = None) -> str:
    version = version.strip().lstrip("v")
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    return RELEASES_URL.format(
        version=version, os=system, arch=ARCHITECTURES.get(machine, machine)
    )


def install_terraform(version: str, destination: str = INSTALL_PATH) -> Path:
    """
    Download and install a Terraform release.
    Returns:
        Path: Location of the installed binary.
    """
    url = release_url(version)
    info(f"Installing Terraform [{version}]")
    debug(f"Downloading [{url}]")
    try:
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exception:
        raise InstallError(f"Failed to download Terraform [{version}]: {exception}") from exception

    try:
        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            binary = archive.read("terraform")
    except (zipfile.BadZipFile, KeyError) as exception:
        raise InstallError(f"Invalid Terraform archive [{url}]: {exception}") from exception

    path = Path(destination)
    path.write_bytes(binary)
    os.chmod(path, 0o755)
    debug(f"Installed Terraform [{version}] at [{path}]")
    return path
