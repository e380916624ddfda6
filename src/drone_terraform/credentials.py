"""
Credentials and environment preparation for terraform commands.
"""

import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from drone_terraform.config import Netrc
from drone_terraform.exceptions import AssumeRoleError
from utilities.logging import debug, info

CA_CERT_PATH = "/usr/local/share/ca-certificates/ca_cert.crt"
UPDATE_CA_CERTIFICATES = ["update-ca-certificates"]

ROLE_SESSION_NAME = "drone"
ROLE_SESSION_DURATION = 3600

TF_VAR_PATTERN = re.compile(r"^TF_VAR_(?P<name>.+)$")

NETRC_TEMPLATE = """
machine {machine}
login {login}
password {password}
"""


def write_netrc(netrc: Netrc, home: Optional[str] = None) -> Optional[Path]:
    """
    Write a .netrc file so terraform can fetch private modules.
    Returns:
        Path: Location of the file, None when any credential field is missing.
    """
    if not (netrc.machine and netrc.login and netrc.password):
        return None

    path = Path(home or Path.home()) / ".netrc"
    path.write_text(
        NETRC_TEMPLATE.format(
            machine=netrc.machine, login=netrc.login, password=netrc.password
        ),
        encoding="utf-8",
    )
    os.chmod(path, 0o600)
    debug(f"Wrote netrc for machine [{netrc.machine}] to [{path}].")
    return path


def install_ca_cert(cacert: str, path: str = CA_CERT_PATH) -> Path:
    """Write the CA certificate where update-ca-certificates will pick it up."""
    path = Path(path)
    path.write_text(cacert, encoding="utf-8")
    os.chmod(path, 0o644)
    return path


def secret_variables(
    secrets: Optional[Mapping[str, str]], environ: Mapping[str, str]
) -> Dict[str, str]:
    """
    Map every secret to a terraform variable.
    Each secret value names the environment variable holding the secret.
    """
    return {
        f"TF_VAR_{key}": environ.get(name, "") for key, name in (secrets or {}).items()
    }


def lowercase_tf_variables(environ: Mapping[str, str]) -> Dict[str, str]:
    """Copy every TF_VAR_<NAME> variable to TF_VAR_<name>."""
    variables = {}
    for key, value in environ.items():
        match = TF_VAR_PATTERN.match(key)
        if match:
            variables[f"TF_VAR_{match.group('name').lower()}"] = value
    return variables


def assume_role(role_arn: str, environ: Mapping[str, str], client=None) -> Dict[str, str]:
    """
    Assume an AWS role through STS.
    Returns:
        dict: AWS credential environment variables of the assumed role.
    """
    if client is None:
        session = boto3.Session(
            aws_access_key_id=environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=environ.get("AWS_SECRET_ACCESS_KEY"),
            aws_session_token=environ.get("AWS_SESSION_TOKEN"),
            region_name=environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION"),
        )
        client = session.client("sts")

    info(f"Assuming role [{role_arn}]")
    try:
        response = client.assume_role(
            RoleArn=role_arn,
            RoleSessionName=ROLE_SESSION_NAME,
            DurationSeconds=ROLE_SESSION_DURATION,
        )
    except (BotoCoreError, ClientError) as exception:
        raise AssumeRoleError(f"Error assuming role [{role_arn}]: {exception}") from exception

    credentials = response["Credentials"]
    return {
        "AWS_ACCESS_KEY_ID": credentials["AccessKeyId"],
        "AWS_SECRET_ACCESS_KEY": credentials["SecretAccessKey"],
        "AWS_SESSION_TOKEN": credentials["SessionToken"],
    }
