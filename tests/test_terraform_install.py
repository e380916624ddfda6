"""Tests for installing a pinned terraform release."""

import io
import stat
import zipfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from drone_terraform.exceptions import InstallError
from drone_terraform.terraform_install import install_terraform, release_url


def make_archive(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def make_response(content=b"", status_error=None):
    response = MagicMock()
    response.content = content
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestReleaseUrl:
    def test_linux_amd64(self):
        assert release_url("1.5.7", "Linux", "x86_64") == (
            "https://releases.hashicorp.com/terraform/1.5.7/terraform_1.5.7_linux_amd64.zip"
        )

    def test_leading_v_and_arm(self):
        assert release_url("v1.6.0", "Darwin", "arm64").endswith("terraform_1.6.0_darwin_arm64.zip")


class TestInstall:
    def test_installs_binary(self, tmp_path):
        destination = tmp_path / "terraform"
        response = make_response(make_archive({"terraform": b"#!/bin/sh\n"}))
        with patch("drone_terraform.terraform_install.requests.get", return_value=response) as get:
            path = install_terraform("1.5.7", str(destination))
        assert get.call_args[0][0].startswith("https://releases.hashicorp.com/terraform/1.5.7/")
        assert path.read_bytes() == b"#!/bin/sh\n"
        assert stat.S_IMODE(path.stat().st_mode) == 0o755

    def test_http_error(self, tmp_path):
        response = make_response(status_error=requests.HTTPError("404 Not Found"))
        with patch("drone_terraform.terraform_install.requests.get", return_value=response):
            with pytest.raises(InstallError, match="0.0.0"):
                install_terraform("0.0.0", str(tmp_path / "terraform"))

    def test_missing_member(self, tmp_path):
        response = make_response(make_archive({"LICENSE.txt": b""}))
        with patch("drone_terraform.terraform_install.requests.get", return_value=response):
            with pytest.raises(InstallError):
                install_terraform("1.5.7", str(tmp_path / "terraform"))

    def test_bad_archive(self, tmp_path):
        response = make_response(b"not a zip")
        with patch("drone_terraform.terraform_install.requests.get", return_value=response):
            with pytest.raises(InstallError):
                install_terraform("1.5.7", str(tmp_path / "terraform"))
