#!/usr/bin/env python
"""
Use to execute the configured terraform actions.

Expected operations:
    1. If a Terraform version is pinned that release is installed.
    2. If a role is configured AWS credentials are acquired for it.
    3. Netrc credentials are written for private module fetches.
    4. Secrets are exported as TF_VAR_* variables.
    5. The full command list is built. Unknown actions abort the run before any command runs.
    6. Commands run one after another in the root directory. First failure stops the run.
    7. Terraform data directory is removed unless cleanup is skipped.

"""

import os
import shlex
import shutil
import subprocess
import sys
from typing import Dict, List

from drone_terraform.commands import build_commands, plan_file
from drone_terraform.config import Plugin
from drone_terraform.credentials import (
    UPDATE_CA_CERTIFICATES,
    assume_role,
    install_ca_cert,
    lowercase_tf_variables,
    secret_variables,
    write_netrc,
)
from drone_terraform.exceptions import ExecutionError
from drone_terraform.terraform_install import install_terraform
from utilities.logging import debug

TF_DATA_DIR = ".terraform"


def working_directory(root_dir: str) -> str:
    cwd = os.getcwd()
    if root_dir:
        return os.path.join(cwd, root_dir)
    return cwd


def command_environment(plugin: Plugin) -> Dict[str, str]:
    """
    Environment handed to every command.
    Returns:
        dict: Configuration source extended with role credentials, data dir and terraform variables.
    """
    config = plugin.config
    environ = dict(plugin.environ)

    if config.role_arn:
        environ.update(assume_role(config.role_arn, environ))

    if config.terraform_data_dir:
        environ["TF_DATA_DIR"] = config.terraform_data_dir

    environ.update(secret_variables(config.secrets, environ))
    environ.update(lowercase_tf_variables(environ))
    return environ


def delete_cache(workdir: str, data_dir: str) -> None:
    path = os.path.join(workdir, data_dir)
    debug(f"Removing [{path}]")
    shutil.rmtree(path, ignore_errors=True)


def trace(command: List[str]) -> None:
    sys.stdout.write(f"$ {shlex.join(command)}\n")
    sys.stdout.flush()


def run_command(command: List[str], workdir: str, environ: Dict[str, str], sensitive: bool, runner):
    if not sensitive:
        trace(command)
    result = runner(command, cwd=workdir, env=environ, check=False)
    if result.returncode != 0:
        raise ExecutionError(command, result.returncode)
    debug("Command completed successfully")


def execute(plugin: Plugin, runner=subprocess.run) -> None:
    """
    Run every configured terraform action.
    Raises:
        InvalidActionError: Unknown action, raised before anything runs.
        ExecutionError: A command exited with a non-zero status.
    """
    config = plugin.config
    data_dir = config.terraform_data_dir or TF_DATA_DIR
    plan_path = plan_file(config.terraform_data_dir or plugin.environ.get("TF_DATA_DIR", ""))
    commands = build_commands(config, plan_path)

    if plugin.terraform.version:
        install_terraform(plugin.terraform.version)

    environ = command_environment(plugin)
    write_netrc(plugin.netrc, home=environ.get("HOME"))

    if config.cacert:
        install_ca_cert(config.cacert)
        commands.insert(1, list(UPDATE_CA_CERTIFICATES))

    workdir = working_directory(config.root_dir)
    if not config.skip_init:
        # A skipped init relies on a restored data directory
        delete_cache(workdir, data_dir)

    for command in commands:
        run_command(command, workdir, environ, config.sensitive, runner)

    if not config.skip_cleanup:
        delete_cache(workdir, data_dir)
