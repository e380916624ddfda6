#!/usr/bin/env python
"""
Use to run terraform actions from a Drone pipeline step.

Expected operations:
    1. Options are read from command-line flags or their PLUGIN_* / DRONE_NETRC_* environment variables.
    2. Plugin configuration is loaded and validated. Malformed [vars] or [secrets] abort the run.
    3. Configured actions are executed with terraform in order.
    4. Process exits with the status of the first failing command, or 0.

Usage:
    drone-terraform [--actions <ACTION> ...] [--vars <JSON OBJECT>] [--secrets <JSON OBJECT>] ...

"""

import os
import sys
from typing import Mapping, Optional, Sequence

from drone_terraform import __version__
from drone_terraform.config import load_plugin
from drone_terraform.options import Option, build_argument_parser, parse_bool
from drone_terraform.plugin import execute
from utilities.exception_handler import exception_handler
from utilities.logging import info, set_debug

DEBUG_OPTION = Option("debug", "PLUGIN_DEBUG", help="enable debug logging")


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """
    Parser command-line arguments provided during execution.
    Returns:
        Namespace: Arguments derived from user input and arg-parser.
    """
    return build_argument_parser().parse_args(argv)


def run(
    argv: Optional[Sequence[str]] = None,
    source: Optional[Mapping[str, str]] = None,
    executor=execute,
) -> None:
    """Load the plugin configuration and hand it to the executor."""
    if source is None:
        source = dict(os.environ)
    set_debug(parse_bool(DEBUG_OPTION, source.get(DEBUG_OPTION.env_var, "")))

    args = parse_arguments(argv)
    info(f"Drone Terraform Plugin Version [{__version__}]")

    plugin = load_plugin(source, args)
    executor(plugin)


@exception_handler
def main():
    run()


if __name__ == "__main__":
    sys.exit(main())
