#!/usr/bin/env python
"""
This module is used to standardize logging output of the plugin in the Drone build log.
"""

import sys

_DEBUG = False


def set_debug(enabled: bool) -> None:
    """Toggle emission of debug messages."""

    global _DEBUG
    _DEBUG = bool(enabled)


def info(msg: str) -> None:
    """Add a message to the build log."""

    for line in msg.splitlines():
        sys.stderr.write(f"{line}\n")


def debug(msg: str) -> None:
    """Add a message to the build log when debugging is enabled."""

    if not _DEBUG:
        return
    for line in msg.splitlines():
        sys.stderr.write(f"DEBUG: {line}\n")


def warning(msg: str) -> None:
    """Add a warning message to the build log."""

    for line in msg.splitlines():
        sys.stderr.write(f"WARNING: {line}\n")


def error(msg: str) -> None:
    """Add an error message to the build log."""

    for line in msg.splitlines():
        sys.stderr.write(f"ERROR: {line}\n")
