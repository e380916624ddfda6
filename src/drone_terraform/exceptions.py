"""
Errors raised while configuring or executing the plugin.
"""


class PluginException(Exception):
    """The plugin could not complete its run."""

    exit_code = 1


class ConfigDecodeError(PluginException):
    """A JSON map option could not be decoded."""

    def __init__(self, option: str, reason: str):
        super().__init__(f"Option [{option}] is not a valid JSON object of strings: {reason}")
        self.option = option
        self.reason = reason


class OptionParseError(PluginException):
    """A scalar option holds a value that cannot be converted to its type."""

    def __init__(self, option: str, value: str, reason: str):
        super().__init__(f"Option [{option}] has invalid value [{value}]: {reason}")
        self.option = option
        self.value = value


class OptionDecodeError(PluginException):
    """A JSON options object could not be decoded."""


class InvalidActionError(PluginException):
    """An unsupported action was requested."""

    def __init__(self, action: str, valid_actions):
        super().__init__(
            f"Valid actions are: {', '.join(valid_actions)}. You provided [{action}]."
        )
        self.action = action


class InstallError(PluginException):
    """Terraform could not be installed."""


class AssumeRoleError(PluginException):
    """The AWS role could not be assumed."""


class ExecutionError(PluginException):
    """A command exited with a non-zero status."""

    def __init__(self, command, exit_code: int):
        # Only the binary and sub-command; the remaining arguments may hold secrets.
        name = " ".join(command[:2])
        super().__init__(f"Command [{name}] exited with status {exit_code}")
        self.command = list(command)
        self.returncode = exit_code
        # Killed by a signal: report like a shell does
        self.exit_code = 128 - exit_code if exit_code < 0 else exit_code
