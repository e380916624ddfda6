"""
Declarative table of plugin options.

Each option is bound to a command-line flag and to an environment variable.
The same table drives the argument parser and the environment parser, so a
value may come from either surface. Precedence: flag > environment > default.
"""

import argparse
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from drone_terraform import __version__
from drone_terraform.exceptions import OptionParseError

STRING = "string"
STRING_SLICE = "string_slice"
INT = "int"
BOOL = "bool"

TRUE_VALUES = ("1", "t", "true")
FALSE_VALUES = ("", "0", "f", "false")


@dataclass(frozen=True)
class Option:
    name: str
    env_var: str
    kind: str = STRING
    default: Any = ""
    help: str = ""

    @property
    def dest(self) -> str:
        return self.name.replace(".", "_")


OPTIONS = (
    Option(
        "actions",
        "PLUGIN_ACTIONS",
        STRING_SLICE,
        ("validate", "plan", "apply"),
        "a list of actions to have terraform perform",
    ),
    Option(
        "ca_cert",
        "PLUGIN_CA_CERT",
        help="ca cert to add to your environment to allow terraform to use internal/private resources",
    ),
    Option(
        "env_file",
        "PLUGIN_ENV_FILE",
        help="pass filename to source it and load variables into current shell",
    ),
    Option(
        "init_options",
        "PLUGIN_INIT_OPTIONS",
        help="options for the init command. See https://www.terraform.io/docs/commands/init.html",
    ),
    Option(
        "summarize_options",
        "PLUGIN_SUMMARIZE_OPTIONS",
        help="options for the tf-summarize command. See https://github.com/dineshba/tf-summarize#usage",
    ),
    Option(
        "fmt_options",
        "PLUGIN_FMT_OPTIONS",
        help="options for the fmt command. See https://www.terraform.io/docs/commands/fmt.html",
    ),
    Option(
        "parallelism",
        "PLUGIN_PARALLELISM",
        INT,
        0,
        "the number of concurrent operations as Terraform walks its graph",
    ),
    Option(
        "skip_init",
        "PLUGIN_SKIP_INIT",
        BOOL,
        False,
        "skip terraform init (useful for usage with s3-cache)",
    ),
    Option(
        "skip_cleanup",
        "PLUGIN_SKIP_CLEANUP",
        BOOL,
        False,
        "skip removal of .terraform/ (useful for usage with s3-cache)",
    ),
    Option("netrc.machine", "DRONE_NETRC_MACHINE", help="netrc machine"),
    Option("netrc.username", "DRONE_NETRC_USERNAME", help="netrc username"),
    Option("netrc.password", "DRONE_NETRC_PASSWORD", help="netrc password"),
    Option(
        "role_arn_to_assume",
        "PLUGIN_ROLE_ARN_TO_ASSUME",
        help="a role to assume before running the terraform commands",
    ),
    Option(
        "root_dir",
        "PLUGIN_ROOT_DIR",
        help="the root directory where the terraform files live. When unset, the top level directory will be assumed",
    ),
    Option(
        "secrets",
        "PLUGIN_SECRETS",
        help="a map of secrets to pass to the Terraform `plan` and `apply` commands. Each value is passed as a `<key>=<ENV>` option",
    ),
    Option(
        "sensitive",
        "PLUGIN_SENSITIVE",
        BOOL,
        False,
        "whether or not to suppress terraform commands to stdout",
    ),
    Option("targets", "PLUGIN_TARGETS", STRING_SLICE, (), "targets to run apply or plan on"),
    Option("tf.version", "PLUGIN_TF_VERSION", help="terraform version to use"),
    Option(
        "vars",
        "PLUGIN_VARS",
        help="a map of variables to pass to the Terraform `plan` and `apply` commands. Each value is passed as a `<key>=<value>` option",
    ),
    Option(
        "var_files",
        "PLUGIN_VAR_FILES",
        STRING_SLICE,
        (),
        "a list of var files to use. Each value is passed as -var-file=<value>",
    ),
    Option(
        "tf_data_dir",
        "PLUGIN_TF_DATA_DIR",
        help="changes the location where Terraform keeps its per-working-directory data, such as the current remote backend configuration",
    ),
    Option(
        "disable_refresh",
        "PLUGIN_DISABLE_REFRESH",
        BOOL,
        False,
        "whether or not to disable refreshing state before `plan` and `apply` commands",
    ),
)


def build_argument_parser(options=OPTIONS) -> argparse.ArgumentParser:
    """
    Build a command-line parser from the option table.
    Returns:
        ArgumentParser: Parser whose namespace only holds flags given by the user.
    """
    parser = argparse.ArgumentParser(
        prog="drone-terraform", description="terraform plugin"
    )
    for option in options:
        kwargs = {
            "dest": option.dest,
            "help": f"{option.help} [${option.env_var}]",
            "default": argparse.SUPPRESS,
        }
        if option.kind == BOOL:
            kwargs["action"] = "store_true"
        elif option.kind == STRING_SLICE:
            kwargs["action"] = "append"
        elif option.kind == INT:
            kwargs["type"] = int
        parser.add_argument(f"--{option.name}", **kwargs)
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def parse_bool(option: Option, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise OptionParseError(option.env_var, raw, "expected a boolean")


def parse_int(option: Option, raw: str) -> int:
    try:
        return int(raw.strip(), 10)
    except ValueError as exception:
        raise OptionParseError(option.env_var, raw, "expected an integer") from exception


def parse_string_slice(option: Option, raw: str) -> tuple:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


PARSERS = {
    STRING: lambda option, raw: raw,
    STRING_SLICE: parse_string_slice,
    INT: parse_int,
    BOOL: parse_bool,
}


def resolve_option(
    option: Option,
    source: Mapping[str, str],
    namespace: Optional[argparse.Namespace] = None,
) -> Any:
    """Resolve a single option against the command-line and the configuration source."""
    if namespace is not None and hasattr(namespace, option.dest):
        value = getattr(namespace, option.dest)
        return tuple(value) if option.kind == STRING_SLICE else value

    raw = source.get(option.env_var)
    if raw is None or raw == "":
        return option.default
    return PARSERS[option.kind](option, raw)


def resolve_options(
    source: Mapping[str, str],
    namespace: Optional[argparse.Namespace] = None,
    options=OPTIONS,
) -> Dict[str, Any]:
    """
    Resolve every option of the table.
    Returns:
        dict: Option name to typed value.
    """
    return {option.name: resolve_option(option, source, namespace) for option in options}


def get_option(name: str, options=OPTIONS) -> Option:
    for option in options:
        if option.name == name:
            return option
    raise KeyError(name)
