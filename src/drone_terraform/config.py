#!/usr/bin/env python
"""
Use to load the plugin configuration from a configuration source (environment variables and flags).

Expected operations:
    1. If [env_file] is provided its key/value pairs are merged beneath the configuration source.
    2. [vars] and [secrets] are decoded as JSON objects of strings. Failure aborts the run.
    3. [init_options], [fmt_options] and [summarize_options] are decoded and validated against
       their schema. Failure is logged as a warning and the options fall back to their defaults.
    4. Scalar and list options are read from the option table.
    5. The immutable plugin aggregate is assembled for the executor.

"""

import json
import re
from dataclasses import dataclass, field
from json import JSONDecodeError
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import cfgv
from dotenv import dotenv_values

from drone_terraform.exceptions import ConfigDecodeError, OptionDecodeError
from drone_terraform.options import OPTIONS, get_option, resolve_option, resolve_options
from utilities.logging import debug, warning

EMPTY_MAP = MappingProxyType({})

# Same reference syntax python-dotenv interpolates
POSIX_VARIABLE = re.compile(r"\$\{(?P<name>[^}:]*)(?::-(?P<default>[^}]*))?\}")


# [init_options]
INIT_OPTIONS_SCHEMA = cfgv.Map(
    "InitOptions",
    None,
    cfgv.Optional("backend-config", cfgv.check_array(cfgv.check_string), []),
    cfgv.OptionalNoDefault("lock", cfgv.check_bool),
    cfgv.Optional("lock-timeout", cfgv.check_string, ""),
)

# [fmt_options]
FMT_OPTIONS_SCHEMA = cfgv.Map(
    "FmtOptions",
    None,
    cfgv.OptionalNoDefault("list", cfgv.check_bool),
    cfgv.OptionalNoDefault("write", cfgv.check_bool),
    cfgv.OptionalNoDefault("diff", cfgv.check_bool),
    cfgv.OptionalNoDefault("check", cfgv.check_bool),
)

# [summarize_options]
SUMMARIZE_OPTIONS_SCHEMA = cfgv.Map(
    "SummarizeOptions",
    None,
    cfgv.Optional("tree", cfgv.check_bool, False),
    cfgv.Optional("separate-tree", cfgv.check_bool, False),
    cfgv.Optional("draw", cfgv.check_bool, False),
    cfgv.Optional("md", cfgv.check_bool, False),
    cfgv.Optional("json", cfgv.check_bool, False),
    cfgv.Optional("html", cfgv.check_bool, False),
    cfgv.Optional("out", cfgv.check_string, ""),
)


@dataclass(frozen=True)
class InitOptions:
    backend_config: Tuple[str, ...] = ()
    lock: Optional[bool] = None
    lock_timeout: str = ""

    @classmethod
    def from_dict(cls, value: dict) -> "InitOptions":
        return cls(
            backend_config=tuple(value["backend-config"]),
            lock=value.get("lock"),
            lock_timeout=value["lock-timeout"],
        )


@dataclass(frozen=True)
class FmtOptions:
    list: Optional[bool] = None
    write: Optional[bool] = None
    diff: Optional[bool] = None
    check: Optional[bool] = None

    @classmethod
    def from_dict(cls, value: dict) -> "FmtOptions":
        return cls(
            list=value.get("list"),
            write=value.get("write"),
            diff=value.get("diff"),
            check=value.get("check"),
        )


@dataclass(frozen=True)
class SummarizeOptions:
    tree: bool = False
    separate_tree: bool = False
    draw: bool = False
    md: bool = False
    json: bool = False
    html: bool = False
    out: str = ""

    @classmethod
    def from_dict(cls, value: dict) -> "SummarizeOptions":
        return cls(
            tree=value["tree"],
            separate_tree=value["separate-tree"],
            draw=value["draw"],
            md=value["md"],
            json=value["json"],
            html=value["html"],
            out=value["out"],
        )


@dataclass(frozen=True)
class Config:
    actions: Tuple[str, ...] = ("validate", "plan", "apply")
    vars: Optional[Mapping[str, str]] = None
    secrets: Optional[Mapping[str, str]] = None
    init_options: InitOptions = field(default_factory=InitOptions)
    fmt_options: FmtOptions = field(default_factory=FmtOptions)
    summarize_options: SummarizeOptions = field(default_factory=SummarizeOptions)
    cacert: str = ""
    sensitive: bool = False
    role_arn: str = ""
    root_dir: str = ""
    skip_init: bool = False
    skip_cleanup: bool = False
    parallelism: int = 0
    targets: Tuple[str, ...] = ()
    var_files: Tuple[str, ...] = ()
    terraform_data_dir: str = ""
    disable_refresh: bool = False


@dataclass(frozen=True)
class Netrc:
    machine: str = ""
    login: str = ""
    password: str = ""


@dataclass(frozen=True)
class Terraform:
    version: str = ""


@dataclass(frozen=True)
class Plugin:
    config: Config
    netrc: Netrc = field(default_factory=Netrc)
    terraform: Terraform = field(default_factory=Terraform)
    environ: Mapping[str, str] = field(default_factory=lambda: EMPTY_MAP)


def decode_string_map(option: str, raw: str) -> Optional[Mapping[str, str]]:
    """
    Decode a JSON object of strings.
    Returns:
        MappingProxyType: Read-only mapping, or None when no value was provided.
    Raises:
        ConfigDecodeError: Value is not a JSON object of strings.
    """
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except JSONDecodeError as exception:
        raise ConfigDecodeError(option, str(exception)) from exception

    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigDecodeError(option, f"expected an object but got {type(value).__name__}")
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigDecodeError(
                option, f"value of [{key}] is {type(item).__name__}, expected string"
            )
    return MappingProxyType(dict(value))


def validate_options(raw: str, schema: cfgv.Map) -> dict:
    try:
        value = cfgv.validate(json.loads(raw), schema)
    except (JSONDecodeError, cfgv.ValidationError) as exception:
        raise OptionDecodeError(str(exception)) from exception
    return cfgv.apply_defaults(value, schema)


def decode_options(option: str, raw: str, schema: cfgv.Map, record_type):
    """
    Decode a JSON options object against its schema.
    Malformed values never abort the run: a warning is logged and the defaults are returned.
    This is unlike [vars] and [secrets], where a malformed value is fatal.
    """
    if not raw:
        return record_type()
    try:
        value = validate_options(raw, schema)
    except OptionDecodeError as exception:
        warning(f"Ignoring malformed [{option}], defaults will be used: {exception}")
        return record_type()
    return record_type.from_dict(value)


def expand_variables(value: str, variables: Mapping[str, str]) -> str:
    """Expand ${NAME} and ${NAME:-default} references, unset names become the default or ""."""
    return POSIX_VARIABLE.sub(
        lambda match: variables.get(match.group("name")) or match.group("default") or "",
        value,
    )


def load_env_file(path: str, source: Mapping[str, str]) -> Mapping[str, str]:
    """
    Merge variables from a dotenv file beneath the configuration source.
    Existing values are never overridden. An unreadable file is ignored.
    References are expanded against earlier file values and the configuration source only.
    """
    try:
        values = dotenv_values(path, interpolate=False)
    except (OSError, UnicodeDecodeError) as exception:
        debug(f"Unable to load env file [{path}]: {exception}")
        return source

    merged = {}
    for key, value in values.items():
        if value is None:
            continue
        merged[key] = expand_variables(value, {**merged, **source})
    merged.update(source)
    debug(f"Loaded {len(values)} variable(s) from env file [{path}].")
    return merged


def load_plugin(source: Mapping[str, str], namespace=None) -> Plugin:
    """
    Build the plugin aggregate from a configuration source and parsed command-line flags.
    Returns:
        Plugin: Immutable configuration handed to the executor.
    """
    env_file = resolve_option(get_option("env_file"), source, namespace)
    if env_file:
        source = load_env_file(env_file, source)

    values = resolve_options(source, namespace, OPTIONS)

    variables = decode_string_map("vars", values["vars"])
    secrets = decode_string_map("secrets", values["secrets"])

    init_options = decode_options(
        "init_options", values["init_options"], INIT_OPTIONS_SCHEMA, InitOptions
    )
    fmt_options = decode_options(
        "fmt_options", values["fmt_options"], FMT_OPTIONS_SCHEMA, FmtOptions
    )
    summarize_options = decode_options(
        "summarize_options",
        values["summarize_options"],
        SUMMARIZE_OPTIONS_SCHEMA,
        SummarizeOptions,
    )

    return Plugin(
        config=Config(
            actions=values["actions"],
            vars=variables,
            secrets=secrets,
            init_options=init_options,
            fmt_options=fmt_options,
            summarize_options=summarize_options,
            cacert=values["ca_cert"],
            sensitive=values["sensitive"],
            role_arn=values["role_arn_to_assume"],
            root_dir=values["root_dir"],
            skip_init=values["skip_init"],
            skip_cleanup=values["skip_cleanup"],
            parallelism=values["parallelism"],
            targets=values["targets"],
            var_files=values["var_files"],
            terraform_data_dir=values["tf_data_dir"],
            disable_refresh=values["disable_refresh"],
        ),
        netrc=Netrc(
            machine=values["netrc.machine"],
            login=values["netrc.username"],
            password=values["netrc.password"],
        ),
        terraform=Terraform(version=values["tf.version"]),
        environ=MappingProxyType(dict(source)),
    )
