"""
Builders for the argument vectors of every terraform step.
"""

from typing import List, Mapping, Optional

from drone_terraform.config import Config, FmtOptions, InitOptions, SummarizeOptions
from drone_terraform.exceptions import InvalidActionError

TERRAFORM = "terraform"
TF_SUMMARIZE = "tf-summarize"
PLAN_FILE = "plan.tfout"


def render_bool(value: bool) -> str:
    return str(value).lower()


def plan_file(data_dir: str = "") -> str:
    """Plan file written by [plan] and consumed by [apply] and [summarize]."""
    if not data_dir:
        return PLAN_FILE
    return f"{data_dir}.{PLAN_FILE}"


def var_arguments(variables: Optional[Mapping[str, str]]) -> List[str]:
    args = []
    for key in sorted(variables or {}):
        args.extend(["-var", f"{key}={variables[key]}"])
    return args


def var_file_arguments(var_files) -> List[str]:
    return [f"-var-file={var_file}" for var_file in var_files]


def lock_arguments(options: InitOptions) -> List[str]:
    args = []
    # Terraform defaults: -lock=true, -lock-timeout=0s
    if options.lock is not None:
        args.append(f"-lock={render_bool(options.lock)}")
    if options.lock_timeout:
        args.append(f"-lock-timeout={options.lock_timeout}")
    return args


def parallelism_arguments(parallelism: int) -> List[str]:
    if parallelism > 0:
        return [f"-parallelism={parallelism}"]
    return []


def version_command() -> List[str]:
    return [TERRAFORM, "version"]


def get_modules_command() -> List[str]:
    return [TERRAFORM, "get"]


def init_command(options: InitOptions) -> List[str]:
    args = [TERRAFORM, "init"]
    args.extend(f"-backend-config={value}" for value in options.backend_config)
    args.extend(lock_arguments(options))
    # Fail on prompt instead of waiting for input
    args.append("-input=false")
    return args


def validate_command() -> List[str]:
    return [TERRAFORM, "validate"]


def fmt_command(options: FmtOptions) -> List[str]:
    args = [TERRAFORM, "fmt"]
    for name in ("list", "write", "diff", "check"):
        value = getattr(options, name)
        if value is not None:
            args.append(f"-{name}={render_bool(value)}")
    return args


def plan_command(config: Config, plan_path: str, destroy: bool = False) -> List[str]:
    args = [TERRAFORM, "plan"]
    if destroy:
        args.append("-destroy")
    else:
        args.append(f"-out={plan_path}")
    for target in config.targets:
        args.extend(["--target", target])
    args.extend(var_file_arguments(config.var_files))
    args.extend(var_arguments(config.vars))
    args.extend(parallelism_arguments(config.parallelism))
    args.extend(lock_arguments(config.init_options))
    if config.disable_refresh:
        args.append("-refresh=false")
    return args


def apply_command(config: Config, plan_path: str) -> List[str]:
    args = [TERRAFORM, "apply"]
    for target in config.targets:
        args.extend(["--target", target])
    args.extend(parallelism_arguments(config.parallelism))
    args.extend(lock_arguments(config.init_options))
    if config.disable_refresh:
        args.append("-refresh=false")
    args.append(plan_path)
    return args


def destroy_command(config: Config) -> List[str]:
    args = [TERRAFORM, "destroy"]
    args.extend(f"-target={target}" for target in config.targets)
    args.extend(var_file_arguments(config.var_files))
    args.extend(var_arguments(config.vars))
    args.extend(parallelism_arguments(config.parallelism))
    args.extend(lock_arguments(config.init_options))
    args.append("-auto-approve")
    return args


def summarize_command(options: SummarizeOptions, plan_path: str) -> List[str]:
    args = [TF_SUMMARIZE]
    flags = (
        ("tree", options.tree),
        ("separate-tree", options.separate_tree),
        ("draw", options.draw),
        ("md", options.md),
        ("json", options.json),
        ("html", options.html),
    )
    args.extend(f"-{flag}" for flag, enabled in flags if enabled)
    if options.out:
        args.append(f"-out={options.out}")
    args.append(plan_path)
    return args


ACTIONS = {
    "fmt": lambda config, plan_path: fmt_command(config.fmt_options),
    "validate": lambda config, plan_path: validate_command(),
    "plan": lambda config, plan_path: plan_command(config, plan_path),
    "plan-destroy": lambda config, plan_path: plan_command(config, plan_path, destroy=True),
    "apply": apply_command,
    "destroy": lambda config, plan_path: destroy_command(config),
    "summarize": lambda config, plan_path: summarize_command(config.summarize_options, plan_path),
}


def action_command(action: str, config: Config, plan_path: str) -> List[str]:
    try:
        builder = ACTIONS[action]
    except KeyError:
        raise InvalidActionError(action, list(ACTIONS)) from None
    return builder(config, plan_path)


def build_commands(config: Config, plan_path: str) -> List[List[str]]:
    """
    Build every terraform command of the run, in execution order.
    Raises:
        InvalidActionError: An action is unknown. Raised before anything runs.
    """
    commands = [version_command()]
    if not config.skip_init:
        commands.append(init_command(config.init_options))
    commands.append(get_modules_command())
    commands.extend(action_command(action, config, plan_path) for action in config.actions)
    return commands
