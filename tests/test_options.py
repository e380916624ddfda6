"""Tests for the option table and its flag/environment parsing."""

import pytest

from drone_terraform.exceptions import OptionParseError
from drone_terraform.options import (
    OPTIONS,
    build_argument_parser,
    get_option,
    resolve_options,
)


@pytest.fixture
def parser():
    return build_argument_parser()


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class TestOptionTable:
    def test_every_option_has_unique_name_and_env_var(self):
        names = [option.name for option in OPTIONS]
        env_vars = [option.env_var for option in OPTIONS]
        assert len(names) == len(set(names))
        assert len(env_vars) == len(set(env_vars))

    def test_netrc_options_bind_drone_variables(self):
        assert get_option("netrc.machine").env_var == "DRONE_NETRC_MACHINE"
        assert get_option("netrc.username").env_var == "DRONE_NETRC_USERNAME"
        assert get_option("netrc.password").env_var == "DRONE_NETRC_PASSWORD"

    def test_unknown_option(self):
        with pytest.raises(KeyError):
            get_option("nope")


# ---------------------------------------------------------------------------
# Environment surface
# ---------------------------------------------------------------------------

class TestEnvironment:
    def test_defaults(self):
        values = resolve_options({})
        assert values["actions"] == ("validate", "plan", "apply")
        assert values["targets"] == ()
        assert values["var_files"] == ()
        assert values["parallelism"] == 0
        assert values["skip_init"] is False
        assert values["sensitive"] is False
        assert values["ca_cert"] == ""
        assert values["tf.version"] == ""

    def test_actions_replace_default(self):
        values = resolve_options({"PLUGIN_ACTIONS": "plan"})
        assert values["actions"] == ("plan",)

    def test_string_slice_is_split_and_trimmed(self):
        values = resolve_options({"PLUGIN_TARGETS": "module.a, aws_s3_bucket.b ,,"})
        assert values["targets"] == ("module.a", "aws_s3_bucket.b")

    def test_duplicates_are_kept(self):
        values = resolve_options({"PLUGIN_ACTIONS": "plan,plan"})
        assert values["actions"] == ("plan", "plan")

    def test_empty_value_uses_default(self):
        values = resolve_options({"PLUGIN_ACTIONS": ""})
        assert values["actions"] == ("validate", "plan", "apply")

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "t"])
    def test_bool_true(self, raw):
        assert resolve_options({"PLUGIN_SKIP_INIT": raw})["skip_init"] is True

    @pytest.mark.parametrize("raw", ["false", "False", "0", "f"])
    def test_bool_false(self, raw):
        assert resolve_options({"PLUGIN_SKIP_INIT": raw})["skip_init"] is False

    def test_invalid_bool(self):
        with pytest.raises(OptionParseError, match="PLUGIN_SENSITIVE"):
            resolve_options({"PLUGIN_SENSITIVE": "yes please"})

    def test_int(self):
        assert resolve_options({"PLUGIN_PARALLELISM": " 4 "})["parallelism"] == 4

    def test_invalid_int(self):
        with pytest.raises(OptionParseError, match="PLUGIN_PARALLELISM"):
            resolve_options({"PLUGIN_PARALLELISM": "four"})


# ---------------------------------------------------------------------------
# Command-line surface
# ---------------------------------------------------------------------------

class TestCommandLine:
    def test_unset_flags_are_absent(self, parser):
        args = parser.parse_args([])
        assert not hasattr(args, "actions")
        assert not hasattr(args, "skip_init")

    def test_flags_override_environment(self, parser):
        args = parser.parse_args(
            ["--actions", "fmt", "--actions", "plan", "--parallelism", "2", "--sensitive"]
        )
        values = resolve_options(
            {"PLUGIN_ACTIONS": "apply", "PLUGIN_PARALLELISM": "8"}, args
        )
        assert values["actions"] == ("fmt", "plan")
        assert values["parallelism"] == 2
        assert values["sensitive"] is True

    def test_dotted_flag_names(self, parser):
        args = parser.parse_args(["--tf.version", "1.5.7", "--netrc.machine", "github.com"])
        values = resolve_options({}, args)
        assert values["tf.version"] == "1.5.7"
        assert values["netrc.machine"] == "github.com"

    def test_environment_fills_missing_flags(self, parser):
        args = parser.parse_args(["--root_dir", "infra"])
        values = resolve_options({"PLUGIN_TF_DATA_DIR": "/tmp/tf"}, args)
        assert values["root_dir"] == "infra"
        assert values["tf_data_dir"] == "/tmp/tf"

    def test_invalid_int_flag_exits(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["--parallelism", "many"])
