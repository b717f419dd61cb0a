from argparse import Namespace
from pathlib import Path

import pytest

from fmul_cocotb.cli import RUN_OPTIONS, build_parser
from fmul_cocotb.config_load import (
    HarnessConfig,
    load_config,
    post_parse_load_config,
    save_config,
)


def test_defaults():
    config = HarnessConfig()
    assert config.num_tests == 200000
    assert not config.print_passes
    assert not config.trace
    assert not config.check_flags
    assert config.seed == 0xC001D00D
    assert config.settle_steps == 2


def test_config_is_immutable():
    config = HarnessConfig()
    with pytest.raises(Exception):
        config.num_tests = 1
    assert config.num_tests == 200000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_tests": -1},
        {"seed": -1},
        {"seed": 2**64},
        {"settle_steps": 0},
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(AssertionError):
        HarnessConfig(**kwargs)


def test_env_round_trip():
    config = HarnessConfig(num_tests=17, check_flags=True, seed=0xDEADBEEF)
    env = config.to_env()
    assert env["FMUL_NUM_TESTS"] == "17"
    assert env["FMUL_CHECK_FLAGS"] == "1"
    assert HarnessConfig.from_env(env) == config


def test_from_env_ignores_missing_keys():
    assert HarnessConfig.from_env({"FMUL_PRINT_PASSES": "1"}) == HarnessConfig(
        print_passes=True
    )


def test_from_dict_drops_unknown_and_none():
    config = HarnessConfig.from_dict({"num_tests": 5, "rtl": None, "seed": None})
    assert config == HarnessConfig(num_tests=5)


def test_save_and_load_toml(tmp_path):
    path = tmp_path / "fmul.toml"
    save_config({"num_tests": 10, "rtl": None, "check_flags": True}, path)
    assert load_config(path) == {"num_tests": 10, "rtl": None, "check_flags": True}


def _args(**kwargs):
    base = {"num_tests": 200000, "check_flags": False, "seed": 1, "config": None}
    base.update(kwargs)
    return Namespace(**base)


DEFAULTS = {"num_tests": 200000, "check_flags": False, "seed": 1}


def test_post_parse_precedence(tmp_path):
    path = tmp_path / "run.toml"
    save_config({"num_tests": 10, "check_flags": True, "seed": 7}, path)
    printed = []
    # seed given on the command line wins over the file
    args = post_parse_load_config(
        _args(config=str(path), seed=99), DEFAULTS, printer=printed.append
    )
    assert args.num_tests == 10
    assert args.check_flags is True
    assert args.seed == 99
    assert "Config. File" in printed[0]


def test_post_parse_without_file():
    printed = []
    args = post_parse_load_config(_args(num_tests=3), DEFAULTS, printer=printed.append)
    assert args.num_tests == 3
    assert "Config. File" not in printed[0]
    assert "Manual Override" in printed[0]


def test_post_parse_rejects_non_toml():
    with pytest.raises(ValueError):
        post_parse_load_config(_args(config="run.yaml"), DEFAULTS)


def test_shipped_config_matches_cli_defaults():
    shipped = load_config(Path(__file__).parents[1] / "configs" / "fmul.toml")
    parser = build_parser()
    defaults = {
        k: v for k, v in vars(parser.parse_args([])).items() if k not in RUN_OPTIONS
    }
    assert shipped == defaults
    assert HarnessConfig.from_dict(shipped) == HarnessConfig()
