import os
from dataclasses import dataclass, asdict, fields

import toml
from tabulate import tabulate

from fmul_model.random_vectors import DEFAULT_SEED

ENV_PREFIX = "FMUL_"


@dataclass(frozen=True)
class HarnessConfig:
    """
    Run configuration of the differential harness. Built once and handed to
    the harness and the reporter.

    Args:
        num_tests: Number of random cases after the directed ones
        print_passes: Also report passing cases
        trace: Record every evaluation step (and dump waves in simulation)
        check_flags: Fail on invalid/overflow/underflow/inexact mismatches
        seed: Seed of the random vector generator
        settle_steps: Evaluation steps between driving and sampling
        drain_steps: Evaluation steps after sampling
    """

    num_tests: int = 200000
    print_passes: bool = False
    trace: bool = False
    check_flags: bool = False
    seed: int = DEFAULT_SEED
    settle_steps: int = 2
    drain_steps: int = 2

    def __post_init__(self):
        assert self.num_tests >= 0, f"Invalid test count: {self.num_tests}"
        assert 0 <= self.seed < 2**64, f"Seed out of range: {self.seed}"
        assert self.settle_steps >= 1, (
            f"Need at least one settle step, got {self.settle_steps}"
        )
        assert self.drain_steps >= 0, f"Invalid drain steps: {self.drain_steps}"

    def to_env(self) -> dict:
        """Serialise into FMUL_* variables for a simulator subprocess."""
        return {
            ENV_PREFIX + k.upper(): str(int(v)) for k, v in asdict(self).items()
        }

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        kwargs = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            value = int(raw, 0)
            kwargs[f.name] = bool(value) if f.type in (bool, "bool") else value
        return cls(**kwargs)

    @classmethod
    def from_dict(cls, d):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known and v is not None})


def convert_str_na_to_none(d):
    """
    Since toml does not support None, we use "NA" to represent None.
    """
    if isinstance(d, dict):
        for k, v in d.items():
            d[k] = convert_str_na_to_none(v)
    elif isinstance(d, list):
        d = [convert_str_na_to_none(v) for v in d]
    elif isinstance(d, tuple):
        d = tuple(convert_str_na_to_none(v) for v in d)
    else:
        if d == "NA":
            return None
        else:
            return d
    return d


def convert_none_to_str_na(d):
    """
    Since toml does not support None, we use "NA" to represent None.
    Otherwise the none-value key will be missing in the toml file.
    """
    if isinstance(d, dict):
        for k, v in d.items():
            d[k] = convert_none_to_str_na(v)
    elif isinstance(d, list):
        d = [convert_none_to_str_na(v) for v in d]
    elif isinstance(d, tuple):
        d = tuple(convert_none_to_str_na(v) for v in d)
    else:
        if d is None:
            return "NA"
        else:
            return d
    return d


def load_config(config_path):
    """Load from a toml config file and convert "NA" to None."""
    with open(config_path, "r") as f:
        config = toml.load(f)
    config = convert_str_na_to_none(config)
    return config


def save_config(config, config_path):
    """Convert None to "NA" and save to a toml config file."""
    config = convert_none_to_str_na(dict(config))
    with open(config_path, "w") as f:
        toml.dump(config, f)


def post_parse_load_config(args, defaults, printer=print):
    """
    Merge arguments from a toml configuration file into parsed CLI arguments.
    Precedence is default < configuration < manual override, and the merged
    values are printed as a table.
    """
    if args.config and not args.config.endswith(".toml"):
        raise ValueError(f"expected .toml configuration file, got {args.config}")

    headers = ["Name", "Default", "Config. File", "Manual Override", "Effective"]
    table = []

    config = load_config(args.config) if args.config else None
    for k in list(vars(args).keys()):
        if k not in defaults or k == "config":
            continue

        if config and k in config.keys():
            # Only take the file value when the CLI left the default alone
            v = config[k]
            if getattr(args, k) == defaults[k]:
                setattr(args, k, v)
                table.append([k, defaults[k], v, "", v])
            else:
                table.append([k, defaults[k], v, getattr(args, k), getattr(args, k)])
        else:
            if getattr(args, k) == defaults[k]:
                table.append([k, defaults[k], "", "", defaults[k]])
            else:
                table.append([k, defaults[k], "", getattr(args, k), getattr(args, k)])

    if not config:
        headers.remove("Config. File")
        table = [
            [k, default, override, effective]
            for k, default, _, override, effective in table
        ]

    table = [["None" if item is None else item for item in row] for row in table]

    printer(
        tabulate(
            table,
            headers=headers,
            colalign=["left"] + ["center"] * (len(headers) - 1),
            tablefmt="pretty",
            disable_numparse=True,
        )
    )
    return args
