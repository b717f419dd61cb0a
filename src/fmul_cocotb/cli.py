#! /usr/bin/env python3
# ---------------------------------------
# Runs the binary32 multiplier differential test
# ---------------------------------------
from argparse import ArgumentParser
import logging
import sys

from fmul_model.device import NativeFloatDevice, ReferenceDevice
from fmul_model.random_vectors import DEFAULT_SEED

from .config_load import HarnessConfig, post_parse_load_config, save_config
from .harness import DifferentialHarness
from .logger import TRACE, getLogger, share_handlers

DEVICES = {
    "reference": ReferenceDevice,
    "native": NativeFloatDevice,
}

LOGGERS = ("fmul_cocotb", "fmul_model")

# Options that control the run itself rather than the configuration
RUN_OPTIONS = ("config", "save_config", "log_file", "debug")

USAGE = """Usage:
fmul-verify --n 200000
fmul-verify --n 50 --print-ok --check-flags --seed 12345
fmul-verify --rtl rtl/fmul.sv --n 200000 --trace --check-flags"""


def build_parser():
    parser = ArgumentParser(usage=USAGE)
    parser.add_argument(
        "--n",
        type=int,
        default=200000,
        dest="num_tests",
        help="Number of random tests, Default=200000",
    )
    parser.add_argument(
        "--print-ok",
        action="store_true",
        dest="print_passes",
        default=False,
        help="Print PASS cases as well as FAIL cases, Default=False",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        dest="trace",
        default=False,
        help="Trace every evaluation step (FST waves for --rtl), Default=False",
    )
    parser.add_argument(
        "--check-flags",
        action="store_true",
        dest="check_flags",
        default=False,
        help="Check invalid/overflow/underflow/inexact outputs, Default=False",
    )
    parser.add_argument(
        "--seed",
        type=lambda s: int(s, 0),
        default=DEFAULT_SEED,
        dest="seed",
        help=f"RNG seed for reproducible runs, Default={DEFAULT_SEED:#x}",
    )
    parser.add_argument(
        "--device",
        choices=sorted(DEVICES),
        default="reference",
        dest="device",
        help="In-process device under test, Default=reference",
    )
    parser.add_argument(
        "--rtl",
        nargs="+",
        default=None,
        dest="rtl",
        help="HDL sources to simulate through cocotb instead of a model",
    )
    parser.add_argument(
        "--toplevel",
        default="fmul",
        dest="toplevel",
        help="HDL top module, Default=fmul",
    )
    parser.add_argument(
        "--config",
        default=None,
        dest="config",
        help="TOML file with defaults for the options above",
    )
    parser.add_argument(
        "--save-config",
        default=None,
        dest="save_config",
        help="Write the effective configuration to this TOML file",
    )
    parser.add_argument(
        "--log-file",
        default="",
        dest="log_file",
        help="Also write the log to this file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        dest="debug",
        default=False,
        help="Run in debug mode, Default=False",
    )
    return parser


def config_from_args(args) -> HarnessConfig:
    return HarnessConfig.from_dict(vars(args))


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    defaults = {
        k: parser.get_default(k)
        for k in vars(args)
        if k not in RUN_OPTIONS
    }

    level = logging.DEBUG if args.debug else logging.INFO
    logger = getLogger(LOGGERS[0], args.log_file, level=level)
    share_handlers(logger, *LOGGERS[1:])

    try:
        args = post_parse_load_config(args, defaults, printer=logger.info)
        config = config_from_args(args)
    except (ValueError, AssertionError) as e:
        parser.error(str(e))

    if args.save_config:
        save_config({k: getattr(args, k) for k in defaults}, args.save_config)
        logger.info(f"Saved configuration to {args.save_config}")

    if config.trace:
        for name in LOGGERS:
            logging.getLogger(name).setLevel(TRACE)

    if args.rtl:
        # Simulation only
        from .runner import fmul_runner

        fail = fmul_runner(args.rtl, config=config, toplevel=args.toplevel)
        return 0 if fail == 0 else 1

    device = DEVICES[args.device]()
    harness = DifferentialHarness(device, config)
    return 0 if harness.run() else 1


if __name__ == "__main__":
    sys.exit(main())
