from os import getenv
import logging
from pathlib import Path
from time import time

from cocotb.runner import get_runner, get_results

from .config_load import HarnessConfig

logger = logging.getLogger(__name__)

TB_MODULE = "fmul_cocotb.fmul_tb"


def verilator_build_args(trace: bool = False, extra_build_args=()):
    return [
        # Verilator linter is overly strict.
        # These errors are in later versions of verilator
        "-Wno-GENUNNAMED",
        "-Wno-WIDTHEXPAND",
        "-Wno-WIDTHTRUNC",
        # Simulation Optimisation
        "-Wno-UNOPTFLAT",
        "--assert",
        # Signal trace in dump.fst
        *(["--trace-fst", "--trace-structs"] if trace else []),
        "-O2",
        "-Wno-fatal",
        "-Wno-lint",
        "-Wno-style",
        *extra_build_args,
    ]


def fmul_runner(
    rtl_sources,
    config: HarnessConfig = HarnessConfig(),
    toplevel: str = "fmul",
    build_dir=None,
    includes=(),
    extra_build_args=(),
    skip_build: bool = False,
):
    """
    Build an HDL multiplier and run the differential testbench against it.

    Returns the number of failed cocotb tests; 0 means the DUT matched the
    reference on every case.
    """
    rtl_sources = [Path(p) for p in rtl_sources]
    for src in rtl_sources:
        assert src.exists(), f"{src} does not exist."

    if build_dir is None:
        build_dir = rtl_sources[0].parent.joinpath(f"build/{toplevel}")
    build_dir = Path(build_dir)

    start_time = time()
    sim = getenv("SIM", "verilator")
    runner = get_runner(sim)

    if not skip_build:
        runner.build(
            verilog_sources=rtl_sources,
            includes=[str(p) for p in includes],
            hdl_toplevel=toplevel,
            build_args=(
                verilator_build_args(config.trace, extra_build_args)
                if sim == "verilator"
                else list(extra_build_args)
            ),
            build_dir=build_dir,
            waves=config.trace,
        )

    try:
        runner.test(
            hdl_toplevel=toplevel,
            hdl_toplevel_lang="verilog",
            test_module=TB_MODULE,
            seed=config.seed & 0xFFFFFFFF,
            extra_env=config.to_env(),
            results_xml="results.xml",
            build_dir=build_dir,
            waves=config.trace,
        )
        num_tests, fail = get_results(build_dir.joinpath("results.xml"))
    except Exception as e:
        logger.error(f"Error occured while running {sim} simulation: {e}")
        num_tests = fail = 1

    logger.info("# ---------------------------------------")
    logger.info("# Test Results")
    logger.info("# ---------------------------------------")
    logger.info("# - Time elapsed: %.2f seconds" % (time() - start_time))
    logger.info("# - Passed: %d" % (num_tests - fail))
    logger.info("# - Failed: %d" % (fail))
    logger.info("# - Total : %d" % (num_tests))
    logger.info("# ---------------------------------------")
    return fail
