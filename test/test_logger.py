import logging

from fmul_cocotb.logger import TRACE, getLogger, share_handlers
from fmul_model.random_vectors import RandomVectorGenerator


def test_trace_level_is_below_debug():
    assert TRACE < logging.DEBUG
    assert logging.getLevelName(TRACE) == "TRACE"


def test_model_logger_shares_the_run_log(tmp_path):
    log_file = tmp_path / "run.log"
    logger = getLogger(
        "fmul_cocotb", str(log_file), console=False, level=logging.DEBUG
    )
    # Sharing twice must not duplicate output
    share_handlers(logger, "fmul_model")
    share_handlers(logger, "fmul_model")

    RandomVectorGenerator(3, debug=True).next_bits()
    logging.getLogger("fmul_cocotb.harness").info("harness line")

    lines = log_file.read_text().splitlines()
    assert sum("draw 1:" in l for l in lines) == 1
    assert sum("harness line" in l for l in lines) == 1


def test_get_logger_replaces_handlers(tmp_path):
    first = getLogger("fmul_cocotb", str(tmp_path / "a.log"), console=False)
    second = getLogger("fmul_cocotb", str(tmp_path / "b.log"), console=False)
    assert first is second
    assert len(second.handlers) == 1
