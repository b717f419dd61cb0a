#!/usr/bin/env python3

# Differential testbench for a binary32 multiplier. Expected ports:
#   a[31:0], b[31:0] -> y[31:0], invalid, overflow, underflow, inexact
# Optional clk/rst are used when present. The run configuration arrives
# through FMUL_* environment variables, see HarnessConfig.to_env.
import logging

import cocotb

from fmul_model.reference import MulResult

from .config_load import HarnessConfig
from .harness import DifferentialHarness
from .testbench import Testbench


class FmulTB(Testbench):
    def __init__(self, dut, config: HarnessConfig) -> None:
        clk = getattr(dut, "clk", None)
        rst = getattr(dut, "rst", None)
        super().__init__(dut, clk, rst)
        self.log.setLevel(logging.INFO)

        self.config = config
        # Observations come from the simulator, so no in-process device
        self.harness = DifferentialHarness(None, config)

    def sample(self) -> MulResult:
        return MulResult(
            int(self.dut.y.value),
            bool(self.dut.invalid.value),
            bool(self.dut.overflow.value),
            bool(self.dut.underflow.value),
            bool(self.dut.inexact.value),
        )

    async def observe(self, case) -> MulResult:
        self.dut.a.value = case.a
        self.dut.b.value = case.b
        await self.step(self.config.settle_steps)
        return self.sample()

    async def run_one(self, case, record=True) -> bool:
        observed = await self.observe(case)
        verdict = self.harness.check(case, observed, record=record)
        await self.step(self.config.drain_steps)
        return verdict.passed

    async def drive(self, schedule):
        """Async counterpart of DifferentialHarness.drive."""
        try:
            case, record = next(schedule)
            while True:
                passed = await self.run_one(case, record=record)
                case, record = schedule.send(passed)
        except StopIteration as outcome:
            return outcome.value

    async def run_test(self):
        if self.rst is not None and self.clk is not None:
            await self.reset()

        await self.drive(self.harness.directed_schedule())
        if not await self.drive(self.harness.random_schedule()):
            self.log.error(f"Random case failed, seed={self.config.seed:#x}")

        self.harness.summary()
        return self.harness.statistics


@cocotb.test()
async def fmul_differential_test(dut):
    """Directed cases then fail-fast random cases against the reference"""
    tb = FmulTB(dut, HarnessConfig.from_env())
    stats = await tb.run_test()
    assert stats.success, "{} of {} cases failed".format(
        stats.failures, stats.tests_run
    )
