"""
Differential harness for binary32 multipliers.

Every case drives a device under test and the bit-exact reference with the
same operands and compares the two. A fixed list of directed cases runs to
completion first, then randomised cases run until the requested count or
the first failure, whichever comes first.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from tabulate import tabulate

from fmul_model.bitfield import fmt_bits
from fmul_model.random_vectors import RandomVectorGenerator
from fmul_model.reference import MulResult, reference_mul

from .logger import TRACE
from .report import DiagnosticReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestCase:
    __test__ = False  # so pytest doesn't confuse this with a test

    a: int
    b: int
    tag: str
    verbose_on_fail: bool = True


DIRECTED_CASES = (
    TestCase(0x7F800000, 0x00000000, "Inf*0"),
    TestCase(0x7FC00001, 0x3F800000, "NaN*1"),
    TestCase(0x00000001, 0x3F800000, "subnormal input DAZ"),
    TestCase(0x00800000, 0x3F000000, "min_norm*0.5 => FTZ"),
    TestCase(0x7F7FFFFF, 0x40000000, "max_finite*2 => overflow"),
)

RANDOM_TAG = "rand"
RERUN_TAG = "rand (verbose)"


@dataclass
class HarnessStatistics:
    tests_run: int = 0
    failures: int = 0

    def record(self, passed: bool) -> None:
        self.tests_run += 1
        if not passed:
            self.failures += 1

    @property
    def success(self) -> bool:
        return self.failures == 0


class Verdict(NamedTuple):
    value_ok: bool
    flags_ok: bool
    passed: bool


def judge(observed: MulResult, expected: MulResult, check_flags: bool) -> Verdict:
    """
    Output bits must always match; flags only count when check_flags is set.
    flags_ok is reported either way.
    """
    value_ok = observed.result == expected.result
    flags_ok = observed.flags() == expected.flags()
    passed = value_ok and (flags_ok or not check_flags)
    return Verdict(value_ok, flags_ok, passed)


def stop_on_first_failure(passed: bool) -> bool:
    return not passed


def should_report(case: TestCase, passed: bool, print_passes: bool) -> bool:
    return (not passed and case.verbose_on_fail) or (passed and print_passes)


def random_cases(seed, count):
    """The first `count` random cases for `seed`, in harness order."""
    gen = RandomVectorGenerator(seed)
    for _ in range(count):
        a, b = gen.next_pair()
        yield TestCase(a, b, RANDOM_TAG, verbose_on_fail=False)


def rerun_case(case: TestCase) -> TestCase:
    return TestCase(case.a, case.b, RERUN_TAG, verbose_on_fail=True)


class DifferentialHarness:
    """
    Drives a Device (see fmul_model.device) against reference_mul.

    Args:
        device: device under test, obeying drive/evaluate/read
        config: HarnessConfig
        reporter: DiagnosticReporter, one is built from config if omitted
    """

    def __init__(self, device, config, reporter=None) -> None:
        self.device = device
        self.config = config
        self.reporter = (
            reporter if reporter is not None else DiagnosticReporter(config)
        )
        self.statistics = HarnessStatistics()
        self.last_failure = None

        # device is None when observations come from outside, e.g. a cocotb DUT
        if config.trace and device is not None and device.trace_hook is None:
            device.trace_hook = self._trace_step

    def _trace_step(self, step, a, b, out):
        logger.log(
            TRACE,
            "step=%d a=%s b=%s y=%s %s",
            step,
            fmt_bits(a),
            fmt_bits(b),
            fmt_bits(out.result),
            out.flags_str(),
        )

    def observe(self, case: TestCase) -> MulResult:
        self.device.drive(case.a, case.b)
        for _ in range(self.config.settle_steps):
            self.device.evaluate()
        observed = self.device.read()
        return observed

    def drain(self) -> None:
        for _ in range(self.config.drain_steps):
            self.device.evaluate()

    def check(self, case: TestCase, observed: MulResult, record=True) -> Verdict:
        """Judge one observation, update statistics and report if asked to."""
        expected = reference_mul(case.a, case.b)
        verdict = judge(observed, expected, self.config.check_flags)

        if record:
            self.statistics.record(verdict.passed)
        if not verdict.passed:
            self.last_failure = case
            logger.debug(
                "FAIL [%s] a=%s b=%s y=%s expected %s",
                case.tag,
                fmt_bits(case.a),
                fmt_bits(case.b),
                fmt_bits(observed.result),
                fmt_bits(expected.result),
            )

        if should_report(case, verdict.passed, self.config.print_passes):
            self.reporter.report(
                "PASS" if verdict.passed else "FAIL", case, observed, expected
            )
        return verdict

    def run_one(self, case: TestCase, record=True) -> bool:
        observed = self.observe(case)
        verdict = self.check(case, observed, record=record)
        self.drain()
        return verdict.passed

    # A schedule is a generator of (case, record) pairs. The driver runs each
    # case and sends back whether it passed; the generator's return value is
    # the outcome of the phase.
    def directed_schedule(self, cases=DIRECTED_CASES):
        """Every directed case regardless of outcome; returns failures."""
        failures = 0
        for case in cases:
            passed = yield case, True
            if not passed:
                failures += 1
        logger.info("Directed cases: %d run, %d failed", len(cases), failures)
        return failures

    def random_schedule(self, count=None):
        """
        Random phase. Stops at the first failure after re-running that case
        verbosely; the re-run is not counted.
        """
        count = self.config.num_tests if count is None else count
        done = 0
        for case in random_cases(self.config.seed, count):
            passed = yield case, True
            done += 1
            if stop_on_first_failure(passed):
                yield rerun_case(case), False
                logger.error(
                    "Random case %d of %d failed (seed=%#x), stopping",
                    done,
                    count,
                    self.config.seed,
                )
                return False
        logger.info("Random cases: %d run, seed=%#x", done, self.config.seed)
        return True

    def drive(self, schedule):
        try:
            case, record = next(schedule)
            while True:
                passed = self.run_one(case, record=record)
                case, record = schedule.send(passed)
        except StopIteration as outcome:
            return outcome.value

    def run_directed(self, cases=DIRECTED_CASES) -> int:
        return self.drive(self.directed_schedule(cases))

    def run_random(self, count=None) -> bool:
        return self.drive(self.random_schedule(count))

    def run(self) -> bool:
        self.run_directed()
        self.run_random()
        self.summary()
        return self.statistics.success

    def summary(self) -> None:
        table = [
            ["Tests run", self.statistics.tests_run],
            ["Failures", self.statistics.failures],
            [
                "Flag check",
                "ENABLED (--check-flags)" if self.config.check_flags else "DISABLED",
            ],
        ]
        text = "\n" + tabulate(table, tablefmt="pretty", colalign=["left", "right"])
        if self.statistics.success:
            logger.info(text)
        else:
            logger.error(text)
