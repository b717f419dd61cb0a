from .config_load import HarnessConfig
from .harness import (
    DIRECTED_CASES,
    DifferentialHarness,
    HarnessStatistics,
    TestCase,
    Verdict,
    judge,
)
from .report import DiagnosticReporter
