"""
Human readable PASS/FAIL records for multiplier cases.
"""

import logging

from fmul_model.bitfield import (
    FRAC_BITS,
    FPClass,
    bits_to_float,
    classify,
    exp_field,
    frac_field,
    sign_bit,
    significand,
    unbiased_exponent,
)

logger = logging.getLogger(__name__)

RULE_WIDTH = 117

NOTE_VALUE_MISMATCH = (
    "NOTE: Flag checking is disabled (--check-flags not set). "
    "Failure is due to output y mismatch."
)
NOTE_FLAGS_IGNORED = (
    "NOTE: Output y matches, but flags differ (flag checking disabled)."
)


def _banner(title: str, fill: str) -> str:
    return f" {title} ".center(RULE_WIDTH, fill)


def describe(bits: int) -> str:
    """Class text of a pattern: NaN, +Inf/-Inf, or its value."""
    cls = classify(bits)
    if cls == FPClass.NAN:
        return "NaN"
    if cls == FPClass.INFINITY:
        return ("-" if sign_bit(bits) else "+") + "Inf"
    return "%+.20e" % bits_to_float(bits)


def format_fp(label: str, bits: int) -> str:
    sign = sign_bit(bits)
    return (
        "  %-8s : 0x%08x  %s"
        "  | s=0x%x e=0x%02x m=0x%06x"
        "  | sgn=%c ue=%d m=%9u / 2^%d"
        % (
            label,
            bits,
            describe(bits),
            sign,
            exp_field(bits),
            frac_field(bits),
            "-" if sign else "+",
            unbiased_exponent(bits),
            significand(bits),
            FRAC_BITS,
        )
    )


def format_flags(result) -> str:
    return "  %-8s : %s" % ("flags", result.flags_str())


class DiagnosticReporter:
    """
    Writes one framed record per reported case.

    Args:
        config: HarnessConfig, only check_flags is read
        sink: callable taking the record text; defaults to the report logger
    """

    def __init__(self, config, sink=None) -> None:
        self.config = config
        self.sink = sink if sink is not None else logger.info

    def format_case(self, status, case, observed, expected) -> str:
        lines = ["", _banner(f"{status} [{case.tag}]", "=")]
        lines.append(format_fp("a", case.a))
        lines.append(format_fp("b", case.b))

        lines.append("")
        lines.append(_banner("DUT", "-"))
        lines.append(format_fp("y", observed.result))
        lines.append(format_flags(observed))

        lines.append("")
        lines.append(_banner("REF", "-"))
        lines.append(format_fp("y", expected.result))
        lines.append(format_flags(expected))
        lines.append("=" * RULE_WIDTH)

        note = self.note(observed, expected)
        if note:
            lines.append(note)
        return "\n".join(lines)

    def note(self, observed, expected):
        if self.config.check_flags:
            return None
        value_ok = observed.result == expected.result
        if not value_ok:
            return NOTE_VALUE_MISMATCH
        if observed.flags() != expected.flags():
            return NOTE_FLAGS_IGNORED
        return None

    def report(self, status, case, observed, expected) -> None:
        self.sink(self.format_case(status, case, observed, expected))
