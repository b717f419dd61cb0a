"""
Bit-exact binary32 multiply reference.

Numeric model: denormal inputs are zero (DAZ), results that would be
subnormal are flushed to zero (FTZ), every NaN output is the single quiet
NaN 0x7FC00000 and rounding is always round-to-nearest-even. The whole
computation is integer arithmetic, so it does not depend on the host FPU.
"""

from typing import NamedTuple

from .bitfield import (
    EXP_BIAS,
    EXP_MAX,
    FRAC_BITS,
    FRAC_MASK,
    HIDDEN_BIT,
    MIN_NORMAL_EXP,
    exp_field,
    frac_field,
    is_inf,
    is_nan,
    is_subnormal,
    is_zero,
    pack,
    sign_bit,
)

QNAN = 0x7FC00000
POS_INF = 0x7F800000
NEG_INF = 0xFF800000

MAX_EXP = EXP_BIAS
MIN_EXP = MIN_NORMAL_EXP

# 24x24 product layout after normalisation: leading one at bit 46,
# kept bits [46:23], guard [22], round [21], sticky OR([20:0])
PRODUCT_TOP_BIT = 47
KEPT_SHIFT = 23
GUARD_BIT = 22
ROUND_BIT = 21
STICKY_MASK = (1 << ROUND_BIT) - 1
KEPT_MASK = (1 << 24) - 1
CARRY_BIT = 1 << 24


class MulResult(NamedTuple):
    """Output word and status flags of one multiply."""

    result: int
    invalid: bool = False
    overflow: bool = False
    underflow: bool = False
    inexact: bool = False

    def flags(self):
        return (self.invalid, self.overflow, self.underflow, self.inexact)

    def flags_str(self) -> str:
        return "invalid=%d overflow=%d underflow=%d inexact=%d" % tuple(
            int(f) for f in self.flags()
        )


def signed_zero(sign: int) -> int:
    return (sign & 1) << 31


def signed_inf(sign: int) -> int:
    return pack(sign, EXP_MAX, 0)


def _round_nearest_even(prod: int):
    """
    Round a normalised 47-bit product down to 24 kept bits.

    Returns (kept, carried, inexact) where carried means the increment
    rolled over into a 25th bit and the caller must bump the exponent.
    """
    kept = (prod >> KEPT_SHIFT) & KEPT_MASK
    guard = (prod >> GUARD_BIT) & 1
    rnd = (prod >> ROUND_BIT) & 1
    sticky = 1 if prod & STICKY_MASK else 0

    lsb = kept & 1
    kept += guard & (rnd | sticky | lsb)

    carried = bool(kept & CARRY_BIT)
    if carried:
        kept >>= 1
    return kept, carried, bool(guard | rnd | sticky)


def reference_mul(a: int, b: int) -> MulResult:
    """
    Multiply two binary32 patterns.

    Args:
        a: first operand bits
        b: second operand bits

    Returns:
        MulResult with the product bits and invalid/overflow/underflow/inexact
    """
    s = sign_bit(a) ^ sign_bit(b)

    # NaN dominates everything, no flags
    if is_nan(a) or is_nan(b):
        return MulResult(QNAN)

    a_eff_zero = is_zero(a) or is_subnormal(a)
    b_eff_zero = is_zero(b) or is_subnormal(b)
    a_inf = is_inf(a)
    b_inf = is_inf(b)

    if (a_inf and b_eff_zero) or (b_inf and a_eff_zero):
        return MulResult(QNAN, invalid=True)

    if a_inf or b_inf:
        return MulResult(signed_inf(s))

    if a_eff_zero or b_eff_zero:
        return MulResult(signed_zero(s))

    # Both operands normal
    sig_a = HIDDEN_BIT | frac_field(a)
    sig_b = HIDDEN_BIT | frac_field(b)
    exp_p = (exp_field(a) - EXP_BIAS) + (exp_field(b) - EXP_BIAS)

    prod = sig_a * sig_b
    if prod >> PRODUCT_TOP_BIT:
        # [2,4), renormalise into [1,2)
        prod >>= 1
        exp_p += 1

    kept, carried, inexact = _round_nearest_even(prod)
    if carried:
        exp_p += 1

    if exp_p > MAX_EXP:
        return MulResult(signed_inf(s), overflow=True, inexact=True)

    if exp_p < MIN_EXP:
        return MulResult(signed_zero(s), underflow=True, inexact=True)

    return MulResult(pack(s, exp_p + EXP_BIAS, kept & FRAC_MASK), inexact=inexact)
