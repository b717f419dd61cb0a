"""
Binary32 bit-field decoding and classification.

Every predicate here works on the integer bit pattern only. The float
conversions at the bottom exist for printing and are never used by the
reference multiplier.
"""

import enum
from dataclasses import dataclass

from bitstring import BitArray

WORD_MASK = 0xFFFFFFFF
EXP_BIAS = 127
EXP_MAX = 0xFF
FRAC_BITS = 23
FRAC_MASK = (1 << FRAC_BITS) - 1
HIDDEN_BIT = 1 << FRAC_BITS
MIN_NORMAL_EXP = 1 - EXP_BIAS


class FPClass(enum.Enum):
    ZERO = "zero"
    SUBNORMAL = "subnormal"
    NORMAL = "normal"
    INFINITY = "infinity"
    NAN = "nan"


# Helpers to extract sign, exp and mantissa
def sign_bit(x: int) -> int:
    return (x >> 31) & 1


def exp_field(x: int) -> int:
    return (x >> FRAC_BITS) & EXP_MAX


def frac_field(x: int) -> int:
    return x & FRAC_MASK


def is_nan(x: int) -> bool:
    return exp_field(x) == EXP_MAX and frac_field(x) != 0


def is_inf(x: int) -> bool:
    return exp_field(x) == EXP_MAX and frac_field(x) == 0


def is_zero(x: int) -> bool:
    return exp_field(x) == 0 and frac_field(x) == 0


def is_subnormal(x: int) -> bool:
    return exp_field(x) == 0 and frac_field(x) != 0


def is_normal(x: int) -> bool:
    return 0 < exp_field(x) < EXP_MAX


def classify(x: int) -> FPClass:
    exp = exp_field(x)
    frac = frac_field(x)
    if exp == EXP_MAX:
        return FPClass.NAN if frac else FPClass.INFINITY
    if exp == 0:
        return FPClass.SUBNORMAL if frac else FPClass.ZERO
    return FPClass.NORMAL


def pack(sign: int, exp: int, frac: int) -> int:
    return ((sign & 1) << 31) | ((exp & EXP_MAX) << FRAC_BITS) | (frac & FRAC_MASK)


@dataclass(frozen=True)
class Float32Fields:
    """
    Field view of a binary32 pattern.

    Args:
        sign: 1-bit sign
        exp: 8-bit biased exponent
        frac: 23-bit fraction
    """

    sign: int
    exp: int
    frac: int

    def __post_init__(self):
        assert self.sign in (0, 1), f"Invalid sign bit: {self.sign}"
        assert 0 <= self.exp <= EXP_MAX, f"Invalid exponent field: {self.exp:#x}"
        assert 0 <= self.frac <= FRAC_MASK, f"Invalid fraction field: {self.frac:#x}"

    @property
    def fp_class(self) -> FPClass:
        return classify(self.encode())

    def encode(self) -> int:
        return pack(self.sign, self.exp, self.frac)


def decode(x: int) -> Float32Fields:
    x &= WORD_MASK
    return Float32Fields(sign=sign_bit(x), exp=exp_field(x), frac=frac_field(x))


def unbiased_exponent(x: int) -> int:
    """Exponent field 0 reads as the subnormal exponent -126."""
    exp = exp_field(x)
    return MIN_NORMAL_EXP if exp == 0 else exp - EXP_BIAS


def significand(x: int) -> int:
    """
    Integer significand over 2^23: 0.fraction when the exponent field is
    zero, 1.fraction otherwise (including inf/nan).
    """
    frac = frac_field(x)
    return frac if exp_field(x) == 0 else HIDDEN_BIT | frac


def fmt_bits(x: int) -> str:
    return f"0x{x & WORD_MASK:08x}"


def bits_to_float(x: int) -> float:
    return BitArray(uint=x & WORD_MASK, length=32).float


def float_to_bits(f: float) -> int:
    try:
        return BitArray(float=f, length=32).uint
    except (OverflowError, ValueError):
        # Out of binary32 range
        return pack(1 if f < 0 else 0, EXP_MAX, 0)
