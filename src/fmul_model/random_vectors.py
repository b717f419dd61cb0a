#!/usr/bin/env python3

# Random binary32 operand source. Uniform 32-bit sampling almost never hits
# zeros, infinities, NaNs or the exponent extremes, so a fixed share of the
# draws is steered onto those regions.
import logging
import random

DEFAULT_SEED = 0xC001D00D

# Sign and fraction bits of a random draw, exponent field cleared
SIGN_FRAC_MASK = 0x807FFFFF

logger = logging.getLogger(__name__)


# (name, weight, pattern) where pattern maps the uniform draw r to the
# emitted operand
SPECIAL_WEIGHTS = (
    ("pos_zero", 1, lambda r: 0x00000000),
    ("neg_zero", 1, lambda r: 0x80000000),
    ("pos_inf", 1, lambda r: 0x7F800000),
    ("neg_inf", 1, lambda r: 0xFF800000),
    ("nan", 1, lambda r: 0x7FC00001),
    ("exp_zero", 1, lambda r: r & SIGN_FRAC_MASK),
    ("exp_min", 1, lambda r: (r & SIGN_FRAC_MASK) | (1 << 23)),
    ("exp_max", 1, lambda r: (r & SIGN_FRAC_MASK) | (254 << 23)),
    ("uniform", 4, lambda r: r),
)


def weighted_choice(rng: random.Random, table):
    """Pick one row of a (name, weight, ...) table in proportion to weight."""
    assert len(table) > 0, "Empty choice table"
    weights = [row[1] for row in table]
    assert all(w >= 0 for w in weights) and sum(weights) > 0, (
        "Invalid weights: {}".format(weights)
    )
    return rng.choices(table, weights=weights, k=1)[0]


class RandomVectorGenerator:
    """
    Seeded source of binary32 operand patterns.

    Two generators built with the same seed and table yield the same
    sequence.
    """

    def __init__(self, seed=DEFAULT_SEED, weights=SPECIAL_WEIGHTS, debug=False):
        self.seed = seed
        self.weights = tuple(weights)
        self.rng = random.Random(seed)
        self.draws = 0
        self.logger = logger
        self.debug = debug

    def next_bits(self) -> int:
        r = self.rng.getrandbits(32)
        name, _, pattern = weighted_choice(self.rng, self.weights)
        bits = pattern(r) & 0xFFFFFFFF
        self.draws += 1
        if self.debug:
            self.logger.debug(
                "draw {}: {} -> 0x{:08x}".format(self.draws, name, bits)
            )
        return bits

    def next_pair(self):
        a = self.next_bits()
        b = self.next_bits()
        return a, b

    def __iter__(self):
        return self

    def __next__(self):
        return self.next_pair()
