import random
from collections import Counter

import pytest

from fmul_model.bitfield import exp_field
from fmul_model.random_vectors import (
    DEFAULT_SEED,
    SPECIAL_WEIGHTS,
    RandomVectorGenerator,
    weighted_choice,
)


def test_default_seed():
    assert DEFAULT_SEED == 0xC001D00D
    assert RandomVectorGenerator().seed == DEFAULT_SEED


def test_same_seed_same_sequence():
    g1 = RandomVectorGenerator(42)
    g2 = RandomVectorGenerator(42)
    assert [g1.next_pair() for _ in range(500)] == [g2.next_pair() for _ in range(500)]


def test_different_seed_different_sequence():
    g1 = RandomVectorGenerator(1)
    g2 = RandomVectorGenerator(2)
    assert [g1.next_bits() for _ in range(100)] != [g2.next_bits() for _ in range(100)]


def test_iterates_pairs():
    gen = RandomVectorGenerator(5)
    a, b = next(gen)
    assert 0 <= a <= 0xFFFFFFFF and 0 <= b <= 0xFFFFFFFF
    assert gen.draws == 2


def test_weight_table_matches_selector():
    # 8 special slots of weight 1 and the uniform draw takes the other 4
    weights = {name: w for name, w, _ in SPECIAL_WEIGHTS}
    assert sum(weights.values()) == 12
    assert weights["uniform"] == 4


@pytest.mark.parametrize(
    "name, r, expected",
    [
        ("pos_zero", 0xFFFFFFFF, 0x00000000),
        ("neg_zero", 0xFFFFFFFF, 0x80000000),
        ("pos_inf", 0x12345678, 0x7F800000),
        ("neg_inf", 0x12345678, 0xFF800000),
        ("nan", 0x12345678, 0x7FC00001),
        ("exp_zero", 0xFFFFFFFF, 0x807FFFFF),
        ("exp_min", 0x7F800000, 0x00800000),
        ("exp_max", 0x80000001, 0xFF000001),
        ("uniform", 0xDEADBEEF, 0xDEADBEEF),
    ],
)
def test_patterns(name, r, expected):
    table = {row[0]: row[2] for row in SPECIAL_WEIGHTS}
    assert table[name](r) == expected


def test_weighted_choice_skips_zero_weight():
    rng = random.Random(0)
    table = (("never", 0, None), ("always", 3, None))
    assert all(weighted_choice(rng, table)[0] == "always" for _ in range(200))


def test_weighted_choice_rejects_bad_tables():
    rng = random.Random(0)
    with pytest.raises(AssertionError):
        weighted_choice(rng, ())
    with pytest.raises(AssertionError):
        weighted_choice(rng, (("a", 0, None),))


def test_custom_weights_only_emit_their_patterns():
    gen = RandomVectorGenerator(3, weights=(("pos_inf", 1, lambda r: 0x7F800000),))
    assert {gen.next_bits() for _ in range(50)} == {0x7F800000}


def test_biased_towards_special_regions():
    gen = RandomVectorGenerator(DEFAULT_SEED)
    n = 12000
    draws = [gen.next_bits() for _ in range(n)]
    counts = Counter(draws)
    exps = Counter(exp_field(x) for x in draws)

    for pattern in (0x00000000, 0x80000000, 0x7F800000, 0xFF800000, 0x7FC00001):
        # Nominal share is 1/12
        assert 0.05 * n < counts[pattern] < 0.12 * n, hex(pattern)
    assert exps[1] > 0.05 * n
    assert exps[254] > 0.05 * n
    # Two signed zeros plus the random exp_zero slot
    assert exps[0] > 0.2 * n
