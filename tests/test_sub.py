import random

import pytest

from limbscript.cmp import equalverify
from limbscript.script import Opcode, Script, execute_script
from limbscript.stack import MAX_U30, U254, BigIntSpec, push_hex
from limbscript.sub import sub, u30_sub_borrow, u30_sub_noborrow


def _run_sub(spec, a, b, expected, swapped=False):
    """Compute a - b, with a pushed below b, or above it when swapped."""
    first, second = (b, a) if swapped else (a, b)
    positions = (0, 1) if swapped else (1, 0)
    return execute_script(
        Script(
            [push_hex(spec, hex(value)[2:]) for value in (first, second)],
            sub(spec, *positions),
            push_hex(spec, hex(expected)[2:]),
            equalverify(spec, 1, 0),
            Opcode.OP_TRUE,
        )
    )


@pytest.mark.parametrize(
    "spec, swapped",
    [(U254, False), (U254, True), (BigIntSpec(33), False), (BigIntSpec(64), False)],
)
def test_sub_random(spec, swapped):
    prng = random.Random(spec.n_bits)
    for _ in range(30):
        a = prng.getrandbits(spec.n_bits)
        b = prng.getrandbits(spec.n_bits)
        outcome = _run_sub(spec, a, b, (a - b) % (1 << spec.n_bits), swapped)
        assert outcome.success, outcome.error


BN254 = 0x30644E72E131A029B85045B68181585D97816A916871CA8D3C208C16D87CFD47


@pytest.mark.parametrize(
    "a, b, expected, ok",
    [(0, 1, (1 << 254) - 1, True), (BN254, BN254, 0, True), (9, 4, 4, False)],
)
def test_sub_fixed_values(a, b, expected, ok):
    assert _run_sub(U254, a, b, expected).success is ok


def test_single_limb_rejected():
    with pytest.raises(ValueError):
        sub(BigIntSpec(10), 1, 0)


@pytest.mark.parametrize(
    "x, y, borrow, diff",
    [(5, 3, 0, 2), (3, 5, 1, MAX_U30 - 2), (0, 0, 0, 0)],
)
def test_u30_sub_borrow(x, y, borrow, diff):
    script = Script(
        x, y, MAX_U30, u30_sub_borrow(),
        [(value, Opcode.OP_EQUALVERIFY) for value in (diff, borrow)],
        MAX_U30, Opcode.OP_EQUAL,
    )
    outcome = execute_script(script)
    assert outcome.success, outcome.error


@pytest.mark.parametrize("x, y, expected", [(7, 4, 3), (3, 5, 14), (0, 1, 15)])
def test_u30_sub_noborrow(x, y, expected):
    outcome = execute_script(Script(x, y, u30_sub_noborrow(16), expected, Opcode.OP_EQUAL))
    assert outcome.success, outcome.error