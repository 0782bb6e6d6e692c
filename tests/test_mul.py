import random

import pytest

from limbscript.cmp import equalverify
from limbscript.mul import mul
from limbscript.script import Opcode, Script, execute_script
from limbscript.stack import U254, BigIntSpec, push_hex


def _check_product(spec, a, b, c):
    pushes = [push_hex(spec, format(value, "x")) for value in (a, b)]
    script = Script(
        pushes,
        mul(spec),
        push_hex(spec, format(c, "x")),
        equalverify(spec, 1, 0),
        Opcode.OP_TRUE,
    )
    return execute_script(script)


def test_mul_random_u254():
    rng = random.Random(0)
    for _ in range(3):
        a = rng.getrandbits(254)
        b = rng.getrandbits(254)
        result = _check_product(U254, a, b, (a * b) % (1 << 254))
        assert result.success
        assert result.alt_stack == []


@pytest.mark.parametrize(
    "a, b, c, ok",
    [
        (3, 5, 15, True),
        (0, 12345, 0, True),
        (1, (1 << 60) - 1, (1 << 60) - 1, True),
        (1 << 59, 2, 0, True),
        ((1 << 60) - 1, (1 << 60) - 1, 1, True),
        (3, 5, 16, False),
    ],
)
def test_mul_small_spec(a, b, c, ok):
    assert _check_product(BigIntSpec(60), a, b, c).success is ok


def test_mul_needs_two_limbs():
    with pytest.raises(ValueError):
        mul(BigIntSpec(30))