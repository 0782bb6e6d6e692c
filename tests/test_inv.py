import random

import pytest

from limbscript.cmp import equalverify
from limbscript.inv import (
    div2,
    div2rem,
    div3,
    div3rem,
    inv_stage1,
    inv_stage2,
    u30_div3_carry,
    u30_shr1_carry,
)
from limbscript.script import Opcode, Script, decode_number, execute_script
from limbscript.stack import U254, BigIntSpec, push_hex

SMALL = BigIntSpec(40)
PRIMES = [101, 1000000007, 2147483647]


def _push(spec, value):
    return push_hex(spec, f"{value:x}")


def _limbs_value(limbs):
    value = 0
    for limb in limbs:
        value = (value << 30) | limb
    return value


def _final_numbers(*parts):
    return [decode_number(item) for item in execute_script(Script(*parts)).final_stack]


@pytest.mark.parametrize("carry", [0, 1])
def test_u30_shr1_carry(carry):
    prng = random.Random(carry)
    for _ in range(100):
        a = prng.getrandbits(30)
        script = Script(
            a, carry, u30_shr1_carry(30),
            a & 1, Opcode.OP_EQUALVERIFY,
            (carry << 29) | (a >> 1), Opcode.OP_EQUAL,
        )
        assert execute_script(script).success


def test_u30_shr1_carry_rejects_narrow_limbs():
    with pytest.raises(ValueError):
        u30_shr1_carry(1)


def test_u30_div3_carry():
    prng = random.Random(0)
    for _ in range(100):
        a = prng.getrandbits(30)
        for r in range(3):
            whole = a + (r << 30)
            script = Script(
                a, r, u30_div3_carry(),
                whole % 3, Opcode.OP_EQUALVERIFY,
                whole // 3, Opcode.OP_EQUAL,
            )
            assert execute_script(script).success


@pytest.mark.parametrize(
    "builder, divisor, keeps_remainder",
    [(div2, 2, False), (div3, 3, False), (div2rem, 2, True), (div3rem, 3, True)],
)
def test_division(builder, divisor, keeps_remainder):
    prng = random.Random(divisor)
    for _ in range(40):
        a = prng.getrandbits(254)
        remainder_check = [a % divisor, Opcode.OP_EQUALVERIFY] if keeps_remainder else []
        script = Script(
            _push(U254, a),
            builder(U254),
            remainder_check,
            _push(U254, a // divisor),
            equalverify(U254, 1, 0),
            Opcode.OP_TRUE,
        )
        assert execute_script(script).success


@pytest.mark.parametrize("k", [40, 57, 80])
def test_inv_stage2_gives_inverse_power_of_two(k):
    modulus = 1000000007
    values = _final_numbers(k, inv_stage2(SMALL, f"{modulus:x}"))
    assert len(values) == SMALL.n_limbs
    inverse = _limbs_value(values)
    assert inverse < modulus
    assert inverse * pow(2, k, modulus) % modulus == 1


def test_inv_stage2_out_of_range_fails():
    result = execute_script(Script(SMALL.n_bits - 1, inv_stage2(SMALL, "65")))
    assert result.success is False
    assert result.error == "alt stack underflow"


@pytest.mark.parametrize("modulus_hex", ["1", "not hex"])
def test_inv_stage2_rejects_bad_modulus(modulus_hex):
    with pytest.raises(ValueError):
        inv_stage2(SMALL, modulus_hex)