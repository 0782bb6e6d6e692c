import random

import pytest

from limbscript.bits import (
    convert_to_bits,
    convert_to_bits_toaltstack,
    u30_to_bits,
    u30_to_bits_toaltstack,
)
from limbscript.script import Opcode, Script, execute_script
from limbscript.stack import U254, BigIntSpec, push_hex


def _bits_lsb_first(value, count):
    return [(value >> i) & 1 for i in range(count)]


def _on_stack(bits):
    """Check bits left on the main stack, most significant on top."""
    return [(bit, Opcode.OP_EQUALVERIFY) for bit in reversed(bits)]


def _on_alt(bits):
    """Check bits left on the alt stack, least significant on top."""
    return [(Opcode.OP_FROMALTSTACK, bit, Opcode.OP_EQUALVERIFY) for bit in bits]


def _run(*parts):
    return execute_script(Script(*parts, Opcode.OP_TRUE))


@pytest.mark.parametrize("width", [30, 15])
def test_u30_to_bits_random(width):
    rng = random.Random(0)
    for _ in range(40):
        a = rng.getrandbits(width)
        assert _run(a, u30_to_bits(width), _on_stack(_bits_lsb_first(a, width))).success


@pytest.mark.parametrize("a", range(4))
def test_u30_to_bits_two(a):
    script = Script(
        a, u30_to_bits(2), a >> 1, Opcode.OP_EQUALVERIFY, a & 1, Opcode.OP_EQUAL
    )
    assert execute_script(script).success


@pytest.mark.parametrize("a", range(2))
def test_u30_to_bits_one(a):
    assert execute_script(Script(a, u30_to_bits(1), a, Opcode.OP_EQUAL)).success


def test_u30_to_bits_zero_is_empty():
    assert len(u30_to_bits(0)) == 0
    assert execute_script(Script(0, u30_to_bits(0), 0, Opcode.OP_EQUAL)).success


def test_u30_to_bits_wrong_bit_fails():
    assert not _run(0b101, u30_to_bits(3), 0, Opcode.OP_EQUALVERIFY).success


def test_u30_to_bits_toaltstack_order():
    rng = random.Random(1)
    for _ in range(20):
        a = rng.getrandbits(30)
        result = _run(a, u30_to_bits_toaltstack(30), _on_alt(_bits_lsb_first(a, 30)))
        assert result.success
        assert result.alt_stack == []


def test_u30_to_bits_toaltstack_single_bit():
    script = Script(1, u30_to_bits_toaltstack(1), Opcode.OP_FROMALTSTACK)
    assert execute_script(script).success


@pytest.mark.parametrize("builder", [u30_to_bits, u30_to_bits_toaltstack])
@pytest.mark.parametrize("width", [-1, 31])
def test_invalid_widths_rejected(builder, width):
    with pytest.raises(ValueError):
        builder(width)


@pytest.mark.parametrize(
    "converter, checker",
    [(convert_to_bits, _on_stack), (convert_to_bits_toaltstack, _on_alt)],
)
def test_ubigint_to_bits(converter, checker):
    rng = random.Random(0)
    for _ in range(10):
        a = rng.getrandbits(U254.n_bits)
        bits = _bits_lsb_first(a, U254.n_bits)
        assert _run(push_hex(U254, f"{a:x}"), converter(U254), checker(bits)).success


def test_convert_to_bits_single_bit_head():
    spec = BigIntSpec(31)
    a = (1 << 30) | 5
    bits = _bits_lsb_first(a, 31)
    assert _run(push_hex(spec, f"{a:x}"), convert_to_bits(spec), _on_stack(bits)).success