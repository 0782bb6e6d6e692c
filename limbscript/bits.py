"""Scripts that split big integers held as 30-bit limbs into single bits."""

from __future__ import annotations

from .script import Opcode, Script
from .stack import LIMB_BITS, BigIntSpec

# Powers of two up to this exponent fit in a three-byte push.
_MAX_PUSHED_POWER = 22


def _check_width(num_bits: int) -> None:
    if not 0 <= num_bits <= LIMB_BITS:
        raise ValueError(f"a limb holds between 0 and {LIMB_BITS} bits, not {num_bits}")


def _u30_to_bits_common(num_bits: int) -> Script:
    """Split a limb, leaving bits 2 and up on the alt stack and bits 0, 1 on top."""
    pushed = min(_MAX_PUSHED_POWER, num_bits - 1)
    step = (
        Opcode.OP_2DUP,
        Opcode.OP_LESSTHANOREQUAL,
        Opcode.OP_IF,
        Opcode.OP_SWAP,
        Opcode.OP_SUB,
        1,
        Opcode.OP_ELSE,
        Opcode.OP_NIP,
        0,
        Opcode.OP_ENDIF,
    )
    return Script(
        Opcode.OP_TOALTSTACK,
        (2 << i for i in range(pushed)),
        [(Opcode.OP_DUP, Opcode.OP_DUP, Opcode.OP_ADD)] * (num_bits - 1 - pushed),
        Opcode.OP_FROMALTSTACK,
        [(step, Opcode.OP_TOALTSTACK)] * (num_bits - 2),
        step,
    )


def u30_to_bits(num_bits: int) -> Script:
    """Replace a limb of ``num_bits`` bits with its bits, most significant on top."""
    _check_width(num_bits)
    if num_bits < 2:
        return Script()
    return Script(
        _u30_to_bits_common(num_bits),
        [Opcode.OP_FROMALTSTACK] * (num_bits - 2),
    )


def u30_to_bits_toaltstack(num_bits: int) -> Script:
    """Move the bits of a limb to the alt stack, least significant on top."""
    _check_width(num_bits)
    if num_bits < 2:
        return Script(Opcode.OP_TOALTSTACK)
    return Script(
        _u30_to_bits_common(num_bits),
        Opcode.OP_TOALTSTACK,
        Opcode.OP_TOALTSTACK,
    )


def convert_to_bits(spec: BigIntSpec) -> Script:
    """Replace the integer on top with its bits, most significant on top."""
    n = spec.n_limbs
    return Script(
        ((u30_to_bits(LIMB_BITS), LIMB_BITS * (i + 1), Opcode.OP_ROLL) for i in range(n - 1)),
        u30_to_bits(spec.head),
    )


def convert_to_bits_toaltstack(spec: BigIntSpec) -> Script:
    """Move the bits of the integer on top to the alt stack, least significant on top."""
    n = spec.n_limbs
    return Script(
        n - 1,
        Opcode.OP_ROLL,
        u30_to_bits_toaltstack(spec.head),
        ((n - 2 - i, Opcode.OP_ROLL, u30_to_bits_toaltstack(LIMB_BITS)) for i in range(n - 1)),
    )