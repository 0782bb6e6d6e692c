"""Scripts that subtract big integers held as 30-bit limbs."""

from __future__ import annotations

from .script import Opcode, Script
from .stack import MAX_U30, BigIntSpec, zip_limbs


def u30_sub_borrow() -> Script:
    """Subtract two limbs with a borrow.

    Expects ``x y base`` and leaves ``base borrow difference``.
    """
    return Script(
        Opcode.OP_ROT,
        Opcode.OP_ROT,
        Opcode.OP_SUB,
        Opcode.OP_DUP,
        0,
        Opcode.OP_LESSTHAN,
        Opcode.OP_TUCK,
        Opcode.OP_IF,
        2,
        Opcode.OP_PICK,
        Opcode.OP_ADD,
        Opcode.OP_ENDIF,
    )


def u30_sub_noborrow(head_offset: int) -> Script:
    """Subtract two limbs modulo ``head_offset``, dropping the borrow."""
    return Script(
        Opcode.OP_SUB,
        Opcode.OP_DUP,
        0,
        Opcode.OP_LESSTHAN,
        Opcode.OP_IF,
        head_offset,
        Opcode.OP_ADD,
        Opcode.OP_ENDIF,
    )


def sub(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with a - b modulo 2**n_bits."""
    n = spec.n_limbs
    if n < 2:
        raise ValueError("limb arithmetic needs at least two limbs")
    return Script(
        zip_limbs(spec, a, b),
        MAX_U30,
        u30_sub_borrow(),
        Opcode.OP_TOALTSTACK,
        [
            (Opcode.OP_ROT, Opcode.OP_ADD, Opcode.OP_SWAP, u30_sub_borrow(), Opcode.OP_TOALTSTACK)
        ]
        * (n - 2),
        Opcode.OP_NIP,
        Opcode.OP_ADD,
        u30_sub_noborrow(spec.head_offset),
        [Opcode.OP_FROMALTSTACK] * (n - 1),
    )