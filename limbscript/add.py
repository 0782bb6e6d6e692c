"""Scripts that add big integers held as 30-bit limbs."""

from __future__ import annotations

from .script import Opcode, Script
from .stack import MAX_U30, BigIntSpec, dup_zip, zip_limbs


def _require_two_limbs(spec: BigIntSpec) -> None:
    if spec.n_limbs < 2:
        raise ValueError("limb arithmetic needs at least two limbs")


def u30_add_carry() -> Script:
    """Add two limbs with a carry.

    Expects ``x y base`` and leaves ``base carry sum``.
    """
    return Script(
        Opcode.OP_ROT,
        Opcode.OP_ROT,
        Opcode.OP_ADD,
        Opcode.OP_2DUP,
        Opcode.OP_LESSTHANOREQUAL,
        Opcode.OP_TUCK,
        Opcode.OP_IF,
        2,
        Opcode.OP_PICK,
        Opcode.OP_SUB,
        Opcode.OP_ENDIF,
    )


def u30_add_nocarry(head_offset: int) -> Script:
    """Add two limbs modulo ``head_offset``, dropping the carry."""
    return Script(
        Opcode.OP_ADD,
        head_offset,
        Opcode.OP_2DUP,
        Opcode.OP_GREATERTHANOREQUAL,
        Opcode.OP_IF,
        Opcode.OP_SUB,
        Opcode.OP_ELSE,
        Opcode.OP_DROP,
        Opcode.OP_ENDIF,
    )


def _sum_zipped(spec: BigIntSpec, arrange: Script) -> Script:
    """Add limb pairs laid out by ``arrange``, from the least significant up."""
    n = spec.n_limbs
    return Script(
        arrange,
        MAX_U30,
        u30_add_carry(),
        Opcode.OP_TOALTSTACK,
        [
            (Opcode.OP_ROT, Opcode.OP_ADD, Opcode.OP_SWAP, u30_add_carry(), Opcode.OP_TOALTSTACK)
        ]
        * (n - 2),
        Opcode.OP_NIP,
        Opcode.OP_ADD,
        u30_add_nocarry(spec.head_offset),
        [Opcode.OP_FROMALTSTACK] * (n - 1),
    )


def double(spec: BigIntSpec, a: int) -> Script:
    """Replace the integer at position a with twice its value, on top of the stack."""
    _require_two_limbs(spec)
    return _sum_zipped(spec, dup_zip(spec, a))


def add(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with their sum modulo 2**n_bits."""
    _require_two_limbs(spec)
    return _sum_zipped(spec, zip_limbs(spec, a, b))


def add1(spec: BigIntSpec) -> Script:
    """Add one to the integer on top of the stack, modulo 2**n_bits."""
    _require_two_limbs(spec)
    n = spec.n_limbs
    return Script(
        1,
        MAX_U30,
        u30_add_carry(),
        Opcode.OP_TOALTSTACK,
        [(Opcode.OP_SWAP, u30_add_carry(), Opcode.OP_TOALTSTACK)] * (n - 2),
        Opcode.OP_NIP,
        u30_add_nocarry(spec.head_offset),
        [Opcode.OP_FROMALTSTACK] * (n - 1),
    )