"""Limb layout of big integers on the stack and scripts that move them.

A big integer of ``n_bits`` bits is held as 30-bit limbs; the most
significant limb lies deepest and the least significant is on top.
Positions count whole integers from the top of the stack, starting at 0.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .script import Opcode, Script

LIMB_BITS = 30
MAX_U30 = 1 << LIMB_BITS
_LIMB_MASK = MAX_U30 - 1


@dataclass(frozen=True)
class BigIntSpec:
    """The width of a big integer and the limb layout it implies."""

    n_bits: int

    def __post_init__(self) -> None:
        if self.n_bits <= 0:
            raise ValueError("a big integer needs at least one bit")

    @property
    def n_limbs(self) -> int:
        return (self.n_bits + LIMB_BITS - 1) // LIMB_BITS

    @property
    def head(self) -> int:
        """Number of bits in the most significant limb."""
        return self.n_bits - (self.n_limbs - 1) * LIMB_BITS

    @property
    def head_offset(self) -> int:
        return 1 << self.head


U254 = BigIntSpec(254)


def _top_index(spec: BigIntSpec, position: int) -> int:
    if position < 0:
        raise ValueError("stack positions are non-negative")
    return (position + 1) * spec.n_limbs - 1


def push_u32_le(spec: BigIntSpec, v: Iterable[int]) -> Script:
    """Push a number given as little-endian 32-bit digits, truncated to n_bits."""
    value = 0
    for index, digit in enumerate(v):
        if not 0 <= digit < 1 << 32:
            raise ValueError(f"digit {digit} does not fit in 32 bits")
        value |= digit << (32 * index)
    value &= (1 << spec.n_bits) - 1
    return Script(
        (value >> (LIMB_BITS * i)) & _LIMB_MASK for i in reversed(range(spec.n_limbs))
    )


def push_hex(spec: BigIntSpec, hex_string: str) -> Script:
    """Push a number written in hexadecimal."""
    value = int(hex_string, 16)
    if value < 0:
        raise ValueError("negative numbers cannot be pushed")
    digits = [(value >> (32 * i)) & 0xFFFFFFFF for i in range((value.bit_length() + 31) // 32)]
    return push_u32_le(spec, digits)


def zip_limbs(spec: BigIntSpec, a: int, b: int) -> Script:
    """Interleave the limbs of the integers at positions a and b, consuming both.

    The result holds a0 b0 a1 b1 ... from the deepest limb up.
    """
    n = spec.n_limbs
    top_a = _top_index(spec, a)
    top_b = _top_index(spec, b)
    if top_a == top_b:
        raise ValueError("cannot zip an integer with itself")
    if top_a < top_b:
        return Script((top_a + i, Opcode.OP_ROLL, top_b, Opcode.OP_ROLL) for i in range(n))
    return Script((top_a, Opcode.OP_ROLL, top_b + i + 1, Opcode.OP_ROLL) for i in range(n))


def copy_zip(spec: BigIntSpec, a: int, b: int) -> Script:
    """Interleave copies of the limbs at positions a and b, leaving both in place."""
    top_a = _top_index(spec, a)
    top_b = _top_index(spec, b)
    return Script(
        (top_a + i, Opcode.OP_PICK, top_b + 1 + i, Opcode.OP_PICK)
        for i in range(spec.n_limbs)
    )


def dup_zip(spec: BigIntSpec, a: int) -> Script:
    """Move the integer at position a to the top with every limb doubled."""
    top_a = _top_index(spec, a)
    return Script((top_a + i, Opcode.OP_ROLL, Opcode.OP_DUP) for i in range(spec.n_limbs))


def copy(spec: BigIntSpec, a: int) -> Script:
    """Push a copy of the integer at position a."""
    top_a = _top_index(spec, a)
    return Script(
        top_a + 1,
        [(Opcode.OP_DUP, Opcode.OP_PICK, Opcode.OP_SWAP)] * (spec.n_limbs - 1),
        Opcode.OP_1SUB,
        Opcode.OP_PICK,
    )


def roll(spec: BigIntSpec, a: int) -> Script:
    """Move the integer at position a to the top."""
    top_a = _top_index(spec, a)
    return Script([(top_a, Opcode.OP_ROLL)] * spec.n_limbs)


def drop(spec: BigIntSpec) -> Script:
    """Remove the integer on top of the stack."""
    pairs, odd = divmod(spec.n_limbs, 2)
    return Script([Opcode.OP_2DROP] * pairs, [Opcode.OP_DROP] * odd)