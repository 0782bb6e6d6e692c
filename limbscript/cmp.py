"""Scripts that compare big integers held as 30-bit limbs."""

from __future__ import annotations

from .script import Opcode, Script
from .stack import BigIntSpec, zip_limbs


def is_zero(spec: BigIntSpec) -> Script:
    """Replace the integer on top of the stack with 1 if it is zero, else 0."""
    rest = spec.n_limbs - 1
    return Script(
        [(Opcode.OP_NOT, Opcode.OP_TOALTSTACK)] * rest,
        Opcode.OP_NOT,
        [(Opcode.OP_FROMALTSTACK, Opcode.OP_BOOLAND)] * rest,
    )


def equalverify(spec: BigIntSpec, a: int, b: int) -> Script:
    """Consume the integers at positions a and b, failing unless they are equal."""
    return Script(zip_limbs(spec, a, b), [Opcode.OP_EQUALVERIFY] * spec.n_limbs)


def equal(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if equal, else 0."""
    n = spec.n_limbs
    return Script(
        zip_limbs(spec, a, b),
        [(Opcode.OP_EQUAL, Opcode.OP_TOALTSTACK)] * n,
        [Opcode.OP_FROMALTSTACK] * n,
        [Opcode.OP_BOOLAND] * (n - 1),
    )


def notequal(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if they differ, else 0."""
    return Script(equal(spec, a, b), Opcode.OP_NOT)


def lessthan(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if a < b, else 0."""
    n = spec.n_limbs
    return Script(
        zip_limbs(spec, a, b),
        [
            (
                Opcode.OP_2DUP,
                Opcode.OP_GREATERTHAN,
                Opcode.OP_TOALTSTACK,
                Opcode.OP_LESSTHAN,
                Opcode.OP_TOALTSTACK,
            )
        ]
        * n,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_OVER,
        Opcode.OP_BOOLOR,
        [
            (
                Opcode.OP_FROMALTSTACK,
                Opcode.OP_FROMALTSTACK,
                Opcode.OP_ROT,
                Opcode.OP_IF,
                Opcode.OP_2DROP,
                1,
                Opcode.OP_ELSE,
                Opcode.OP_ROT,
                Opcode.OP_DROP,
                Opcode.OP_OVER,
                Opcode.OP_BOOLOR,
                Opcode.OP_ENDIF,
            )
        ]
        * (n - 1),
        Opcode.OP_BOOLAND,
    )


def lessthanorequal(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if a <= b, else 0."""
    return greaterthanorequal(spec, b, a)


def greaterthan(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if a > b, else 0."""
    return Script(lessthanorequal(spec, a, b), Opcode.OP_NOT)


def greaterthanorequal(spec: BigIntSpec, a: int, b: int) -> Script:
    """Replace the integers at positions a and b with 1 if a >= b, else 0."""
    return Script(lessthan(spec, a, b), Opcode.OP_NOT)