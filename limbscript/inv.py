"""Scripts that halve, divide by three and invert big integers held as 30-bit limbs."""

from __future__ import annotations

from .add import add, double
from .cmp import greaterthan, notequal
from .script import Opcode, Script
from .stack import LIMB_BITS, BigIntSpec, copy, drop, push_u32_le, roll, zip_limbs  # noqa: F401
from .sub import sub

# Constants used when dividing a limb with a carry of 1 or 2 by three:
# floor(2**30 / 3) and floor(2 * 2**30 / 3).
_DIV3_CARRY_ONE = 357913941
_DIV3_CARRY_TWO = 715827882
# ceil(log_3(2**30))
_DIV3_STEPS = 19


def _u32_digits(value: int) -> list[int]:
    return [(value >> (32 * i)) & 0xFFFFFFFF for i in range((value.bit_length() + 31) // 32)]


def u30_shr1_carry(num_bits: int) -> Script:
    """Shift a limb right by one bit, shifting a carry bit in at the top.

    Expects ``limb carry`` and leaves ``shifted low_bit``.
    """
    if num_bits < 2:
        raise ValueError(f"a limb to shift needs at least 2 bits, not {num_bits}")
    if num_bits < 7:
        powers = Script(2**i for i in range(num_bits - 1))
    else:
        powers = Script(
            2, 4, 8, 16, 32, 64,
            [(Opcode.OP_DUP, Opcode.OP_DUP, Opcode.OP_ADD)] * (num_bits - 7),
        )
    step = (
        Opcode.OP_2DUP,
        Opcode.OP_LESSTHANOREQUAL,
        Opcode.OP_IF,
        Opcode.OP_SWAP,
        Opcode.OP_SUB,
        Opcode.OP_SWAP,
        Opcode.OP_DUP,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_ADD,
        Opcode.OP_TOALTSTACK,
        Opcode.OP_SWAP,
        Opcode.OP_ELSE,
        Opcode.OP_NIP,
        Opcode.OP_ENDIF,
    )
    return Script(
        powers,
        num_bits - 1,
        Opcode.OP_ROLL,
        Opcode.OP_IF,
        Opcode.OP_DUP,
        Opcode.OP_ELSE,
        0,
        Opcode.OP_ENDIF,
        Opcode.OP_TOALTSTACK,
        num_bits - 1,
        Opcode.OP_ROLL,
        [step] * (num_bits - 2),
        Opcode.OP_2DUP,
        Opcode.OP_LESSTHANOREQUAL,
        Opcode.OP_IF,
        Opcode.OP_SWAP,
        Opcode.OP_SUB,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_1ADD,
        Opcode.OP_ELSE,
        Opcode.OP_NIP,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_ENDIF,
        Opcode.OP_SWAP,
    )


def u30_div3_carry() -> Script:
    """Divide a limb plus ``carry * 2**30`` by three.

    Expects ``limb carry`` with carry in 0..2 and leaves ``quotient remainder``.
    """
    k = _DIV3_STEPS
    step = (
        Opcode.OP_2DUP,
        Opcode.OP_LESSTHANOREQUAL,
        Opcode.OP_IF,
        Opcode.OP_SWAP,
        Opcode.OP_SUB,
        2,
        Opcode.OP_PICK,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_ADD,
        Opcode.OP_TOALTSTACK,
        Opcode.OP_ELSE,
        Opcode.OP_NIP,
        Opcode.OP_ENDIF,
    )
    return Script(
        1, 2, 3, 6, 9, 18, 27, 54,
        [(Opcode.OP_2DUP, Opcode.OP_ADD, Opcode.OP_DUP, Opcode.OP_DUP, Opcode.OP_ADD)] * (k - 4),
        2 * k,
        Opcode.OP_ROLL,
        Opcode.OP_DUP,
        0,
        Opcode.OP_GREATERTHAN,
        Opcode.OP_IF,
        Opcode.OP_1SUB,
        Opcode.OP_IF,
        2,
        _DIV3_CARRY_TWO,
        Opcode.OP_ELSE,
        1,
        _DIV3_CARRY_ONE,
        Opcode.OP_ENDIF,
        Opcode.OP_ELSE,
        0,
        Opcode.OP_ENDIF,
        Opcode.OP_TOALTSTACK,
        2 * k + 1,
        Opcode.OP_ROLL,
        Opcode.OP_ADD,
        [step] * (2 * k - 2),
        Opcode.OP_NIP,
        Opcode.OP_NIP,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_SWAP,
    )


def _limbwise(spec: BigIntSpec, head_step: Script, limb_step: Script) -> Script:
    n = spec.n_limbs
    return Script(
        n - 1,
        Opcode.OP_ROLL,
        0,
        head_step,
        [(n, Opcode.OP_ROLL, Opcode.OP_SWAP, limb_step)] * (n - 1),
    )


def div2rem(spec: BigIntSpec) -> Script:
    """Replace the integer on top with its half, followed by the remainder bit."""
    return _limbwise(spec, u30_shr1_carry(spec.head), u30_shr1_carry(LIMB_BITS))


def div2(spec: BigIntSpec) -> Script:
    """Replace the integer on top with its half, rounded down."""
    return Script(div2rem(spec), Opcode.OP_DROP)


def div3rem(spec: BigIntSpec) -> Script:
    """Replace the integer on top with its third, followed by the remainder."""
    step = u30_div3_carry()
    return _limbwise(spec, step, step)


def div3(spec: BigIntSpec) -> Script:
    """Replace the integer on top with its third, rounded down."""
    return Script(div3rem(spec), Opcode.OP_DROP)


def _inv_step(spec: BigIntSpec) -> Script:
    """One round of the binary inversion loop on ``u r v s | k``."""

    def r(a: int) -> Script:
        return roll(spec, a)

    dropped = drop(spec)
    u_even = Script(
        r(5), r(5), r(4),
        r(6), dropped,
        r(5), dropped,
        r(4), dropped,
    )
    v_even = Script(
        r(7), r(3), r(2), r(5),
        r(7), dropped,
        r(6), dropped,
        r(5), dropped,
        r(4), dropped,
    )
    u_greater = Script(
        r(4), r(4),
        r(5), dropped,
        r(4), dropped,
    )
    v_greater = Script(
        r(5), r(3), r(3), r(3),
        r(5), dropped,
        r(4), dropped,
    )
    both_odd = Script(
        copy(spec, 7),
        copy(spec, 6),
        greaterthan(spec, 1, 0),
        Opcode.OP_TOALTSTACK,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_DUP,
        Opcode.OP_TOALTSTACK,
        Opcode.OP_NOT,
        Opcode.OP_IF,
        r(1),
        Opcode.OP_ENDIF,
        sub(spec, 1, 0),
        r(5),
        r(4),
        add(spec, 1, 0),
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_IF,
        u_greater,
        Opcode.OP_ELSE,
        v_greater,
        Opcode.OP_ENDIF,
    )
    return Script(
        copy(spec, 3),
        copy(spec, 2),
        notequal(spec, 1, 0),
        Opcode.OP_IF,
        copy(spec, 0),
        double(spec, 0),
        copy(spec, 3),
        double(spec, 0),
        copy(spec, 5),
        div2rem(spec),
        Opcode.OP_NOT,
        Opcode.OP_IF,
        u_even,
        Opcode.OP_ELSE,
        copy(spec, 4),
        div2rem(spec),
        Opcode.OP_NOT,
        Opcode.OP_IF,
        v_even,
        Opcode.OP_ELSE,
        both_odd,
        Opcode.OP_ENDIF,
        Opcode.OP_ENDIF,
        Opcode.OP_FROMALTSTACK,
        Opcode.OP_1ADD,
        Opcode.OP_TOALTSTACK,
        Opcode.OP_ENDIF,
    )


def inv_stage1(spec: BigIntSpec) -> Script:
    """First stage of a constant-time modular inversion.

    Expects ``modulus number`` and leaves ``s k`` with
    ``number * s = 2**k`` modulo the modulus.
    """
    dropped = drop(spec)
    return Script(
        push_u32_le(spec, [0]),
        roll(spec, 1),
        push_u32_le(spec, [1]),
        0,
        Opcode.OP_TOALTSTACK,
        [_inv_step(spec)] * (2 * spec.n_bits),
        [(roll(spec, 1), dropped)] * 3,
        Opcode.OP_FROMALTSTACK,
    )


def inv_stage2(spec: BigIntSpec, modulus_hex: str) -> Script:
    """Replace ``k`` on top with ``2**-k`` modulo the modulus, for k in n_bits..2*n_bits."""
    modulus = int(modulus_hex, 16)
    if modulus < 2:
        raise ValueError("the modulus must be at least 2")
    inv_2 = pow(2, modulus - 2, modulus)
    current = pow(inv_2, spec.n_bits, modulus)
    inverses = []
    for _ in range(spec.n_bits + 1):
        inverses.append(current)
        current = current * inv_2 % modulus

    n = spec.n_limbs
    return Script(
        spec.n_bits,
        Opcode.OP_SUB,
        (
            (
                Opcode.OP_DUP,
                i,
                Opcode.OP_EQUAL,
                Opcode.OP_IF,
                push_u32_le(spec, _u32_digits(value)),
                [Opcode.OP_TOALTSTACK] * n,
                Opcode.OP_ENDIF,
            )
            for i, value in enumerate(inverses)
        ),
        Opcode.OP_DROP,
        [Opcode.OP_FROMALTSTACK] * n,
    )