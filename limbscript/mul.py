"""Scripts that multiply big integers held as 30-bit limbs."""

from __future__ import annotations

from .add import add, double
from .bits import convert_to_bits_toaltstack
from .script import Opcode, Script
from .stack import BigIntSpec, copy, drop, roll


def _on_next_bit(then: Script, otherwise: Script | None = None) -> Script:
    """Run `then` when the bit popped from the alt stack is set, else `otherwise`."""
    branch = [Opcode.OP_ELSE, otherwise] if otherwise else []
    return Script(Opcode.OP_FROMALTSTACK, Opcode.OP_IF, then, branch, Opcode.OP_ENDIF)


def mul(spec: BigIntSpec) -> Script:
    """Replace the two integers on top with their product modulo 2**n_bits.

    Uses double-and-add over the bits of the top integer, least significant first.
    """
    accumulate = _on_next_bit(Script(copy(spec, 1), add(spec, 1, 0)))
    shift = Script(roll(spec, 1), double(spec, 0))
    return Script(
        convert_to_bits_toaltstack(spec),
        [0] * spec.n_limbs,
        accumulate,
        [Script(shift, roll(spec, 1), accumulate)] * max(spec.n_bits - 2, 0),
        shift,
        _on_next_bit(add(spec, 1, 0), drop(spec)),
    )