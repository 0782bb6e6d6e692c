"""Script values, their wire encoding, and a stack machine that runs them."""

from __future__ import annotations

import enum
import operator
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Callable, Union

MAX_NUM_SIZE = 4
MAX_STACK_SIZE = 1000


class Opcode(enum.Enum):
    """Opcodes understood by the script encoder and the executor."""

    OP_0 = 0x00
    OP_FALSE = 0x00
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_1NEGATE = 0x4F
    OP_1 = 0x51
    OP_TRUE = 0x51
    OP_2 = 0x52
    OP_3 = 0x53
    OP_4 = 0x54
    OP_5 = 0x55
    OP_6 = 0x56
    OP_7 = 0x57
    OP_8 = 0x58
    OP_9 = 0x59
    OP_10 = 0x5A
    OP_11 = 0x5B
    OP_12 = 0x5C
    OP_13 = 0x5D
    OP_14 = 0x5E
    OP_15 = 0x5F
    OP_16 = 0x60
    OP_NOP = 0x61
    OP_IF = 0x63
    OP_NOTIF = 0x64
    OP_ELSE = 0x67
    OP_ENDIF = 0x68
    OP_VERIFY = 0x69
    OP_RETURN = 0x6A
    OP_TOALTSTACK = 0x6B
    OP_FROMALTSTACK = 0x6C
    OP_2DROP = 0x6D
    OP_2DUP = 0x6E
    OP_3DUP = 0x6F
    OP_2OVER = 0x70
    OP_2ROT = 0x71
    OP_2SWAP = 0x72
    OP_IFDUP = 0x73
    OP_DEPTH = 0x74
    OP_DROP = 0x75
    OP_DUP = 0x76
    OP_NIP = 0x77
    OP_OVER = 0x78
    OP_PICK = 0x79
    OP_ROLL = 0x7A
    OP_ROT = 0x7B
    OP_SWAP = 0x7C
    OP_TUCK = 0x7D
    OP_SIZE = 0x82
    OP_EQUAL = 0x87
    OP_EQUALVERIFY = 0x88
    OP_1ADD = 0x8B
    OP_1SUB = 0x8C
    OP_NEGATE = 0x8F
    OP_ABS = 0x90
    OP_NOT = 0x91
    OP_0NOTEQUAL = 0x92
    OP_ADD = 0x93
    OP_SUB = 0x94
    OP_BOOLAND = 0x9A
    OP_BOOLOR = 0x9B
    OP_NUMEQUAL = 0x9C
    OP_NUMEQUALVERIFY = 0x9D
    OP_NUMNOTEQUAL = 0x9E
    OP_LESSTHAN = 0x9F
    OP_GREATERTHAN = 0xA0
    OP_LESSTHANOREQUAL = 0xA1
    OP_GREATERTHANOREQUAL = 0xA2
    OP_MIN = 0xA3
    OP_MAX = 0xA4
    OP_WITHIN = 0xA5


class ScriptError(Exception):
    """A script failed while it was being executed."""


def encode_number(value: int) -> bytes:
    """Encode an integer as a minimal little-endian sign-magnitude number."""
    if value == 0:
        return b""
    negative = value < 0
    magnitude = -value if negative else value
    out = bytearray(magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "little"))
    if out[-1] & 0x80:
        out.append(0x80 if negative else 0x00)
    elif negative:
        out[-1] |= 0x80
    return bytes(out)


def decode_number(data: bytes) -> int:
    """Decode a little-endian sign-magnitude number."""
    data = bytes(data)
    if not data:
        return 0
    value = int.from_bytes(data, "little")
    sign_bit = 0x80 << (8 * (len(data) - 1))
    if value & sign_bit:
        return -(value & ~sign_bit)
    return value


_SMALL_INT_VALUES: dict[Opcode, int] = {
    Opcode.OP_0: 0,
    Opcode.OP_1NEGATE: -1,
    **{Opcode(Opcode.OP_1.value + n - 1): n for n in range(1, 17)},
}

Item = Union[Opcode, bytes]


def _push_int(value: int) -> Item:
    if value == -1 or 0 <= value <= 16:
        return Opcode(Opcode.OP_1.value + value - 1) if value > 0 else (
            Opcode.OP_0 if value == 0 else Opcode.OP_1NEGATE
        )
    return encode_number(value)


def _push_data(data: bytes) -> Item:
    if not data:
        return Opcode.OP_0
    if len(data) == 1:
        if 1 <= data[0] <= 16:
            return Opcode(Opcode.OP_1.value + data[0] - 1)
        if data[0] == 0x81:
            return Opcode.OP_1NEGATE
    return data


def _flatten(arg: object, out: list[Item]) -> None:
    if isinstance(arg, Script):
        out.extend(arg._items)
    elif isinstance(arg, Opcode):
        out.append(arg)
    elif isinstance(arg, int):
        out.append(_push_int(arg))
    elif isinstance(arg, (bytes, bytearray, memoryview)):
        out.append(_push_data(bytes(arg)))
    elif isinstance(arg, str):
        raise TypeError("strings cannot be placed in a script; use bytes")
    elif isinstance(arg, Iterable):
        for part in arg:
            _flatten(part, out)
    else:
        raise TypeError(f"cannot place {type(arg).__name__} in a script")


class Script:
    """An immutable sequence of opcodes and data pushes.

    Accepts opcodes, integers (pushed as numbers), bytes (pushed as data),
    other scripts and any nesting of iterables of these.
    """

    __slots__ = ("_items",)

    def __init__(self, *args: object) -> None:
        items: list[Item] = []
        _flatten(args, items)
        self._items: tuple[Item, ...] = tuple(items)

    def __add__(self, other: object) -> Script:
        try:
            return Script(self, other)
        except TypeError:
            return NotImplemented

    def __len__(self) -> int:
        return len(self.encode())

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Script):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        parts = (
            item.name if isinstance(item, Opcode) else f"0x{item.hex()}"
            for item in self._items
        )
        return f"Script({' '.join(parts)})"

    def encode(self) -> bytes:
        """Serialise the script to its wire bytes."""
        out = bytearray()
        for item in self._items:
            if isinstance(item, Opcode):
                out.append(item.value)
                continue
            size = len(item)
            if size <= 75:
                out.append(size)
            elif size <= 0xFF:
                out.append(Opcode.OP_PUSHDATA1.value)
                out.append(size)
            elif size <= 0xFFFF:
                out.append(Opcode.OP_PUSHDATA2.value)
                out += size.to_bytes(2, "little")
            else:
                out.append(Opcode.OP_PUSHDATA4.value)
                out += size.to_bytes(4, "little")
            out += item
        return bytes(out)


@dataclass
class ExecutionResult:
    """Outcome of running a script."""

    success: bool
    final_stack: list[bytes] = field(default_factory=list)
    alt_stack: list[bytes] = field(default_factory=list)
    error: str | None = None
    max_stack_depth: int = 0


_TRUE = b"\x01"
_FALSE = b""


def _as_bool(data: bytes) -> bool:
    last = len(data) - 1
    for position, byte in enumerate(data):
        if byte:
            return not (position == last and byte == 0x80)
    return False


_UNARY_OPS: dict[Opcode, Callable[[int], int]] = {
    Opcode.OP_1ADD: lambda a: a + 1,
    Opcode.OP_1SUB: lambda a: a - 1,
    Opcode.OP_NEGATE: operator.neg,
    Opcode.OP_ABS: abs,
    Opcode.OP_NOT: lambda a: int(a == 0),
    Opcode.OP_0NOTEQUAL: lambda a: int(a != 0),
}

_BINARY_OPS: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.OP_ADD: operator.add,
    Opcode.OP_SUB: operator.sub,
    Opcode.OP_BOOLAND: lambda a, b: int(a != 0 and b != 0),
    Opcode.OP_BOOLOR: lambda a, b: int(a != 0 or b != 0),
    Opcode.OP_NUMEQUAL: lambda a, b: int(a == b),
    Opcode.OP_NUMEQUALVERIFY: lambda a, b: int(a == b),
    Opcode.OP_NUMNOTEQUAL: lambda a, b: int(a != b),
    Opcode.OP_LESSTHAN: lambda a, b: int(a < b),
    Opcode.OP_GREATERTHAN: lambda a, b: int(a > b),
    Opcode.OP_LESSTHANOREQUAL: lambda a, b: int(a <= b),
    Opcode.OP_GREATERTHANOREQUAL: lambda a, b: int(a >= b),
    Opcode.OP_MIN: min,
    Opcode.OP_MAX: max,
}


class _Machine:
    def __init__(self) -> None:
        self.stack: list[bytes] = []
        self.alt: list[bytes] = []
        self.max_depth = 0
        self._conditions: list[bool] = []
        self._false_depth = 0

    def run(self, script: Script) -> None:
        for item in script:
            self._step(item)
            depth = len(self.stack) + len(self.alt)
            if depth > self.max_depth:
                self.max_depth = depth
                if depth > MAX_STACK_SIZE:
                    raise ScriptError("stack size limit exceeded")
        if self._conditions:
            raise ScriptError("unbalanced conditional")

    def _require(self, count: int) -> None:
        if len(self.stack) < count:
            raise ScriptError("stack underflow")

    def _pop(self) -> bytes:
        if not self.stack:
            raise ScriptError("stack underflow")
        return self.stack.pop()

    def _pop_number(self) -> int:
        data = self._pop()
        if len(data) > MAX_NUM_SIZE:
            raise ScriptError(f"numeric operand longer than {MAX_NUM_SIZE} bytes")
        if data and not data[-1] & 0x7F and (len(data) == 1 or not data[-2] & 0x80):
            raise ScriptError("non-minimally encoded number")
        return decode_number(data)

    def _push_number(self, value: int) -> None:
        self.stack.append(encode_number(value))

    def _verify(self) -> None:
        if not _as_bool(self._pop()):
            raise ScriptError("verification failed")

    def _step(self, item: Item) -> None:
        executing = self._false_depth == 0
        if isinstance(item, bytes):
            if executing:
                self.stack.append(item)
            return
        op = item
        if op in (Opcode.OP_IF, Opcode.OP_NOTIF):
            taken = False
            if executing:
                condition = self._pop()
                if condition not in (_FALSE, _TRUE):
                    raise ScriptError("conditional argument must be minimal")
                taken = (condition == _TRUE) != (op is Opcode.OP_NOTIF)
            self._conditions.append(taken)
            if not taken:
                self._false_depth += 1
            return
        if op is Opcode.OP_ELSE:
            if not self._conditions:
                raise ScriptError("unbalanced conditional: OP_ELSE without OP_IF")
            self._false_depth += 1 if self._conditions[-1] else -1
            self._conditions[-1] = not self._conditions[-1]
            return
        if op is Opcode.OP_ENDIF:
            if not self._conditions:
                raise ScriptError("unbalanced conditional: OP_ENDIF without OP_IF")
            if not self._conditions.pop():
                self._false_depth -= 1
            return
        if not executing:
            return
        small = _SMALL_INT_VALUES.get(op)
        if small is not None:
            self._push_number(small)
            return
        self._execute(op)

    def _execute(self, op: Opcode) -> None:
        unary = _UNARY_OPS.get(op)
        if unary is not None:
            self._push_number(unary(self._pop_number()))
            return
        binary = _BINARY_OPS.get(op)
        if binary is not None:
            right = self._pop_number()
            left = self._pop_number()
            self._push_number(binary(left, right))
            if op is Opcode.OP_NUMEQUALVERIFY:
                self._verify()
            return

        stack = self.stack
        match op:
            case Opcode.OP_NOP:
                pass
            case Opcode.OP_VERIFY:
                self._verify()
            case Opcode.OP_RETURN:
                raise ScriptError("OP_RETURN encountered")
            case Opcode.OP_TOALTSTACK:
                self.alt.append(self._pop())
            case Opcode.OP_FROMALTSTACK:
                if not self.alt:
                    raise ScriptError("alt stack underflow")
                stack.append(self.alt.pop())
            case Opcode.OP_2DROP:
                self._require(2)
                del stack[-2:]
            case Opcode.OP_2DUP:
                self._require(2)
                stack.extend(stack[-2:])
            case Opcode.OP_3DUP:
                self._require(3)
                stack.extend(stack[-3:])
            case Opcode.OP_2OVER:
                self._require(4)
                stack.extend(stack[-4:-2])
            case Opcode.OP_2ROT:
                self._require(6)
                moved = stack[-6:-4]
                del stack[-6:-4]
                stack.extend(moved)
            case Opcode.OP_2SWAP:
                self._require(4)
                stack[-4:] = stack[-2:] + stack[-4:-2]
            case Opcode.OP_IFDUP:
                self._require(1)
                if _as_bool(stack[-1]):
                    stack.append(stack[-1])
            case Opcode.OP_DEPTH:
                self._push_number(len(stack))
            case Opcode.OP_DROP:
                self._pop()
            case Opcode.OP_DUP:
                self._require(1)
                stack.append(stack[-1])
            case Opcode.OP_NIP:
                self._require(2)
                del stack[-2]
            case Opcode.OP_OVER:
                self._require(2)
                stack.append(stack[-2])
            case Opcode.OP_PICK | Opcode.OP_ROLL:
                depth = self._pop_number()
                if depth < 0 or depth >= len(stack):
                    raise ScriptError(f"{op.name} index {depth} out of range")
                if op is Opcode.OP_PICK:
                    stack.append(stack[-depth - 1])
                else:
                    stack.append(stack.pop(-depth - 1))
            case Opcode.OP_ROT:
                self._require(3)
                stack.append(stack.pop(-3))
            case Opcode.OP_SWAP:
                self._require(2)
                stack[-1], stack[-2] = stack[-2], stack[-1]
            case Opcode.OP_TUCK:
                self._require(2)
                stack.insert(-2, stack[-1])
            case Opcode.OP_SIZE:
                self._require(1)
                self._push_number(len(stack[-1]))
            case Opcode.OP_EQUAL | Opcode.OP_EQUALVERIFY:
                right = self._pop()
                left = self._pop()
                stack.append(_TRUE if left == right else _FALSE)
                if op is Opcode.OP_EQUALVERIFY:
                    self._verify()
            case Opcode.OP_WITHIN:
                upper = self._pop_number()
                lower = self._pop_number()
                value = self._pop_number()
                self._push_number(int(lower <= value < upper))
            case _:
                raise ScriptError(f"unsupported opcode {op.name}")


def execute_script(script: Script) -> ExecutionResult:
    """Run a script and report whether it succeeded.

    A script succeeds when it runs without error and leaves exactly one
    element on the main stack, and that element is true.
    """
    if not isinstance(script, Script):
        script = Script(script)
    machine = _Machine()
    error: str | None = None
    try:
        machine.run(script)
    except ScriptError as exc:
        error = str(exc)
    if error is None:
        if len(machine.stack) != 1:
            error = (
                "final stack must hold exactly one element, "
                f"it holds {len(machine.stack)}"
            )
        elif not _as_bool(machine.stack[0]):
            error = "final stack element is false"
    return ExecutionResult(
        success=error is None,
        final_stack=list(machine.stack),
        alt_stack=list(machine.alt),
        error=error,
        max_stack_depth=machine.max_depth,
    )