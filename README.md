# limbscript

`limbscript` builds stack-machine scripts that do arithmetic on large
unsigned integers. Each integer is kept on the stack as a run of 30-bit
limbs, the most significant limb deepest and the least significant on top.
The library emits the opcode sequences that add, subtract, compare,
multiply, split into bits, halve, divide by three and invert such numbers.
A small interpreter is included, so a script can be run and checked
straight away.

## Installation

```
pip install limbscript
```

The `test` extra pulls in pytest for the test suite:

```
pip install "limbscript[test]"
```

## Modules

- `limbscript.script` — `Script`, an immutable sequence of opcodes and
  data pushes built from opcodes, integers, bytes, other scripts and nested
  iterables of these; `Script.encode()` gives the wire bytes and `len()` their
  length. `Opcode` lists the opcodes, `execute_script` runs a script and
  returns an `ExecutionResult` (`success`, `final_stack`, `alt_stack`,
  `error`, `max_stack_depth`). `ScriptError` is raised inside the
  interpreter when a script fails. `encode_number` and `decode_number`
  convert between integers and the minimal little-endian sign-magnitude
  number encoding.
- `limbscript.stack` — `BigIntSpec(n_bits)` describes an integer width,
  with the properties `n_limbs`, `head` (bits in the top limb) and
  `head_offset`; `U254` is the 254-bit width. `push_u32_le` and `push_hex`
  push constants; `zip_limbs`, `copy_zip`, `dup_zip`, `copy`, `roll` and
  `drop` move whole numbers around the stack. `LIMB_BITS` and `MAX_U30` hold
  the limb width and 2^30.
- `limbscript.add` — `add`, `double`, `add1`, plus the limb helpers
  `u30_add_carry` and `u30_add_nocarry`.
- `limbscript.sub` — `sub`, `u30_sub_borrow`, `u30_sub_noborrow`.
- `limbscript.cmp` — `is_zero`, `equal`, `equalverify`, `notequal`,
  `lessthan`, `lessthanorequal`, `greaterthan`, `greaterthanorequal`.
- `limbscript.bits` — `convert_to_bits` (bits left on the stack, most
  significant on top), `convert_to_bits_toaltstack` (bits moved to the alt
  stack, least significant on top), `u30_to_bits`, `u30_to_bits_toaltstack`.
- `limbscript.mul` — `mul`, the product of the two top numbers modulo 2^N,
  by double-and-add.
- `limbscript.inv` — `div2`, `div2rem`, `div3`, `div3rem`; the two stages of
  a binary modular inversion, `inv_stage1` (takes `modulus number`, leaves
  `s k` with `number * s = 2^k` modulo the modulus) and `inv_stage2`
  (replaces `k`, between N and 2N, with `2^-k` modulo a modulus given in
  hexadecimal); and the limb helpers `u30_shr1_carry` and `u30_div3_carry`.

Arithmetic wraps modulo 2^N, where N is the width in the `BigIntSpec`.
Positions passed as `a` and `b` count whole numbers from the top of the
stack: 0 is the topmost number, 1 the one beneath it.

## Example

```python
from limbscript.script import Script, Opcode, execute_script
from limbscript.stack import BigIntSpec, push_u32_le
from limbscript.add import add
from limbscript.cmp import equalverify

u254 = BigIntSpec(254)

a, b = 12345, 67890
script = Script(
    push_u32_le(u254, [a]),
    push_u32_le(u254, [b]),
    add(u254, 1, 0),
    push_u32_le(u254, [a + b]),
    equalverify(u254, 1, 0),
    Opcode.OP_TRUE,
)

result = execute_script(script)
assert result.success
print(len(script), "bytes")
```

`execute_script` does not raise on a failing script; it returns an
`ExecutionResult` whose `success` flag tells whether the script ran without
error and ended with a single true value on the stack, and whose `error`
says why it did not. Malformed input while a script is being built, such
as zipping a number with itself or a limb width out of range, raises
`ValueError` straight away.

## What it does not do

- There is no command-line tool; the package is a library.
- The interpreter knows only the stack, flow-control, comparison and
  small-integer arithmetic opcodes in `Opcode`. It has no hashing or
  signature opcodes, treats numeric operands longer than 4 bytes as an
  error, and fails a script once the main and alt stacks together hold more
  than 1000 elements.
- Scripts are built and run in memory; nothing is signed, stored or sent
  anywhere.