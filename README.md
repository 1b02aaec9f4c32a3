# rasm

A two-pass assembler for RASM source files. It resolves labels, encodes
instructions and their operands, and writes a binary image that holds the
program bytes, a table of static strings and a table of 8-byte sprites.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Command line

```
rasm program.rasm build/
```

This assembles `program.rasm` and writes `build/a.bin`, creating the output
directory and its parents if needed. The output directory is optional and
defaults to `rasm-build`.

Options:

- `-q`, `--quiet`: do not print the progress messages or the compiled size.
- `-v`, `--verbose`: print the assembled code bytes, four per line.

On an assembly error the command prints `COMPILATION ERROR: <message>` and
exits with status 1; a file that cannot be read or written also gives
status 1.

## Library use

```python
from rasm.assembler import assemble, assemble_source

program = assemble_source("_START\nMOV %0, #5\nHALT\n")
image = program.to_bytes()          # code, delimiter, strings, delimiter, sprites

path = assemble("program.rasm", "build", quiet=True)   # returns build/a.bin
```

`assemble_source` returns an `AssembledProgram` with the fields `code`,
`strings` (a `StringTable`) and `sprites` (a `SpriteTable`). It raises
`rasm.errors.AssemblyError` for an unknown mnemonic, missing operands, an
undefined or redefined label, and malformed `DSTR`, `STRS` or `LDS` lines.
Operands beyond the count an instruction takes are ignored.

Every program begins with an implicit `JMP _START`, so a source file must
define the `_START` label.

Other helpers in `rasm.assembler`:

- `parse_int(text)`: leading integer of a string, in decimal, `0x` hex or
  `0` octal; `0` if there is none.
- `encode_operand(operand)`: the three-byte encoding of one operand.

## Source syntax

- One instruction per line, at most four tokens; commas are ignored and
  everything after `;` is a comment.
- Mnemonics are case-insensitive. Labels start with `_`.
- `%n` is a register, `#n` or a bare number is an immediate.
- Jump, call and conditional instructions (`JMP`, `CALL`, `JE`, `JNE`,
  `JL`, `JLE`, `JG`, `JGE`, `CEQ`, `CNE`, `CL`, `CLE`, `CG`, `CGE`) accept a
  label as operand.
- Directives:
  - `STRS %r, "text" [, addr]` adds the string to the string table.
  - `DSTR Rr, "text", addr` expands into `MOV`/`STORE` pairs that write the
    string and its terminating NUL into memory from `addr`.
  - `LDS %r, [b0 b1 ... b7] [, addr]` adds an 8-byte sprite to the sprite
    table.

## Output layout

1. Instruction bytes: one opcode byte followed by three bytes per operand
   (a mode byte, `0x00` for a register and `0x01` for an immediate, then a
   big-endian 16-bit value).
2. Eight `0xFF` bytes.
3. The string table: each string NUL-terminated, padded to an even length.
4. Eight `0xFF` bytes.
5. The sprite table: eight bytes per sprite.

## Other modules

- `rasm.opcodes`: the `OpCode` and `Directive` enums, `lookup_mnemonic`,
  `operand_count` and `instruction_size`.
- `rasm.parser`: `split_lines`, `parse_line`, `parse_all_lines` and
  `parse_hex_string`.
- `rasm.labels`: `LabelMap`.
- `rasm.tables`: `StringTable` and `SpriteTable`.
- `rasm.heap`: `Heap`, a first-fit block allocator over a fixed arena of
  65,535 bytes by default, with `malloc`, `calloc`, `realloc`, `free`,
  `blocks()`, and text reports from `leak_report()` and `dump()`.
  `malloc` raises `MemoryError` when no block is large enough.

## What it does not do

The package only produces binary images. It has no virtual machine: it
cannot run, debug or display the programs it assembles.