"""Two-pass RASM assembler producing VM binary images."""

from __future__ import annotations

import argparse
import os
import re
import string
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from rasm.errors import AssemblyError
from rasm.labels import LabelMap
from rasm.opcodes import Directive, OpCode, instruction_size, lookup_mnemonic, operand_count
from rasm.parser import _strtol, parse_all_lines, split_lines
from rasm.tables import SPRITE_SIZE, SpriteTable, StringTable

_PREAMBLE = "JMP _START\n"
_DELIMITER = b"\xff" * 8
_STRS_OPCODE = 0x80
_LDS_OPCODE = 0x83
_OUTPUT_NAME = "a.bin"
_SOURCE_ENCODING = "latin-1"

_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

_LABEL_OPERAND_OPS = frozenset(
    {
        OpCode.JMP, OpCode.CALL,
        OpCode.JE, OpCode.JNE, OpCode.JL, OpCode.JLE, OpCode.JG, OpCode.JGE,
        OpCode.CEQ, OpCode.CNE, OpCode.CL, OpCode.CLE, OpCode.CG, OpCode.CGE,
    }
)


@dataclass
class AssembledProgram:
    """Encoded code section together with its string and sprite tables."""

    code: bytes
    strings: StringTable = field(default_factory=StringTable)
    sprites: SpriteTable = field(default_factory=SpriteTable)

    def to_bytes(self) -> bytes:
        """Lay out the binary image: code, delimiter, strings, delimiter, sprites."""
        return (
            self.code
            + _DELIMITER
            + self.strings.to_bytes()
            + _DELIMITER
            + self.sprites.to_bytes()
        )


def parse_int(text: str) -> int:
    """Parse the leading integer of text (decimal, 0x hex or 0 octal); 0 if none."""
    return _strtol(text)


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def encode_operand(operand: str) -> bytes:
    """Encode an operand as a mode byte and a big-endian 16-bit value.

    ``%n`` is a register (mode 0); ``#n`` or a bare number is an immediate (mode 1).
    """
    if operand.startswith("%"):
        mode, text = 0x00, operand[1:]
    elif operand.startswith("#"):
        mode, text = 0x01, operand[1:]
    else:
        mode, text = 0x01, operand
    value = parse_int(text) & 0xFFFF
    return bytes((mode, value >> 8, value & 0xFF))


def _char_operand(prefix: str, code: int) -> bytes:
    """Encode an operand whose text is the prefix followed by one raw character."""
    return encode_operand(prefix + chr(code & 0xFF))


def _register(token: str, marker: str, directive: str) -> int:
    number = _atoi(token[1:]) if token.startswith(marker) else -1
    if number < 0:
        raise AssemblyError(f"{directive} requires a valid register")
    return number


def _string_literal(token: str, directive: str) -> str:
    if len(token) < 2 or not (token.startswith('"') and token.endswith('"')):
        raise AssemblyError(f"{directive} string literal must be quoted")
    return token[1:-1]


def _layout(lines: list[list[str]]) -> LabelMap:
    labels = LabelMap()
    pc = 0
    for tokens in lines:
        if tokens[0].startswith("_"):
            labels.add(tokens[0], pc)
            continue
        pc = (pc + instruction_size(tokens)) & 0xFFFF
    return labels


def _encode_dstr(out: bytearray, tokens: list[str]) -> None:
    if len(tokens) < 4:
        raise AssemblyError("DSTR requires register, string literal, and address")
    reg = ord("0") + _register(tokens[1], "R", "DSTR")
    content = _string_literal(tokens[2], "DSTR")
    start = parse_int(tokens[3]) & 0xFFFF
    for offset, code in enumerate([*map(ord, content), 0]):
        out.append(OpCode.MOV)
        out += _char_operand("%", reg)
        out += _char_operand("#", code)
        out += bytes(3)
        out.append(OpCode.STORE)
        out += _char_operand("%", reg)
        out += encode_operand(f"#{start + offset}")
        out += bytes(3)


def _encode_strs(out: bytearray, tokens: list[str], strings: StringTable) -> None:
    if len(tokens) < 3:
        raise AssemblyError("STRS requires register and string literal")
    reg = ord("0") + _register(tokens[1], "%", "STRS")
    index = strings.add(_string_literal(tokens[2], "STRS"))
    dest = parse_int(tokens[3]) & 0xFFFF if len(tokens) > 3 else 0
    out.append(_STRS_OPCODE)
    out += _char_operand("%", reg)
    out += _char_operand("#", index)
    out += _char_operand("#", dest)


def _encode_lds(out: bytearray, tokens: list[str], sprites: SpriteTable) -> None:
    if len(tokens) < 3:
        raise AssemblyError("LDS requires register and sprite data")
    reg = ord("0") + _register(tokens[1], "%", "LDS")
    bracketed = tokens[2]
    if not (bracketed.startswith("[") and bracketed.endswith("]")) or len(bracketed) < 2:
        raise AssemblyError("Sprite data must be in [brackets]")
    values = [t for t in bracketed[1:-1].split(" ") if t][:SPRITE_SIZE]
    if len(values) != SPRITE_SIZE:
        raise AssemblyError(f"Sprite must have exactly {SPRITE_SIZE} bytes")
    index = sprites.add(bytes(parse_int(v) & 0xFF for v in values))
    dest = parse_int(tokens[3]) & 0xFFFF if len(tokens) > 3 else 0
    out.append(_LDS_OPCODE)
    out += _char_operand("%", reg)
    out += _char_operand("#", index)
    out += _char_operand("#", dest)


def _encode_instruction(out: bytearray, op: OpCode, tokens: list[str], labels: LabelMap) -> None:
    count = operand_count(op)
    operands = tokens[1 : 1 + count]
    if len(operands) < count:
        raise AssemblyError(f"Missing operands for {tokens[0]}")
    out.append(op)
    for operand in operands:
        if op in _LABEL_OPERAND_OPS and operand.startswith("_"):
            out += encode_operand(f"#{labels.address_of(operand)}")
        else:
            out += encode_operand(operand)


def assemble_source(source: str) -> AssembledProgram:
    """Assemble RASM source text; execution starts at the ``_START`` label."""
    lines = [
        [tokens[0].translate(_UPPER), *tokens[1:]]
        for tokens in parse_all_lines(split_lines(_PREAMBLE + source))
        if tokens
    ]
    labels = _layout(lines)

    program = AssembledProgram(code=b"")
    out = bytearray()
    for tokens in lines:
        if tokens[0].startswith("_"):
            continue
        op = lookup_mnemonic(tokens[0])
        if op is Directive.DSTR:
            _encode_dstr(out, tokens)
        elif op is Directive.STRS:
            _encode_strs(out, tokens, program.strings)
        elif op is Directive.LDS:
            _encode_lds(out, tokens, program.sprites)
        else:
            _encode_instruction(out, op, tokens, labels)
    program.code = bytes(out)
    return program


def _hex_dump(code: bytes) -> str:
    parts = []
    for offset, byte in enumerate(code):
        if offset % 4 == 0:
            parts.append("\n")
        parts.append(f"0x{byte:02X} ")
    return "".join(parts)


def assemble(
    filepath: str | os.PathLike[str],
    out_dir: str | os.PathLike[str],
    quiet: bool = False,
    verbose: bool = False,
) -> Path:
    """Assemble a source file into ``a.bin`` inside out_dir and return its path."""
    source = Path(filepath).read_bytes().decode(_SOURCE_ENCODING)

    if not quiet:
        for step in (
            "Running codemods...",
            "Parsing...",
            "Mapping labels...",
            "Generating static string table...",
            "Encoding sprites...",
            "Linking labels...",
        ):
            print(step)

    program = assemble_source(source)

    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)
    target = out_path / _OUTPUT_NAME

    if verbose:
        print("\nAssembled bytes:" + _hex_dump(program.code), end="")
    if not quiet:
        print(f"\n\nCompiled: {len(program.code)} Bytes")

    target.write_bytes(program.to_bytes())
    return target


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="rasm", description="Assemble a RASM source file.")
    parser.add_argument("source", help="path of the .rasm source file")
    parser.add_argument("out_dir", nargs="?", default="rasm-build", help="output directory")
    parser.add_argument("-q", "--quiet", action="store_true", help="suppress progress output")
    parser.add_argument("-v", "--verbose", action="store_true", help="dump the assembled bytes")
    args = parser.parse_args(argv)

    try:
        assemble(args.source, args.out_dir, quiet=args.quiet, verbose=args.verbose)
    except AssemblyError as exc:
        print(f"COMPILATION ERROR: {exc}")
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())