"""Instruction set of the RASM assembler: opcodes, directives and their metadata."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Sequence, Union

from rasm.errors import AssemblyError


class OpCode(IntEnum):
    """Machine opcodes understood by the virtual machine."""

    # Register and arithmetic operations
    MOV = 0x01
    ADD = 0x03
    SUB = 0x04
    MUL = 0x05
    DIV = 0x06
    MOD = 0x07
    AND = 0x08
    OR = 0x09
    XOR = 0x0A
    NOT = 0x0B

    # Comparison and conditional jumps
    CMP = 0x10
    JE = 0x11
    JNE = 0x12
    JL = 0x13
    JLE = 0x14
    JG = 0x15
    JGE = 0x16

    # Control flow
    JMP = 0x20
    CALL = 0x21
    RET = 0x22
    HALT = 0x23

    CEQ = 0x24
    CNE = 0x25
    CL = 0x26
    CG = 0x27
    CLE = 0x28
    CGE = 0x29

    PUSH = 0x30
    POP = 0x31

    # Shift and rotate
    SHL = 0x40
    SHR = 0x41
    SAR = 0x42
    ROL = 0x43
    ROR = 0x44

    # Memory access
    LOAD = 0x50
    STORE = 0x51
    LOADR = 0x52
    LOADB = 0x53
    STRB = 0x54
    SPRB = 0x55

    PRINT = 0x60
    PUTC = 0x61

    DRAW = 0x70
    CLS = 0x71
    INITDISPLAY = 0x72
    POLL = 0x73
    RDI = 0x74
    STD = 0x75
    STDI = 0x76
    RTD = 0x77
    STS = 0x78
    STSI = 0x79

    CLSM = 0x81

    ENABLESMOD = 0x90
    DISABLESMOD = 0x91


class Directive(Enum):
    """Pseudo-instructions expanded by the assembler itself."""

    STRS = -2
    DSTR = -3
    LDS = -4


Mnemonic = Union[OpCode, Directive]

# PUTC exists in the machine but has no source mnemonic; the mode switches
# are spelled differently in source than in the opcode table.
_HIDDEN = {OpCode.PUTC, OpCode.ENABLESMOD, OpCode.DISABLESMOD}

_MNEMONICS: dict[str, Mnemonic] = {
    **{op.name: op for op in OpCode if op not in _HIDDEN},
    "ALLOWMOD": OpCode.ENABLESMOD,
    "DISABLEMOD": OpCode.DISABLESMOD,
    **{directive.name: directive for directive in Directive},
}

_OPERAND_COUNTS: dict[OpCode, int] = {
    OpCode.MOV: 2,
    OpCode.ADD: 3,
    OpCode.MOD: 3,
    OpCode.SUB: 3,
    OpCode.AND: 3,
    OpCode.MUL: 3,
    OpCode.OR: 3,
    OpCode.XOR: 3,
    OpCode.NOT: 2,
    OpCode.SHL: 3,
    OpCode.SHR: 3,
    OpCode.SAR: 3,
    OpCode.ROL: 3,
    OpCode.ROR: 3,
    OpCode.PUSH: 1,
    OpCode.POP: 1,
    OpCode.PRINT: 2,
    OpCode.PUTC: 1,
    OpCode.JMP: 1,
    OpCode.JE: 1,
    OpCode.JNE: 1,
    OpCode.JL: 1,
    OpCode.JLE: 1,
    OpCode.JG: 1,
    OpCode.JGE: 1,
    OpCode.CALL: 1,
    OpCode.ENABLESMOD: 0,
    OpCode.DISABLESMOD: 0,
    OpCode.RET: 0,
    OpCode.HALT: 0,
    OpCode.POLL: 0,
    OpCode.CLS: 0,
    OpCode.CMP: 2,
    OpCode.LOAD: 2,
    OpCode.STORE: 2,
    OpCode.LOADR: 2,
    OpCode.CLSM: 2,
    OpCode.RDI: 2,
    OpCode.LOADB: 2,
    OpCode.DRAW: 0,
    OpCode.INITDISPLAY: 0,
    OpCode.SPRB: 3,
    OpCode.STRB: 3,
    OpCode.CEQ: 1,
    OpCode.CG: 1,
    OpCode.CGE: 1,
    OpCode.CL: 1,
    OpCode.CLE: 1,
    OpCode.STD: 1,
    OpCode.STDI: 1,
    OpCode.RTD: 1,
    OpCode.STS: 1,
    OpCode.STSI: 1,
    OpCode.CNE: 1,
}

_MNEMONIC_WIDTH = 15


def _ascii_upper(text: str) -> str:
    return "".join(ch.upper() if ch.isascii() else ch for ch in text)


def lookup_mnemonic(mnemonic: str) -> Mnemonic:
    """Return the opcode or directive for an upper-case mnemonic.

    Raises AssemblyError for an unknown mnemonic.
    """
    try:
        return _MNEMONICS[mnemonic]
    except KeyError:
        raise AssemblyError(f"Invalid opcode {mnemonic}") from None


def operand_count(op: Mnemonic) -> int:
    """Return how many operands an opcode takes, or -1 if it has no operand metadata."""
    if isinstance(op, OpCode):
        return _OPERAND_COUNTS.get(op, -1)
    return -1


def instruction_size(tokens: Sequence[str]) -> int:
    """Return the encoded size in bytes of a parsed line during address layout.

    Labels, directives, empty lines and unknown mnemonics occupy no space.
    """
    if not tokens:
        return 0
    head = _ascii_upper(tokens[0])[:_MNEMONIC_WIDTH]
    if head.startswith("_"):
        return 0
    try:
        op = lookup_mnemonic(head)
    except AssemblyError:
        return 0
    if isinstance(op, Directive):
        return 0
    return 1 + operand_count(op) * 3