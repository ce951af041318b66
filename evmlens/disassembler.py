"""Disassembly of raw EVM bytecode into positioned opcodes."""

from __future__ import annotations

from typing import NamedTuple

from evmlens.opcodes import DELEGATION_PREFIX, OpCode, iter_instructions, lookup
from evmlens.stats import Stats, UnknownOpcodeError, compute_stats

_DELEGATION_LENGTH = 23


class DisassemblyError(Exception):
    """Base class for errors raised while reading bytecode."""


class EmptyBytecodeError(DisassemblyError):
    """The bytecode holds no bytes."""

    def __init__(self) -> None:
        super().__init__("Bytecode is empty")


class InvalidBytecodeError(DisassemblyError):
    """The bytecode cannot be interpreted."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid bytecode: {message}")


class MalformedInstructionError(DisassemblyError):
    """An instruction carries an opcode that is not defined."""

    def __init__(self, position: int, byte: int) -> None:
        self.position = position
        self.byte = byte
        super().__init__(f"Malformed instruction at position {position}: invalid opcode 0x{byte:02x}")


class Instruction(NamedTuple):
    """An opcode and the byte offset at which it starts."""

    position: int
    opcode: OpCode


def _checked(data: bytes) -> bytes:
    code = bytes(data)
    if not code:
        raise EmptyBytecodeError()
    if code[:2] == DELEGATION_PREFIX:
        if len(code) != _DELEGATION_LENGTH:
            raise InvalidBytecodeError("Eip7702 is not 23 bytes long")
        if code[2] != 0:
            raise InvalidBytecodeError("Unsupported Eip7702 version.")
    return code


def disassemble(data: bytes) -> list[Instruction]:
    """Decode bytecode into instructions, stopping at the first undefined opcode."""
    code = _checked(data)
    instructions: list[Instruction] = []
    if code[:2] != DELEGATION_PREFIX:
        for position, byte in iter_instructions(code):
            opcode = lookup(byte)
            if opcode is None:
                break
            instructions.append(Instruction(position, opcode))
    if not instructions:
        raise InvalidBytecodeError("No valid opcodes found")
    return instructions


def get_stats(data: bytes) -> Stats:
    """Validate bytecode and compute its statistics."""
    code = _checked(data)
    try:
        return compute_stats(code)
    except UnknownOpcodeError as error:
        raise MalformedInstructionError(0, error.opcode) from error