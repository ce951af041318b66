"""Statistics over EVM bytecode: size, instruction count and stack depth."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from evmlens.opcodes import DELEGATION_PREFIX, iter_instructions, lookup


@dataclass(frozen=True)
class Stats:
    """Summary figures for a piece of bytecode."""

    byte_len: int
    opcode_count: int
    max_stack_depth: int


class StatsError(Exception):
    """Raised when statistics cannot be computed."""


class UnknownOpcodeError(StatsError):
    """An opcode with no stack information was met."""

    def __init__(self, opcode: int) -> None:
        self.opcode = opcode
        super().__init__(f"Unknown opcode: 0x{opcode:02x}")


def _is_delegation(code: bytes) -> bool:
    return code[:2] == DELEGATION_PREFIX


def _instructions(bytecode: bytes) -> Iterator[tuple[int, int]]:
    code = bytes(bytecode)
    if _is_delegation(code):
        return iter(())
    return iter_instructions(code)


def compute_stats(bytecode: bytes) -> Stats:
    """Compute byte length, instruction count and maximum stack depth."""
    return Stats(
        byte_len=get_byte_len(bytecode),
        opcode_count=compute_opcode_count(bytecode),
        max_stack_depth=compute_max_stack_depth(bytecode),
    )


def compute_opcode_count(bytecode: bytes) -> int:
    """Number of instructions, push data excluded."""
    return sum(1 for _ in _instructions(bytecode))


def get_byte_len(bytecode: bytes) -> int:
    """Length of the bytecode as analysed for execution (including padding)."""
    code = bytes(bytecode)
    if _is_delegation(code):
        return len(code)
    *_, (last_position, _) = iter_instructions(code)
    return last_position + 1


def compute_max_stack_depth(bytecode: bytes) -> int:
    """Highest running stack height, starting from an empty stack.

    The walk stops at the first byte that is not a defined opcode.
    """
    depth = 0
    max_depth = 0
    for _, byte in _instructions(bytecode):
        opcode = lookup(byte)
        if opcode is None:
            break
        depth += opcode.io_diff()
        max_depth = max(max_depth, depth)
    return max_depth