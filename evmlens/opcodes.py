"""EVM opcode table and instruction iteration over legacy bytecode."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

STOP = 0x00
PUSH1 = 0x60
PUSH32 = 0x7F

#: Leading bytes of an EIP-7702 delegation designator.
DELEGATION_PREFIX = b"\xef\x01"


@dataclass(frozen=True, slots=True)
class OpCode:
    """A defined EVM opcode with its stack inputs, outputs and immediate size."""

    code: int
    name: str
    inputs: int
    outputs: int
    immediate_size: int = 0

    def io_diff(self) -> int:
        """Net change in stack height caused by executing this opcode."""
        return self.outputs - self.inputs

    def __str__(self) -> str:
        return self.name


_BASE_OPCODES: tuple[tuple[int, str, int, int], ...] = (
    (0x00, "STOP", 0, 0),
    (0x01, "ADD", 2, 1),
    (0x02, "MUL", 2, 1),
    (0x03, "SUB", 2, 1),
    (0x04, "DIV", 2, 1),
    (0x05, "SDIV", 2, 1),
    (0x06, "MOD", 2, 1),
    (0x07, "SMOD", 2, 1),
    (0x08, "ADDMOD", 3, 1),
    (0x09, "MULMOD", 3, 1),
    (0x0A, "EXP", 2, 1),
    (0x0B, "SIGNEXTEND", 2, 1),
    (0x10, "LT", 2, 1),
    (0x11, "GT", 2, 1),
    (0x12, "SLT", 2, 1),
    (0x13, "SGT", 2, 1),
    (0x14, "EQ", 2, 1),
    (0x15, "ISZERO", 1, 1),
    (0x16, "AND", 2, 1),
    (0x17, "OR", 2, 1),
    (0x18, "XOR", 2, 1),
    (0x19, "NOT", 1, 1),
    (0x1A, "BYTE", 2, 1),
    (0x1B, "SHL", 2, 1),
    (0x1C, "SHR", 2, 1),
    (0x1D, "SAR", 2, 1),
    (0x20, "KECCAK256", 2, 1),
    (0x30, "ADDRESS", 0, 1),
    (0x31, "BALANCE", 1, 1),
    (0x32, "ORIGIN", 0, 1),
    (0x33, "CALLER", 0, 1),
    (0x34, "CALLVALUE", 0, 1),
    (0x35, "CALLDATALOAD", 1, 1),
    (0x36, "CALLDATASIZE", 0, 1),
    (0x37, "CALLDATACOPY", 3, 0),
    (0x38, "CODESIZE", 0, 1),
    (0x39, "CODECOPY", 3, 0),
    (0x3A, "GASPRICE", 0, 1),
    (0x3B, "EXTCODESIZE", 1, 1),
    (0x3C, "EXTCODECOPY", 4, 0),
    (0x3D, "RETURNDATASIZE", 0, 1),
    (0x3E, "RETURNDATACOPY", 3, 0),
    (0x3F, "EXTCODEHASH", 1, 1),
    (0x40, "BLOCKHASH", 1, 1),
    (0x41, "COINBASE", 0, 1),
    (0x42, "TIMESTAMP", 0, 1),
    (0x43, "NUMBER", 0, 1),
    (0x44, "DIFFICULTY", 0, 1),
    (0x45, "GASLIMIT", 0, 1),
    (0x46, "CHAINID", 0, 1),
    (0x47, "SELFBALANCE", 0, 1),
    (0x48, "BASEFEE", 0, 1),
    (0x49, "BLOBHASH", 1, 1),
    (0x4A, "BLOBBASEFEE", 0, 1),
    (0x50, "POP", 1, 0),
    (0x51, "MLOAD", 1, 1),
    (0x52, "MSTORE", 2, 0),
    (0x53, "MSTORE8", 2, 0),
    (0x54, "SLOAD", 1, 1),
    (0x55, "SSTORE", 2, 0),
    (0x56, "JUMP", 1, 0),
    (0x57, "JUMPI", 2, 0),
    (0x58, "PC", 0, 1),
    (0x59, "MSIZE", 0, 1),
    (0x5A, "GAS", 0, 1),
    (0x5B, "JUMPDEST", 0, 0),
    (0x5C, "TLOAD", 1, 1),
    (0x5D, "TSTORE", 2, 0),
    (0x5E, "MCOPY", 3, 0),
    (0x5F, "PUSH0", 0, 1),
    (0xF0, "CREATE", 3, 1),
    (0xF1, "CALL", 7, 1),
    (0xF2, "CALLCODE", 7, 1),
    (0xF3, "RETURN", 2, 0),
    (0xF4, "DELEGATECALL", 6, 1),
    (0xF5, "CREATE2", 4, 1),
    (0xFA, "STATICCALL", 6, 1),
    (0xFD, "REVERT", 2, 0),
    (0xFE, "INVALID", 0, 0),
    (0xFF, "SELFDESTRUCT", 1, 0),
)


def _build_table() -> dict[int, OpCode]:
    table = {code: OpCode(code, name, inputs, outputs) for code, name, inputs, outputs in _BASE_OPCODES}
    for n in range(1, 33):
        code = PUSH1 - 1 + n
        table[code] = OpCode(code, f"PUSH{n}", 0, 1, n)
    for n in range(1, 17):
        dup = 0x7F + n
        swap = 0x8F + n
        table[dup] = OpCode(dup, f"DUP{n}", n, n + 1)
        table[swap] = OpCode(swap, f"SWAP{n}", n + 1, n + 1)
    for n in range(5):
        code = 0xA0 + n
        table[code] = OpCode(code, f"LOG{n}", n + 2, 0)
    return table


_BY_CODE = _build_table()
_BY_NAME = {op.name: op for op in _BY_CODE.values()}


def lookup(code: int) -> OpCode | None:
    """Return the opcode for a byte value, or None if the byte is not defined."""
    return _BY_CODE.get(code)


def opcode_by_name(name: str) -> OpCode:
    """Return the opcode with the given mnemonic (case-insensitive)."""
    try:
        return _BY_NAME[name.upper()]
    except KeyError:
        raise KeyError(f"Unknown opcode name: {name}") from None


def _immediate_size(byte: int) -> int:
    return byte - PUSH1 + 1 if PUSH1 <= byte <= PUSH32 else 0


def iter_instructions(code: bytes) -> Iterator[tuple[int, int]]:
    """Yield ``(position, byte)`` for each instruction of legacy bytecode.

    Push data is skipped. The code is treated as analysed for execution:
    truncated trailing push data counts as zero-padded, and a STOP is
    yielded at the end when the last instruction is not already a STOP.
    Bytes that are not defined opcodes are yielded as well.
    """
    position = 0
    last: int | None = None
    end = len(code)
    while position < end:
        byte = code[position]
        yield position, byte
        last = byte
        position += 1 + _immediate_size(byte)
    if last != STOP:
        yield position, STOP