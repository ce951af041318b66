"""Command-line interface: a colourful EVM bytecode disassembler."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TextIO
from urllib.parse import urlsplit

from evmlens.disassembler import DisassemblyError, disassemble, get_stats
from evmlens.sources import (
    FileSource,
    OnChainSource,
    SourceError,
    StdinSource,
    decode_hex,
    fetch_bytes,
    parse_address,
)

PROGRAM = "evm-lens"
VERSION = "0.1.2"
DEFAULT_RPC_URL = "https://eth.llamarpc.com"
RULE = "=" * 50

_EPILOG = """EXAMPLES:
    evm-lens 60FF                              # Simple PUSH1 instruction from arg
    echo '0x60FF61ABCD00' | evm-lens --stdin   # From stdin
    evm-lens --file bytecode.txt               # From file
    evm-lens --address 0x... --rpc http://...  # From blockchain
    evm-lens 60FF61ABCD00 --stats              # Show disassembly + statistics"""


class Color(Enum):
    """ANSI foreground colours used in the output."""

    RED = "31"
    GREEN = "32"
    YELLOW = "33"
    BRIGHT_BLACK = "90"
    BRIGHT_RED = "91"
    BRIGHT_GREEN = "92"
    BRIGHT_YELLOW = "93"
    BRIGHT_BLUE = "94"
    BRIGHT_MAGENTA = "95"
    BRIGHT_CYAN = "96"
    BRIGHT_WHITE = "97"


@dataclass(frozen=True)
class Style:
    """A terminal text style: an optional colour, optionally bold."""

    color: Color | None = None
    bold: bool = False

    def sgr(self) -> str:
        codes = (["1"] if self.bold else []) + ([self.color.value] if self.color else [])
        return ";".join(codes)

    def paint(self, text: str, enabled: bool = True) -> str:
        codes = self.sgr()
        if not enabled or not codes:
            return text
        return f"\x1b[{codes}m{text}\x1b[0m"


_PLAIN = Style()
_MUTED = Style(Color.BRIGHT_BLACK)
_TITLE = Style(Color.BRIGHT_BLUE, bold=True)
_PROGRAM = Style(Color.BRIGHT_GREEN)

_STYLES_BY_NAME: dict[str, Style] = {
    **dict.fromkeys(("ADD", "SUB", "MUL", "DIV", "MOD", "ADDMOD", "MULMOD"), Style(Color.BRIGHT_YELLOW, True)),
    **dict.fromkeys(("LT", "GT", "SLT", "SGT", "EQ", "ISZERO"), Style(Color.YELLOW)),
    **dict.fromkeys(("MLOAD", "MSTORE", "MSTORE8", "MSIZE", "MCOPY"), Style(Color.BRIGHT_BLUE, True)),
    **dict.fromkeys(("SLOAD", "SSTORE"), Style(Color.BRIGHT_MAGENTA, True)),
    "KECCAK256": Style(Color.BRIGHT_CYAN, True),
    **dict.fromkeys(("JUMP", "JUMPI", "JUMPDEST"), Style(Color.BRIGHT_RED, True)),
    **dict.fromkeys(("CALL", "CALLCODE", "DELEGATECALL", "STATICCALL"), Style(Color.RED, True)),
    **dict.fromkeys(("CREATE", "CREATE2"), Style(Color.RED)),
    **dict.fromkeys(("STOP", "RETURN", "REVERT", "SELFDESTRUCT"), Style(Color.BRIGHT_WHITE, True)),
}


def categorize_opcode(name: str) -> Style:
    """Return the display style for an opcode mnemonic."""
    if name.startswith("PUSH"):
        return Style(Color.BRIGHT_GREEN, bold=True)
    if name.startswith(("POP", "DUP", "SWAP")):
        return Style(Color.GREEN)
    return _STYLES_BY_NAME.get(name, _PLAIN)


def _colors_enabled() -> bool:
    force = os.environ.get("CLICOLOR_FORCE")
    if force is not None and force != "0":
        return True
    if "NO_COLOR" in os.environ or os.environ.get("CLICOLOR") == "0":
        return False
    return sys.stdout.isatty()


@dataclass
class _Console:
    color: bool
    out: TextIO
    err: TextIO

    def paint(self, text: str, style: Style) -> str:
        return style.paint(text, self.color)

    def say(self, text: str = "") -> None:
        print(text, file=self.out)

    def warn(self, text: str = "") -> None:
        print(text, file=self.err)

    def header(self) -> None:
        self.say(self.paint("EVM BYTECODE DISASSEMBLY", _TITLE))
        self.say(self.paint(RULE, _MUTED))

    def footer(self, total: int) -> None:
        self.say(self.paint(RULE, _MUTED))
        count = self.paint(str(total), Style(Color.BRIGHT_GREEN, bold=True))
        self.say(f"{count} {self.paint('opcodes total', _MUTED)}")

    def opcode(self, position: int, name: str) -> None:
        offset = self.paint(f"{position:04x}", _MUTED)
        self.say(f"{offset} {self.paint('│', _MUTED)} {self.paint(name, categorize_opcode(name))}")

    def error(self, message: str) -> None:
        self.warn(f"{self.paint('Error:', Style(Color.BRIGHT_RED, bold=True))} {message}")

    def usage_hint(self) -> None:
        program = self.paint(PROGRAM, _PROGRAM)
        self.warn()
        self.warn(self.paint("Usage examples:", _TITLE))
        for example in (
            "60FF61ABCD00",
            "0x60FF61ABCD00",
            "--stdin",
            "--file bytecode.txt",
            f"--address 0x123... --rpc {DEFAULT_RPC_URL}",
            "60FF61ABCD00 --stats",
        ):
            self.warn(f"  {program} {example}")
        self.warn()
        self.warn(self.paint("The input should be valid hexadecimal EVM bytecode.", _MUTED))


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="A colorful EVM bytecode disassembler",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "hex",
        nargs="?",
        metavar="BYTECODE",
        help="Hexadecimal EVM bytecode to disassemble (if no other source specified)",
    )
    parser.add_argument("--stdin", action="store_true", help="Read bytecode from stdin")
    parser.add_argument("--file", metavar="FILE", help="Read bytecode from file")
    parser.add_argument("--address", metavar="ADDRESS", help="Ethereum address to fetch bytecode from")
    parser.add_argument(
        "--rpc",
        metavar="URL",
        default=DEFAULT_RPC_URL,
        help="RPC endpoint URL for fetching on-chain bytecode",
    )
    parser.add_argument("--stats", action="store_true", help="Show bytecode statistics after disassembly")
    parser.add_argument("-V", "--version", action="version", version=f"{PROGRAM} {VERSION}")
    return parser


def _check_conflicts(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    given = [
        label
        for label, present in (
            ("[BYTECODE]", args.hex is not None),
            ("--stdin", args.stdin),
            ("--file <FILE>", args.file is not None),
            ("--address <ADDRESS>", args.address is not None),
        )
        if present
    ]
    if len(given) > 1:
        parser.error(f"the argument '{given[0]}' cannot be used with '{given[1]}'")


def _parse_rpc_url(text: str) -> str:
    parts = urlsplit(text)
    if not parts.scheme or not (parts.netloc or parts.path):
        raise SourceError(f"Invalid RPC URL: {text}")
    return text


def get_bytes_from_args(args: argparse.Namespace) -> bytes:
    """Read bytecode from the single source selected on the command line."""
    match (args.hex, args.address, args.file, args.stdin):
        case (str() as hex_string, None, None, False):
            return decode_hex(hex_string)
        case (None, str() as address_text, None, False):
            rpc_text = args.rpc or DEFAULT_RPC_URL
            address = parse_address(address_text)
            rpc_url = _parse_rpc_url(rpc_text)
            return fetch_bytes(OnChainSource(address, rpc_url))
        case (None, None, str() as file_path, False):
            return fetch_bytes(FileSource(Path(file_path)))
        case _:
            return fetch_bytes(StdinSource())


def main(argv: list[str] | None = None) -> int:
    """Run the disassembler and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _check_conflicts(parser, args)
    console = _Console(_colors_enabled(), sys.stdout, sys.stderr)

    try:
        data = get_bytes_from_args(args)
    except SourceError as error:
        console.error(str(error))
        console.usage_hint()
        return 1

    try:
        instructions = disassemble(data)
    except DisassemblyError as error:
        console.error(f"Failed to disassemble bytecode: {error}")
        console.warn()
        console.warn(console.paint("This could happen if:", _TITLE))
        console.warn("  • The bytecode is malformed or incomplete")
        console.warn("  • The bytecode contains invalid opcodes")
        console.warn("  • The bytecode structure is corrupted")
        console.usage_hint()
        return 1

    console.header()
    for position, opcode in instructions:
        console.opcode(position, opcode.name)
    console.footer(len(instructions))

    if args.stats:
        console.say()
        try:
            stats = get_stats(data)
        except DisassemblyError as error:
            console.error(f"Failed to compute bytecode statistics: {error}")
        else:
            console.say(console.paint("BYTECODE STATISTICS", _TITLE))
            console.say(console.paint(RULE, _MUTED))
            console.say(f"Byte length: {stats.byte_len}")
            console.say(f"Number of opcodes: {stats.opcode_count}")
            console.say(f"Max stack depth: {stats.max_stack_depth}")

    return 0


if __name__ == "__main__":
    sys.exit(main())