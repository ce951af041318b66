"""Disassembler, statistics and bytecode sources for EVM bytecode."""

__version__ = "0.1.2"