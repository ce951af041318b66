"""Where bytecode comes from: hex text, standard input, files or a JSON-RPC node."""

from __future__ import annotations

import json
import string
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO, Union

import requests

_HEX_DIGITS = frozenset(string.hexdigits)
_ADDRESS_HEX_LENGTH = 40


class SourceError(Exception):
    """Raised when bytecode cannot be obtained from a source."""


@dataclass(frozen=True)
class StdinSource:
    """Hex-encoded bytecode read from a text stream, standard input by default."""

    stream: TextIO | None = None


@dataclass(frozen=True)
class FileSource:
    """Hex-encoded bytecode stored in a text file."""

    path: Path


@dataclass(frozen=True)
class OnChainSource:
    """Deployed contract code fetched from a JSON-RPC endpoint."""

    address: str
    rpc_url: str


Source = Union[StdinSource, FileSource, OnChainSource]


def decode_hex(text: str) -> bytes:
    """Decode a hex string, with or without a leading ``0x``, into bytes."""
    cleaned = text.strip()
    while cleaned.startswith("0x"):
        cleaned = cleaned[2:]

    if not cleaned:
        raise SourceError("Empty hex string provided")
    if len(cleaned) % 2:
        raise SourceError(
            f"Invalid hex string length ({len(cleaned)}). "
            "Hex strings must have an even number of characters"
        )
    if not all(char in _HEX_DIGITS for char in cleaned):
        raise SourceError("Invalid hex characters found. Only 0-9, a-f, and A-F are allowed")
    return bytes.fromhex(cleaned)


def parse_address(text: str) -> str:
    """Validate a 20-byte address and return it as lower-case ``0x``-prefixed hex."""
    digits = text[2:] if text.startswith("0x") else text
    if len(digits) != _ADDRESS_HEX_LENGTH or not all(char in _HEX_DIGITS for char in digits):
        raise SourceError(f"Invalid address: {text}")
    return "0x" + digits.lower()


def _parse_rpc_response(response: requests.Response) -> dict:
    try:
        payload = response.json()
    except ValueError as error:
        raise SourceError(f"Failed to parse RPC response: {error}") from error
    if not isinstance(payload, dict):
        raise SourceError("Failed to parse RPC response: expected a JSON object")
    result = payload.get("result")
    if result is not None and not isinstance(result, str):
        raise SourceError("Failed to parse RPC response: result is not a string")
    return payload


def fetch_on_chain_bytecode(address: str, rpc_url: str) -> bytes:
    """Fetch the code deployed at ``address`` with an ``eth_getCode`` call."""
    normalized = parse_address(address)
    request = {
        "jsonrpc": "2.0",
        "method": "eth_getCode",
        "params": [normalized, "latest"],
        "id": 1,
    }
    try:
        response = requests.post(rpc_url, json=request)
    except requests.RequestException as error:
        raise SourceError(f"Failed to send RPC request to {rpc_url}: {error}") from error

    payload = _parse_rpc_response(response)

    error = payload.get("error")
    if error is not None:
        raise SourceError(f"RPC error: {json.dumps(error, separators=(',', ':'))}")

    hex_code = payload.get("result")
    if hex_code is None:
        raise SourceError("Missing result in RPC response")
    if hex_code == "0x":
        raise SourceError(
            f"Address {normalized} has no contract code (might be an EOA or empty contract)"
        )
    return decode_hex(hex_code)


def _read_stdin(source: StdinSource) -> bytes:
    stream = source.stream if source.stream is not None else sys.stdin
    try:
        content = stream.read()
    except (OSError, UnicodeDecodeError) as error:
        raise SourceError(f"Failed to read from stdin: {error}") from error
    trimmed = content.strip()
    if not trimmed:
        raise SourceError("No input provided via stdin")
    return decode_hex(trimmed)


def _read_file(source: FileSource) -> bytes:
    path = Path(source.path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise SourceError(f'Failed to read file "{path}": {error}') from error
    trimmed = content.strip()
    if not trimmed:
        raise SourceError(f'File "{path}" is empty')
    return decode_hex(trimmed)


def fetch_bytes(source: Source) -> bytes:
    """Obtain raw bytecode from any supported source."""
    match source:
        case StdinSource():
            return _read_stdin(source)
        case FileSource():
            return _read_file(source)
        case OnChainSource(address=address, rpc_url=rpc_url):
            return fetch_on_chain_bytecode(address, rpc_url)
    raise TypeError(f"Unsupported bytecode source: {source!r}")