# evmlens

A colorful disassembler for Ethereum Virtual Machine bytecode. It turns raw
hex bytecode into a listing of opcodes, each with its byte offset. It can also
report simple statistics: byte length, opcode count and maximum stack depth.

## Installation

```
pip install .
```

This installs the `evm-lens` command.

## Command line

To disassemble bytecode given as an argument, run the following. The `0x`
prefix is optional:

```
evm-lens 60FF61ABCD00
evm-lens 0x60FF61ABCD00
```

To read bytecode from standard input or from a file:

```
echo '0x60FF61ABCD00' | evm-lens --stdin
evm-lens --file bytecode.txt
```

If no source is given, the bytecode is read from standard input.

To fetch deployed contract code from an Ethereum JSON-RPC endpoint with
`eth_getCode`:

```
evm-lens --address 0x0000000000000000000000000000000000000001 --rpc http://localhost:8545
```

If `--rpc` is omitted, a built-in public endpoint is used. The address must be
40 hex digits and may have a `0x` prefix.

To print statistics after the listing, add `--stats`:

```
evm-lens 60FF61ABCD00 --stats
```

Example output:

```
EVM BYTECODE DISASSEMBLY
==================================================
0000 │ PUSH1
0002 │ PUSH2
0005 │ STOP
==================================================
3 opcodes total
```

`evm-lens --version` prints the version. `evm-lens --help` lists the options.

Only one of `--stdin`, `--file`, `--address` and the positional bytecode may be
given. If you give more than one, the command stops with a usage error. On any
other error the command prints a message to standard error and exits with
status 1.

Opcodes are coloured by category: stack, arithmetic, comparison, memory,
storage, hashing, control flow, calls and halting. Colour is used only when
standard output is a terminal. Setting `NO_COLOR` or `CLICOLOR=0` turns colour
off. Setting `CLICOLOR_FORCE` to any value other than `0` turns it on.

## How bytecode is read

- Push data is skipped. Each listed position is the start of an instruction.
- Truncated push data at the end counts as zero-padded.
- If the last instruction is not `STOP`, an implicit `STOP` is appended.
  For example, `60FF` lists `PUSH1` at 0 and `STOP` at 2.
- Disassembly ends at the first byte that is not a defined opcode.

## Library

```python
from evmlens.disassembler import disassemble, get_stats
from evmlens.sources import decode_hex

code = decode_hex("0x60FF600101")
for position, opcode in disassemble(code):
    print(position, opcode.name)

stats = get_stats(code)
print(stats.byte_len, stats.opcode_count, stats.max_stack_depth)  # 6 4 2
```

`disassemble` returns a list of `Instruction` named tuples, each holding
`position` and `opcode`.

The errors work as follows:

- All disassembly errors derive from `DisassemblyError`.
- `disassemble` and `get_stats` raise `EmptyBytecodeError` for empty input.
- `disassemble` raises `InvalidBytecodeError` when no valid opcode is found.
- `decode_hex` raises `SourceError` for empty strings, odd lengths and non-hex
  characters.

The module `evmlens.sources` also provides these:

- `parse_address` validates an address.
- `fetch_on_chain_bytecode(address, rpc_url)` performs the `eth_getCode` call.
- `fetch_bytes` reads from a `StdinSource`, `FileSource` or `OnChainSource`.

Lower-level helpers:

- `evmlens.opcodes`: the `OpCode` table, with `lookup`, `opcode_by_name`,
  `iter_instructions` and `OpCode.io_diff()`.
- `evmlens.stats`: `compute_stats`, `compute_opcode_count`, `get_byte_len`,
  `compute_max_stack_depth`, the `Stats` record and `UnknownOpcodeError`.

## Running the tests

```
pip install ".[test]"
pytest
```