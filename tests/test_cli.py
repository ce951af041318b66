import io

import pytest
import responses

from evmlens.cli import Color, Style, build_parser, categorize_opcode, get_bytes_from_args, main

SAMPLE_BYTECODE = "60ff61abcd00"
SAMPLE_BYTECODE_WITH_PREFIX = "0x60ff61abcd00"
INVALID_HEX = "60gg"
RPC_URL = "http://127.0.0.1:8545/"


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def rpc_mock():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def set_stdin(monkeypatch, text):
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("PUSH1", Style(Color.BRIGHT_GREEN, True)),
        ("PUSH0", Style(Color.BRIGHT_GREEN, True)),
        ("POP", Style(Color.GREEN)),
        ("DUP3", Style(Color.GREEN)),
        ("SWAP1", Style(Color.GREEN)),
        ("ADD", Style(Color.BRIGHT_YELLOW, True)),
        ("ISZERO", Style(Color.YELLOW)),
        ("MSTORE", Style(Color.BRIGHT_BLUE, True)),
        ("SLOAD", Style(Color.BRIGHT_MAGENTA, True)),
        ("KECCAK256", Style(Color.BRIGHT_CYAN, True)),
        ("JUMPI", Style(Color.BRIGHT_RED, True)),
        ("DELEGATECALL", Style(Color.RED, True)),
        ("CREATE2", Style(Color.RED)),
        ("REVERT", Style(Color.BRIGHT_WHITE, True)),
        ("CALLER", Style()),
    ],
)
def test_categorize_opcode(name, expected):
    assert categorize_opcode(name) == expected


def test_style_paint():
    assert Style(Color.BRIGHT_GREEN, True).paint("PUSH1") == "\x1b[1;92mPUSH1\x1b[0m"
    assert Style(Color.BRIGHT_GREEN, True).paint("PUSH1", enabled=False) == "PUSH1"
    assert Style().paint("CALLER") == "CALLER"


def test_hex_input_valid_bytecode(capsys):
    assert main([SAMPLE_BYTECODE]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "0000 │ PUSH1" in out
    assert "0002 │ PUSH2" in out
    assert "0005 │ STOP" in out
    assert "3 opcodes total" in out


def test_hex_input_invalid_characters(capsys):
    assert main([INVALID_HEX]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Invalid hex characters found" in err


def test_stdin_input_valid_bytecode(monkeypatch, capsys):
    set_stdin(monkeypatch, SAMPLE_BYTECODE_WITH_PREFIX)
    assert main(["--stdin"]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "PUSH1" in out


def test_stdin_input_empty(monkeypatch, capsys):
    set_stdin(monkeypatch, "")
    assert main(["--stdin"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "No input provided via stdin" in err


def test_no_arguments_reads_stdin(monkeypatch, capsys):
    set_stdin(monkeypatch, SAMPLE_BYTECODE)
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "PUSH1" in out


def test_file_input_valid_bytecode(tmp_path, capsys):
    path = tmp_path / "bytecode.txt"
    path.write_text(SAMPLE_BYTECODE + "\n")
    assert main(["--file", str(path)]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "PUSH1" in out


def test_file_input_nonexistent_file(tmp_path, capsys):
    assert main(["--file", str(tmp_path / "nonexistent" / "file.txt")]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Failed to read file" in err


def test_address_input_valid_contract(rpc_mock, capsys):
    rpc_mock.add(
        responses.POST, RPC_URL, json={"jsonrpc": "2.0", "result": "0x" + SAMPLE_BYTECODE, "id": 1}
    )
    code = main(["--address", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", "--rpc", RPC_URL])
    assert code == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "PUSH1" in out


def test_address_input_no_contract_code(rpc_mock, capsys):
    rpc_mock.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "result": "0x", "id": 1})
    code = main(["--address", "0x742d35Cc6634C0532925a3b8D56f3a1f0b9CF81b", "--rpc", RPC_URL])
    assert code == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "has no contract code" in err


def test_address_input_network_error(rpc_mock, capsys):
    code = main(["--address", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", "--rpc", "http://localhost:1"])
    assert code == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Failed to send RPC request" in err


def test_address_input_invalid_address(capsys):
    assert main(["--address", "invalid_address", "--rpc", RPC_URL]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Invalid address" in err


def test_invalid_rpc_url(capsys):
    code = main(["--address", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", "--rpc", "not a url"])
    assert code == 1
    assert "Invalid RPC URL: not a url" in capsys.readouterr().err


def test_conflicting_arguments(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--stdin", "--file", "test.txt"])
    assert excinfo.value.code == 2
    assert "cannot be used with" in capsys.readouterr().err


def test_help_output(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "A colorful EVM bytecode disassembler" in out
    for flag in ("--stdin", "--file", "--address", "--rpc"):
        assert flag in out


def test_stats_output(capsys):
    assert main([SAMPLE_BYTECODE, "--stats"]) == 0
    out = capsys.readouterr().out
    assert "BYTECODE STATISTICS" in out
    assert "Byte length: 6" in out
    assert "Number of opcodes: 3" in out
    assert "Max stack depth: 2" in out


def test_disassembly_failure(capsys):
    assert main(["ef0001"]) == 1
    err = capsys.readouterr().err
    assert "Failed to disassemble bytecode: Invalid bytecode" in err
    assert "This could happen if:" in err


def test_forced_colors(monkeypatch, capsys):
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    assert main(["60ff"]) == 0
    out = capsys.readouterr().out
    assert "\x1b[1;92mPUSH1\x1b[0m" in out
    assert "\x1b[1;97mSTOP\x1b[0m" in out


def test_get_bytes_from_args_hex():
    args = build_parser().parse_args(["0x60ff"])
    assert get_bytes_from_args(args) == b"\x60\xff"


def test_get_bytes_from_args_file(tmp_path):
    path = tmp_path / "code.txt"
    path.write_text("6001")
    args = build_parser().parse_args(["--file", str(path)])
    assert get_bytes_from_args(args) == b"\x60\x01"


def test_rpc_default():
    args = build_parser().parse_args([])
    assert args.rpc == "https://eth.llamarpc.com"
    assert args.stats is False