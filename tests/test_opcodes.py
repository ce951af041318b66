import pytest

from evmlens.opcodes import iter_instructions, lookup, opcode_by_name


def _known_opcodes():
    return [op for op in map(lookup, range(256)) if op is not None]


def test_name_lookup_round_trips():
    known = _known_opcodes()
    assert known
    assert all(opcode_by_name(op.name) is op for op in known)


def test_code_lookup_matches_code_field():
    assert all(lookup(op.code).code == op.code for op in _known_opcodes())


def test_push_opcodes_have_matching_immediates():
    pushes = [opcode_by_name(f"PUSH{n}") for n in range(1, 33)]
    assert all(op.immediate_size == n for n, op in enumerate(pushes, start=1))
    assert [op.code for op in pushes] == list(range(0x60, 0x60 + 32))


def test_io_diff_is_outputs_minus_inputs():
    assert all(op.io_diff() == op.outputs - op.inputs for op in _known_opcodes())


def test_io_diff_values():
    assert opcode_by_name("PUSH1").io_diff() == 1
    assert opcode_by_name("STOP").io_diff() == 0
    assert opcode_by_name("DUP1").io_diff() == 1
    assert opcode_by_name("ADD").io_diff() == -1


def test_lookup_of_undefined_byte_is_none():
    assert lookup(0x0C) is None


def test_opcode_by_name_is_case_insensitive():
    assert opcode_by_name("push1") is opcode_by_name("PUSH1")


def test_opcode_by_name_unknown_raises():
    with pytest.raises(KeyError):
        opcode_by_name("NOT_AN_OPCODE")


def test_str_is_mnemonic():
    assert str(opcode_by_name("keccak256")) == "KECCAK256"


def test_iter_instructions_skips_push_data():
    code = bytes.fromhex("60FF61ABCD00")
    assert list(iter_instructions(code)) == [(0, 0x60), (2, 0x61), (5, 0x00)]


def test_iter_instructions_yields_undefined_bytes():
    code = bytes([0x0C, 0x00])
    assert list(iter_instructions(code)) == [(0, 0x0C), (1, 0x00)]


def test_iter_instructions_pads_truncated_push():
    assert list(iter_instructions(bytes([0x60]))) == [(0, 0x60), (2, 0x00)]


def test_iter_instructions_of_empty_code_is_single_stop():
    assert list(iter_instructions(b"")) == [(0, 0x00)]


def test_iter_instructions_positions_increase_and_end_in_stop():
    code = bytes.fromhex("602060005260005100")
    instructions = list(iter_instructions(code))
    positions = [position for position, _ in instructions]
    assert positions == sorted(set(positions))
    assert instructions[-1][1] == 0x00