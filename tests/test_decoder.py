import pytest

from chicken_vm import (assemble_from_text, decode_source, disassemble, encode_opcodes)


def test_decode_counts_chickens_per_line():
    src = "chicken\n\nchicken chicken\nchickenchicken chicken and a rooster"
    assert decode_source(src) == [1, 0, 2, 3]


def test_decode_empty_source():
    assert decode_source("") == []


def test_decode_one_opcode_per_line():
    src = "chicken\nfoo\n\nchicken\n"
    assert len(decode_source(src)) == src.count("\n") + 1


def test_decode_does_not_handle_carriage_returns():
    assert decode_source("chicken\r\nchicken") == [1, 1]
    assert decode_source("Chicken CHICKEN") == [0]


def test_encode_then_decode():
    ops = [11, 6, 0, 1, 27]
    assert decode_source(encode_opcodes(ops)) == ops
    assert encode_opcodes([2]) == "chicken chicken"


def test_encode_rejects_negative():
    with pytest.raises(ValueError):
        encode_opcodes([1, -1])


def test_assemble_basic():
    text = """
        ; cat
        push 1
        pick 0      # load from the stack base
        axe
    """
    assert assemble_from_text(text) == [11, 6, 0, 0]


def test_assemble_labels_resolve_to_stack_indices():
    text = """
        PUSH slot
        LOAD slot
        EXIT
slot:   DATA 7
    """
    # slot is program index 4, stack index 6
    assert assemble_from_text(text) == [16, 6, 6, 0, 7]


def test_assemble_jump_forward_and_back():
    text = """
top:    PUSH 1
        JUMP end
        EXIT
end:    PUSH 1
        JUMP top
    """
    ops = assemble_from_text(text)
    # forward: after the JUMP at index 4 the PC is 5, `end` is 6
    assert ops[1:5] == [11, 10, 3, 8]
    # backward: after the JUMP at index 10 the PC is 11, `top` is 0
    assert ops[7:11] == [10, 21, 3, 8]


def test_assemble_hex_and_separators():
    assert assemble_from_text("PUSH 0x10\nDATA 1_000") == [26, 1000]


@pytest.mark.parametrize("text", [
    "FLY",
    "PUSH",
    "ADD 1",
    "PUSH -1",
    "PUSH abc",
    "1x: EXIT",
    "a: EXIT\na: EXIT",
    "JUMP nowhere",
    "LOAD 1 2",
])
def test_assemble_errors(text):
    with pytest.raises(SyntaxError):
        assemble_from_text(text)


def test_disassemble():
    assert disassemble([11, 6, 0, 5, 0, 42]) == [
        "[0] PUSH 1",
        "[1] LOAD 0",
        "[3] CMP",
        "[4] EXIT",
        "[5] PUSH 32",
    ]
