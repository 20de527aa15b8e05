from pathlib import Path

import pytest

from chicken_vm import VM, assemble_file, decode_file, decode_source, encode_opcodes

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def run_chicken(name, input=""):
    return VM(decode_file(str(EXAMPLES / name)), input=input).run()


def run_asm(name, input=""):
    # go through Chicken source so the decoder sees the real program
    source = encode_opcodes(assemble_file(str(EXAMPLES / name)))
    return VM.from_chicken(source, input=input).run()


def make_chickens(num):
    lines = []
    for n in range(num, -1, -1):
        if n == 0:
            lines.append("no chickens\n")
        elif n == 1:
            lines.append("1 chicken")
        else:
            lines.append(f"{n} chickens")
    return "\n".join(lines)


def test_quine():
    assert VM.from_chicken("chicken", input="").run() == "chicken"
    assert run_chicken("quine.chicken") == "chicken"


def test_cat():
    assert decode_file(str(EXAMPLES / "cat.chicken")) == [11, 6, 0]
    assert run_chicken("cat.chicken", "this is a test") == "this is a test"


def test_hello_world():
    assert run_chicken("helloworld.chicken") == "Hello world"


def test_hello_world_source_matches_assembler():
    assembled = assemble_file(str(EXAMPLES / "helloworld.asm"))
    assert decode_file(str(EXAMPLES / "helloworld.chicken")) == assembled
    assert run_asm("helloworld.asm") == "Hello world"


@pytest.mark.parametrize("count", [9, 128, 512, 1024])
def test_99_chickens(count):
    assert run_asm("99chickens.asm", str(count)) == make_chickens(count)


def test_99_chickens_small():
    assert run_asm("99chickens.asm", "2") == "2 chickens\n1 chicken\nno chickens\n"


@pytest.mark.parametrize("program, output", [
    ("iissiso", " 289 "),
    ("iissso", " 0 "),
    ("diissisdo", " 288 "),
    ("iissis" + "d" * 33 + "o", " 0 "),
])
def test_deadfish(program, output):
    assert run_asm("deadfish.asm", program) == output


def test_output_has_no_entities_left():
    out = run_asm("99chickens.asm", "3")
    assert "&#" not in out


def test_round_trip_through_source_keeps_opcodes():
    ops = assemble_file(str(EXAMPLES / "deadfish.asm"))
    assert decode_source(encode_opcodes(ops)) == ops
