from pathlib import Path

from chicken_vm import decode_file

import main

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def test_runs_a_file(capsys):
    code = main.main(["--file", str(EXAMPLES / "cat.chicken"), "--input", "meow"])
    assert code == 0
    assert capsys.readouterr().out == "meow\n"


def test_runs_assembler_source(capsys):
    code = main.main(["-f", str(EXAMPLES / "deadfish.asm"), "--asm", "-i", "iiso"])
    assert code == 0
    assert capsys.readouterr().out == " 4 \n"


def test_normal_char(tmp_path, capsys):
    src = tmp_path / "a.chicken"
    # push 65, CHAR
    src.write_text(" ".join(["chicken"] * 75) + "\n" + " ".join(["chicken"] * 9))
    assert main.main(["-f", str(src), "--normal-char"]) == 0
    assert capsys.readouterr().out == "A\n"


def test_missing_file(tmp_path, capsys):
    code = main.main(["-f", str(tmp_path / "nope.chicken")])
    assert code == 1
    assert "error reading file" in capsys.readouterr().err


def test_runtime_error(tmp_path, capsys):
    src = tmp_path / "bad.chicken"
    src.write_text(" ".join(["chicken"] * 13))
    code = main.main(["-f", str(src)])
    assert code == 1
    err = capsys.readouterr().err
    assert "[VM ERROR]" in err
    assert "invalid value Num(3) on exit" in err


def test_assembler_error(tmp_path, capsys):
    src = tmp_path / "bad.asm"
    src.write_text("FLY\n")
    assert main.main(["-f", str(src), "--asm"]) == 1
    assert "Line 1" in capsys.readouterr().err


def test_emit(tmp_path, capsys):
    out = tmp_path / "hello.chicken"
    code = main.main(["-f", str(EXAMPLES / "helloworld.asm"), "--asm", "--emit", str(out)])
    assert code == 0
    assert "Wrote Chicken source" in capsys.readouterr().out
    assert decode_file(str(out)) == decode_file(str(EXAMPLES / "helloworld.chicken"))


def test_file_that_is_not_utf8(tmp_path, capsys):
    src = tmp_path / "bad.chicken"
    src.write_bytes(b"chicken\xff\n")
    assert main.main(["-f", str(src)]) == 1
    assert "error reading file" in capsys.readouterr().err
