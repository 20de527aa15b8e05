import argparse
import sys
from pathlib import Path

from chicken_vm import VM, ChickenError, assemble_file, decode_file, encode_opcodes


def load_program(path: str, asm: bool):
    if asm:
        return assemble_file(path)
    return decode_file(path)


def cmd_emit(program, out_path: str):
    Path(out_path).write_text(encode_opcodes(program), encoding="utf-8")
    print(f"Wrote Chicken source: {out_path} ({len(program)} lines)")


def cmd_run(program, input_text: str, debug: bool, normal_char: bool) -> str:
    vm = VM(program, input=input_text, debug=debug, normal_char=normal_char)
    return vm.run()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Chicken interpreter")
    parser.add_argument("-f", "--file", required=True, help="Path to the Chicken program")
    parser.add_argument("-i", "--input", default="", help="Input passed to the program")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="Single step through the program, showing the stack")
    parser.add_argument("-n", "--normal-char", action="store_true",
                        help="Make CHAR push real characters instead of HTML entities")
    parser.add_argument("--asm", action="store_true", help="Treat the file as assembler source")
    parser.add_argument("--emit", metavar="OUT", default=None,
                        help="Write the program as Chicken source to OUT instead of running it")

    args = parser.parse_args(argv)

    try:
        program = load_program(args.file, args.asm)
    except (OSError, UnicodeDecodeError) as e:
        print(f"error reading file {args.file!r}: {e}", file=sys.stderr)
        return 1
    except SyntaxError as e:
        print(f"[ASM ERROR] {e}", file=sys.stderr)
        return 1

    if args.emit is not None:
        cmd_emit(program, args.emit)
        return 0

    try:
        output = cmd_run(program, args.input, args.debug, args.normal_char)
    except ChickenError as e:
        print(f"[VM ERROR] {e}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
