from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .vm import LITERAL_BASE, PROGRAM_BASE, OpCode


@dataclass
class Instr:
    mnemonic: str
    operand: Optional[str]
    line_no: int


# operand modes
NONE, REQUIRED, OPTIONAL = 0, 1, 2

INSTR_DEF: Dict[str, Tuple[Optional[OpCode], int]] = {
    # mnemonic: (opcode, operand mode); PUSH and DATA emit no opcode of their own
    "EXIT": (OpCode.EXIT, NONE),
    "CHICKEN": (OpCode.CHICKEN, NONE),
    "ADD": (OpCode.ADD, NONE),
    "SUB": (OpCode.SUB, NONE),
    "MUL": (OpCode.MUL, NONE),
    "CMP": (OpCode.CMP, NONE),
    "LOAD": (OpCode.LOAD, REQUIRED),
    "STORE": (OpCode.STORE, NONE),
    "JUMP": (OpCode.JUMP, OPTIONAL),
    "CHAR": (OpCode.CHAR, NONE),
    "PUSH": (None, REQUIRED),
    "DATA": (None, REQUIRED),
}

ALIASES: Dict[str, str] = {
    "AXE": "EXIT",
    "FOX": "SUB",
    "ROOSTER": "MUL",
    "COMPARE": "CMP",
    "PICK": "LOAD",
    "PECK": "STORE",
    "FR": "JUMP",
    "BBQ": "CHAR",
}


def _strip_comment(line: str) -> str:
    # Support ';' and '#' comments
    for sep in (';', '#'):
        if sep in line:
            line = line.split(sep, 1)[0]
    return line.strip()


def _parse_number(token: str, line_no: int) -> int:
    s = token.replace('_', '')
    try:
        if s.lower().startswith('0x'):
            val = int(s, 16)
        else:
            val = int(s, 10)
    except ValueError:
        raise SyntaxError(f"Line {line_no}: invalid operand '{token}'")
    if val < 0:
        raise SyntaxError(f"Line {line_no}: operand '{token}' must not be negative")
    return val


def _resolve(token: str, labels: Dict[str, int], line_no: int) -> int:
    # labels name absolute stack indices
    if token in labels:
        return PROGRAM_BASE + labels[token]
    return _parse_number(token, line_no)


def _instr_size(mnemonic: str, operand: Optional[str]) -> int:
    if mnemonic == "LOAD":
        return 2
    if mnemonic == "JUMP" and operand is not None:
        # PUSH a; PUSH b; SUB; JUMP
        return 4
    return 1


def parse_source(text: str) -> Tuple[List[Instr], Dict[str, int]]:
    instrs: List[Instr] = []
    labels: Dict[str, int] = {}
    pc = 0

    lines = text.splitlines()

    # First pass: collect labels and compute program indices
    for idx, line in enumerate(lines, start=1):
        raw = _strip_comment(line)
        if not raw:
            continue
        # Handle label definitions (e.g., 'loop:') possibly with instruction on same line
        while ':' in raw:
            label, rest = raw.split(':', 1)
            label = label.strip()
            if not label.isidentifier():
                raise SyntaxError(f"Line {idx}: invalid label '{label}'")
            if label in labels:
                raise SyntaxError(f"Line {idx}: duplicate label '{label}'")
            labels[label] = pc
            raw = rest.strip()
        if not raw:
            continue
        parts = raw.replace(',', ' ').split()
        mnem = parts[0].upper()
        mnem = ALIASES.get(mnem, mnem)
        if mnem not in INSTR_DEF:
            raise SyntaxError(f"Line {idx}: unknown instruction '{parts[0]}'")
        if len(parts) > 2:
            raise SyntaxError(f"Line {idx}: too many operands for '{mnem}'")
        operand = parts[1] if len(parts) > 1 else None
        mode = INSTR_DEF[mnem][1]
        if mode == REQUIRED and operand is None:
            raise SyntaxError(f"Line {idx}: '{mnem}' requires an operand")
        if mode == NONE and operand is not None:
            raise SyntaxError(f"Line {idx}: '{mnem}' takes no operand")
        instrs.append(Instr(mnemonic=mnem, operand=operand, line_no=idx))
        pc += _instr_size(mnem, operand)

    return instrs, labels


def assemble_from_text(text: str) -> List[int]:
    instrs, labels = parse_source(text)

    out: List[int] = []
    for ins in instrs:
        opcode, _ = INSTR_DEF[ins.mnemonic]
        if ins.mnemonic == "PUSH":
            assert ins.operand is not None
            out.append(LITERAL_BASE + _resolve(ins.operand, labels, ins.line_no))
        elif ins.mnemonic == "DATA":
            assert ins.operand is not None
            out.append(_resolve(ins.operand, labels, ins.line_no))
        elif ins.mnemonic == "LOAD":
            assert ins.operand is not None
            out.append(int(opcode))
            out.append(_resolve(ins.operand, labels, ins.line_no))
        elif ins.mnemonic == "JUMP" and ins.operand is not None:
            if ins.operand not in labels:
                raise SyntaxError(f"Line {ins.line_no}: unknown label '{ins.operand}'")
            # offset is taken from the cell after the JUMP opcode
            offset = labels[ins.operand] - (len(out) + 4)
            a, b = (offset, 0) if offset >= 0 else (0, -offset)
            out.extend([LITERAL_BASE + a, LITERAL_BASE + b, int(OpCode.SUB), int(OpCode.JUMP)])
        else:
            out.append(int(opcode))
    return out


def assemble_file(path: str) -> List[int]:
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return assemble_from_text(text)


def disassemble(opcodes: Sequence[int]) -> List[str]:
    """List opcodes one instruction per line, indexed from the program start."""
    out = []
    i = 0
    n = len(opcodes)
    while i < n:
        op = opcodes[i]
        addr = i
        i += 1
        if op >= LITERAL_BASE:
            out.append(f"[{addr}] PUSH {op - LITERAL_BASE}")
            continue
        try:
            name = OpCode(op).name
        except ValueError:
            out.append(f"[{addr}] ?{op}")
            continue
        if op == OpCode.LOAD and i < n:
            out.append(f"[{addr}] {name} {opcodes[i]}")
            i += 1
        else:
            out.append(f"[{addr}] {name}")
    return out
