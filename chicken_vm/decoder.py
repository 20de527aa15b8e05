from __future__ import annotations
from typing import Iterable, List


WORD = "chicken"


def decode_source(text: str) -> List[int]:
    """Turn Chicken source into opcodes: one per line, the count of `chicken` on it.

    Lines are split on '\\n' only; nothing is trimmed and any other text
    on a line is ignored.
    """
    if not text:
        return []
    return [line.count(WORD) for line in text.split("\n")]


def decode_file(path: str) -> List[int]:
    with open(path, 'r', encoding='utf-8', newline='') as f:
        text = f.read()
    return decode_source(text)


def encode_opcodes(opcodes: Iterable[int]) -> str:
    lines = []
    for op in opcodes:
        if op < 0:
            raise ValueError(f"opcode {op} cannot be written as Chicken source")
        lines.append(" ".join([WORD] * op))
    return "\n".join(lines)
