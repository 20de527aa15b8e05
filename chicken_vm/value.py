from __future__ import annotations
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


ISIZE_MIN = -(2 ** 63)
ISIZE_MAX = 2 ** 63 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_ENTITY = re.compile(r"&#(?:[xX]([0-9a-fA-F]+)|([0-9]+));")


class Kind(IntEnum):
    NUM = 0
    STR = 1
    PTR = 2
    TRUE = 3
    FALSE = 4
    UNDEFINED = 5
    NAN = 6


@dataclass(frozen=True, eq=False)
class Value:
    """A cell on the Chicken stack.

    Values are immutable, so copying a cell is just sharing the object.
    `data` holds the int for NUM/PTR and the str for STR; it is None for
    the constant kinds.
    """
    kind: Kind
    data: object = None

    @staticmethod
    def num(n: int) -> "Value":
        return Value(Kind.NUM, wrap_word(int(n)))

    @staticmethod
    def string(s: str) -> "Value":
        return Value(Kind.STR, s)

    @staticmethod
    def ptr(i: int) -> "Value":
        if i < 0:
            raise ValueError(f"pointer must be non-negative, got {i}")
        return Value(Kind.PTR, i)

    @staticmethod
    def boolean(b: bool) -> "Value":
        return TRUE if b else FALSE

    @staticmethod
    def of(obj) -> "Value":
        """Convert a plain Python value (int, str, bool or None) into a Value."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return UNDEFINED
        # bool first: it is an int subclass
        if isinstance(obj, bool):
            return Value.boolean(obj)
        if isinstance(obj, int):
            return Value.num(obj)
        if isinstance(obj, str):
            return Value.string(obj)
        raise TypeError(f"cannot convert {type(obj).__name__} to a Chicken value")

    # ---------- coercions ----------
    def to_num(self) -> "Value":
        k = self.kind
        if k == Kind.NUM:
            return self
        if k == Kind.STR:
            n = parse_int(self.data)
            return NAN if n is None else Value.num(n)
        if k == Kind.TRUE:
            return Value.num(1)
        if k == Kind.FALSE:
            return Value.num(0)
        return NAN

    def to_int(self) -> Optional[int]:
        """Like to_num, but gives the plain int or None instead of Num/NaN."""
        v = self.to_num()
        return v.data if v.kind == Kind.NUM else None

    def is_truthy(self) -> bool:
        k = self.kind
        if k == Kind.PTR or k == Kind.TRUE:
            return True
        if k == Kind.NUM:
            return self.data > 0
        if k == Kind.STR:
            return self.data != ""
        return False

    # ---------- formatting ----------
    def __str__(self) -> str:
        k = self.kind
        if k == Kind.NUM:
            return str(self.data)
        if k == Kind.STR:
            return self.data
        if k == Kind.TRUE:
            return "true"
        if k == Kind.FALSE:
            return "false"
        if k == Kind.UNDEFINED:
            return "undefined"
        if k == Kind.NAN:
            return "NaN"
        return repr(self)

    def __repr__(self) -> str:
        k = self.kind
        if k == Kind.NUM:
            return f"Num({self.data})"
        if k == Kind.STR:
            return f"String({self.data!r})"
        if k == Kind.PTR:
            return f"Ptr({self.data})"
        if k == Kind.TRUE:
            return "True"
        if k == Kind.FALSE:
            return "False"
        if k == Kind.UNDEFINED:
            return "Undefined"
        return "NaN"

    # ---------- arithmetic ----------
    def __add__(self, other: "Value") -> "Value":
        if not isinstance(other, Value):
            return NotImplemented
        # string concatenation wins over numeric addition, like JavaScript
        if self.kind == Kind.STR or other.kind == Kind.STR:
            return Value.string(str(self) + str(other))
        a, b = self.to_int(), other.to_int()
        if a is None or b is None:
            return NAN
        return Value.num(a + b)

    def __sub__(self, other: "Value") -> "Value":
        if not isinstance(other, Value):
            return NotImplemented
        a, b = self.to_int(), other.to_int()
        if a is None or b is None:
            return NAN
        return Value.num(a - b)

    def __mul__(self, other: "Value") -> "Value":
        if not isinstance(other, Value):
            return NotImplemented
        a, b = self.to_int(), other.to_int()
        if a is None or b is None:
            return NAN
        return Value.num(a * b)

    # ---------- equality ----------
    def __eq__(self, other) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        a, b = self.kind, other.kind
        if a == Kind.NUM:
            if b == Kind.NUM:
                return self.data == other.data
            if b == Kind.STR:
                return str(self.data) == other.data
            if b == Kind.TRUE:
                return self.data == 1
            if b == Kind.FALSE:
                return self.data == 0
            return False
        if a == Kind.STR:
            if b == Kind.NUM:
                return self.data == str(other.data)
            if b == Kind.STR:
                return self.data == other.data
            if b == Kind.TRUE:
                return self.data == "1"
            if b == Kind.FALSE:
                return self.data == "0"
            return False
        if a == Kind.PTR:
            return b == Kind.PTR and self.data == other.data
        if a == Kind.TRUE or a == Kind.FALSE:
            if b == Kind.NUM or b == Kind.STR:
                return other == self
            return a == b
        # Undefined and NaN only equal themselves (NaN == NaN holds here)
        return a == b

    __hash__ = None


TRUE = Value(Kind.TRUE)
FALSE = Value(Kind.FALSE)
UNDEFINED = Value(Kind.UNDEFINED)
NAN = Value(Kind.NAN)


def wrap_word(n: int) -> int:
    """Wrap to a signed 64-bit machine word, two's complement."""
    return (n - ISIZE_MIN) % 2 ** 64 + ISIZE_MIN


def parse_int(s: str) -> Optional[int]:
    """Parse a signed decimal integer in machine-word range, else None."""
    if not _DECIMAL.fullmatch(s):
        return None
    digits = s.lstrip("+-").lstrip("0") or "0"
    if len(digits) > 19:
        return None
    n = -int(digits) if s.startswith("-") else int(digits)
    if not (ISIZE_MIN <= n <= ISIZE_MAX):
        return None
    return n


def _entity_char(m: "re.Match[str]") -> str:
    hex_digits, dec_digits = m.groups()
    digits = (hex_digits or dec_digits).lstrip("0") or "0"
    if len(digits) > 7:
        return m.group(0)
    code = int(digits, 16) if hex_digits is not None else int(digits)
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        return m.group(0)
    return chr(code)


def decode_entities(text: str) -> str:
    """Replace HTML numeric character references with their characters.

    References naming something that is not a Unicode scalar value are
    left as they are.
    """
    return _ENTITY.sub(_entity_char, text)
