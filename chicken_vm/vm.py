from __future__ import annotations
from enum import IntEnum
from typing import Callable, Iterable, List, Optional

from .decoder import decode_source
from .value import FALSE, TRUE, UNDEFINED, Kind, Value, decode_entities


class OpCode(IntEnum):
    EXIT = 0
    CHICKEN = 1
    ADD = 2
    SUB = 3
    MUL = 4
    CMP = 5
    LOAD = 6     # + address cell
    STORE = 7
    JUMP = 8
    CHAR = 9


# opcodes from here up push (opcode - LITERAL_BASE)
LITERAL_BASE = 10

# stack index of the first program cell
PROGRAM_BASE = 2

# the program counter is an unsigned machine word
PC_MAX = 2 ** 64 - 1

MNEMONICS = {
    OpCode.EXIT: "axe/exit",
    OpCode.CHICKEN: "chicken",
    OpCode.ADD: "add",
    OpCode.SUB: "fox/subtract",
    OpCode.MUL: "rooster/multiply",
    OpCode.CMP: "compare",
    OpCode.LOAD: "pick/load",
    OpCode.STORE: "peck/store",
    OpCode.JUMP: "fr/jump",
    OpCode.CHAR: "bbq/chr",
}


def _describe(v: Optional[Value]) -> str:
    return "nothing" if v is None else repr(v)


def _read_line() -> str:
    return input()


class ChickenError(RuntimeError):
    """A fatal fault raised while running a Chicken program.

    Carries the program counter at the fault and a copy of the stack.
    """

    def __init__(self, message: str, program_counter: int, stack: List[Value]):
        super().__init__(message)
        self.message = message
        self.program_counter = program_counter
        self.stack = list(stack)

    def __str__(self) -> str:
        pc = self.program_counter
        cell = repr(self.stack[pc]) if pc < len(self.stack) else "<out of range>"
        return (f"error: {self.message}\n"
                f"    program counter: {pc} ({cell})\n"
                f"    stack dump: {self.stack!r}")


class VM:
    """The Chicken virtual machine.

    - One stack holds everything: cell 0 is a pointer to the stack itself,
      cell 1 the user input, then the program opcodes and a closing EXIT.
    - The program counter indexes that same stack, so programs can read,
      overwrite and jump across their own code.
    - With `debug` on, every step is traced and waits for a line of input.
    """

    def __init__(self, opcodes: Iterable[int], input=UNDEFINED, debug: bool = False,
                 normal_char: bool = False,
                 output_func: Optional[Callable[[str], None]] = None,
                 input_func: Optional[Callable[[], str]] = None):
        self.stack: List[Value] = [Value.ptr(0), Value.of(input)]
        self.stack.extend(Value.num(op) for op in opcodes)
        # sentinel EXIT so running off the end of the program stops cleanly
        self.stack.append(Value.num(OpCode.EXIT))
        self.pc = PROGRAM_BASE
        self.exited = False
        self.debug = debug
        self.normal_char = normal_char
        self.steps = 0
        self.output: Optional[str] = None
        # IO hooks
        self._out = output_func if output_func is not None else (lambda s: print(s))
        self._wait = input_func if input_func is not None else _read_line

    @classmethod
    def from_chicken(cls, source: str, **kwargs) -> "VM":
        return cls(decode_source(source), **kwargs)

    def _error(self, message: str) -> ChickenError:
        return ChickenError(message, self.pc, self.stack)

    def _cell(self, index: int) -> Optional[Value]:
        if 0 <= index < len(self.stack):
            return self.stack[index]
        return None

    def _pop(self) -> Optional[Value]:
        return self.stack.pop() if self.stack else None

    def _pop1(self) -> Value:
        v = self._pop()
        return UNDEFINED if v is None else v

    def _pop2(self) -> tuple[Value, Value]:
        b = self._pop1()
        a = self._pop1()
        return a, b

    def _pause(self):
        try:
            self._wait()
        except EOFError:
            # nothing left to read: keep tracing without blocking
            self._wait = lambda: None

    def _describe_op(self, op: Optional[Value]) -> str:
        if op is None or op.kind != Kind.NUM or op.data < 0:
            return "unknown"
        if op.data >= LITERAL_BASE:
            return f"literal {op.data}"
        code = OpCode(op.data)
        if code == OpCode.LOAD:
            addr = self._cell(self.pc + 1)
            return f"pick/load from {_describe(addr if addr is not None else UNDEFINED)}"
        return MNEMONICS[code]

    def _decode(self, op: Optional[Value]) -> int:
        if op is None or op.kind != Kind.NUM or op.data < 0:
            raise self._error(f"invalid opcode {_describe(op)}")
        return op.data

    def step(self):
        if self.exited:
            return
        op = self._cell(self.pc)
        if self.debug:
            self._out(f"program counter {self.pc}")
            self._out(f"opcode {_describe(op)} ({self._describe_op(op)})")

        self.pc += 1
        code = self._decode(op)

        if code == OpCode.EXIT:
            self.exited = True
        elif code == OpCode.CHICKEN:
            self.stack.append(Value.string("chicken"))
        elif code == OpCode.ADD:
            a, b = self._pop2()
            self.stack.append(a + b)
        elif code == OpCode.SUB:
            a, b = self._pop2()
            self.stack.append(a - b)
        elif code == OpCode.MUL:
            a, b = self._pop2()
            self.stack.append(a * b)
        elif code == OpCode.CMP:
            # an empty stack only matches another empty pop
            v1 = self._pop()
            v2 = self._pop()
            if v1 is None or v2 is None:
                same = v1 is None and v2 is None
            else:
                same = v1 == v2
            self.stack.append(TRUE if same else FALSE)
        elif code == OpCode.LOAD:
            self._load()
        elif code == OpCode.STORE:
            self._store()
        elif code == OpCode.JUMP:
            self._jump()
        elif code == OpCode.CHAR:
            self._char()
        else:
            self.stack.append(Value.num(code - LITERAL_BASE))

        self.steps += 1
        if self.debug:
            self._out(f"program counter now {self.pc}")
            self._out(f"stack now {self.stack!r}")
            self._pause()

    def _load(self):
        # double wide: the cell after the opcode names the address to read from
        addr_cell = self._cell(self.pc)
        addr = (addr_cell if addr_cell is not None else UNDEFINED).to_int()
        self.pc += 1
        if addr is None or addr < 0:
            self.stack.append(UNDEFINED)
            return

        index = self._pop1().to_int()
        if index is None or index < 0:
            self.stack.append(UNDEFINED)
            return

        target = self._cell(addr)
        result = UNDEFINED
        if target is not None and target.kind == Kind.STR:
            if index < len(target.data):
                result = Value.string(target.data[index])
        elif target is not None and target.kind == Kind.PTR:
            v = self._cell(target.data + index)
            if v is not None:
                result = v
        # indexing into anything else gives undefined
        self.stack.append(result)

    def _store(self):
        addr_v = self._pop()
        addr = addr_v.to_int() if addr_v is not None else None
        if addr is None or addr < 0:
            raise self._error(f"invalid address {_describe(addr_v)}")
        val = self._pop()
        if val is None:
            raise self._error("no more items in stack")
        if not (0 <= addr < len(self.stack)):
            raise self._error(f"address {addr} out of bounds for stack of {len(self.stack)}")
        self.stack[addr] = val

    def _jump(self):
        offset_v = self._pop()
        rel = offset_v.to_int() if offset_v is not None else None
        if rel is None:
            raise self._error(f"invalid relative address {_describe(offset_v)}")
        cond = self._pop()
        if cond is None or not cond.is_truthy():
            return
        target = self.pc + rel
        if not (0 <= target <= PC_MAX):
            raise self._error(f"jump to relative addr {_describe(offset_v)} overflowed")
        self.pc = target

    def _char(self):
        if not self.normal_char:
            s = str(self._pop1())
            self.stack.append(Value.string(f"&#{s};"))
            return
        val = self._pop()
        n = val.to_int() if val is not None else None
        if n is None or n < 0 or n > 0x10FFFF or 0xD800 <= n <= 0xDFFF:
            raise self._error(f"{_describe(val)} not a number")
        self.stack.append(Value.string(chr(n)))

    def run(self, max_steps: Optional[int] = None) -> str:
        """Run until EXIT and return the final string with entities decoded."""
        if self.output is not None:
            return self.output
        if self.debug and not self.exited:
            self._out("no opcode")
            self._out(f"program counter {self.pc}")
            self._out(f"stack {self.stack!r}")
            self._out("press enter to step, ctrl+c to exit")
            self._pause()

        while not self.exited:
            if max_steps is not None and self.steps >= max_steps:
                raise self._error(f"step limit of {max_steps} reached")
            self.step()

        top = self._pop()
        if top is None or top.kind != Kind.STR:
            raise self._error(f"invalid value {_describe(top)} on exit")
        self.output = decode_entities(top.data)
        return self.output
