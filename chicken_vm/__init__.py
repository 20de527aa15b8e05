from .value import Value, Kind, TRUE, FALSE, UNDEFINED, NAN, decode_entities
from .decoder import decode_source, decode_file, encode_opcodes
from .vm import VM, OpCode, ChickenError
from .assembler import assemble_from_text, assemble_file, disassemble

__all__ = [
    "Value",
    "Kind",
    "TRUE",
    "FALSE",
    "UNDEFINED",
    "NAN",
    "decode_entities",
    "decode_source",
    "decode_file",
    "encode_opcodes",
    "VM",
    "OpCode",
    "ChickenError",
    "assemble_from_text",
    "assemble_file",
    "disassemble",
]
