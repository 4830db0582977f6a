import struct
import logging as lg
from typing import List, Any

import regvm.common.ops as ops
from regvm.common.hwconf import REGISTER_COUNT, INSTRUCTION_SIZE, IMM16_MAX

Tokens = List[Any]


class AsmError(Exception):
    pass


class FPP:
    ''' First pass processor '''
    cmd_list: List[bytes]

    def __init__(self):
        self.cmd_list = list()
        self.offset = 0
        self.namespace = "<global>"
        self.instr_start: int | None = None

    def where(self) -> str:
        return f'{self.namespace}@0x{self.offset:X}'

    # Handlers
    def issue_bytes(self, bytestr: bytes):
        self.cmd_list.append(bytestr)
        self.offset += len(bytestr)

    def issue_word(self, fmt: str, word: int):
        self.issue_bytes(struct.pack(fmt, word))

    def close_instruction(self):
        if self.instr_start is None:
            return

        # Short instructions are padded to the fixed width
        padding = self.instr_start + INSTRUCTION_SIZE - self.offset

        if padding > 0:
            self.issue_bytes(bytes(padding))

        self.instr_start = None

    def issue_op(self, op: int):
        self.close_instruction()
        lg.debug(f'Issuing command 0x{op:X} ({ops.mnemonic(op)}) @ 0x{self.offset:X}')
        self.instr_start = self.offset
        self.issue_word('>B', op)

    def on_reg(self, index: int):
        if not 0 <= index < REGISTER_COUNT:
            raise AsmError(f'Invalid register ${index} at {self.where()}')

        self.issue_word('>B', index)

    def on_imm16(self, value: int):
        if not 0 <= value <= IMM16_MAX:
            raise AsmError(f'Immediate #{value} out of range at {self.where()}')

        self.issue_word('>H', value)

    def on_fail(self, tokens: Tokens):
        raise AsmError(f'Unknown command {tokens[0]!r} at {self.where()}')

    def finish(self) -> bytes:
        self.close_instruction()
        return b''.join(self.cmd_list)
