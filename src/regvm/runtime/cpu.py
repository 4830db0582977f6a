import struct
import logging as lg
from enum import Enum
from dataclasses import dataclass
from typing import Callable, cast


import regvm.common.ops as ops

from regvm.common.hwconf import REGISTER_COUNT, INT32_MAX, UINT32_MASK


class State(Enum):
    RUNNING = 'running'
    HALTED = 'halted'


class HaltReason(Enum):
    END_OF_PROGRAM = 'end of program'
    HLT = 'hlt'
    ILLEGAL_OPCODE = 'illegal opcode'
    INVALID_REGISTER = 'invalid register'
    DIVISION_BY_ZERO = 'division by zero'


@dataclass
class HaltRecord:
    ''' Why and where the machine stopped '''
    reason: HaltReason
    pc: int  # Start of the instruction that stopped the machine
    opcode: int | None  # None if no opcode was decoded
    message: str

    def is_fault(self) -> bool:
        return self.reason in (HaltReason.INVALID_REGISTER, HaltReason.DIVISION_BY_ZERO)

    def __str__(self) -> str:
        return f'{self.message} (PC:{self.pc:X})'


class Halt(Exception):
    reason = HaltReason.HLT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProgramEnd(Halt):
    reason = HaltReason.END_OF_PROGRAM


class HaltInstruction(Halt):
    reason = HaltReason.HLT


class IllegalOpcode(Halt):
    reason = HaltReason.ILLEGAL_OPCODE


class Fault(Halt):
    pass


class InvalidRegister(Fault):
    reason = HaltReason.INVALID_REGISTER


class ArithmeticFault(Fault):
    reason = HaltReason.DIVISION_BY_ZERO


def wrap32(value: int) -> int:
    value &= UINT32_MASK

    if value > INT32_MAX:
        value -= UINT32_MASK + 1

    return value


def divmod32(a: int, b: int) -> tuple[int, int]:
    # Truncates toward zero, the remainder takes the sign of the dividend
    quotient = abs(a) // abs(b)

    if (a < 0) != (b < 0):
        quotient = -quotient

    return wrap32(quotient), a - b * quotient


class CPU():
    pc: int  # Program counter
    remainder: int  # Unsigned remainder of the last division
    gp: list[int]  # General purpose registers
    program: bytes
    state: State
    halt: HaltRecord | None

    def __init__(self, program: bytes = b''):
        self.gp = [0] * REGISTER_COUNT
        self.pc = 0
        self.remainder = 0
        self.program = bytes()
        self.state = State.RUNNING
        self.halt = None

        if program:
            self.load_program(program)

    # - Control - #

    def load_program(self, program: bytes):
        self.program = bytes(program)
        self.pc = 0
        self.state = State.RUNNING
        self.halt = None
        lg.debug(f'Loaded {len(self.program)} byte(s)')

    def reset(self):
        self.gp = [0] * REGISTER_COUNT
        self.pc = 0
        self.remainder = 0
        self.state = State.RUNNING
        self.halt = None

    @property
    def halted(self) -> bool:
        return self.state is State.HALTED

    def get_register(self, index: int) -> int:
        return self.gp[self.check_reg(index)]

    def dump_registers(self) -> list[int]:
        return list(self.gp)

    # - Helpers - #

    def debug_dump(self):
        state = [f'{k}:{v:X}' for k, v in {
            'PC': self.pc,
            'RM': self.remainder
        }.items()]

        state.extend([f'{i}:{self.gp[i]}' for i in range(len(self.gp))])

        lg.debug(' '.join(state))

    def ensure(self, size: int):
        if self.pc + size > len(self.program):
            raise ProgramEnd(f'Truncated instruction, {size} byte(s) expected at 0x{self.pc:X}')

    def next_fmt(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        self.ensure(size)
        (val,) = struct.unpack_from(fmt, self.program, self.pc)
        self.pc += size
        return val

    def next_8_bits(self) -> int:
        return self.next_fmt('>B')

    def next_16_bits(self) -> int:
        return self.next_fmt('>H')

    def check_reg(self, index: int) -> int:
        if not 0 <= index < REGISTER_COUNT:
            raise InvalidRegister(f'Invalid register ${index}')

        return index

    def next_gp_index(self) -> int:
        return self.check_reg(self.next_8_bits())

    def get_next_gp(self) -> int:
        return self.gp[self.next_gp_index()]

    def set_next_gp(self, val: int):
        self.gp[self.next_gp_index()] = wrap32(val)

    def arithm_pair(self, op: Callable[[int, int], int]):
        a = self.get_next_gp()
        b = self.get_next_gp()
        self.set_next_gp(op(a, b))

    # - Operations - #

    def hlt(self):
        raise HaltInstruction('HLT encountered')

    def load(self):
        dest = self.next_gp_index()
        self.gp[dest] = self.next_16_bits()

    def igl(self):
        raise IllegalOpcode('Illegal opcode. Terminating.')

    # - Arithmetic - #

    def add(self):
        self.arithm_pair(lambda a, b: a + b)

    def sub(self):
        self.arithm_pair(lambda a, b: a - b)

    def mul(self):
        self.arithm_pair(lambda a, b: a * b)

    def div(self):
        a = self.get_next_gp()
        b = self.get_next_gp()
        dest = self.next_gp_index()

        if b == 0:
            raise ArithmeticFault(f'Division by zero, {a} / 0')

        quotient, remainder = divmod32(a, b)
        self.gp[dest] = quotient
        self.remainder = remainder & UINT32_MASK

    HANDLERS = {
        ops.HLT: hlt,
        ops.LOAD: load,

        ops.ADD: add,
        ops.SUB: sub,
        ops.MUL: mul,
        ops.DIV: div
    }

    # -- Implementation -- #

    def stop(self, halt: Halt, pc: int, op: int | None):
        self.halt = HaltRecord(halt.reason, pc, op, halt.message)
        self.state = State.HALTED

        if halt.reason is HaltReason.END_OF_PROGRAM:
            lg.debug(str(self.halt))
        elif halt.reason is HaltReason.HLT:
            lg.info(str(self.halt))
        else:
            lg.warning(str(self.halt))

    def exec_next(self) -> bool:
        ''' Executes one instruction, returns True when the machine stops '''
        if self.halted:
            return True

        start = self.pc
        op = None

        try:
            if self.pc >= len(self.program):
                raise ProgramEnd('End of program')

            op = self.next_8_bits()
            lg.debug(f'{start:04X}: {ops.mnemonic(op)}')
            handler = self.HANDLERS.get(op, CPU.igl)
            handler(self)

        except Halt as e:
            self.stop(e, start, op)
            return True

        return False

    def run_once(self) -> bool:
        return self.exec_next()

    def run(self) -> HaltRecord:
        done = False

        while not done:
            done = self.exec_next()

        return cast(HaltRecord, self.halt)
