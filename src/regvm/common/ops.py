# Basic
HLT = 0x00  # stop
LOAD = 0x01  # U2 -> R1

# Arithmetic
ADD = 0x02  # R1 +  R2 -> R3
SUB = 0x03  # R1 -  R2 -> R3
MUL = 0x04  # R1 *  R2 -> R3
DIV = 0x05  # R1 /  R2 -> R3, R1 % R2 -> remainder

MNEMONICS = {
    HLT: 'hlt',
    LOAD: 'load',
    ADD: 'add',
    SUB: 'sub',
    MUL: 'mul',
    DIV: 'div',
}


def mnemonic(op: int) -> str:
    return MNEMONICS.get(op, f'igl(0x{op:02X})')
