REGISTER_COUNT = 32

INSTRUCTION_SIZE = 4  # bytes, including the opcode

INT32_MIN = -(2**31)
INT32_MAX = (2**31) - 1
UINT32_MASK = 0xFFFFFFFF

IMM16_MAX = 0xFFFF
