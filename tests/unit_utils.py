from pathlib import Path

import regvm.sasm.asm as asm
import regvm.runtime.emulator as emulator
from regvm.runtime.cpu import CPU


def find_file(filename: str) -> Path:
    return Path(__file__).parent / filename


def load_file(filename: str) -> str:
    return find_file(filename).read_text()


def program(*instructions: list[int]) -> bytes:
    code = bytearray()

    for instruction in instructions:
        code += bytes(instruction)

    return bytes(code)


def run_bytes(*instructions: list[int]) -> CPU:
    proc = CPU()
    proc.load_program(program(*instructions))
    proc.run()
    return proc


def execute_single_source(filename: str) -> CPU:
    item = asm.collect_file(find_file(filename))
    binary = asm.compile_items([item])
    return emulator.execute(binary)
