import sys
from pathlib import Path
import logging as lg
import traceback
from typing import cast

import click

from regvm.runtime.cpu import CPU, HaltReason, HaltRecord


EXIT_HALT = 0
EXIT_ILLEGAL_OPCODE = 1
EXIT_FAULT = 2
EXIT_EXEC_ERROR = 100


class RunSettings:
    verbose: bool
    trace: bool

    def __init__(self):
        self.verbose = False
        self.trace = False

    def update(
        self,
        verbose: bool | None = None,
        trace: bool | None = None
    ):
        if verbose is not None:
            self.verbose = verbose

        if trace is not None:
            self.trace = trace

        return self


def exit_code(halt: HaltRecord) -> int:
    if halt.reason in (HaltReason.HLT, HaltReason.END_OF_PROGRAM):
        return EXIT_HALT

    if halt.is_fault():
        return EXIT_FAULT

    return EXIT_ILLEGAL_OPCODE


def execute(binary: bytes, settings: RunSettings | None = None) -> CPU:
    if settings is None:
        settings = RunSettings()

    proc = CPU()
    proc.load_program(binary)

    if not settings.trace:
        proc.run()
        return proc

    done = False

    while not done:
        done = proc.run_once()
        proc.debug_dump()

    return proc


def report(proc: CPU):
    for i, value in enumerate(proc.dump_registers()):
        if value != 0:
            click.echo(f'${i}={value}')

    click.echo(f'remainder={proc.remainder}')


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-t', '--trace', is_flag=True, help='Dump machine state after every step')
@click.argument('rom_filename', type=Path)
def run(verbose: bool, trace: bool, rom_filename: Path):
    lg.basicConfig(level=lg.DEBUG if verbose or trace else lg.INFO)
    lg.info("REGVM")

    settings = RunSettings().update(verbose=verbose, trace=trace)

    try:
        rom = rom_filename.read_bytes()
        proc = execute(rom, settings)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        return sys.exit(EXIT_EXEC_ERROR)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        return sys.exit(EXIT_EXEC_ERROR)

    halt = cast(HaltRecord, proc.halt)
    lg.info(f'Execution halted: {halt.reason.value}')
    report(proc)
    sys.exit(exit_code(halt))


if __name__ == '__main__':
    run()
