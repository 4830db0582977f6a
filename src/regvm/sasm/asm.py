from pathlib import Path
import logging as lg
from typing import Tuple, List

import click

import regvm.sasm.grammar as grammar
from regvm.sasm.fpp import FPP, AsmError


EXIT_OK = 0
EXIT_ASM_ERROR = 1


class CompilationItem:
    modulename: str = '<inline>'
    contents: str


def collect_file(filepath: str | Path) -> CompilationItem:
    if isinstance(filepath, str):
        filepath = Path(filepath)

    lg.debug(f'Collecting file {filepath}')
    item = CompilationItem()
    item.contents = filepath.read_text()
    item.modulename = filepath.stem
    return item


def collect_files(filepaths: list[Path]) -> list[CompilationItem]:
    return [collect_file(path) for path in filepaths]


def compile_items(compile_items: list[CompilationItem]) -> bytes:
    first_pass = FPP()

    for compile_item in compile_items:
        lg.info("Processing {0}".format(compile_item.modulename))
        first_pass.namespace = compile_item.modulename
        actions = grammar.program.parse_string(compile_item.contents)

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)

    return first_pass.finish()


def assemble(source: str) -> bytes:
    item = CompilationItem()
    item.contents = source
    return compile_items([item])


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('sources', nargs=-1, type=Path)
@click.argument('binary', type=Path)
def compile(verbose: bool, sources: Tuple[Path], binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info("REGVM ASM")

    try:
        items: List[CompilationItem] = collect_files(list(sources))
        bytestr = compile_items(items)
    except (AsmError, OSError) as e:
        lg.error(str(e))
        raise SystemExit(EXIT_ASM_ERROR)

    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(bytestr)
    lg.info(f'Written {len(bytestr)} byte(s) to {binary}')


if __name__ == "__main__":
    compile()
