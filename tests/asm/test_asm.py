import pytest

import regvm.sasm.asm as asm
from regvm.sasm.fpp import AsmError
from regvm.runtime.cpu import HaltReason

import unit_utils
from unit_utils import program


def test_basic_instructions():
    source = '''
        load $0 #10
        load $1 #15
        add $0 $1 $2
        sub $0 $1 $3
        mul $0 $1 $4
        div $0 $1 $5
        hlt
    '''

    assert asm.assemble(source) == program(
        [1, 0, 0, 10],
        [1, 1, 0, 15],
        [2, 0, 1, 2],
        [3, 0, 1, 3],
        [4, 0, 1, 4],
        [5, 0, 1, 5],
        [0, 0, 0, 0]
    )


def test_big_endian_immediate():
    assert asm.assemble('load $0 #500') == bytes([1, 0, 1, 244])
    assert asm.assemble('load $31 #0xFFFF') == bytes([1, 31, 0xFF, 0xFF])


def test_comments_and_case():
    source = '''
        // leading comment
        LOAD $0 #8   // eight
        Hlt
        // trailing comment'''

    assert asm.assemble(source) == program([1, 0, 0, 8], [0, 0, 0, 0])


def test_empty_source():
    assert asm.assemble('') == b''
    assert asm.assemble('// nothing here\n') == b''


@pytest.mark.parametrize('source', [
    'jmp $0',
    'add $0 $1',
    'load $0 10',
    'hlt $0',
    'load $0 #0x',
])
def test_unknown_command(source):
    with pytest.raises(AsmError, match='Unknown command'):
        asm.assemble(source)


def test_invalid_register():
    with pytest.raises(AsmError, match=r'Invalid register \$32'):
        asm.assemble('add $0 $1 $32')


def test_immediate_out_of_range():
    with pytest.raises(AsmError, match='out of range'):
        asm.assemble('load $0 #65536')


def test_compile_items_concatenates():
    first = asm.CompilationItem()
    first.modulename = 'first'
    first.contents = 'load $0 #1'
    second = asm.CompilationItem()
    second.modulename = 'second'
    second.contents = 'hlt'

    assert asm.compile_items([first, second]) == program([1, 0, 0, 1], [0, 0, 0, 0])


def test_error_names_module():
    item = asm.CompilationItem()
    item.modulename = 'broken'
    item.contents = 'load $0 #1\nnope'

    with pytest.raises(AsmError, match='broken@0x4'):
        asm.compile_items([item])


def test_collect_file():
    item = asm.collect_file(unit_utils.find_file('programs/arith.asm'))

    assert item.modulename == 'arith'
    assert 'div $5 $2 $7' in item.contents


def test_arith_program():
    proc = unit_utils.execute_single_source('programs/arith.asm')

    assert proc.halt.reason is HaltReason.HLT
    assert proc.gp[5] == 98
    assert proc.gp[6] == 14
    assert proc.gp[7] == 24
    assert proc.remainder == 2


def test_noend_program():
    proc = unit_utils.execute_single_source('programs/noend.asm')

    assert proc.halt.reason is HaltReason.END_OF_PROGRAM
    assert proc.gp[30] == 131070
