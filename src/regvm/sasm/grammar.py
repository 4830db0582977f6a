# type: ignore
''' Basic grammar '''

import pyparsing as pp

import regvm.common.ops as ops
from regvm.sasm.fpp import FPP


def g_cmd(literal, op):
    return pp.CaselessKeyword(literal).set_parse_action(lambda _: (FPP.issue_op, op))


comment = pp.Suppress(pp.Literal('//') + pp.rest_of_line)

reg_op = pp.Regex(r'\$[0-9]+').set_parse_action(lambda r: (FPP.on_reg, int(r[0][1:])))

hex_const = pp.Regex(r'#0[xX][0-9a-fA-F]+').set_parse_action(lambda r: (FPP.on_imm16, int(r[0][1:], 16)))
dec_const = pp.Regex(r'#[0-9]+').set_parse_action(lambda r: (FPP.on_imm16, int(r[0][1:])))
imm_op = hex_const | dec_const


def g_cmd_3(literal, op):
    return g_cmd(literal, op) + reg_op + reg_op + reg_op


# Basic instructions
hlt_cmd = g_cmd('hlt', ops.HLT)
load_cmd = g_cmd('load', ops.LOAD) + reg_op + imm_op

# Arithmetic
add_cmd = g_cmd_3('add', ops.ADD)
sub_cmd = g_cmd_3('sub', ops.SUB)
mul_cmd = g_cmd_3('mul', ops.MUL)
div_cmd = g_cmd_3('div', ops.DIV)

asm_cmd = hlt_cmd \
    ^ load_cmd \
    ^ add_cmd \
    ^ sub_cmd \
    ^ mul_cmd \
    ^ div_cmd

# Fail on unknown command
unknown = pp.Regex(r'[^\n]*\S').set_parse_action(lambda r: (FPP.on_fail, r))

statement = asm_cmd + pp.Optional(comment)

program = pp.ZeroOrMore(statement ^ comment ^ unknown)
