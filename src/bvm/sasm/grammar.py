# type: ignore
''' Line grammar '''

import pyparsing as pp

from bvm.sasm.fpp import FPP


id = pp.Word(pp.alphas + '_', pp.alphanums + '_')
comment = pp.Suppress((pp.Literal(';') | pp.Literal('//')) + pp.rest_of_line)

# Numeric names are accepted here and rejected by FPP.on_label
label = (pp.Word(pp.alphanums + '_') + pp.Suppress(':')).setParseAction(lambda r: (FPP.on_label, r))

number = pp.Regex(r'[+-]?(0[xX][0-9a-fA-F]+|0[bB][01]+|[0-9]+)(?![0-9A-Za-z_])')
number.setParseAction(lambda r: ('number', r[0]))

refname = pp.Optional(id + pp.Suppress('::')) + id
# Tagged [namespace, name] or [name]
refname.setParseAction(lambda r: ('ref', r.as_list()))

operand = number ^ refname

mnemonic = pp.Word(pp.alphas + '.', pp.alphanums)

instruction = (mnemonic + pp.Optional(operand)).setParseAction(lambda r: (FPP.on_instruction, r))

statement = pp.Optional(label) + pp.Optional(instruction) + pp.Optional(comment)
