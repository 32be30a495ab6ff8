import logging as lg
from typing import cast
import struct

import pyparsing as pp

from bvm.sasm.fpp import FPP, AsmError, Ref, IMMEDIATE_PACK
import bvm.sasm.grammar as grammar


class CompilationItem:
    modulename: str
    contents: str

    def namespace(self) -> str:
        return self.modulename


def first_pass_item(first_pass: FPP, compile_item: CompilationItem):
    lg.info("Processing {0}".format(compile_item.namespace()))
    first_pass.namespace = compile_item.namespace()

    for lineno, line in enumerate(compile_item.contents.splitlines(), start=1):
        first_pass.line = lineno

        try:
            actions = grammar.statement.parse_string(line, parse_all=True)
        except pp.ParseException as e:
            first_pass.fail(f'Cannot parse "{line.strip()}" ({e.msg})')

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)


def compile_items(compile_items: list[CompilationItem], optimize: bool = True) -> bytes:
    # First pass
    first_pass = FPP(optimize)

    for compile_item in compile_items:
        first_pass_item(first_pass, compile_item)

    # Second pass
    bytestr = bytearray()

    for (t, d) in first_pass.cmd_list:
        new_bytes = bytes()

        if t == 'bytes':
            new_bytes = d

        if t == 'ref':
            (ref_offset, labelname, width) = cast(Ref, d)

            if labelname not in first_pass.label_dict:
                raise AsmError(f'Undefined label {labelname} referenced at 0x{ref_offset:04X}')

            label_offset = first_pass.label_dict[labelname]

            if label_offset >= 1 << (8 * width):
                raise AsmError(f'Label {labelname} at 0x{label_offset:X} does not fit in {width} byte(s)')

            new_bytes = struct.pack(IMMEDIATE_PACK[width], label_offset)

        bytestr += cast(bytes, new_bytes)

    # Dumping results
    lg.info(f'Assembled {len(bytestr)} bytes')
    return bytes(bytestr)


def compile_source(contents: str, modulename: str = 'main', optimize: bool = True) -> bytes:
    item = CompilationItem()
    item.modulename = modulename
    item.contents = contents
    return compile_items([item], optimize)
