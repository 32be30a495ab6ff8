''' Listing generator '''

from pathlib import Path
import logging as lg
import struct

import click

import bvm.common.ops as ops

IMMEDIATE_UNPACK = {
    ops.PUSH32: '<i',
    ops.PUSH8: '<B',
    ops.PUSH16: '<H'
}


def disassemble(code: bytes) -> list[str]:
    ''' One line per instruction: address, mnemonic and immediate.

    Undefined opcodes come out as `.byte`, and so does a push whose
    immediate runs past the end of the code, byte by byte, so the listing
    assembles back to the same binary.
    '''
    lines = []
    i = 0

    while i < len(code):
        op = code[i]
        line = f'0x{i:04x}\t'
        i += 1

        width = ops.immediate_width(op)

        if not ops.is_defined(op):
            lines.append(line + f'.byte\t0x{op:02x}')
            continue

        if i + width > len(code):
            # Truncated immediate
            lines.extend(f'0x{a:04x}\t.byte\t0x{code[a]:02x}' for a in range(i - 1, len(code)))
            break

        line += ops.MNEMONICS[op]

        if width:
            (value,) = struct.unpack(IMMEDIATE_UNPACK[op], bytes(code[i:i + width]))
            line += f'\t{value:#x}'
            i += width

        lines.append(line)

    return lines


def to_source(listing: list[str]) -> str:
    ''' Strip addresses, leaving assembler input '''
    return '\n'.join(' '.join(line.split('\t')[1:]) for line in listing) + '\n'


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-s', '--source', is_flag=True, help='Omit addresses')
@click.argument('binary', type=Path)
def disasm(verbose: bool, source: bool, binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)

    code = binary.read_bytes()
    lg.debug(f'Disassembling {len(code)} bytes')
    listing = disassemble(code)

    if source:
        click.echo(to_source(listing), nl=False)
    else:
        click.echo('\n'.join(listing))


if __name__ == '__main__':
    disasm()
