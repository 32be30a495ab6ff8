import bvm.common.ops as ops
import bvm.sasm.asm as asm
from bvm.sasm.disasm import disassemble, to_source

from unit_utils import program, push8, push16, push32, assemble_file


def test_listing():
    code = program(push8(5), push32(-1), 200, ops.ADD, push16(0xA000))

    assert disassemble(code) == [
        '0x0000\tpush8\t0x5',
        '0x0002\tpush32\t-0x1',
        '0x0007\t.byte\t0xc8',
        '0x0008\tadd',
        '0x0009\tpush16\t0xa000',
    ]


def test_truncated_immediate():
    assert disassemble(bytes([ops.PUSH16, 0x01])) == [
        '0x0000\t.byte\t0x05',
        '0x0001\t.byte\t0x01',
    ]


def test_truncated_tail_reassembles():
    code = program(ops.NOP, bytes([ops.PUSH32, 0x06, 0x00]))
    listing = disassemble(code)

    assert listing[0] == '0x0000\tnop'
    assert listing[1:] == ['0x0001\t.byte\t0x00', '0x0002\t.byte\t0x06', '0x0003\t.byte\t0x00']
    assert asm.compile_source(to_source(listing), optimize=False) == code


def test_listing_reassembles():
    code = assemble_file('programs/sum.sasm') + bytes([200])
    source = to_source(disassemble(code))

    assert asm.compile_source(source, optimize=False) == code
