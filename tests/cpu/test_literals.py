import bvm.common.ops as ops
import bvm.runtime.cpu as cpu

from unit_utils import program, push8, push16, push32, run_ticks


def test_push32():
    proc = run_ticks(push32(-2), 1)

    assert proc.stack.peek() == -2
    assert proc.ip == 5


def test_push32_high_bit_is_sign():
    proc = run_ticks(program(ops.PUSH32, bytes([0, 0, 0, 0x80])), 1)
    assert proc.stack.peek() == -0x80000000


def test_push8_is_unsigned():
    proc = run_ticks(push8(0xFF), 1)

    assert proc.stack.peek() == 255
    assert proc.ip == 2


def test_push16_is_unsigned():
    proc = run_ticks(push16(0xBEEF), 1)

    assert proc.stack.peek() == 0xBEEF
    assert proc.ip == 3


def test_truncated_immediate_reads_zero():
    proc = run_ticks(bytes([ops.PUSH32, 0x01]), 1)

    assert proc.stack.peek() == 1
    assert proc.ip == 5

    # Next tick restarts and pushes again onto a cleared stack
    assert proc.tick() == cpu.Status.OK
    assert proc.ip == 5
    assert proc.stack.items() == [1]


def test_program_is_not_copied():
    code = bytearray(push8(1))
    proc = cpu.Interpreter()
    proc.load(code)
    code[1] = 2

    proc.tick()
    assert proc.stack.peek() == 2
