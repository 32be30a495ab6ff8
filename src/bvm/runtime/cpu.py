import struct
import logging as lg
from enum import Enum
from typing import Callable

import bvm.common.ops as ops
from bvm.runtime.memmap import MemoryMap, to_int32
from bvm.runtime.stack import Stack
from bvm.runtime.errors import VMError, StackOverflow, StackUnderflow, VMArithmeticError


class Status(Enum):
    OK = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2
    ARITHMETIC_ERROR = 3


ERROR_STATUS = {
    StackOverflow: Status.STACK_OVERFLOW,
    StackUnderflow: Status.STACK_UNDERFLOW,
    VMArithmeticError: Status.ARITHMETIC_ERROR
}

IMMEDIATE_FORMATS = {
    ops.PUSH32: '<i',
    ops.PUSH8: '<B',
    ops.PUSH16: '<H'
}


def trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


def trunc_mod(a: int, b: int) -> int:
    return a - b * trunc_div(a, b)


DebugHook = Callable[['Interpreter'], None]


class Interpreter():
    code: bytes | memoryview
    ip: int  # Instruction pointer
    stack: Stack
    memory: MemoryMap
    ticks: int

    def __init__(self, memory: MemoryMap | None = None, on_debug: DebugHook | None = None):
        # A map passed in may be shared with other interpreters
        self.memory = memory if memory is not None else MemoryMap()
        self.on_debug = on_debug

        self.code = b''
        self.ip = 0
        self.stack = Stack()
        self.ticks = 0

    def load(self, code: bytes | bytearray | memoryview):
        ''' Attach a program; the memory map is left as it is '''
        self.code = memoryview(code).toreadonly()
        self.ip = 0
        self.stack.reset()
        lg.debug(f'Loaded {len(self.code)} bytes of code')

    @property
    def sp(self) -> int:
        return self.stack.sp

    # - Helpers - #

    def debug_dump(self):
        state = [f'{k}:{v:X}' for k, v in {
            'IP': self.ip,
            'SP': self.sp,
            'TICKS': self.ticks
        }.items()]

        state.append(f'[{" ".join(str(v) for v in self.stack.items()[:8])}]')

        lg.debug(' '.join(state))

    def next_fmt(self, fmt: str) -> int:
        width = struct.calcsize(fmt)
        addr = self.ip
        # Bytes past the end of the program read as zero
        buf = bytes(self.code[addr:addr + width]).ljust(width, b'\x00')
        (value,) = struct.unpack(fmt, buf)
        self.ip += width
        return value

    def push_literal(self, op: int):
        value = self.next_fmt(IMMEDIATE_FORMATS[op])
        self.stack.require(0, 1)
        self.stack.raw_push(value)

    def arithm_pair(self, op: Callable[[int, int], int]):
        self.stack.require(2, 1)
        b = self.stack.raw_pop()
        a = self.stack.raw_pop()
        self.stack.raw_push(to_int32(op(a, b)))

    def arithm_single(self, op: Callable[[int], int]):
        self.stack.require(1, 1)
        v = self.stack.raw_pop()
        self.stack.raw_push(to_int32(op(v)))

    def jump_if(self, cond: Callable[[int], bool]):
        self.stack.require(2)
        target = self.stack.raw_pop()
        v = self.stack.raw_pop()

        if cond(v):
            self.ip = target

    def jump_cmp(self, cond: Callable[[int, int], bool]):
        self.stack.require(3)
        target = self.stack.raw_pop()
        v2 = self.stack.raw_pop()
        v1 = self.stack.raw_pop()

        if cond(v1, v2):
            self.ip = target

    def check_divisor(self):
        self.stack.require(2, 1)

        if self.stack.peek() == 0:
            raise VMArithmeticError(f'Division by zero at IP {self.ip - 1:X}')

    # - Operations - #

    def pop(self):
        self.stack.pop()

    def load_mem(self):
        self.stack.require(1, 1)
        addr = self.stack.raw_pop()
        self.stack.raw_push(self.memory.load(addr))

    def store_mem(self):
        self.stack.require(2)
        addr = self.stack.raw_pop()
        value = self.stack.raw_pop()
        self.memory.store(addr, value)

    def clone(self):
        # Reads slot SP as is; out of range on an empty stack
        value = self.stack.slot(self.stack.sp)
        self.stack.push(value)

    def loads(self):
        self.stack.require(1, 1)
        index = self.stack.sp + 1 + self.stack.peek()
        self.stack.check_index(index)
        self.stack.raw_pop()
        self.stack.raw_push(self.stack.slot(index))

    def stors(self):
        self.stack.require(2)
        index = self.stack.sp + 2 + self.stack.peek()
        self.stack.check_index(index)
        self.stack.raw_pop()
        self.stack.set_slot(index, self.stack.raw_pop())

    def swap(self):
        self.stack.require(2, 2)
        a = self.stack.raw_pop()
        b = self.stack.raw_pop()
        self.stack.raw_push(a)
        self.stack.raw_push(b)

    def jmp(self):
        self.ip = self.stack.pop()

    def jz(self):
        self.jump_if(lambda v: v == 0)

    def jnz(self):
        self.jump_if(lambda v: v != 0)

    def jg(self):
        self.jump_cmp(lambda v1, v2: v1 > v2)

    def jge(self):
        self.jump_cmp(lambda v1, v2: v1 >= v2)

    def je(self):
        self.jump_cmp(lambda v1, v2: v1 == v2)

    def jne(self):
        self.jump_cmp(lambda v1, v2: v1 != v2)

    # - Arithmetic - #

    def band(self):
        self.arithm_pair(lambda a, b: a & b)

    def bor(self):
        self.arithm_pair(lambda a, b: a | b)

    def xor(self):
        self.arithm_pair(lambda a, b: a ^ b)

    def inv(self):
        self.arithm_single(lambda v: ~v)

    def inc(self):
        self.arithm_single(lambda v: v + 1)

    def dec(self):
        self.arithm_single(lambda v: v - 1)

    def add(self):
        self.arithm_pair(lambda a, b: a + b)

    def sub(self):
        self.arithm_pair(lambda a, b: a - b)

    def shl(self):
        self.arithm_pair(lambda a, b: a << (b & 31))

    def shr(self):
        self.arithm_pair(lambda a, b: a >> (b & 31))

    def mul(self):
        self.arithm_pair(lambda a, b: a * b)

    def div(self):
        self.check_divisor()
        self.arithm_pair(trunc_div)

    def mod(self):
        self.check_divisor()
        self.arithm_pair(trunc_mod)

    def neg(self):
        self.arithm_single(lambda v: -v)

    def absolute(self):
        self.arithm_single(lambda v: abs(v))

    def debug(self):
        if self.on_debug is not None:
            self.on_debug(self)
        else:
            self.debug_dump()

    def nop(self):
        pass

    HANDLERS = {
        ops.POP: pop,
        ops.LOAD: load_mem,
        ops.STORE: store_mem,
        ops.CLONE: clone,
        ops.LOADS: loads,
        ops.STORS: stors,
        ops.SWAP: swap,

        ops.JMP: jmp,
        ops.JZ: jz,
        ops.JNZ: jnz,
        ops.JG: jg,
        ops.JGE: jge,
        ops.JE: je,
        ops.JNE: jne,

        ops.AND: band,
        ops.OR: bor,
        ops.XOR: xor,
        ops.NOT: inv,
        ops.INC: inc,
        ops.DEC: dec,
        ops.ADD: add,
        ops.SUB: sub,
        ops.SHL: shl,
        ops.SHR: shr,
        ops.MUL: mul,
        ops.DIV: div,
        ops.MOD: mod,
        ops.NEG: neg,
        ops.ABS: absolute,

        ops.DEBUG: debug,
        ops.NOP: nop
    }

    # -- Implementation -- #

    def restart(self):
        lg.debug(f'Restarting program at tick {self.ticks}')
        self.ip = 0
        self.stack.reset()

    def exec_next(self):
        ''' Execute one instruction, raising VMError on a fault.

        A faulting instruction leaves stack and memory untouched, but IP
        has already moved past it.
        '''
        self.ticks += 1

        if not 0 <= self.ip < len(self.code):
            self.restart()

        if not self.code:
            return

        op = self.code[self.ip]
        self.ip += 1

        if op in IMMEDIATE_FORMATS:
            self.push_literal(op)
            return

        handler = self.HANDLERS.get(op)

        # Undefined opcodes are one-byte no-ops
        if handler is not None:
            handler(self)

    def tick(self) -> Status:
        try:
            self.exec_next()
        except VMError as e:
            lg.debug(f'Tick {self.ticks} failed: {e}')
            return ERROR_STATUS[type(e)]

        return Status.OK
