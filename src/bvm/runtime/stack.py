''' Fixed-capacity operand stack '''

from bvm.common.hwconf import STACK_SIZE
from bvm.runtime.errors import StackOverflow, StackUnderflow


class Stack:
    ''' Signed 32-bit LIFO growing toward index 0.

    `sp` is the index of the top slot; `sp == capacity` means empty.
    push/pop/slot/set_slot are checked. The raw_* methods skip checks and
    are only called once `require` has validated the whole instruction.
    '''
    cells: list[int]
    sp: int

    def __init__(self, capacity: int = STACK_SIZE):
        self.capacity = capacity
        self.cells = [0] * capacity
        self.sp = capacity

    def reset(self):
        self.sp = self.capacity

    @property
    def depth(self) -> int:
        return self.capacity - self.sp

    def items(self) -> list[int]:
        ''' Live values, top first '''
        return self.cells[self.sp:]

    # - Checks - #

    def require(self, pops: int, pushes: int = 0):
        if self.depth < pops:
            raise StackUnderflow(f'Need {pops} values, have {self.depth}')

        if self.sp + pops - pushes < 0:
            raise StackOverflow(f'No room for {pushes} values at SP {self.sp}')

    def check_index(self, index: int):
        if index < 0:
            raise StackOverflow(f'Stack index {index} below 0')

        if index >= self.capacity:
            raise StackUnderflow(f'Stack index {index} above {self.capacity - 1}')

    # - Checked - #

    def push(self, value: int):
        self.require(0, 1)
        self.raw_push(value)

    def pop(self) -> int:
        self.require(1)
        return self.raw_pop()

    def peek(self, depth: int = 0) -> int:
        self.require(depth + 1)
        return self.cells[self.sp + depth]

    def slot(self, index: int) -> int:
        self.check_index(index)
        return self.cells[index]

    def set_slot(self, index: int, value: int):
        self.check_index(index)
        self.cells[index] = value

    # - Unchecked - #

    def raw_push(self, value: int):
        self.sp -= 1
        self.cells[self.sp] = value

    def raw_pop(self) -> int:
        value = self.cells[self.sp]
        self.sp += 1
        return value
