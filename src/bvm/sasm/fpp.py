import struct
import logging as lg
from typing import List, Tuple, Dict, Any

import bvm.common.ops as ops
from bvm.common.hwconf import INT32_MIN

Tokens = List[Any]
Ref = Tuple[int, str, int]  # offset, qualified label, width

IMMEDIATE_PACK = {
    1: '<B',
    2: '<H',
    4: '<I'
}

# Names accepted on top of ops.MNEMONICS
ALIASES = {
    'pushb': ops.PUSH8,
    'pushw': ops.PUSH16,
    'stor': ops.STORE
}

GENERIC_PUSH = 'push'


class AsmError(Exception):
    pass


def parse_number(text: str) -> int:
    sign = -1 if text.startswith('-') else 1
    digits = text.lstrip('+-').lower()

    if digits.startswith('0x'):
        return sign * int(digits[2:], 16)

    if digits.startswith('0b'):
        return sign * int(digits[2:], 2)

    return sign * int(digits)


def fits(width: int, value: int) -> bool:
    if width == 4:
        return INT32_MIN <= value <= 0xFFFFFFFF

    return 0 <= value < (1 << (8 * width))


class FPP:
    ''' First pass processor '''
    cmd_list: List[Tuple[str, bytes | Ref]]
    label_dict: Dict[str, int]

    def __init__(self, optimize: bool = True):
        self.cmd_list = list()
        self.offset = 0
        self.namespace = "<global>"
        self.line = 0
        self.label_dict = dict()
        self.optimize = optimize
        self.opcodes = {name: op for op, name in ops.MNEMONICS.items()}
        self.opcodes.update(ALIASES)

    def fail(self, message: str):
        raise AsmError(f'{self.namespace}:{self.line}: {message}')

    def get_qualified_name(self, name: str, namespace: str | None = None):
        if namespace is None:
            namespace = self.namespace

        qname = namespace + '::' + name
        return qname

    def resolve_name(self, tokens: Tokens):
        if len(tokens) == 1:
            # Unqualified
            name = self.get_qualified_name(tokens[0])
        else:
            # Qualified
            name = self.get_qualified_name(tokens[1], tokens[0])  # name, namespace

        return name

    # Emitters
    def issue_bytes(self, bytestr: bytes):
        self.cmd_list.append(('bytes', bytestr))
        self.offset += len(bytestr)

    def issue_op(self, op: int):
        lg.debug(f'Issuing command 0x{op:02X} @ 0x{self.offset:04X}')
        self.issue_bytes(bytes([op]))

    def issue_immediate(self, width: int, value: int):
        if not fits(width, value):
            self.fail(f'Immediate {value} does not fit in {width} byte(s)')

        self.issue_bytes(struct.pack(IMMEDIATE_PACK[width], value & 0xFFFFFFFF))

    # Handlers
    def on_label(self, tokens: Tokens):
        labelname = str(tokens[0])

        if labelname[0].isdigit():
            self.fail(f'Label cannot be a number: {labelname}')

        qlabelname = self.get_qualified_name(labelname)

        if qlabelname in self.label_dict:
            self.fail(f'Label already defined: {labelname}')

        self.label_dict[qlabelname] = self.offset
        lg.debug(f'Label {qlabelname} @ 0x{self.offset:04X}')

    def on_ref(self, refname: Tokens, width: int):
        labelname = self.resolve_name(refname)

        lg.debug(f'Ref {labelname}')

        self.cmd_list.append(('ref', (self.offset, labelname, width)))
        self.offset += width  # placeholder-bytes

    def on_byte(self, operand: Tokens):
        if not operand or operand[0][0] != 'number':
            self.fail('.byte takes one numeric operand')

        (_, value) = operand[0]
        self.issue_immediate(1, parse_number(value))

    def on_push(self, op: int | None, operand: Tokens):
        if not operand:
            self.fail('Missing push operand')

        ((kind, value),) = operand

        if kind == 'ref':
            # Label reference, patched in the second pass
            op = ops.PUSH32 if op is None else op
            self.issue_op(op)
            self.on_ref(value, ops.immediate_width(op))
            return

        number = parse_number(value)

        if op is None:
            op = ops.PUSH32

            if self.optimize and 0 <= number < 0x100:
                op = ops.PUSH8
            elif self.optimize and 0 <= number < 0x10000:
                op = ops.PUSH16

        self.issue_op(op)
        self.issue_immediate(ops.immediate_width(op), number)

    def on_instruction(self, tokens: Tokens):
        mnemonic = str(tokens[0]).lower()
        operand = list(tokens[1:])

        if mnemonic == '.byte':
            self.on_byte(operand)
            return

        if mnemonic == GENERIC_PUSH:
            self.on_push(None, operand)
            return

        if mnemonic not in self.opcodes:
            self.fail(f'Unknown opcode: {mnemonic}')

        op = self.opcodes[mnemonic]

        if ops.immediate_width(op):
            self.on_push(op, operand)
            return

        if operand:
            self.fail(f'Extra characters after {mnemonic}')

        self.issue_op(op)
