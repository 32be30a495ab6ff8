# Stack
PUSH32 = 0x00  # push I4
POP = 0x01  # drop [SP]
LOAD = 0x02  # A -> M[A]
STORE = 0x03  # V A -> M[A] = V
PUSH8 = 0x04  # push U1
PUSH16 = 0x05  # push U2
CLONE = 0x06  # push S[SP]
LOADS = 0x07  # O -> S[SP + O]
STORS = 0x08  # V O -> S[SP + O] = V
SWAP = 0x09  # A B -> B A

# Control flow
JMP = 0x10  # T -> IP = T
JZ = 0x11  # V T -> if V == 0 IP = T
JNZ = 0x12  # V T -> if V != 0 IP = T
JG = 0x13  # V1 V2 T -> if V1 > V2 IP = T
JGE = 0x14  # V1 V2 T -> if V1 >= V2 IP = T
JE = 0x15  # V1 V2 T -> if V1 == V2 IP = T
JNE = 0x16  # V1 V2 T -> if V1 != V2 IP = T

# Arithmetic
AND = 0x20  # A B -> A & B
OR = 0x21  # A B -> A | B
XOR = 0x22  # A B -> A ^ B
NOT = 0x23  # A -> ~A
INC = 0x24  # A -> A + 1
DEC = 0x25  # A -> A - 1
ADD = 0x26  # A B -> A + B
SUB = 0x27  # A B -> A - B
SHL = 0x28  # A B -> A << B
SHR = 0x29  # A B -> A >> B
MUL = 0x2A  # A B -> A * B
DIV = 0x2B  # A B -> A / B
MOD = 0x2C  # A B -> A % B
NEG = 0x2D  # A -> -A
ABS = 0x2E  # A -> |A|

# Emulated
DEBUG = 0xFE  # trace hook
NOP = 0xFF

MNEMONICS = {
    PUSH32: 'push32',
    POP: 'pop',
    LOAD: 'load',
    STORE: 'store',
    PUSH8: 'push8',
    PUSH16: 'push16',
    CLONE: 'clone',
    LOADS: 'loads',
    STORS: 'stors',
    SWAP: 'swap',

    JMP: 'jmp',
    JZ: 'jz',
    JNZ: 'jnz',
    JG: 'jg',
    JGE: 'jge',
    JE: 'je',
    JNE: 'jne',

    AND: 'and',
    OR: 'or',
    XOR: 'xor',
    NOT: 'not',
    INC: 'inc',
    DEC: 'dec',
    ADD: 'add',
    SUB: 'sub',
    SHL: 'shl',
    SHR: 'shr',
    MUL: 'mul',
    DIV: 'div',
    MOD: 'mod',
    NEG: 'neg',
    ABS: 'abs',

    DEBUG: 'debug',
    NOP: 'nop'
}

# Immediate operand width in bytes
IMMEDIATES = {
    PUSH32: 4,
    PUSH8: 1,
    PUSH16: 2
}


def immediate_width(op: int) -> int:
    return IMMEDIATES.get(op, 0)


def is_defined(op: int) -> bool:
    return op in MNEMONICS
