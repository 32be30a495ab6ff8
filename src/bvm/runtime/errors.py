class VMError(Exception):
    ''' Base class for faults detected while executing an instruction '''
    pass


class StackOverflow(VMError):
    pass


class StackUnderflow(VMError):
    pass


class VMArithmeticError(VMError, ArithmeticError):
    pass
