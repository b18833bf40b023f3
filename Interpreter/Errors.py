class InterpreterError(Exception):
    """Base class of every failure raised while walking a test function."""


class EvaluationError(InterpreterError):
    pass


class TypeMismatch(EvaluationError):
    def __init__(self, left, operator, right):
        self.left, self.operator, self.right = left, operator, right
        super().__init__(f"type mismatch: {left} {operator} {right}")


class UnsupportedExpression(InterpreterError):
    pass


class StackUnderflow(InterpreterError):
    pass


class HarnessError(InterpreterError):
    pass


class CompilationError(Exception):
    pass
