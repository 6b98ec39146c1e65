"""
Exception hierarchy for the calc expression calculator.

Classes:
    CalcError: Base class for every error tied to a span of the script.
    ParseError: Lexical or syntactic error; aborts the current expression.
    EvaluationError: Runtime error raised while computing a value.
    DivisionByZeroError: Division or modulus by zero.
    InvalidOperandTypeError: Operator applied to a value of the wrong type.
    InputError: The input stream failed; fatal to the whole session.
    ConfigError: Invalid configuration file or value.

Every ``CalcError`` carries an ``ErrorKind`` code, the ``Span`` it refers to
and a human-readable message. Two errors with the same ``key`` describe the
same problem and are reported once.
"""

from calc.calc_constants import ErrorKind
from calc.calc_script import Span


class CalcError(Exception):
    """An error located in the script.

    Attributes:
        code (ErrorKind): What went wrong.
        extent (Span): Where it went wrong.
        message (str): Human-readable description.
    """

    def __init__(self, code: ErrorKind, extent: Span, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.extent = extent
        self.message = message

    @property
    def key(self) -> tuple[ErrorKind, Span]:
        return (self.code, self.extent)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {self.extent!r}, {self.message!r})"


class ParseError(CalcError, SyntaxError):
    """Raised when a token cannot appear where the parser found it."""


class EvaluationError(CalcError):
    """Raised when a well-formed expression cannot be evaluated."""


class DivisionByZeroError(EvaluationError, ZeroDivisionError):
    pass


class InvalidOperandTypeError(EvaluationError, TypeError):
    pass


class InputError(OSError):
    """Raised when reading the script fails.

    Unlike ``CalcError`` this is not recoverable: the session's stream is in
    an unknown state and must be abandoned.
    """


class ConfigError(Exception):
    """Raised for unreadable or invalid calculator configuration.

    Attributes:
        problems (list[str]): Individual problems found, if any.
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []
