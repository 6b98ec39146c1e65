"""
One calculator session: the glue between input, lexer, parser and evaluator.

A ``Session`` owns its input source for its whole lifetime. Each
``next_value()`` call reads just enough input for one expression, parses it,
evaluates it and returns the result, which suits both a REPL reading a
terminal and a batch run over a file.

Output contract:
    - a ``Value`` for every well-formed expression,
    - ``None`` once the input is exhausted,
    - a ``CalcError`` (parse or evaluation) for a bad expression; the session
      stays usable and the next call continues with the following line,
    - ``InputError`` if the input stream itself fails; the session is over.

Example:
    >>> session = Session("1 + 2\\n2 * 3 + 4\\n")
    >>> str(session.next_value()), str(session.next_value()), session.next_value()
    ('3', '10', None)
"""

from collections.abc import Iterator
from calc.calc_ast import ExprNode, Value
from calc.calc_constants import Dialect
from calc.calc_errors import CalcError, ParseError
from calc.calc_lexer import CharacterStream, CharSource, Lexer, Token
from calc.calc_parser import Parser
from calc.calc_script import Script
from calc.calc_symbols import SymbolClassifier


class Session:
    """Parses and evaluates the expressions of one input source.

    Attributes:
        classifier (SymbolClassifier): Character rules of the session's dialect.
        stream (CharacterStream): The input.
        lexer (Lexer): Token source.
        parser (Parser): Expression parser.
    """

    def __init__(
        self,
        source: str | CharSource,
        dialect: Dialect = Dialect.EXTENDED,
        ascii_only: bool = False,
    ) -> None:
        self.classifier = SymbolClassifier(dialect, ascii_only)
        self.stream = CharacterStream(source)
        self.lexer = Lexer(self.stream, self.classifier)
        self.parser = Parser(self.lexer)

    @property
    def dialect(self) -> Dialect:
        return self.classifier.dialect

    @property
    def script(self) -> Script:
        return self.stream.script

    @property
    def errors(self) -> list[ParseError]:
        return self.parser.errors

    def next_expr(self, skip_leading_newlines: bool = True) -> ExprNode | None:
        return self.parser.next_expr(skip_leading_newlines)

    def next_value(self, skip_leading_newlines: bool = True) -> Value | None:
        """Parse and evaluate the next expression.

        Returns:
            Value | None: The expression's value, or None at end of input.

        Raises:
            ParseError: If the expression is malformed.
            EvaluationError: If it cannot be evaluated.
            InputError: If reading the input fails.
        """
        expr = self.next_expr(skip_leading_newlines)
        if expr is None:
            return None
        return expr.value()

    def tokens(self) -> Iterator[Token]:
        """Yields the raw tokens of the input instead of parsing it."""
        return self.lexer.tokens()

    def format_error(self, error: CalcError) -> str:
        """Render ``error`` as ``line:col: message`` plus the offending line.

        The second and third lines show the source line and a caret marker
        under the error's span, when that line has been read.
        """
        span = error.extent
        script = self.script
        line_no = script.line_number(span.start)
        col = script.column_number(span.start)
        header = f"{script.describe(span)}: {error.message}"

        line = script.line(line_no)
        if not line and len(span) == 0:
            return header
        width = max(1, min(len(span), len(line) - col + 1))
        marker = " " * (col - 1) + "^" * width
        return f"{header}\n    {line}\n    {marker}"
