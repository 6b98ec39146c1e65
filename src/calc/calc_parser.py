"""
calc Expression Parser

Parses calc tokens into expression trees, one newline-terminated expression
per ``next_expr()`` call, pulling tokens from the lexer only as they are needed.

Grammar (extended dialect), loosest tier first
----------------------------------------------
    expr            := logical_or
    logical_or      := logical_and ( '||' logical_and )*
    logical_and     := equality ( '&&' equality )*
    equality        := ordering ( ('==' | '!=') ordering )*
    ordering        := additive ( ('<' | '>' | '<=' | '>=') additive )*
    additive        := multiplicative ( ('+' | '-') multiplicative )*
    multiplicative  := unary ( ('*' | '/' | '%') unary )*
    unary           := ('+' | '-' | '!')* primary
    primary         := BOOLEAN | INTEGER | '(' expr ')'

The simple dialect keeps only ``additive`` and ``multiplicative``, whose
operands are ``term := INTEGER | '(' expr ')'``.

Every binary tier folds to the left. ``unary`` collects its prefix operators
in a loop and applies them innermost first, so they group to the right.
``+`` and ``-`` reach the parser with both their unary and binary flags; the
production that consumes them decides, and the node it builds reports the
matching fixed flags.

Parser Behavior
---------------
- A malformed expression raises ``ParseError``. Before the error propagates
  the parser discards the rest of the line, so the next call starts cleanly.
- Errors are also collected in ``Parser.errors``, once per ``(code, extent)``.
- Reaching the end of input returns ``None``; that is not an error.
- Parentheses may nest at most ``MAX_PAREN_DEPTH`` levels. Deeper input is
  reported as ``NESTING_TOO_DEEP``.

Entry Points
------------
- ``next_expr()``: Parse the next expression of the session.
- ``parse_expr()``: Parse one expression at the current token.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import NoReturn

from calc.calc_ast import BinaryOp, ExprNode, Literal, UnaryOp, Value
from calc.calc_constants import MAX_PAREN_DEPTH, Dialect, ErrorKind, TokenKind
from calc.calc_errors import ParseError
from calc.calc_lexer import Lexer, Token
from calc.calc_script import Span
from calc.calc_symbols import SymbolClassifier

OR_OPS = frozenset({TokenKind.LOGICAL_OR})
AND_OPS = frozenset({TokenKind.LOGICAL_AND})
EQUALITY_OPS = frozenset({TokenKind.EQUAL, TokenKind.NOT_EQUAL})
ORDERING_OPS = frozenset(
    {
        TokenKind.LESS,
        TokenKind.GREATER,
        TokenKind.LESS_EQUAL,
        TokenKind.GREATER_EQUAL,
    }
)
ADDITIVE_OPS = frozenset({TokenKind.ADD, TokenKind.SUB})
MULTIPLICATIVE_OPS = frozenset({TokenKind.MUL, TokenKind.DIV, TokenKind.MOD})
UNARY_OPS = frozenset({TokenKind.ADD, TokenKind.SUB, TokenKind.LOGICAL_NOT})


class Parser:
    """
    calc Parser Class

    Turns the token stream of one session into a sequence of expression trees.
    The parser owns its token source for its whole lifetime; the lookahead
    token, the error list and the lexer's script stay valid across calls, even
    after an error.

    Attributes
    ----------
    dialect : Dialect
        Which grammar to apply.
    classifier : SymbolClassifier
        Converts literal spellings to values.
    errors : list[ParseError]
        Every distinct error reported so far, in order.

    Raises
    ------
    ParseError
        From ``next_expr`` when the next expression is malformed.
    """

    def __init__(
        self,
        tokens: Lexer | Iterable[Token],
        classifier: SymbolClassifier | None = None,
    ) -> None:
        if isinstance(tokens, Lexer):
            self.classifier = classifier or tokens.classifier
            self._pull: Callable[[], Token] = tokens.next_token
        else:
            self.classifier = classifier or SymbolClassifier()
            self._pull = self._iterate(iter(tokens))
        self.dialect: Dialect = self.classifier.dialect
        self.errors: list[ParseError] = []
        self._error_keys: set[tuple[ErrorKind, Span]] = set()
        self._current: Token | None = None
        self._ended_expr = False
        self._depth = 0

    @staticmethod
    def _iterate(it: Iterator[Token]) -> Callable[[], Token]:
        last_end = 0

        def pull() -> Token:
            nonlocal last_end
            tok = next(it, None)
            if tok is None:
                return Token(TokenKind.EOF, "", Span(last_end, last_end))
            last_end = tok.extent.end
            return tok

        return pull

    def current(self) -> Token:
        if self._current is None:
            self._current = self._pull()
        return self._current

    def advance(self) -> Token:
        """Consumes the current token and returns it. ``EOF`` is never consumed."""
        tok = self.current()
        if tok.kind != TokenKind.EOF:
            self._current = self._pull()
        return tok

    def at(self, kinds: frozenset[TokenKind]) -> bool:
        return self.current().kind in kinds

    # Session entry point

    def next_expr(self, skip_leading_newlines: bool = True) -> ExprNode | None:
        """Parse the next expression of the session.

        Args:
            skip_leading_newlines (bool): Skip blank lines before the expression.
                If False, a blank line is reported as an unexpected newline.

        Returns:
            ExprNode | None: The parsed tree, or None at end of input.

        Raises:
            ParseError: If the expression is malformed. The rest of its line
                has been discarded by then.
        """
        if self._ended_expr and self.current().kind == TokenKind.NEWLINE:
            self.advance()
        self._ended_expr = False

        if skip_leading_newlines:
            while self.current().kind == TokenKind.NEWLINE:
                self.advance()

        if self.current().kind == TokenKind.EOF:
            return None

        try:
            expr = self.parse_expr()
            tok = self.current()
            if tok.kind not in (TokenKind.NEWLINE, TokenKind.EOF):
                self.report_unexpected_token(tok, "expected end of line")
        except ParseError:
            self.synchronize()
            self._ended_expr = True
            raise
        except RecursionError:
            tok = self.current()
            self.synchronize()
            self._ended_expr = True
            self.report_nesting(tok.extent)

        self._ended_expr = True
        return expr

    def synchronize(self) -> None:
        """Discard tokens up to (not including) the next newline or end of input."""
        while self.current().kind not in (TokenKind.NEWLINE, TokenKind.EOF):
            self.advance()

    # Grammar

    def parse_expr(self) -> ExprNode:
        if self.dialect == Dialect.SIMPLE:
            return self.parse_additive()
        return self.parse_logical_or()

    def _parse_left_assoc(
        self, parse_operand: Callable[[], ExprNode], kinds: frozenset[TokenKind]
    ) -> ExprNode:
        left = parse_operand()
        while self.at(kinds):
            op_tok = self.advance()
            right = parse_operand()
            left = BinaryOp(
                op_tok.kind,
                left,
                right,
                left.extent.cover(right.extent),
                op_tok.extent,
            )
        return left

    def parse_logical_or(self) -> ExprNode:
        return self._parse_left_assoc(self.parse_logical_and, OR_OPS)

    def parse_logical_and(self) -> ExprNode:
        return self._parse_left_assoc(self.parse_equality, AND_OPS)

    def parse_equality(self) -> ExprNode:
        return self._parse_left_assoc(self.parse_ordering, EQUALITY_OPS)

    def parse_ordering(self) -> ExprNode:
        return self._parse_left_assoc(self.parse_additive, ORDERING_OPS)

    def parse_additive(self) -> ExprNode:
        return self._parse_left_assoc(self.parse_multiplicative, ADDITIVE_OPS)

    def parse_multiplicative(self) -> ExprNode:
        if self.dialect == Dialect.SIMPLE:
            return self._parse_left_assoc(self.parse_primary, MULTIPLICATIVE_OPS)
        return self._parse_left_assoc(self.parse_unary, MULTIPLICATIVE_OPS)

    def parse_unary(self) -> ExprNode:
        prefixes: list[Token] = []
        while self.at(UNARY_OPS):
            prefixes.append(self.advance())
        node = self.parse_primary()
        for op_tok in reversed(prefixes):
            node = UnaryOp(
                op_tok.kind, node, op_tok.extent.cover(node.extent), op_tok.extent
            )
        return node

    def parse_primary(self) -> ExprNode:
        tok = self.current()

        if tok.kind == TokenKind.INTEGER:
            try:
                number = self.classifier.int_value(tok.value)
            except OverflowError:
                self.report_error(
                    ParseError(
                        ErrorKind.INTEGER_OUT_OF_RANGE,
                        tok.extent,
                        f"Integer literal '{tok.value}' is out of range.",
                    )
                )
            self.advance()
            return Literal(Value.integer(number), tok.extent)

        if tok.kind == TokenKind.BOOLEAN and self.dialect == Dialect.EXTENDED:
            self.advance()
            return Literal(
                Value.boolean(self.classifier.bool_value(tok.value)), tok.extent
            )

        if tok.kind == TokenKind.LPAREN:
            return self.parse_parenthesized()

        if tok.kind == TokenKind.UNKNOWN:
            self.report_unknown_token(tok)
        self.report_unexpected_token(tok)

    def parse_parenthesized(self) -> ExprNode:
        if self._depth >= MAX_PAREN_DEPTH:
            self.report_nesting(self.current().extent)
        open_tok = self.advance()
        self._depth += 1
        try:
            inner = self.parse_expr()
        finally:
            self._depth -= 1
        close_tok = self.current()
        if close_tok.kind != TokenKind.RPAREN:
            self.report_error(
                ParseError(
                    ErrorKind.MISSING_CLOSING_PARENTHESIS,
                    Span(open_tok.extent.start, close_tok.extent.start),
                    "Missing closing parenthesis.",
                )
            )
        self.advance()
        return _regroup(inner, open_tok.extent.cover(close_tok.extent))

    # Error reporting

    def report_error(self, error: ParseError) -> NoReturn:
        """Record ``error`` unless an identical one was seen, then raise it."""
        if error.key not in self._error_keys:
            self._error_keys.add(error.key)
            self.errors.append(error)
        raise error

    def report_nesting(self, extent: Span) -> NoReturn:
        self.report_error(
            ParseError(
                ErrorKind.NESTING_TOO_DEEP, extent, "Expression is nested too deeply."
            )
        )

    def report_unknown_token(self, tok: Token) -> NoReturn:
        self.report_error(
            ParseError(ErrorKind.UNKNOWN_TOKEN, tok.extent, f"Unknown token '{tok.value}'.")
        )

    def report_unexpected_token(
        self, tok: Token, expected: str | None = None
    ) -> NoReturn:
        if tok.kind == TokenKind.UNKNOWN:
            self.report_unknown_token(tok)
        if tok.kind == TokenKind.EOF:
            message = "Unexpected end of input."
        elif tok.kind == TokenKind.NEWLINE:
            message = "Unexpected end of line."
        else:
            message = f"Unexpected token '{tok.value}'"
            message += f"; {expected}." if expected else "."
        self.report_error(ParseError(ErrorKind.UNEXPECTED_TOKEN, tok.extent, message))


def _regroup(node: ExprNode, extent: Span) -> ExprNode:
    """Returns a copy of ``node`` whose extent includes its parentheses."""
    if isinstance(node, Literal):
        return Literal(node.literal, extent)
    if isinstance(node, UnaryOp):
        return UnaryOp(node.op, node.operand, extent, node.op_extent)
    return BinaryOp(node.op, node.left, node.right, extent, node.op_extent)
