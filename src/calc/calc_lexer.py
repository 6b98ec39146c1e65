"""
Lexical analyzer for the calc expression calculator.

This module converts raw characters into a stream of tokens, one token per
``Lexer.next_token()`` call, reading its input only as far as it needs to:

Classes:
    CharacterStream: Incremental character source with lookahead; records every
        consumed character in the session's ``Script``.
    Token: A classified, located unit of lexical input.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips blanks (space, tab and, unless ASCII-only, other space separators)
    - Emits one ``NEWLINE`` token per ``\\n``, ``\\r\\n`` or ``\\r`` and records
      the start of the next line
    - Recognizes:
        * Integer literals (maximal digit runs)
        * Boolean literals and operators, most specific spelling first
        * Unknown runs: maximal runs of characters that cannot start a token
    - Ends every scan with exactly one ``EOF`` token and never reads past it

The lexer never raises a parse error: unrecognized input becomes an
``UNKNOWN`` token for the parser to reject. Failures of the underlying stream
raise ``InputError``.

Example:
    >>> lexer = Lexer(CharacterStream("1 <= 2"))
    >>> lexer.next_token()
    Token(INTEGER, '1')
    >>> lexer.next_token()
    Token(LESS_EQUAL, '<=')

Exports:
    - CharSource
    - CharacterStream
    - Token
    - Lexer
"""

import io
from collections.abc import Iterator
from typing import Any, Protocol

from calc.calc_constants import TokenFlags, TokenKind, default_flags
from calc.calc_errors import InputError
from calc.calc_script import Script, Span
from calc.calc_symbols import SymbolClassifier


class CharSource(Protocol):
    """Anything with a text-mode ``read``, such as an open file or ``sys.stdin``."""

    def read(self, size: int = -1, /) -> str: ...  # pragma: no cover


class CharacterStream:
    """
    Reads characters from a string or text stream with on-demand lookahead.

    Characters are pulled from the underlying source one at a time. Looked-at
    characters wait in a lookahead buffer until consumed; consumed characters
    are appended to ``script``. Lookahead stops after a newline character, so
    peeking never waits for input from the following line.

    Attributes:
        script (Script): Everything consumed so far, with line starts.
    """

    def __init__(self, source: str | CharSource, script: Script | None = None):
        """
        Initializes the character stream.

        Args:
            source (str | CharSource): The input text, or a file-like object read
                incrementally with ``read(1)``.
            script (Script, optional): Buffer to record consumed characters in.
                A fresh one is created if omitted.
        """
        self._source: CharSource = io.StringIO(source) if isinstance(source, str) else source
        self._lookahead: list[str] = []
        self._exhausted = False
        self.script = script if script is not None else Script()

    @property
    def position(self) -> int:
        """Offset of the next character to be consumed."""
        return len(self.script)

    def _read(self) -> str:
        try:
            return self._source.read(1)
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Failed to read input: {e}") from e

    def _fill(self, count: int) -> None:
        while len(self._lookahead) < count and not self._exhausted:
            if self._lookahead and self._lookahead[-1] in ("\n", "\r"):
                break
            ch = self._read()
            if ch == "":
                self._exhausted = True
            else:
                self._lookahead.append(ch)

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if it lies past the
                end of input or past the next newline character.
        """
        if offset < 0:
            return ""
        self._fill(offset + 1)
        return self._lookahead[offset] if offset < len(self._lookahead) else ""

    def peek_text(self, count: int) -> str:
        """Returns up to ``count`` upcoming characters without consuming them."""
        self._fill(count)
        return "".join(self._lookahead[:count])

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        self._fill(1)
        if not self._lookahead:
            raise EOFError(
                f"Attempted to read past end of script at offset=<{self.position}>"
            )
        ch = self._lookahead.pop(0)
        self.script.append(ch)
        return ch

    def end_of_file(self) -> bool:
        """Checks if the stream has reached the end of the source input."""
        return self.peek() == ""


class Token:
    """Represents a single lexical token.

    Tokens are not modified after the lexer creates them.

    Attributes:
        kind (TokenKind): What the token is.
        value (str): The exact source text the token spans.
        extent (Span): Offsets of the token in the script.
        flags (TokenFlags): Arity, associativity and precedence information.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(
        self,
        kind: TokenKind,
        value: str,
        extent: Span,
        flags: TokenFlags | None = None,
        line: int = 1,
        col: int = 1,
    ):
        self.kind = kind
        self.value = value
        self.extent = extent
        self.flags = default_flags(kind) if flags is None else flags
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.value == other.value
            and self.extent == other.extent
            and self.flags == other.flags
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.extent, int(self.flags)))


class Lexer:
    """Lexical analyzer for calc expressions.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        classifier (SymbolClassifier): Character and spelling rules of the dialect.
    """

    def __init__(
        self, stream: CharacterStream, classifier: SymbolClassifier | None = None
    ) -> None:
        self.stream = stream
        self.classifier = classifier if classifier is not None else SymbolClassifier()

    @property
    def script(self) -> Script:
        return self.stream.script

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_blanks(self) -> None:
        while self.classifier.is_blank(self.peek()):
            self.advance()

    def lookahead(self) -> str:
        """Returns as many upcoming characters as the longest spelling needs."""
        return self.stream.peek_text(self.classifier.max_spelling)

    def match_operator(self) -> tuple[str, TokenKind] | None:
        """Matches the most specific operator or keyword at the current position."""
        return self.classifier.match(self.lookahead())

    def _make_token(self, kind: TokenKind, text: str, start: int) -> Token:
        return Token(
            kind,
            text,
            Span(start, self.stream.position),
            line=self.script.line_number(start),
            col=self.script.column_number(start),
        )

    def lex_newline(self, start: int) -> Token:
        text = self.advance()
        if text == "\r" and self.peek() == "\n":
            text += self.advance()
        self.script.record_line_start(self.stream.position)
        return self._make_token(TokenKind.NEWLINE, text, start)

    def lex_integer(self, start: int) -> Token:
        text = ""
        while self.classifier.is_digit(self.peek()):
            text += self.advance()
        return self._make_token(TokenKind.INTEGER, text, start)

    def lex_unknown(self, start: int) -> Token:
        text = self.advance()
        while True:
            upcoming = self.lookahead()
            if upcoming == "" or self.classifier.is_token_start(upcoming):
                break
            text += self.advance()
        return self._make_token(TokenKind.UNKNOWN, text, start)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; ``EOF`` once the input is exhausted.

        Raises:
            InputError: If the underlying stream fails.
        """
        self.skip_blanks()
        start = self.stream.position
        if self.stream.end_of_file():
            return self._make_token(TokenKind.EOF, "", start)

        ch = self.peek()

        if self.classifier.is_newline_start(ch):
            return self.lex_newline(start)

        if self.classifier.is_digit(ch):
            return self.lex_integer(start)

        matched = self.match_operator()
        if matched:
            spelling, kind = matched
            for _ in spelling:
                self.advance()
            return self._make_token(kind, spelling, start)

        return self.lex_unknown(start)

    def tokens(self) -> Iterator[Token]:
        """Yields every remaining token, ending with the single ``EOF`` token."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def __iter__(self) -> Iterator[Token]:
        return self.tokens()


__all__ = ["CharSource", "CharacterStream", "Lexer", "Token"]
