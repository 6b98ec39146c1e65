"""
Character classification for the calc lexer.

The ``SymbolClassifier`` answers every question the lexer asks about a single
character and owns the canonical spellings of the dialect's multi-character
tokens. By default classification is Unicode-aware: any decimal digit
(category ``Nd``) is a digit and any space separator (category ``Zs``) or tab
is blank. With ``ascii_only`` set, only ``0-9``, space and tab qualify.

Example:
    >>> classifier = SymbolClassifier(Dialect.EXTENDED)
    >>> classifier.match("<=3")
    ('<=', <TokenKind.LESS_EQUAL: 'LESS_EQUAL'>)
"""

import unicodedata

from calc.calc_constants import (
    FALSE_NAME,
    INT32_MAX,
    INT32_MIN,
    OPERATOR_TABLE,
    SIMPLE_KINDS,
    TRUE_NAME,
    Dialect,
    TokenKind,
)

# well under the interpreter's int/str conversion limit
_CHUNK_DIGITS = 1000
_CHUNK = 10**_CHUNK_DIGITS


def parse_digits(text: str) -> int:
    """Converts a validated digit run of any length to an int."""
    value = 0
    for i in range(0, len(text), _CHUNK_DIGITS):
        chunk = text[i : i + _CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def format_integer(n: int) -> str:
    """Renders ``n`` in decimal, however many digits it has."""
    if -_CHUNK < n < _CHUNK:
        return str(n)
    sign = "-" if n < 0 else ""
    n = abs(n)
    chunks: list[str] = []
    while n >= _CHUNK:
        n, low = divmod(n, _CHUNK)
        chunks.append(f"{low:0{_CHUNK_DIGITS}d}")
    chunks.append(str(n))
    return sign + "".join(reversed(chunks))


class SymbolClassifier:
    """Classifies characters and spellings for one dialect.

    Attributes:
        dialect (Dialect): The language being lexed.
        ascii_only (bool): Restricts digits and blanks to their ASCII forms.
        spellings (list[tuple[str, TokenKind]]): Candidate token spellings in
            the order the lexer must try them.
        max_spelling (int): Length of the longest spelling.
    """

    def __init__(self, dialect: Dialect = Dialect.EXTENDED, ascii_only: bool = False):
        self.dialect = dialect
        self.ascii_only = ascii_only
        self.spellings: list[tuple[str, TokenKind]] = self._build_spellings(dialect)
        self.max_spelling = max(len(text) for text, _ in self.spellings)
        self._by_kind: dict[TokenKind, str] = {
            kind: text for text, kind in self.spellings if kind != TokenKind.BOOLEAN
        }

    @staticmethod
    def _build_spellings(dialect: Dialect) -> list[tuple[str, TokenKind]]:
        operators = [
            (text, kind)
            for kind, text in OPERATOR_TABLE.items()
            if dialect == Dialect.EXTENDED or kind in SIMPLE_KINDS
        ]
        # longer spellings first so "<" never shadows "<="
        operators.sort(key=lambda entry: -len(entry[0]))
        if dialect == Dialect.SIMPLE:
            return operators
        booleans = [(TRUE_NAME, TokenKind.BOOLEAN), (FALSE_NAME, TokenKind.BOOLEAN)]
        return booleans + operators

    def is_digit(self, ch: str) -> bool:
        if not ch:
            return False
        if self.ascii_only:
            return "0" <= ch <= "9"
        return ch.isdecimal()

    def is_blank(self, ch: str) -> bool:
        if ch in (" ", "\t"):
            return True
        if self.ascii_only or not ch:
            return False
        return unicodedata.category(ch) == "Zs"

    def is_newline_start(self, ch: str) -> bool:
        return ch in ("\n", "\r")

    def is_operator_kind(self, ch: str, kind: TokenKind) -> bool:
        """Returns True if ``ch`` is the single-character spelling of ``kind``."""
        text = self._by_kind.get(kind)
        return text is not None and len(text) == 1 and ch == text

    def is_left_paren(self, ch: str) -> bool:
        return self.is_operator_kind(ch, TokenKind.LPAREN)

    def is_right_paren(self, ch: str) -> bool:
        return self.is_operator_kind(ch, TokenKind.RPAREN)

    def spelling_of(self, kind: TokenKind) -> str | None:
        """Returns the canonical spelling of ``kind`` in this dialect, if any."""
        return self._by_kind.get(kind)

    def match(self, text: str) -> tuple[str, TokenKind] | None:
        """Finds the spelling that matches the start of ``text``.

        Candidates are tried in ``spellings`` order, so the first hit is the
        most specific one.

        Args:
            text (str): Lookahead characters starting at the current position.

        Returns:
            tuple[str, TokenKind] | None: The matched spelling and its kind.
        """
        for spelling, kind in self.spellings:
            if text.startswith(spelling):
                return spelling, kind
        return None

    def is_token_start(self, text: str) -> bool:
        """Returns True if a valid token begins at the start of ``text``."""
        if not text:
            return False
        ch = text[0]
        return (
            self.is_digit(ch)
            or self.is_blank(ch)
            or self.is_newline_start(ch)
            or self.match(text) is not None
        )

    def int_value(self, text: str) -> int:
        """Converts a run of digit characters to an integer.

        Raises:
            ValueError: If ``text`` is not a digit run.
            OverflowError: If the extended dialect's 32-bit range is exceeded.
        """
        if not text or not all(self.is_digit(ch) for ch in text):
            raise ValueError(f"Not an integer literal: {text!r}")
        value = parse_digits(text)
        if self.dialect == Dialect.EXTENDED and not INT32_MIN <= value <= INT32_MAX:
            raise OverflowError(f"Integer literal {text} is out of range")
        return value

    def bool_value(self, text: str) -> bool:
        """Converts a boolean literal spelling to its value.

        Raises:
            ValueError: If ``text`` is neither boolean name.
        """
        if text == TRUE_NAME:
            return True
        if text == FALSE_NAME:
            return False
        raise ValueError(f"Not a boolean literal: {text!r}")

    def bool_name(self, value: bool) -> str:
        return TRUE_NAME if value else FALSE_NAME
