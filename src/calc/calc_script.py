"""
Source positions for the calc lexer and parser.

Classes:
    Span: A half-open ``[start, end)`` offset range into a session's script.
    Script: The growing source buffer of one session, with a line-start map
        used to turn offsets into line and column numbers.

Spans never hold a reference to the text they describe; the owning ``Script``
resolves them. A span that reaches past the end of the buffer resolves to the
part that exists (possibly the empty string), never to an error.

Example:
    >>> script = Script()
    >>> script.append("1 +\\n2")
    >>> script.record_line_start(4)
    >>> script.line_number(4), script.column_number(4)
    (2, 1)
"""

from bisect import bisect_right
from typing import Any


class Span:
    """An immutable half-open range of offsets.

    Attributes:
        start (int): Offset of the first character.
        end (int): Offset one past the last character.
    """

    __slots__ = ("_start", "_end")

    def __init__(self, start: int, end: int) -> None:
        if start < 0 or end < start:
            raise ValueError(f"Invalid span [{start}, {end})")
        self._start = start
        self._end = end

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    def __len__(self) -> int:
        return self._end - self._start

    def cover(self, other: "Span") -> "Span":
        """Returns the smallest span containing both ``self`` and ``other``."""
        return Span(min(self._start, other.start), max(self._end, other.end))

    def __repr__(self) -> str:
        return f"Span({self._start}, {self._end})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Span)
            and self._start == other.start
            and self._end == other.end
        )

    def __hash__(self) -> int:
        return hash((self._start, self._end))


class Script:
    """Accumulates the characters consumed by the lexer.

    Attributes:
        line_starts (list[int]): Ascending offsets at which each line begins;
            always starts with 0.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._length = 0
        self._cache: str | None = ""
        self.line_starts: list[int] = [0]

    def __len__(self) -> int:
        return self._length

    @property
    def source(self) -> str:
        """Returns everything consumed so far."""
        if self._cache is None:
            self._cache = "".join(self._chunks)
            self._chunks = [self._cache]
        return self._cache

    def append(self, text: str) -> None:
        if not text:
            return
        self._chunks.append(text)
        self._length += len(text)
        self._cache = None

    def record_line_start(self, offset: int) -> None:
        """Records that a new line begins at ``offset``.

        Raises:
            ValueError: If ``offset`` does not come after the last recorded start.
        """
        if offset <= self.line_starts[-1]:
            raise ValueError(
                f"Line start {offset} must follow {self.line_starts[-1]}"
            )
        self.line_starts.append(offset)

    def line_number(self, offset: int) -> int:
        """Returns the 1-based line containing ``offset``."""
        return bisect_right(self.line_starts, offset)

    def column_number(self, offset: int) -> int:
        """Returns the 1-based column of ``offset`` within its line."""
        line = self.line_number(offset)
        return offset - self.line_starts[line - 1] + 1

    def line(self, number: int) -> str:
        """Returns the text of line ``number`` without its newline sequence.

        Lines that have not been read yet come back as an empty string.
        """
        if number < 1 or number > len(self.line_starts):
            return ""
        start = self.line_starts[number - 1]
        if number < len(self.line_starts):
            end = self.line_starts[number]
        else:
            end = self._length
        return self.text(start, end).rstrip("\r\n")

    def text(self, start: int, end: int) -> str:
        """Returns the source between two offsets, clamped to what has been read."""
        start = max(0, min(start, self._length))
        end = max(start, min(end, self._length))
        return self.source[start:end]

    def text_of(self, span: Span) -> str:
        return self.text(span.start, span.end)

    def describe(self, span: Span) -> str:
        """Formats the start of ``span`` as ``line:column``."""
        return f"{self.line_number(span.start)}:{self.column_number(span.start)}"
