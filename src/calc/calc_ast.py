"""
Defines the abstract syntax tree (AST) and runtime values of the calc calculator.

Classes:
    ValueType:
        Type tag of a runtime value (integer or boolean).

    Value:
        A tagged runtime value. Equality compares tag and payload, so
        ``Value.integer(1) != Value.boolean(True)``.

    Literal, UnaryOp, BinaryOp:
        The closed set of expression nodes produced by the parser. Each node
        exclusively owns its operands, is never modified after construction and
        records the span it was parsed from for diagnostics.

    postorder, render, same_tree:
        Whole-tree walks over an explicit stack, so tree depth is not limited
        by the interpreter's recursion limit.

Every node exposes ``value()``, which evaluates the subtree (see
``calc.calc_eval``). Evaluation is a pure function of the subtree: evaluating
the same tree twice gives the same result.

Example:
    node = BinaryOp(TokenKind.ADD, Literal(Value.integer(1), Span(0, 1)),
                    Literal(Value.integer(2), Span(2, 3)), Span(0, 3), Span(1, 2))
    node.value()  # Value.integer(3)
"""

from enum import Enum
from collections.abc import Iterator
from typing import Any, Union

from calc.calc_constants import (
    FALSE_NAME,
    TRUE_NAME,
    TokenFlags,
    TokenKind,
    binary_flags,
    unary_flags,
)
from calc.calc_script import Span
from calc.calc_symbols import format_integer


class ValueType(Enum):
    INTEGER = "integer"
    BOOLEAN = "boolean"


class Value:
    """A runtime value carrying its type tag.

    Attributes:
        type (ValueType): The value's type.
        payload (int | bool): The underlying Python value.
    """

    __slots__ = ("_type", "_payload")

    def __init__(self, type_: ValueType, payload: int | bool) -> None:
        if type_ == ValueType.BOOLEAN:
            payload = bool(payload)
        else:
            payload = int(payload)
        self._type = type_
        self._payload = payload

    @classmethod
    def integer(cls, n: int) -> "Value":
        return cls(ValueType.INTEGER, n)

    @classmethod
    def boolean(cls, b: bool) -> "Value":
        return cls(ValueType.BOOLEAN, b)

    @property
    def type(self) -> ValueType:
        return self._type

    @property
    def payload(self) -> int | bool:
        return self._payload

    def __str__(self) -> str:
        if self._type == ValueType.BOOLEAN:
            return TRUE_NAME if self._payload else FALSE_NAME
        return format_integer(int(self._payload))

    def __repr__(self) -> str:
        if self._type == ValueType.BOOLEAN:
            return f"Value.boolean({self._payload!r})"
        return f"Value.integer({format_integer(int(self._payload))})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Value)
            and self._type == other.type
            and self._payload == other.payload
        )

    def __hash__(self) -> int:
        return hash((self._type, self._payload))


class Literal:
    """An integer or boolean literal."""

    kind = "literal"

    def __init__(self, value: Value, extent: Span) -> None:
        self.literal = value
        self.extent = extent

    @property
    def flags(self) -> TokenFlags:
        return TokenFlags.NONE

    @property
    def children(self) -> tuple["ExprNode", ...]:
        return ()

    def value(self) -> Value:
        return self.literal

    def __repr__(self) -> str:
        return f"Literal({self.literal!r})"

    def __eq__(self, other: Any) -> bool:
        return same_tree(self, other)

    def __hash__(self) -> int:
        return hash((self.kind, self.literal, self.extent))


class UnaryOp:
    """A prefix operator applied to one operand.

    Attributes:
        op (TokenKind): ``ADD``, ``SUB`` or ``LOGICAL_NOT``.
        operand (ExprNode): The operand subtree.
        extent (Span): Span of the whole expression.
        op_extent (Span): Span of the operator token.
    """

    kind = "unary"

    def __init__(
        self, op: TokenKind, operand: "ExprNode", extent: Span, op_extent: Span
    ) -> None:
        self.op = op
        self.operand = operand
        self.extent = extent
        self.op_extent = op_extent

    @property
    def flags(self) -> TokenFlags:
        return unary_flags(self.op)

    @property
    def children(self) -> tuple["ExprNode", ...]:
        return (self.operand,)

    def value(self) -> Value:
        from calc.calc_eval import evaluate

        return evaluate(self)

    def __repr__(self) -> str:
        return render(self)

    def __eq__(self, other: Any) -> bool:
        return same_tree(self, other)

    def __hash__(self) -> int:
        return hash((self.kind, self.op, self.extent))


class BinaryOp:
    """An infix operator applied to two operands.

    Attributes:
        op (TokenKind): The operator kind.
        left (ExprNode): Left operand subtree.
        right (ExprNode): Right operand subtree.
        extent (Span): Span of the whole expression.
        op_extent (Span): Span of the operator token.
    """

    kind = "binary"

    def __init__(
        self,
        op: TokenKind,
        left: "ExprNode",
        right: "ExprNode",
        extent: Span,
        op_extent: Span,
    ) -> None:
        self.op = op
        self.left = left
        self.right = right
        self.extent = extent
        self.op_extent = op_extent

    @property
    def flags(self) -> TokenFlags:
        return binary_flags(self.op)

    @property
    def children(self) -> tuple["ExprNode", ...]:
        return (self.left, self.right)

    def value(self) -> Value:
        from calc.calc_eval import evaluate

        return evaluate(self)

    def __repr__(self) -> str:
        return render(self)

    def __eq__(self, other: Any) -> bool:
        return same_tree(self, other)

    def __hash__(self) -> int:
        return hash((self.kind, self.op, self.extent))


ExprNode = Union[Literal, UnaryOp, BinaryOp]


# Tree walks


def postorder(root: ExprNode) -> Iterator[ExprNode]:
    """Yields every node of ``root``, operands first and left to right."""
    pending: list[tuple[ExprNode, bool]] = [(root, False)]
    while pending:
        node, expanded = pending.pop()
        if expanded or not node.children:
            yield node
        else:
            pending.append((node, True))
            pending.extend((child, False) for child in reversed(node.children))


def render(root: ExprNode) -> str:
    """Builds the ``repr`` of a tree: ``UnaryOp(SUB, Literal(Value.integer(1)))``."""
    rendered: list[str] = []
    for node in postorder(root):
        if isinstance(node, Literal):
            rendered.append(repr(node))
            continue
        arity = len(node.children)
        operands = rendered[-arity:]
        del rendered[-arity:]
        rendered.append(f"{type(node).__name__}({node.op.name}, {', '.join(operands)})")
    return rendered.pop()


def same_tree(a: ExprNode, b: Any) -> bool:
    """Structural equality: same node classes, operators, literals and extents."""
    pending: list[tuple[Any, Any]] = [(a, b)]
    while pending:
        x, y = pending.pop()
        if type(x) is not type(y) or x.extent != y.extent:
            return False
        if isinstance(x, Literal):
            if x.literal != y.literal:
                return False
        elif x.op != y.op:
            return False
        else:
            pending.extend(zip(x.children, y.children))
    return True
