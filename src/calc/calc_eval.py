"""
Evaluator for calc expression trees.

``evaluate(node)`` computes the value of a tree built by the parser by
dispatching on the node class and operator kind. Operands are always both
evaluated, left first, before the operator checks their types. The walk uses
an explicit stack of pending results, so a tree of any depth can be evaluated.

Operator rules:
    - ``+ - * / %``: integers only. ``/`` truncates toward zero and ``%`` takes
      the sign of the dividend. A zero divisor raises ``DivisionByZeroError``.
    - ``< > <= >=``: integers only; produce a boolean.
    - ``== !=``: both operands must have the same type.
    - ``&& || !``: booleans only.
    - unary ``+ -``: integers only.

Any other combination raises ``InvalidOperandTypeError``. In particular
``1 < 2 < 3`` is rejected, since ``1 < 2`` is a boolean.
"""

from collections.abc import Callable

from calc.calc_ast import (
    BinaryOp,
    ExprNode,
    Literal,
    UnaryOp,
    Value,
    ValueType,
    postorder,
)
from calc.calc_constants import OPERATOR_TABLE, ErrorKind, TokenKind
from calc.calc_errors import DivisionByZeroError, InvalidOperandTypeError
from calc.calc_script import Span


def truncating_divide(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def truncating_modulo(a: int, b: int) -> int:
    return a - b * truncating_divide(a, b)


_INTEGER_OPS: dict[TokenKind, Callable[[int, int], int]] = {
    TokenKind.ADD: lambda a, b: a + b,
    TokenKind.SUB: lambda a, b: a - b,
    TokenKind.MUL: lambda a, b: a * b,
    TokenKind.DIV: truncating_divide,
    TokenKind.MOD: truncating_modulo,
}

_ORDERING_OPS: dict[TokenKind, Callable[[int, int], bool]] = {
    TokenKind.LESS: lambda a, b: a < b,
    TokenKind.GREATER: lambda a, b: a > b,
    TokenKind.LESS_EQUAL: lambda a, b: a <= b,
    TokenKind.GREATER_EQUAL: lambda a, b: a >= b,
}

_EQUALITY_OPS: dict[TokenKind, Callable[[Value, Value], bool]] = {
    TokenKind.EQUAL: lambda a, b: a == b,
    TokenKind.NOT_EQUAL: lambda a, b: a != b,
}

_LOGICAL_OPS: dict[TokenKind, Callable[[bool, bool], bool]] = {
    TokenKind.LOGICAL_AND: lambda a, b: a and b,
    TokenKind.LOGICAL_OR: lambda a, b: a or b,
}


def _spelling(op: TokenKind) -> str:
    return OPERATOR_TABLE.get(op, op.name)


def _expect(value: Value, expected: ValueType, op: TokenKind, extent: Span) -> None:
    if value.type != expected:
        raise InvalidOperandTypeError(
            ErrorKind.INVALID_OPERAND_TYPE,
            extent,
            f"Invalid operand type for '{_spelling(op)}': "
            f"expected {expected.value}, got {value.type.value}.",
        )


def _apply_unary(node: UnaryOp, operand: Value) -> Value:
    if node.op == TokenKind.LOGICAL_NOT:
        _expect(operand, ValueType.BOOLEAN, node.op, node.operand.extent)
        return Value.boolean(not operand.payload)
    _expect(operand, ValueType.INTEGER, node.op, node.operand.extent)
    if node.op == TokenKind.SUB:
        return Value.integer(-operand.payload)
    if node.op == TokenKind.ADD:
        return operand
    raise AssertionError(f"Unexpected unary operator: {node.op}")  # pragma: no cover


def _apply_binary(node: BinaryOp, left: Value, right: Value) -> Value:
    op = node.op

    if op in _EQUALITY_OPS:
        if left.type != right.type:
            raise InvalidOperandTypeError(
                ErrorKind.INVALID_OPERAND_TYPE,
                node.extent,
                f"Invalid operand types for '{_spelling(op)}': "
                f"cannot compare {left.type.value} with {right.type.value}.",
            )
        return Value.boolean(_EQUALITY_OPS[op](left, right))

    if op in _LOGICAL_OPS:
        _expect(left, ValueType.BOOLEAN, op, node.left.extent)
        _expect(right, ValueType.BOOLEAN, op, node.right.extent)
        return Value.boolean(_LOGICAL_OPS[op](bool(left.payload), bool(right.payload)))

    _expect(left, ValueType.INTEGER, op, node.left.extent)
    _expect(right, ValueType.INTEGER, op, node.right.extent)
    a, b = int(left.payload), int(right.payload)

    if op in _ORDERING_OPS:
        return Value.boolean(_ORDERING_OPS[op](a, b))

    if op in (TokenKind.DIV, TokenKind.MOD) and b == 0:
        if op == TokenKind.DIV:
            raise DivisionByZeroError(
                ErrorKind.DIVISION_BY_ZERO, node.right.extent, "Division by zero."
            )
        raise DivisionByZeroError(
            ErrorKind.MODULUS_BY_ZERO, node.right.extent, "Modulus by zero."
        )

    if op in _INTEGER_OPS:
        return Value.integer(_INTEGER_OPS[op](a, b))
    raise AssertionError(f"Unexpected binary operator: {op}")  # pragma: no cover


def evaluate(node: ExprNode) -> Value:
    """Computes the value of an expression tree.

    Args:
        node (ExprNode): Root of the tree.

    Returns:
        Value: The tagged result.

    Raises:
        DivisionByZeroError: On ``/ 0`` or ``% 0``.
        InvalidOperandTypeError: When an operator gets a value of the wrong type.
    """
    if not isinstance(node, (Literal, UnaryOp, BinaryOp)):
        raise TypeError(f"Not an expression node: {node!r}")

    results: list[Value] = []
    for current in postorder(node):
        if isinstance(current, Literal):
            results.append(current.literal)
        elif isinstance(current, UnaryOp):
            results.append(_apply_unary(current, results.pop()))
        else:
            right = results.pop()
            results.append(_apply_binary(current, results.pop(), right))
    return results.pop()
