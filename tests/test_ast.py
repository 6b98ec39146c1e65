import pytest

from calc.calc_ast import (
    BinaryOp,
    ExprNode,
    Literal,
    UnaryOp,
    Value,
    ValueType,
    postorder,
)
from calc.calc_constants import TokenFlags, TokenKind
from calc.calc_script import Span


@pytest.fixture  # type: ignore[misc]
def sum_node() -> BinaryOp:
    return BinaryOp(
        TokenKind.ADD,
        Literal(Value.integer(1), Span(0, 1)),
        UnaryOp(
            TokenKind.SUB, Literal(Value.integer(2), Span(5, 6)), Span(4, 6), Span(4, 5)
        ),
        Span(0, 6),
        Span(2, 3),
    )


def test_value_tags() -> None:
    assert Value.integer(1).type == ValueType.INTEGER
    assert Value.boolean(True).type == ValueType.BOOLEAN
    assert Value.integer(1) != Value.boolean(True)
    assert Value.integer(0) == Value.integer(0)


def test_value_rendering() -> None:
    assert str(Value.integer(-12)) == "-12"
    assert str(Value.boolean(True)) == "true"
    assert str(Value.boolean(False)) == "false"
    assert repr(Value.integer(3)) == "Value.integer(3)"
    assert repr(Value.boolean(False)) == "Value.boolean(False)"


def test_node_value(sum_node: BinaryOp) -> None:
    assert sum_node.value() == Value.integer(-1)
    assert sum_node.children[0].value() == Value.integer(1)


def test_node_equality_includes_extent() -> None:
    a = Literal(Value.integer(1), Span(0, 1))
    b = Literal(Value.integer(1), Span(3, 4))
    assert a != b
    assert a == Literal(Value.integer(1), Span(0, 1))
    assert hash(a) == hash(Literal(Value.integer(1), Span(0, 1)))


def test_node_flags(sum_node: BinaryOp) -> None:
    assert sum_node.flags & TokenFlags.BINARY
    assert sum_node.children[1].flags & TokenFlags.UNARY
    assert sum_node.children[0].flags == TokenFlags.NONE


def test_node_repr(sum_node: BinaryOp) -> None:
    assert (
        repr(sum_node)
        == "BinaryOp(ADD, Literal(Value.integer(1)), UnaryOp(SUB, Literal(Value.integer(2))))"
    )



def negations(count: int) -> ExprNode:
    node: ExprNode = Literal(Value.integer(1), Span(count, count + 1))
    for start in reversed(range(count)):
        node = UnaryOp(
            TokenKind.SUB, node, Span(start, count + 1), Span(start, start + 1)
        )
    return node


def left_sum(terms: int) -> ExprNode:
    node: ExprNode = Literal(Value.integer(1), Span(0, 1))
    for i in range(1, terms):
        right = Literal(Value.integer(1), Span(4 * i, 4 * i + 1))
        node = BinaryOp(
            TokenKind.ADD, node, right, Span(0, 4 * i + 1), Span(4 * i - 2, 4 * i - 1)
        )
    return node


def test_postorder_visits_operands_first(sum_node: BinaryOp) -> None:
    order = [type(node).__name__ for node in postorder(sum_node)]
    assert order == ["Literal", "Literal", "UnaryOp", "BinaryOp"]


def test_deep_trees_support_value_repr_and_equality() -> None:
    chain = negations(5000)
    assert chain.value() == Value.integer(1)
    text = repr(chain)
    assert text.startswith("UnaryOp(SUB, UnaryOp(SUB, ")
    assert text.endswith("Literal(Value.integer(1))" + ")" * 5000)
    assert chain == negations(5000)
    assert hash(chain) == hash(negations(5000))
    assert chain != negations(4999)

    total = left_sum(3000)
    assert total.value() == Value.integer(3000)
    assert total == left_sum(3000)
    assert repr(total).count("Literal") == 3000


def test_huge_integer_rendering() -> None:
    big = Value.integer(10**5000)
    assert str(big) == "1" + "0" * 5000
    assert repr(big) == f"Value.integer({'1' + '0' * 5000})"
