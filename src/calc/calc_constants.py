"""
Shared constants for the calc expression calculator.

This module is the single source of truth for the vocabulary that the lexer,
parser and evaluator agree on:

Enums:
    TokenKind: Every kind of token the lexer can produce.
    TokenFlags: Bit flags describing operator arity, associativity and precedence tier.
    Precedence: Ordinal binding strength of each precedence tier.
    ErrorKind: Identifies the kind of a parse or evaluation error.
    Dialect: Selects the simple (integer-only) or extended (boolean-aware) language.

Tables:
    OPERATOR_TABLE: Canonical spelling of every operator and parenthesis.
    TRUE_NAME / FALSE_NAME: Spellings of the boolean literals.
    NEWLINES: Recognized newline sequences.
    INT32_MIN / INT32_MAX: Range of integer literals in the extended dialect.
    MAX_PAREN_DEPTH: Deepest parenthesis nesting the parser accepts.

Helpers:
    default_flags(kind): Flags a freshly lexed token of ``kind`` carries.
    unary_flags(kind) / binary_flags(kind): Flags selected once a production
        has decided how an operator is used.
    precedence_of(flags): Decodes the precedence tier from a flag set.
"""

from enum import Enum, IntEnum, IntFlag


class TokenKind(Enum):
    UNKNOWN = "UNKNOWN"
    EOF = "EOF"
    NEWLINE = "NEWLINE"
    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    MOD = "MOD"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    LESS = "LESS"
    GREATER = "GREATER"
    LESS_EQUAL = "LESS_EQUAL"
    GREATER_EQUAL = "GREATER_EQUAL"
    LOGICAL_NOT = "LOGICAL_NOT"
    LOGICAL_AND = "LOGICAL_AND"
    LOGICAL_OR = "LOGICAL_OR"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"


class TokenFlags(IntFlag):
    """Additional information attached to a token.

    The precedence tiers are one bit each; ``precedence_of`` turns them into a
    comparable ``Precedence`` value.
    """

    NONE = 0
    HAS_ERROR = 1 << 0
    UNARY = 1 << 1
    BINARY = 1 << 2
    LEFT_ASSOC = 1 << 3
    RIGHT_ASSOC = 1 << 4
    UNARY_PREC = 1 << 5
    MULTIPLICATIVE = 1 << 6
    ADDITIVE = 1 << 7
    ORDERING = 1 << 8
    EQUALITY = 1 << 9
    LOGICAL_AND = 1 << 10
    LOGICAL_OR = 1 << 11

    ARITY_MASK = UNARY | BINARY
    ASSOCIATIVITY_MASK = LEFT_ASSOC | RIGHT_ASSOC
    BINARY_PRECEDENCE_MASK = (
        MULTIPLICATIVE | ADDITIVE | ORDERING | EQUALITY | LOGICAL_AND | LOGICAL_OR
    )
    PRECEDENCE_MASK = UNARY_PREC | BINARY_PRECEDENCE_MASK


class Precedence(IntEnum):
    """Binding strength, loosest first."""

    NONE = 0
    LOGICAL_OR = 1
    LOGICAL_AND = 2
    EQUALITY = 3
    ORDERING = 4
    ADDITIVE = 5
    MULTIPLICATIVE = 6
    UNARY = 7


class ErrorKind(Enum):
    UNKNOWN_TOKEN = "unknown_token"
    UNEXPECTED_TOKEN = "unexpected_token"
    MISSING_CLOSING_PARENTHESIS = "missing_closing_parenthesis"
    INTEGER_OUT_OF_RANGE = "integer_out_of_range"
    DIVISION_BY_ZERO = "division_by_zero"
    MODULUS_BY_ZERO = "modulus_by_zero"
    INVALID_OPERAND_TYPE = "invalid_operand_type"
    NESTING_TOO_DEEP = "nesting_too_deep"


class Dialect(Enum):
    SIMPLE = "simple"
    EXTENDED = "extended"


# Canonical spellings
OPERATOR_TABLE: dict[TokenKind, str] = {
    TokenKind.ADD: "+",
    TokenKind.SUB: "-",
    TokenKind.MUL: "*",
    TokenKind.DIV: "/",
    TokenKind.MOD: "%",
    TokenKind.EQUAL: "==",
    TokenKind.NOT_EQUAL: "!=",
    TokenKind.LESS: "<",
    TokenKind.GREATER: ">",
    TokenKind.LESS_EQUAL: "<=",
    TokenKind.GREATER_EQUAL: ">=",
    TokenKind.LOGICAL_NOT: "!",
    TokenKind.LOGICAL_AND: "&&",
    TokenKind.LOGICAL_OR: "||",
    TokenKind.LPAREN: "(",
    TokenKind.RPAREN: ")",
}

SIMPLE_KINDS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.ADD,
        TokenKind.SUB,
        TokenKind.MUL,
        TokenKind.DIV,
        TokenKind.MOD,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
    }
)

TRUE_NAME = "true"
FALSE_NAME = "false"

NEWLINES: tuple[str, ...] = ("\n", "\r\n", "\r")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# Deepest parenthesis nesting the parser accepts.
MAX_PAREN_DEPTH = 40


_UNARY_DEFAULT = TokenFlags.UNARY | TokenFlags.RIGHT_ASSOC | TokenFlags.UNARY_PREC


def _binary(tier: TokenFlags) -> TokenFlags:
    return TokenFlags.BINARY | TokenFlags.LEFT_ASSOC | tier


_DEFAULT_FLAGS: dict[TokenKind, TokenFlags] = {
    TokenKind.ADD: _UNARY_DEFAULT | _binary(TokenFlags.ADDITIVE),
    TokenKind.SUB: _UNARY_DEFAULT | _binary(TokenFlags.ADDITIVE),
    TokenKind.MUL: _binary(TokenFlags.MULTIPLICATIVE),
    TokenKind.DIV: _binary(TokenFlags.MULTIPLICATIVE),
    TokenKind.MOD: _binary(TokenFlags.MULTIPLICATIVE),
    TokenKind.EQUAL: _binary(TokenFlags.EQUALITY),
    TokenKind.NOT_EQUAL: _binary(TokenFlags.EQUALITY),
    TokenKind.LESS: _binary(TokenFlags.ORDERING),
    TokenKind.GREATER: _binary(TokenFlags.ORDERING),
    TokenKind.LESS_EQUAL: _binary(TokenFlags.ORDERING),
    TokenKind.GREATER_EQUAL: _binary(TokenFlags.ORDERING),
    TokenKind.LOGICAL_NOT: _UNARY_DEFAULT,
    TokenKind.LOGICAL_AND: _binary(TokenFlags.LOGICAL_AND),
    TokenKind.LOGICAL_OR: _binary(TokenFlags.LOGICAL_OR),
}

_PRECEDENCE_BITS: dict[TokenFlags, Precedence] = {
    TokenFlags.UNARY_PREC: Precedence.UNARY,
    TokenFlags.MULTIPLICATIVE: Precedence.MULTIPLICATIVE,
    TokenFlags.ADDITIVE: Precedence.ADDITIVE,
    TokenFlags.ORDERING: Precedence.ORDERING,
    TokenFlags.EQUALITY: Precedence.EQUALITY,
    TokenFlags.LOGICAL_AND: Precedence.LOGICAL_AND,
    TokenFlags.LOGICAL_OR: Precedence.LOGICAL_OR,
}


def default_flags(kind: TokenKind) -> TokenFlags:
    """Returns the flags a token of ``kind`` carries straight out of the lexer.

    ``+`` and ``-`` carry both their unary and binary flag sets until a
    grammar production picks one.
    """
    return _DEFAULT_FLAGS.get(kind, TokenFlags.NONE)


def unary_flags(kind: TokenKind) -> TokenFlags:
    """Returns the flags of ``kind`` when used as a prefix operator.

    Raises:
        ValueError: If ``kind`` has no unary form.
    """
    flags = default_flags(kind)
    if not flags & TokenFlags.UNARY:
        raise ValueError(f"{kind.name} is not a unary operator")
    return _UNARY_DEFAULT


def binary_flags(kind: TokenKind) -> TokenFlags:
    """Returns the flags of ``kind`` when used as an infix operator.

    Raises:
        ValueError: If ``kind`` has no binary form.
    """
    flags = default_flags(kind)
    if not flags & TokenFlags.BINARY:
        raise ValueError(f"{kind.name} is not a binary operator")
    return TokenFlags.BINARY | TokenFlags.LEFT_ASSOC | (
        flags & TokenFlags.BINARY_PRECEDENCE_MASK
    )


def precedence_of(flags: TokenFlags) -> Precedence:
    """Decodes the tightest precedence tier present in ``flags``."""
    best = Precedence.NONE
    for bit, tier in _PRECEDENCE_BITS.items():
        if flags & bit and tier > best:
            best = tier
    return best
