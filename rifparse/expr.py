"""Integer expressions used for parameters, array sizes and optional flags.

Expressions are written in infix notation and turned into a sequence of
tokens in reverse Polish notation, which is then evaluated against a set of
named parameter values.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from rifparse.common import ParseError, identifier, val_f64, val_isize

_MULTISPACE = " \t\r\n"
_SPACE = " \t"
_ISIZE_MIN = -(2**63)
_ISIZE_MAX = 2**63 - 1


class OpKind(Enum):
    """Operators; the value is the symbol used when printing a token."""

    PLUS = "+"
    MINUS = "-"
    MULT = "*"
    DIV = "/"
    REM = "%"
    POW = "^"
    NOT = "!"
    SHIFT_LEFT = "<<"
    SHIFT_RIGHT = ">>"
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER = ">"
    GREATER_EQ = ">="
    LESSER = "<"
    LESSER_EQ = "<="


# Lower number binds tighter.
_PRECEDENCE = {
    OpKind.NOT: 2,
    OpKind.MULT: 3,
    OpKind.DIV: 3,
    OpKind.REM: 3,
    OpKind.PLUS: 4,
    OpKind.MINUS: 4,
    OpKind.POW: 5,
    OpKind.SHIFT_LEFT: 5,
    OpKind.SHIFT_RIGHT: 5,
    OpKind.EQUAL: 7,
    OpKind.NOT_EQUAL: 7,
    OpKind.GREATER: 6,
    OpKind.GREATER_EQ: 6,
    OpKind.LESSER: 6,
    OpKind.LESSER_EQ: 6,
}


class FuncKind(Enum):
    """Functions callable inside an expression."""

    LOG2 = "log2"
    LOG10 = "log10"
    POWER = "pow"
    ROUND = "round"
    CEIL = "ceil"
    FLOOR = "floor"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """One element of an expression.

    ``kind`` is one of the class constants below; ``value`` holds the
    :class:`OpKind`, the :class:`FuncKind`, the number or the variable name.
    """

    kind: str
    value: OpKind | FuncKind | float | str | None = None

    OPERATOR = "operator"
    FUNC_CALL = "func_call"
    PAREN_L = "paren_l"
    PAREN_R = "paren_r"
    COMMA = "comma"
    NUMBER = "number"
    VAR = "var"

    def __str__(self) -> str:
        if self.kind == Token.OPERATOR:
            return self.value.value
        if self.kind == Token.FUNC_CALL:
            return f"{self.value}()"
        if self.kind == Token.PAREN_L:
            return "("
        if self.kind == Token.PAREN_R:
            return ")"
        if self.kind == Token.COMMA:
            return ","
        if self.kind == Token.NUMBER:
            return _format_number(self.value)
        return f"${self.value}"


def _format_number(value: float) -> str:
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    if math.isnan(value):
        return "NaN"
    return repr(float(value))


class ExprError(ValueError):
    """Raised when an expression cannot be evaluated."""

    def __init__(self, message: str = "Malformed expression", variable: str | None = None) -> None:
        super().__init__(message)
        self.variable = variable


def _unknown_var(name: str) -> ExprError:
    return ExprError(f"Unknown var {name} in expression", name)


# --------------------------------------------------------------------------
# Tokenizer


_OPERATORS = (
    ("+", OpKind.PLUS),
    ("-", OpKind.MINUS),
    ("*", OpKind.MULT),
    ("/", OpKind.DIV),
    ("^", OpKind.POW),
    ("%", OpKind.REM),
    ("==", OpKind.EQUAL),
    ("!=", OpKind.NOT_EQUAL),
    (">", OpKind.GREATER),
    (">=", OpKind.GREATER_EQ),
    ("<", OpKind.LESSER),
    ("<=", OpKind.LESSER_EQ),
    ("<<", OpKind.SHIFT_LEFT),
    (">>", OpKind.SHIFT_RIGHT),
)

_FUNCTIONS = (
    ("log2(", FuncKind.LOG2),
    ("log10(", FuncKind.LOG10),
    ("pow(", FuncKind.POWER),
    ("int(", FuncKind.ROUND),
    ("round(", FuncKind.ROUND),
    ("ceil(", FuncKind.CEIL),
    ("floor(", FuncKind.FLOOR),
)

_NOT_WORDS = ("not", "!", "~")


def _ws(text: str, literal: str) -> str | None:
    stripped = text.lstrip(_MULTISPACE)
    if stripped.startswith(literal):
        return stripped[len(literal):].lstrip(_MULTISPACE)
    return None


def _operator(text: str) -> tuple[Token, str]:
    for symbol, op in _OPERATORS:
        rest = _ws(text, symbol)
        if rest is not None:
            return Token(Token.OPERATOR, op), rest
    raise ParseError("expected operator", text)


def _paren_r(text: str) -> tuple[Token, str]:
    rest = _ws(text, ")")
    if rest is None:
        raise ParseError("expected ')'", text)
    return Token(Token.PAREN_R), rest


def _comma(text: str) -> tuple[Token, str]:
    rest = _ws(text, ",")
    if rest is None:
        raise ParseError("expected ','", text)
    return Token(Token.COMMA), rest


def _number(text: str) -> tuple[Token, str] | None:
    stripped = text.lstrip(_MULTISPACE)
    for parser in (val_isize, val_f64):
        try:
            value, rest = parser(stripped)
        except ParseError:
            continue
        return Token(Token.NUMBER, float(value)), rest.lstrip(_MULTISPACE)
    for word, value in (("true", 1.0), ("false", 0.0)):
        if stripped[: len(word)].lower() == word:
            return Token(Token.NUMBER, value), stripped[len(word):].lstrip(_MULTISPACE)
    return None


def _operand(text: str) -> tuple[Token, str]:
    rest = _ws(text, "(")
    if rest is not None:
        return Token(Token.PAREN_L), rest
    if text.startswith("$"):
        try:
            name, rest = identifier(text[1:])
        except ParseError:
            pass
        else:
            return Token(Token.VAR, name), rest.lstrip(_SPACE)
    rest = _ws(text, "i")
    if rest is not None:
        return Token(Token.VAR, "i"), rest
    number = _number(text)
    if number is not None:
        return number
    for prefix, func in _FUNCTIONS:
        rest = _ws(text, prefix)
        if rest is not None:
            return Token(Token.FUNC_CALL, func), rest
    for word in _NOT_WORDS:
        rest = _ws(text, word)
        if rest is not None:
            return Token(Token.OPERATOR, OpKind.NOT), rest
    raise ParseError("expected operand", text)


def _first_of(text: str, *parsers) -> tuple[Token, str]:
    for parser in parsers:
        try:
            return parser(text)
        except ParseError:
            continue
    raise ParseError("unexpected token", text)


def parse_expr(text: str) -> ExprTokens:
    """Parse an infix expression into tokens in reverse Polish notation.

    Uses the shunting-yard algorithm. A context stack tracks open
    parentheses (``None``) and function calls (number of separators still
    expected).
    """
    output = ExprTokens()
    op_stack: list[Token] = []
    contexts: list[int | None] = []
    expect_operand = True
    rest = text
    while rest:
        if expect_operand:
            token, rest = _operand(rest)
        elif not contexts:
            token, rest = _operator(rest)
        elif contexts[-1] is None or contexts[-1] == 0:
            token, rest = _first_of(rest, _operator, _paren_r)
        else:
            token, rest = _first_of(rest, _operator, _comma)

        kind = token.kind
        if kind in (Token.NUMBER, Token.VAR):
            output.append(token)
            expect_operand = False
        elif kind == Token.OPERATOR:
            if token.value is OpKind.NOT:
                op_stack.append(token)
                continue
            precedence = _PRECEDENCE[token.value]
            while (
                op_stack
                and op_stack[-1].kind == Token.OPERATOR
                and precedence >= _PRECEDENCE[op_stack[-1].value]
            ):
                output.append(op_stack.pop())
            op_stack.append(token)
            expect_operand = True
        elif kind == Token.FUNC_CALL:
            op_stack.append(token)
            contexts.append(1 if token.value is FuncKind.POWER else 0)
        elif kind == Token.PAREN_L:
            contexts.append(None)
            op_stack.append(token)
        elif kind == Token.PAREN_R:
            if contexts:
                contexts.pop()
            while op_stack:
                op = op_stack.pop()
                if op.kind == Token.PAREN_L:
                    break
                output.append(op)
                if op.kind == Token.FUNC_CALL:
                    break
        else:
            expect_operand = True
            if contexts and contexts[-1] is not None:
                contexts[-1] -= 1

    output.extend(reversed(op_stack))
    return output


# --------------------------------------------------------------------------
# Evaluation helpers mirroring 64-bit float/integer arithmetic


def _to_isize(value: float) -> int:
    if math.isnan(value):
        return 0
    if value >= 2.0**63:
        return _ISIZE_MAX
    if value <= -(2.0**63):
        return _ISIZE_MIN
    return int(value)


def _wrap_isize(value: int) -> int:
    return (value + 2**63) % 2**64 - 2**63


def _shift_amount(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= 2.0**64:
        return 63
    return int(value) & 63


def _round(value: float) -> float:
    if not math.isfinite(value):
        return value
    magnitude = abs(value)
    floor = math.floor(magnitude)
    rounded = floor + 1 if magnitude - floor >= 0.5 else floor
    return math.copysign(float(rounded), value)


def _div(v1: float, v2: float) -> float:
    if v2 == 0:
        if v1 == 0 or math.isnan(v1):
            return math.nan
        return math.copysign(math.inf, v1) * math.copysign(1.0, v2)
    return v1 / v2


def _rem(v1: float, v2: float) -> float:
    a, b = _to_isize(v1), _to_isize(v2)
    if b == 0:
        raise ZeroDivisionError("remainder by zero in expression")
    r = abs(a) % abs(b)
    return float(-r if a < 0 else r)


def _pow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        odd = float(exponent).is_integer() and int(exponent) % 2 == 1
        return -math.inf if base < 0 and odd else math.inf
    except ValueError:
        if base == 0:
            return math.copysign(math.inf, base) if exponent % 2 == 1 else math.inf
        return math.nan


def _log(func, value: float) -> float:
    if math.isnan(value) or value < 0:
        return math.nan
    if value == 0:
        return -math.inf
    if math.isinf(value):
        return math.inf
    return func(value)


def _ceil(value: float) -> float:
    return float(math.ceil(value)) if math.isfinite(value) else value


def _floor(value: float) -> float:
    return float(math.floor(value)) if math.isfinite(value) else value


def _apply(op: OpKind, v1: float, v2: float) -> float:
    if op is OpKind.PLUS:
        return v1 + v2
    if op is OpKind.MINUS:
        return v1 - v2
    if op is OpKind.MULT:
        return v1 * v2
    if op is OpKind.DIV:
        return _div(v1, v2)
    if op is OpKind.REM:
        return _rem(v1, v2)
    if op is OpKind.POW:
        return _pow(v1, v2)
    if op is OpKind.NOT:
        return 1.0 if v1 == 0.0 else 0.0
    if op is OpKind.SHIFT_LEFT:
        return float(_wrap_isize(_to_isize(v1) << _shift_amount(v2)))
    if op is OpKind.SHIFT_RIGHT:
        return float(_to_isize(v1) >> _shift_amount(v2))
    comparisons = {
        OpKind.EQUAL: v1 == v2,
        OpKind.NOT_EQUAL: v1 != v2,
        OpKind.GREATER: v1 > v2,
        OpKind.GREATER_EQ: v1 >= v2,
        OpKind.LESSER: v1 < v2,
        OpKind.LESSER_EQ: v1 <= v2,
    }
    return 1.0 if comparisons[op] else 0.0


_UNARY_FUNCS = {
    FuncKind.LOG2: lambda v: _log(math.log2, v),
    FuncKind.LOG10: lambda v: _log(math.log10, v),
    FuncKind.ROUND: _round,
    FuncKind.CEIL: _ceil,
    FuncKind.FLOOR: _floor,
}


def _pop(values: list[float]) -> float:
    if not values:
        raise ExprError()
    return values.pop()


class ExprTokens(list):
    """An expression as a list of tokens in reverse Polish notation."""

    def __str__(self) -> str:
        return " ".join(str(token) for token in self)

    def eval(self, variables: Mapping[str, int]) -> int:
        """Evaluate the expression, rounding the result to an integer.

        An empty expression evaluates to 0.
        """
        if not self:
            return 0
        values: list[float] = []
        for token in self:
            if token.kind == Token.NUMBER:
                values.append(float(token.value))
            elif token.kind == Token.VAR:
                value = variables.get(token.value)
                if value is None:
                    raise _unknown_var(token.value)
                values.append(float(value))
            elif token.kind == Token.OPERATOR:
                op = token.value
                v2 = 0.0 if op is OpKind.NOT else _pop(values)
                v1 = _pop(values)
                values.append(_apply(op, v1, v2))
            elif token.kind == Token.FUNC_CALL:
                value = _pop(values)
                if token.value is FuncKind.POWER:
                    base = _pop(values)
                    values.append(_pow(base, value))
                else:
                    values.append(_UNARY_FUNCS[token.value](value))
            else:
                raise ExprError()
        result = _pop(values)
        if values:
            raise ExprError()
        return _to_isize(_round(result))


class ParamValues(dict):
    """Parameter values by name, in insertion order."""

    @classmethod
    def with_index(cls, idx: int) -> ParamValues:
        """Create a set holding only the array index ``i``."""
        return cls({"i": idx})

    @classmethod
    def from_pairs(cls, pairs) -> ParamValues:
        """Evaluate ``(name, expression)`` pairs in order into a new set."""
        params = cls()
        for name, expr in _pairs(pairs):
            params[name] = _eval_param(name, expr, params)
        return params

    def compile(self, pairs) -> None:
        """Evaluate ``(name, expression)`` pairs, keeping values already set."""
        for name, expr in _pairs(pairs):
            if name in self:
                continue
            self[name] = _eval_param(name, expr, self)

    def __str__(self) -> str:
        return "".join(f"{k} = {v}, " for k, v in self.items())

    def __format__(self, spec: str) -> str:
        if spec == "#":
            return "\n" + "".join(f"\t{k} = {v}\n" for k, v in self.items())
        return format(str(self), spec)


def _pairs(pairs) -> Iterable:
    return pairs.items() if isinstance(pairs, Mapping) else pairs


def _eval_param(name: str, expr: ExprTokens, params: Mapping[str, int]) -> int:
    try:
        return expr.eval(params)
    except ExprError as err:
        raise ExprError(f"Malformed parameter {name} : {expr}") from err