import pytest

from rifparse.common import ParseError
from rifparse.expr import (
    ExprError,
    ExprTokens,
    FuncKind,
    OpKind,
    ParamValues,
    Token,
    parse_expr,
)


def num(v):
    return Token(Token.NUMBER, float(v))


def var(name):
    return Token(Token.VAR, name)


def op(kind):
    return Token(Token.OPERATOR, kind)


def func(kind):
    return Token(Token.FUNC_CALL, kind)


def test_parse_expr_number():
    assert parse_expr("256 ") == ExprTokens([num(256)])


def test_parse_expr_var_plus():
    assert parse_expr("$v1 +3") == ExprTokens([var("v1"), num(3), op(OpKind.PLUS)])


def test_parse_expr_nested_functions():
    assert parse_expr("ceil(log2($v3-5))") == ExprTokens(
        [var("v3"), num(5), op(OpKind.MINUS), func(FuncKind.LOG2), func(FuncKind.CEIL)]
    )


def test_parse_expr_pow_two_args():
    assert parse_expr("pow(3,$x )-1") == ExprTokens(
        [num(3), var("x"), func(FuncKind.POWER), num(1), op(OpKind.MINUS)]
    )


def test_eval_expr():
    variables = ParamValues({"v1": 1, "x": 17})
    assert parse_expr("16*(not $v1) + 256*$v1").eval(variables) == 256
    assert parse_expr("pow(2, $x) - 1").eval(variables) == (1 << 17) - 1


def test_empty_expression_is_zero():
    assert parse_expr("") == ExprTokens()
    assert ExprTokens().eval(ParamValues()) == 0


@pytest.mark.parametrize(
    "text, expected",
    [
        ("5/2", 3),
        ("-7 % 3", -1),
        ("log2(8)", 3),
        ("true + 1", 2),
        ("1 == 1", 1),
        ("3 != 3", 0),
        ("!0", 1),
        ("floor(7/2)", 3),
    ],
)
def test_eval_values(text, expected):
    assert parse_expr(text).eval(ParamValues()) == expected


def test_index_variable():
    assert parse_expr("i*4").eval(ParamValues.with_index(3)) == 12


def test_shift_tokens():
    expr = ExprTokens([num(1), num(4), op(OpKind.SHIFT_LEFT)])
    assert expr.eval({}) == 16
    expr = ExprTokens([num(-16), num(2), op(OpKind.SHIFT_RIGHT)])
    assert expr.eval({}) == -4


def test_unknown_variable():
    with pytest.raises(ExprError) as info:
        parse_expr("$y + 1").eval(ParamValues())
    assert info.value.variable == "y"
    assert str(info.value) == "Unknown var y in expression"


def test_unbalanced_parenthesis_is_malformed():
    with pytest.raises(ExprError, match="Malformed expression"):
        parse_expr("(1").eval(ParamValues())


def test_missing_operand_is_malformed():
    with pytest.raises(ExprError):
        parse_expr("3 +").eval(ParamValues())


def test_parse_error_on_two_operands():
    with pytest.raises(ParseError):
        parse_expr("3 3")


def test_from_pairs():
    params = ParamValues.from_pairs([("a", parse_expr("4")), ("b", parse_expr("$a*2"))])
    assert dict(params) == {"a": 4, "b": 8}
    assert list(params) == ["a", "b"]


def test_from_pairs_malformed():
    with pytest.raises(ExprError, match="Malformed parameter b"):
        ParamValues.from_pairs({"a": parse_expr("1"), "b": parse_expr("$c")})


def test_compile_keeps_existing_values():
    params = ParamValues({"a": 10})
    params.compile([("a", parse_expr("1")), ("b", parse_expr("$a+1"))])
    assert dict(params) == {"a": 10, "b": 11}


def test_param_values_formatting():
    params = ParamValues({"a": 1, "b": 2})
    assert str(params) == "a = 1, b = 2, "
    assert f"{params:#}" == "\n\ta = 1\n\tb = 2\n"


def test_token_display():
    assert str(func(FuncKind.LOG2)) == "log2()"
    assert str(num(256)) == "256"
    assert str(var("x")) == "$x"
    assert str(op(OpKind.SHIFT_LEFT)) == "<<"
    assert str(Token(Token.COMMA)) == ","