import pytest

from rifparse.common import ParseError
from rifparse.values import ResetKind, ResetVal, reset_val, reset_val_arr


def unsigned(v):
    return ResetVal(ResetKind.UNSIGNED, v)


def signed(v):
    return ResetVal(ResetKind.SIGNED, v)


def test_reset_val():
    assert reset_val("34 ") == (unsigned(34), " ")
    assert reset_val("+34") == (signed(34), "")
    assert reset_val("-17 ") == (signed(-17), " ")
    assert reset_val("0x2A") == (unsigned(42), "")


def test_reset_val_param():
    assert reset_val("$init rest") == (ResetVal(ResetKind.PARAM, "init"), " rest")
    assert str(ResetVal(ResetKind.PARAM, "init")) == "$init"


def test_signed_and_unsigned_differ():
    assert unsigned(0) != signed(0)


def test_reset_val_error():
    with pytest.raises(ParseError):
        reset_val("xyz")


def test_reset_val_arr():
    assert reset_val_arr("{0, 1 , 0x2,0x3} rest of text") == (
        [unsigned(0), unsigned(1), unsigned(2), unsigned(3)],
        " rest of text",
    )
    assert reset_val_arr("{+0, -1}") == ([signed(0), signed(-1)], "")
    assert reset_val_arr("{0, -1}") == ([unsigned(0), signed(-1)], "")


def test_reset_val_arr_errors():
    with pytest.raises(ParseError):
        reset_val_arr("0, 1}")
    with pytest.raises(ParseError):
        reset_val_arr("{}")
    with pytest.raises(ParseError):
        reset_val_arr("{1, 2")