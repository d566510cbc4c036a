import pytest

from rifparse.common import (
    Item,
    ParseError,
    Width,
    bool_or_default,
    comment,
    desc,
    identifier,
    identifier_last,
    indentation,
    item,
    item_cntxt,
    item_start,
    key_val,
    logic_expr,
    opt_signal_or_expr,
    param,
    parse_bool,
    path_name,
    path_val,
    quoted_string,
    scoped_identifier,
    signal_name,
    signal_name_last,
    signal_or_expr,
    take_until_unbalanced,
    unquoted_string,
    val_f64,
    val_i128,
    val_isize,
    val_u8,
    val_u8_or_param,
    val_u16,
    val_u64,
    val_u128,
    vec_id,
)


def test_comment():
    assert comment("# comment #") is True
    assert comment("  // comment //") is True
    assert comment("  / not a comment") is False
    assert comment("   ") is True


def test_identifier():
    assert identifier("signal123") == ("signal123", "")
    assert identifier("_signal123") == ("_signal123", "")
    assert identifier("sig.field") == ("sig", ".field")
    with pytest.raises(ParseError):
        identifier("0sig")
    with pytest.raises(ParseError):
        identifier("+")


def test_identifier_last():
    assert identifier_last("  clk  ") == "clk"
    with pytest.raises(ParseError):
        identifier_last("clk rst")


def test_scoped_identifier():
    assert scoped_identifier("pkg::name rest") == (("pkg", "name"), " rest")
    assert scoped_identifier("name") == ((None, "name"), "")
    with pytest.raises(ParseError):
        scoped_identifier("pkg::")


def test_signal():
    assert signal_name("signal123") == ("signal123", "")
    assert signal_name("sig.field") == ("sig.field", "")
    assert path_name("sig.field") == ("sig.field", "")
    assert path_name("l1.l2.l3.") == ("l1.l2.l3", ".")
    assert signal_name(".local") == (".local", "")
    assert signal_name_last("a.b") == "a.b"
    with pytest.raises(ParseError):
        signal_name_last("a.b.c")


def test_bool_or_default():
    assert parse_bool("true ??") == (True, "??")
    assert parse_bool("True!") == (True, "!")
    assert bool_or_default("  ", False) is False
    assert bool_or_default("", True) is True
    assert bool_or_default("0", True) is False
    assert bool_or_default("1", False) is True
    assert bool_or_default("true", False) is True
    assert bool_or_default("True", False) is True
    with pytest.raises(ParseError):
        bool_or_default("True ? no !", False)
    assert bool_or_default("False", True) is False
    with pytest.raises(ParseError):
        bool_or_default("error", False)


def test_quoted_string():
    assert quoted_string('"Simple quoted string" with following text') == (
        "Simple quoted string",
        "with following text",
    )
    with pytest.raises(ParseError):
        quoted_string("No quotes")
    with pytest.raises(ParseError):
        quoted_string('"No end quote')


def test_unquoted_and_desc():
    assert unquoted_string("   some text ") == ("some text ", "")
    assert desc('"quoted"') == "quoted"
    assert desc("  plain text") == "plain text"
    with pytest.raises(ParseError):
        desc('"quoted" trailing')


def test_indent():
    assert indentation("No indent") == (0, "No indent")
    assert indentation("  spaces: ") == (2, "spaces: ")
    assert indentation("\ttab: ") == (1, "tab: ")
    with pytest.raises(ParseError):
        indentation("  \tTab & space")


def test_reset_val():
    assert val_u8("34 ") == (34, " ")
    assert val_u8("0x34 ") == (0x34, " ")
    assert val_u8("2'b10 ") == (2, " ")
    assert val_u8("6'o10 ") == (8, " ")
    assert val_u8("8'd10 ") == (10, " ")
    assert val_u8("8'h1A ") == (26, " ")


def test_integer_limits():
    with pytest.raises(ParseError):
        val_u8("300")
    assert val_u16("300") == (300, "")
    assert val_u64("0xFFFFFFFFFFFFFFFF") == (2**64 - 1, "")
    assert val_u128("16'hFFFF") == (0xFFFF, "")
    assert val_i128("-17 ") == (-17, " ")
    assert val_isize("+5") == (5, "")
    assert val_u8("2'b12") == (2, "'b12")
    with pytest.raises(ParseError):
        val_u8("abc")


def test_val_f64():
    assert val_f64("1.5e3x") == (1500.0, "x")
    assert val_f64(".25") == (0.25, "")
    assert val_f64("-3") == (-3.0, "")
    with pytest.raises(ParseError):
        val_f64("1e")


def test_param_and_width():
    assert param("$width rest") == ("width", " rest")
    assert val_u8_or_param("12") == (Width(value=12), "")
    assert val_u8_or_param("$w]") == (Width(param="w"), "]")
    with pytest.raises(ParseError):
        val_u8_or_param("w")


def test_key_val():
    assert key_val("- Key0 = 5") == ("Key0", "5")
    assert key_val("- Key1 : 5*8 + 3") == ("Key1", "5*8 + 3")
    assert key_val("- Key2 : log2($Key1)") == ("Key2", "log2($Key1)")
    assert path_val("- a.b.c = 3") == ("a.b.c", "3")


def test_items():
    assert item("- name: rest") == ("name", "rest")
    assert item_cntxt("- page0") == (Item("page0"), "")
    assert item_start("  - field") == (Item(""), "field")
    assert vec_id("clk0 clk1  clk2") == ["clk0", "clk1", "clk2"]
    with pytest.raises(ParseError):
        vec_id("   ")


def test_logic_expr():
    assert logic_expr("(3+5)") == ("(3+5)", "")
    assert logic_expr("(s0 & (s1 | ~s2) & s3)") == ("(s0 & (s1 | ~s2) & s3)", "")
    with pytest.raises(ParseError):
        logic_expr("(s1 & (s2)")


def test_take_until_unbalanced():
    assert take_until_unbalanced("a(b)c) tail", "(", ")") == ("a(b)c", ") tail")
    assert take_until_unbalanced("a(b)c", "(", ")") == ("a(b)c", "")
    with pytest.raises(ParseError):
        take_until_unbalanced("a(b", "(", ")")


def test_signal_or_expr():
    assert signal_or_expr("  sig.field ") == "sig.field"
    assert signal_or_expr("(a & b)") == "(a & b)"
    with pytest.raises(ParseError):
        signal_or_expr("a & b")
    assert opt_signal_or_expr("") is None
    assert opt_signal_or_expr(" en") == "en"