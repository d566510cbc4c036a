import pytest

from rifparse.common import Context, Item, ParseError, PathStart, Width
from rifparse.registers import (
    InterruptClr,
    InterruptInfo,
    InterruptTrigger,
    RegDecl,
    intr_desc,
    reg_decl,
    reg_incl_or_decl,
    reg_interrupt,
    reg_interrupt_clr,
    reg_interrupt_en,
    reg_interrupt_mask,
    reg_interrupt_perm,
    reg_interrupt_trigger,
    reg_properties,
    reg_properties_or_item,
    reg_pulse_info,
)
from rifparse.values import ResetKind, ResetVal


def u(v):
    return ResetVal(ResetKind.UNSIGNED, v)


def test_interrupt():
    info, _ = reg_interrupt("edge w1clr enable=0x1337 mask=0xCAFE pending", "")
    assert info == InterruptInfo(
        name="",
        trigger=InterruptTrigger.EDGE,
        clear=InterruptClr.WRITE1,
        enable=u(0x1337),
        mask=u(0xCAFE),
        pending=True,
    )
    info, _ = reg_interrupt("high mask pending en=0xCAFE hwclr", "event")
    assert info == InterruptInfo(
        name="event",
        trigger=InterruptTrigger.HIGH,
        clear=InterruptClr.HW,
        enable=u(0xCAFE),
        mask=u(0),
        pending=True,
    )
    info, _ = reg_interrupt("en", "intr")
    assert info == InterruptInfo(
        name="intr",
        trigger=InterruptTrigger.HIGH,
        clear=InterruptClr.READ,
        enable=u(0),
        mask=None,
        pending=False,
    )


def test_interrupt_pieces():
    assert reg_interrupt_trigger("rising x") == (InterruptTrigger.RISING, "x")
    assert reg_interrupt_clr("w0clr") == (InterruptClr.WRITE0, "")
    assert reg_interrupt_en("en=5") == (u(5), "")
    assert reg_interrupt_mask("mask") == (u(0), "")
    assert reg_interrupt_perm("low pending") == (
        (InterruptTrigger.LOW, None, None, None, True),
        "",
    )
    with pytest.raises(ParseError):
        reg_interrupt_trigger("never")


def test_reg_decl():
    assert reg_decl('ctrl : (grp) "Control register"') == RegDecl(
        "ctrl", None, "grp", None, "Control register"
    )
    assert reg_decl("arr[4]: (pkg::grp)") == RegDecl("arr", "pkg", "grp", Width(value=4), "")
    with pytest.raises(ParseError):
        reg_decl("noColon")


def test_reg_properties():
    assert reg_properties("description: text") == (Context.DESCRIPTION, "text")
    assert reg_properties("clkEn: en") == (Context.HW_CLK_EN, "en")
    assert reg_properties("externalDone")[0] == Context.EXTERNAL_DONE
    assert reg_properties("irq.enable.desc: x") == (PathStart("irq"), "enable.desc: x")
    assert reg_properties_or_item("- field = 0 3:0") == (Item(""), "field = 0 3:0")


def test_intr_desc():
    assert intr_desc("mask.desc: hello") == (Context.DESC_INTR_MASK, "hello")
    assert intr_desc("pending.description = x") == (Context.DESC_INTR_PENDING, "x")


def test_reg_pulse_info():
    assert reg_pulse_info("reg", "pclk", False) == ("pclk", "")
    assert reg_pulse_info("comb", "pclk", True) == ("", "")
    assert reg_pulse_info("", "pclk", True) == ("pclk", "")
    assert reg_pulse_info("wr_pulse", "pclk", True) == ("wr_pulse", "")