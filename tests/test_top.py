import pytest

from rifparse.common import Context, Item, ParseError
from rifparse.top import (
    GenericRange,
    Interface,
    ResetDef,
    decl_rif,
    decl_rifmux,
    decl_top,
    generic_def,
    generic_range,
    reset_def,
    rif_properties,
    rif_properties_or_item,
    val_intf,
)


def test_parse_top():
    assert decl_rif("rif :")[0] == Context.RIF
    assert decl_rif("rif:")[0] == Context.RIF
    assert decl_rifmux("rifmux:  ")[0] == Context.RIFMUX
    assert decl_top("rifmux: rifMuxName")[0] == (Context.RIFMUX, "rifMuxName")
    assert decl_top("rif : rifName")[0] == (Context.RIF, "rifName")


def test_decl_top_error():
    with pytest.raises(ParseError):
        decl_top("page: name")


def test_rif_properties():
    assert rif_properties("addrWidth : 32") == (Context.ADDR_WIDTH, "32")
    assert rif_properties("dataWidth: 9")[0] == Context.DATA_WIDTH
    assert rif_properties("description: text with 9 and €") == (
        Context.DESCRIPTION,
        "text with 9 and €",
    )
    assert rif_properties("info: ")[0] == Context.INFO


def test_rif_properties_or_item():
    assert rif_properties_or_item("- page0") == (Item("page0"), "")
    assert rif_properties_or_item("suffix_pkg: true") == (Context.SUFFIX_PKG, "true")


def test_val_intf():
    assert val_intf("Default ")[0] == Interface.DEFAULT
    assert val_intf("apb")[0] == Interface.APB
    assert val_intf("Apb ")[0] == Interface.APB
    assert val_intf("my_intf5")[0] == Interface("my_intf5", custom=True)
    with pytest.raises(ParseError):
        val_intf("543 ")
    with pytest.raises(ParseError):
        val_intf("// bad ")


def test_reset_def():
    assert reset_def("default") == ResetDef("default", active_high=False, sync=False)
    assert reset_def("low_async low async") == ResetDef("low_async", False, False)
    assert reset_def("high_async high") == ResetDef("high_async", True, False)
    assert reset_def("high_sync sync") == ResetDef("high_sync", False, True)
    assert reset_def("activeH activeHigh") == ResetDef("activeH", True, False)
    assert reset_def("activeL activeLow") == ResetDef("activeL", False, False)
    with pytest.raises(ParseError):
        reset_def("error invalid option")


def test_generic_range():
    assert generic_range("8")[0] == GenericRange(min=1, max=8, default=8)
    assert generic_range("4:5")[0] == GenericRange(min=1, max=5, default=4)
    assert generic_range("3:7:16")[0] == GenericRange(min=3, max=16, default=7)


def test_generic_def():
    assert generic_def("- width = 2:8") == ("width", GenericRange(min=1, max=8, default=2))
    with pytest.raises(ParseError):
        generic_def("width = 8")