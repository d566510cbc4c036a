import pytest

from rifparse.common import Context, Item, ParseError
from rifparse.rifmux import (
    AddressKind,
    AddressOffset,
    RifmuxGroup,
    RifmuxItem,
    SuffixInfo,
    address_offset,
    rif_inst,
    rif_inst_properties,
    rif_inst_suffix,
    rifmux_group,
    rifmux_map,
    rifmux_properties,
    suffix_info,
)


def test_suffix_info():
    assert suffix_info("name_only") == SuffixInfo("name_only", False, False)
    assert suffix_info("ctrl(pkg)") == SuffixInfo("ctrl", False, True)
    assert suffix_info("name(alt)") == SuffixInfo("name", True, False)
    assert suffix_info("n1(alt,pkg)") == SuffixInfo("n1", True, True)
    assert suffix_info("n2(pkg,alt)") == SuffixInfo("n2", True, True)


def test_rif_inst_suffix():
    assert rif_inst_suffix("a.b=sfx(pkg)") == ("a.b", SuffixInfo("sfx", False, True))
    assert rif_inst_suffix("sfx") == (None, SuffixInfo("sfx"))


def test_properties():
    assert rifmux_properties("map:") == (Context.RIFMUX_MAP, "")
    assert rifmux_properties("top : x") == (Context.RIFMUX_TOP, "x")
    assert rif_inst_properties("suffix: s") == (Context.SUFFIX, "s")
    with pytest.raises(ParseError):
        rifmux_properties("map")


def test_rifmux_map():
    assert rifmux_map("group: g0 @ 0x100") == (Context.RIFMUX_GROUP, " g0 @ 0x100")
    assert rifmux_map("- inst = t") == (Item(""), "inst = t")


def test_address_offset():
    assert address_offset("0x40") == (AddressOffset(value=0x40), "")
    assert address_offset("$base") == (AddressOffset(param="base"), "")


def test_rif_inst():
    assert rif_inst('inst = my_rif @ 0x100 "Instance"', "grp") == RifmuxItem(
        "inst", "my_rif", None, AddressKind.ABSOLUTE, AddressOffset(value=0x100), "Instance", "grp"
    )
    assert rif_inst("ext external 12 @+ 16", "") == RifmuxItem(
        "ext", None, 12, AddressKind.RELATIVE, AddressOffset(value=16), "", ""
    )
    with pytest.raises(ParseError):
        rif_inst("inst something", "")


def test_rifmux_group():
    assert rifmux_group('g0 @+= $off "Group"') == RifmuxGroup(
        "g0", AddressKind.RELATIVE_SET, AddressOffset(param="off"), "Group"
    )
    with pytest.raises(ParseError):
        rifmux_group("g0 0x10")