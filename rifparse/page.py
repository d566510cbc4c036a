"""Page properties and register instances of a page."""

from __future__ import annotations

from dataclasses import dataclass, field

from rifparse.common import (
    Context,
    FieldIndex,
    Item,
    ParseError,
    RegIndex,
    identifier,
    val_u16,
    val_u64,
)
from rifparse.expr import ExprTokens, parse_expr
from rifparse.rifmux import AddressKind

_MULTISPACE = " \t\r\n"


def _skip(text: str) -> str:
    return text.lstrip(_MULTISPACE)


def _ws(text: str, literal: str) -> str | None:
    stripped = _skip(text)
    if stripped.startswith(literal):
        return _skip(stripped[len(literal):])
    return None


def _keyword(text: str, table) -> tuple[Context, str] | None:
    for literal, context in table:
        rest = _ws(text, literal)
        if rest is not None:
            return context, rest
    return None


def _separator(rest: str, literals: tuple[str, ...]) -> str:
    for literal in literals:
        after = _ws(rest, literal)
        if after is not None:
            return after
    return rest


@dataclass
class RegInst:
    """An instance of a register in a page.

    ``reg_override`` holds per-instance overrides, keyed by the index of
    the overridden element.
    """

    inst_name: str
    type_name: str
    group_name: str = ""
    addr_kind: AddressKind = AddressKind.RELATIVE
    addr: int = 0
    array: ExprTokens = field(default_factory=ExprTokens)
    reg_override: dict = field(default_factory=dict)


# --------------------------------------------------------------------------
# Page properties

_PAGE_PROPERTIES = (
    ("baseAddress", Context.BASE_ADDRESS),
    ("addrWidth", Context.ADDR_WIDTH),
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("clkEn", Context.HW_CLK_EN),
    ("external", Context.EXTERNAL),
    ("optional", Context.OPTIONAL),
    ("registers", Context.REGISTERS),
    ("instances", Context.INSTANCES),
    ("include", Context.INCLUDE),
)


def page_properties(text: str) -> tuple[Context, str]:
    """Parse a page property keyword and its optional ``:``."""
    found = _keyword(text, _PAGE_PROPERTIES)
    if found is None:
        raise ParseError("expected page property", text)
    context, rest = found
    return context, _separator(rest, (":",))


# --------------------------------------------------------------------------
# Instances


def is_auto(text: str) -> bool:
    """Parse ``auto`` (True) or blank input (False)."""
    rest = _ws(text, "auto")
    if rest is not None:
        if rest:
            raise ParseError("unexpected trailing input", rest)
        return True
    if text.lstrip(" \t"):
        raise ParseError("expected 'auto'", text)
    return False


_ADDRESS_KINDS = (
    ("@+=", AddressKind.RELATIVE_SET),
    ("@+", AddressKind.RELATIVE),
    ("@", AddressKind.ABSOLUTE),
)


def _address(text: str) -> tuple[AddressKind, int, str] | None:
    for literal, kind in _ADDRESS_KINDS:
        after = _ws(text, literal)
        if after is None:
            continue
        try:
            value, rest = val_u64(after)
        except ParseError:
            return None
        return kind, value, _skip(rest)
    return None


def reg_inst(text: str) -> RegInst:
    """Parse ``- name[[size]] [= type] [(group)] [@ addr]``, consuming all input.

    The type name defaults to the instance name.
    """
    rest = _ws(text, "-")
    if rest is None:
        raise ParseError("expected '-'", text)
    name, rest = identifier(rest)
    rest = _skip(rest)

    array = ExprTokens()
    after = _ws(rest, "[")
    if after is not None:
        end = after.find("]")
        if end >= 1:
            array = parse_expr(after[:end])
            rest = _skip(after[end + 1:])

    type_name = name
    after = _ws(rest, "=")
    if after is not None:
        try:
            found, after = identifier(after)
        except ParseError:
            pass
        else:
            type_name, rest = found, _skip(after)

    group_name = ""
    after = _ws(rest, "(")
    if after is not None:
        try:
            found, after = identifier(after)
        except ParseError:
            pass
        else:
            closed = _ws(after, ")")
            if closed is not None:
                group_name, rest = found, closed

    inst = RegInst(inst_name=name, type_name=type_name, group_name=group_name, array=array)
    address = _address(rest)
    if address is not None:
        inst.addr_kind, inst.addr, rest = address

    if rest:
        raise ParseError("unexpected trailing input", rest)
    return inst


def _reg_index(text: str) -> tuple[RegIndex, str] | None:
    after = _ws(text, "[")
    if after is None:
        return None
    try:
        index, rest = val_u16(after)
    except ParseError:
        return None
    rest = _ws(rest, "].")
    if rest is None:
        return None
    return RegIndex(index), rest


def _item_path(text: str) -> tuple[Item, str] | None:
    try:
        name, rest = identifier(text)
    except ParseError:
        return None
    if not rest.startswith("."):
        return None
    return Item(name), rest[1:]


def reg_inst_field_array(text: str) -> tuple[FieldIndex, str]:
    """Parse ``field[index].`` naming one element of a field array."""
    name, rest = identifier(text)
    after = _ws(rest, "[")
    if after is None:
        raise ParseError("expected '['", rest)
    index, rest = val_u16(after)
    after = _ws(rest, "].")
    if after is None:
        raise ParseError("expected '].'", rest)
    return FieldIndex(name, index), after


_INST_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("parameters", Context.PARAMETERS),
    ("info", Context.INFO),
    ("optional", Context.OPTIONAL),
    ("hidden", Context.HIDDEN),
    ("disabled", Context.DISABLED),
    ("disable", Context.DISABLED),
    ("reserved", Context.RESERVED),
    ("hw", Context.HW_ACCESS),
)

_INST_ARRAY_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("optional", Context.OPTIONAL),
    ("info", Context.INFO),
    ("hidden", Context.HIDDEN),
    ("reserved", Context.RESERVED),
    ("disabled", Context.DISABLED),
    ("disable", Context.DISABLED),
    ("hw", Context.HW_ACCESS),
)

_INST_FIELD_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("info", Context.INFO),
    ("optional", Context.OPTIONAL),
    ("hidden", Context.HIDDEN),
    ("reserved", Context.RESERVED),
    ("disabled", Context.DISABLED),
    ("disable", Context.DISABLED),
    ("reset", Context.HW_RESET),
    ("rst", Context.HW_RESET),
    ("limit", Context.LIMIT),
)

_VALUE_SEPARATORS = (":", "=")


def reg_inst_properties(text: str) -> tuple[Context | RegIndex | Item | FieldIndex, str]:
    """Parse a register instance property, an array index or a field path."""
    found = _keyword(text, _INST_PROPERTIES) or _reg_index(text) or _item_path(text)
    if found is None:
        try:
            found = reg_inst_field_array(text)
        except ParseError:
            raise ParseError("expected instance property", text) from None
    value, rest = found
    return value, _separator(rest, _VALUE_SEPARATORS)


def reg_inst_array_properties(text: str) -> tuple[Context | Item, str]:
    """Parse a property of one element of a register array."""
    found = _keyword(text, _INST_ARRAY_PROPERTIES) or _item_path(text)
    if found is None:
        raise ParseError("expected instance array property", text)
    value, rest = found
    return value, _separator(rest, _VALUE_SEPARATORS)


def reg_inst_field_properties(text: str) -> tuple[Context, str]:
    """Parse a property overridden on a field of a register instance."""
    found = _keyword(text, _INST_FIELD_PROPERTIES)
    if found is None:
        raise ParseError("expected instance field property", text)
    value, rest = found
    return value, _separator(rest, _VALUE_SEPARATORS)