"""Register interface multiplexer: instances, groups and suffixes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rifparse.common import (
    Context,
    Item,
    ParseError,
    identifier,
    param,
    path_name,
    quoted_string,
    val_u64,
    val_u8,
)

_MULTISPACE = " \t\r\n"


def _skip(text: str) -> str:
    return text.lstrip(_MULTISPACE)


def _ws(text: str, literal: str) -> str | None:
    stripped = _skip(text)
    if stripped.startswith(literal):
        return _skip(stripped[len(literal):])
    return None


def _full(value, rest: str):
    if rest:
        raise ParseError("unexpected trailing input", rest)
    return value


class AddressKind(Enum):
    """How an address is given: absolute or relative to the previous item."""

    ABSOLUTE = "@"
    RELATIVE = "@+"
    RELATIVE_SET = "@+="


@dataclass(frozen=True)
class AddressOffset:
    """An address: a literal value or a named parameter."""

    value: int = 0
    param: str | None = None


@dataclass(frozen=True)
class SuffixInfo:
    """A name suffix, optionally in alternate position and/or on the package."""

    name: str
    alt_pos: bool = False
    pkg: bool = False


@dataclass(frozen=True)
class RifmuxItem:
    """A RIF instance in a multiplexer: either a named RIF or an external block."""

    name: str
    rif_type: str | None = None
    ext_addr_width: int | None = None
    addr_kind: AddressKind | None = None
    addr: AddressOffset | None = None
    description: str = ""
    group: str = ""


@dataclass(frozen=True)
class RifmuxGroup:
    """A named group of RIF instances at a given address."""

    name: str
    addr_kind: AddressKind
    addr: AddressOffset
    description: str = ""


def _keyword_colon(text: str, table) -> tuple[Context, str]:
    for literal, context in table:
        rest = _ws(text, literal)
        if rest is not None:
            after = _ws(rest, ":")
            if after is None:
                raise ParseError("expected ':'", rest)
            return context, after
    raise ParseError("unexpected keyword", text)


_RIFMUX_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("info", Context.INFO),
    ("swClock", Context.SW_CLOCK),
    ("swClkEn", Context.SW_CLK_EN),
    ("swReset", Context.SW_RESET),
    ("interface", Context.INTERFACE),
    ("addrWidth", Context.ADDR_WIDTH),
    ("dataWidth", Context.DATA_WIDTH),
    ("parameters", Context.PARAMETERS),
    ("map", Context.RIFMUX_MAP),
    ("top", Context.RIFMUX_TOP),
)

_RIF_INST_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("parameters", Context.PARAMETERS),
    ("suffix", Context.SUFFIX),
)


def rifmux_properties(text: str) -> tuple[Context, str]:
    """Parse a multiplexer property keyword followed by ``:``."""
    return _keyword_colon(text, _RIFMUX_PROPERTIES)


def rif_inst_properties(text: str) -> tuple[Context, str]:
    """Parse a RIF instance property keyword followed by ``:``."""
    return _keyword_colon(text, _RIF_INST_PROPERTIES)


def rifmux_map(text: str) -> tuple[Context | Item, str]:
    """Parse a map line start: ``group[:]`` or ``-``."""
    rest = _ws(text, "group")
    if rest is not None:
        return Context.RIFMUX_GROUP, rest[1:] if rest.startswith(":") else rest
    rest = _ws(text, "-")
    if rest is not None:
        return Item(""), rest
    raise ParseError("expected group or item", text)


def _address_kind(text: str) -> tuple[AddressKind, str]:
    for kind in (AddressKind.RELATIVE_SET, AddressKind.RELATIVE, AddressKind.ABSOLUTE):
        rest = _ws(text, kind.value)
        if rest is not None:
            return kind, rest
    raise ParseError("expected address", text)


def address_offset(text: str) -> tuple[AddressOffset, str]:
    """Parse an address value or a ``$param`` reference."""
    try:
        value, rest = val_u64(text)
    except ParseError:
        name, rest = param(_skip(text))
        return AddressOffset(param=name), _skip(rest)
    return AddressOffset(value=value), rest


def rif_inst(text: str, group: str) -> RifmuxItem:
    """Parse ``name = type [@ addr] "desc"`` or ``name external width [@ addr] "desc"``."""
    name, rest = identifier(_skip(text))
    rest = _skip(rest)
    rif_type = None
    ext_width = None
    after = _ws(rest, "=")
    parsed = False
    if after is not None:
        try:
            rif_type, after = identifier(after)
        except ParseError:
            pass
        else:
            rest, parsed = _skip(after), True
    if not parsed:
        after = _ws(rest, "external")
        if after is None:
            raise ParseError("expected '=' or 'external'", rest)
        ext_width, rest = val_u8(after)
    addr_kind = addr = None
    try:
        kind, after = _address_kind(rest)
        offset, after = address_offset(after)
    except ParseError:
        pass
    else:
        addr_kind, addr, rest = kind, offset, after
    description = ""
    try:
        description, rest = quoted_string(rest)
    except ParseError:
        pass
    return _full(
        RifmuxItem(name, rif_type, ext_width, addr_kind, addr, description, group), rest
    )


def _suffix_flags(text: str) -> tuple[tuple[bool, bool], str] | None:
    for first, second in (("alt", "pkg"), ("pkg", "alt")):
        rest = _ws(text, first)
        if rest is not None and rest.startswith(","):
            after = _ws(rest[1:], second)
            if after is not None:
                return (True, True), after
    for word, flags in (("alt", (True, False)), ("pkg", (False, True))):
        rest = _ws(text, word)
        if rest is not None:
            return flags, rest
    return None


def _suffix_info(text: str) -> tuple[SuffixInfo, str]:
    name, rest = identifier(text)
    alt_pos = pkg = False
    if rest.startswith("("):
        found = _suffix_flags(rest[1:])
        if found is not None and found[1].startswith(")"):
            (alt_pos, pkg), after = found
            rest = after[1:]
    return SuffixInfo(name, alt_pos, pkg), rest


def suffix_info(text: str) -> SuffixInfo:
    """Parse ``name[(alt|pkg|alt,pkg)]``, consuming all input."""
    return _full(*_suffix_info(text))


def rif_inst_suffix(text: str) -> tuple[str | None, SuffixInfo]:
    """Parse ``[path=]suffix``."""
    path = None
    rest = text
    try:
        found, after = path_name(text)
    except ParseError:
        pass
    else:
        if after.startswith("="):
            path, rest = found, after[1:]
    info, rest = _suffix_info(rest)
    return _full((path, info), rest)


def rifmux_group(text: str) -> RifmuxGroup:
    """Parse ``name @ addr "description"``."""
    name, rest = identifier(_skip(text))
    kind, rest = _address_kind(rest)
    offset, rest = address_offset(rest)
    description = ""
    try:
        description, rest = quoted_string(rest)
    except ParseError:
        pass
    return _full(RifmuxGroup(name, kind, offset, description), rest)