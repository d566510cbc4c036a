"""Top-level declarations and properties of a RIF block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from rifparse.common import (
    Context,
    Item,
    ParseError,
    identifier,
    item_cntxt,
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


def _ws_caseless(text: str, literal: str) -> tuple[str, str] | None:
    stripped = _skip(text)
    head = stripped[: len(literal)]
    if head.lower() == literal.lower():
        return head, _skip(stripped[len(literal):])
    return None


def _full(value, rest: str):
    if rest:
        raise ParseError("unexpected trailing input", rest)
    return value


@dataclass(frozen=True)
class Interface:
    """Software interface of a register block: a known bus or a custom one."""

    name: str
    custom: bool = False

    DEFAULT: ClassVar[Interface]
    APB: ClassVar[Interface]

    @classmethod
    def from_name(cls, name: str) -> Interface:
        """Map a name to a known interface, or a custom one otherwise."""
        known = {"default": cls.DEFAULT, "apb": cls.APB}
        return known.get(name.lower(), cls(name, custom=True))


Interface.DEFAULT = Interface("default")
Interface.APB = Interface("apb")


@dataclass(frozen=True)
class ResetDef:
    """A reset signal: name, polarity and synchronicity."""

    name: str
    active_high: bool = False
    sync: bool = False


@dataclass(frozen=True)
class GenericRange:
    """Allowed range and default value of a generic."""

    min: int
    max: int
    default: int

    @classmethod
    def from_values(cls, values: list[int]) -> GenericRange:
        """Build from ``[max]``, ``[default, max]`` or ``[min, default, max]``."""
        if len(values) == 1:
            return cls(min=1, max=values[0], default=values[0])
        if len(values) == 2:
            return cls(min=1, max=values[1], default=values[0])
        if len(values) == 3:
            return cls(min=values[0], max=values[2], default=values[1])
        raise ValueError(f"expected 1 to 3 values, got {len(values)}")


# --------------------------------------------------------------------------
# Top level


def _decl(text: str, keyword: str, context: Context) -> tuple[Context, str]:
    if not text.startswith(keyword):
        raise ParseError(f"expected '{keyword}'", text)
    rest = _ws(text[len(keyword):], ":")
    if rest is None:
        raise ParseError("expected ':'", text)
    return context, rest


def decl_rif(text: str) -> tuple[Context, str]:
    """Parse ``rif:``."""
    return _decl(text, "rif", Context.RIF)


def decl_rifmux(text: str) -> tuple[Context, str]:
    """Parse ``rifmux:``."""
    return _decl(text, "rifmux", Context.RIFMUX)


def decl_top(text: str) -> tuple[tuple[Context, str], str]:
    """Parse ``rif: name`` or ``rifmux: name``."""
    try:
        context, rest = decl_rif(text)
    except ParseError:
        context, rest = decl_rifmux(text)
    name, rest = identifier(rest)
    return (context, name), rest


# --------------------------------------------------------------------------
# RIF properties

_RIF_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("parameters", Context.PARAMETERS),
    ("generics", Context.GENERICS),
    ("info", Context.INFO),
    ("interface", Context.INTERFACE),
    ("addrWidth", Context.ADDR_WIDTH),
    ("dataWidth", Context.DATA_WIDTH),
    ("swClock", Context.SW_CLOCK),
    ("hwClock", Context.HW_CLOCK),
    ("swClkEn", Context.SW_CLK_EN),
    ("hwClkEn", Context.HW_CLK_EN),
    ("swReset", Context.SW_RESET),
    ("hwReset", Context.HW_RESET),
    ("hwClear", Context.HW_CLEAR),
    ("swClear", Context.SW_CLEAR),
    ("suffixPkg", Context.SUFFIX_PKG),
    ("suffix_pkg", Context.SUFFIX_PKG),
)


def rif_properties(text: str) -> tuple[Context | Item, str]:
    """Parse a RIF property keyword (or page item) followed by ``:``."""
    for literal, context in _RIF_PROPERTIES:
        rest = _ws(text, literal)
        if rest is not None:
            value = context
            break
    else:
        value, rest = item_cntxt(text)
    after = _ws(rest, ":")
    if after is None:
        raise ParseError("expected ':'", rest)
    return value, after


def rif_properties_or_item(text: str) -> tuple[Context | Item, str]:
    """Parse a RIF property, or fall back to a page item."""
    try:
        return rif_properties(text)
    except ParseError:
        return item_cntxt(text)


def val_intf(text: str) -> tuple[Interface, str]:
    """Parse an interface name."""
    name, rest = identifier(text)
    return Interface.from_name(name), rest


def reset_def(text: str) -> ResetDef:
    """Parse ``name [[active]Low|High] [async|sync]``; default is active-low async."""
    name, rest = identifier(_skip(text))
    rest = _skip(rest)
    active_high = False
    probe = _ws(rest, "active")
    probe = rest if probe is None else probe
    for literal in ("Low", "High"):
        found = _ws_caseless(probe, literal)
        if found is not None:
            matched, rest = found
            active_high = matched in ("High", "high")
            break
    sync = False
    for literal in ("async", "sync"):
        after = _ws(rest, literal)
        if after is not None:
            sync = literal == "sync"
            rest = after
            break
    return _full(ResetDef(name=name, active_high=active_high, sync=sync), rest)


def generic_range(text: str) -> tuple[GenericRange, str]:
    """Parse one to three values separated by ``:``."""
    values: list[int] = []
    rest = text
    while len(values) < 3:
        try:
            value, after = val_u8(_skip(rest))
        except ParseError:
            break
        after = _skip(after)
        if after.startswith(":"):
            after = after[1:]
        values.append(value)
        rest = after
    if not values:
        raise ParseError("expected generic range", text)
    return GenericRange.from_values(values), rest


def generic_def(text: str) -> tuple[str, GenericRange]:
    """Parse ``- name [=|:] range``."""
    if not text.startswith("-"):
        raise ParseError("expected '-'", text)
    name, rest = identifier(_skip(text[1:]))
    rest = _skip(rest)
    if rest[:1] in ("=", ":") and rest:
        rest = rest[1:]
    rng, rest = generic_range(rest)
    return _full((name, rng), rest)