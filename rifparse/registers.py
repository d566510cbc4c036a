"""Register declarations, register properties and interrupt settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rifparse.common import (
    Context,
    Item,
    ParseError,
    PathStart,
    Width,
    identifier,
    item_start,
    quoted_string,
    scoped_identifier,
    val_u8_or_param,
)
from rifparse.values import ResetKind, ResetVal, reset_val

_MULTISPACE = " \t\r\n"


def _skip(text: str) -> str:
    return text.lstrip(_MULTISPACE)


def _ws(text: str, literal: str) -> str | None:
    stripped = _skip(text)
    if stripped.startswith(literal):
        return _skip(stripped[len(literal):])
    return None


def _keyword(text: str, table) -> tuple:
    for literal, value in table:
        rest = _ws(text, literal)
        if rest is not None:
            return value, rest
    raise ParseError("unexpected keyword", text)


def _opt_ws(parser, text: str) -> tuple:
    try:
        value, rest = parser(_skip(text))
    except ParseError:
        return None, text
    return value, _skip(rest)


class InterruptTrigger(Enum):
    """Event that raises an interrupt."""

    HIGH = "high"
    LOW = "low"
    RISING = "rising"
    FALLING = "falling"
    EDGE = "edge"


class InterruptClr(Enum):
    """How a pending interrupt is cleared."""

    READ = "rclr"
    WRITE1 = "w1clr"
    WRITE0 = "w0clr"
    HW = "hwclr"


@dataclass(frozen=True)
class InterruptInfo:
    """Interrupt settings of a register."""

    name: str = ""
    trigger: InterruptTrigger = InterruptTrigger.HIGH
    clear: InterruptClr = InterruptClr.READ
    enable: ResetVal | None = None
    mask: ResetVal | None = None
    pending: bool = False


@dataclass(frozen=True)
class RegDecl:
    """A register declaration: ``name[array]: (pkg::group) "description"``."""

    name: str
    group_pkg: str | None = None
    group_name: str | None = None
    array: Width | None = None
    description: str = ""


def reg_decl(text: str) -> RegDecl:
    """Parse ``reg_name[size] : (group) "description"``, consuming all input."""
    name, rest = identifier(text)
    array = None
    if rest.startswith("["):
        try:
            width, after = val_u8_or_param(rest[1:])
        except ParseError:
            after = ""
            width = None
        if width is not None and after.startswith("]"):
            array, rest = width, after[1:]
    after = _ws(rest, ":")
    if after is None:
        raise ParseError("expected ':'", rest)
    rest = after
    pkg = group = None
    if rest.startswith("("):
        try:
            (scope, gname), after = scoped_identifier(rest[1:])
        except ParseError:
            after = ""
            gname = None
        if gname is not None and after.startswith(")"):
            pkg, group, rest = scope, gname, after[1:]
    description = ""
    try:
        description, rest = quoted_string(rest)
    except ParseError:
        pass
    if rest:
        raise ParseError("unexpected trailing input", rest)
    return RegDecl(name, pkg, group, array, description)


def reg_incl_or_decl(text: str) -> tuple[Context, str]:
    """Parse ``[-] include`` or the ``-`` starting a register declaration."""
    body = text[1:] if text.startswith("-") else text
    rest = _ws(body, "include")
    if rest is not None:
        return Context.INCLUDE, rest
    rest = _ws(text, "-")
    if rest is not None:
        return Context.REGISTERS, rest
    raise ParseError("expected include or register", text)


_REG_PROPERTIES = (
    ("description", Context.DESCRIPTION),
    ("desc", Context.DESCRIPTION),
    ("enable.description", Context.DESC_INTR_ENABLE),
    ("mask.description", Context.DESC_INTR_MASK),
    ("pending.description", Context.DESC_INTR_PENDING),
    ("clock", Context.HW_CLOCK),
    ("hwReset", Context.HW_RESET),
)

_REG_PROPERTIES_TAIL = (
    ("clear", Context.HW_CLEAR),
    ("externalDone", Context.EXTERNAL_DONE),
    ("external", Context.EXTERNAL),
    ("interrupt", Context.INTERRUPT),
    ("alt", Context.INTERRUPT_ALT),
    ("hidden", Context.HIDDEN),
    ("disabled", Context.DISABLED),
    ("disable", Context.DISABLED),
    ("reserved", Context.RESERVED),
    ("optional", Context.OPTIONAL),
    ("info", Context.INFO),
    ("wrPulse", Context.REG_PULSE_WR),
    ("rdPulse", Context.REG_PULSE_RD),
    ("accPulse", Context.REG_PULSE_ACC),
)


def _separator(rest: str) -> str:
    for literal in (":", "="):
        after = _ws(rest, literal)
        if after is not None:
            return after
    return rest.lstrip(" \t")


def _reg_keyword(text: str):
    try:
        return _keyword(text, _REG_PROPERTIES)
    except ParseError:
        pass
    stripped = _skip(text)
    if stripped[:5].lower() == "clken":
        return Context.HW_CLK_EN, _skip(stripped[5:])
    try:
        return _keyword(text, _REG_PROPERTIES_TAIL)
    except ParseError:
        pass
    name, rest = identifier(text)
    if not rest.startswith("."):
        raise ParseError("expected register property", text)
    return PathStart(name), rest[1:]


def reg_properties(text: str) -> tuple[Context | PathStart, str]:
    """Parse a register property keyword and its optional separator."""
    value, rest = _reg_keyword(text)
    return value, _separator(rest)


_INTR_DESC = (
    ("enable.description", Context.DESC_INTR_ENABLE),
    ("mask.description", Context.DESC_INTR_MASK),
    ("pending.description", Context.DESC_INTR_PENDING),
    ("enable.desc", Context.DESC_INTR_ENABLE),
    ("mask.desc", Context.DESC_INTR_MASK),
    ("pending.desc", Context.DESC_INTR_PENDING),
)


def intr_desc(text: str) -> tuple[Context, str]:
    """Parse an interrupt description property (enable/mask/pending)."""
    value, rest = _keyword(text, _INTR_DESC)
    return value, _separator(rest)


def reg_properties_or_item(text: str) -> tuple[Context | PathStart | Item, str]:
    """Parse a register property, or the ``-`` starting a field."""
    try:
        return reg_properties(text)
    except ParseError:
        return item_start(text)


_TRIGGERS = tuple((t.value, t) for t in InterruptTrigger)
_CLEARS = (
    ("rclr", InterruptClr.READ),
    ("wclr", InterruptClr.WRITE1),
    ("w1clr", InterruptClr.WRITE1),
    ("w0clr", InterruptClr.WRITE0),
    ("hwclr", InterruptClr.HW),
)


def reg_interrupt_trigger(text: str) -> tuple[InterruptTrigger, str]:
    """Parse an interrupt trigger: high, low, rising, falling or edge."""
    return _keyword(text, _TRIGGERS)


def reg_interrupt_clr(text: str) -> tuple[InterruptClr, str]:
    """Parse an interrupt clear mode."""
    return _keyword(text, _CLEARS)


def _value_after_equal(rest: str) -> tuple[ResetVal, str]:
    if rest.startswith("="):
        try:
            return reset_val(rest[1:])
        except ParseError:
            pass
    return ResetVal(ResetKind.UNSIGNED, 0), rest


def reg_interrupt_en(text: str) -> tuple[ResetVal, str]:
    """Parse ``en[=value]`` or ``enable[=value]``; the value defaults to 0."""
    for word in ("enable", "en"):
        if text.startswith(word):
            return _value_after_equal(text[len(word):])
    raise ParseError("expected 'en'", text)


def reg_interrupt_mask(text: str) -> tuple[ResetVal, str]:
    """Parse ``mask[=value]``; the value defaults to 0."""
    if not text.startswith("mask"):
        raise ParseError("expected 'mask'", text)
    return _value_after_equal(text[4:])


def _pending(text: str) -> tuple[bool, str]:
    if not text.startswith("pending"):
        raise ParseError("expected 'pending'", text)
    return True, text[7:]


def reg_interrupt_perm(text: str) -> tuple[tuple, str]:
    """Parse optional trigger, clear, enable, mask and pending, in that order."""
    values = []
    rest = text
    for parser in (reg_interrupt_trigger, reg_interrupt_clr, reg_interrupt_en,
                   reg_interrupt_mask, _pending):
        value, rest = _opt_ws(parser, rest)
        values.append(value)
    return tuple(values), rest


def reg_interrupt(text: str, name: str) -> tuple[InterruptInfo, str]:
    """Parse interrupt properties given in any order."""
    info, rest = reg_interrupt_perm(text)
    info = list(info)
    for _ in range(4):
        more, rest = reg_interrupt_perm(rest)
        found = False
        for index, value in enumerate(more):
            if value is not None:
                info[index] = value
                found = True
        if not found:
            break
    trigger, clear, enable, mask, pending = info
    return InterruptInfo(
        name=name,
        trigger=trigger or InterruptTrigger.HIGH,
        clear=clear or InterruptClr.READ,
        enable=enable,
        mask=mask,
        pending=bool(pending),
    ), rest


def reg_pulse_info(text: str, reg_clk: str, init: bool) -> tuple[str, str]:
    """Parse ``[reg|comb] [clock]``; a registered pulse defaults to ``reg_clk``."""
    for word, value in (("reg", True), ("comb", False)):
        rest = _ws(text, word)
        if rest is not None:
            is_reg = value
            break
    else:
        is_reg, rest = init, text.lstrip(" \t")
    try:
        return identifier(rest)
    except ParseError:
        return (reg_clk if is_reg else ""), rest