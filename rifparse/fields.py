"""Field declarations and field properties of a register."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rifparse.common import (
    Context,
    ParseError,
    Width,
    identifier,
    param,
    quoted_string,
    signal_name,
    val_u8,
    val_u8_or_param,
)
from rifparse.registers import (
    InterruptClr,
    InterruptTrigger,
    reg_interrupt_clr,
    reg_interrupt_trigger,
)
from rifparse.values import ResetKind, ResetVal, reset_val, reset_val_arr

_MULTISPACE = " \t\r\n"


def _skip(text: str) -> str:
    return text.lstrip(_MULTISPACE)


def _ws(text: str, literal: str) -> str | None:
    stripped = _skip(text)
    if stripped.startswith(literal):
        return _skip(stripped[len(literal):])
    return None


def _ws_caseless(text: str, literal: str) -> str | None:
    stripped = _skip(text)
    if stripped[: len(literal)].lower() == literal.lower():
        return _skip(stripped[len(literal):])
    return None


def _full(value, rest: str):
    if rest:
        raise ParseError("unexpected trailing input", rest)
    return value


def _opt(parser, text: str) -> tuple:
    try:
        value, rest = parser(_skip(text))
    except ParseError:
        return None, text
    return value, _skip(rest)


def _opt_reset(text: str) -> tuple[ResetVal | None, str]:
    try:
        return reset_val(text)
    except ParseError:
        return None, text


# --------------------------------------------------------------------------
# Data types


@dataclass(frozen=True)
class FieldPos:
    """Position of a field: ``msb:lsb``, ``lsb+:size`` or a size alone.

    For ``MSB_LSB`` ``first`` is the msb and ``second`` the lsb; for
    ``LSB_SIZE`` ``first`` is the lsb and ``second`` the size; for ``SIZE``
    ``first`` is the size.
    """

    kind: str
    first: Width
    second: Width | None = None

    MSB_LSB = "msb_lsb"
    LSB_SIZE = "lsb_size"
    SIZE = "size"


class Access(Enum):
    """Hardware access to a field."""

    NA = "na"
    RW = "rw"
    RO = "ro"
    WO = "wo"


@dataclass(frozen=True)
class PasswordInfo:
    """Password protection: values to write once or to hold, and protection."""

    once: ResetVal | None = None
    hold: ResetVal | None = None
    protect: bool = False


@dataclass(frozen=True)
class FieldSwKind:
    """Software behaviour of a field.

    ``registered`` and ``write_only`` qualify pulse fields; ``password``
    holds the settings of password fields.
    """

    kind: str = "rw"
    registered: bool = False
    write_only: bool = False
    password: PasswordInfo | None = None

    READ_ONLY = "ro"
    READ_WRITE = "rw"
    READ_CLR = "rclr"
    W1_CLR = "w1clr"
    W0_CLR = "w0clr"
    W1_SET = "w1set"
    WRITE_ONLY = "wo"
    W1_PULSE = "pulse"
    W1_TGL = "toggle"
    PASSWORD = "password"


@dataclass(frozen=True)
class ClkEn:
    """Clock enable of a field: a signal name, or ``None`` when disabled."""

    signal: str | None = None


class CounterKind(Enum):
    """Direction of a counter field."""

    UP = "up"
    DOWN = "down"
    UP_DOWN = "updown"


@dataclass(frozen=True)
class CounterInfo:
    """Settings of a counter field."""

    kind: CounterKind
    incr_val: int = 0
    decr_val: int = 0
    sat: bool = False
    event: bool = False
    clr: bool = False


@dataclass(frozen=True)
class LimitValue:
    """Allowed values of a field: bounds, a list, or the field's enum."""

    kind: str
    min: ResetVal | None = None
    max: ResetVal | None = None
    values: tuple[ResetVal, ...] = ()

    NONE = "none"
    MIN = "min"
    MAX = "max"
    MIN_MAX = "min_max"
    LIST = "list"
    ENUM = "enum"

    @classmethod
    def from_bounds(cls, low: ResetVal | None, high: ResetVal | None) -> LimitValue:
        """Build from optional lower and upper bounds."""
        if low is not None and high is not None:
            return cls(cls.MIN_MAX, min=low, max=high)
        if low is not None:
            return cls(cls.MIN, min=low)
        if high is not None:
            return cls(cls.MAX, max=high)
        return cls(cls.NONE)


@dataclass(frozen=True)
class Limit:
    """A limit on field values, with an optional bypass signal."""

    value: LimitValue
    bypass: str = ""


@dataclass(frozen=True)
class EnumEntry:
    """One named value of an enumeration."""

    name: str
    value: int
    description: str = ""


@dataclass(frozen=True)
class InterruptInfoField:
    """Interrupt settings given on a single field."""

    trigger: InterruptTrigger | None = None
    clear: InterruptClr | None = None


@dataclass
class FieldDecl:
    """A field declaration line of a register."""

    name: str
    reset: list[ResetVal] = field(default_factory=list)
    pos: FieldPos = field(default_factory=lambda: FieldPos(FieldPos.SIZE, Width(1)))
    sw_kind: FieldSwKind = field(default_factory=FieldSwKind)
    hw_acc: Access = Access.RO
    array: Width = field(default_factory=Width)
    description: str = ""


# --------------------------------------------------------------------------
# Position and declaration


def _ws_width(text: str) -> tuple[Width, str]:
    width, rest = val_u8_or_param(_skip(text))
    return width, _skip(rest)


def field_pos(text: str) -> tuple[FieldPos, str]:
    """Parse a field position: ``msb:lsb``, ``lsb+:width``, ``5b`` or ``$width``."""
    for separator, kind in ((":", FieldPos.MSB_LSB), ("+:", FieldPos.LSB_SIZE)):
        try:
            first, rest = _ws_width(text)
        except ParseError:
            break
        after = _ws(rest, separator)
        if after is None:
            continue
        try:
            second, rest = val_u8_or_param(after)
        except ParseError:
            continue
        return FieldPos(kind, first, second), rest
    try:
        size, rest = val_u8(_skip(text))
    except ParseError:
        pass
    else:
        if rest.startswith("b"):
            return FieldPos(FieldPos.SIZE, Width(value=size)), rest[1:]
    try:
        name, rest = param(_skip(text))
    except ParseError:
        raise ParseError("expected field position", text) from None
    return FieldPos(FieldPos.SIZE, Width(param=name)), _skip(rest)


def _reset_values(text: str) -> tuple[list[ResetVal], str] | None:
    try:
        value, rest = reset_val(text)
    except ParseError:
        pass
    else:
        return [value], rest
    try:
        return reset_val_arr(text)
    except ParseError:
        return None


def field_decl(text: str) -> tuple[FieldDecl, str]:
    """Parse ``name[array] = reset pos [kind] "description"``.

    Without an explicit kind a field with no reset value is read-only,
    otherwise read-write. A field without reset value resets to 0. Hardware
    writes read-only fields and reads the others.
    """
    name, rest = identifier(text)
    array = Width()
    if rest.startswith("["):
        try:
            width, after = val_u8_or_param(rest[1:])
        except ParseError:
            width, after = None, ""
        if width is not None and after.startswith("]"):
            array, rest = width, after[1:]
    reset: list[ResetVal] = []
    after = _ws(rest, "=")
    if after is not None:
        parsed = _reset_values(after)
        if parsed is not None:
            reset, rest = parsed
    pos, rest = field_pos(rest)
    sw_kind, rest = _opt(field_sw_kind, rest)
    description, rest = _opt(quoted_string, rest)
    if sw_kind is None:
        sw_kind = FieldSwKind(FieldSwKind.READ_WRITE if reset else FieldSwKind.READ_ONLY)
    hw_acc = Access.WO if sw_kind.kind == FieldSwKind.READ_ONLY else Access.RO
    decl = FieldDecl(
        name=name,
        reset=reset or [ResetVal(ResetKind.UNSIGNED, 0)],
        pos=pos,
        sw_kind=sw_kind,
        hw_acc=hw_acc,
        array=array,
        description=description or "",
    )
    return decl, rest


# --------------------------------------------------------------------------
# Field properties

_FIELD_PROPERTIES = (
    ("description", Context.DESCRIPTION, False),
    ("desc", Context.DESCRIPTION, False),
    ("enable.description", Context.DESC_INTR_ENABLE, False),
    ("mask.description", Context.DESC_INTR_MASK, False),
    ("pending.description", Context.DESC_INTR_PENDING, False),
    ("swset", Context.SW_SET, False),
    ("pulse", Context.PULSE, False),
    ("interrupt", Context.INTERRUPT, False),
    ("hidden", Context.HIDDEN, False),
    ("disabled", Context.DISABLED, False),
    ("disable", Context.DISABLED, False),
    ("reserved", Context.RESERVED, False),
    ("optional", Context.OPTIONAL, False),
    ("clock", Context.HW_CLOCK, False),
    ("clkEn", Context.HW_CLK_EN, True),
    ("clear", Context.HW_CLEAR, False),
    ("hwset", Context.HW_SET, False),
    ("hwclr", Context.HW_CLR, False),
    ("hwtgl", Context.HW_TGL, False),
    ("hw", Context.HW_ACCESS, False),
    ("lock", Context.HW_LOCK, False),
    ("signed", Context.SIGNED, False),
    ("toggle", Context.TOGGLE, False),
    ("we", Context.HW_WE, False),
    ("wel", Context.HW_WEL, False),
    ("counter", Context.COUNTER, False),
    ("partial", Context.PARTIAL, False),
    ("arrayPosIncr", Context.ARRAY_POS_INCR, True),
    ("arrayPartial", Context.ARRAY_PARTIAL, True),
    ("enum", Context.ENUM, False),
    ("limit", Context.LIMIT, False),
    ("password", Context.PASSWORD, False),
)


def field_properties(text: str) -> tuple[Context, str]:
    """Parse a field property keyword and its optional ``:``."""
    for literal, context, caseless in _FIELD_PROPERTIES:
        rest = _ws_caseless(text, literal) if caseless else _ws(text, literal)
        if rest is not None:
            after = _ws(rest, ":")
            return context, rest.lstrip(" \t") if after is None else after
    raise ParseError("expected field property", text)


_ACCESS = {
    "na": Access.NA,
    "rw": Access.RW,
    "r": Access.RO,
    "ro": Access.RO,
    "w": Access.WO,
    "wo": Access.WO,
}


def field_acc(text: str) -> tuple[Access, str]:
    """Parse a hardware access: na, rw, r/ro or w/wo (any case)."""
    name, rest = identifier(_skip(text))
    access = _ACCESS.get(name.lower())
    if access is None:
        raise ParseError("expected access kind", text)
    return access, _skip(rest)


_SW_KINDS = {
    "r": FieldSwKind(FieldSwKind.READ_ONLY),
    "ro": FieldSwKind(FieldSwKind.READ_ONLY),
    "rw": FieldSwKind(FieldSwKind.READ_WRITE),
    "rclr": FieldSwKind(FieldSwKind.READ_CLR),
    "wclr": FieldSwKind(FieldSwKind.W1_CLR),
    "w1clr": FieldSwKind(FieldSwKind.W1_CLR),
    "w0clr": FieldSwKind(FieldSwKind.W0_CLR),
    "w1set": FieldSwKind(FieldSwKind.W1_SET),
    "w": FieldSwKind(FieldSwKind.WRITE_ONLY),
    "wo": FieldSwKind(FieldSwKind.WRITE_ONLY),
    "pulse": FieldSwKind(FieldSwKind.W1_PULSE),
    "pulsereg": FieldSwKind(FieldSwKind.W1_PULSE, registered=True),
    "toggle": FieldSwKind(FieldSwKind.W1_TGL),
}


def field_sw_kind(text: str) -> tuple[FieldSwKind, str]:
    """Parse the software kind of a field (ro, rw, w1clr, pulse, ...)."""
    name, rest = identifier(_skip(text))
    kind = _SW_KINDS.get(name.lower())
    if kind is None:
        raise ParseError("expected software kind", text)
    return kind, _skip(rest)


def enum_kind(text: str) -> tuple[str, str]:
    """Parse an optional ``[pkg::]name`` enum type, returned as written."""
    try:
        _, after = identifier(_skip(text))
    except ParseError:
        return "", text
    rest = _skip(after)
    if rest.startswith("::"):
        try:
            _, after = identifier(rest[2:])
        except ParseError:
            pass
        else:
            rest = after
    return text[: len(text) - len(rest)], rest


def clk_en(text: str) -> ClkEn:
    """Parse a clock enable signal; ``false`` disables the clock enable."""
    name, rest = identifier(text)
    _full(name, rest)
    if name.lower() == "false":
        return ClkEn()
    return ClkEn(name)


def enum_entry(text: str) -> EnumEntry:
    """Parse ``- name = value "description"``."""
    rest = _ws(text, "-")
    if rest is None:
        raise ParseError("expected '-'", text)
    name, rest = identifier(rest)
    after = _ws(rest, "=")
    if after is None:
        raise ParseError("expected '='", rest)
    value, rest = val_u8(after)
    description, rest = quoted_string(rest)
    return _full(EnumEntry(name, value, description), rest)


def field_interrupt(text: str) -> tuple[InterruptInfoField, str]:
    """Parse an optional trigger and clear mode, in either order."""
    trigger, rest = _opt(reg_interrupt_trigger, text)
    clear, rest = _opt(reg_interrupt_clr, rest)
    if clear is not None and trigger is None:
        trigger, rest = _opt(reg_interrupt_trigger, rest)
    return InterruptInfoField(trigger, clear), rest


def pulse_kind(text: str) -> bool:
    """Parse ``reg`` (True) or ``comb`` (False); a blank input means ``reg``."""
    for word, value in (("reg", True), ("comb", False)):
        rest = _ws(text, word)
        if rest is not None:
            return _full(value, rest)
    return _full(True, text.lstrip(" \t"))


# --------------------------------------------------------------------------
# Counters

_COUNTER_DIRS = (
    ("down", CounterKind.DOWN),
    ("updown", CounterKind.UP_DOWN),
    ("up", CounterKind.UP),
)


def counter_dir(text: str) -> tuple[CounterKind, str]:
    """Parse a counter direction: up, down or updown."""
    for word, kind in _COUNTER_DIRS:
        rest = _ws(text, word)
        if rest is not None:
            return kind, rest
    raise ParseError("expected counter direction", text)


def _counter_step(text: str, keyword: str, equal_required: bool) -> tuple[bool, int | None, str]:
    after = _ws(text, keyword)
    if after is None:
        return False, None, text
    if after.startswith("="):
        body = after[1:]
    elif equal_required:
        return True, None, after
    else:
        body = after
    try:
        value, rest = val_u8(body)
    except ParseError:
        return True, None, after
    return True, value, rest


def _step_value(present: bool, value: int | None) -> int:
    if not present:
        return 0
    return 1 if value is None else value


def counter_def(text: str) -> CounterInfo:
    """Parse ``up|down|updown [incrVal[=w]] [decrVal[=w]] [sat] [event] [clr]``."""
    kind, rest = counter_dir(text)
    incr_present, incr, rest = _counter_step(rest, "incrVal", False)
    decr_present, decr, rest = _counter_step(rest, "decrVal", False)
    if decr_present and not incr_present:
        incr_present, incr, rest = _counter_step(rest, "incrVal", True)
    flags = set()
    while rest:
        for word in ("sat", "event", "clr"):
            after = _ws(rest, word)
            if after is not None:
                flags.add(word)
                rest = after
                break
        else:
            raise ParseError("unexpected counter option", rest)
    return CounterInfo(
        kind=kind,
        incr_val=_step_value(incr_present, incr),
        decr_val=_step_value(decr_present, decr),
        sat="sat" in flags,
        event="event" in flags,
        clr="clr" in flags,
    )


# --------------------------------------------------------------------------
# Limits and passwords


def _limit_value(text: str) -> tuple[LimitValue, str]:
    after = _ws(text, "[")
    if after is not None:
        low, rest = _opt_reset(after)
        rest = _ws(rest, ":")
        if rest is not None:
            high, rest = _opt_reset(rest)
            end = _ws(rest, "]")
            if end is not None:
                return LimitValue.from_bounds(low, high), end
    try:
        values, rest = reset_val_arr(text)
    except ParseError:
        pass
    else:
        return LimitValue(LimitValue.LIST, values=tuple(values)), rest
    after = _ws(text, "enum")
    if after is not None:
        return LimitValue(LimitValue.ENUM), after
    raise ParseError("expected limit", text)


def limit_def(text: str) -> Limit:
    """Parse ``([min:max]|{v0,v1,..}|enum) [bypass_signal]``."""
    value, rest = _limit_value(text)
    bypass, rest = _opt(signal_name, rest)
    return _full(Limit(value, bypass or ""), rest)


def _password_value(text: str, keyword: str) -> tuple[ResetVal | None, str]:
    after = _ws(text, keyword)
    if after is None:
        return None, text
    try:
        return reset_val(after)
    except ParseError:
        return None, text


def password_info(text: str) -> PasswordInfo:
    """Parse ``[once=<val>] [hold=<val>] [protect]``; once and hold in any order."""
    once, rest = _password_value(text, "once=")
    hold, rest = _password_value(rest, "hold=")
    if once is None:
        once, rest = _password_value(rest, "once=")
    protect = False
    after = _ws(rest, "protect")
    if after is not None:
        protect, rest = True, after
    return _full(PasswordInfo(once=once, hold=hold, protect=protect), rest)