"""Low-level parsers shared by every part of the RIF description grammar.

Parsers that consume a prefix of their input return a ``(value, rest)``
tuple, where ``rest`` is the unconsumed remainder.  Parsers that must consume
the whole input return the value alone.  Every parser raises
:class:`ParseError` when the input does not match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_MULTISPACE = " \t\r\n"
_SPACE = " \t"

_ID_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SIGNAL_RE = re.compile(
    r"\.[A-Za-z_][A-Za-z0-9_]*|[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?"
)
_PATH_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")

_RADIX_FORMS = (
    (re.compile(r"[0-9]*'b([0-9]+)"), 2),
    (re.compile(r"[0-9]*'o([0-9]+)"), 8),
    (re.compile(r"[0-9]*'d([0-9]+)"), 10),
    (re.compile(r"[0-9]*'h([0-9a-fA-F]+)"), 16),
    (re.compile(r"0x([0-9a-fA-F]+)"), 16),
)
_HEX_FORM = (re.compile(r"0x([0-9a-fA-F]+)"), 16)
_DECIMAL_FORM = (re.compile(r"([0-9]+)"), 10)
_SIGNED_DECIMAL_FORM = (re.compile(r"([+-]?[0-9]+)"), 10)

_UNSIGNED_FORMS = _RADIX_FORMS + (_DECIMAL_FORM,)
_SIGNED_FORMS = _RADIX_FORMS + (_SIGNED_DECIMAL_FORM,)

_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")
_EXPONENT_RE = re.compile(r"[eE][+-]?([0-9]*)")
_FLOAT_SPECIAL_RE = re.compile(r"(?i:nan|[+-]?infinity|[+-]?inf)")


class ParseError(ValueError):
    """Raised when a piece of RIF text does not match the expected grammar."""

    def __init__(self, message: str, remaining: str = "") -> None:
        super().__init__(f"{message} at '{remaining}'" if remaining else message)
        self.remaining = remaining


@dataclass(frozen=True)
class Width:
    """A bit width or position: either a literal value or a named parameter."""

    value: int = 0
    param: str | None = None

    @property
    def is_param(self) -> bool:
        return self.param is not None


class Context(Enum):
    """Kind of line or block recognised while reading a RIF description."""

    TOP = "top"
    RIF = "rif"
    RIFMUX = "rifmux"
    DESCRIPTION = "description"
    PARAMETERS = "parameters"
    GENERICS = "generics"
    INFO = "info"
    INTERFACE = "interface"
    ADDR_WIDTH = "addr_width"
    DATA_WIDTH = "data_width"
    SW_CLOCK = "sw_clock"
    SW_CLK_EN = "sw_clk_en"
    SW_RESET = "sw_reset"
    SW_CLEAR = "sw_clear"
    HW_CLOCK = "hw_clock"
    HW_CLK_EN = "hw_clk_en"
    HW_RESET = "hw_reset"
    HW_CLEAR = "hw_clear"
    SUFFIX_PKG = "suffix_pkg"
    PAGE = "page"
    BASE_ADDRESS = "base_address"
    REGISTERS = "registers"
    INSTANCES = "instances"
    INCLUDE = "include"
    OPTIONAL = "optional"
    EXTERNAL = "external"
    EXTERNAL_DONE = "external_done"
    REG_DECL = "reg_decl"
    REG_INST = "reg_inst"
    DESC_INTR_ENABLE = "desc_intr_enable"
    DESC_INTR_MASK = "desc_intr_mask"
    DESC_INTR_PENDING = "desc_intr_pending"
    REG_PULSE_WR = "reg_pulse_wr"
    REG_PULSE_RD = "reg_pulse_rd"
    REG_PULSE_ACC = "reg_pulse_acc"
    INTERRUPT = "interrupt"
    INTERRUPT_ALT = "interrupt_alt"
    HIDDEN = "hidden"
    RESERVED = "reserved"
    DISABLED = "disabled"
    FIELD = "field"
    HW_ACCESS = "hw_access"
    HW_SET = "hw_set"
    HW_CLR = "hw_clr"
    HW_TGL = "hw_tgl"
    HW_LOCK = "hw_lock"
    HW_WE = "hw_we"
    HW_WEL = "hw_wel"
    SW_SET = "sw_set"
    PULSE = "pulse"
    TOGGLE = "toggle"
    PASSWORD = "password"
    SIGNED = "signed"
    COUNTER = "counter"
    PARTIAL = "partial"
    ARRAY_POS_INCR = "array_pos_incr"
    ARRAY_PARTIAL = "array_partial"
    ENUM = "enum"
    LIMIT = "limit"
    RIFMUX_MAP = "rifmux_map"
    RIFMUX_TOP = "rifmux_top"
    RIFMUX_GROUP = "rifmux_group"
    RIF_INST = "rif_inst"
    SUFFIX = "suffix"


@dataclass(frozen=True)
class Item:
    """A list item line (``- name``)."""

    name: str


@dataclass(frozen=True)
class PathStart:
    """A property prefixed by a dotted name (``name.property``)."""

    name: str


@dataclass(frozen=True)
class RegIndex:
    """An override applying to one element of a register array (``[i].``)."""

    index: int


@dataclass(frozen=True)
class FieldIndex:
    """An override applying to one element of a field array (``name[i].``)."""

    name: str
    index: int


# --------------------------------------------------------------------------
# Internal helpers


def _skip_ws(text: str) -> str:
    return text.lstrip(_MULTISPACE)


def _tag(text: str, literal: str) -> str:
    if not text.startswith(literal):
        raise ParseError(f"expected '{literal}'", text)
    return text[len(literal):]


def _ws_tag(text: str, literal: str) -> str:
    return _skip_ws(_tag(_skip_ws(text), literal))


def _full(value, rest: str):
    if rest:
        raise ParseError("unexpected trailing input", rest)
    return value


def _match(regex: re.Pattern, text: str, what: str) -> tuple[str, str]:
    m = regex.match(text)
    if not m:
        raise ParseError(f"expected {what}", text)
    return m.group(0), text[m.end():]


def _parse_int(text: str, forms, low: int, high: int, what: str) -> tuple[int, str]:
    for regex, radix in forms:
        m = regex.match(text)
        if not m:
            continue
        try:
            value = int(m.group(1), radix)
        except ValueError:
            continue
        if low <= value <= high:
            return value, text[m.end():]
    raise ParseError(f"expected {what}", text)


# --------------------------------------------------------------------------
# Names


def identifier(text: str) -> tuple[str, str]:
    """Parse an identifier: a letter or underscore followed by alphanumerics."""
    return _match(_ID_RE, text, "identifier")


def identifier_last(text: str) -> str:
    """Parse an identifier surrounded by whitespace, consuming all input."""
    name, rest = identifier(_skip_ws(text))
    return _full(name, _skip_ws(rest))


def scoped_identifier(text: str) -> tuple[tuple[str | None, str], str]:
    """Parse ``[scope::]name``."""
    scope = None
    rest = text
    try:
        first, after = identifier(text)
    except ParseError:
        first = None
    if first is not None and after.startswith("::"):
        scope, rest = first, after[2:]
    name, rest = identifier(rest)
    return (scope, name), rest


def signal_name(text: str) -> tuple[str, str]:
    """Parse a signal name: ``.name``, ``name`` or ``name.field``."""
    return _match(_SIGNAL_RE, text, "signal name")


def path_name(text: str) -> tuple[str, str]:
    """Parse a dotted path of identifiers."""
    return _match(_PATH_RE, text, "path name")


def signal_name_last(text: str) -> str:
    """Parse a signal name consuming all input."""
    return _full(*signal_name(text))


# --------------------------------------------------------------------------
# Expressions between brackets


def take_until_unbalanced(text: str, opening: str, closing: str) -> tuple[str, str]:
    """Consume text up to the first closing bracket that has no opening match.

    Without such a bracket the whole text is consumed, provided the
    brackets it holds are balanced.
    """
    depth = 0
    for index, char in enumerate(text):
        if char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth == -1:
                return text[:index], text[index:]
        elif char == "\\":
            raise ParseError("unexpected escape character", text[index:])
    if depth == 0:
        return text, ""
    raise ParseError("unbalanced brackets", text)


def logic_expr(text: str) -> tuple[str, str]:
    """Parse a parenthesised expression, returning it as written."""
    rest = _ws_tag(text, "(")
    _, rest = take_until_unbalanced(rest, "(", ")")
    rest = _ws_tag(rest, ")")
    return text[: len(text) - len(rest)], rest


def _signal_or_expr_prefix(text: str) -> tuple[str, str]:
    stripped = _skip_ws(text)
    for parser in (signal_name, logic_expr):
        try:
            value, rest = parser(stripped)
        except ParseError:
            continue
        return value, _skip_ws(rest)
    raise ParseError("expected signal name or expression", text)


def signal_or_expr(text: str) -> str:
    """Parse a signal name or a parenthesised expression, consuming all input."""
    return _full(*_signal_or_expr_prefix(text))


def opt_signal_or_expr(text: str) -> str | None:
    """Like :func:`signal_or_expr`, but an empty input yields ``None``."""
    try:
        value, rest = _signal_or_expr_prefix(text)
    except ParseError:
        value, rest = None, text
    return _full(value, rest)


# --------------------------------------------------------------------------
# Lines and strings


def indentation(text: str) -> tuple[int, str]:
    """Count leading whitespace; mixing spaces and tabs is an error."""
    rest = _skip_ws(text)
    indent = text[: len(text) - len(rest)]
    if " " in indent and "\t" in indent:
        raise ParseError("indentation mixes spaces and tabs", text)
    return len(indent), rest


def parse_bool(text: str) -> tuple[bool, str]:
    """Parse ``true``/``false`` (any case) or ``1``/``0``."""
    stripped = _skip_ws(text)
    for literal, value in (("true", True), ("false", False), ("1", True), ("0", False)):
        if stripped[: len(literal)].lower() == literal:
            return value, _skip_ws(stripped[len(literal):])
    raise ParseError("expected boolean", text)


def bool_or_default(text: str, default: bool) -> bool:
    """Parse a boolean, or return ``default`` when the input is blank."""
    try:
        value, rest = parse_bool(text)
    except ParseError:
        value, rest = default, text.lstrip(_SPACE)
    return _full(value, rest)


def quoted_string(text: str) -> tuple[str, str]:
    """Parse a double-quoted string and return its content."""
    rest = _ws_tag(text, '"')
    end = rest.find('"')
    if end < 0:
        raise ParseError("missing closing quote", rest)
    return rest[:end], _skip_ws(rest[end + 1:])


def unquoted_string(text: str) -> tuple[str, str]:
    """Take the rest of the input, without its leading whitespace."""
    return _skip_ws(text), ""


def desc(text: str) -> str:
    """Parse a description, quoted or not, consuming all input."""
    try:
        value, rest = quoted_string(text)
    except ParseError:
        value, rest = unquoted_string(text)
    return _full(value, rest)


def comment(text: str) -> bool:
    """Tell whether a line is a comment (``//`` or ``#``) or blank."""
    stripped = _skip_ws(text)
    if stripped.startswith("//") or stripped.startswith("#"):
        return True
    return text.lstrip(_SPACE) == ""


# --------------------------------------------------------------------------
# List items and key/value pairs


def _opt_ws_tag(text: str, literal: str) -> str:
    stripped = _skip_ws(text)
    if stripped.startswith(literal):
        return _skip_ws(stripped[len(literal):])
    return text


def item(text: str) -> tuple[str, str]:
    """Parse ``- name[:]`` and return the name."""
    rest = _tag(text, "-")
    name, rest = identifier(_skip_ws(rest))
    rest = _opt_ws_tag(_skip_ws(rest), ":")
    return name, rest


def vec_id(text: str) -> list[str]:
    """Parse one or more whitespace-separated identifiers, consuming all input."""
    names = []
    rest = text
    while True:
        try:
            name, after = identifier(_skip_ws(rest))
        except ParseError:
            break
        names.append(name)
        rest = _skip_ws(after)
    if not names:
        raise ParseError("expected identifier", text)
    return _full(names, rest)


def item_cntxt(text: str) -> tuple[Item, str]:
    """Parse ``- name[:]`` as an :class:`Item` context."""
    name, rest = item(text)
    return Item(name), rest


def item_start(text: str) -> tuple[Item, str]:
    """Parse a bare ``-`` starting an anonymous item."""
    return Item(""), _ws_tag(text, "-")


def _key_value(text: str, key_parser) -> tuple[str, str]:
    rest = _tag(text, "-")
    key, rest = key_parser(_skip_ws(rest))
    rest = _skip_ws(rest)
    if rest[:1] in ("=", ":") and rest:
        rest = rest[1:]
    value, rest = unquoted_string(rest)
    return _full((key, value), rest)


def key_val(text: str) -> tuple[str, str]:
    """Parse ``- key [=|:] value``."""
    return _key_value(text, identifier)


def path_val(text: str) -> tuple[str, str]:
    """Parse ``- a.b.c [=|:] value``."""
    return _key_value(text, path_name)


# --------------------------------------------------------------------------
# Numbers


def val_u8(text: str) -> tuple[int, str]:
    """Parse an 8-bit unsigned value (decimal, ``0x`` or ``N'b/o/d/h``)."""
    return _parse_int(text, _UNSIGNED_FORMS, 0, 0xFF, "8-bit value")


def val_u16(text: str) -> tuple[int, str]:
    """Parse a 16-bit unsigned value."""
    return _parse_int(text, _UNSIGNED_FORMS, 0, 0xFFFF, "16-bit value")


def val_u64(text: str) -> tuple[int, str]:
    """Parse a 64-bit unsigned value, decimal or ``0x`` hexadecimal."""
    return _parse_int(text, (_HEX_FORM, _DECIMAL_FORM), 0, 2**64 - 1, "64-bit value")


def val_u128(text: str) -> tuple[int, str]:
    """Parse a 128-bit unsigned value."""
    return _parse_int(text, _UNSIGNED_FORMS, 0, 2**128 - 1, "128-bit value")


def val_i128(text: str) -> tuple[int, str]:
    """Parse a 128-bit signed value; decimals may carry a sign."""
    return _parse_int(text, _SIGNED_FORMS, -(2**127), 2**127 - 1, "signed 128-bit value")


def val_isize(text: str) -> tuple[int, str]:
    """Parse a 64-bit signed value; decimals may carry a sign."""
    return _parse_int(text, _SIGNED_FORMS, -(2**63), 2**63 - 1, "signed value")


def val_f64(text: str) -> tuple[float, str]:
    """Parse a floating point number, including ``nan`` and ``inf``."""
    m = _FLOAT_RE.match(text)
    if m:
        end = m.end()
        exp = _EXPONENT_RE.match(text, end)
        if exp:
            if not exp.group(1):
                raise ParseError("missing exponent digits", text[exp.end():])
            end = exp.end()
        return float(text[:end]), text[end:]
    m = _FLOAT_SPECIAL_RE.match(text)
    if m:
        return float(m.group(0)), text[m.end():]
    raise ParseError("expected number", text)


def param(text: str) -> tuple[str, str]:
    """Parse a parameter reference ``$name`` and return the name."""
    return identifier(_tag(text, "$"))


def val_u8_or_param(text: str) -> tuple[Width, str]:
    """Parse an 8-bit value or a ``$param`` reference as a :class:`Width`."""
    try:
        value, rest = val_u8(text)
    except ParseError:
        name, rest = param(text)
        return Width(param=name), rest
    return Width(value=value), rest