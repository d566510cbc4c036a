"""Reset values: literal unsigned or signed numbers, or parameter references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rifparse.common import ParseError, param, val_i128, val_u128


class ResetKind(Enum):
    """How a reset value was written."""

    UNSIGNED = "unsigned"
    SIGNED = "signed"
    PARAM = "param"


@dataclass(frozen=True)
class ResetVal:
    """A reset value; ``value`` holds the parameter name for ``PARAM``."""

    kind: ResetKind
    value: int | str

    def __str__(self) -> str:
        if self.kind is ResetKind.PARAM:
            return f"${self.value}"
        return str(self.value)


def reset_val(text: str) -> tuple[ResetVal, str]:
    """Parse a reset value: ``$param``, a signed decimal or an unsigned value."""
    if text.startswith("$"):
        name, rest = param(text)
        return ResetVal(ResetKind.PARAM, name), rest
    if text.startswith(("-", "+")):
        value, rest = val_i128(text)
        return ResetVal(ResetKind.SIGNED, value), rest
    value, rest = val_u128(text)
    return ResetVal(ResetKind.UNSIGNED, value), rest


def reset_val_arr(text: str) -> tuple[list[ResetVal], str]:
    """Parse ``{v0, v1, ...}``: one or more reset values between braces."""
    if not text.startswith("{"):
        raise ParseError("expected '{'", text)
    first, rest = reset_val(text[1:])
    values = [first]
    while True:
        after_sep = rest.lstrip(" \t\r\n")
        if not after_sep.startswith(","):
            break
        try:
            value, after = reset_val(after_sep[1:].lstrip(" \t\r\n"))
        except ParseError:
            break
        values.append(value)
        rest = after
    if not rest.startswith("}"):
        raise ParseError("expected '}'", rest)
    return values, rest[1:]