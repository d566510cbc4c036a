# rifparse

Parsers for the lines of a register interface (RIF) description file. A RIF
file describes register pages, registers, fields, interrupts and multiplexed
RIF instances. Each function in this package takes a single line, or a
fragment of one, and returns a typed value.

Two calling conventions are used:

- Parsers that read a prefix of their input return a `(value, rest)` tuple,
  where `rest` is the text left unconsumed (for example `identifier`,
  `val_u8`, `reset_val`, `field_decl`, `reg_interrupt`).
- Parsers that must consume the whole input return the value alone (for
  example `desc`, `key_val`, `reset_def`, `counter_def`, `limit_def`,
  `reg_inst`, `rif_inst`).

All of them raise `rifparse.common.ParseError` (a `ValueError`) when the text
does not match.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Modules

- `rifparse.common`: identifiers, signal and path names, booleans
  (`parse_bool`, `bool_or_default`), quoted strings, descriptions, comment
  detection (`comment`), indentation, list items and key/value lines
  (`key_val`, `path_val`), and numeric literals (`34`, `0x2A`, `8'h1A`,
  `2'b10`, ...) through `val_u8`, `val_u16`, `val_u64`, `val_u128`,
  `val_i128`, `val_isize` and `val_f64`. Also defines `Width`, the `Context`
  enumeration and the `Item`, `PathStart`, `RegIndex` and `FieldIndex`
  markers returned by property parsers.
- `rifparse.values`: `ResetVal` / `ResetKind` (unsigned, signed or `$param`),
  `reset_val` and `reset_val_arr` for arrays such as `{0, -1}`.
- `rifparse.expr`: `parse_expr` turns an infix expression into an
  `ExprTokens` list in reverse Polish notation; `ExprTokens.eval` evaluates it
  against a mapping of parameter values and rounds the result to an integer.
  `ParamValues` is an ordered dict of parameters with `with_index`,
  `from_pairs` and `compile`. Evaluation failures raise `ExprError`.
- `rifparse.top`: `rif:` / `rifmux:` declarations (`decl_top`), RIF
  properties, `Interface`, `ResetDef` (`reset_def`) and `GenericRange`
  (`generic_range`, `generic_def`).
- `rifparse.registers`: register declarations (`reg_decl` → `RegDecl`),
  register properties, interrupt settings (`reg_interrupt` → `InterruptInfo`)
  and access pulses (`reg_pulse_info`).
- `rifparse.rifmux`: multiplexer properties and maps, RIF instances
  (`rif_inst` → `RifmuxItem`), groups (`rifmux_group`), address offsets and
  suffixes (`suffix_info`, `rif_inst_suffix`).
- `rifparse.fields`: field declarations (`field_decl` → `FieldDecl`), field
  positions, software and hardware access, clock enables, enum entries,
  counters (`counter_def`), limits (`limit_def`) and passwords
  (`password_info`).
- `rifparse.page`: page properties, `is_auto`, register instances
  (`reg_inst` → `RegInst`) and instance override properties.

## Example

```python
from rifparse.common import val_u8
from rifparse.expr import ParamValues, parse_expr
from rifparse.top import reset_def

expr = parse_expr("pow(2, $x) - 1")
params = ParamValues(x=17)
print(expr.eval(params))          # 131071

value, rest = val_u8("8'h1A")
print(value)                      # 26

print(reset_def("rst_n low async"))
# ResetDef(name='rst_n', active_high=False, sync=False)
```

## What this package does not do

It parses individual lines only. There is no reader that walks a whole RIF
file, tracks indentation blocks and assembles pages, registers and fields
into a complete description; there is no resolution of references between
files, no generation of C headers, HTML or RTL, and no command-line tool.