"""Line-level parsers for register interface (RIF) description files."""

__version__ = "0.1.0"

__all__ = ["common", "values", "expr", "top", "registers", "rifmux", "fields", "page"]