"""
Arbor parse results: the per-level CommandMatches tree.

What this module provides
- CommandMatches: the read-only outcome of a successful parse for one command
  level. It maps option long names to the captured strings and links to at
  most one child CommandMatches (the resolved subcommand).

Value access
- value(name):  the single captured string; None for a present flag; the
  declared default (or None) when absent. RequiresMultipleError for options
  that allow multiple values.
- values(name): the captured strings as a tuple; (default,) or () when absent.
  RequiresSingleError for options that do not allow multiple values.
- has(name):    presence check.
- convert(name, kind) and its as_<kind>(name) shorthands: locale-invariant
  conversion of the single value. A conversion failure is a soft condition:
  the result is None, never an exception.

Conversion kinds
- int8, uint8, int16, uint16, int32, uint32, int64, uint64
- float32, double, decimal
- bool (a flag converts to its presence)
- datetime (ISO 8601, MM/DD/YYYY[ HH:MM[:SS]], YYYY/MM/DD)

Numeric policy
- Surrounding whitespace, a leading sign, ',' group separators between digits,
  '.' as decimal point, an exponent and accounting parentheses for negatives.
- Integer kinds accept integral decimal forms ("10.0") within their range.
- Underscores and non-ASCII digits are rejected.

Undeclared option names raise KeyError: asking for an option the command
never declared is a programming mistake, not a user error.
"""
import datetime
import functools
import re
import struct
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from rich.text import Text
from rich.tree import Tree

from .faults import RequiresMultipleError, RequiresSingleError
from .utils import *

_NUMBER = re.compile(r"(?P<digits>\d+(?:,\d+)*)?(?:\.(?P<fraction>\d*))?(?:[eE][+-]?\d+)?", re.ASCII)

# Largest magnitude of a 96-bit scaled decimal.
_DECIMAL_LIMIT = Decimal(2 ** 96 - 1)

_DATETIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
)


def _number(text):
    """
    Parse invariant numeric text into a Decimal, or raise ValueError.
    """
    text = text.strip()
    negative = False

    if text.startswith("(") and text.endswith(")"):
        text, negative = text[1:-1].strip(), True
    if text[:1] in ("+", "-"):
        if negative:
            raise ValueError("sign inside accounting parentheses")
        text, negative = text[1:], text[0] == "-"

    match = _NUMBER.fullmatch(text)
    if not match or not (match["digits"] or match["fraction"]):
        raise ValueError(f"invalid number {text!r}")

    try:
        number = Decimal(text.replace(",", ""))
    except InvalidOperation:
        raise ValueError(f"invalid number {text!r}") from None
    return -number if negative else number


def _integer(bits, signed):
    """
    Build an integer converter for the given width and signedness.
    """
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)

    @rename(f"{"" if signed else "u"}int{bits}")
    def converter(text):
        number = _number(text)
        if number != number.to_integral_value():
            raise ValueError(f"{text!r} is not integral")
        if not low <= number <= high:
            raise OverflowError(f"{text!r} is out of range [{low}, {high}]")
        return int(number)

    return converter


def _double(text):
    if (number := float(_number(text))) in (float("inf"), float("-inf")):
        raise OverflowError(f"{text!r} is out of range for a double")
    return number


def _float32(text):
    return struct.unpack("f", struct.pack("f", _double(text)))[0]


def _decimal(text):
    if abs(number := _number(text)) > _DECIMAL_LIMIT:
        raise OverflowError(f"{text!r} is out of range for a decimal")
    return number


def _bool(text):
    match text.strip().lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            raise ValueError(f"invalid boolean {text!r}")


def _datetime(text):
    text = text.strip()
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        pass
    for format in _DATETIME_FORMATS:
        try:
            return datetime.datetime.strptime(text, format)
        except ValueError:
            continue
    raise ValueError(f"invalid date and time {text!r}")


_converters = {
    "int8": _integer(8, True),
    "uint8": _integer(8, False),
    "int16": _integer(16, True),
    "uint16": _integer(16, False),
    "int32": _integer(32, True),
    "uint32": _integer(32, False),
    "int64": _integer(64, True),
    "uint64": _integer(64, False),
    "float32": _float32,
    "double": _double,
    "decimal": _decimal,
    "bool": _bool,
    "datetime": _datetime,
}


class CommandMatches:
    """
    Read-only result of one command level.

    Properties
    - command: the Command this level matched.
    - captures: read-only mapping of long name → tuple of captured strings.
      An empty tuple is a present flag; a missing key means “not provided”.
    - subcommand: the child CommandMatches, or None.
    - subcommand_name: the resolved child's name, or None.
    """

    command = mirror("command")
    captures = mirror("captures")
    subcommand = mirror("subcommand")

    def __init__(self, command, /, captures=(), subcommand=None):
        self._command = command
        self._captures = MappingProxyType({name: tuple(values) for name, values in dict(captures).items()})
        self._subcommand = subcommand

    @property
    def subcommand_name(self):
        return self._subcommand.command.name if self._subcommand is not None else None

    def subcommand_matches(self, name, /):
        """
        Return the child result when the invocation resolved to `name`, else None.
        """
        if self._subcommand is not None and self._subcommand.command.name == name:
            return self._subcommand
        return None

    def _lookup(self, name):
        try:
            return self._command.options[name]
        except KeyError:
            raise KeyError(f"command {self._command.name!r} has no option named {name!r}") from None

    def has(self, name, /):
        self._lookup(name)
        return name in self._captures

    def value(self, name, /):
        """
        Return the single value of an option.

        - present with a value → that string ("" when given explicitly empty)
        - present flag → None
        - absent → the declared default, or None

        Raises
        - RequiresMultipleError: the option allows multiple values; use values().
        - KeyError: the option is not declared on this command.
        """
        option = self._lookup(name)
        if option.allow_multiple:
            raise RequiresMultipleError(f"option '--{name}' allows multiple values, use values() instead")
        try:
            captured = self._captures[name]
        except KeyError:
            return option.default
        return captured[0] if captured else None

    def values(self, name, /):
        """
        Return every value of a multi-valued option, in command-line order.

        Absent options yield (default,) when a default is declared, else ().

        Raises
        - RequiresSingleError: the option does not allow multiple values; use value().
        - KeyError: the option is not declared on this command.
        """
        option = self._lookup(name)
        if not option.allow_multiple:
            raise RequiresSingleError(f"option '--{name}' does not allow multiple values, use value() instead")
        if captured := self._captures.get(name):
            return captured
        return (option.default,) if option.default is not None else ()

    def convert(self, name, /, kind):
        """
        Convert the single value of an option to `kind`; None on any failure.
        """
        try:
            converter = _converters[kind]
        except KeyError:
            raise ValueError(f"unknown conversion kind {kind!r}, expected one of {", ".join(_converters)}") from None

        if kind == "bool" and self._lookup(name).flag:
            return self.has(name)
        if (text := self.value(name)) is None:
            return None
        try:
            return converter(text)
        except (ValueError, ArithmeticError):
            return None

    as_int8 = functools.partialmethod(convert, kind="int8")
    as_uint8 = functools.partialmethod(convert, kind="uint8")
    as_int16 = functools.partialmethod(convert, kind="int16")
    as_uint16 = functools.partialmethod(convert, kind="uint16")
    as_int32 = functools.partialmethod(convert, kind="int32")
    as_uint32 = functools.partialmethod(convert, kind="uint32")
    as_int64 = functools.partialmethod(convert, kind="int64")
    as_uint64 = functools.partialmethod(convert, kind="uint64")
    as_float32 = functools.partialmethod(convert, kind="float32")
    as_double = functools.partialmethod(convert, kind="double")
    as_decimal = functools.partialmethod(convert, kind="decimal")
    as_bool = functools.partialmethod(convert, kind="bool")
    as_datetime = functools.partialmethod(convert, kind="datetime")

    def __rich__(self):
        tree = Tree(Text(self._command.name, "bold"))
        for name, captured in self._captures.items():
            label = Text(f"--{name}", "cyan")
            if captured:
                label.append(" = ").append(", ".join(map(repr, captured)), "yellow")
            tree.add(label)
        if self._subcommand is not None:
            tree.children.append(self._subcommand.__rich__())
        return tree

    def __str__(self):
        lines = [self._command.name]
        for name, captured in self._captures.items():
            lines.append(f"  --{name}" + (f" = {", ".join(map(repr, captured))}" if captured else ""))
        if self._subcommand is not None:
            lines.extend("  " + line for line in str(self._subcommand).splitlines())
        return "\n".join(lines)

    def __repr__(self):
        return f"command-matches(command={self._command.name!r}, captures={dict(self._captures)!r}, subcommand={self.subcommand_name!r})"


__all__ = (
    "CommandMatches",
)
