"""
Arbor faults (declaration errors, access errors, parse errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  domain so logs and searches stay predictable.
- DeclarationError family: programmer errors raised while a command tree is
  being declared (duplicate names, invalid group options). These fail fast.
- AccessError family: programmer errors raised when a CommandMatches accessor
  is used against the option's multiplicity.
- ParseError family: user-input problems. They are plain values carried by a
  Failure result, never raised, and they know how to render themselves.

UX goals
- Position-first messages: every message names the ordinal position of the
  offending token (“at second position”).
- Short titles, one-sentence bodies and a single actionable hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser builds ParseError values with code/title/hint/command options.
- The presentation layer (arbor.commands.invoke) adds colorful/fancy through
  copy.replace(...) and prints the fault on a stderr console.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .rendering import stylist
from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (111xx)
      • UNKNOWN_SUBCOMMAND
    - options (112xx)
      • UNKNOWN_OPTION, MISSING_VALUE, UNEXPECTED_VALUE, DUPLICATE_OPTION
    - validation (113xx)
      • MISSING_REQUIRED_OPTION, GROUP_CONSTRAINT_VIOLATION
    - declaration (121xx)
      • DUPLICATE_NAME, INVALID_GROUP_OPTION

    normalize() lets the host remap codes to custom labels while the numeric
    identifiers stay stable.
    """
    # --- routing errors (111xx) ---
    UNKNOWN_SUBCOMMAND          = 11101

    # --- option errors (112xx) ---
    UNKNOWN_OPTION              = 11201
    MISSING_VALUE               = 11202
    UNEXPECTED_VALUE            = 11203
    DUPLICATE_OPTION            = 11204

    # --- validation errors (113xx) ---
    MISSING_REQUIRED_OPTION     = 11301
    GROUP_CONSTRAINT_VIOLATION  = 11302

    # --- declaration errors (121xx) ---
    DUPLICATE_NAME              = 12101
    INVALID_GROUP_OPTION        = 12102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class DeclarationError(Exception):
    """Base class for mistakes in a command tree declaration."""
    code = Unset


class DuplicateNameError(DeclarationError, ValueError):
    code = FaultCode.DUPLICATE_NAME


class InvalidGroupOptionError(DeclarationError, ValueError):
    code = FaultCode.INVALID_GROUP_OPTION


class DeclarationWarning(UserWarning):
    """Emitted for legal but suspicious declarations."""


class AccessError(Exception):
    """Base class for CommandMatches accessors used against an option's multiplicity."""


class RequiresMultipleError(AccessError, TypeError): ...
class RequiresSingleError(AccessError, TypeError): ...


class ParseError:
    """
    A user-input problem detected at one command level.

    Not an exception: the parser returns it inside Failure(error) and the
    caller decides how to present it. The message is positional and lowercased;
    everything else travels in a read-only options mapping.

    Common options
    - command: the Command node where the problem was detected.
    - code: FaultCode identifying the problem.
    - title: short label shown in the rendered header.
    - hint: one actionable sentence.
    - suggestion: closest known name when a fuzzy match was found, else None.
    - index: 1-based position of the offending token in the whole invocation.

    Rendering options (added by the presentation layer)
    - colorful: bool, fancy: bool, width: int
    """

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def command(self):
        return self.options.get("command")

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title", "")

    @property
    def hint(self):
        return self.options.get("hint", "")

    @property
    def suggestion(self):
        return self.options.get("suggestion")

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        styler, text = stylist({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, colorful)

        main = __import__("__main__")
        name = self.command.root.name if self.command is not None else "error"
        prog = text(getattr(main, "__prog__", name), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code is not None else "?", styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint")))

        if self.options.get("fancy", False):
            return Panel(
                Group(message, hint),
                title=header,
                title_align="left",
                width=self.options.get("width"),
            )

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ParseError): ...
class UnknownSubcommandError(ParseError): ...
class MissingValueError(ParseError): ...
class UnexpectedValueError(ParseError): ...
class DuplicateOptionError(ParseError): ...


class MissingRequiredOptionError(ParseError):
    @property
    def missing(self):
        """Every required option that was neither provided nor defaulted."""
        return self.options.get("missing", ())


class GroupConstraintViolationError(ParseError):
    @property
    def group(self):
        """The first option group whose constraint failed."""
        return self.options.get("group")


__all__ = (
    "FaultCode",
    "DeclarationError",
    "DuplicateNameError",
    "InvalidGroupOptionError",
    "DeclarationWarning",
    "AccessError",
    "RequiresMultipleError",
    "RequiresSingleError",
    "ParseError",
    "UnknownOptionError",
    "UnknownSubcommandError",
    "MissingValueError",
    "UnexpectedValueError",
    "DuplicateOptionError",
    "MissingRequiredOptionError",
    "GroupConstraintViolationError",
)
