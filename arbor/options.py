r"""
Arbor option declarations: options, option groups and group constraints.

Overview
- Option
  • Immutable declaration of one named argument: a long name, an optional
    one-character short name, a help description and its value semantics
    (takes_value, allow_multiple, required, default).
  • Flags are options with takes_value=False; their presence is the payload.

- OptionGroup
  • A named, ordered set of options whose joint presence is constrained.
  • Members are registered individually on the owning command as well.

- Constraint
  • EXACTLY_ONE, ZERO_OR_ONE, AT_LEAST_ONE, ANY; each knows its phrase
    ("exactly one of", ...) and checks a presence count.

Introspection & representation
- OptionType metaclass provides stable __repr__/__rich_repr__ and exposes the
  names listed in __introspectable__ as read-only properties.

Validation highlights (declaration time, fail fast)
- Long names match r"[A-Za-z_][A-Za-z0-9_]*(-[A-Za-z0-9_]+)*" (ASCII only).
- Short names are a single ASCII letter or digit.
- A flag cannot carry a default.
- A grouped option cannot be required nor carry a default (InvalidGroupOptionError).

Quick example:
    >>> from arbor.options import Option, OptionGroup, Constraint
    >>> host = Option("host", "h", "address of the receiver", required=True)
    >>> source = OptionGroup("source", "what to play", Constraint.EXACTLY_ONE, (
    ...     Option("url", "u"),
    ...     Option("file", "f"),
    ... ))
    >>> source.describe()
    'exactly one of --url, --file'
"""
import copy
import functools
import operator
import re
import warnings
from collections.abc import Iterable
from enum import Enum

from rich.text import Text

from .faults import DuplicateNameError, InvalidGroupOptionError, DeclarationWarning
from .utils import *


class Constraint(Enum):
    """
    Joint-presence rule of an option group.

    The value is the human phrase used in help and diagnostics.
    """
    EXACTLY_ONE = "exactly one of"
    ZERO_OR_ONE = "at most one of"
    AT_LEAST_ONE = "at least one of"
    ANY = "any of"

    def check(self, count, /):
        """
        Return True when `count` present members satisfy this constraint.
        """
        match self:
            case Constraint.EXACTLY_ONE:
                return count == 1
            case Constraint.ZERO_OR_ONE:
                return count <= 1
            case Constraint.AT_LEAST_ONE:
                return count >= 1
            case _:
                return True


class OptionType(type):
    """
    Metaclass that makes declarations introspectable.

    Responsibilities
    - Derive __typename__ from the class name ("OptionGroup" → "option-group")
      for consistent messages.
    - Expose every name of __introspectable__ as a read-only property backed by
      the private "_<name>" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__; __displayable__ (if set) narrows
      the fields shown, otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the long and short names of an option.

    - name: required, ASCII identifier-like, hyphens allowed between segments
      ("host", "mime_type", "dry-run"). Leading dashes are not part of the name.
    - short: Unset or exactly one ASCII letter/digit.

    Raises
    - TypeError: when a name is not a string.
    - ValueError: when a name is empty or malformed.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*(-[A-Za-z0-9_]+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be an ascii identifier (hyphens allowed), got {name!r}")
    metadata["name"] = name

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not re.fullmatch(r"[A-Za-z0-9]", short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single ascii letter or digit, got {short!r}")


def _sanitize_descr(cls, metadata, /):
    """
    Internal: validate 'descr' (Unset or a non-empty string/Text).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = descr


def _sanitize_value_metadata(cls, metadata, /):
    """
    Internal: validate value semantics and the group restriction.

    - default: Unset or a string; forbidden on flags (takes_value=False).
    - group: Unset or a non-empty string; a grouped option can neither be
      required nor carry a default, since the group constraint decides presence.
    - required + default outside a group is legal but can never fail, so a
      DeclarationWarning is emitted.
    """
    if not isinstance(default := metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    if default is not Unset and not metadata["takes_value"]:
        raise TypeError(f"{cls.__typename__} '{metadata["name"]}' is a flag and cannot have a 'default'")

    if not isinstance(group := metadata["group"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'group' must be a string")
    elif isinstance(group, str) and not (group := group.strip()):
        raise ValueError(f"{cls.__typename__} 'group' cannot be empty")
    metadata["group"] = group

    if group is not Unset and metadata["required"]:
        raise InvalidGroupOptionError(
            f"{cls.__typename__} '{metadata["name"]}' belongs to group {group!r} and cannot be required"
        )
    if group is not Unset and default is not Unset:
        raise InvalidGroupOptionError(
            f"{cls.__typename__} '{metadata["name"]}' belongs to group {group!r} and cannot have a default"
        )

    if metadata["required"] and default is not Unset:
        warnings.warn(DeclarationWarning(
            f"{cls.__typename__} '{metadata["name"]}' is required but has a default, the requirement can never fail"
        ), stacklevel=3)


class Option(metaclass=OptionType):
    """
    Named argument declaration.

    Properties
    - name: long name, used as "--name" and as the key in CommandMatches.
    - short: one-character short name used as "-x", or None.
    - descr: help text, or None.
    - takes_value: False declares a flag (presence only).
    - allow_multiple: the option may be repeated; values accumulate in order.
    - required: parsing fails when absent (unless a default exists).
    - default: string returned by accessors when absent, or None.
    - group: name of the owning OptionGroup, or None.

    Options are immutable; copy.replace(option, **changes) returns a new,
    re-validated declaration.
    """

    __introspectable__ = (
        "name",
        "short",
        "descr",
        "takes_value",
        "allow_multiple",
        "required",
        "default",
        "group",
    )

    def __new__(
            cls,
            name,
            /,
            short=Unset,
            descr=Unset,
            *,
            takes_value=True,
            allow_multiple=False,
            required=False,
            default=Unset,
            group=Unset,
    ):
        metadata = {
            "name": name,
            "short": short,
            "descr": descr,
            "takes_value": bool(takes_value),
            "allow_multiple": bool(allow_multiple),
            "required": bool(required),
            "default": default,
            "group": group,
        }
        _sanitize_names(cls, metadata)
        _sanitize_descr(cls, metadata)
        _sanitize_value_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    @property
    def flag(self):
        """True when the option takes no value."""
        return not self._takes_value

    @property
    def metavar(self):
        """Placeholder shown in usage lines, e.g. "<HOST>" for --host."""
        return f"<{self._name.upper()}>"

    @property
    def spellings(self):
        """Every accepted spelling, short first: ("-h", "--host")."""
        return (f"-{self._short}", f"--{self._name}") if self._short else (f"--{self._name}",)

    def __replace__(self, /, **overrides):
        fields = {
            name: Unset if (object := getattr(self, name)) is None else object
            for name in type(self).__introspectable__
        } | overrides
        return type(self)(fields.pop("name"), **fields)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


class OptionGroup(metaclass=OptionType):
    """
    Named set of options whose joint presence is constrained.

    Members declared without a group are bound to this group; members bound to
    another group, or declared required/with a default, are rejected with
    InvalidGroupOptionError. Long and short names must be unique inside the group.
    """

    __introspectable__ = (
        "name",
        "descr",
        "constraint",
        "options",
    )

    def __new__(cls, name, /, descr=Unset, constraint=Constraint.ANY, options=()):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        metadata = {"descr": descr}
        _sanitize_descr(cls, metadata)

        if not isinstance(constraint, Constraint):
            raise TypeError(f"{cls.__typename__} 'constraint' must be a Constraint")
        if not isinstance(options, Iterable):
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")

        members, longs, shorts = [], set(), set()
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{cls.__typename__} 'options' must only contain options")
            if option.group is not None and option.group != name:
                raise InvalidGroupOptionError(
                    f"option '{option.name}' belongs to group {option.group!r}, not {name!r}"
                )
            if option.required:
                raise InvalidGroupOptionError(f"option '{option.name}' belongs to group {name!r} and cannot be required")
            if option.default is not None:
                raise InvalidGroupOptionError(f"option '{option.name}' belongs to group {name!r} and cannot have a default")
            if option.name in longs:
                raise DuplicateNameError(f"{cls.__typename__} {name!r} already contains option '--{option.name}'")
            if option.short is not None and option.short in shorts:
                raise DuplicateNameError(f"{cls.__typename__} {name!r} already contains option '-{option.short}'")
            longs.add(option.name)
            if option.short is not None:
                shorts.add(option.short)
            members.append(option if option.group == name else copy.replace(option, group=name))

        if not members:
            raise ValueError(f"{cls.__typename__} {name!r} must contain at least one option")

        self = super().__new__(cls)
        self._name = name
        self._descr = coalesce(metadata["descr"])
        self._constraint = constraint
        self._options = tuple(members)
        return self

    def describe(self):
        """
        Return the constraint in words, e.g. "exactly one of --url, --file".
        """
        return f"{self._constraint.value} {", ".join(f"--{option.name}" for option in self._options)}"


__all__ = (
    "Constraint",
    "Option",
    "OptionGroup",
)

# The metaclass is an implementation detail; keep it out of star-imports and docs.
del OptionType
