"""
Arbor utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the declaration, parsing and rendering layers.
- Exposed through __all__ so extensions can follow the same conventions, but
  primarily meant to support arbor.options, arbor.commands and arbor.matches.

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None (None is a legal default).
  • Falsey, printable as "Unset", non-subclassable, usable in PEP 604 unions.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value (None, "", 0) is kept.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated methods (clean reprs and tracebacks).

- mirror("attr")
  • Read-only property publishing self._attr; containers come back as read-only views.

- ordinal(number)
  • "first".."tenth", then 11th, 22nd, 103rd... for position-first diagnostics.

Quick examples
    >>> coalesce(Unset, "tcp")
    'tcp'
    >>> coalesce(None, "tcp") is None
    True
    >>> ordinal(3), ordinal(12), ordinal(21)
    ('third', '12th', '21st')
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false, but distinct from None, 0 and "".
    - repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    - Sealed: subclassing raises TypeError.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, "" or 0 are preserved; only Unset is replaced.

    Examples
    - coalesce("tcp", "udp") -> "tcp"
    - coalesce(Unset, "udp") -> "udp"
    - coalesce(None, "udp")  -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name)           -> decorator

    Raises
    - TypeError: wrong arity, non-string name, or a callable whose names
      cannot be updated (built-ins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Return a shallow read-only view of a container (other objects pass through).

    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType
    - Set → frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping) and not isinstance(object, MappingProxyType):
        return MappingProxyType(object)
    elif isinstance(object, Set) and not isinstance(object, frozenset):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The getter reads self._{name}. Mutable containers are handed out as
    read-only views so the public surface cannot alter declared state; a
    mapping view stays live, so later registrations remain visible.

    Example
    - Given self._options, declare options = mirror("options").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes (11th, 21st, 112th).
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1] if number > 0 else f"{number}th"
    except IndexError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Sentinel for “not provided”.

Use Unset as a parameter default when None is a meaningful user value, then
materialize it with coalesce(value, default).
"""


__all__ = (
    # Public helper surface of arbor.utils.
    # Unset and its type are meant for library code rather than applications.

    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
