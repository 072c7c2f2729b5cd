"""
Arbor command layer: declare, compose, parse and present command trees.

What this module provides
- Command: a named node owning options, option groups and subcommands.
  • A reserved flag option, help, is injected into every command.
  • Children hold a weak reference to their parent (used for usage paths only).
  • The tree freezes once it is parsed; later declarations raise TypeError.

- Builders:
  • CommandBuilder: fluent .option()/.group()/.subcommand()/.build().
  • OptionGroupBuilder: fluent .option()/.build(); members are bound to the group.

- Presentation:
  • invoke(command, prompt): tokenize, parse, print help or diagnostics through
    rich consoles and exit with a conventional code; returns the matches on success.

Core ideas
- Declaration mistakes fail fast with exceptions (DuplicateNameError,
  InvalidGroupOptionError): they are bugs in the program, not bad input.
- Parsing never raises for bad input: Command.parse returns Success, Failure
  or HelpRequested and leaves presentation to the caller.

Quick start
    from arbor import CommandBuilder, OptionGroupBuilder, Constraint, invoke

    play = (
        CommandBuilder("play", "play media on the receiver")
        .option("mime_type", "m", "mime type of the content", required=True)
        .group(
            OptionGroupBuilder("source", "where the media comes from", Constraint.EXACTLY_ONE)
            .option("file", "f", "local file to stream")
            .option("url", "u", "remote url to play")
        )
        .build()
    )
    fcast = (
        CommandBuilder("fcast", "control a media receiver")
        .option("host", "h", "address of the receiver", required=True)
        .subcommand(play)
        .build()
    )

    matches = invoke(fcast)
    if play_matches := matches.subcommand_matches("play"):
        ...
"""
import copy
import functools
import operator
import re
import shlex
import sys
import weakref
from collections.abc import Iterable
from enum import IntEnum

from rich.console import Console
from rich.text import Text

from . import faults
from . import parser
from .faults import DuplicateNameError, InvalidGroupOptionError
from .options import Constraint, Option, OptionGroup
from .parser import Success, Failure, HelpRequested
from .rendering import help_renderable, render_help, render_usage, usage_renderable, stylist
from .utils import *

HELP = Option("help", descr="print help information", takes_value=False)
"""The reserved flag injected into every command."""


class ExitCode(IntEnum):
    """
    process exit codes used by invoke().

    HELP is an alias of SUCCESS: asking for help is not an error.
    """
    SUCCESS = 0
    FAILURE = 1
    HELP = 0


class CommandType(type):
    """
    Metaclass giving commands a __typename__, mirrored read-only properties
    and stable __repr__/__rich_repr__ implementations.

    Conventions
    - __typename__ is derived from the class name ("Command" → "command").
    - __displayable__ (if set) narrows which properties __rich_repr__ shows;
      parent is never displayed to keep reprs acyclic.
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


def _sanitize_name(cls, name, /):
    """
    Internal: validate a command name (a single, non-empty, dash-free word).
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name.startswith("-") or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word not starting with '-', got {name!r}")
    return name


class Command(metaclass=CommandType):
    """
    Named node of a command tree.

    Properties
    - name, descr: identity and help text.
    - options: read-only mapping long name → Option (help first, then declaration order).
    - groups: read-only mapping group name → OptionGroup.
    - children: read-only mapping child name → Command.
    - parent / root / path / route: position in the tree (parent is weak).
    - frozen: True once this command or an ancestor has been parsed.

    Lifecycle
    - Declare with add_option/add_group/add_subcommand (or the builders).
    - Parse with parse(tokens); the first parse freezes the declaration.
    """

    __introspectable__ = (
        "name",
        "descr",
        "options",
        "groups",
        "children",
    )

    def __new__(cls, name, /, descr=Unset):
        name = _sanitize_name(cls, name)
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        self = super().__new__(cls)
        self._name = name
        self._descr = coalesce(descr)
        self._options = {HELP.name: HELP}
        self._groups = {}
        self._children = {}
        self._parent = None
        self._frozen = False
        return self

    @property
    def parent(self):
        """
        The command this one is attached to, or None for a root.
        """
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        The user-facing invocation prefix, e.g. "fcast play".
        """
        return " ".join(step.name for step in self.path)

    @property
    def frozen(self):
        return any(step._frozen for step in self.path)

    def freeze(self):
        """
        Forbid further declarations on this command and its descendants.
        """
        self._frozen = True
        return self

    def find(self, name, /):
        """
        Return the option declared with long name `name`, or None.
        """
        return self._options.get(name)

    def find_short(self, short, /):
        """
        Return the option declared with short name `short`, or None.
        """
        for option in self._options.values():
            if option.short == short:
                return option
        return None

    def _ensure_mutable(self):
        if self.frozen:
            raise TypeError(f"{type(self).__typename__} {self.route!r} is frozen, declarations cannot change after parsing")

    def _ensure_available(self, option, taken=Unset):
        taken = coalesce(taken, {})
        if option.name == HELP.name:
            raise DuplicateNameError(f"option name 'help' is reserved in {type(self).__typename__} {self.route!r}")
        if option.name in self._options or option.name in taken:
            raise DuplicateNameError(f"option name '--{option.name}' is already in use in {type(self).__typename__} {self.route!r}")
        if option.short is not None and (
                self.find_short(option.short) is not None or
                any(other.short == option.short for other in taken.values())
        ):
            raise DuplicateNameError(f"option name '-{option.short}' is already in use in {type(self).__typename__} {self.route!r}")

    def add_option(self, option, /):
        """
        Declare an option on this command.

        Raises
        - TypeError: not an Option, or the command is frozen.
        - DuplicateNameError: long or short name already declared (help is reserved).
        - InvalidGroupOptionError: the option names a group; declare it through add_group().
        """
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        self._ensure_mutable()
        if option.group is not None:
            raise InvalidGroupOptionError(
                f"option '--{option.name}' belongs to group {option.group!r}, declare it through add_group()"
            )
        self._ensure_available(option)
        self._options[option.name] = option
        return self

    def add_group(self, group, /):
        """
        Declare an option group and register each of its members as options.

        The declaration is atomic: on error nothing is registered.
        """
        if not isinstance(group, OptionGroup):
            raise TypeError("add_group() argument must be an option group")
        self._ensure_mutable()
        if group.name in self._groups:
            raise DuplicateNameError(f"option group name {group.name!r} is already in use in {type(self).__typename__} {self.route!r}")

        taken = {}
        for option in group.options:
            self._ensure_available(option, taken)
            taken[option.name] = option

        self._options.update(taken)
        self._groups[group.name] = group
        return self

    def add_subcommand(self, command, /):
        """
        Attach `command` as a child of this command.

        Raises
        - TypeError: not a Command, or this command is frozen.
        - ValueError: the child is already attached elsewhere, or attaching it
          would create a cycle.
        - DuplicateNameError: a child with the same name exists.
        """
        if not isinstance(command, Command):
            raise TypeError("add_subcommand() argument must be a command")
        self._ensure_mutable()
        if command in self.path:
            raise ValueError(f"{type(self).__typename__} {command.name!r} cannot be attached to itself or a descendant")
        if command.parent is not None:
            raise ValueError(f"{type(self).__typename__} {command.name!r} is already attached to {command.parent.route!r}")
        if command.name in self._children:
            raise DuplicateNameError(f"subcommand name {command.name!r} is already in use in {type(self).__typename__} {self.route!r}")

        command._parent = weakref.ref(self)
        self._children[command.name] = command
        return self

    def parse(self, tokens, /):
        """
        Parse `tokens` (arguments without the program name) and return
        Success(matches), Failure(error) or HelpRequested(command).
        """
        return parser.parse(self, tokens)

    def help(self, *, colorful=False, fancy=False, width=80):
        """
        Return the help page of this command as a string.
        """
        return render_help(self, colorful=colorful, fancy=fancy, width=width)

    def usage(self, *, width=80):
        """
        Return the usage line of this command as a string.
        """
        return render_usage(self, width=width)


class OptionGroupBuilder:
    """
    Fluent builder for an OptionGroup.

    Options added here are bound to the group immediately, so declaring one as
    required or with a default fails on the .option() call itself.
    """

    def __init__(self, name, /, descr=Unset, constraint=Constraint.ANY):
        if not isinstance(name, str):
            raise TypeError("option-group-builder 'name' must be a string")
        self._name = name.strip()
        self._descr = descr
        self._constraint = constraint
        self._options = []

    def option(self, option, /, *args, **kwargs):
        """
        Add an Option instance, or build one from Option's constructor arguments.
        """
        if isinstance(option, Option):
            if args or kwargs:
                raise TypeError("option() takes no extra arguments when given an option")
            if option.group is not None and option.group != self._name:
                raise InvalidGroupOptionError(
                    f"option '--{option.name}' belongs to group {option.group!r}, not {self._name!r}"
                )
            option = option if option.group == self._name else copy.replace(option, group=self._name)
        else:
            option = Option(option, *args, group=self._name, **kwargs)
        self._options.append(option)
        return self

    def build(self):
        return OptionGroup(self._name, self._descr, self._constraint, self._options)


class CommandBuilder:
    """
    Fluent builder for a Command.

    Every call is applied to the command under construction right away, so
    declaration errors surface at the offending call. build() hands the command
    out once; the builder cannot be used afterwards.
    """

    def __init__(self, name, /, descr=Unset):
        self._command = Command(name, descr)
        self._built = False

    def _ensure_open(self):
        if self._built:
            raise TypeError(f"command-builder for {self._command.name!r} was already built")

    def option(self, option, /, *args, **kwargs):
        """
        Add an Option instance, or build one from Option's constructor arguments.
        """
        self._ensure_open()
        if not isinstance(option, Option):
            option = Option(option, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("option() takes no extra arguments when given an option")
        self._command.add_option(option)
        return self

    def group(self, group, /, descr=Unset, constraint=Constraint.ANY, *options):
        """
        Add an OptionGroup, an OptionGroupBuilder, or build a group from
        (name, descr, constraint, *options).
        """
        self._ensure_open()
        if isinstance(group, OptionGroupBuilder):
            group = group.build()
        elif not isinstance(group, OptionGroup):
            group = OptionGroup(group, descr, constraint, options)
        self._command.add_group(group)
        return self

    def subcommand(self, command, /):
        """
        Attach a Command or the result of a CommandBuilder as a child.
        """
        self._ensure_open()
        if isinstance(command, CommandBuilder):
            command = command.build()
        self._command.add_subcommand(command)
        return self

    def build(self):
        self._ensure_open()
        self._built = True
        return self._command


def _tokenize(prompt):
    """
    Normalize an invoke() prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string split with shlex.split.
    - Iterable[str]: used as-is (items must be strings).
    """
    if prompt is Unset:
        return sys.argv[1:]
    elif isinstance(prompt, str):
        return shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("invoke() prompt must be a string or an iterable of strings")


def invoke(command, prompt=Unset, /, *, output=Unset, errors=Unset, colorful=True, fancy=False, exit=sys.exit):
    """
    Parse a prompt against a command and present the outcome.

    Parameters
    - command: Command
    - prompt: Unset (sys.argv[1:]) | str (shell-like) | Iterable[str]
    - output: rich Console for help text (defaults to a stdout console).
    - errors: rich Console for diagnostics (defaults to a stderr console).
    - colorful / fancy: palette and panel chrome for printed output.
    - exit: callable receiving the exit code (sys.exit by default).

    Behavior
    - Success → return the CommandMatches.
    - HelpRequested → print the help page to output, exit(ExitCode.HELP).
    - Failure → print the fault, the usage line of the failing level and a
      pointer to its help on errors, exit(ExitCode.FAILURE).
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    match command.parse(_tokenize(prompt)):
        case Success(matches):
            return matches
        case HelpRequested(target):
            output = coalesce(output, Console())
            output.print(help_renderable(target, colorful=colorful, fancy=fancy, width=output.width))
            return exit(ExitCode.HELP)
        case Failure(error):
            errors = coalesce(errors, faults.console)
            styler, text = stylist({"help-pointer": "bold #22C55E"}, colorful)
            errors.print(copy.replace(error, colorful=colorful, fancy=fancy))
            errors.print(Text("\n").append(usage_renderable(error.command, colorful=colorful, width=errors.width)))
            errors.print(Text.assemble(
                "\n",
                "for more information, try ",
                text(f"'{error.command.route} --help'", styler("help-pointer")),
            ))
            return exit(ExitCode.FAILURE)


__all__ = (
    # Public API surface of arbor.commands, re-exported from the package.
    "Command",
    "CommandBuilder",
    "OptionGroupBuilder",
    "ExitCode",
    "invoke",
)

# The metaclass is an implementation detail; keep it out of star-imports and docs.
del CommandType
