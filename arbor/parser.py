r"""
Arbor parser: turn a token sequence into a ParseResult against a command tree.

Results
- Success(matches)      → CommandMatches tree, one node per resolved level.
- Failure(error)        → ParseError value naming the level at fault.
- HelpRequested(command) → the level whose --help was given.

All three are NamedTuples, so callers can unpack or pattern-match them:

    match parse(root, ["play", "--url", "http://x"]):
        case Success(matches): ...
        case Failure(error): ...
        case HelpRequested(command): ...

Per-level state machine
- CONSUMING_OPTIONS: while the next token starts with '-', resolve and record
  one option token per step. Recording help stops the level with HelpRequested.
- DISPATCHING_SUBCOMMAND: the next token (if any) must name a child exactly;
  the child level parses every remaining token and its Failure/HelpRequested
  propagate unchanged.
- VALIDATING: every missing required option (no capture, no default) in one
  fault, then the first violated option group in declaration order.
- DONE: the result is available.

Grammar
- long:  --name, --name=value (split on the first '='); a value-taking option
  without '=' consumes the following token, whatever it looks like.
- short: -x, -xvalue, -x=value (one leading '=' is stripped) and grouped flags
  -abc; the first value-taking option in a group takes the rest of the token,
  or the following token when the group ends with it.
- '-' and '--' alone name no option and are reported as unknown options.

Messages lead with the ordinal position of the offending token in the whole
invocation (“at third position”) and carry a single actionable hint.
"""
from collections import deque
from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

from . import fuzzy
from .faults import *
from .matches import CommandMatches
from .utils import ordinal


class Success(NamedTuple):
    matches: CommandMatches


class Failure(NamedTuple):
    error: ParseError


class HelpRequested(NamedTuple):
    command: object


class State(Enum):
    CONSUMING_OPTIONS = "consuming-options"
    DISPATCHING_SUBCOMMAND = "dispatching-subcommand"
    VALIDATING = "validating"
    DONE = "done"


class Parser:
    """
    Parse one command level; subcommand levels get their own Parser.

    Attributes
    - command: the level being parsed.
    - tokens: deque of the tokens not consumed yet.
    - index: 1-based position of the next token in the whole invocation.
    - state: current State.
    - result: the ParseResult once state is DONE, else None.
    """

    def __init__(self, command, tokens=(), /, *, index=1):
        self.command = command
        self.tokens = deque(tokens)
        self.index = index
        self.state = State.CONSUMING_OPTIONS
        self.result = None
        self._captures = {}
        self._subcommand = None

    @property
    def route(self):
        return " ".join(step.name for step in self.command.path)

    def run(self):
        """
        Step until DONE and return the result.
        """
        while self.state is not State.DONE:
            self.step()
        return self.result

    def step(self):
        """
        Perform one transition and return the new state.
        """
        match self.state:
            case State.CONSUMING_OPTIONS:
                if self.tokens and self.tokens[0].startswith("-"):
                    self._consume(self.tokens.popleft())
                else:
                    self.state = State.DISPATCHING_SUBCOMMAND
            case State.DISPATCHING_SUBCOMMAND:
                if self.tokens:
                    self._dispatch(self.tokens.popleft())
                else:
                    self.state = State.VALIDATING
            case State.VALIDATING:
                self._validate()
            case State.DONE:
                raise RuntimeError(f"parser for {self.route!r} is already done")
        return self.state

    def _finish(self, result):
        self.result = result
        self.state = State.DONE

    def _fail(self, fault, /):
        self._finish(Failure(fault))

    # ── option phase ────────────────────────────────────────────────────────

    def _consume(self, token):
        index = self.index
        self.index += 1

        if token.startswith("--"):
            fault = self._consume_long(token, index)
        else:
            fault = self._consume_short(token, index)

        if fault is not None:
            self._fail(fault)
        elif "help" in self._captures:
            self._finish(HelpRequested(self.command))

    def _consume_long(self, token, index):
        name, separator, value = token[2:].partition("=")
        value = value if separator else None

        try:
            option = self.command.options[name]
        except KeyError:
            return self._unknown_option(f"--{name}", name, token, index)

        if option.flag and value is not None:
            return UnexpectedValueError(
                "flag '--%s' at %s position cannot have a value" % (name, ordinal(index)),
                title="flag cannot take a value",
                code=FaultCode.UNEXPECTED_VALUE,
                command=self.command,
                hint="remove everything from '=' (for example: --%s)" % name,
                option=option,
                index=index,
            )

        if option.takes_value and value is None:
            if not self.tokens:
                return self._missing_value(option, f"--{name}", index)
            value = self.tokens.popleft()
            self.index += 1

        return self._record(option, f"--{name}", value, index)

    def _consume_short(self, token, index):
        characters = token[1:]
        if not characters:
            return self._unknown_option(token, "", token, index)

        while characters:
            char, characters = characters[0], characters[1:]
            option = self.command.find_short(char)
            if option is None:
                return self._unknown_option(f"-{char}", char, token, index)

            if option.flag:
                if characters.startswith("="):
                    return UnexpectedValueError(
                        "flag '-%s' at %s position cannot have a value" % (char, ordinal(index)),
                        title="flag cannot take a value",
                        code=FaultCode.UNEXPECTED_VALUE,
                        command=self.command,
                        hint="remove everything from '=' (for example: -%s)" % char,
                        option=option,
                        index=index,
                    )
                if (fault := self._record(option, f"-{char}", None, index)) is not None:
                    return fault
                continue

            if characters:
                value = characters[1:] if characters.startswith("=") else characters
            elif self.tokens:
                value = self.tokens.popleft()
                self.index += 1
            else:
                return self._missing_value(option, f"-{char}", index)
            return self._record(option, f"-{char}", value, index)

        return None

    def _record(self, option, spelling, value, index):
        if option.name in self._captures and not option.allow_multiple:
            return DuplicateOptionError(
                "option '%s' at %s position was already provided" % (spelling, ordinal(index)),
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                command=self.command,
                hint="'--%s' accepts a single occurrence, remove the extra one" % option.name,
                option=option,
                index=index,
            )
        captured = self._captures.setdefault(option.name, [])
        if value is not None:
            captured.append(value)
        return None

    def _unknown_option(self, spelling, name, token, index):
        suggestion = fuzzy.suggest(name, self.command.options.keys()) if name else None
        if suggestion is not None:
            hint = "did you mean '--%s'? you can also run '%s --help' to see all options" % (suggestion, self.route)
        else:
            hint = "try '%s --help' to see all available options" % self.route
        if spelling != token:
            message = "unknown option '%s' in '%s' at %s position" % (spelling, token, ordinal(index))
        else:
            message = "unknown option '%s' at %s position" % (spelling, ordinal(index))
        return UnknownOptionError(
            message,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            command=self.command,
            hint=hint,
            suggestion=suggestion,
            input=spelling,
            index=index,
        )

    def _missing_value(self, option, spelling, index):
        return MissingValueError(
            "option '%s' at %s position requires a value" % (spelling, ordinal(index)),
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            command=self.command,
            hint="pass a value after a space or inline (for example: --%s=%s)" % (option.name, option.metavar),
            option=option,
            index=index,
        )

    # ── subcommand phase ────────────────────────────────────────────────────

    def _dispatch(self, token):
        index = self.index
        self.index += 1

        try:
            child = self.command.children[token]
        except KeyError:
            return self._fail(self._unknown_subcommand(token, index))

        match result := Parser(child, self.tokens, index=self.index).run():
            case Success(matches):
                self.tokens.clear()
                self._subcommand = matches
                self.state = State.VALIDATING
            case _:
                self._finish(result)

    def _unknown_subcommand(self, token, index):
        if not self.command.children:
            return UnknownSubcommandError(
                "unexpected argument %r at %s position" % (token, ordinal(index)),
                title="unexpected argument",
                code=FaultCode.UNKNOWN_SUBCOMMAND,
                command=self.command,
                hint="'%s' takes no subcommands, run '%s --help' to see valid forms" % (self.route, self.route),
                suggestion=None,
                input=token,
                index=index,
            )

        suggestion = fuzzy.suggest(token, self.command.children.keys())
        if suggestion is not None:
            hint = "did you mean %r? you can also run '%s --help' to see available subcommands" % (
                suggestion, self.route
            )
        else:
            hint = "run '%s --help' to see available subcommands" % self.route
        return UnknownSubcommandError(
            "unknown subcommand %r at %s position" % (token, ordinal(index)),
            title="unknown subcommand",
            code=FaultCode.UNKNOWN_SUBCOMMAND,
            command=self.command,
            hint=hint,
            suggestion=suggestion,
            input=token,
            index=index,
        )

    # ── validation ──────────────────────────────────────────────────────────

    def _validate(self):
        missing = tuple(
            option for option in self.command.options.values()
            if option.required and option.name not in self._captures and option.default is None
        )
        if missing:
            return self._fail(MissingRequiredOptionError(
                "the following required options were not provided to '%s':\n%s" % (
                    self.route, "\n".join(f"    --{option.name} {option.metavar}" for option in missing)
                ),
                title="missing required options" if len(missing) > 1 else "missing required option",
                code=FaultCode.MISSING_REQUIRED_OPTION,
                command=self.command,
                hint="run '%s --help' to see every option" % self.route,
                missing=missing,
            ))

        for group in self.command.groups.values():
            count = sum(option.name in self._captures for option in group.options)
            if not group.constraint.check(count):
                return self._fail(GroupConstraintViolationError(
                    "option group %r requires %s, but %s provided" % (
                        group.name, group.describe(), "none were" if not count else f"{count} were"
                    ),
                    title="option group violation",
                    code=FaultCode.GROUP_CONSTRAINT_VIOLATION,
                    command=self.command,
                    hint="provide %s" % group.describe(),
                    group=group,
                    count=count,
                ))

        self._finish(Success(CommandMatches(self.command, self._captures, self._subcommand)))


def parse(command, tokens, /):
    """
    Parse `tokens` against `command` and return a ParseResult.

    The command tree is frozen first: declarations cannot change once parsing
    has started. Parsing itself performs no I/O and raises nothing for bad
    input; only a non-iterable or non-string token is a TypeError.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("parse() 'tokens' must be an iterable of strings")
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse() 'tokens' must only contain strings")

    command.freeze()
    return Parser(command, tokens).run()


__all__ = (
    "Success",
    "Failure",
    "HelpRequested",
    "State",
    "Parser",
    "parse",
)
