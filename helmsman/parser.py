"""
Helmsman parser: walk an argument vector against a command tree.

Overview
- parse(command, argv): lower-level entry point. Returns the root Result,
  raises InvalidInputError (or ValidationError) on bad input.
- evaluate(command, argv): side-effect free entry point. Returns an Outcome
  (status, result, command, fault) and never raises input errors, so the
  caller alone decides what to print and whether to exit.

Token grammar
- "--" ends scanning for the current level; what follows becomes its rest.
- "--name", "--name=value", "-n", "-n=value": flags and options. A value not
  given inline is taken from the next token, which must not look like a
  switch unless it starts with the escape marker ("\\-5").
  Forms resolve level by level: the command's own flags, its own options,
  then the same lookup in its default subcommand. A switch borrowed from the
  default subcommand is rejected if another subcommand is named afterwards.
- "-vvv": a short form made of one repeated letter counts that flag three
  times. Distinct letters ("-vl") are not combined.
- Anything else fills the declared arguments in order; once they are
  exhausted the token names a subcommand.

Per level, after the tokens
- help/version short-circuit, then defaults, then required/cardinality
  checks, then validators, then subcommand dispatch (recursive, sharing the
  same cursor, the child result seeded with a copy of this level's values).
"""
import enum
import logging
import shlex
from collections import deque, namedtuple
from collections.abc import Iterable

from .faults import (
    InvalidInputError,
    MalformedTokenError,
    UnknownSwitchError,
    FlagAssignmentError,
    DuplicatedSwitchError,
    MissingOptionValueError,
    MissingOptionError,
    MissingArgumentError,
    UnexpectedArgumentError,
    UnknownCommandError,
    MissingCommandError,
    ValidationError,
)
from .results import Result
from .utils import nearest, ordinal

logger = logging.getLogger(__name__)


class Status(enum.Enum):
    SUCCESS = "success"
    HELP = "help"
    VERSION = "version"
    FAILURE = "failure"


Outcome = namedtuple("Outcome", ("status", "result", "command", "fault"))


class _Cursor:
    """
    Token stream shared by every level of one parse.

    index counts the tokens consumed so far (the program name included), so
    the token just popped sits at argv[index - 1].
    """

    def __init__(self, tokens):
        self._tokens = deque(tokens)
        self.index = 0

    def __bool__(self):
        return bool(self._tokens)

    def peek(self):
        return self._tokens[0]

    def pop(self):
        self.index += 1
        return self._tokens.popleft()

    def drain(self):
        tokens = list(self._tokens)
        self._tokens.clear()
        return tokens

    @property
    def position(self):
        """
        1-based position of the last popped token, argv[0] excluded.
        """
        return self.index - 1


def _tokenize(argv):
    if isinstance(argv, str):
        return shlex.split(argv)
    if not isinstance(argv, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    tokens = list(argv)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    return tokens


def _is_switch(token):
    return token.startswith("-") and token != "-"


def _unescape(token, escape):
    if escape and token.startswith(escape + "-"):
        return token[len(escape):]
    return token


def _dispatch(entry, *values):
    for trigger in entry.triggers:
        trigger(*values)


def _lookup(command, name, long):
    """
    Resolve a typed form to (owner, flag, option).

    Each level is searched for a flag, then an option, before the lookup
    moves on to its default subcommand.
    """
    while command is not None:
        if (flag := command.find_flag(name, long)) is not None:
            return command, flag, None
        if (option := command.find_option(name, long)) is not None:
            return command, None, option
        command = command.commands.get(command.default_command_name)
    return None, None, None


def _consume_switch(command, cursor, result, token, escape):
    """
    Collect one flag/option token and return the command declaring it.
    """
    position = cursor.position
    long = token.startswith("--")
    prefix = "--" if long else "-"
    name, separator, value = token[len(prefix):].partition("=")
    value = value if separator else None

    count = 1
    owner, flag, option = _lookup(command, name, long)
    if owner is None and not long and len(name) > 1 and name.count(name[0]) == len(name):
        owner, flag, option = _lookup(command, name[0], False)
        if option is not None:
            raise MalformedTokenError(
                f"-{name} at {ordinal(position)} position cannot be read as stacked flags, "
                f"-{name[0]} is an option",
                command=command,
                input=token,
                index=position,
            )
        count = len(name)

    if flag is not None:
        form = prefix + (name[0] if count > 1 else name)
        if value is not None:
            raise FlagAssignmentError(
                f"flag {form} at {ordinal(position)} position cannot accept a value",
                command=command,
                entry=flag,
                input=token,
                index=position,
            )
        result._flags[flag.name] = result._flags.get(flag.name, 0) + count
        if result._flags[flag.name] > 1 and not flag.is_repeating:
            raise DuplicatedSwitchError(
                f"flag {form} at {ordinal(position)} position cannot be repeated",
                command=command,
                entry=flag,
                input=token,
                index=position,
            )
        logger.debug("flag %r counted %d time(s)", flag.name, count)
        for _ in range(count):
            _dispatch(flag)
        return owner

    if option is None:
        message = f"unknown flag/option {prefix + name} at {ordinal(position)} position"
        if suggestion := nearest(name, command.forms(long, fallback=True)):
            suggestion = prefix + suggestion
            message += f" (did you mean {suggestion}?)"
        raise UnknownSwitchError(
            message,
            command=command,
            input=token,
            index=position,
            suggestion=suggestion,
        )

    if value is None:
        if not cursor:
            raise MissingOptionValueError(
                f"option {prefix + name} at {ordinal(position)} position is missing a value",
                command=command,
                entry=option,
                input=token,
                index=position,
            )
        if _is_switch(cursor.peek()):
            message = f"option {prefix + name} at {ordinal(position)} position is missing a value"
            if escape:
                message += f" (if the value starts with '-', prefix it with {escape!r})"
            raise MissingOptionValueError(
                message,
                command=command,
                entry=option,
                input=token,
                index=position,
            )
        value = _unescape(cursor.pop(), escape)

    result._options.setdefault(option.name, []).append(value)
    logger.debug("option %r collected %r", option.name, value)
    _dispatch(option, value)
    return owner


def _descend(command, cursor, result, escape, borrowed=()):
    """
    Parse one command level, then recurse into the matched subcommand.

    borrowed lists (owner, token, position) for switches collected above
    this level on behalf of a default subcommand that has not been entered
    yet.

    Returns (status, command) where command is the level that decided the
    status (the deepest level reached on success).
    """
    arguments = list(command.arguments.values())
    borrowed = [item for item in borrowed if item[0] is not command]
    position = 0
    pending = False

    while cursor:
        token = cursor.peek()
        if token == "--":
            cursor.pop()
            result._rest = cursor.drain()
            logger.debug("%r: %d token(s) after '--'", command.name, len(result._rest))
            break
        if _is_switch(token):
            cursor.pop()
            index = cursor.position
            if (owner := _consume_switch(command, cursor, result, token, escape)) is not command:
                borrowed.append((owner, token, index))
            continue
        if position < len(arguments):
            cursor.pop()
            argument = arguments[position]
            if not argument.is_repeating:
                position += 1
            value = _unescape(token, escape)
            result._args.setdefault(argument.name, []).append(value)
            logger.debug("argument %r collected %r", argument.name, value)
            _dispatch(argument, value)
            continue
        pending = True
        break

    if "help" in command.reserved and result.flag_is_set("help"):
        return Status.HELP, command
    if "version" in command.reserved and result.flag_is_set("version"):
        return Status.VERSION, command

    options = command.options
    for entry, collected in (
            *((option, result._options) for option in options.values()),
            *((argument, result._args) for argument in arguments),
    ):
        if entry.name not in collected and entry.defaults:
            collected[entry.name] = list(entry.defaults)
            logger.debug("%r: default %r installed for %r", command.name, entry.defaults, entry.name)

    for option in options.values():
        values = result._options.get(option.name, [])
        if option.is_required and not values:
            raise MissingOptionError(
                f"missing required option {option.name}",
                command=command,
                entry=option,
            )
        if len(values) > 1 and not option.is_repeating:
            raise DuplicatedSwitchError(
                f"expected only one value for option {option.name}",
                command=command,
                entry=option,
            )

    for argument in arguments:
        values = result._args.get(argument.name, [])
        if argument.is_required and not values:
            raise MissingArgumentError(
                f"missing required argument {argument.name}",
                command=command,
                entry=argument,
            )
        if len(values) > 1 and not argument.is_repeating:
            raise UnexpectedArgumentError(
                f"expected only one value for argument {argument.name}",
                command=command,
                entry=argument,
            )

    for entry, collected in (
            *((option, result._options) for option in options.values()),
            *((argument, result._args) for argument in arguments),
    ):
        if not (values := collected.get(entry.name)):
            continue
        for validator in entry.validators:
            try:
                validator.validate(entry, list(values))
            except ValidationError as fault:
                if fault.command is not None:
                    raise
                raise fault.__replace__(command=command) from fault

    commands = command.commands
    if not commands:
        if pending:
            token = cursor.peek()
            raise UnexpectedArgumentError(
                f"unknown (excessive) parameter {token} at {ordinal(cursor.index)} position",
                command=command,
                input=token,
                index=cursor.index,
            )
        return Status.SUCCESS, command

    if pending:
        token = cursor.pop()
        if (child := commands.get(token)) is None:
            message = f"unknown command {token!r} at {ordinal(cursor.position)} position"
            if suggestion := nearest(token, commands):
                message += f" (did you mean {suggestion!r}?)"
            raise UnknownCommandError(
                message,
                command=command,
                input=token,
                index=cursor.position,
                suggestion=suggestion,
            )
    elif command.default_command_name is not None:
        child = commands[command.default_command_name]
    else:
        raise MissingCommandError(
            "missing required subcommand",
            command=command,
        )

    if borrowed and child.name != command.default_command_name:
        owner, token, index = borrowed[0]
        raise UnknownSwitchError(
            f"{token.partition('=')[0]} at {ordinal(index)} position belongs to command "
            f"{owner.name!r}, not to {child.name!r}",
            command=command,
            input=token,
            index=index,
        )

    logger.debug("%r: descending into %r", command.name, child.name)
    nested = Result(child)._inherit(result)
    nested._parent = result
    result._child = nested
    return _descend(child, cursor, nested, escape, borrowed)


def _walk(command, argv, escape):
    tokens = _tokenize(argv)
    cursor = _Cursor(tokens)
    if cursor:
        cursor.pop()

    result = Result(command)
    status, level = _descend(command, cursor, result, escape)
    logger.debug("parse finished with %s at %r", status.name, level.name)

    if isinstance(argv, list):
        argv[:] = tokens[cursor.index:]
    return status, result, level


def parse(command, argv, /, *, escape="\\"):
    """
    Parse argv against command and return the root Result.

    Parameters
    - command: root of the command tree.
    - argv: str (split with shlex.split) or Iterable[str]; argv[0] is the
      program name and is skipped.
    - escape: marker allowing values that start with '-', or None.

    Behavior
    - Input and validation errors propagate as InvalidInputError subclasses.
    - When help or version is requested, the partial tree is returned.
    - A list argv is advanced in place: afterwards it holds the tokens that
      were not consumed (those after "--").
    """
    _, result, _ = _walk(command, argv, escape)
    return result


def evaluate(command, argv, /, *, escape="\\"):
    """
    Parse argv and report the terminal outcome instead of raising.

    Returns
    - Outcome(Status.SUCCESS, result, deepest command, None)
    - Outcome(Status.HELP | Status.VERSION, result, requesting command, None)
    - Outcome(Status.FAILURE, None, failing command, fault)
    """
    try:
        status, result, level = _walk(command, argv, escape)
    except InvalidInputError as fault:
        logger.debug("parse failed: %s", fault.message)
        return Outcome(Status.FAILURE, None, fault.command if fault.command is not None else command, fault)
    return Outcome(status, result, level, None)


__all__ = (
    "Status",
    "Outcome",
    "parse",
    "evaluate",
)
