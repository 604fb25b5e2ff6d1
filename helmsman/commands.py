"""
Helmsman command layer: build command trees and run them.

What this module provides
- Command: a named node holding flags, options, positional arguments and
  nested subcommands. Every add() re-checks the whole command and fails
  immediately with InvalidModelError on any inconsistency.
- Program: the root command. Adds identity (version, authors, binary name),
  rendering/escaping configuration and the parse/evaluate/run entry points.

Core ideas
- Declarative: the tree is built once with chained add() calls, then parsed
  any number of times; parsing never mutates it.
- Eager consistency: duplicate names/forms, required-with-default, argument
  ordering and subcommand/argument conflicts surface at build time.
- Reserved switches: every command registers -h/--help; the program also
  registers --version. They take part in all uniqueness checks.

Quick start
    from helmsman import Program, Command, Flag, Option, Argument

    program = (
        Program("git", "2.45", summary="the stupid content tracker")
        .add(Flag("-v", "--verbose", repeating=True))
        .add(Command("clone").add(Argument("repository")))
    )
    result = program.run()            # prints + exits on help/version/errors
    if result.child.name == "clone": ...
"""
import functools
import logging
import operator
import re
import sys
import weakref

from rich.console import Console

from .arguments import Flag, Option, Argument, NAME
from .faults import FaultCode, InvalidModelError
from .help import render_help, render_usage, render_version
from .parser import Status, evaluate, parse
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass giving commands introspectable, pretty-printable shapes.

    - __typename__ is derived from the class name ("command", "program").
    - Every name in __introspectable__ becomes a read-only mirror() property.
    - __repr__/__rich_repr__ list __displayable__ (or __introspectable__) fields.
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
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _kind(entry):
    return type(entry).__typename__


def _attach_to_parent(self, parent):
    """
    Register self under parent, enforcing one parent per command and unique names.
    """
    if self is parent or self in parent.path:
        raise InvalidModelError(
            f"{_kind(self)} {self.name!r} cannot be attached to itself",
            code=FaultCode.ATTACHED_COMMAND,
        )
    if self.parent is not None:
        raise InvalidModelError(
            f"{_kind(self)} {self.name!r} is already attached to {self.parent.name!r}",
            code=FaultCode.ATTACHED_COMMAND,
        )
    if parent._commands.setdefault(self.name, self) is not self:
        raise InvalidModelError(
            f"duplicate command {self.name}",
            code=FaultCode.DUPLICATED_COMMAND,
        )
    self._parent = weakref.ref(parent)
    if parent._topic_group is not None:
        self._group = parent._topic_group


class Command(metaclass=CommandType):
    """
    A named node of the command tree.

    Responsibilities
    - Composition: holds flags/options/arguments (insertion ordered, keyed by
      name) and subcommands (keyed by name).
    - Consistency: add() validates the new piece against everything already
      declared and raises InvalidModelError on the first violation.
    - Lookup: find_flag()/find_option() resolve a form typed on the command
      line, optionally continuing into the default subcommand.

    Notes
    - Mappings are exposed as read-only copies; mutate only through add().
    - The parent link is weak: a command is owned by its parent, not the
      other way around.
    """

    __introspectable__ = (
        "name",
        "summary",
        "version",
        "group",
        "flags",
        "options",
        "arguments",
        "commands",
        "default_command_name",
    )

    __displayable__ = (
        "name",
        "summary",
        "version",
        "flags",
        "options",
        "arguments",
        "commands",
    )

    __reserved__ = frozenset({"help"})

    def __new__(cls, name, /, summary=Unset, version=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} name must be a string")
        if not NAME.fullmatch(name):
            raise InvalidModelError(
                f"{cls.__typename__} name {name!r} must be made of letters, digits, '_' or '-' "
                f"and cannot start with '-'",
                code=FaultCode.MALFORMED_NAME,
            )
        if not isinstance(summary, str | Unset):
            raise TypeError(f"{cls.__typename__} 'summary' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._summary = coalesce(summary)
        self._version = coalesce(version)
        self._group = None
        self._topic_group = None
        self._flags = {}
        self._options = {}
        self._arguments = {}
        self._commands = {}
        self._default_command_name = None
        self._parent = None

        self.add(Flag("-h", "--help", description="prints help"))
        return self

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        """
        Return the topmost command of this hierarchy.
        """
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
    def chain(self):
        """
        Names from the root to this command, as typed on a command line.

        The root contributes its binary name when it has one, e.g.
        ("git", "remote", "add").
        """
        root, *rest = self.path
        return (getattr(root, "binary_name", root.name), *(command.name for command in rest))

    @property
    def reserved(self):
        return type(self).__reserved__

    def add(self, object, /):
        """
        Add a Flag, Option, Argument or subcommand and return self.

        Raises
        - TypeError: object is none of the above.
        - InvalidModelError: the addition breaks a consistency rule.
        """
        match object:
            case Program():
                raise TypeError(f"{_kind(object)} cannot be added as a subcommand")
            case Command():
                self._add_command(object)
            case Flag():
                self._check_entry(object)
                self._flags[object.name] = object
            case Option():
                self._check_entry(object)
                self._options[object.name] = object
            case Argument():
                self._check_entry(object)
                self._check_argument(object)
                self._arguments[object.name] = object
            case _:
                raise TypeError("add() argument must be a flag, an option, an argument or a command")
        logger.debug("%s %r: added %s %r", type(self).__typename__, self._name, _kind(object), object.name)
        return self

    def _check_entry(self, entry):
        if entry.name in self._flags or entry.name in self._options or entry.name in self._arguments:
            raise InvalidModelError(
                f"{_kind(entry)} name {entry.name!r} is already in use in {_kind(self)} {self._name!r}",
                code=FaultCode.DUPLICATED_NAME,
                entry=entry,
            )

        if isinstance(entry, Flag | Option):
            for other in (*self._flags.values(), *self._options.values()):
                if entry.short is not None and entry.short == other.short:
                    form = "-" + entry.short
                elif entry.long is not None and entry.long == other.long:
                    form = "--" + entry.long
                else:
                    continue
                raise InvalidModelError(
                    f"{_kind(entry)} form {form} is already used by {_kind(other)} {other.name!r}",
                    code=FaultCode.DUPLICATED_FORM,
                    entry=entry,
                )

        if entry.is_required and entry.defaults:
            raise InvalidModelError(
                f"{_kind(entry)} {entry.name!r} cannot be required and have a default value",
                code=FaultCode.REQUIRED_WITH_DEFAULT,
                entry=entry,
            )

    def _check_argument(self, argument):
        if self._arguments:
            last = next(reversed(self._arguments.values()))
            if last.is_repeating:
                raise InvalidModelError(
                    f"cannot add argument {argument.name!r} past repeating argument {last.name!r}",
                    code=FaultCode.ARGUMENT_AFTER_REPEATING,
                    entry=argument,
                )
            if argument.is_required and not all(other.is_required for other in self._arguments.values()):
                raise InvalidModelError(
                    f"cannot add required argument {argument.name!r} past an optional one",
                    code=FaultCode.ARGUMENT_ORDER,
                    entry=argument,
                )
        if self._commands and (argument.is_repeating or not argument.is_required):
            raise InvalidModelError(
                f"argument {argument.name!r} must be required and not repeating "
                f"because {_kind(self)} {self._name!r} has subcommands",
                code=FaultCode.SUBCOMMAND_ORDER,
                entry=argument,
            )

    def _add_command(self, command):
        if self._arguments:
            last = next(reversed(self._arguments.values()))
            if last.is_repeating or not last.is_required:
                raise InvalidModelError(
                    f"cannot add subcommand {command.name!r} after "
                    f"{'repeating' if last.is_repeating else 'optional'} argument {last.name!r}",
                    code=FaultCode.SUBCOMMAND_ORDER,
                )
        _attach_to_parent(command, self)

    def default_command(self, name, /):
        """
        Use the subcommand called name when no subcommand token is given.

        Its flags and options also become reachable from this command's tokens.
        """
        if name not in self._commands:
            raise InvalidModelError(
                f"default command {name!r} is not a subcommand of {_kind(self)} {self._name!r}",
                code=FaultCode.UNKNOWN_DEFAULT_COMMAND,
            )
        self._default_command_name = name
        return self

    def topic_group(self, label, /):
        """
        Stamp label on every subcommand added from now on (help grouping only).
        """
        if not isinstance(label, str | None):
            raise TypeError("topic_group() argument must be a string")
        self._topic_group = label
        return self

    def topic(self, label, /):
        if not isinstance(label, str | None):
            raise TypeError("topic() argument must be a string")
        self._group = label
        return self

    def find_flag(self, form, /, long=True, fallback=False):
        for flag in self._flags.values():
            if (flag.long if long else flag.short) == form:
                return flag
        if fallback and self._default_command_name is not None:
            return self._commands[self._default_command_name].find_flag(form, long, fallback)
        return None

    def find_option(self, form, /, long=True, fallback=False):
        for option in self._options.values():
            if (option.long if long else option.short) == form:
                return option
        if fallback and self._default_command_name is not None:
            return self._commands[self._default_command_name].find_option(form, long, fallback)
        return None

    def forms(self, long=True, fallback=False):
        """
        Every short (or long) form known to this command, in declaration order.

        With fallback, forms of the default subcommand chain follow, each form
        listed once.
        """
        forms = [
            entry.long if long else entry.short
            for entry in (*self._flags.values(), *self._options.values())
            if (entry.long if long else entry.short) is not None
        ]
        if fallback and self._default_command_name is not None:
            forms.extend(self._commands[self._default_command_name].forms(long, fallback))
        return list(dict.fromkeys(forms))


class Program(Command):
    """
    Root of a command tree.

    Identity
    - version (defaults to "1.0"), summary, authors, binary_name (defaults to
      the name; shown in usage lines).

    Configuration
    - colorful: style help, usage, version and errors with rich colors.
    - escape: marker letting values start with '-' (e.g. "\\-5"); None disables it.

    Entry points
    - parse(argv): lower level, returns a Result or raises InvalidInputError.
    - evaluate(argv): never raises input errors, returns an Outcome.
    - run(argv): prints help/version/errors and exits; returns the Result otherwise.
    """

    __introspectable__ = (
        "name",
        "summary",
        "version",
        "group",
        "binary_name",
        "authors",
        "colorful",
        "escape",
        "flags",
        "options",
        "arguments",
        "commands",
        "default_command_name",
    )

    __displayable__ = (
        "name",
        "summary",
        "version",
        "binary_name",
        "authors",
        "flags",
        "options",
        "arguments",
        "commands",
    )

    __reserved__ = frozenset({"help", "version"})

    def __new__(
            cls,
            name,
            /,
            version="1.0",
            summary=Unset,
            *,
            binary=Unset,
            authors=(),
            colorful=True,
            escape="\\",
    ):
        if not isinstance(binary, str | Unset):
            raise TypeError(f"{cls.__typename__} 'binary' must be a string")
        if isinstance(binary, str) and not (binary := binary.strip()):
            raise InvalidModelError(
                f"{cls.__typename__} 'binary' cannot be empty",
                code=FaultCode.BLANK_TEXT,
            )
        if not isinstance(escape, str | None) or escape == "":
            raise TypeError(f"{cls.__typename__} 'escape' must be a non-empty string or None")

        self = super().__new__(cls, name, summary, version)
        self._binary_name = coalesce(binary, name)
        self._authors = []
        self._colorful = bool(colorful)
        self._escape = escape

        for author in authors:
            self.author(author)

        self.add(Flag("--version", description="prints version"))
        return self

    def author(self, name, /):
        if not isinstance(name, str) or not (name := name.strip()):
            raise TypeError("author() argument must be a non-empty string")
        self._authors.append(name)
        return self

    def parse(self, argv=Unset, /):
        """
        Parse argv (sys.argv when omitted) and return the root Result.

        Input errors propagate. When help or version is requested the
        partially parsed tree is returned as is.
        """
        return parse(self, coalesce(argv, list(sys.argv)), escape=self._escape)

    def evaluate(self, argv=Unset, /):
        return evaluate(self, coalesce(argv, list(sys.argv)), escape=self._escape)

    def run(self, argv=Unset, /):
        """
        Convenience entry point for scripts.

        Behavior
        - help/version requested: render it to stdout and exit with status 0.
        - input or validation error: print "Error: <message>" and the usage line
          of the failing command to stderr, then exit with status 1.
        - otherwise: return the root Result.

        Model errors are never caught here.
        """
        outcome = self.evaluate(argv)
        match outcome.status:
            case Status.HELP:
                Console().print(render_help(outcome.command, colorful=self._colorful))
                sys.exit(0)
            case Status.VERSION:
                Console().print(render_version(self, colorful=self._colorful))
                sys.exit(0)
            case Status.FAILURE:
                console = Console(stderr=True)
                console.print(outcome.fault.__replace__(colorful=self._colorful))
                console.print(render_usage(outcome.command, colorful=self._colorful))
                sys.exit(1)
        return outcome.result


__all__ = (
    # Public API surface for consumers of helmsman.commands.
    "Command",
    "Program",
)

del CommandType
