"""
Helmsman results: what a parse produced, one object per command level.

Overview
- Result holds, for the command level it belongs to:
  • flags: name -> occurrence count
  • options: name -> collected values (defaults included)
  • args: name -> collected positional values (defaults included)
  • rest: tokens that followed a literal "--"
  • child/parent: the result of the matched subcommand and of the level above
- Results are written by the parser only; callers read them through the
  accessors below (mappings and lists handed out are copies).

A child level starts from a copy of its parent's values, so ancestor-scoped
flags such as a global --verbose are visible from the subcommand result too.

Quick example
    >>> result = program.parse(["git", "-v", "clone", "repo"])
    >>> result.occurrences_of("verbose")
    1
    >>> result.on("clone", lambda clone: print(clone.arg_value("repository")))
"""
from .utils import mirror


class Result:
    """
    Structured output of parsing one command level.

    Accessors
    - flag_is_set(name) / occurrences_of(name)
    - option_value(name, default) -> last value; option_values(name, default) -> all values
    - arg_value(name, default) / arg_values(name, default)
    - rest, child, parent, name, command
    - on(name, handler): dispatch on the matched subcommand, chainable
    """

    flags = mirror("flags")
    options = mirror("options")
    args = mirror("args")
    rest = mirror("rest")

    def __init__(self, command, /):
        self._command = command
        self._flags = {}
        self._options = {}
        self._args = {}
        self._rest = []
        self._parent = None
        self._child = None

    def _inherit(self, other, /):
        self._flags = dict(other._flags)
        self._options = {name: list(values) for name, values in other._options.items()}
        self._args = {name: list(values) for name, values in other._args.items()}
        return self

    @property
    def name(self):
        return self._command.name

    @property
    def command(self):
        return self._command

    @property
    def parent(self):
        return self._parent

    @property
    def child(self):
        return self._child

    def flag_is_set(self, name, /):
        return self._flags.get(name, 0) > 0

    def occurrences_of(self, name, /):
        return self._flags.get(name, 0)

    def option_value(self, name, /, default=None):
        if values := self._options.get(name):
            return values[-1]
        return default

    def option_values(self, name, /, default=None):
        if values := self._options.get(name):
            return list(values)
        return default

    def arg_value(self, name, /, default=None):
        if values := self._args.get(name):
            return values[-1]
        return default

    def arg_values(self, name, /, default=None):
        if values := self._args.get(name):
            return list(values)
        return default

    def on(self, name, handler, /):
        """
        Call handler(child) when the matched subcommand is called name.

        Returns self so sibling dispatches can be chained:
            result.on("add", do_add).on("remove", do_remove)
        """
        if not callable(handler):
            raise TypeError("on() second argument must be callable")
        if self._child is not None and self._child.name == name:
            handler(self._child)
        return self

    def copy(self):
        """
        Return a detached result for the same command with copied values.
        """
        copy = type(self)(self._command)._inherit(self)
        copy._rest = list(self._rest)
        return copy

    def __rich_repr__(self):
        yield "name", self.name
        yield "flags", self.flags
        yield "options", self.options
        yield "args", self.args
        yield "rest", self.rest
        yield "child", self.child

    def __repr__(self):
        return "result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Result",
)
