r"""
Helmsman entry specifications and decorators.

Overview
- Specs
  • Flag: named, presence-only switch (no payload), e.g. -v/--verbose. Counted per occurrence.
  • Option: named, value-bearing switch, e.g. -o/--output; one value per occurrence.
  • Argument: positional, value-bearing entry filled in declaration order.

- Decorators
  • @flag(...), @option(...), @argument(...): build a spec and bind the decorated
    function as a trigger (called while the parser walks the tokens).

- Builders
  Every spec is configured fluently; each setter returns the spec itself:
      Option("-o", "--output").required().accepts_paths(False)
      Argument("files").repeating().default(["."])

- Introspection & representation
  • EntryType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- Shared
  • name: str, ASCII letters/digits/'_'/'-', cannot start with '-'.
  • description: Unset | str (short help), non-empty when provided.
- Flag/Option
  • forms: "-x" (short) and/or "--long" (long); at most one of each, at least one overall.
    The name defaults to the long form, else the short form.
- Option/Argument
  • tag: display placeholder ("value" for options, the name for arguments).
  • defaults: str | Iterable[str] installed when nothing was collected.

Invariants kept here
- Flags are never required, never defaulted, never validated (model error).
- Cross-entry rules (uniqueness, ordering, required-with-default) are checked
  by Command.add(), not here.

Quick example:
    >>> from helmsman.arguments import Flag, Option, Argument, flag
    >>> verbose = Flag("-v", "--verbose", repeating=True)
    >>> output = Option("-o", "--output", tag="path").default("a.out")
    >>> source = Argument("source").accepts_files()
    >>> @flag("-q", "--quiet")
    ... def on_quiet(): ...
"""
import functools
import operator
import re
from collections.abc import Iterable

from .faults import FaultCode, InvalidModelError
from .utils import *
from .validators import (
    Validator,
    ChoicesValidator,
    PathKind,
    PathValidator,
    DelegateValidator,
    PredicateValidator,
)

NAME = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_-]*")


class EntryType(type):
    """
    Metaclass giving specs introspectable, pretty-printable shapes.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages and help output ("flag", "option", "argument").
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(name='verbose', short='v', long='verbose', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    if not NAME.fullmatch(name):
        raise InvalidModelError(
            f"{cls.__typename__} name {name!r} must be made of letters, digits, '_' or '-' "
            f"and cannot start with '-'",
            code=FaultCode.MALFORMED_NAME,
        )
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the shared 'description' field.

    - Unset becomes None.
    - Strings are trimmed and must not be empty.
    """
    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise InvalidModelError(
            f"{cls.__typename__} 'description' cannot be empty",
            code=FaultCode.BLANK_TEXT,
        )
    metadata["description"] = coalesce(description)


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: split the forms of a Flag/Option into short and long.

    Accepted forms
    - short: "-x", "-xy" (single dash)
    - long: "--long", "--long-name" (double dash)
    At most one form of each kind, at least one overall. The entry name
    defaults to the long form, else the short one.
    """
    short = long = None
    for form in metadata.pop("forms"):
        if not isinstance(form, str):
            raise TypeError(f"{cls.__typename__} forms must be strings")
        if form.startswith("--") and NAME.fullmatch(body := form[2:]):
            if long is not None:
                raise InvalidModelError(
                    f"{cls.__typename__} cannot declare two long forms ({'--' + long}, {form})",
                    code=FaultCode.DUPLICATED_FORM,
                )
            long = body
        elif form.startswith("-") and NAME.fullmatch(body := form[1:]):
            if short is not None:
                raise InvalidModelError(
                    f"{cls.__typename__} cannot declare two short forms ({'-' + short}, {form})",
                    code=FaultCode.DUPLICATED_FORM,
                )
            short = body
        else:
            raise InvalidModelError(
                f"{cls.__typename__} form {form!r} must look like '-x' or '--long-name'",
                code=FaultCode.MALFORMED_NAME,
            )

    if short is None and long is None:
        raise TypeError(f"{cls.__typename__} must specify at least one form")

    metadata["short"] = short
    metadata["long"] = long
    metadata["name"] = _sanitize_name(cls, coalesce(metadata["name"], long or short))


def _sanitize_defaults(cls, values, /):
    if values is Unset:
        return ()
    if isinstance(values, str):
        return (values,)
    if not isinstance(values, Iterable):
        raise TypeError(f"{cls.__typename__} default must be a string or an iterable of strings")
    values = tuple(values)
    if not all(isinstance(value, str) for value in values):
        raise TypeError(f"{cls.__typename__} default values must be strings")
    return values


def _sanitize_tag(cls, tag, /):
    if not isinstance(tag, str):
        raise TypeError(f"{cls.__typename__} 'tag' must be a string")
    elif not (tag := tag.strip()):
        raise InvalidModelError(
            f"{cls.__typename__} 'tag' cannot be empty",
            code=FaultCode.BLANK_TEXT,
        )
    return tag


class Entry(metaclass=EntryType):
    """
    Shared base of Flag, Option and Argument.

    Holds the common attributes and the fluent setters. Each setter changes
    only this entry; consistency with sibling entries is the owning command's
    job.
    """

    __introspectable__ = (
        "name",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
        "validators",
        "triggers",
    )

    def __new__(cls, *args, **kwargs):
        if cls is Entry:
            raise TypeError("type 'Entry' cannot be instantiated directly")
        return super().__new__(cls)

    def _populate(self, metadata):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._validators = []
        self._triggers = []

    def required(self, flag=True, /):
        self._is_required = bool(flag)
        return self

    def optional(self, flag=True, /):
        return self.required(not flag)

    def repeating(self, flag=True, /):
        self._is_repeating = bool(flag)
        return self

    def default(self, values, /):
        """
        Set the default values and make the entry optional.

        A single string is one default value; any other iterable supplies
        several (useful for repeating entries).
        """
        self._defaults = _sanitize_defaults(type(self), values)
        self._is_required = False
        return self

    def validate(self, validator, /):
        if not isinstance(validator, Validator):
            raise TypeError(f"{type(self).__typename__} validators must be Validator instances")
        self._validators.append(validator)
        return self

    def trigger(self, callback, /):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} triggers must be callable")
        self._triggers.append(callback)
        return self

    def accepts(self, values, /):
        return self.validate(ChoicesValidator(values))

    def accepts_files(self):
        return self.validate(PathValidator(kind=PathKind.FILE))

    def accepts_directories(self):
        return self.validate(PathValidator(kind=PathKind.DIRECTORY))

    def accepts_paths(self, exists=True, /):
        return self.validate(PathValidator(exists=exists))

    def validate_with(self, callback, /):
        return self.validate(DelegateValidator(callback))

    def validate_each_with(self, callback, message=Unset, /):
        if message is Unset:
            return self.validate(DelegateValidator(callback, each=True))
        return self.validate(PredicateValidator(callback, message))


class Flag(Entry):
    """
    Named, presence-only switch.

    A flag counts its occurrences (-v -v, -vv and --verbose --verbose all count
    two). Without repeating=True a second occurrence is an input error.
    Flags carry no value, so required(), default() and validate() are model
    errors.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
        "validators",
        "triggers",
    )

    __displayable__ = (
        "name",
        "short",
        "long",
        "description",
        "is_repeating",
    )

    def __new__(cls, *forms, description=Unset, name=Unset, repeating=False):
        metadata = {
            "forms": forms,
            "name": name,
            "description": description,
            "is_repeating": bool(repeating),
            "is_required": False,
            "defaults": (),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        self._populate(metadata)
        return self

    def required(self, flag=True, /):
        if flag:
            raise InvalidModelError(
                f"flag {self._name} cannot be required",
                code=FaultCode.FLAG_CONSTRAINT,
            )
        return self

    def default(self, values, /):
        raise InvalidModelError(
            f"flag {self._name} cannot have a default value",
            code=FaultCode.FLAG_CONSTRAINT,
        )

    def validate(self, validator, /):
        raise InvalidModelError(
            f"flag {self._name} cannot be validated",
            code=FaultCode.FLAG_CONSTRAINT,
        )


class Option(Entry):
    """
    Named switch taking one value per occurrence.

    Values are given as "--output=a.out", "--output a.out" or "-o a.out".
    Options are optional unless required() is called; a repeating option
    collects every occurrence in order.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "tag",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
        "validators",
        "triggers",
    )

    __displayable__ = (
        "name",
        "short",
        "long",
        "tag",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
    )

    def __new__(
            cls,
            *forms,
            description=Unset,
            name=Unset,
            tag="value",
            required=False,
            repeating=False,
            default=Unset,
    ):
        metadata = {
            "forms": forms,
            "name": name,
            "description": description,
            "tag": _sanitize_tag(cls, tag),
            "is_repeating": bool(repeating),
            "is_required": bool(required),
            "defaults": _sanitize_defaults(cls, default),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        self._populate(metadata)
        return self


class Argument(Entry):
    """
    Positional entry filled in declaration order.

    Arguments are required unless optional() is used or a default is given
    (default= or default()); an explicit required= wins. A repeating
    argument must be the last one and absorbs every remaining positional
    token.
    """

    __introspectable__ = (
        "name",
        "tag",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
        "validators",
        "triggers",
    )

    __displayable__ = (
        "name",
        "tag",
        "description",
        "is_repeating",
        "is_required",
        "defaults",
    )

    def __new__(
            cls,
            name,
            /,
            description=Unset,
            *,
            tag=Unset,
            required=Unset,
            repeating=False,
            default=Unset,
    ):
        defaults = _sanitize_defaults(cls, default)
        metadata = {
            "name": _sanitize_name(cls, name),
            "description": description,
            "tag": _sanitize_tag(cls, coalesce(tag, name)),
            "is_repeating": bool(repeating),
            "is_required": bool(coalesce(required, not defaults)),
            "defaults": defaults,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._populate(metadata)
        return self


def flag(*args, **kwargs):
    """
    Decorator/factory for a Flag with a bound trigger.

    Usage
        @flag("-v", "--verbose", repeating=True)
        def on_verbose(): ...
    The trigger is called once per occurrence; the decorator returns the Flag.
    """
    flag = Flag(*args, **kwargs)

    @rename("flag")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@flag() must be applied to a callable")
        return flag.trigger(callback)

    return wrapper


def option(*args, **kwargs):
    """
    Decorator/factory for an Option with a bound trigger.

    The trigger receives each value as it is parsed; the decorator returns the Option.
    """
    option = Option(*args, **kwargs)

    @rename("option")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@option() must be applied to a callable")
        return option.trigger(callback)

    return wrapper


def argument(*args, **kwargs):
    argument = Argument(*args, **kwargs)

    @rename("argument")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@argument() must be applied to a callable")
        return argument.trigger(callback)

    return wrapper


__all__ = (
    "Entry",
    "Flag",
    "Option",
    "Argument",
    "flag",
    "option",
    "argument",
)

del EntryType
