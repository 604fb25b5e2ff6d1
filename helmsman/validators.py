"""
Helmsman validators: post-parse value checks attached to options and arguments.

Overview
- Validator: abstract capability. validate(entry, values) receives the entry and
  its complete collected value list (defaults included) and either returns or
  raises ValidationError naming the entry and the violated constraint.
- ChoicesValidator: whitelist membership, with a "did you mean" hint.
- PathValidator: filesystem predicates (existence, file vs directory).
- DelegateValidator: user callback that raises ValidationError itself
  (whole batch or one value at a time).
- PredicateValidator: user boolean predicate plus a message.

Chains
- Entries keep validators in declaration order; the parser runs them in that
  order and the first failure aborts the parse.
"""
import enum
import pathlib
from abc import ABC, abstractmethod
from collections.abc import Iterable

from .faults import FaultCode, InvalidModelError, ValidationError
from .utils import Unset, nearest


def _describe(entry):
    return f"{type(entry).__typename__} {entry.name}"


class Validator(ABC):
    @abstractmethod
    def validate(self, entry, values, /):
        raise NotImplementedError


class ChoicesValidator(Validator):
    """
    Accept only values from a fixed whitelist.

    On failure the message lists every accepted value and, when one is close
    enough, suggests it: "option mode must be one of: fast, slow (did you mean 'fast'?)".
    """

    def __init__(self, choices, /):
        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError("ChoicesValidator() argument must be an iterable of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("ChoicesValidator() choices must be strings")
            if choice in sanitized:
                raise InvalidModelError(
                    "ChoicesValidator() choices cannot contain duplicates",
                    code=FaultCode.INVALID_VALIDATOR,
                )
            sanitized.append(choice)
        if not sanitized:
            raise InvalidModelError(
                "ChoicesValidator() choices cannot be empty",
                code=FaultCode.INVALID_VALIDATOR,
            )
        self._choices = tuple(sanitized)

    @property
    def choices(self):
        return self._choices

    def validate(self, entry, values, /):
        for value in values:
            if value in self._choices:
                continue
            message = f"{_describe(entry)} must be one of: {', '.join(self._choices)}"
            if suggestion := nearest(value, self._choices):
                message += f" (did you mean {suggestion!r}?)"
            raise ValidationError(
                message,
                code=FaultCode.INVALID_CHOICE,
                validator=self,
                entry=entry,
                input=value,
                suggestion=suggestion,
            )

    def __repr__(self):
        return f"{type(self).__name__}({list(self._choices)!r})"


class PathKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


class PathValidator(Validator):
    """
    Check every value as a filesystem path.

    Parameters
    - exists: Unset | bool
      True requires the path to exist, False requires it to be absent.
    - kind: Unset | PathKind
      Require the path to be an existing file or an existing directory.
    """

    def __init__(self, exists=Unset, kind=Unset):
        if not isinstance(exists, bool | Unset):
            raise TypeError("PathValidator() 'exists' must be a boolean")
        if not isinstance(kind, PathKind | Unset):
            raise TypeError("PathValidator() 'kind' must be a PathKind")
        if exists is Unset and kind is Unset:
            raise InvalidModelError(
                "PathValidator() requires 'exists' or 'kind'",
                code=FaultCode.INVALID_VALIDATOR,
            )
        if exists is False and kind is not Unset:
            raise InvalidModelError(
                "PathValidator() cannot require the kind of a missing path",
                code=FaultCode.INVALID_VALIDATOR,
            )
        self._exists = exists
        self._kind = kind

    def validate(self, entry, values, /):
        what = "file or directory" if self._kind is Unset else self._kind.value
        for value in values:
            path = pathlib.Path(value)
            if self._exists is not Unset and path.exists() != self._exists:
                raise ValidationError(
                    "%s value must point to a %s that %s" % (
                        _describe(entry), what, "exists" if self._exists else "does not exist"
                    ),
                    code=FaultCode.INVALID_PATH,
                    validator=self,
                    entry=entry,
                    input=value,
                )
            match self._kind:
                case PathKind.FILE:
                    matched = path.is_file()
                case PathKind.DIRECTORY:
                    matched = path.is_dir()
                case _:
                    matched = True
            if matched:
                continue
            raise ValidationError(
                f"value specified in {_describe(entry)} must be a {what}",
                code=FaultCode.INVALID_PATH,
                validator=self,
                entry=entry,
                input=value,
            )

    def __repr__(self):
        return f"{type(self).__name__}(exists={self._exists!r}, kind={self._kind!r})"


class DelegateValidator(Validator):
    """
    Delegate validation to a user callback.

    - each=False: callback(entry, values) is called once with the whole list.
    - each=True: callback(entry, value) is called for every value.
    The callback signals failure by raising ValidationError; the validator is
    attached to the fault when the callback did not set one.
    """

    def __init__(self, callback, /, *, each=False):
        if not callable(callback):
            raise TypeError("DelegateValidator() argument must be callable")
        self._callback = callback
        self._each = bool(each)

    def validate(self, entry, values, /):
        try:
            if self._each:
                for value in values:
                    self._callback(entry, value)
            else:
                self._callback(entry, list(values))
        except ValidationError as fault:
            if fault.validator is not None:
                raise
            raise fault.__replace__(validator=self, entry=entry) from fault

    def __repr__(self):
        return f"{type(self).__name__}({self._callback!r}, each={self._each!r})"


class PredicateValidator(Validator):
    def __init__(self, predicate, message, /, *, each=True):
        if not callable(predicate):
            raise TypeError("PredicateValidator() first argument must be callable")
        if not isinstance(message, str) or not (message := message.strip()):
            raise TypeError("PredicateValidator() message must be a non-empty string")
        self._predicate = predicate
        self._message = message
        self._each = bool(each)

    def validate(self, entry, values, /):
        for batch in (values if self._each else [list(values)]):
            if not self._predicate(batch):
                raise ValidationError(
                    f"{_describe(entry)} {self._message}",
                    validator=self,
                    entry=entry,
                    input=batch,
                )

    def __repr__(self):
        return f"{type(self).__name__}({self._predicate!r}, {self._message!r}, each={self._each!r})"


__all__ = (
    "Validator",
    "ChoicesValidator",
    "PathKind",
    "PathValidator",
    "DelegateValidator",
    "PredicateValidator",
)
