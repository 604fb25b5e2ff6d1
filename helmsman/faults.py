"""
Helmsman faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the package
  raises. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself for a terminal (“Error: <message>”).
- Three families, distinguishable by type:
  • InvalidModelError: the embedder built an inconsistent command model
    (duplicate names, ordering violations, blank texts, unusable validator
    settings). Raised from add(), constructors and builders. Arguments of the
    wrong Python type raise TypeError instead.
  • InvalidInputError: the user typed something the model does not accept.
    Raised by the parser.
  • ValidationError: a validator rejected collected values (an input error
    that also carries the offending validator).

Options carried by faults
- code: FaultCode (defaults to the class fault code).
- command: the Command level that failed (set by the parser).
- input/index: offending token and its 1-based position in argv.
- entry/validator/suggestion: extra context when relevant.
- colorful: rendering switch used by __rich__.

Integration
- The parser raises faults; Program.evaluate() captures input faults into an
  Outcome; Program.run() renders them with rich and exits.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - model (10xxx)
      • names/forms/texts (1010x), entry constraints (1011x),
        positional ordering (1012x), subcommands (1013x), validators (1014x)
    - input (11xxx)
      • routing (1110x), switches (1111x), positionals (1112x)
    - validation (113xx)

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- model errors (10xxx) ---
    MALFORMED_NAME              = 10101
    DUPLICATED_NAME             = 10102
    DUPLICATED_FORM             = 10103
    BLANK_TEXT                  = 10104
    REQUIRED_WITH_DEFAULT       = 10111
    FLAG_CONSTRAINT             = 10112
    ARGUMENT_ORDER              = 10121
    ARGUMENT_AFTER_REPEATING    = 10122
    SUBCOMMAND_ORDER            = 10123
    DUPLICATED_COMMAND          = 10131
    ATTACHED_COMMAND            = 10132
    UNKNOWN_DEFAULT_COMMAND     = 10133
    INVALID_VALIDATOR           = 10141

    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11102

    # --- switch/flag/option errors (11xxx) ---
    MALFORMED_TOKEN             = 11111
    UNKNOWN_SWITCH              = 11112
    FLAG_ASSIGNMENT             = 11113
    DUPLICATED_SWITCH           = 11115
    OPTION_VALUE_REQUIRED       = 11117
    MISSING_OPTION              = 11119

    # --- positional errors (11xxx) ---
    UNEXPECTED_ARGUMENT         = 11121
    MISSING_ARGUMENT            = 11125

    # --- validation errors (113xx) ---
    INVALID_CHOICE              = 11301
    INVALID_PATH                = 11302
    REJECTED_VALUE              = 11303

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    __fault__ = Unset

    def __init_subclass__(cls, /, code=Unset, **options):
        super().__init_subclass__(**options)
        if code is not Unset:
            cls.__fault__ = FaultCode(code)

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", coalesce(type(self).__fault__))

    @property
    def command(self):
        return self.options.get("command")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        return Text.assemble(
            Text("Error", styler("error-title")),
            ": ",
            Text(self.message, styler("error-message")),
        )

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidModelError(CommandException, ValueError): ...


class InvalidInputError(CommandException): ...
class MalformedTokenError(InvalidInputError, code=FaultCode.MALFORMED_TOKEN): ...
class UnknownSwitchError(InvalidInputError, code=FaultCode.UNKNOWN_SWITCH): ...
class FlagAssignmentError(InvalidInputError, code=FaultCode.FLAG_ASSIGNMENT): ...
class DuplicatedSwitchError(InvalidInputError, code=FaultCode.DUPLICATED_SWITCH): ...
class MissingOptionValueError(InvalidInputError, code=FaultCode.OPTION_VALUE_REQUIRED): ...
class MissingOptionError(InvalidInputError, code=FaultCode.MISSING_OPTION): ...
class MissingArgumentError(InvalidInputError, code=FaultCode.MISSING_ARGUMENT): ...
class UnexpectedArgumentError(InvalidInputError, code=FaultCode.UNEXPECTED_ARGUMENT): ...
class UnknownCommandError(InvalidInputError, code=FaultCode.UNKNOWN_COMMAND): ...
class MissingCommandError(InvalidInputError, code=FaultCode.MISSING_COMMAND): ...


class ValidationError(InvalidInputError, code=FaultCode.REJECTED_VALUE):
    """
    input fault raised by a validator (or by a user callback wrapped in one).

    the offending validator is carried in options["validator"]; user callbacks
    may raise ValidationError("...") without it, the engine fills the command.
    """

    @property
    def validator(self):
        return self.options.get("validator")


__all__ = (
    "FaultCode",
    "CommandException",
    "InvalidModelError",
    "InvalidInputError",
    "MalformedTokenError",
    "UnknownSwitchError",
    "FlagAssignmentError",
    "DuplicatedSwitchError",
    "MissingOptionValueError",
    "MissingOptionError",
    "MissingArgumentError",
    "UnexpectedArgumentError",
    "UnknownCommandError",
    "MissingCommandError",
    "ValidationError",
)
