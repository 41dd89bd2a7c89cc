"""
Pennant faults (errors raised by values and flag sets) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every registry fault.
  Codes are grouped by domain so logs and searches stay predictable.
- CoercionError: the plain failure of a value adapter turning text into a value.
- FlagException and subclasses: registry faults that carry a message + options
  and know how to render and surface themselves.
- ParseAbort: the unrecoverable fault raised under the abort policy.
- trigger(): central entry point to surface any fault.

Taxonomy
- declaration faults (DeclarationError): a flag set was built wrongly
  (empty or duplicated name, bad or duplicated shortcut). Always raised,
  whatever the error-handling policy, because they are program bugs.
- parse faults (ParseError): the user typed something wrong. They are written
  to the flag set's output as one line, followed by the usage text, and then
  handed to the flag set's error-handling policy.
- help (HelpRequested): the user asked for help with an unregistered --help/-h.
  Only the usage text is written; it is not a ParseError so callers can tell
  "asked for help" from "made a mistake".

Integration
- FlagSet.trigger(fault, **ctx) merges the console, usage callback and styling
  into the fault via copy.replace() and lets the fault surface itself.
- Host applications may override the palette through a __styles__ mapping in
  __main__ (only used when the flag set is colorful).
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.segment import Segments
from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - parsing (211xx)
      • BAD_SYNTAX, UNDEFINED_FLAG, MISSING_ARGUMENT, INVALID_BOOLEAN, INVALID_VALUE
    - programmatic access (2112x)
      • UNKNOWN_FLAG
    - help (22xxx)
      • HELP_REQUESTED
    - declarations (23xxx)
      • EMPTY_NAME, REDEFINED_FLAG, INVALID_SHORTCUT, REUSED_SHORTCUT
    """
    # --- parse errors (21xxx) ---
    BAD_SYNTAX       = 21101
    UNDEFINED_FLAG   = 21102
    MISSING_ARGUMENT = 21103
    INVALID_BOOLEAN  = 21111
    INVALID_VALUE    = 21112

    # --- programmatic access (21xxx) ---
    UNKNOWN_FLAG     = 21121

    # --- help (22xxx) ---
    HELP_REQUESTED   = 22101

    # --- declaration errors (23xxx) ---
    EMPTY_NAME       = 23101
    REDEFINED_FLAG   = 23102
    INVALID_SHORTCUT = 23103
    REUSED_SHORTCUT  = 23104


class CoercionError(ValueError):
    """
    raised by a value adapter when text cannot become a value.

    the message is short and context-free ('parsing "x": invalid syntax');
    the registry adds the flag and token when it wraps the error.
    """


def echo(console, text, /):
    """
    write one Text line verbatim.

    Console.print() expands tabs inside Text; rendering to segments first keeps
    every character of the caller's text as given.
    """
    console.print(Segments(text.render(console, end="\n")))


class FlagException(Exception):
    code = None
    __style__ = "error-message"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "error-message": "bold #FF4DA6",  # friendly pinky message
            "help-message": "bold #00E5FF",  # neon cyan for help
            "declaration-message": "bold #FFB400",  # amber for programmer errors
        } | getattr(main, "__styles__", {}))

        style = type(self).__style__ if self.options.get("colorful") else ""
        return Text(self.message, styles[style] if style else "")

    def __trigger__(self):
        echo(self.options["console"], self.__rich__())
        self.options["usage"]()
        raise self from self.__cause__

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class ParseError(FlagException): ...
class BadSyntaxError(ParseError):
    code = FaultCode.BAD_SYNTAX
class UndefinedFlagError(ParseError):
    code = FaultCode.UNDEFINED_FLAG
class MissingArgumentError(ParseError):
    code = FaultCode.MISSING_ARGUMENT
class InvalidBooleanError(ParseError):
    code = FaultCode.INVALID_BOOLEAN
class InvalidValueError(ParseError):
    code = FaultCode.INVALID_VALUE


class UnknownFlagError(FlagException):
    code = FaultCode.UNKNOWN_FLAG


class HelpRequested(FlagException):
    """
    the user asked for help (--help or -h without a matching flag).

    surfacing it writes the usage text only; no diagnostic line.
    """
    code = FaultCode.HELP_REQUESTED
    __style__ = "help-message"

    def __trigger__(self):
        self.options["usage"]()
        raise self from None


class DeclarationError(FlagException):
    """
    a flag set was declared wrongly; always fatal, never policy-gated.

    surfacing it writes the diagnostic line but no usage text.
    """
    __style__ = "declaration-message"

    def __trigger__(self):
        echo(self.options["console"], self.__rich__())
        raise self from None


class EmptyNameError(DeclarationError):
    code = FaultCode.EMPTY_NAME
class RedefinedFlagError(DeclarationError):
    code = FaultCode.REDEFINED_FLAG
class InvalidShortcutError(DeclarationError):
    code = FaultCode.INVALID_SHORTCUT
class ReusedShortcutError(DeclarationError):
    code = FaultCode.REUSED_SHORTCUT


class ParseAbort(BaseException):
    """
    unrecoverable stop raised by flag sets using the abort policy.

    derives from BaseException so that ordinary `except Exception` handlers do
    not swallow it; the original fault is kept in .fault and as __cause__.
    """

    def __init__(self, fault, /):
        super().__init__(fault)
        self.fault = fault


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see FlagException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.

    typical options
    - console (rich Console), usage (zero-argument callable), colorful, flagset,
      and any other context a handler may want (token, flag, text).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CoercionError",
    "FlagException",
    "ParseError",
    "BadSyntaxError",
    "UndefinedFlagError",
    "MissingArgumentError",
    "InvalidBooleanError",
    "InvalidValueError",
    "UnknownFlagError",
    "HelpRequested",
    "DeclarationError",
    "EmptyNameError",
    "RedefinedFlagError",
    "InvalidShortcutError",
    "ReusedShortcutError",
    "ParseAbort",
    "trigger",
)
