"""
Flagship faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  the pipeline stage that detects it.
- CommandException / CommandWarning: base types carrying message + options. Each
  concrete subclass knows its own title, code and hint, and renders itself with rich.
- CommandExit: groups every collected exception of one run for a single rendering.
- trigger(): central entry point to surface a fault (raise, or print and exit).
- getdoc(): optional documentation lookup provided by the host application.

Taxonomy
- declaration faults (111xx): programmer mistakes in the schema. They also derive
  from ValueError and are raised while the declarations are built.
- argument faults (112xx): a token could not be turned into a value, or matched
  nothing. Collected, never raised by the core.
- constraint faults (113xx): required/nonempty rules evaluated on the final state.
- delegated faults (114xx): raised by user handlers wired through the facade.
- warnings (121xx).

Integration
- The core attaches faults to declarations/tokens and publishes them through
  FlagSet.errors; it is the facade that decides to print, raise or exit.
- str(fault) is always the plain message, e.g. "argument -r is required".
"""
import copy
import inspect
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by pipeline stage)
    - declarations (111xx)
      • DECLARATION_ERROR, DUPLICATE_SHORT, OVERLONG_SHORT, DUPLICATE_LONG,
        DUPLICATE_COMMAND, UNSUPPORTED_TYPE, DUPLICATE_SETTINGS, GLOBAL_COMMAND,
        NESTED_GLOBAL
    - arguments (112xx)
      • ARGUMENT_ERROR, MISSING_VALUE, UNPARSABLE_VALUE, UNKNOWN_ARGUMENT
    - constraints (113xx)
      • CONSTRAINT_ERROR, REQUIRED_ARGUMENT, EMPTY_VALUE, REQUIRED_COMMAND,
        EMPTY_COMMAND
    - delegated (114xx)
      • COMMAND_ERROR, DELEGATED_ERROR
    - warnings (121xx)
      • COMMAND_WARNING, SHADOWED_ALIAS

    normalize() lets the host remap codes to its own labels (see __codes__).
    """
    # --- declaration errors (111xx) ---
    DECLARATION_ERROR   = 11100
    DUPLICATE_SHORT     = 11101
    OVERLONG_SHORT      = 11102
    DUPLICATE_LONG      = 11103
    DUPLICATE_COMMAND   = 11104
    UNSUPPORTED_TYPE    = 11105
    DUPLICATE_SETTINGS  = 11106
    GLOBAL_COMMAND      = 11107
    NESTED_GLOBAL       = 11108

    # --- argument errors (112xx) ---
    ARGUMENT_ERROR      = 11200
    MISSING_VALUE       = 11211
    UNPARSABLE_VALUE    = 11212
    UNKNOWN_ARGUMENT    = 11213

    # --- constraint errors (113xx) ---
    CONSTRAINT_ERROR    = 11300
    REQUIRED_ARGUMENT   = 11311
    EMPTY_VALUE         = 11312
    REQUIRED_COMMAND    = 11313
    EMPTY_COMMAND       = 11314

    # --- delegated errors (114xx) ---
    COMMAND_ERROR       = 11400
    DELEGATED_ERROR     = 11411

    # --- warnings (121xx) ---
    COMMAND_WARNING     = 12100
    SHADOWED_ALIAS      = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    # host overrides win over the built-in palette
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options):
    main = __import__("__main__")
    if prog := getattr(main, "__prog__", None):
        return prog
    if tool := options.get("tool"):
        return tool.name
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "flagship"


def _fragment(fragment, style, colorful):
    if not fragment:
        return Text("")
    if not colorful:
        return Text(str(fragment))
    if isinstance(fragment, Text):
        return fragment
    return Text(str(fragment), style)


def _render(fault, styles, title_style, message_style):
    """
    shared layout for exceptions and warnings: header, message, hint.

    header reads "[ prog — code | title ]"; when fancy, message and hint are
    wrapped in a panel titled by the header.
    """
    colorful = fault.options.get("colorful", True)
    fancy = fault.options.get("fancy", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        return _fragment(fragment, style, colorful)

    header = Text.assemble(
        "[ ",
        text(_prog(fault.options), styler("prog-name")),
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler(message_style))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint")))

    if fancy:
        try:
            width = int((console.width - 4) * fault.options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(message, hint), title=header, title_align="left", width=width)

    return Group(header, message, hint)


class CommandException(Exception):
    """
    base type for every parser error.

    class-level defaults
    - __title__: short lowercase title shown in the header.
    - __fault__: FaultCode of the concrete subclass.
    - __hint__: one actionable sentence.

    options
    - title/code/hint override the class defaults.
    - declaration/token/index/value carry context for renderers and tests.
    - tool/shell/fancy/colorful/deferred are runtime options merged by trigger().
    """
    __title__ = "command error"
    __fault__ = FaultCode.COMMAND_ERROR
    __hint__ = "run with --help to see the accepted arguments"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "title": type(self).__title__,
            "code": type(self).__fault__,
            "hint": type(self).__hint__,
        } | options)

    def __str__(self):
        return self.message

    @property
    def title(self):
        return self.options["title"]

    @property
    def code(self):
        return self.options["code"]

    @property
    def hint(self):
        return self.options["hint"]

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        return _render(self, styles, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeclarationError(CommandException, ValueError):
    __title__ = "invalid declaration"
    __fault__ = FaultCode.DECLARATION_ERROR
    __hint__ = "fix the schema; declaration faults are programming errors"


class DuplicateShortError(DeclarationError):
    __title__ = "duplicate short alias"
    __fault__ = FaultCode.DUPLICATE_SHORT
    __hint__ = "give each flag of the same command a distinct short alias"


class OverlongShortError(DeclarationError):
    __title__ = "overlong short alias"
    __fault__ = FaultCode.OVERLONG_SHORT
    __hint__ = "short aliases are exactly one character; use a double-dash name instead"


class DuplicateLongError(DeclarationError):
    __title__ = "duplicate long alias"
    __fault__ = FaultCode.DUPLICATE_LONG
    __hint__ = "give each flag of the same command a distinct long alias"


class DuplicateCommandError(DeclarationError):
    __title__ = "duplicate command"
    __fault__ = FaultCode.DUPLICATE_COMMAND
    __hint__ = "sibling commands must have distinct names"


class UnsupportedTypeError(DeclarationError):
    __title__ = "unsupported type"
    __fault__ = FaultCode.UNSUPPORTED_TYPE
    __hint__ = "declare one of the supported value types"


class DuplicateSettingsError(DeclarationError):
    __title__ = "duplicate settings"
    __fault__ = FaultCode.DUPLICATE_SETTINGS
    __hint__ = "keep a single settings marker per command"


class GlobalCommandError(DeclarationError):
    __title__ = "global command"
    __fault__ = FaultCode.GLOBAL_COMMAND
    __hint__ = "only top-level flags can be global"


class NestedGlobalError(DeclarationError):
    __title__ = "nested global"
    __fault__ = FaultCode.NESTED_GLOBAL
    __hint__ = "move the global flag to the top level"


class ArgumentError(CommandException):
    __title__ = "invalid argument"
    __fault__ = FaultCode.ARGUMENT_ERROR


class MissingValueError(ArgumentError):
    __title__ = "missing value"
    __fault__ = FaultCode.MISSING_VALUE
    __hint__ = "pass a value inline (--name=value) or as the next token"


class UnparsableValueError(ArgumentError):
    __title__ = "unparsable value"
    __fault__ = FaultCode.UNPARSABLE_VALUE
    __hint__ = "check the value against the declared type"


class UnknownArgumentError(ArgumentError):
    __title__ = "unknown argument"
    __fault__ = FaultCode.UNKNOWN_ARGUMENT


class ConstraintError(CommandException):
    __title__ = "unsatisfied constraint"
    __fault__ = FaultCode.CONSTRAINT_ERROR


class RequiredArgumentError(ConstraintError):
    __title__ = "required argument"
    __fault__ = FaultCode.REQUIRED_ARGUMENT
    __hint__ = "add the argument to the command line"


class EmptyValueError(ConstraintError):
    __title__ = "empty value"
    __fault__ = FaultCode.EMPTY_VALUE
    __hint__ = "this argument does not accept an empty value"


class RequiredCommandError(ConstraintError):
    __title__ = "required command"
    __fault__ = FaultCode.REQUIRED_COMMAND
    __hint__ = "add the command to the command line"


class EmptyCommandError(ConstraintError):
    __title__ = "empty command"
    __fault__ = FaultCode.EMPTY_COMMAND
    __hint__ = "pass at least one argument to the command"


class DelegatedError(CommandException):
    __title__ = "handler failure"
    __fault__ = FaultCode.DELEGATED_ERROR
    __hint__ = "the handler registered for this flag rejected its arguments"


class CommandWarning(Warning):
    """
    base type for non-fatal diagnostics; mirrors CommandException options.
    """
    __title__ = "command warning"
    __fault__ = FaultCode.COMMAND_WARNING
    __hint__ = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "title": type(self).__title__,
            "code": type(self).__fault__,
            "hint": type(self).__hint__,
        } | options)

    def __str__(self):
        return self.message

    @property
    def title(self):
        return self.options["title"]

    @property
    def code(self):
        return self.options["code"]

    @property
    def hint(self):
        return self.options["hint"]

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber code for warnings
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })
        return _render(self, styles, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShadowedAliasWarning(CommandWarning):
    __title__ = "shadowed alias"
    __fault__ = FaultCode.SHADOWED_ALIAS
    __hint__ = "the top-level global flag claims this alias inside every command"


class CommandExit(ExceptionGroup[CommandException]):
    """
    every exception collected during one run, rendered once.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            return _fragment(fragment, style, colorful)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.message.title(), styler("title")),
            " ]"
        )

        renders = []
        for exception in self.exceptions:
            renders.append(copy.replace(exception, **(self.options | {"ratio": 2 / 3})))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - shell=True prints through the module console (stderr); otherwise
      exceptions are raised and warnings go through the warnings module.

    typical options
    - tool, shell, fancy, colorful, deferred, and context such as
      declaration/token/index.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from __main__.__docs__.

    returns None when the host application documents nothing for the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "DeclarationError",
    "DuplicateShortError",
    "OverlongShortError",
    "DuplicateLongError",
    "DuplicateCommandError",
    "UnsupportedTypeError",
    "DuplicateSettingsError",
    "GlobalCommandError",
    "NestedGlobalError",
    "ArgumentError",
    "MissingValueError",
    "UnparsableValueError",
    "UnknownArgumentError",
    "ConstraintError",
    "RequiredArgumentError",
    "EmptyValueError",
    "RequiredCommandError",
    "EmptyCommandError",
    "DelegatedError",
    "CommandWarning",
    "ShadowedAliasWarning",
    "CommandExit",
    "trigger",
    "getdoc",
)
