"""
Flagship application facade.

Wires a schema to a command-line program: policy on faults, automatic help
and version output, and handler callbacks dispatched from resolved flags.

Overview
- Application(schema, name, version, descr, **policy)
  • any_error: raise the first fault of a run.
  • exit_on_error: print every fault of a run (or a declaration fault) and exit 1.
  • auto_version: a true top-level -v/--version prints the version, --vv the
    extended version; exit 0.
  • auto_help: an empty command line or a true top-level -h/--help prints the
    usage; exit 0.
  • preset=Preset.AUTO turns all four on.
  • fancy/colorful shape the rich output; console receives usage/version output.
- @app.handler("Bar", priority=0, exit_on_error=True)
  • registers callback(app, arguments) for a dotted flag name; handlers run in
    ascending priority (registration order breaks ties), and only when the
    flag has arguments.
- invoke(app, prompt) / app.__invoke__(prompt): run once, return the FlagSet.
- install_logging(level): route the package loggers to a rich handler on stderr.

Prompts
- Unset: sys.argv as is.
- str: split with shlex.split; the program name is prepended.
- Iterable[str]: used as the arguments; the program name is prepended.

Customization
- Define __styles__ in __main__ to override any palette entry below.
- Define __prog__ in __main__ to override the program name shown in faults.
"""
import logging
import os.path
import platform
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable
from enum import IntEnum

from rich.console import Console, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .declarations import *
from .faults import *
from .flagset import *
from .schema import *
from .utils import *
from .utils import RecordType

logger = logging.getLogger(__name__)


class Preset(IntEnum):
    AUTO = 1


class Handler(metaclass=RecordType):
    """
    A registered callback for one dotted flag name.

    Calling a handler forwards (application, arguments) to its callback.
    """

    __introspectable__ = (
        "name",
        "callback",
        "priority",
        "exit_on_error",
    )

    def __init__(self, name, callback, /, priority=0, exit_on_error=True):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise TypeError(f"{type(self).__typename__} 'priority' must be an integer")

        self._name = name
        self._callback = callback
        self._priority = priority
        self._exit_on_error = bool(exit_on_error)

    def __call__(self, application, arguments, /):
        return self._callback(application, arguments)


def _schema_name(schema):
    return (schema if isinstance(schema, type) else type(schema)).__name__


def _sanitize_text(name, value):
    if not isinstance(value, str | Text | Unset):
        raise TypeError(f"application '{name}' must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"application '{name}' cannot be empty")
    return value


class Application:
    """
    Command-line program built on a schema.

    Parameters
    - schema: Schema subclass or instance.
    - name: Unset | str (defaults to the basename of sys.argv[0]).
    - version: Unset | str ("v" prefix is dropped on output).
    - descr: Unset | str | Text (shown under the usage line).
    - preset: Unset | Preset.
    - any_error, auto_help, auto_version, exit_on_error, fancy, colorful: bool.
    - console: Unset | rich.console.Console for usage/version output.

    State
    - flagset: FlagSet of the last run, None before the first run.
    """

    def __init__(
            self,
            schema,
            /,
            name=Unset,
            version=Unset,
            descr=Unset,
            *,
            preset=Unset,
            any_error=False,
            auto_help=False,
            auto_version=False,
            exit_on_error=False,
            fancy=False,
            colorful=True,
            console=Unset,
    ):
        if not (isinstance(schema, Schema) or isinstance(schema, type) and issubclass(schema, Schema)):
            raise TypeError("application 'schema' must be a schema class or instance")
        if not isinstance(preset, Preset | Unset):
            raise TypeError("application 'preset' must be a preset")
        if not isinstance(console, Console | Unset):
            raise TypeError("application 'console' must be a rich console")

        if preset is Preset.AUTO:
            any_error = auto_help = auto_version = exit_on_error = True

        name = _sanitize_text("name", name)
        if name is Unset:
            name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else _schema_name(schema).lower()

        self._schema = schema
        self._name = str(name)
        self._version = coalesce(_sanitize_text("version", version), "")
        self._descr = coalesce(_sanitize_text("descr", descr))
        self.any_error = bool(any_error)
        self.auto_help = bool(auto_help)
        self.auto_version = bool(auto_version)
        self.exit_on_error = bool(exit_on_error)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self.console = coalesce(console, Console())
        self.flagset = None
        self._handlers = []

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return self._descr

    @property
    def handlers(self):
        """registered handlers in dispatch order."""
        return sorted(self._handlers, key=lambda handler: handler.priority)

    def handler(self, name, /, *, priority=0, exit_on_error=True):
        """
        Register callback(app, arguments) for a dotted flag name.

        Returns a decorator that wraps the callback into a Handler.
        """

        @rename("handler")
        def wrapper(callback):
            if not callable(callback):
                raise TypeError("@handler() must be applied to a callable")
            self._handlers.append(handler := Handler(name, callback, priority=priority, exit_on_error=exit_on_error))
            return handler

        return wrapper

    def trigger(self, fault, /, **options):
        """surface a fault with this application's presentation options."""
        trigger(fault, tool=self, fancy=self.fancy, colorful=self.colorful, **options)

    def _truthy(self, alias):
        declaration = self.flagset.lookup_alias(alias)
        return declaration is not None and declaration.value is True

    def __invoke__(self, prompt=Unset):
        """
        Parse a command line, apply the policies and dispatch the handlers.

        Returns
        - the FlagSet of the run (also stored as self.flagset).

        Raises
        - TypeError: prompt is not Unset/str/Iterable[str].
        - DeclarationError: malformed schema without exit_on_error.
        - CommandException: first fault with any_error; a handler fault without
          its exit_on_error.
        - SystemExit: help, version and every exit_on_error path.
        """
        if prompt is Unset:
            argv = list(sys.argv)
        elif isinstance(prompt, str):
            argv = [self._name, *shlex.split(prompt)]
        elif isinstance(prompt, Iterable):
            argv = [self._name]
            for item in prompt:
                if not isinstance(item, str):
                    raise TypeError("__invoke__() argument must be a string or an iterable of strings")
                argv.append(item)
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            self.flagset = FlagSet(self._schema, argv)
        except DeclarationError as exception:
            if self.exit_on_error:
                self.trigger(exception, shell=True)
            raise

        if (errors := self.flagset.errors) and (self.any_error or self.exit_on_error):
            logger.debug("%d errors in %r", len(errors), argv)
            if self.exit_on_error:
                self.trigger(CommandExit(errors), shell=True)
            self.trigger(errors[0])

        if self.auto_version:
            extended = self._truthy("vv")
            if extended or self._truthy("v") or self._truthy("version"):
                self.print_version(extended)
                sys.exit(0)

        if self.auto_help:
            if len(argv) == 1 or self._truthy("h") or self._truthy("help"):
                self.print_usage()
                sys.exit(0)

        for handler in self.handlers:
            if not (arguments := self.flagset.arguments(handler.name)):
                continue
            logger.debug("dispatching %s with %r", handler.name, arguments)
            try:
                handler(self, arguments)
            except CommandException as exception:
                fault = exception
            except Exception as exception:
                fault = DelegatedError(str(exception) or type(exception).__name__, handler=handler)
                if not handler.exit_on_error:
                    raise fault from exception
            else:
                continue
            self.trigger(fault, shell=handler.exit_on_error)

        return self.flagset

    def usage(self):
        """
        Render the usage text.

        Layout
        - "usage: NAME [options...] COMMAND [options...]", then the description.
        - options: top-level arguments.
        - commands: commands and their arguments, indented by depth.
        - Right column: description plus "(default X - override $ENV)".

        Palette keys
        - usage-label, program-name, usage-section, description-section,
          section-label, argument-name, command-name, argument-description,
          panel-title.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "section-label": "bold #FFFFFF",
            "argument-name": "bold #22C55E",
            "command-name": "bold #36C5F0",
            "argument-description": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        declarations, _ = declare(self._schema)
        arguments = [declaration for declaration in declarations if declaration.kind is Kind.ARGUMENT]
        commands = [declaration for declaration in declarations if declaration.kind is Kind.COMMAND]

        def left(declaration):
            indent = "  " * (declaration.depth + 1)
            if declaration.kind is Kind.COMMAND:
                return text(indent + declaration.command, styler("command-name"))
            if declaration.short and declaration.long:
                names = f"-{declaration.short}, --{declaration.long}"
            elif declaration.short:
                names = f"-{declaration.short}"
            else:
                names = f"    --{declaration.long}"
            return text(indent + names, styler("argument-name"))

        def right(declaration):
            descr = str(declaration.descr or "")
            if declaration.kind is Kind.COMMAND:
                return text(descr, styler("argument-description"))
            default = declaration.default not in ("", "false") and declaration.default
            if default and declaration.env:
                descr += f" (default {default} - override ${declaration.env})"
            elif default:
                descr += f" (default {default})"
            elif declaration.env:
                descr += f" (default ${declaration.env})"
            return text(descr.strip(), styler("argument-description"))

        header = Text.assemble(text("usage:", styler("usage-label")), " ", text(self._name, styler("program-name")))
        if arguments:
            header.append_text(text(" [options...]", styler("usage-section")))
        if commands:
            header.append_text(text(" COMMAND [options...]", styler("usage-section")))

        renders = [header]
        if self._descr:
            renders.append(Text(""))
            renders.append(text(self._descr, styler("description-section")))

        if toplevel := [declaration for declaration in arguments if declaration.parent is None]:
            table = Table.grid(padding=(0, 2))
            for declaration in toplevel:
                table.add_row(left(declaration), right(declaration))
            renders.extend((Text(""), text("options:", styler("section-label")), table))

        if commands:
            table = Table.grid(padding=(0, 2))
            for declaration in declarations:
                if declaration.kind is Kind.COMMAND or declaration.parent is not None:
                    table.add_row(left(declaration), right(declaration))
            renders.extend((Text(""), text("commands:", styler("section-label")), table))

        renderable = Group(*renders)
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{self._name} usage".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )
        return renderable

    def version(self, extended=False):
        """
        Render the version ("v" prefix dropped), or the name/version/python block.
        """
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",
            "program-version": "bold #00E6FF",
            "version-label": "bold #FFFFFF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        version = self._version.removeprefix("v")
        if not extended:
            return Text(version, styler("program-version"))

        table = Table.grid(padding=(0, 1))
        table.add_row(Text("app name", styler("version-label")), ":", Text(self._name, styler("program-name")))
        table.add_row(Text("app version", styler("version-label")), ":", Text(version, styler("program-version")))
        table.add_row(Text("python version", styler("version-label")), ":", Text(platform.python_version()))
        return table

    def print_usage(self):
        self.console.print(self.usage())

    def print_version(self, extended=False):
        self.console.print(self.version(extended))

    def __repr__(self):
        return f"Application({_schema_name(self._schema)}, {self._name!r})"


def invoke(object, prompt=Unset, /):
    """
    Run an application-like object once.

    - object must implement __invoke__(prompt).
    - Returns whatever __invoke__ returns (a FlagSet for Application).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


def install_logging(level=logging.DEBUG, /):
    """
    Attach a rich handler (stderr) to the "flagship" logger and set its level.

    Calling it again replaces the previously installed handler.
    """
    root = logging.getLogger("flagship")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root.addHandler(handler)
    root.setLevel(level)
    return handler


__all__ = (
    "Preset",
    "Handler",
    "Application",
    "invoke",
    "install_logging",
)
