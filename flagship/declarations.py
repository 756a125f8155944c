"""
Flagship declarations (the schema model the resolution pipeline runs on).

Scope
- Declaration: one declared leaf argument or one declared command, with a
  stable id (pre-order), its aliases, value type, constraints, parent link,
  and the mutable result fields filled in by the later stages.
- Setting: one settings marker (unknown-argument tolerance for a scope).
- declare(): walk a Schema class into ordered declarations and settings.
- check(): every declaration fault of a declaration list, in walk order.

Lifecycle
- Built once per FlagSet. Everything except the result fields (tokens, value,
  provenance, faults, trail, occurrence) is read-only afterwards.
- The parent link is a direct reference; ids are only used for ordering.

Example
    >>> declarations, settings = declare(Flags)
    >>> [declaration.path for declaration in declarations]
    ['verbose', 'string', 'Bar', 'Bar.ints']
"""
import logging
from enum import StrEnum

from .faults import *
from .schema import *
from .schema import SchemaType
from .utils import *
from .utils import RecordType

logger = logging.getLogger(__name__)


class Kind(StrEnum):
    ARGUMENT = "arg"
    COMMAND = "command"


class Declaration(metaclass=RecordType):
    """
    One node of the declaration forest.

    Read-only fields (mirrored)
    - id: position in the pre-order walk.
    - name: attribute name in the schema; path: dotted attribute path.
    - kind: Kind.ARGUMENT or Kind.COMMAND.
    - short/long: aliases of an argument ("" when absent).
    - command: name of a command as typed on the command line.
    - type: the declared type object; value_type: its ValueType, or Unset.
    - descr, required, nonempty, global_, env, delimiter, default.
    - parent: enclosing command declaration, None at the top level.
    - source: the Flag instance or the Command class this was built from.

    Result fields (plain attributes)
    - tokens: bound tokens in positional order.
    - value: typed value (arguments only).
    - provenance: where the value came from (see flagship.coercion.Provenance).
    - faults: faults attached to the declaration itself.
    - trail: human-readable resolution decisions, for debugging.
    - occurrence: matched occurrence of a command (see flagship.boundaries).
    """

    __introspectable__ = (
        "id",
        "name",
        "path",
        "kind",
        "short",
        "long",
        "command",
        "descr",
        "type",
        "value_type",
        "required",
        "nonempty",
        "global_",
        "env",
        "delimiter",
        "default",
        "parent",
        "source",
    )

    __displayable__ = (
        "id",
        "path",
        "kind",
        "formatted",
        "value_type",
        "provenance",
        "value",
    )

    def __init__(self, id, name, source, /, parent=None):
        self._id = id
        self._name = name
        self._source = source
        self._parent = parent
        self._path = name if parent is None else f"{parent.path}.{name}"

        if isinstance(source, Flag):
            self._kind = Kind.ARGUMENT
            self._short = source.short
            self._long = source.long
            self._command = ""
            self._type = source.type
            self._value_type = ValueType.of(source.type)
            self._descr = source.descr
            self._required = source.required
            self._nonempty = source.nonempty
            self._global_ = source.global_
            self._env = coalesce(source.env, "")
            self._delimiter = coalesce(source.delimiter, "")
            self._default = coalesce(source.default, "")
        elif isinstance(source, SchemaType):
            self._kind = Kind.COMMAND
            self._short = self._long = ""
            self._command = coalesce(source.__command__, name.lower())
            self._type = source
            self._value_type = Unset
            self._descr = source.__descr__
            self._required = source.__required__
            self._nonempty = source.__nonempty__
            self._global_ = source.__global__
            self._env = self._delimiter = self._default = ""
        else:
            raise TypeError(f"declaration {name!r} must be built from a flag or a command")

        self.tokens = []
        self.value = self._value_type.zero if self._value_type else None
        self.provenance = Unset
        self.faults = []
        self.trail = []
        self.occurrence = None

    @property
    def formatted(self):
        """argument as typed: "-s" when a short alias exists, else "--long"; commands by name."""
        if self._kind is Kind.COMMAND:
            return self._command
        return f"-{self._short}" if self._short else f"--{self._long}"

    @property
    def depth(self):
        return 0 if self._parent is None else self._parent.depth + 1

    def ancestors(self):
        """enclosing command declarations, innermost first."""
        parent = self._parent
        while parent is not None:
            yield parent
            parent = parent.parent

    def matches(self, alias, /):
        """whether alias names this argument (short or long form)."""
        return bool(alias) and alias in (self._short, self._long)

    def fault(self, exception, /):
        self.faults.append(exception)
        logger.debug("%s: %s", self._path, exception)

    def note(self, message, /, *args, logger=logger):
        """record a resolution decision in the trail and the debug log."""
        self.trail.append(message % args if args else message)
        logger.debug("%s: " + message, self._path, *args)


class Setting(metaclass=RecordType):
    """
    A settings marker attached to a scope (parent None is the top level).
    """

    __introspectable__ = (
        "id",
        "name",
        "path",
        "parent",
        "allow_unknown_arg",
    )

    def __init__(self, id, name, source, /, parent=None):
        self._id = id
        self._name = name
        self._parent = parent
        self._path = name if parent is None else f"{parent.path}.{name}"
        self._allow_unknown_arg = source.allow_unknown_arg


_SUPPORTED = ", ".join(map(str, ValueType))


def check(declarations, settings=(), /):
    """
    Collect every declaration fault, in walk order.

    Sibling uniqueness is tracked per alias: a later sibling reusing a short,
    long or command name is reported against the field that claimed it first.
    An overlong short alias is reported once and never claims the alias.
    """
    faults = []
    shorts, longs, commands = {}, {}, {}

    for declaration in declarations:
        scope = declaration.parent

        if short := declaration.short:
            if (claim := shorts.get((scope, short))) is not None:
                faults.append(DuplicateShortError(
                    f"short argument {short} in {declaration.name} field is already defined in {claim.name} field",
                    declaration=declaration,
                ))
            elif len(short) > 1:
                faults.append(OverlongShortError(
                    f"short argument {short} in {declaration.name} field must be one character long",
                    declaration=declaration,
                ))
            else:
                shorts[scope, short] = declaration

        if long := declaration.long:
            if (claim := longs.get((scope, long))) is not None:
                faults.append(DuplicateLongError(
                    f"long argument {long} in {declaration.name} field is already defined in {claim.name} field",
                    declaration=declaration,
                ))
            else:
                longs[scope, long] = declaration

        if command := declaration.command:
            if (claim := commands.get((scope, command))) is not None:
                faults.append(DuplicateCommandError(
                    f"command {command} in {declaration.name} field is already defined in {claim.name} field",
                    declaration=declaration,
                ))
            else:
                commands[scope, command] = declaration

        if declaration.kind is Kind.ARGUMENT and not declaration.value_type:
            faults.append(UnsupportedTypeError(
                f"invalid type {ValueType.describe(declaration.type)}. Supported types: {_SUPPORTED}",
                declaration=declaration,
            ))

        if declaration.global_:
            if declaration.kind is Kind.COMMAND:
                faults.append(GlobalCommandError(f"command {declaration.command} can't be global", declaration=declaration))
            elif declaration.parent is not None:
                faults.append(NestedGlobalError(f"argument {declaration.formatted} can't be global", declaration=declaration))

    markers = {}
    for setting in settings:
        scope = setting.parent
        if (claim := markers.get(scope)) is not None:
            faults.append(DuplicateSettingsError(
                f"duplicate settings in `{setting.name}` and `{claim.name}` fields",
                setting=setting,
            ))
        else:
            markers[scope] = setting

    return faults


def declare(schema, /):
    """
    Build the declaration forest of a schema.

    Parameters
    - schema: a Schema subclass or an instance of one.

    Returns
    - (declarations, settings): both ordered by the pre-order walk.

    Raises
    - TypeError: schema is not a Schema class or instance.
    - DeclarationError: the first fault reported by check().

    Warns
    - ShadowedAliasWarning: a flag inside a command reuses the alias of a
      top-level global flag (the global flag claims those tokens).
    """
    if isinstance(schema, Schema):
        schema = type(schema)
    if not isinstance(schema, type) or not issubclass(schema, Schema):
        raise TypeError("declare() argument must be a schema class or instance")

    declarations = []
    settings = []

    def walk(container, parent):
        for name, member in container.__members__.items():
            if isinstance(member, Settings):
                settings.append(Setting(len(settings), name, member, parent))
                continue
            declaration = Declaration(len(declarations), name, member, parent)
            declarations.append(declaration)
            if declaration.kind is Kind.COMMAND:
                walk(member, declaration)

    walk(schema, None)
    logger.debug("declared %d fields and %d settings from %s", len(declarations), len(settings), schema.__name__)

    if faults := check(declarations, settings):
        raise faults[0]

    globals_ = [declaration for declaration in declarations if declaration.global_]
    for declaration in declarations:
        if declaration.kind is not Kind.ARGUMENT or declaration.parent is None:
            continue
        for global_ in globals_:
            if shared := ({declaration.short, declaration.long} - {""}) & {global_.short, global_.long}:
                trigger(ShadowedAliasWarning(
                    f"argument {declaration.path} shares {', '.join(sorted(shared))} with global argument {global_.path}",
                    declaration=declaration,
                ))

    return declarations, settings


__all__ = (
    "Kind",
    "Declaration",
    "Setting",
    "check",
    "declare",
)
