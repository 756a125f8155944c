r"""
Flagship declarative schema.

Overview
- Containers
  • Schema: the root of a flag tree. Subclass it and declare members in the body.
  • Command: a nested container matched positionally on the command line.
    Declared as a nested class; class keywords carry its metadata.
- Members
  • Flag: a leaf argument with a short and/or long alias, a value type and
    constraints (default, env, delimiter, required, nonempty, global_).
  • Settings: a per-container marker permitting unknown arguments.
- ValueType: the supported value-type families (scalar and list forms).

Declaring
    >>> class Flags(Schema):
    ...     verbose = Flag("-v", "--verbose", type=bool)
    ...     string = Flag("-s", "--string", default="foo", env="APP_STRING")
    ...
    ...     class Bar(Command, descr="the bar command"):
    ...         ints = Flag("-i", "--ints", type=list[int], delimiter=",")
    ...         settings = Settings(allow_unknown_arg=True)

Members are collected in definition order, nested classes included, which is
the pre-order walk the resolution pipeline relies on. The command name of a
nested class defaults to its lowercased attribute name ("bar" above).

Values
- Flag is a data descriptor: on a schema instance it reads the resolved value,
  or the zero value of its type until a FlagSet writes into the instance.
- Instantiating a Schema instantiates every nested Command, so resolved values
  are reachable as flags.Bar.ints.

Validation highlights
- Names must be shell-style ("-s", "--string"); at most one of each form.
  Alias text is cleaned by dropping every run outside [a-zA-Z0-9-_.].
- default/env/delimiter/descr must be strings (or Unset); empty strings are
  rejected except for default, where "" is the same as no default.
- nonempty defaults to required (a required flag must not be empty), unless
  nonempty=False is given explicitly.
- Type support and alias uniqueness are checked later, when declarations are
  built (see flagship.declarations).
"""
import re
import types
from enum import StrEnum

from rich.text import Text

from .utils import *
from .utils import RecordType


class ValueType(StrEnum):
    """
    supported value types, named after fixed-width integer and float types.

    bool/int/float/str map to BOOL/INT/FLOAT64/STRING; the width-specific
    INT64/UINT/UINT64 members (and every list form) can be passed directly.
    """
    BOOL = "bool"
    INT = "int"
    INT64 = "int64"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT64 = "float64"
    STRING = "string"
    BOOL_LIST = "list[bool]"
    INT_LIST = "list[int]"
    INT64_LIST = "list[int64]"
    UINT_LIST = "list[uint]"
    UINT64_LIST = "list[uint64]"
    FLOAT64_LIST = "list[float64]"
    STRING_LIST = "list[string]"

    @property
    def repeatable(self):
        return self.value.startswith("list[")

    @property
    def scalar(self):
        return ValueType(self.value[5:-1]) if self.repeatable else self

    @property
    def zero(self):
        """fresh zero value (a new list for repeatable types)."""
        if self.repeatable:
            return []
        return {
            ValueType.BOOL: False,
            ValueType.FLOAT64: 0.0,
            ValueType.STRING: "",
        }.get(self, 0)

    @classmethod
    def of(cls, object, /):
        """
        resolve a python type, a list[...] alias, a member or a member value.

        returns Unset when the object names no supported type.
        """
        if isinstance(object, ValueType):
            return object
        if isinstance(object, str):
            try:
                return cls(object)
            except ValueError:
                return Unset
        if isinstance(object, types.GenericAlias):
            if object.__origin__ is list and len(object.__args__) == 1:
                scalar = cls.of(object.__args__[0])
                if scalar and not scalar.repeatable:
                    return cls(f"list[{scalar.value}]")
            return Unset
        return {
            bool: cls.BOOL,
            int: cls.INT,
            float: cls.FLOAT64,
            str: cls.STRING,
        }.get(object, Unset)

    @classmethod
    def describe(cls, object, /):
        """spelling of an arbitrary type object for diagnostics."""
        if isinstance(object, types.GenericAlias | str):
            return str(object)
        return getattr(object, "__name__", repr(object))


def _sanitize_names(cls, metadata, /):
    """
    Internal: split shell-style names into the short and long aliases.

    - "-x" sets the short alias, "--name" the long one; at most one of each.
    - The alias text (dashes stripped) is cleaned by removing every run of
      characters outside [a-zA-Z0-9-_.]; an alias left empty is rejected.
    - Short aliases longer than one character are accepted here and rejected
      by the declaration checks, where the owning field name is known.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    short = long = ""
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not name.startswith("-"):
            raise ValueError(f"{cls.__typename__} names must start with '-' or '--'")

        alias = re.sub(r"[^a-zA-Z0-9-_.]+", "", name.removeprefix("--") if name.startswith("--") else name[1:])
        if not alias:
            raise ValueError(f"{cls.__typename__} name {name!r} has no usable characters")

        if name.startswith("--"):
            if long:
                raise ValueError(f"{cls.__typename__} accepts a single long name")
            long = alias
        else:
            if short:
                raise ValueError(f"{cls.__typename__} accepts a single short name")
            short = alias

    metadata["short"] = short
    metadata["long"] = long


def _sanitize_strings(cls, metadata, /):
    """
    Internal: validate optional string metadata.

    - default: Unset | str; "" is kept and means "no default".
    - env: Unset | str, trimmed, non-empty.
    - delimiter: Unset | str, non-empty, not trimmed (" " is a valid delimiter).
    - descr: Unset | str | Text, trimmed, non-empty; becomes None when Unset.
    """
    if not isinstance(metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")

    if not isinstance(env := metadata["env"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'env' must be a string")
    elif isinstance(env, str) and not (env := env.strip()):
        raise ValueError(f"{cls.__typename__} 'env' cannot be empty")
    metadata["env"] = env

    if not isinstance(delimiter := metadata["delimiter"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'delimiter' must be a string")
    elif isinstance(delimiter, str) and not delimiter:
        raise ValueError(f"{cls.__typename__} 'delimiter' cannot be empty")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Flag(metaclass=RecordType):
    """
    Leaf argument declaration.

    Flag declares how one named argument is matched (short/long aliases),
    typed (ValueType), and constrained (required/nonempty/global_), plus its
    fallbacks (env, then default). As a data descriptor it also stores the
    resolved value on schema instances.

    Properties
    - The names listed in __introspectable__ are read-only views of the
      sanitized metadata.
    - attribute: the attribute name the flag is bound to (set by __set_name__).
    """

    __introspectable__ = (
        "short",
        "long",
        "type",
        "default",
        "env",
        "delimiter",
        "descr",
        "required",
        "nonempty",
        "global_",
        "attribute",
    )

    __displayable__ = (
        "short",
        "long",
        "type",
        "default",
        "env",
        "delimiter",
        "required",
        "nonempty",
        "global_",
    )

    def __init__(
            self,
            *names,
            type=str,
            default=Unset,
            env=Unset,
            delimiter=Unset,
            descr=Unset,
            required=False,
            nonempty=Unset,
            global_=False,
    ):
        """
        Construct a Flag.

        Parameters
        - names: "-x" and/or "--name".
        - type: bool | int | float | str | list[...] | ValueType (checked when
          declarations are built, so an unsupported type fails at parser construction).
        - default: Unset | str, coerced like command-line input.
        - env: Unset | str, environment variable consulted before the default.
        - delimiter: Unset | str, splits each value of a repeatable flag.
        - descr: Unset | str | Text, shown in usage output.
        - required: bool, the flag must be given when its command is present.
        - nonempty: Unset | bool, defaults to required.
        - global_: bool, match the flag inside every command (top level only).
        """
        metadata = {
            "names": names,
            "type": type,
            "default": default,
            "env": env,
            "delimiter": delimiter,
            "descr": descr,
            "required": bool(required),
            "nonempty": bool(coalesce(nonempty, required)),
            "global_": bool(global_),
        }
        _sanitize_names(self.__class__, metadata)
        _sanitize_strings(self.__class__, metadata)
        del metadata["names"]

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._attribute = Unset

    def __set_name__(self, owner, name):
        self._attribute = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._attribute]
        except KeyError:
            pass
        if value_type := ValueType.of(self._type):
            return value_type.zero
        return None

    def __set__(self, instance, value):
        instance.__dict__[self._attribute] = value


class Settings(metaclass=RecordType):
    """
    Per-container settings marker.

    allow_unknown_arg lets arguments that match no declaration pass through
    (they are kept in the command's reconstructed arguments instead of being
    reported). At most one marker per container.
    """

    __introspectable__ = (
        "allow_unknown_arg",
        "attribute",
    )

    def __init__(self, *, allow_unknown_arg=False):
        self._allow_unknown_arg = bool(allow_unknown_arg)
        self._attribute = Unset

    def __set_name__(self, owner, name):
        self._attribute = name


class SchemaType(type):
    """
    Metaclass for Schema/Command containers.

    Responsibilities
    - Collect Flag/Settings members and nested containers in definition order
      into __members__ (inherited members come first).
    - Sanitize the container keywords into dunder attributes:
      command -> __command__, descr -> __descr__, required -> __required__,
      nonempty -> __nonempty__, global_ -> __global__.
    - Provide a compact repr of instances listing member values.
    """

    def __new__(cls, name, bases, namespace, **options):
        members = {}
        for base in reversed(bases):
            members.update(getattr(base, "__members__", {}))
        for key, member in namespace.items():
            if isinstance(member, Flag | Settings | SchemaType):
                members[key] = member

        metadata = {}
        if (command := options.pop("command", Unset)) is not Unset:
            if not isinstance(command, str):
                raise TypeError(f"command {name!r} 'command' must be a string")
            elif not (command := re.sub(r"[^a-zA-Z0-9-_.]+", "", command)):
                raise ValueError(f"command {name!r} 'command' cannot be empty")
            metadata["__command__"] = command
        if (descr := options.pop("descr", Unset)) is not Unset:
            if not isinstance(descr, str | Text):
                raise TypeError(f"command {name!r} 'descr' must be a string")
            elif isinstance(descr, str) and not (descr := descr.strip()):
                raise ValueError(f"command {name!r} 'descr' cannot be empty")
            metadata["__descr__"] = descr
        for option, dunder in (("required", "__required__"), ("nonempty", "__nonempty__"), ("global_", "__global__")):
            if option in options:
                metadata[dunder] = bool(options.pop(option))
        if options:
            raise TypeError(f"command {name!r} got unexpected keywords: {', '.join(sorted(options))}")

        return super().__new__(cls, name, bases, namespace | metadata | {
            "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            "__members__": types.MappingProxyType(members),
        })


class _Container:
    __command__ = Unset
    __descr__ = None
    __required__ = False
    __nonempty__ = False
    __global__ = False

    def __init__(self):
        for name, member in type(self).__members__.items():
            if isinstance(member, SchemaType):
                setattr(self, name, member())

    def __rich_repr__(self):
        for name, member in type(self).__members__.items():
            if not isinstance(member, Settings):
                yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(f'{name}={value!r}' for name, value in self.__rich_repr__())})"


class Schema(_Container, metaclass=SchemaType):
    """
    Root container of a flag tree.

    Subclass it and declare Flag, Settings and nested Command members. An
    instance is the caller-owned structure a FlagSet writes values into.
    """


class Command(_Container, metaclass=SchemaType):
    """
    Nested container matched positionally as a sub-command.

    Class keywords
    - command: name typed on the command line (defaults to the lowercased
      attribute name of the nested class).
    - descr: short description for usage output.
    - required: the command must appear on the command line.
    - nonempty: when present, the command must own at least one argument.
    - global_: rejected when declarations are built (commands are never global).
    """


__all__ = (
    "ValueType",
    "Flag",
    "Settings",
    "Schema",
    "Command",
)
