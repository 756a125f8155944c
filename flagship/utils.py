"""
Flagship utilities (small helpers shared by every layer)

Scope
- Building blocks used by the schema, the resolution pipeline and the facade.
- Public-but-internal leaning: stable for consumers, shaped for the package.

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None and from "".
  • A declared default of "" and no default at all must not be confused, so
    schema metadata defaults to Unset.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; keep None/0/""/[] untouched.

- @rename("name")
  • Stable __name__/__qualname__ for generated callables (cleaner tracebacks).

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers
    are handed out as fresh copies so callers can not mutate parser state.

- RecordType
  • Metaclass giving records a __typename__, mirrored read-only fields and a
    compact repr (also used by rich pretty printing).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
"""
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Characteristics
    - Boolean-false, but distinct from None, 0 and "".
    - repr() is "Unset".
    - Sealed and single-instance: UnsetType() always yields Unset.
    """

    def __or__(self, other, /):
        # Allows `str | Unset` inside isinstance() checks.
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Sentinel for "not provided".

Schema metadata (default, env, delimiter, descr, ...) defaults to Unset so that
an explicitly empty value can still be told apart from an absent one.
"""


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns object unless it is Unset, in which case default is returned.
    Falsey values are preserved: coalesce("", "x") is "".
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated callable a stable __name__ and __qualname__.

    Raises
    - TypeError: name is not a string, the target is not callable, or the
      target's names can not be updated (built-ins).
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(target):
        if not callable(target):
            raise TypeError(f"rename({name!r}) must decorate a callable")
        try:
            target.__name__ = target.__qualname__ = name
        except (AttributeError, TypeError):
            raise TypeError(f"rename({name!r}) can not update {target!r}") from None
        return target

    decorator.__name__ = decorator.__qualname__ = "rename"
    return decorator


def _detach(object):
    """
    Copy containers recursively so records never leak their internal state.

    Tuples and other sequences come back as lists, mappings as dicts and sets
    as sets; strings and records (declarations, tokens) are returned as-is.
    """
    match object:
        case str():
            return object
        case Mapping():
            return {key: _detach(value) for key, value in object.items()}
        case Sequence():
            return [_detach(item) for item in object]
        case Set():
            return {_detach(item) for item in object}
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors self._{name}.

    Container values are copied on every read (see _detach).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


class RecordType(type):
    """
    Metaclass for introspectable records (specs, declarations, tokens, ...).

    Responsibilities
    - Derive __typename__ from the class name (CamelCase split with hyphens,
      lowercased), used in messages such as "flag 'env' must be a string".
    - Expose every name of __introspectable__ as a read-only property mirroring
      the private "_name" field.
    - Provide stable __repr__/__rich_repr__ driven by __displayable__ (falling
      back to __introspectable__), unless the class defines its own.
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
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                fields = ", ".join(f"{field}={value!r}" for field, value in self.__rich_repr__())
                return f"{type(self).__typename__}({fields})"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
