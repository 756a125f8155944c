"""
Flagship flag sets.

FlagSet runs the whole resolution pipeline for one schema and one argv, writes
the resolved values into the schema instance, and publishes the results.

Pipeline
    declare -> resolve -> classify -> bind -> settle -> validate -> write

Published API
- lookup(name): declaration by dotted attribute path ("Bar.Qux.string").
- lookup_alias(alias, command=""): argument declaration by alias, optionally
  inside a command given by dotted path.
- arguments(name): bound values of an argument, or the reconstructed argument
  list of a command; None when unknown or absent from argv.
- value(name): typed value of an argument.
- declarations, errors, occurrences, tokens, settings, schema, argv.

Faults
- A malformed schema fails the construction (TypeError, DeclarationError).
- User-input faults never raise: they are collected in errors.

Threading
- A schema instance is written in place; parsing the same instance from two
  threads at once is not supported.

Example
    >>> flags = FlagSet(Flags, ["./app", "-s=foo", "bar", "-i", "1,2"])
    >>> flags.value("string"), flags.schema.Bar.ints
    ('foo', [1, 2])
    >>> flags.arguments("Bar")
    ['bar', '-i=1,2']
"""
import logging
import os
import sys

from .binder import *
from .boundaries import *
from .coercion import *
from .declarations import *
from .faults import *
from .schema import *
from .tokens import *
from .utils import *

logger = logging.getLogger(__name__)


class FlagSet:
    """
    Resolved view of one command line against one schema.

    Parameters
    - schema: Schema subclass (instantiated here) or a Schema instance (written in place).
    - argv: Unset | Iterable[str], program name first (defaults to sys.argv).
    - environ: Unset | Mapping[str, str] (defaults to os.environ).

    Raises
    - TypeError: schema is not a Schema class or instance, argv holds non-strings.
    - DeclarationError: the first declaration fault of the schema.
    """

    def __init__(self, schema, /, argv=Unset, *, environ=Unset):
        if isinstance(schema, type) and issubclass(schema, Schema):
            schema = schema()
        if not isinstance(schema, Schema):
            raise TypeError("flag set 'schema' must be a schema class or instance")

        argv = list(coalesce(argv, sys.argv))
        if not all(isinstance(argument, str) for argument in argv):
            raise TypeError("flag set 'argv' must contain only strings")

        self._schema = schema
        self._argv = argv
        self._declarations, self._settings = declare(schema)
        self._occurrences = resolve(self._declarations, argv)
        self._tokens = classify(argv, self._occurrences)

        bind(self._declarations, self._tokens)
        environ = coalesce(environ, os.environ)
        for declaration in self._declarations:
            settle(declaration, environ)
        validate(self._declarations, self._tokens, self._settings)

        self._write()
        logger.debug("resolved %d arguments with %d errors", len(argv), len(self.errors))

    def _write(self):
        for declaration in self._declarations:
            if declaration.kind is not Kind.ARGUMENT:
                continue
            *parents, name = declaration.path.split(".")
            target = self._schema
            for parent in parents:
                target = getattr(target, parent)
            value = declaration.value
            setattr(target, name, list(value) if isinstance(value, list) else value)

    def lookup(self, name, /):
        """declaration by dotted attribute path, or None."""
        if not name:
            return None
        result = None
        for segment in name.split("."):
            for declaration in self._declarations:
                if declaration.parent is result and declaration.name == segment:
                    result = declaration
                    break
            else:
                return None
        return result

    def lookup_alias(self, alias, /, command=""):
        """
        argument declaration by alias ("s", "string", "-s" or "--string").

        command is the dotted path of the enclosing command ("" for the top
        level); an unknown command yields None.
        """
        if not (alias := alias.lstrip("-")):
            return None
        parent = None
        if command and (parent := self.lookup(command)) is None:
            return None
        for declaration in self._declarations:
            if declaration.kind is Kind.ARGUMENT and declaration.parent is parent and declaration.matches(alias):
                return declaration
        return None

    def arguments(self, name, /):
        """
        bound arguments of a declaration.

        - argument: every bound value, in positional order (["foo", "bar"] for
          `-f=foo -f=bar`).
        - command: its name, then its own arguments re-rendered as "-name=value"
          (or "-name") and tolerated bare tokens. Unknown arguments and the
          ranges of nested commands are left out.
        - None when the name is unknown or nothing was bound.
        """
        declaration = self.lookup(name)
        if declaration is None or not declaration.tokens:
            return None
        if declaration.kind is Kind.ARGUMENT:
            return [token.value for token in declaration.tokens]
        return [
            token.rendered for token in declaration.tokens
            if not any(isinstance(fault, UnknownArgumentError) for fault in token.faults)
        ]

    def value(self, name, /):
        """typed value of an argument (None for commands and unknown names)."""
        declaration = self.lookup(name)
        if declaration is None or declaration.kind is not Kind.ARGUMENT:
            return None
        return list(declaration.value) if isinstance(declaration.value, list) else declaration.value

    @property
    def errors(self):
        """
        every fault, ordered by declaration.

        for each declaration: its own faults, then the faults of its tokens
        (unknown arguments for a command); top-level unknown arguments last.
        """
        faults = []
        for declaration in self._declarations:
            faults.extend(declaration.faults)
            for token in declaration.tokens:
                if declaration.kind is Kind.COMMAND and token.declaration is not None:
                    continue
                faults.extend(token.faults)
        for token in self._tokens:
            if token.owner is None and token.declaration is None:
                faults.extend(token.faults)
        return faults

    @property
    def declarations(self):
        return list(self._declarations)

    @property
    def settings(self):
        return list(self._settings)

    @property
    def occurrences(self):
        return list(self._occurrences)

    @property
    def tokens(self):
        return list(self._tokens)

    @property
    def argv(self):
        return list(self._argv)

    @property
    def schema(self):
        return self._schema

    def __rich_repr__(self):
        yield "argv", self._argv
        yield "schema", self._schema
        yield "errors", [str(fault) for fault in self.errors]

    def __repr__(self):
        return f"FlagSet({type(self._schema).__name__}, {self._argv!r})"


__all__ = (
    "FlagSet",
)
