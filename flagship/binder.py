"""
Flagship binder: attach classified tokens to declarations.

Order
1. Global arguments (top-level, global_) claim every ARGUMENT token whose name
   matches one of their aliases, at any depth. Claimed tokens (and their VALUE
   pair) are detached from their command: owner becomes None.
2. Every found command collects the tokens its occurrence owns directly: its
   own COMMAND token, then ARGUMENT and UNNAMED tokens. VALUE tokens travel
   with their argument and are not collected.
3. Every other argument declaration collects the unclaimed ARGUMENT tokens of
   its exact scope (the parent's occurrence, or the top level) whose name is
   its short or long alias. Arguments of a command that was never typed bind
   nothing.

Matching never stops at the first hit: every occurrence of an alias is kept in
positional order, and last-wins is applied by coercion.
"""
import logging

from .declarations import *
from .tokens import *

logger = logging.getLogger(__name__)


def _claim(declaration, token, reason):
    token.declaration = declaration
    declaration.tokens.append(token)
    declaration.note("%s %s at %d", reason, token.raw, token.index, logger=logger)
    token.note("%s of %s", reason, declaration.path, logger=logger)


def bind(declarations, tokens, /):
    """
    Bind tokens to declarations in place (declaration.tokens, token.declaration).

    Returns
    - the declarations, for chaining.
    """
    arguments = [token for token in tokens if token.kind is TokenKind.ARGUMENT]
    globals_ = [
        declaration for declaration in declarations
        if declaration.kind is Kind.ARGUMENT and declaration.global_ and declaration.parent is None
    ]

    for token in arguments:
        for declaration in globals_:
            if declaration.matches(token.name):
                _claim(declaration, token, "global argument")
                token.owner = None
                if token.pair is not None:
                    token.pair.owner = None
                    token.pair.declaration = declaration
                break

    for declaration in declarations:
        if declaration.kind is Kind.COMMAND:
            occurrence = declaration.occurrence
            if occurrence is None or not occurrence.found:
                continue
            for token in tokens:
                if token.owner is occurrence and token.kind in (TokenKind.COMMAND, TokenKind.ARGUMENT, TokenKind.UNNAMED):
                    declaration.tokens.append(token)
            declaration.note("owns %d tokens", len(declaration.tokens), logger=logger)
            continue

        if declaration in globals_:
            continue

        scope = None
        if declaration.parent is not None:
            scope = declaration.parent.occurrence
            if scope is None or not scope.found:
                continue

        for token in arguments:
            if token.owner is scope and token.declaration is None and declaration.matches(token.name):
                _claim(declaration, token, "matched argument")

    return declarations


__all__ = (
    "bind",
)
