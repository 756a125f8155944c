r"""
Flagship value coercion and validation.

coerce()
- Turns one string into a typed value for a ValueType (its scalar form for
  repeatable types). Failures raise UnparsableValueError with the text
  "failed to parse 'X' as <type>".
- bool accepts exactly "true" and "false".
- int/int64 are 64-bit signed, uint/uint64 64-bit unsigned; base-10 digits
  only, with an optional sign for the signed family.
- float64 takes ASCII spellings only, without surrounding whitespace or
  digit-group underscores.
- An empty string on a numeric type yields Unset (nothing to apply).

settle()
- Resets the value to the zero value, then applies every bound token in
  positional order (last wins for scalars, append for repeatable types):
  • a bare bool argument ("-b") means "true";
  • an empty value is a MissingValueError except for `--string=` (an explicit
    empty string) and a non-empty bool;
  • a token carrying a fault is skipped;
  • a repeatable type with a delimiter splits the value, trims each part and
    drops empty parts ("1,,2," gives [1, 2]).
- A single unparsable piece is reported on its token; valid pieces stay applied.
- With no bound token: the environment variable (when set, even to ""), then a
  non-empty default, both split like argument values. Otherwise the value
  stays at its zero value with provenance UNSET.

validate()
- Runs after every declaration is settled:
  • a required command that was never typed; a nonempty command typed with
    no argument of its own (global arguments do not count);
  • nonempty arguments with an empty bound value, then required arguments
    without a bound token unless the environment or default supplied a value.
    Arguments and commands nested in a command that was never typed are skipped;
  • argument and unnamed tokens that matched nothing, unless the nearest
    settings marker of their scope allows unknown arguments.
"""
import copy
import logging
import re
from enum import StrEnum

from .declarations import *
from .faults import *
from .schema import *
from .tokens import *
from .utils import *

logger = logging.getLogger(__name__)


class Provenance(StrEnum):
    ARGUMENT = "arg"
    ENVIRONMENT = "env"
    DEFAULT = "default"
    UNSET = "unset"


_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")

_BOUNDS = {
    ValueType.INT: (_SIGNED, -2 ** 63, 2 ** 63 - 1),
    ValueType.INT64: (_SIGNED, -2 ** 63, 2 ** 63 - 1),
    ValueType.UINT: (_UNSIGNED, 0, 2 ** 64 - 1),
    ValueType.UINT64: (_UNSIGNED, 0, 2 ** 64 - 1),
}


def coerce(value_type, text, /):
    """
    Convert text to the scalar form of value_type.

    Returns
    - bool | int | float | str, or Unset for an empty numeric text.

    Raises
    - UnparsableValueError: text is not a valid spelling of the type.
    """
    scalar = ValueType.of(value_type).scalar
    match scalar:
        case ValueType.STRING:
            return text
        case ValueType.BOOL:
            if text in ("true", "false"):
                return text == "true"
        case ValueType.FLOAT64:
            if not text:
                return Unset
            if text.isascii() and text == text.strip() and "_" not in text:
                try:
                    return float(text)
                except ValueError:
                    pass
        case _:
            if not text:
                return Unset
            pattern, low, high = _BOUNDS[scalar]
            if pattern.fullmatch(text) and low <= (number := int(text)) <= high:
                return number
    raise UnparsableValueError(f"failed to parse '{text}' as {scalar}", value=text, type=scalar)


def _apply(declaration, text, holder):
    """coerce text (split on the delimiter when repeatable) into declaration.value."""
    value_type = declaration.value_type
    pieces = [text]
    if declaration.delimiter and value_type.repeatable:
        pieces = [piece for piece in map(str.strip, text.split(declaration.delimiter)) if piece]

    for piece in pieces:
        try:
            value = coerce(value_type, piece)
        except UnparsableValueError as exception:
            holder.fault(copy.replace(exception, declaration=declaration))
            continue
        if value is Unset:
            continue
        if value_type.repeatable:
            declaration.value.append(value)
        else:
            declaration.value = value
        declaration.note("coerced %r to %r", piece, value, logger=logger)


def settle(declaration, environ, /):
    """
    Resolve the typed value and provenance of one argument declaration.

    Commands are left untouched. environ is any mapping of environment
    variables (os.environ by default in FlagSet).
    """
    if declaration.kind is not Kind.ARGUMENT:
        return declaration

    scalar = declaration.value_type.scalar
    declaration.value = declaration.value_type.zero
    declaration.provenance = Provenance.UNSET

    for token in declaration.tokens:
        declaration.provenance = Provenance.ARGUMENT

        if scalar is ValueType.BOOL and not token.value and not token.unset:
            token.value = "true"
            token.note("bare bool argument means true", logger=logger)

        if not token.value:
            if (
                (scalar is ValueType.BOOL and token.unset) or
                (scalar is ValueType.STRING and not token.unset) or
                scalar not in (ValueType.BOOL, ValueType.STRING)
            ):
                token.fault(MissingValueError(
                    f"argument {token.dash}{token.name} needs a value",
                    declaration=declaration,
                    token=token,
                ))

        if token.faults:
            continue
        _apply(declaration, token.value, token)

    if declaration.tokens:
        return declaration

    if declaration.env and declaration.env in environ:
        declaration.provenance = Provenance.ENVIRONMENT
        declaration.note("fallback to $%s", declaration.env, logger=logger)
        _apply(declaration, environ[declaration.env], declaration)
    elif declaration.default:
        declaration.provenance = Provenance.DEFAULT
        declaration.note("fallback to the default %r", declaration.default, logger=logger)
        _apply(declaration, declaration.default, declaration)
    else:
        declaration.note("unset", logger=logger)

    return declaration


def _tolerated(occurrence, markers):
    """nearest settings marker from the owning occurrence up to the top level."""
    scopes = [scope.declaration for scope in occurrence.lineage()] if occurrence is not None else []
    for scope in (*scopes, None):
        if (setting := markers.get(scope)) is not None:
            return setting.allow_unknown_arg
    return False


def validate(declarations, tokens, settings=(), /):
    """
    Attach constraint faults to declarations and unknown-argument faults to tokens.

    Returns
    - every fault attached by this call, in detection order.
    """
    faults = []

    def report(holder, exception):
        holder.fault(exception)
        faults.append(exception)

    for declaration in declarations:
        parent = declaration.parent
        if parent is not None and not parent.occurrence.found:
            continue

        if declaration.kind is Kind.COMMAND:
            found = declaration.occurrence.found
            if declaration.required and not found:
                report(declaration, RequiredCommandError(
                    f"command {declaration.command} is required",
                    declaration=declaration,
                ))
            elif declaration.nonempty and found and not any(
                token.kind in (TokenKind.ARGUMENT, TokenKind.UNNAMED) for token in declaration.tokens
            ):
                report(declaration, EmptyCommandError(
                    f"command {declaration.command} needs an argument",
                    declaration=declaration,
                ))
            continue

        if declaration.nonempty and any(not token.value for token in declaration.tokens):
            report(declaration, EmptyValueError(
                f"argument {declaration.formatted} needs a value",
                declaration=declaration,
            ))
            continue

        if declaration.required and not declaration.tokens:
            if declaration.provenance in (Provenance.DEFAULT, Provenance.ENVIRONMENT):
                declaration.note("required but supplied by %s", declaration.provenance, logger=logger)
                continue
            message = f"argument {declaration.formatted} is required"
            if parent is not None:
                message += f" for {parent.command} command"
            report(declaration, RequiredArgumentError(message, declaration=declaration))

    markers = {setting.parent: setting for setting in reversed(settings)}
    for token in tokens:
        if token.kind not in (TokenKind.ARGUMENT, TokenKind.UNNAMED) or token.declaration is not None:
            continue
        if _tolerated(token.owner, markers):
            token.note("unknown argument tolerated by settings", logger=logger)
            continue
        message = f"unknown argument {token.formatted}"
        if token.owner is not None:
            message += f" for {token.owner.command} command"
        report(token, UnknownArgumentError(message, token=token))

    return faults


__all__ = (
    "Provenance",
    "coerce",
    "settle",
    "validate",
)
