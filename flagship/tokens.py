"""
Flagship token classification.

Every argv entry becomes exactly one Token:
- PROGRAM: argv[0].
- COMMAND: the match index of a found occurrence.
- ARGUMENT: a dash-prefixed token ("-s", "--string", "-s=foo").
- VALUE: the bare token right after a valueless ARGUMENT, consumed as its value.
- UNNAMED: any other bare token.

Classification is type-agnostic: a bool argument followed by a bare token
consumes it exactly like a string argument does. Coercion decides later.

Details
- name is the raw text with leading dashes and surrounding whitespace removed;
  dash is "--", "-" or "".
- "=" splits name and value only when it comes before the first quote, so
  `--text="a=b"` names "text" while `"a=b"` style payloads stay intact.
- One layer of matching quotes is trimmed from values ('"x"' and "'x'").
- unset marks an explicitly empty value (`--name=`, `--name=""`).
- The value lookahead never consumes a command token or a dash token.
- owner is the innermost occurrence whose range strictly contains the token;
  None means the top level. Command tokens are owned by their own occurrence.
"""
import logging
from enum import StrEnum

from .utils import *
from .utils import RecordType

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    PROGRAM = "program"
    COMMAND = "command"
    ARGUMENT = "arg"
    VALUE = "argval"
    UNNAMED = "unnamed"


class Token(metaclass=RecordType):
    """
    One classified argv entry.

    Read-only
    - index, raw.

    Classification fields
    - kind, name, value, dash, equals, unset.
    - owner: owning occurrence (None at the top level).
    - pair: for ARGUMENT the VALUE token it consumed; for VALUE its ARGUMENT.
    - stop: one past the last index this token spans.

    Binding fields
    - declaration: the declaration this token was bound to, or None.
    - faults: argument faults attached to this token.
    - trail: resolution decisions, for debugging.
    """

    __introspectable__ = (
        "index",
        "raw",
    )

    __displayable__ = (
        "index",
        "raw",
        "kind",
        "name",
        "value",
        "scope",
    )

    def __init__(self, index, raw, /):
        self._index = index
        self._raw = raw
        self.kind = Unset
        self.name = ""
        self.value = ""
        self.dash = ""
        self.equals = False
        self.unset = False
        self.owner = None
        self.pair = None
        self.stop = index + 1
        self.declaration = None
        self.faults = []
        self.trail = []

    @property
    def scope(self):
        """dotted path of the owning command, None at the top level."""
        return None if self.owner is None else self.owner.declaration.path

    @property
    def formatted(self):
        """dash and name as typed (the raw text for bare tokens)."""
        return self.dash + self.name if self.dash else self._raw

    @property
    def rendered(self):
        """re-rendering used to rebuild a command's argument list."""
        match self.kind:
            case TokenKind.ARGUMENT:
                return f"{self.formatted}={self.value}" if self.value else self.formatted
            case TokenKind.COMMAND:
                return self.name
            case _:
                return self._raw

    def fault(self, exception, /):
        self.faults.append(exception)
        logger.debug("token %d: %s", self._index, exception)

    def note(self, message, /, *args, logger=logger):
        self.trail.append(message % args if args else message)
        logger.debug("token %d (%s): " + message, self._index, self._raw, *args)


def _unquote(text):
    if len(text) > 1 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def _split(token):
    """split "name=value" when "=" precedes any quote."""
    equals = token.name.find("=")
    quote = token.name.find('"')
    if quote == -1:
        quote = token.name.find("'")
    if equals == -1 or -1 < quote < equals:
        return False
    token.name, value = token.name.split("=", 1)
    token.value = _unquote(value)
    token.equals = True
    token.unset = not token.value
    return True


def classify(argv, occurrences, /):
    """
    Classify every argv entry against the resolved command boundaries.

    Parameters
    - argv: raw argument vector, program name first.
    - occurrences: output of flagship.boundaries.resolve.

    Returns
    - list[Token], one per argv entry, in argv order.
    """
    tokens = [Token(index, raw) for index, raw in enumerate(argv)]
    found = [occurrence for occurrence in occurrences if occurrence.found]

    for token in tokens:
        if token.index == 0:
            token.kind = TokenKind.PROGRAM
            token.name = token.raw
            continue
        for occurrence in found:
            if occurrence.index == token.index:
                token.kind = TokenKind.COMMAND
                token.name = token.raw
                token.owner = occurrence
                token.declaration = occurrence.declaration
                token.stop = occurrence.stop
                token.note("command match")
                break
        else:
            containing = [occurrence for occurrence in found if occurrence.contains(token.index)]
            token.owner = max(containing, key=lambda occurrence: occurrence.start, default=None)
            if token.owner is not None:
                token.note("in the range of %s", token.owner.command)

    for position, token in enumerate(tokens):
        if token.kind is not Unset:
            continue

        token.name = token.raw.lstrip("-").strip()
        if token.raw.startswith("--"):
            token.dash = "--"
        elif token.raw.startswith("-"):
            token.dash = "-"
        else:
            token.kind = TokenKind.UNNAMED
            token.name = token.raw.strip()
            token.note("unnamed")
            continue

        token.kind = TokenKind.ARGUMENT
        if _split(token):
            token.note("inline value %r", token.value)
            continue

        if position + 1 < len(tokens):
            following = tokens[position + 1]
            if following.kind is Unset and not following.raw.startswith("-"):
                following.kind = TokenKind.VALUE
                following.value = token.value = _unquote(following.raw)
                following.pair = token
                token.pair = following
                token.stop = following.stop
                token.note("value %r from the next token", token.value)
                following.note("value of %s", token.formatted)
                continue

        token.note("no value")

    return tokens


__all__ = (
    "TokenKind",
    "Token",
    "classify",
)
