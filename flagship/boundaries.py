"""
Flagship command boundaries.

Finds which argv entries are command names and which half-open token range
each matched command owns.

Rules
- One Occurrence per declared command, found or not (start/stop/index stay
  at -1 when the command never appears).
- argv[0] is the program name and never matches a command.
- A command matches a token equal to its name only once, and only while its
  parent (or the top level) belongs to the active chain: the innermost matched
  occurrence so far plus its ancestors. A nested command therefore matches only
  inside its parent's range and after the parent's own index, and a child that
  shares its parent's name is told apart by position ("app foo -b foo -b").
- stop is the start of the next matched occurrence that is not a descendant
  (a later sibling, or a command of an enclosing level), else len(argv). A
  nested range is always a sub-range of its parent's range.
"""
import logging

from .declarations import *
from .utils import *
from .utils import RecordType

logger = logging.getLogger(__name__)


class Occurrence(metaclass=RecordType):
    """
    Positional match (or absence) of one declared command.

    - declaration: the command declaration.
    - parent: occurrence of the enclosing command, None at the top level.
    - index/start/stop: match index and owned range [start, stop), -1 when absent.
      A parent's range encloses the ranges of its matched children, so start
      and stop are not the match-to-match bounds of a flat command scan.
    - trail: resolution decisions, for debugging.
    """

    __introspectable__ = (
        "declaration",
        "parent",
    )

    __displayable__ = (
        "command",
        "index",
        "start",
        "stop",
    )

    def __init__(self, declaration, /, parent=None):
        self._declaration = declaration
        self._parent = parent
        self.index = self.start = self.stop = -1
        self.trail = []

    @property
    def command(self):
        return self._declaration.command

    @property
    def found(self):
        return self.index > -1

    def lineage(self):
        """this occurrence and its ancestors, innermost first."""
        occurrence = self
        while occurrence is not None:
            yield occurrence
            occurrence = occurrence.parent

    def descends(self, other, /):
        """whether other encloses this occurrence (strictly)."""
        return other is not self and other in self.lineage()

    def contains(self, index, /):
        """whether index falls strictly inside the owned range."""
        return self.found and self.start < index < self.stop

    def note(self, message, /, *args):
        self.trail.append(message % args if args else message)
        logger.debug("%s: " + message, self._declaration.path, *args)


def resolve(declarations, argv, /):
    """
    Match declared commands against argv.

    Parameters
    - declarations: pre-order declaration list (see flagship.declarations.declare).
    - argv: raw argument vector, program name first.

    Returns
    - one Occurrence per command declaration, in declaration order. Each command
      declaration also gets its occurrence attached (declaration.occurrence).
    """
    occurrences = []
    lookup = {}
    for declaration in declarations:
        if declaration.kind is not Kind.COMMAND:
            continue
        occurrence = Occurrence(declaration, lookup.get(declaration.parent))
        lookup[declaration] = declaration.occurrence = occurrence
        occurrences.append(occurrence)

    matched = []
    active = None
    for index, text in enumerate(argv):
        if index == 0:
            continue

        chain = {None, *(active.lineage() if active is not None else ())}
        for occurrence in occurrences:
            if occurrence.found or occurrence.command != text or occurrence.parent not in chain:
                continue
            occurrence.index = occurrence.start = index
            occurrence.note("found in the arguments at %d", index)
            matched.append(occurrence)
            active = occurrence
            break

    for position, occurrence in enumerate(matched):
        for following in matched[position + 1:]:
            if not following.descends(occurrence):
                occurrence.stop = following.start
                occurrence.note("closed by %s at %d", following.command, following.start)
                break
        else:
            occurrence.stop = len(argv)
            occurrence.note("closed by the end of the arguments at %d", occurrence.stop)

    return occurrences


__all__ = (
    "Occurrence",
    "resolve",
)
