"""
Helmsman command matcher: longest-prefix routing over a flat command table.

Rules
- entries are ordered once by path length, longest first (stable, so equal
  lengths keep registration order); the first entry whose segments equal the
  leading tokens wins, and the tokens after its path are the command's own.
- no match, tokens empty or starting with "-", root registered: the root
  command gets the original token list.
- no match, no tokens: NoCommandSpecifiedError.
- no match otherwise: CommandNotFoundError. When the leading tokens form a
  group prefix (a path that registered commands extend), the error carries it
  as `group` so error hooks can render that group's listing.
"""
import logging
from typing import NamedTuple

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class Match(NamedTuple):
    """A routing decision: the command and the tokens left for it."""
    command: object
    rest: tuple[str, ...]


class Matcher:
    """
    Routes token lists to commands.

    Built once per registry from its commands; holds no per-call state.
    """

    entries = mirror("entries")

    def __init__(self, commands, /):
        self._root = None
        entries = []
        for command in commands:
            if command.root:
                self._root = command
            else:
                entries.append(command)
        self._entries = tuple(sorted(entries, key=lambda command: len(command.path), reverse=True))
        self._groups = frozenset(
            command.path[:length]
            for command in self._entries
            for length in range(1, len(command.path))
        )

    @property
    def root(self):
        return self._root

    def isgroup(self, path, /):
        """True when some registered path strictly extends `path`."""
        return tuple(path) in self._groups

    def children(self, prefix=(), /):
        """
        Commands sitting directly under `prefix`, plus implicit subgroups.

        Returns (segment, command-or-None) pairs sorted by segment; None marks
        a group that has no command of its own.
        """
        prefix = tuple(prefix)
        found = {}
        for command in self._entries:
            if len(command.path) > len(prefix) and command.path[:len(prefix)] == prefix:
                segment = command.path[len(prefix)]
                if len(command.path) == len(prefix) + 1:
                    found[segment] = command
                else:
                    found.setdefault(segment, None)
        return sorted(found.items())

    def match(self, tokens, /):
        """
        Resolve tokens into a Match.

        Raises NoCommandSpecifiedError or CommandNotFoundError when nothing
        routes.
        """
        tokens = tuple(tokens)
        for command in self._entries:
            if tokens[:len(command.path)] == command.path:
                logger.debug("matched %r with %d remaining tokens", command.name, len(tokens) - len(command.path))
                return Match(command, tokens[len(command.path):])

        if self._root is not None and (not tokens or tokens[0].startswith("-")):
            logger.debug("routed to the root command")
            return Match(self._root, tokens)

        if not tokens:
            raise NoCommandSpecifiedError(path=())

        raise self.missing(tokens)

    def missing(self, tokens, /):
        """
        CommandNotFoundError for tokens that do not route.

        `path` is the attempted path up to and including the first unknown
        segment; `group` is the longest known group prefix, or None.
        """
        group = ()
        for length in range(1, len(tokens) + 1):
            if not self.isgroup(tokens[:length]):
                break
            group = tuple(tokens[:length])

        path = tuple(tokens[:len(group) + 1])
        return CommandNotFoundError(
            "unknown command %r" % " ".join(path),
            path=path,
            group=group or None,
        )


__all__ = (
    "Match",
    "Matcher",
)
