"""
Helmsman execution context.

One Context is created per top-level invocation and threaded through every
pipeline phase and into the command handler. It carries:
- application metadata (name, version, descr);
- I/O: the raw streams plus rich consoles bound to them (`out`, `err`);
- routing results (`command`, `path`) once matching is done;
- global option values (`option(name)`);
- a string-keyed store plugins use to pass state between hooks.

Everything per-call lives here so the registry itself stays immutable.
"""
import logging
import os
import sys

from rich.console import Console

from .utils import *

logger = logging.getLogger(__name__)


class Context:
    """
    Per-invocation state.

    Use as a context manager; close() drops the store and per-call values
    exactly once, on every exit path.
    """

    name = mirror("name")
    version = mirror("version")
    descr = mirror("descr")
    environ = mirror("environ")
    path = mirror("path")

    def __init__(
            self,
            name,
            version,
            descr=None,
            /,
            *,
            commands=(),
            global_options=(),
            stdin=Unset,
            stdout=Unset,
            stderr=Unset,
            environ=Unset,
            colorful=True,
    ):
        self._name = name
        self._version = version
        self._descr = descr
        self.stdin = coalesce(stdin, sys.stdin)
        self.stdout = coalesce(stdout, sys.stdout)
        self.stderr = coalesce(stderr, sys.stderr)
        self._environ = dict(coalesce(environ, os.environ))
        system = "auto" if colorful else None
        self.out = Console(file=self.stdout, color_system=system, highlight=False, soft_wrap=True)
        self.err = Console(file=self.stderr, color_system=system, highlight=False, soft_wrap=True)

        self._commands = tuple(commands)
        self._global_options = tuple(global_options)
        self._options = {}
        self._store = {}
        self._path = ()
        self.command = None
        self.closed = False

    @property
    def commands(self):
        """CommandInfo records of every visible command."""
        return self._commands

    @property
    def global_options(self):
        """OptionInfo records of every global option."""
        return self._global_options

    def describe(self, path, /):
        """Description of the command at `path` (str or segments), or None."""
        path = tuple(path.split()) if isinstance(path, str) else tuple(path)
        for info in self._commands:
            if info.path == path:
                return info.descr
        return None

    def option(self, name, default=None, /):
        """Current value of a global option by long name."""
        return self._options.get(name, default)

    def define(self, name, value, /):
        """Record the current value of a global option."""
        self._options[name] = value

    def route(self, command, /):
        """Record the matched command."""
        self.command = command
        self._path = command.path

    # --- store ---

    def set(self, key, value, /):
        self._store[key] = value

    def get(self, key, default=None, /):
        return self._store.get(key, default)

    def pop(self, key, default=None, /):
        return self._store.pop(key, default)

    def __contains__(self, key):
        return key in self._store

    # --- lifetime ---

    def close(self):
        if self.closed:
            return
        logger.debug("closing context with %d stored keys", len(self._store))
        self._store.clear()
        self._options.clear()
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return "context(%r, path=%r)" % (self._name, self._path)


__all__ = (
    "Context",
)
