"""
Helmsman plugin SPI.

A plugin is any object; what it can do is decided by which hook methods it
has. Every hook is optional:

    pre_parse(context, args) -> args
    transform_args(context, args) -> TransformResult
    handle_global_option(context, name, value) -> None
    post_parse(context, parsed) -> ParsedArgs | None       (None: unchanged)
    pre_execute(context, parsed) -> ParsedArgs | None      (None: veto)
    post_execute(context, success) -> None
    on_error(context, error) -> Resolution                 (Handled / Unhandled)

Plugins may also declare:
- priority: int, higher runs first (default 50); ties keep registration order.
- global_options: GlobalOption records recognized before routing.
- commands: extra Command entries, single-segment paths only.

Subclassing Plugin is a convenience that supplies those defaults; it is not
required.
"""
import enum
import re
from typing import NamedTuple

from .utils import *

HOOKS = (
    "pre_parse",
    "transform_args",
    "handle_global_option",
    "post_parse",
    "pre_execute",
    "post_execute",
    "on_error",
)

_ZEROS = {bool: False, int: 0, float: 0.0, str: ""}


class Resolution(enum.Enum):
    """Outcome of an on_error hook."""
    HANDLED = "handled"
    UNHANDLED = "unhandled"

    def __bool__(self):
        return self is Resolution.HANDLED


Handled = Resolution.HANDLED
Unhandled = Resolution.UNHANDLED


class TransformResult(NamedTuple):
    """
    Result of a transform_args hook.

    - args: the rewritten token list.
    - consumed: indices (into `args`) removed before the next plugin runs.
    - continue_processing: False ends the invocation successfully, before
      routing.
    """
    args: tuple[str, ...]
    consumed: tuple[int, ...] = ()
    continue_processing: bool = True


class ParsedArgs(NamedTuple):
    """The positional-token view of a matched command, before binding."""
    positional: tuple[str, ...]


class GlobalOption:
    """
    An option recognized anywhere before routing, on behalf of a plugin.

    Parameters
    - name: long name without dashes ("help", "log-level").
    - type: bool, int, float or str.
    - default: value reported when absent (the type's zero value by default).
    - short: single-letter short flag.
    - descr: help text.
    """

    name = mirror("name")
    type = mirror("type")
    default = mirror("default")
    short = mirror("short")
    descr = mirror("descr")

    def __init__(self, name, /, type=bool, default=Unset, short=Unset, descr=Unset):
        if not isinstance(name, str) or not name or name.startswith("-"):
            raise TypeError("global-option 'name' must be a non-empty string without leading dashes")
        if type not in _ZEROS:
            raise TypeError("global-option 'type' must be one of bool, int, float, str")
        if not isinstance(short, str | Unset):
            raise TypeError("global-option 'short' must be a string")
        elif isinstance(short, str) and not re.fullmatch(r"[A-Za-z]", short):
            raise ValueError("global-option 'short' must be a single letter")
        if not isinstance(descr, str | Unset):
            raise TypeError("global-option 'descr' must be a string")

        self._name = name
        self._type = type
        self._default = coalesce(default, _ZEROS[type])
        self._short = coalesce(short)
        self._descr = coalesce(descr)

    @property
    def boolean(self):
        return self._type is bool

    def __repr__(self):
        return "global-option(%r, type=%s, short=%r)" % (self._name, self._type.__name__, self._short)


class Plugin:
    """Convenience base providing the declarative plugin attributes."""
    priority = 50
    global_options = ()
    commands = ()


def capable(plugin, hook, /):
    """Tell whether a plugin implements a hook."""
    if hook not in HOOKS:
        raise ValueError("unknown hook %r" % hook)
    return callable(getattr(plugin, hook, None))


def priority(plugin, /):
    """A plugin's priority (50 when undeclared)."""
    value = getattr(plugin, "priority", 50)
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("plugin priority must be an integer, got %r" % (value,))
    return value


__all__ = (
    "HOOKS",
    "Resolution",
    "Handled",
    "Unhandled",
    "TransformResult",
    "ParsedArgs",
    "GlobalOption",
    "Plugin",
    "capable",
    "priority",
)
