"""
Helmsman utilities (small helpers shared by every layer)

Overview
- UnsetType / Unset
  • Sentinel for "not provided" when None is a meaningful value (an optional
    field default, an explicit None handler).
- coalesce(value, default=None)
  • Materialize Unset into a concrete default; None and other falsey values
    are kept as they are.
- rename(callable, name) / @rename("name")
  • Give generated callables a readable __name__/__qualname__.
- mirror("attr")
  • Read-only property over a private "_attr" field; containers are copied
    on read so callers cannot mutate registry state.
- ordinal(number)
  • "first", "second", ... "11th" for position-first messages.
- distance(a, b) / similar(word, candidates)
  • Levenshtein edit distance and the nearest-first suggestion list built on it.
- isnumeric(token)
  • Negative-number shape ("-5", "-0.5", "-.5"): such tokens are values, never options.
- snake(name) / kebab(name)
  • Field-name <-> option-name conversion (dry_run <-> dry-run).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
    >>> similar("lst", ["list", "status", "lint"])
    ['list', 'lint']
"""
import builtins
import functools
import re
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    Falsey, printable as "Unset", a process-wide singleton, and sealed against
    subclassing. It also composes in PEP 604 unions so that runtime checks like
    isinstance(value, str | Unset) read naturally.
    """

    def __or__(self, other, /):
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


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    None, 0, "" and empty containers are legitimate values and are returned
    unchanged; only the sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__ and __qualname__ on a callable.

    Two forms are accepted:
    - rename(callable, name) renames in place and returns the callable.
    - rename(name) returns a decorator doing the same.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Copy container values recursively.

    Plain tuples stay tuples (paths and field lists are tuples all over the
    registry); other sequences become lists, mappings dicts, sets sets.
    Strings, named tuples and scalars are returned as they are.
    """
    if type(object) is tuple:
        return tuple(map(_detach, object))
    if isinstance(object, Sequence) and not isinstance(object, str | tuple):
        return list(map(_detach, object))
    if isinstance(object, Mapping):
        return {key: _detach(value) for key, value in object.items()}
    if isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Build a read-only property exposing self._{name}.

    The value is passed through _detach so that mutating what the property
    returned never touches the backing field.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal for a 1-based position.

    1..10 are spelled out ("first".."tenth"); everything else gets a numeric
    ordinal with the right English suffix (11th, 12th, 13th, 21st, 22nd, ...).
    """
    words = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")
    if 1 <= number <= len(words):
        return words[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def distance(source, target, /):
    """
    Levenshtein edit distance between two strings.

    Insertions, deletions and substitutions all cost one. Two rolling rows
    keep memory linear in the shorter input.
    """
    if len(source) < len(target):
        source, target = target, source
    if not target:
        return len(source)

    previous = list(range(len(target) + 1))
    for row, char in enumerate(source, 1):
        current = [row]
        for column, other in enumerate(target, 1):
            current.append(min(
                previous[column] + 1,
                current[column - 1] + 1,
                previous[column - 1] + (char != other),
            ))
        previous = current
    return previous[-1]


def similar(word, candidates, /, limit=3, cutoff=3):
    """
    Return up to `limit` candidates within `cutoff` edits of `word`, nearest first.

    Ties keep the order of `candidates`. Empty words and empty candidates
    never match.
    """
    if not word:
        return []
    scored = []
    for candidate in candidates:
        if candidate and (score := distance(word, candidate)) <= cutoff:
            scored.append((score, candidate))
    scored.sort(key=lambda pair: pair[0])
    return [candidate for _, candidate in scored[:limit]]


def isnumeric(token, /):
    """
    Tell whether a dash-prefixed token is a negative number rather than an option.

    Accepted shapes: "-" followed by a digit ("-5", "-0.5") or by a dot and a
    digit ("-.5").
    """
    return bool(re.match(r"-(\d|\.\d)", token))


def snake(name, /):
    """Turn an option spelling into its field name ("dry-run" -> "dry_run")."""
    return name.replace("-", "_")


def kebab(name, /):
    """Turn a field name into its option spelling ("dry_run" -> "dry-run")."""
    return name.replace("_", "-")


Unset = UnsetType()
"""
The single "not provided" marker.

Use it as a parameter default where None is a valid user value, then resolve
with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "distance",
    "similar",
    "isnumeric",
    "snake",
    "kebab",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
