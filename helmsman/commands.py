"""
Helmsman command layer: command entries and their introspection records.

What this module provides
- Command: one routable entry of the registry. It pairs a path (ordered
  segments such as ("container", "run")) with a handler and the Args/Options
  schemas its tokens are bound into.
- command(...): build a Command directly or as a decorator.
- CommandInfo / OptionInfo: plain records describing commands and options
  for plugins (help, completion, suggestions).

Sources
A command is built from one of:
- a handler callable: handler(args, options, context);
- a command-module-like object (a module, a class, an instance) exposing
  `execute` and optionally `Args`, `Options` and `meta`, where `meta` is a
  mapping with "description" and "examples";
- None: a declared command without a body. Running it raises
  CommandNotImplementedError.

Quick start
    from helmsman import command, Option

    class Args:
        name: str

    class Options:
        loud: bool = Option(short="l", descr="shout the greeting")

    @command(path="greet", args=Args, options=Options, descr="say hello")
    def greet(args, options, context):
        message = "hello %s" % args.name
        context.stdout.write((message.upper() if options.loud else message) + "\\n")

Design notes
- Paths are tuples of non-empty segments without whitespace. The empty
  path is the root command, run when no command token is given.
- Schemas are reflected and validated when the Command is built, so a bad
  schema fails at registration, never at invocation.
"""
import functools
import inspect
import operator
import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from .arguments import Schema
from .faults import *
from .tokens import Binder
from .utils import *


class OptionInfo(NamedTuple):
    """Introspection record for one option (command option or global option)."""
    name: str
    short: str | None = None
    descr: str | None = None
    takes_value: bool = False
    metavar: str | None = None


class ArgumentInfo(NamedTuple):
    """Introspection record for one positional argument."""
    name: str
    descr: str | None = None
    required: bool = True
    variadic: bool = False
    metavar: str | None = None


class CommandInfo(NamedTuple):
    """Introspection record for one command."""
    path: tuple[str, ...]
    descr: str | None = None
    examples: tuple[str, ...] = ()
    arguments: tuple[ArgumentInfo, ...] = ()
    options: tuple[OptionInfo, ...] = ()


class CommandType(type):
    """
    Metaclass giving Command a typename, mirrored properties, and stable reprs.

    Every name in __introspectable__ becomes a read-only property over the
    matching private field; __displayable__ narrows what __rich_repr__ shows.
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

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_path(cls, path, source):
    """
    Internal: normalize a command path into a tuple of segments.

    - Unset: derived from the source's __name__ (last dotted segment,
      underscores to dashes).
    - str: split on whitespace ("container run" → ("container", "run")).
    - Iterable[str]: each segment must be a non-empty string without spaces.
    """
    if path is Unset:
        if not isinstance(name := getattr(source, "__name__", None), str):
            raise TypeError(f"{cls.__typename__} needs a 'path' when its source has no name")
        path = kebab(name.rpartition(".")[2])

    if isinstance(path, str):
        return tuple(path.split())

    if not isinstance(path, Iterable):
        raise TypeError(f"{cls.__typename__} 'path' must be a string or an iterable of strings")

    segments = []
    for segment in path:
        if not isinstance(segment, str):
            raise TypeError(f"{cls.__typename__} path segments must be strings")
        elif not segment or re.search(r"\s", segment):
            raise ValueError(f"{cls.__typename__} path segments must be non-empty and without whitespace")
        segments.append(segment)
    return tuple(segments)


def _process_source(cls, source, metadata):
    """
    Internal: resolve handler, schemas and meta from a command source.

    Explicit keyword metadata wins over what the source exposes.
    """
    if source is None:
        handler = Unset
    elif hasattr(source, "execute"):
        handler = source.execute if callable(source.execute) else Unset
    elif callable(source) and not inspect.isclass(source):
        handler = source
    else:
        handler = Unset

    meta = getattr(source, "meta", {}) if source is not None else {}
    if not isinstance(meta, Mapping):
        raise TypeError(f"{cls.__typename__} source 'meta' must be a mapping")

    metadata["args"] = coalesce(metadata["args"], getattr(source, "Args", None))
    metadata["options"] = coalesce(metadata["options"], getattr(source, "Options", None))
    metadata["descr"] = coalesce(metadata["descr"], meta.get("description", Unset))
    if not metadata["examples"]:
        metadata["examples"] = meta.get("examples", ())
    return handler


def _process_strings(cls, metadata):
    """Internal: descr must be Unset or a non-empty string; examples strings."""
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if isinstance(examples := metadata["examples"], str) or not isinstance(examples, Iterable):
        raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
    sanitized = []
    for example in examples:
        if not isinstance(example, str):
            raise TypeError(f"{cls.__typename__} examples must be strings")
        sanitized.append(example)
    metadata["examples"] = tuple(sanitized)


class Command(metaclass=CommandType):
    """
    A registry entry: path, handler, Args/Options schemas, and metadata.

    Commands are immutable once built. The registry shares them across
    invocations, so everything per-call lives in the Context and in the
    Binding produced by bind().
    """

    __introspectable__ = (
        "path",
        "handler",
        "arguments",
        "options",
        "descr",
        "examples",
        "hidden",
    )

    __displayable__ = (
        "path",
        "descr",
        "arguments",
        "options",
    )

    def __init__(
            self,
            source,
            /,
            path=Unset,
            args=Unset,
            options=Unset,
            descr=Unset,
            examples=(),
            hidden=False,
    ):
        """
        Build a command entry.

        Parameters
        - source: handler callable, command-module-like object, or None.
        - path: str | Iterable[str]; "" or () for the root command.
        - args / options: schema classes (default: what the source exposes, else none).
        - descr: short description for help and listings.
        - examples: example invocations for help.
        - hidden: keep the command out of listings and suggestions.
        """
        cls = type(self)
        metadata = {
            "args": args,
            "options": options,
            "descr": descr,
            "examples": examples,
        }
        self._handler = _process_source(cls, source, metadata)
        self._path = _process_path(cls, path, source)
        _process_strings(cls, metadata)

        self._arguments = Schema(metadata["args"], positional=True)
        self._options = Schema(metadata["options"], positional=False)
        self._binder = Binder(self._arguments, self._options)
        self._descr = metadata["descr"]
        self._examples = metadata["examples"]
        self._hidden = bool(hidden)

    @property
    def name(self):
        """Space-joined path ("container run"); empty for the root command."""
        return " ".join(self._path)

    @property
    def root(self):
        """True for the root command (empty path)."""
        return not self._path

    @property
    def implemented(self):
        return self._handler is not Unset

    def bind(self, tokens, /):
        """Bind tokens into this command's Args and Options objects."""
        return self._binder.bind(tokens)

    def execute(self, args, options, context, /):
        """
        Run the handler with bound values.

        Raises CommandNotImplementedError for a command without a body.
        """
        if self._handler is Unset:
            raise CommandNotImplementedError(
                "command %r does not implement an execute function" % (self.name or "root"),
                path=self._path,
            )
        return self._handler(args, options, context)

    def info(self):
        """CommandInfo record for plugins."""
        return CommandInfo(
            path=self._path,
            descr=self._descr,
            examples=self._examples,
            arguments=tuple(
                ArgumentInfo(
                    name=field.name,
                    descr=field.descr,
                    required=field.required,
                    variadic=field.sequence is not None,
                    metavar=field.label,
                )
                for field in self._arguments
            ),
            options=tuple(
                OptionInfo(
                    name=field.flag,
                    short=field.short,
                    descr=field.descr,
                    takes_value=not field.boolean,
                    metavar=field.label,
                )
                for field in self._options if not field.hidden
            ),
        )


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator building one.

    Invocation modes
    - Direct:    cmd = command(handler, "users list", args=Args)
    - Decorator: @command(path="users list", args=Args)
                 def users_list(args, options, context): ...
    - Bare:      @command
                 def status(args, options, context): ...   # path "status"

    Parameters
    - source: Unset | handler | command-module-like object | None.
    - *args, **kwargs: forwarded to Command (path, args, options, descr, ...).
    """
    @rename("command")
    def wrapper(source, /):
        if isinstance(source, Command):
            raise TypeError("@command() cannot be applied to a command")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
    "CommandInfo",
    "ArgumentInfo",
    "OptionInfo",
)

# The metaclass is an implementation detail of Command.
del CommandType
