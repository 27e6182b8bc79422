"""
Helmsman faults (user-facing errors, build-time errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing failure. The
  leading digit is the process exit status, so the code alone tells a shell
  script what kind of failure happened:
  • 1xxxx execution failures  → exit 1
  • 2xxxx usage errors        → exit 2
  • 3xxxx routing errors      → exit 3
  • 4xxxx registry build errors (never reach an end user)
- CommandException: base type for every error a user of the compiled CLI can
  see. It carries a message plus an immutable options mapping and renders
  itself with rich.
- RegistryError: base type for configuration mistakes rejected while the
  registry is built (duplicate paths, option collisions, ...). These are
  programming errors and are plain ValueErrors.
- trigger(): print a fault with merged options.
- getdoc(): optional documentation lookup from the host application.

Host overrides (read from __main__)
- __styles__: palette entries for the renderer.
- __codes__: FaultCode → label mapping used by normalize().
- __docs__: FaultCode → short documentation line shown under the hint.
- __prog__: program name shown in fault headers.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - execution (11xxx): COMMAND_NOT_IMPLEMENTED, COMMAND_FAILED
    - arguments (21xxx): ARGUMENT_MISSING_REQUIRED, ARGUMENT_TOO_MANY, ARGUMENT_INVALID_VALUE
    - options (22xxx): OPTION_UNKNOWN, OPTION_MISSING_VALUE, OPTION_INVALID_VALUE
    - routing (31xxx): COMMAND_NOT_FOUND, NO_COMMAND_SPECIFIED
    - registry (41xxx): DUPLICATE_COMMAND, GROUP_ARGUMENTS, COMMAND_COLLISION,
      GLOBAL_OPTION_COLLISION

    the spacing leaves room for additions without renumbering.
    """
    # --- execution failures (1xxxx) ---
    COMMAND_NOT_IMPLEMENTED     = 11101
    COMMAND_FAILED              = 11102

    # --- positional errors (2xxxx) ---
    ARGUMENT_MISSING_REQUIRED   = 21101
    ARGUMENT_TOO_MANY           = 21102
    ARGUMENT_INVALID_VALUE      = 21103

    # --- option errors (2xxxx) ---
    OPTION_UNKNOWN              = 22101
    OPTION_MISSING_VALUE        = 22102
    OPTION_INVALID_VALUE        = 22103

    # --- routing errors (3xxxx) ---
    COMMAND_NOT_FOUND           = 31101
    NO_COMMAND_SPECIFIED        = 31102

    # --- registry build errors (4xxxx) ---
    DUPLICATE_COMMAND           = 41101
    GROUP_ARGUMENTS             = 41102
    COMMAND_COLLISION           = 41103
    GLOBAL_OPTION_COLLISION     = 41104

    @property
    def exitcode(self):
        """process exit status for this code (its leading digit)."""
        return self.value // 10000

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ may relabel codes; otherwise the
        numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base for every error an end user of the cli can see.

    options
    - any context the raiser knows (argument, option, value, path, ...).
    - rendering options merged in by trigger(): console, prog, colorful,
      fancy, hint, docs.

    class attributes
    - code: the FaultCode of the kind (exitcode derives from it).
    - title: short lowercase headline used in the rendered header.
    """
    code = FaultCode.COMMAND_FAILED
    title = "command failed"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, self.title)

    @property
    def exitcode(self):
        return self.code.exitcode

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "#6B6F7A",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            *((prog, " — ") if prog else ()),
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        renders = [text(str(self), styler("error-message"))]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if docs := self.options.get("docs"):
            renders.append(text(docs, styler("docs")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(CommandException):
    code = FaultCode.COMMAND_NOT_FOUND
    title = "command not found"

    @property
    def path(self):
        """the attempted command path (tuple of segments)."""
        return tuple(self.options.get("path", ()))

    @property
    def group(self):
        """the longest registered group prefix of the attempted path, or None."""
        return self.options.get("group")


class NoCommandSpecifiedError(CommandNotFoundError):
    code = FaultCode.NO_COMMAND_SPECIFIED
    title = "no command specified"


class ArgumentMissingRequiredError(CommandException):
    code = FaultCode.ARGUMENT_MISSING_REQUIRED
    title = "missing argument"


class ArgumentTooManyError(CommandException):
    code = FaultCode.ARGUMENT_TOO_MANY
    title = "too many arguments"


class ArgumentInvalidValueError(CommandException):
    code = FaultCode.ARGUMENT_INVALID_VALUE
    title = "invalid argument value"


class OptionUnknownError(CommandException):
    code = FaultCode.OPTION_UNKNOWN
    title = "unknown option"


class OptionMissingValueError(CommandException):
    code = FaultCode.OPTION_MISSING_VALUE
    title = "missing option value"


class OptionInvalidValueError(CommandException):
    code = FaultCode.OPTION_INVALID_VALUE
    title = "invalid option value"


class CommandNotImplementedError(CommandException):
    code = FaultCode.COMMAND_NOT_IMPLEMENTED
    title = "command not implemented"


class CommandFailedError(CommandException):
    code = FaultCode.COMMAND_FAILED
    title = "command failed"


class RegistryError(ValueError):
    """
    a registry configuration rejected at build time.

    carries the FaultCode of the violated rule; never rendered to end users.
    """
    code = Unset

    def __init__(self, message, /, **details):
        super().__init__(message)
        self.details = MappingProxyType(details)


class DuplicateCommandError(RegistryError):
    code = FaultCode.DUPLICATE_COMMAND


class GroupArgumentsError(RegistryError):
    code = FaultCode.GROUP_ARGUMENTS


class CommandCollisionError(RegistryError):
    code = FaultCode.COMMAND_COLLISION


class GlobalOptionCollisionError(RegistryError):
    code = FaultCode.GLOBAL_OPTION_COLLISION


def trigger(fault, /, **options):
    """
    print a fault with the given rendering options.

    contract
    - fault must provide __trigger__ and __replace__ (see CommandException).
    - options are merged through copy.replace before triggering.

    typical options
    - console, prog, colorful, fancy, hint, docs.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation line for a fault code from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandException",
    "CommandNotFoundError",
    "NoCommandSpecifiedError",
    "ArgumentMissingRequiredError",
    "ArgumentTooManyError",
    "ArgumentInvalidValueError",
    "OptionUnknownError",
    "OptionMissingValueError",
    "OptionInvalidValueError",
    "CommandNotImplementedError",
    "CommandFailedError",
    "RegistryError",
    "DuplicateCommandError",
    "GroupArgumentsError",
    "CommandCollisionError",
    "GlobalOptionCollisionError",
    "trigger",
    "getdoc",
)
