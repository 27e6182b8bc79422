"""
Helmsman bundled plugins.

- HelpPlugin: --help/-h, a `help [COMMAND...]` command, and help screens for
  "no command" and unknown subcommands under a known group.
- VersionPlugin: --version/-V prints "<name> v<version>".
- SuggestPlugin: "did you mean" suggestions for unknown commands.

None of them is required; the core only knows them as ordinary plugins.
"""
import logging

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .arguments import Argument
from .commands import Command
from .faults import *
from .plugins import *
from .utils import *

logger = logging.getLogger(__name__)


def _table(rows):
    table = Table(box=None, show_header=False, padding=(0, 2), pad_edge=False)
    table.add_column(style="bold", no_wrap=True)
    table.add_column()
    for row in rows:
        table.add_row(*map(Text, row))
    return table


def _children(context, prefix):
    """(segment, descr) pairs directly under prefix, sorted by segment."""
    found = {}
    for info in context.commands:
        if len(info.path) > len(prefix) and info.path[:len(prefix)] == prefix:
            segment = info.path[len(prefix)]
            if len(info.path) == len(prefix) + 1:
                found[segment] = info.descr or ""
            else:
                found.setdefault(segment, "")
    return sorted(found.items())


def _option(info):
    spelling = ", ".join(filter(None, ("-" + info.short if info.short else None, "--" + info.name)))
    return spelling + (" " + info.metavar if info.takes_value else "")


def _section(title, body):
    return Group(Text(""), Text(title, style="bold underline"), body)


class HelpPlugin(Plugin):
    """
    Usage screens on request and on routing errors.

    Explicit help (--help, `help`) goes to stdout; the listing shown for an
    unknown subcommand goes to stderr.
    """
    priority = 60

    class Args:
        command: list[str] = Argument(descr="command path to describe", metavar="COMMAND")

    def __init__(self):
        self.global_options = (
            GlobalOption("help", short="h", descr="show help and exit"),
        )
        self.commands = (
            Command(self.execute, "help", args=self.Args, descr="show help for a command"),
        )

    def handle_global_option(self, context, name, value):
        context.set("help", bool(value))

    def pre_execute(self, context, parsed):
        if not context.get("help"):
            return parsed
        if context.command is None or context.command.root:
            self.render_app(context, context.out)
        else:
            self.render_command(context, context.command.path, context.out)
        return None

    def on_error(self, context, error):
        if isinstance(error, NoCommandSpecifiedError):
            self.render_app(context, context.out)
            return Handled
        if isinstance(error, CommandNotFoundError) and error.group:
            if error.path != error.group:
                context.err.print(Text("unknown command %r" % " ".join(error.path)))
            self.render_group(context, error.group, context.err)
            return Handled
        return Unhandled

    def execute(self, args, options, context):
        path = tuple(args.command)
        if not path:
            self.render_app(context, context.out)
        elif any(info.path == path for info in context.commands):
            self.render_command(context, path, context.out)
        elif _children(context, path):
            self.render_group(context, path, context.out)
        else:
            raise CommandNotFoundError("unknown command %r" % " ".join(path), path=path)

    def render_app(self, context, console):
        """Application help: name, version, commands and global options."""
        renders = [Text.assemble((context.name, "bold"), " v", context.version)]
        if context.descr:
            renders.append(Text(context.descr))
        renders.append(_section("Usage", Text("  %s <command> [options]" % context.name)))
        if commands := _children(context, ()):
            renders.append(_section("Commands", _table(commands)))
        if context.global_options:
            renders.append(_section("Global options", _table(
                (_option(info), info.descr or "") for info in context.global_options
            )))
        console.print(Group(*renders))

    def render_command(self, context, path, console):
        """Command help: usage line, arguments, options, subcommands, examples."""
        info = next((info for info in context.commands if info.path == path), None)
        if info is None:
            # hidden commands are left out of context.commands
            info = context.command.info()
        usage = [context.name, *path]
        if info.options:
            usage.append("[options]")
        for argument in info.arguments:
            label = argument.metavar + ("..." if argument.variadic else "")
            usage.append(label if argument.required else "[%s]" % label)

        renders = [Text("Usage: " + " ".join(usage), style="bold")]
        if info.descr:
            renders.append(Text(info.descr))
        if info.arguments:
            renders.append(_section("Arguments", _table(
                (argument.metavar, argument.descr or "") for argument in info.arguments
            )))
        if info.options:
            renders.append(_section("Options", _table(
                (_option(option), option.descr or "") for option in info.options
            )))
        if commands := _children(context, path):
            renders.append(_section("Commands", _table(commands)))
        if info.examples:
            renders.append(_section("Examples", Text("\n".join("  " + example for example in info.examples))))
        console.print(Group(*renders))

    def render_group(self, context, path, console):
        """Subcommand listing for a group path."""
        renders = [Text("Usage: %s %s <command>" % (context.name, " ".join(path)), style="bold")]
        if descr := context.describe(path):
            renders.append(Text(descr))
        renders.append(_section("Commands", _table(_children(context, path))))
        console.print(Group(*renders))


class VersionPlugin(Plugin):
    """Prints "<name> v<version>" for --version/-V and stops."""

    global_options = (
        GlobalOption("version", short="V", descr="show version and exit"),
    )

    def handle_global_option(self, context, name, value):
        context.set("version", bool(value))

    def pre_execute(self, context, parsed):
        if not context.get("version"):
            return parsed
        context.stdout.write("%s v%s\n" % (context.name, context.version))
        return None


class SuggestPlugin(Plugin):
    """
    Suggests close command names for an unknown command.

    Always answers Unhandled so the error is still reported.
    """
    priority = 40

    def __init__(self, limit=3, cutoff=3):
        self.limit = limit
        self.cutoff = cutoff

    def on_error(self, context, error):
        if not isinstance(error, CommandNotFoundError) or isinstance(error, NoCommandSpecifiedError):
            return Unhandled

        names = [" ".join(info.path) for info in context.commands if info.path]
        attempted = " ".join(error.path)
        if suggestions := similar(attempted, names, limit=self.limit, cutoff=self.cutoff):
            context.err.print(Text("did you mean?", style="bold"))
            for suggestion in suggestions:
                context.err.print(Text("  " + suggestion))
        if names:
            context.err.print(Text("available commands: " + ", ".join(names)))
        logger.debug("suggested %r for %r", suggestions, attempted)
        return Unhandled


__all__ = (
    "HelpPlugin",
    "VersionPlugin",
    "SuggestPlugin",
)
