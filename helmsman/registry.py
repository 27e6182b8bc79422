"""
Helmsman registry: composition, build-time validation, and invocation.

Building
    builder = Builder("tool", version="1.2.0", descr="container tool")

    @builder.command("container run", args=RunArgs, options=RunOptions)
    def run(args, options, context): ...

    builder.plugin(HelpPlugin(), VersionPlugin())
    registry = builder.build()

build() validates everything once and fails the whole build with a
RegistryError subclass, in this order:
1. DuplicateCommandError: two commands share a path.
2. GroupArgumentsError: a group (a path other paths extend) declares
   positional fields.
3. CommandCollisionError: a plugin command collides with a core command or
   with another plugin command (plugin commands are single-segment).
4. GlobalOptionCollisionError: two global options share a long name or a
   short flag.

Running
- registry.execute(argv) → exit status; errors are rendered to stderr.
- registry.dispatch(context, argv) → None; errors propagate unchanged.
- registry.run(argv) → exits the process.

A built Registry holds no mutable state; concurrent execute() calls are
safe as long as each gets its own streams.
"""
import logging
import shlex
import sys
from collections.abc import Iterable

from .commands import Command, OptionInfo
from .context import Context
from .faults import *
from .matcher import Matcher
from .pipeline import Pipeline
from .plugins import priority
from .utils import *

logger = logging.getLogger(__name__)


class Config:
    """
    Application-level settings.

    - name: program name (used in help, version output and fault headers).
    - version: version string.
    - descr: one-line application description.
    - colorful: style output; False prints plain text.
    - fancy: frame faults in a panel.
    """

    name = mirror("name")
    version = mirror("version")
    descr = mirror("descr")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __init__(self, name, /, version="0.0.0", descr=Unset, colorful=True, fancy=False):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("config 'name' must be a non-empty string")
        if not isinstance(version, str):
            raise TypeError("config 'version' must be a string")
        if not isinstance(descr, str | Unset):
            raise TypeError("config 'descr' must be a string")

        self._name = name.strip()
        self._version = version
        self._descr = coalesce(descr)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    def __repr__(self):
        return "config(%r, version=%r)" % (self._name, self._version)


def _ascommand(object, /):
    """Accept a Command or anything Command() takes as a source."""
    return object if isinstance(object, Command) else Command(object)


def _tokens(argv, /):
    if argv is Unset:
        return tuple(sys.argv[1:])
    if isinstance(argv, str):
        return tuple(shlex.split(argv))
    if not isinstance(argv, Iterable):
        raise TypeError("argv must be a string or an iterable of strings")
    tokens = tuple(argv)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("argv must only contain strings")
    return tokens


class Builder:
    """
    Accumulates commands and plugins, then builds an immutable Registry.

    Accepts either a Config or the Config parameters directly.
    """

    def __init__(self, config, /, **settings):
        self._config = config if isinstance(config, Config) else Config(config, **settings)
        self._commands = []
        self._plugins = []

    def command(self, path=Unset, source=Unset, /, **options):
        """
        Register a command.

        - builder.command("users list", handler, args=Args): registers and
          returns the Command.
        - @builder.command("users list", args=Args): registers the decorated
          handler and returns it unchanged.
        - @builder.command: same, with the path derived from the handler name.
        """
        if callable(path):
            self._commands.append(Command(path, **options))
            return path

        if source is not Unset:
            self._commands.append(command := Command(source, path, **options))
            return command

        @rename("command")
        def wrapper(source, /):
            self._commands.append(Command(source, path, **options))
            return source

        return wrapper

    def root(self, source=Unset, /, **options):
        """Register the root command (run when no command token is given)."""
        return self.command((), source, **options)

    def register(self, *commands):
        """Register prepared Commands or command-module-like objects."""
        self._commands.extend(map(_ascommand, commands))
        return self

    def plugin(self, *plugins):
        """Register plugins, in order (order breaks priority ties)."""
        for plugin in plugins:
            priority(plugin)
            self._plugins.append(plugin)
        return self

    def build(self):
        return Registry(self._config, self._commands, self._plugins)


class Registry:
    """
    A validated, immutable command table with its plugin set.

    Properties
    - config: the Config.
    - commands: every Command (core first, then plugin-contributed).
    - plugins: plugins in invocation order (descending priority, stable).
    - matcher / pipeline: the routing and lifecycle machinery.
    """

    config = mirror("config")
    commands = mirror("commands")
    plugins = mirror("plugins")
    matcher = mirror("matcher")
    pipeline = mirror("pipeline")

    def __init__(self, config, commands, plugins, /):
        if not isinstance(config, Config):
            raise TypeError("registry 'config' must be a Config")

        self._config = config
        self._plugins = tuple(sorted(plugins, key=lambda plugin: -priority(plugin)))

        core = tuple(map(_ascommand, commands))
        extra = tuple(
            _ascommand(command)
            for plugin in self._plugins
            for command in getattr(plugin, "commands", ())
        )
        self._commands = core + extra

        self._validate_duplicates(core)
        self._validate_groups(self._commands)
        self._validate_plugin_commands(core, extra)
        self._global_options = self._validate_global_options(self._plugins)

        self._matcher = Matcher(self._commands)
        self._pipeline = Pipeline(self._plugins, self._matcher)
        self._infos = tuple(command.info() for command in self._commands if not command.hidden)
        logger.debug(
            "built registry %r: %d commands, %d plugins",
            config.name, len(self._commands), len(self._plugins),
        )

    @staticmethod
    def _validate_duplicates(commands):
        seen = set()
        for command in commands:
            if command.path in seen:
                raise DuplicateCommandError(
                    "command %r is registered more than once" % (command.name or "root"),
                    path=command.path,
                )
            seen.add(command.path)

    @staticmethod
    def _validate_groups(commands):
        prefixes = {command.path[:length] for command in commands for length in range(1, len(command.path))}
        for command in commands:
            if command.path in prefixes and command.arguments:
                raise GroupArgumentsError(
                    "group command %r cannot declare positional arguments" % command.name,
                    path=command.path,
                )

    @staticmethod
    def _validate_plugin_commands(core, extra):
        taken = {command.path for command in core}
        for command in extra:
            if len(command.path) != 1:
                raise CommandCollisionError(
                    "plugin command %r must have a single-segment path" % command.name,
                    path=command.path,
                )
            if command.path in taken:
                raise CommandCollisionError(
                    "plugin command %r collides with an existing command" % command.name,
                    path=command.path,
                )
            taken.add(command.path)

    @staticmethod
    def _validate_global_options(plugins):
        names = {}
        shorts = {}
        infos = []
        for plugin in plugins:
            for option in getattr(plugin, "global_options", ()):
                if option.name in names:
                    raise GlobalOptionCollisionError(
                        "global option '--%s' is declared twice" % option.name,
                        option=option.name,
                        plugins=(names[option.name], plugin),
                    )
                if option.short and option.short in shorts:
                    raise GlobalOptionCollisionError(
                        "global short flag '-%s' is declared twice" % option.short,
                        option=option.short,
                        plugins=(shorts[option.short], plugin),
                    )
                names[option.name] = plugin
                if option.short:
                    shorts[option.short] = plugin
                infos.append(OptionInfo(
                    name=option.name,
                    short=option.short,
                    descr=option.descr,
                    takes_value=not option.boolean,
                    metavar=option.name.upper(),
                ))
        return tuple(infos)

    @property
    def global_options(self):
        """OptionInfo records of every global option."""
        return self._global_options

    def context(self, *, stdin=Unset, stdout=Unset, stderr=Unset, environ=Unset):
        """A fresh Context for one invocation."""
        return Context(
            self._config.name,
            self._config.version,
            self._config.descr,
            commands=self._infos,
            global_options=self._global_options,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            environ=environ,
            colorful=self._config.colorful,
        )

    def dispatch(self, context, argv, /):
        """Run the pipeline in an existing context; errors propagate unchanged."""
        self._pipeline.run(context, _tokens(argv))

    def execute(self, argv=Unset, /, *, stdin=Unset, stdout=Unset, stderr=Unset, environ=Unset):
        """
        Run one invocation and return its exit status.

        argv: Unset (sys.argv[1:]), a command-line string, or an iterable of
        strings. Errors escaping the pipeline are rendered to stderr; the
        status is the fault's exit code (1 for arbitrary exceptions).
        """
        tokens = _tokens(argv)
        with self.context(stdin=stdin, stdout=stdout, stderr=stderr, environ=environ) as context:
            try:
                self._pipeline.run(context, tokens)
            except MemoryError:
                raise
            except CommandException as error:
                return self._report(context, error)
            except Exception as error:
                logger.debug("command raised %s", type(error).__name__, exc_info=True)
                return self._report(context, CommandFailedError(str(error) or type(error).__name__, error=error))
        return 0

    def _report(self, context, error):
        trigger(
            error,
            console=context.err,
            prog=self._config.name,
            colorful=self._config.colorful,
            fancy=self._config.fancy,
            docs=getdoc(error.code),
        )
        return error.exitcode

    def run(self, argv=Unset, /):
        """Execute and exit the process with the resulting status."""
        sys.exit(self.execute(argv))

    def __repr__(self):
        return "registry(%r, commands=%r)" % (self._config.name, [command.name for command in self._commands])


__all__ = (
    "Config",
    "Builder",
    "Registry",
)
