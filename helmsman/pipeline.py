"""
Helmsman execution pipeline.

Phases, in order; a phase without capable plugins is skipped:

    pre_parse → global options → transform_args → match → post_parse
    → pre_execute → bind + execute → post_execute / on_error

Failure semantics
- pre_parse, global option extraction, transform_args, post_parse and
  pre_execute errors propagate directly, without on_error.
- routing errors (CommandNotFoundError, NoCommandSpecifiedError), binding
  errors and handler errors go through the on_error chain once, in priority
  order; the first plugin answering Handled ends the invocation successfully.
  Unhandled errors propagate unchanged.
- MemoryError is never offered to plugins.
- post_execute runs for every invocation that reached binding, with the
  success flag, whatever happened.
"""
import logging

from .arguments import Field, coerce
from .faults import *
from .plugins import *
from .tokens import isoption
from .utils import *

logger = logging.getLogger(__name__)


class Pipeline:
    """
    The lifecycle state machine for one registry.

    Parameters
    - plugins: priority-sorted plugin objects.
    - matcher: the registry's Matcher.
    """

    def __init__(self, plugins, matcher, /):
        self._plugins = tuple(plugins)
        self._matcher = matcher
        self._hooks = {
            hook: tuple(plugin for plugin in self._plugins if capable(plugin, hook))
            for hook in HOOKS
        }
        self._longs = {}
        self._shorts = {}
        for plugin in self._plugins:
            for option in getattr(plugin, "global_options", ()):
                self._longs[option.name] = (option, plugin)
                if option.short:
                    self._shorts[option.short] = (option, plugin)

    def hooked(self, hook, /):
        """Plugins implementing `hook`, in invocation order."""
        return self._hooks[hook]

    def run(self, context, argv, /):
        """Drive one invocation. Returns None; errors propagate as described above."""
        tokens = tuple(argv)

        for plugin in self._hooks["pre_parse"]:
            tokens = tuple(plugin.pre_parse(context, list(tokens)))
        logger.debug("pre-parse produced %r", tokens)

        tokens = self._extract(context, tokens)

        tokens = self._transform(context, tokens)
        if tokens is None:
            return

        try:
            match = self._matcher.match(tokens)
        except NoCommandSpecifiedError as error:
            logger.debug("no command given and no root command registered")
            if self._prepare(context, ParsedArgs(())) is not None:
                self._recover(context, error)
            return
        except CommandNotFoundError as error:
            logger.debug("routing failed for %r", error.path)
            self._recover(context, error)
            return

        context.route(match.command)
        parsed = self._prepare(context, ParsedArgs(match.rest))
        if parsed is None:
            return

        success = False
        try:
            self._expect(match.command, parsed.positional)
            binding = match.command.bind(parsed.positional)
            match.command.execute(binding.args, binding.options, context)
            success = True
        except MemoryError:
            raise
        except Exception as error:
            self._recover(context, error)
        finally:
            for plugin in self._hooks["post_execute"]:
                plugin.post_execute(context, success)

    def _extract(self, context, tokens):
        """
        Global option extraction.

        Consumes registered global options up to a literal "--"; everything
        else keeps its order for the next phase.
        """
        for option, _ in self._longs.values():
            context.define(option.name, option.default)
        if not self._longs:
            return tokens

        remaining = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1

            if token == "--":
                remaining.extend(tokens[index - 1:])
                break

            if token.startswith("--"):
                name, assigned, value = token[2:].partition("=")
                if name not in self._longs:
                    remaining.append(token)
                    continue
                option, plugin = self._longs[name]
                if assigned:
                    self._apply(context, option, plugin, "--" + name, value)
                elif option.boolean:
                    self._apply(context, option, plugin, "--" + name, True)
                elif index < len(tokens) and not isoption(tokens[index]):
                    self._apply(context, option, plugin, "--" + name, tokens[index])
                    index += 1
                else:
                    raise OptionMissingValueError(
                        "option '--%s' requires a value" % name,
                        option="--" + name,
                    )

            elif isoption(token) and all(char in self._shorts for char in token[1:]):
                cluster = token[1:]
                for position, char in enumerate(cluster, 1):
                    option, plugin = self._shorts[char]
                    if option.boolean:
                        self._apply(context, option, plugin, "-" + char, True)
                    elif position == len(cluster) and index < len(tokens) and not isoption(tokens[index]):
                        self._apply(context, option, plugin, "-" + char, tokens[index])
                        index += 1
                    else:
                        raise OptionMissingValueError(
                            "option '-%s' requires a value" % char,
                            option="-" + char,
                        )

            else:
                remaining.append(token)

        return tuple(remaining)

    def _apply(self, context, option, plugin, spelling, value):
        if isinstance(value, str):
            try:
                value = coerce(Field(name=option.name, type=option.type), value)
            except ValueError as error:
                raise OptionInvalidValueError(
                    "invalid value %r for option '%s': %s" % (value, spelling, error),
                    option=spelling,
                    value=value,
                    expected=option.type.__name__,
                ) from None

        logger.debug("global option %r set to %r", option.name, value)
        context.define(option.name, value)
        if capable(plugin, "handle_global_option"):
            plugin.handle_global_option(context, option.name, value)

    def _transform(self, context, tokens):
        """transform_args chain; None means a plugin ended the invocation."""
        for plugin in self._hooks["transform_args"]:
            result = plugin.transform_args(context, list(tokens))
            if not isinstance(result, TransformResult):
                raise TypeError("transform_args of %r must return a TransformResult" % plugin)

            consumed = frozenset(result.consumed)
            tokens = tuple(token for index, token in enumerate(result.args) if index not in consumed)

            if not result.continue_processing:
                logger.debug("%r stopped processing", plugin)
                return None
        return tokens

    def _prepare(self, context, parsed):
        """post_parse and pre_execute; None means a plugin vetoed execution."""
        for plugin in self._hooks["post_parse"]:
            if (result := plugin.post_parse(context, parsed)) is not None:
                parsed = self._checked(plugin, "post_parse", result)

        for plugin in self._hooks["pre_execute"]:
            if (result := plugin.pre_execute(context, parsed)) is None:
                logger.debug("%r vetoed execution", plugin)
                return None
            parsed = self._checked(plugin, "pre_execute", result)

        return parsed

    def _checked(self, plugin, hook, result):
        if not isinstance(result, ParsedArgs):
            raise TypeError("%s of %r must return ParsedArgs or None" % (hook, plugin))
        return ParsedArgs(tuple(result.positional))

    def _expect(self, command, tokens):
        """
        A command without positional fields reads a leading plain token as
        an unknown subcommand.
        """
        if command.arguments or not tokens or tokens[0].startswith("-"):
            return
        path = command.path + (tokens[0],)
        raise CommandNotFoundError(
            "unknown command %r" % " ".join(path),
            path=path,
            group=command.path if self._matcher.isgroup(command.path) else None,
        )

    def _recover(self, context, error):
        """Offer an error to the on_error chain; re-raise it when nobody handles it."""
        for plugin in self._hooks["on_error"]:
            resolution = plugin.on_error(context, error)
            if not isinstance(resolution, Resolution):
                raise TypeError("on_error of %r must return Handled or Unhandled" % plugin) from error
            if resolution is Handled:
                logger.debug("%r handled %s", plugin, type(error).__name__)
                return
        raise error


__all__ = (
    "Pipeline",
)
