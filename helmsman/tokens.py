"""
Helmsman tokenizer and binder.

The binder turns the tokens left for a command into two typed objects, one
for its Args schema and one for its Options schema, in a single
left-to-right scan.

Classification
- "--" makes every following token positional.
- "--name" / "--name=value": long option. Without "=", a non-boolean option
  takes the next token as its value, whatever it looks like.
- "-abc": short cluster. Boolean flags may be bundled; the first
  value-taking flag ends the cluster and takes the rest of the cluster
  ("-n5", "-n=5") or else the next token ("-n 5").
- "-5", "-0.5", "-.5": negative numbers, always positional.
- "-" alone and anything else: positional.

Binding
- positionals fill Args fields in declaration order; a trailing sequence
  field takes everything left; optional fields may be left out only at the
  end.
- sequence options accumulate every occurrence in encounter order; scalar
  options keep the last occurrence.
- the first problem raises one of ArgumentMissingRequiredError,
  ArgumentTooManyError, ArgumentInvalidValueError, OptionUnknownError,
  OptionMissingValueError, OptionInvalidValueError.
"""
import difflib
from typing import NamedTuple

from .arguments import Schema, coerce
from .faults import *
from .utils import *


def isoption(token, /):
    """
    Tell whether a token is an option token.

    Anything starting with "-" except a lone "-" and negative numbers.
    """
    return token.startswith("-") and len(token) > 1 and not isnumeric(token)


class Binding(NamedTuple):
    """Result of a successful bind: the user's Args and Options objects."""
    args: object
    options: object


class Binder:
    """
    Binds token lists against an Args schema and an Options schema.

    A Binder keeps no per-call state, so one instance serves every
    invocation of its command.
    """

    arguments = mirror("arguments")
    options = mirror("options")

    def __init__(self, arguments, options, /):
        if not isinstance(arguments, Schema) or not arguments.positional:
            raise TypeError("binder arguments must be a positional schema")
        if not isinstance(options, Schema) or options.positional:
            raise TypeError("binder options must be a named schema")
        self._arguments = arguments
        self._options = options

    def bind(self, tokens, /):
        """
        Classify and bind every token.

        Returns a Binding; raises the first parse error found.
        """
        tokens = list(tokens)
        positionals = []
        values = {}
        literal = False

        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1

            if literal or not isoption(token):
                positionals.append(token)
            elif token == "--":
                literal = True
            elif token.startswith("--"):
                index = self._long(token, tokens, index, values)
            else:
                index = self._cluster(token, tokens, index, values)

        arguments = self._positionals(positionals)

        options = {}
        for field in self._options:
            if field.name not in values:
                options[field.name] = field.materialize()
            elif field.sequence:
                options[field.name] = field.sequence(values[field.name])
            else:
                options[field.name] = values[field.name]

        return Binding(
            args=self._arguments.instantiate(arguments),
            options=self._options.instantiate(options),
        )

    def _long(self, token, tokens, index, values):
        name, assigned, value = token[2:].partition("=")

        if (field := self._options.lookup(name)) is None:
            suggestions = difflib.get_close_matches(name, self._options.flags, 3)
            raise OptionUnknownError(
                "unknown option '--%s'" % name,
                option="--" + name,
                suggestions=suggestions,
                hint="did you mean '--%s'?" % suggestions[0] if suggestions else "",
            )

        if assigned:
            self._store(field, "--" + field.flag, value, values)
        elif field.boolean:
            values[field.name] = True
        elif index < len(tokens):
            self._store(field, "--" + field.flag, tokens[index], values)
            index += 1
        else:
            raise OptionMissingValueError(
                "option '--%s' requires a value" % field.flag,
                option="--" + field.flag,
            )
        return index

    def _cluster(self, token, tokens, index, values):
        cluster = token[1:]
        for position, char in enumerate(cluster):
            if (field := self._options.short(char)) is None:
                raise OptionUnknownError(
                    "unknown option '-%s'" % char,
                    option="-" + char,
                    suggestions=[],
                )
            if field.boolean:
                values[field.name] = True
                continue

            if rest := cluster[position + 1:]:
                self._store(field, "-" + char, rest.removeprefix("="), values)
            elif index < len(tokens):
                self._store(field, "-" + char, tokens[index], values)
                index += 1
            else:
                raise OptionMissingValueError(
                    "option '-%s' requires a value" % char,
                    option="-" + char,
                )
            break
        return index

    def _store(self, field, spelling, token, values):
        try:
            value = coerce(field, token)
        except ValueError as error:
            raise OptionInvalidValueError(
                "invalid value %r for option '%s': %s" % (token, spelling, error),
                option=spelling,
                value=token,
                expected=field.type.__name__,
            ) from None

        if field.sequence:
            values.setdefault(field.name, []).append(value)
        else:
            values[field.name] = value

    def _positionals(self, positionals):
        values = {}
        cursor = 0

        for position, field in enumerate(self._arguments, 1):
            if field.sequence:
                values[field.name] = field.sequence(
                    self._convert(field, token, index)
                    for index, token in enumerate(positionals[cursor:], position)
                )
                cursor = len(positionals)
            elif cursor < len(positionals):
                values[field.name] = self._convert(field, positionals[cursor], position)
                cursor += 1
            elif field.required:
                raise ArgumentMissingRequiredError(
                    "missing required argument '%s' at %s position" % (field.label, ordinal(position)),
                    argument=field.name,
                    position=position,
                )
            else:
                values[field.name] = field.materialize()

        if cursor < len(positionals):
            raise ArgumentTooManyError(
                "too many arguments: expected at most %d, got %d" % (len(self._arguments), len(positionals)),
                expected=len(self._arguments),
                given=len(positionals),
                extra=tuple(positionals[cursor:]),
            )

        return values

    def _convert(self, field, token, position):
        try:
            return coerce(field, token)
        except ValueError as error:
            raise ArgumentInvalidValueError(
                "invalid value %r for argument '%s' at %s position: %s" % (token, field.label, ordinal(position), error),
                argument=field.name,
                position=position,
                value=token,
                expected=field.type.__name__,
            ) from None


__all__ = (
    "isoption",
    "Binding",
    "Binder",
)
