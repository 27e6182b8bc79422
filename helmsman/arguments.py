r"""
Helmsman argument schemas: field specs, reflection, and coercion.

Overview
- Specs
  • Argument[_T]: metadata for a positional field of an Args schema.
  • Option[_T]: metadata for a named field of an Options schema (long name,
    short flag, help text).
  Specs are optional: a bare annotated attribute (`count: int = 1`) is a field
  too. Use a spec when the field needs a short flag, a custom name, help text,
  or has no annotation (then `type=` is required).

- Reflection
  • Field: the resolved, immutable view of one field (name, scalar type,
    sequence container, optionality, default, naming and help metadata).
  • Schema: the ordered fields of an Args or Options class, validated once,
    plus lookups by long name and short flag and the instantiation of bound
    values into the user's class.

- Coercion
  • coerce(field, token): convert one raw token into the field's scalar type.

Supported field types
- bool, int, float, str, enum.Enum subclasses
- T | None (optional)
- list[T] / tuple[T, ...] of the scalars above (bare list means list[str])

Example
    >>> class Args:
    ...     file: str
    ...     rest: list[str] = []
    >>> class Options:
    ...     count: int = Option(1, short="c", descr="how many times")
    ...     dry_run: bool = False
    >>> Schema(Options, positional=False).lookup("dry-run").name
    'dry_run'

Public API
- Classes: Argument, Option, Field, Schema
- Functions: coerce
"""
import builtins
import collections.abc
import dataclasses
import enum
import functools
import operator
import re
import types
import typing
from typing import NamedTuple

from .utils import *

_SCALARS = (bool, int, float, str)
_TRUTHS = {"true": True, "1": True, "false": False, "0": False}


class FieldType(type):
    """
    Metaclass giving field specs a typename, mirrored properties, and stable reprs.

    Conventions
    - __typename__ is the class name split on capitals and lowercased
      ("Option" → "option"); it prefixes every construction error message.
    - every name in __introspectable__ becomes a read-only property over
      the matching private field.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the metadata shared by Argument and Option.

    - type: Unset or a supported field type (checked later by Schema, once
      the annotation is known).
    - descr / metavar: Unset or a non-empty string after trimming; Unset
      becomes None.
    """
    if (type := metadata["type"]) is not Unset and not isinstance(type, builtins.type) and typing.get_origin(type) is None:
        raise TypeError(f"{cls.__typename__} 'type' must be a type")

    for name in ("descr", "metavar"):
        if not isinstance(value := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(value)


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate the naming metadata of an Option.

    - name: Unset or a long option name without dashes prefix, made of
      letters/digits separated by single dashes or underscores
      ("dry-run", "log_level").
    - short: Unset or exactly one ASCII letter; digits would read as negative numbers.
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not re.fullmatch(r"[^\W\d_]([-_]?[^\W_]+)*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid long option name (without leading dashes)")
    metadata["name"] = coalesce(name)

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not re.fullmatch(r"[A-Za-z]", short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single letter")
    metadata["short"] = coalesce(short)


class Argument[_T](metaclass=FieldType):
    """
    Positional field spec for Args schemas.

    Positional fields are bound in declaration order. A field with a default
    (or an optional type) may only be followed by other such fields, and a
    sequence field captures every remaining positional token.
    """

    __introspectable__ = (
        "default",
        "type",
        "descr",
        "metavar",
    )

    def __init__(self, default=Unset, /, type=Unset, descr=Unset, metavar=Unset):
        metadata = {
            "default": default,
            "type": type,
            "descr": descr,
            "metavar": metavar,
        }
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Option[_T](metaclass=FieldType):
    """
    Named field spec for Options schemas.

    Parameters
    - default: value used when the option is absent (bool fields default to
      False, optional fields to None, sequence fields to an empty container).
    - type: field type when the attribute carries no annotation.
    - name: long name override (defaults to the field name with dashes).
    - short: single-character short flag.
    - descr: help text.
    - metavar: value label in help (defaults to the uppercased field name).
    - hidden: keep the option out of help listings.
    """

    __introspectable__ = (
        "default",
        "type",
        "name",
        "short",
        "descr",
        "metavar",
        "hidden",
    )

    def __init__(self, default=Unset, /, type=Unset, name=Unset, short=Unset, descr=Unset, metavar=Unset, hidden=False):
        metadata = {
            "default": default,
            "type": type,
            "name": name,
            "short": short,
            "descr": descr,
            "metavar": metavar,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_named_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Field(NamedTuple):
    """A resolved schema field."""
    name: str
    type: type
    sequence: type | None = None
    optional: bool = False
    default: object = Unset
    flag: str | None = None
    short: str | None = None
    descr: str | None = None
    metavar: str | None = None
    hidden: bool = False

    @property
    def boolean(self):
        return self.type is bool and self.sequence is None

    @property
    def required(self):
        """True for a positional that must be given (no default, not optional, not variadic)."""
        return self.default is Unset and not self.optional and self.sequence is None

    @property
    def label(self):
        return self.metavar or self.name.upper()

    def materialize(self):
        """Value of the field when nothing was bound to it."""
        if self.default is not Unset:
            return self.sequence(self.default) if self.sequence else self.default
        if self.sequence:
            return self.sequence()
        if self.boolean:
            return False
        return None


def _resolve_type(owner, name, annotation):
    """
    Internal: split an annotation into (scalar type, sequence container, optional).

    Raises TypeError for anything outside the supported field types.
    """
    optional = False
    if typing.get_origin(annotation) in (types.UnionType, typing.Union):
        members = [member for member in typing.get_args(annotation) if member is not type(None)]
        if len(members) != 1 or len(members) == len(typing.get_args(annotation)):
            raise TypeError(f"{owner} field {name!r} may only be a union with None")
        annotation, optional = members[0], True

    sequence = None
    origin = typing.get_origin(annotation)
    if annotation in (list, tuple):
        annotation, sequence = str, annotation
    elif origin in (list, tuple, collections.abc.Sequence):
        parameters = typing.get_args(annotation)
        if origin is tuple and (len(parameters) != 2 or parameters[1] is not Ellipsis):
            raise TypeError(f"{owner} field {name!r} must use tuple[T, ...] for sequences")
        annotation, sequence = parameters[0], (tuple if origin is tuple else list)

    if annotation not in _SCALARS and not (isinstance(annotation, type) and issubclass(annotation, enum.Enum)):
        raise TypeError(f"{owner} field {name!r} has an unsupported type {annotation!r}")

    return annotation, sequence, optional


def _defaults(source):
    """
    Internal: class-level defaults of a schema class, keyed by field name.

    NamedTuples keep their defaults in _field_defaults, dataclasses in their
    field records; plain classes in their attributes.
    """
    if hasattr(source, "_field_defaults") and issubclass(source, tuple):
        return dict(source._field_defaults)
    if dataclasses.is_dataclass(source):
        defaults = {}
        for field in dataclasses.fields(source):
            if field.default is not dataclasses.MISSING:
                defaults[field.name] = field.default
            elif field.default_factory is not dataclasses.MISSING:
                defaults[field.name] = field.default_factory()
        return defaults
    defaults = {}
    for klass in reversed(source.__mro__[:-1]):
        for name, value in vars(klass).items():
            if not name.startswith("__"):
                defaults[name] = value
    return defaults


class Schema:
    """
    Reflected, validated view of an Args or Options class.

    Parameters
    - source: the schema class, or None for "no fields".
    - positional: True for Args schemas, False for Options schemas.

    Properties
    - source: the reflected class (or None).
    - fields: tuple[Field, ...] in declaration order (annotated fields first,
      then unannotated specs carrying a type).
    - positional: the schema kind.
    """

    source = mirror("source")
    fields = mirror("fields")
    positional = mirror("positional")

    def __init__(self, source=None, /, *, positional):
        if source is not None and not isinstance(source, type):
            raise TypeError("schema source must be a class")

        self._source = source
        self._positional = bool(positional)
        self._longs = {}
        self._shorts = {}

        owner = "arguments" if positional else "options"
        annotations = typing.get_type_hints(source) if source is not None else {}
        defaults = _defaults(source) if source is not None else {}

        names = list(annotations)
        names.extend(name for name, value in defaults.items() if name not in annotations and isinstance(value, Argument | Option))

        fields = []
        for name in names:
            default = defaults.get(name, Unset)
            spec = default if isinstance(default, Argument | Option) else Unset

            if positional and isinstance(spec, Option):
                raise TypeError(f"{owner} field {name!r} cannot use an option spec")
            if not positional and isinstance(spec, Argument):
                raise TypeError(f"{owner} field {name!r} cannot use an argument spec")

            if spec is not Unset:
                default = spec.default
                annotation = annotations.get(name, spec.type)
                if annotation is Unset:
                    raise TypeError(f"{owner} field {name!r} needs an annotation or a 'type'")
            else:
                annotation = annotations[name]

            scalar, sequence, optional = _resolve_type(owner, name, annotation)
            field = Field(
                name=name,
                type=scalar,
                sequence=sequence,
                optional=optional,
                default=default,
                descr=spec.descr if spec else None,
                metavar=spec.metavar if spec else None,
            )
            if not positional:
                field = field._replace(
                    flag=(spec.name if spec else None) or kebab(name),
                    short=spec.short if spec else None,
                    hidden=spec.hidden if spec else False,
                )
            fields.append(field)

        self._fields = tuple(fields)
        (self._validate_arguments if positional else self._validate_options)(owner)

    def _validate_arguments(self, owner):
        optional = None
        for index, field in enumerate(self._fields):
            if field.sequence and index != len(self._fields) - 1:
                raise TypeError(f"{owner} field {field.name!r} is variadic and must be the last field")
            if field.required and optional is not None:
                raise TypeError(f"{owner} field {field.name!r} is required but follows optional field {optional!r}")
            if not field.required and optional is None:
                optional = field.name

    def _validate_options(self, owner):
        for field in self._fields:
            if field.required and not field.boolean:
                raise TypeError(f"{owner} field {field.name!r} must declare a default")
            for key in {field.flag, snake(field.flag)}:
                if self._longs.setdefault(key, field) is not field:
                    raise ValueError(f"{owner} name '--{field.flag}' is already in use")
            if field.short and self._shorts.setdefault(field.short, field) is not field:
                raise ValueError(f"{owner} short flag '-{field.short}' is already in use")

    def __bool__(self):
        return bool(self._fields)

    def __len__(self):
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    def __repr__(self):
        return f"schema({getattr(self._source, '__name__', None)!r}, fields={[field.name for field in self._fields]!r})"

    def lookup(self, name, /):
        """Option field for a long name (dash or underscore spelling), or None."""
        return self._longs.get(name)

    def short(self, char, /):
        """Option field for a short flag, or None."""
        return self._shorts.get(char)

    @property
    def flags(self):
        """Every visible long option name, in declaration order."""
        return [field.flag for field in self._fields if field.flag and not field.hidden]

    def instantiate(self, values, /):
        """
        Build the user's schema object from a name → value mapping.

        Dataclasses and NamedTuples are called with keyword arguments; plain
        classes get a fresh instance with the attributes assigned; a schema
        without a source yields a SimpleNamespace.
        """
        if self._source is None:
            return types.SimpleNamespace(**values)
        if dataclasses.is_dataclass(self._source) or issubclass(self._source, tuple):
            return self._source(**values)
        instance = self._source.__new__(self._source)
        for name, value in values.items():
            setattr(instance, name, value)
        return instance


def coerce(field, token, /):
    """
    Convert one raw token into the scalar type of a field.

    Raises ValueError with a short reason when the token does not fit.
    """
    if field.type is str:
        return token
    if field.type is bool:
        try:
            return _TRUTHS[token.lower()]
        except KeyError:
            raise ValueError("expected true or false") from None
    if field.type is int:
        try:
            return int(token, 10)
        except ValueError:
            raise ValueError("expected an integer") from None
    if field.type is float:
        try:
            return float(token)
        except ValueError:
            raise ValueError("expected a number") from None
    try:
        return field.type[token]
    except KeyError:
        pass
    for member in field.type:
        if str(member.value) == token:
            return member
    raise ValueError("expected one of %s" % ", ".join(member.name for member in field.type))


__all__ = (
    "Argument",
    "Option",
    "Field",
    "Schema",
    "coerce",
)

# The metaclass is an implementation detail of the specs.
del FieldType
