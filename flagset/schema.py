"""
Flagset schema extraction and validation.

extract(cls) reads a command class and returns its Schema. It runs once per class
(cached) and is invoked by the Command metaclass while the class statement
executes, so every authoring mistake surfaces as a SchemaError at import time.

Field rules
- `positional`: annotated with a record class; each of its annotated attributes
  becomes a Positional, in declaration order.
- `command`: annotated with a Command subclass or a union of them; each becomes
  a Subcommand.
- any other annotated attribute becomes a Flag:
  • bool → presence flag (False unless passed)
  • T | None → optional flag (None unless passed)
  • declared class attribute value → defaulted flag
  • otherwise → required flag
- names starting with "_" and ClassVar annotations are ignored.

Class-level declarations (merged along the MRO unless noted)
- __switches__: {"field": "f"} single-letter aliases
- __descriptions__: {"field" or subcommand name: "text"}
- __formats__: {"field": "placeholder"} usage placeholders for valued flags
- __command__: command name (own class only; default: kebab-cased class name)
- __help__: custom help text printed verbatim (own class only)
- docstring: command description (own class only)

Enum variant descriptions come from an `__descriptions__` mapping declared in the
enum body.

Validation (SchemaError)
- "help" is reserved as a field name and "h" as a switch.
- switches: single ASCII letters, unique, naming existing flag fields.
- descriptions/formats: mappings of existing names to non-empty strings.
- booleans cannot be optional and cannot be positional.
- a required positional cannot follow an optional or defaulted one.
- subcommand names are unique; defaults are valid values of their kind.
"""
import functools
import inspect
import types
import typing
from collections.abc import Mapping

from .arguments import Flag, Positional, Schema, Subcommand
from .faults import SchemaError
from .kinds import Boolean, Choice, resolve
from .logger import logger
from .utils import Unset, kebab

_NOTHING = type(None)


def _fields(cls, /):
    """Annotated attributes of a class in declaration order (bases first)."""
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except NameError as error:
        raise SchemaError(f"{cls.__name__!r} has an unresolvable annotation: {error}") from None
    for field, annotation in hints.items():
        if field.startswith("_") or typing.get_origin(annotation) is typing.ClassVar or annotation is typing.ClassVar:
            continue
        yield field, annotation


def _declared(cls, field, /):
    """Class attribute value of a field along the MRO, or Unset."""
    for klass in cls.__mro__:
        if field in vars(klass):
            return vars(klass)[field]
    return Unset


def _merged(cls, attribute, /):
    """Merge a dunder mapping declaration along the MRO (subclasses override)."""
    merged = {}
    for klass in reversed(cls.__mro__):
        if (declaration := vars(klass).get(attribute, Unset)) is Unset:
            continue
        if not isinstance(declaration, Mapping):
            raise SchemaError(f"{klass.__name__!r} {attribute} must be a mapping")
        for key, value in declaration.items():
            if not isinstance(key, str):
                raise SchemaError(f"{klass.__name__!r} {attribute} keys must be strings")
            merged[key] = value
    return merged


def _unwrap(cls, field, annotation, /):
    """Split an annotation into (inner annotation, optional)."""
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        members = typing.get_args(annotation)
        inner = tuple(member for member in members if member is not _NOTHING)
        if len(inner) != 1:
            raise SchemaError(f"{cls.__name__!r} field {field!r} must have a single type, found {annotation!r}")
        return inner[0], len(inner) != len(members)
    return annotation, False


def _kind(cls, field, annotation, /):
    try:
        return resolve(annotation)
    except SchemaError as error:
        raise SchemaError(f"{cls.__name__!r} field {field!r}: {error}") from None
    except TypeError:
        raise SchemaError(f"{cls.__name__!r} field {field!r} has an unsupported type {annotation!r}") from None


def _default(cls, field, kind, optional, /):
    """Validated default of a field; None on an optional field means "no default"."""
    if (default := _declared(cls, field)) is Unset or (default is None and optional):
        return Unset
    try:
        return kind.validate(default)
    except ValueError as error:
        raise SchemaError(f"{cls.__name__!r} field {field!r} has an invalid default: {error}") from None


def _text(cls, attribute, key, value, /):
    if not isinstance(value, str) or not value.strip():
        raise SchemaError(f"{cls.__name__!r} {attribute} value for {key!r} must be a non-empty string")
    return value.strip()


def _summary(cls, /):
    """Cleaned docstring declared by the class itself, or None."""
    if not isinstance(doc := vars(cls).get("__doc__"), str) or not (doc := inspect.cleandoc(doc)):
        return None
    return doc


def _variants(kind, /):
    """Validate the variant descriptions of an enum kind."""
    if not isinstance(kind, Choice):
        return
    descriptions = vars(kind.enum).get("__descriptions__", {})
    if not isinstance(descriptions, Mapping):
        raise SchemaError(f"enum {kind.enum.__name__!r} __descriptions__ must be a mapping")
    for key, value in descriptions.items():
        if key not in kind.enum.__members__:
            raise SchemaError(f"enum {kind.enum.__name__!r} description does not match any member: {key!r}")
        _text(kind.enum, "__descriptions__", key, value)


def variant_descriptions(members, /):
    """Descriptions declared for the members of an enum, keyed by member name."""
    descriptions = vars(members).get("__descriptions__", {})
    return {key: value.strip() for key, value in descriptions.items()}


def _positionals(cls, group, /):
    if not isinstance(group, type):
        raise SchemaError(f"{cls.__name__!r} field 'positional' must be a record class, found {group!r}")

    descriptions = _merged(group, "__descriptions__")
    positionals = []
    relaxed = None

    for field, annotation in _fields(group):
        annotation, optional = _unwrap(group, field, annotation)
        kind = _kind(group, field, annotation)
        if isinstance(kind, Boolean):
            raise SchemaError(f"{group.__name__!r} positional {field!r} cannot be a boolean")
        _variants(kind)
        positional = Positional(
            field,
            kind=kind,
            optional=optional,
            default=_default(group, field, kind, optional),
            descr=_text(group, "__descriptions__", field, descriptions.pop(field)) if field in descriptions else None,
        )
        if positional.required and relaxed is not None:
            raise SchemaError(
                f"{group.__name__!r} found non-optional positional {field!r} after optional {relaxed!r}"
            )
        if not positional.required:
            relaxed = field
        positionals.append(positional)

    for key in descriptions:
        raise SchemaError(f"{group.__name__!r} description does not match any positional: {key!r}")
    return positionals


def _subcommands(cls, annotation, descriptions, /):
    from .commands import Command

    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        targets = typing.get_args(annotation)
    else:
        targets = (annotation,)

    subcommands = []
    seen = set()
    for target in targets:
        if target is _NOTHING:
            raise SchemaError(f"{cls.__name__!r} field 'command' cannot be optional")
        if not isinstance(target, type) or not issubclass(target, Command) or target is Command:
            raise SchemaError(f"{cls.__name__!r} field 'command' must name Command subclasses, found {target!r}")
        schema = extract(target)
        if schema.name in seen:
            raise SchemaError(f"{cls.__name__!r} has duplicated subcommand names: {schema.name!r}")
        seen.add(schema.name)
        if schema.name in descriptions:
            descr = _text(cls, "__descriptions__", schema.name, descriptions.pop(schema.name))
        else:
            descr = schema.description.splitlines()[0] if schema.description else None
        subcommands.append(Subcommand(schema.name, target=target, schema=schema, descr=descr))
    return subcommands


def _name(cls, /):
    if (name := vars(cls).get("__command__", Unset)) is Unset:
        return kebab(cls.__name__)
    if not isinstance(name, str) or not name or any(char.isspace() for char in name) or name.startswith("-"):
        raise SchemaError(f"{cls.__name__!r} __command__ must be a non-empty word not starting with '-'")
    return name


@functools.cache
def extract(cls, /):
    """
    Build and validate the Schema of a command class.

    Raises
    - SchemaError: the declaration cannot describe a command line.
    """
    if not isinstance(cls, type):
        raise TypeError("extract() argument must be a class")

    switches = _merged(cls, "__switches__")
    descriptions = _merged(cls, "__descriptions__")
    formats = _merged(cls, "__formats__")

    if (help := vars(cls).get("__help__")) is not None and not isinstance(help, str):
        raise SchemaError(f"{cls.__name__!r} __help__ must be a string")

    flags = []
    positionals = []
    subcommands = []
    group = None
    seen = {}

    for field, annotation in _fields(cls):
        match field:
            case "help":
                raise SchemaError(f"{cls.__name__!r} field name 'help' is reserved for the help message")
            case "positional":
                group = annotation
                positionals = _positionals(cls, annotation)
                continue
            case "command":
                subcommands = _subcommands(cls, annotation, descriptions)
                continue

        annotation, optional = _unwrap(cls, field, annotation)
        kind = _kind(cls, field, annotation)
        if isinstance(kind, Boolean) and optional:
            raise SchemaError(f"{cls.__name__!r} boolean flag {field!r} cannot be optional")
        _variants(kind)

        if (switch := switches.pop(field, None)) is not None:
            if not isinstance(switch, str) or len(switch) != 1 or not (switch.isascii() and switch.isalpha()):
                raise SchemaError(f"{cls.__name__!r} switch value for {field!r} is not a letter")
            if switch == "h":
                raise SchemaError(f"{cls.__name__!r} switch value 'h' is reserved for the help message")
            if switch in seen:
                raise SchemaError(f"{cls.__name__!r} duplicated switch values: {seen[switch]!r} and {field!r}")
            seen[switch] = field

        if (placeholder := formats.pop(field, Unset)) is not Unset:
            if isinstance(kind, Boolean):
                raise SchemaError(f"{cls.__name__!r} format for boolean flag {field!r} is never shown")
            placeholder = _text(cls, "__formats__", field, placeholder)

        flags.append(Flag(
            field,
            kind=kind,
            switch=switch,
            optional=optional,
            default=_default(cls, field, kind, optional),
            descr=_text(cls, "__descriptions__", field, descriptions.pop(field)) if field in descriptions else None,
            placeholder=placeholder,
        ))

    for key in switches:
        raise SchemaError(f"{cls.__name__!r} switch name does not match any flag: {key!r}")
    for key in descriptions:
        raise SchemaError(f"{cls.__name__!r} description does not match any field: {key!r}")
    for key in formats:
        raise SchemaError(f"{cls.__name__!r} format does not match any flag: {key!r}")

    schema = Schema(
        cls,
        name=_name(cls),
        description=_summary(cls),
        help=help,
        flags=flags,
        positionals=positionals,
        subcommands=subcommands,
        group=group,
    )
    logger.debug(
        "extracted schema %r from %s (%d flags, %d positionals, %d subcommands)",
        schema.name, cls.__qualname__, len(flags), len(positionals), len(subcommands),
    )
    return schema


__all__ = (
    "extract",
    "variant_descriptions",
)
