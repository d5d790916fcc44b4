"""
Flagset declarative command classes.

Overview
- Record: plain declarative class whose annotated attributes are its fields.
  Used for positional groups (the `positional` field of a command) and as the
  base of Command. Supports keyword construction, equality by field values,
  pattern matching by field order and a stable repr/__rich_repr__.
- Command: a Record describing one command level. The CommandType metaclass
  extracts and validates the schema while the class statement runs and caches
  it on the class as __schema__.

Quick example
    >>> class Add(Command):
    ...     '''Add files to the index.'''
    ...     __switches__ = {"force": "f"}
    ...     force: bool
    ...     positional: Files
    ...
    >>> class Git(Command):
    ...     command: Add | Remove
    ...
    >>> result = Git.parse(["add", "-f", "README.md"])
    >>> match result.command:
    ...     case Add(force=True): ...

Construction rules
- Fields missing from the keywords take their declared default; optional fields
  (`T | None`) take None. Command flags follow the parser: booleans take False.
- Unknown keywords and missing required fields raise TypeError.
"""
import functools
import operator
import re
import types
import typing

from .logger import logger
from .schema import extract
from .utils import *


def _annotated(cls, /):
    """(field, optional) pairs of the annotated public attributes of a class."""
    for field, annotation in typing.get_type_hints(cls, include_extras=True).items():
        if field.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
            continue
        optional = (
            typing.get_origin(annotation) in (typing.Union, types.UnionType) and
            type(None) in typing.get_args(annotation)
        )
        yield field, optional


class RecordType(type):
    """
    Metaclass of declarative records.

    Responsibilities
    - Collect the field names (__fields__) and the optional ones (__optional__)
      once, when the class is created; __match_args__ follows __fields__.
    - Provide stable, readable __repr__/__rich_repr__ listing field values.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
        )

        fields = dict(_annotated(self))
        self.__fields__ = tuple(fields)
        self.__optional__ = frozenset(field for field, optional in fields.items() if optional)
        self.__match_args__ = self.__fields__

        @rename("__repr__")
        def __repr__(self):
            """
            Return a constructor-like representation, e.g. Add(force=True, positional=Files(...)).
            """
            return f"{type(self).__name__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (field, value) pairs for pretty printers.
            """
            for field in type(self).__fields__:
                yield field, getattr(self, field, Unset)
        self.__rich_repr__ = __rich_repr__

        return self


class Record(metaclass=RecordType):
    """Base of declarative records (see module documentation)."""

    def __init__(self, /, **values):
        for field in type(self).__fields__:
            if field in values:
                value = values.pop(field)
            elif (value := type(self).__initial__(field)) is Unset:
                raise TypeError(f"{type(self).__name__}() missing value for field {field!r}")
            setattr(self, field, value)
        if values:
            raise TypeError(f"{type(self).__name__}() got unexpected fields: {', '.join(map(repr, values))}")

    @classmethod
    def __initial__(cls, field, /):
        """Value of a field omitted from the constructor, or Unset."""
        for klass in cls.__mro__:
            if field in vars(klass):
                return vars(klass)[field]
        return None if field in cls.__optional__ else Unset

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, field, Unset) == getattr(other, field, Unset) for field in type(self).__fields__)

    __hash__ = None


class CommandType(RecordType):
    """
    Metaclass that turns declarative classes into parseable commands.

    Responsibilities
    - Run schema extraction and validation for every Command subclass and cache
      the result as __schema__ (SchemaError propagates out of the class statement).

    Options (metaclass construction-time)
    - abstract: when True, the class is a base without a schema of its own.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(cls, name, bases, namespace)
        if options.get("abstract", False):
            self.__schema__ = None
            return self
        self.__schema__ = extract(self)
        logger.debug("declared command %r (%s)", self.__schema__.name, self.__qualname__)
        return self


class Command(Record, metaclass=CommandType, abstract=True):
    """Base of declarative commands (see module documentation)."""

    @classmethod
    def __initial__(cls, field, /):
        if cls.__schema__ is not None:
            for flag in cls.__schema__.flags:
                if flag.field == field:
                    return flag.initial()
        return super().__initial__(field)

    @classmethod
    def parse(cls, tokens=Unset, /, **options):
        """Parse tokens into an instance of this command (see flagset.parser.parse)."""
        from .parser import parse

        return parse(cls, tokens, **options)

    @classmethod
    def parse_or_exit(cls, tokens=Unset, /, **options):
        """Like parse(), but exit the process on help (status 0) and errors (status 1)."""
        from .parser import parse_or_exit

        return parse_or_exit(cls, tokens, **options)


__all__ = (
    "RecordType",
    "Record",
    "CommandType",
    "Command",
)
