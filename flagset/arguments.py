r"""
Flagset argument specifications.

Overview
- Specs
  • Flag: named input (--name, optionally -x), presence-only for booleans, value-bearing otherwise.
  • Positional: unnamed input bound by order (<NAME>).
  • Subcommand: nested command selected by an exact name match (git add).
  • Schema: the complete, immutable description of one command level.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Naming
- Flag.name is "--" + the field name with "_" → "-" (dry_run → --dry-run).
- Positional.name is the field name upper-cased in angle brackets (file → <FILE>).
- Subcommand.name is the command name used for matching (DryRun → dry-run by default).

Specs are built by flagset.schema.extract() from command classes; they are not
meant to be assembled by hand, though nothing prevents it.
"""
import functools
import operator
import re
from types import MappingProxyType

from .kinds import Kind
from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and debugging output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(field='force', name='--force', switch='f', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, descr, /):
    """Descriptions are optional; when given they must be non-empty strings."""
    if descr is None:
        return None
    if not isinstance(descr, str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    if not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return descr


class Flag(metaclass=ArgumentType):
    """
    Named input of a command.

    Fields
    - field: Python attribute receiving the value.
    - kind: value kind (Boolean flags never take a value).
    - switch: single-character alias ("f" for -f) or None.
    - optional: declared as `T | None`; the value is None when absent.
    - default: declared default, or Unset.
    - descr: help description or None.
    - placeholder: usage placeholder for valued flags (defaults to the long name without "--").
    """
    __introspectable__ = ("field", "name", "switch", "kind", "optional", "default", "descr", "placeholder")
    __displayable__ = ("field", "name", "switch", "kind", "optional", "default")

    def __init__(self, field, /, *, kind, switch=None, optional=False, default=Unset, descr=None, placeholder=Unset):
        if not isinstance(field, str) or not field.isidentifier():
            raise TypeError("flag 'field' must be an identifier")
        if not isinstance(kind, Kind):
            raise TypeError("flag 'kind' must be a Kind")
        self._field = field
        self._name = "--" + dashed(field)
        self._switch = switch
        self._kind = kind
        self._optional = bool(optional)
        self._default = default
        self._descr = _sanitize_descr(type(self), descr)
        self._placeholder = coalesce(placeholder, dashed(field))

    @property
    def boolean(self):
        return not self.kind.consumes

    @property
    def required(self):
        return not self.boolean and not self.optional and self.default is Unset

    def initial(self):
        """Value of the flag when it was not passed (Unset if the flag is required)."""
        if self.default is not Unset:
            return self.default
        if self.boolean:
            return False
        if self.optional:
            return None
        return Unset


class Positional(metaclass=ArgumentType):
    """
    Input bound by order.

    Fields
    - field, kind, optional, default, descr: as for Flag.
    """
    __introspectable__ = ("field", "name", "kind", "optional", "default", "descr")
    __displayable__ = ("field", "name", "kind", "optional", "default")

    def __init__(self, field, /, *, kind, optional=False, default=Unset, descr=None):
        if not isinstance(field, str) or not field.isidentifier():
            raise TypeError("positional 'field' must be an identifier")
        if not isinstance(kind, Kind):
            raise TypeError("positional 'kind' must be a Kind")
        self._field = field
        self._name = "<" + field.upper() + ">"
        self._kind = kind
        self._optional = bool(optional)
        self._default = default
        self._descr = _sanitize_descr(type(self), descr)

    @property
    def required(self):
        return not self.optional and self.default is Unset

    def initial(self):
        if self.default is not Unset:
            return self.default
        if self.optional:
            return None
        return Unset


class Subcommand(metaclass=ArgumentType):
    """
    Nested command: `name` is matched exactly; `target` is the command class and
    `schema` its (already validated) schema.
    """
    __introspectable__ = ("name", "target", "schema", "descr")
    __displayable__ = ("name", "target", "descr")

    def __init__(self, name, /, *, target, schema, descr=None):
        if not isinstance(name, str) or not name:
            raise TypeError("subcommand 'name' must be a non-empty string")
        self._name = name
        self._target = target
        self._schema = schema
        self._descr = _sanitize_descr(type(self), descr)


class Schema(metaclass=ArgumentType):
    """
    Complete description of one command level.

    Fields
    - target: the command class built from this schema.
    - name: default command name (root: kebab-cased class name or __command__).
    - description: free text shown below the usage line, or None.
    - help: custom help text replacing the generated help, or None.
    - flags / positionals / subcommands: specs in declaration order.
    - group: class of the positional record (the `positional` field), or None.

    Lookups
    - flag(name) by long name ("--force"), switch(char) by alias ("f"),
      subcommand(name) by command name; each returns None when nothing matches.
    """
    __introspectable__ = ("target", "name", "description", "help", "flags", "positionals", "subcommands", "group")
    __displayable__ = ("name", "flags", "positionals", "subcommands")

    def __init__(self, target, /, *, name, description=None, help=None, flags=(), positionals=(), subcommands=(), group=None):
        self._target = target
        self._name = name
        self._description = description
        self._help = help
        self._flags = tuple(flags)
        self._positionals = tuple(positionals)
        self._subcommands = tuple(subcommands)
        self._group = group

        self._longs = MappingProxyType({flag.name: flag for flag in self._flags})
        self._switches = MappingProxyType({flag.switch: flag for flag in self._flags if flag.switch is not None})
        self._commands = MappingProxyType({command.name: command for command in self._subcommands})

    def flag(self, name, /):
        return self._longs.get(name)

    def switch(self, char, /):
        return self._switches.get(char)

    def subcommand(self, name, /):
        return self._commands.get(name)


__all__ = (
    "ArgumentType",
    "Flag",
    "Positional",
    "Subcommand",
    "Schema",
)
