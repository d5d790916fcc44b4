"""
Flagset utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the schema, the parser and the help renderer.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level schema/commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “no value declared” where None is a legitimate value
    (an optional flag defaults to None, a flag without default is Unset).

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated methods.

- mirror("attr")
  • Read-only property exposing a private backing field (self._attr); containers
    come back as immutable views (tuple, MappingProxyType, frozenset).

- dashed(field) / kebab(name)
  • Naming rules: "dry_run" → "dry-run" for fields, "DryRun" → "dry-run" for classes.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> kebab("DryRun")
    'dry-run'
"""
import builtins
import functools
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a process-wide singleton.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    Raises
    - TypeError on wrong arity, a non-string name or a non-updatable callable.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Return an immutable view of container values.

    - Mapping → MappingProxyType (values left as-is)
    - Set → frozenset
    - Sequence (non-string) → tuple
    - anything else → unchanged
    """
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are returned as immutable views so the published specs
    cannot be mutated through their public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def dashed(field, /):
    """Turn a Python field name into its command-line spelling ("dry_run" → "dry-run")."""
    return field.replace("_", "-")


@functools.cache
def kebab(name, /):
    """Turn a CamelCase class name into a kebab-case command name ("DryRun" → "dry-run")."""
    return re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower().replace("_", "-")


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "dashed",
    "kebab",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
