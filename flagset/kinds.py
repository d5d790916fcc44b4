"""
Flagset value kinds (the coercion engine).

Overview
- A Kind describes the value type of a flag or positional and converts raw tokens:
  • Boolean: presence flags; never consumes a token.
  • String: the token, unchanged.
  • Integer(bits, signed): base-10 integers with an optional sign; bits=None is unbounded.
  • Float: decimal floats (Python float() syntax without whitespace or "_" digit grouping,
    which Integer rejects too).
  • Choice(enum): one variant of an Enum, by its command-line name.
- resolve(annotation) maps a field annotation to its Kind.
- coerce(kind, token) converts a token or raises a CoercionError subclass.

Width aliases
- i8, i16, i32, i64, u8, u16, u32, u64 are typing.Annotated[int, Integer(...)]
  and can be used directly as field annotations.

Variant names
- An enum member is spelled by its name with "_" → "-" (Size.extra_large → "extra-large").
  Matching is exact and case-sensitive against that spelling, so Size.EXTRA_LARGE
  is passed as "EXTRA-LARGE".
"""
import enum
import functools
import re
from typing import Annotated, get_args, get_origin

from .faults import (
    IntegerOverflowError,
    InvalidFloatError,
    InvalidIntegerError,
    SchemaError,
    UnrecognizedOptionError,
)
from .utils import dashed


class Kind:
    """
    Base of every value kind.

    Subclasses implement coerce(token) and validate(value); kinds compare and
    hash by their parameters so identical declarations share cached results.
    """
    __slots__ = ()
    consumes = True

    def coerce(self, token, /):
        raise NotImplementedError

    def validate(self, value, /):
        """Return a declared default normalized to this kind, or raise ValueError."""
        raise NotImplementedError

    def describe(self):
        return type(self).__name__.lower()

    def _key(self):
        return ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self), self._key()))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        yield from ()


class Boolean(Kind):
    __slots__ = ()
    consumes = False

    def coerce(self, token, /):
        return True

    def validate(self, value, /):
        if not isinstance(value, bool):
            raise ValueError("expected a boolean, found %r" % (value,))
        return value


class String(Kind):
    __slots__ = ()

    def coerce(self, token, /):
        return token

    def validate(self, value, /):
        if not isinstance(value, str):
            raise ValueError("expected a string, found %r" % (value,))
        return value


class Integer(Kind):
    """
    Base-10 integer, bounded to a bit width when `bits` is given.

    - signed: -(2**(bits-1)) <= value < 2**(bits-1)
    - unsigned: 0 <= value < 2**bits ("-0" is zero and therefore accepted)
    """
    __slots__ = ("bits", "signed")

    def __init__(self, bits=None, /, *, signed=True):
        if bits is not None and (not isinstance(bits, int) or isinstance(bits, bool) or bits < 1):
            raise TypeError("Integer() bits must be a positive integer")
        self.bits = bits
        self.signed = bool(signed)

    @property
    def bounds(self):
        if self.bits is None:
            return None
        if self.signed:
            return -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        return 0, (1 << self.bits) - 1

    def describe(self):
        if self.bits is None:
            return "integer"
        return "%d-bit %s integer" % (self.bits, "signed" if self.signed else "unsigned")

    def coerce(self, token, /):
        if not re.fullmatch(r"[+-]?[0-9]+", token):
            raise InvalidIntegerError("expected integer number, found '%s'" % token, token=token, kind=self)
        value = int(token)
        if (bounds := self.bounds) is not None and not bounds[0] <= value <= bounds[1]:
            raise IntegerOverflowError("value out of bounds for %s: %s" % (self.describe(), token), token=token, kind=self)
        return value

    def validate(self, value, /):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError("expected an integer, found %r" % (value,))
        if (bounds := self.bounds) is not None and not bounds[0] <= value <= bounds[1]:
            raise ValueError("%d is out of bounds for %s" % (value, self.describe()))
        return value

    def _key(self):
        return self.bits, self.signed

    def __rich_repr__(self):
        yield "bits", self.bits
        yield "signed", self.signed


class Float(Kind):
    __slots__ = ()

    def coerce(self, token, /):
        try:
            if token != token.strip() or "_" in token:
                raise ValueError(token)
            return float(token)
        except ValueError:
            raise InvalidFloatError("expected numerical value, found '%s'" % token, token=token, kind=self) from None

    def validate(self, value, /):
        if not isinstance(value, int | float) or isinstance(value, bool):
            raise ValueError("expected a number, found %r" % (value,))
        return float(value)

    def describe(self):
        return "number"


class Choice(Kind):
    """One variant of an Enum, spelled by its command-line name."""
    __slots__ = ("enum", "_variants")

    def __init__(self, members, /):
        if not isinstance(members, type) or not issubclass(members, enum.Enum):
            raise TypeError("Choice() argument must be an Enum subclass")
        self.enum = members
        self._variants = {variant(member): member for member in members}

    @property
    def choices(self):
        return tuple(self._variants)

    def coerce(self, token, /):
        try:
            return self._variants[token]
        except KeyError:
            raise UnrecognizedOptionError("unrecognized option: '%s'" % token, token=token, kind=self, choices=self.choices) from None

    def validate(self, value, /):
        if not isinstance(value, self.enum):
            raise ValueError("expected a member of %s, found %r" % (self.enum.__name__, value))
        return value

    def describe(self):
        return "one of " + ", ".join(self.choices)

    def _key(self):
        return (self.enum,)

    def __rich_repr__(self):
        yield "enum", self.enum


def variant(member, /):
    """Command-line spelling of an enum member (Mode.slow_mode → "slow-mode", Mode.Fast → "Fast")."""
    return dashed(member.name)


@functools.cache
def resolve(annotation, /):
    """
    Map a field annotation (optionality already stripped) to its Kind.

    Raises
    - SchemaError for annotations with no command-line representation.
    """
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        for kind in metadata:
            if isinstance(kind, Kind):
                return kind
        return resolve(base)
    match annotation:
        case type() if annotation is bool:
            return Boolean()
        case type() if annotation is str:
            return String()
        case type() if annotation is int:
            return Integer()
        case type() if annotation is float:
            return Float()
        case type() if issubclass(annotation, enum.Enum):
            if not len(annotation):
                raise SchemaError(f"enum {annotation.__name__!r} has no members")
            return Choice(annotation)
    raise SchemaError(f"unsupported field type {annotation!r}")


def coerce(kind, token, /):
    """Convert a raw token with the given kind (CoercionError subclasses on failure)."""
    if not isinstance(kind, Kind):
        raise TypeError("coerce() first argument must be a Kind")
    return kind.coerce(token)


def canonical(kind, value, /):
    """Token spelling that coerces back to `value` (repr for floats, names for variants)."""
    match kind:
        case Boolean():
            return ""
        case Choice():
            return variant(value)
        case Float():
            return repr(value)
        case _:
            return str(value)


i8 = Annotated[int, Integer(8)]
i16 = Annotated[int, Integer(16)]
i32 = Annotated[int, Integer(32)]
i64 = Annotated[int, Integer(64)]
u8 = Annotated[int, Integer(8, signed=False)]
u16 = Annotated[int, Integer(16, signed=False)]
u32 = Annotated[int, Integer(32, signed=False)]
u64 = Annotated[int, Integer(64, signed=False)]


__all__ = (
    # Kinds
    "Kind",
    "Boolean",
    "String",
    "Integer",
    "Float",
    "Choice",

    # Functions
    "resolve",
    "coerce",
    "canonical",
    "variant",

    # Width aliases
    "i8",
    "i16",
    "i32",
    "i64",
    "u8",
    "u16",
    "u32",
    "u64",
)
