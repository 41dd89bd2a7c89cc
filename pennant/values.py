r"""
Pennant value adapters.

Overview
- Cell: a tiny mutable storage cell; allocating declarations hand one back.
- Value: the adapter base. An adapter is bound to a storage location (an
  object attribute, a mapping key, or a fresh Cell) and offers two operations:
  • set(text): parse text and, only on success, overwrite the stored value.
  • str(value): render the stored value in its canonical text form.
- Built-in kinds: Bool, Int, Int64, Uint, Uint64, String, Float, Duration.

Custom values
- Anything with a set(text) method and a meaningful __str__ can be registered
  with FlagSet.var(). Raise ValueError (or CoercionError) from set() to reject
  input. Set a truthy __boolean__ attribute to get boolean treatment (no
  argument required, bundling in -abc clusters).

Quick example:
    >>> count = Int(3)
    >>> count.set("0x10")
    >>> count.target.value, str(count)
    (16, '16')
"""
from collections.abc import MutableMapping
from datetime import timedelta

from .literals import *
from .utils import *


class Cell:
    """
    A single mutable slot, the storage behind allocating declarations.

    >>> verbose = flags.bool("verbose")
    >>> flags.parse(["--verbose"])
    >>> verbose.value
    True
    """
    __slots__ = ("value",)

    def __init__(self, value=None, /):
        self.value = value

    def __repr__(self):
        return f"Cell({self.value!r})"

    def __rich_repr__(self):
        yield self.value


class Value:
    """
    Base adapter binding a storage location to a textual grammar.

    Subclasses provide
    - __typename__: label used in messages ("int64", "duration", ...).
    - __zero__: the default when a declaration omits one.
    - validate(default): type/range check of python defaults (TypeError/ValueError).
    - parse(text): text -> python value, raising CoercionError.
    - render(value): python value -> canonical text.

    Storage
    - target Unset: a fresh Cell is allocated and attribute forced to "value".
    - target is a MutableMapping: the value lives under target[attribute].
    - anything else: the value lives in getattr(target, attribute).
    Construction writes the validated default into the storage immediately.
    """
    __typename__ = "value"
    __boolean__ = False
    __zero__ = None

    def __init__(self, default=Unset, /, target=Unset, attribute=Unset):
        if target is Unset:
            target, attribute = Cell(), "value"
        if not isinstance(attribute := coalesce(attribute, "value"), str):
            raise TypeError(f"{type(self).__typename__} value 'attribute' must be a string")
        self._target = target
        self._attribute = attribute
        self._store(self.validate(coalesce(default, type(self).__zero__)))

    @property
    def target(self):
        return self._target

    @property
    def attribute(self):
        return self._attribute

    def get(self):
        if isinstance(self._target, MutableMapping):
            return self._target[self._attribute]
        return getattr(self._target, self._attribute)

    def _store(self, value):
        if isinstance(self._target, MutableMapping):
            self._target[self._attribute] = value
        else:
            setattr(self._target, self._attribute, value)

    def set(self, text, /):
        if not isinstance(text, str):
            raise TypeError("set() argument must be a string")
        # parse first: a failure leaves the storage untouched
        self._store(self.parse(text))

    def validate(self, default, /):
        raise NotImplementedError

    def parse(self, text, /):
        raise NotImplementedError

    def render(self, value, /):
        raise NotImplementedError

    def __str__(self):
        return self.render(self.get())

    def __repr__(self):
        return f"{type(self).__name__}({str(self)!r})"

    def __rich_repr__(self):
        yield str(self)


class Bool(Value):
    __typename__ = "bool"
    __boolean__ = True
    __zero__ = False

    def validate(self, default, /):
        if not isinstance(default, bool):
            raise TypeError(f"{type(self).__typename__} default must be a bool")
        return default

    def parse(self, text, /):
        return parse_bool(text)

    def render(self, value, /):
        return "true" if value else "false"


class _Integer(Value):
    __zero__ = 0
    __signed__ = True
    __bits__ = 64

    def validate(self, default, /):
        cls = type(self)
        if not isinstance(default, int) or isinstance(default, bool):
            raise TypeError(f"{cls.__typename__} default must be an integer")
        if cls.__signed__:
            lower, upper = -(1 << (cls.__bits__ - 1)), (1 << (cls.__bits__ - 1)) - 1
        else:
            lower, upper = 0, (1 << cls.__bits__) - 1
        if not lower <= default <= upper:
            raise ValueError(f"{cls.__typename__} default must be between {lower} and {upper}")
        return default

    def parse(self, text, /):
        return parse_integer(text, signed=type(self).__signed__, bits=type(self).__bits__)

    def render(self, value, /):
        return str(value)


class Int(_Integer):
    __typename__ = "int"


class Int64(_Integer):
    __typename__ = "int64"


class Uint(_Integer):
    __typename__ = "uint"
    __signed__ = False


class Uint64(_Integer):
    __typename__ = "uint64"
    __signed__ = False


class String(Value):
    __typename__ = "string"
    __zero__ = ""

    def validate(self, default, /):
        if not isinstance(default, str):
            raise TypeError(f"{type(self).__typename__} default must be a string")
        return default

    def parse(self, text, /):
        return text

    def render(self, value, /):
        return value


class Float(Value):
    __typename__ = "float64"
    __zero__ = 0.0

    def validate(self, default, /):
        if not isinstance(default, int | float) or isinstance(default, bool):
            raise TypeError(f"{type(self).__typename__} default must be a number")
        try:
            return float(default)
        except OverflowError:
            raise ValueError(f"{type(self).__typename__} default is out of range") from None

    def parse(self, text, /):
        return parse_float(text)

    def render(self, value, /):
        return render_float(value)


class Duration(Value):
    __typename__ = "duration"
    __zero__ = timedelta(0)

    def validate(self, default, /):
        if not isinstance(default, timedelta):
            raise TypeError(f"{type(self).__typename__} default must be a timedelta")
        # the text form is limited to signed 64-bit nanoseconds
        if abs(default // timedelta(microseconds=1)) * 1000 > (1 << 63) - 1:
            raise ValueError(f"{type(self).__typename__} default must be within the signed 64-bit nanosecond range")
        return default

    def parse(self, text, /):
        return parse_duration(text)

    def render(self, value, /):
        return render_duration(value)


def isboolean(value, /):
    """
    Whether a value takes no argument on the command line (see __boolean__).
    """
    return bool(getattr(value, "__boolean__", False))


__all__ = (
    "Cell",
    "Value",
    "Bool",
    "Int",
    "Int64",
    "Uint",
    "Uint64",
    "String",
    "Float",
    "Duration",
    "isboolean",
)
