"""
Runtime introspection used by the comparator to walk arbitrary values

Handled kinds:
    - absent values (None, MISSING)
    - str, bytes
    - scalars: bool, int, float, complex, np.number, Enum, range, type, objects with their own __eq__
    - fixed-length sequences: tuple, numpy ndarray
    - dynamic-length sequences: list, bytearray, deque, array.array
    - maps: dict and other Mappings, set, frozenset
    - structs: dataclasses, namedtuples, plain objects, datetime/date/time
    - pointers: weakref.ref
    - polymorphic containers: cells
    - callables: functions, methods, builtins, functools.partial
    - queues: queue.Queue, queue.SimpleQueue, asyncio.Queue

The comparator never looks at a value directly, it only asks a :class:`TypeIntrospector`. Subclass it to teach the
comparator about new types.
"""

import array
import asyncio
import dataclasses
import datetime
import functools
import queue
import types
import weakref
import numpy as np
from collections import deque
from collections.abc import Mapping, MutableSequence, Set
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Hashable, Iterable, List, Optional


class _Missing:
    """Type of the MISSING sentinel, standing in for 'no value at all'"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


# Returned for missing map keys, missing attributes and dead references
MISSING = _Missing()


class Kind(Enum):
    """The kinds of values the comparator dispatches on"""
    ABSENT = 'absent'
    SCALAR = 'scalar'
    STRING = 'string'
    ARRAY = 'array'
    SLICE = 'slice'
    MAP = 'map'
    STRUCT = 'struct'
    POINTER = 'pointer'
    INTERFACE = 'interface'
    FUNC = 'func'
    CHAN = 'chan'


# Values of these types are always compared using '!='
_SCALAR_TYPES = (bool, int, float, complex, np.generic, Decimal, Fraction, Enum, range, type)

_STRING_TYPES = (str, bytes)

_SLICE_TYPES = (list, bytearray, deque, array.array)

_FUNC_TYPES = (types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.BuiltinMethodType,
    types.MethodWrapperType, types.WrapperDescriptorType, functools.partial)

_QUEUE_TYPES = (queue.Queue, queue.SimpleQueue, asyncio.Queue)

_TIMESTAMP_TYPES = (datetime.datetime, datetime.date, datetime.time)

# Kinds whose values have a storage identity distinct from their content
_IDENTITY_KINDS = (Kind.SLICE, Kind.MAP, Kind.POINTER, Kind.INTERFACE)

# The only field annotations that change how a field is compared
FIELD_TAG_VALUES = ('-', '+')


def _is_namedtuple(value: 'Any') -> 'bool':
    return isinstance(value, tuple) and hasattr(type(value), '_fields')


def _has_own_eq(value: 'Any') -> 'bool':
    return type(value).__eq__ is not object.__eq__


class TypeIntrospector:
    """
    Exposes the kind, type identity, members and zero-ness of runtime values.

    Every method takes the value(s) to inspect and never mutates them, except :meth:`receive` which pops the next
    item from a queue.
    """

    def kind_of(self, value: 'Any') -> 'Kind':
        """Returns the :class:`Kind` of the given value. Order of the checks matters, eg: weakrefs are callable"""
        if self.is_absent(value):
            return Kind.ABSENT
        if isinstance(value, _STRING_TYPES):
            return Kind.STRING
        if isinstance(value, _SCALAR_TYPES):
            return Kind.SCALAR
        if isinstance(value, _TIMESTAMP_TYPES):
            return Kind.STRUCT
        if isinstance(value, np.ndarray):
            return Kind.ARRAY if value.ndim > 0 else Kind.SCALAR
        if isinstance(value, tuple):
            return Kind.STRUCT if _is_namedtuple(value) else Kind.ARRAY
        if isinstance(value, (_SLICE_TYPES, MutableSequence)):
            return Kind.SLICE
        if isinstance(value, (Mapping, Set)):
            return Kind.MAP
        if isinstance(value, weakref.ref):
            return Kind.POINTER
        if isinstance(value, types.CellType):
            return Kind.INTERFACE
        if isinstance(value, _QUEUE_TYPES):
            return Kind.CHAN
        if isinstance(value, _FUNC_TYPES):
            return Kind.FUNC
        if dataclasses.is_dataclass(value):
            return Kind.STRUCT
        if _has_own_eq(value):
            return Kind.SCALAR
        if hasattr(value, '__dict__') or self._slot_names(type(value)):
            return Kind.STRUCT
        return Kind.SCALAR

    def type_of(self, value: 'Any') -> 'Hashable':
        """Returns the runtime type identity. Numpy arrays are only the same type if dtype and ndim also match"""
        if isinstance(value, np.ndarray):
            return (np.ndarray, value.dtype, value.ndim)
        return type(value)

    def type_name(self, value: 'Any') -> 'Optional[str]':
        """Returns a readable name for the type of the given value, or None if the value is absent"""
        if self.is_absent(value):
            return None
        if isinstance(value, np.ndarray):
            return 'ndarray[%s]' % value.dtype
        return type(value).__qualname__

    def is_absent(self, value: 'Any') -> 'bool':
        """True if there is no value at all (as opposed to a zero value)"""
        return value is None or value is MISSING

    def has_identity(self, value: 'Any') -> 'bool':
        """True if the value has a storage identity worth tracking for cycles"""
        kind = self.kind_of(value)
        if kind in _IDENTITY_KINDS:
            return True
        return kind is Kind.STRUCT and not isinstance(value, (tuple, *_TIMESTAMP_TYPES))

    def is_nil(self, value: 'Any') -> 'bool':
        """True for absent values, dead weak references and empty cells"""
        if self.is_absent(value):
            return True
        if isinstance(value, weakref.ref):
            return value() is None
        if isinstance(value, types.CellType):
            return self.unwrap(value) is MISSING
        return False

    def is_zero(self, value: 'Any') -> 'bool':
        """
        True if the value is its type's zero value: absent, False, 0, empty string or container, a dead reference,
        an empty cell, or a tuple/array/struct whose members are all zero.
        """
        kind = self.kind_of(value)

        if kind is Kind.ABSENT:
            return True
        elif kind is Kind.SCALAR:
            return not bool(self.scalar(value))
        elif kind in (Kind.STRING, Kind.SLICE, Kind.MAP):
            return len(value) == 0
        elif kind is Kind.ARRAY:
            if isinstance(value, np.ndarray) and value.dtype != object:
                return not np.any(value)
            items = value.flat if isinstance(value, np.ndarray) else value
            return all(self._member_is_zero(v) for v in items)
        elif kind is Kind.STRUCT:
            if self.is_timestamp(value):
                return False
            return all(self._member_is_zero(self.field_value(value, f)) for f in self.fields(value))
        elif kind in (Kind.POINTER, Kind.INTERFACE):
            return self.is_nil(value)
        return False

    def _member_is_zero(self, value: 'Any') -> 'bool':
        # Reference structs are like non-nil pointers, never walked so cycles can't recurse forever
        if self.kind_of(value) is Kind.STRUCT and self.has_identity(value):
            return False
        return self.is_zero(value)

    def scalar(self, value: 'Any') -> 'Any':
        """Converts a scalar into the canonical form used for comparison"""
        if isinstance(value, (np.generic, np.ndarray)):
            return value.item()
        return value

    def length(self, value: 'Any') -> 'int':
        """Length of a sequence or map, or number of buffered items in a queue"""
        if isinstance(value, _QUEUE_TYPES):
            return value.qsize()
        return len(value)

    def element(self, value: 'Any', index: 'int') -> 'Any':
        return value[index]

    def fast_equal(self, got: 'Any', want: 'Any') -> 'bool':
        """
        True if two fixed-length sequences are known to be equal without walking them. Only numeric numpy arrays are
        checked this way, NaN's are never equal.
        """
        if isinstance(got, np.ndarray) and got.dtype != object:
            return bool(np.array_equal(got, want))
        return False

    def map_keys(self, value: 'Any') -> 'Iterable':
        return iter(value)

    def map_get(self, value: 'Any', key: 'Any') -> 'Any':
        """Returns the value at `key`, or MISSING if there is none. Sets map each element to itself"""
        if key not in value:
            return MISSING
        return key if isinstance(value, Set) else value[key]

    def is_timestamp(self, value: 'Any') -> 'bool':
        return isinstance(value, _TIMESTAMP_TYPES)

    def timestamp_equal(self, got: 'Any', want: 'Any') -> 'bool':
        """Calendar timestamps use their own equality (eg: aware datetimes in different timezones)"""
        return got == want

    def fields(self, value: 'Any') -> 'List[str]':
        """Names of the fields of a struct in declaration order"""
        if dataclasses.is_dataclass(value):
            return [f.name for f in dataclasses.fields(value)]
        if _is_namedtuple(value):
            return list(value._fields)

        names = [n for n in self._slot_names(type(value)) if hasattr(value, n)]
        names.extend(n for n in getattr(value, '__dict__', {}) if n not in names)
        return names

    def _slot_names(self, cls: 'type') -> 'List[str]':
        names = []
        for klass in reversed(cls.__mro__):
            slots = klass.__dict__.get('__slots__', ())
            if isinstance(slots, str):
                slots = (slots,)
            names.extend(s for s in slots if s not in ('__dict__', '__weakref__') and s not in names)
        return names

    def field_value(self, value: 'Any', name: 'str') -> 'Any':
        return getattr(value, name, MISSING)

    def field_tag(self, value: 'Any', name: 'str', tag_name: 'str') -> 'Optional[str]':
        """
        Returns the annotation of field `name` under `tag_name`: '-', '+', or None for anything else. Annotations are
        read from dataclass field metadata, eg: ``field(metadata={'cmp': '+'})``
        """
        if not dataclasses.is_dataclass(value):
            return None
        for f in dataclasses.fields(value):
            if f.name == name:
                tag = f.metadata.get(tag_name)
                return tag if tag in FIELD_TAG_VALUES else None
        return None

    def address(self, value: 'Any') -> 'Optional[int]':
        """Identity of the object a pointer refers to, None if it refers to nothing"""
        target = self.deref(value)
        return None if target is MISSING else id(target)

    def deref(self, value: 'Any') -> 'Any':
        target = value()
        return MISSING if target is None else target

    def unwrap(self, value: 'Any') -> 'Any':
        try:
            return value.cell_contents
        except ValueError:
            return MISSING

    def receive(self, value: 'Any') -> 'Any':
        """Pops the next item off a queue. This consumes it!"""
        return value.get_nowait()


DEFAULT_INTROSPECTOR = TypeIntrospector()
