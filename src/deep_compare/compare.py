"""
Deep comparison of two values, reporting every place where they differ instead of a plain True/False

Values are walked kind by kind (see :class:`~deep_compare.introspect.Kind`):

    1. if exactly one value is absent -> Validity mismatch
    2. if the runtime types differ -> Type mismatch, nothing below is compared
    3. pairs of identity-bearing objects that were already visited are assumed equal (cycles)
    4. '+' annotated fields only compare zero-ness -> Zero mismatch
    5. everything else is dispatched on the kind of the values

NOTE: comparing queues drains them. Comparing the same queues twice will not see the same items.
A queue compared against itself is equal and is left untouched.
"""

import dataclasses
import logging
from dataclasses import dataclass
from .introspect import DEFAULT_INTROSPECTOR, MISSING, Kind
from .mismatches import (ComparisonCheckingError, FuncMismatch, LengthMismatch, MismatchList, NilMismatch,
    StringMismatch, TypeMismatch, ValidityMismatch, ValueMismatch, ZeroMismatch)
from .cycles import CycleGuard
from .path import ChannelNode, FieldNode, IndexNode, KeyNode, Path
from .string_diff import string_diff
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Optional
    from .introspect import TypeIntrospector


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """
    Options of a comparison.

    Args:
        ignore_array_order (bool): if True, sequences are equal if they have the same length and each wanted element
            can be matched with a distinct got element, in any order. Matching is greedy: each wanted element takes the
            first unmatched got element equal to it. Defaults to False.
        observe_field_tag (Optional[str]): if not None, the dataclass field metadata key holding per-field comparison
            rules. A field with the rule '-' is not compared at all, a field with '+' is only checked for both values
            being zero or both being non-zero. Defaults to None.
    """
    ignore_array_order: bool = False
    observe_field_tag: 'Optional[str]' = None

    def __post_init__(self):
        if not isinstance(self.ignore_array_order, bool):
            raise TypeError("`ignore_array_order` must be bool, not %s" % repr(type(self.ignore_array_order).__name__))
        if self.observe_field_tag is not None and not isinstance(self.observe_field_tag, str):
            raise TypeError("`observe_field_tag` must be str or None, not %s" % repr(type(self.observe_field_tag).__name__))

    def compare(self, got: 'Any', want: 'Any', raise_err: 'bool' = False,
        introspector: 'TypeIntrospector' = DEFAULT_INTROSPECTOR) -> 'MismatchList':
        """
        Compares `got` against `want`, returning the list of mismatches found (empty if they are equal).

        Args:
            got (Any): the value produced by the code under test
            want (Any): the expected value
            raise_err (bool): if True, raise a ``ComparisonError`` listing all mismatches instead of returning them
                whenever there are any. Defaults to False.
            introspector (TypeIntrospector): how values are inspected. Defaults to the builtin introspector.
        """
        logger.debug("Comparing %s value against %s value", type(got).__name__, type(want).__name__)

        comparison = _Comparison(self, introspector)
        comparison.compare(got, want, Path.root(introspector.type_name(want)))

        logger.debug("Comparison found %d mismatch(es)", len(comparison.mismatches))
        if raise_err:
            comparison.mismatches.raise_if_any()
        return comparison.mismatches

    def equal(self, got: 'Any', want: 'Any', introspector: 'TypeIntrospector' = DEFAULT_INTROSPECTOR) -> 'bool':
        """True if `got` and `want` compare without any mismatch"""
        return len(self.compare(got, want, introspector=introspector)) == 0


DEFAULT_CONFIG = Config()


def _get_config(config: 'Optional[Config]', options: 'dict') -> 'Config':
    """Returns `config` (or the default one) with the given keyword `options` applied on top"""
    config = DEFAULT_CONFIG if config is None else config
    if not isinstance(config, Config):
        raise TypeError("`config` must be a Config, not %s" % repr(type(config).__name__))

    unknown = set(options) - {f.name for f in dataclasses.fields(Config)}
    if unknown:
        raise TypeError("Unknown comparison option(s): %s" % ', '.join(sorted(map(repr, unknown))))
    return dataclasses.replace(config, **options) if options else config


def compare(got: 'Any', want: 'Any', config: 'Optional[Config]' = None, raise_err: 'bool' = False,
    **options: 'Any') -> 'MismatchList':
    """
    Compares `got` against `want` and returns a :class:`~deep_compare.mismatches.MismatchList` of every difference
    found, in the order they were found. An empty list means the values are equal.

    NOTE: unlike '==', a value is never equal to a different value of another type (eg: 1 and 1.0), and NaN's are never
    equal to anything, themselves included.

    Args:
        got (Any): the value produced by the code under test
        want (Any): the expected value. Its type names the root of all mismatch paths
        config (Optional[Config]): comparison options. Defaults to ``DEFAULT_CONFIG``.
        raise_err (bool): if True, then a ``ComparisonError`` will be raised whenever there are mismatches. Defaults to
            False.
        options: overrides for the fields of `config`, eg: ``compare(a, b, ignore_array_order=True)``
    """
    return _get_config(config, options).compare(got, want, raise_err=raise_err)


def equal(got: 'Any', want: 'Any', config: 'Optional[Config]' = None, **options: 'Any') -> 'bool':
    """Same as :func:`compare`, but only returns whether the values are equal"""
    return _get_config(config, options).equal(got, want)


class _Comparison:
    """State of a single comparison: the mismatches found so far and the pairs of objects already visited"""

    def __init__(self, config: 'Config', introspector: 'TypeIntrospector'):
        self.config = config
        self.inspect = introspector
        self.mismatches = MismatchList()
        self.visits = CycleGuard()

        self._dispatch = {
            Kind.ARRAY: self._compare_array,
            Kind.SLICE: self._compare_slice,
            Kind.INTERFACE: self._compare_interface,
            Kind.POINTER: self._compare_pointer,
            Kind.STRUCT: self._compare_struct,
            Kind.MAP: self._compare_map,
            Kind.FUNC: self._compare_func,
            Kind.STRING: self._compare_string,
            Kind.CHAN: self._compare_chan,
            Kind.SCALAR: self._compare_scalar,
        }

    def compare(self, got: 'Any', want: 'Any', path: 'Path', zero_only: 'bool' = False) -> 'None':
        """
        Compares got/want found at `path`, adding any mismatches. If `zero_only`, then only their zero-ness is compared
        """
        if not self._compare_validity(got, want, path):
            return
        if not self._compare_type(got, want, path):
            return
        if not self._check_visited(got, want):
            return

        if zero_only:
            self._compare_zero(got, want, path)
            return

        self._dispatch[self.inspect.kind_of(got)](got, want, path)

    def _equals(self, got: 'Any', want: 'Any') -> 'bool':
        """Compares got/want on their own, without recording anything into this comparison"""
        sub = _Comparison(self.config, self.inspect)
        sub.compare(got, want, Path())
        return len(sub.mismatches) == 0

    def _compare_validity(self, got, want, path) -> 'bool':
        """Returns True if both values are present and the comparison can go on"""
        got_absent, want_absent = self.inspect.is_absent(got), self.inspect.is_absent(want)
        if got_absent != want_absent:
            self.mismatches.add(ValidityMismatch(got, want, path))
        return not got_absent and not want_absent

    def _compare_type(self, got, want, path) -> 'bool':
        """Returns True if both values have the same runtime type and the comparison can go on"""
        if self.inspect.type_of(got) != self.inspect.type_of(want):
            self.mismatches.add(TypeMismatch(got, want, path))
            return False
        return True

    def _check_visited(self, got, want) -> 'bool':
        """Returns False if got/want have identities and were already compared against one another"""
        if self.inspect.has_identity(got) and self.inspect.has_identity(want):
            return self.visits.visit(got, want, self.inspect.type_of(got))
        return True

    def _compare_zero(self, got, want, path):
        got_zero, want_zero = self.inspect.is_zero(got), self.inspect.is_zero(want)
        if got_zero != want_zero:
            self.mismatches.add(ZeroMismatch(got_zero, want_zero, path))

    def _compare_slice(self, got, want, path):
        if got is want:
            return
        if self.inspect.is_nil(got) != self.inspect.is_nil(want):
            self.mismatches.add(NilMismatch(got, want, path))
            return
        self._compare_array(got, want, path)

    def _compare_array(self, got, want, path):
        if self.inspect.length(got) != self.inspect.length(want):
            self.mismatches.add(LengthMismatch(got, want, path))
            return
        if self.inspect.fast_equal(got, want):
            return

        if self.config.ignore_array_order:
            self._compare_array_ignore_order(got, want, path)
            return

        for i in range(self.inspect.length(want)):
            self.compare(self.inspect.element(got, i), self.inspect.element(want, i), path.add(IndexNode(i)))

    def _compare_array_ignore_order(self, got, want, path):
        unmatched = list(range(self.inspect.length(got)))

        for i in range(self.inspect.length(want)):
            ith_want = self.inspect.element(want, i)

            for pos, j in enumerate(unmatched):
                if self._equals(self.inspect.element(got, j), ith_want):
                    del unmatched[pos]
                    break
            else:
                self.mismatches.add(NilMismatch(None, ith_want, path.add(IndexNode(i))))

    def _compare_interface(self, got, want, path):
        if self.inspect.is_nil(got) != self.inspect.is_nil(want):
            self.mismatches.add(NilMismatch(got, want, path))
            return
        self.compare(self.inspect.unwrap(got), self.inspect.unwrap(want), path)

    def _compare_pointer(self, got, want, path):
        if self.inspect.address(got) == self.inspect.address(want):
            return
        self.compare(self.inspect.deref(got), self.inspect.deref(want), path)

    def _compare_struct(self, got, want, path):
        if self.inspect.is_timestamp(got):
            if not self._check(self.inspect.timestamp_equal, got, want, path):
                self.mismatches.add(ValueMismatch(got, want, path))
            return
        if got is want and self.inspect.has_identity(got):
            return

        # Plain objects of one type can still carry different attributes, fields only set on got come last
        names = self.inspect.fields(want)
        names.extend(n for n in self.inspect.fields(got) if n not in names)

        tag_name = self.config.observe_field_tag
        for name in names:
            zero_only = False
            if tag_name:
                rule = self.inspect.field_tag(want, name, tag_name)
                if rule == '-':
                    continue
                zero_only = rule == '+'

            self.compare(self.inspect.field_value(got, name), self.inspect.field_value(want, name),
                path.add(FieldNode(name)), zero_only=zero_only)

    def _compare_map(self, got, want, path):
        if got is want:
            return
        if self.inspect.is_nil(got) != self.inspect.is_nil(want):
            self.mismatches.add(NilMismatch(got, want, path))
            return
        if self.inspect.length(got) != self.inspect.length(want):
            self.mismatches.add(LengthMismatch(got, want, path))
            return

        # Keys only present in got are not reported, the lengths being equal there must be a missing key too
        for key in self.inspect.map_keys(want):
            key_path = path.add(KeyNode(key))
            got_val, want_val = self.inspect.map_get(got, key), self.inspect.map_get(want, key)

            if got_val is MISSING or want_val is MISSING:
                self.mismatches.add(ValidityMismatch(got_val, want_val, key_path))
                continue
            self.compare(got_val, want_val, key_path)

    def _compare_func(self, got, want, path):
        if not self.inspect.is_nil(got) or not self.inspect.is_nil(want):
            self.mismatches.add(FuncMismatch(got, want, path))

    def _compare_string(self, got, want, path):
        if got == want:
            return
        self.mismatches.add(StringMismatch(got, want, path, string_diff(got, want)))

    def _compare_chan(self, got, want, path):
        # A queue can't be drained pairwise against itself
        if got is want:
            return
        if self.inspect.length(got) != self.inspect.length(want):
            self.mismatches.add(LengthMismatch(got, want, path))
            return

        for position in range(1, self.inspect.length(want) + 1):
            self.compare(self.inspect.receive(got), self.inspect.receive(want), path.add(ChannelNode(position)))

    def _compare_scalar(self, got, want, path):
        g, w = self.inspect.scalar(got), self.inspect.scalar(want)
        if not self._check(lambda a, b: not (a != b), g, w, path):
            self.mismatches.add(ValueMismatch(g, w, path))

    def _check(self, eq, got, want, path) -> 'bool':
        """Calls `eq(got, want)`, turning any error raised by the values' own equality into a ComparisonCheckingError"""
        try:
            return bool(eq(got, want))
        except Exception as e:
            raise ComparisonCheckingError("Could not determine equality between values at %s\ngot: %r\nwant: %r" %
                (path, got, want)) from e
