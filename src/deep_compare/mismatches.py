"""
The typed records describing where and how two values differ, and the list collecting them

Every record renders as a single line:

    <path>: <Kind> mismatch; got=<got>, want=<want>[, <extra>]
"""

import numpy as np
from collections.abc import Sequence
from .formatting import PLAIN, limit_str
from .introspect import DEFAULT_INTROSPECTOR
from .string_diff import string_diff, to_bytes, trim_window
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Iterator, List, Optional
    from .formatting import Formatter
    from .path import Path
    from .string_diff import Diff


# Longest string (in bytes) shown in full in a StringMismatch
_MAX_STR_LEN = 1000


class Mismatch:
    """A single point where got and want differ"""
    kind = ''

    def __init__(self, got: 'Any', want: 'Any', path: 'Path'):
        self.got = got
        self.want = want
        self.path = path

    def _fmt_got(self) -> 'str':
        return limit_str(self.got)

    def _fmt_want(self) -> 'str':
        return limit_str(self.want)

    def extra(self) -> 'Optional[str]':
        return None

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        line = "%s: %s mismatch; got=%s, want=%s" % (self.path.render(formatter), self.kind,
            formatter.got(self._fmt_got()), formatter.want(self._fmt_want()))
        extra = self.extra()
        return line if extra is None else line + ', ' + extra

    def __str__(self):
        return self.render()

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, self.render())


class ValidityMismatch(Mismatch):
    """Exactly one of got/want has no value at all"""
    kind = 'Validity'

    @staticmethod
    def _validity(value):
        return 'INVALID' if DEFAULT_INTROSPECTOR.is_absent(value) else 'VALID'

    def _fmt_got(self):
        return self._validity(self.got)

    def _fmt_want(self):
        return self._validity(self.want)


class TypeMismatch(Mismatch):
    """got and want have different runtime types"""
    kind = 'Type'

    @staticmethod
    def _name(value, other):
        name = DEFAULT_INTROSPECTOR.type_name(value)
        # Arrays differing only in their dimensions
        if isinstance(value, np.ndarray) and name == DEFAULT_INTROSPECTOR.type_name(other):
            return '%d-d %s' % (value.ndim, name)
        return name

    def _fmt_got(self):
        return self._name(self.got, self.want)

    def _fmt_want(self):
        return self._name(self.want, self.got)


class NilMismatch(Mismatch):
    """Exactly one of got/want is nil, or a wanted element has no match among the got elements"""
    kind = 'Nil'

    @staticmethod
    def _nil(value):
        return '<nil>' if DEFAULT_INTROSPECTOR.is_nil(value) else limit_str(value)

    def _fmt_got(self):
        return self._nil(self.got)

    def _fmt_want(self):
        return self._nil(self.want)


class LengthMismatch(Mismatch):
    """got and want have different lengths. Their elements are not compared"""
    kind = 'Length'

    def __init__(self, got: 'Any', want: 'Any', path: 'Path'):
        super().__init__(got, want, path)
        # Queues can be drained later on, so their lengths are taken right away
        self.got_len = DEFAULT_INTROSPECTOR.length(got)
        self.want_len = DEFAULT_INTROSPECTOR.length(want)

    def _fmt_got(self):
        return str(self.got_len)

    def _fmt_want(self):
        return str(self.want_len)

    def extra(self):
        return 'container=%s' % DEFAULT_INTROSPECTOR.type_name(self.want)


class FuncMismatch(Mismatch):
    """Callables are never equal, unless both are absent"""
    kind = 'Func'

    @staticmethod
    def _func(value):
        if DEFAULT_INTROSPECTOR.is_nil(value):
            return '<nil>'
        return getattr(value, '__qualname__', DEFAULT_INTROSPECTOR.type_name(value))

    def _fmt_got(self):
        return self._func(self.got)

    def _fmt_want(self):
        return self._func(self.want)

    def extra(self):
        return 'can only match if both are None'


class ValueMismatch(Mismatch):
    """Two leaf values are not equal"""
    kind = 'Value'


class ZeroMismatch(Mismatch):
    """
    Only one of got/want is a zero value while comparing a '+' annotated field. `got` and `want` hold whether each
    side was zero.
    """
    kind = 'Zero'

    def _fmt_got(self):
        return '<zero>' if self.got else '<non-zero>'

    def _fmt_want(self):
        return '<zero>' if self.want else '<non-zero>'

    def extra(self):
        return 'both values must be either zero or non-zero'


class StringMismatch(Mismatch):
    """Two strings differ. `diff` locates the differing byte range inside got"""
    kind = 'String'

    def __init__(self, got: 'Any', want: 'Any', path: 'Path', diff: 'Optional[Diff]' = None):
        super().__init__(got, want, path)
        self.diff = string_diff(got, want) if diff is None else diff

    def extra(self):
        if self.diff is None:
            return None
        return 'differs at bytes [%d:%d]' % (self.diff.start, self.diff.end)

    @staticmethod
    def _split(buf: 'bytes', start: 'int', end: 'int'):
        """Splits `buf` into head/delta/tail text around the bytes [start:end], trimming very long strings"""
        lo, hi = trim_window(len(buf), start, _MAX_STR_LEN)
        start, end = min(max(start, lo), hi), min(max(end, lo), hi)

        def text(b):
            return b.decode('utf-8', errors='replace')

        head = ('...' if lo > 0 else '') + text(buf[lo:start])
        tail = text(buf[end:hi]) + ('...' if hi < len(buf) else '')
        return head, text(buf[start:end]), tail

    def _fmt(self, value: 'Any', plain, span) -> 'str':
        """
        Quotes `value`, highlighting the differing bytes using `span`. An empty diff range marks the end of the
        shorter string, so the longer one has its remaining tail highlighted.
        """
        buf = to_bytes(value)
        if self.diff is None or len(buf) < self.diff.start or (len(buf) == self.diff.start and self.diff.width > 0):
            return plain('"%s"' % ''.join(self._split(buf, 0, 0)))

        start = self.diff.start
        end = len(buf) if self.diff.width == 0 else min(self.diff.end, len(buf))
        head, delta, tail = self._split(buf, start, end)
        return span('"' + head, delta, tail + '"')

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        line = "%s: %s mismatch; got=%s, want=%s" % (self.path.render(formatter), self.kind,
            self._fmt(self.got, formatter.got, formatter.got_span),
            self._fmt(self.want, formatter.want, formatter.want_span))
        extra = self.extra()
        return line if extra is None else line + ', ' + extra


class MismatchList(Sequence):
    """
    Append-only list of mismatches in the order they were found. An empty list means the compared values are equal.
    """

    def __init__(self):
        self._mismatches: 'List[Mismatch]' = []

    def add(self, mismatch: 'Mismatch') -> 'None':
        self._mismatches.append(mismatch)

    def __getitem__(self, index):
        return self._mismatches[index]

    def __len__(self):
        return len(self._mismatches)

    def __iter__(self) -> 'Iterator[Mismatch]':
        return iter(self._mismatches)

    def kinds(self) -> 'List[str]':
        """The `kind` of each mismatch, in order"""
        return [m.kind for m in self._mismatches]

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return '\n'.join(m.render(formatter) for m in self._mismatches)

    def raise_if_any(self) -> 'None':
        """Raises a :class:`ComparisonError` if there are any mismatches"""
        if self._mismatches:
            raise ComparisonError(self)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return 'MismatchList(%r)' % (self._mismatches,)


class ComparisonError(AssertionError):
    """Error raised whenever a comparison with `raise_err=True` finds mismatches"""

    def __init__(self, mismatches: 'MismatchList'):
        self.mismatches = mismatches
        super().__init__("Values are not equal (%d mismatch%s):\n%s" %
            (len(mismatches), '' if len(mismatches) == 1 else 'es', mismatches.render()))


class ComparisonCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to compare two values"""
