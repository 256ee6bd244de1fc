"""
Locating where two strings differ, used to highlight the differing part of strings in mismatch messages
"""

from typing import NamedTuple, TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Optional, Tuple, Union

    StringLike = Union[str, bytes]


class Diff(NamedTuple):
    """
    Byte range [start, end) locating the difference inside the first of two compared strings. Both values can be used
    to slice the (utf-8 encoded) string without any bounds checking.
    """
    start: int
    end: int

    @property
    def width(self) -> 'int':
        return self.end - self.start


def to_bytes(s: 'StringLike') -> 'bytes':
    return s.encode('utf-8') if isinstance(s, str) else bytes(s)


def _char_width(buf: 'bytes', pos: 'int') -> 'int':
    """Returns the byte width of the utf-8 character starting at `pos`, or 0 if no valid character starts there"""
    for width in range(1, 5):
        try:
            buf[pos:pos + width].decode('utf-8')
        except UnicodeDecodeError:
            continue
        return width
    return 0


def string_diff(a: 'StringLike', b: 'StringLike') -> 'Optional[Diff]':
    """
    Finds the minimal byte range of `a` that differs from `b`. Returns None if both are equal.

    If `a` and `b` are equal over the length of the shorter of the two, the returned diff is the empty range at that
    length (eg: ``string_diff('hello world', 'hello world!!') == Diff(11, 11)``). If `start` falls inside a multi-byte
    character, the range is widened to cover the whole character.

    Args:
        a (Union[str, bytes]): the string to locate the difference in. Strings are measured in utf-8 bytes
        b (Union[str, bytes]): the string to compare against
    """
    a, b = to_bytes(a), to_bytes(b)
    if a == b:
        return None

    length = min(len(a), len(b))

    start, end = -1, length
    for i in range(length):
        if start == -1:
            if a[i] != b[i]:
                start = i
        elif a[i] == b[i]:
            end = i
            break

    if start == -1:
        return Diff(length, length)

    # Back up to the first byte of the character `start` landed in
    width = _char_width(a, start)
    while width == 0 and start > 0:
        start -= 1
        width = _char_width(a, start)
    end = max(end, start + width)

    return Diff(start, end)


def trim_window(length: 'int', pos: 'int', max_len: 'int') -> 'Tuple[int, int]':
    """Returns the [lo, hi) window of at most `max_len` items centered around `pos`, clamped to `length`"""
    if length <= max_len:
        return 0, length

    half = max_len // 2
    lo, hi = 0, max_len
    if pos > half:
        lo, hi = pos - half, pos + half
    if hi > length:
        lo -= hi - length
        hi = length
    return lo, hi


def trim(s: 'StringLike', pos: 'int', max_len: 'int') -> 'StringLike':
    """Trims `s` down to a window of at most `max_len` characters around `pos`"""
    lo, hi = trim_window(len(s), pos, max_len)
    return s[lo:hi]
