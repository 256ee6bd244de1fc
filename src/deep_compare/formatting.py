"""
Optional ANSI coloring of mismatch messages. Colors are decoration only: a message rendered with and without colors
reads the same once the escape codes are stripped.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any


_MAX_STR_LEN = 1000

# ANSI escape codes
RED = '\033[91m'
CYAN = '\033[96m'
PURPLE = '\033[95m'
RESET = '\033[0m'
GOT_DIFF = '\033[46m\033[30m'
WANT_DIFF = '\033[41m\033[30m'


def limit_str(a: 'Any', limit: 'int' = _MAX_STR_LEN) -> 'str':
    """repr() of `a`, cut off at `limit` characters"""
    a_str = repr(a)
    return a_str if len(a_str) < limit else (a_str[:limit] + '...')


@dataclass(frozen=True)
class Formatter:
    """
    Wraps the got/want tokens of mismatch messages in colors if `color` is True, otherwise leaves them untouched.
    """
    color: bool = False

    def _wrap(self, code: 'str', text: 'str') -> 'str':
        return code + text + RESET if self.color else text

    def got(self, text: 'str') -> 'str':
        return self._wrap(RED, text)

    def want(self, text: 'str') -> 'str':
        return self._wrap(CYAN, text)

    def nil(self, text: 'str') -> 'str':
        return self._wrap(PURPLE, text)

    def got_span(self, head: 'str', delta: 'str', tail: 'str') -> 'str':
        """Colors a got string, highlighting the differing `delta` between `head` and `tail`"""
        if not self.color:
            return head + delta + tail
        return RED + head + RESET + GOT_DIFF + delta + RESET + RED + tail + RESET

    def want_span(self, head: 'str', delta: 'str', tail: 'str') -> 'str':
        if not self.color:
            return head + delta + tail
        return CYAN + head + RESET + WANT_DIFF + delta + RESET + CYAN + tail + RESET


PLAIN = Formatter()
ANSI = Formatter(color=True)
