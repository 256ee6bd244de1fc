"""
Paths from the root of a comparison down to the sub-value where a mismatch was found, eg: ``(Book).Authors[0].Name``
"""

from dataclasses import dataclass
from .formatting import PLAIN
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Iterator, Optional, Tuple
    from typing_extensions import Self
    from .formatting import Formatter


class PathNode:
    """A single step of a :class:`Path`"""

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        raise NotImplementedError

    def __str__(self):
        return self.render()


@dataclass(frozen=True)
class RootNode(PathNode):
    """The root of a comparison, named after the type of the wanted value (None if it is absent)"""
    type_name: 'Optional[str]'

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        if self.type_name is None:
            return '<%s>' % formatter.nil('None')
        return '(%s)' % self.type_name


@dataclass(frozen=True)
class IndexNode(PathNode):
    index: int

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return '[%d]' % self.index


@dataclass(frozen=True)
class KeyNode(PathNode):
    key: 'Any'

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return '[%r]' % (self.key,)


@dataclass(frozen=True)
class FieldNode(PathNode):
    name: str

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return '.%s' % self.name


@dataclass(frozen=True)
class ChannelNode(PathNode):
    """Position of an item received from a queue, starting at 1"""
    position: int

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return '[%d]' % self.position


class Path:
    """
    Immutable sequence of :class:`PathNode`'s. :meth:`add` returns a new path, so paths handed out to mismatches never
    change as the comparison carries on.
    """
    __slots__ = ('_nodes',)

    def __init__(self, nodes: 'Tuple[PathNode, ...]' = ()):
        self._nodes = tuple(nodes)

    @classmethod
    def root(cls, type_name: 'Optional[str]') -> 'Self':
        return cls((RootNode(type_name),))

    def add(self, node: 'PathNode') -> 'Path':
        return Path(self._nodes + (node,))

    @property
    def nodes(self) -> 'Tuple[PathNode, ...]':
        return self._nodes

    def render(self, formatter: 'Formatter' = PLAIN) -> 'str':
        return ''.join(n.render(formatter) for n in self._nodes)

    def __len__(self):
        return len(self._nodes)

    def __iter__(self) -> 'Iterator[PathNode]':
        return iter(self._nodes)

    def __eq__(self, other):
        return isinstance(other, Path) and self._nodes == other._nodes

    def __hash__(self):
        return hash(self._nodes)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return 'Path(%r)' % (self.render(),)
