"""
Tracking of already-compared object pairs so cyclic values don't recurse forever
"""

import logging
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Hashable, List, Set, Tuple


logger = logging.getLogger(__name__)


class CycleGuard:
    """
    Set of (id, id, type) triples for the pairs of objects visited during one comparison.

    The ids are stored as (min, max) so swapping got/want maps onto the same visit. A pair seen a second time is
    assumed equal, which is optimistic: it stops the recursion on cycles but doesn't prove anything. Visited objects
    are kept alive until the guard is discarded so their ids can't be reused by new objects mid-comparison.
    """

    def __init__(self):
        self._visits: 'Set[Tuple[int, int, Hashable]]' = set()
        self._pinned: 'List[Tuple[Any, Any]]' = []

    def visit(self, got: 'Any', want: 'Any', type_key: 'Hashable') -> 'bool':
        """Records a visit of got/want. Returns False if the pair was already visited, True otherwise"""
        a, b = id(got), id(want)
        key = (min(a, b), max(a, b), type_key)
        if key in self._visits:
            logger.debug("Pair of %s objects already visited, assuming they are equal", type_key)
            return False

        self._visits.add(key)
        self._pinned.append((got, want))
        return True

    def __len__(self):
        return len(self._visits)
