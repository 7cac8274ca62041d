"""In-memory cache of reconciled timelines keyed by track identifier."""

from collections import OrderedDict
from typing import TYPE_CHECKING, List, Optional

from ..exceptions import CacheError
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..core.models import LineTiming

logger = get_logger(__name__)


class TimelineCache:
    """Process-lifetime store of reconciled timelines.

    With ``max_entries=None`` the cache never evicts, which is fine for the
    handful of tracks visited in one session. A positive bound evicts the
    oldest insertion first. Hosts that navigate between tracks should call
    :meth:`invalidate` when cached data must not outlive the page.
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise CacheError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, List[LineTiming]]" = OrderedDict()

    def get(self, track_id: str) -> Optional[List["LineTiming"]]:
        """Return a copy of the cached timeline, or None."""
        timings = self._entries.get(track_id)
        if timings is None:
            return None
        return list(timings)

    def put(self, track_id: str, timings: List["LineTiming"]) -> None:
        """Store a timeline, evicting the oldest entry if bounded."""
        if track_id in self._entries:
            del self._entries[track_id]
        self._entries[track_id] = list(timings)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached timeline for {evicted}")

    def invalidate(self, track_id: Optional[str] = None) -> None:
        """Drop one track, or everything when no track id is given."""
        if track_id is None:
            self._entries.clear()
            logger.debug("Cleared timeline cache")
        else:
            self._entries.pop(track_id, None)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
