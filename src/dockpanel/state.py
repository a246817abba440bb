"""
Per-panel state: the displayed snapshot, its rendered lines and the selection.

Each resource panel (containers, images, volumes, networks) owns one
ResourcePanel. Methods are called from worker threads while the UI thread
reads ``lines``; all state access goes through an RLock and every change
bumps ``version`` so the view can tell when to re-render.

Action resolution:
  An action never trusts the displayed snapshot. It re-fetches the listing
  and resolves the selection against it:
    - track_by="index" (default): whatever now occupies the selected row is
      acted on, provided the row still exists.
    - track_by="id": the identifier remembered at selection time must still
      be present, wherever it now sits; otherwise the action is a no-op.
  On success the panel refreshes; on failure the error propagates and the
  displayed snapshot is left alone.
"""

import threading
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .config import TRACK_BY_ID, TRACK_BY_INDEX
from .errors import EngineError
from .model import Selection

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ActionResult:
    performed: bool
    target: Any = None
    value: Any = None


NOT_PERFORMED = ActionResult(performed=False)


class ResourcePanel(Generic[T]):
    """Snapshot and selection of one resource kind."""

    def __init__(self, kind: str, lister: Callable[[], List[T]],
                 formatter: Callable[[T], str], track_by: str = TRACK_BY_INDEX):
        if track_by not in (TRACK_BY_ID, TRACK_BY_INDEX):
            raise ValueError(f"track_by must be 'id' or 'index', got {track_by!r}")
        self.kind = kind
        self.track_by = track_by
        self._lister = lister
        self._formatter = formatter
        self._lock = threading.RLock()
        self._snapshot: List[T] = []
        self._lines: List[str] = []
        self._selection = Selection()
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    @property
    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._snapshot)

    @property
    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    @property
    def selection(self) -> Selection:
        with self._lock:
            return Selection(self._selection.index, self._selection.key)

    def refresh(self) -> bool:
        """
        Re-fetch the listing and re-render every row.

        The selection is left as it is, even if it now points past the end.
        Returns False (and keeps the previous snapshot) if the listing failed.
        """
        try:
            items = self._lister()
        except EngineError as e:
            logger.error(f"Error fetching {self.kind}: {e}")
            return False
        lines = [self._formatter(item) for item in items]
        with self._lock:
            self._snapshot = items
            self._lines = lines
            self._version += 1
        return True

    def select(self, index: int) -> None:
        with self._lock:
            key = ""
            if 0 <= index < len(self._snapshot):
                key = self._snapshot[index].key
                logger.debug(f"Selected {self.kind[:-1]}: {self._lines[index]}")
            self._selection = Selection(index, key)
            self._version += 1

    def display_index(self) -> Optional[int]:
        """Row of the displayed snapshot to highlight for the current selection."""
        with self._lock:
            sel = self._selection
            if sel.is_empty:
                return None
            if self.track_by == TRACK_BY_INDEX:
                return sel.index if sel.index < len(self._snapshot) else None
            for position, item in enumerate(self._snapshot):
                if item.key == sel.key:
                    return position
            return None

    def clear_selection(self) -> None:
        with self._lock:
            self._selection = Selection()
            self._version += 1

    def resolve(self) -> Optional[T]:
        """
        Resolve the selection against a freshly fetched listing.

        Returns None when nothing is selected or the selection no longer
        resolves. Raises EngineError if the listing itself fails.
        """
        selection = self.selection
        if selection.is_empty:
            return None

        fresh = self._lister()

        if self.track_by == TRACK_BY_INDEX:
            if selection.index >= len(fresh):
                logger.info(f"Selected {self.kind} row {selection.index} is gone (now {len(fresh)} rows)")
                return None
            return fresh[selection.index]

        for item in fresh:
            if item.key == selection.key:
                return item
        logger.info(f"Selected {self.kind[:-1]} {selection.key[:12]} no longer exists")
        return None

    def action(self, operation: Callable[[str], Any], refresh: bool = True) -> ActionResult:
        """
        Run ``operation`` on the identifier of the resolved selection.

        A single engine call, then a refresh if it succeeded. Errors from
        ``operation`` propagate without a retry.
        """
        target = self.resolve()
        if target is None:
            return NOT_PERFORMED
        value = operation(target.key)
        if refresh:
            self.refresh()
        return ActionResult(performed=True, target=target, value=value)
