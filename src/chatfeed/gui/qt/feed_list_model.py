"""List model exposing a feed window to Qt views."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QAbstractListModel, QModelIndex, QObject, Qt, Signal

from ...domain.models import Item, ScrollMode
from ...scroll.window_diff import WindowDiffCalculator
from ..viewmodels.chat_scroll_manager import ChatScrollManager
from ..viewmodels.snapshot import FeedSnapshot
from .roles import Roles, role_names

logger = logging.getLogger(__name__)


class FeedListModel(QAbstractListModel):
    """Mirror :class:`ChatScrollManager` snapshots as incremental row updates."""

    modeChanged = Signal(str)
    loadingChanged = Signal(bool)
    autoScrollChanged = Signal(bool)
    errorRaised = Signal(str)

    def __init__(self, manager: ChatScrollManager, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._manager = manager
        self._rows: List[Item] = []
        self._snapshot = FeedSnapshot()
        self._unsubscribe: Optional[Callable[[], None]] = manager.subscribe(self._on_snapshot)
        self._on_snapshot(manager.get_snapshot())

    # ------------------------------------------------------------------
    # Qt model API
    # ------------------------------------------------------------------
    def rowCount(self, parent: QModelIndex | None = None) -> int:  # type: ignore[override]
        if parent is not None and parent.isValid():
            return 0
        return len(self._rows)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None
        item = self._rows[index.row()]
        if role in (Roles.ITEM_ID, Qt.DisplayRole):
            return item.id
        if role == Roles.ORDERING_KEY:
            return item.key
        if role == Roles.PAYLOAD:
            return item.payload
        return None

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return role_names(super().roleNames())

    # ------------------------------------------------------------------
    # Snapshot state
    # ------------------------------------------------------------------
    @property
    def mode(self) -> ScrollMode:
        return self._snapshot.mode

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    @property
    def should_auto_scroll(self) -> bool:
        return self._snapshot.should_auto_scroll

    def item_at(self, row: int) -> Optional[Item]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def detach(self) -> None:
        """Stop following the manager."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _on_snapshot(self, snapshot: FeedSnapshot) -> None:
        previous = self._snapshot
        self._snapshot = snapshot
        if snapshot.items is not previous.items:
            self._apply_items(list(snapshot.items))
        if snapshot.mode is not previous.mode:
            self.modeChanged.emit(snapshot.mode.value)
        if snapshot.loading != previous.loading:
            self.loadingChanged.emit(snapshot.loading)
        if snapshot.should_auto_scroll != previous.should_auto_scroll:
            self.autoScrollChanged.emit(snapshot.should_auto_scroll)
        if snapshot.error is not None and snapshot.error is not previous.error:
            self.errorRaised.emit(str(snapshot.error))

    def _apply_items(self, fresh: List[Item]) -> None:
        diff = WindowDiffCalculator.calculate_diff(self._rows, fresh)
        if diff.is_empty_to_empty:
            return
        if diff.is_reset or diff.moved:
            self.beginResetModel()
            self._rows = fresh
            self.endResetModel()
            logger.debug("FeedListModel: reset to %d rows", len(fresh))
            return

        for index in diff.removed_indices:
            self.beginRemoveRows(QModelIndex(), index, index)
            self._rows.pop(index)
            self.endRemoveRows()

        for insert_index, item, _item_id in diff.inserted_items:
            position = max(0, min(insert_index, len(self._rows)))
            self.beginInsertRows(QModelIndex(), position, position)
            self._rows.insert(position, item)
            self.endInsertRows()

        if diff.changed_items:
            lookup = {item.id: row for row, item in enumerate(self._rows)}
            for replacement in diff.changed_items:
                row = lookup.get(replacement.id)
                if row is None:
                    continue
                self._rows[row] = replacement
                model_index = self.index(row, 0)
                self.dataChanged.emit(
                    model_index,
                    model_index,
                    [Roles.ORDERING_KEY, Roles.PAYLOAD],
                )
