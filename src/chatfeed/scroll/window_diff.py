"""Calculate diffs between two item windows."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from ..domain.models import Item


class WindowDiff:
    """Encapsulates the result of a window diff operation."""

    def __init__(self) -> None:
        self.removed_indices: List[int] = []
        self.inserted_items: List[Tuple[int, Item, str]] = []  # (index, item, id)
        self.changed_items: List[Item] = []  # fresh items whose payload/key changed
        self.moved: bool = False
        self.structure_changed: bool = False
        self.is_empty_to_empty: bool = False
        self.is_reset: bool = False

    @property
    def is_identical(self) -> bool:
        return self.is_empty_to_empty or not (
            self.is_reset
            or self.structure_changed
            or self.changed_items
            or self.moved
        )


class WindowDiffCalculator:
    """Helper class to calculate incremental updates between windows."""

    @staticmethod
    def calculate_diff(current: Sequence[Item], fresh: Sequence[Item]) -> WindowDiff:
        """Compare *current* with *fresh* and return update instructions.

        This method identifies:
        - Items to remove (by index in the current window)
        - Items to insert (by target index in the fresh window)
        - Items to update (returning the fresh item)

        Windows are always in display order, so surviving items keep their
        relative order and removals followed by insertions reproduce *fresh*.
        """
        result = WindowDiff()

        if not current:
            if not fresh:
                result.is_empty_to_empty = True
                return result
            result.is_reset = True
            return result

        if not fresh:
            result.removed_indices = list(range(len(current) - 1, -1, -1))
            result.structure_changed = True
            return result

        old_lookup: Dict[str, int] = {item.id: index for index, item in enumerate(current)}
        new_lookup: Dict[str, int] = {item.id: index for index, item in enumerate(fresh)}

        removed_ids = old_lookup.keys() - new_lookup.keys()
        inserted_ids = new_lookup.keys() - old_lookup.keys()

        # Removing rows first keeps indices stable for the insertion phase.
        result.removed_indices = sorted((old_lookup[key] for key in removed_ids), reverse=True)
        result.structure_changed = bool(result.removed_indices or inserted_ids)

        result.inserted_items = sorted(
            ((new_lookup[key], fresh[new_lookup[key]], key) for key in inserted_ids),
            key=lambda entry: entry[0],
        )

        survivors_old = [item.id for item in current if item.id in new_lookup]
        survivors_new = [item.id for item in fresh if item.id in old_lookup]
        if survivors_old != survivors_new:
            # Cannot happen for ordered windows unless a key changed; callers
            # fall back to a reset.
            result.moved = True

        for key in survivors_new:
            original: Any = current[old_lookup[key]]
            replacement = fresh[new_lookup[key]]
            if original != replacement:
                result.changed_items.append(replacement)

        return result
