"""User-editable ordered lists seeded from preset text."""

from __future__ import annotations

import enum
import logging
import string
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ListVariant(str, enum.Enum):
    # Presets are display-only; only items after them can be edited or removed.
    PRESETS_LOCKED = "presets_locked"
    # Every item, presets included, can be edited or removed.
    FREELY_EDITABLE = "freely_editable"


def item_label(index: int) -> str:
    """Positional label: a, b, ... z, aa, ab, ..."""
    if index < 0:
        raise IndexError(index)
    letters = string.ascii_lowercase
    label = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        label = letters[rem] + label
    return label


@dataclass(frozen=True)
class ListEntry:
    label: str
    text: str
    locked: bool


class EditableList:
    """Ordered list of strings with add/edit/remove operations.

    Labels are never stored; they are derived from the live position on
    every call.
    """

    def __init__(
        self,
        presets: Sequence[str],
        items: Optional[Iterable[str]] = None,
        *,
        variant: ListVariant = ListVariant.PRESETS_LOCKED,
        min_items: int = 0,
        field: Optional[str] = None,
    ):
        self.presets = tuple(presets)
        self.variant = ListVariant(variant)
        self.min_items = min_items
        self.field = field
        self._items: List[str] = list(self.presets if items is None else items)

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def is_locked(self, index: int) -> bool:
        return self.variant is ListVariant.PRESETS_LOCKED and index < len(self.presets)

    def add(self, text: str) -> int:
        """Append ``text`` stripped; returns its index.

        Raises:
            ValidationError: if the text is blank
        """
        value = (text or "").strip()
        if not value:
            raise ValidationError("Item text cannot be empty", field=self.field)
        self._items.append(value)
        return len(self._items) - 1

    def quick_add(self, preset_index: int) -> int:
        """Add a preset back, offered only while the list is empty"""
        if self._items:
            raise ValidationError("Presets can only be quick-added to an empty list", field=self.field)
        self._items.append(self.presets[preset_index])
        return 0

    def edit(self, index: int, value: str) -> None:
        self._check_index(index)
        if self.is_locked(index):
            raise ValidationError(f"Preset item {item_label(index)}) cannot be edited", field=self.field)
        self._items[index] = value

    def remove(self, index: int) -> str:
        self._check_index(index)
        if self.is_locked(index):
            raise ValidationError(f"Preset item {item_label(index)}) cannot be removed", field=self.field)
        if len(self._items) <= self.min_items:
            raise ValidationError(
                f"At least {self.min_items} item(s) must remain", field=self.field
            )
        removed = self._items.pop(index)
        logger.debug("Removed %s item %d", self.field or "list", index)
        return removed

    def reset(self) -> None:
        self._items = list(self.presets)

    def labels(self) -> List[str]:
        return [item_label(i) for i in range(len(self._items))]

    def entries(self) -> List[ListEntry]:
        return [
            ListEntry(label=item_label(i), text=text, locked=self.is_locked(i))
            for i, text in enumerate(self._items)
        ]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"No item at position {index}")
