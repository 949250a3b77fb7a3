"""Local autosave of the booking form between sessions.

A draft is the form's values serialized under one key together with a schema
version and the write time in milliseconds. The attachment bytes are never
written, only the file's metadata, so a restored draft always comes back with
``uploaded_file`` set to ``None``.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from ..api.v1.schemas.booking_schemas import TravelBookingForm

logger = logging.getLogger(__name__)

FORM_STORAGE_KEY = "travel-booking-form-data"
STORAGE_VERSION = "v1"
MAX_DRAFT_AGE_MS = 7 * 24 * 60 * 60 * 1000
AUTOSAVE_DELAY = 0.5


class DraftStorage(Protocol):
    """Key-value area the drafts live in"""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryDraftStorage:
    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileDraftStorage:
    """One JSON file per key inside ``directory``"""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path(key).unlink()


@dataclass(frozen=True)
class RestoredDraft:
    values: TravelBookingForm
    had_file: bool
    saved_at_ms: int

    @property
    def notice(self) -> str:
        if self.had_file:
            return "Your previous progress has been restored. Please re-upload your document file."
        return "Your previous progress has been automatically restored."


def _now_ms() -> int:
    return int(time.time() * 1000)


class DraftManager:
    """Save, load and clear the form draft in a ``DraftStorage``"""

    def __init__(
        self,
        storage: DraftStorage,
        *,
        key: str = FORM_STORAGE_KEY,
        version: str = STORAGE_VERSION,
        max_age_ms: int = MAX_DRAFT_AGE_MS,
        clock: Callable[[], int] = _now_ms,
    ):
        self.storage = storage
        self.key = key
        self.version = version
        self.max_age_ms = max_age_ms
        self.clock = clock

    @staticmethod
    def is_pristine(values: TravelBookingForm) -> bool:
        """True when the form still holds only its starting values"""
        return values.uploaded_file is None and values.model_dump() == TravelBookingForm().model_dump()

    def save(self, values: TravelBookingForm) -> bool:
        """Write ``values`` as the current draft; False when nothing is stored.

        A form back at its starting values drops any earlier draft.
        """
        if self.is_pristine(values):
            self.clear()
            return False

        file_metadata = None
        if values.uploaded_file is not None:
            file_metadata = {
                "filename": values.uploaded_file.filename,
                "size": values.uploaded_file.size,
                "type": values.uploaded_file.type,
            }
        data = values.model_dump(mode="json")
        data["uploaded_file"] = None

        stored = {
            "version": self.version,
            "timestamp": self.clock(),
            "data": data,
            "fileMetadata": file_metadata,
        }
        try:
            self.storage.set_item(self.key, json.dumps(stored))
        except OSError as exc:
            logger.warning("Failed to save form draft: %s", exc)
            return False
        return True

    def load(self) -> Optional[RestoredDraft]:
        """Return the stored draft, discarding it if stale or unreadable"""
        try:
            raw = self.storage.get_item(self.key)
        except OSError as exc:
            logger.warning("Failed to read form draft: %s", exc)
            return None
        if not raw:
            return None

        try:
            parsed: Dict[str, Any] = json.loads(raw)
            if parsed.get("version") != self.version:
                logger.info("Discarding form draft with version %r", parsed.get("version"))
                self.clear()
                return None
            saved_at = int(parsed["timestamp"])
            if self.clock() - saved_at > self.max_age_ms:
                logger.info("Discarding form draft older than %d ms", self.max_age_ms)
                self.clear()
                return None
            data = dict(parsed.get("data") or {})
            data["uploaded_file"] = None
            values = TravelBookingForm.model_validate(data)
        except (ValueError, KeyError, TypeError, PydanticValidationError) as exc:
            logger.warning("Failed to load form draft: %s", exc)
            self.clear()
            return None

        return RestoredDraft(
            values=values,
            had_file=bool(parsed.get("fileMetadata")),
            saved_at_ms=saved_at,
        )

    def clear(self) -> None:
        self.storage.remove_item(self.key)


class DraftAutosaver:
    """Debounced draft writes on the running asyncio loop.

    Every ``schedule`` call restarts the quiet period; only the last values
    are written. While suspended nothing is scheduled.
    """

    def __init__(self, drafts: DraftManager, delay: float = AUTOSAVE_DELAY):
        self.drafts = drafts
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self._suspended = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def suspended(self) -> bool:
        return self._suspended > 0

    def schedule(self, values: TravelBookingForm) -> None:
        if self.suspended:
            return
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to debounce on: write straight away.
            self.drafts.save(values)
            return
        self._task = loop.create_task(self._save_later(values))

    async def _save_later(self, values: TravelBookingForm) -> None:
        await asyncio.sleep(self.delay)
        self.drafts.save(values)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Wait for a pending write to finish"""
        task = self._task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    @contextlib.contextmanager
    def suspend(self):
        """No autosave inside the block; a pending write is dropped"""
        self.cancel()
        self._suspended += 1
        try:
            yield
        finally:
            self._suspended -= 1
