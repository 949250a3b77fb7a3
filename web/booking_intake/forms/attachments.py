"""Document attachment checks and encoding for the booking form."""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from typing import Optional, Sequence

from ..api.v1.schemas.booking_schemas import UploadedFile

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx")
EXTENDED_ALLOWED_EXTENSIONS = ALLOWED_EXTENSIONS + (".xlsx", ".md")

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass(frozen=True)
class CandidateFile:
    """A file the user picked or dropped, not yet accepted"""
    filename: str
    content: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``10 MB`` or ``1.5 KB``"""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def file_extension(filename: str) -> str:
    return "." + filename.rsplit(".", 1)[-1].lower()


def describe_extensions(allowed: Sequence[str]) -> str:
    names = [ext.lstrip(".").upper() for ext in allowed]
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + ", or " + names[-1]


def validate_file(
    filename: str,
    size: int,
    *,
    size_limit_enabled: bool = True,
    allowed_extensions: Sequence[str] = ALLOWED_EXTENSIONS,
    max_size: int = MAX_FILE_SIZE,
) -> Optional[str]:
    """Return the error message for a rejected file, or None if it is accepted.

    The extension is checked first; the size only when the limit is enabled.
    """
    if file_extension(filename) not in allowed_extensions:
        return (
            "Invalid file type. Please upload "
            f"{describe_extensions(allowed_extensions)} files only."
        )
    if size_limit_enabled and size > max_size:
        return f"File size exceeds {format_file_size(max_size)} limit."
    return None


def encode_file(candidate: CandidateFile) -> UploadedFile:
    content_type = candidate.content_type or mimetypes.guess_type(candidate.filename)[0] or ""
    return UploadedFile(
        filename=candidate.filename,
        size=candidate.size,
        type=content_type,
        data=base64.b64encode(candidate.content).decode("ascii"),
    )


class FileUploadField:
    """State of the upload control: accepted file, error, drag feedback.

    Click-to-browse and drag-and-drop both end in ``handle_file``.
    """

    def __init__(
        self,
        value: Optional[UploadedFile] = None,
        *,
        size_limit_enabled: bool = True,
        allowed_extensions: Sequence[str] = ALLOWED_EXTENSIONS,
    ):
        self.value = value
        self.size_limit_enabled = size_limit_enabled
        self.allowed_extensions = tuple(allowed_extensions)
        self.error: Optional[str] = None
        self.processing = False
        # Name shown by the underlying file input; cleared so the same file can be picked again.
        self.selection: Optional[str] = value.filename if value else None
        self.drag_over = False
        self._drag_counter = 0
        self._drag_has_items = False

    @property
    def drag_active(self) -> bool:
        return self._drag_counter > 0 and self._drag_has_items

    def handle_file(self, candidate: CandidateFile) -> bool:
        """Validate and encode ``candidate``; True when it was accepted.

        A rejected candidate is dropped and the previous value is kept.
        """
        self.error = None
        self.processing = True
        try:
            error = validate_file(
                candidate.filename,
                candidate.size,
                size_limit_enabled=self.size_limit_enabled,
                allowed_extensions=self.allowed_extensions,
            )
            if error:
                logger.info("Rejected attachment %s: %s", candidate.filename, error)
                self.error = error
                self.selection = self.value.filename if self.value else None
                return False
            try:
                self.value = encode_file(candidate)
            except (ValueError, TypeError) as exc:
                logger.warning("Failed to encode attachment %s: %s", candidate.filename, exc)
                self.error = "Failed to process file"
                return False
            self.selection = candidate.filename
            return True
        finally:
            self.processing = False

    def remove(self) -> None:
        self.value = None
        self.error = None
        self.selection = None

    def set_size_limit(self, enabled: bool) -> None:
        self.size_limit_enabled = enabled

    # Drag-and-drop. Nested enter/leave pairs fire when the pointer crosses
    # child elements, so the active state follows a counter.
    def drag_enter(self, has_items: bool = True) -> None:
        self._drag_counter += 1
        if has_items:
            self._drag_has_items = True

    def drag_over_event(self) -> None:
        self.drag_over = True

    def drag_leave(self) -> None:
        self._drag_counter = max(self._drag_counter - 1, 0)
        if self._drag_counter == 0:
            self.drag_over = False
            self._drag_has_items = False

    def drop(self, candidate: Optional[CandidateFile]) -> bool:
        self._drag_counter = 0
        self._drag_has_items = False
        self.drag_over = False
        if candidate is None:
            return False
        return self.handle_file(candidate)
