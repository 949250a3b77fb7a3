"""Split template strings into literal text and ``{{placeholder}}`` segments.

Special terms may embed placeholders such as ``{{RM500}}``; the form renders
literal text as-is and each placeholder as its own input. Editing one input
rebuilds the whole string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")

TEXT = "text"
PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class Segment:
    kind: str
    content: str

    @property
    def is_placeholder(self) -> bool:
        return self.kind == PLACEHOLDER


def segment_template(text: str) -> List[Segment]:
    """Scan ``text`` left to right and return its segments in order.

    An unterminated ``{{`` (or an empty ``{{}}``) stays literal text.
    """
    segments: List[Segment] = []
    last_index = 0
    for match in PLACEHOLDER_RE.finditer(text):
        if match.start() > last_index:
            segments.append(Segment(TEXT, text[last_index:match.start()]))
        segments.append(Segment(PLACEHOLDER, match.group(1)))
        last_index = match.end()
    if last_index < len(text):
        segments.append(Segment(TEXT, text[last_index:]))
    return segments


def is_plain(segments: Sequence[Segment]) -> bool:
    """True when there is nothing to render but one plain editable field"""
    return not any(s.is_placeholder for s in segments)


def join_segments(segments: Sequence[Segment]) -> str:
    return "".join(
        "{{%s}}" % s.content if s.is_placeholder else s.content
        for s in segments
    )


def edit_placeholder(text: str, segment_index: int, value: str) -> str:
    """Return ``text`` with the placeholder at ``segment_index`` replaced.

    Raises:
        IndexError: if ``segment_index`` is out of range
        ValueError: if the segment is literal text
    """
    segments = segment_template(text)
    target = segments[segment_index]
    if not target.is_placeholder:
        raise ValueError(f"Segment {segment_index} is literal text and cannot be edited")
    segments[segment_index] = Segment(PLACEHOLDER, value)
    return join_segments(segments)


def placeholder_values(text: str) -> List[str]:
    return [s.content for s in segment_template(text) if s.is_placeholder]
