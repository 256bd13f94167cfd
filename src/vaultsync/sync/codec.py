"""Parsing and serialization of tagged markdown task lines.

A synced task line looks like:

    - [ ] Buy milk #todoist #errands ⏫ 📅 2025-01-01 <!-- todoist-id:123 -->

Recognized metadata:
    - checkbox ``[ ]`` / ``[x]``
    - the sync marker (``#todoist`` by default)
    - hashtag labels ``#word``
    - priority glyphs: ⏫ high, 🔼 medium, 🔽 low
    - dates: 📅 due, ⏳ scheduled, 🛫 start, ✅ done, or text ``due:YYYY-MM-DD``
    - the Todoist ID comment ``<!-- todoist-id:123 -->``
"""

import hashlib
import re
from datetime import datetime

from ..models import ParsedTask, Priority

TASK_PATTERN = re.compile(r"^(\s*)[-*]\s+\[([ xX])\]\s+(.*)$")
REMOTE_ID_PATTERN = re.compile(r"<!--\s*todoist-id:\s*(\d+)\s*-->")
HASHTAG_PATTERN = re.compile(r"#([A-Za-z0-9_-]+)")

# Date glyphs may carry an emoji variation selector
DUE_DATE_PATTERN = re.compile(r"\U0001F4C5\ufe0f?\s*(\d{4}-\d{2}-\d{2})")
SCHEDULED_DATE_PATTERN = re.compile(r"⏳\ufe0f?\s*(\d{4}-\d{2}-\d{2})")
START_DATE_PATTERN = re.compile(r"\U0001F6EB\ufe0f?\s*(\d{4}-\d{2}-\d{2})")
DONE_DATE_PATTERN = re.compile(r"✅\ufe0f?\s*(\d{4}-\d{2}-\d{2})")
TEXT_DUE_DATE_PATTERN = re.compile(r"due:(\d{4}-\d{2}-\d{2})", re.IGNORECASE)

DUE_GLYPH = "\U0001F4C5"

# Highest first: the first glyph found wins
PRIORITY_GLYPHS: list[tuple[Priority, str]] = [
    (Priority.HIGH, "⏫"),
    (Priority.MEDIUM, "\U0001F53C"),
    (Priority.LOW, "\U0001F53D"),
]

_DATE_PRECEDENCE = (DUE_DATE_PATTERN, SCHEDULED_DATE_PATTERN, TEXT_DUE_DATE_PATTERN)
_STRIPPED_DATES = (
    DUE_DATE_PATTERN,
    SCHEDULED_DATE_PATTERN,
    START_DATE_PATTERN,
    DONE_DATE_PATTERN,
    TEXT_DUE_DATE_PATTERN,
)


def _marker_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(re.escape(marker), re.IGNORECASE)


def _marker_tag_pattern(marker: str) -> re.Pattern[str]:
    """Match the marker only as a whole tag, so "#todoist-bot" stays a label."""
    return re.compile(re.escape(marker) + r"(?![A-Za-z0-9_-])", re.IGNORECASE)


def is_task_line(line: str) -> bool:
    """Check if a line is a markdown checkbox item (tagged or not)."""
    return TASK_PATTERN.match(line) is not None


def has_marker(text: str, marker: str) -> bool:
    """Case-insensitive substring check for the sync marker."""
    return _marker_pattern(marker).search(text) is not None


def extract_remote_id(text: str) -> str | None:
    """Return the Todoist ID from an id comment, if present."""
    match = REMOTE_ID_PATTERN.search(text)
    return match.group(1) if match else None


def extract_due_date(text: str) -> str | None:
    """Extract a single due date: 📅 beats ⏳ beats ``due:``."""
    for pattern in _DATE_PRECEDENCE:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_priority(text: str) -> Priority:
    """Extract priority from the glyph ladder, defaulting to NONE."""
    for priority, glyph in PRIORITY_GLYPHS:
        if glyph in text:
            return priority
    return Priority.NONE


def extract_labels(text: str, marker: str) -> list[str]:
    """Extract hashtag labels, excluding the sync marker itself.

    Order is preserved and duplicates are kept.
    """
    marker_name = marker.lstrip("#").lower()
    return [
        tag for tag in HASHTAG_PATTERN.findall(text) if tag.lower() != marker_name
    ]


def strip_metadata(text: str, marker: str) -> str:
    """Remove every recognized metadata token and collapse whitespace.

    Strips the id comment, the marker, dates, priority glyphs and hashtag
    labels, leaving only the human-written task text.
    """
    cleaned = REMOTE_ID_PATTERN.sub("", text)
    cleaned = _marker_tag_pattern(marker).sub("", cleaned)
    for pattern in _STRIPPED_DATES:
        cleaned = pattern.sub("", cleaned)
    for _, glyph in PRIORITY_GLYPHS:
        cleaned = cleaned.replace(glyph, "")
    cleaned = HASHTAG_PATTERN.sub("", cleaned)
    cleaned = cleaned.replace("\ufe0f", "")
    return re.sub(r"\s+", " ", cleaned).strip()


def parse_line(
    line: str,
    line_index: int,
    file_path: str,
    marker: str,
    modified_at: datetime | None = None,
) -> ParsedTask | None:
    """Parse a single line into a ParsedTask.

    Args:
        line: Raw document line
        line_index: 0-based line number within the document
        file_path: Vault-relative document path
        marker: Sync marker, e.g. "#todoist"
        modified_at: Document modification time

    Returns:
        ParsedTask, or None if the line is not a checkbox item carrying
        the marker
    """
    match = TASK_PATTERN.match(line)
    if not match:
        return None

    _, checkbox, body = match.groups()
    if not has_marker(body, marker):
        return None

    return ParsedTask(
        file_path=file_path,
        line_index=line_index,
        raw_line=line,
        content=strip_metadata(body, marker),
        completed=checkbox.lower() == "x",
        remote_id=extract_remote_id(body),
        due_date=extract_due_date(body),
        priority=extract_priority(body),
        labels=extract_labels(body, marker),
        modified_at=modified_at,
    )


def serialize_line(task: ParsedTask, marker: str) -> str:
    """Build a task line from structured fields.

    Order: checkbox, content, marker, labels, priority, due date, id comment.
    Leading indentation of the original line is kept so nested tasks stay
    nested.
    """
    indent_match = re.match(r"^(\s*)", task.raw_line)
    indent = indent_match.group(1) if indent_match else ""
    checkbox = "[x]" if task.completed else "[ ]"

    parts = [f"{indent}- {checkbox}"]
    if task.content:
        parts.append(task.content)
    parts.append(marker)
    parts.extend(f"#{label}" for label in task.labels)
    for priority, glyph in PRIORITY_GLYPHS:
        if task.priority == priority:
            parts.append(glyph)
    if task.due_date:
        parts.append(f"{DUE_GLYPH} {task.due_date}")
    if task.remote_id:
        parts.append(f"<!-- todoist-id:{task.remote_id} -->")
    return " ".join(parts)


def attach_remote_id(line: str, remote_id: str) -> str:
    """Replace any existing id comment with a fresh one at the end of the line."""
    stripped = REMOTE_ID_PATTERN.sub("", line).rstrip()
    return f"{stripped} <!-- todoist-id:{remote_id} -->"


def set_completed(line: str, completed: bool) -> str:
    """Flip only the checkbox glyph. Idempotent."""
    match = TASK_PATTERN.match(line)
    if not match:
        return line
    if (match.group(2).lower() == "x") == completed:
        return line
    start, end = match.span(2)
    return line[:start] + ("x" if completed else " ") + line[end:]


def fingerprint(task: ParsedTask) -> str:
    """Digest of the task's semantic fields, used to detect drift.

    Depends only on content, completion, due date, priority and labels.
    """
    data = "|".join(
        [
            task.content,
            "true" if task.completed else "false",
            task.due_date or "",
            str(int(task.priority)),
            ",".join(task.labels),
        ]
    )
    return hashlib.sha1(data.encode("utf-8")).hexdigest()
