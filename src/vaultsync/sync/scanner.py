"""Vault scanning: find every tagged task line across all documents."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ..models import ParsedTask
from .codec import is_task_line, parse_line

if TYPE_CHECKING:
    from ..repositories import DocumentStoreProtocol

logger = logging.getLogger(__name__)


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def extract_description(lines: list[str], task_index: int) -> str:
    """Collect the indented description block below a task line.

    Blank lines are skipped. Collection stops at the first non-blank line
    indented no deeper than the task, or at any checkbox line.

    Example:
        - [ ] Plan trip #todoist
            Book flights
            Ask about visas
        - [ ] Next task

    gives "Book flights\\nAsk about visas".
    """
    task_indent = _indent_width(lines[task_index])
    description: list[str] = []

    for line in lines[task_index + 1 :]:
        stripped = line.strip()
        if stripped and _indent_width(line) <= task_indent:
            break
        if is_task_line(line):
            break
        if stripped:
            description.append(stripped)

    return "\n".join(description)


def parse_document(
    text: str,
    file_path: str,
    marker: str,
    modified_at: datetime | None = None,
) -> list[ParsedTask]:
    """Parse all tagged tasks (with descriptions) from one document's text."""
    lines = text.split("\n")
    tasks: list[ParsedTask] = []

    for index, line in enumerate(lines):
        task = parse_line(line, index, file_path, marker, modified_at)
        if task is None:
            continue
        task.description = extract_description(lines, index)
        tasks.append(task)

    return tasks


async def scan_all(store: DocumentStoreProtocol, marker: str) -> list[ParsedTask]:
    """Read every document once and return all tagged tasks in the vault.

    A document that cannot be read is logged and skipped; it never aborts
    the scan of the remaining documents.
    """
    tasks: list[ParsedTask] = []
    paths = await store.list_documents()

    for path in paths:
        try:
            text = await store.read(path)
            modified_at = await store.modified_at(path)
        except Exception as e:
            logger.error("Failed to read %s: %s", path, e)
            continue

        document_tasks = parse_document(text, path, marker, modified_at)
        if document_tasks:
            logger.debug("Found %d tagged task(s) in %s", len(document_tasks), path)
        tasks.extend(document_tasks)

    logger.info("Scanned %d document(s), found %d tagged task(s)", len(paths), len(tasks))
    return tasks
