"""Filesystem-backed document store for a markdown vault."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from ..utils.datetime import from_timestamp

logger = logging.getLogger(__name__)


class FilesystemDocumentStore:
    """
    Document store over a directory of markdown files.

    Every ``*.md`` file below the vault root is a document. Hidden
    directories (e.g. ``.obsidian``, ``.git``) are skipped. Blocking file
    I/O runs in a worker thread so the event loop stays responsive.
    """

    def __init__(self, root: Path, encoding: str = "utf-8") -> None:
        """
        Initialize the store.

        Args:
            root: Path to the vault root directory
            encoding: Text encoding of the documents
        """
        self.root = root
        self.encoding = encoding

    def resolve(self, path: str) -> Path:
        """Get the absolute filesystem path for a vault-relative path."""
        resolved = (self.root / path).resolve()
        if not resolved.is_relative_to(self.root.resolve()):
            raise ValueError(f"Path escapes vault root: {path}")
        return resolved

    # --- Document Operations ---

    async def list_documents(self) -> list[str]:
        """List vault-relative paths of all markdown documents, sorted."""
        return await asyncio.to_thread(self._list_documents)

    async def read(self, path: str) -> str:
        """Read the full text of a document."""
        return await asyncio.to_thread(self.resolve(path).read_text, encoding=self.encoding)

    async def write(self, path: str, text: str) -> None:
        """Replace the full text of a document."""
        filepath = self.resolve(path)
        await asyncio.to_thread(filepath.write_text, text, encoding=self.encoding)
        logger.debug("Wrote %s (%d chars)", path, len(text))

    async def modified_at(self, path: str) -> datetime:
        """Get the modification time of a document."""
        stat = await asyncio.to_thread(self.resolve(path).stat)
        return from_timestamp(stat.st_mtime)

    # --- Private Methods ---

    def _list_documents(self) -> list[str]:
        if not self.root.exists():
            logger.warning("Vault root does not exist: %s", self.root)
            return []
        paths = (path.relative_to(self.root).as_posix() for path in self._iter_markdown_files())
        return sorted(paths)

    def _iter_markdown_files(self) -> Iterator[Path]:
        """Iterate over all .md files, skipping hidden directories."""
        for filepath in self.root.rglob("*.md"):
            relative = filepath.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts[:-1]):
                continue
            if filepath.is_file():
                yield filepath
