"""Document store protocol for the note vault."""

from datetime import datetime
from typing import Protocol


class DocumentStoreProtocol(Protocol):
    """Interface for the line-addressable note store.

    Documents are addressed by vault-relative paths such as
    "projects/home.md". All methods are coroutines so that stores backed by
    slow media or a host application can be awaited.
    """

    async def list_documents(self) -> list[str]:
        """Return the paths of every markdown document in the store."""
        ...

    async def read(self, path: str) -> str:
        """Read the full text of a document.

        Raises:
            OSError: If the document cannot be read.
        """
        ...

    async def write(self, path: str, text: str) -> None:
        """Replace the full text of a document.

        Raises:
            OSError: If the document cannot be written.
        """
        ...

    async def modified_at(self, path: str) -> datetime:
        """Get the last modification time of a document."""
        ...
