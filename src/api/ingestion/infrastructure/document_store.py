"""Filesystem document store for uploaded resumes."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ulid import ULID

from ingestion.ports.exceptions import ExtractionError
from ingestion.ports.services import DocumentStore


class LocalDocumentStore(DocumentStore):
    """Stores documents as files in a single upload directory.

    Document references are bare file names relative to that directory.
    """

    def __init__(self, upload_dir: str | Path) -> None:
        self._upload_dir = Path(upload_dir)

    async def save(self, portfolio_id: str, data: bytes) -> str:
        """Write ``data`` to a new file named after the portfolio.

        Returns:
            The document reference
        """
        document_ref = f"{portfolio_id}_{ULID()}.pdf"
        await asyncio.to_thread(self._write, self._upload_dir / document_ref, data)
        return document_ref

    async def read(self, document_ref: str) -> bytes:
        """Read a stored document.

        Raises:
            ExtractionError: If the reference is not a stored document
        """
        path = self._resolve(document_ref)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise ExtractionError(f"Document {document_ref} does not exist") from e
        except OSError as e:
            raise ExtractionError(f"Document {document_ref} is unreadable: {e}") from e

    async def delete(self, document_ref: str) -> None:
        path = self._resolve(document_ref)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    def _resolve(self, document_ref: str) -> Path:
        # References never leave the upload directory
        if not document_ref or Path(document_ref).name != document_ref:
            raise ExtractionError(f"Invalid document reference: {document_ref!r}")
        return self._upload_dir / document_ref

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
