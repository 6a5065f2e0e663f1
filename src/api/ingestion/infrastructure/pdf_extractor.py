"""PDF text extraction with pypdf."""

from __future__ import annotations

import asyncio
import io

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ingestion.ports.exceptions import ExtractionError
from ingestion.ports.services import DocumentStore, TextExtractor


class PdfTextExtractor(TextExtractor):
    """Extracts the text layer of stored PDF documents.

    Scanned PDFs without a text layer yield no text and are rejected.
    """

    def __init__(self, document_store: DocumentStore) -> None:
        self._document_store = document_store

    async def extract(self, document_ref: str) -> str:
        """Return the text of every page, separated by newlines.

        Raises:
            ExtractionError: If the document is missing, not a readable PDF
                or contains no text
        """
        data = await self._document_store.read(document_ref)
        text = await asyncio.to_thread(self._extract_text, data, document_ref)
        if not text.strip():
            raise ExtractionError(f"Document {document_ref} contains no text")
        return text

    @staticmethod
    def _extract_text(data: bytes, document_ref: str) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, ValueError, KeyError) as e:
            raise ExtractionError(
                f"Document {document_ref} is not a readable PDF: {e}"
            ) from e
        return "\n".join(pages)
