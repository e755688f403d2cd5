"""Fragment collection from PDF bytes using PyMuPDF."""

from pathlib import Path

import fitz  # PyMuPDF
from pydantic import BaseModel

from ..logger import logger
from .models import TextFragment


class DecodeError(ValueError):
    """Raised when input bytes cannot be decoded as a readable PDF."""

    pass


class CollectedFragments(BaseModel):
    """Every usable fragment of a document, in reading order."""

    fragments: list[TextFragment]
    page_count: int


def _iter_span_fragments(page_dict: dict, page_number: int) -> list[TextFragment]:
    """Turn one page's text dictionary into fragments.

    Args:
        page_dict: A page dictionary from PyMuPDF's get_text("dict").
        page_number: 1-based number of the page.

    Returns:
        Fragments in the order their spans appear on the page.
    """
    fragments = []
    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:  # Skip image blocks
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                # Corrupted font encodings can leave NUL characters behind
                text = span.get("text", "").replace("\x00", "")
                if not text.strip():
                    continue
                fragments.append(
                    TextFragment(
                        text=text,
                        height=float(span.get("size", 0.0)),
                        page=page_number,
                    )
                )
    return fragments


class FragmentCollector:
    """Collects positioned text fragments from every page of a PDF."""

    def __init__(self, text_flags: int | None = None, sort: bool = False):
        """Initialize the collector.

        Args:
            text_flags: PyMuPDF TEXT_* flags passed to get_text. None uses
                PyMuPDF's defaults for "dict" extraction.
            sort: Reorder spans top-to-bottom, left-to-right instead of
                keeping content-stream order.
        """
        self.text_flags = text_flags
        self.sort = sort

    def _open(self, data: bytes) -> fitz.Document:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise DecodeError(f"Unable to open PDF: {e}") from e

        if doc.needs_pass:
            doc.close()
            raise DecodeError("PDF is encrypted")
        if doc.page_count == 0:
            doc.close()
            raise DecodeError("PDF has no pages")
        return doc

    def _page_dict(self, page: fitz.Page) -> dict:
        kwargs = {"sort": self.sort}
        if self.text_flags is not None:
            kwargs["flags"] = self.text_flags
        return page.get_text("dict", **kwargs)

    def collect(self, data: bytes) -> CollectedFragments:
        """Collect all non-whitespace fragments from a PDF.

        Args:
            data: Raw PDF bytes.

        Returns:
            CollectedFragments with fragments ordered by page, then by
            position within the page.

        Raises:
            DecodeError: If the document or any of its pages cannot be decoded.
        """
        doc = self._open(data)
        try:
            fragments: list[TextFragment] = []
            for page_index, page in enumerate(doc):
                page_number = page_index + 1
                try:
                    page_dict = self._page_dict(page)
                except (RuntimeError, ValueError) as e:
                    raise DecodeError(
                        f"Unable to decode page {page_number}: {e}"
                    ) from e
                fragments.extend(_iter_span_fragments(page_dict, page_number))

            logger.debug(
                "fragments collected",
                page_count=doc.page_count,
                fragments=len(fragments),
            )
            return CollectedFragments(fragments=fragments, page_count=doc.page_count)
        finally:
            doc.close()

    def collect_path(self, file_path: str | Path) -> CollectedFragments:
        """Collect fragments from a PDF on disk."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"PDF file not found: {file_path}")
        return self.collect(file_path.read_bytes())
