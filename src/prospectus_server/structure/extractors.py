"""Interchangeable strategies for extracting a Document's structure."""

import os
import time
from abc import ABC, abstractmethod

from ..logger import clear_context, logger, set_context
from .assembler import assemble_document
from .collector import FragmentCollector
from .models import Document, FileLink, Section
from .profiler import HEADER_RATIO, HeadingBand, profile_fragments
from .remote import TOCServiceClient
from .segmenter import segment_sections

EXTRACTOR_LOCAL = "local"
EXTRACTOR_REMOTE = "remote"


def _metadata_page_count(metadata: dict | None) -> int:
    """Page count reported by the TOC service, or 0 when absent or unusable."""
    value = (metadata or {}).get("page_count")
    if isinstance(value, bool):
        return 0
    try:
        page_count = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(page_count, 0)


class StructureExtractor(ABC):
    """Abstract base class for document structure extraction."""

    @abstractmethod
    def extract(self, data: bytes, file_name: str) -> Document:
        """Extract the ordered sections of a document.

        Args:
            data: Raw PDF bytes.
            file_name: Original file name of the upload.

        Returns:
            Document with its sections in reading order.
        """


class LocalHeuristicExtractor(StructureExtractor):
    """Finds headings from glyph heights, entirely in-process."""

    def __init__(
        self,
        collector: FragmentCollector | None = None,
        ratio: float | None = None,
        bands: list[HeadingBand] | None = None,
    ):
        """Initialize the extractor.

        Args:
            collector: Fragment collector to use. Defaults to a collector
                with PyMuPDF's default text options.
            ratio: Heading ratio over the body text size. If not provided,
                uses the HEADER_RATIO env var, then 1.2.
            bands: Optional heading bands for multi-level headings. Takes
                precedence over ``ratio``. Sections only carry a ``level``
                when bands are given.
        """
        self.collector = collector or FragmentCollector()
        if ratio is None:
            ratio = float(os.getenv("HEADER_RATIO", HEADER_RATIO))
        self.ratio = ratio
        self.bands = bands

    def extract(self, data: bytes, file_name: str) -> Document:
        set_context(file_name=file_name, extractor=EXTRACTOR_LOCAL)
        try:
            start = time.perf_counter()
            collected = self.collector.collect(data)

            if not collected.fragments:
                # Image-only or blank documents have no structure to report
                logger.info(
                    "no text fragments found",
                    page_count=collected.page_count,
                )
                return assemble_document(file_name, collected.page_count, [])

            profile = profile_fragments(
                collected.fragments, ratio=self.ratio, bands=self.bands
            )
            sections = segment_sections(
                collected.fragments, profile, include_levels=self.bands is not None
            )
            document = assemble_document(file_name, collected.page_count, sections)

            logger.info(
                "structure extracted",
                page_count=document.page_count,
                fragments=len(collected.fragments),
                mode_height=profile.mode_height,
                sections=len(document.sections),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return document
        finally:
            clear_context()


class RemoteTOCExtractor(StructureExtractor):
    """Delegates extraction to the server-side TOC service."""

    def __init__(self, client: TOCServiceClient | None = None):
        self.client = client or TOCServiceClient()

    def extract(self, data: bytes, file_name: str) -> Document:
        set_context(file_name=file_name, extractor=EXTRACTOR_REMOTE)
        try:
            toc = self.client.upload_pdf(data, file_name)

            # The service returns no body text, only per-section files
            sections = [
                Section(
                    title=entry.title,
                    page_number=entry.page,
                    section_path=entry.section_path,
                    level=entry.level,
                )
                for entry in toc.toc
            ]
            file_links = [
                FileLink(name=f.name, url=self.client.absolute_url(f.url))
                for f in toc.files
            ]
            return assemble_document(
                file_name,
                _metadata_page_count(toc.metadata),
                sections,
                file_links=file_links,
            )
        finally:
            clear_context()


def get_structure_extractor(kind: str | None = None) -> StructureExtractor:
    """Create the extractor selected by configuration.

    Args:
        kind: "local" or "remote". If not provided, uses the
            STRUCTURE_EXTRACTOR env var, then "local".

    Raises:
        ValueError: If the extractor kind is unknown.
    """
    kind = (kind or os.getenv("STRUCTURE_EXTRACTOR", EXTRACTOR_LOCAL)).lower()
    if kind == EXTRACTOR_LOCAL:
        return LocalHeuristicExtractor()
    if kind == EXTRACTOR_REMOTE:
        return RemoteTOCExtractor()
    raise ValueError(
        f"Unknown structure extractor {kind!r}: "
        f"expected {EXTRACTOR_LOCAL!r} or {EXTRACTOR_REMOTE!r}"
    )


def extract_structure(
    data: bytes, file_name: str, extractor: StructureExtractor | None = None
) -> Document:
    """Extract a document's structure with the given or configured extractor."""
    extractor = extractor or get_structure_extractor()
    return extractor.extract(data, file_name)
