from collections.abc import Sequence

from .models import Document, FileLink, Section


def assemble_document(
    file_name: str,
    page_count: int,
    sections: Sequence[Section],
    file_links: Sequence[FileLink] | None = None,
) -> Document:
    """Package sections and file metadata into the final Document."""
    return Document(
        file_name=file_name,
        page_count=page_count,
        sections=list(sections),
        file_links=list(file_links) if file_links is not None else None,
    )
