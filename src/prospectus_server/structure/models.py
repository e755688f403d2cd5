"""Shared data models for document structure extraction."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SECTION_TITLE = "Introduction"


def round_height(height: float) -> int:
    """Round a glyph height to the nearest integer, halves rounding up."""
    return math.floor(height + 0.5)


class TextFragment(BaseModel):
    """One positioned run of text from a page."""

    model_config = ConfigDict(frozen=True)

    text: str
    height: float
    page: int = Field(ge=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fragment text must not be empty or whitespace-only")
        return v

    @property
    def rounded_height(self) -> int:
        return round_height(self.height)


class Section(BaseModel):
    """A titled span of document content."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    content: str | None = None
    page_number: int = Field(alias="pageNumber")
    section_path: str | None = None
    level: int | None = None  # heading level, None when unknown


class FileLink(BaseModel):
    """A downloadable file produced by the remote extraction service."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class Document(BaseModel):
    """The structured result for one uploaded document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_name: str = Field(alias="fileName")
    page_count: int = Field(alias="pageCount", ge=0)
    sections: list[Section] = Field(default_factory=list)
    file_links: list[FileLink] | None = Field(default=None, alias="fileLinks")

    @property
    def is_empty(self) -> bool:
        """True when no structure was found in the document."""
        return not self.sections


# --- Remote table-of-contents wire models ---


class TOCEntry(BaseModel):
    level: int | None = None
    title: str
    page: int
    section_path: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v: Any) -> str:
        # The service has been seen returning numeric titles
        return str(v)


class TOCFile(BaseModel):
    name: str
    url: str


class TOCResponse(BaseModel):
    document_id: str
    toc: list[TOCEntry] = Field(default_factory=list)
    files: list[TOCFile] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
