"""Split a fragment stream into titled sections."""

from collections.abc import Sequence
from dataclasses import dataclass

from .models import DEFAULT_SECTION_TITLE, Section, TextFragment
from .profiler import TypographyProfile


@dataclass
class _SectionBuffer:
    title: str = DEFAULT_SECTION_TITLE
    content: str = ""
    page_number: int = 1
    level: int | None = None

    def append(self, text: str) -> None:
        separator = " " if self.content and not self.content.endswith(" ") else ""
        self.content += separator + text

    def is_default(self) -> bool:
        return self.title == DEFAULT_SECTION_TITLE

    def to_section(self, include_level: bool) -> Section:
        return Section(
            title=self.title,
            content=self.content,
            page_number=self.page_number,
            level=self.level if include_level else None,
        )


def segment_sections(
    fragments: Sequence[TextFragment],
    profile: TypographyProfile,
    include_levels: bool = False,
) -> list[Section]:
    """Group fragments into sections, opening one at each heading.

    Text before the first heading goes into an "Introduction" section. A
    heading whose section collected no text is dropped when another heading
    follows it, but the last heading of the document is always kept.

    Args:
        fragments: Every fragment of the document, in reading order.
        profile: Typography profile of the same document.
        include_levels: Set each heading section's ``level`` from the
            profile's heading bands. Off by default, leaving ``level`` unset.

    Returns:
        Sections in the order their headings appear.
    """
    sections: list[Section] = []
    current = _SectionBuffer()

    for fragment in fragments:
        level = profile.classify(fragment.height)
        if level is not None:
            if current.content:
                sections.append(current.to_section(include_levels))
            current = _SectionBuffer(
                title=fragment.text,
                page_number=fragment.page,
                level=level,
            )
        else:
            if current.level is None and not current.content:
                # The leading section starts where its first text does
                current.page_number = fragment.page
            current.append(fragment.text)

    if current.content or not current.is_default():
        sections.append(current.to_section(include_levels))

    return sections
