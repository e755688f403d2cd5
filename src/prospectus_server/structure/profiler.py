"""Typography statistics used to tell headings from body text."""

from collections import Counter
from collections.abc import Sequence

from pydantic import BaseModel, Field, field_validator

from ..logger import logger
from .models import TextFragment

# Headings are at least 20% taller than body text
HEADER_RATIO = 1.2


class HeadingBand(BaseModel):
    """Heights at or above ``ratio`` times the body size map to ``level``."""

    ratio: float = Field(gt=0)
    level: int = Field(ge=1)


class TypographyProfile(BaseModel):
    """Body text size of a document and the heading bands derived from it."""

    mode_height: int
    bands: list[HeadingBand]

    @field_validator("bands")
    @classmethod
    def validate_bands(cls, v: list[HeadingBand]) -> list[HeadingBand]:
        if not v:
            raise ValueError("at least one heading band is required")
        # Largest ratio first so classify() picks the most prominent level
        return sorted(v, key=lambda band: band.ratio, reverse=True)

    @property
    def header_threshold(self) -> float:
        """Smallest height that still counts as a heading."""
        return self.mode_height * self.bands[-1].ratio

    def classify(self, height: float) -> int | None:
        """Return the heading level for a glyph height, or None for body text.

        The comparison is inclusive and uses the raw (unrounded) height.
        """
        for band in self.bands:
            if height >= self.mode_height * band.ratio:
                return band.level
        return None


def compute_mode_height(fragments: Sequence[TextFragment]) -> int:
    """Most frequent rounded fragment height.

    Ties go to the height seen first in document order. Returns 0 for an
    empty sequence.
    """
    counts = Counter(fragment.rounded_height for fragment in fragments)
    if not counts:
        return 0
    # Counter keeps first-seen order and max() keeps the first maximum
    return max(counts, key=counts.__getitem__)


def profile_fragments(
    fragments: Sequence[TextFragment],
    ratio: float = HEADER_RATIO,
    bands: list[HeadingBand] | None = None,
) -> TypographyProfile:
    """Build the typography profile of a document.

    Args:
        fragments: Every fragment of the document, in reading order.
        ratio: Heading ratio used when no explicit bands are given.
        bands: Optional heading bands, one per heading level.

    Returns:
        TypographyProfile for the document.
    """
    if bands is None:
        bands = [HeadingBand(ratio=ratio, level=1)]

    profile = TypographyProfile(
        mode_height=compute_mode_height(fragments),
        bands=bands,
    )
    logger.debug(
        "typography profiled",
        mode_height=profile.mode_height,
        header_threshold=profile.header_threshold,
        levels=len(profile.bands),
    )
    return profile
