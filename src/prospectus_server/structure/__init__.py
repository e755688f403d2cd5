from .models import (
    DEFAULT_SECTION_TITLE,
    Document,
    FileLink,
    Section,
    TextFragment,
    TOCEntry,
    TOCFile,
    TOCResponse,
)
from .collector import CollectedFragments, DecodeError, FragmentCollector
from .profiler import (
    HEADER_RATIO,
    HeadingBand,
    TypographyProfile,
    compute_mode_height,
    profile_fragments,
)
from .segmenter import segment_sections
from .assembler import assemble_document
from .remote import TOCServiceClient, UpstreamServiceError
from .extractors import (
    LocalHeuristicExtractor,
    RemoteTOCExtractor,
    StructureExtractor,
    extract_structure,
    get_structure_extractor,
)

__all__ = [
    # Models
    "DEFAULT_SECTION_TITLE",
    "Document",
    "FileLink",
    "Section",
    "TextFragment",
    "TOCEntry",
    "TOCFile",
    "TOCResponse",
    # Pipeline stages
    "CollectedFragments",
    "DecodeError",
    "FragmentCollector",
    "HEADER_RATIO",
    "HeadingBand",
    "TypographyProfile",
    "compute_mode_height",
    "profile_fragments",
    "segment_sections",
    "assemble_document",
    # Remote service
    "TOCServiceClient",
    "UpstreamServiceError",
    # Extractors
    "LocalHeuristicExtractor",
    "RemoteTOCExtractor",
    "StructureExtractor",
    "extract_structure",
    "get_structure_extractor",
]
