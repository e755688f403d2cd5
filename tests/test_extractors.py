"""Tests for the structure extraction strategies."""

import os
from unittest.mock import MagicMock, patch

import fitz  # PyMuPDF
import pytest

from prospectus_server.structure import (
    DecodeError,
    Document,
    HeadingBand,
    LocalHeuristicExtractor,
    RemoteTOCExtractor,
    TOCServiceClient,
    TOCResponse,
    extract_structure,
    get_structure_extractor,
)


def _build_pdf(pages: list[list[tuple[str, float]]]) -> bytes:
    """Build a PDF where each page is a list of (text, fontsize) lines."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        y = 72
        for text, size in lines:
            page.insert_text((72, y), text, fontsize=size, fontname="helv")
            y += size + 12
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture(scope="module")
def prospectus_pdf() -> bytes:
    return _build_pdf(
        [
            [
                ("Global Offering of 100,000,000 Shares", 12),
                ("Summary", 20),
                ("The Company is a leading logistics operator.", 12),
                ("Revenue grew 20% in the last fiscal year.", 12),
            ],
            [
                ("Risk Factors", 20),
                ("Investing in our shares involves risk.", 12),
                ("Our business depends on trade volumes.", 12),
            ],
        ]
    )


class TestLocalHeuristicExtractor:
    """Tests for the in-process heuristic."""

    def test_extracts_sections(self, prospectus_pdf):
        doc = LocalHeuristicExtractor().extract(prospectus_pdf, "prospectus.pdf")
        assert isinstance(doc, Document)
        assert doc.file_name == "prospectus.pdf"
        assert doc.page_count == 2
        assert [s.title for s in doc.sections] == ["Introduction", "Summary", "Risk Factors"]
        assert [s.page_number for s in doc.sections] == [1, 1, 2]
        assert doc.sections[1].content == (
            "The Company is a leading logistics operator. "
            "Revenue grew 20% in the last fiscal year."
        )

    def test_local_sections_have_no_remote_fields(self, prospectus_pdf):
        doc = LocalHeuristicExtractor().extract(prospectus_pdf, "prospectus.pdf")
        assert all(s.section_path is None for s in doc.sections)
        assert doc.file_links is None

    def test_default_output_has_no_heading_level(self, prospectus_pdf):
        doc = LocalHeuristicExtractor().extract(prospectus_pdf, "prospectus.pdf")
        data = doc.model_dump(by_alias=True, exclude_none=True)
        assert data["sections"][1] == {
            "title": "Summary",
            "content": "The Company is a leading logistics operator. "
            "Revenue grew 20% in the last fiscal year.",
            "pageNumber": 1,
        }

    def test_output_is_byte_identical_across_runs(self, prospectus_pdf):
        extractor = LocalHeuristicExtractor()
        first = extractor.extract(prospectus_pdf, "prospectus.pdf")
        second = extractor.extract(prospectus_pdf, "prospectus.pdf")
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_document_without_text_is_empty(self):
        doc = fitz.open()
        doc.new_page()
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        result = LocalHeuristicExtractor().extract(data, "scan.pdf")
        assert result.sections == []
        assert result.page_count == 2
        assert result.is_empty

    def test_decode_error_propagates(self):
        with pytest.raises(DecodeError):
            LocalHeuristicExtractor().extract(b"%PDF-garbage", "broken.pdf")

    def test_ratio_from_env(self):
        with patch.dict(os.environ, {"HEADER_RATIO": "2.0"}):
            extractor = LocalHeuristicExtractor()
        assert extractor.ratio == 2.0

    def test_higher_ratio_ignores_small_headings(self, prospectus_pdf):
        doc = LocalHeuristicExtractor(ratio=2.0).extract(prospectus_pdf, "prospectus.pdf")
        assert [s.title for s in doc.sections] == ["Introduction"]

    def test_heading_bands(self):
        data = _build_pdf(
            [
                [
                    ("Part One", 24),
                    ("Overview", 16),
                    ("Body text here.", 12),
                    ("More body text.", 12),
                    ("Outlook", 16),
                    ("Further body text.", 12),
                ]
            ]
        )
        extractor = LocalHeuristicExtractor(
            bands=[HeadingBand(ratio=1.8, level=1), HeadingBand(ratio=1.2, level=2)]
        )
        doc = extractor.extract(data, "levels.pdf")
        assert [(s.title, s.level) for s in doc.sections] == [("Overview", 2), ("Outlook", 2)]


@pytest.fixture
def toc_response() -> TOCResponse:
    return TOCResponse.model_validate(
        {
            "document_id": "doc-123",
            "toc": [
                {"level": 1, "title": "Summary", "page": 3, "section_path": "1"},
                {"level": 2, "title": 2024, "page": 7, "section_path": "1.1"},
            ],
            "files": [{"name": "summary.md", "url": "/files/doc-123/summary.md"}],
            "metadata": {"page_count": 412},
        }
    )


class TestRemoteTOCExtractor:
    """Tests for the server-delegated extraction."""

    def test_maps_toc_to_document(self, toc_response):
        client = TOCServiceClient(base_url="http://toc.internal:9000")
        with patch.object(client, "upload_pdf", return_value=toc_response) as mock_upload:
            doc = RemoteTOCExtractor(client=client).extract(b"%PDF-1.7", "ipo.pdf")

        mock_upload.assert_called_once_with(b"%PDF-1.7", "ipo.pdf")
        assert doc.file_name == "ipo.pdf"
        assert doc.page_count == 412
        assert [(s.title, s.page_number, s.section_path, s.level) for s in doc.sections] == [
            ("Summary", 3, "1", 1),
            ("2024", 7, "1.1", 2),
        ]
        assert all(s.content is None for s in doc.sections)
        assert doc.file_links[0].url == "http://toc.internal:9000/files/doc-123/summary.md"

    def test_missing_page_count_defaults_to_zero(self, toc_response):
        client = MagicMock()
        client.upload_pdf.return_value = toc_response.model_copy(update={"metadata": None})
        client.absolute_url.side_effect = lambda path: path
        doc = RemoteTOCExtractor(client=client).extract(b"%PDF-1.7", "ipo.pdf")
        assert doc.page_count == 0

    @pytest.mark.parametrize(
        "page_count, expected",
        [
            ("n/a", 0),
            (-1, 0),
            ([1], 0),
            (True, 0),
            (float("inf"), 0),
            ("412", 412),
            (12.0, 12),
        ],
    )
    def test_unusable_page_count_falls_back_to_zero(self, toc_response, page_count, expected):
        client = MagicMock()
        client.upload_pdf.return_value = toc_response.model_copy(
            update={"metadata": {"page_count": page_count}}
        )
        client.absolute_url.side_effect = lambda path: path
        doc = RemoteTOCExtractor(client=client).extract(b"%PDF-1.7", "ipo.pdf")
        assert doc.page_count == expected

    def test_entries_without_level_or_path(self):
        client = MagicMock()
        client.upload_pdf.return_value = TOCResponse.model_validate(
            {
                "document_id": "doc-9",
                "toc": [{"title": "Summary", "page": 2}],
                "files": [],
            }
        )
        doc = RemoteTOCExtractor(client=client).extract(b"%PDF-1.7", "ipo.pdf")
        assert [(s.title, s.page_number, s.section_path, s.level) for s in doc.sections] == [
            ("Summary", 2, None, None),
        ]
        assert doc.file_links == []


class TestGetStructureExtractor:
    """Tests for configuration-driven extractor selection."""

    def test_defaults_to_local(self):
        with patch.dict(os.environ, {}, clear=True):
            assert isinstance(get_structure_extractor(), LocalHeuristicExtractor)

    def test_env_selects_remote(self):
        with patch.dict(os.environ, {"STRUCTURE_EXTRACTOR": "remote"}):
            assert isinstance(get_structure_extractor(), RemoteTOCExtractor)

    def test_argument_overrides_env(self):
        with patch.dict(os.environ, {"STRUCTURE_EXTRACTOR": "remote"}):
            assert isinstance(get_structure_extractor("local"), LocalHeuristicExtractor)

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown structure extractor"):
            get_structure_extractor("ocr")


def test_extract_structure_uses_given_extractor(prospectus_pdf):
    doc = extract_structure(prospectus_pdf, "p.pdf", extractor=LocalHeuristicExtractor())
    assert len(doc.sections) == 3
