#!/usr/bin/env python3
"""Print the sections found in a PDF for manual review.

Usage:
    python scripts/verify_structure.py <pdf_path> [--extractor local|remote] [--preview N]
"""

import argparse
import sys
from pathlib import Path

from prospectus_server.structure import DecodeError, UpstreamServiceError, get_structure_extractor


def main():
    parser = argparse.ArgumentParser(description="Verify section extraction quality")
    parser.add_argument("pdf_path", help="Path to PDF file")
    parser.add_argument(
        "--extractor", choices=["local", "remote"], default=None, help="Extractor to use"
    )
    parser.add_argument(
        "--preview", type=int, default=200, help="Characters of content to show (default: 200)"
    )
    args = parser.parse_args()

    pdf_path = Path(args.pdf_path)
    if not pdf_path.exists():
        print(f"Error: File not found: {pdf_path}")
        sys.exit(1)

    print(f"Extracting: {pdf_path}")
    print("=" * 80)

    try:
        doc = get_structure_extractor(args.extractor).extract(pdf_path.read_bytes(), pdf_path.name)
    except (DecodeError, UpstreamServiceError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Pages: {doc.page_count}, Sections: {len(doc.sections)}")
    print("=" * 80)

    if doc.is_empty:
        print("No structure found.")

    for section in doc.sections:
        level = f"H{section.level}" if section.level else "--"
        print(f"\n[{level}] p.{section.page_number} {section.title}")
        if section.section_path:
            print(f"  path: {section.section_path}")
        if section.content:
            content = section.content
            if len(content) > args.preview:
                content = content[: args.preview] + "..."
            print(f"  {content}")

    for link in doc.file_links or []:
        print(f"\n  file: {link.name} -> {link.url}")

    print("\n" + "=" * 80)
    print("Extraction complete.")


if __name__ == "__main__":
    main()
