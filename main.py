"""Entry point for the prospectus structure server."""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Prospectus structure server")
    parser.add_argument(
        "--extractor",
        choices=["local", "remote"],
        default=None,
        help="Structure extractor (default: local). Overrides STRUCTURE_EXTRACTOR env var.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    args = parser.parse_args()

    if args.extractor:
        os.environ["STRUCTURE_EXTRACTOR"] = args.extractor

    from prospectus_server.server import app

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
