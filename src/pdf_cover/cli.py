"""Command line interface: run the server or convert a directory of PDFs."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import get_settings
from .models import CoverRequest
from .services.pipeline import CoverService, cover_path_for, find_pdf_files

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-cover",
        description="Create accessible (PDF/UA) cover PDFs from the first-page image of PDFs.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None, help="Bind address (default from HOST)")
    serve.add_argument("--port", type=int, default=None, help="Listen port (default from PORT, 8080)")

    batch = subparsers.add_parser("batch", help="Create covers for every PDF in a directory")
    batch.add_argument("source_dir", type=Path, help="Directory containing source PDFs")
    batch.add_argument("dest_dir", type=Path, help="Directory the covers are written to")
    batch.add_argument("--title", default=None, help="Title override for every cover")
    batch.add_argument("--language", default=None, help="Language override for every cover")

    return parser


def run_batch(
    service: CoverService,
    source_dir: Path,
    dest_dir: Path,
    request: Optional[CoverRequest] = None,
) -> tuple[int, int]:
    """Create covers for all PDFs in ``source_dir``.

    Failures are logged and do not stop the batch.

    Returns:
        Tuple of (succeeded, failed) counts.
    """
    pdf_files = find_pdf_files(source_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Found {len(pdf_files)} PDF files to process")

    succeeded = failed = 0
    for source_path in pdf_files:
        dest_path = cover_path_for(source_path, dest_dir)
        try:
            service.create_cover_file(source_path, dest_path, request)
        except Exception as e:
            logger.error(f"Failed to process: {source_path.name} - {e}")
            failed += 1
            continue

        logger.info(f"Processed: {source_path.name} -> {dest_path.name}")
        succeeded += 1

    return succeeded, failed


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    if args.command == "serve":
        from .main import run

        run(host=args.host, port=args.port)
        return 0

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not settings.captioning_available:
        logger.warning("OPENAI_API_KEY not set - using default alt text")

    service = CoverService.from_settings(settings)
    try:
        succeeded, failed = run_batch(
            service,
            args.source_dir,
            args.dest_dir,
            CoverRequest(title=args.title, language=args.language),
        )
    except NotADirectoryError as e:
        logger.error(str(e))
        return 2

    print(f"Processing complete: {succeeded} succeeded, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
