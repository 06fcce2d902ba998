"""Command-line interface for book-derivatives."""

import argparse
import logging
import sys
from pathlib import Path

from book_derivatives.batch import BatchOrchestrator
from book_derivatives.book_derivatives import BookDerivatives
from book_derivatives.clients import FedoraClient
from book_derivatives.committer import DatastreamCommitter
from book_derivatives.images import PixmapImageDerivatives
from book_derivatives.ordering import PageOrdering
from book_derivatives.page_derivatives import PageDerivatives
from schemas.config import DerivativeConfig, load_config
from schemas.page import DerivationOptions

DEFAULT_FEDORA_URL = "http://localhost:8080/fedora"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _client_config(args: argparse.Namespace) -> dict:
    config = {"base_url": args.fedora_url}
    if args.username:
        config["username"] = args.username
        config["password"] = args.password or ""
    return config


def _derivative_config(args: argparse.Namespace) -> DerivativeConfig:
    if args.config is None:
        return DerivativeConfig()
    return load_config(args.config)


def _services(config: DerivativeConfig, client: FedoraClient):
    """Wire the derivation components against a repository client."""
    committer = DatastreamCommitter()
    ordering = PageOrdering(client)
    pages = PageDerivatives(
        config,
        image_generator=PixmapImageDerivatives(committer, config.temp_dir),
        committer=committer,
    )
    books = BookDerivatives(
        config, client, ordering, committer=committer, checker=pages.checker
    )
    return pages, books, ordering


def list_pages(args: argparse.Namespace) -> int:
    """Execute the pages command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        with FedoraClient(_client_config(args)) as client:
            ordering = PageOrdering(client)
            book = client.get_object(args.book)
            pages = ordering.pages_of(book)
            progression = ordering.page_progression(book)

        logger.info(f"Book {args.book}: {len(pages)} pages, progression {progression}")
        for entry in pages.values():
            print(f"{entry.sequence_number or '-'}\t{entry.pid}\t{entry.label}")
        return 0

    except Exception as e:
        logger.error(f"Failed to list pages: {e}")
        return 1


def derive_page(args: argparse.Namespace) -> int:
    """Execute the derive-page command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not (args.ocr or args.pdf or args.images):
        logger.error("Must specify at least one of --ocr, --pdf, --images")
        return 1

    try:
        config = _derivative_config(args)
        with FedoraClient(_client_config(args)) as client:
            pages, _, _ = _services(config, client)
            page = client.get_object(args.page)

            results = {}
            if args.ocr:
                options = None
                if args.language or args.preprocess:
                    recorded = pages.ocr_options(page)
                    options = DerivationOptions(
                        language=args.language or recorded.language,
                        preprocess=args.preprocess or recorded.preprocess,
                    )
                results["OCR"] = pages.derive_ocr_set(page, options)
            if args.images:
                results["images"] = pages.derive_images(page)
            if args.pdf:
                results["PDF"] = pages.derive_pdf(page)

        for name, ok in results.items():
            logger.info(f"  {name}: {'ok' if ok else 'failed'}")
        for failure in pages.failures():
            logger.warning(f"  Tool failure: {failure.message}")
        return 0 if all(results.values()) else 1

    except Exception as e:
        logger.error(f"Failed to derive page {args.page}: {e}")
        return 1


def book_pdf(args: argparse.Namespace) -> int:
    """Execute the book-pdf command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = _derivative_config(args)
        with FedoraClient(_client_config(args)) as client:
            _, books, _ = _services(config, client)
            book = client.get_object(args.book)
            if args.from_images:
                created = books.rebuild_pdf(book)
            else:
                created = books.create_pdf(book)

        if not created:
            logger.error(f"Could not create PDF for {args.book}")
            return 1
        logger.info(f"Created PDF for {args.book}")
        return 0

    except Exception as e:
        logger.error(f"Failed to create PDF for {args.book}: {e}")
        return 1


def update_thumbnail(args: argparse.Namespace) -> int:
    """Execute the update-thumbnail command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = _derivative_config(args)
        with FedoraClient(_client_config(args)) as client:
            _, books, _ = _services(config, client)
            updated = books.update_thumbnail(client.get_object(args.book))

        return 0 if updated else 1

    except Exception as e:
        logger.error(f"Failed to update thumbnail of {args.book}: {e}")
        return 1


def run_batch(args: argparse.Namespace) -> int:
    """Execute the batch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not (args.ocr or args.images or args.pdf):
        logger.error("Must specify at least one of --ocr, --images, --pdf")
        return 1

    try:
        config = _derivative_config(args)
        with FedoraClient(_client_config(args)) as client:
            pages, books, ordering = _services(config, client)
            orchestrator = BatchOrchestrator(client, pages, books, ordering)
            report = orchestrator.run(
                client.get_object(args.book),
                pids=args.page or None,
                ocr=args.ocr,
                images=args.images,
                pdf=args.pdf,
            )

        logger.info(f"Batch complete for {report.book_pid}")
        logger.info(f"  Pages: {len(report.pages)}")
        logger.info(f"  Status: {report.status}")

        if report.errors:
            logger.warning(f"  Errors: {len(report.errors)}")
            for error in report.errors:
                logger.warning(f"    - {error}")

        return 0 if report.status == "complete" else 1

    except Exception as e:
        logger.error(f"Batch failed: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="book-derivatives",
        description="Generate OCR, HOCR, image and PDF derivatives for digitized books",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--fedora-url",
        type=str,
        default=DEFAULT_FEDORA_URL,
        help=f"Fedora base URL (default: {DEFAULT_FEDORA_URL})",
    )
    parser.add_argument("--username", type=str, default=None, help="Fedora username")
    parser.add_argument("--password", type=str, default=None, help="Fedora password")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with tool paths and OCR languages",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    pages_parser = subparsers.add_parser(
        "pages",
        help="List the pages of a book in reading order",
    )
    pages_parser.add_argument("book", type=str, help="Book pid")
    pages_parser.set_defaults(func=list_pages)

    page_parser = subparsers.add_parser(
        "derive-page",
        help="Derive datastreams for a single page",
        description="Regenerate OCR, image and/or PDF datastreams of a page from its OBJ.",
    )
    page_parser.add_argument("page", type=str, help="Page pid")
    page_parser.add_argument("--ocr", action="store_true", help="Derive OCR, RAW_HOCR and ENCODED_OCR")
    page_parser.add_argument("--pdf", action="store_true", help="Derive the page PDF")
    page_parser.add_argument("--images", action="store_true", help="Derive TN and JPG")
    page_parser.add_argument("--language", type=str, default=None, help="OCR language code")
    page_parser.add_argument("--preprocess", action="store_true", help="Preprocess the image before OCR")
    page_parser.set_defaults(func=derive_page)

    pdf_parser = subparsers.add_parser(
        "book-pdf",
        help="Create the PDF of a book",
        description="Combine page PDFs (or, with --from-images, page images) into the book PDF.",
    )
    pdf_parser.add_argument("book", type=str, help="Book pid")
    pdf_parser.add_argument(
        "--from-images",
        action="store_true",
        help="Convert page OBJ images instead of combining page PDFs",
    )
    pdf_parser.set_defaults(func=book_pdf)

    thumbnail_parser = subparsers.add_parser(
        "update-thumbnail",
        help="Copy the first page's thumbnail to the book",
    )
    thumbnail_parser.add_argument("book", type=str, help="Book pid")
    thumbnail_parser.set_defaults(func=update_thumbnail)

    batch_parser = subparsers.add_parser(
        "batch",
        help="Re-derive the pages of a book",
        description="Re-run OCR and/or image derivatives over a book's pages in order, then refresh the book thumbnail and PDF.",
    )
    batch_parser.add_argument("book", type=str, help="Book pid")
    batch_parser.add_argument("--ocr", action="store_true", help="Re-run OCR on each page")
    batch_parser.add_argument("--images", action="store_true", help="Re-run image derivatives on each page")
    batch_parser.add_argument("--pdf", action="store_true", help="Rebuild the book PDF from page images")
    batch_parser.add_argument(
        "--page",
        action="append",
        default=[],
        help="Restrict the batch to this page pid (repeatable)",
    )
    batch_parser.set_defaults(func=run_batch)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
