"""Book-level derivatives: thumbnail and PDF.

A book's derivatives are assembled from its pages, so they are refreshed
whenever pages are added, removed, re-derived or reordered.
"""

import logging
import tempfile
from pathlib import Path

from schemas.config import DerivativeConfig

from .capabilities import CapabilityChecker
from .committer import DatastreamCommitter
from .converters import PDFCombiner, PDFConverter
from .files import ScratchFiles, extension_for, safe_name, temp_dir
from .kinds import DerivativeKind
from .ordering import PageOrdering
from .process import ProcessRunner
from .repository.interfaces import ObjectStore
from .sources import SourceResolver

logger = logging.getLogger(__name__)


class BookDerivatives:
    """Build a book's TN and PDF datastreams from its pages.

    Attributes:
        store: Object store pages are loaded from
        ordering: Page ordering for the book
    """

    def __init__(
        self,
        config: DerivativeConfig,
        store: ObjectStore,
        ordering: PageOrdering,
        runner: ProcessRunner | None = None,
        committer: DatastreamCommitter | None = None,
        checker: CapabilityChecker | None = None,
    ):
        self.config = config
        self.store = store
        self.ordering = ordering
        self.runner = runner or ProcessRunner()
        self.committer = committer or DatastreamCommitter()
        self.checker = checker or CapabilityChecker(config)
        self.resolver = SourceResolver(self.checker, config.temp_dir)
        self.pdf_converter = PDFConverter(config, self.runner)
        self.combiner = PDFCombiner(config, self.runner)

    def _first_page(self, book):
        pages = self.ordering.pages_of(book)
        if not pages:
            return None
        return self.store.get_object(next(iter(pages)))

    def can_update_thumbnail(self, book) -> bool:
        """True if the book's first page has a TN datastream."""
        page = self._first_page(book)
        return page is not None and "TN" in page

    def update_thumbnail(self, book) -> bool:
        """Replace the book's TN with its first page's TN.

        An existing book TN is versioned in place, mimetype included, so a
        failed commit leaves the previous thumbnail untouched.

        Returns:
            False, without writing anything, if there is no page thumbnail
        """
        page = self._first_page(book)
        if page is None or "TN" not in page:
            logger.warning(f"Book {book.id} has no page thumbnail to use")
            return False

        with ScratchFiles() as scratch:
            thumbnail = scratch.add(self.resolver.fetch(page, "TN"))
            mimetype = page["TN"].mimetype
            updated = self.committer.commit(book, "TN", thumbnail, mimetype=mimetype)

        if updated:
            logger.info(f"Updated thumbnail of {book.id} from {page.id}")
        return updated

    def create_pdf(self, book) -> bool:
        """Combine the PDFs of all pages, in page order, into the book PDF."""
        if not self.checker.can_derive(book, DerivativeKind.PDF):
            logger.warning(f"Cannot create a PDF for {book.id}: tools unavailable")
            return False

        pages = self.ordering.pages_of(book)
        directory = temp_dir(self.config.temp_dir)
        output = directory / f"{safe_name(book.id)}_PDF.pdf"

        with ScratchFiles() as scratch:
            page_pdfs = []
            for pid in pages:
                page_pdf = scratch.add(self.resolver.fetch(self.store.get_object(pid), "PDF"))
                if page_pdf is None:
                    logger.warning(f"Page {pid} has no PDF, leaving it out of {book.id}")
                    continue
                page_pdfs.append(page_pdf)

            if not page_pdfs:
                logger.warning(f"Book {book.id} has no page PDFs")
                return False

            scratch.add(output)
            if not self.combiner.combine(page_pdfs, output):
                return False

            logger.info(
                f"Combined {self.combiner.count_pages(output)} pages into PDF for {book.id}"
            )
            return self.committer.commit(book, "PDF", output, mimetype="application/pdf")

    def append_page_pdf(self, book, page) -> bool:
        """Append a newly added page's PDF to the end of the book PDF."""
        if "PDF" not in book or "PDF" not in page:
            logger.warning(f"Cannot append {page.id} to {book.id}: PDF missing")
            return False

        with ScratchFiles() as scratch:
            book_pdf = scratch.add(self.resolver.fetch(book, "PDF"))
            page_pdf = scratch.add(self.resolver.fetch(page, "PDF"))
            if not self.combiner.append(book_pdf, [page_pdf]):
                return False
            return self.committer.commit(book, "PDF", book_pdf, mimetype="application/pdf")

    def rebuild_pdf(self, book) -> bool:
        """Rebuild the book PDF directly from every page's OBJ image.

        The images are fetched into one temporary directory under names
        that sort in page order and converted in a single invocation.
        """
        if not self.checker.can_create_pdf():
            logger.warning(f"Cannot rebuild the PDF for {book.id}: convert unavailable")
            return False

        pages = self.ordering.pages_of(book)
        with tempfile.TemporaryDirectory(dir=temp_dir(self.config.temp_dir)) as tmp:
            tmp_path = Path(tmp)
            for index, pid in enumerate(pages, start=1):
                page = self.store.get_object(pid)
                if "OBJ" not in page:
                    logger.warning(f"Page {pid} has no OBJ, leaving it out of {book.id}")
                    continue
                name = f"{index:06d}_{safe_name(pid)}{extension_for(page['OBJ'].mimetype)}"
                page["OBJ"].get_content(tmp_path / name)

            images = sorted(tmp_path.iterdir())
            if not images:
                logger.warning(f"Book {book.id} has no page images")
                return False

            output = tmp_path / f"{safe_name(book.id)}.pdf"
            pdf = self.pdf_converter.convert_many(images, output)
            if pdf is None:
                return False
            return self.committer.commit(book, "PDF", pdf, mimetype="application/pdf")
