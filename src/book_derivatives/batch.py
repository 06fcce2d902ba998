"""Sequential batch derivation over the pages of a book."""

import logging

from schemas.page import DerivationOptions
from schemas.report import BatchReport

from .book_derivatives import BookDerivatives
from .ordering import PageOrdering
from .page_derivatives import PageDerivatives
from .repository.interfaces import ObjectStore

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Re-derive the pages of a book, one page at a time in page order.

    A page that fails is logged and recorded in the report; the remaining
    pages are still processed. Book-level derivatives are refreshed after
    the pages.

    Attributes:
        store: Object store pages and books are loaded from
        page_derivatives: Page-level derivation
        book_derivatives: Book-level derivation
        ordering: Page ordering
    """

    def __init__(
        self,
        store: ObjectStore,
        page_derivatives: PageDerivatives,
        book_derivatives: BookDerivatives,
        ordering: PageOrdering,
    ):
        self.store = store
        self.page_derivatives = page_derivatives
        self.book_derivatives = book_derivatives
        self.ordering = ordering

    def run(
        self,
        book,
        pids: list[str] | None = None,
        ocr: bool = False,
        images: bool = False,
        pdf: bool = False,
        options: DerivationOptions | None = None,
    ) -> BatchReport:
        """Run the requested derivations over a book.

        Args:
            book: Book repository object
            pids: Pages to process (default: all pages of the book)
            ocr: Re-run the OCR pipeline on each page
            images: Re-run image derivatives on each page
            pdf: Rebuild the book PDF from the page images
            options: OCR options (default: those recorded on each page)

        Returns:
            BatchReport listing processed pages and failures
        """
        report = BatchReport(book_pid=book.id)
        pages = self.ordering.pages_of(book)
        selected = [pid for pid in pages if pids is None or pid in pids]

        unknown = [pid for pid in (pids or []) if pid not in pages]
        for pid in unknown:
            report.errors.append(f"{pid} is not a page of {book.id}")

        logger.info(f"Batch over {len(selected)} pages of {book.id}")

        for pid in selected:
            self._process_page(report, pid, ocr, images, options)

        if images:
            try:
                report.thumbnail_updated = self.book_derivatives.update_thumbnail(book)
            except Exception as e:
                logger.error(f"Failed to update thumbnail of {book.id}: {e}")
                report.errors.append(f"Thumbnail update failed for {book.id}: {e}")

        if pdf:
            try:
                report.pdf_updated = self.book_derivatives.rebuild_pdf(book)
            except Exception as e:
                logger.error(f"Failed to rebuild PDF of {book.id}: {e}")
                report.errors.append(f"PDF rebuild failed for {book.id}: {e}")
            else:
                if not report.pdf_updated:
                    report.errors.append(f"PDF rebuild failed for {book.id}")

        report.finish()
        logger.info(
            f"Batch over {book.id} finished: {len(report.pages)} pages, "
            f"{len(report.errors)} errors"
        )
        return report

    def _process_page(
        self,
        report: BatchReport,
        pid: str,
        ocr: bool,
        images: bool,
        options: DerivationOptions | None,
    ) -> None:
        try:
            page = self.store.get_object(pid)
            if ocr and not self.page_derivatives.derive_ocr_set(page, options):
                report.errors.append(f"OCR derivation failed for {pid}")
            if images and not self.page_derivatives.derive_images(page):
                report.errors.append(f"Image derivation failed for {pid}")
        except Exception as e:
            logger.error(f"Failed to process page {pid}: {e}")
            report.errors.append(f"Processing failed for {pid}: {e}")
        report.pages.append(pid)
