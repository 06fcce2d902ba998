"""Derive PDF, OCR and image datastreams for a single page."""

import logging

from lxml import etree

from schemas.config import DerivativeConfig
from schemas.page import DerivationOptions

from .capabilities import CapabilityChecker
from .committer import DatastreamCommitter
from .converters import HOCREncoder, ImagePreprocessor, OCRConverter, PDFConverter
from .exceptions import MalformedHocrInput
from .files import ScratchFiles
from .images import ImageDerivativeGenerator
from .kinds import IMAGE_KINDS, DerivativeKind
from .process import ProcessRunner
from .repository.relationships import HAS_LANGUAGE, PREPROCESS, RelationshipOverlay
from .sources import SourceResolver

logger = logging.getLogger(__name__)


class PageDerivatives:
    """Build derivative datastreams for page objects.

    Every derivation starts again from the page's OBJ datastream, so
    running it twice on an unchanged page gives the same result.

    Example:
        derivatives = PageDerivatives(DerivativeConfig())
        derivatives.derive_ocr_set(page, DerivationOptions(language="fra"))
    """

    def __init__(
        self,
        config: DerivativeConfig,
        runner: ProcessRunner | None = None,
        image_generator: ImageDerivativeGenerator | None = None,
        committer: DatastreamCommitter | None = None,
    ):
        self.config = config
        self.runner = runner or ProcessRunner()
        self.committer = committer or DatastreamCommitter()
        self.image_generator = image_generator

        self.checker = CapabilityChecker(config, image_generator)
        self.resolver = SourceResolver(self.checker, config.temp_dir)
        self.pdf_converter = PDFConverter(config, self.runner)
        self.ocr_converter = OCRConverter(config, self.runner)
        self.preprocessor = ImagePreprocessor(config, self.runner)
        self.encoder = HOCREncoder(config.hocr_xslt_path)

    def can_derive(self, obj, kind: DerivativeKind | str) -> bool:
        return self.checker.can_derive(obj, kind)

    def derive_pdf(self, page, options: dict[str, str] | None = None) -> bool:
        """Convert the page's OBJ image to PDF and commit it as PDF."""
        with ScratchFiles() as scratch:
            source = scratch.add(self.resolver.materialize_source(page, DerivativeKind.PDF))
            if source is None:
                return False

            pdf = scratch.add(self.pdf_converter.convert_to_pdf(source, options))
            if pdf is None:
                logger.error(f"PDF derivation failed for {page.id}")
                return False

            return self.committer.commit(page, "PDF", pdf, mimetype="application/pdf")

    def ocr_options(self, page) -> DerivationOptions:
        """Read the OCR options last recorded on a page."""
        overlay = RelationshipOverlay(page.relationships)
        return DerivationOptions(
            language=overlay.get_value(HAS_LANGUAGE) or "eng",
            preprocess=overlay.get_bool(PREPROCESS),
        )

    def record_ocr_options(self, page, options: DerivationOptions) -> None:
        overlay = RelationshipOverlay(page.relationships)
        overlay.set_value(HAS_LANGUAGE, options.language)
        overlay.set_value(PREPROCESS, options.preprocess)

    def derive_ocr_set(self, page, options: DerivationOptions | None = None) -> bool:
        """Derive OCR, RAW_HOCR and ENCODED_OCR for a page.

        The plain-text OCR must commit for the set to count as derived;
        each HOCR step that was attempted must also commit. Whatever did
        succeed is kept even when another step fails. The options are
        recorded on the page once the OCR text is committed.

        Args:
            page: Page object with an OBJ datastream
            options: OCR options (default: those recorded on the page)

        Returns:
            True if every attempted step committed
        """
        if options is None:
            options = self.ocr_options(page)

        if options.language not in self.config.enabled_languages:
            logger.error(
                f"Language {options.language} is not enabled for OCR, skipping {page.id}"
            )
            return False

        with ScratchFiles() as scratch:
            source = scratch.add(self.resolver.materialize_source(page, DerivativeKind.OCR))
            if source is None:
                return False

            image = source
            if options.preprocess and not self.checker.can_preprocess():
                logger.warning(
                    f"Preprocessing unavailable ({self.config.gimp_path} not found), "
                    f"using the original image for {page.id}"
                )
            elif options.preprocess:
                processed = scratch.add(self.preprocessor.preprocess(source))
                if processed is None:
                    logger.warning(
                        f"Preprocessing failed for {page.id}, using the original image"
                    )
                else:
                    image = processed

            text = scratch.add(self.ocr_converter.ocr(image, options.language))
            hocr = scratch.add(self.ocr_converter.hocr(image, options.language))

            encoded = None
            if hocr is not None:
                # A failed write can leave a partial <hocr>.xml behind.
                scratch.add(hocr.with_name(f"{hocr.name}.xml"))
                try:
                    encoded = self.encoder.normalize(hocr)
                except (MalformedHocrInput, OSError, etree.Error) as e:
                    logger.error(f"Could not encode HOCR for {page.id}: {e}")

            success = text is not None and self.committer.commit(
                page, "OCR", text, mimetype="text/plain"
            )
            if success:
                self.record_ocr_options(page, options)

            if hocr is None:
                success = False
            else:
                success = self.committer.commit(
                    page, "RAW_HOCR", hocr, mimetype="text/html"
                ) and success
                if encoded is None:
                    success = False
                else:
                    success = self.committer.commit(
                        page, "ENCODED_OCR", encoded, mimetype="text/xml"
                    ) and success

        if not success:
            logger.error(f"OCR derivation incomplete for {page.id}")
        return success

    def derive_images(self, page) -> bool:
        """Hand the page to the image derivative generator."""
        if not any(self.checker.can_derive(page, kind) for kind in IMAGE_KINDS):
            logger.warning(f"Cannot derive images for {page.id}")
            return False
        return self.image_generator.create_derivatives(page)

    def derive_all(self, page, options: DerivationOptions | None = None) -> bool:
        """Derive every datastream the page currently supports."""
        results = []
        if self.checker.can_derive(page, DerivativeKind.OCR):
            results.append(self.derive_ocr_set(page, options))
        if any(self.checker.can_derive(page, kind) for kind in IMAGE_KINDS):
            results.append(self.derive_images(page))
        if self.checker.can_derive(page, DerivativeKind.PDF):
            results.append(self.derive_pdf(page))
        return bool(results) and all(results)

    def failures(self) -> list:
        """Tool failures recorded by all converters, oldest first per converter."""
        return [
            *self.pdf_converter.failures,
            *self.preprocessor.failures,
            *self.ocr_converter.failures,
        ]
