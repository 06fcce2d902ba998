"""Decide which derivatives can be generated for an object.

The checks are a fixed table keyed by DerivativeKind. Each entry names
the tool the kind needs; a page additionally needs the kind's source
datastream. A book can only have its PDF derived, from its pages.
"""

from functools import partial
from typing import Callable

from schemas.config import DerivativeConfig

from .exceptions import DerivativeError, SourceMissing, ToolUnavailable
from .images import ImageDerivativeGenerator
from .kinds import (
    IMAGE_KINDS,
    OCR_KINDS,
    DerivativeKind,
    is_book,
    is_page,
    source_id_for,
    to_kind,
)
from .process import tool_available


class CapabilityChecker:
    """Answer "can this object have this derivative built right now?".

    Attributes:
        config: Tool configuration
        image_generator: Generator used for TN/JPG/JP2, if any
    """

    def __init__(
        self,
        config: DerivativeConfig,
        image_generator: ImageDerivativeGenerator | None = None,
    ):
        self.config = config
        self.image_generator = image_generator

        self._page_tools: dict[DerivativeKind, Callable[[], bool]] = {
            DerivativeKind.PDF: self.can_create_pdf,
            **{kind: self.can_ocr for kind in OCR_KINDS},
            **{kind: partial(self.can_generate_image, kind) for kind in IMAGE_KINDS},
        }

    def can_generate_image(self, kind: DerivativeKind) -> bool:
        return self.image_generator is not None and self.image_generator.supports(kind)

    def can_create_pdf(self) -> bool:
        return tool_available(self.config.convert_path)

    def can_combine_pdf(self) -> bool:
        return tool_available(self.config.gs_path)

    def can_ocr(self) -> bool:
        return tool_available(self.config.tesseract_path)

    def can_preprocess(self) -> bool:
        return tool_available(self.config.gimp_path)

    def _tool_name(self, kind: DerivativeKind) -> str:
        if kind is DerivativeKind.PDF:
            return self.config.convert_path
        if kind in OCR_KINDS:
            return self.config.tesseract_path
        return f"{kind.value} image derivative generator"

    def require(self, obj, kind: DerivativeKind | str) -> DerivativeKind:
        """Check that a derivative can be generated, explaining why not.

        Returns:
            The resolved DerivativeKind

        Raises:
            UnknownDerivativeKind: If the kind is not known
            ToolUnavailable: If a required executable is missing
            SourceMissing: If the page lacks the source datastream
            DerivativeError: If the object type cannot have this derivative
        """
        kind = to_kind(kind)

        if is_book(obj):
            if kind is not DerivativeKind.PDF:
                raise DerivativeError(f"{kind.value} cannot be derived for book {obj.id}")
            if not self.can_create_pdf():
                raise ToolUnavailable(self.config.convert_path)
            if not self.can_combine_pdf():
                raise ToolUnavailable(self.config.gs_path)
            return kind

        if not is_page(obj):
            raise DerivativeError(f"{obj.id} is neither a book nor a page")

        dsid = source_id_for(kind)
        if dsid not in obj:
            raise SourceMissing(obj.id, dsid)
        if not self._page_tools[kind]():
            raise ToolUnavailable(self._tool_name(kind))
        return kind

    def can_derive(self, obj, kind: DerivativeKind | str) -> bool:
        """Check whether a derivative can be generated for an object.

        Args:
            obj: Book or page repository object
            kind: Derivative kind (or its name)

        Returns:
            True if the required tools are installed and the source exists
        """
        try:
            self.require(obj, kind)
        except DerivativeError:
            return False
        return True
