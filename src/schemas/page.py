"""Page domain objects."""

from pydantic import BaseModel


class PageEntry(BaseModel):
    """A page of a book as returned by the page-ordering query.

    Attributes:
        pid: Repository identifier of the page object
        label: Page label
        sequence_number: Raw sequence number from the relationship store,
            or None if the page has none
    """

    pid: str
    label: str = ""
    sequence_number: str | int | None = None

    @property
    def sort_key(self) -> int:
        """Numeric sequence number, 0 when missing or non-numeric."""
        try:
            return int(str(self.sequence_number).strip())
        except (TypeError, ValueError):
            return 0


class DerivationOptions(BaseModel):
    """OCR options recorded on a page after a successful derivation.

    Attributes:
        language: Tesseract language code
        preprocess: Whether the source image is cleaned up before OCR
    """

    language: str = "eng"
    preprocess: bool = False
