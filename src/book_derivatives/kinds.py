"""Derivative kinds and their source datastreams."""

from enum import Enum

from .exceptions import UnknownDerivativeKind

BOOK_CMODEL = "islandora:bookCModel"
PAGE_CMODEL = "islandora:pageCModel"


class DerivativeKind(str, Enum):
    """Datastreams that can be derived for a book or page.

    The value of each member is the datastream id it is committed as.
    """

    PDF = "PDF"
    OCR = "OCR"
    RAW_HOCR = "RAW_HOCR"
    ENCODED_OCR = "ENCODED_OCR"
    TN = "TN"
    JPG = "JPG"
    JP2 = "JP2"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.upper() == "JPEG":
            return cls.JPG
        return None


OCR_KINDS = frozenset({DerivativeKind.OCR, DerivativeKind.RAW_HOCR, DerivativeKind.ENCODED_OCR})
IMAGE_KINDS = frozenset({DerivativeKind.TN, DerivativeKind.JPG, DerivativeKind.JP2})

SOURCE_DATASTREAMS: dict[DerivativeKind, str] = {
    DerivativeKind.PDF: "OBJ",
    DerivativeKind.OCR: "OBJ",
    DerivativeKind.RAW_HOCR: "OBJ",
    DerivativeKind.ENCODED_OCR: "OBJ",
    DerivativeKind.TN: "OBJ",
    DerivativeKind.JPG: "OBJ",
    DerivativeKind.JP2: "OBJ",
}


def to_kind(kind: "DerivativeKind | str") -> DerivativeKind:
    """Coerce a kind name to a DerivativeKind.

    Raises:
        UnknownDerivativeKind: If the name is not a known kind
    """
    try:
        return DerivativeKind(kind)
    except ValueError:
        raise UnknownDerivativeKind(kind) from None


def source_id_for(kind: "DerivativeKind | str") -> str:
    """Return the id of the datastream a derivative kind is built from.

    Raises:
        UnknownDerivativeKind: If the kind has no entry in the source table
    """
    resolved = to_kind(kind)
    if resolved not in SOURCE_DATASTREAMS:
        raise UnknownDerivativeKind(kind)
    return SOURCE_DATASTREAMS[resolved]


def is_book(obj) -> bool:
    return BOOK_CMODEL in obj.models


def is_page(obj) -> bool:
    return PAGE_CMODEL in obj.models
