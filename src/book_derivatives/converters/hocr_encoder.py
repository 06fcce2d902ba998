"""Normalize Tesseract HOCR output into XML.

Tesseract writes HOCR as HTML 4.01 Transitional. The DOCTYPE is swapped
for an XML declaration, the document is parsed as XML and a bundled XSL
transform lower-cases its text.
"""

import logging
from pathlib import Path

from lxml import etree

from ..exceptions import MalformedHocrInput

logger = logging.getLogger(__name__)

# Resources ship inside the package:
#   hocr_encoder.py → converters/ → book_derivatives/resources/
PACKAGE_DIR = Path(__file__).parent.parent
HOCR_XSLT_PATH = PACKAGE_DIR / "resources" / "hocr-lowercase.xsl"

HTML_DOCTYPE = (
    b'<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN" '
    b'"http://www.w3.org/TR/html4/loose.dtd">'
)
XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>'


class HOCREncoder:
    """Rewrite raw HOCR into normalized XML.

    Attributes:
        xslt_path: XSL transform applied to the parsed HOCR
    """

    def __init__(self, xslt_path: Path | None = None):
        self.xslt_path = xslt_path or HOCR_XSLT_PATH
        self._transform: etree.XSLT | None = None

    @property
    def transform(self) -> etree.XSLT:
        """Lazily compiled XSL transform."""
        if self._transform is None:
            self._transform = etree.XSLT(etree.parse(str(self.xslt_path)))
        return self._transform

    def normalize(self, hocr_path: Path) -> Path:
        """Write <hocr_path>.xml from a raw HOCR file.

        Args:
            hocr_path: HOCR file produced by Tesseract

        Returns:
            Path to the normalized XML file

        Raises:
            MalformedHocrInput: If the HOCR is not well-formed XML once its
                DOCTYPE has been replaced
        """
        hocr_path = Path(hocr_path)
        content = hocr_path.read_bytes().replace(HTML_DOCTYPE, XML_DECLARATION, 1)

        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            document = etree.fromstring(content.lstrip(), parser)
        except etree.XMLSyntaxError as e:
            raise MalformedHocrInput(f"HOCR in {hocr_path} is not well-formed: {e}") from e

        result = self.transform(document)

        output = Path(f"{hocr_path}.xml")
        output.write_bytes(etree.tostring(result, xml_declaration=True, encoding="UTF-8"))
        logger.debug(f"Encoded HOCR {hocr_path} to {output}")
        return output
