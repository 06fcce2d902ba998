"""Converters wrapping the external derivative tools."""

from .converter import Converter
from .hocr_encoder import HOCREncoder
from .ocr_converter import ImagePreprocessor, OCRConverter
from .pdf_combiner import PDFCombiner
from .pdf_converter import PDFConverter

__all__ = [
    "Converter",
    "HOCREncoder",
    "ImagePreprocessor",
    "OCRConverter",
    "PDFCombiner",
    "PDFConverter",
]
