"""OCR, HOCR and OCR preprocessing with Tesseract and GIMP."""

import logging
from pathlib import Path

from .converter import Converter

logger = logging.getLogger(__name__)

# Script-Fu run by GIMP in batch mode. Flattens to greyscale, then sharpens.
PREPROCESS_SCRIPT = """
(let* ((image (car (gimp-file-load RUN-NONINTERACTIVE {source} {source})))
       (drawable (car (gimp-image-flatten image))))
  (gimp-drawable-desaturate drawable DESATURATE-LUMINANCE)
  (plug-in-unsharp-mask RUN-NONINTERACTIVE image drawable 5.0 0.5 0)
  (gimp-file-save RUN-NONINTERACTIVE image drawable {output} {output})
  (gimp-image-delete image))
"""


def scheme_string(value: str) -> str:
    """Quote a value as a Script-Fu string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class OCRConverter(Converter):
    """Run Tesseract to produce plain text and HOCR from a page image."""

    @property
    def tool(self) -> str:
        return self.config.tesseract_path

    def ocr(self, image: Path, language: str = "eng") -> Path | None:
        """Extract plain text from an image into <image>.txt."""
        image = Path(image)
        output = Path(f"{image}.txt")
        return self._invoke([str(image), str(image), "-l", language], output)

    def hocr(self, image: Path, language: str = "eng") -> Path | None:
        """Extract HOCR from an image into <image>.html.

        Tesseract releases that name HOCR output <base>.hocr are accepted;
        the file is renamed to <image>.html.
        """
        image = Path(image)
        output = Path(f"{image}.html")
        result = self.runner.run([self.tool, str(image), str(image), "-l", language, "hocr"])

        alternate = Path(f"{image}.hocr")
        if alternate.exists():
            if result.succeeded and not output.exists():
                alternate.rename(output)
                logger.debug(f"Renamed {alternate} to {output}")
            else:
                alternate.unlink()

        return self._accept(result, output)


class ImagePreprocessor(Converter):
    """Clean up a page image with GIMP before OCR."""

    @property
    def tool(self) -> str:
        return self.config.gimp_path

    def preprocess(self, image: Path) -> Path | None:
        """Write a cleaned copy of image to <stem>_preprocessed<suffix>."""
        image = Path(image)
        output = image.with_name(f"{image.stem}_preprocessed{image.suffix}")
        script = PREPROCESS_SCRIPT.format(
            source=scheme_string(str(image)),
            output=scheme_string(str(output)),
        )
        return self._invoke(["-i", "-d", "-f", "-b", script, "-b", "(gimp-quit 0)"], output)
