"""Image to PDF conversion with ImageMagick."""

import logging
from pathlib import Path

from .converter import Converter

logger = logging.getLogger(__name__)


def render_options(options: dict[str, str]) -> list[str]:
    """Render flag/value pairs as command arguments, in insertion order."""
    args: list[str] = []
    for flag, value in options.items():
        args.append(flag)
        if value not in (None, ""):
            args.append(str(value))
    return args


class PDFConverter(Converter):
    """Convert page images to PDF using ImageMagick convert.

    Success requires a zero exit status and a non-empty output file:
    convert can exit cleanly after writing nothing.
    """

    @property
    def tool(self) -> str:
        return self.config.convert_path

    def convert_to_pdf(self, image: Path, options: dict[str, str] | None = None) -> Path | None:
        """Convert one image to <image>.pdf.

        Args:
            image: Local image file
            options: Flag/value pairs (default: config.pdf_options)

        Returns:
            Path to the PDF, or None on failure
        """
        image = Path(image)
        output = Path(f"{image}.pdf")
        return self.convert_many([image], output, options)

    def convert_many(
        self,
        images: list[Path],
        output: Path,
        options: dict[str, str] | None = None,
    ) -> Path | None:
        """Convert several images, in the given order, into one PDF."""
        if options is None:
            options = self.config.pdf_options
        args = [*render_options(options), *(str(i) for i in images), str(output)]
        pdf = self._invoke(args, Path(output))
        if pdf:
            logger.debug(f"Converted {len(images)} image(s) to {pdf}")
        return pdf
