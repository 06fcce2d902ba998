"""Merge PDFs with Ghostscript."""

import logging
import shutil
from pathlib import Path

import fitz  # PyMuPDF

from .converter import Converter

logger = logging.getLogger(__name__)

GS_ARGS = ["-dBATCH", "-dNOPAUSE", "-q", "-sDEVICE=pdfwrite"]


class PDFCombiner(Converter):
    """Combine an ordered list of PDFs into one file.

    Success is Ghostscript's exit status alone. After a failed combine the
    output file may hold anything and must not be used.
    """

    @property
    def tool(self) -> str:
        return self.config.gs_path

    def combine(self, files: list[Path], output: Path) -> bool:
        """Merge files, in the given order, into output.

        Args:
            files: PDFs to merge
            output: Destination PDF

        Returns:
            True if Ghostscript exited with status 0
        """
        args = [*GS_ARGS, f"-sOutputFile={output}", *(str(f) for f in files)]
        result = self.runner.run([self.tool, *args])
        if not result.succeeded:
            self._record_failure(result)
            return False

        logger.debug(f"Combined {len(files)} PDFs into {output}")
        return True

    def append(self, existing: Path, new_files: list[Path]) -> bool:
        """Append PDFs to the end of an existing PDF, in place.

        The existing file is copied aside and used as the first input of
        the combine, whose output is the existing file's own path. If the
        combine fails the original content is put back.

        Args:
            existing: PDF to extend
            new_files: PDFs to append, in order

        Returns:
            True if the combine succeeded
        """
        existing = Path(existing)
        copy = existing.with_name(f"{existing.stem}.orig{existing.suffix}")
        shutil.copyfile(existing, copy)
        try:
            if self.combine([copy, *new_files], existing):
                return True
            shutil.copyfile(copy, existing)
            return False
        finally:
            copy.unlink(missing_ok=True)

    def count_pages(self, pdf_path: Path) -> int:
        """Count the number of pages in a PDF file."""
        doc = fitz.open(str(pdf_path))
        page_count = len(doc)
        doc.close()
        return page_count
