"""Batch derivation report."""

from typing import Literal

from pydantic import BaseModel


class BatchReport(BaseModel):
    """Outcome of a batch derivation run over one book.

    Attributes:
        book_pid: Book the batch ran against
        pages: Pids of the pages that were processed, in page order
        thumbnail_updated: Whether the book thumbnail was refreshed
        pdf_updated: Whether the book PDF was rebuilt
        errors: Failures encountered, one entry per failed step
        status: "complete" when no step failed
    """

    book_pid: str
    pages: list[str] = []
    thumbnail_updated: bool = False
    pdf_updated: bool = False
    errors: list[str] = []
    status: Literal["running", "complete", "completed_with_errors"] = "running"

    def finish(self) -> "BatchReport":
        self.status = "completed_with_errors" if self.errors else "complete"
        return self
