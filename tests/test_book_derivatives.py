"""Tests for book-level derivatives."""

from unittest.mock import MagicMock

import fitz  # PyMuPDF
import pytest

from book_derivatives.book_derivatives import BookDerivatives
from book_derivatives.ordering import PageOrdering
from fakes import make_pdf


def _pdf_bytes(tmp_path, name, pages=1):
    return make_pdf(tmp_path / f"{name}.pdf", pages=pages, prefix=name).read_bytes()


def _page_texts(content):
    with fitz.open(stream=content, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


@pytest.fixture
def books(tool_config, runner, repository):
    return BookDerivatives(tool_config, repository, PageOrdering(repository), runner)


class TestThumbnail:
    """Tests for update_thumbnail()."""

    def test_copies_first_page_thumbnail(self, books, repository, book):
        second = repository.add_page(book, "p:2", sequence=2)
        second.add_datastream("TN", b"second", "image/jpeg")
        first = repository.add_page(book, "p:1", sequence=1)
        first.add_datastream("TN", b"first", "image/png")

        assert books.can_update_thumbnail(book)
        assert books.update_thumbnail(book)

        assert book["TN"].content == b"first"
        assert book["TN"].mimetype == "image/png"

    def test_replaces_existing_thumbnail(self, books, repository, book):
        """An existing book TN gets a new version with the page TN's mimetype."""
        book.add_datastream("TN", b"old", "image/gif")
        page = repository.add_page(book, "p:1", sequence=1)
        page.add_datastream("TN", b"new", "image/jpeg")

        assert books.update_thumbnail(book)

        assert book.purged == []
        assert book["TN"].versions == 1
        assert book["TN"].content == b"new"
        assert book["TN"].mimetype == "image/jpeg"

    def test_failed_commit_keeps_existing_thumbnail(self, books, repository, book):
        """The book keeps its old TN when writing the new one fails."""
        book.add_datastream("TN", b"old", "image/gif")
        book["TN"].set_content_from_file = MagicMock(side_effect=OSError("disk full"))
        page = repository.add_page(book, "p:1", sequence=1)
        page.add_datastream("TN", b"new", "image/jpeg")

        assert not books.update_thumbnail(book)

        assert "TN" in book
        assert book.purged == []
        assert book["TN"].content == b"old"

    def test_book_without_pages(self, books, book):
        """No page means False and no writes."""
        assert not books.can_update_thumbnail(book)
        assert not books.update_thumbnail(book)
        assert book.writes == 0
        assert book.purged == []

    def test_first_page_without_thumbnail(self, books, repository, book):
        book.add_datastream("TN", b"old", "image/jpeg")
        repository.add_page(book, "p:1", sequence=1)

        assert not books.update_thumbnail(book)
        assert book["TN"].content == b"old"


class TestCreatePDF:
    """Tests for create_pdf()."""

    def test_combines_page_pdfs_in_order(self, books, repository, book, tmp_path, runner,
                                         tool_config, scratch_dir):
        for pid, sequence in [("p:b", 2), ("p:a", 1), ("p:c", 3)]:
            page = repository.add_page(book, pid, sequence=sequence)
            page.add_datastream("PDF", _pdf_bytes(tmp_path, pid[-1]), "application/pdf")

        assert books.create_pdf(book)

        assert _page_texts(book["PDF"].content) == ["a 1", "b 1", "c 1"]
        assert book["PDF"].mimetype == "application/pdf"
        assert len(runner.commands_for(tool_config.gs_path)) == 1
        assert list(scratch_dir.iterdir()) == []

    def test_skips_pages_without_pdf(self, books, repository, book, tmp_path):
        page = repository.add_page(book, "p:a", sequence=1)
        page.add_datastream("PDF", _pdf_bytes(tmp_path, "a"), "application/pdf")
        repository.add_page(book, "p:b", sequence=2)

        assert books.create_pdf(book)
        assert _page_texts(book["PDF"].content) == ["a 1"]

    def test_no_page_pdfs(self, books, repository, book):
        repository.add_page(book, "p:a", sequence=1)

        assert not books.create_pdf(book)
        assert "PDF" not in book

    def test_tools_unavailable(self, missing_tools_config, repository, book, tmp_path):
        page = repository.add_page(book, "p:a", sequence=1)
        page.add_datastream("PDF", _pdf_bytes(tmp_path, "a"), "application/pdf")
        books = BookDerivatives(missing_tools_config, repository, PageOrdering(repository))

        assert not books.create_pdf(book)
        assert "PDF" not in book

    def test_combine_failure(self, books, repository, book, tmp_path, runner, tool_config):
        page = repository.add_page(book, "p:a", sequence=1)
        page.add_datastream("PDF", _pdf_bytes(tmp_path, "a"), "application/pdf")
        runner.fail(tool_config.gs_path)

        assert not books.create_pdf(book)
        assert "PDF" not in book


class TestAppendPagePDF:
    def test_appends_to_end(self, books, repository, book, tmp_path, scratch_dir):
        """A new page's PDF becomes the last page of the book PDF."""
        book.add_datastream("PDF", _pdf_bytes(tmp_path, "book", pages=2), "application/pdf")
        page = repository.add_page(book, "p:new", sequence=3)
        page.add_datastream("PDF", _pdf_bytes(tmp_path, "new"), "application/pdf")

        assert books.append_page_pdf(book, page)

        assert _page_texts(book["PDF"].content) == ["book 1", "book 2", "new 1"]
        assert list(scratch_dir.iterdir()) == []

    def test_book_without_pdf(self, books, repository, book, tmp_path):
        page = repository.add_page(book, "p:new", sequence=1)
        page.add_datastream("PDF", _pdf_bytes(tmp_path, "new"), "application/pdf")

        assert not books.append_page_pdf(book, page)
        assert "PDF" not in book


class TestRebuildPDF:
    """Tests for rebuild_pdf()."""

    def test_single_conversion_in_page_order(
        self, books, repository, book, runner, tool_config, scratch_dir
    ):
        """Images are named so they sort in page order and converted together."""
        for pid, sequence in [("p:z", 2), ("p:y", 10), ("p:x", 1)]:
            repository.add_page(book, pid, sequence=sequence)

        assert books.rebuild_pdf(book)

        commands = runner.commands_for(tool_config.convert_path)
        assert len(commands) == 1
        names = [arg.rsplit("/", 1)[-1] for arg in commands[0][3:-1]]
        assert names == ["000001_p_x.tif", "000002_p_z.tif", "000003_p_y.tif"]
        assert _page_texts(book["PDF"].content) == ["Page 1", "Page 2", "Page 3"]
        assert list(scratch_dir.iterdir()) == []

    def test_book_without_pages(self, books, book, runner):
        assert not books.rebuild_pdf(book)
        assert runner.commands == []
        assert book.writes == 0

    def test_conversion_failure(self, books, repository, book, runner, tool_config):
        repository.add_page(book, "p:1", sequence=1)
        runner.fail(tool_config.convert_path)

        assert not books.rebuild_pdf(book)
        assert "PDF" not in book
