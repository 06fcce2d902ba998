"""Page order and reading direction of a book."""

import logging

from schemas.page import PageEntry

from .repository.interfaces import ObjectStore, QueryService
from .repository.relationships import (
    FEDORA_MODEL_URI,
    FEDORA_RELS_EXT_URI,
    IS_MEMBER_OF,
    IS_PAGE_NUMBER,
    IS_SEQUENCE_NUMBER,
    ISLANDORA_RELS_EXT_URI,
    PAGE_PROGRESSION,
    RelationshipOverlay,
)

logger = logging.getLogger(__name__)

PAGES_QUERY = """
PREFIX fre: <{rels_ext}>
PREFIX fm: <{model}>
PREFIX islandora: <{islandora}>
SELECT ?page ?label ?sequence ?legacy_sequence
FROM <#ri>
WHERE {{
  ?page fre:{member_of} <info:fedora/{pid}> .
  OPTIONAL {{ ?page fm:label ?label }}
  OPTIONAL {{ ?page islandora:{sequence} ?sequence }}
  OPTIONAL {{ ?page islandora:{legacy_sequence} ?legacy_sequence }}
}}
"""

PAGE_PROGRESSIONS = ("lr", "rl")


def strip_fedora_prefix(uri: str) -> str:
    return uri[len("info:fedora/"):] if uri.startswith("info:fedora/") else uri


class PageOrdering:
    """Query a book's pages and sort them by sequence number.

    Attributes:
        query_service: Resource index used to find the pages of a book
    """

    def __init__(self, query_service: QueryService):
        self.query_service = query_service

    def pages_query(self, book_pid: str) -> str:
        return PAGES_QUERY.format(
            rels_ext=FEDORA_RELS_EXT_URI,
            model=FEDORA_MODEL_URI,
            islandora=ISLANDORA_RELS_EXT_URI,
            member_of=IS_MEMBER_OF,
            sequence=IS_SEQUENCE_NUMBER,
            legacy_sequence=IS_PAGE_NUMBER,
            pid=book_pid,
        )

    def pages_of(self, book) -> dict[str, PageEntry]:
        """Return the pages of a book in reading order.

        Pages sort by numeric sequence number; a missing or non-numeric
        sequence number counts as 0. Pages with equal keys keep the order
        the query returned them in.

        Args:
            book: Book repository object

        Returns:
            Dict of pid to PageEntry, iterating in page order
        """
        rows = self.query_service.query(self.pages_query(book.id))

        entries: list[PageEntry] = []
        seen: set[str] = set()
        for row in rows:
            pid = strip_fedora_prefix(row["page"])
            if pid in seen:
                continue
            seen.add(pid)
            sequence = row.get("sequence") or row.get("legacy_sequence") or None
            entries.append(
                PageEntry(pid=pid, label=row.get("label") or "", sequence_number=sequence)
            )

        entries.sort(key=lambda entry: entry.sort_key)
        logger.debug(f"Book {book.id} has {len(entries)} pages")
        return {entry.pid: entry for entry in entries}

    def page_progression(self, book) -> str:
        """Return the reading direction of a book, "lr" unless recorded."""
        value = RelationshipOverlay(book.relationships).get_value(PAGE_PROGRESSION)
        if value in PAGE_PROGRESSIONS:
            return value
        return "lr"

    def set_page_sequence(self, store: ObjectStore, pids: list[str]) -> None:
        """Renumber pages 1..n in the given order.

        Args:
            store: Object store the page objects are loaded from
            pids: Page pids in their new reading order
        """
        for number, pid in enumerate(pids, start=1):
            page = store.get_object(pid)
            RelationshipOverlay(page.relationships).set_value(IS_SEQUENCE_NUMBER, number)
            logger.debug(f"Set sequence number of {pid} to {number}")
