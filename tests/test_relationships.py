"""Tests for the relationship overlay."""

from book_derivatives.repository.relationships import (
    FEDORA_RELS_EXT_URI,
    HAS_LANGUAGE,
    ISLANDORA_RELS_EXT_URI,
    PREPROCESS,
    RelationshipOverlay,
)
from fakes import FakeRelationships


class TestRelationshipOverlay:
    def test_missing_value(self):
        overlay = RelationshipOverlay(FakeRelationships())

        assert overlay.get_value(HAS_LANGUAGE) is None
        assert overlay.get_value(HAS_LANGUAGE, "eng") == "eng"
        assert overlay.get_bool(PREPROCESS) is False

    def test_set_replaces_every_previous_value(self):
        """After set_value the predicate holds exactly the new value."""
        relationships = FakeRelationships()
        relationships.add(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE, "eng", literal=True)
        relationships.add(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE, "deu", literal=True)
        overlay = RelationshipOverlay(relationships)

        overlay.set_value(HAS_LANGUAGE, "fra")

        found = relationships.get(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE)
        assert [r["object"]["value"] for r in found] == ["fra"]
        assert found[0]["object"]["literal"] is True

    def test_booleans_round_trip(self):
        overlay = RelationshipOverlay(FakeRelationships())

        overlay.set_value(PREPROCESS, True)
        assert overlay.get_value(PREPROCESS) == "true"
        assert overlay.get_bool(PREPROCESS) is True

        overlay.set_value(PREPROCESS, False)
        assert overlay.get_bool(PREPROCESS) is False

    def test_other_namespaces_untouched(self):
        relationships = FakeRelationships()
        relationships.add(FEDORA_RELS_EXT_URI, HAS_LANGUAGE, "keep")

        RelationshipOverlay(relationships).set_value(HAS_LANGUAGE, "fra")

        assert len(relationships.get(FEDORA_RELS_EXT_URI, HAS_LANGUAGE)) == 1

    def test_numbers_stored_as_text(self):
        overlay = RelationshipOverlay(FakeRelationships())

        overlay.set_value("isSequenceNumber", 7)

        assert overlay.get_value("isSequenceNumber") == "7"
