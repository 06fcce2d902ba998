"""Relationship vocabulary and a key/value view over relationships."""

FEDORA_RELS_EXT_URI = "info:fedora/fedora-system:def/relations-external#"
FEDORA_MODEL_URI = "info:fedora/fedora-system:def/model#"
ISLANDORA_RELS_EXT_URI = "http://islandora.ca/ontology/relsext#"

IS_MEMBER_OF = "isMemberOf"
IS_SEQUENCE_NUMBER = "isSequenceNumber"
IS_PAGE_NUMBER = "isPageNumber"
HAS_LANGUAGE = "hasLanguage"
PREPROCESS = "preprocess"
PAGE_PROGRESSION = "hasPageProgression"


class RelationshipOverlay:
    """Treat (namespace, predicate) pairs on an object as single-valued keys.

    Setting a value removes whatever the predicate held before, so each
    key holds at most one value as far as this view is concerned.

    Example:
        overlay = RelationshipOverlay(page.relationships)
        overlay.set_value(HAS_LANGUAGE, "fra")
        overlay.get_value(HAS_LANGUAGE)  # "fra"
    """

    def __init__(self, relationships, namespace: str = ISLANDORA_RELS_EXT_URI):
        self.relationships = relationships
        self.namespace = namespace

    def get_value(self, predicate: str, default: str | None = None) -> str | None:
        """Return the first value recorded for a predicate, or default."""
        found = self.relationships.get(self.namespace, predicate)
        if not found:
            return default
        return found[0]["object"]["value"]

    def get_bool(self, predicate: str, default: bool = False) -> bool:
        value = self.get_value(predicate)
        if value is None:
            return default
        return value.strip().lower() in ("true", "1", "yes")

    def set_value(self, predicate: str, value, literal: bool = True) -> None:
        """Replace any existing value of a predicate with a new one."""
        if isinstance(value, bool):
            value = "true" if value else "false"
        self.relationships.remove(self.namespace, predicate)
        self.relationships.add(self.namespace, predicate, str(value), literal=literal)
