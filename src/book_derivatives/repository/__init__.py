"""Repository interfaces and relationship helpers."""

from .interfaces import Datastream, ObjectStore, QueryService, RelationshipStore, RepositoryObject
from .relationships import RelationshipOverlay

__all__ = [
    "Datastream",
    "ObjectStore",
    "QueryService",
    "RelationshipOverlay",
    "RelationshipStore",
    "RepositoryObject",
]
