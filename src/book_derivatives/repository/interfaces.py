"""Interfaces the derivation core consumes from the repository.

Any object store can be plugged in as long as its objects and datastreams
provide these members; FedoraClient is the bundled implementation.
"""

from pathlib import Path
from typing import Iterable, Protocol


class Datastream(Protocol):
    id: str
    label: str
    mimetype: str
    control_group: str

    def get_content(self, path: Path) -> None:
        """Write the datastream content to a local file."""
        ...

    def set_content_from_file(self, path: Path) -> None:
        """Replace the datastream content with a local file (new version)."""
        ...


class RelationshipStore(Protocol):
    def get(self, namespace: str, predicate: str) -> list[dict]:
        """Return relationships as [{"predicate": {...}, "object": {"value": ...}}]."""
        ...

    def add(self, namespace: str, predicate: str, value: str, literal: bool = False) -> None: ...

    def remove(
        self, namespace: str, predicate: str, value: str | None = None, literal: bool = False
    ) -> None: ...


class RepositoryObject(Protocol):
    id: str
    label: str
    models: Iterable[str]
    relationships: RelationshipStore

    def __contains__(self, dsid: str) -> bool: ...

    def __getitem__(self, dsid: str) -> Datastream: ...

    def construct_datastream(self, dsid: str, control_group: str = "M") -> Datastream: ...

    def ingest_datastream(self, datastream: Datastream) -> None: ...

    def purge_datastream(self, dsid: str) -> None: ...


class ObjectStore(Protocol):
    def get_object(self, pid: str) -> RepositoryObject: ...


class QueryService(Protocol):
    def query(self, sparql: str) -> list[dict[str, str]]:
        """Run a SPARQL query and return rows of named bindings."""
        ...
