"""Fedora Commons 3.x REST client.

Implements the object store, relationship store and query service the
derivation core works against.

Example:
    config = {"base_url": "http://localhost:8080/fedora", "username": "fedoraAdmin"}
    with FedoraClient(config) as client:
        page = client.get_object("book:1-0001")
        page["OBJ"].get_content(Path("/tmp/page.tif"))
"""

import csv
import io
import logging
from pathlib import Path
from urllib.parse import quote

from lxml import etree

from .client import Client

logger = logging.getLogger(__name__)

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
FEDORA_PREFIX = "info:fedora/"


def _texts(root: etree._Element, name: str) -> list[str]:
    return [t.strip() for t in root.xpath(f"//*[local-name()='{name}']/text()")]


class FedoraDatastream:
    """A datastream of a Fedora object.

    A datastream built with FedoraObject.construct_datastream only exists
    locally until it is passed to FedoraObject.ingest_datastream.
    """

    def __init__(
        self,
        client: "FedoraClient",
        pid: str,
        dsid: str,
        label: str = "",
        mimetype: str = "",
        control_group: str = "M",
        ingested: bool = True,
    ):
        self.client = client
        self.pid = pid
        self.id = dsid
        self.label = label
        self.mimetype = mimetype
        self.control_group = control_group
        self.ingested = ingested
        self.content_path: Path | None = None

    def __repr__(self) -> str:
        return f"FedoraDatastream({self.pid}/{self.id})"

    @property
    def path(self) -> str:
        return f"/objects/{quote(self.pid)}/datastreams/{quote(self.id)}"

    def get_content(self, path: Path) -> None:
        response = self.client.get(f"{self.path}/content")
        Path(path).write_bytes(response.content)

    def set_content_from_file(self, path: Path) -> None:
        """Set the content; an ingested datastream gets a new version."""
        self.content_path = Path(path)
        if self.ingested:
            self.client.put(
                self.path,
                params={"mimeType": self.mimetype, "dsLabel": self.label},
                content=self.content_path.read_bytes(),
            )


class FedoraRelationships:
    """RELS-EXT relationships of one object."""

    def __init__(self, client: "FedoraClient", pid: str):
        self.client = client
        self.pid = pid

    @property
    def subject(self) -> str:
        return f"{FEDORA_PREFIX}{self.pid}"

    @property
    def path(self) -> str:
        return f"/objects/{quote(self.pid)}/relationships"

    def get(self, namespace: str, predicate: str) -> list[dict]:
        response = self.client.get(
            self.path,
            params={"subject": self.subject, "predicate": f"{namespace}{predicate}"},
        )
        root = etree.fromstring(response.content)

        found = []
        for description in root.iterfind(f"{{{RDF_NS}}}Description"):
            for child in description:
                qname = etree.QName(child)
                if qname.namespace != namespace or qname.localname != predicate:
                    continue
                resource = child.get(f"{{{RDF_NS}}}resource")
                found.append(
                    {
                        "predicate": {"namespace": namespace, "value": predicate},
                        "object": {
                            "value": resource if resource is not None else (child.text or ""),
                            "literal": resource is None,
                        },
                    }
                )
        return found

    def add(self, namespace: str, predicate: str, value: str, literal: bool = False) -> None:
        self.client.post(
            f"{self.path}/new",
            params={
                "subject": self.subject,
                "predicate": f"{namespace}{predicate}",
                "object": value,
                "isLiteral": "true" if literal else "false",
            },
        )

    def remove(
        self, namespace: str, predicate: str, value: str | None = None, literal: bool = False
    ) -> None:
        """Remove a relationship, or every value of the predicate if value is None."""
        if value is None:
            for found in self.get(namespace, predicate):
                self.remove(
                    namespace, predicate, found["object"]["value"], found["object"]["literal"]
                )
            return

        self.client.delete(
            self.path,
            params={
                "subject": self.subject,
                "predicate": f"{namespace}{predicate}",
                "object": value,
                "isLiteral": "true" if literal else "false",
            },
        )


class FedoraObject:
    """A Fedora object with lazily listed datastreams."""

    def __init__(self, client: "FedoraClient", pid: str, label: str = "", models=None):
        self.client = client
        self.id = pid
        self.label = label
        self.models = list(models or [])
        self.relationships = FedoraRelationships(client, pid)
        self._datastreams: dict[str, FedoraDatastream] | None = None

    def __repr__(self) -> str:
        return f"FedoraObject({self.id})"

    @property
    def datastreams(self) -> dict[str, FedoraDatastream]:
        if self._datastreams is None:
            self._datastreams = self.client.list_datastreams(self.id)
        return self._datastreams

    def __contains__(self, dsid: str) -> bool:
        return dsid in self.datastreams

    def __getitem__(self, dsid: str) -> FedoraDatastream:
        return self.datastreams[dsid]

    def construct_datastream(self, dsid: str, control_group: str = "M") -> FedoraDatastream:
        return FedoraDatastream(
            self.client, self.id, dsid, control_group=control_group, ingested=False
        )

    def ingest_datastream(self, datastream: FedoraDatastream) -> None:
        """Create a constructed datastream in the repository."""
        if datastream.content_path is None:
            raise ValueError(f"Datastream {datastream.id} has no content to ingest")

        self.client.post(
            datastream.path,
            params={
                "controlGroup": datastream.control_group,
                "dsLabel": datastream.label,
                "mimeType": datastream.mimetype,
            },
            content=datastream.content_path.read_bytes(),
        )
        datastream.ingested = True
        self.datastreams[datastream.id] = datastream
        logger.debug(f"Ingested {datastream.id} on {self.id}")

    def purge_datastream(self, dsid: str) -> None:
        self.client.delete(f"/objects/{quote(self.id)}/datastreams/{quote(dsid)}")
        self.datastreams.pop(dsid, None)
        logger.debug(f"Purged {dsid} from {self.id}")


class FedoraClient(Client):
    """Client for the Fedora 3.x REST API and resource index."""

    def fetch(self, pid: str) -> FedoraObject:
        """Load an object profile.

        Raises:
            NotFoundError: If the object does not exist
        """
        response = self.get(f"/objects/{quote(pid)}", params={"format": "xml"})
        root = etree.fromstring(response.content)

        labels = _texts(root, "objLabel")
        models = [
            model[len(FEDORA_PREFIX):] if model.startswith(FEDORA_PREFIX) else model
            for model in _texts(root, "model")
        ]
        return FedoraObject(self, pid, label=labels[0] if labels else "", models=models)

    def get_object(self, pid: str) -> FedoraObject:
        return self.fetch(pid)

    def list_datastreams(self, pid: str) -> dict[str, FedoraDatastream]:
        response = self.get(f"/objects/{quote(pid)}/datastreams", params={"format": "xml"})
        root = etree.fromstring(response.content)

        datastreams = {}
        for element in root.xpath("//*[local-name()='datastream']"):
            dsid = element.get("dsid")
            datastreams[dsid] = FedoraDatastream(
                self,
                pid,
                dsid,
                label=element.get("label", ""),
                mimetype=element.get("mimeType", ""),
            )
        return datastreams

    def query(self, sparql: str) -> list[dict[str, str]]:
        """Run a SPARQL query against the resource index.

        Returns:
            One dict per result row, keyed by variable name; unbound
            variables are empty strings
        """
        response = self.get(
            "/risearch",
            params={
                "type": "tuples",
                "lang": "sparql",
                "format": "CSV",
                "query": sparql,
            },
        )
        reader = csv.DictReader(io.StringIO(response.text))
        return [{key.lstrip("?"): value for key, value in row.items()} for row in reader]
