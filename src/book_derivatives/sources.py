"""Locate and fetch the source datastream of a derivative."""

import logging
from pathlib import Path

from .capabilities import CapabilityChecker
from .exceptions import DerivativeError
from .files import extension_for, safe_name, temp_dir
from .kinds import DerivativeKind, source_id_for

logger = logging.getLogger(__name__)


class SourceResolver:
    """Materialize a derivative's source datastream as a local file.

    Files are named from the object pid and datastream id, so two objects
    being derived at the same time never write to the same path.
    """

    def __init__(self, checker: CapabilityChecker, scratch_dir: Path | None = None):
        self.checker = checker
        self.scratch_dir = scratch_dir

    def path_for(self, obj, dsid: str) -> Path:
        """Return the local path a datastream of an object is fetched to."""
        extension = extension_for(obj[dsid].mimetype) if dsid in obj else ""
        return temp_dir(self.scratch_dir) / f"{safe_name(obj.id)}_{dsid}{extension}"

    def materialize_source(self, obj, kind: DerivativeKind | str) -> Path | None:
        """Fetch the source of a derivative to a local file.

        Args:
            obj: Page (or book) object
            kind: Derivative kind whose source is wanted

        Returns:
            Path to the local copy, or None if the derivative cannot be built

        Raises:
            UnknownDerivativeKind: If the kind has no source mapping
        """
        dsid = source_id_for(kind)
        try:
            self.checker.require(obj, kind)
        except DerivativeError as e:
            logger.warning(f"Not fetching {dsid} of {obj.id}: {e.message}")
            return None
        return self.fetch(obj, dsid)

    def fetch(self, obj, dsid: str) -> Path | None:
        """Write a datastream's content to its local path.

        Returns:
            Path to the local copy, or None if the datastream is absent
        """
        if dsid not in obj:
            logger.warning(f"Object {obj.id} has no {dsid} datastream")
            return None

        path = self.path_for(obj, dsid)
        obj[dsid].get_content(path)
        logger.debug(f"Fetched {dsid} of {obj.id} to {path}")
        return path
