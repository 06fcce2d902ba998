"""Write derived local files back to repository objects as datastreams."""

import logging
from pathlib import Path

from .files import mimetype_for

logger = logging.getLogger(__name__)


class DatastreamCommitter:
    """Create or version a datastream from a local file.

    A datastream that does not exist yet is constructed and ingested; an
    existing one gets its content replaced, which the repository records
    as a new version. Each commit stands alone: there is no rollback of
    earlier commits when a later one fails.
    """

    def __init__(self, control_group: str = "M"):
        self.control_group = control_group

    def commit(
        self,
        obj,
        dsid: str,
        path: Path,
        mimetype: str | None = None,
        label: str | None = None,
    ) -> bool:
        """Commit a local file as a datastream on an object.

        Args:
            obj: Repository object to write to
            dsid: Datastream id (e.g. "OCR")
            path: Local file holding the new content
            mimetype: Datastream mimetype (default: sniffed from the extension)
            label: Datastream label (default: the dsid)

        Returns:
            True if the datastream was written
        """
        path = Path(path)
        if not path.is_file():
            logger.error(f"Cannot commit {dsid} on {obj.id}: {path} does not exist")
            return False

        mimetype = mimetype or mimetype_for(path)
        try:
            if dsid in obj:
                datastream = obj[dsid]
                if datastream.mimetype != mimetype:
                    datastream.mimetype = mimetype
                if label:
                    datastream.label = label
                datastream.set_content_from_file(path)
                logger.debug(f"Updated {dsid} on {obj.id}")
            else:
                datastream = obj.construct_datastream(dsid, self.control_group)
                datastream.label = label or dsid
                datastream.mimetype = mimetype
                datastream.set_content_from_file(path)
                obj.ingest_datastream(datastream)
                logger.debug(f"Ingested {dsid} on {obj.id}")
        except Exception as e:
            logger.error(f"Failed to commit {dsid} on {obj.id}: {e}")
            return False

        return True
