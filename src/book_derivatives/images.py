"""Image derivatives (thumbnail, page image, JPEG 2000) for page objects.

Image derivatives are produced by a pluggable generator. The bundled
PixmapImageDerivatives renders TN and JPG from the OBJ datastream with
PyMuPDF; JP2 needs a generator backed by a JPEG 2000 encoder.
"""

import logging
from pathlib import Path
from typing import Protocol

import fitz  # PyMuPDF

from .committer import DatastreamCommitter
from .files import ScratchFiles, extension_for, safe_name, temp_dir
from .kinds import DerivativeKind

logger = logging.getLogger(__name__)


class ImageDerivativeGenerator(Protocol):
    def supports(self, kind: DerivativeKind) -> bool: ...

    def create_derivatives(self, obj) -> bool: ...


class PixmapImageDerivatives:
    """Render TN and JPG derivatives from a page's OBJ image.

    Attributes:
        sizes: Longest edge in pixels for each rendered datastream
    """

    DEFAULT_SIZES = {DerivativeKind.TN: 200, DerivativeKind.JPG: 600}

    def __init__(
        self,
        committer: DatastreamCommitter | None = None,
        scratch_dir: Path | None = None,
        sizes: dict[DerivativeKind, int] | None = None,
    ):
        self.committer = committer or DatastreamCommitter()
        self.scratch_dir = scratch_dir
        self.sizes = sizes or dict(self.DEFAULT_SIZES)

    def supports(self, kind: DerivativeKind) -> bool:
        return kind in self.sizes

    def create_derivatives(self, obj) -> bool:
        """Render and commit every supported derivative for an object.

        Returns:
            True if all derivatives were committed
        """
        if "OBJ" not in obj:
            logger.warning(f"Object {obj.id} has no OBJ datastream, skipping images")
            return False

        source_ds = obj["OBJ"]
        directory = temp_dir(self.scratch_dir)
        prefix = safe_name(obj.id)

        with ScratchFiles() as scratch:
            source = scratch.add(
                directory / f"{prefix}_OBJ{extension_for(source_ds.mimetype)}"
            )
            source_ds.get_content(source)

            try:
                pixmap = fitz.Pixmap(str(source))
            except Exception as e:
                logger.error(f"Could not read OBJ image of {obj.id}: {e}")
                return False

            if pixmap.alpha:
                pixmap = fitz.Pixmap(pixmap, 0)
            if pixmap.n > 3:
                pixmap = fitz.Pixmap(fitz.csRGB, pixmap)

            success = True
            for kind, size in self.sizes.items():
                output = scratch.add(directory / f"{prefix}_{kind.value}.jpg")
                try:
                    self._render(pixmap, size, output)
                except Exception as e:
                    logger.error(f"Failed to render {kind.value} for {obj.id}: {e}")
                    success = False
                    continue
                success = self.committer.commit(
                    obj, kind.value, output, mimetype="image/jpeg"
                ) and success

        return success

    def _render(self, pixmap: fitz.Pixmap, size: int, output: Path) -> None:
        """Scale a pixmap so its longest edge is at most size, then save as JPEG."""
        scale = min(1.0, size / max(pixmap.width, pixmap.height))
        width = max(1, int(round(pixmap.width * scale)))
        height = max(1, int(round(pixmap.height * scale)))
        scaled = fitz.Pixmap(pixmap, width, height, None)
        scaled.save(str(output), output="jpg")
        logger.debug(f"Rendered {width}x{height} image to {output}")
