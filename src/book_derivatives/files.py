"""Temporary file handling and mimetype/extension mapping."""

import logging
import mimetypes
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Mimetypes whose extension the mimetypes module gets wrong or does not know.
EXTENSIONS = {
    "image/tiff": ".tif",
    "image/jpeg": ".jpg",
    "image/jp2": ".jp2",
    "image/png": ".png",
    "application/pdf": ".pdf",
    "text/plain": ".txt",
    "text/html": ".html",
    "text/xml": ".xml",
    "application/xml": ".xml",
}

MIMETYPES = {
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".jp2": "image/jp2",
    ".hocr": "text/html",
}


def extension_for(mimetype: str | None) -> str:
    """Return a file extension (with dot) for a mimetype, or "" if unknown."""
    if not mimetype:
        return ""
    mimetype = mimetype.split(";")[0].strip().lower()
    if mimetype in EXTENSIONS:
        return EXTENSIONS[mimetype]
    return mimetypes.guess_extension(mimetype) or ""


def mimetype_for(path: Path) -> str:
    """Sniff a mimetype from a file extension."""
    suffix = path.suffix.lower()
    if suffix in MIMETYPES:
        return MIMETYPES[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def temp_dir(configured: Path | None = None) -> Path:
    """Return the directory temporary derivative files are written to."""
    directory = configured or Path(tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def safe_name(pid: str) -> str:
    """Make a repository pid usable as part of a filename."""
    return pid.replace(":", "_").replace("/", "_")


class ScratchFiles:
    """Track temporary files and delete them when the block exits.

    Example:
        with ScratchFiles() as scratch:
            source = scratch.add(resolver.materialize_source(page, "OCR"))
            ...
        # source is gone here, even if the block raised
    """

    def __init__(self):
        self.paths: list[Path] = []

    def add(self, path: Path | None) -> Path | None:
        if path is not None:
            self.paths.append(Path(path))
        return path

    def cleanup(self) -> None:
        for path in self.paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete temporary file {path}: {e}")
        self.paths = []

    def __enter__(self) -> "ScratchFiles":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()
