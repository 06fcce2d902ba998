"""Derivative tool configuration.

The configuration is passed explicitly to every derivation component;
nothing reads tool paths from process-wide state.

Example config file:
    {
        "gs_path": "/usr/local/bin/gs",
        "tesseract_path": "/usr/bin/tesseract",
        "enabled_languages": ["eng", "fra", "deu"]
    }
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_CONVERT_PATH = "/usr/bin/convert"
DEFAULT_GS_PATH = "/usr/bin/gs"
DEFAULT_TESSERACT_PATH = "/usr/bin/tesseract"
DEFAULT_GIMP_PATH = "/usr/bin/gimp"


class DerivativeConfig(BaseModel):
    """Executable paths and options for derivative generation.

    Attributes:
        convert_path: ImageMagick convert, used for image-to-PDF conversion
        gs_path: Ghostscript, used to combine PDFs
        tesseract_path: Tesseract, used for OCR and HOCR
        gimp_path: GIMP, used for OCR preprocessing
        enabled_languages: Tesseract language codes offered for OCR
        pdf_options: Flag/value pairs prepended to the convert command
        temp_dir: Directory for temporary files (default: system temp)
        hocr_xslt_path: XSL transform applied to HOCR (default: bundled)
    """

    convert_path: str = DEFAULT_CONVERT_PATH
    gs_path: str = DEFAULT_GS_PATH
    tesseract_path: str = DEFAULT_TESSERACT_PATH
    gimp_path: str = DEFAULT_GIMP_PATH
    enabled_languages: list[str] = ["eng"]
    pdf_options: dict[str, str] = Field(default_factory=lambda: {"-compress": "LZW"})
    temp_dir: Path | None = None
    hocr_xslt_path: Path | None = None


def load_config(path: Path) -> DerivativeConfig:
    """Load and validate a JSON configuration file."""
    data = json.loads(path.read_text())
    return DerivativeConfig.model_validate(data)
