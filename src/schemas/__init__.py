"""Schema definitions for book-derivatives."""

from .config import DerivativeConfig, load_config
from .page import DerivationOptions, PageEntry
from .report import BatchReport

__all__ = [
    "BatchReport",
    "DerivationOptions",
    "DerivativeConfig",
    "PageEntry",
    "load_config",
]
