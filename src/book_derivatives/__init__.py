"""Derivative generation for digitized books and their pages."""

from .batch import BatchOrchestrator
from .book_derivatives import BookDerivatives
from .capabilities import CapabilityChecker
from .committer import DatastreamCommitter
from .exceptions import (
    DerivativeError,
    MalformedHocrInput,
    SourceMissing,
    ToolInvocationFailed,
    ToolUnavailable,
    UnknownDerivativeKind,
)
from .kinds import DerivativeKind, source_id_for
from .ordering import PageOrdering
from .page_derivatives import PageDerivatives

__all__ = [
    "BatchOrchestrator",
    "BookDerivatives",
    "CapabilityChecker",
    "DatastreamCommitter",
    "DerivativeKind",
    "PageDerivatives",
    "PageOrdering",
    "source_id_for",
    "DerivativeError",
    "MalformedHocrInput",
    "SourceMissing",
    "ToolInvocationFailed",
    "ToolUnavailable",
    "UnknownDerivativeKind",
]
