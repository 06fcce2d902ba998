"""Repository clients."""

from .client import Client
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
)
from .fedora_client import FedoraClient, FedoraDatastream, FedoraObject

__all__ = [
    "Client",
    "FedoraClient",
    "FedoraDatastream",
    "FedoraObject",
    "ClientError",
    "ConnectionError",
    "APIError",
    "NotFoundError",
]
