"""Status service access - HTTP transport and feed decoding."""

from statusfeed.ingestion.http_client import Credential, HTTPClient
from statusfeed.ingestion.status_client import StatusClient

__all__ = [
    "Credential",
    "HTTPClient",
    "StatusClient",
]
