"""HTTP transport package."""

from .client import (
    HTTP_ERROR_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    PAYLOAD_ERROR_MESSAGE,
    TransportClient,
)
from .outcome import NETWORK_FAILURE_STATUS, FailureKind, Outcome, TransportFailure

__all__ = [
    "TransportClient",
    "Outcome",
    "TransportFailure",
    "FailureKind",
    "NETWORK_FAILURE_STATUS",
    "NETWORK_ERROR_MESSAGE",
    "HTTP_ERROR_MESSAGE",
    "PAYLOAD_ERROR_MESSAGE",
]
