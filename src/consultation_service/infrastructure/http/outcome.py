"""Transport outcome type.

Every call made through the transport client returns an ``Outcome`` instead
of raising. Callers check ``outcome.ok`` and read either ``payload`` or
``failure``; they never need to inspect exceptions to tell "no data" from
"service failure".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

# Status reported when no HTTP response was obtained at all
NETWORK_FAILURE_STATUS = 0


class FailureKind(str, Enum):
    """What went wrong on the wire."""

    NETWORK = "network"
    HTTP = "http"
    PAYLOAD = "payload"


@dataclass(frozen=True)
class TransportFailure:
    """Failure details carried by an unsuccessful outcome.

    ``message`` is fit for display; ``body`` is diagnostic text only (the raw
    response body, or the underlying error text for network failures).
    """

    kind: FailureKind
    status: int
    message: str
    body: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a single transport call."""

    status: int
    payload: Optional[T] = None
    failure: Optional[TransportFailure] = None

    def __post_init__(self):
        if self.failure is not None and self.payload is not None:
            raise ValueError("Outcome cannot carry both a payload and a failure")

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, status: int, payload: Optional[T]) -> "Outcome[T]":
        return cls(status=status, payload=payload)

    @classmethod
    def fail(cls, kind: FailureKind, status: int, message: str, body: str) -> "Outcome[T]":
        return cls(
            status=status,
            failure=TransportFailure(kind=kind, status=status, message=message, body=body),
        )
