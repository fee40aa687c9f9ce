"""Consultation portal access layer - Repository Pattern implementation."""

from consultation_service.infrastructure.upstream.case_repository import (
    CaseRepository,
    InMemoryCaseRepository,
    UpstreamCaseRepository,
)
from consultation_service.infrastructure.upstream.errors import (
    CaseFetchError,
    CaseListError,
    CaseNotFoundError,
    CaseServiceError,
    CommentsFetchError,
    InvalidCaseIdError,
)

__all__ = [
    "CaseRepository",
    "InMemoryCaseRepository",
    "UpstreamCaseRepository",
    "CaseServiceError",
    "InvalidCaseIdError",
    "CaseListError",
    "CaseFetchError",
    "CaseNotFoundError",
    "CommentsFetchError",
]
