"""Domain errors raised by case repositories.

``message`` is already localized and meant for direct display; diagnostic
detail stays in the logs.
"""


class CaseServiceError(Exception):
    """Base exception for case repository failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCaseIdError(CaseServiceError, ValueError):
    """Raised before any network call when a case id is unusable."""
    pass


class CaseListError(CaseServiceError):
    """Raised when the case listing cannot be fetched."""
    pass


class CaseFetchError(CaseServiceError):
    """Raised when a single case cannot be fetched."""
    pass


class CaseNotFoundError(CaseServiceError):
    """Raised when the upstream has no case with the requested id."""
    pass


class CommentsFetchError(CaseServiceError):
    """Raised when the comments of a case cannot be fetched."""
    pass
