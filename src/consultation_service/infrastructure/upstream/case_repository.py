"""Case Repository for consultation portal data.

This module provides the repository pattern over the consultation portal's
REST case API and its GraphQL comments API. Repositories are the single
layer that turns transport failures into raised, displayable domain errors;
"legitimately empty" results are always returned, never raised.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from pydantic import ValidationError

from consultation_service.infrastructure.http import Outcome, TransportClient
from consultation_service.models import Case, CaseSearchResponse, Comment

from .errors import (
    CaseFetchError,
    CaseListError,
    CaseNotFoundError,
    CommentsFetchError,
    InvalidCaseIdError,
)
from .graphql import (
    CASE_COMMENTS_OPERATION,
    CASE_COMMENTS_QUERY,
    CASE_EXISTS_OPERATION,
    CASE_EXISTS_QUERY,
    CASE_FIELD,
    GraphQLEnvelope,
    case_request,
)

logger = logging.getLogger(__name__)

CASE_LIST_ERROR = "Gat ekki sótt málalista."
CASE_FETCH_ERROR = "Gat ekki sótt mál með ID: {case_id}."
CASE_NOT_FOUND_ERROR = "Ekkert mál fannst með ID: {case_id}."
COMMENTS_FETCH_ERROR = "Gat ekki sótt umsagnir fyrir mál."
MISSING_CASE_ID_ERROR = "Auðkenni máls vantar."
NON_NUMERIC_CASE_ID_ERROR = "Auðkenni máls verður að vera tala: {case_id}."


def require_case_id(case_id: Optional[str]) -> str:
    """Return the stripped case id, raising when it is blank."""
    if case_id is None or not str(case_id).strip():
        raise InvalidCaseIdError(MISSING_CASE_ID_ERROR)
    return str(case_id).strip()


def require_numeric_case_id(case_id: Optional[str]) -> int:
    """Return the case id as an int, raising when it is not numeric."""
    text = require_case_id(case_id)
    try:
        return int(text)
    except ValueError:
        raise InvalidCaseIdError(NON_NUMERIC_CASE_ID_ERROR.format(case_id=text)) from None


# ============================================================
# Repository Interface
# ============================================================

class CaseRepository(ABC):
    """
    Abstract repository interface for consultation cases.

    Implementations:
    - UpstreamCaseRepository: Consultation portal REST + GraphQL APIs
    - InMemoryCaseRepository: Testing and development
    """

    @abstractmethod
    async def search_cases(self) -> List[Case]:
        """
        Fetch the full working set of cases.

        Returns:
            List of cases (empty when the portal reports none)

        Raises:
            CaseListError: If the listing cannot be fetched
        """
        pass

    @abstractmethod
    async def fetch_case_by_id(self, case_id: str) -> Case:
        """
        Fetch a single case.

        Args:
            case_id: Case identifier

        Returns:
            The case; absence is always raised, never returned

        Raises:
            InvalidCaseIdError: If case_id is blank (no network call is made)
            CaseNotFoundError: If no case has this id
            CaseFetchError: If the case cannot be fetched
        """
        pass

    @abstractmethod
    async def fetch_case_comments(self, case_id: str) -> List[Comment]:
        """
        Fetch the stakeholder comments submitted on a case.

        A case without submissions and a case that does not exist both yield
        an empty list.

        Args:
            case_id: Numeric case identifier

        Returns:
            List of comments in upstream order

        Raises:
            InvalidCaseIdError: If case_id is not numeric (no network call is made)
            CommentsFetchError: If the comments cannot be fetched
        """
        pass


# ============================================================
# Upstream Implementation (Production)
# ============================================================

class UpstreamCaseRepository(CaseRepository):
    """
    Case repository backed by the consultation portal.

    Cases come from the REST API at the transport's base URL; comments come
    from the GraphQL API on a different host, through an existence probe
    followed by the comments query.
    """

    def __init__(
        self,
        transport: TransportClient,
        graphql_url: str,
        page_size: int = 1500,
        order_by: str = "LastUpdated",
    ):
        """
        Initialize repository with a transport client.

        Args:
            transport: Transport client routed through the CORS relay
            graphql_url: Full URL of the GraphQL endpoint
            page_size: Bulk listing size, large enough for the whole working set
            order_by: Upstream ordering for the listing
        """
        self.transport = transport
        self.graphql_url = graphql_url
        self.page_size = page_size
        self.order_by = order_by

    async def search_cases(self) -> List[Case]:
        """Fetch all cases in one bulk request."""
        params = {"pageSize": self.page_size, "orderBy": self.order_by}
        outcome = await self.transport.get("/api/cases", params, response_model=CaseSearchResponse)

        if not outcome.ok:
            logger.error(f"Case listing failed: {outcome.failure.message}")
            raise CaseListError(CASE_LIST_ERROR)

        if outcome.payload is None or outcome.payload.cases is None:
            logger.info("Case listing returned no cases")
            return []

        logger.info(f"Fetched {len(outcome.payload.cases)} cases (total {outcome.payload.total})")
        return outcome.payload.cases

    async def fetch_case_by_id(self, case_id: str) -> Case:
        """Fetch a single case by ID."""
        case_id = require_case_id(case_id)

        outcome = await self.transport.get(
            f"/api/cases/{quote(case_id, safe='')}", response_model=Case
        )

        if not outcome.ok:
            if outcome.status == 404:
                raise CaseNotFoundError(CASE_NOT_FOUND_ERROR.format(case_id=case_id))
            logger.error(f"Fetching case {case_id} failed: {outcome.failure.message}")
            raise CaseFetchError(CASE_FETCH_ERROR.format(case_id=case_id))

        if outcome.payload is None:
            raise CaseNotFoundError(CASE_NOT_FOUND_ERROR.format(case_id=case_id))

        return outcome.payload

    async def fetch_case_comments(self, case_id: str) -> List[Comment]:
        """Fetch comments for a case through the GraphQL API."""
        numeric_id = require_numeric_case_id(case_id)

        exists = await self._query(CASE_EXISTS_OPERATION, CASE_EXISTS_QUERY, numeric_id)
        if exists.field(CASE_FIELD) is None:
            logger.info(f"Case {numeric_id} not found upstream, reporting no comments")
            return []

        result = await self._query(CASE_COMMENTS_OPERATION, CASE_COMMENTS_QUERY, numeric_id)
        case_data = result.field(CASE_FIELD) or {}
        try:
            advices = case_data.get("caseAdvices")
            if not advices:
                return []
            comments = [
                Comment.from_advice(advice, numeric_id) for advice in advices if advice is not None
            ]
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.error(f"Malformed comments for case {numeric_id}: {e}")
            raise CommentsFetchError(COMMENTS_FETCH_ERROR) from e

        logger.info(f"Fetched {len(comments)} comments for case {numeric_id}")
        return comments

    async def _query(self, operation_name: str, query: str, case_id: int) -> GraphQLEnvelope:
        """Run a case-scoped GraphQL operation, raising on any failure."""
        body = case_request(operation_name, query, case_id)
        outcome: Outcome = await self.transport.post(
            self.graphql_url, body, response_model=GraphQLEnvelope
        )

        if not outcome.ok:
            logger.error(
                f"{operation_name} failed for case {case_id}: {outcome.failure.message}"
            )
            raise CommentsFetchError(COMMENTS_FETCH_ERROR)

        envelope = outcome.payload or GraphQLEnvelope()
        if envelope.rejected or envelope.field_failed(CASE_FIELD):
            logger.error(
                f"{operation_name} rejected for case {case_id}: {envelope.describe_errors()}"
            )
            raise CommentsFetchError(COMMENTS_FETCH_ERROR)

        if envelope.errors:
            logger.warning(
                f"{operation_name} returned partial data for case {case_id}: "
                f"{envelope.describe_errors()}"
            )

        return envelope


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryCaseRepository(CaseRepository):
    """
    In-memory case repository for testing and development.

    Data stored in dictionaries, not persistent across restarts. Validation
    and empty-result rules match UpstreamCaseRepository.
    """

    def __init__(
        self,
        cases: Optional[Iterable[Case]] = None,
        comments: Optional[Dict[int, List[Comment]]] = None,
    ):
        """Initialize store, optionally seeded with cases and comments."""
        self._cases: Dict[int, Case] = {}
        self._comments: Dict[int, List[Comment]] = {}

        for case in cases or []:
            self.add_case(case)
        for case_id, case_comments in (comments or {}).items():
            self.add_comments(case_id, case_comments)

    def add_case(self, case: Case) -> Case:
        """Store a case."""
        self._cases[case.id] = case
        return case

    def add_comments(self, case_id: int, comments: List[Comment]):
        """Append comments to a case."""
        self._comments.setdefault(case_id, []).extend(comments)

    async def search_cases(self) -> List[Case]:
        """List cases from memory."""
        return list(self._cases.values())

    async def fetch_case_by_id(self, case_id: str) -> Case:
        """Get case from memory."""
        case_id = require_case_id(case_id)
        try:
            case = self._cases.get(int(case_id))
        except ValueError:
            case = None

        if case is None:
            raise CaseNotFoundError(CASE_NOT_FOUND_ERROR.format(case_id=case_id))

        return case

    async def fetch_case_comments(self, case_id: str) -> List[Comment]:
        """Get comments from memory."""
        numeric_id = require_numeric_case_id(case_id)
        if numeric_id not in self._cases:
            return []
        return list(self._comments.get(numeric_id, []))

    def clear(self):
        """Clear all cases and comments (testing utility)."""
        self._cases.clear()
        self._comments.clear()
