"""Case API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from consultation_service.config import settings
from consultation_service.core import AnalysisUnavailableError, CaseManager
from consultation_service.infrastructure.ai import AnalysisError, CaseAnalyst
from consultation_service.infrastructure.upstream import (
    CaseNotFoundError,
    CaseRepository,
    CaseServiceError,
    InvalidCaseIdError,
    UpstreamCaseRepository,
)
from consultation_service.models import (
    Case,
    CaseAnalysis,
    CaseListResponse,
    CommentListResponse,
    ParliamentReviewAnalysis,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cases", tags=["cases"])

ANALYSIS_FAILED = "Gat ekki búið til ítarlega greiningu fyrir valið mál."


async def get_case_repository(request: Request) -> CaseRepository:
    """Dependency to get the case repository.

    Built per request around the transport client owned by the application
    (created at startup, closed at shutdown).
    """
    return UpstreamCaseRepository(
        request.app.state.transport,
        settings.graphql_url,
        page_size=settings.case_page_size,
        order_by=settings.case_order_by,
    )


async def get_analyst(request: Request) -> Optional[CaseAnalyst]:
    """Dependency to get the AI analyst (None when not configured)."""
    return getattr(request.app.state, "analyst", None)


async def get_case_manager(
    repository: CaseRepository = Depends(get_case_repository),
    analyst: Optional[CaseAnalyst] = Depends(get_analyst),
) -> CaseManager:
    """Dependency to get case manager with repository and analyst."""
    return CaseManager(repository, analyst)


def domain_http_error(error: Exception) -> HTTPException:
    """Translate a domain error into an HTTPException carrying its message."""
    if isinstance(error, InvalidCaseIdError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, CaseNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, AnalysisUnavailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY

    return HTTPException(status_code=code, detail=getattr(error, "message", str(error)))


DOMAIN_ERRORS = (CaseServiceError, AnalysisError, AnalysisUnavailableError)


@router.get(
    "",
    response_model=CaseListResponse,
    summary="List consultation cases",
    description="""
Returns the full working set of consultation cases, newest first.

**Workflow**:
1. Fetches all cases from the portal in one bulk request
2. Filters by title when `q` is given (case-insensitive substring)
3. Orders by creation time, newest first; unparseable dates go last

**Request Example**:
```
GET /api/v1/cases?q=lög
```

**Storage**: None (fetched from the consultation portal on every call)
    """,
    responses={
        200: {"description": "Cases returned (possibly empty)"},
        502: {"description": "Case list could not be fetched from the portal"},
    },
)
async def list_cases(
    q: Optional[str] = Query(None, max_length=200, description="Filter by case title"),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List cases."""
    try:
        cases = await case_manager.list_cases(q)
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e

    return CaseListResponse(cases=cases, total=len(cases))


@router.get(
    "/{case_id}",
    response_model=Case,
    summary="Get case by ID",
    responses={
        200: {"description": "Case found and returned successfully"},
        400: {"description": "Invalid case ID"},
        404: {"description": "Case not found"},
        502: {"description": "Case could not be fetched from the portal"},
    },
)
async def get_case(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get a case by ID."""
    try:
        return await case_manager.get_case(case_id)
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e


@router.get(
    "/{case_id}/comments",
    response_model=CommentListResponse,
    summary="Get case comments",
    description="""
Returns the stakeholder comments submitted on a case.

A case without submissions and a case unknown to the portal both return an
empty list. Comments are fetched fresh on every call.

**Response Example**:
```json
{
  "caseId": 42,
  "comments": [
    {
      "id": 7,
      "caseId": 42,
      "contact": "Samtök atvinnulífsins",
      "comment": "Við styðjum markmið frumvarpsins...",
      "created": "2024-03-01T10:00:00",
      "attachments": []
    }
  ],
  "total": 1
}
```
    """,
    responses={
        200: {"description": "Comments returned (possibly empty)"},
        400: {"description": "Case ID is not numeric"},
        502: {"description": "Comments could not be fetched from the portal"},
    },
)
async def get_case_comments(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get the comments on a case."""
    try:
        comments = await case_manager.get_comments(case_id)
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e

    return CommentListResponse(case_id=int(case_id), comments=comments, total=len(comments))


@router.post(
    "/{case_id}/analysis",
    response_model=CaseAnalysis,
    summary="Analyze a case",
    description="""
Runs the AI analysis of a case.

**Workflow**:
1. Fetches the case and its comments from the portal
2. Concurrently summarizes the case (using the comments) and looks up its
   status in parliamentary records
3. Returns both results together

**Rate Limits**: Bound by the Gemini API quota
    """,
    responses={
        200: {"description": "Analysis completed"},
        400: {"description": "Invalid case ID"},
        404: {"description": "Case not found"},
        502: {"description": "Portal or AI service failed"},
        503: {"description": "AI analysis is not configured"},
    },
)
async def analyze_case(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Analyze a case."""
    try:
        return await case_manager.analyze_case(case_id)
    except AnalysisError as e:
        logger.error(f"Analysis of case {case_id} failed: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=ANALYSIS_FAILED) from e
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e


@router.get(
    "/{case_id}/analysis/report",
    response_class=PlainTextResponse,
    summary="Get a plain-text analysis report",
    responses={
        200: {"description": "Report rendered"},
        404: {"description": "Case not found"},
        502: {"description": "Portal or AI service failed"},
        503: {"description": "AI analysis is not configured"},
    },
)
async def get_analysis_report(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Run the analysis and render it as text for copying."""
    try:
        analysis = await case_manager.analyze_case(case_id)
    except AnalysisError as e:
        logger.error(f"Analysis of case {case_id} failed: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=ANALYSIS_FAILED) from e
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e

    return PlainTextResponse(case_manager.build_report(analysis))


@router.post(
    "/{case_id}/parliament-reviews",
    response_model=ParliamentReviewAnalysis,
    summary="Analyze parliamentary submissions on a case",
    responses={
        200: {"description": "Analysis completed"},
        404: {"description": "Case not found"},
        502: {"description": "Portal or AI service failed"},
        503: {"description": "AI analysis is not configured"},
    },
)
async def analyze_parliament_reviews(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Analyze the submissions parliament received on a case."""
    try:
        return await case_manager.analyze_parliament_reviews(case_id)
    except DOMAIN_ERRORS as e:
        raise domain_http_error(e) from e
