"""Case business logic manager - Repository Pattern."""

import asyncio
import logging
from typing import List, Optional

from consultation_service.infrastructure.ai import CaseAnalyst
from consultation_service.infrastructure.upstream import CaseRepository
from consultation_service.models import (
    Case,
    CaseAnalysis,
    Comment,
    ParliamentReviewAnalysis,
    sort_newest_first,
)

logger = logging.getLogger(__name__)

PUBLIC_CASE_URL = "https://island.is/samradsgatt/mal/{case_id}"

ANALYSIS_UNAVAILABLE = "Gervigreindargreining er ekki virk í þessari uppsetningu."


class AnalysisUnavailableError(Exception):
    """Raised when an analysis is requested but no analyst is configured."""

    def __init__(self, message: str = ANALYSIS_UNAVAILABLE):
        super().__init__(message)
        self.message = message


class CaseManager:
    """Business logic for consultation case operations.

    This class implements the service layer using the Repository pattern.
    It composes the case repository with the AI analyst; repository and
    analyst errors propagate unchanged.
    """

    def __init__(self, repository: CaseRepository, analyst: Optional[CaseAnalyst] = None):
        """Initialize case manager.

        Args:
            repository: CaseRepository implementation (Upstream or InMemory)
            analyst: Optional AI collaborator; analysis calls need one
        """
        self.repository = repository
        self.analyst = analyst

    async def list_cases(self, search_term: Optional[str] = None) -> List[Case]:
        """List cases newest first, optionally filtered by title.

        Args:
            search_term: Case-insensitive substring matched against the case name

        Returns:
            Filtered and ordered cases
        """
        cases = await self.repository.search_cases()

        if search_term and search_term.strip():
            term = search_term.strip().lower()
            cases = [c for c in cases if term in c.name.lower()]

        return sort_newest_first(cases)

    async def get_case(self, case_id: str) -> Case:
        """Get a case by ID."""
        return await self.repository.fetch_case_by_id(case_id)

    async def get_comments(self, case_id: str) -> List[Comment]:
        """Get the comments on a case (fetched fresh on every call)."""
        return await self.repository.fetch_case_comments(case_id)

    async def analyze_case(self, case_id: str) -> CaseAnalysis:
        """Run the full analysis of a case.

        The comments are fetched first since the summary is built from them;
        the summary and the parliamentary status lookup then run concurrently
        and may complete in either order.

        Args:
            case_id: Case identifier

        Returns:
            Combined analysis
        """
        analyst = self._require_analyst()

        case = await self.repository.fetch_case_by_id(case_id)
        comments = await self.repository.fetch_case_comments(case_id)

        logger.info(f"Analyzing case {case.id} with {len(comments)} comments")

        details, status = await asyncio.gather(
            analyst.summarize_case(case, comments),
            analyst.lookup_parliament_status(case.name),
        )

        return CaseAnalysis(
            case=case,
            comment_count=len(comments),
            details=details,
            parliament_status=status,
        )

    async def analyze_parliament_reviews(self, case_id: str) -> ParliamentReviewAnalysis:
        """Analyze the submissions parliament received on a case."""
        analyst = self._require_analyst()
        case = await self.repository.fetch_case_by_id(case_id)
        return await analyst.analyze_parliament_reviews(case.name)

    def build_report(self, analysis: CaseAnalysis) -> str:
        """Render an analysis as a plain-text report for copying."""
        case = analysis.case
        details = analysis.details
        lines = [
            f"Mál: {case.name}",
            f"Málsnúmer: {case.case_number}",
            f"Ábyrgðaraðili: {case.institution}",
            f"Tengill: {PUBLIC_CASE_URL.format(case_id=case.id)}",
            "",
            "=" * 40,
            "",
        ]

        lines += _section("SAMANTEKT", [details.summary])
        lines += _section("HELSTU ATRIÐI", _bullets(details.key_points))

        consultation = details.consultation_analysis
        body = [consultation.summary]
        if consultation.reviewers:
            body += ["", "Umsagnaraðilar:"] + _bullets(consultation.reviewers)
        if consultation.main_points:
            body += ["", "Helstu punktar úr umsögnum:"] + _bullets(consultation.main_points)
        lines += _section("GREINING Á UMSÖGNUM", body)

        lines += _section(
            "KREFJANDI SPURNINGAR TIL RÁÐHERRA", _bullets(details.questions_for_minister)
        )
        lines += _section("GREINING M.T.T. STEFNU STJÓRNVALDA", [details.policy_analysis])
        lines += _section("DRÖG AÐ RÆÐU", [details.speech_draft])

        status = analysis.parliament_status
        body = [status.description]
        if status.sources:
            body += ["", "Heimildir:"] + _bullets(f"{s.title} ({s.uri})" for s in status.sources)
        lines += _section("STAÐA Á ALÞINGI", body)

        return "\n".join(lines).rstrip() + "\n"

    def _require_analyst(self) -> CaseAnalyst:
        if self.analyst is None:
            raise AnalysisUnavailableError()
        return self.analyst


def _section(title: str, body: List[str]) -> List[str]:
    return [title, "-" * 20] + list(body) + [""]


def _bullets(items) -> List[str]:
    return [f"- {item}" for item in items]
