"""AI analysis result models."""

from typing import List

from pydantic import Field

from .consultation import Case, PortalModel


class ConsultationAnalysis(PortalModel):
    """Synthesis of the stakeholder comments submitted on a case."""

    summary: str
    reviewers: List[str] = Field(default_factory=list)
    main_points: List[str] = Field(default_factory=list)


class CaseDetails(PortalModel):
    """Structured analysis of a single case."""

    summary: str
    key_points: List[str] = Field(default_factory=list)
    questions_for_minister: List[str] = Field(default_factory=list)
    consultation_analysis: ConsultationAnalysis
    policy_analysis: str
    speech_draft: str


class GroundingSource(PortalModel):
    """Web page a grounded answer was based on."""

    uri: str
    title: str


class ParliamentStatus(PortalModel):
    """Status of a case in parliamentary records, from a grounded search."""

    description: str
    sources: List[GroundingSource] = Field(default_factory=list)


class ParliamentReview(PortalModel):
    """One submission received by a parliamentary committee."""

    reviewer: str
    # "Jákvæð", "Neikvæð" or "Hlutlaus", kept as free text
    stance: str
    summary: str


class ParliamentReviewAnalysis(PortalModel):
    """Analysis of the submissions a parliamentary committee received."""

    analysis_summary: str
    reviews: List[ParliamentReview] = Field(default_factory=list)
    sources: List[GroundingSource] = Field(default_factory=list)


class CaseAnalysis(PortalModel):
    """Result of the combined case analysis workflow."""

    case: Case
    comment_count: int
    details: CaseDetails
    parliament_status: ParliamentStatus
