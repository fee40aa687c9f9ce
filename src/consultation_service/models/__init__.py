"""Models package."""

from .analysis import (
    CaseAnalysis,
    CaseDetails,
    ConsultationAnalysis,
    GroundingSource,
    ParliamentReview,
    ParliamentReviewAnalysis,
    ParliamentStatus,
)
from .consultation import (
    EMPTY_COMMENT_PLACEHOLDER,
    Case,
    CaseDocument,
    CaseSearchResponse,
    Comment,
    CommentAttachment,
    parse_timestamp,
    sort_newest_first,
)
from .responses import (
    CaseListResponse,
    ChatRequest,
    CommentListResponse,
    HealthResponse,
    ImageRequest,
    ImageResponse,
)

__all__ = [
    "EMPTY_COMMENT_PLACEHOLDER",
    "Case",
    "CaseDocument",
    "CaseSearchResponse",
    "Comment",
    "CommentAttachment",
    "parse_timestamp",
    "sort_newest_first",
    "CaseAnalysis",
    "CaseDetails",
    "ConsultationAnalysis",
    "GroundingSource",
    "ParliamentReview",
    "ParliamentReviewAnalysis",
    "ParliamentStatus",
    "CaseListResponse",
    "ChatRequest",
    "CommentListResponse",
    "HealthResponse",
    "ImageRequest",
    "ImageResponse",
]
