"""API request and response models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .consultation import Case, Comment, PortalModel


class CaseListResponse(PortalModel):
    """Response containing the case listing."""

    cases: List[Case]
    total: int


class CommentListResponse(PortalModel):
    """Response containing the comments submitted on a case."""

    case_id: int
    comments: List[Comment]
    total: int


class ChatRequest(PortalModel):
    """Message sent to the assistant."""

    session_id: str = Field(min_length=1, max_length=128)
    message: str = Field(min_length=1)


class ImageRequest(PortalModel):
    """Prompt for the image generator."""

    prompt: str = Field(min_length=1, max_length=2000)


class ImageResponse(PortalModel):
    """Generated image as a data URL."""

    data_url: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    upstream: str
    analyst: Optional[str] = None
