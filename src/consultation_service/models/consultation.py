"""Consultation portal data models.

Cases, their attached documents and the stakeholder comments submitted on
them, shaped after the upstream JSON (camelCase on the wire, snake_case in
Python). Upstream responses are often partial, so string fields accept
``null`` and normalize it to an empty string.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Shown in place of a comment body the upstream left empty
EMPTY_COMMENT_PLACEHOLDER = "Engin athugasemd fylgdi."


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp, returning None when unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def file_type_from_name(name: str) -> Optional[str]:
    """Best-effort file type from a file name's suffix."""
    if "." not in name:
        return None
    suffix = name.rsplit(".", 1)[1].strip()
    return suffix.lower() or None


class PortalModel(BaseModel):
    """Base for models read from the consultation portal."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CaseDocument(PortalModel):
    """Document attached to a case."""

    id: str = ""
    name: str = ""
    file_url: str = ""
    file_type: str = ""

    @field_validator("id", "name", "file_url", "file_type", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def display_name(self) -> str:
        """Name without a redundant trailing file-type suffix."""
        if self.file_type:
            suffix = f".{self.file_type.lstrip('.')}"
            if self.name.lower().endswith(suffix.lower()):
                return self.name[: -len(suffix)]
        return self.name


class Case(PortalModel):
    """One consultation matter as published by the portal."""

    id: int
    case_number: str = ""
    name: str = ""
    institution: str = ""
    status_name: str = ""
    description: str = ""
    comment_deadline: str = ""
    created: str = ""
    documents: List[CaseDocument] = Field(default_factory=list)
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None

    @field_validator(
        "case_number",
        "name",
        "institution",
        "status_name",
        "description",
        "comment_deadline",
        "created",
        mode="before",
    )
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("documents", mode="before")
    @classmethod
    def _normalize_documents(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_timestamp(self.created)


class CommentAttachment(PortalModel):
    """File attached to a comment."""

    id: str
    name: str
    file_type: Optional[str] = None


class Comment(PortalModel):
    """Stakeholder submission on a case."""

    id: int
    case_id: int
    contact: str = ""
    comment: str = EMPTY_COMMENT_PLACEHOLDER
    created: str = ""
    attachments: List[CommentAttachment] = Field(default_factory=list)

    @classmethod
    def from_advice(cls, advice: Dict[str, Any], case_id: int) -> "Comment":
        """Map a raw GraphQL advice record onto a Comment.

        The advices query does not select files, so attachments are only
        mapped when a record happens to carry ``adviceFiles``.
        """
        files = advice.get("adviceFiles") or []
        attachments = [
            CommentAttachment(
                id=str(f.get("id", "")),
                name=f.get("name") or "",
                file_type=file_type_from_name(f.get("name") or ""),
            )
            for f in files
        ]

        return cls(
            id=advice["id"],
            case_id=case_id,
            contact=advice.get("participantName") or "",
            comment=advice.get("content") or EMPTY_COMMENT_PLACEHOLDER,
            created=advice.get("created") or "",
            attachments=attachments,
        )


class CaseSearchResponse(PortalModel):
    """Payload of the bulk case listing endpoint."""

    cases: Optional[List[Case]] = None
    total: int = 0

    @field_validator("total", mode="before")
    @classmethod
    def _normalize_total(cls, value: Any) -> Any:
        return 0 if value is None else value


def sort_newest_first(cases: Iterable[Case]) -> List[Case]:
    """Order cases by creation time, newest first.

    Cases whose timestamp cannot be parsed go last, in their original order.
    """
    cases = list(cases)
    dated = [c for c in cases if c.created_at is not None]
    undated = [c for c in cases if c.created_at is None]
    dated.sort(key=_timestamp_key, reverse=True)
    return dated + undated


def _timestamp_key(case: Case) -> float:
    created_at = case.created_at
    if created_at.tzinfo is None:
        # Naive upstream dates are read as UTC
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.timestamp()
