"""Generative AI collaborator package."""

from .analyst import (
    AnalysisError,
    CaseAnalyst,
    GeminiCaseAnalyst,
    extract_json_object,
    grounding_sources,
)

__all__ = [
    "AnalysisError",
    "CaseAnalyst",
    "GeminiCaseAnalyst",
    "extract_json_object",
    "grounding_sources",
]
