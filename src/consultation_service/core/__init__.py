"""Core business logic package."""

from .case_manager import AnalysisUnavailableError, CaseManager

__all__ = ["CaseManager", "AnalysisUnavailableError"]
