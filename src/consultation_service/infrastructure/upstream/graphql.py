"""GraphQL documents and envelope for the consultation portal comments API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

CASE_FIELD = "consultationPortalCaseById"

CASE_EXISTS_OPERATION = "ConsultationPortalCaseExists"

CASE_EXISTS_QUERY = """
query ConsultationPortalCaseExists($input: ConsultationPortalCaseInput!) {
  consultationPortalCaseById(input: $input) {
    id
  }
}
"""

CASE_COMMENTS_OPERATION = "ConsultationPortalCaseById"

# adviceFiles is not selected: the field has been rejected by the upstream
# schema for this query shape, so comments come back without attachments.
CASE_COMMENTS_QUERY = """
query ConsultationPortalCaseById($input: ConsultationPortalCaseInput!) {
  consultationPortalCaseById(input: $input) {
    caseAdvices {
      id
      participantName
      content
      created
    }
  }
}
"""


def case_request(operation_name: str, query: str, case_id: int) -> Dict[str, Any]:
    """Build the request body for a case-scoped operation."""
    return {
        "operationName": operation_name,
        "variables": {"input": {"caseId": case_id}},
        "query": query,
    }


class GraphQLError(BaseModel):
    """One entry of a GraphQL ``errors`` array."""

    message: Optional[str] = ""
    extensions: Optional[Dict[str, Any]] = None

    @property
    def code(self) -> Optional[str]:
        return (self.extensions or {}).get("code")


class GraphQLEnvelope(BaseModel):
    """GraphQL response envelope.

    A 200 response can still be a rejection: ``errors`` set with ``data``
    absent means the operation failed, and ``errors`` set with the requested
    field null means its resolver failed.
    """

    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[GraphQLError]] = None

    @property
    def rejected(self) -> bool:
        return bool(self.errors) and self.data is None

    def field_failed(self, name: str) -> bool:
        return bool(self.errors) and self.field(name) is None

    def describe_errors(self) -> str:
        return "; ".join(
            f"{e.message} ({e.code})" if e.code else str(e.message) for e in self.errors or []
        )

    def field(self, name: str) -> Any:
        """Top-level field of ``data``, or None."""
        return (self.data or {}).get(name)
