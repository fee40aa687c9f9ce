"""Shared fixtures for consultation-service tests."""

import json
from typing import Any, Callable, List, Optional

import httpx
import pytest

from consultation_service.infrastructure.ai import AnalysisError, CaseAnalyst
from consultation_service.infrastructure.http import TransportClient
from consultation_service.infrastructure.upstream import (
    InMemoryCaseRepository,
    UpstreamCaseRepository,
)
from consultation_service.models import (
    Case,
    CaseDetails,
    Comment,
    ConsultationAnalysis,
    GroundingSource,
    ParliamentReview,
    ParliamentReviewAnalysis,
    ParliamentStatus,
)

RELAY = "https://relay.test/?"
BASE_URL = "https://cases.test"
GRAPHQL_URL = "https://graphql.test/api/graphql"


class RecordingHandler:
    """httpx.MockTransport handler that records every request it answers."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def json_bodies(self) -> List[Any]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def make_transport():
    """Factory for a TransportClient answering from a mock handler."""

    def _make(respond: Callable[[httpx.Request], httpx.Response]):
        handler = RecordingHandler(respond)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return TransportClient(BASE_URL, RELAY, http_client=http_client), handler

    return _make


@pytest.fixture
def make_repository(make_transport):
    """Factory for an UpstreamCaseRepository over a mock handler."""

    def _make(respond: Callable[[httpx.Request], httpx.Response]):
        transport, handler = make_transport(respond)
        return UpstreamCaseRepository(transport, GRAPHQL_URL), handler

    return _make


@pytest.fixture
def sample_cases() -> List[Case]:
    return [
        Case(
            id=1,
            case_number="S-1/2024",
            name="Frumvarp til laga um loftslagsmál",
            institution="Umhverfisráðuneytið",
            status_name="Til umsagnar",
            created="2024-01-01T09:00:00",
        ),
        Case(
            id=2,
            case_number="S-2/2024",
            name="Drög að reglugerð um fiskeldi",
            institution="Matvælaráðuneytið",
            status_name="Í vinnslu",
            created="2024-02-01T09:00:00",
        ),
        Case(id=3, name="Mál án dagsetningar", created="óþekkt"),
    ]


@pytest.fixture
def sample_comments() -> List[Comment]:
    return [
        Comment(id=10, case_id=1, contact="Landvernd", comment="Við fögnum frumvarpinu."),
        Comment(id=11, case_id=1, contact="", comment="Of skammur frestur."),
    ]


@pytest.fixture
def in_memory_repository(sample_cases, sample_comments) -> InMemoryCaseRepository:
    return InMemoryCaseRepository(sample_cases, {1: sample_comments})


class FakeAnalyst(CaseAnalyst):
    """Deterministic analyst that records its calls."""

    name = "fake"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[tuple] = []
        self.sessions: dict = {}

    def _check(self):
        if self.fail:
            raise AnalysisError("Gervigreind svaraði ekki.")

    async def summarize_case(self, case, comments) -> CaseDetails:
        self.calls.append(("summarize_case", case.id, len(comments)))
        self._check()
        return CaseDetails(
            summary=f"Samantekt: {case.name}",
            key_points=["Markmið málsins"],
            questions_for_minister=["Hvernig verður þetta fjármagnað?"],
            consultation_analysis=ConsultationAnalysis(
                summary=f"{len(comments)} umsagnir bárust.",
                reviewers=[c.contact for c in comments if c.contact],
                main_points=["Frestur of skammur"],
            ),
            policy_analysis="Í samræmi við stjórnarsáttmála.",
            speech_draft="Virðulegi forseti.",
        )

    async def lookup_parliament_status(self, title) -> ParliamentStatus:
        self.calls.append(("lookup_parliament_status", title))
        self._check()
        return ParliamentStatus(
            description="Málið er í nefnd.",
            sources=[GroundingSource(uri="https://www.althingi.is/mal/1", title="Þingmál 1")],
        )

    async def analyze_parliament_reviews(self, title) -> ParliamentReviewAnalysis:
        self.calls.append(("analyze_parliament_reviews", title))
        self._check()
        return ParliamentReviewAnalysis(
            analysis_summary="Ein umsögn barst.",
            reviews=[ParliamentReview(reviewer="ASÍ", stance="Jákvæð", summary="Styður málið.")],
        )

    async def generate_image(self, prompt) -> str:
        self.calls.append(("generate_image", prompt))
        self._check()
        return "data:image/jpeg;base64,YWJj"

    async def stream_chat(self, session_id, message):
        self.calls.append(("stream_chat", session_id, message))
        self._check()
        self.sessions.setdefault(session_id, []).append(message)
        for chunk in ["Halló", ", ", "heimur"]:
            yield chunk

    def reset_chat(self, session_id) -> bool:
        return self.sessions.pop(session_id, None) is not None


@pytest.fixture
def fake_analyst() -> FakeAnalyst:
    return FakeAnalyst()


@pytest.fixture
def failing_analyst() -> FakeAnalyst:
    return FakeAnalyst(fail=True)


def _json_response(payload: Optional[Any], status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def json_response():
    """JSON response builder; a payload of None encodes as literal null."""
    return _json_response
