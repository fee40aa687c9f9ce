"""Unit tests for the relay transport client.

Every outcome (2xx, non-2xx, network failure, malformed payload) must come
back as an Outcome; nothing is raised to the caller.
"""

from urllib.parse import unquote

import httpx
import pytest

from consultation_service.infrastructure.http import (
    HTTP_ERROR_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    NETWORK_FAILURE_STATUS,
    PAYLOAD_ERROR_MESSAGE,
    FailureKind,
    Outcome,
    TransportFailure,
)
from consultation_service.models import CaseSearchResponse

RELAY = "https://relay.test/?"
BASE_URL = "https://cases.test"
GRAPHQL_URL = "https://graphql.test/api/graphql"


@pytest.mark.unit
class TestBuildUrl:
    """Relayed URL construction"""

    def test_relay_prefixes_target(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        assert transport.build_url("/api/cases") == f"{RELAY}{BASE_URL}/api/cases"

    def test_params_appended_in_order(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        url = transport.build_url("/api/cases", {"pageSize": 1500, "orderBy": "LastUpdated"})
        assert url == f"{RELAY}{BASE_URL}/api/cases?pageSize=1500&orderBy=LastUpdated"

    def test_values_encoded_exactly_once(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        url = transport.build_url("/api/cases", {"q": "a b&c=d", "rate": "50%", "name": "lög"})
        assert url.endswith("?q=a+b%26c%3Dd&rate=50%25&name=l%C3%B6g")
        assert "%25" in url and "%2525" not in url

    def test_no_query_string_for_empty_params(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        assert "?" not in transport.build_url("/api/cases", {})[len(RELAY):]

    def test_path_without_leading_slash(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        assert transport.build_url("api/cases/7") == f"{RELAY}{BASE_URL}/api/cases/7"


@pytest.mark.unit
class TestGet:
    """GET outcome mapping"""

    async def test_success_returns_status_and_payload(self, make_transport, json_response):
        transport, handler = make_transport(lambda r: json_response({"cases": [], "total": 0}))

        outcome = await transport.get("/api/cases", {"pageSize": 10})

        assert outcome.ok
        assert outcome.status == 200
        assert outcome.payload == {"cases": [], "total": 0}
        assert outcome.failure is None
        assert handler.requests[0].method == "GET"
        assert handler.requests[0].url.host == "relay.test"

    async def test_success_validates_into_model(self, make_transport, json_response):
        body = {"cases": [{"id": 1, "name": "A", "created": "2024-01-01"}], "total": 1}
        transport, _ = make_transport(lambda r: json_response(body))

        outcome = await transport.get("/api/cases", response_model=CaseSearchResponse)

        assert outcome.ok
        assert isinstance(outcome.payload, CaseSearchResponse)
        assert outcome.payload.cases[0].name == "A"

    async def test_sends_no_cache_headers(self, make_transport, json_response):
        transport, handler = make_transport(lambda r: json_response({}))

        await transport.get("/api/cases")

        headers = handler.requests[0].headers
        assert headers["accept"] == "application/json"
        assert headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert headers["pragma"] == "no-cache"
        assert headers["expires"] == "0"

    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    async def test_http_failure_keeps_status_and_raw_body(self, make_transport, status_code):
        transport, _ = make_transport(lambda r: httpx.Response(status_code, text="<html>nope</html>"))

        outcome = await transport.get("/api/cases")

        assert not outcome.ok
        assert outcome.status == status_code
        assert outcome.payload is None
        assert outcome.failure.kind == FailureKind.HTTP
        assert outcome.failure.status == status_code
        assert outcome.failure.body == "<html>nope</html>"
        assert outcome.failure.message == HTTP_ERROR_MESSAGE.format(status=status_code)

    async def test_http_failure_body_is_not_parsed(self, make_transport, json_response):
        transport, _ = make_transport(lambda r: json_response({"cases": []}, status_code=500))

        outcome = await transport.get("/api/cases", response_model=CaseSearchResponse)

        assert outcome.payload is None
        assert outcome.failure.body == '{"cases": []}'

    async def test_network_failure_uses_sentinel_status(self, make_transport):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        transport, _ = make_transport(refuse)

        outcome = await transport.get("/api/cases")

        assert not outcome.ok
        assert outcome.status == NETWORK_FAILURE_STATUS == 0
        assert outcome.failure.kind == FailureKind.NETWORK
        assert outcome.failure.message == NETWORK_ERROR_MESSAGE
        assert outcome.failure.message != HTTP_ERROR_MESSAGE.format(status=0)
        assert "Connection refused" in outcome.failure.body

    async def test_timeout_is_a_network_failure(self, make_transport):
        def time_out(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport, _ = make_transport(time_out)

        outcome = await transport.get("/api/cases")

        assert outcome.status == 0
        assert outcome.failure.kind == FailureKind.NETWORK

    async def test_unbuildable_url_is_a_network_failure(self, make_transport, json_response):
        transport, handler = make_transport(lambda r: json_response({}))

        outcome = await transport.get("/api/cases/1\x01")

        assert not outcome.ok
        assert outcome.status == NETWORK_FAILURE_STATUS
        assert outcome.failure.kind == FailureKind.NETWORK
        assert handler.requests == []

    async def test_invalid_json_is_a_payload_failure(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200, text="<html>relay error</html>"))

        outcome = await transport.get("/api/cases")

        assert not outcome.ok
        assert outcome.status == 200
        assert outcome.failure.kind == FailureKind.PAYLOAD
        assert outcome.failure.message == PAYLOAD_ERROR_MESSAGE
        assert outcome.failure.body == "<html>relay error</html>"

    async def test_empty_body_is_a_payload_failure(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200, content=b""))

        outcome = await transport.get("/api/cases")

        assert outcome.failure.kind == FailureKind.PAYLOAD

    async def test_shape_mismatch_is_a_payload_failure(self, make_transport, json_response):
        transport, _ = make_transport(lambda r: json_response({"cases": "not a list"}))

        outcome = await transport.get("/api/cases", response_model=CaseSearchResponse)

        assert outcome.failure.kind == FailureKind.PAYLOAD
        assert outcome.payload is None

    async def test_null_body_is_success_without_payload(self, make_transport, json_response):
        transport, _ = make_transport(lambda r: json_response(None))

        outcome = await transport.get("/api/cases/1", response_model=CaseSearchResponse)

        assert outcome.ok
        assert outcome.payload is None


@pytest.mark.unit
class TestPost:
    """POST outcome mapping"""

    async def test_body_round_trips_through_echo(self, make_transport):
        transport, handler = make_transport(lambda r: httpx.Response(200, content=r.content))
        body = {"operationName": "Op", "variables": {"input": {"caseId": 42}}, "query": "{ x }"}

        outcome = await transport.post(GRAPHQL_URL, body)

        assert outcome.ok
        assert outcome.payload == body
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"

    async def test_full_url_is_relayed(self, make_transport, json_response):
        transport, handler = make_transport(lambda r: json_response({"data": None}))

        await transport.post(GRAPHQL_URL, {"query": "{ x }"})

        url = handler.requests[0].url
        assert url.host == "relay.test"
        assert GRAPHQL_URL in unquote(str(url))
        assert BASE_URL not in unquote(str(url))

    async def test_http_failure(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(502, text="Bad Gateway"))

        outcome = await transport.post(GRAPHQL_URL, {"query": "{ x }"})

        assert outcome.status == 502
        assert outcome.failure.body == "Bad Gateway"

    async def test_network_failure(self, make_transport):
        def refuse(request):
            raise httpx.ConnectError("DNS lookup failed", request=request)

        transport, _ = make_transport(refuse)

        outcome = await transport.post(GRAPHQL_URL, {"query": "{ x }"})

        assert outcome.status == 0
        assert outcome.failure.kind == FailureKind.NETWORK


@pytest.mark.unit
class TestOutcome:
    """Outcome invariants"""

    def test_success_has_no_failure(self):
        outcome = Outcome.success(201, {"id": 1})
        assert outcome.ok and outcome.failure is None and outcome.status == 201

    def test_failure_has_no_payload(self):
        outcome = Outcome.fail(FailureKind.HTTP, 500, "villa", "body")
        assert not outcome.ok
        assert outcome.payload is None
        assert outcome.failure == TransportFailure(FailureKind.HTTP, 500, "villa", "body")

    def test_cannot_carry_both(self):
        failure = TransportFailure(FailureKind.HTTP, 500, "villa", "body")
        with pytest.raises(ValueError):
            Outcome(status=500, payload={"id": 1}, failure=failure)


@pytest.mark.unit
class TestClose:
    """Resource handling"""

    async def test_aclose_closes_http_client(self, make_transport):
        transport, _ = make_transport(lambda r: httpx.Response(200))
        await transport.aclose()
        assert transport._http.is_closed
