"""Transport client for the consultation portal APIs.

The upstream services do not send CORS headers, so every call is routed
through a relay by prefixing the target URL with the relay address. The
client never raises: each call returns an ``Outcome`` describing the success
payload or the failure (network, HTTP or payload shape).
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Type, Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from .outcome import NETWORK_FAILURE_STATUS, FailureKind, Outcome

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Ekki tókst að ná sambandi við vefþjónustu. Athugaðu netenginguna þína."
HTTP_ERROR_MESSAGE = "Villa í netsamskiptum við vefþjónustu (HTTP {status})."
PAYLOAD_ERROR_MESSAGE = "Svar vefþjónustu var ekki á væntu formi."

# Force the relay to fetch a fresh response
NO_CACHE_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

_LOG_BODY_LIMIT = 500

QueryValue = Union[str, int, float, bool]


class TransportClient:
    """Async HTTP client that routes calls through a CORS relay.

    The client is constructed explicitly by whoever composes the repository
    and owns the underlying ``httpx.AsyncClient``; pass ``http_client`` to
    inject a preconfigured one (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        relay_prefix: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the transport client.

        Args:
            base_url: Upstream REST base URL (no trailing slash needed)
            relay_prefix: Relay address the target URL is appended to
            http_client: Optional preconfigured async client
        """
        self.base_url = base_url.rstrip("/")
        self.relay_prefix = relay_prefix
        self._http = http_client or httpx.AsyncClient()

        logger.info(f"Transport client initialized for {self.base_url} via {self.relay_prefix}")

    def relay(self, target_url: str) -> str:
        """Route an absolute URL through the relay."""
        return f"{self.relay_prefix}{target_url}"

    def build_url(self, path: str, params: Optional[Mapping[str, QueryValue]] = None) -> str:
        """Build the relayed URL for an upstream path and query parameters.

        Values are coerced to strings and each key/value pair is URL-encoded
        exactly once, in insertion order.
        """
        if not path.startswith("/"):
            path = f"/{path}"

        target = f"{self.base_url}{path}"
        if params:
            query = urlencode([(key, str(value)) for key, value in params.items()])
            target = f"{target}?{query}"

        return self.relay(target)

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, QueryValue]] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        """GET an upstream path.

        Args:
            path: Path under the base URL (e.g. ``/api/cases``)
            params: Query parameters
            response_model: Optional pydantic model to validate the payload into

        Returns:
            Outcome with the decoded payload or the failure
        """
        url = self.build_url(path, params)
        return await self._send("GET", url, response_model, headers=NO_CACHE_HEADERS)

    async def post(
        self,
        url: str,
        body: Dict[str, Any],
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        """POST a JSON body to a full target URL.

        The target may live on a different host than ``base_url``; it is
        routed through the same relay.
        """
        return await self._send(
            "POST",
            self.relay(url),
            response_model,
            headers={"Accept": "application/json"},
            json=body,
        )

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self._http.aclose()
        logger.info("Transport client closed")

    async def _send(
        self,
        method: str,
        url: str,
        response_model: Optional[Type[BaseModel]],
        **kwargs: Any,
    ) -> Outcome:
        try:
            response = await self._http.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            logger.error(f"Network error on {method} {url}: {e}")
            return Outcome.fail(
                FailureKind.NETWORK,
                NETWORK_FAILURE_STATUS,
                NETWORK_ERROR_MESSAGE,
                str(e),
            )

        if not response.is_success:
            body = response.text
            logger.error(
                f"HTTP error {response.status_code} on {method} {url}: "
                f"{body[:_LOG_BODY_LIMIT]}"
            )
            return Outcome.fail(
                FailureKind.HTTP,
                response.status_code,
                HTTP_ERROR_MESSAGE.format(status=response.status_code),
                body,
            )

        try:
            payload = response.json()
            if response_model is not None and payload is not None:
                payload = response_model.model_validate(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            body = response.text
            logger.error(
                f"Unexpected payload from {method} {url} (HTTP {response.status_code}): "
                f"{e}; body: {body[:_LOG_BODY_LIMIT]}"
            )
            return Outcome.fail(
                FailureKind.PAYLOAD,
                response.status_code,
                PAYLOAD_ERROR_MESSAGE,
                body,
            )

        return Outcome.success(response.status_code, payload)
