"""Generative AI collaborator for case analysis.

The rest of the service only sees the ``CaseAnalyst`` interface; the Gemini
implementation below is one way to fulfil it.
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, AsyncIterator, List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError

from consultation_service.models import (
    Case,
    CaseDetails,
    Comment,
    GroundingSource,
    ParliamentReviewAnalysis,
    ParliamentStatus,
)

from .prompts import (
    CASE_DETAILS_SCHEMA,
    CHAT_SYSTEM_INSTRUCTION,
    PARLIAMENT_REVIEWS_PROMPT,
    PARLIAMENT_STATUS_PROMPT,
    case_details_prompt,
)

logger = logging.getLogger(__name__)

SUMMARY_ERROR = "Ekki tókst að búa til samantekt á málinu."
STATUS_ERROR = "Ekki tókst að leita að stöðu málsins á Alþingi."
REVIEWS_ERROR = "Ekki tókst að greina umsagnir frá Alþingi."
REVIEWS_FORMAT_ERROR = "Gat ekki unnið úr svari frá gervigreind. Svarið var ekki á réttu JSON formi."
IMAGE_ERROR = "Ekki tókst að búa til mynd."
CHAT_ERROR = "Ekki tókst að fá svar frá spjallþjarkinum."


class AnalysisError(Exception):
    """Raised when the AI collaborator cannot produce a result.

    ``message`` is localized and meant for display.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def extract_json_object(text: str) -> str:
    """Cut the outermost ``{...}`` out of free text.

    Grounded answers cannot be forced into JSON mode, so the object may be
    wrapped in prose or a markdown fence. Text without braces is returned
    stripped so the caller's JSON parse reports the failure.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return text.strip()
    return text[start:end + 1]


def grounding_sources(response: Any) -> List[GroundingSource]:
    """Web sources from a grounded response; title falls back to the URI."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri:
            sources.append(GroundingSource(uri=uri, title=getattr(web, "title", None) or uri))
    return sources


# ============================================================
# Analyst Interface
# ============================================================

class CaseAnalyst(ABC):
    """
    Abstract interface to the generative AI collaborator.

    Every method raises AnalysisError with a displayable message on failure.
    """

    name: str = "analyst"

    @abstractmethod
    async def summarize_case(self, case: Case, comments: List[Comment]) -> CaseDetails:
        """Structured analysis of a case and the comments submitted on it."""
        pass

    @abstractmethod
    async def lookup_parliament_status(self, title: str) -> ParliamentStatus:
        """Search-grounded status of a case in parliamentary records."""
        pass

    @abstractmethod
    async def analyze_parliament_reviews(self, title: str) -> ParliamentReviewAnalysis:
        """Search-grounded analysis of submissions received by parliament."""
        pass

    @abstractmethod
    async def generate_image(self, prompt: str) -> str:
        """Generate one image, returned as a ``data:`` URL."""
        pass

    @abstractmethod
    def stream_chat(self, session_id: str, message: str) -> AsyncIterator[str]:
        """Send a chat message and stream the reply as text chunks."""
        pass

    @abstractmethod
    def reset_chat(self, session_id: str) -> bool:
        """Forget a chat session. Returns False if it did not exist."""
        pass


# ============================================================
# Gemini Implementation
# ============================================================

class GeminiCaseAnalyst(CaseAnalyst):
    """
    Case analyst backed by the Gemini API (google-genai async client).

    Chat sessions are kept in memory; once max_chat_sessions is reached the
    least recently used session is dropped.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash",
        image_model: str = "imagen-4.0-generate-001",
        client: Optional[genai.Client] = None,
        max_chat_sessions: int = 200,
    ):
        """
        Initialize the analyst.

        Args:
            api_key: Gemini API key (falls back to the SDK's environment lookup)
            model: Text model for analysis and chat
            image_model: Image generation model
            client: Optional preconfigured google-genai client
            max_chat_sessions: Number of chat sessions kept before eviction
        """
        self.client = client or (genai.Client(api_key=api_key) if api_key else genai.Client())
        self.model = model
        self.image_model = image_model
        self.max_chat_sessions = max_chat_sessions
        self._chats: "OrderedDict[str, Any]" = OrderedDict()

        logger.info(f"Gemini analyst initialized with model {model}")

    async def summarize_case(self, case: Case, comments: List[Comment]) -> CaseDetails:
        """Summarize a case with structured JSON output."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=case_details_prompt(case, comments),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=CASE_DETAILS_SCHEMA,
                ),
            )
            return CaseDetails.model_validate_json(response.text or "")
        except (genai_errors.APIError, ValidationError) as e:
            logger.error(f"Summarizing case {case.id} failed: {e}")
            raise AnalysisError(SUMMARY_ERROR) from e

    async def lookup_parliament_status(self, title: str) -> ParliamentStatus:
        """Look up the parliamentary status of a case with Google Search grounding."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=PARLIAMENT_STATUS_PROMPT.format(title=title),
                config=self._grounded_config(),
            )
        except genai_errors.APIError as e:
            logger.error(f"Parliament status lookup failed for '{title}': {e}")
            raise AnalysisError(STATUS_ERROR) from e

        return ParliamentStatus(
            description=response.text or "",
            sources=grounding_sources(response),
        )

    async def analyze_parliament_reviews(self, title: str) -> ParliamentReviewAnalysis:
        """Analyze parliamentary submissions; the JSON is cut out of free text."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=PARLIAMENT_REVIEWS_PROMPT.format(title=title),
                config=self._grounded_config(),
            )
        except genai_errors.APIError as e:
            logger.error(f"Parliament review analysis failed for '{title}': {e}")
            raise AnalysisError(REVIEWS_ERROR) from e

        text = extract_json_object(response.text or "")
        try:
            parsed = json.loads(text)
            if not isinstance(parsed, dict):
                raise ValueError("expected a JSON object")
            parsed["sources"] = [s.model_dump() for s in grounding_sources(response)]
            return ParliamentReviewAnalysis.model_validate(parsed)
        except (ValueError, ValidationError) as e:
            logger.error(f"Could not parse review analysis JSON: {e}; text: {text[:500]}")
            raise AnalysisError(REVIEWS_FORMAT_ERROR) from e

    async def generate_image(self, prompt: str) -> str:
        """Generate a square JPEG and return it as a data URL."""
        try:
            response = await self.client.aio.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio="1:1",
                ),
            )
        except genai_errors.APIError as e:
            logger.error(f"Image generation failed: {e}")
            raise AnalysisError(IMAGE_ERROR) from e

        if not response.generated_images or response.generated_images[0].image is None:
            logger.error("Image generation returned no image")
            raise AnalysisError(IMAGE_ERROR)

        image_bytes = response.generated_images[0].image.image_bytes or b""
        return f"data:image/jpeg;base64,{base64.b64encode(image_bytes).decode('ascii')}"

    async def stream_chat(self, session_id: str, message: str) -> AsyncIterator[str]:
        """Stream the assistant's reply chunk by chunk."""
        chat = self._chats.get(session_id)
        if chat is None:
            chat = self.client.aio.chats.create(
                model=self.model,
                config=types.GenerateContentConfig(system_instruction=CHAT_SYSTEM_INSTRUCTION),
            )
            self._chats[session_id] = chat
            logger.info(f"Started chat session {session_id}")
            while len(self._chats) > self.max_chat_sessions:
                evicted, _ = self._chats.popitem(last=False)
                logger.info(f"Evicted idle chat session {evicted}")
        else:
            self._chats.move_to_end(session_id)

        try:
            async for chunk in await chat.send_message_stream(message):
                if chunk.text:
                    yield chunk.text
        except genai_errors.APIError as e:
            logger.error(f"Chat session {session_id} failed: {e}")
            raise AnalysisError(CHAT_ERROR) from e

    def reset_chat(self, session_id: str) -> bool:
        """Drop a chat session."""
        return self._chats.pop(session_id, None) is not None

    def _grounded_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
