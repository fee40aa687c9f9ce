"""Assistant API routes: chat and image generation."""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from consultation_service.core import AnalysisUnavailableError
from consultation_service.infrastructure.ai import AnalysisError, CaseAnalyst
from consultation_service.models import ChatRequest, ImageRequest, ImageResponse

from .cases import domain_http_error, get_analyst

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/assistant", tags=["assistant"])


async def require_analyst(analyst: Optional[CaseAnalyst] = Depends(get_analyst)) -> CaseAnalyst:
    """Dependency that fails with 503 when no analyst is configured."""
    if analyst is None:
        raise domain_http_error(AnalysisUnavailableError())
    return analyst


@router.post(
    "/chat",
    response_class=StreamingResponse,
    summary="Chat with the assistant",
    description="""
Sends a message to the assistant and streams the reply as plain text.

Each `sessionId` keeps its own conversation history in memory for the
lifetime of the service.

**Request Example**:
```json
{"sessionId": "b2f1", "message": "Hvað er Samráðsgátt?"}
```
    """,
    responses={
        200: {"description": "Reply streamed as text/plain chunks"},
        502: {"description": "AI service failed before replying"},
        503: {"description": "AI assistant is not configured"},
    },
)
async def chat(
    request: ChatRequest,
    analyst: CaseAnalyst = Depends(require_analyst),
):
    """Stream the assistant's reply."""
    stream = analyst.stream_chat(request.session_id, request.message)

    # Pull the first chunk here so an immediate failure still maps to a status code
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        first = ""
    except AnalysisError as e:
        raise domain_http_error(e) from e

    async def body() -> AsyncIterator[str]:
        if first:
            yield first
        try:
            async for chunk in stream:
                yield chunk
        except AnalysisError as e:
            logger.error(f"Chat stream for session {request.session_id} ended early: {e.message}")

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


@router.delete(
    "/chat/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a chat session",
    responses={
        204: {"description": "Session dropped"},
        404: {"description": "No such session"},
        503: {"description": "AI assistant is not configured"},
    },
)
async def reset_chat(
    session_id: str,
    analyst: CaseAnalyst = Depends(require_analyst),
):
    """Forget a chat session."""
    if not analyst.reset_chat(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chat session {session_id} not found",
        )


@router.post(
    "/images",
    response_model=ImageResponse,
    summary="Generate an image",
    responses={
        200: {"description": "Image generated"},
        502: {"description": "Image generation failed"},
        503: {"description": "AI assistant is not configured"},
    },
)
async def generate_image(
    request: ImageRequest,
    analyst: CaseAnalyst = Depends(require_analyst),
):
    """Generate an image from a prompt."""
    try:
        data_url = await analyst.generate_image(request.prompt)
    except AnalysisError as e:
        raise domain_http_error(e) from e

    return ImageResponse(data_url=data_url)
