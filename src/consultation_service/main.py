"""Main FastAPI application for consultation-service."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from consultation_service import __version__
from consultation_service.api.routes.assistant import router as assistant_router
from consultation_service.api.routes.cases import router as cases_router
from consultation_service.config import settings
from consultation_service.infrastructure.ai import GeminiCaseAnalyst
from consultation_service.infrastructure.http import TransportClient
from consultation_service.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Consultation Case Service",
    description="Browse consultation portal cases and request AI analyses of them",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(cases_router)
app.include_router(assistant_router)

app.state.transport = None
app.state.analyst = None


@app.on_event("startup")
async def startup():
    """Create the transport client and the AI analyst."""
    logger.info(f"Starting {settings.service_name} on port {settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Upstream: {settings.upstream_base_url} (GraphQL: {settings.graphql_url})")

    app.state.transport = TransportClient(settings.upstream_base_url, settings.relay_prefix)

    if settings.gemini_api_key:
        app.state.analyst = GeminiCaseAnalyst(
            api_key=settings.gemini_api_key,
            model=settings.analysis_model,
            image_model=settings.image_model,
            max_chat_sessions=settings.max_chat_sessions,
        )
    else:
        logger.warning("GEMINI_API_KEY not set, AI analysis and assistant are disabled")


@app.on_event("shutdown")
async def shutdown():
    """Clean up resources on shutdown."""
    logger.info("Shutting down service")
    if app.state.transport is not None:
        await app.state.transport.aclose()


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns the health status of the Consultation Case Service.

**Response Example**:
```json
{
  "status": "healthy",
  "service": "consultation-service",
  "version": "1.0.0",
  "upstream": "https://samradapi.island.is",
  "analyst": "gemini"
}
```

**Storage**: No upstream call (reports configuration only)
**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Service is healthy and operational"},
    },
)
async def health_check():
    """Health check endpoint."""
    analyst = app.state.analyst
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=__version__,
        upstream=settings.upstream_base_url,
        analyst=analyst.name if analyst is not None else None,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "consultation_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
