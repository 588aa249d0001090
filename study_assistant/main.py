"""Study Assistant API - text extraction, AI study material generation and PDF export"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from study_assistant.core.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    from study_assistant.core.database import get_engine
    from study_assistant.services.storage.sql_store import create_tables

    logger.info(f"Starting {settings.SERVICE_NAME} v{settings.VERSION}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"AI provider: {settings.AI_PROVIDER} (priority: {', '.join(settings.AI_PROVIDER_PRIORITY)})")
    logger.info(
        f"Rate limiting: {'enabled' if settings.RATE_LIMITING_ENABLED else 'disabled'} "
        f"({settings.DAILY_TOKEN_LIMIT:,} tokens/day)"
    )
    create_tables(get_engine())
    yield
    logger.info(f"Shutting down {settings.SERVICE_NAME}")


# Create FastAPI application
app = FastAPI(
    title="Study Assistant Service API",
    description="Text extraction, flashcard, practice test and summary generation",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
    }


@app.get("/healthz", tags=["health"])
async def healthz_check():
    """Health check endpoint (standardized path)."""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
    }


# Import and register routers
from study_assistant.routers.documents import router as documents_router
from study_assistant.routers.generation import router as generation_router

# Register routers with API prefix
app.include_router(documents_router, prefix="/api/doc", tags=["documents"])
app.include_router(generation_router, prefix="/api/doc", tags=["generation"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "study_assistant.main:app",
        host="0.0.0.0",
        port=8011,
        reload=settings.DEBUG,
    )
