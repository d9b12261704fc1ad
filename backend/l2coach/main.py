"""
L2 Coach - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import Settings, settings
from .api import sessions_router, turns_router, media_router, register_exception_handlers
from .core.engine import ConversationEngine, init_engine
from .core.registry import SessionRegistry, init_registry
from .core.logging_config import setup_logging
from .core.resolver import ResponseResolver
from .llm.factory import create_llm_provider
from .middleware import RequestLoggingMiddleware
from .services import ImageUploader, VisionAnalyzer
from .storage import LocalStorage, create_conversation_store, init_conversation_store

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> ConversationEngine:
    """
    Wire the store, collaborators, engine and session registry from settings
    and install them as the process-wide instances.
    """
    blob_storage = LocalStorage(config.local_storage_path)
    store = create_conversation_store(config.storage_type, storage=blob_storage)
    init_conversation_store(store)

    llm_provider = create_llm_provider(
        provider=config.llm_provider,
        api_key=config.llm_api_key or "",
        model=config.llm_model,
        base_url=config.llm_base_url,
    )
    analyzer = VisionAnalyzer(llm_provider, timeout_seconds=config.analysis_timeout_seconds)
    if not analyzer.is_configured():
        logger.warning("LLM_API_KEY not set; screenshot analysis will fail until configured")

    resolver = ResponseResolver(analyzer, reply_delay_seconds=config.reply_delay_seconds)
    uploader = ImageUploader(
        blob_storage,
        allowed_types=config.allowed_image_types,
        max_bytes=config.max_upload_bytes,
    )

    engine = ConversationEngine(store, resolver, uploader)
    init_engine(engine)
    init_registry(SessionRegistry(store, on_delete=engine.forget))
    return engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)
    build_engine(settings)

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage: {settings.storage_type} at {settings.local_storage_path}")
    logger.info(f"Log level: {settings.log_level.upper()}")
    logger.info(f"Debug mode: {settings.debug}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Level 2 tape-reading coach: sessions, screenshots and coach reads",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(sessions_router)
app.include_router(turns_router)
app.include_router(media_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "l2coach.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
