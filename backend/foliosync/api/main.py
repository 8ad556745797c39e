"""
FastAPI application entry point.

Serves cached portfolio holdings to the display layer.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from foliosync.core.config import settings
from foliosync.core.logging import setup_logging
from foliosync.core.redis import close_redis, get_async_redis
from foliosync.services.state_store import StateStore

# Setup logging
setup_logging()

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Brokerage portfolio holdings sync and lookup",
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    """Seed default settings on first run."""
    store = StateStore(await get_async_redis())
    await store.initialize_defaults()


@app.on_event("shutdown")
async def shutdown() -> None:
    """Run on application shutdown."""
    await close_redis()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


from foliosync.api.portfolio import router as portfolio_router

app.include_router(portfolio_router, prefix="/api/v1/portfolio", tags=["portfolio"])
