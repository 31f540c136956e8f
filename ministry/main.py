"""Main FastAPI application for the ministry events backend."""
import logging

from fastapi import FastAPI

from ministry.config import LOG_LEVEL
from ministry.db.init import init_db
from ministry.middleware.cors import add_cors_middleware
from ministry.routers import recurrences
from ministry.utils.metrics import metrics_collector

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Ministry Events API",
    description="Recurring events engine for the youth ministry dashboard",
    version="1.0.0",
)

# Add CORS middleware
add_cors_middleware(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
        logger.info("[SUCCESS] Database tables initialized successfully.")
    except Exception as e:
        logger.warning(f"[WARNING] Database initialization failed: {str(e)}")
        logger.warning("[WARNING] Server will continue but database operations may fail.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/metrics")
async def metrics():
    """Recurrence lifecycle counters and timers."""
    return metrics_collector.get_metrics()


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "title": "Ministry Events API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(recurrences.router, prefix="/api/recurrences")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ministry.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
