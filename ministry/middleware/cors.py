"""CORS configuration for the dashboard frontend + FastAPI integration."""
import logging

from fastapi.middleware.cors import CORSMiddleware

from ministry.config import ENVIRONMENT, FRONTEND_URL

logger = logging.getLogger(__name__)

# Base allowed origins for development (Vite dev server)
ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

# Add production frontend URL if provided
if FRONTEND_URL and FRONTEND_URL not in ALLOWED_ORIGINS:
    ALLOWED_ORIGINS.append(FRONTEND_URL)


def add_cors_middleware(app):
    """Add CORS middleware to the FastAPI application."""
    if ENVIRONMENT == "production":
        # Only the deployed dashboard may call the API in production
        origins = [FRONTEND_URL]
    else:
        origins = ALLOWED_ORIGINS

    logger.info(f"[CORS] Environment: {ENVIRONMENT} | Allowed Origins: {origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
