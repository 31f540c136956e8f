"""Application configuration for the ministry events backend."""
import os
from typing import Optional

import pytz
from dotenv import load_dotenv

# Load environment variables from .env (if present) before reading anything
load_dotenv()

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

# Use the DATABASE_URL from environment variable, with fallback to SQLite for local dev
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./ministry_events.db")

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

# Every occurrence is materialized in the ministry's local wall-clock time
MINISTRY_TIMEZONE = os.environ.get("MINISTRY_TIMEZONE", "America/Sao_Paulo").strip()

# Dapr sidecar used to broadcast recurrence lifecycle events
DAPR_HTTP_ENDPOINT = os.environ.get("DAPR_HTTP_ENDPOINT", "http://localhost:3500")
DAPR_PUBSUB_NAME = os.environ.get("DAPR_PUBSUB_NAME", "ministry-pubsub")
RECURRENCE_TOPIC = os.environ.get("RECURRENCE_TOPIC", "recurrence-events")


def _parse_horizon_days(raw: Optional[str]) -> Optional[int]:
    """Parse RECURRENCE_HORIZON_DAYS; empty means "until the end of the start year"."""
    if raw is None or not raw.strip():
        return None
    value = int(raw.strip())
    if value < 1:
        raise RuntimeError("RECURRENCE_HORIZON_DAYS must be a positive integer")
    return value


RECURRENCE_HORIZON_DAYS = _parse_horizon_days(os.environ.get("RECURRENCE_HORIZON_DAYS"))


def get_timezone(name: Optional[str] = None):
    """Return the pytz timezone used to place occurrences on the wall clock."""
    return pytz.timezone(name or MINISTRY_TIMEZONE)
