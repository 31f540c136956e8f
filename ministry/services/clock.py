"""Clocks injected into the lifecycle manager."""
from datetime import datetime

import pytz

from ministry.config import get_timezone


class SystemClock:
    """Wall clock in the ministry's timezone."""

    def __init__(self, tz=None):
        self.tz = tz or get_timezone()

    def now(self) -> datetime:
        return datetime.now(pytz.utc).astimezone(self.tz)


class FixedClock:
    """Clock frozen at a given moment; naive moments are read as UTC."""

    def __init__(self, moment: datetime, tz=None):
        if moment.tzinfo is None:
            moment = pytz.utc.localize(moment)
        self.tz = tz or moment.tzinfo
        self.moment = moment.astimezone(self.tz)

    def now(self) -> datetime:
        return self.moment
