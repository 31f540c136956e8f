"""Recurring event rule model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime
from datetime import datetime, date, time
from typing import TYPE_CHECKING, List, Optional
import uuid

from ministry.models import utc_now

if TYPE_CHECKING:
    from ministry.models.event import Event


class RecurringEvent(SQLModel, table=True):
    """Recurrence rule defining a repeating ministry event."""

    __tablename__ = "recurring_event"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: str = Field(default="", max_length=100)  # event type label shown in the calendar
    group_id: Optional[str] = Field(default=None, max_length=36)
    campaign_id: Optional[str] = Field(default=None, max_length=36)

    recurrence_type: str = Field(max_length=20)  # WEEKLY, INTERVAL_DAYS, MONTHLY_POSITION, MONTHLY_DAY
    weekday: Optional[int] = Field(default=None)  # 0-6, Sunday=0
    interval_days: Optional[int] = Field(default=None)
    month_position: Optional[int] = Field(default=None)  # 1-5, 5 = last
    day_of_month: Optional[int] = Field(default=None)  # 1-31
    start_date: date
    end_date: Optional[date] = Field(default=None)  # NULL = open-ended
    time_of_day: time

    active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=False), nullable=False))

    # Relationships
    events: List["Event"] = Relationship(back_populates="rule")
