"""Event model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, String, ForeignKey
from datetime import datetime
from typing import TYPE_CHECKING, Optional
import uuid

from ministry.models import utc_now

if TYPE_CHECKING:
    from ministry.models.recurring_event import RecurringEvent


class Event(SQLModel, table=True):
    """Event instance shown on the ministry calendar."""

    __tablename__ = "event"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    occurs_at: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))  # naive UTC
    category: str = Field(default="", max_length=100)
    group_id: Optional[str] = Field(default=None, max_length=36)
    campaign_id: Optional[str] = Field(default=None, max_length=36)
    # NULL = standalone event, not generated by a rule
    rule_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), ForeignKey("recurring_event.id"), index=True, nullable=True)
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=False), nullable=False))

    # Relationships
    rule: Optional["RecurringEvent"] = Relationship(back_populates="events")
