"""Recurrence rule schemas for the ministry events API."""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime, time
from typing import Optional, List

from ministry.services.recurrence_types import RecurrenceRule, RecurrenceType


class RecurrenceRuleCreate(BaseModel):
    """Schema for creating a recurring event rule."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: str = Field(default="", max_length=100)  # Event type label
    group_id: Optional[str] = Field(None)
    campaign_id: Optional[str] = Field(None)
    recurrence_type: RecurrenceType
    weekday: Optional[int] = Field(None, ge=0, le=6)  # 0 = Sunday
    interval_days: Optional[int] = Field(None, ge=1)
    month_position: Optional[int] = Field(None, ge=1, le=5)  # 5 = last
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    start_date: date
    end_date: Optional[date] = None  # None = open-ended
    time_of_day: time = Field(default=time(19, 0))

    def to_rule(self) -> RecurrenceRule:
        """Build the (unsaved) domain rule."""
        return RecurrenceRule(**self.model_dump())


class RecurrenceRuleUpdate(BaseModel):
    """Schema for editing a rule; omitted fields are left unchanged."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: str = Field(default="", max_length=100)  # may be omitted, never null
    group_id: Optional[str] = None
    campaign_id: Optional[str] = None
    recurrence_type: Optional[RecurrenceType] = None
    weekday: Optional[int] = Field(None, ge=0, le=6)
    interval_days: Optional[int] = Field(None, ge=1)
    month_position: Optional[int] = Field(None, ge=1, le=5)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    time_of_day: Optional[time] = None

    def changes(self) -> dict:
        """Fields explicitly sent by the client (an explicit null clears a field)."""
        return self.model_dump(exclude_unset=True)


class RecurrenceRuleResponse(BaseModel):
    """Schema for rule API responses."""
    id: str
    title: str
    description: Optional[str] = None
    category: str = ""
    group_id: Optional[str] = None
    campaign_id: Optional[str] = None
    recurrence_type: RecurrenceType
    weekday: Optional[int] = None
    interval_days: Optional[int] = None
    month_position: Optional[int] = None
    day_of_month: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    time_of_day: time
    active: bool
    summary: str = ""  # Human-readable description of the rule

    model_config = ConfigDict(from_attributes=True)


class LifecycleResponse(BaseModel):
    """Schema for lifecycle operation results."""
    rule: RecurrenceRuleResponse
    outcome: str
    count: int
    message: str


class PreviewResponse(BaseModel):
    """Schema for the occurrence preview shown while editing a rule."""
    summary: str
    occurrences: List[datetime]
    has_more: bool
