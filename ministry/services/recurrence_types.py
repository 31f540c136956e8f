"""Domain values shared by the recurrence engine."""
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

# Weekdays are Sunday-based throughout the engine (0 = Sunday ... 6 = Saturday)
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

# month_position 5 always means "last", never "fifth"
LAST_POSITION = 5


class RecurrenceType(str, Enum):
    """Discriminant selecting which parameter a rule carries."""
    WEEKLY = "WEEKLY"
    INTERVAL_DAYS = "INTERVAL_DAYS"
    MONTHLY_POSITION = "MONTHLY_POSITION"
    MONTHLY_DAY = "MONTHLY_DAY"


# Variant fields populated by each recurrence type; every other variant field must be None
VARIANT_FIELDS = {
    RecurrenceType.WEEKLY: ("weekday",),
    RecurrenceType.INTERVAL_DAYS: ("interval_days",),
    RecurrenceType.MONTHLY_POSITION: ("month_position", "weekday"),
    RecurrenceType.MONTHLY_DAY: ("day_of_month",),
}
ALL_VARIANT_FIELDS = ("weekday", "interval_days", "month_position", "day_of_month")


def sunday_weekday(day: date) -> int:
    """Weekday of `day` with 0 = Sunday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Declarative description of a repeating event.

    Payload fields (title, description, category, group_id, campaign_id) are
    copied verbatim onto every generated instance and never interpreted.
    """

    recurrence_type: RecurrenceType
    start_date: date
    time_of_day: time
    title: str
    end_date: Optional[date] = None
    weekday: Optional[int] = None
    interval_days: Optional[int] = None
    month_position: Optional[int] = None
    day_of_month: Optional[int] = None
    description: Optional[str] = None
    category: str = ""
    group_id: Optional[str] = None
    campaign_id: Optional[str] = None
    active: bool = True
    id: Optional[str] = None

    def with_changes(self, **changes) -> "RecurrenceRule":
        """Return a copy with `changes` applied; the original is left untouched."""
        return replace(self, **changes)

    def draft_for(self, occurs_at: datetime) -> "EventInstanceDraft":
        """Build the instance draft this rule materializes at `occurs_at`."""
        return EventInstanceDraft(
            title=self.title,
            description=self.description,
            occurs_at=occurs_at,
            category=self.category,
            group_id=self.group_id,
            campaign_id=self.campaign_id,
            rule_id=self.id,
        )


@dataclass(frozen=True)
class EventInstanceDraft:
    """An event instance ready to be bulk-created by an event store."""

    title: str
    occurs_at: datetime
    rule_id: Optional[str]
    description: Optional[str] = None
    category: str = ""
    group_id: Optional[str] = None
    campaign_id: Optional[str] = None


class Outcome(str, Enum):
    """How a lifecycle operation ended."""
    CREATED = "created"
    EMPTY = "empty"
    DEACTIVATED = "deactivated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass
class LifecycleResult:
    """
    Result of a lifecycle operation.

    `count` is the number of instances created (create/materialize/reactivate)
    or deleted (deactivate/delete). `rule` is the rule as it stands afterwards.
    """

    rule: RecurrenceRule
    outcome: Outcome
    count: int = 0
    occurrences: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when generation succeeded but produced nothing to create."""
        return self.outcome == Outcome.EMPTY
