"""Collaborators the lifecycle manager talks to."""
from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ministry.services.recurrence_types import EventInstanceDraft, RecurrenceRule


class EventStore(Protocol):
    """Persisted event instances, addressed by owning rule."""

    async def bulk_create(self, drafts: Sequence[EventInstanceDraft]) -> int:
        ...

    async def delete_where(self, rule_id: str, occurs_at_from: Optional[datetime] = None) -> int:
        """Delete instances of `rule_id`; only those at or after `occurs_at_from` when given."""
        ...

    async def count_by_rule(self, rule_id: str, occurs_at_from: Optional[datetime] = None) -> int:
        ...


class RuleStore(Protocol):
    """Persisted recurrence rules."""

    async def create(self, rule: RecurrenceRule) -> RecurrenceRule:
        """Persist a new rule and return it with its assigned id."""
        ...

    async def update(self, rule: RecurrenceRule) -> RecurrenceRule:
        ...

    async def delete(self, rule: RecurrenceRule) -> None:
        ...


class Clock(Protocol):
    def now(self) -> datetime:
        """Current timezone-aware timestamp."""
        ...


class EventPublisher(Protocol):
    async def publish(self, event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ...
