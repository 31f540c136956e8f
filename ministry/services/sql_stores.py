"""SQLModel-backed rule and event stores for the recurrence lifecycle manager."""
from sqlmodel import Session, select
from sqlalchemy import delete, func
from typing import List, Optional, Sequence
from datetime import datetime
import pytz

from ministry.models import utc_now
from ministry.models.event import Event
from ministry.models.recurring_event import RecurringEvent
from ministry.services.recurrence_types import EventInstanceDraft, RecurrenceRule, RecurrenceType


def to_utc_naive(moment: datetime) -> datetime:
    """Normalize a timestamp to naive UTC for storage; naive input is taken as UTC."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(pytz.utc).replace(tzinfo=None)


def rule_from_row(row: RecurringEvent) -> RecurrenceRule:
    """Convert a persisted row into a domain rule."""
    return RecurrenceRule(
        id=row.id,
        recurrence_type=RecurrenceType(row.recurrence_type),
        start_date=row.start_date,
        end_date=row.end_date,
        time_of_day=row.time_of_day,
        weekday=row.weekday,
        interval_days=row.interval_days,
        month_position=row.month_position,
        day_of_month=row.day_of_month,
        title=row.title,
        description=row.description,
        category=row.category,
        group_id=row.group_id,
        campaign_id=row.campaign_id,
        active=row.active,
    )


def _apply_rule(row: RecurringEvent, rule: RecurrenceRule) -> RecurringEvent:
    row.recurrence_type = RecurrenceType(rule.recurrence_type).value
    row.start_date = rule.start_date
    row.end_date = rule.end_date
    row.time_of_day = rule.time_of_day
    row.weekday = rule.weekday
    row.interval_days = rule.interval_days
    row.month_position = rule.month_position
    row.day_of_month = rule.day_of_month
    row.title = rule.title
    row.description = rule.description
    row.category = rule.category
    row.group_id = rule.group_id
    row.campaign_id = rule.campaign_id
    row.active = rule.active
    return row


class SQLRuleStore:
    """Recurrence rules persisted in the `recurring_event` table."""

    def __init__(self, session: Session):
        self.session = session

    def _get_row(self, rule_id: str) -> Optional[RecurringEvent]:
        return self.session.get(RecurringEvent, rule_id)

    async def get(self, rule_id: str) -> Optional[RecurrenceRule]:
        """Get a rule by ID."""
        row = self._get_row(rule_id)
        return rule_from_row(row) if row else None

    async def list_all(self, active: Optional[bool] = None) -> List[RecurrenceRule]:
        """List rules, newest first, optionally filtered by status."""
        statement = select(RecurringEvent)
        if active is not None:
            statement = statement.where(RecurringEvent.active == active)
        statement = statement.order_by(RecurringEvent.created_at.desc())
        return [rule_from_row(row) for row in self.session.exec(statement).all()]

    async def create(self, rule: RecurrenceRule) -> RecurrenceRule:
        row = _apply_rule(RecurringEvent(
            title=rule.title,
            recurrence_type=RecurrenceType(rule.recurrence_type).value,
            start_date=rule.start_date,
            time_of_day=rule.time_of_day,
        ), rule)
        if rule.id:
            row.id = rule.id
        try:
            self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return rule_from_row(row)

    async def update(self, rule: RecurrenceRule) -> RecurrenceRule:
        row = self._get_row(rule.id)
        if row is None:
            raise LookupError(f"Recurrence rule {rule.id} does not exist")

        _apply_rule(row, rule)
        row.updated_at = utc_now()
        try:
            self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return rule_from_row(row)

    async def delete(self, rule: RecurrenceRule) -> None:
        row = self._get_row(rule.id)
        if row is None:
            return
        try:
            self.session.delete(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


class SQLEventStore:
    """Event instances persisted in the `event` table."""

    def __init__(self, session: Session):
        self.session = session

    async def bulk_create(self, drafts: Sequence[EventInstanceDraft]) -> int:
        """Insert every draft in a single transaction."""
        rows = [
            Event(
                title=draft.title,
                description=draft.description,
                occurs_at=to_utc_naive(draft.occurs_at),
                category=draft.category,
                group_id=draft.group_id,
                campaign_id=draft.campaign_id,
                rule_id=draft.rule_id,
            )
            for draft in drafts
        ]
        try:
            self.session.add_all(rows)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return len(rows)

    async def delete_where(self, rule_id: str, occurs_at_from: Optional[datetime] = None) -> int:
        statement = delete(Event).where(Event.rule_id == rule_id)
        if occurs_at_from is not None:
            statement = statement.where(Event.occurs_at >= to_utc_naive(occurs_at_from))
        try:
            result = self.session.execute(statement)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result.rowcount

    async def count_by_rule(self, rule_id: str, occurs_at_from: Optional[datetime] = None) -> int:
        statement = select(func.count()).select_from(Event).where(Event.rule_id == rule_id)
        if occurs_at_from is not None:
            statement = statement.where(Event.occurs_at >= to_utc_naive(occurs_at_from))
        return self.session.exec(statement).one()

    async def list_by_rule(self, rule_id: str) -> List[Event]:
        """Instances owned by a rule, in chronological order."""
        statement = (
            select(Event)
            .where(Event.rule_id == rule_id)
            .order_by(Event.occurs_at.asc())
        )
        return list(self.session.exec(statement).all())
