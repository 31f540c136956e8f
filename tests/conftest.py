"""Shared fixtures for the recurrence engine tests."""

import os

# Point the application at an in-memory database before any ministry module is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

import pytest
import pytz
from sqlmodel import Session

from ministry.db.config import build_engine
from ministry.db.init import init_db
from ministry.services.clock import FixedClock
from ministry.services.recurrence_types import RecurrenceRule, RecurrenceType
from ministry.utils.metrics import metrics_collector

SAO_PAULO = pytz.timezone("America/Sao_Paulo")


class InMemoryEventStore:
    """Event store keeping instances in a list; `fail` maps method names to errors to raise."""

    def __init__(self):
        self.instances: List[Dict[str, Any]] = []
        self.calls: List[tuple] = []
        self.fail: Dict[str, Exception] = {}

    def add(self, rule_id: Optional[str], occurs_at: datetime, title: str = "seed") -> None:
        self.instances.append({"rule_id": rule_id, "occurs_at": occurs_at, "title": title})

    def owned_by(self, rule_id: str) -> List[datetime]:
        return sorted(i["occurs_at"] for i in self.instances if i["rule_id"] == rule_id)

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise self.fail[name]

    async def bulk_create(self, drafts) -> int:
        self.calls.append(("bulk_create", len(drafts)))
        self._maybe_fail("bulk_create")
        for draft in drafts:
            self.add(draft.rule_id, draft.occurs_at, draft.title)
        return len(drafts)

    async def delete_where(self, rule_id, occurs_at_from=None) -> int:
        self.calls.append(("delete_where", rule_id, occurs_at_from))
        self._maybe_fail("delete_where")
        doomed = [
            i for i in self.instances
            if i["rule_id"] == rule_id and (occurs_at_from is None or i["occurs_at"] >= occurs_at_from)
        ]
        self.instances = [i for i in self.instances if i not in doomed]
        return len(doomed)

    async def count_by_rule(self, rule_id, occurs_at_from=None) -> int:
        return sum(
            1 for i in self.instances
            if i["rule_id"] == rule_id and (occurs_at_from is None or i["occurs_at"] >= occurs_at_from)
        )


class InMemoryRuleStore:
    """Rule store keyed by sequential ids."""

    def __init__(self):
        self.rules: Dict[str, RecurrenceRule] = {}
        self.calls: List[tuple] = []
        self.fail: Dict[str, Exception] = {}
        self._next_id = 1

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise self.fail[name]

    async def create(self, rule: RecurrenceRule) -> RecurrenceRule:
        self.calls.append(("create",))
        self._maybe_fail("create")
        saved = rule.with_changes(id=f"rule-{self._next_id}")
        self._next_id += 1
        self.rules[saved.id] = saved
        return saved

    async def update(self, rule: RecurrenceRule) -> RecurrenceRule:
        self.calls.append(("update", rule.id))
        self._maybe_fail("update")
        if rule.id not in self.rules:
            raise LookupError(rule.id)
        self.rules[rule.id] = rule
        return rule

    async def delete(self, rule: RecurrenceRule) -> None:
        self.calls.append(("delete", rule.id))
        self._maybe_fail("delete")
        self.rules.pop(rule.id, None)


class RecordingPublisher:
    def __init__(self, error: Optional[Exception] = None):
        self.events: List[tuple] = []
        self.error = error

    async def publish(self, event_type, data):
        if self.error is not None:
            raise self.error
        self.events.append((event_type, data))
        return {"success": True}


def make_rule(**overrides) -> RecurrenceRule:
    """Weekly Friday 19:00 rule for January 2024, unless overridden."""
    values = dict(
        recurrence_type=RecurrenceType.WEEKLY,
        weekday=5,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        time_of_day=time(19, 0),
        title="Youth service",
        category="Culto",
    )
    values.update(overrides)
    return RecurrenceRule(**values)


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics_collector.reset()
    yield
    metrics_collector.reset()


@pytest.fixture
def tz():
    return SAO_PAULO


@pytest.fixture
def clock(tz):
    """Wednesday 2024-01-10 12:00 in São Paulo."""
    return FixedClock(tz.localize(datetime(2024, 1, 10, 12, 0)), tz=tz)


@pytest.fixture
def event_store():
    return InMemoryEventStore()


@pytest.fixture
def rule_store():
    return InMemoryRuleStore()


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session
