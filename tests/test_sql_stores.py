"""Tests for the SQLModel-backed stores against in-memory SQLite."""

from datetime import date, datetime, time, timezone

import pytest
from sqlalchemy import DateTime

from conftest import SAO_PAULO, make_rule
from ministry.models.event import Event
from ministry.models.recurring_event import RecurringEvent
from ministry.services.clock import FixedClock
from ministry.services.lifecycle_manager import RecurrenceLifecycleManager
from ministry.services.recurrence_types import EventInstanceDraft, RecurrenceType
from ministry.services.sql_stores import SQLEventStore, SQLRuleStore, to_utc_naive


@pytest.fixture
def rules(db_session):
    return SQLRuleStore(db_session)


@pytest.fixture
def events(db_session):
    return SQLEventStore(db_session)


def test_to_utc_naive():
    assert to_utc_naive(SAO_PAULO.localize(datetime(2024, 1, 5, 19, 0))) == datetime(2024, 1, 5, 22, 0)
    assert to_utc_naive(datetime(2024, 1, 5, 19, 0)) == datetime(2024, 1, 5, 19, 0)


class TestSQLRuleStore:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_round_trips(self, rules):
        saved = await rules.create(make_rule(description="Sexta à noite", group_id="g-1"))

        assert saved.id
        loaded = await rules.get(saved.id)
        assert loaded == saved
        assert loaded.recurrence_type == RecurrenceType.WEEKLY
        assert loaded.time_of_day == time(19, 0)
        assert loaded.end_date == date(2024, 1, 31)
        assert loaded.description == "Sexta à noite"

    @pytest.mark.asyncio
    async def test_get_missing(self, rules):
        assert await rules.get("missing") is None

    @pytest.mark.asyncio
    async def test_update(self, rules):
        saved = await rules.create(make_rule())
        updated = await rules.update(saved.with_changes(active=False, title="Youth night"))

        assert updated.active is False
        assert (await rules.get(saved.id)).title == "Youth night"

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, rules):
        with pytest.raises(LookupError):
            await rules.update(make_rule(id="missing"))

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, rules):
        active = await rules.create(make_rule(title="Active"))
        inactive = await rules.create(make_rule(title="Paused", active=False))

        assert {r.id for r in await rules.list_all()} == {active.id, inactive.id}
        assert [r.id for r in await rules.list_all(active=True)] == [active.id]
        assert [r.id for r in await rules.list_all(active=False)] == [inactive.id]

    @pytest.mark.asyncio
    async def test_delete(self, rules):
        saved = await rules.create(make_rule())
        await rules.delete(saved)
        assert await rules.get(saved.id) is None
        # Deleting again is a no-op
        await rules.delete(saved)


class TestSQLEventStore:
    @pytest.mark.asyncio
    async def test_bulk_create_stores_utc(self, rules, events):
        rule = await rules.create(make_rule())
        drafts = [rule.draft_for(SAO_PAULO.localize(datetime(2024, 1, d, 19, 0))) for d in (5, 12)]

        assert await events.bulk_create(drafts) == 2

        stored = await events.list_by_rule(rule.id)
        assert [e.occurs_at for e in stored] == [datetime(2024, 1, 5, 22, 0), datetime(2024, 1, 12, 22, 0)]
        assert all(e.category == "Culto" and e.title == "Youth service" for e in stored)

    @pytest.mark.asyncio
    async def test_count_and_delete_with_cutoff(self, rules, events):
        rule = await rules.create(make_rule())
        other = await rules.create(make_rule(title="Other"))
        await events.bulk_create(
            [rule.draft_for(SAO_PAULO.localize(datetime(2024, 1, d, 19, 0))) for d in (5, 12, 19)]
            + [other.draft_for(SAO_PAULO.localize(datetime(2024, 1, 20, 19, 0)))]
            + [EventInstanceDraft(title="Standalone", occurs_at=datetime(2024, 1, 20, 12, 0), rule_id=None)]
        )
        cutoff = SAO_PAULO.localize(datetime(2024, 1, 10, 12, 0))

        assert await events.count_by_rule(rule.id) == 3
        assert await events.count_by_rule(rule.id, occurs_at_from=cutoff) == 2

        assert await events.delete_where(rule.id, occurs_at_from=cutoff) == 2
        assert await events.count_by_rule(rule.id) == 1
        assert await events.count_by_rule(other.id) == 1

        assert await events.delete_where(rule.id) == 1
        assert await events.count_by_rule(rule.id) == 0


class TestLifecycleOnSQL:
    @pytest.mark.asyncio
    async def test_create_deactivate_delete(self, rules, events):
        clock = FixedClock(SAO_PAULO.localize(datetime(2024, 1, 15, 9, 0)), tz=SAO_PAULO)
        manager = RecurrenceLifecycleManager(rules, events, clock)

        created = await manager.create_rule(make_rule())
        assert created.count == 4

        deactivated = await manager.deactivate(created.rule)
        assert deactivated.count == 2
        assert (await rules.get(created.rule.id)).active is False
        assert await events.count_by_rule(created.rule.id) == 2

        deleted = await manager.delete_rule(deactivated.rule)
        assert deleted.count == 2
        assert await rules.get(created.rule.id) is None


class TestTimestampColumns:
    @pytest.mark.parametrize("model, column", [
        (RecurringEvent, "created_at"),
        (RecurringEvent, "updated_at"),
        (Event, "occurs_at"),
        (Event, "created_at"),
        (Event, "updated_at"),
    ])
    def test_columns_hold_naive_utc(self, model, column):
        column_type = model.__table__.c[column].type
        assert isinstance(column_type, DateTime)
        assert column_type.timezone is False

    @pytest.mark.asyncio
    async def test_bookkeeping_timestamps_are_naive_utc(self, rules, events, db_session):
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        saved = await rules.create(make_rule())
        await rules.update(saved.with_changes(title="Youth night"))
        await events.bulk_create([saved.draft_for(SAO_PAULO.localize(datetime(2024, 1, 5, 19, 0)))])

        row = db_session.get(RecurringEvent, saved.id)
        [instance] = await events.list_by_rule(saved.id)
        for moment in (row.created_at, row.updated_at, instance.created_at):
            assert moment.tzinfo is None
            assert moment >= before
        assert row.updated_at >= row.created_at
        assert instance.occurs_at == datetime(2024, 1, 5, 22, 0)
