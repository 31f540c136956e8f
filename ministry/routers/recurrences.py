"""Recurring event rules router."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional, Dict, Any

from ministry.config import RECURRENCE_HORIZON_DAYS
from ministry.dapr.client import DaprEventPublisher
from ministry.db.config import get_session
from ministry.schemas.recurrence import (
    LifecycleResponse,
    PreviewResponse,
    RecurrenceRuleCreate,
    RecurrenceRuleResponse,
    RecurrenceRuleUpdate,
)
from ministry.services.clock import SystemClock
from ministry.services.errors import InvalidRule, RuleNotFound, StoreFailure, create_error_response
from ministry.services.lifecycle_manager import RecurrenceLifecycleManager
from ministry.services.occurrence_generator import preview_occurrences
from ministry.services.recurrence_types import LifecycleResult, Outcome, RecurrenceRule
from ministry.services.rule_describer import describe_rule
from ministry.services.sql_stores import SQLEventStore, SQLRuleStore
from sqlmodel import Session

router = APIRouter(tags=["Recurrences"])  # No prefix since main.py adds /api/recurrences

PREVIEW_SIZE = 6

_OUTCOME_MESSAGES = {
    Outcome.CREATED: "{count} events created",
    Outcome.EMPTY: "No events were produced by this rule",
    Outcome.DEACTIVATED: "Rule deactivated, {count} future events removed",
    Outcome.DELETED: "Rule and {count} events deleted",
    Outcome.UNCHANGED: "Rule is already active",
}


def get_clock() -> SystemClock:
    """Dependency for the wall clock."""
    return SystemClock()


def get_publisher() -> Optional[DaprEventPublisher]:
    """Dependency for the lifecycle event publisher."""
    return DaprEventPublisher()


def get_rule_store(session: Session = Depends(get_session)) -> SQLRuleStore:
    return SQLRuleStore(session)


def get_event_store(session: Session = Depends(get_session)) -> SQLEventStore:
    return SQLEventStore(session)


def get_lifecycle_manager(
    rule_store: SQLRuleStore = Depends(get_rule_store),
    event_store: SQLEventStore = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
    publisher: Optional[DaprEventPublisher] = Depends(get_publisher),
) -> RecurrenceLifecycleManager:
    """Dependency for getting a RecurrenceLifecycleManager instance."""
    return RecurrenceLifecycleManager(
        rule_store=rule_store,
        event_store=event_store,
        clock=clock,
        publisher=publisher,
        horizon_days=RECURRENCE_HORIZON_DAYS,
    )


def _rule_response(rule: RecurrenceRule, locale: str = "en") -> RecurrenceRuleResponse:
    return RecurrenceRuleResponse(
        id=rule.id,
        title=rule.title,
        description=rule.description,
        category=rule.category,
        group_id=rule.group_id,
        campaign_id=rule.campaign_id,
        recurrence_type=rule.recurrence_type,
        weekday=rule.weekday,
        interval_days=rule.interval_days,
        month_position=rule.month_position,
        day_of_month=rule.day_of_month,
        start_date=rule.start_date,
        end_date=rule.end_date,
        time_of_day=rule.time_of_day,
        active=rule.active,
        summary=describe_rule(rule, locale),
    )


def _lifecycle_response(result: LifecycleResult) -> LifecycleResponse:
    return LifecycleResponse(
        rule=_rule_response(result.rule),
        outcome=result.outcome.value,
        count=result.count,
        message=_OUTCOME_MESSAGES[result.outcome].format(count=result.count),
    )


def _raise_http(error: Exception) -> None:
    """Translate engine errors into HTTP errors."""
    if isinstance(error, InvalidRule):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=create_error_response(error)["error"])
    if isinstance(error, RuleNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=create_error_response(error)["error"])
    if isinstance(error, StoreFailure):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=create_error_response(error)["error"])
    raise error


async def _load_rule(rule_id: str, rule_store: SQLRuleStore) -> RecurrenceRule:
    rule = await rule_store.get(rule_id)
    if rule is None:
        _raise_http(RuleNotFound(rule_id))
    return rule


@router.post("", response_model=LifecycleResponse, status_code=status.HTTP_201_CREATED)
async def create_recurrence(
    rule_data: RecurrenceRuleCreate,
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Create a recurring event rule and generate its events."""
    try:
        result = await manager.create_rule(rule_data.to_rule())
    except (InvalidRule, StoreFailure) as e:
        _raise_http(e)
    return _lifecycle_response(result)


@router.get("", response_model=List[RecurrenceRuleResponse])
async def list_recurrences(
    active: Optional[bool] = Query(None, description="Filter by status: true, false or omitted for all"),
    locale: str = Query("en", description="Language of the rule summaries: en, pt"),
    rule_store: SQLRuleStore = Depends(get_rule_store),
):
    """List recurring event rules, newest first."""
    rules = await rule_store.list_all(active=active)
    return [_rule_response(rule, locale) for rule in rules]


@router.post("/preview", response_model=PreviewResponse)
async def preview_recurrence(
    rule_data: RecurrenceRuleCreate,
    locale: str = Query("en", description="Language of the summary: en, pt"),
    clock: SystemClock = Depends(get_clock),
):
    """Show the first occurrences of a rule before it is saved."""
    rule = rule_data.to_rule()
    try:
        occurrences = preview_occurrences(
            rule, limit=PREVIEW_SIZE + 1, tz=clock.tz, horizon_days=RECURRENCE_HORIZON_DAYS
        )
    except InvalidRule as e:
        _raise_http(e)
    return PreviewResponse(
        summary=describe_rule(rule, locale),
        occurrences=occurrences[:PREVIEW_SIZE],
        has_more=len(occurrences) > PREVIEW_SIZE,
    )


@router.get("/{rule_id}", response_model=RecurrenceRuleResponse)
async def get_recurrence(
    rule_id: str,
    locale: str = Query("en", description="Language of the rule summary: en, pt"),
    rule_store: SQLRuleStore = Depends(get_rule_store),
):
    """Get a specific rule by ID."""
    return _rule_response(await _load_rule(rule_id, rule_store), locale)


@router.put("/{rule_id}", response_model=RecurrenceRuleResponse)
async def update_recurrence(
    rule_id: str,
    rule_data: RecurrenceRuleUpdate,
    rule_store: SQLRuleStore = Depends(get_rule_store),
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Edit a rule; already generated events are left as they are."""
    rule = await _load_rule(rule_id, rule_store)
    try:
        updated = await manager.update_rule(rule, **rule_data.changes())
    except (InvalidRule, StoreFailure) as e:
        _raise_http(e)
    return _rule_response(updated)


@router.post("/{rule_id}/deactivate", response_model=LifecycleResponse)
async def deactivate_recurrence(
    rule_id: str,
    rule_store: SQLRuleStore = Depends(get_rule_store),
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Deactivate a rule, removing its future events and keeping past ones."""
    rule = await _load_rule(rule_id, rule_store)
    try:
        result = await manager.deactivate(rule)
    except StoreFailure as e:
        _raise_http(e)
    return _lifecycle_response(result)


@router.post("/{rule_id}/reactivate", response_model=LifecycleResponse)
async def reactivate_recurrence(
    rule_id: str,
    rule_store: SQLRuleStore = Depends(get_rule_store),
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Reactivate a rule, generating its events again from today."""
    rule = await _load_rule(rule_id, rule_store)
    try:
        result = await manager.reactivate(rule)
    except (InvalidRule, StoreFailure) as e:
        _raise_http(e)
    return _lifecycle_response(result)


@router.post("/{rule_id}/toggle", response_model=LifecycleResponse)
async def toggle_recurrence(
    rule_id: str,
    rule_store: SQLRuleStore = Depends(get_rule_store),
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Switch a rule between active and inactive."""
    rule = await _load_rule(rule_id, rule_store)
    try:
        result = await manager.toggle_active(rule)
    except (InvalidRule, StoreFailure) as e:
        _raise_http(e)
    return _lifecycle_response(result)


@router.delete("/{rule_id}", response_model=LifecycleResponse)
async def delete_recurrence(
    rule_id: str,
    rule_store: SQLRuleStore = Depends(get_rule_store),
    manager: RecurrenceLifecycleManager = Depends(get_lifecycle_manager),
):
    """Delete a rule together with every event it generated."""
    rule = await _load_rule(rule_id, rule_store)
    try:
        result = await manager.delete_rule(rule)
    except StoreFailure as e:
        _raise_http(e)
    return _lifecycle_response(result)


@router.get("/{rule_id}/events/count", response_model=Dict[str, Any])
async def count_recurrence_events(
    rule_id: str,
    upcoming: bool = Query(False, description="Only count events that have not happened yet"),
    rule_store: SQLRuleStore = Depends(get_rule_store),
    event_store: SQLEventStore = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
):
    """Count the events a rule owns."""
    await _load_rule(rule_id, rule_store)
    count = await event_store.count_by_rule(rule_id, occurs_at_from=clock.now() if upcoming else None)
    return {"rule_id": rule_id, "count": count, "upcoming": upcoming}
