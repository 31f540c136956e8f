"""
Recurrence lifecycle management.

Keeps a rule's `active` flag consistent with the event instances it owns:

- create_rule: persist the rule, then materialize its occurrences
- deactivate: delete future instances, keep past ones, mark the rule inactive
- reactivate: regenerate from today under the same rule id, mark it active
- delete_rule: delete every owned instance, then the rule

Each operation awaits one store call at a time and stops at the first failed
step, raising StoreFailure. Later steps (in particular flipping `active`) are
never attempted after a failure. Rules are frozen; operations return the rule
as it stands afterwards instead of mutating the caller's object.
"""

from datetime import date, datetime
from typing import Any, Awaitable, Dict, List, Optional

from ministry.services.errors import StoreFailure
from ministry.services.interfaces import Clock, EventPublisher, EventStore, RuleStore
from ministry.services.occurrence_generator import generate_occurrences
from ministry.services.recurrence_types import LifecycleResult, Outcome, RecurrenceRule
from ministry.services.recurrence_validator import ensure_valid
from ministry.utils.logger import get_logger
from ministry.utils.metrics import metrics_collector

logger = get_logger("recurrence-lifecycle")


class RecurrenceLifecycleManager:
    """Orchestrates recurrence rules and the event instances they own."""

    def __init__(
        self,
        rule_store: RuleStore,
        event_store: EventStore,
        clock: Clock,
        publisher: Optional[EventPublisher] = None,
        horizon_days: Optional[int] = None,
    ):
        self.rule_store = rule_store
        self.event_store = event_store
        self.clock = clock
        self.publisher = publisher
        self.horizon_days = horizon_days

    async def _step(self, step: str, rule_id: Optional[str], call: Awaitable[Any]) -> Any:
        """Await one store call, converting any failure into StoreFailure."""
        try:
            return await call
        except Exception as e:
            metrics_collector.store_failure()
            logger.error("Store step failed", step=step, rule_id=rule_id, error=str(e))
            raise StoreFailure(step=step, rule_id=rule_id, reason=str(e)) from e

    async def _notify(self, event_type: str, rule: RecurrenceRule, **data) -> None:
        if self.publisher is None:
            return
        payload: Dict[str, Any] = {"rule_id": rule.id, "active": rule.active, **data}
        try:
            await self.publisher.publish(event_type, payload)
        except Exception as e:
            # The stores already committed; a lost notification must not surface as a failure
            logger.warning("Failed to publish lifecycle event", event_type=event_type, rule_id=rule.id, error=str(e))

    def _tz(self):
        return getattr(self.clock, "tz", None) or self.clock.now().tzinfo

    def occurrences_for(self, rule: RecurrenceRule) -> List[datetime]:
        """Occurrence timestamps of `rule` in the clock's timezone."""
        tz = self._tz()
        # pytz zones need localize(); plain tzinfo objects (e.g. datetime.timezone) don't have it
        if tz is not None and not hasattr(tz, "localize"):
            return [moment.replace(tzinfo=tz) for moment in generate_occurrences(rule, horizon_days=self.horizon_days)]
        return generate_occurrences(rule, tz=tz, horizon_days=self.horizon_days)

    async def _bulk_create(self, rule: RecurrenceRule, occurrences: List[datetime]) -> int:
        drafts = [rule.draft_for(moment) for moment in occurrences]
        created = await self._step("bulk_create_instances", rule.id, self.event_store.bulk_create(drafts))
        metrics_collector.instances_created(created)
        return created

    async def create_rule(self, rule: RecurrenceRule) -> LifecycleResult:
        """
        Persist a new rule as active and materialize its occurrences.

        Args:
            rule: Unsaved rule (its id and active flag are ignored)

        Returns:
            LifecycleResult with the persisted rule and the number of instances
            created; outcome EMPTY when the rule produced no occurrences

        Raises:
            InvalidRule: Before anything is stored
            StoreFailure: If persisting the rule or its instances fails. When
                only the instance step failed the rule exists and `materialize`
                can be re-run for it.
        """
        ensure_valid(rule)
        with metrics_collector.time_operation("lifecycle.create_rule"):
            saved = await self._step(
                "create_rule", None, self.rule_store.create(rule.with_changes(id=None, active=True))
            )
            metrics_collector.rule_created()
            logger.info("Recurrence rule created", rule_id=saved.id, recurrence_type=saved.recurrence_type.value)

            result = await self.materialize(saved)

        await self._notify("recurrence.created", result.rule, instances_created=result.count)
        return result

    async def materialize(self, rule: RecurrenceRule, from_date: Optional[date] = None) -> LifecycleResult:
        """
        Generate and bulk-create instances for an already persisted rule.

        Args:
            rule: Persisted rule
            from_date: Generate from this date instead of the rule's start_date

        Returns:
            LifecycleResult with the number of instances created
        """
        view = rule if from_date is None else rule.with_changes(start_date=from_date)
        occurrences = self.occurrences_for(view)
        if not occurrences:
            metrics_collector.empty_generation()
            logger.warning("Rule produced no occurrences", rule_id=rule.id)
            return LifecycleResult(rule=rule, outcome=Outcome.EMPTY)

        created = await self._bulk_create(rule, occurrences)
        logger.info("Instances materialized", rule_id=rule.id, created=created)
        return LifecycleResult(rule=rule, outcome=Outcome.CREATED, count=created, occurrences=occurrences)

    async def deactivate(self, rule: RecurrenceRule) -> LifecycleResult:
        """
        Remove the rule's future instances and mark it inactive.

        Instances that already happened are kept as historical record. If the
        deletion fails the rule is left exactly as it was. Calling it again on
        an inactive rule is harmless.

        Returns:
            LifecycleResult whose count is the number of instances deleted
        """
        now = self.clock.now()
        with metrics_collector.time_operation("lifecycle.deactivate"):
            deleted = await self._step(
                "delete_future_instances", rule.id, self.event_store.delete_where(rule.id, occurs_at_from=now)
            )
            metrics_collector.instances_deleted(deleted)

            updated = await self._step("mark_inactive", rule.id, self.rule_store.update(rule.with_changes(active=False)))

        logger.info("Recurrence rule deactivated", rule_id=rule.id, deleted=deleted, cutoff=now)
        await self._notify("recurrence.deactivated", updated, instances_deleted=deleted)
        return LifecycleResult(rule=updated, outcome=Outcome.DEACTIVATED, count=deleted)

    async def reactivate(self, rule: RecurrenceRule) -> LifecycleResult:
        """
        Regenerate the rule's instances from today and mark it active.

        Occurrences come from the rule's current parameters with start_date
        moved to today; only those at or after now are created, so past
        history is never duplicated. This does not restore what deactivate
        removed if the parameters changed in between.

        Returns:
            LifecycleResult whose count is the number of instances created;
            UNCHANGED when the rule was already active
        """
        if rule.active:
            logger.info("Rule already active, nothing to regenerate", rule_id=rule.id)
            return LifecycleResult(rule=rule, outcome=Outcome.UNCHANGED)

        now = self.clock.now()
        today = now.date()
        with metrics_collector.time_operation("lifecycle.reactivate"):
            # An end_date already in the past leaves an empty range, not an error
            view = rule.with_changes(start_date=today)
            occurrences = [moment for moment in self.occurrences_for(view) if moment >= now]

            created = 0
            if occurrences:
                created = await self._bulk_create(rule, occurrences)
            else:
                metrics_collector.empty_generation()

            updated = await self._step("mark_active", rule.id, self.rule_store.update(rule.with_changes(active=True)))

        logger.info("Recurrence rule reactivated", rule_id=rule.id, created=created)
        await self._notify("recurrence.reactivated", updated, instances_created=created)
        outcome = Outcome.CREATED if created else Outcome.EMPTY
        return LifecycleResult(rule=updated, outcome=outcome, count=created, occurrences=occurrences)

    async def toggle_active(self, rule: RecurrenceRule) -> LifecycleResult:
        """Deactivate an active rule or reactivate an inactive one."""
        if rule.active:
            return await self.deactivate(rule)
        return await self.reactivate(rule)

    async def delete_rule(self, rule: RecurrenceRule) -> LifecycleResult:
        """
        Delete every instance the rule owns, past and future, then the rule.

        Irreversible. If instance deletion fails the rule is kept.

        Returns:
            LifecycleResult whose count is the number of instances deleted
        """
        with metrics_collector.time_operation("lifecycle.delete_rule"):
            deleted = await self._step("delete_all_instances", rule.id, self.event_store.delete_where(rule.id))
            metrics_collector.instances_deleted(deleted)

            await self._step("delete_rule", rule.id, self.rule_store.delete(rule))

        logger.info("Recurrence rule deleted", rule_id=rule.id, deleted=deleted)
        await self._notify("recurrence.deleted", rule, instances_deleted=deleted)
        return LifecycleResult(rule=rule, outcome=Outcome.DELETED, count=deleted)

    async def update_rule(self, rule: RecurrenceRule, **changes) -> RecurrenceRule:
        """
        Persist edited rule parameters.

        Existing instances are left alone; the new parameters apply to the next
        reactivation or materialization. `id` and `active` cannot be changed
        here.
        """
        changes.pop("id", None)
        changes.pop("active", None)
        edited = ensure_valid(rule.with_changes(**changes))
        updated = await self._step("update_rule", rule.id, self.rule_store.update(edited))

        logger.info("Recurrence rule updated", rule_id=rule.id, fields=sorted(changes))
        await self._notify("recurrence.updated", updated, fields=sorted(changes))
        return updated
