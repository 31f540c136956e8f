"""Recurrence Validator."""
from typing import Dict, Any, Optional

from ministry.services.errors import InvalidRule
from ministry.services.recurrence_types import (
    ALL_VARIANT_FIELDS,
    LAST_POSITION,
    RecurrenceRule,
    RecurrenceType,
    VARIANT_FIELDS,
)


class RecurrenceValidator:
    """Validate recurrence rules before anything is generated or stored."""

    @staticmethod
    def validate_variant_fields(rule: RecurrenceRule) -> Dict[str, Any]:
        """
        Check that exactly the fields of the rule's recurrence type are populated.

        Args:
            rule: Rule to check

        Returns:
            Dict with validation result
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        try:
            recurrence_type = RecurrenceType(rule.recurrence_type)
        except ValueError:
            result["valid"] = False
            result["errors"].append(
                "Recurrence type must be one of: WEEKLY, INTERVAL_DAYS, MONTHLY_POSITION, MONTHLY_DAY"
            )
            return result

        required = VARIANT_FIELDS[recurrence_type]
        for name in required:
            if getattr(rule, name) is None:
                result["valid"] = False
                result["errors"].append(f"{recurrence_type.value} recurrence requires {name}")

        for name in ALL_VARIANT_FIELDS:
            if name not in required and getattr(rule, name) is not None:
                result["valid"] = False
                result["errors"].append(f"{name} is not allowed for {recurrence_type.value} recurrence")

        if not result["valid"]:
            return result

        if rule.weekday is not None and not RecurrenceValidator._in_range(rule.weekday, 0, 6):
            result["valid"] = False
            result["errors"].append(f"weekday must be between 0 (Sunday) and 6 (Saturday), got {rule.weekday}")

        if rule.interval_days is not None and not RecurrenceValidator._in_range(rule.interval_days, 1, None):
            result["valid"] = False
            result["errors"].append(f"interval_days must be a positive integer, got {rule.interval_days}")

        if rule.month_position is not None and not RecurrenceValidator._in_range(rule.month_position, 1, LAST_POSITION):
            result["valid"] = False
            result["errors"].append(f"month_position must be between 1 and {LAST_POSITION} (last), got {rule.month_position}")

        if rule.day_of_month is not None:
            if not RecurrenceValidator._in_range(rule.day_of_month, 1, 31):
                result["valid"] = False
                result["errors"].append(f"day_of_month must be between 1 and 31, got {rule.day_of_month}")
            elif rule.day_of_month > 28:
                result["warnings"].append(f"Months without day {rule.day_of_month} will be skipped")

        return result

    @staticmethod
    def validate_date_range(rule: RecurrenceRule) -> Dict[str, Any]:
        """
        Check the rule's start/end bounds and time of day.

        Args:
            rule: Rule to check

        Returns:
            Dict with validation result
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        if rule.start_date is None:
            result["valid"] = False
            result["errors"].append("start_date is required")
            return result

        if rule.time_of_day is None:
            result["valid"] = False
            result["errors"].append("time_of_day is required")

        if rule.end_date is not None and rule.start_date > rule.end_date:
            result["valid"] = False
            result["errors"].append(
                f"start_date {rule.start_date.isoformat()} is after end_date {rule.end_date.isoformat()}"
            )

        if rule.end_date is None:
            result["warnings"].append("Open-ended rule: occurrences are capped by the generation horizon")

        return result

    @staticmethod
    def validate_rule(rule: RecurrenceRule, check_dates: bool = True) -> Dict[str, Any]:
        """
        Validate a complete rule.

        Args:
            rule: Rule to check
            check_dates: Also validate start/end bounds

        Returns:
            Dict with validation result
        """
        result = RecurrenceValidator.validate_variant_fields(rule)
        if check_dates:
            dates = RecurrenceValidator.validate_date_range(rule)
            result["valid"] = result["valid"] and dates["valid"]
            result["errors"].extend(dates["errors"])
            result["warnings"].extend(dates["warnings"])

        if not (rule.title or "").strip():
            result["valid"] = False
            result["errors"].append("title is required")

        if rule.category is None:
            result["valid"] = False
            result["errors"].append("category must be a string, use \"\" for no category")

        return result

    @staticmethod
    def _in_range(value: Any, low: int, high: Optional[int]) -> bool:
        # bool is an int subclass; True must not pass as weekday 1
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        if value < low:
            return False
        return high is None or value <= high


def ensure_valid(rule: RecurrenceRule, check_dates: bool = True) -> RecurrenceRule:
    """
    Raise InvalidRule unless `rule` passes validation.

    Args:
        rule: Rule to check
        check_dates: Also reject start_date > end_date

    Returns:
        The rule itself, for chaining
    """
    result = RecurrenceValidator.validate_rule(rule, check_dates=check_dates)
    if not result["valid"]:
        raise InvalidRule(result["errors"])
    return rule
