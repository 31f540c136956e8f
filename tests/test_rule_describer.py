"""Tests for rule descriptions."""

from datetime import date, time
from types import SimpleNamespace

import pytest

from conftest import make_rule
from ministry.services.recurrence_types import RecurrenceType
from ministry.services.rule_describer import describe_rule


def test_weekly_with_end_date():
    assert describe_rule(make_rule()) == "every Friday at 19:00 until 2024-01-31"


def test_interval_open_ended():
    rule = make_rule(recurrence_type=RecurrenceType.INTERVAL_DAYS, weekday=None, interval_days=15, end_date=None)
    assert describe_rule(rule) == "every 15 days at 19:00"


def test_monthly_position():
    rule = make_rule(recurrence_type=RecurrenceType.MONTHLY_POSITION, month_position=2, weekday=2, end_date=None)
    assert describe_rule(rule) == "every 2nd Tuesday of the month at 19:00"


def test_monthly_last_position():
    rule = make_rule(
        recurrence_type=RecurrenceType.MONTHLY_POSITION, month_position=5, weekday=0,
        time_of_day=time(10, 0), end_date=None,
    )
    assert describe_rule(rule) == "every last Sunday of the month at 10:00"


def test_monthly_day():
    rule = make_rule(recurrence_type=RecurrenceType.MONTHLY_DAY, weekday=None, day_of_month=10, end_date=None)
    assert describe_rule(rule) == "every day 10 of the month at 19:00"


def test_portuguese_labels():
    assert describe_rule(make_rule(), locale="pt") == "Toda Sexta às 19:00 até 31/01/2024"
    rule = make_rule(recurrence_type=RecurrenceType.MONTHLY_POSITION, month_position=5, weekday=6, end_date=None)
    assert describe_rule(rule, locale="pt") == "Toda Última Sábado do mês às 19:00"


@pytest.mark.parametrize("recurrence_type", list(RecurrenceType))
@pytest.mark.parametrize("locale", ["en", "pt"])
def test_never_raises_on_incomplete_rules(recurrence_type, locale):
    rule = make_rule(recurrence_type=recurrence_type, weekday=None, end_date=date(2024, 5, 1))
    text = describe_rule(rule, locale=locale)
    assert text


@pytest.mark.parametrize("bogus", [
    SimpleNamespace(recurrence_type="YEARLY"),
    SimpleNamespace(),
    SimpleNamespace(recurrence_type=RecurrenceType.WEEKLY, weekday=42, time_of_day=None),
    SimpleNamespace(recurrence_type=RecurrenceType.MONTHLY_POSITION, weekday=True, month_position="2"),
])
def test_malformed_input_degrades_to_a_label(bogus):
    assert isinstance(describe_rule(bogus), str)
    assert isinstance(describe_rule(bogus, locale="pt"), str)
