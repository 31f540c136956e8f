"""Human-readable labels for recurrence rules."""
from typing import Any

from ministry.services.recurrence_types import RecurrenceType

WEEKDAY_NAMES = {
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    "pt": ["Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado"],
}
POSITION_NAMES = {
    "en": ["", "1st", "2nd", "3rd", "4th", "last"],
    "pt": ["", "1ª", "2ª", "3ª", "4ª", "Última"],
}


def _pick(names: list, index: Any, fallback: str) -> str:
    if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(names) and names[index]:
        return names[index]
    return fallback


def _describe_en(rule) -> str:
    recurrence_type = getattr(rule, "recurrence_type", None)
    weekday = _pick(WEEKDAY_NAMES["en"], getattr(rule, "weekday", None), "day")

    if recurrence_type == RecurrenceType.WEEKLY:
        text = f"every {weekday}"
    elif recurrence_type == RecurrenceType.INTERVAL_DAYS:
        interval = getattr(rule, "interval_days", None)
        text = "every day" if interval == 1 else f"every {interval or '?'} days"
    elif recurrence_type == RecurrenceType.MONTHLY_POSITION:
        position = _pick(POSITION_NAMES["en"], getattr(rule, "month_position", None), "?")
        text = f"every {position} {weekday} of the month"
    elif recurrence_type == RecurrenceType.MONTHLY_DAY:
        text = f"every day {getattr(rule, 'day_of_month', None) or '?'} of the month"
    else:
        text = "custom recurrence"

    time_of_day = getattr(rule, "time_of_day", None)
    if time_of_day is not None:
        text += f" at {time_of_day.strftime('%H:%M')}"
    end_date = getattr(rule, "end_date", None)
    if end_date is not None:
        text += f" until {end_date.isoformat()}"
    return text


def _describe_pt(rule) -> str:
    recurrence_type = getattr(rule, "recurrence_type", None)
    weekday = _pick(WEEKDAY_NAMES["pt"], getattr(rule, "weekday", None), "dia")

    if recurrence_type == RecurrenceType.WEEKLY:
        text = f"Toda {weekday}"
    elif recurrence_type == RecurrenceType.INTERVAL_DAYS:
        text = f"A cada {getattr(rule, 'interval_days', None) or '?'} dias"
    elif recurrence_type == RecurrenceType.MONTHLY_POSITION:
        position = _pick(POSITION_NAMES["pt"], getattr(rule, "month_position", None), "?")
        text = f"Toda {position} {weekday} do mês"
    elif recurrence_type == RecurrenceType.MONTHLY_DAY:
        text = f"Todo dia {getattr(rule, 'day_of_month', None) or '?'} do mês"
    else:
        text = "Recorrência personalizada"

    time_of_day = getattr(rule, "time_of_day", None)
    if time_of_day is not None:
        text += f" às {time_of_day.strftime('%H:%M')}"
    end_date = getattr(rule, "end_date", None)
    if end_date is not None:
        text += f" até {end_date.strftime('%d/%m/%Y')}"
    return text


def describe_rule(rule, locale: str = "en") -> str:
    """
    Describe a rule in one sentence, e.g. "every 2nd Tuesday of the month at 19:00".

    Never raises: missing or malformed fields degrade to placeholders.
    """
    if locale == "pt":
        return _describe_pt(rule)
    return _describe_en(rule)
