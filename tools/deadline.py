from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

from config.settings import MIN_PLAN_WEEKS, MAX_PLAN_WEEKS, DEFAULT_PLAN_WEEKS


def clamp_weeks(value: Any, minimum: int = MIN_PLAN_WEEKS, maximum: int = MAX_PLAN_WEEKS) -> Optional[int]:
    """
    Clamp a week count into [minimum, maximum].

    Returns:
        The clamped int, or None if `value` is not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        weeks = int(float(value))
    except (ValueError, TypeError, OverflowError):
        return None
    return min(maximum, max(minimum, weeks))


def add_weeks(day: date, weeks: int) -> date:
    return day + timedelta(days=weeks * 7)


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse an ISO date/datetime string (or date object) into a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def compute_safe_deadline(
    provided_deadline: Union[str, date, datetime, None] = None,
    provided_weeks: Any = None,
    fallback_weeks: int = DEFAULT_PLAN_WEEKS,
    today: Optional[date] = None,
) -> date:
    """
    Resolve the plan deadline.

    An explicit, parseable deadline is returned as-is (the week clamp does not
    apply to it). Otherwise the deadline is today + clamped weeks, where the
    week count is `provided_weeks` (or `fallback_weeks` when None) clamped to
    [4, 52]; non-numeric input degrades to 4 weeks. Never raises.
    """
    weeks = provided_weeks if provided_weeks is not None else fallback_weeks
    safe_weeks = clamp_weeks(weeks)
    if safe_weeks is None:
        safe_weeks = MIN_PLAN_WEEKS

    explicit = parse_date(provided_deadline)
    if explicit is not None:
        return explicit

    return add_weeks(today or date.today(), safe_weeks)
