from datetime import datetime, timedelta
from typing import Dict

from models.card import Card
from models.review import Quality, parse_quality
from utils.sm2 import FLAT, PhaseSchedule, next_state, round_half_up

FAIL_HINT = "<1min"


def _plural(count, unit: str) -> str:
    return f"1 {unit}" if count == 1 else f"{count} {unit}s"


def format_duration(delta: timedelta) -> str:
    """Human-readable duration: minutes, hours, days, months, then years."""
    minutes = round_half_up(delta.total_seconds() / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours = round_half_up(minutes / 60)
    if minutes < 24 * 60:
        return _plural(hours, "hour")
    days = round_half_up(delta.total_seconds() / 86400)
    if days < 30:
        return _plural(days, "day")
    if days < 365:
        return _plural(round_half_up(days / 30), "month")
    years = round_half_up(days / 365 * 10) / 10
    return _plural(int(years) if years.is_integer() else years, "year")


def preview(card: Card, quality, now: datetime, schedule: PhaseSchedule = FLAT) -> str:
    """Interval hint for a hypothetical rating; nothing is committed."""
    quality = parse_quality(quality)
    if quality == Quality.FAIL:
        return FAIL_HINT
    simulated = next_state(card, quality, now, schedule)
    return format_duration(simulated.due_at - now)


def preview_all(card: Card, now: datetime, schedule: PhaseSchedule = FLAT) -> Dict[str, str]:
    return {q.name.lower(): preview(card, q, now, schedule) for q in Quality}
