"""SM-2 review policy with a configurable phase schedule.

A schedule is an ordered table of steps. A card with ``repetitions`` below the
table length is on that step (a minutes step is "learning", a days step is
"graduated"); past the end of the table it is "mature" and its interval grows
by the ease factor.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from models.card import Card, MIN_EASE_FACTOR
from models.review import Quality

MINUTES = "minutes"
DAYS = "days"

DEFAULT_FAIL_DELAY = timedelta(seconds=60)
DEFAULT_EASY_BONUS = 1.3


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Step:
    amount: int
    unit: str = DAYS

    def __post_init__(self):
        if self.unit not in (MINUTES, DAYS):
            raise ValueError(f"Unknown step unit: {self.unit}")
        if self.amount <= 0:
            raise ValueError("Step amount must be positive")


@dataclass(frozen=True)
class PhaseSchedule:
    name: str
    steps: Tuple[Step, ...]
    easy_skips_steps: bool = False
    easy_bonus: float = DEFAULT_EASY_BONUS
    fail_delay: timedelta = field(default=DEFAULT_FAIL_DELAY)

    def __post_init__(self):
        day_amounts = [step.amount for step in self.steps if step.unit == DAYS]
        if day_amounts != sorted(day_amounts):
            raise ValueError("Day steps must be ascending")
        seen_days = False
        for step in self.steps:
            if step.unit == DAYS:
                seen_days = True
            elif seen_days:
                raise ValueError("Minute steps must come before day steps")
        if self.easy_bonus < 1:
            raise ValueError("easy_bonus must be >= 1")

    @property
    def mature_threshold(self) -> int:
        return len(self.steps)


FLAT = PhaseSchedule(name="flat", steps=(Step(1), Step(6)))
GRADUATED = PhaseSchedule(
    name="graduated",
    steps=(Step(10, MINUTES), Step(1), Step(3), Step(7)),
    easy_skips_steps=True,
)
PRESETS = {FLAT.name: FLAT, GRADUATED.name: GRADUATED}


def phase_for(repetitions: int, schedule: PhaseSchedule = FLAT) -> str:
    if repetitions >= schedule.mature_threshold:
        return "mature"
    if schedule.steps[repetitions].unit == MINUTES:
        return "learning"
    return "graduated"


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3."""
    q = int(quality)
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))


def _step_outcome(step: Step, multiplier: float = 1.0) -> Tuple[int, timedelta]:
    amount = round_half_up(step.amount * multiplier) if multiplier != 1.0 else step.amount
    if step.unit == MINUTES:
        return 0, timedelta(minutes=amount)
    return amount, timedelta(days=amount)


def next_state(
    card: Card,
    quality: Quality,
    now: datetime,
    schedule: PhaseSchedule = FLAT,
) -> Card:
    """Compute the card's scheduling state after a review. Input is not modified."""
    if quality < Quality.GOOD:
        return card.model_copy(update={
            "repetitions": 0,
            "interval": 0,
            "due_at": now + schedule.fail_delay,
            "last_reviewed_at": now,
        })

    ease_factor = update_ease_factor(card.ease_factor, quality)
    easy = quality == Quality.EASY
    reps = card.repetitions
    advance = 1

    if reps < schedule.mature_threshold:
        if easy and schedule.easy_skips_steps and reps + 1 < schedule.mature_threshold:
            interval, delay = _step_outcome(schedule.steps[reps + 1])
            advance = 2
        else:
            multiplier = schedule.easy_bonus if easy else 1.0
            interval, delay = _step_outcome(schedule.steps[reps], multiplier)
    else:
        interval = max(1, round_half_up(card.interval * ease_factor))
        if easy:
            interval = round_half_up(interval * schedule.easy_bonus)
        delay = timedelta(days=interval)

    return card.model_copy(update={
        "ease_factor": ease_factor,
        "interval": interval,
        "repetitions": reps + advance,
        "due_at": now + delay,
        "last_reviewed_at": now,
    })


def schedule_from_config(config: Optional[Dict[str, Any]] = None) -> PhaseSchedule:
    """Build the schedule described by the [scheduler] config table."""
    scheduler_cfg = (config or {}).get("scheduler", {})
    preset_name = str(scheduler_cfg.get("preset", FLAT.name)).lower()
    if preset_name not in PRESETS:
        raise ValueError(f"Unknown scheduler preset: {preset_name}")
    base = PRESETS[preset_name]

    steps = base.steps
    learning_minutes = scheduler_cfg.get("learning_minutes")
    graduated_steps = scheduler_cfg.get("graduated_steps")
    if learning_minutes is not None or graduated_steps is not None:
        minute_steps = [s for s in base.steps if s.unit == MINUTES]
        day_steps = [s for s in base.steps if s.unit == DAYS]
        if learning_minutes is not None:
            minute_steps = [Step(int(learning_minutes), MINUTES)] if int(learning_minutes) > 0 else []
        if graduated_steps is not None:
            day_steps = [Step(int(days)) for days in graduated_steps]
        steps = tuple(minute_steps + day_steps)

    fail_delay = base.fail_delay
    if scheduler_cfg.get("fail_delay_seconds") is not None:
        fail_delay = timedelta(seconds=int(scheduler_cfg["fail_delay_seconds"]))

    return PhaseSchedule(
        name=preset_name,
        steps=steps,
        easy_skips_steps=bool(scheduler_cfg.get("easy_skips_steps", base.easy_skips_steps)),
        easy_bonus=float(scheduler_cfg.get("easy_bonus", base.easy_bonus)),
        fail_delay=fail_delay,
    )
