from datetime import datetime, timezone

from models.card import Card

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_card(**overrides) -> Card:
    fields = {
        "id": "card-1",
        "front": "kot",
        "back": "cat",
        "interval": 0,
        "ease_factor": 2.5,
        "repetitions": 0,
        "due_at": NOW,
        "last_reviewed_at": None,
        "created_at": NOW,
    }
    fields.update(overrides)
    return Card(**fields)
