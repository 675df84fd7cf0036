from datetime import datetime, timedelta, timezone

import pytest

from db.store import from_db_timestamp, to_db_timestamp
from models.card import new_card
from models.review import Quality
from tests.helpers import NOW, make_card
from utils.errors import PersistenceFailure
from utils.sm2 import next_state


def test_add_and_load_round_trips_fields(store):
    card = make_card(front="źdźbło", ease_factor=2.123456789, last_reviewed_at=NOW)
    store.add([card])
    assert store.get(card.id) == card
    assert store.load_all() == [card]
    assert store.count() == 1


def test_load_due_filters_by_timestamp(store):
    due = make_card(id="due", due_at=NOW - timedelta(microseconds=1))
    exact = make_card(id="exact", due_at=NOW)
    later = make_card(id="later", due_at=NOW + timedelta(seconds=1))
    store.add([later, exact, due])
    assert sorted(card.id for card in store.load_due(NOW)) == ["due", "exact"]
    assert store.count_due(NOW) == 2


def test_persist_writes_new_state(store):
    card = make_card()
    store.add([card])
    updated = next_state(card, Quality.GOOD, NOW)
    store.persist(card.id, updated)
    assert store.get(card.id) == updated


def test_persist_unknown_card_fails(store):
    with pytest.raises(PersistenceFailure) as excinfo:
        store.persist("missing", make_card(id="missing"))
    assert excinfo.value.card_id == "missing"


def test_persist_rejects_mismatched_id(store):
    store.add([make_card(id="a")])
    with pytest.raises(PersistenceFailure):
        store.persist("a", make_card(id="b"))


def test_update_text_keeps_schedule(store):
    card = next_state(make_card(), Quality.GOOD, NOW)
    store.add([card])
    edited = store.update_text(card.id, "kotek", "kitten")
    assert (edited.front, edited.back) == ("kotek", "kitten")
    assert edited.model_dump(exclude={"front", "back"}) == card.model_dump(exclude={"front", "back"})
    assert store.update_text("missing", "a", "b") is None


def test_persist_does_not_revert_edited_text(store):
    card = make_card()
    store.add([card])
    store.update_text(card.id, "kotek", "kitten")
    # a session still holds the pre-edit snapshot
    store.persist(card.id, next_state(card, Quality.GOOD, NOW))
    saved = store.get(card.id)
    assert (saved.front, saved.back) == ("kotek", "kitten")
    assert saved.repetitions == 1


def test_delete(store):
    store.add([make_card(id="a")])
    assert store.delete("a") is True
    assert store.delete("a") is False
    assert store.get("a") is None


def test_new_card_defaults():
    card = new_card("  pies ", "dog", NOW)
    assert card.front == "pies"
    assert (card.interval, card.ease_factor, card.repetitions) == (0, 2.5, 0)
    assert card.due_at == card.created_at == NOW
    assert card.last_reviewed_at is None
    with pytest.raises(ValueError):
        new_card("   ", "dog", NOW)


def test_timestamps_normalised_to_utc():
    plus_two = timezone(timedelta(hours=2))
    local = datetime(2026, 1, 5, 11, 0, tzinfo=plus_two)
    stored = to_db_timestamp(local)
    assert stored == "2026-01-05T09:00:00.000000+00:00"
    assert from_db_timestamp(stored) == NOW
