"""Review session queue with requeue-on-failure and single-step undo.

A session owns its ordered items, cursor and undo slot. The card store is
passed in on every operation that writes, and a write must succeed before the
queue moves.
"""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from db.store import CardStore
from models.card import Card
from models.review import Quality, SessionMode, parse_quality
from utils.errors import EmptyQueue, SessionStateError
from utils.ordering import fold_text, order_for_session, shuffle_cards
from utils.sm2 import FLAT, PhaseSchedule, next_state

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass(frozen=True)
class UndoEntry:
    card: Card
    index: int


class UndoSlot:
    """Holds only the most recent review; recording overwrites it."""

    def __init__(self):
        self._entry: Optional[UndoEntry] = None

    @property
    def is_empty(self) -> bool:
        return self._entry is None

    def record(self, card: Card, index: int) -> None:
        self._entry = UndoEntry(card=card, index=index)

    def peek(self) -> Optional[UndoEntry]:
        return self._entry

    def take(self) -> Optional[UndoEntry]:
        entry, self._entry = self._entry, None
        return entry

    def clear(self) -> None:
        self._entry = None


class ReviewSession:
    def __init__(
        self,
        mode: SessionMode,
        *,
        persist: bool,
        schedule: PhaseSchedule = FLAT,
    ):
        self.id = uuid.uuid4().hex
        self.mode = SessionMode(mode)
        self.persist = persist
        self.schedule = schedule
        self.items: List[Card] = []
        self.cursor = 0
        self.reviewed_count = 0
        self.state = SessionState.IDLE
        self.undo_slot = UndoSlot()

    def start(self, ordered_items: List[Card]) -> None:
        if self.state == SessionState.ACTIVE:
            raise SessionStateError("Session is already active")
        if not ordered_items:
            raise EmptyQueue("Nothing to do: no cards for this session")
        self.items = list(ordered_items)
        self.cursor = 0
        self.reviewed_count = 0
        self.undo_slot.clear()
        self.state = SessionState.ACTIVE
        logger.info(
            "Started %s session %s with %d cards (persist=%s)",
            self.mode.value, self.id, len(self.items), self.persist,
        )

    def current(self) -> Optional[Card]:
        if self.cursor >= len(self.items):
            return None
        return self.items[self.cursor]

    def progress(self) -> Tuple[int, int]:
        return self.cursor, len(self.items)

    @property
    def can_undo(self) -> bool:
        return not self.undo_slot.is_empty

    def submit_review(self, quality, store: CardStore, now: datetime) -> Card:
        quality = parse_quality(quality)
        if self.state != SessionState.ACTIVE:
            raise SessionStateError(f"Cannot review in {self.state.value} session")
        card = self.items[self.cursor]
        updated = next_state(card, quality, now, self.schedule)
        if self.persist:
            store.persist(updated.id, updated)

        self.undo_slot.record(card, self.cursor)
        if quality == Quality.FAIL:
            self.items.pop(self.cursor)
            self.items.append(updated)
        else:
            self.items[self.cursor] = updated
            self.reviewed_count += 1
            self.cursor += 1
        logger.debug(
            "Card %s rated %s: reps=%d interval=%d due=%s",
            card.id, quality.name, updated.repetitions, updated.interval, updated.due_at.isoformat(),
        )

        if self.cursor >= len(self.items):
            self.state = SessionState.COMPLETE
            logger.info("Session %s complete, %d cards reviewed", self.id, self.reviewed_count)
        return updated

    def undo(self, store: CardStore) -> Optional[Card]:
        """Revert the last review. Only one step is kept."""
        if self.undo_slot.is_empty:
            return None
        entry = self.undo_slot.peek()
        if self.persist:
            store.persist(entry.card.id, entry.card)
        self.undo_slot.take()

        self.items = [card for card in self.items if card.id != entry.card.id]
        self.items.insert(entry.index, entry.card)
        self.cursor = entry.index
        if self.reviewed_count > 0:
            self.reviewed_count -= 1
        self.state = SessionState.ACTIVE
        logger.info("Session %s undid review of card %s", self.id, entry.card.id)
        return entry.card

    def abandon(self) -> None:
        self.items = []
        self.cursor = 0
        self.undo_slot.clear()
        self.state = SessionState.IDLE
        logger.info("Session %s abandoned", self.id)


def build_session(
    store: CardStore,
    mode: SessionMode,
    now: datetime,
    *,
    persist: bool,
    shuffle: bool = False,
    schedule: PhaseSchedule = FLAT,
    collate: Callable[[str], Any] = fold_text,
    rng: Optional[random.Random] = None,
) -> ReviewSession:
    """Load candidates for the mode, order them and start a session."""
    mode = SessionMode(mode)
    if mode == SessionMode.STUDY:
        candidates = store.load_due(now)
    else:
        candidates = store.load_all()

    if shuffle and mode == SessionMode.PRACTICE:
        ordered = shuffle_cards(candidates, rng)
    else:
        ordered = order_for_session(candidates, schedule, collate)

    session = ReviewSession(mode, persist=persist, schedule=schedule)
    session.start(ordered)
    return session


class SessionRegistry:
    """Open sessions keyed by id, for the HTTP layer."""

    def __init__(self):
        self._sessions: Dict[str, ReviewSession] = {}

    def add(self, session: ReviewSession) -> None:
        self._sessions[session.id] = session

    def replace(self, session: ReviewSession) -> int:
        """Make ``session`` the only open one; returns how many were evicted."""
        stale = [old for old in self._sessions.values() if old.id != session.id]
        for old in stale:
            old.abandon()
        evicted = len(stale)
        self._sessions = {session.id: session}
        if evicted:
            logger.info("Evicted %d previous session(s) for %s", evicted, session.id)
        return evicted

    def get(self, session_id: str) -> Optional[ReviewSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[ReviewSession]:
        return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
