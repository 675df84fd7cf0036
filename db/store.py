"""Card storage collaborator backed by SQLite."""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol

from models.card import Card
from utils.errors import PersistenceFailure

logger = logging.getLogger(__name__)

CARD_COLUMNS = (
    "id",
    "front",
    "back",
    "interval",
    "ease_factor",
    "repetitions",
    "due_at",
    "last_reviewed_at",
    "created_at",
)


class CardStore(Protocol):
    def load_due(self, before: datetime) -> List[Card]: ...

    def load_all(self) -> List[Card]: ...

    def persist(self, card_id: str, card: Card) -> None: ...


def to_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with fixed microsecond precision, so text order is time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def card_from_row(row: sqlite3.Row) -> Card:
    return Card(
        id=row["id"],
        front=row["front"],
        back=row["back"],
        interval=int(row["interval"]),
        ease_factor=float(row["ease_factor"]),
        repetitions=int(row["repetitions"]),
        due_at=from_db_timestamp(row["due_at"]),
        last_reviewed_at=from_db_timestamp(row["last_reviewed_at"]),
        created_at=from_db_timestamp(row["created_at"]),
    )


def card_to_params(card: Card) -> tuple:
    return (
        card.id,
        card.front,
        card.back,
        card.interval,
        card.ease_factor,
        card.repetitions,
        to_db_timestamp(card.due_at),
        to_db_timestamp(card.last_reviewed_at),
        to_db_timestamp(card.created_at),
    )


class SQLiteCardStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def load_due(self, before: datetime) -> List[Card]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM cards WHERE due_at <= ? ORDER BY due_at ASC",
            (to_db_timestamp(before),),
        )
        return [card_from_row(row) for row in cursor.fetchall()]

    def load_all(self) -> List[Card]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM cards ORDER BY created_at ASC, id ASC")
        return [card_from_row(row) for row in cursor.fetchall()]

    def get(self, card_id: str) -> Optional[Card]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
        row = cursor.fetchone()
        return card_from_row(row) if row else None

    def add(self, cards: Iterable[Card]) -> int:
        rows = [card_to_params(card) for card in cards]
        placeholders = ", ".join("?" for _ in CARD_COLUMNS)
        self.conn.executemany(
            f"INSERT INTO cards ({', '.join(CARD_COLUMNS)}) VALUES ({placeholders})",
            rows,
        )
        self.conn.commit()
        return len(rows)

    def persist(self, card_id: str, card: Card) -> None:
        """Write the card's scheduling fields; raises PersistenceFailure if nothing was stored.

        Text and creation time are left alone so a review never reverts an edit.
        """
        if card.id != card_id:
            raise PersistenceFailure(card_id, f"id mismatch ({card.id})")
        try:
            cursor = self.conn.execute(
                """
                UPDATE cards
                SET interval = ?, ease_factor = ?, repetitions = ?, due_at = ?, last_reviewed_at = ?
                WHERE id = ?
                """,
                (
                    card.interval,
                    card.ease_factor,
                    card.repetitions,
                    to_db_timestamp(card.due_at),
                    to_db_timestamp(card.last_reviewed_at),
                    card_id,
                ),
            )
            if cursor.rowcount == 0:
                self.conn.rollback()
                raise PersistenceFailure(card_id, "card not found")
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            logger.warning("Persisting card %s failed: %s", card_id, exc)
            raise PersistenceFailure(card_id, str(exc)) from exc

    def update_text(self, card_id: str, front: str, back: str) -> Optional[Card]:
        """Change a card's front and back; scheduling state is untouched."""
        cursor = self.conn.execute(
            "UPDATE cards SET front = ?, back = ? WHERE id = ?",
            (front, back, card_id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            return None
        return self.get(card_id)

    def delete(self, card_id: str) -> bool:
        cursor = self.conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def count(self) -> int:
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM cards")
        return int(cursor.fetchone()[0] or 0)

    def count_due(self, before: datetime) -> int:
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM cards WHERE due_at <= ?", (to_db_timestamp(before),))
        return int(cursor.fetchone()[0] or 0)
