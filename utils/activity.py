from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional


def local_today(now: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of `now` in `tz`, or the machine's local zone when omitted."""
    return now.astimezone(tz).date()


def increment_today_count(conn: sqlite3.Connection, today: date) -> int:
    """Count one review for today and return the new total."""
    conn.execute(
        """
        INSERT INTO daily_activity (day, reviews) VALUES (?, 1)
        ON CONFLICT(day) DO UPDATE SET reviews = reviews + 1
        """,
        (today.isoformat(),),
    )
    conn.commit()
    return get_today_count(conn, today)


def get_today_count(conn: sqlite3.Connection, today: date) -> int:
    cursor = conn.cursor()
    cursor.execute("SELECT reviews FROM daily_activity WHERE day = ?", (today.isoformat(),))
    row = cursor.fetchone()
    return int(row["reviews"]) if row else 0


def record_study_session(conn: sqlite3.Connection, today: date) -> None:
    """Mark today as a study day for the streak."""
    conn.execute(
        """
        INSERT INTO daily_activity (day, sessions_completed) VALUES (?, 1)
        ON CONFLICT(day) DO UPDATE SET sessions_completed = sessions_completed + 1
        """,
        (today.isoformat(),),
    )
    conn.commit()


def _last_study_day(conn: sqlite3.Connection, on_or_before: date) -> Optional[date]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT MAX(day) AS day FROM daily_activity
        WHERE sessions_completed > 0 AND day <= ?
        """,
        (on_or_before.isoformat(),),
    )
    row = cursor.fetchone()
    if not row or row["day"] is None:
        return None
    return date.fromisoformat(row["day"])


def current_streak(conn: sqlite3.Connection, today: date) -> int:
    """Consecutive study days ending today, or yesterday if today has none yet."""
    last_day = _last_study_day(conn, today)
    if last_day is None or last_day < today - timedelta(days=1):
        return 0
    cursor = conn.cursor()
    cursor.execute(
        "SELECT day FROM daily_activity WHERE sessions_completed > 0 AND day <= ? ORDER BY day DESC",
        (last_day.isoformat(),),
    )
    streak = 0
    expected = last_day
    for row in cursor.fetchall():
        day = date.fromisoformat(row["day"])
        if day != expected:
            break
        streak += 1
        expected = day - timedelta(days=1)
    return streak
