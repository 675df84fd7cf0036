# SQL schema for the spacedeck database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Cards (with SM-2 scheduling fields)
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    front TEXT NOT NULL,
    back TEXT NOT NULL,
    interval INTEGER NOT NULL DEFAULT 0 CHECK(interval >= 0),
    ease_factor REAL NOT NULL DEFAULT 2.5 CHECK(ease_factor >= 1.3),
    repetitions INTEGER NOT NULL DEFAULT 0 CHECK(repetitions >= 0),
    due_at TEXT NOT NULL,
    last_reviewed_at TEXT,
    created_at TEXT NOT NULL
);

-- Per-day review activity (today count and streak)
CREATE TABLE IF NOT EXISTS daily_activity (
    day TEXT PRIMARY KEY,
    reviews INTEGER NOT NULL DEFAULT 0,
    sessions_completed INTEGER NOT NULL DEFAULT 0
);
"""

INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_cards_due_at ON cards (due_at);
CREATE INDEX IF NOT EXISTS idx_cards_created_at ON cards (created_at);
"""
