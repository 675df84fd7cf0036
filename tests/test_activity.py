from datetime import date, datetime, timedelta, timezone

from tests.helpers import make_card
from utils.activity import (
    current_streak,
    get_today_count,
    increment_today_count,
    local_today,
    record_study_session,
)
from utils.mastery import count_mastered, mastery_percent, mastery_status


def test_today_count_increments_per_day(conn):
    today = date(2026, 3, 2)
    assert get_today_count(conn, today) == 0
    increment_today_count(conn, today)
    assert increment_today_count(conn, today) == 2
    assert get_today_count(conn, date(2026, 3, 3)) == 0


def test_streak_counts_consecutive_days(conn):
    for day in (date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 3)):
        record_study_session(conn, day)
    assert current_streak(conn, date(2026, 3, 3)) == 3
    # Not studied yet today: yesterday keeps the streak alive
    assert current_streak(conn, date(2026, 3, 4)) == 3
    assert current_streak(conn, date(2026, 3, 5)) == 0


def test_streak_breaks_on_gap(conn):
    record_study_session(conn, date(2026, 3, 1))
    record_study_session(conn, date(2026, 3, 3))
    record_study_session(conn, date(2026, 3, 3))
    assert current_streak(conn, date(2026, 3, 3)) == 1


def test_reviews_alone_do_not_count_for_streak(conn):
    increment_today_count(conn, date(2026, 3, 3))
    assert current_streak(conn, date(2026, 3, 3)) == 0


def test_mastery_status():
    assert mastery_status(make_card(repetitions=0)) == "new"
    assert mastery_status(make_card(repetitions=2)) == "learning"
    assert mastery_status(make_card(repetitions=3)) == "mastered"
    cards = [make_card(id=str(i), repetitions=i) for i in range(5)]
    assert count_mastered(cards) == 2
    assert mastery_percent(2, 5) == 40.0
    assert mastery_percent(0, 0) == 0.0


def test_local_today_uses_the_given_zone():
    late_evening = datetime(2026, 3, 2, 3, 30, tzinfo=timezone.utc)
    assert local_today(late_evening, timezone(timedelta(hours=-5))) == date(2026, 3, 1)
    assert local_today(late_evening, timezone(timedelta(hours=2))) == date(2026, 3, 2)
    assert local_today(late_evening) == late_evening.astimezone().date()
