from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends

from db.database import get_db
from db.store import SQLiteCardStore
from utils.activity import current_streak, get_today_count, local_today
from utils.mastery import count_mastered, mastery_percent

router = APIRouter()

@router.get("")
async def deck_stats(conn = Depends(get_db)) -> Dict:
    """Due and total counts, mastery share, today's reviews and the day streak."""
    now = datetime.now(timezone.utc)
    today = local_today(now)
    store = SQLiteCardStore(conn)
    cards = store.load_all()
    total = len(cards)
    mastered = count_mastered(cards)
    return {
        "due": store.count_due(now),
        "total": total,
        "mastered": mastered,
        "mastered_percent": mastery_percent(mastered, total),
        "today_reviewed": get_today_count(conn, today),
        "streak": current_streak(conn, today),
    }
