from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from config import load_config
from db.database import get_db
from db.store import SQLiteCardStore
from models.card import CardCreate, CardUpdate, new_card
from utils.mastery import mastery_status
from utils.preview import preview_all
from utils.sm2 import phase_for, schedule_from_config

router = APIRouter()

def card_payload(card, schedule) -> Dict:
    payload = card.model_dump(mode="json")
    payload["phase"] = phase_for(card.repetitions, schedule)
    payload["mastery_status"] = mastery_status(card)
    return payload

def get_card_or_404(store: SQLiteCardStore, card_id: str):
    card = store.get(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card

@router.get("")
async def list_cards(conn = Depends(get_db)) -> List[Dict]:
    """All cards in creation order."""
    schedule = schedule_from_config(load_config())
    return [card_payload(card, schedule) for card in SQLiteCardStore(conn).load_all()]

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_card(payload: CardCreate, conn = Depends(get_db)) -> Dict:
    schedule = schedule_from_config(load_config())
    card = new_card(payload.front, payload.back, datetime.now(timezone.utc))
    SQLiteCardStore(conn).add([card])
    return card_payload(card, schedule)

@router.get("/{card_id}")
async def get_card(card_id: str, conn = Depends(get_db)) -> Dict:
    schedule = schedule_from_config(load_config())
    return card_payload(get_card_or_404(SQLiteCardStore(conn), card_id), schedule)

@router.patch("/{card_id}")
async def update_card(card_id: str, payload: CardUpdate, conn = Depends(get_db)) -> Dict:
    """Edit front/back text; the review schedule is kept."""
    schedule = schedule_from_config(load_config())
    card = SQLiteCardStore(conn).update_text(card_id, payload.front, payload.back)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card_payload(card, schedule)

@router.get("/{card_id}/preview")
async def preview_card(card_id: str, conn = Depends(get_db)) -> Dict[str, str]:
    """Next-interval hint for each rating, without changing the card."""
    schedule = schedule_from_config(load_config())
    card = get_card_or_404(SQLiteCardStore(conn), card_id)
    return preview_all(card, datetime.now(timezone.utc), schedule)

@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: str, conn = Depends(get_db)):
    if not SQLiteCardStore(conn).delete(card_id):
        raise HTTPException(status_code=404, detail="Card not found")
