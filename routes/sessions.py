import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from config import load_config
from db.database import get_db
from db.store import SQLiteCardStore
from models.review import ReviewCreate, SessionCreate, SessionMode
from routes.cards import card_payload
from utils.activity import increment_today_count, local_today, record_study_session
from utils.errors import EmptyQueue, InvalidQuality, PersistenceFailure, SessionStateError
from utils.preview import preview_all
from utils.session import ReviewSession, SessionRegistry, SessionState, build_session
from utils.sm2 import schedule_from_config

logger = logging.getLogger(__name__)

router = APIRouter()

def get_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        registry = SessionRegistry()
        request.app.state.sessions = registry
    return registry

def get_session_or_404(session_id: str, registry: SessionRegistry) -> ReviewSession:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session

def session_payload(session: ReviewSession, now: datetime) -> Dict:
    cursor, total = session.progress()
    current = session.current()
    return {
        "id": session.id,
        "mode": session.mode.value,
        "persist": session.persist,
        "state": session.state.value,
        "cursor": cursor,
        "total": total,
        "reviewed_count": session.reviewed_count,
        "can_undo": session.can_undo,
        "current": card_payload(current, session.schedule) if current else None,
        "hints": preview_all(current, now, session.schedule) if current else None,
    }

@router.post("", status_code=status.HTTP_201_CREATED)
async def start_session(
    payload: SessionCreate,
    conn = Depends(get_db),
    registry: SessionRegistry = Depends(get_registry),
) -> Dict:
    """Start a study (due cards) or practice (all cards) session."""
    config = load_config()
    session_cfg = config["session"]
    persist: Optional[bool] = payload.persist
    if persist is None:
        persist = session_cfg["study_persists"] if payload.mode == SessionMode.STUDY else session_cfg["practice_persists"]
    shuffle = payload.shuffle or (payload.mode == SessionMode.PRACTICE and session_cfg["shuffle_practice"])
    now = datetime.now(timezone.utc)
    try:
        session = build_session(
            SQLiteCardStore(conn),
            payload.mode,
            now,
            persist=persist,
            shuffle=shuffle,
            schedule=schedule_from_config(config),
        )
    except EmptyQueue as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    registry.replace(session)
    return session_payload(session, now)

@router.get("/{session_id}")
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> Dict:
    session = get_session_or_404(session_id, registry)
    return session_payload(session, datetime.now(timezone.utc))

@router.post("/{session_id}/review")
async def submit_review(
    session_id: str,
    payload: ReviewCreate,
    conn = Depends(get_db),
    registry: SessionRegistry = Depends(get_registry),
) -> Dict:
    """Rate the current card; the queue advances only after the write succeeds."""
    session = get_session_or_404(session_id, registry)
    now = datetime.now(timezone.utc)
    try:
        session.submit_review(payload.quality, SQLiteCardStore(conn), now)
    except InvalidQuality as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except PersistenceFailure as exc:
        logger.warning("Review in session %s not saved: %s", session_id, exc)
        raise HTTPException(status_code=503, detail=str(exc))

    today = local_today(now)
    increment_today_count(conn, today)
    if session.state == SessionState.COMPLETE and session.reviewed_count > 0:
        record_study_session(conn, today)
    return session_payload(session, now)

@router.post("/{session_id}/undo")
async def undo_review(
    session_id: str,
    conn = Depends(get_db),
    registry: SessionRegistry = Depends(get_registry),
) -> Dict:
    session = get_session_or_404(session_id, registry)
    try:
        session.undo(SQLiteCardStore(conn))
    except PersistenceFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return session_payload(session, datetime.now(timezone.utc))

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    session.abandon()
    registry.remove(session_id)
