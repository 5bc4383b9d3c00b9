from __future__ import annotations

from fastapi import APIRouter, HTTPException

from content_study.application import get_session_service
from content_study.core.errors import SessionNotFoundError

router = APIRouter(tags=["status"])


@router.get("/status/{session_id}")
async def get_status(session_id: str) -> dict:
    service = get_session_service()
    try:
        return service.get_status(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
