from __future__ import annotations

from fastapi import APIRouter, Query

from content_study.application import get_session_service

router = APIRouter(tags=["sessions"])


@router.get("/sessions")
async def list_sessions(user_id: str | None = Query(default=None, alias="userId")) -> dict:
    service = get_session_service()
    return {"sessions": service.list_sessions(user_id)}
