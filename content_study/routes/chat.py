from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from content_study.application import ChatService
from content_study.core.config import get_settings
from content_study.core.errors import ContentStudyError
from content_study.core.schema import ChatRequest, ChatResponse
from content_study.infrastructure import get_providers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat")
async def chat(payload: ChatRequest) -> dict:
    """Answer a question about previously collected content."""
    if not payload.messages:
        raise HTTPException(status_code=400, detail="No messages provided")

    service = ChatService(get_providers().completer, timeout=get_settings().completion_timeout)
    messages = [{"role": message.role, "content": message.content} for message in payload.messages]
    try:
        answer = await service.answer(messages, payload.context)
    except ContentStudyError as exc:
        logger.error("Chat failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to get response") from exc
    return ChatResponse(response=answer).to_json()
