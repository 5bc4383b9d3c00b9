from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from content_study.application import get_session_service
from content_study.core.config import get_settings
from content_study.core.errors import ContentStudyError
from content_study.core.schema import ProcessRequest, ProcessResponse
from content_study.core.urls import classify
from content_study.domain import PLACEHOLDER_TOPIC
from content_study.workers.pipeline import PipelineRequest, get_pipeline_worker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["process"])

SUPPORTED_PLATFORMS = "YouTube, X (Twitter), TikTok, Instagram, Farcaster"


@router.post("/process")
async def start_processing(payload: ProcessRequest) -> dict:
    """Create a session for the submitted URLs and start processing in the background."""
    urls = [url.strip() for url in payload.urls if url and url.strip()]
    if not urls:
        raise HTTPException(status_code=400, detail="No URLs provided")

    max_urls = get_settings().max_urls
    if len(urls) > max_urls:
        raise HTTPException(status_code=400, detail=f"Maximum {max_urls} URLs allowed")

    entries = [entry for entry in classify("\n".join(urls)) if entry.platform != "unknown"]
    if not entries:
        raise HTTPException(
            status_code=400,
            detail=f"No valid URLs detected. Supported platforms: {SUPPORTED_PLATFORMS}",
        )
    if len(entries) > max_urls:
        raise HTTPException(status_code=400, detail=f"Maximum {max_urls} URLs allowed")

    topic_name = (payload.topic_name or "").strip() or None
    service = get_session_service()
    worker = get_pipeline_worker()

    try:
        page = await worker.open_page(topic_name or PLACEHOLDER_TOPIC, [entry.url for entry in entries])
    except ContentStudyError as exc:
        logger.error("Could not create the external page: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to start processing") from exc

    session = service.create_session(entries, page, topic_name=topic_name, user_id=payload.user_id)
    await worker.enqueue(
        PipelineRequest(
            session_id=session.id,
            entries=entries,
            page_id=page.page_id,
            topic_name=topic_name,
        )
    )

    response = ProcessResponse(
        session_id=session.id,
        external_page_id=page.page_id,
        external_page_url=page.page_url or "",
    )
    return response.to_json()
