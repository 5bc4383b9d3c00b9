from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from content_study.domain import Progress, Session, SummaryResult, TranscriptResult


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProcessRequest(ApiModel):
    urls: list[str] = Field(default_factory=list)
    topic_name: str | None = None
    user_id: str | None = None


class ProcessResponse(ApiModel):
    session_id: str
    external_page_id: str
    external_page_url: str | None = None


class ProgressModel(ApiModel):
    current: int
    total: int
    stage: str

    @classmethod
    def from_domain(cls, progress: Progress) -> "ProgressModel":
        return cls(current=progress.current, total=progress.total, stage=progress.stage)


class TranscriptModel(ApiModel):
    url: str
    platform: str
    transcript: str
    success: bool
    error: str | None = None

    @classmethod
    def from_domain(cls, result: TranscriptResult) -> "TranscriptModel":
        return cls(
            url=result.url,
            platform=result.platform,
            transcript=result.transcript,
            success=result.success,
            error=result.error,
        )


class SummaryModel(ApiModel):
    summary: str = ""
    key_takeaways: str = ""
    how_to_apply: str = ""
    connections_and_patterns: str = ""

    @classmethod
    def from_domain(cls, summary: SummaryResult) -> "SummaryModel":
        return cls(
            summary=summary.summary,
            key_takeaways=summary.key_takeaways,
            how_to_apply=summary.how_to_apply,
            connections_and_patterns=summary.connections_and_patterns,
        )


class SessionResult(ApiModel):
    topic_name: str
    external_page_url: str | None = None
    summary: SummaryModel
    urls: list[str]
    transcripts: list[TranscriptModel]


class StatusResponse(ApiModel):
    status: Literal["pending", "processing", "complete", "failed"]
    progress: ProgressModel | None = None
    error: str | None = None
    result: SessionResult | None = None

    @classmethod
    def from_session(cls, session: Session) -> "StatusResponse":
        result = None
        if session.status == "complete" and session.summary is not None:
            result = SessionResult(
                topic_name=session.topic_name,
                external_page_url=session.external_page_url,
                summary=SummaryModel.from_domain(session.summary),
                urls=list(session.urls),
                transcripts=[TranscriptModel.from_domain(item) for item in session.transcripts],
            )
        return cls(
            status=session.status,
            progress=ProgressModel.from_domain(session.progress) if session.progress else None,
            error=session.error,
            result=result,
        )


class SessionListItem(ApiModel):
    id: str
    topic_name: str
    status: str
    url_count: int
    external_page_url: str | None = None
    created_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionListItem":
        return cls(
            id=session.id,
            topic_name=session.topic_name,
            status=session.status,
            url_count=len(session.urls),
            external_page_url=session.external_page_url,
            created_at=session.created_at,
        )


class ChatMessage(ApiModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(ApiModel):
    messages: list[ChatMessage] = Field(default_factory=list)
    context: str = ""


class ChatResponse(ApiModel):
    response: str
