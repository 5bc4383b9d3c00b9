"""Application services."""

from .acquisition import AcquisitionAdapter
from .chat import ChatService
from .sessions import SessionService, get_session_service, reset_session_state
from .summarizer import Summarizer

__all__ = [
    "AcquisitionAdapter",
    "ChatService",
    "SessionService",
    "Summarizer",
    "get_session_service",
    "reset_session_state",
]
