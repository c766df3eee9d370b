"""
Chat history endpoints: paginated session list and one session's messages.
"""
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import query_error_to_http
from app.db.session import get_db
from app.services.chat_history_service import (
    coerce_limit,
    coerce_page,
    get_session_messages_with_turns,
    list_sessions,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _handle_query_error(exc: Exception, log_message: str) -> NoReturn:
    logger.exception(log_message)
    raise query_error_to_http(exc) from exc


@router.get("/sessions")
def get_sessions(
    page: str | None = Query(None, description="1-based page; invalid values fall back to 1"),
    limit: str | None = Query(None, description="Page size, clamped to 1..50 (default 20)"),
    search: str | None = Query(None, description="Case-insensitive match on query text or app name"),
    db: Session = Depends(get_db),
):
    """List sessions, most recent activity first. Out-of-range paging params are clamped, not rejected."""
    page_n = coerce_page(page)
    limit_n = coerce_limit(limit)
    try:
        total, sessions = list_sessions(db, page=page_n, limit=limit_n, search=search)
    except Exception as e:  # noqa: BLE001
        _handle_query_error(e, "list_sessions failed")
    return {"sessions": sessions, "total": total, "page": page_n, "limit": limit_n}


@router.get("/session/{session_id}")
def get_session(session_id: str, db: Session = Depends(get_db)):
    """Full message history for one session, oldest first, each message with its parsed turns."""
    try:
        return {"messages": get_session_messages_with_turns(db, session_id)}
    except Exception as e:  # noqa: BLE001
        _handle_query_error(e, "get_session_messages failed")
