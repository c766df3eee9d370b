"""
Chat history reads: paginated session list (sessions derived by grouping rows on session_id)
and the full message list for one session. All queries are parameterized.
"""
import logging
import math

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from app.core.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from app.core.errors import QueryFailure, driver_message
from app.models.chat_history import ChatHistory
from app.services.transcript import format_turns

logger = logging.getLogger(__name__)


def _number(raw) -> float:
    """Numeric value of a query param; 0 for missing, empty or non-numeric input."""
    if raw is None:
        return 0
    try:
        v = float(str(raw).strip() or 0)
    except ValueError:
        return 0
    return v if math.isfinite(v) else 0


def coerce_page(raw) -> int:
    """Page >= 1; missing, zero or non-numeric -> 1. Fractions truncate."""
    v = _number(raw) or DEFAULT_PAGE
    return max(DEFAULT_PAGE, int(v))


def coerce_limit(raw) -> int:
    """Limit in [1, MAX_LIMIT]; missing, zero or non-numeric -> DEFAULT_LIMIT."""
    v = _number(raw) or DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, int(v)))


def _search_filter(search: str):
    # Case-insensitive "contains"; autoescape keeps % and _ in the search text literal
    return or_(
        ChatHistory.query_text.icontains(search, autoescape=True),
        ChatHistory.app_name.icontains(search, autoescape=True),
    )


def _latest_app_name():
    """Last non-null app_name seen in the session (latest created_at, then id)."""
    inner = aliased(ChatHistory)
    return (
        select(inner.app_name)
        .where(inner.session_id == ChatHistory.session_id, inner.app_name.isnot(None))
        .order_by(inner.created_at.desc(), inner.id.desc())
        .limit(1)
        .scalar_subquery()
    )


def list_sessions(
    db: Session,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    search: str | None = None,
) -> tuple[int, list[dict]]:
    """
    One page of session summaries, most recent activity first.
    Returns (total distinct sessions matching search, sessions).

    Each session: session_id, app_name (last non-null), last_time (max created_at),
    first_query (min query_text), msg_count. Empty search means no WHERE clause.
    """
    page = max(1, page)
    limit = min(MAX_LIMIT, max(1, limit))
    search = (search or "").strip()

    count_q = select(func.count(distinct(ChatHistory.session_id)))
    last_time = func.max(ChatHistory.created_at).label("last_time")
    rows_q = select(
        ChatHistory.session_id,
        _latest_app_name().label("app_name"),
        last_time,
        func.min(ChatHistory.query_text).label("first_query"),
        func.count().label("msg_count"),
    )
    if search:
        count_q = count_q.where(_search_filter(search))
        rows_q = rows_q.where(_search_filter(search))
    rows_q = (
        rows_q.group_by(ChatHistory.session_id)
        .order_by(last_time.desc(), ChatHistory.session_id)
        .limit(limit)
        .offset((page - 1) * limit)
    )

    try:
        total = db.execute(count_q).scalar_one()
        sessions = [dict(r) for r in db.execute(rows_q).mappings().all()]
    except SQLAlchemyError as e:
        raise QueryFailure(driver_message(e)) from e
    return total, sessions


def get_session_messages(db: Session, session_id: str) -> list[dict]:
    """Every row for this session, oldest first. No pagination."""
    table = ChatHistory.__table__
    q = (
        select(table)
        .where(table.c.session_id == session_id)
        .order_by(table.c.created_at.asc(), table.c.id.asc())
    )
    try:
        return [dict(r) for r in db.execute(q).mappings().all()]
    except SQLAlchemyError as e:
        raise QueryFailure(driver_message(e)) from e


def get_session_messages_with_turns(db: Session, session_id: str) -> list[dict]:
    """Messages for display: each row plus its parsed turns [{user, assistant}, ...]."""
    messages = get_session_messages(db, session_id)
    for m in messages:
        m["turns"] = [t.to_dict() for t in format_turns(m)]
    logger.debug("Loaded %s messages for session %s", len(messages), session_id)
    return messages
