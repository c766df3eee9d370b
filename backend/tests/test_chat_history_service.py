import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.core.errors import QueryFailure
from app.services.chat_history_service import (
    coerce_limit,
    coerce_page,
    get_session_messages,
    get_session_messages_with_turns,
    list_sessions,
)

from conftest import at


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 1), ("", 1), ("abc", 1), ("0", 1), ("-3", 1), ("2", 2), ("2.7", 2), ("inf", 1), (4, 4)],
)
def test_coerce_page(raw, expected):
    assert coerce_page(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 20), ("", 20), ("x", 20), ("0", 20), ("-4", 1), ("5", 5), ("500", 50), ("1e3", 50)],
)
def test_coerce_limit(raw, expected):
    assert coerce_limit(raw) == expected


def test_list_sessions_orders_by_last_activity(db):
    total, sessions = list_sessions(db)
    assert total == 3
    assert [s["session_id"] for s in sessions] == ["s3", "s2", "s1"]
    assert [s["last_time"] for s in sessions] == [at(5), at(3), at(1)]


def test_list_sessions_aggregates(db):
    _, sessions = list_sessions(db)
    by_id = {s["session_id"]: s for s in sessions}
    assert by_id["s1"]["msg_count"] == 2
    # Later row has no app_name: last non-null value wins
    assert by_id["s1"]["app_name"] == "Support"
    # Latest value, not the alphabetical max
    assert by_id["s2"]["app_name"] == "Alpha"
    assert by_id["s2"]["first_query"] == "Discount_codes"


def test_list_sessions_pagination(db):
    total, first = list_sessions(db, page=1, limit=2)
    _, second = list_sessions(db, page=2, limit=2)
    _, beyond = list_sessions(db, page=3, limit=2)
    assert total == 3
    assert [s["session_id"] for s in first] == ["s3", "s2"]
    assert [s["session_id"] for s in second] == ["s1"]
    assert beyond == []


def test_list_sessions_limit_is_clamped(db):
    _, sessions = list_sessions(db, page=0, limit=0)
    assert len(sessions) == 1


def test_empty_search_is_no_filter(db):
    assert list_sessions(db, search="") == list_sessions(db)
    assert list_sessions(db, search="   ") == list_sessions(db)


def test_search_matches_query_text_case_insensitive(db):
    total, sessions = list_sessions(db, search="ORDER")
    assert total == 1
    assert [s["session_id"] for s in sessions] == ["s1"]


def test_search_matches_app_name(db):
    total, sessions = list_sessions(db, search="support")
    assert total == 2
    assert [s["session_id"] for s in sessions] == ["s3", "s1"]
    # Counts only the rows that matched
    assert sessions[1]["msg_count"] == 1


def test_search_wildcards_are_literal(db):
    total, sessions = list_sessions(db, search="%")
    assert total == 1
    assert sessions[0]["session_id"] == "s2"


def test_get_session_messages_oldest_first(db):
    messages = get_session_messages(db, "s1")
    assert [m["id"] for m in messages] == [1, 2]
    assert all(m["session_id"] == "s1" for m in messages)
    assert messages[0]["store"] == "Store 12"
    assert messages[0]["response_time"] == 1.5


def test_get_session_messages_unknown_session(db):
    assert get_session_messages(db, "nope") == []


def test_messages_carry_turns(db):
    messages = get_session_messages_with_turns(db, "s2")
    assert messages[1]["turns"] == [
        {"user": "Hi", "assistant": "Hello! How can I help?"},
        {"user": "Discount_codes", "assistant": "Use SPRING10."},
    ]


def test_store_error_raises_query_failure(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    with Session(engine) as s:
        with pytest.raises(QueryFailure, match="no such table"):
            list_sessions(s)
        with pytest.raises(QueryFailure):
            get_session_messages(s, "s1")
