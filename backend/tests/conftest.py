"""
Shared fixtures: SQLite files stand in for MySQL through the manager's engine factory.

DbConfig.database picks the file; host "unreachable" or password "wrong" point at a
directory that does not exist, so the connection test fails like a refused MySQL login.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.db.base import Base
from app.db.session import ConnectionManager, DbConfig
from app.models.chat_history import ChatHistory

T0 = datetime(2024, 5, 1, 9, 0, 0)

PRIMARY = DbConfig(host="localhost", port=3306, user="root", password="secret", database="primary")


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


# Inserted out of chronological order on purpose
PRIMARY_ROWS = [
    dict(id=2, session_id="s1", app_name=None, query_text="Where is my order?",
         user_question="Where is my order?", assistant_answer="It ships **tomorrow**.", created_at=at(1)),
    dict(id=1, session_id="s1", app_name="Support", query_text="Where is my order?",
         user_question="Where is my order?", assistant_answer="Let me check.", store="Store 12",
         region="North", created_at=at(0), response_time=1.5),
    dict(id=3, session_id="s2", app_name="Zeta", query_text="Pricing for 100% plan",
         user_question="Pricing for 100% plan", assistant_answer="$10", created_at=at(2)),
    dict(id=4, session_id="s2", app_name="Alpha", query_text="Discount_codes",
         user_question="Hi\n------\nHello! How can I help?\n------\nDiscount_codes",
         assistant_answer="Use SPRING10.", created_at=at(3)),
    dict(id=5, session_id="s3", app_name="Support", query_text="refund policy",
         user_question="refund policy", assistant_answer="30 days.", created_at=at(5)),
]

SECONDARY_ROWS = [
    dict(id=1, session_id="other", app_name="Backoffice", query_text="status?",
         user_question="status?", assistant_answer="green", created_at=at(10)),
]


def seed(engine, rows) -> None:
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        s.add_all([ChatHistory(**r) for r in rows])
        s.commit()


@pytest.fixture
def engine_factory(tmp_path):
    def factory(config: DbConfig):
        if config.host == "unreachable" or config.password == "wrong":
            return create_engine(f"sqlite:///{tmp_path / 'missing' / 'nope.db'}")
        if config.database == "secure" and config.password != "secret":
            return create_engine(f"sqlite:///{tmp_path / 'missing' / 'secure.db'}")
        return create_engine(f"sqlite:///{tmp_path / (config.database or 'default')}.db")

    return factory


@pytest.fixture
def manager(engine_factory):
    seed(engine_factory(PRIMARY), PRIMARY_ROWS)
    seed(engine_factory(PRIMARY.model_copy(update={"database": "secondary"})), SECONDARY_ROWS)
    seed(engine_factory(PRIMARY.model_copy(update={"database": "secure"})), SECONDARY_ROWS)
    m = ConnectionManager(defaults=PRIMARY, engine_factory=engine_factory)
    yield m
    m.close()


@pytest.fixture
def db(manager):
    with Session(manager.get_pool()) as session:
        yield session
