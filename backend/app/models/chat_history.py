"""
Chat history: one stored turn-group per row, grouped into sessions by session_id.
Written by the chat application; this service only reads it.
"""
from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from app.db.base import Base
from app.db.tables import CHAT_HISTORY_TABLE


class ChatHistory(Base):
    __tablename__ = CHAT_HISTORY_TABLE

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(128), nullable=False, index=True)
    app_name = Column(String(255), nullable=True)
    query_text = Column(Text, nullable=True)  # first user question, shown in the session list
    user_question = Column(Text, nullable=True)  # may hold several turns joined by a "------" line
    assistant_answer = Column(Text, nullable=True)  # final assistant turn only
    store = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)
    response_time = Column(Float, nullable=True)  # seconds
