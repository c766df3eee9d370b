from app.services.chat_history_service import get_session_messages, list_sessions
from app.services.transcript import Turn, format_turns

__all__ = ["get_session_messages", "list_sessions", "Turn", "format_turns"]
