from app.models.chat_history import ChatHistory

__all__ = ["ChatHistory"]
