"""
Single source of truth for the tables this service reads.

The store is external: tables are created and populated by the chat application, never by this code.
"""
# Chat records: one row per stored turn-group, grouped into sessions by session_id.
CHAT_HISTORY_TABLE = "chat_history"
