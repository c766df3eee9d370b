"""
Centralized constants for the history viewer (Encapsulate What Changes).

Change pagination bounds or pool sizing here instead of scattering literals across routes and services.
"""

# Session listing: ?page=&limit= are clamped, never rejected
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 50

# Connection config
DEFAULT_DB_PORT = 3306
DEFAULT_POOL_SIZE = 10  # max simultaneous connections; further requests wait at the pool
DEFAULT_POOL_TIMEOUT = 30  # seconds to wait for a free pooled connection
POOL_RECYCLE_SECONDS = 300
PASSWORD_MASK = "***"

# Multi-turn transcripts: turns in user_question are joined by this line (alone on its own line)
TURN_DELIMITER = "------"
