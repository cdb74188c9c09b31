"""
Database module initialization.
Exports database components for use throughout the application.
"""

from prophet.database.base import Base
from prophet.database.connection import (
    check_db_connection,
    close_db,
    get_db_info,
    init_db,
)
from prophet.database.dependencies import get_db
from prophet.database.session import configure_engine, get_db_session

__all__ = [
    # Connection management
    "init_db",
    "close_db",
    "configure_engine",
    # Dependencies
    "get_db",
    "get_db_session",
    # Base classes
    "Base",
    # Utilities
    "check_db_connection",
    "get_db_info",
]
