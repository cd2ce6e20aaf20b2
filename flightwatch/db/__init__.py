# Database module
from .engine import get_engine, session_scope, check_connection
from .flight_store import SqlFlightStore, create_schema

__all__ = [
    "get_engine",
    "session_scope",
    "check_connection",
    "SqlFlightStore",
    "create_schema",
]
