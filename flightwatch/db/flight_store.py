# flightwatch/db/flight_store.py
"""
SQL-backed flight store.

Implements the store interface used by MonitoringScheduler:
    list_active_future_flights(limit, now)
    get_flight(flight_id)
    update_flight_weather_state(flight_id, checkpoints, verdict, color,
                                needs_rescheduling, checked_at)
    get_last_alert_timestamp(flight_id)
    record_alert_sent(flight_id, timestamp)

Timestamps are stored as fixed-width UTC ISO-8601 text so ordering and
comparison behave the same on PostgreSQL and SQLite. Checkpoints are
stored as a JSON document.
"""

import json
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..exceptions import FlightNotFoundError
from ..geo import Location
from ..logging import get_logger
from ..safety import Checkpoint, PathVerdict, SafetyColor, ScheduledFlight
from .engine import get_engine, session_scope

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS scheduled_flight (
    id VARCHAR(64) PRIMARY KEY,
    user_id VARCHAR(128),
    student_name VARCHAR(256),
    departure_code VARCHAR(8) NOT NULL,
    departure_name VARCHAR(256),
    departure_lat DOUBLE PRECISION NOT NULL,
    departure_lon DOUBLE PRECISION NOT NULL,
    arrival_code VARCHAR(8) NOT NULL,
    arrival_name VARCHAR(256),
    arrival_lat DOUBLE PRECISION NOT NULL,
    arrival_lon DOUBLE PRECISION NOT NULL,
    training_level VARCHAR(32) NOT NULL,
    scheduled_time VARCHAR(32) NOT NULL,
    status VARCHAR(32) NOT NULL DEFAULT 'scheduled',
    last_safety_color VARCHAR(8),
    safety_status VARCHAR(16),
    safety_score DOUBLE PRECISION,
    needs_rescheduling BOOLEAN NOT NULL DEFAULT FALSE,
    checkpoints TEXT,
    last_weather_check VARCHAR(32),
    last_alert_at VARCHAR(32)
)
"""

INDEX = """
CREATE INDEX IF NOT EXISTS ix_scheduled_flight_status_time
    ON scheduled_flight (status, scheduled_time)
"""

_COLUMNS = """
    id, user_id, student_name,
    departure_code, departure_name, departure_lat, departure_lon,
    arrival_code, arrival_name, arrival_lat, arrival_lon,
    training_level, scheduled_time, status,
    last_safety_color, safety_status, safety_score,
    needs_rescheduling, last_weather_check, last_alert_at
"""


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC text form; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def create_schema(engine: Engine):
    """Create the scheduled_flight table if missing."""
    with engine.begin() as conn:
        conn.execute(text(SCHEMA))
        conn.execute(text(INDEX))


def _row_to_flight(row) -> ScheduledFlight:
    m = row._mapping
    return ScheduledFlight(
        id=m["id"],
        user_id=m["user_id"],
        student_name=m["student_name"],
        departure=Location(
            m["departure_code"], m["departure_name"] or m["departure_code"],
            float(m["departure_lat"]), float(m["departure_lon"]),
        ),
        arrival=Location(
            m["arrival_code"], m["arrival_name"] or m["arrival_code"],
            float(m["arrival_lat"]), float(m["arrival_lon"]),
        ),
        training_level=m["training_level"],
        scheduled_time=parse_timestamp(m["scheduled_time"]),
        status=m["status"],
        last_safety_color=SafetyColor(m["last_safety_color"]) if m["last_safety_color"] else None,
        needs_rescheduling=bool(m["needs_rescheduling"]),
        last_alert_at=parse_timestamp(m["last_alert_at"]),
        attrs={
            "safety_status": m["safety_status"],
            "safety_score": m["safety_score"],
            "last_weather_check": m["last_weather_check"],
        },
    )


class SqlFlightStore:
    """
    Flight store over SQLAlchemy with raw SQL.

    Usage:
        store = SqlFlightStore(get_engine())
        flights = store.list_active_future_flights(limit=50, now=now)
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        self._sessions = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def add_flight(self, flight: ScheduledFlight):
        """Insert a new scheduled flight."""
        with session_scope(self._sessions) as session:
            session.execute(
                text("""
                    INSERT INTO scheduled_flight (
                        id, user_id, student_name,
                        departure_code, departure_name, departure_lat, departure_lon,
                        arrival_code, arrival_name, arrival_lat, arrival_lon,
                        training_level, scheduled_time, status,
                        last_safety_color, needs_rescheduling, last_alert_at
                    ) VALUES (
                        :id, :user_id, :student_name,
                        :dep_code, :dep_name, :dep_lat, :dep_lon,
                        :arr_code, :arr_name, :arr_lat, :arr_lon,
                        :training_level, :scheduled_time, :status,
                        :last_safety_color, :needs_rescheduling, :last_alert_at
                    )
                """),
                {
                    "id": flight.id,
                    "user_id": flight.user_id,
                    "student_name": flight.student_name,
                    "dep_code": flight.departure.code,
                    "dep_name": flight.departure.name,
                    "dep_lat": flight.departure.lat,
                    "dep_lon": flight.departure.lon,
                    "arr_code": flight.arrival.code,
                    "arr_name": flight.arrival.name,
                    "arr_lat": flight.arrival.lat,
                    "arr_lon": flight.arrival.lon,
                    "training_level": flight.training_level,
                    "scheduled_time": format_timestamp(flight.scheduled_time),
                    "status": flight.status,
                    "last_safety_color": (
                        SafetyColor(flight.last_safety_color).value
                        if flight.last_safety_color else None
                    ),
                    "needs_rescheduling": bool(flight.needs_rescheduling),
                    "last_alert_at": (
                        format_timestamp(flight.last_alert_at) if flight.last_alert_at else None
                    ),
                },
            )

    def list_active_future_flights(self, limit: int, now: datetime) -> List[ScheduledFlight]:
        """Scheduled flights departing after ``now``, soonest first."""
        with session_scope(self._sessions) as session:
            rows = session.execute(
                text(f"""
                    SELECT {_COLUMNS}
                    FROM scheduled_flight
                    WHERE status = 'scheduled'
                      AND scheduled_time > :now
                    ORDER BY scheduled_time ASC
                    LIMIT :limit
                """),
                {"now": format_timestamp(now), "limit": int(limit)},
            ).fetchall()
        return [_row_to_flight(row) for row in rows]

    def get_flight(self, flight_id: str) -> Optional[ScheduledFlight]:
        with session_scope(self._sessions) as session:
            row = session.execute(
                text(f"SELECT {_COLUMNS} FROM scheduled_flight WHERE id = :id"),
                {"id": flight_id},
            ).fetchone()
        return _row_to_flight(row) if row else None

    def get_checkpoints(self, flight_id: str) -> List[dict]:
        """Checkpoints from the last weather check, as stored."""
        with session_scope(self._sessions) as session:
            raw = session.execute(
                text("SELECT checkpoints FROM scheduled_flight WHERE id = :id"),
                {"id": flight_id},
            ).scalar()
        return json.loads(raw) if raw else []

    def update_flight_weather_state(
        self,
        flight_id: str,
        checkpoints: List[Checkpoint],
        verdict: PathVerdict,
        color: SafetyColor,
        needs_rescheduling: bool,
        checked_at: datetime,
    ):
        """
        Persist the result of a weather check.

        Raises:
            FlightNotFoundError: No row for ``flight_id``
        """
        with session_scope(self._sessions) as session:
            result = session.execute(
                text("""
                    UPDATE scheduled_flight
                    SET checkpoints = :checkpoints,
                        safety_status = :safety_status,
                        safety_score = :safety_score,
                        last_safety_color = :color,
                        needs_rescheduling = :needs_rescheduling,
                        last_weather_check = :checked_at
                    WHERE id = :id
                """),
                {
                    "id": flight_id,
                    "checkpoints": json.dumps([c.to_dict() for c in checkpoints]),
                    "safety_status": verdict.status.value,
                    "safety_score": verdict.score,
                    "color": SafetyColor(color).value,
                    "needs_rescheduling": bool(needs_rescheduling),
                    "checked_at": format_timestamp(checked_at),
                },
            )
            if result.rowcount == 0:
                raise FlightNotFoundError(flight_id)

    def get_last_alert_timestamp(self, flight_id: str) -> Optional[datetime]:
        with session_scope(self._sessions) as session:
            value = session.execute(
                text("SELECT last_alert_at FROM scheduled_flight WHERE id = :id"),
                {"id": flight_id},
            ).scalar()
        return parse_timestamp(value)

    def record_alert_sent(self, flight_id: str, timestamp: datetime):
        with session_scope(self._sessions) as session:
            result = session.execute(
                text("UPDATE scheduled_flight SET last_alert_at = :ts WHERE id = :id"),
                {"id": flight_id, "ts": format_timestamp(timestamp)},
            )
            if result.rowcount == 0:
                raise FlightNotFoundError(flight_id)
        logger.debug("alert_timestamp_recorded", flight_id=flight_id)
