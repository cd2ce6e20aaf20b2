# flightwatch/api/dependencies.py
"""
Collaborator wiring for the API.

Each provider builds its object once; tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from ..db import SqlFlightStore, get_engine
from ..ingestion import OpenWeatherClient
from ..monitoring import MonitoringScheduler
from ..notifications import WebhookAlertDispatcher
from ..reschedule import SafeWindowSearch
from ..safety import PathWeatherChecker
from ..settings import settings


@lru_cache(maxsize=1)
def get_weather() -> OpenWeatherClient:
    return OpenWeatherClient(settings=settings)


@lru_cache(maxsize=1)
def get_store() -> SqlFlightStore:
    return SqlFlightStore(get_engine(settings.database_url))


@lru_cache(maxsize=1)
def get_dispatcher() -> WebhookAlertDispatcher:
    return WebhookAlertDispatcher(settings=settings)


def get_checker() -> PathWeatherChecker:
    return PathWeatherChecker(get_weather(), settings=settings)


def get_scheduler() -> MonitoringScheduler:
    return MonitoringScheduler(
        weather=get_weather(),
        store=get_store(),
        dispatcher=get_dispatcher(),
        settings=settings,
    )


def get_search() -> SafeWindowSearch:
    return SafeWindowSearch(get_weather(), settings=settings)
