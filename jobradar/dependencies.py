"""Shared FastAPI dependencies.

Every long-lived component is built once in the lifespan and stored on
``app.state``; routes receive them through these accessors.
"""

from fastapi import Request

from .alerts.service import AlertStore
from .analysis.lookup import VacancyLookup
from .analysis.service import VacancyAnalyzer
from .integrations.hh import HHClient
from .integrations.store import KeyValueStore


def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def get_analyzer(request: Request) -> VacancyAnalyzer:
    return request.app.state.analyzer


def get_vacancy_lookup(request: Request) -> VacancyLookup:
    return request.app.state.vacancy_lookup


def get_hh_client(request: Request) -> HHClient:
    return request.app.state.hh


def get_alert_store(request: Request) -> AlertStore:
    return request.app.state.alert_store
