"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from eventpoll.events import EventService
from eventpoll.main import create_app
from eventpoll.store import InMemoryEventStore
from eventpoll.votes import VoteService

TWO_SLOTS = ["2026-01-01T10:00", "2026-01-01T14:00"]


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def event_service(store) -> EventService:
    return EventService(store)


@pytest.fixture
def vote_service(store) -> VoteService:
    return VoteService(store)


@pytest.fixture
def event(event_service):
    return event_service.create_event("Team sync", TWO_SLOTS)


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))
