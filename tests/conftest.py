"""Shared fixtures for tracker tests."""
import pytest
from fastapi.testclient import TestClient
from perftracker.event_models import RevenueEvent
from perftracker.main import create_app
from perftracker.services.revenue_service import RevenueService

# 2023-11-14T22:13:20Z, a whole number of milliseconds
NOW = 1_700_000_000.0
NOW_MS = 1_700_000_000_000


class FakeClock:
    """Controllable wall clock in seconds."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_event(channel="email", amount=1.0, timestamp=NOW_MS, campaign=None, **kwargs) -> RevenueEvent:
    utm = kwargs.pop("utm", None)
    if utm is None:
        utm = {} if campaign is None else {"utm_campaign": campaign}
    return RevenueEvent(channel=channel, amount=amount, timestamp=timestamp, utm=utm, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return RevenueService(clock=clock)


@pytest.fixture
def app(service):
    return create_app(service=service)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
