"""Shared fixtures: a registry wired to an isolated in-memory Redis."""

from datetime import date
from typing import Any

import fakeredis
import pytest

from barangay_registry.config import Config
from barangay_registry.main import Registry, create_registry

TODAY = date(2026, 10, 19)


def years_ago(years: int, today: date = TODAY) -> date:
    """Birth date of someone who turned ``years`` old this year, before today."""
    return date(today.year - years, 1, 15)


@pytest.fixture
def config(tmp_path) -> Config:
    """Settings that ignore any local .env file."""
    return Config(_env_file=None, log_file=str(tmp_path / "registry.log"))


@pytest.fixture
def server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(server):
    """Client on a fresh fake server; nothing leaks between tests."""
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def other_client(server):
    """Second connection to the same fake server, for concurrent writers."""
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def registry(config, redis_client) -> Registry:
    return create_registry(config=config, client=redis_client, clock=lambda: TODAY)


@pytest.fixture
def make_household(registry):
    """Create a household with sensible defaults; returns its id."""

    def _make(**overrides: Any) -> str:
        data = {
            "addressLine1": "123 Rizal St",
            "addressLine2": "",
            "city": "Cebu City",
            "province": "Cebu",
            "zipCode": "6000",
            "monthlyIncome": "15000",
            "categoryTags": [],
        }
        data.update(overrides)
        return registry.households.create(data)

    return _make


@pytest.fixture
def make_resident(registry):
    """Create a resident with sensible defaults; returns its id."""

    def _make(**overrides: Any) -> str:
        data = {
            "firstName": "Juan",
            "lastName": "Dela Cruz",
            "birthDate": years_ago(30).isoformat(),
            "gender": "Male",
            "civilStatus": "Single",
            "categoryTags": [],
        }
        data.update(overrides)
        return registry.residents.create(data)

    return _make
