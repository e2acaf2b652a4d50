"""Pytest fixtures for the voting ledger tests.

This module provides shared fixtures for unit testing the ledger and
registry, and for exercising the HTTP API in-process through FastAPI's
TestClient and an httpx AsyncClient.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from services.ledger import ProposalRegistry, ProposalState, VotingLedger
from services.voting_api.config import settings
from services.voting_api.main import app


@pytest.fixture
def now() -> datetime:
    """Fixed point in time used as the ledger clock."""
    return datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def deadline(now: datetime) -> datetime:
    """Deadline one hour after `now`."""
    return now + timedelta(hours=1)


@pytest.fixture
def ledger(now: datetime, deadline: datetime) -> VotingLedger:
    """Open proposal with the default capacity of 100 votes."""
    return VotingLedger.create(123, deadline, now)


@pytest.fixture
def registry() -> ProposalRegistry:
    """Registry without an owner restriction."""
    return ProposalRegistry()


@pytest.fixture
def cast_votes(now: datetime) -> Callable[[VotingLedger, List[bool], str], List[ProposalState]]:
    """Helper fixture to cast one vote per choice from distinct voters.

    Returns a function that votes on a ledger with voters named
    `{prefix}_{index}` and returns the state after each vote.
    """
    def _cast(ledger: VotingLedger, choices: List[bool], prefix: str = "voter") -> List[ProposalState]:
        return [
            ledger.cast_vote(f"{prefix}_{i}", choice, now)
            for i, choice in enumerate(choices)
        ]

    return _cast


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Synchronous API client.

    Entering the client runs the app lifespan, which builds a fresh
    in-memory registry for every test.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def api_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound directly to the ASGI app."""
    app.state.registry = ProposalRegistry(max_votes=settings.MAX_VOTES)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def future_deadline() -> str:
    """ISO deadline one hour from the real current time."""
    return (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()


@pytest.fixture
def api_prefix() -> str:
    return settings.api_prefix


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "api: mark test as exercising the HTTP API"
    )
    config.addinivalue_line(
        "markers",
        "concurrency: mark test as running votes from multiple threads or tasks"
    )
