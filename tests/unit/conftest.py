"""Pytest configuration and fixtures for unit tests."""

from typing import Any

import pytest

from tests.unit.mocks import InMemoryDBClient
from upkeep.agents.advisory_agent import RiskAssessment


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches upkeep.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("upkeep.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("upkeep.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("upkeep.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("upkeep.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("upkeep.core.db_client.list_records", in_memory_db.list_records)

    return in_memory_db


class StubAdvisor:
    """Advisor returning a canned assessment, or raising when told to."""

    def __init__(self, assessment: RiskAssessment | None = None, error: Exception | None = None):
        self.assessment = assessment or RiskAssessment(
            cascade_risk_score=8,
            risk_rationale="Clogged gutters overflow into the foundation.",
            current_fix_cost=150,
            delayed_fix_cost=4500,
        )
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def assess(self, *, title: str, description: str, system_type: str) -> RiskAssessment:
        self.calls.append({"title": title, "description": description, "system_type": system_type})
        if self.error is not None:
            raise self.error
        return self.assessment


@pytest.fixture
def stub_advisor() -> StubAdvisor:
    """Advisor that always succeeds."""
    return StubAdvisor()


@pytest.fixture
def failing_advisor() -> StubAdvisor:
    """Advisor that always fails."""
    return StubAdvisor(error=ConnectionError("advisory service unreachable"))
