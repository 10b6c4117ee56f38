"""
Test configuration and fixtures for the fossilmind test suite.
Provides a fixed clock, deterministic random sources and a fossil factory.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

from fossilmind.configuration import reset_config
from fossilmind.models.fossil import Fossil

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class SequenceRandom:
    """Random source that replays a fixed sequence of values, cycling when exhausted."""

    def __init__(self, values: Sequence[float]):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class TestDataFactory:
    """Factory for creating test data."""

    @staticmethod
    def create_fossil(fossil_id: str, invariant: str = "", days_ago: float = 30,
                      now: datetime = NOW, **kwargs) -> Fossil:
        """Create a fossil captured ``days_ago`` days before ``now``."""
        kwargs.setdefault("created_at", now - timedelta(days=days_ago))
        return Fossil(id=fossil_id, invariant=invariant, **kwargs)

    @staticmethod
    def create_fossils(texts: Sequence[str], prefix: str = "f", **kwargs) -> List[Fossil]:
        return [TestDataFactory.create_fossil(f"{prefix}{i}", text, **kwargs) for i, text in enumerate(texts, 1)]

    @staticmethod
    def create_record(fossil_id: str, invariant: str, created_at: Optional[str] = None, **extra) -> dict:
        """Exported-vault style record with camelCase keys."""
        record = {
            "id": fossil_id,
            "invariant": invariant,
            "probeIntent": extra.pop("probeIntent", ""),
            "createdAt": created_at or (NOW - timedelta(days=30)).isoformat(),
            "quality": extra.pop("quality", 2),
        }
        record.update(extra)
        return record


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def test_data_factory():
    """Provide test data factory."""
    return TestDataFactory


@pytest.fixture
def sequence_random():
    """Build a deterministic random source from a list of values."""
    return SequenceRandom


@pytest.fixture
def triangle_texts():
    """Two groups of three mutually similar statements with no overlap between groups."""
    return [
        "alpha beta gamma delta",
        "alpha beta gamma epsilon",
        "alpha beta gamma zeta",
        "river stone water cloud",
        "river stone water rain",
        "river stone water snow",
    ]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests independent of any config file or overrides on the host."""
    for key in list(os.environ):
        if key.startswith("FOSSILMIND_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FOSSILMIND_CONFIG", str(tmp_path / "absent-config.json"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()
