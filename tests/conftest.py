from __future__ import annotations

import random
from pathlib import Path

import pytest

from src.rules.loader import load_rules
from src.rules.models import Rules
from src.services.resolution import ResolutionService, create_resolution_service
from tests.fakes import FakeClock, FlakyStore, RecordingSleep


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def rules() -> Rules:
    return Rules()


@pytest.fixture
def project_rules() -> Rules:
    """The rules.yaml shipped at the project root."""
    return load_rules(Path(__file__).resolve().parent.parent / "rules.yaml")


@pytest.fixture
def service(
    rules: Rules, store: FlakyStore, clock: FakeClock, sleeper: RecordingSleep
) -> ResolutionService:
    return create_resolution_service(rules, store, clock=clock, sleep=sleeper, rng=random.Random(7))
