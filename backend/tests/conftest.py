import itertools
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from compass.main import app
from compass.api.deps import get_clock
from compass.engine_config import EngineConfig
from compass.rate_limiter import limiter
from compass.models import (
    Commitment,
    CommitmentDirection,
    CommitmentStatus,
    Entry,
    EntryKind,
    Project,
    Reflection,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionType,
)
from compass.services.clock import FixedClock

# Wednesday, mid-quarter
NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


def days(n: float) -> timedelta:
    return timedelta(days=n)


def make_commitment(**overrides) -> Commitment:
    data = {
        "id": _next_id("c"),
        "title": "Send the hiring plan",
        "direction": CommitmentDirection.I_OWE,
        "status": CommitmentStatus.OPEN,
        "created_at": NOW - days(3),
    }
    data.update(overrides)
    return Commitment(**data)


def make_entry(**overrides) -> Entry:
    data = {
        "id": _next_id("e"),
        "title": "Weekly sync",
        "kind": EntryKind.MEETING,
        "occurred_at": NOW - days(1),
    }
    data.update(overrides)
    return Entry(**data)


def make_decision(**overrides) -> Entry:
    data = {
        "title": "Move the launch to May",
        "kind": EntryKind.DECISION,
        "is_decision": True,
        "occurred_at": NOW - days(10),
    }
    data.update(overrides)
    return make_entry(**data)


def make_reflection(**overrides) -> Reflection:
    data = {
        "id": _next_id("r"),
        "reflection_type": ReflectionType.PERIODIC,
        "period_type": ReflectionPeriodType.WEEK,
        "created_at": NOW - days(1),
        "questions_answers": [ReflectionQA(question="What went well?", answer="Shipped on time")],
    }
    data.update(overrides)
    return Reflection(**data)


def make_project(**overrides) -> Project:
    data = {
        "id": _next_id("p"),
        "name": "Platform migration",
        "created_at": NOW - days(120),
        "last_active_at": NOW - days(2),
    }
    data.update(overrides)
    return Project(**data)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def config():
    """Engine config with product defaults, independent of ENGINE_* env vars."""
    return EngineConfig.model_construct()


@pytest_asyncio.fixture
async def client(clock):
    """Create test client with the clock frozen at NOW."""
    app.dependency_overrides[get_clock] = lambda: clock
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def dump(*models) -> list[dict]:
    """Serialize snapshot models into a JSON request body."""
    return [m.model_dump(mode="json") for m in models]
