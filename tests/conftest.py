"""Shared fixtures: a SQLite database per test, a controllable clock, seed data."""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

from core.database import (
    create_engine_for,
    create_session_factory,
    get_session_context,
    get_session_factory,
    init_db,
)
from patterns.domain_config import BoardcampConfig
from verticals.boardcamp.repository import (
    CategoryRepository,
    CustomerRepository,
    GameRepository,
)
from verticals.boardcamp.service import RentalService


class FakeClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'boardcamp.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 15, 30, tzinfo=timezone.utc))


@pytest.fixture
def service(session_factory, clock):
    return RentalService(session_factory, BoardcampConfig.default(), clock=clock)


@pytest_asyncio.fixture
async def seed(session_factory):
    """One category, two games (1 and 3 units) and two customers."""
    async with get_session_context(session_factory) as session:
        category = await CategoryRepository(session).create({"name": "Strategy"})
        games = GameRepository(session)
        solo = await games.create({
            "name": "Terra Mystica",
            "image": "http://img/tm.png",
            "stock_total": 1,
            "category_id": category["id"],
            "price_per_day": 1000,
        })
        trio = await games.create({
            "name": "Catan",
            "image": "http://img/catan.png",
            "stock_total": 3,
            "category_id": category["id"],
            "price_per_day": 1500,
        })
        customers = CustomerRepository(session)
        ana = await customers.create({
            "name": "Ana",
            "phone": "21998899222",
            "cpf": "01234567890",
            "birthday": datetime(1992, 10, 5).date(),
        })
        bruno = await customers.create({
            "name": "Bruno",
            "phone": "2133334444",
            "cpf": "98765432100",
            "birthday": datetime(1988, 1, 20).date(),
        })

    return {
        "category_id": category["id"],
        "solo_game_id": solo["id"],
        "trio_game_id": trio["id"],
        "ana_id": ana["id"],
        "bruno_id": bruno["id"],
    }


@pytest_asyncio.fixture
async def client(session_factory):
    from api.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
