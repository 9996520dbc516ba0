"""Test rental admission, settlement and listing against SQLite."""
import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from core.database import get_session_context
from patterns.domain_config import BoardcampConfig, RentalConfig
from patterns.workflow_states import InvalidTransition
from verticals.boardcamp.exceptions import (
    AlreadySettled,
    CapacityExceeded,
    InvalidInput,
    NotFound,
    StorageError,
)
from verticals.boardcamp.models.db_models import Game
from verticals.boardcamp.repository import RentalRepository
from verticals.boardcamp.service import RentalService


# ---------------------------------------------------------------------------
# Admission
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admit_fixes_price_and_starts_active(service, seed):
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 3)
    assert rental["originalPrice"] == 3000
    assert rental["daysRented"] == 3
    assert rental["returnDate"] is None
    assert rental["delayFee"] is None
    assert await service.count_active(seed["solo_game_id"]) == 1


@pytest.mark.asyncio
async def test_admit_rejects_when_last_unit_is_rented(service, seed):
    await service.admit(seed["ana_id"], seed["solo_game_id"], 3)
    with pytest.raises(CapacityExceeded):
        await service.admit(seed["bruno_id"], seed["solo_game_id"], 1)
    assert await service.count_active(seed["solo_game_id"]) == 1


@pytest.mark.asyncio
async def test_capacity_exceeded_is_invalid_input(service, seed):
    await service.admit(seed["ana_id"], seed["solo_game_id"], 1)
    with pytest.raises(InvalidInput):
        await service.admit(seed["ana_id"], seed["solo_game_id"], 1)


@pytest.mark.asyncio
async def test_concurrent_admissions_for_last_unit(service, seed):
    results = await asyncio.gather(
        service.admit(seed["ana_id"], seed["solo_game_id"], 2),
        service.admit(seed["bruno_id"], seed["solo_game_id"], 2),
        return_exceptions=True,
    )
    admitted = [r for r in results if isinstance(r, dict)]
    rejected = [r for r in results if isinstance(r, CapacityExceeded)]
    assert len(admitted) == 1
    assert len(rejected) == 1
    assert await service.count_active(seed["solo_game_id"]) == 1


@pytest.mark.asyncio
async def test_concurrent_admissions_never_exceed_stock(service, seed):
    attempts = [
        service.admit(seed["ana_id"] if i % 2 else seed["bruno_id"], seed["trio_game_id"], 1)
        for i in range(6)
    ]
    results = await asyncio.gather(*attempts, return_exceptions=True)
    admitted = [r for r in results if isinstance(r, dict)]
    rejected = [r for r in results if isinstance(r, CapacityExceeded)]
    assert len(admitted) == 3
    assert len(rejected) == 3
    assert await service.count_active(seed["trio_game_id"]) == 3


@pytest.mark.asyncio
async def test_admit_unknown_customer_creates_nothing(service, seed):
    with pytest.raises(InvalidInput) as exc_info:
        await service.admit(9999, seed["solo_game_id"], 2)
    assert not isinstance(exc_info.value, CapacityExceeded)
    assert await service.list_rentals() == []


@pytest.mark.asyncio
async def test_admit_unknown_game(service, seed):
    with pytest.raises(InvalidInput) as exc_info:
        await service.admit(seed["ana_id"], 9999, 2)
    assert exc_info.value.details == {"game_id": 9999}


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [0, -2, True, 1.5, "3", None])
async def test_admit_rejects_bad_rental_period(service, seed, days):
    with pytest.raises(InvalidInput):
        await service.admit(seed["ana_id"], seed["solo_game_id"], days)
    assert await service.count_active(seed["solo_game_id"]) == 0


@pytest.mark.asyncio
async def test_bad_period_is_reported_before_missing_records(service):
    with pytest.raises(InvalidInput, match="daysRented"):
        await service.admit(1, 1, 0)


@pytest.mark.asyncio
async def test_price_is_fixed_at_admission(service, seed, session_factory):
    rental = await service.admit(seed["ana_id"], seed["trio_game_id"], 2)

    async with get_session_context(session_factory) as session:
        await session.execute(
            update(Game).where(Game.id == seed["trio_game_id"]).values({Game.price_per_day: 9900})
        )

    listed = await service.list_rentals(game_id=seed["trio_game_id"])
    assert listed[0]["id"] == rental["id"]
    assert listed[0]["originalPrice"] == 3000


@pytest.mark.asyncio
async def test_returned_unit_can_be_rented_again(service, seed):
    first = await service.admit(seed["ana_id"], seed["solo_game_id"], 1)
    await service.settle(first["id"])
    second = await service.admit(seed["bruno_id"], seed["solo_game_id"], 1)
    assert second["id"] != first["id"]
    assert await service.count_active(seed["solo_game_id"]) == 1


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_settle_late_charges_per_day(service, seed, clock):
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 2)
    clock.advance(days=5)

    settled = await service.settle(rental["id"])

    assert settled["returnDate"] == "2024-03-06"
    assert settled["delayFee"] == 1000 * 3


@pytest.mark.asyncio
async def test_settle_early_charges_nothing(service, seed, clock):
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 2)
    clock.advance(days=1)

    settled = await service.settle(rental["id"])

    assert settled["delayFee"] == 0
    assert settled["returnDate"] == "2024-03-02"


@pytest.mark.asyncio
async def test_settle_on_expected_day_charges_nothing(service, seed, clock):
    rental = await service.admit(seed["ana_id"], seed["trio_game_id"], 4)
    clock.advance(days=4, hours=8)

    settled = await service.settle(rental["id"])

    assert settled["delayFee"] == 0


@pytest.mark.asyncio
async def test_delay_counts_calendar_days_not_elapsed_hours(service, seed, clock):
    clock.now = datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc)
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 2)
    # 48h40m after admission but on the third calendar day
    clock.now = datetime(2024, 3, 4, 0, 10, tzinfo=timezone.utc)

    settled = await service.settle(rental["id"])

    assert settled["delayFee"] == 1000


@pytest.mark.asyncio
async def test_calendar_days_follow_business_timezone(session_factory, seed, clock):
    config = BoardcampConfig(rentals=RentalConfig(business_timezone="America/Sao_Paulo"))
    service = RentalService(session_factory, config, clock=clock)

    # 22:00 on March 1st in Sao Paulo
    clock.now = datetime(2024, 3, 2, 1, 0, tzinfo=timezone.utc)
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 1)
    clock.now = datetime(2024, 3, 3, 12, 0, tzinfo=timezone.utc)

    settled = await service.settle(rental["id"])

    assert settled["returnDate"] == "2024-03-03"
    assert settled["delayFee"] == 1000


@pytest.mark.asyncio
async def test_settle_twice_keeps_first_result(service, seed, clock):
    rental = await service.admit(seed["ana_id"], seed["solo_game_id"], 2)
    clock.advance(days=3)
    first = await service.settle(rental["id"])

    clock.advance(days=10)
    with pytest.raises(AlreadySettled) as exc_info:
        await service.settle(rental["id"])
    assert isinstance(exc_info.value.__cause__, InvalidTransition)

    stored = (await service.list_rentals(customer_id=seed["ana_id"]))[0]
    assert stored["returnDate"] == first["returnDate"]
    assert stored["delayFee"] == first["delayFee"] == 1000


@pytest.mark.asyncio
async def test_concurrent_settlements_succeed_once(service, seed, clock):
    rental = await service.admit(seed["ana_id"], seed["trio_game_id"], 1)
    clock.advance(days=2)

    results = await asyncio.gather(
        service.settle(rental["id"]),
        service.settle(rental["id"]),
        service.settle(rental["id"]),
        return_exceptions=True,
    )

    assert len([r for r in results if isinstance(r, dict)]) == 1
    assert len([r for r in results if isinstance(r, AlreadySettled)]) == 2


@pytest.mark.asyncio
async def test_settle_unknown_rental(service, seed):
    with pytest.raises(NotFound):
        await service.settle(4242)


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_rentals_filters(service, seed):
    await service.admit(seed["ana_id"], seed["solo_game_id"], 1)
    await service.admit(seed["ana_id"], seed["trio_game_id"], 2)
    await service.admit(seed["bruno_id"], seed["trio_game_id"], 3)

    assert len(await service.list_rentals()) == 3
    assert len(await service.list_rentals(customer_id=seed["ana_id"])) == 2
    assert len(await service.list_rentals(game_id=seed["trio_game_id"])) == 2

    both = await service.list_rentals(customer_id=seed["bruno_id"], game_id=seed["trio_game_id"])
    assert len(both) == 1
    assert both[0]["customer"] == {"id": seed["bruno_id"], "name": "Bruno"}
    assert both[0]["game"] == {
        "id": seed["trio_game_id"],
        "name": "Catan",
        "categoryId": seed["category_id"],
        "categoryName": "Strategy",
    }


@pytest.mark.asyncio
async def test_list_rentals_paginates(service, seed):
    for _ in range(3):
        await service.admit(seed["ana_id"], seed["trio_game_id"], 1)

    page = await service.list_rentals(offset=1, limit=1)
    everything = await service.list_rentals()
    assert [r["id"] for r in page] == [everything[1]["id"]]


# ---------------------------------------------------------------------------
# Storage failures
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_database_error_becomes_storage_error(service, seed, monkeypatch):
    async def broken_count(self, game_id):
        raise OperationalError("SELECT count(*)", {}, Exception("database is locked"))

    monkeypatch.setattr(RentalRepository, "count_active", broken_count)

    with pytest.raises(StorageError):
        await service.admit(seed["ana_id"], seed["solo_game_id"], 1)


@pytest.mark.asyncio
async def test_connection_error_becomes_storage_error(seed, clock):
    def unreachable():
        raise ConnectionRefusedError("connection refused")

    service = RentalService(unreachable, clock=clock)

    with pytest.raises(StorageError, match="ConnectionRefusedError"):
        await service.admit(seed["ana_id"], seed["solo_game_id"], 1)
    with pytest.raises(StorageError):
        await service.settle(1)


@pytest.mark.asyncio
async def test_timed_out_admission_leaves_no_rental(session_factory, seed, clock, monkeypatch):
    config = BoardcampConfig(rentals=RentalConfig(transaction_timeout_seconds=0.05))
    service = RentalService(session_factory, config, clock=clock)
    original_create = RentalRepository.create

    async def slow_create(self, data):
        created = await original_create(self, data)
        await asyncio.sleep(1)
        return created

    monkeypatch.setattr(RentalRepository, "create", slow_create)

    with pytest.raises(StorageError, match="timed out"):
        await service.admit(seed["ana_id"], seed["solo_game_id"], 1)

    monkeypatch.undo()
    assert await service.list_rentals() == []
