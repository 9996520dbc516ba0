"""Rental admission and settlement.

RentalService owns its transactions instead of borrowing the request
session, so that every check and the write it guards commit or roll back
together:

- admit(): existence checks, stock check and insert run in one transaction
  that holds a lock on the game row (SELECT ... FOR UPDATE on PostgreSQL,
  BEGIN IMMEDIATE on SQLite). At most stockTotal rentals of a game can be
  active at once.
- settle(): the rental row is locked and the return is written with a single
  UPDATE guarded by "returnDate IS NULL", so a rental is returned once and
  returnDate/delayFee always appear together.

Each transaction runs under a timeout; on timeout or any database error the
transaction is rolled back and StorageError is raised. Nothing is retried.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import get_session_factory
from patterns.domain_config import BoardcampConfig
from patterns.workflow_states import InvalidTransition, RentalState, ensure_transition
from verticals.boardcamp.config import config as default_config
from verticals.boardcamp.exceptions import (
    AlreadySettled,
    CapacityExceeded,
    InvalidInput,
    NotFound,
    StorageError,
)
from verticals.boardcamp.repository import (
    CustomerRepository,
    GameRepository,
    RentalRepository,
)
from verticals.boardcamp.rules import (
    check_days_rented,
    check_stock_availability,
    compute_delay_days,
    compute_delay_fee,
    compute_original_price,
    expected_return_date,
    to_calendar_date,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RentalService:
    """Rental admission, settlement and listing over one session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: BoardcampConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session_factory = session_factory
        self.config = config or default_config
        self.clock = clock

    # -- Transaction wrapper --

    async def _run(self, operation: str, work: Awaitable[T]) -> T:
        """Await `work` under the transaction timeout, translating storage failures."""
        timeout = self.config.rentals.transaction_timeout_seconds
        try:
            return await asyncio.wait_for(work, timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error("rental_transaction_timeout", operation=operation, timeout=timeout)
            raise StorageError(operation, f"timed out after {timeout}s") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "rental_storage_failure",
                operation=operation,
                error=str(exc),
                exc_info=True,
            )
            raise StorageError(operation, type(exc).__name__) from exc

    # -- Availability --

    async def count_active(self, game_id: int) -> int:
        """Number of units of `game_id` currently rented out."""

        async def work() -> int:
            async with self.session_factory() as session:
                return await RentalRepository(session).count_active(game_id)

        return await self._run("count_active", work())

    # -- Admission --

    async def admit(self, customer_id: int, game_id: int, days_rented: Any) -> dict:
        """Create an active rental if the game still has a free unit.

        Raises InvalidInput for a bad period or unknown game/customer and
        CapacityExceeded when every unit is rented.
        """
        period = check_days_rented(days_rented)
        if not period.passed:
            raise InvalidInput(period.message, period.details)

        return await self._run("admit", self._admit(customer_id, game_id, days_rented))

    async def _admit(self, customer_id: int, game_id: int, days_rented: int) -> dict:
        async with self.session_factory() as session, session.begin():
            game = await GameRepository(session).get_model(game_id, for_update=True)
            if game is None:
                raise InvalidInput(f"Game {game_id} does not exist", {"game_id": game_id})

            if not await CustomerRepository(session).exists_by(id=customer_id):
                raise InvalidInput(
                    f"Customer {customer_id} does not exist", {"customer_id": customer_id}
                )

            rentals = RentalRepository(session)
            active = await rentals.count_active(game_id)
            availability = check_stock_availability(active, game.stock_total)
            if not availability.passed:
                logger.warning(
                    "rental_rejected_no_stock",
                    game_id=game_id,
                    customer_id=customer_id,
                    active_rentals=active,
                    stock_total=game.stock_total,
                )
                raise CapacityExceeded(game_id, active, game.stock_total)

            rental = await rentals.create({
                "customer_id": customer_id,
                "game_id": game_id,
                "rent_date": self.clock(),
                "days_rented": days_rented,
                "return_date": None,
                "original_price": compute_original_price(game.price_per_day, days_rented),
                "delay_fee": None,
            })

        logger.info(
            "rental_admitted",
            rental_id=rental["id"],
            game_id=game_id,
            customer_id=customer_id,
            days_rented=days_rented,
            original_price=rental["originalPrice"],
        )
        return rental

    # -- Settlement --

    async def settle(self, rental_id: int) -> dict:
        """Record the return of a rental and its delay fee.

        Raises NotFound for an unknown id and AlreadySettled if the rental
        was returned before (including by a concurrent call).
        """
        return await self._run("settle", self._settle(rental_id))

    async def _settle(self, rental_id: int) -> dict:
        tz = self.config.rentals.tzinfo

        async with self.session_factory() as session, session.begin():
            rentals = RentalRepository(session)
            rental = await rentals.get_model(rental_id, for_update=True)
            if rental is None:
                raise NotFound("Rental", rental_id)

            try:
                ensure_transition(RentalState.of(rental.return_date), RentalState.RETURNED)
            except InvalidTransition as exc:
                raise AlreadySettled(rental_id) from exc

            game = await GameRepository(session).get_model(rental.game_id)

            today = to_calendar_date(self.clock(), tz)
            expected = expected_return_date(
                to_calendar_date(rental.rent_date, tz), rental.days_rented
            )
            delay_days = compute_delay_days(expected, today)
            delay_fee = compute_delay_fee(game.price_per_day, delay_days)

            if not await rentals.mark_returned(rental_id, today, delay_fee):
                raise AlreadySettled(rental_id)

            settled = {
                **rental.to_dict(),
                "returnDate": today.isoformat(),
                "delayFee": delay_fee,
            }

        logger.info(
            "rental_settled",
            rental_id=rental_id,
            expected_return=expected.isoformat(),
            return_date=today.isoformat(),
            delay_days=max(delay_days, 0),
            delay_fee=delay_fee,
        )
        return settled

    # -- Query --

    async def list_rentals(
        self,
        customer_id: int | None = None,
        game_id: int | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[dict]:
        """Rentals matching the optional customer/game filters."""

        async def work() -> list[dict]:
            async with self.session_factory() as session:
                return await RentalRepository(session).search(
                    customer_id=customer_id,
                    game_id=game_id,
                    offset=offset,
                    limit=limit,
                )

        return await self._run("list_rentals", work())


# ---------------------------------------------------------------------------
# FastAPI dependency factory
# ---------------------------------------------------------------------------

def get_rental_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> RentalService:
    """FastAPI dependency for RentalService."""
    return RentalService(session_factory)
