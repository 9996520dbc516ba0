"""Boardcamp repositories — async database access.

Extends BaseRepository with Boardcamp-specific queries: prefix search for
games and customers, active rental counts, the rental listing with nested
customer/game summaries, and the conditional return update.
"""

from datetime import date

from fastapi import Depends
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from patterns.repository import BaseRepository
from verticals.boardcamp.models.db_models import Category, Customer, Game, Rental


# ---------------------------------------------------------------------------
# Category repository
# ---------------------------------------------------------------------------

class CategoryRepository(BaseRepository[Category]):
    """Repository for game categories."""

    model = Category


# ---------------------------------------------------------------------------
# Game repository
# ---------------------------------------------------------------------------

class GameRepository(BaseRepository[Game]):
    """Repository for the game catalog."""

    model = Game

    async def search(
        self,
        name_prefix: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[dict]:
        """List games with their category name, optionally by name prefix.

        The prefix match is case-insensitive and treats % and _ literally.
        """
        stmt = select(Game, Category.name.label("category_name")).join(
            Category, Category.id == Game.category_id
        )

        if name_prefix:
            stmt = stmt.where(Game.name.istartswith(name_prefix, autoescape=True))

        stmt = stmt.order_by(Game.id).offset(offset).limit(limit)

        result = await self.session.execute(stmt)
        return [
            {**game.to_dict(), "categoryName": category_name}
            for game, category_name in result.all()
        ]


# ---------------------------------------------------------------------------
# Customer repository
# ---------------------------------------------------------------------------

class CustomerRepository(BaseRepository[Customer]):
    """Repository for customers."""

    model = Customer

    async def search(
        self,
        cpf_prefix: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[dict]:
        """List customers, optionally filtered by CPF prefix."""
        stmt = select(Customer)

        if cpf_prefix:
            stmt = stmt.where(Customer.cpf.startswith(cpf_prefix, autoescape=True))

        stmt = stmt.order_by(Customer.id).offset(offset).limit(limit)

        result = await self.session.execute(stmt)
        return [row.to_dict() for row in result.scalars().all()]


# ---------------------------------------------------------------------------
# Rental repository
# ---------------------------------------------------------------------------

class RentalRepository(BaseRepository[Rental]):
    """Repository for rentals: availability counts, listing and returns."""

    model = Rental

    async def count_active(self, game_id: int) -> int:
        """Number of rentals of `game_id` that have not been returned."""
        stmt = select(func.count()).select_from(Rental).where(
            Rental.game_id == game_id,
            Rental.return_date.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def search(
        self,
        customer_id: int | None = None,
        game_id: int | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[dict]:
        """List rentals with customer and game summaries.

        Absent filters match every rental.
        """
        stmt = (
            select(
                Rental,
                Customer.name.label("customer_name"),
                Game.name.label("game_name"),
                Game.category_id.label("category_id"),
                Category.name.label("category_name"),
            )
            .join(Customer, Customer.id == Rental.customer_id)
            .join(Game, Game.id == Rental.game_id)
            .join(Category, Category.id == Game.category_id)
        )

        if customer_id is not None:
            stmt = stmt.where(Rental.customer_id == customer_id)
        if game_id is not None:
            stmt = stmt.where(Rental.game_id == game_id)

        stmt = stmt.order_by(Rental.id).offset(offset).limit(limit)

        result = await self.session.execute(stmt)
        return [
            {
                **rental.to_dict(),
                "customer": {"id": rental.customer_id, "name": customer_name},
                "game": {
                    "id": rental.game_id,
                    "name": game_name,
                    "categoryId": category_id,
                    "categoryName": category_name,
                },
            }
            for rental, customer_name, game_name, category_id, category_name in result.all()
        ]

    async def mark_returned(
        self, rental_id: int, return_date: date, delay_fee: int
    ) -> bool:
        """Record a return in one statement.

        Both fields are written together and only while the rental is still
        active. Returns False when the rental was already returned.
        """
        stmt = (
            update(Rental)
            .where(Rental.id == rental_id, Rental.return_date.is_(None))
            .values({Rental.return_date: return_date, Rental.delay_fee: delay_fee})
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_category_repository(
    session: AsyncSession = Depends(get_session),
) -> CategoryRepository:
    """FastAPI dependency for CategoryRepository."""
    return CategoryRepository(session)


def get_game_repository(
    session: AsyncSession = Depends(get_session),
) -> GameRepository:
    """FastAPI dependency for GameRepository."""
    return GameRepository(session)


def get_customer_repository(
    session: AsyncSession = Depends(get_session),
) -> CustomerRepository:
    """FastAPI dependency for CustomerRepository."""
    return CustomerRepository(session)
