"""SQLAlchemy models for the Boardcamp vertical.

Column names keep the camelCase spelling of the existing Boardcamp schema
("stockTotal", "rentDate", ...) while the Python attributes are snake_case.
The to_dict() method provides the standard serialisation interface used by
repositories and routers.
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.models.base import Base, IdentityMixin


class Category(IdentityMixin, Base):
    """A game category (strategy, party, ...)."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class Game(IdentityMixin, Base):
    """A rentable board game with a fixed number of units."""

    __tablename__ = "games"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    stock_total: Mapped[int] = mapped_column("stockTotal", Integer, nullable=False)
    category_id: Mapped[int] = mapped_column(
        "categoryId", Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    price_per_day: Mapped[int] = mapped_column("pricePerDay", Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "stockTotal": self.stock_total,
            "categoryId": self.category_id,
            "pricePerDay": self.price_per_day,
        }


class Customer(IdentityMixin, Base):
    """A registered customer, identified by their CPF."""

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(String(11), nullable=False)
    cpf: Mapped[str] = mapped_column(String(11), nullable=False, unique=True)
    birthday: Mapped[date] = mapped_column(Date, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "cpf": self.cpf,
            "birthday": self.birthday.isoformat() if self.birthday else None,
        }


class Rental(IdentityMixin, Base):
    """A rental of one game unit by one customer.

    return_date is null while the rental is active. delay_fee is written
    together with return_date and never changes afterwards.
    """

    __tablename__ = "rentals"

    customer_id: Mapped[int] = mapped_column(
        "customerId", Integer, ForeignKey("customers.id"), nullable=False, index=True
    )
    game_id: Mapped[int] = mapped_column(
        "gameId", Integer, ForeignKey("games.id"), nullable=False, index=True
    )
    rent_date: Mapped[datetime] = mapped_column(
        "rentDate", DateTime(timezone=True), nullable=False
    )
    days_rented: Mapped[int] = mapped_column("daysRented", Integer, nullable=False)
    return_date: Mapped[date | None] = mapped_column("returnDate", Date, nullable=True)
    original_price: Mapped[int] = mapped_column("originalPrice", Integer, nullable=False)
    delay_fee: Mapped[int | None] = mapped_column("delayFee", Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "gameId": self.game_id,
            "rentDate": self.rent_date.isoformat() if self.rent_date else None,
            "daysRented": self.days_rented,
            "returnDate": self.return_date.isoformat() if self.return_date else None,
            "originalPrice": self.original_price,
            "delayFee": self.delay_fee,
        }
