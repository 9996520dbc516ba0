"""Pydantic schemas for API request validation.

Field aliases keep the camelCase JSON names used by Boardcamp clients
(`stockTotal`, `daysRented`, ...); model_dump() yields the snake_case
attribute names the repositories expect.
"""

import re
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

_ISO_DATE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CategoryCreate(_CamelModel):
    name: str = Field(..., min_length=1)


class GameCreate(_CamelModel):
    name: str = Field(..., min_length=1)
    image: str = ""
    stock_total: StrictInt = Field(..., gt=0, alias="stockTotal")
    category_id: StrictInt = Field(..., alias="categoryId")
    price_per_day: StrictInt = Field(..., gt=0, alias="pricePerDay")


class CustomerCreate(_CamelModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=r"^[0-9]{10,11}$")
    cpf: str = Field(..., pattern=r"^[0-9]{11}$")
    birthday: date

    @field_validator("birthday", mode="before")
    @classmethod
    def birthday_is_iso_string(cls, value: Any) -> Any:
        # pydantic would also accept timestamps and datetimes here
        if not isinstance(value, str) or not _ISO_DATE.match(value):
            raise ValueError("birthday must be a YYYY-MM-DD date")
        return value


class RentalCreate(_CamelModel):
    customer_id: StrictInt = Field(..., alias="customerId")
    game_id: StrictInt = Field(..., alias="gameId")
    days_rented: StrictInt = Field(..., gt=0, alias="daysRented")
