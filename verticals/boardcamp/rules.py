"""Boardcamp business rules — pure functions.

Re-exports the rules engine checks and adds the rental price and delay fee
arithmetic. All amounts are integers in minor currency units.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo

from patterns.rules_engine import (
    RuleResult,
    check_days_rented,
    check_stock_availability,
)

__all__ = [
    "RuleResult",
    "check_days_rented",
    "check_stock_availability",
    "compute_original_price",
    "to_calendar_date",
    "expected_return_date",
    "compute_delay_days",
    "compute_delay_fee",
]


def compute_original_price(price_per_day: int, days_rented: int) -> int:
    """Price fixed at admission: daily price times reserved days."""
    return price_per_day * days_rented


def to_calendar_date(moment: datetime, tz: tzinfo) -> date:
    """Truncate a timestamp to its calendar day in `tz`.

    Naive timestamps are read as UTC (SQLite drops the offset on storage).
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def expected_return_date(rent_day: date, days_rented: int) -> date:
    return rent_day + timedelta(days=days_rented)


def compute_delay_days(expected: date, returned: date) -> int:
    """Whole days between the expected and actual return; negative if early."""
    return (returned - expected).days


def compute_delay_fee(price_per_day: int, delay_days: int) -> int:
    """Delay fee for returning `delay_days` late; never negative."""
    return max(0, price_per_day * delay_days)
