"""Pure-function rules engine pattern.

Rules are stateless functions: (inputs) -> RuleResult.
No database, no side effects. This makes them:
- Trivially testable (pure input/output)
- Reusable (the service decides what a failure means)
- Auditable (deterministic, explainable)

Example domain: a board game rental shop checking requested rental
periods and remaining stock.
"""

from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Rental rules
# ---------------------------------------------------------------------------

def check_days_rented(days_rented: Any) -> RuleResult:
    """Check that the requested rental period is a positive whole number of days."""
    is_int = isinstance(days_rented, int) and not isinstance(days_rented, bool)
    passed = is_int and days_rented > 0

    return RuleResult(
        passed=passed,
        rule_name="days_rented",
        message=(
            f"Rental period of {days_rented} days accepted"
            if passed
            else f"daysRented must be a positive integer, got {days_rented!r}"
        ),
        details={"days_rented": days_rented},
    )


def check_stock_availability(active_rentals: int, stock_total: int) -> RuleResult:
    """Check if a game still has a free unit.

    Pure function: takes the current active rental count and the total
    stock, returns result.
    """
    available = stock_total - active_rentals
    passed = available > 0

    return RuleResult(
        passed=passed,
        rule_name="stock_availability",
        message=(
            f"In stock: {available} of {stock_total} available"
            if passed
            else f"No units available: {active_rentals} of {stock_total} rented"
        ),
        details={
            "active_rentals": active_rentals,
            "stock_total": stock_total,
            "available": max(available, 0),
        },
    )
