"""Dataclass-based domain configuration pattern.

The service defines its thresholds and limits as a frozen dataclass.
This gives you:
- Type safety (IDE autocompletion, mypy checking)
- Default values (sensible out-of-the-box)
- Immutability (frozen=True prevents accidental mutation)
- Easy overrides (from env vars or tests)

Example domain: a board game rental shop with rental and listing config.
"""

import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RentalConfig:
    """Rental admission and settlement settings."""

    business_timezone: str = "UTC"  # calendar days are counted here
    transaction_timeout_seconds: float = 10.0

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.business_timezone)


@dataclass(frozen=True)
class ListingConfig:
    """Pagination limits for list endpoints."""

    default_limit: int = 50
    max_limit: int = 500


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoardcampConfig:
    """Complete configuration for the Boardcamp service.

    Usage::

        config = BoardcampConfig.from_env()
        today = now.astimezone(config.rentals.tzinfo).date()
    """

    rentals: RentalConfig = field(default_factory=RentalConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)

    @classmethod
    def default(cls) -> "BoardcampConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "BOARDCAMP_") -> "BoardcampConfig":
        """Create config from environment variables.

        Example: BOARDCAMP_BUSINESS_TIMEZONE=America/Sao_Paulo
        """
        rental_overrides = {}
        tz = os.getenv(f"{prefix}BUSINESS_TIMEZONE")
        if tz:
            ZoneInfo(tz)  # fail fast on unknown zones
            rental_overrides["business_timezone"] = tz
        timeout = os.getenv(f"{prefix}TRANSACTION_TIMEOUT_SECONDS")
        if timeout:
            rental_overrides["transaction_timeout_seconds"] = float(timeout)

        listing_overrides = {}
        default_limit = os.getenv(f"{prefix}DEFAULT_LIMIT")
        if default_limit:
            listing_overrides["default_limit"] = int(default_limit)
        max_limit = os.getenv(f"{prefix}MAX_LIMIT")
        if max_limit:
            listing_overrides["max_limit"] = int(max_limit)

        return cls(
            rentals=RentalConfig(**rental_overrides),
            listing=ListingConfig(**listing_overrides),
        )
