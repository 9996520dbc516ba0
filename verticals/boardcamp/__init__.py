"""Boardcamp vertical — board game rental shop.

Brings the patterns together in one domain:
- SQLAlchemy models for categories, games, customers and rentals
- Async repositories with search and pagination
- Rental admission and settlement service with per-game locking
- FastAPI router mapping domain errors to HTTP statuses
- Pure-function rental rules
- Dataclass configuration
"""
