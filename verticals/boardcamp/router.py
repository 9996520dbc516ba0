"""Boardcamp API router — catalog CRUD + rentals.

Demonstrates the standard router pattern:
- Categories, games and customers: create with duplicate detection, list
  with prefix search and pagination
- Rentals: admission, listing, and return settlement through RentalService
- Repository/service injection via FastAPI Depends
- Domain exceptions raised here are mapped to HTTP statuses in api.errors
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError

from verticals.boardcamp.config import config
from verticals.boardcamp.exceptions import Conflict, InvalidInput, NotFound
from verticals.boardcamp.models.schemas import (
    CategoryCreate,
    CustomerCreate,
    GameCreate,
    RentalCreate,
)
from verticals.boardcamp.repository import (
    CategoryRepository,
    CustomerRepository,
    GameRepository,
    get_category_repository,
    get_customer_repository,
    get_game_repository,
)
from verticals.boardcamp.service import RentalService, get_rental_service

router = APIRouter()

Offset = Annotated[int, Query(ge=0)]
Limit = Annotated[int, Query(ge=1, le=config.listing.max_limit)]


# ============================================================================
# Category Endpoints
# ============================================================================

@router.get("/categories")
async def list_categories(
    offset: Offset = 0,
    limit: Limit = config.listing.default_limit,
    repo: CategoryRepository = Depends(get_category_repository),
):
    """List all game categories."""
    return await repo.list(offset=offset, limit=limit)


@router.post("/categories", status_code=201)
async def create_category(
    request: CategoryCreate,
    repo: CategoryRepository = Depends(get_category_repository),
):
    """Register a new category; names are unique."""
    if await repo.exists_by(name=request.name):
        raise Conflict("Category", "name", request.name)
    try:
        return await repo.create(data=request.model_dump())
    except IntegrityError as exc:
        raise Conflict("Category", "name", request.name) from exc


# ============================================================================
# Game Endpoints
# ============================================================================

@router.get("/games")
async def list_games(
    name: Optional[str] = None,
    offset: Offset = 0,
    limit: Limit = config.listing.default_limit,
    repo: GameRepository = Depends(get_game_repository),
):
    """List games with their category name, filtered by name prefix."""
    return await repo.search(name_prefix=name, offset=offset, limit=limit)


@router.post("/games", status_code=201)
async def create_game(
    request: GameCreate,
    repo: GameRepository = Depends(get_game_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """Add a game to the catalog. The category must already exist."""
    if not await category_repo.exists_by(id=request.category_id):
        raise InvalidInput(
            f"Category {request.category_id} does not exist",
            {"category_id": request.category_id},
        )
    if await repo.exists_by(name=request.name):
        raise Conflict("Game", "name", request.name)
    try:
        return await repo.create(data=request.model_dump())
    except IntegrityError as exc:
        raise Conflict("Game", "name", request.name) from exc


# ============================================================================
# Customer Endpoints
# ============================================================================

@router.get("/customers")
async def list_customers(
    cpf: Optional[str] = None,
    offset: Offset = 0,
    limit: Limit = config.listing.default_limit,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """List customers, filtered by CPF prefix."""
    return await repo.search(cpf_prefix=cpf, offset=offset, limit=limit)


@router.get("/customers/{customer_id}")
async def get_customer(
    customer_id: int,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """Fetch one customer by id."""
    customer = await repo.get(customer_id)
    if not customer:
        raise NotFound("Customer", customer_id)
    return customer


@router.post("/customers", status_code=201)
async def create_customer(
    request: CustomerCreate,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """Register a customer; the CPF must not be registered yet."""
    if await repo.exists_by(cpf=request.cpf):
        raise Conflict("Customer", "cpf", request.cpf)
    try:
        return await repo.create(data=request.model_dump())
    except IntegrityError as exc:
        raise Conflict("Customer", "cpf", request.cpf) from exc


# ============================================================================
# Rental Endpoints
# ============================================================================

@router.get("/rentals")
async def list_rentals(
    customer_id: Optional[int] = Query(None, alias="customerId"),
    game_id: Optional[int] = Query(None, alias="gameId"),
    offset: Offset = 0,
    limit: Limit = config.listing.default_limit,
    service: RentalService = Depends(get_rental_service),
):
    """List rentals with customer and game summaries."""
    return await service.list_rentals(
        customer_id=customer_id,
        game_id=game_id,
        offset=offset,
        limit=limit,
    )


@router.post("/rentals", status_code=201)
async def create_rental(
    request: RentalCreate,
    service: RentalService = Depends(get_rental_service),
):
    """Rent one unit of a game to a customer."""
    return await service.admit(
        customer_id=request.customer_id,
        game_id=request.game_id,
        days_rented=request.days_rented,
    )


@router.post("/rentals/{rental_id}/return")
async def return_rental(
    rental_id: int,
    service: RentalService = Depends(get_rental_service),
):
    """Record a rental's return and charge any delay fee."""
    return await service.settle(rental_id)
