"""
HTTP routes for the prize API.
"""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import APIRouter, Depends

from stampbook.dependencies import get_prize_collection, get_prize_store
from stampbook.errors import NotFoundError, UnexpectedError, ValidationError
from stampbook.models import PrizeInput, PrizeUpdate
from stampbook.prizes import PrizeCollection
from stampbook.schemas import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    PrizeCreateRequest,
    PrizeResponse,
    PrizeUpdateRequest,
)
from stampbook.storage import PrizeStore

router = APIRouter()

PRIZE_NOT_FOUND = "Prize not found"

NOT_FOUND_RESPONSES = {404: {"model": ErrorResponse}}


@contextmanager
def _failure_message(message: str):
    """Re-raise anything unexpected as UnexpectedError carrying ``message``."""
    try:
        yield
    except (ValidationError, NotFoundError):
        raise
    except Exception as exc:
        raise UnexpectedError(message) from exc


@router.get("/prizes", response_model=list[PrizeResponse])
def list_prizes(prizes: PrizeCollection = Depends(get_prize_collection)):
    with _failure_message("Failed to fetch prizes"):
        return [p.as_dict() for p in prizes.get_all()]


@router.post(
    "/prizes",
    response_model=PrizeResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
def create_prize(
    payload: PrizeCreateRequest,
    prizes: PrizeCollection = Depends(get_prize_collection),
):
    with _failure_message("Failed to create prize"):
        prize = prizes.create(
            PrizeInput(
                name=payload.name,
                description=payload.description,
                image=payload.image,
                requiredStamps=payload.requiredStamps,
            )
        )
        return prize.as_dict()


@router.get(
    "/prizes/{prize_id}", response_model=PrizeResponse, responses=NOT_FOUND_RESPONSES
)
def get_prize(prize_id: str, prizes: PrizeCollection = Depends(get_prize_collection)):
    with _failure_message("Failed to fetch prize"):
        prize = prizes.get_by_id(prize_id)
        if not prize:
            raise NotFoundError(PRIZE_NOT_FOUND)
        return prize.as_dict()


@router.patch(
    "/prizes/{prize_id}", response_model=PrizeResponse, responses=NOT_FOUND_RESPONSES
)
def update_prize(
    prize_id: str,
    payload: PrizeUpdateRequest,
    prizes: PrizeCollection = Depends(get_prize_collection),
):
    with _failure_message("Failed to update prize"):
        # Explicit nulls are dropped rather than blanking fields.
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        prize = prizes.update(prize_id, PrizeUpdate.from_payload(changes))
        if not prize:
            raise NotFoundError(PRIZE_NOT_FOUND)
        return prize.as_dict()


@router.delete(
    "/prizes/{prize_id}", response_model=MessageResponse, responses=NOT_FOUND_RESPONSES
)
def delete_prize(prize_id: str, prizes: PrizeCollection = Depends(get_prize_collection)):
    with _failure_message("Failed to delete prize"):
        if not prizes.delete(prize_id):
            raise NotFoundError(PRIZE_NOT_FOUND)
        return MessageResponse(message="Prize deleted successfully")


@router.get("/health", response_model=HealthResponse)
def health(store: PrizeStore = Depends(get_prize_store)):
    return HealthResponse(status="ok", storage=store.describe())

