"""
Collection operations over a prize store.

Every mutation loads the full collection, changes it in memory and writes the
whole collection back. Nothing serializes concurrent writers, so two requests
racing on the same snapshot can overwrite each other (last write wins).
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from stampbook.errors import ValidationError
from stampbook.models import (
    MAX_REQUIRED_STAMPS,
    MIN_REQUIRED_STAMPS,
    PLACEHOLDER_IMAGE,
    Prize,
    PrizeInput,
    PrizeUpdate,
    next_timestamp,
    utc_timestamp,
)
from stampbook.storage import PrizeStore

logger = logging.getLogger(__name__)


def _coerce_stamps(value) -> int:
    # bool counts as 0/1, the same coercion the HTTP schema applies.
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError("Required stamps must be a number")


def validate_input(prize_input: PrizeInput) -> int:
    """Check a creation payload and return the normalized stamp count."""
    if (
        not prize_input.name
        or not prize_input.description
        or not prize_input.requiredStamps
    ):
        raise ValidationError("Missing required fields")
    stamps = _coerce_stamps(prize_input.requiredStamps)
    if stamps < MIN_REQUIRED_STAMPS or stamps > MAX_REQUIRED_STAMPS:
        raise ValidationError(
            f"Required stamps must be between {MIN_REQUIRED_STAMPS} "
            f"and {MAX_REQUIRED_STAMPS}"
        )
    return stamps


def _new_prize(prize_input: PrizeInput) -> Prize:
    stamps = validate_input(prize_input)
    now = utc_timestamp()
    return Prize(
        id=str(uuid.uuid4()),
        name=prize_input.name,
        description=prize_input.description,
        image=prize_input.image or PLACEHOLDER_IMAGE,
        requiredStamps=stamps,
        isRedeemed=False,
        createdAt=now,
        updatedAt=now,
    )


class PrizeCollection:
    """Create/read/update/delete over the single stored prize collection."""

    def __init__(self, store: PrizeStore):
        self.store = store

    def get_all(self) -> list[Prize]:
        return self.store.load_all()

    def get_by_id(self, prize_id: str) -> Optional[Prize]:
        for prize in self.store.load_all():
            if prize.id == prize_id:
                return prize
        return None

    def create(self, prize_input: PrizeInput) -> Prize:
        prize = _new_prize(prize_input)
        prizes = self.store.load_all()
        prizes.append(prize)
        self.store.save_all(prizes)
        logger.info("Created prize %s (%s)", prize.id, prize.name)
        return prize

    def create_many(
        self, prize_inputs: list[PrizeInput], *, replace: bool = False
    ) -> list[Prize]:
        """
        Validate every input, then write them in a single save. With
        ``replace`` the new prizes take the place of the stored collection.
        """
        created = [_new_prize(prize_input) for prize_input in prize_inputs]
        prizes = [] if replace else self.store.load_all()
        prizes.extend(created)
        self.store.save_all(prizes)
        logger.info("Created %d prizes (replace=%s)", len(created), replace)
        return created

    def update(self, prize_id: str, prize_update: PrizeUpdate) -> Optional[Prize]:
        """
        Shallow-merge ``prize_update`` over the stored prize.

        Values are not validated here: only creation enforces the stamp range.
        """
        prizes = self.store.load_all()
        for prize in prizes:
            if prize.id == prize_id:
                break
        else:
            return None

        for name, value in prize_update.fields.items():
            setattr(prize, name, value)
        prize.updatedAt = next_timestamp(prize.updatedAt)
        self.store.save_all(prizes)
        logger.info(
            "Updated prize %s fields=%s", prize.id, sorted(prize_update.fields)
        )
        return prize

    def delete(self, prize_id: str) -> bool:
        prizes = self.store.load_all()
        remaining = [p for p in prizes if p.id != prize_id]
        if len(remaining) == len(prizes):
            return False
        self.store.save_all(remaining)
        logger.info("Deleted prize %s", prize_id)
        return True
