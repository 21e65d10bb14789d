"""
Dependency wiring for the FastAPI app.

The store is built once by the app factory and kept on ``app.state``; routes
reach it through these dependencies instead of module-level singletons.
"""

from __future__ import annotations

from fastapi import Request

from stampbook.prizes import PrizeCollection
from stampbook.storage import PrizeStore


def get_prize_store(request: Request) -> PrizeStore:
    return request.app.state.prize_store


def get_prize_collection(request: Request) -> PrizeCollection:
    return PrizeCollection(get_prize_store(request))
