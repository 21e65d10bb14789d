"""
Pydantic schemas for the prize HTTP API.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class PrizeCreateRequest(BaseModel):
    # Presence and range are checked by the collection so that failures map
    # to 400 with a single error message.
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    requiredStamps: Optional[Union[int, float, str]] = None


class PrizeUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    requiredStamps: Optional[int] = None
    isRedeemed: Optional[bool] = None


class PrizeResponse(BaseModel):
    # Stored records are returned as found; older blobs may hold fractional
    # stamp counts or nulls left by partial updates.
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    requiredStamps: Optional[Union[int, float, str]] = None
    isRedeemed: Optional[bool] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    storage: str
