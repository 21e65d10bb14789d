"""
Prize record and the input/update shapes accepted by the collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

MIN_REQUIRED_STAMPS = 1
MAX_REQUIRED_STAMPS = 100

PLACEHOLDER_IMAGE = (
    "data:image/svg+xml;base64,"
    "PHN2ZyB3aWR0aD0iNDAwIiBoZWlnaHQ9IjMwMCIgdmlld0JveD0iMCAwIDQwMCAzMDAiIGZp"
    "bGw9Im5vbmUiIHhtbG5zPSJodHRwOi8vd3d3LnczLm9yZy8yMDAwL3N2ZyI+CjxyZWN0IHdp"
    "ZHRoPSI0MDAiIGhlaWdodD0iMzAwIiBmaWxsPSIjNEYzOUZGIi8+CjxwYXRoIGQ9Im0xNjAg"
    "MTMwIDQwIDM0LTQwIDM0IDE2IDEwIDI0LTM0IDI0IDM0IDE2LTEwem0wLTI0IDQ4IDQwIDQ4"
    "LTQwLTQ4LTQwLTQ4IDQweiIgZmlsbD0iI0ZGRiIvPgo8dGV4dCB4PSIyMDAiIHk9IjIwMCIg"
    "ZmlsbD0iI0ZGRiIgZm9udC1mYW1pbHk9InNhbnMtc2VyaWYiIGZvbnQtc2l6ZT0iMTYiIHRl"
    "eHQtYW5jaG9yPSJtaWRkbGUiPlByaXplIEltYWdlPC90ZXh0Pgo8L3N2Zz4K"
)

# Fields a partial update may touch. id and createdAt are fixed at creation.
UPDATABLE_FIELDS = ("name", "description", "image", "requiredStamps", "isRedeemed")

_RECORD_FIELDS = (
    "id",
    "name",
    "description",
    "image",
    "requiredStamps",
    "isRedeemed",
    "createdAt",
    "updatedAt",
)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def format_timestamp(moment: datetime) -> str:
    """Render a UTC timestamp as sortable ISO-8601 with millisecond precision."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime(_TIMESTAMP_FORMAT)[:-3] + "Z"


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value.rstrip("Z"), _TIMESTAMP_FORMAT).replace(
        tzinfo=timezone.utc
    )


def utc_timestamp() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def next_timestamp(previous: Optional[str]) -> str:
    """
    Return the current time, bumped past ``previous`` when the clock has not
    advanced a full millisecond since then.
    """
    now = datetime.now(timezone.utc)
    if previous:
        try:
            floor = parse_timestamp(previous) + timedelta(milliseconds=1)
        except ValueError:
            floor = None
        if floor is not None and now < floor:
            now = floor
    return format_timestamp(now)


@dataclass
class Prize:
    id: str
    name: str
    description: str
    image: str
    requiredStamps: Any
    isRedeemed: bool = False
    createdAt: str = ""
    updatedAt: str = ""
    # Keys present in a stored record that this model does not know about.
    extra: dict = field(default_factory=dict, repr=False, compare=False)

    def as_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "requiredStamps": self.requiredStamps,
            "isRedeemed": self.isRedeemed,
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
        }
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "Prize":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name", ""),
            description=payload.get("description", ""),
            image=payload.get("image", ""),
            requiredStamps=payload.get("requiredStamps"),
            isRedeemed=payload.get("isRedeemed", False),
            createdAt=payload.get("createdAt", ""),
            updatedAt=payload.get("updatedAt", ""),
            extra={k: v for k, v in payload.items() if k not in _RECORD_FIELDS},
        )


@dataclass
class PrizeInput:
    """Fields supplied when creating a prize."""

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    requiredStamps: Any = None


@dataclass
class PrizeUpdate:
    """Partial set of fields to merge over an existing prize."""

    fields: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "PrizeUpdate":
        return cls(
            fields={k: v for k, v in payload.items() if k in UPDATABLE_FIELDS}
        )
