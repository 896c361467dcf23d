"""
Typed views over the booking service's JSON.

The API speaks camelCase; these dataclasses expose snake_case attributes and
keep the raw payload around in `raw` for debugging. Timestamps are parsed into
timezone-aware datetimes once, here, so the rest of the code never touches ISO
strings.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from dateutil import parser as dtparser
from dateutil import tz

RESOURCE_TYPES = ("flexDesk", "meetingRoom", "parking", "other")
BOOKING_STATUSES = ("pending", "accepted", "declined", "cancelled")
CHECK_IN_STATUSES = ("pending", "checkedIn", "checkedOut", "noShow")

# Bookings in these states no longer hold the resource
INACTIVE_STATUSES = frozenset({"cancelled", "declined"})


def parse_instant(value: Optional[str]) -> Optional[dt.datetime]:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are assumed to be UTC; None/empty stays None.
    """
    if not value:
        return None
    parsed = dtparser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return parsed


def _resource_type(value: Optional[str]) -> str:
    return value if value in RESOURCE_TYPES else "other"


@dataclass
class Office:
    id: str
    name: str
    timezone: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Office":
        return cls(id=str(data["id"]), name=data.get("name") or str(data["id"]), timezone=data.get("timezone"))


@dataclass
class Zone:
    id: str
    name: str
    office_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Zone":
        return cls(id=str(data["id"]), name=data.get("name") or str(data["id"]), office_id=data.get("officeId"))


@dataclass
class Resource:
    id: str
    name: str
    type: str = "other"
    office_id: Optional[str] = None
    zone_id: Optional[str] = None
    floor_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Resource":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            type=_resource_type(data.get("type")),
            office_id=data.get("officeId"),
            zone_id=data.get("zoneId"),
            floor_id=data.get("floorId"),
        )


@dataclass
class User:
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: Optional[str] = None
    primary_office_id: Optional[str] = None
    status: Optional[str] = None
    profile_image: Optional[str] = None

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.email or self.id

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
            role=data.get("role"),
            primary_office_id=data.get("primaryOfficeId"),
            status=data.get("status"),
            profile_image=data.get("profileImage"),
        )


@dataclass
class UserSummary:
    """User fields embedded in a booking."""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "UserSummary":
        return cls(
            id=str(data.get("id", "")),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
        )


@dataclass
class ResourceSummary:
    """Resource fields embedded in a booking."""

    id: str
    name: str
    type: str = "other"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ResourceSummary":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or str(data.get("id", "")),
            type=_resource_type(data.get("type")),
        )


@dataclass
class Booking:
    id: str
    user_id: str
    resource_id: str
    office_id: Optional[str]
    start_time: dt.datetime
    end_time: dt.datetime
    status: str = "pending"
    check_in_status: str = "pending"
    is_anonymous_booking: bool = False
    anonymized: bool = False
    zone_id: Optional[str] = None
    floor_id: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    cancelled_by: Optional[str] = None
    cancelled_by_user_id: Optional[str] = None
    user: Optional[UserSummary] = None
    resource: Optional[ResourceSummary] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    @property
    def resource_name(self) -> str:
        return self.resource.name if self.resource else self.resource_id

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Booking":
        user = data.get("user")
        resource = data.get("resource")
        return cls(
            id=str(data["id"]),
            user_id=str(data.get("userId", "")),
            resource_id=str(data.get("resourceId", "")),
            office_id=data.get("officeId"),
            start_time=parse_instant(data["startTime"]),
            end_time=parse_instant(data["endTime"]),
            status=data.get("status") or "pending",
            check_in_status=data.get("checkInStatus") or "pending",
            is_anonymous_booking=bool(data.get("isAnonymousBooking", False)),
            anonymized=bool(data.get("anonymized", False)),
            zone_id=data.get("zoneId"),
            floor_id=data.get("floorId"),
            created_at=parse_instant(data.get("createdAt")),
            updated_at=parse_instant(data.get("updatedAt")),
            cancelled_by=data.get("cancelledBy"),
            cancelled_by_user_id=data.get("cancelledByUserId"),
            user=UserSummary.from_api(user) if user else None,
            resource=ResourceSummary.from_api(resource) if resource else None,
            raw=data,
        )


# ---- Request bodies ----------------------------------------------------------

@dataclass
class CreateBookingRequest:
    user_id: str
    resource_id: str
    start_time: str  # ISO 8601
    end_time: str    # ISO 8601
    is_anonymous_booking: Optional[bool] = None

    def to_api(self) -> Dict[str, Any]:
        return _camel_body(asdict(self))


@dataclass
class UpdateBookingRequest:
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_anonymous_booking: Optional[bool] = None

    def to_api(self) -> Dict[str, Any]:
        return _camel_body(asdict(self))


def _camel_body(fields: Dict[str, Any]) -> Dict[str, Any]:
    """snake_case -> camelCase, dropping unset (None) fields."""
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        head, *rest = key.split("_")
        out[head + "".join(p.title() for p in rest)] = value
    return out
