"""
Shared fakes. Nothing here touches the network.
"""

from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional

import pytest

from booker import dates
from booker.config import Config
from booker.identity import CurrentUser
from booker.models import Booking, Office, Resource
from booker.workflows import BookerContext

FIXED_TODAY = dt.date(2025, 8, 8)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        if text is not None:
            self.text = text
        elif payload is not None:
            self.text = json.dumps(payload)
        else:
            self.text = ""
        self.content = self.text.encode()

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._payload is None:
            return json.loads(self.text)  # raises ValueError on non-JSON
        return self._payload


class FakeSession:
    """Stands in for requests.Session: hands out queued responses, records calls."""

    def __init__(self, *responses: FakeResponse):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "params": params, "json": json, "timeout": timeout}
        )
        return self.responses.pop(0)


class FakeClient:
    """In-memory DeskbirdClient with the same method names."""

    def __init__(self, resources=(), bookings=(), offices=()):
        self.resources = list(resources)
        self.bookings = list(bookings)
        self.offices = list(offices)
        self.calls: List[tuple] = []
        self.created = []
        self.cancelled: List[str] = []
        self.checked_in: List[str] = []

    def list_offices(self):
        self.calls.append(("list_offices",))
        return list(self.offices)

    def list_resources(self, office_id=None, zone_id=None, type=None, limit=None, offset=None):
        self.calls.append(("list_resources", office_id, type))
        return [r for r in self.resources if (type is None or r.type == type) and (office_id is None or r.office_id == office_id)]

    def list_bookings(self, start_date, end_date, user_id=None, office_id=None, resource_id=None, **_):
        self.calls.append(("list_bookings", start_date, end_date, user_id, office_id, resource_id))
        out = []
        for b in self.bookings:
            day = b.start_time.date().isoformat()
            if not (start_date <= day <= end_date):
                continue
            if user_id and b.user_id != user_id:
                continue
            if office_id and b.office_id != office_id:
                continue
            if resource_id and b.resource_id != resource_id:
                continue
            out.append(b)
        return out

    def create_booking(self, request):
        self.created.append(request)
        booking = make_booking("new-1", request.resource_id, request.start_time, request.end_time, user_id=request.user_id)
        self.bookings.append(booking)
        return booking

    def cancel_booking(self, booking_id):
        self.cancelled.append(booking_id)

    def check_in(self, booking_id):
        self.checked_in.append(booking_id)
        return None


def make_resource(id: str, name: str, type: str = "flexDesk", office_id: str = "office-1") -> Resource:
    return Resource(id=id, name=name, type=type, office_id=office_id)


def make_booking(
    id: str,
    resource_id: str,
    start: str,
    end: str,
    user_id: str = "u-1",
    office_id: str = "office-1",
    status: str = "accepted",
    first_name: str = "Ana",
    last_name: str = "Pérez",
) -> Booking:
    return Booking.from_api(
        {
            "id": id,
            "userId": user_id,
            "resourceId": resource_id,
            "officeId": office_id,
            "startTime": start,
            "endTime": end,
            "status": status,
            "checkInStatus": "pending",
            "isAnonymousBooking": False,
            "anonymized": False,
            "user": {"id": user_id, "firstName": first_name, "lastName": last_name, "email": "ana@example.com"},
        }
    )


@pytest.fixture
def fixed_today(monkeypatch):
    monkeypatch.setattr(dates, "today", lambda tz_name=None: FIXED_TODAY)
    return FIXED_TODAY


@pytest.fixture
def config() -> Config:
    return Config(api_key="k", base_url="https://api.test", default_office_id="office-1")


@pytest.fixture
def make_ctx(config, fixed_today):
    def _make(client: FakeClient, user_id: str = "u-1") -> BookerContext:
        return BookerContext(config=config, client=client, user=CurrentUser(id=user_id, name="Ana"))

    return _make


@pytest.fixture
def office() -> Office:
    return Office(id="office-1", name="Madrid HQ", timezone="Europe/Madrid")
