"""
---------------
Small client for the Deskbird public API (https://developer.deskbird.com/).

One method per remote capability: offices, resources, zones, users and
bookings (list / get / create / update / cancel / check-in).

Notes:
- Every request carries `Authorization: Bearer <api key>` and JSON content
  negotiation. The key lives in memory only.
- List endpoints answer with an envelope {"data": [...], "total", "limit",
  "offset"}; we return just the typed items.
- Non-2xx answers become booker.errors.ApiError subclasses (401/403/429 get
  their own type). Nothing is retried here: a booking POST that gets retried
  can book twice, and rate limits are for the caller to deal with.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from booker.errors import RequestFailed, classify_status
from booker.models import (
    Booking,
    CreateBookingRequest,
    Office,
    Resource,
    UpdateBookingRequest,
    User,
    Zone,
)

logger = logging.getLogger(__name__)

# ---- Constants ---------------------------------------------------------------

DEFAULT_PAGE_SIZE = 100


# ---- Response helpers --------------------------------------------------------

def error_body(response: requests.Response) -> Any:
    """JSON body if it parses, raw text otherwise (None when empty)."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


def unwrap_page(payload: Any) -> List[Dict[str, Any]]:
    """
    Pull the items out of a paginated envelope.

    Tolerates a bare list, since a few endpoints skip the envelope.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return payload.get("data") or []
    return []


def _params(**kwargs: Any) -> Dict[str, Any]:
    """Drop unset query parameters."""
    return {k: v for k, v in kwargs.items() if v is not None}


# ---- Client ------------------------------------------------------------------

class DeskbirdClient:
    """
    api_key : Deskbird API key (Settings > Integrations > API)
    base_url: API root, e.g. https://connect.deskbird.com
    session : optional requests.Session (tests pass a fake)
    timeout : passed straight to requests; None means the transport default
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one HTTP call and return the decoded JSON (None for empty bodies).

        raises: Unauthorized / Forbidden / RateLimited / RequestFailed on non-2xx.
        """
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, path, params or {})
        r = self.session.request(
            method,
            url,
            headers=self.headers,
            params=params or None,
            json=body,
            timeout=self.timeout,
        )
        if not r.ok:
            payload = error_body(r)
            error_cls = classify_status(r.status_code)
            logger.warning("%s %s -> HTTP %s", method, path, r.status_code)
            message = None
            if error_cls is RequestFailed:
                message = f"API request failed: {r.reason or r.status_code}"
            raise error_cls(r.status_code, message, payload)

        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    # ---- Offices -------------------------------------------------------------

    def list_offices(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[Office]:
        payload = self._request("GET", "/offices", params=_params(limit=limit, offset=offset))
        return [Office.from_api(o) for o in unwrap_page(payload)]

    def list_zones(self, office_id: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[Zone]:
        payload = self._request("GET", "/zones", params=_params(officeId=office_id, limit=limit, offset=offset))
        return [Zone.from_api(z) for z in unwrap_page(payload)]

    # ---- Resources -----------------------------------------------------------

    def list_resources(
        self,
        office_id: Optional[str] = None,
        zone_id: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Resource]:
        payload = self._request(
            "GET",
            "/resources",
            params=_params(
                officeId=office_id,
                zoneId=zone_id,
                type=type,
                limit=limit or DEFAULT_PAGE_SIZE,
                offset=offset or 0,
            ),
        )
        return [Resource.from_api(r) for r in unwrap_page(payload)]

    # ---- Users ---------------------------------------------------------------

    def list_users(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[User]:
        payload = self._request("GET", "/users", params=_params(limit=limit, offset=offset))
        return [User.from_api(u) for u in unwrap_page(payload)]

    def get_user(self, user_id: str) -> User:
        return User.from_api(self._request("GET", f"/users/{user_id}"))

    # ---- Bookings ------------------------------------------------------------

    def list_bookings(
        self,
        start_date: str,
        end_date: str,
        user_id: Optional[str] = None,
        office_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        zone_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Booking]:
        """
        start_date / end_date: canonical YYYY-MM-DD (inclusive day range)
        """
        payload = self._request(
            "GET",
            "/bookings",
            params=_params(
                startDate=start_date,
                endDate=end_date,
                userId=user_id,
                officeId=office_id,
                resourceId=resource_id,
                zoneId=zone_id,
                status=status,
                limit=limit or DEFAULT_PAGE_SIZE,
                offset=offset or 0,
            ),
        )
        return [Booking.from_api(b) for b in unwrap_page(payload)]

    def get_booking(self, booking_id: str) -> Booking:
        return Booking.from_api(self._request("GET", f"/bookings/{booking_id}"))

    def create_booking(self, request: CreateBookingRequest) -> Booking:
        return Booking.from_api(self._request("POST", "/bookings", body=request.to_api()))

    def update_booking(self, booking_id: str, request: UpdateBookingRequest) -> Booking:
        return Booking.from_api(self._request("PATCH", f"/bookings/{booking_id}", body=request.to_api()))

    def cancel_booking(self, booking_id: str) -> None:
        self._request("DELETE", f"/bookings/{booking_id}")

    def check_in(self, booking_id: str) -> Optional[Booking]:
        payload = self._request("PATCH", f"/bookings/{booking_id}/check-in")
        return Booking.from_api(payload) if payload else None
