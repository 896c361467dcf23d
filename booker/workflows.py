"""
Use cases behind each CLI command.

Each function is a short pipeline: normalise date/time -> resolve the
resource -> read/write bookings -> return plain data for booker.render to
print. They hold no state between calls apart from the ResourceCache that
lives on the BookerContext for the length of one process.
"""

from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from booker import dates
from booker.config import DEFAULT_END, DEFAULT_MY_DAYS, DEFAULT_START, Config
from booker.errors import BookingNotFound, InvalidTime
from booker.identity import CurrentUser
from booker.models import Booking, CreateBookingRequest, Office, Resource
from booker.resolver import resolve
from desk_booker import DeskbirdClient

logger = logging.getLogger(__name__)


# ---- Per-run context ---------------------------------------------------------

class ResourceCache:
    """
    Offices and resources fetched during this process. Never persisted and
    never refreshed implicitly; call invalidate() to force new reads.
    """

    def __init__(self) -> None:
        self._offices: Optional[List[Office]] = None
        self._resources: Dict[Tuple[Optional[str], Optional[str]], List[Resource]] = {}

    def offices(self, fetch: Callable[[], List[Office]]) -> List[Office]:
        if self._offices is None:
            self._offices = fetch()
        return self._offices

    def resources(
        self,
        office_id: Optional[str],
        type: Optional[str],
        fetch: Callable[[], List[Resource]],
    ) -> List[Resource]:
        key = (office_id, type)
        if key not in self._resources:
            self._resources[key] = fetch()
        return self._resources[key]

    def invalidate(self) -> None:
        self._offices = None
        self._resources.clear()


@dataclass
class BookerContext:
    config: Config
    client: DeskbirdClient
    user: CurrentUser
    cache: ResourceCache = field(default_factory=ResourceCache)

    def office(self, office_id: Optional[str]) -> Optional[str]:
        return office_id or self.config.default_office_id

    def today(self) -> dt.date:
        return dates.today(self.config.timezone)

    def resources(self, office_id: Optional[str], type: Optional[str] = None) -> List[Resource]:
        return self.cache.resources(
            office_id,
            type,
            lambda: self.client.list_resources(office_id=office_id, type=type),
        )

    def offices(self) -> List[Office]:
        return self.cache.offices(self.client.list_offices)


def run_parallel(*calls: Callable[[], object]) -> List[object]:
    """
    Run independent reads concurrently and return their results in order.
    The first exception raised by any call propagates once all have finished.
    """
    with ThreadPoolExecutor(max_workers=len(calls) or 1) as pool:
        futures = [pool.submit(c) for c in calls]
    return [f.result() for f in futures]


# ---- Result types ------------------------------------------------------------

@dataclass
class ResourceAvailability:
    resource: Resource
    bookings: List[Booking] = field(default_factory=list)

    @property
    def is_free(self) -> bool:
        return not self.bookings


@dataclass
class DayAvailability:
    date: str
    office_id: Optional[str]
    # resource type -> rows, in first-seen order
    by_type: Dict[str, List[ResourceAvailability]] = field(default_factory=dict)

    def rows(self) -> List[ResourceAvailability]:
        return [row for rows in self.by_type.values() for row in rows]


@dataclass
class BookingResult:
    booking: Booking
    resource: Resource
    date: str
    start: str
    end: str


def group_by_type(resources: Sequence[Resource]) -> Dict[str, List[Resource]]:
    grouped: Dict[str, List[Resource]] = {}
    for r in resources:
        grouped.setdefault(r.type, []).append(r)
    return grouped


def build_availability(
    date: str,
    office_id: Optional[str],
    resources: Sequence[Resource],
    bookings: Sequence[Booking],
) -> DayAvailability:
    """
    Pair each resource with the active bookings the service returned for `date`.
    Bookings are kept in start order so the printed slots read left to right.
    """
    occupying = sorted(
        (b for b in bookings if b.is_active),
        key=lambda b: b.start_time,
    )
    by_resource: Dict[str, List[Booking]] = {}
    for b in occupying:
        by_resource.setdefault(b.resource_id, []).append(b)

    day = DayAvailability(date=date, office_id=office_id)
    for rtype, typed in group_by_type(resources).items():
        day.by_type[rtype] = [ResourceAvailability(r, by_resource.get(r.id, [])) for r in typed]
    return day


# ---- Use cases ---------------------------------------------------------------

def list_availability(
    ctx: BookerContext,
    date: Optional[str] = None,
    office_id: Optional[str] = None,
    type: Optional[str] = None,
) -> DayAvailability:
    day = dates.normalize_date(date, ctx.today())
    office = ctx.office(office_id)

    resources, bookings = run_parallel(
        lambda: ctx.resources(office, type),
        lambda: ctx.client.list_bookings(start_date=day, end_date=day, office_id=office),
    )
    return build_availability(day, office, resources, bookings)


def book(
    ctx: BookerContext,
    resource_token: str,
    date: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    office_id: Optional[str] = None,
) -> BookingResult:
    """
    Create a booking for the current user. The service decides about
    conflicts; a rejection comes back as RequestFailed.
    """
    day = dates.normalize_date(date, ctx.today())
    start_hm = dates.normalize_time(start) or DEFAULT_START
    end_hm = dates.normalize_time(end) or DEFAULT_END
    if start_hm >= end_hm:
        raise InvalidTime(end or end_hm, f"End time {end_hm} must be after start time {start_hm}")

    office = ctx.office(office_id)
    resource = resolve(resource_token, ctx.resources(office))

    logger.info("Booking %s (%s) for %s %s-%s", resource.name, resource.id, day, start_hm, end_hm)
    booking = ctx.client.create_booking(
        CreateBookingRequest(
            user_id=ctx.user.id,
            resource_id=resource.id,
            start_time=dates.to_utc_instant(day, start_hm),
            end_time=dates.to_utc_instant(day, end_hm),
        )
    )
    return BookingResult(booking=booking, resource=resource, date=day, start=start_hm, end=end_hm)


def cancel(
    ctx: BookerContext,
    resource_token: str,
    date: Optional[str] = None,
    office_id: Optional[str] = None,
) -> Tuple[Booking, Resource]:
    day = dates.normalize_date(date, ctx.today())
    office = ctx.office(office_id)
    resource = resolve(resource_token, ctx.resources(office))

    bookings = ctx.client.list_bookings(
        start_date=day,
        end_date=day,
        resource_id=resource.id,
        user_id=ctx.user.id,
    )
    if not bookings:
        raise BookingNotFound(f"No booking found for {resource.name} on {day}")

    booking = bookings[0]
    ctx.client.cancel_booking(booking.id)
    return booking, resource


def check_in(
    ctx: BookerContext,
    resource_token: Optional[str] = None,
    date: Optional[str] = None,
    office_id: Optional[str] = None,
) -> Booking:
    day = dates.normalize_date(date, ctx.today())
    office = ctx.office(office_id)

    bookings = ctx.client.list_bookings(
        start_date=day,
        end_date=day,
        user_id=ctx.user.id,
        office_id=office,
    )
    if resource_token:
        resource = resolve(resource_token, ctx.resources(office))
        bookings = [b for b in bookings if b.resource_id == resource.id]

    if not bookings:
        raise BookingNotFound(f"No booking found for {day}")

    booking = bookings[0]
    ctx.client.check_in(booking.id)
    return booking


def my_bookings(ctx: BookerContext, days: int = DEFAULT_MY_DAYS) -> List[Tuple[str, List[Booking]]]:
    """
    Current user's bookings from today to today + `days`, as
    [(YYYY-MM-DD, [bookings sorted by start]), ...] in date order.
    """
    first = ctx.today().isoformat()
    last = dates.add_days(first, days)
    bookings = ctx.client.list_bookings(start_date=first, end_date=last, user_id=ctx.user.id)

    by_date: Dict[str, List[Booking]] = {}
    for b in sorted(bookings, key=lambda b: b.start_time):
        by_date.setdefault(b.start_time.date().isoformat(), []).append(b)
    return sorted(by_date.items())


def status(ctx: BookerContext, office_id: Optional[str] = None) -> List[Tuple[str, DayAvailability]]:
    """Free/occupied flex desks for today and tomorrow."""
    office = ctx.office(office_id)
    first = ctx.today().isoformat()
    second = dates.add_days(first, 1)

    today_bookings, tomorrow_bookings, resources = run_parallel(
        lambda: ctx.client.list_bookings(start_date=first, end_date=first, office_id=office),
        lambda: ctx.client.list_bookings(start_date=second, end_date=second, office_id=office),
        lambda: ctx.resources(office, "flexDesk"),
    )
    return [
        ("Today", build_availability(first, office, resources, today_bookings)),
        ("Tomorrow", build_availability(second, office, resources, tomorrow_bookings)),
    ]


def offices(ctx: BookerContext) -> Tuple[List[Office], Optional[str]]:
    return ctx.offices(), ctx.config.default_office_id


def resources(
    ctx: BookerContext,
    office_id: Optional[str] = None,
    type: Optional[str] = None,
) -> Dict[str, List[Resource]]:
    return group_by_type(ctx.resources(ctx.office(office_id), type))
