"""
Console text for each command. Pure string building; printing happens in
booker.main so these are easy to assert on.
"""

from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from booker.models import Booking, Office, Resource

RESOURCE_ICONS = {
    "flexDesk": "🪑",
    "meetingRoom": "🚪",
    "parking": "🚗",
}


def icon(resource_type: Optional[str]) -> str:
    return RESOURCE_ICONS.get(resource_type or "", "📍")


def fmt_day(iso_date: str) -> str:
    """'2025-08-08' -> 'Friday 8 August 2025'"""
    d = dt.date.fromisoformat(iso_date)
    return f"{d.strftime('%A')} {d.day} {d.strftime('%B %Y')}"


def fmt_time(instant: dt.datetime) -> str:
    """
    HH:MM as written in the instant itself (no zone conversion), so a desk
    booked 09:00-12:00 reads back as 09:00-12:00.
    """
    return instant.strftime("%H:%M")


def fmt_slot(b: Booking, who: str = "full") -> str:
    """'09:00-12:00 Ana Pérez' (occupant omitted for anonymous bookings)"""
    slot = f"{fmt_time(b.start_time)}-{fmt_time(b.end_time)}"
    if b.is_anonymous_booking or b.anonymized or not b.user:
        occupant = "Reserved" if who == "full" else ""
    else:
        occupant = b.user.name if who == "full" else b.user.first_name
    return f"{slot} {occupant}".strip()


# ---- Commands ----------------------------------------------------------------

def render_availability(day) -> str:
    """`day` is a workflows.DayAvailability."""
    lines = [f"\n📅 Resources for {fmt_day(day.date)}\n"]
    if not day.by_type:
        lines.append("  No resources found.\n")
    for rtype, rows in day.by_type.items():
        lines.append(f"{icon(rtype)} {rtype}")
        for row in rows:
            if row.is_free:
                lines.append(f"  ✅ {row.resource.name}: Available")
            else:
                slots = ", ".join(fmt_slot(b) for b in row.bookings)
                lines.append(f"  ❌ {row.resource.name}: {slots}")
        lines.append("")
    return "\n".join(lines)


def render_booked(result) -> str:
    """`result` is a workflows.BookingResult."""
    return (
        f"\n✅ Booking confirmed: {result.resource.name} for {result.date} "
        f"({result.start}-{result.end})\n"
        f"Booking ID: {result.booking.id}"
    )


def render_cancelled(resource: Resource, booking: Booking) -> str:
    day = booking.start_time.date().isoformat()
    return f"\n✅ Booking cancelled: {resource.name} for {day}\n"


def render_checked_in(booking: Booking) -> str:
    return f"\n✅ Checked in to {booking.resource_name}!\n"


def render_my_bookings(groups: Sequence[Tuple[str, List[Booking]]]) -> str:
    lines = ["\n📋 My bookings\n"]
    if not groups:
        lines.append("  No upcoming bookings.\n")
        return "\n".join(lines)
    for day, bookings in groups:
        lines.append(f"  {fmt_day(day)}")
        for b in bookings:
            rtype = b.resource.type if b.resource else None
            slot = f"{fmt_time(b.start_time)}-{fmt_time(b.end_time)}"
            lines.append(f"    {icon(rtype)} {b.resource_name}: {slot}")
    lines.append("")
    return "\n".join(lines)


def render_status(days) -> str:
    """`days` is [(label, DayAvailability), ...] from workflows.status."""
    lines = ["\n📊 Status\n"]
    for label, day in days:
        lines.append(f"{label}:")
        for row in day.rows():
            if row.is_free:
                lines.append(f"  ✅ {row.resource.name}: Free")
            else:
                slots = ", ".join(fmt_slot(b, who="first") for b in row.bookings)
                lines.append(f"  ❌ {row.resource.name}: {slots}")
        lines.append("")
    return "\n".join(lines)


def render_offices(offices: Sequence[Office], default_office_id: Optional[str]) -> str:
    lines = ["\n🏢 Offices\n"]
    for o in offices:
        marker = " (default)" if o.id == default_office_id else ""
        lines.append(f"  {o.name}{marker}")
        lines.append(f"    ID: {o.id}")
    lines.append("")
    return "\n".join(lines)


def render_resources(grouped: Dict[str, List[Resource]]) -> str:
    lines = ["\n📋 Resources\n"]
    for rtype, resources in grouped.items():
        lines.append(f"{icon(rtype)} {rtype} ({len(resources)})")
        for r in resources:
            lines.append(f"  {r.name}")
            lines.append(f"    ID: {r.id}")
        lines.append("")
    return "\n".join(lines)


def render_candidates(candidates: Sequence[Resource]) -> str:
    return "Available resources: " + ", ".join(r.name for r in candidates)


def render_body(body: Any) -> str:
    """Pretty dump of an API error body for diagnostics."""
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, ensure_ascii=False)
    return str(body)
