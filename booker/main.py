"""
Command-line entrypoint.

Typical usage:
    booker list --date mañana --type flexDesk
    booker book "desk 12" --date 15/3 --start 9 --end 14hs
    booker cancel "desk 12" --date tomorrow
    booker checkin
    booker my --days 7 --png my_week.png

Configuration comes from DESKBIRD_API_KEY / DESKBIRD_BASE_URL /
DESKBIRD_OFFICE_ID / TZ, falling back to ./deskbird.json (see booker/config.py).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import requests

from booker import render, workflows
from booker.config import DEFAULT_MY_DAYS, load_config
from booker.errors import ApiError, BookerError, ResourceNotFound
from booker.identity import resolve_identity
from booker.models import RESOURCE_TYPES
from desk_booker import DeskbirdClient

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for --days: a whole number of days, at least 1."""
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if days < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {days}")
    return days


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="booker",
        description="Deskbird desk booking and office management from the terminal.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log API calls (DEBUG)")
    sub = ap.add_subparsers(dest="command", required=True)

    def office_opt(p: argparse.ArgumentParser) -> None:
        p.add_argument("-o", "--office", help="Office ID (default from DESKBIRD_OFFICE_ID)")

    def date_opt(p: argparse.ArgumentParser) -> None:
        p.add_argument("-d", "--date", help="today, tomorrow, YYYY-MM-DD, DD/MM or DD/MM/YYYY (default: today)")

    def type_opt(p: argparse.ArgumentParser) -> None:
        p.add_argument("-t", "--type", choices=RESOURCE_TYPES, help="Resource type")

    p = sub.add_parser("list", aliases=["ls"], help="List resources and availability")
    date_opt(p)
    office_opt(p)
    type_opt(p)

    p = sub.add_parser("book", aliases=["reservar"], help="Book a resource (desk, room, parking)")
    p.add_argument("resource", help="Resource ID or (partial) name")
    date_opt(p)
    p.add_argument("-s", "--start", help="Start time, e.g. 9, 9:30, 19hs (default: 09:00)")
    p.add_argument("-e", "--end", help="End time (default: 18:00)")
    office_opt(p)

    p = sub.add_parser("cancel", aliases=["release", "liberar", "cancelar"], help="Cancel a booking")
    p.add_argument("resource", help="Resource ID or (partial) name")
    date_opt(p)
    office_opt(p)

    p = sub.add_parser("my", aliases=["mis"], help="Show my bookings")
    p.add_argument("--days", type=positive_int, default=DEFAULT_MY_DAYS, help=f"Days ahead to show (default: {DEFAULT_MY_DAYS})")
    p.add_argument("--png", help="Also render the bookings as a calendar PNG at this path")

    p = sub.add_parser("status", help="Show today and tomorrow summary")
    office_opt(p)

    p = sub.add_parser("checkin", help="Check in to a booking")
    p.add_argument("resource", nargs="?", help="Resource ID or (partial) name")
    date_opt(p)
    office_opt(p)

    sub.add_parser("offices", help="List available offices")

    p = sub.add_parser("resources", help="List all resources")
    office_opt(p)
    type_opt(p)

    return ap


# Aliases resolve to their canonical command
COMMAND_ALIASES = {
    "ls": "list",
    "reservar": "book",
    "release": "cancel",
    "liberar": "cancel",
    "cancelar": "cancel",
    "mis": "my",
}


def build_context() -> workflows.BookerContext:
    config = load_config()
    client = DeskbirdClient(api_key=config.api_key, base_url=config.base_url)
    return workflows.BookerContext(config=config, client=client, user=resolve_identity())


def dispatch(args: argparse.Namespace, ctx: workflows.BookerContext) -> str:
    """Run the chosen command and return the text to print."""
    command = COMMAND_ALIASES.get(args.command, args.command)
    if command == "list":
        day = workflows.list_availability(ctx, date=args.date, office_id=args.office, type=args.type)
        return render.render_availability(day)

    if command == "book":
        result = workflows.book(
            ctx,
            args.resource,
            date=args.date,
            start=args.start,
            end=args.end,
            office_id=args.office,
        )
        return render.render_booked(result)

    if command == "cancel":
        booking, resource = workflows.cancel(ctx, args.resource, date=args.date, office_id=args.office)
        return render.render_cancelled(resource, booking)

    if command == "my":
        groups = workflows.my_bookings(ctx, days=args.days)
        text = render.render_my_bookings(groups)
        if args.png:
            from booker.calendar_render import render_bookings_calendar

            path = render_bookings_calendar(groups, f"My bookings ({ctx.user.name})", args.png)
            text += f"\n🗓️ Calendar saved to {path}"
        return text

    if command == "status":
        return render.render_status(workflows.status(ctx, office_id=args.office))

    if command == "checkin":
        booking = workflows.check_in(ctx, args.resource, date=args.date, office_id=args.office)
        return render.render_checked_in(booking)

    if command == "offices":
        offices, default_id = workflows.offices(ctx)
        return render.render_offices(offices, default_id)

    if command == "resources":
        return render.render_resources(workflows.resources(ctx, office_id=args.office, type=args.type))

    raise BookerError(f"Unknown command: {args.command}")


def report_error(err: Exception) -> None:
    """Single-line error on stderr (plus the response body for API errors)."""
    if isinstance(err, ApiError):
        print(f"❌ Error {err.status_code}: {err}", file=sys.stderr)
        if err.body:
            print(render.render_body(err.body), file=sys.stderr)
    elif isinstance(err, ResourceNotFound):
        print(f"❌ Error: {err}", file=sys.stderr)
        if err.candidates:
            print(render.render_candidates(err.candidates), file=sys.stderr)
    else:
        print(f"❌ Error: {err}", file=sys.stderr)


def main(argv: Optional[List[str]] = None, ctx: Optional[workflows.BookerContext] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        context = ctx or build_context()
        print(dispatch(args, context))
    except BookerError as e:
        report_error(e)
        return 1
    except requests.RequestException as e:
        logger.debug("Network failure", exc_info=True)
        report_error(BookerError(f"Network error: {e}"))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
