import pytest

from booker import workflows
from booker.errors import BookingNotFound, InvalidDate, InvalidTime, ResourceNotFound
from booker.models import Office
from booker.workflows import ResourceCache
from conftest import FakeClient, make_booking, make_resource

DESKS = [
    make_resource("a1", "Desk 1"),
    make_resource("a2", "Desk 12"),
    make_resource("m1", "Room Alpha", type="meetingRoom"),
]


# ---- list -------------------------------------------------------------------

def test_availability_marks_booked_and_free(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z")],
    )
    day = workflows.list_availability(make_ctx(client))

    assert day.date == "2025-08-08"
    assert list(day.by_type) == ["flexDesk", "meetingRoom"]
    rows = {row.resource.id: row for row in day.rows()}
    assert not rows["a1"].is_free
    b = rows["a1"].bookings[0]
    assert (b.start_time.hour, b.end_time.hour) == (9, 12)
    assert rows["a2"].is_free and rows["m1"].is_free


def test_availability_ignores_cancelled_and_other_days(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z", status="cancelled"),
            make_booking("b2", "a2", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z", status="declined"),
        ],
    )
    day = workflows.list_availability(make_ctx(client), date="2025-08-08")
    assert all(row.is_free for row in day.rows())


def test_late_booking_returned_for_the_day_occupies(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[make_booking("b1", "a1", "2025-08-08T22:00:00Z", "2025-08-09T00:00:00Z")],
    )
    day = workflows.list_availability(make_ctx(client))
    rows = {row.resource.id: row for row in day.rows()}
    assert not rows["a1"].is_free
    assert rows["a1"].bookings[0].start_time.hour == 22


def test_availability_type_filter_and_office(make_ctx):
    client = FakeClient(resources=DESKS)
    day = workflows.list_availability(make_ctx(client), date="tomorrow", type="meetingRoom")
    assert day.date == "2025-08-09"
    assert [r.resource.id for r in day.rows()] == ["m1"]
    assert ("list_bookings", "2025-08-09", "2025-08-09", None, "office-1", None) in client.calls


def test_invalid_date_fails_before_any_request(make_ctx):
    client = FakeClient(resources=DESKS)
    with pytest.raises(InvalidDate):
        workflows.list_availability(make_ctx(client), date="someday")
    assert client.calls == []


# ---- book -------------------------------------------------------------------

def test_book_with_defaults(make_ctx):
    client = FakeClient(resources=DESKS)
    result = workflows.book(make_ctx(client), "desk 12")

    req = client.created[0]
    assert req.user_id == "u-1"
    assert req.resource_id == "a2"
    assert req.start_time == "2025-08-08T09:00:00.000Z"
    assert req.end_time == "2025-08-08T18:00:00.000Z"
    assert (result.start, result.end) == ("09:00", "18:00")


def test_book_with_loose_times(make_ctx):
    client = FakeClient(resources=DESKS)
    workflows.book(make_ctx(client), "a1", date="15/3/2026", start="8", end="14hs")
    req = client.created[0]
    assert req.start_time == "2026-03-15T08:00:00.000Z"
    assert req.end_time == "2026-03-15T14:00:00.000Z"


def test_book_rejects_inverted_range_before_network(make_ctx):
    client = FakeClient(resources=DESKS)
    with pytest.raises(InvalidTime):
        workflows.book(make_ctx(client), "a1", start="19", end="9")
    assert client.calls == [] and client.created == []


def test_book_unknown_resource(make_ctx):
    client = FakeClient(resources=DESKS)
    with pytest.raises(ResourceNotFound) as exc:
        workflows.book(make_ctx(client), "zzz")
    assert len(exc.value.candidates) == 3
    assert client.created == []


# ---- cancel -----------------------------------------------------------------

def test_cancel_first_match(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z"),
            make_booking("b2", "a1", "2025-08-08T14:00:00Z", "2025-08-08T18:00:00Z"),
            make_booking("b3", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z", user_id="someone-else"),
        ],
    )
    booking, resource = workflows.cancel(make_ctx(client), "Desk 1")
    assert booking.id == "b1"
    assert resource.id == "a1"
    assert client.cancelled == ["b1"]


def test_cancel_without_booking_issues_no_cancel(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z", user_id="other")],
    )
    with pytest.raises(BookingNotFound):
        workflows.cancel(make_ctx(client), "Desk 1")
    assert client.cancelled == []


# ---- checkin ----------------------------------------------------------------

def test_check_in_first_booking_of_the_day(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z"),
            make_booking("b2", "m1", "2025-08-08T14:00:00Z", "2025-08-08T15:00:00Z"),
        ],
    )
    assert workflows.check_in(make_ctx(client)).id == "b1"
    assert client.checked_in == ["b1"]


def test_check_in_filtered_by_resource(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z"),
            make_booking("b2", "m1", "2025-08-08T14:00:00Z", "2025-08-08T15:00:00Z"),
        ],
    )
    assert workflows.check_in(make_ctx(client), "alpha").id == "b2"


def test_check_in_nothing_booked(make_ctx):
    client = FakeClient(resources=DESKS)
    with pytest.raises(BookingNotFound):
        workflows.check_in(make_ctx(client), date="tomorrow")
    assert client.checked_in == []


def test_check_in_unknown_resource(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z")],
    )
    with pytest.raises(ResourceNotFound):
        workflows.check_in(make_ctx(client), "zzz")
    assert client.checked_in == []


# ---- my / status ------------------------------------------------------------

def test_my_bookings_grouped_by_date(make_ctx):
    client = FakeClient(
        bookings=[
            make_booking("b3", "a1", "2025-08-12T09:00:00Z", "2025-08-12T18:00:00Z"),
            make_booking("b2", "m1", "2025-08-08T15:00:00Z", "2025-08-08T16:00:00Z"),
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z"),
            make_booking("bx", "a1", "2025-08-09T09:00:00Z", "2025-08-09T12:00:00Z", user_id="other"),
            make_booking("late", "a1", "2025-08-30T09:00:00Z", "2025-08-30T12:00:00Z"),
        ]
    )
    groups = workflows.my_bookings(make_ctx(client), days=7)

    assert [day for day, _ in groups] == ["2025-08-08", "2025-08-12"]
    assert [b.id for b in groups[0][1]] == ["b1", "b2"]
    assert ("list_bookings", "2025-08-08", "2025-08-15", "u-1", None, None) in client.calls


def test_status_today_and_tomorrow_flex_desks_only(make_ctx):
    client = FakeClient(
        resources=DESKS,
        bookings=[
            make_booking("b1", "a1", "2025-08-08T09:00:00Z", "2025-08-08T12:00:00Z"),
            make_booking("b2", "a2", "2025-08-09T09:00:00Z", "2025-08-09T12:00:00Z"),
        ],
    )
    (l1, today), (l2, tomorrow) = workflows.status(make_ctx(client))

    assert (l1, l2) == ("Today", "Tomorrow")
    assert [r.resource.id for r in today.rows()] == ["a1", "a2"]
    assert [r.is_free for r in today.rows()] == [False, True]
    assert [r.is_free for r in tomorrow.rows()] == [True, False]


# ---- offices / resources / cache --------------------------------------------

def test_offices_and_default(make_ctx):
    client = FakeClient(offices=[Office("office-1", "Madrid HQ"), Office("office-2", "Remote")])
    offices, default_id = workflows.offices(make_ctx(client))
    assert [o.id for o in offices] == ["office-1", "office-2"]
    assert default_id == "office-1"


def test_resources_grouped(make_ctx):
    grouped = workflows.resources(make_ctx(FakeClient(resources=DESKS)))
    assert {k: len(v) for k, v in grouped.items()} == {"flexDesk": 2, "meetingRoom": 1}


def test_resource_cache_reuses_reads_until_invalidated(make_ctx):
    client = FakeClient(resources=DESKS)
    ctx = make_ctx(client)
    ctx.resources("office-1")
    ctx.resources("office-1")
    ctx.offices()
    ctx.offices()
    assert client.calls.count(("list_resources", "office-1", None)) == 1
    assert client.calls.count(("list_offices",)) == 1

    ctx.cache.invalidate()
    ctx.resources("office-1")
    assert client.calls.count(("list_resources", "office-1", None)) == 2


def test_fresh_cache_per_context(make_ctx):
    a = make_ctx(FakeClient(resources=DESKS))
    b = make_ctx(FakeClient(resources=DESKS))
    assert isinstance(a.cache, ResourceCache)
    assert a.cache is not b.cache


def test_run_parallel_keeps_order_and_propagates():
    assert workflows.run_parallel(lambda: 1, lambda: 2, lambda: 3) == [1, 2, 3]

    def boom():
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        workflows.run_parallel(lambda: 1, boom)
