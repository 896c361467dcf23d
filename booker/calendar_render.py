"""
Headless calendar of the current user's bookings (one column per day).

Used by `booker my --png out.png`.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from booker.models import Booking  # noqa: E402


@dataclass
class Event:
    day_index: int     # column, 0 = first day shown
    start_hour: float  # e.g. 12.5 for 12:30
    end_hour: float
    label: str         # resource name
    checked_in: bool   # draw green if True


def _clamp_interval(start: float, end: float, lo: float, hi: float) -> Optional[Tuple[float, float]]:
    """Clamp [start,end] into [lo,hi]; return None if fully outside."""
    s = max(start, lo)
    e = min(end, hi)
    if e <= lo or s >= hi or e <= s:
        return None
    return s, e


def _hours(instant: dt.datetime) -> float:
    return instant.hour + instant.minute / 60


def bookings_to_events(
    groups: Sequence[Tuple[str, List[Booking]]],
) -> Tuple[List[Event], List[str]]:
    """
    Flatten my_bookings() groups into drawable events.

    returns: (events, day_labels) where events[i].day_index indexes day_labels.
    Hours are read off each instant as written, like the text listing.
    A booking running past midnight is cut at 24:00 of its start day.
    """
    events: List[Event] = []
    labels: List[str] = []
    for idx, (day, bookings) in enumerate(groups):
        labels.append(dt.date.fromisoformat(day).strftime("%a %d %b"))
        for b in bookings:
            start, end = b.start_time, b.end_time
            end_hour = _hours(end) if end.date() == start.date() else 24.0
            events.append(Event(idx, _hours(start), end_hour, b.resource_name, b.check_in_status == "checkedIn"))
    return events, labels


def _merge_same_resource(events: List[Event], eps: float = 1e-6) -> List[Event]:
    """
    Merge overlapping/adjacent windows for the same resource on the same day.
    Keeps 'checked_in' True if any merged piece was checked in.
    """
    out: List[Event] = []
    by_key: Dict[Tuple[int, str], List[Event]] = {}
    for ev in events:
        by_key.setdefault((ev.day_index, ev.label), []).append(ev)

    for (day, label), lst in by_key.items():
        lst.sort(key=lambda e: (e.start_hour, e.end_hour))
        cur: Optional[List[float]] = None
        cur_checked = False
        for e in lst:
            if cur is None:
                cur = [e.start_hour, e.end_hour]
                cur_checked = e.checked_in
            elif e.start_hour <= cur[1] + eps:  # overlap or touches
                cur[1] = max(cur[1], e.end_hour)
                cur_checked = cur_checked or e.checked_in
            else:
                out.append(Event(day, cur[0], cur[1], label, cur_checked))
                cur = [e.start_hour, e.end_hour]
                cur_checked = e.checked_in
        if cur is not None:
            out.append(Event(day, cur[0], cur[1], label, cur_checked))
    out.sort(key=lambda e: (e.day_index, e.start_hour, e.end_hour))
    return out


def _assign_lanes(events_for_day: List[Event]) -> List[Tuple[Event, int, int]]:
    """
    Greedy lane assignment so overlapping bookings render side-by-side.
    Returns list of (event, lane_index, lane_count_so_far).
    """
    lanes_end: List[float] = []
    placed: List[Tuple[Event, int, int]] = []
    for ev in sorted(events_for_day, key=lambda e: (e.start_hour, e.end_hour)):
        lane = None
        for li, last_end in enumerate(lanes_end):
            if ev.start_hour >= last_end - 1e-9:
                lane = li
                lanes_end[li] = ev.end_hour
                break
        if lane is None:
            lane = len(lanes_end)
            lanes_end.append(ev.end_hour)
        placed.append((ev, lane, len(lanes_end)))
    return placed


def _fmt_time(h: float) -> str:
    hours = int(math.floor(h))
    mins = int(round((h - hours) * 60)) % 60
    return f"{hours:02d}:{mins:02d}"


def render_bookings_calendar(
    groups: Sequence[Tuple[str, List[Booking]]],
    title: str,
    out_path: str,
    *,
    min_hour: int = 7,
    max_hour: int = 21,
) -> str:
    """
    Draw the bookings returned by workflows.my_bookings() and save a PNG.

    Returns the path to the saved PNG.
    """
    raw_events, day_labels = bookings_to_events(groups)
    clamped: List[Event] = []
    for e in raw_events:
        window = _clamp_interval(e.start_hour, e.end_hour, min_hour, max_hour)
        if window:
            clamped.append(Event(e.day_index, window[0], window[1], e.label, e.checked_in))
    events = _merge_same_resource(clamped)

    n_days = max(len(day_labels), 1)
    by_day: Dict[int, List[Event]] = {d: [] for d in range(n_days)}
    for e in events:
        by_day[e.day_index].append(e)

    fig, ax = plt.subplots(figsize=(max(6, 2.2 * n_days), 8))

    # y-axis top->bottom
    ax.set_ylim(max_hour, min_hour)
    ax.set_yticks(range(min_hour, max_hour + 1))
    ax.set_yticklabels([f"{h}:00" for h in range(min_hour, max_hour + 1)])

    ax.set_xlim(-0.5, n_days - 0.5)
    ax.set_xticks(range(n_days))
    ax.set_xticklabels(day_labels or [""])

    ax.grid(True, which="both", axis="y", linestyle="-", linewidth=0.5, alpha=0.25)
    ax.set_title(title, fontsize=20, pad=20)

    col_width = 0.8
    for day, day_events in by_day.items():
        if not day_events:
            continue
        placed = _assign_lanes(day_events)
        max_lanes = max(n for _, _, n in placed)
        lane_width = col_width / max_lanes
        left_base = day - col_width / 2 + 0.1

        for ev, lane_idx, _ in placed:
            y = ev.start_hour
            h = ev.end_hour - ev.start_hour
            x = left_base + lane_idx * lane_width
            w = lane_width * 0.95

            face = "tab:green" if ev.checked_in else "orange"
            ax.add_patch(plt.Rectangle((x, y), w, h, facecolor=face, edgecolor="black", alpha=0.6))
            ax.text(
                x + w / 2.0,
                y + h / 2.0,
                f"{ev.label}\n{_fmt_time(ev.start_hour)}–{_fmt_time(ev.end_hour)}",
                ha="center",
                va="center",
                fontsize=10,
                weight="bold",
                color="black",
                clip_on=True,
            )

    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return out_path
