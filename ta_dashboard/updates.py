"""Flat readers for the Key Wins and Daily Updates tabs."""

import logging
from typing import Optional, Sequence

from .dates import DateWindow, parse_sheet_date
from .extract import decode_records, find_tab
from .headers import contains, equals, startswith
from .models import DailyUpdate, KeyWin, Tab

logger = logging.getLogger(__name__)

KEY_WIN_FIELDS = {
    "date": [startswith("date")],
    "department": [equals("department")],
    "position": [equals("position")],
    "remarks": [contains("progress"), contains("remark")],
}

DAILY_UPDATE_FIELDS = {
    "date": [startswith("timestamp"), startswith("date")],
    "ta_name": [startswith("ta name")],
    "department": [startswith("department")],
    "country": [startswith("country")],
    "role": [startswith("role")],
    "number_of_openings": [contains("number of opening")],
    "interviews_scheduled": [startswith("interviews scheduled")],
    "interviews_completed": [startswith("interviews completed")],
    "cancelled_no_show": [contains("cancelled"), contains("no show")],
    "offers_made": [startswith("offers made")],
    "pending_interview_feedback": [contains("pending interview feedback")],
    "upcoming_hm_interviews": [startswith("upcoming hm interviews")],
    "remarks": [contains("progress")],
}

DAILY_UPDATE_COUNTERS = [
    "number_of_openings",
    "interviews_scheduled",
    "interviews_completed",
    "cancelled_no_show",
    "offers_made",
    "pending_interview_feedback",
    "upcoming_hm_interviews",
]


def find_key_wins_tab(tabs: Sequence[Tab]) -> Optional[Tab]:
    return find_tab(tabs, lambda title: title == "key wins")


def find_daily_updates_tab(tabs: Sequence[Tab]) -> Optional[Tab]:
    """Prefer 'Daily Update(s)', then a 'Form Responses' tab, then the first tab."""
    target = find_tab(tabs, lambda title: title in ("daily update", "daily updates"))
    if target is None:
        target = find_tab(tabs, lambda title: "form responses" in title)
    if target is None and tabs:
        target = tabs[0]
    return target


def extract_key_wins(tabs: Sequence[Tab], window: Optional[DateWindow] = None) -> list[KeyWin]:
    """Read the Key Wins tab, keeping dated rows inside the window."""
    tab = find_key_wins_tab(tabs)
    if tab is None:
        logger.info("No 'Key Wins' tab found")
        return []

    wins = []
    for record in decode_records(tab, KEY_WIN_FIELDS):
        if not any(record.values()):
            continue
        if window is not None and record["date"]:
            when = parse_sheet_date(record["date"])
            if when is None or not window.contains(when):
                continue
        wins.append(KeyWin(**record))
    return wins


def _matches(value: str, wanted: Optional[str]) -> bool:
    return not wanted or value.lower() == wanted.lower()


def extract_daily_updates(
    tabs: Sequence[Tab],
    window: Optional[DateWindow] = None,
    department: Optional[str] = None,
    ta_name: Optional[str] = None,
    country: Optional[str] = None,
) -> list[DailyUpdate]:
    """Read daily TA reports, filtered by window and optional equality filters.

    Rows whose date cannot be parsed are not subject to the window.
    """
    tab = find_daily_updates_tab(tabs)
    if tab is None:
        return []
    logger.debug(f"Reading daily updates from {tab.title}")

    updates = []
    records = decode_records(tab, DAILY_UPDATE_FIELDS, numeric_fields=DAILY_UPDATE_COUNTERS)
    for record in records:
        if not (record["date"] or record["ta_name"] or record["department"]):
            continue

        record["date"] = record["date"].strip()
        when = parse_sheet_date(record["date"])
        if window is not None and when is not None and not window.contains(when):
            continue
        if not (
            _matches(record["department"], department)
            and _matches(record["ta_name"], ta_name)
            and _matches(record["country"], country)
        ):
            continue
        updates.append(DailyUpdate(**record))
    return updates
