"""Funnel roles aggregated from Google Form responses.

TAs submit a form per role with the current counts for each stage. The latest
submission per (department, role) is the current state of that funnel. When
no usable form tab exists, a pre-aggregated "Funnel Analysis" tab is read
instead.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Optional, Sequence

from .dates import DateWindow, format_us_date, parse_sheet_date
from .extract import decode_records, find_tab, latest_by, split_table
from .funnel import LOW_CONVERSION_THRESHOLD, build_role, make_stage
from .headers import NOT_FOUND, contains, find_column, startswith
from .models import Role, Tab
from .role_tabs import always_active
from .rows import cell_int, cell_text

logger = logging.getLogger(__name__)

# Stage order is fixed; columns missing from the form are left out.
FORM_STAGES = [
    ("New Applicants", "new applicants"),
    ("Quiz Sent", "quiz sent"),
    ("Quiz Completed", "quiz complet"),
    ("Screened by TA", "screened by ta"),
    ("Technical Assessment", "technical assessment"),
    ("Interviewed by HM", "interviewed by hm"),
    ("Offer Made", "offer made"),
    ("Hired", "hired"),
]

FORM_FIELDS = {
    "timestamp": [contains("timestamp"), contains("date")],
    "department": [contains("department")],
    "role": [contains("role"), contains("position")],
    "remarks": [contains("remarks")],
    **{name: [contains(needle)] for name, needle in FORM_STAGES},
}

FORM_RESPONSES_TITLE = re.compile(r"form\s*responses\s*\d+")
FUNNEL_ANALYSIS_TITLE = "funnel analysis"
NON_STAGE_HEADER = re.compile(r"position|role|department|last_?updated|remarks", re.IGNORECASE)


def is_form_responses_title(title: str) -> bool:
    lowered = title.lower()
    return (
        "form responses" in lowered
        or "form_responses" in lowered
        or FORM_RESPONSES_TITLE.search(lowered) is not None
    )


def find_form_tab(tabs: Sequence[Tab]) -> Optional[Tab]:
    """Prefer a 'Form Responses' tab, then any tab mentioning 'form'."""
    return find_tab(tabs, is_form_responses_title) or find_tab(
        tabs, lambda title: "form" in title
    )


def _row_timestamp(record: dict) -> Optional[datetime]:
    return parse_sheet_date(record["timestamp"])


def roles_from_form(
    tab: Tab,
    window: Optional[DateWindow] = None,
    is_active: Callable[[str], bool] = always_active,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[Role]:
    """Build one role per (department, role) from its latest form submission."""
    headers, _ = split_table(tab)
    if not headers:
        return []

    stage_names = [
        name for name, _ in FORM_STAGES if find_column(headers, FORM_FIELDS[name]) != NOT_FOUND
    ]
    records = decode_records(tab, FORM_FIELDS, numeric_fields=stage_names)
    records = [r for r in records if r["department"] or r["role"]]
    latest = latest_by(
        records,
        key=lambda r: (r["department"], r["role"]),
        timestamp=_row_timestamp,
    )

    roles = []
    for record in latest:
        when = _row_timestamp(record)
        if window is not None and when is not None and not window.contains(when):
            continue

        last_updated = format_us_date(when) if when else ""
        stages = [make_stage(name, record[name]) for name in stage_names]
        roles.append(
            build_role(
                name=f"{record['department']} - {record['role']}",
                stages=stages,
                remarks=record["remarks"],
                last_updated=last_updated,
                is_active=is_active(last_updated),
                threshold=threshold,
            )
        )
    return roles


def roles_from_funnel_analysis(
    tab: Tab,
    window: Optional[DateWindow] = None,
    is_active: Callable[[str], bool] = always_active,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[Role]:
    """Read one role per row from a pre-aggregated funnel tab.

    Every non-empty header outside position, role, department, last_updated
    and remarks is a stage, except the timestamp column, which only drives
    the date window. Rows whose timestamp cannot be parsed are kept.
    """
    headers, rows = split_table(tab)
    if not headers:
        return []

    idx_timestamp = find_column(headers, [contains("timestamp")])
    idx_department = find_column(headers, [startswith("department")])
    idx_role = find_column(headers, [contains("role")])
    stage_columns = [
        (index, header)
        for index, header in enumerate(headers)
        if header and index != idx_timestamp and not NON_STAGE_HEADER.search(header)
    ]

    roles = []
    for row in rows:
        when = parse_sheet_date(cell_text(row, idx_timestamp))
        if window is not None and when is not None and not window.contains(when):
            continue

        department = cell_text(row, idx_department)
        role_name = cell_text(row, idx_role if idx_role != NOT_FOUND else 0)
        if not role_name:
            continue

        last_updated = format_us_date(when) if when else ""
        stages = [make_stage(header, cell_int(row, index)) for index, header in stage_columns]
        roles.append(
            build_role(
                name=f"{department} - {role_name}" if department else role_name,
                stages=stages,
                last_updated=last_updated,
                is_active=is_active(last_updated),
                threshold=threshold,
            )
        )
    return roles


def extract_form_roles(
    tabs: Sequence[Tab],
    window: Optional[DateWindow] = None,
    is_active: Callable[[str], bool] = always_active,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[Role]:
    """Roles from form responses, falling back to the Funnel Analysis tab."""
    form_tab = find_form_tab(tabs)
    if form_tab is not None:
        roles = roles_from_form(form_tab, window, is_active, threshold)
        if roles:
            logger.info(f"Form-driven funnel: {len(roles)} roles")
            return roles

    funnel_tab = find_tab(tabs, lambda title: title == FUNNEL_ANALYSIS_TITLE)
    if funnel_tab is not None:
        roles = roles_from_funnel_analysis(funnel_tab, window, is_active, threshold)
        if roles:
            logger.info(f"Funnel Analysis fallback: {len(roles)} roles")
            return roles

    return []
