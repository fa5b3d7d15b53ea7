"""Role-per-row department tabs.

Each department tab has a header row of funnel stage names (plus metadata
columns) and one row per open role.
"""

import logging
from typing import Callable, Optional, Sequence

from .dates import DateWindow, parse_slash_date
from .extract import split_table
from .funnel import LOW_CONVERSION_THRESHOLD, build_role, make_stage
from .headers import contains, find_column, header_mentions
from .models import Role, Tab
from .rows import cell_int, cell_text

logger = logging.getLogger(__name__)

SKIPPED_TITLES = {"history", "config"}
NON_STAGE_WORDS = ("position", "last_updated", "remarks", "department", "role")


def always_active(last_updated: str) -> bool:
    return True


def is_department_tab(title: str) -> bool:
    """Check whether a tab holds department roles rather than system or form data."""
    lowered = title.lower()
    if lowered in SKIPPED_TITLES:
        return False
    return "responses" not in lowered


def stage_columns(headers: Sequence[str]) -> list[str]:
    """Return the funnel stage headers in column order."""
    return [
        header
        for header in headers
        if header and not header_mentions(header, NON_STAGE_WORDS)
    ]


def roles_from_tab(
    tab: Tab,
    is_active: Callable[[str], bool] = always_active,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[Role]:
    """Read one role per data row of a department tab."""
    headers, rows = split_table(tab)
    if not headers:
        return []

    stage_names = stage_columns(headers)
    logger.debug(f"Funnel stages for {tab.title}: {stage_names}")

    idx_last_updated = find_column(headers, [contains("last_updated")])
    idx_remarks = find_column(headers, [contains("remarks")])

    roles = []
    for row in rows:
        role_name = cell_text(row, 0)
        if not role_name.strip():
            continue

        last_updated = cell_text(row, idx_last_updated)
        stages = []
        for stage_name in stage_names:
            if stage_name not in headers or not stage_name.strip():
                continue
            column = headers.index(stage_name)
            stages.append(
                make_stage(stage_name.strip(), cell_int(row, column), last_updated)
            )

        if not stages:
            continue

        roles.append(
            build_role(
                name=f"{tab.title} - {role_name}",
                stages=stages,
                remarks=cell_text(row, idx_remarks),
                last_updated=last_updated,
                is_active=is_active(last_updated),
                threshold=threshold,
            )
        )
    return roles


def within_window(role: Role, window: Optional[DateWindow]) -> bool:
    """Keep roles whose M/D/YYYY last-updated date falls in the window."""
    if window is None:
        return True
    updated = parse_slash_date(role.last_updated)
    return updated is not None and window.contains(updated)


def extract_role_tabs(
    tabs: Sequence[Tab],
    window: Optional[DateWindow] = None,
    is_active: Callable[[str], bool] = always_active,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[Role]:
    """Collect roles from every department tab, filtered by the date window."""
    roles = []
    for tab in tabs:
        if not is_department_tab(tab.title):
            logger.debug(f"Skipping sheet: {tab.title}")
            continue
        for role in roles_from_tab(tab, is_active, threshold):
            if within_window(role, window):
                roles.append(role)
    logger.info(f"Role tabs produced {len(roles)} roles")
    return roles
