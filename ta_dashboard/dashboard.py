"""Request orchestration: fetch the spreadsheet once and run the tab readers.

Every entry point returns a well-formed response. A missing source or any
failure while fetching or reading falls back to placeholder data for the
dashboard, and to empty lists for key wins and daily updates.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from .config import Config
from .dates import DateWindow, parse_slash_date
from .form_responses import extract_form_roles
from .funnel import build_role, make_stage, sanitize_role
from .models import (
    DailyUpdatesResponse,
    DashboardResponse,
    KeyWinsResponse,
    Role,
    Tab,
)
from .role_tabs import always_active, extract_role_tabs
from .sheets import TabularSource
from .updates import extract_daily_updates, extract_key_wins

logger = logging.getLogger(__name__)

TRUTHY_FLAGS = {"1", "true"}


def placeholder_roles(config: Config) -> list[Role]:
    """Sample roles served when the spreadsheet cannot be read."""
    threshold = config.conversion_threshold
    software = [
        ("Applied", 150),
        ("Screening", 45),
        ("Technical Interview", 20),
        ("Final Interview", 8),
        ("Offer", 3),
    ]
    product = [
        ("Applied", 80),
        ("Screening", 25),
        ("Case Study", 10),
        ("Final Interview", 4),
        ("Offer", 1),
    ]
    return [
        build_role(
            name="Software Engineer",
            stages=[make_stage(name, count, "2024-08-03") for name, count in software],
            remarks="Strong pipeline, need more senior candidates",
            last_updated="2024-08-03",
            threshold=threshold,
        ),
        build_role(
            name="Product Manager",
            stages=[make_stage(name, count, "2024-08-02") for name, count in product],
            remarks="Need more diverse candidates",
            last_updated="2024-08-02",
            threshold=threshold,
        ),
    ]


def activity_predicate(
    config: Config, now: Optional[datetime] = None
) -> Callable[[str], bool]:
    """Decide whether a role is active from its last-updated text.

    With no inactivity threshold configured every role is active. Roles whose
    date cannot be read are treated as active.
    """
    if config.inactive_after_days is None:
        return always_active

    tz = timezone(timedelta(hours=config.timezone_offset_hours))
    today = (now or datetime.now(tz)).date()
    cutoff = today - timedelta(days=config.inactive_after_days)

    def is_active(last_updated: str) -> bool:
        updated = parse_slash_date(last_updated)
        if updated is None:
            return True
        return updated.date() >= cutoff

    return is_active


def is_truthy_flag(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in TRUTHY_FLAGS


def build_dashboard(
    tabs: Sequence[Tab],
    config: Config,
    window: Optional[DateWindow] = None,
    force_form: bool = False,
    now: Optional[datetime] = None,
) -> list[Role]:
    """Run the role-tab reader, and the form reader when forced, over fetched tabs."""
    is_active = activity_predicate(config, now)
    threshold = config.conversion_threshold

    roles = extract_role_tabs(tabs, window, is_active, threshold)

    if force_form:
        logger.info("Form-driven path activated")
        try:
            form_roles = extract_form_roles(tabs, window, is_active, threshold)
        except Exception as e:
            logger.warning(f"Form-driven funnel failed, falling back to role tabs: {e}")
            form_roles = []
        if form_roles:
            roles = form_roles

    if config.sanitize_stages:
        roles = [sanitize_role(role, config.hidden_when_empty, threshold) for role in roles]
        roles = [role for role in roles if role.stages]
    return roles


def get_dashboard(
    source: Optional[TabularSource],
    config: Config,
    window: Optional[DateWindow] = None,
    force_form: bool = False,
) -> DashboardResponse:
    """Build the funnel dashboard, or placeholder roles when the sheet is unavailable."""
    if source is None or not config.spreadsheet_id:
        logger.info("No spreadsheet configured, returning mock dashboard data")
        return DashboardResponse(roles=placeholder_roles(config))

    try:
        tabs = source.fetch_tabs(config.spreadsheet_id)
        roles = build_dashboard(tabs, config, window, force_form)
    except Exception as e:
        logger.warning(f"Error fetching dashboard data, falling back to mock data: {e}")
        return DashboardResponse(roles=placeholder_roles(config))

    logger.info(f"Successfully fetched data for {len(roles)} roles")
    return DashboardResponse(roles=roles)


def get_key_wins(
    source: Optional[TabularSource],
    config: Config,
    window: Optional[DateWindow] = None,
) -> KeyWinsResponse:
    """Read key wins, or nothing when the sheet is unavailable."""
    if source is None or not config.spreadsheet_id:
        return KeyWinsResponse()

    try:
        tabs = source.fetch_tabs(config.spreadsheet_id)
        return KeyWinsResponse(wins=extract_key_wins(tabs, window))
    except Exception as e:
        logger.warning(f"Error fetching key wins: {e}")
        return KeyWinsResponse()


def get_daily_updates(
    source: Optional[TabularSource],
    config: Config,
    window: Optional[DateWindow] = None,
    department: Optional[str] = None,
    ta_name: Optional[str] = None,
    country: Optional[str] = None,
) -> DailyUpdatesResponse:
    """Read daily updates, or nothing when the sheet is unavailable."""
    if source is None or not config.spreadsheet_id:
        return DailyUpdatesResponse()

    try:
        tabs = source.fetch_tabs(config.spreadsheet_id)
        updates = extract_daily_updates(tabs, window, department, ta_name, country)
    except Exception as e:
        logger.warning(f"Error fetching daily updates: {e}")
        return DailyUpdatesResponse()
    return DailyUpdatesResponse(updates=updates)
