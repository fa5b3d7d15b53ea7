"""
Pytest configuration and shared fixtures.
"""
import os
import sys

import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from ta_dashboard.config import Config  # noqa: E402
from ta_dashboard.models import Tab  # noqa: E402


class FakeSource:
    """In-memory tabular source recording how often it was fetched."""

    def __init__(self, tabs=None, error=None):
        self.tabs = tabs or []
        self.error = error
        self.calls = []

    def fetch_tabs(self, spreadsheet_id):
        self.calls.append(spreadsheet_id)
        if self.error is not None:
            raise self.error
        return self.tabs


@pytest.fixture
def config():
    return Config(spreadsheet_id="sheet-123")


@pytest.fixture
def engineering_tab():
    """Department tab with a header row and two roles (one blank)."""
    return Tab(
        title="Engineering",
        rows=[
            ["Role", "Applied", "Screening", "Offer", "Last_Updated", "Remarks"],
            ["Backend Eng", "100", "40", "5", "08/01/2024", "ok"],
            ["   ", "10", "5", "1", "08/01/2024", "blank role"],
            ["Frontend Eng", "50", "0", "0", "08/10/2024", ""],
        ],
    )


@pytest.fixture
def form_tab():
    return Tab(
        title="Form Responses 1",
        rows=[
            [
                "Timestamp",
                "Department",
                "Role / Position",
                "[TA] New Applicants",
                "[TA] Screened by TA",
                "[Hiring Lead] Interviewed by HM",
                "[Hiring Lead] Offer Made",
                "Hired",
                "Remarks",
            ],
            ["8/1/2024 09:00:00", "Engineering", "Backend", "100", "20", "10", "2", "1", "first"],
            ["8/5/2024 17:30:00", "Engineering", "Backend", "120", "30", "12", "3", "2", "second"],
            ["8/3/2024 10:00:00", "Sales", "Account Exec", "40", "10", "4", "1", "0", "sales"],
        ],
    )


@pytest.fixture
def key_wins_tab():
    return Tab(
        title="Key Wins",
        rows=[
            ["Date", "Department", "Position", "Progress/ Remarks"],
            ["2024-08-05", "Engineering", "Backend Eng", "Offer accepted"],
            ["2024-08-09", "Sales", "Account Exec", "Signed"],
            ["", "", "", ""],
            ["8/1/2024", "Marketing", "Designer", "Hired"],
        ],
    )


@pytest.fixture
def daily_updates_tab():
    return Tab(
        title="Daily Updates",
        rows=[
            [
                "Timestamp",
                "TA Name",
                "Department",
                "Country",
                "Role/ Position",
                "Number of Openings",
                "Interviews Scheduled (today)",
                "Interviews Completed (today)",
                "Cancelled/ No Show (today)",
                "Offers Made (today)",
                "Pending Interview Feedback (count)",
                "Upcoming HM Interviews (next 7 days)",
                "Progress/ Remark",
            ],
            [
                "8/2/2024 10:15:00", "Aisha", "Engineering", "Malaysia", "Backend Eng",
                "2", "3", "2", "1", "0", "4", "5", "on track",
            ],
            [
                "8/6/2024 11:00:00", "Ben", "Sales", "Singapore", "Account Exec",
                "1", "n/a", "", None, "1", "0", "2", "",
            ],
            [None, None, None, None, "orphan", "9", "9", "9", "9", "9", "9", "9", "ignored"],
        ],
    )
