"""FastAPI backend serving funnel, key wins and daily update data."""

import csv
import io
from datetime import datetime, timezone
from typing import Optional, Sequence

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Config
from .dashboard import get_daily_updates, get_dashboard, get_key_wins, is_truthy_flag
from .dates import DateWindow
from .models import Role
from .sheets import TabularSource

CSV_COLUMNS = ["role", "stage", "candidate_count", "conversion_rate", "last_updated", "remarks"]


def _window(config: Config, start: Optional[str], end: Optional[str]) -> Optional[DateWindow]:
    try:
        return DateWindow.from_query(start, end, config.timezone_offset_hours)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid date range: {e}") from e


def roles_to_csv(roles: Sequence[Role]) -> str:
    """Render one CSV line per role stage, with the rate into that stage."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for role in roles:
        for i, stage in enumerate(role.stages):
            rate = f"{role.conversion_rates[i - 1].rate:.1f}" if i > 0 else ""
            writer.writerow(
                [
                    role.name,
                    stage.stage_name,
                    stage.candidate_count,
                    rate,
                    role.last_updated,
                    role.remarks,
                ]
            )
    return buffer.getvalue()


def create_app(config: Config, source: Optional[TabularSource] = None) -> FastAPI:
    """Build the API; a missing source serves placeholder or empty data."""
    app = FastAPI(title="TA Dashboard Backend")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/test")
    def test_endpoint():
        return {
            "message": "Backend is running!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/dashboard")
    def dashboard_endpoint(
        start: Optional[str] = None,
        end: Optional[str] = None,
        force_form: Optional[str] = Query(default=None, alias="forceForm"),
    ):
        window = _window(config, start, end)
        result = get_dashboard(source, config, window, is_truthy_flag(force_form))
        return JSONResponse(result.to_wire())

    @app.get("/api/key-wins")
    def key_wins_endpoint(start: Optional[str] = None, end: Optional[str] = None):
        window = _window(config, start, end)
        return JSONResponse(get_key_wins(source, config, window).to_wire())

    @app.get("/api/daily-updates")
    def daily_updates_endpoint(
        start: Optional[str] = None,
        end: Optional[str] = None,
        dept: Optional[str] = None,
        ta: Optional[str] = None,
        country: Optional[str] = None,
    ):
        window = _window(config, start, end)
        result = get_daily_updates(source, config, window, dept, ta, country)
        return JSONResponse(result.to_wire())

    @app.get("/api/export/csv")
    def export_csv(
        start: Optional[str] = None,
        end: Optional[str] = None,
        force_form: Optional[str] = Query(default=None, alias="forceForm"),
    ):
        window = _window(config, start, end)
        result = get_dashboard(source, config, window, is_truthy_flag(force_form))
        return Response(
            content=roles_to_csv(result.roles),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=ta-dashboard.csv"},
        )

    @app.get("/api/export/pdf")
    def export_pdf():
        """Placeholder export; PDF rendering is not provided."""
        return Response(
            content=b"PDF data would be generated here",
            media_type="application/pdf",
            headers={"Content-Disposition": "attachment; filename=ta-dashboard.pdf"},
        )

    return app
