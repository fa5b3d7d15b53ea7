"""Data models for the recruiting funnel dashboard."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Tab(BaseModel):
    """One named tab of the tabular source, as rows of formatted cell values."""

    title: str
    rows: list[list[Optional[str]]] = Field(default_factory=list)


class WireModel(BaseModel):
    """Base for records serialized with camelCase names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class FunnelStage(WireModel):
    """A single hiring pipeline step and its candidate count."""

    stage_name: str
    candidate_count: int = Field(default=0, ge=0)
    last_updated: str = ""


class ConversionRate(WireModel):
    """Share of candidates moving from one stage to the next, in percent."""

    from_stage: str = Field(alias="fromStage")
    to_stage: str = Field(alias="toStage")
    rate: float
    is_low: bool = Field(alias="isLow")


class Role(WireModel):
    """A role's funnel. Build with funnel.build_role so derived fields agree."""

    name: str
    stages: list[FunnelStage] = Field(default_factory=list)
    remarks: str = ""
    last_updated: str = Field(default="", alias="lastUpdated")
    is_active: bool = Field(default=True, alias="isActive")
    funnel_health_score: float = Field(default=0.0, alias="funnelHealthScore")
    conversion_rates: list[ConversionRate] = Field(
        default_factory=list, alias="conversionRates"
    )


class KeyWin(WireModel):
    """A row of the Key Wins tab."""

    date: str = ""
    department: str = ""
    position: str = ""
    remarks: str = ""


class DailyUpdate(WireModel):
    """A TA's daily activity report."""

    date: str = ""
    ta_name: str = Field(default="", alias="taName")
    department: str = ""
    country: str = ""
    role: str = ""
    number_of_openings: int = Field(default=0, alias="numberOfOpenings")
    interviews_scheduled: int = Field(default=0, alias="interviewsScheduled")
    interviews_completed: int = Field(default=0, alias="interviewsCompleted")
    cancelled_no_show: int = Field(default=0, alias="cancelledNoShow")
    offers_made: int = Field(default=0, alias="offersMade")
    pending_interview_feedback: int = Field(
        default=0, alias="pendingInterviewFeedback"
    )
    upcoming_hm_interviews: int = Field(default=0, alias="upcomingHmInterviews")
    remarks: str = ""


class DashboardResponse(WireModel):
    roles: list[Role] = Field(default_factory=list)


class KeyWinsResponse(WireModel):
    wins: list[KeyWin] = Field(default_factory=list)


class DailyUpdatesResponse(WireModel):
    updates: list[DailyUpdate] = Field(default_factory=list)
