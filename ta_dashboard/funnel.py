"""Funnel stage assembly and conversion rate computation."""

import re
from typing import Sequence

from .models import ConversionRate, FunnelStage, Role

LOW_CONVERSION_THRESHOLD = 30.0

PERSONA_PREFIX = re.compile(r"^\s*\[(?:TA|Hiring\s*Lead)\]\s*", re.IGNORECASE)


def make_stage(stage_name: str, candidate_count: int, last_updated: str = "") -> FunnelStage:
    """Create a stage, clamping negative counts to zero."""
    return FunnelStage(
        stage_name=stage_name,
        candidate_count=max(0, candidate_count),
        last_updated=last_updated,
    )


def conversion_rates(
    stages: Sequence[FunnelStage],
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> list[ConversionRate]:
    """Compute the rate between each pair of adjacent stages."""
    rates = []
    for previous, current in zip(stages, stages[1:]):
        if previous.candidate_count > 0:
            rate = current.candidate_count * 100 / previous.candidate_count
        else:
            rate = 0.0
        rates.append(
            ConversionRate(
                from_stage=previous.stage_name,
                to_stage=current.stage_name,
                rate=rate,
                is_low=rate < threshold,
            )
        )
    return rates


def health_score(stages: Sequence[FunnelStage]) -> float:
    """Percentage of first-stage candidates that reached the last stage."""
    if not stages or stages[0].candidate_count <= 0:
        return 0.0
    return stages[-1].candidate_count * 100 / stages[0].candidate_count


def build_role(
    name: str,
    stages: Sequence[FunnelStage],
    remarks: str = "",
    last_updated: str = "",
    is_active: bool = True,
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> Role:
    """Build a role with conversion rates and health score derived from its stages."""
    stages = list(stages)
    return Role(
        name=name,
        stages=stages,
        remarks=remarks,
        last_updated=last_updated,
        is_active=is_active,
        funnel_health_score=health_score(stages),
        conversion_rates=conversion_rates(stages, threshold),
    )


def restage(
    role: Role,
    stages: Sequence[FunnelStage],
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> Role:
    """Return a copy of a role with new stages and recomputed derived fields."""
    return build_role(
        name=role.name,
        stages=stages,
        remarks=role.remarks,
        last_updated=role.last_updated,
        is_active=role.is_active,
        threshold=threshold,
    )


def sanitize_role(
    role: Role,
    hidden_when_empty: Sequence[str] = ("Technical Assessment",),
    threshold: float = LOW_CONVERSION_THRESHOLD,
) -> Role:
    """Strip persona prefixes from stage names and drop named stages that are empty.

    Form questions are often titled "[TA] Screened by TA"; the prefix is
    removed before matching against hidden_when_empty.
    """
    hidden = {name.lower() for name in hidden_when_empty}
    stages = []
    for stage in role.stages:
        stage_name = PERSONA_PREFIX.sub("", stage.stage_name)
        if stage_name.lower() in hidden and stage.candidate_count == 0:
            continue
        stages.append(make_stage(stage_name, stage.candidate_count, stage.last_updated))
    return restage(role, stages, threshold)
