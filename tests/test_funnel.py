"""
Tests for conversion rates, health scores and stage sanitization.
"""
import pytest

from ta_dashboard.funnel import (
    build_role,
    conversion_rates,
    health_score,
    make_stage,
    restage,
    sanitize_role,
)


def _stages(*counts):
    return [make_stage(f"Stage {i}", count) for i, count in enumerate(counts)]


class TestConversionRates:
    def test_one_rate_per_adjacent_pair(self):
        for counts in [(), (10,), (10, 5), (10, 5, 2, 1)]:
            rates = conversion_rates(_stages(*counts))
            assert len(rates) == max(0, len(counts) - 1)

    def test_rate_relates_neighbouring_stages(self):
        rates = conversion_rates(_stages(100, 40, 5))
        assert [(r.from_stage, r.to_stage) for r in rates] == [
            ("Stage 0", "Stage 1"),
            ("Stage 1", "Stage 2"),
        ]
        assert rates[0].rate == 40.0
        assert rates[1].rate == 12.5

    def test_zero_previous_count_gives_zero(self):
        rates = conversion_rates(_stages(0, 5, 0, 3))
        assert rates[0].rate == 0
        assert rates[2].rate == 0

    @pytest.mark.parametrize("count,is_low", [(29, True), (30, False), (31, False), (0, True)])
    def test_low_threshold(self, count, is_low):
        (rate,) = conversion_rates(_stages(100, count))
        assert rate.is_low is is_low

    def test_custom_threshold(self):
        (rate,) = conversion_rates(_stages(100, 40), threshold=50)
        assert rate.is_low


class TestHealthScore:
    def test_last_over_first(self):
        assert health_score(_stages(100, 40, 5)) == 5.0

    def test_zero_first_stage(self):
        assert health_score(_stages(0, 4)) == 0.0

    def test_no_stages(self):
        assert health_score([]) == 0.0


def test_make_stage_clamps_negative_counts():
    assert make_stage("Applied", -4).candidate_count == 0


def test_build_role_wire_format():
    role = build_role("Eng - Backend", _stages(10, 5), remarks="ok", last_updated="08/01/2024")
    wire = role.to_wire()
    assert wire["lastUpdated"] == "08/01/2024"
    assert wire["isActive"] is True
    assert wire["funnelHealthScore"] == 50.0
    assert wire["stages"][0] == {
        "stage_name": "Stage 0",
        "candidate_count": 10,
        "last_updated": "",
    }
    assert wire["conversionRates"] == [
        {"fromStage": "Stage 0", "toStage": "Stage 1", "rate": 50.0, "isLow": False}
    ]


def test_restage_recomputes_derived_fields():
    role = build_role("Role", _stages(100, 50, 10))
    updated = restage(role, _stages(100, 10))
    assert len(updated.conversion_rates) == 1
    assert updated.conversion_rates[0].rate == 10.0
    assert updated.funnel_health_score == 10.0
    assert updated.name == role.name


class TestSanitizeRole:
    def test_drops_empty_technical_assessment_and_recomputes(self):
        role = build_role(
            "Role",
            [
                make_stage("Screened by TA", 50),
                make_stage("Technical Assessment", 0),
                make_stage("Interviewed by HM", 20),
            ],
        )
        assert role.conversion_rates[1].rate == 0

        clean = sanitize_role(role)
        assert [s.stage_name for s in clean.stages] == ["Screened by TA", "Interviewed by HM"]
        assert len(clean.conversion_rates) == 1
        assert clean.conversion_rates[0].rate == 40.0
        assert clean.conversion_rates[0].from_stage == "Screened by TA"

    def test_keeps_non_empty_technical_assessment(self):
        role = build_role("Role", [make_stage("Applied", 10), make_stage("Technical Assessment", 4)])
        assert len(sanitize_role(role).stages) == 2

    def test_strips_persona_prefixes(self):
        role = build_role(
            "Role",
            [make_stage("[TA] New Applicants", 10), make_stage("[Hiring Lead] Offer Made", 2)],
        )
        clean = sanitize_role(role)
        assert [s.stage_name for s in clean.stages] == ["New Applicants", "Offer Made"]
        assert clean.conversion_rates[0].to_stage == "Offer Made"

    def test_prefixed_empty_stage_is_hidden(self):
        role = build_role(
            "Role",
            [make_stage("Applied", 10), make_stage("[TA] Technical Assessment", 0)],
        )
        assert [s.stage_name for s in sanitize_role(role).stages] == ["Applied"]
