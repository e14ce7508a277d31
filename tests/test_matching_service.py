from types import SimpleNamespace

from staffing_crm.models import EmploymentStatus, SeniorityLevel, TalentType
from staffing_crm.services.matching_service import (
    rank_all_talent,
    rank_candidates,
    rank_engineers,
    round_half_up,
    score_candidate,
    score_engineer,
    score_label,
)


def project(**fields):
    defaults = dict(
        customer_id="customer-1",
        technologies=[],
        must_have=[],
        nice_to_have=[],
        seniority_level=None,
        years_experience_min=None,
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def candidate(**fields):
    defaults = dict(
        id="cand-1",
        technologies=[],
        seniority_level=None,
        years_experience=None,
        resume_extracted_text=None,
        summary_public=None,
        summary_internal=None,
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def engineer(**fields):
    defaults = dict(
        id="eng-1",
        technologies=[],
        seniority_level=None,
        years_experience=None,
        employment_status=EmploymentStatus.ACTIVE,
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


REACT_PROJECT = dict(
    technologies=["React", "Node.js", "TypeScript", "PostgreSQL"],
    must_have=["React", "TypeScript"],
    seniority_level=SeniorityLevel.SENIOR,
    years_experience_min=5,
)


class TestRoundHalfUp:
    def test_rounds_half_upwards(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(36.5) == 37

    def test_rounds_below_half_down(self):
        assert round_half_up(36.49) == 36


class TestScoreCandidate:
    def test_strong_candidate(self):
        result = score_candidate(
            candidate(technologies=["react", "TypeScript", "Node.js", "PostgreSQL"],
                      seniority_level=SeniorityLevel.SENIOR, years_experience=7),
            project(nice_to_have=["Docker"], **REACT_PROJECT),
        )
        assert result.score == 90
        assert result.reasons == [
            "Matches 4/4 required technologies",
            "Has all must-have requirements",
            "Seniority level matches: SENIOR",
            "Has 7+ years experience (required: 5+)",
        ]

    def test_partial_candidate(self):
        # 10 (1/4 tech) + 12.5 (1/2 must-have) + 8 (one level below) + 6 (3/5 years) = 36.5
        result = score_candidate(
            candidate(technologies=["React"], seniority_level=SeniorityLevel.MID, years_experience=3),
            project(**REACT_PROJECT),
        )
        assert result.score == 37
        assert "Missing must-have: typescript" in result.reasons
        assert "Seniority: MID (below SENIOR requirement)" in result.reasons
        assert "Has 3 years experience (below 5 required)" in result.reasons

    def test_must_have_found_in_resume_text(self):
        # no project technologies: 0 + 25 must-have + 10 seniority + 7 experience
        result = score_candidate(
            candidate(resume_extracted_text="Built services in Go on Kubernetes"),
            project(must_have=["Kubernetes"]),
        )
        assert result.score == 42
        assert result.reasons == ["Has all must-have requirements"]

    def test_missing_reason_lists_two_then_ellipsis(self):
        result = score_candidate(candidate(), project(must_have=["Go", "Rust", "Elixir"]))
        assert "Missing must-have: go, rust..." in result.reasons

    def test_missing_every_must_have_earns_no_credit(self):
        missing = score_candidate(candidate(), project(must_have=["Go", "Rust"]))
        none_listed = score_candidate(candidate(), project())
        assert missing.score == 10 + 7
        assert none_listed.score - missing.score == 25

    def test_score_rises_with_technology_overlap(self):
        techs = ["Go", "Rust", "Kafka", "Redis"]
        scores = [
            score_candidate(candidate(technologies=techs[:k]), project(technologies=techs)).score
            for k in range(len(techs) + 1)
        ]
        assert scores == sorted(scores)
        assert scores[0] == 42
        assert scores[-1] == 82

    def test_seniority_far_below_and_above(self):
        far_below = score_candidate(
            candidate(seniority_level=SeniorityLevel.JUNIOR), project(seniority_level=SeniorityLevel.LEAD)
        )
        above = score_candidate(
            candidate(seniority_level=SeniorityLevel.LEAD), project(seniority_level=SeniorityLevel.MID)
        )
        # 25 must-have default + 7 experience default
        assert far_below.score == 25 + 3 + 7
        assert above.score == 25 + 12 + 7
        assert "Seniority: LEAD (exceeds requirement)" in above.reasons

    def test_nice_to_have_bonus(self):
        result = score_candidate(
            candidate(technologies=["Docker"]), project(nice_to_have=["Docker", "Kafka"])
        )
        assert result.score == 25 + 10 + 7 + 5
        assert "Has 1 nice-to-have skills" in result.reasons

    def test_reasons_capped_at_five(self):
        result = score_candidate(
            candidate(technologies=["React", "TypeScript", "Docker"],
                      seniority_level=SeniorityLevel.SENIOR, years_experience=9),
            project(nice_to_have=["Docker"], **REACT_PROJECT),
        )
        assert len(result.reasons) == 5


class TestScoreEngineer:
    def test_bench_engineer_with_customer_history(self):
        result = score_engineer(
            engineer(technologies=["AWS", "Terraform"], employment_status=EmploymentStatus.BENCH),
            project(technologies=["AWS", "Terraform"], must_have=["AWS"]),
            assignments=[SimpleNamespace(customer_id="customer-1")],
        )
        assert result.score == 35 + 20 + 10 + 7 + 15 + 5
        assert result.reasons == [
            "Matches 2/2 required technologies",
            "Has all must-have requirements",
            "Currently on bench - immediately available",
            "Previously worked with this customer",
        ]

    def test_empty_requirements_give_defaults(self):
        result = score_engineer(engineer(), project())
        assert result.score == 20 + 20 + 10 + 7 + 10

    def test_negative_availability_applied_after_cap(self):
        inactive = score_engineer(
            engineer(technologies=["AWS"], employment_status=EmploymentStatus.INACTIVE),
            project(technologies=["AWS"]),
        )
        on_leave = score_engineer(
            engineer(technologies=["AWS"], employment_status=EmploymentStatus.ON_LEAVE),
            project(technologies=["AWS"]),
        )
        assert inactive.score == 72 - 10
        assert on_leave.score == 72 - 5
        assert "Currently on leave" in on_leave.reasons

    def test_score_capped_at_100(self):
        result = score_engineer(
            engineer(technologies=["AWS"], seniority_level=SeniorityLevel.SENIOR, years_experience=10,
                     employment_status=EmploymentStatus.BENCH),
            project(technologies=["AWS"], must_have=["AWS"], seniority_level=SeniorityLevel.SENIOR,
                    years_experience_min=5),
            assignments=[SimpleNamespace(customer_id="customer-1")],
        )
        assert result.score == 100

    def test_must_have_ignores_free_text(self):
        result = score_engineer(engineer(technologies=["Python"]), project(must_have=["Kubernetes"]))
        assert "Missing must-have: kubernetes" in result.reasons

    def test_missing_every_must_have_earns_no_credit(self):
        missing = score_engineer(engineer(), project(must_have=["Kubernetes"]))
        none_listed = score_engineer(engineer(), project())
        assert none_listed.score - missing.score == 20

    def test_score_rises_with_technology_overlap(self):
        techs = ["AWS", "Terraform", "Ansible", "Linux"]
        scores = [
            score_engineer(engineer(technologies=techs[:k]), project(technologies=techs)).score
            for k in range(len(techs) + 1)
        ]
        assert scores == sorted(scores)
        assert scores == [47, 56, 65, 73, 82]

    def test_score_floored_at_zero(self):
        result = score_engineer(
            engineer(seniority_level=SeniorityLevel.JUNIOR, years_experience=0,
                     employment_status=EmploymentStatus.INACTIVE),
            project(technologies=["AWS"], must_have=["AWS"], seniority_level=SeniorityLevel.LEAD,
                    years_experience_min=10),
        )
        # 3 seniority points, then -10 for INACTIVE
        assert result.score == 0


class TestRanking:
    def test_rank_candidates_best_first(self):
        weak = candidate(id="weak")
        strong = candidate(id="strong", technologies=["React"])
        ranked = rank_candidates([weak, strong], project(technologies=["React"]))
        assert [c.id for c, _ in ranked] == ["strong", "weak"]

    def test_rank_engineers_prefers_available_and_keeps_ties_in_order(self):
        first = engineer(id="first")
        bench = engineer(id="bench", employment_status=EmploymentStatus.BENCH)
        second = engineer(id="second")

        ranked = rank_engineers([first, bench, second], project())
        assert [e.id for e, _ in ranked] == ["bench", "first", "second"]

        history = {"second": [SimpleNamespace(customer_id="customer-1")]}
        ranked = rank_engineers([first, bench, second], project(), history)
        assert [e.id for e, _ in ranked] == ["bench", "second", "first"]
        assert ranked[0][1].score == ranked[1][1].score == 72

    def test_rank_all_talent_merges_types(self):
        ranked = rank_all_talent(
            [candidate(id="c", technologies=["React"])],
            [engineer(id="e", technologies=["React"], employment_status=EmploymentStatus.BENCH)],
            project(technologies=["React"]),
        )
        assert [m.talent_type for m in ranked] == [TalentType.ENGINEER, TalentType.CANDIDATE]
        assert ranked[0].score >= ranked[1].score


def test_score_label_thresholds():
    assert score_label(80) == "Excellent Match"
    assert score_label(79) == "Good Match"
    assert score_label(60) == "Good Match"
    assert score_label(40) == "Fair Match"
    assert score_label(39) == "Low Match"
