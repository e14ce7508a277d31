"""
Match Scoring Service

PURPOSE:
Score how well a candidate or an internal engineer fits a project's
requirements, and rank talent pools by that score.

HOW IT WORKS:
Each factor adds points to a running total, then the total is rounded
half-up and capped at 100.

Candidates (max 100):
1. Technology overlap      40
2. Must-have coverage      25  (resume text, summaries and technologies)
3. Seniority alignment     15
4. Years of experience     10
5. Nice-to-have bonus      10

Engineers (max 100 before capping):
1. Technology overlap      35
2. Must-have coverage      20  (technologies only)
3. Seniority alignment     15
4. Years of experience     10
5. Availability            15  (negative values applied after the cap)
6. Customer history         5

Every function here is pure: no database access, no side effects.
Inputs only need the attributes used below, so ORM entities and plain
objects both work.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from staffing_crm.models.enums import SENIORITY_ORDER, EmploymentStatus, SeniorityLevel, TalentType

MAX_SCORE = 100
MAX_REASONS = 5

AVAILABILITY_BOOST: Dict[EmploymentStatus, int] = {
    EmploymentStatus.BENCH: 15,
    EmploymentStatus.ACTIVE: 10,
    EmploymentStatus.ASSIGNED: 0,
    EmploymentStatus.ON_LEAVE: -5,
    EmploymentStatus.INACTIVE: -10,
}

AVAILABILITY_REASONS: Dict[EmploymentStatus, str] = {
    EmploymentStatus.BENCH: "Currently on bench - immediately available",
    EmploymentStatus.ACTIVE: "Active employee - available for assignment",
    EmploymentStatus.ASSIGNED: "Currently assigned to another project",
    EmploymentStatus.ON_LEAVE: "Currently on leave",
}


@dataclass
class MatchResult:
    score: int
    reasons: List[str] = field(default_factory=list)


@dataclass
class TalentMatch:
    """One entry of a merged candidate + engineer ranking."""
    talent_type: TalentType
    talent: Any
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score


# ============================================================
# HELPERS
# ============================================================

def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def _lower(values: Optional[Iterable[str]]) -> List[str]:
    return [v.lower() for v in (values or [])]


def _enum_value(value) -> Optional[str]:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


def _technology_overlap(talent_techs: List[str], project_techs: List[str]) -> int:
    return len([t for t in talent_techs if t in project_techs])


def _missing_reason(missing: List[str]) -> str:
    suffix = "..." if len(missing) > 2 else ""
    return f"Missing must-have: {', '.join(missing[:2])}{suffix}"


def _seniority_points(talent_level, project_level, reasons: List[str]) -> int:
    if not talent_level or not project_level:
        return 10

    talent_rank = SENIORITY_ORDER[SeniorityLevel(talent_level)]
    project_rank = SENIORITY_ORDER[SeniorityLevel(project_level)]
    talent_name = _enum_value(talent_level)

    if talent_rank == project_rank:
        reasons.append(f"Seniority level matches: {talent_name}")
        return 15
    if talent_rank > project_rank:
        reasons.append(f"Seniority: {talent_name} (exceeds requirement)")
        return 12
    if talent_rank == project_rank - 1:
        reasons.append(f"Seniority: {talent_name} (below {_enum_value(project_level)} requirement)")
        return 8
    return 3


def _experience_points(years: Optional[int], minimum: Optional[int], reasons: List[str]) -> int:
    if years is None or minimum is None:
        return 7

    if years >= minimum:
        reasons.append(f"Has {years}+ years experience (required: {minimum}+)")
        return 10
    reasons.append(f"Has {years} years experience (below {minimum} required)")
    return round_half_up(years / minimum * 10)


def _candidate_text(candidate, candidate_techs: List[str]) -> str:
    parts = [
        getattr(candidate, "resume_extracted_text", None) or "",
        getattr(candidate, "summary_public", None) or "",
        getattr(candidate, "summary_internal", None) or "",
        *candidate_techs,
    ]
    return " ".join(parts).lower()


# ============================================================
# SCORING
# ============================================================

def score_candidate(candidate, project) -> MatchResult:
    """Score an external candidate against a project."""
    score = 0.0
    reasons: List[str] = []

    project_techs = _lower(project.technologies)
    candidate_techs = _lower(candidate.technologies)

    # 1. Technology overlap
    if project_techs:
        overlap = _technology_overlap(candidate_techs, project_techs)
        score += min(40, overlap / len(project_techs) * 40)
        if overlap > 0:
            reasons.append(f"Matches {overlap}/{len(project_techs)} required technologies")

    text = _candidate_text(candidate, candidate_techs)

    def has(requirement: str) -> bool:
        return requirement in text or requirement in candidate_techs

    # 2. Must-have requirements
    must_have = _lower(project.must_have)
    if must_have:
        matched = [req for req in must_have if has(req)]
        missing = [req for req in must_have if not has(req)]
        score += len(matched) / len(must_have) * 25
        if len(matched) == len(must_have):
            reasons.append("Has all must-have requirements")
        else:
            reasons.append(_missing_reason(missing))
    else:
        score += 25

    # 3. Seniority
    score += _seniority_points(candidate.seniority_level, project.seniority_level, reasons)

    # 4. Experience
    score += _experience_points(candidate.years_experience, project.years_experience_min, reasons)

    # 5. Nice-to-have
    nice_to_have = _lower(project.nice_to_have)
    if nice_to_have:
        matched_nice = [req for req in nice_to_have if has(req)]
        score += min(10, len(matched_nice) / len(nice_to_have) * 10)
        if matched_nice:
            reasons.append(f"Has {len(matched_nice)} nice-to-have skills")

    final = max(0, min(MAX_SCORE, round_half_up(score)))
    return MatchResult(score=final, reasons=reasons[:MAX_REASONS])


def score_engineer(engineer, project, assignments: Optional[Sequence[Any]] = None) -> MatchResult:
    """
    Score an internal engineer against a project.

    `assignments` is the engineer's assignment history; any assignment for
    the project's customer earns the history bonus.
    """
    score = 0.0
    reasons: List[str] = []

    project_techs = _lower(project.technologies)
    engineer_techs = _lower(engineer.technologies)

    # 1. Technology overlap
    if project_techs:
        overlap = _technology_overlap(engineer_techs, project_techs)
        score += min(35, overlap / len(project_techs) * 35)
        if overlap > 0:
            reasons.append(f"Matches {overlap}/{len(project_techs)} required technologies")
    else:
        score += 20

    # 2. Must-have requirements, matched against technologies only
    must_have = _lower(project.must_have)
    if must_have:
        matched = [req for req in must_have if req in engineer_techs]
        missing = [req for req in must_have if req not in engineer_techs]
        score += len(matched) / len(must_have) * 20
        if len(matched) == len(must_have):
            reasons.append("Has all must-have requirements")
        else:
            reasons.append(_missing_reason(missing))
    else:
        score += 20

    # 3. Seniority
    score += _seniority_points(engineer.seniority_level, project.seniority_level, reasons)

    # 4. Experience
    score += _experience_points(engineer.years_experience, project.years_experience_min, reasons)

    # 5. Availability
    status = EmploymentStatus(engineer.employment_status or EmploymentStatus.ACTIVE)
    boost = AVAILABILITY_BOOST[status]
    score += max(0, boost)
    if status in AVAILABILITY_REASONS:
        reasons.append(AVAILABILITY_REASONS[status])

    # 6. Customer history
    customer_id = getattr(project, "customer_id", None)
    if customer_id and any(getattr(a, "customer_id", None) == customer_id for a in (assignments or [])):
        score += 5
        reasons.append("Previously worked with this customer")

    final = min(MAX_SCORE, round_half_up(score))
    if boost < 0:
        final = max(0, final + boost)
    return MatchResult(score=max(0, final), reasons=reasons[:MAX_REASONS])


# ============================================================
# RANKING
# ============================================================

def rank_candidates(candidates: Iterable[Any], project) -> List[Tuple[Any, MatchResult]]:
    """Score and sort candidates, best first. Ties keep input order."""
    scored = [(c, score_candidate(c, project)) for c in candidates]
    return sorted(scored, key=lambda pair: pair[1].score, reverse=True)


def rank_engineers(
    engineers: Iterable[Any],
    project,
    assignments_by_engineer: Optional[Dict[str, Sequence[Any]]] = None,
) -> List[Tuple[Any, MatchResult]]:
    assignments_by_engineer = assignments_by_engineer or {}
    scored = [
        (e, score_engineer(e, project, assignments_by_engineer.get(e.id, [])))
        for e in engineers
    ]
    return sorted(scored, key=lambda pair: pair[1].score, reverse=True)


def rank_all_talent(
    candidates: Iterable[Any],
    engineers: Iterable[Any],
    project,
    assignments_by_engineer: Optional[Dict[str, Sequence[Any]]] = None,
) -> List[TalentMatch]:
    """Merge candidates and engineers into one ranking, best first."""
    assignments_by_engineer = assignments_by_engineer or {}
    matches = [
        TalentMatch(TalentType.CANDIDATE, c, score_candidate(c, project))
        for c in candidates
    ]
    matches.extend(
        TalentMatch(TalentType.ENGINEER, e, score_engineer(e, project, assignments_by_engineer.get(e.id, [])))
        for e in engineers
    )
    return sorted(matches, key=lambda m: m.score, reverse=True)


def score_label(score: int) -> str:
    if score >= 80:
        return "Excellent Match"
    if score >= 60:
        return "Good Match"
    if score >= 40:
        return "Fair Match"
    return "Low Match"
