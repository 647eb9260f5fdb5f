"""Engineer recommendation scoring for a single initiative."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Sequence

from roadmap.config import DEFAULT_CONFIG, SchedulerConfig
from roadmap.domain.models import Engineer, Initiative, SpecialtyLevel
from roadmap.services.timeplan import (
    as_date,
    is_unavailable,
    iter_days,
    parse_working_days,
    prorated_block_hours,
    week_start,
)

MAX_RECOMMENDATIONS = 5


@dataclass
class ScoreBreakdown:
    specialty_score: float = 0.0
    load_score: float = 0.0
    feasibility_score: float = 0.0


@dataclass
class AssignmentRecommendation:
    engineer_id: str
    engineer_name: str
    score: float
    reasons: List[str] = field(default_factory=list)
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)


def recommend_engineers(
    initiative: Initiative,
    engineers: Sequence[Engineer],
    config: SchedulerConfig | None = None,
    *,
    now: date | None = None,
) -> List[AssignmentRecommendation]:
    """
    Rank active engineers for an initiative.

    Score = specialty match + inverse current load + deadline feasibility.
    Inactive engineers are ignored; an empty roster gives an empty list.

    Args:
        initiative: Initiative with tags loaded
        engineers: Roster with specialties, unavailability and scheduled blocks loaded
        config: SchedulerConfig (weights, hours per day/week)
        now: Reference date (defaults to today)

    Returns:
        Up to five recommendations, highest score first
    """
    cfg = config or DEFAULT_CONFIG
    weights = cfg.weights
    today = as_date(now) or date.today()
    deadline = as_date(initiative.deadline)
    effort_hours = (initiative.effort_estimate or 0) * cfg.hours_per_week

    required_ids = [tag.specialty_id for tag in initiative.tags]

    recommendations: List[AssignmentRecommendation] = []
    for engineer in engineers:
        if not engineer.is_active:
            continue

        reasons: List[str] = []
        specialty_score = calculate_specialty_score(engineer, required_ids, cfg, reasons)

        current_load = calculate_current_load(engineer, today)
        capacity = float(engineer.weekly_capacity or 0)
        load_pct = current_load / capacity if capacity > 0 else 1.0
        load_score = max(0.0, weights.current_load * (1 - load_pct))
        if load_pct < 0.5:
            label = "Low"
        elif load_pct < 0.8:
            label = "Moderate"
        else:
            label = "High"
        reasons.append(f"{label} current load ({round(load_pct * 100)}% capacity used)")

        feasibility_score = 0.0
        if deadline and effort_hours > 0:
            availability = calculate_availability(engineer, today, deadline, cfg.hours_per_day)
            if availability >= effort_hours:
                feasibility_score = weights.deadline_feasibility
                reasons.append(f"Can complete before deadline ({availability:g}h available)")
            elif availability >= effort_hours * 0.7:
                feasibility_score = weights.deadline_feasibility * 0.5
                reasons.append(
                    f"Partial capacity before deadline ({availability:g}h of {effort_hours:g}h needed)"
                )
            else:
                reasons.append(
                    f"Insufficient capacity before deadline ({availability:g}h of {effort_hours:g}h needed)"
                )
        else:
            feasibility_score = weights.deadline_feasibility * 0.8
            reasons.append("No deadline constraint")

        recommendations.append(
            AssignmentRecommendation(
                engineer_id=engineer.id,
                engineer_name=engineer.name,
                score=specialty_score + load_score + feasibility_score,
                reasons=reasons,
                breakdown=ScoreBreakdown(
                    specialty_score=specialty_score,
                    load_score=load_score,
                    feasibility_score=feasibility_score,
                ),
            )
        )

    recommendations.sort(key=lambda r: r.score, reverse=True)
    return recommendations[:MAX_RECOMMENDATIONS]


def calculate_specialty_score(
    engineer: Engineer,
    required_ids: Sequence[str],
    cfg: SchedulerConfig,
    reasons: List[str],
) -> float:
    """Best matching tier only: primary, else secondary, else partial credit for untagged work."""
    primary = [s for s in engineer.specialties if s.level == SpecialtyLevel.PRIMARY and s.specialty_id in required_ids]
    secondary = [s for s in engineer.specialties if s.level == SpecialtyLevel.SECONDARY and s.specialty_id in required_ids]

    if primary:
        reasons.append(f"Primary specialty match: {_names(primary)}")
        return cfg.weights.primary_specialty
    if secondary:
        reasons.append(f"Secondary specialty match: {_names(secondary)}")
        return cfg.weights.secondary_specialty
    if not required_ids:
        reasons.append("No specialty requirements for this initiative")
        return cfg.weights.secondary_specialty / 2
    return 0.0


def _names(links) -> str:
    return ", ".join(link.specialty.name if link.specialty is not None else str(link.specialty_id) for link in links)


def calculate_current_load(engineer: Engineer, now: date) -> float:
    """Hours already committed in the Monday-start week containing now."""
    start = week_start(now)
    end = start + timedelta(days=7)
    return sum(prorated_block_hours(block, start, end) for block in engineer.scheduled_blocks)


def calculate_availability(engineer: Engineer, start: date, end: date, hours_per_day: float) -> float:
    """
    Hours an engineer could still give between start and end (inclusive).

    Counts hours_per_day for each working, available day, minus hours of
    existing blocks overlapping the window. Never negative.
    """
    working_days = parse_working_days(engineer.working_days)
    available = 0.0
    for day in iter_days(start, end):
        if day.weekday() in working_days and not is_unavailable(day, engineer.unavailability):
            available += hours_per_day

    for block in engineer.scheduled_blocks:
        available -= prorated_block_hours(block, start, end)

    return max(0.0, available)
