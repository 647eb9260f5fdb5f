"""Greedy forward schedule generation with risk detection."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from roadmap.config import DEFAULT_CONFIG, SchedulerConfig
from roadmap.domain.models import Engineer, Initiative, InitiativeStatus, ScheduledBlock
from roadmap.services.recommend import recommend_engineers
from roadmap.services.timeplan import (
    as_date,
    business_days_between,
    is_unavailable,
    iter_days,
    parse_working_days,
)

from .ordering import DependencyGraph, build_dependency_graph, order_initiatives

NO_EFFORT = "No effort estimate provided"
NO_ENGINEER = "No suitable engineer found"
NO_SLOT = "Cannot find available slot for scheduling"
MISSED_DEADLINE = "Cannot meet deadline"
BUFFER_EXCEEDED = "Deadline buffer exceeded"
LOCK_CONFLICT = "Conflicts with engineer unavailability"
LOCK_CONFLICT_RISK = "Locked dates conflict with engineer unavailability"

DailyTally = Dict[date, float]


class RiskSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class RiskFlag:
    initiative_id: str
    reason: str
    severity: RiskSeverity


@dataclass
class ScheduleResult:
    blocks: List[ScheduledBlock] = field(default_factory=list)
    risks: List[RiskFlag] = field(default_factory=list)
    unscheduled: List[str] = field(default_factory=list)  # initiative ids


def generate_schedule(
    initiatives: Sequence[Initiative],
    engineers: Sequence[Engineer],
    dependencies: Sequence,
    config: SchedulerConfig | None = None,
    *,
    now: date | None = None,
) -> ScheduleResult:
    """
    Build a schedule for all open initiatives in one greedy pass.

    Respects dependency order, locked dates and assignments, unavailability
    and a per-day capacity tally kept for this run only. Impossible work is
    reported as a risk plus an unscheduled id, never raised.

    Args:
        initiatives: Initiatives with tags loaded (DONE ones are skipped)
        engineers: Active roster with specialties, unavailability and blocks loaded
        dependencies: Edges with dependent_id / dependency_id
        config: SchedulerConfig
        now: Reference date (defaults to today)

    Returns:
        ScheduleResult with transient ScheduledBlock objects
    """
    cfg = config or DEFAULT_CONFIG
    today = as_date(now) or date.today()
    result = ScheduleResult()

    graph = build_dependency_graph(dependencies)
    ordered = order_initiatives(initiatives, graph)

    tallies: Dict[str, DailyTally] = defaultdict(lambda: defaultdict(float))
    end_dates: Dict[str, date] = {}

    for initiative in ordered:
        if initiative.status == InitiativeStatus.DONE:
            continue

        if not initiative.effort_estimate:
            result.risks.append(RiskFlag(initiative.id, NO_EFFORT, RiskSeverity.WARNING))
            # reported as a risk only, not listed in unscheduled
            continue

        block, risk = schedule_initiative(initiative, engineers, graph, end_dates, tallies, cfg, today)

        if block is not None:
            result.blocks.append(block)
            end_dates[initiative.id] = block.end_date
            reserve_hours(
                tallies[block.engineer_id],
                block.start_date,
                block.end_date,
                block.hours_allocated,
                cfg.hours_per_day,
            )
        else:
            result.unscheduled.append(initiative.id)
        if risk is not None:
            result.risks.append(risk)

    return result


def schedule_initiative(
    initiative: Initiative,
    engineers: Sequence[Engineer],
    graph: DependencyGraph,
    end_dates: Dict[str, date],
    tallies: Dict[str, DailyTally],
    cfg: SchedulerConfig,
    now: date,
) -> Tuple[Optional[ScheduledBlock], Optional[RiskFlag]]:
    """Place one initiative, either on its locked window or in the earliest free slot."""
    effort_hours = initiative.effort_estimate * cfg.hours_per_week

    earliest_start = now
    for dependency_id in graph.get(initiative.id, []):
        dependency_end = end_dates.get(dependency_id)
        if dependency_end is not None:
            earliest_start = max(earliest_start, dependency_end + timedelta(days=1))

    engineer = choose_engineer(initiative, engineers, cfg, now)
    if engineer is None:
        return None, RiskFlag(initiative.id, NO_ENGINEER, RiskSeverity.CRITICAL)

    locked_start = as_date(initiative.locked_start)
    locked_end = as_date(initiative.locked_end)
    if initiative.lock_dates and locked_start and locked_end:
        conflict = is_unavailable(locked_start, engineer.unavailability) or is_unavailable(
            locked_end, engineer.unavailability
        )
        block = _block(initiative, engineer, locked_start, locked_end, effort_hours)
        if conflict:
            block.is_at_risk = True
            block.risk_reason = LOCK_CONFLICT
            return block, RiskFlag(initiative.id, LOCK_CONFLICT_RISK, RiskSeverity.CRITICAL)
        return block, None

    deadline = as_date(initiative.deadline)
    slot = find_earliest_slot(engineer, earliest_start, deadline, effort_hours, tallies[engineer.id], cfg)
    if slot is None:
        return None, RiskFlag(initiative.id, NO_SLOT, RiskSeverity.CRITICAL)

    block = _block(initiative, engineer, slot[0], slot[1], effort_hours)
    if deadline is not None:
        if block.end_date > deadline:
            block.is_at_risk = True
            block.risk_reason = MISSED_DEADLINE
            return block, RiskFlag(initiative.id, MISSED_DEADLINE, RiskSeverity.CRITICAL)
        if block.end_date > deadline - timedelta(days=cfg.buffer_days):
            block.is_at_risk = True
            block.risk_reason = BUFFER_EXCEEDED
            return block, RiskFlag(initiative.id, BUFFER_EXCEEDED, RiskSeverity.WARNING)
    return block, None


def choose_engineer(
    initiative: Initiative,
    engineers: Sequence[Engineer],
    cfg: SchedulerConfig,
    now: date,
) -> Optional[Engineer]:
    """
    Pinned engineer when the assignment is locked, else the top recommendation.

    Falls back to the assigned engineer when nobody can be recommended.
    Returns None if the chosen id is not on the roster.
    """
    engineer_id = initiative.assigned_engineer_id
    if not engineer_id or not initiative.lock_assignment:
        recommendations = recommend_engineers(initiative, engineers, cfg, now=now)
        if recommendations:
            engineer_id = recommendations[0].engineer_id
    if not engineer_id:
        return None
    return next((e for e in engineers if e.id == engineer_id), None)


def find_earliest_slot(
    engineer: Engineer,
    earliest_start: date,
    deadline: date | None,
    hours_needed: float,
    tally: DailyTally,
    cfg: SchedulerConfig,
) -> Optional[Tuple[date, date]]:
    """
    Walk days from earliest_start until enough hours are gathered.

    The window ends at the deadline, or lookahead_days after earliest_start.
    Each working, available day offers hours_per_day minus what this run has
    already reserved on it. The slot runs from the first contributing day to
    the last day visited.
    """
    working_days = parse_working_days(engineer.working_days)
    limit = deadline or earliest_start + timedelta(days=cfg.lookahead_days)

    current = earliest_start
    start: date | None = None
    accumulated = 0.0

    while current <= limit and accumulated < hours_needed:
        if current.weekday() in working_days and not is_unavailable(current, engineer.unavailability):
            free = max(0.0, cfg.hours_per_day - tally.get(current, 0.0))
            if free > 0:
                if start is None:
                    start = current
                accumulated += free
        current += timedelta(days=1)

    if accumulated >= hours_needed and start is not None:
        return start, current - timedelta(days=1)
    return None


def reserve_hours(tally: DailyTally, start: date, end: date, total_hours: float, hours_per_day: float) -> None:
    """Spread a block's hours over its business days into the run tally, capped per day."""
    days = business_days_between(end, start) + 1
    daily = total_hours / max(days, 1)
    for day in iter_days(start, end):
        tally[day] = min(tally.get(day, 0.0) + daily, hours_per_day)


def _block(initiative: Initiative, engineer: Engineer, start: date, end: date, hours: float) -> ScheduledBlock:
    # ids only: attaching relationships would append to the caller's collections
    return ScheduledBlock(
        initiative_id=initiative.id,
        engineer_id=engineer.id,
        start_date=start,
        end_date=end,
        hours_allocated=hours,
        is_at_risk=False,
        risk_reason=None,
    )
