"""Input validation and post-generation schedule checks."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from roadmap.domain.models import Engineer, Initiative, InitiativeStatus
from roadmap.engine.ordering import cycle_members
from roadmap.services.timeplan import as_date, parse_working_days


def validate_inputs(
    initiatives: Sequence[Initiative],
    engineers: Sequence[Engineer],
    dependencies: Sequence,
) -> None:
    """
    Reject malformed scheduler input before a run.

    Raises:
        ValueError: On the first problem found
    """
    for engineer in engineers:
        if not engineer.is_active:
            continue
        if not parse_working_days(engineer.working_days):
            raise ValueError(f"Engineer {engineer.id} ({engineer.name}) has no working days")
        if not set(parse_working_days(engineer.working_days)) <= set(range(7)):
            raise ValueError(f"Engineer {engineer.id} has invalid working days: {engineer.working_days}")
        if engineer.weekly_capacity is None or engineer.weekly_capacity <= 0:
            raise ValueError(
                f"Engineer {engineer.id} ({engineer.name}) has non-positive weekly capacity: {engineer.weekly_capacity}"
            )
        for block in engineer.unavailability:
            if as_date(block.end_date) < as_date(block.start_date):
                raise ValueError(f"Engineer {engineer.id} has unavailability ending before it starts")

    for initiative in initiatives:
        if initiative.effort_estimate is not None and initiative.effort_estimate < 0:
            raise ValueError(f"Initiative {initiative.id} has negative effort estimate")
        if initiative.lock_dates and initiative.locked_start and initiative.locked_end:
            if as_date(initiative.locked_end) < as_date(initiative.locked_start):
                raise ValueError(f"Initiative {initiative.id} has locked end before locked start")

    for edge in dependencies:
        if edge.dependent_id == edge.dependency_id:
            raise ValueError(f"Initiative {edge.dependent_id} depends on itself")


def validate_schedule(result, initiatives: Sequence[Initiative], dependencies: Sequence) -> None:
    """
    Check a generated schedule against its invariants.

    Dependency ordering is not enforced for locked-date initiatives or for
    members of dependency cycles.

    Raises:
        ValueError: If any invariant is violated
    """
    by_id = {i.id: i for i in initiatives}
    counts = Counter(block.initiative_id for block in result.blocks)
    duplicated = [iid for iid, n in counts.items() if n > 1]
    if duplicated:
        raise ValueError(f"Multiple blocks for initiatives: {', '.join(sorted(duplicated))}")

    both = set(counts) & set(result.unscheduled)
    if both:
        raise ValueError(f"Initiatives both scheduled and unscheduled: {', '.join(sorted(both))}")

    blocks = {block.initiative_id: block for block in result.blocks}
    for initiative_id, block in blocks.items():
        initiative = by_id.get(initiative_id)
        if initiative is None:
            raise ValueError(f"Block references unknown initiative {initiative_id}")
        if initiative.status == InitiativeStatus.DONE or not initiative.effort_estimate:
            raise ValueError(f"Block emitted for unschedulable initiative {initiative_id}")
        if block.end_date < block.start_date:
            raise ValueError(f"Block for {initiative_id} ends before it starts")
        if _has_locked_window(initiative):
            if (block.start_date, block.end_date) != (as_date(initiative.locked_start), as_date(initiative.locked_end)):
                raise ValueError(f"Locked initiative {initiative_id} was moved")

    cyclic = cycle_members(dependencies)
    for edge in dependencies:
        dependent = blocks.get(edge.dependent_id)
        dependency = blocks.get(edge.dependency_id)
        if dependent is None or dependency is None:
            continue
        if _has_locked_window(by_id[edge.dependent_id]) or edge.dependent_id in cyclic:
            continue
        if dependent.start_date <= dependency.end_date:
            raise ValueError(
                f"Initiative {edge.dependent_id} starts {dependent.start_date} "
                f"before dependency {edge.dependency_id} ends {dependency.end_date}"
            )


def summarize_risks(result) -> List[str]:
    """One line per risk, critical first."""
    ordered = sorted(result.risks, key=lambda r: 0 if r.severity == "critical" else 1)
    return [f"[{risk.severity.upper()}] {risk.initiative_id}: {risk.reason}" for risk in ordered]


def _has_locked_window(initiative: Initiative) -> bool:
    return bool(initiative.lock_dates and initiative.locked_start and initiative.locked_end)
