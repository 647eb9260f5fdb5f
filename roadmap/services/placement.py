"""Manual block placement and drag-move planning with cascading bumps."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence

from roadmap.domain.models import Initiative, ScheduledBlock
from roadmap.services.timeplan import (
    add_business_days,
    as_date,
    business_days_inclusive,
    ranges_overlap,
)


class PlacementError(ValueError):
    """A manual placement or move was refused."""


@dataclass
class BlockUpdate:
    block_id: str
    start_date: date
    end_date: date


@dataclass
class MovePlan:
    block_id: str
    target_engineer_id: str
    engineer_changed: bool
    updates: List[BlockUpdate] = field(default_factory=list)

    @property
    def bumped(self) -> List[BlockUpdate]:
        return [u for u in self.updates if u.block_id != self.block_id]


def plan_manual_block(
    initiative: Initiative,
    start: date,
    end: date | None = None,
    engineer_id: str | None = None,
    hours_per_day: float = 8.0,
) -> ScheduledBlock:
    """
    Build a block for an initiative dropped onto the roadmap by hand.

    Without an end date (or with end == start) the block lasts the
    initiative's effort in business days (five per week, one week when no
    estimate exists). Hours are business days times hours_per_day.

    Raises:
        PlacementError: If no engineer is given and none is assigned
    """
    start = as_date(start)
    end = as_date(end)
    if end is None or end == start:
        effort_weeks = initiative.effort_estimate or 1
        # half-up rounding: 2.5 business days becomes 3
        span = max(1, math.floor(effort_weeks * 5 + 0.5)) - 1
        end = add_business_days(start, span)
    if end < start:
        raise PlacementError(f"End date {end} is before start date {start}")

    target = engineer_id or initiative.assigned_engineer_id
    if not target:
        raise PlacementError(
            "No engineer specified and the initiative has no assigned engineer"
        )

    return ScheduledBlock(
        initiative_id=initiative.id,
        engineer_id=target,
        start_date=start,
        end_date=end,
        hours_allocated=business_days_inclusive(start, end) * hours_per_day,
        is_at_risk=False,
    )


def plan_block_move(
    block: ScheduledBlock,
    engineer_blocks: Sequence[ScheduledBlock],
    new_start: date,
    new_end: date,
    new_engineer_id: str | None = None,
) -> MovePlan:
    """
    Plan moving a block, pushing the target engineer's overlapping blocks later.

    Each bumped block keeps its business-day length and starts the business
    day after the latest already-placed block it collides with; bumps cascade.
    Blocks of locked-date initiatives never move.

    Args:
        block: Block being moved (initiative loaded)
        engineer_blocks: Other blocks of the target engineer (initiatives loaded)
        new_start: New start date
        new_end: New end date
        new_engineer_id: Optional engineer to reassign to

    Raises:
        PlacementError: If the initiative's dates or assignment are locked
    """
    initiative = block.initiative
    if initiative is not None and initiative.lock_dates:
        raise PlacementError("This initiative has locked dates and cannot be moved")
    if (
        new_engineer_id
        and new_engineer_id != block.engineer_id
        and initiative is not None
        and initiative.lock_assignment
    ):
        raise PlacementError("This initiative has a locked assignment and cannot be reassigned")

    new_start = as_date(new_start)
    new_end = as_date(new_end)
    if new_end < new_start:
        raise PlacementError(f"End date {new_end} is before start date {new_start}")

    target = new_engineer_id or block.engineer_id
    plan = MovePlan(
        block_id=block.id,
        target_engineer_id=target,
        engineer_changed=target != block.engineer_id,
        updates=[BlockUpdate(block.id, new_start, new_end)],
    )

    others = [b for b in engineer_blocks if b.id != block.id]
    states: Dict[str, tuple] = {b.id: (as_date(b.start_date), as_date(b.end_date)) for b in others}
    states[block.id] = (new_start, new_end)

    processed = {block.id}
    queue = deque(b for b in others if ranges_overlap(new_start, new_end, *states[b.id]))

    while queue:
        current = queue.popleft()
        if current.id in processed:
            continue
        processed.add(current.id)
        if current.initiative is not None and current.initiative.lock_dates:
            continue

        cur_start, cur_end = states[current.id]
        push_after = None
        for other_id, (other_start, other_end) in states.items():
            if other_id == current.id or other_id not in processed:
                continue
            if ranges_overlap(other_start, other_end, cur_start, cur_end):
                if push_after is None or other_end > push_after:
                    push_after = other_end

        if push_after is None:
            continue

        duration = business_days_inclusive(cur_start, cur_end)
        bumped_start = add_business_days(push_after, 1)
        bumped_end = add_business_days(bumped_start, duration - 1)
        states[current.id] = (bumped_start, bumped_end)
        plan.updates.append(BlockUpdate(current.id, bumped_start, bumped_end))

        for b in others:
            if b.id not in processed and ranges_overlap(bumped_start, bumped_end, *states[b.id]):
                queue.append(b)

    return plan
