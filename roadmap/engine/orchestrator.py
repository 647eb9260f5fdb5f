"""Orchestrator - loads roadmap data, runs the scheduler and writes results back."""

from __future__ import annotations

from datetime import date
from typing import List

from sqlalchemy.orm import Session

from roadmap.config import SchedulerConfig
from roadmap.domain.models import ScheduledBlock
from roadmap.domain.repositories import (
    AuditLogRepository,
    DependencyRepository,
    EngineerRepository,
    InitiativeRepository,
    ScheduledBlockRepository,
)
from roadmap.services.placement import MovePlan, PlacementError, plan_block_move, plan_manual_block
from roadmap.services.recommend import AssignmentRecommendation, recommend_engineers
from roadmap.validator import validate_inputs, validate_schedule

from .generator import ScheduleResult, generate_schedule
from .ordering import find_dependency_cycles


def regenerate_schedule(
    session: Session,
    cfg: SchedulerConfig,
    now: date | None = None,
    persist: bool = True,
    user_id: str | None = None,
) -> ScheduleResult:
    """
    Regenerate the whole roadmap schedule.

    Args:
        session: Database session
        cfg: SchedulerConfig
        now: Reference date (defaults to today)
        persist: If True, replace stored blocks with the new ones
        user_id: Optional user recorded in the audit log

    Returns:
        ScheduleResult from the generator
    """
    now = now or date.today()
    print(f"[INFO] Orchestrator: Regenerating schedule as of {now.isoformat()}")

    initiatives = InitiativeRepository.get_open(session)
    engineers = EngineerRepository.get_active(session, now)
    dependencies = DependencyRepository.get_all(session)
    print(
        f"[INFO] Loaded {len(initiatives)} open initiatives, {len(engineers)} active engineers, "
        f"{len(dependencies)} dependencies"
    )

    validate_inputs(initiatives, engineers, dependencies)
    for cycle in find_dependency_cycles(dependencies):
        print(f"[WARN] Dependency cycle among: {', '.join(cycle)}")

    result = generate_schedule(initiatives, engineers, dependencies, cfg, now=now)
    validate_schedule(result, initiatives, dependencies)
    print(
        f"[OK] Generated {len(result.blocks)} blocks, {len(result.risks)} risks, "
        f"{len(result.unscheduled)} unscheduled"
    )

    if persist:
        locked_ids = {i.id for i in initiatives if i.lock_dates}
        kept_ids = {b.initiative_id for i in initiatives if i.id in locked_ids for b in i.scheduled_blocks}

        deleted = ScheduledBlockRepository.delete_except_initiatives(session, locked_ids)
        if deleted > 0:
            print(f"[INFO] Deleted {deleted} existing blocks")

        new_blocks = [b for b in result.blocks if b.initiative_id not in kept_ids]
        ScheduledBlockRepository.bulk_create(session, new_blocks, commit=False)
        AuditLogRepository.record(
            session,
            action="SCHEDULE",
            entity_type="Schedule",
            entity_id="full-regeneration",
            user_id=user_id,
            details={
                "blocksCreated": len(new_blocks),
                "risks": len(result.risks),
                "unscheduled": len(result.unscheduled),
            },
        )
        session.commit()
        print(f"[INFO] Persisted {len(new_blocks)} blocks to database")

    return result


def recommend_for_initiative(
    session: Session,
    initiative_id: str,
    cfg: SchedulerConfig,
    now: date | None = None,
) -> List[AssignmentRecommendation]:
    """
    Recommend engineers for one stored initiative.

    Raises:
        LookupError: If the initiative does not exist
    """
    now = now or date.today()
    initiative = InitiativeRepository.get_by_id(session, initiative_id)
    if initiative is None:
        raise LookupError(f"Initiative {initiative_id} not found")
    engineers = EngineerRepository.get_active(session, now)
    return recommend_engineers(initiative, engineers, cfg, now=now)


def place_block(
    session: Session,
    initiative_id: str,
    start: date,
    end: date | None = None,
    engineer_id: str | None = None,
    hours_per_day: float = 8.0,
    user_id: str | None = None,
) -> ScheduledBlock:
    """
    Put an initiative on the roadmap by hand and persist the block.

    Assigns the engineer to the initiative when it had none.

    Raises:
        LookupError: If the initiative or engineer does not exist
        PlacementError: If no engineer can be determined
    """
    initiative = InitiativeRepository.get_by_id(session, initiative_id)
    if initiative is None:
        raise LookupError(f"Initiative {initiative_id} not found")

    block = plan_manual_block(initiative, start, end, engineer_id, hours_per_day)
    if EngineerRepository.get_by_id(session, block.engineer_id) is None:
        raise LookupError(f"Engineer {block.engineer_id} not found")

    session.add(block)
    if not initiative.assigned_engineer_id:
        InitiativeRepository.assign_engineer(session, initiative, block.engineer_id)
    session.flush()
    AuditLogRepository.record(
        session,
        action="SCHEDULE",
        entity_type="ScheduledBlock",
        entity_id=block.id,
        user_id=user_id,
        details={
            "initiativeId": initiative_id,
            "engineerId": block.engineer_id,
            "startDate": block.start_date.isoformat(),
            "endDate": block.end_date.isoformat(),
            "hoursAllocated": block.hours_allocated,
        },
    )
    session.commit()
    print(f"[OK] Placed {initiative_id} for {block.engineer_id}: {block.start_date} - {block.end_date}")
    return block


def move_block(
    session: Session,
    block_id: str,
    new_start: date,
    new_end: date,
    new_engineer_id: str | None = None,
    user_id: str | None = None,
) -> MovePlan:
    """
    Move a stored block, bumping the engineer's overlapping blocks, in one commit.

    Raises:
        LookupError: If the block does not exist
        PlacementError: If the initiative is locked
    """
    block = ScheduledBlockRepository.get_by_id(session, block_id)
    if block is None:
        raise LookupError(f"Scheduled block {block_id} not found")

    target = new_engineer_id or block.engineer_id
    engineer_blocks = ScheduledBlockRepository.get_by_engineer(session, target, exclude_id=block_id)
    plan = plan_block_move(block, engineer_blocks, new_start, new_end, new_engineer_id)
    previous_engineer = block.engineer_id

    try:
        engineer_changes = {block_id: plan.target_engineer_id} if plan.engineer_changed else {}
        ScheduledBlockRepository.apply_updates(session, plan.updates, engineer_changes)
        if plan.engineer_changed:
            InitiativeRepository.assign_engineer(session, block.initiative, plan.target_engineer_id)

        details = {
            "movedBlock": block_id,
            "newStartDate": plan.updates[0].start_date.isoformat(),
            "newEndDate": plan.updates[0].end_date.isoformat(),
            "bumpedBlocks": [
                {"id": u.block_id, "newStart": u.start_date.isoformat(), "newEnd": u.end_date.isoformat()}
                for u in plan.bumped
            ],
        }
        if plan.engineer_changed:
            details["previousEngineerId"] = previous_engineer
            details["newEngineerId"] = plan.target_engineer_id
        AuditLogRepository.record(
            session,
            action="MOVE_AND_REASSIGN" if plan.engineer_changed else "MOVE",
            entity_type="ScheduledBlock",
            entity_id=block_id,
            user_id=user_id,
            details=details,
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    print(f"[OK] Moved block {block_id}; bumped {len(plan.bumped)} other block(s)")
    return plan


__all__ = [
    "PlacementError",
    "regenerate_schedule",
    "recommend_for_initiative",
    "place_block",
    "move_block",
]
