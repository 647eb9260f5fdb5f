"""Repository classes for data access."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from .models import (
    AuditLog,
    Engineer,
    EngineerSpecialty,
    Initiative,
    InitiativeDependency,
    InitiativeStatus,
    InitiativeTag,
    ScheduledBlock,
    Specialty,
    UnavailabilityBlock,
)


class SpecialtyRepository:
    """Repository for specialty data access."""

    @staticmethod
    def get_all(session: Session) -> List[Specialty]:
        return session.query(Specialty).order_by(Specialty.name).all()

    @staticmethod
    def get_by_name(session: Session, name: str) -> Optional[Specialty]:
        return session.query(Specialty).filter(Specialty.name == name).first()

    @staticmethod
    def get_or_create(session: Session, name: str) -> Specialty:
        """Get a specialty by name, creating and flushing it if missing."""
        specialty = SpecialtyRepository.get_by_name(session, name)
        if specialty is None:
            specialty = Specialty(name=name)
            session.add(specialty)
            session.flush()
        return specialty


class EngineerRepository:
    """Repository for engineer data access."""

    @staticmethod
    def get_all(session: Session) -> List[Engineer]:
        """Get all engineers."""
        return session.query(Engineer).order_by(Engineer.name).all()

    @staticmethod
    def get_by_id(session: Session, engineer_id: str) -> Optional[Engineer]:
        """Get engineer by ID."""
        return session.query(Engineer).filter(Engineer.id == engineer_id).first()

    @staticmethod
    def get_active(session: Session, now: date) -> List[Engineer]:
        """
        Get active engineers with everything the scheduler reads.

        Unavailability that ended before now is left out of the loaded collection.
        """
        return (
            session.query(Engineer)
            .filter(Engineer.is_active.is_(True))
            .options(
                selectinload(Engineer.specialties).selectinload(EngineerSpecialty.specialty),
                selectinload(Engineer.unavailability.and_(UnavailabilityBlock.end_date >= now)),
                selectinload(Engineer.scheduled_blocks),
            )
            .execution_options(populate_existing=True)
            .order_by(Engineer.name)
            .all()
        )

    @staticmethod
    def bulk_create(session: Session, engineers: List[Engineer]) -> None:
        """Create multiple engineers."""
        session.add_all(engineers)
        session.commit()


class InitiativeRepository:
    """Repository for initiative data access."""

    @staticmethod
    def get_all(session: Session) -> List[Initiative]:
        return session.query(Initiative).all()

    @staticmethod
    def get_by_id(session: Session, initiative_id: str) -> Optional[Initiative]:
        """Get initiative by ID with tags loaded."""
        return (
            session.query(Initiative)
            .options(selectinload(Initiative.tags).selectinload(InitiativeTag.specialty))
            .filter(Initiative.id == initiative_id)
            .first()
        )

    @staticmethod
    def get_open(session: Session) -> List[Initiative]:
        """Get every initiative that is not DONE, with tags and blocks loaded."""
        return (
            session.query(Initiative)
            .filter(Initiative.status != InitiativeStatus.DONE.value)
            .options(
                selectinload(Initiative.tags).selectinload(InitiativeTag.specialty),
                selectinload(Initiative.scheduled_blocks),
            )
            .all()
        )

    @staticmethod
    def assign_engineer(session: Session, initiative: Initiative, engineer_id: str) -> None:
        initiative.assigned_engineer_id = engineer_id
        session.flush()


class DependencyRepository:
    """Repository for initiative dependency edges."""

    @staticmethod
    def get_all(session: Session) -> List[InitiativeDependency]:
        return session.query(InitiativeDependency).all()


class ScheduledBlockRepository:
    """Repository for scheduled block data access."""

    @staticmethod
    def get_all(session: Session) -> List[ScheduledBlock]:
        """Get all blocks ordered by start date."""
        return session.query(ScheduledBlock).order_by(ScheduledBlock.start_date).all()

    @staticmethod
    def get_by_id(session: Session, block_id: str) -> Optional[ScheduledBlock]:
        return (
            session.query(ScheduledBlock)
            .options(selectinload(ScheduledBlock.initiative))
            .filter(ScheduledBlock.id == block_id)
            .first()
        )

    @staticmethod
    def get_by_engineer(session: Session, engineer_id: str, exclude_id: str | None = None) -> List[ScheduledBlock]:
        """Get an engineer's blocks (initiatives loaded), optionally skipping one block."""
        query = (
            session.query(ScheduledBlock)
            .options(selectinload(ScheduledBlock.initiative))
            .filter(ScheduledBlock.engineer_id == engineer_id)
        )
        if exclude_id is not None:
            query = query.filter(ScheduledBlock.id != exclude_id)
        return query.order_by(ScheduledBlock.start_date).all()

    @staticmethod
    def bulk_create(session: Session, blocks: List[ScheduledBlock], commit: bool = True) -> None:
        """Create multiple blocks (commit=False leaves the commit to the caller)."""
        session.add_all(blocks)
        if commit:
            session.commit()
        else:
            session.flush()

    @staticmethod
    def delete_except_initiatives(session: Session, keep_initiative_ids: Iterable[str]) -> int:
        """Delete every block whose initiative is not in keep_initiative_ids. Returns rows deleted."""
        keep = list(keep_initiative_ids)
        query = session.query(ScheduledBlock)
        if keep:
            query = query.filter(ScheduledBlock.initiative_id.notin_(keep))
        count = query.delete(synchronize_session=False)
        session.flush()
        return count

    @staticmethod
    def apply_updates(session: Session, updates: Iterable, engineer_changes: Dict[str, str] | None = None) -> int:
        """
        Write new dates (and optionally engineers) onto existing blocks.

        Args:
            session: Database session
            updates: Objects with block_id, start_date, end_date
            engineer_changes: Optional block_id -> new engineer_id

        Returns:
            Number of blocks updated
        """
        engineer_changes = engineer_changes or {}
        count = 0
        for update in updates:
            block = session.get(ScheduledBlock, update.block_id)
            if block is None:
                raise ValueError(f"Scheduled block {update.block_id} not found")
            block.start_date = update.start_date
            block.end_date = update.end_date
            if update.block_id in engineer_changes:
                block.engineer_id = engineer_changes[update.block_id]
            count += 1
        session.flush()
        return count


class UnavailabilityRepository:
    """Repository for engineer time off."""

    @staticmethod
    def get_by_engineer(session: Session, engineer_id: str) -> List[UnavailabilityBlock]:
        return (
            session.query(UnavailabilityBlock)
            .filter(UnavailabilityBlock.engineer_id == engineer_id)
            .order_by(UnavailabilityBlock.start_date)
            .all()
        )

    @staticmethod
    def bulk_create(session: Session, blocks: List[UnavailabilityBlock]) -> None:
        session.add_all(blocks)
        session.commit()


class AuditLogRepository:
    """Repository for audit entries."""

    @staticmethod
    def record(
        session: Session,
        action: str,
        entity_type: str,
        entity_id: str,
        details: dict | None = None,
        user_id: str | None = None,
    ) -> AuditLog:
        """Add an audit entry to the session (committed with the surrounding work)."""
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            user_id=user_id,
        )
        session.add(entry)
        return entry

    @staticmethod
    def get_all(session: Session) -> List[AuditLog]:
        return session.query(AuditLog).order_by(AuditLog.id).all()
