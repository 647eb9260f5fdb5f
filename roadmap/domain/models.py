"""SQLAlchemy models for the roadmap planning system."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SpecialtyLevel(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"


class InitiativeStatus(str, Enum):
    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    DONE = "DONE"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Specialty(Base):
    """Skill or domain tag shared by engineers and initiatives."""

    __tablename__ = "specialties"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Specialty(id={self.id}, name='{self.name}')>"


class Engineer(Base):
    """Engineer with capacity, working days and specialty ratings."""

    __tablename__ = "engineers"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    role = Column(String(100), nullable=True)  # job title, e.g. "Senior Engineer"
    is_active = Column(Boolean, nullable=False, default=True)
    weekly_capacity = Column(Float, nullable=False, default=40.0)  # hours/week
    working_days = Column(String(20), nullable=False, default="0,1,2,3,4")  # 0=Mon..6=Sun

    specialties = relationship("EngineerSpecialty", back_populates="engineer", cascade="all, delete-orphan")
    unavailability = relationship("UnavailabilityBlock", back_populates="engineer", cascade="all, delete-orphan")
    scheduled_blocks = relationship("ScheduledBlock", back_populates="engineer")

    def __repr__(self) -> str:
        return f"<Engineer(id={self.id}, name='{self.name}', capacity={self.weekly_capacity})>"


class EngineerSpecialty(Base):
    """Rating of an engineer in one specialty (PRIMARY or SECONDARY)."""

    __tablename__ = "engineer_specialties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    engineer_id = Column(String(32), ForeignKey("engineers.id"), nullable=False)
    specialty_id = Column(String(32), ForeignKey("specialties.id"), nullable=False)
    level = Column(String(20), nullable=False, default=SpecialtyLevel.PRIMARY.value)

    engineer = relationship("Engineer", back_populates="specialties")
    specialty = relationship("Specialty")

    def __repr__(self) -> str:
        return f"<EngineerSpecialty(engineer={self.engineer_id}, specialty={self.specialty_id}, level={self.level})>"


class Initiative(Base):
    """Roadmap initiative with effort, deadline and lock flags."""

    __tablename__ = "initiatives"

    id = Column(String(32), primary_key=True, default=_new_id)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=InitiativeStatus.PROPOSED.value)
    priority = Column(Integer, nullable=False, default=0)  # higher = more urgent
    effort_estimate = Column(Float, nullable=True)  # weeks
    deadline = Column(Date, nullable=True)

    lock_dates = Column(Boolean, nullable=False, default=False)
    locked_start = Column(Date, nullable=True)
    locked_end = Column(Date, nullable=True)
    lock_assignment = Column(Boolean, nullable=False, default=False)
    assigned_engineer_id = Column(String(32), ForeignKey("engineers.id"), nullable=True)

    tags = relationship("InitiativeTag", back_populates="initiative", cascade="all, delete-orphan")
    scheduled_blocks = relationship("ScheduledBlock", back_populates="initiative")
    assigned_engineer = relationship("Engineer")

    def __repr__(self) -> str:
        return f"<Initiative(id={self.id}, title='{self.title}', status={self.status})>"


class InitiativeTag(Base):
    """Specialty required by an initiative."""

    __tablename__ = "initiative_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    initiative_id = Column(String(32), ForeignKey("initiatives.id"), nullable=False)
    specialty_id = Column(String(32), ForeignKey("specialties.id"), nullable=False)

    initiative = relationship("Initiative", back_populates="tags")
    specialty = relationship("Specialty")


class InitiativeDependency(Base):
    """Edge: dependent cannot start until dependency has finished."""

    __tablename__ = "initiative_dependencies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dependent_id = Column(String(32), ForeignKey("initiatives.id"), nullable=False)
    dependency_id = Column(String(32), ForeignKey("initiatives.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<InitiativeDependency({self.dependent_id} -> {self.dependency_id})>"


class ScheduledBlock(Base):
    """Contiguous window of work on one initiative by one engineer."""

    __tablename__ = "scheduled_blocks"

    id = Column(String(32), primary_key=True, default=_new_id)
    initiative_id = Column(String(32), ForeignKey("initiatives.id"), nullable=False)
    engineer_id = Column(String(32), ForeignKey("engineers.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusive
    hours_allocated = Column(Float, nullable=False, default=0.0)
    is_at_risk = Column(Boolean, nullable=False, default=False)
    risk_reason = Column(Text, nullable=True)

    initiative = relationship("Initiative", back_populates="scheduled_blocks")
    engineer = relationship("Engineer", back_populates="scheduled_blocks")

    def __repr__(self) -> str:
        return (
            f"<ScheduledBlock(initiative={self.initiative_id}, engineer={self.engineer_id}, "
            f"{self.start_date}..{self.end_date}, hours={self.hours_allocated})>"
        )


class UnavailabilityBlock(Base):
    """Closed date interval in which an engineer has no capacity."""

    __tablename__ = "unavailability_blocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    engineer_id = Column(String(32), ForeignKey("engineers.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusive
    reason = Column(String(200), nullable=True)

    engineer = relationship("Engineer", back_populates="unavailability")

    def __repr__(self) -> str:
        return f"<UnavailabilityBlock(engineer={self.engineer_id}, {self.start_date}..{self.end_date})>"


class AuditLog(Base):
    """Record of a schedule-changing action."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False)  # SCHEDULE, MOVE, MOVE_AND_REASSIGN
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(100), nullable=False)
    user_id = Column(String(100), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<AuditLog(action={self.action}, entity={self.entity_type}:{self.entity_id})>"
