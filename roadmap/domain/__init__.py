"""Domain models and data access layer."""

from .models import (
    AuditLog,
    Base,
    Engineer,
    EngineerSpecialty,
    Initiative,
    InitiativeDependency,
    InitiativeStatus,
    InitiativeTag,
    ScheduledBlock,
    Specialty,
    SpecialtyLevel,
    UnavailabilityBlock,
)
from .repositories import (
    AuditLogRepository,
    DependencyRepository,
    EngineerRepository,
    InitiativeRepository,
    ScheduledBlockRepository,
    SpecialtyRepository,
    UnavailabilityRepository,
)

__all__ = [
    "AuditLog",
    "Base",
    "Engineer",
    "EngineerSpecialty",
    "Initiative",
    "InitiativeDependency",
    "InitiativeStatus",
    "InitiativeTag",
    "ScheduledBlock",
    "Specialty",
    "SpecialtyLevel",
    "UnavailabilityBlock",
    "AuditLogRepository",
    "DependencyRepository",
    "EngineerRepository",
    "InitiativeRepository",
    "ScheduledBlockRepository",
    "SpecialtyRepository",
    "UnavailabilityRepository",
]
