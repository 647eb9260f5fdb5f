"""CSV import utilities to load roadmap data into the database."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from roadmap.domain.models import (
    Engineer,
    EngineerSpecialty,
    Initiative,
    InitiativeDependency,
    InitiativeStatus,
    InitiativeTag,
    Specialty,
    SpecialtyLevel,
    UnavailabilityBlock,
)
from roadmap.domain.repositories import EngineerRepository, SpecialtyRepository, UnavailabilityRepository
from roadmap.services.timeplan import format_working_days, parse_working_days


def _read(csv_path: str | Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    return df


def _text(row: pd.Series, column: str) -> str | None:
    value = str(row.get(column, "") or "").strip()
    return value or None


def _split(row: pd.Series, column: str) -> List[str]:
    return [part.strip() for part in (_text(row, column) or "").split(";") if part.strip()]


def _flag(row: pd.Series, column: str, default: bool = False) -> bool:
    value = _text(row, column)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "y"}


def _number(row: pd.Series, column: str, default: float | None = None) -> float | None:
    value = _text(row, column)
    return float(value) if value is not None else default


def _day(row: pd.Series, column: str):
    value = _text(row, column)
    return pd.to_datetime(value).date() if value is not None else None


def import_specialties_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import specialties (name, color, description) from CSV.

    Existing names are left untouched.

    Returns:
        Number of specialties created
    """
    df = _read(csv_path)
    created = 0
    for _, row in df.iterrows():
        name = _text(row, "name")
        if name is None or SpecialtyRepository.get_by_name(session, name) is not None:
            continue
        session.add(Specialty(name=name, color=_text(row, "color"), description=_text(row, "description")))
        session.flush()
        created += 1
    session.commit()

    print(f"[INFO] Imported {created} specialties from {csv_path}")
    return created


def import_engineers_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import engineers from CSV into database.

    Columns: id (optional), name, email, role, weekly_capacity, working_days,
    is_active, primary_specialties, secondary_specialties. Specialty lists and
    working days use ';' as separator; unknown specialties are created.

    Args:
        session: Database session
        csv_path: Path to engineers CSV

    Returns:
        Number of engineers imported
    """
    df = _read(csv_path)

    engineers = []
    for _, row in df.iterrows():
        working_days = _text(row, "working_days")
        engineer = Engineer(
            name=_text(row, "name"),
            email=_text(row, "email"),
            role=_text(row, "role"),
            is_active=_flag(row, "is_active", default=True),
            weekly_capacity=_number(row, "weekly_capacity", 40.0),
            working_days=(
                format_working_days(parse_working_days(working_days.replace(";", ",")))
                if working_days
                else "0,1,2,3,4"
            ),
        )
        if _text(row, "id"):
            engineer.id = _text(row, "id")

        for level, column in (
            (SpecialtyLevel.PRIMARY, "primary_specialties"),
            (SpecialtyLevel.SECONDARY, "secondary_specialties"),
        ):
            for name in _split(row, column):
                specialty = SpecialtyRepository.get_or_create(session, name)
                engineer.specialties.append(
                    EngineerSpecialty(specialty_id=specialty.id, specialty=specialty, level=level.value)
                )
        engineers.append(engineer)

    EngineerRepository.bulk_create(session, engineers)

    print(f"[INFO] Imported {len(engineers)} engineers from {csv_path}")
    return len(engineers)


def import_initiatives_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import initiatives from CSV into database.

    Columns: id (optional), title, description, status, priority,
    effort_estimate (weeks), deadline, lock_dates, locked_start, locked_end,
    lock_assignment, assigned_engineer_id, required_specialties (';'-separated
    specialty names, "tags" also accepted), depends_on (';'-separated initiative ids).

    Returns:
        Number of initiatives imported
    """
    df = _read(csv_path)

    initiatives = []
    pending_edges = []
    for _, row in df.iterrows():
        status = (_text(row, "status") or InitiativeStatus.PROPOSED.value).upper()
        if status not in InitiativeStatus.__members__:
            raise ValueError(f"Unknown initiative status '{status}' in {csv_path}")

        initiative = Initiative(
            title=_text(row, "title"),
            description=_text(row, "description"),
            status=status,
            priority=int(_number(row, "priority", 0)),
            effort_estimate=_number(row, "effort_estimate"),
            deadline=_day(row, "deadline"),
            lock_dates=_flag(row, "lock_dates"),
            locked_start=_day(row, "locked_start"),
            locked_end=_day(row, "locked_end"),
            lock_assignment=_flag(row, "lock_assignment"),
            assigned_engineer_id=_text(row, "assigned_engineer_id"),
        )
        if _text(row, "id"):
            initiative.id = _text(row, "id")

        for name in _split(row, "required_specialties") or _split(row, "tags"):
            specialty = SpecialtyRepository.get_or_create(session, name)
            initiative.tags.append(InitiativeTag(specialty_id=specialty.id, specialty=specialty))

        session.add(initiative)
        session.flush()
        initiatives.append(initiative)
        pending_edges.extend((initiative.id, dep_id) for dep_id in _split(row, "depends_on"))

    session.add_all(
        InitiativeDependency(dependent_id=dependent, dependency_id=dependency)
        for dependent, dependency in pending_edges
    )
    session.commit()

    print(
        f"[INFO] Imported {len(initiatives)} initiatives and {len(pending_edges)} dependencies from {csv_path}"
    )
    return len(initiatives)


def import_unavailability_csv(session: Session, csv_path: str | Path) -> int:
    """Import time off (engineer_id, start_date, end_date, reason) from CSV."""
    df = _read(csv_path)

    blocks = []
    for _, row in df.iterrows():
        start, end = _day(row, "start_date"), _day(row, "end_date")
        if start is None or end is None or end < start:
            raise ValueError(f"Invalid unavailability window {start}..{end} in {csv_path}")
        blocks.append(
            UnavailabilityBlock(
                engineer_id=_text(row, "engineer_id"),
                start_date=start,
                end_date=end,
                reason=_text(row, "reason"),
            )
        )

    UnavailabilityRepository.bulk_create(session, blocks)

    print(f"[INFO] Imported {len(blocks)} unavailability blocks from {csv_path}")
    return len(blocks)
