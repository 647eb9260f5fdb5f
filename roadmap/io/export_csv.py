"""CSV export utilities for scheduled blocks and risk flags."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
from sqlalchemy.orm import Session

from roadmap.domain.repositories import EngineerRepository, InitiativeRepository, ScheduledBlockRepository

BLOCK_COLUMNS = [
    "block_id",
    "initiative_id",
    "initiative_title",
    "engineer_id",
    "engineer_name",
    "start_date",
    "end_date",
    "hours_allocated",
    "is_at_risk",
    "risk_reason",
]
RISK_COLUMNS = ["initiative_id", "reason", "severity"]


def blocks_to_frame(session: Session, blocks: Iterable | None = None) -> pd.DataFrame:
    """
    Flatten blocks into a DataFrame with initiative and engineer names.

    Args:
        session: Database session (used for name lookups)
        blocks: Blocks to export; defaults to every stored block

    Returns:
        DataFrame with BLOCK_COLUMNS, sorted by start date
    """
    if blocks is None:
        blocks = ScheduledBlockRepository.get_all(session)
    titles = {i.id: i.title for i in InitiativeRepository.get_all(session)}
    names = {e.id: e.name for e in EngineerRepository.get_all(session)}

    rows = [
        {
            "block_id": b.id,
            "initiative_id": b.initiative_id,
            "initiative_title": titles.get(b.initiative_id),
            "engineer_id": b.engineer_id,
            "engineer_name": names.get(b.engineer_id),
            "start_date": b.start_date,
            "end_date": b.end_date,
            "hours_allocated": b.hours_allocated,
            "is_at_risk": bool(b.is_at_risk),
            "risk_reason": b.risk_reason,
        }
        for b in blocks
    ]
    df = pd.DataFrame(rows, columns=BLOCK_COLUMNS)
    if not df.empty:
        df = df.sort_values(["start_date", "engineer_name"], kind="stable").reset_index(drop=True)
    return df


def export_blocks_csv(session: Session, csv_path: str | Path, blocks: Iterable | None = None) -> int:
    """
    Export scheduled blocks to CSV.

    Returns:
        Number of blocks exported
    """
    df = blocks_to_frame(session, blocks)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} blocks to {csv_path}")
    return len(df)


def export_risks_csv(risks: Iterable, csv_path: str | Path) -> int:
    """Export risk flags (initiative_id, reason, severity) to CSV."""
    rows = [
        {"initiative_id": r.initiative_id, "reason": r.reason, "severity": getattr(r.severity, "value", r.severity)}
        for r in risks
    ]
    df = pd.DataFrame(rows, columns=RISK_COLUMNS)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} risks to {csv_path}")
    return len(df)


def summarize_blocks(df: pd.DataFrame) -> str:
    """Human-readable per-engineer summary of a blocks frame."""
    if df.empty:
        return "No scheduled blocks."
    per_engineer = (
        df.groupby("engineer_name", dropna=False)
        .agg(blocks=("block_id", "count"), hours=("hours_allocated", "sum"), at_risk=("is_at_risk", "sum"))
        .sort_values("hours", ascending=False)
    )
    lines = [
        f"Blocks: {len(df)}  At risk: {int(df['is_at_risk'].sum())}  Hours: {df['hours_allocated'].sum():g}",
        f"Span: {df['start_date'].min()} - {df['end_date'].max()}",
        "",
        per_engineer.to_string(),
    ]
    return "\n".join(lines)
