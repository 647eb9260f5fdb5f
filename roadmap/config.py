"""Scheduler configuration and loading from YAML or JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass
class ScoringWeights:
    primary_specialty: float = 40.0
    secondary_specialty: float = 20.0
    current_load: float = 25.0
    deadline_feasibility: float = 15.0


@dataclass
class SchedulerConfig:
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    buffer_days: int = 2  # days before deadline the work should finish
    hours_per_day: float = 8.0  # working hours per day during slot search
    hours_per_week: float = 40.0  # converts effort estimates (weeks) to hours
    lookahead_days: int = 365
    db_url: str = "sqlite:///roadmap.db"


DEFAULT_CONFIG = SchedulerConfig()


def _build(cls, data: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown {section} config keys: {', '.join(unknown)}")
    return cls(**data)


def config_from_dict(data: Dict[str, Any] | None) -> SchedulerConfig:
    """
    Build a SchedulerConfig from a plain mapping.

    Missing keys keep their defaults; unknown keys raise ValueError.
    """
    data = dict(data or {})
    weights = _build(ScoringWeights, dict(data.pop("weights", None) or {}), "weights")
    cfg = _build(SchedulerConfig, data, "scheduler")
    cfg.weights = weights
    if cfg.hours_per_day <= 0 or cfg.hours_per_week <= 0:
        raise ValueError("hours_per_day and hours_per_week must be positive")
    if cfg.buffer_days < 0:
        raise ValueError("buffer_days cannot be negative")
    return cfg


def load_config(path: str | Path) -> SchedulerConfig:
    """
    Load configuration from a YAML (.yaml/.yml) or JSON file.

    Args:
        path: Path to the config file

    Returns:
        SchedulerConfig with defaults filled in
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)
