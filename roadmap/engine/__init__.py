"""Scheduling engine: dependency ordering and schedule generation.

Persistence workflows live in roadmap.engine.orchestrator.
"""

from .generator import RiskFlag, RiskSeverity, ScheduleResult, generate_schedule
from .ordering import build_dependency_graph, find_dependency_cycles, order_initiatives

__all__ = [
    "RiskFlag",
    "RiskSeverity",
    "ScheduleResult",
    "generate_schedule",
    "build_dependency_graph",
    "find_dependency_cycles",
    "order_initiatives",
]
