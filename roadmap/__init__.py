"""Roadmap scheduling package: engineer recommendations and capacity-aware schedules.

Modules:
- config: load and validate configuration (YAML or JSON)
- domain: SQLAlchemy models, database helpers and repositories
- services.timeplan: date and business-day helpers
- services.recommend: score and rank engineers for an initiative
- services.placement: manual block placement and drag-move bump planning
- engine.ordering: dependency graph and processing order
- engine.generator: greedy forward schedule generation with risk flags
- engine.orchestrator: fetch, generate and persist workflows
- validator: input validation and schedule invariant checks
- io: CSV import/export
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "validator",
    "io",
    "cli",
]
