"""Configuration loading utility (reuses the top-level config module)."""

# Re-export from the top-level config module
from roadmap.config import SchedulerConfig, load_config

__all__ = ["load_config", "SchedulerConfig"]
