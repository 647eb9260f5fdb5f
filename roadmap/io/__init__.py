"""I/O utilities for config and CSV import/export."""

from .config import load_config
from .export_csv import blocks_to_frame, export_blocks_csv, export_risks_csv, summarize_blocks
from .import_csv import (
    import_engineers_csv,
    import_initiatives_csv,
    import_specialties_csv,
    import_unavailability_csv,
)

__all__ = [
    "load_config",
    "import_specialties_csv",
    "import_engineers_csv",
    "import_initiatives_csv",
    "import_unavailability_csv",
    "blocks_to_frame",
    "export_blocks_csv",
    "export_risks_csv",
    "summarize_blocks",
]
