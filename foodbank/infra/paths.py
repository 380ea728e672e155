from pathlib import Path

from foodbank.utilities.config import EXPORT_DIR, MANUAL_DAYS_FILE

# Centralized paths for data files (single source of truth)
EXPORT_DIR = Path(EXPORT_DIR).resolve()
MANUAL_DAYS_FILE = Path(MANUAL_DAYS_FILE).resolve()

__all__ = ['EXPORT_DIR', 'MANUAL_DAYS_FILE']
