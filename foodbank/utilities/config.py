"""Configuration management for the visit analytics service."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# IANA zone used to render visit times; empty means the host's local zone
DISPLAY_TIMEZONE: Final[str] = os.getenv('DISPLAY_TIMEZONE', '')

# Event notices kept in memory for polling clients
MAX_EVENTS: Final[int] = int(os.getenv('MAX_EVENTS', '300'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('FOODBANK_DATA_DIR', str(BASE_DIR / 'data')))
EXPORT_DIR: Final[Path] = Path(os.getenv('FOODBANK_EXPORT_DIR', str(DATA_DIR / 'exports')))
MANUAL_DAYS_FILE: Final[Path] = Path(os.getenv('MANUAL_DAYS_FILE', str(DATA_DIR / 'manual_days.json')))
