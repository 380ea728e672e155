"""Manual day marker persistence (JSON file keyed by org/location/month scope)."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Set

from foodbank.infra.paths import MANUAL_DAYS_FILE
from foodbank.utilities.constants import UNSCOPED

logger = logging.getLogger(__name__)


def scope_key(org_id: Optional[str], location_id: Optional[str], month_key: str) -> str:
    """``<org>/<location>/<monthKey>``; a missing org or location becomes '-'."""
    return f"{org_id or UNSCOPED}/{location_id or UNSCOPED}/{month_key}"


def month_key_of_scope(key: str) -> str:
    return key.rsplit("/", 1)[-1]


class ManualDayRepository:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else MANUAL_DAYS_FILE

    def _read_store(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            store = json.load(f)
        return store if isinstance(store, dict) else {}

    def load(self, key: str) -> Set[str]:
        """Markers stored for a scope; empty when absent, unreadable or not a list."""
        try:
            store = self._read_store()
        except (OSError, ValueError) as e:
            logger.warning(f"Manual days store unreadable ({self.path}): {e}")
            return set()
        raw = store.get(key)
        if not isinstance(raw, list):
            return set()
        return {d for d in raw if isinstance(d, str)}

    def save(self, key: str, days: Iterable[str]) -> bool:
        """Persist a scope's markers as a sorted list. Failures are logged, never raised."""
        try:
            try:
                store = self._read_store()
            except ValueError:
                logger.warning(f"Replacing malformed manual days store: {self.path}")
                store = {}
            store[key] = sorted(days)
            self._atomic_write(store)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist manual days for {key}: {e}")
            return False

    def _atomic_write(self, store: dict):
        os.makedirs(self.path.parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".manual_days_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(store, tmp, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
