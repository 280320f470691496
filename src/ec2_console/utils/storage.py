"""Local persistence for credentials and last-used filters.

Both stores share one JSON file, each under its own fixed key. Read
failures are logged and treated as "nothing stored"; they never stop the
console from starting.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ec2_console.core.constants import CREDENTIALS_STORAGE_KEY, FILTERS_STORAGE_KEY
from ec2_console.core.models.connection import ConnectionContext
from ec2_console.core.models.filters import Filter
from ec2_console.utils.logger import setup_logger

logger = setup_logger(__name__, "storage.log")


class JsonStore:
    """Key/value document persisted as a single JSON object."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"Unable to read {self.path}: {e}")
            return {}

    def _write_all(self, data: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            self.path.chmod(0o600)
        except OSError as e:
            logger.warning(f"Unable to write {self.path}: {e}")
            return False
        return True

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``. Returns False when the file could not be written."""
        data = self._read_all()
        data[key] = value
        return self._write_all(data)

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return True
        del data[key]
        return self._write_all(data)


class CredentialStore:
    """Opt-in credential persistence keyed by CREDENTIALS_STORAGE_KEY."""

    def __init__(self, store: JsonStore):
        self.store = store

    def save(self, context: ConnectionContext) -> bool:
        payload = context.to_dict()
        payload["persisted_at"] = datetime.now(timezone.utc).isoformat()
        payload["auto_init"] = True
        return self.store.set(CREDENTIALS_STORAGE_KEY, payload)

    def load(self) -> Optional[ConnectionContext]:
        """Stored context, trimmed, or None when absent or unreadable."""
        raw = self.store.get(CREDENTIALS_STORAGE_KEY)
        if not isinstance(raw, dict):
            return None
        return ConnectionContext.from_dict(raw)

    def clear(self) -> None:
        self.store.delete(CREDENTIALS_STORAGE_KEY)


class FilterStore:
    """Last successful query, kept for the lifetime of a session."""

    def __init__(self, store: JsonStore):
        self.store = store

    def save(self, query: Filter) -> None:
        self.store.set(FILTERS_STORAGE_KEY, query.to_dict())

    def load(self) -> Optional[Dict[str, Any]]:
        raw = self.store.get(FILTERS_STORAGE_KEY)
        return raw if isinstance(raw, dict) else None

    def clear(self) -> None:
        self.store.delete(FILTERS_STORAGE_KEY)
