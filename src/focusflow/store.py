"""
Local Store — key-value persistence of tasks, sessions, the pending-sync
queue and preferences.

All collections are JSON-serialized under fixed keys. The backend is any
object with `get(key)` / `set(key, value)`; MemoryStore for tests and
JsonFileStore for the CLI.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from focusflow.errors import StoreError
from focusflow.models.preferences import Preferences
from focusflow.models.session import Session
from focusflow.models.task import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "focusflow_tasks"
SESSIONS_KEY = "focusflow_sessions"
PENDING_KEY = "focusflow_pending"
PREFERENCES_KEY = "focusflow_preferences"
REJECTED_KEY = "focusflow_rejected"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-memory backend. Values pass through JSON so they behave like the file store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)


class JsonFileStore:
    """Single JSON document on disk, rewritten atomically on every set()."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read store file {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Store file {self._path} does not contain a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise StoreError(f"Cannot write store file {self._path}: {e}") from e


class LocalStore:
    def __init__(self, backend: Optional[KeyValueStore] = None):
        self._backend = backend if backend is not None else MemoryStore()

    def _load_list(self, key: str, model: Any) -> list[Any]:
        raw = self._backend.get(key) or []
        if not isinstance(raw, list):
            raise StoreError(f"Key {key!r} does not hold a list")
        try:
            return [model.model_validate(item) for item in raw]
        except ValidationError as e:
            raise StoreError(f"Corrupt record under {key!r}: {e.error_count()} error(s)") from e

    # ----- Sessions -----
    def sessions(self) -> list[Session]:
        """Session log in insertion (chronological) order."""
        return self._load_list(SESSIONS_KEY, Session)

    def append_session(self, session: Session) -> None:
        raw = self._backend.get(SESSIONS_KEY) or []
        raw.append(session.to_wire())
        self._backend.set(SESSIONS_KEY, raw)

    # ----- Pending queue -----
    def pending(self) -> list[Session]:
        return self._load_list(PENDING_KEY, Session)

    def enqueue(self, session: Session) -> bool:
        """Append to the pending queue unless the client id is already queued."""
        raw = self._backend.get(PENDING_KEY) or []
        if any(item.get("clientId") == session.client_id for item in raw):
            return False
        raw.append(session.to_wire())
        self._backend.set(PENDING_KEY, raw)
        logger.debug("Queued session %s (%d pending)", session.client_id, len(raw))
        return True

    def remove_pending(self, client_id: str) -> None:
        raw = self._backend.get(PENDING_KEY) or []
        self._backend.set(PENDING_KEY, [item for item in raw if item.get("clientId") != client_id])
        self.clear_rejected(client_id)

    def rejected(self) -> dict[str, str]:
        """Queued client ids the server refused, with its error message.

        These stay in the pending queue but are not replayed automatically.
        """
        raw = self._backend.get(REJECTED_KEY) or {}
        if not isinstance(raw, dict):
            raise StoreError(f"Key {REJECTED_KEY!r} does not hold an object")
        return raw

    def mark_rejected(self, client_id: str, error: str) -> None:
        self._backend.set(REJECTED_KEY, {**self.rejected(), client_id: error})

    def clear_rejected(self, client_id: Optional[str] = None) -> None:
        """Forget one rejection, or all of them when no id is given."""
        rejected = self.rejected()
        if client_id is None:
            if rejected:
                self._backend.set(REJECTED_KEY, {})
        elif client_id in rejected:
            del rejected[client_id]
            self._backend.set(REJECTED_KEY, rejected)

    # ----- Tasks -----
    def tasks(self) -> list[Task]:
        return self._load_list(TASKS_KEY, Task)

    def save_tasks(self, tasks: list[Task]) -> None:
        self._backend.set(TASKS_KEY, [t.model_dump(by_alias=True, mode="json") for t in tasks])

    # ----- Preferences -----
    def preferences(self) -> Preferences:
        raw = self._backend.get(PREFERENCES_KEY) or {}
        try:
            return Preferences.model_validate(raw)
        except ValidationError as e:
            raise StoreError(f"Corrupt preferences: {e.error_count()} error(s)") from e

    def save_preferences(self, prefs: Preferences) -> None:
        self._backend.set(PREFERENCES_KEY, prefs.model_dump(by_alias=True, mode="json"))
