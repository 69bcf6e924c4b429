"""Durable client-side storage for the current session.

A storage backend only moves dicts in and out. Deciding whether a stored
record is a valid session is SessionStore's job.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import redis

from auth.exceptions import SessionPersistenceError

if TYPE_CHECKING:
    from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


class SessionStorage(Protocol):
    """What SessionStore needs from a persistence backend."""

    def load(self) -> dict | None: ...

    def save(self, data: dict) -> None:
        """Raises SessionPersistenceError if the record cannot be written."""

    def delete(self) -> None:
        """Raises SessionPersistenceError if the record cannot be removed."""


class FileSessionStorage:
    """Session persisted as a single JSON file (the desktop localStorage)."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict | None:
        """
        Read the stored record.

        Returns None if the file is missing. Raises ValueError if the
        file is not a JSON object.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self._path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return data

    def save(self, data: dict) -> None:
        try:
            self._write_atomic(data)
        except OSError as e:
            logger.error(f"Could not write session file {self._path}: {e}")
            raise SessionPersistenceError(f"Could not write {self._path}: {e}") from e

    def delete(self) -> None:
        """Remove the file. Safe to call when it doesn't exist."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove session file {self._path}: {e}")
            raise SessionPersistenceError(f"Could not remove {self._path}: {e}") from e

    def _write_atomic(self, data: dict) -> None:
        """Temp file in the same directory, then rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class ValkeySessionStorage:
    """Session persisted under one key in Valkey (shared kiosk/terminal setups)."""

    def __init__(self, valkey: "ValkeyClient", key: str):
        self._valkey = valkey
        self._key = key

    def load(self) -> dict | None:
        return self._valkey.get_json(self._key)

    def save(self, data: dict) -> None:
        try:
            self._valkey.set_json(self._key, data)
        except redis.RedisError as e:
            logger.error(f"Could not write session key {self._key}: {e}")
            raise SessionPersistenceError(f"Could not write session to Valkey: {e}") from e

    def delete(self) -> None:
        try:
            self._valkey.delete(self._key)
        except redis.RedisError as e:
            logger.error(f"Could not remove session key {self._key}: {e}")
            raise SessionPersistenceError(f"Could not remove session from Valkey: {e}") from e
