"""
Valkey (Redis-compatible) backing store for persisted client sessions.

Only the JSON operations session persistence needs. Connection problems
raise straight away; a session is never silently dropped to memory.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    JSON documents in Valkey, one per key.

    Usage:
        valkey = ValkeyClient("redis://localhost:6379/0")
        valkey.set_json("taskdesk:session", session.model_dump(mode="json"))
        record = valkey.get_json("taskdesk:session")
    """

    def __init__(self, url: str, client: redis.Redis | None = None):
        """
        Connect and ping.

        Args:
            url: Connection URL, e.g. redis://localhost:6379/0
            client: Already configured redis client, used instead of url

        Raises:
            redis.ConnectionError: Server unreachable
        """
        self._client = client or redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("Connected to Valkey session store")

    def set_json(self, key: str, value: dict) -> None:
        """Write `value` as JSON. Keys never expire; sessions end on clear()."""
        self._client.set(key, json.dumps(value))

    def get_json(self, key: str) -> dict | None:
        """
        Read a JSON object back.

        None when the key is absent. ValueError when the stored value is
        not a JSON object (corrupt or written by something else).
        """
        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}") from e
        if not isinstance(decoded, dict):
            raise ValueError(f"Key '{key}' does not hold a JSON object")
        return decoded

    def delete(self, key: str) -> bool:
        """Remove `key`. True if something was removed."""
        return self._client.delete(key) > 0

    def close(self) -> None:
        self._client.close()
        logger.info("Valkey session store connection closed")
