"""Connection to the message bus that carries data updates and logout events."""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Callable, Mapping

import redis

from slidekit.stream import (
    FIELD_CHANGED_TOPIC,
    LOGOUT_TOPIC,
    StreamError,
    logout_stream,
    parse_message_bus,
)

MAX_MESSAGES = "10"
LAST_LOGOUT_SECONDS = 15 * 60

UpdateHandler = Callable[["dict[str, bytes | None] | None", "BaseException | None"], None]


def _raw_reply(response: Any, **options: Any) -> Any:
    return response


class MessageBus:
    """Reads data updates and logout events from the message bus."""

    _PING_INTERVAL = 0.2
    _RETRY_DELAY = 5.0

    def __init__(self, environ: Mapping[str, str] | None = None, client: Any = None) -> None:
        env = os.environ if environ is None else environ
        host = env.get("MESSAGE_BUS_HOST") or "localhost"
        port = env.get("MESSAGE_BUS_PORT") or "6379"
        self.address = f"{host}:{port}"

        if client is None:
            client = redis.Redis(
                host=host,
                port=int(port),
                max_connections=100,
            )
        setter = getattr(client, "set_response_callback", None)
        if callable(setter):
            setter("XREAD", _raw_reply)

        self._client = client
        self._last_logout_id = ""

    @property
    def client(self) -> Any:
        """The underlying client."""
        return self._client

    def wait(self, timeout: float | None = None) -> None:
        """Block until the bus answers a ping.

        With a timeout, the last connection error is raised once it expires.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            try:
                self._client.ping()
                return
            except (redis.RedisError, OSError) as err:
                if deadline is not None and time.monotonic() + self._PING_INTERVAL > deadline:
                    raise err
            time.sleep(self._PING_INTERVAL)

    def update(self, on_update: UpdateHandler, stop: threading.Event | None = None) -> None:
        """Call on_update with every batch of changed values until stop is set.

        Failures are passed to on_update as the second argument and retried
        after a pause.
        """
        stop = stop if stop is not None else threading.Event()
        last_id = "$"
        while not stop.is_set():
            try:
                new_id, data = self.single_update(last_id)
            except (redis.RedisError, OSError, StreamError) as err:
                on_update(None, err)
                stop.wait(self._RETRY_DELAY)
                continue
            on_update(data, None)
            last_id = new_id

    def single_update(self, last_id: str) -> tuple[str, dict[str, bytes | None]]:
        """Read the next changes after last_id; return the new id and the data."""
        reply = self._client.execute_command(
            "XREAD", "COUNT", MAX_MESSAGES, "BLOCK", "0", "STREAMS", FIELD_CHANGED_TOPIC, last_id
        )
        if reply is None:
            return last_id, {}
        try:
            return parse_message_bus(reply)
        except StreamError as err:
            raise StreamError(f"parsing message bus: {err}") from err

    def logout_event(self) -> list[str]:
        """Block until sessions are revoked and return their ids."""
        last_id = self._last_logout_id or str(int(time.time() - LAST_LOGOUT_SECONDS))

        reply = self._client.execute_command(
            "XREAD", "COUNT", MAX_MESSAGES, "BLOCK", "0", "STREAMS", LOGOUT_TOPIC, last_id
        )
        if reply is None:
            return []

        try:
            new_id, session_ids = logout_stream(reply)
        except StreamError as err:
            raise StreamError(f"parsing message bus: {err}") from err
        if new_id:
            self._last_logout_id = new_id
        return session_ids