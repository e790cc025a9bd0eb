"""Parse the replies of stream reads from the message bus."""

from __future__ import annotations

import re
from typing import Any, Callable

FIELD_CHANGED_TOPIC = "ModifiedFields"
LOGOUT_TOPIC = "logout"

PairHandler = Callable[[bytes, bytes], None]

_KEY = re.compile(r"^[^/\s]+/[1-9][0-9]*/[^/\s]+$")


class StreamError(ValueError):
    """Raised when a stream reply has an unexpected shape."""


def _values(reply: Any, what: str) -> list[Any]:
    if isinstance(reply, (list, tuple)):
        return list(reply)
    raise StreamError(f"{what}: expected a list, got {reply!r}")


def _string(value: Any, what: str) -> str:
    if isinstance(value, bytes):
        return value.decode()
    if isinstance(value, str):
        return value
    raise StreamError(f"{what}: expected a string, got {value!r}")


def _to_bytes(value: Any) -> bytes | None:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode()
    return None


def parse_stream(reply: Any, on_pair: PairHandler) -> str:
    """Call on_pair for every field and value of one stream; return the last id."""
    entries = _values(reply, "parsing stream")

    last_id = ""
    for i, entry in enumerate(entries):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise StreamError(f"invalid stream value {i}, got {entry!r}")

        last_id = _string(entry[0], f"parsing id from entry {i}")

        fields = entry[1]
        if not isinstance(fields, (list, tuple)) or len(fields) % 2 != 0:
            raise StreamError(f"invalid field list value {i}, got {fields!r}")

        items = iter(fields)
        for n, (raw_key, raw_value) in enumerate(zip(items, items)):
            key = _to_bytes(raw_key)
            if key is None:
                raise StreamError(
                    f"field {2 * n} in entry {i} is not a bulk string value, got {type(raw_key).__name__}"
                )
            value = _to_bytes(raw_value)
            if value is None:
                raise StreamError(
                    f"value {2 * n + 1} in entry {i} is not a bulk string value, "
                    f"got {type(raw_value).__name__}"
                )
            on_pair(key, value)
    return last_id


def only_stream(reply: Any, only: str, on_pair: PairHandler) -> str:
    """Parse only the stream called `only` from a read reply; return its last id."""
    streams = _values(reply, "parsing reply")

    for i, stream in enumerate(streams):
        if not isinstance(stream, (list, tuple)) or len(stream) != 2:
            raise StreamError("stream entry expects two value result")

        name = _string(stream[0], f"parsing name of stream {i}")
        if name != only:
            continue

        try:
            return parse_stream(stream[1], on_pair)
        except StreamError as err:
            raise StreamError(f"parsing entries of stream {i}: {err}") from err

    raise StreamError("stream not found")


def parse_message_bus(reply: Any) -> tuple[str, dict[str, bytes | None]]:
    """Parse the field-changed stream into its last id and the changed values.

    Invalid keys are skipped; the value "null" becomes None. Later entries
    overwrite earlier ones.
    """
    data: dict[str, bytes | None] = {}

    def collect(key: bytes, value: bytes) -> None:
        try:
            text = key.decode()
        except UnicodeDecodeError:
            return
        if not _KEY.match(text):
            return
        data[text] = None if value == b"null" else value

    try:
        last_id = only_stream(reply, FIELD_CHANGED_TOPIC, collect)
    except StreamError as err:
        raise StreamError(f"parsing autoupdate stream: {err}") from err
    return last_id, data


def logout_stream(reply: Any) -> tuple[str, list[str]]:
    """Parse the logout stream into its last id and the revoked session ids."""
    session_ids: list[str] = []

    def collect(key: bytes, value: bytes) -> None:
        if key == b"sessionId":
            session_ids.append(value.decode())

    try:
        last_id = only_stream(reply, LOGOUT_TOPIC, collect)
    except StreamError as err:
        raise StreamError(f"parsing logout stream: {err}") from err
    return last_id, session_ids