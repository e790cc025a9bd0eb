"""Metric values shared between instances through the message bus store."""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generic, TypeVar

from slidekit.bus import MessageBus

METRIC_KEY_PREFIX = "metric"

T = TypeVar("T")

_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits
_ID_LENGTH = 8


class Combiner(ABC, Generic[T]):
    """Combines the stored values of all instances into one."""

    @abstractmethod
    def combine(self, value: str, acc: T | None) -> T:
        """Fold one stored value into the accumulator; acc is None at first."""


def _utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def build_instance_id(now: Callable[[], datetime]) -> str:
    """Build an id from the current UTC time and eight random characters."""
    stamp = _utc(now()).strftime("%Y-%m-%dT%H:%M:%S")
    suffix = "".join(random.choice(_CHARSET) for _ in range(_ID_LENGTH))
    return f"{stamp}-{suffix}"


class Metric(Generic[T]):
    """A metric that every instance saves and that is read combined.

    Values from instances that have not saved within `too_old` are ignored.
    """

    def __init__(
        self,
        bus: MessageBus,
        name: str,
        combiner: Combiner[T],
        too_old: timedelta | float,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = bus.client
        self.name = name
        self._combiner = combiner
        self._too_old = too_old if isinstance(too_old, timedelta) else timedelta(seconds=too_old)
        self._now = now if now is not None else _now
        self.instance_id = build_instance_id(self._now)

    @property
    def _value_key(self) -> str:
        return f"{METRIC_KEY_PREFIX}-{self.name}-values"

    @property
    def _timestamp_key(self) -> str:
        return f"{METRIC_KEY_PREFIX}-{self.name}-timestamp"

    def save(self, value: str) -> None:
        """Store this instance's value together with the current time."""
        self._client.hset(self._value_key, self.instance_id, value)
        timestamp = int(_utc(self._now()).timestamp())
        self._client.hset(self._timestamp_key, self.instance_id, timestamp)

    def get(self) -> T | None:
        """Combine the values of all instances that saved recently enough.

        Returns None if no value is recent enough.
        """
        values = {_text(k): _text(v) for k, v in self._client.hgetall(self._value_key).items()}
        timestamps = {
            _text(k): int(_text(v)) for k, v in self._client.hgetall(self._timestamp_key).items()
        }

        limit = int((_utc(self._now()) - self._too_old).timestamp())

        acc: T | None = None
        for instance, timestamp in timestamps.items():
            if timestamp < limit:
                continue
            acc = self._combiner.combine(values.get(instance, ""), acc)
        return acc