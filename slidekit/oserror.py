"""Error helpers: admin errors, cancellation checks and request context values."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from contextvars import ContextVar, Token
from typing import Iterator

logger = logging.getLogger(__name__)

_CANCELLED = (asyncio.CancelledError, concurrent.futures.CancelledError)
_DEADLINE = (TimeoutError, asyncio.TimeoutError, concurrent.futures.TimeoutError)


class AdminError(Exception):
    """An error whose message is meant for the administrator."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return f"ADMIN ERROR: {self.msg}"


def _chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield the error and every error it was raised from."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        if err.__cause__ is not None:
            err = err.__cause__
        elif not err.__suppress_context__:
            err = err.__context__
        else:
            err = None


def handle(err: BaseException) -> None:
    """Log an error, ignoring cancellation and deadline errors."""
    if context_done(err):
        return
    admin = error_for_admin(err)
    logger.error("Error: %s", admin if admin is not None else err)


def context_done(err: BaseException | None) -> bool:
    """Return True if the error stems from a cancellation or an expired deadline."""
    return any(isinstance(e, _CANCELLED + _DEADLINE) for e in _chain(err))


def is_timeout(err: BaseException | None) -> bool:
    """Return True if the error, or one it was raised from, is a timeout.

    An error counts as a timeout if it is a TimeoutError or has a callable
    ``timeout`` attribute that returns True.
    """
    for e in _chain(err):
        if isinstance(e, _DEADLINE):
            return True
        check = getattr(e, "timeout", None)
        if callable(check):
            return bool(check())
    return False


def for_admin(fmt: str, *args: object) -> AdminError:
    """Build an AdminError with a %-formatted message."""
    return AdminError(fmt % args if args else fmt)


def error_for_admin(err: BaseException | None) -> AdminError | None:
    """Return the AdminError in the error's chain, or None."""
    for e in _chain(err):
        if isinstance(e, AdminError):
            return e
    return None


_body: ContextVar[str | None] = ContextVar("slidekit_body", default=None)
_tags: ContextVar[frozenset[str]] = ContextVar("slidekit_tags", default=frozenset())


def set_body(body: str) -> Token:
    """Attach a request body to the current context."""
    return _body.set(body)


def body_from_context() -> str | None:
    """Return the request body of the current context, or None if unset."""
    return _body.get()


def add_tag(tag: str) -> Token:
    """Mark the current context with a tag."""
    return _tags.set(_tags.get() | {tag})


def has_tag(tag: str) -> bool:
    """Tell whether the current context carries the tag."""
    return tag in _tags.get()