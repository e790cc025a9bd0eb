import asyncio
import contextvars
import logging

import pytest

from slidekit.oserror import (
    AdminError,
    add_tag,
    body_from_context,
    context_done,
    error_for_admin,
    for_admin,
    handle,
    has_tag,
    is_timeout,
    set_body,
)


def _wrapped(inner):
    try:
        try:
            raise inner
        except BaseException as err:
            raise RuntimeError("outer") from err
    except RuntimeError as outer:
        return outer


def test_for_admin_message():
    err = for_admin("broken %s", "thing")
    assert isinstance(err, AdminError)
    assert err.msg == "broken thing"
    assert str(err) == "ADMIN ERROR: broken thing"


def test_for_admin_without_args_keeps_percent():
    assert for_admin("100%").msg == "100%"


def test_error_for_admin_finds_wrapped():
    admin = for_admin("fix it")
    outer = _wrapped(admin)
    assert error_for_admin(outer) is admin


def test_error_for_admin_none_for_plain_error():
    assert error_for_admin(ValueError("x")) is None


@pytest.mark.parametrize(
    "err, expected",
    [
        (asyncio.CancelledError(), True),
        (TimeoutError(), True),
        (ValueError("x"), False),
    ],
)
def test_context_done(err, expected):
    assert context_done(err) is expected


def test_context_done_wrapped():
    assert context_done(_wrapped(asyncio.CancelledError())) is True


class _Timeouter(Exception):
    def __init__(self, value):
        super().__init__("t")
        self.value = value

    def timeout(self):
        return self.value


def test_is_timeout_by_method():
    assert is_timeout(_wrapped(_Timeouter(True))) is True
    assert is_timeout(_Timeouter(False)) is False


def test_is_timeout_builtin_and_plain():
    assert is_timeout(TimeoutError()) is True
    assert is_timeout(ValueError("x")) is False


def test_handle_logs_admin_error(caplog):
    with caplog.at_level(logging.ERROR, logger="slidekit.oserror"):
        handle(_wrapped(for_admin("disk full")))
    assert "Error: ADMIN ERROR: disk full" in caplog.text


def test_handle_ignores_cancelled(caplog):
    with caplog.at_level(logging.ERROR, logger="slidekit.oserror"):
        handle(asyncio.CancelledError())
    assert caplog.records == []


def test_body_roundtrip():
    def run():
        before = body_from_context()
        set_body("payload")
        return before, body_from_context()

    assert contextvars.copy_context().run(run) == (None, "payload")


def test_tags():
    def run():
        add_tag("alpha")
        return has_tag("alpha"), has_tag("beta")

    assert contextvars.copy_context().run(run) == (True, False)
    assert contextvars.copy_context().run(has_tag, "alpha") is False