# tests/application/test_refresh.py
import threading

import pytest

from application.refresh import MetaRefreshTimer, parse_refresh_delay
from tests.mock_timer import FakeTimerFactory


@pytest.mark.parametrize(
    "content,expected",
    [
        ("2", 2.0),
        (" 5 ", 5.0),
        ("0", 0.0),
        ("1.5", 1.5),
        ("3; url=/next", 3.0),
        ("3;URL='http://example.com/'", 3.0),
        ("4, url=/x", 4.0),
    ],
)
def test_parse_refresh_delay(content, expected) -> None:
    assert parse_refresh_delay(content) == expected


@pytest.mark.parametrize("content", [None, "", "soon", "-1", "2s", "url=/x"])
def test_parse_refresh_delay_rejects(content) -> None:
    assert parse_refresh_delay(content) is None


class TestMetaRefreshTimer:
    def test_arm_starts_single_timer(self):
        factory = FakeTimerFactory()
        timer = MetaRefreshTimer(threading.RLock(), factory)

        timer.arm(2.0, lambda: None)

        assert timer.pending is True
        assert timer.delay == 2.0
        assert factory.last.started is True
        assert factory.last.delay == 2.0

    def test_expiry_runs_action_once(self):
        factory = FakeTimerFactory()
        timer = MetaRefreshTimer(threading.RLock(), factory)
        calls = []
        timer.arm(1, lambda: calls.append("reload"))

        factory.last.fire()
        factory.last.fire()

        assert calls == ["reload"]
        assert timer.pending is False

    def test_arm_cancels_previous_timer(self):
        factory = FakeTimerFactory()
        timer = MetaRefreshTimer(threading.RLock(), factory)
        calls = []
        timer.arm(1, lambda: calls.append("first"))
        timer.arm(2, lambda: calls.append("second"))

        first, second = factory.timers
        first.fire()
        second.fire()

        assert first.canceled is True
        assert calls == ["second"]

    def test_cancel_turns_late_expiry_into_noop(self):
        factory = FakeTimerFactory()
        timer = MetaRefreshTimer(threading.RLock(), factory)
        calls = []
        timer.arm(1, lambda: calls.append("reload"))

        assert timer.cancel() is True
        factory.last.fire()

        assert calls == []
        assert timer.pending is False
        assert timer.cancel() is False

    def test_expiry_holds_the_session_lock(self):
        factory = FakeTimerFactory()
        lock = threading.RLock()
        timer = MetaRefreshTimer(lock, factory)
        owned = []

        def action():
            # probe from another thread: acquire must fail while the timer holds the lock
            result = []
            t = threading.Thread(target=lambda: result.append(lock.acquire(blocking=False)))
            t.start()
            t.join()
            owned.append(not result[0])

        timer.arm(0, action)
        factory.last.fire()

        assert owned == [True]

    def test_real_timer_fires(self):
        timer = MetaRefreshTimer(threading.RLock())
        fired = threading.Event()

        timer.arm(0.01, fired.set)

        assert fired.wait(2.0) is True
