"""Unit tests for ServiceWorker and RequestTracker."""

import threading

import pytest

from core.errors import NetworkError
from ui.viewmodels.settings.workers import RequestTracker, ServiceWorker


def test_worker_emits_result_with_token(qtbot):
    worker = ServiceWorker(lambda: ["llama3"], token=7)
    with qtbot.waitSignal(worker.succeeded) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == [["llama3"], 7]


def test_worker_reports_network_error(qtbot):
    def call():
        raise NetworkError("Connection refused")

    worker = ServiceWorker(call, token=3)
    with qtbot.waitSignal(worker.failed) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args == ["Connection refused", 3]


def test_worker_reports_unexpected_error(qtbot, caplog):
    def call():
        raise KeyError("models")

    worker = ServiceWorker(call, token=4, description="Model directory fetch")
    with qtbot.waitSignal(worker.failed) as blocker:
        worker.start()
    worker.wait()

    assert blocker.args[0].startswith("Unexpected error:")
    assert blocker.args[1] == 4
    assert "Model directory fetch raised unexpectedly" in caplog.text


@pytest.fixture
def tracker(qapp):
    tracker = RequestTracker(deadline_ms=5000)
    yield tracker
    tracker.shutdown()


def test_tracker_tokens_are_monotonic(tracker):
    first = tracker.begin()
    assert tracker.busy
    assert tracker.begin() is None

    assert tracker.finish(first)
    second = tracker.begin()
    assert second > first


def test_tracker_rejects_stale_tokens(tracker):
    first = tracker.begin()
    tracker.cancel()
    assert not tracker.busy

    second = tracker.begin()
    assert not tracker.finish(first)
    assert tracker.busy
    assert tracker.finish(second)
    assert not tracker.finish(second)


def test_tracker_deadline_times_out(qtbot):
    tracker = RequestTracker(deadline_ms=50)
    gate = threading.Event()
    token = tracker.begin()
    worker = ServiceWorker(lambda: gate.wait(10), token)

    with qtbot.waitSignal(tracker.timed_out, timeout=2000) as blocker:
        tracker.start(token, worker)

    assert blocker.args == [token]
    assert not tracker.busy
    assert tracker.running_workers == 1

    gate.set()
    tracker.shutdown()
    assert tracker.running_workers == 0


def test_tracker_finish_stops_deadline(qtbot):
    tracker = RequestTracker(deadline_ms=300)
    token = tracker.begin()
    worker = ServiceWorker(lambda: True, token)

    with qtbot.waitSignal(worker.succeeded) as blocker:
        tracker.start(token, worker)
    assert tracker.finish(blocker.args[1])

    with qtbot.assertNotEmitted(tracker.timed_out, wait=500):
        pass
    tracker.shutdown()
