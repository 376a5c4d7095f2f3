import threading

import pytest

from coco_completion.status import Status, StatusReporter


class RecordingSurface:
    def __init__(self):
        self.events = []

    def set_loading(self, label):
        self.events.append(("loading", label))

    def set_idle(self):
        self.events.append(("idle", None))


def test_working_scope_sets_loading_then_idle():
    surface = RecordingSurface()
    reporter = StatusReporter(surface, label="CoCo")

    with reporter.working():
        assert reporter.status is Status.LOADING

    assert reporter.status is Status.IDLE
    assert surface.events == [("loading", "CoCo"), ("idle", None)]


def test_working_scope_restores_idle_on_error():
    surface = RecordingSurface()
    reporter = StatusReporter(surface)

    with pytest.raises(ValueError):
        with reporter.working():
            raise ValueError("boom")

    assert reporter.status is Status.IDLE
    assert surface.events[-1] == ("idle", None)


def test_overlapping_calls_stay_loading_until_last_finishes():
    surface = RecordingSurface()
    reporter = StatusReporter(surface)

    with reporter.working():
        with reporter.working():
            assert reporter.in_flight == 2
        assert reporter.status is Status.LOADING
        assert surface.events == [("loading", "CoCo")]

    assert reporter.status is Status.IDLE
    assert reporter.in_flight == 0
    assert surface.events == [("loading", "CoCo"), ("idle", None)]


def test_concurrent_working_scopes_end_idle():
    surface = RecordingSurface()
    reporter = StatusReporter(surface)
    entered = threading.Barrier(10)

    def call():
        with reporter.working():
            entered.wait()

    threads = [threading.Thread(target=call) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert reporter.status is Status.IDLE
    assert surface.events == [("loading", "CoCo"), ("idle", None)]
