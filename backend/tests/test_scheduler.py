from types import SimpleNamespace

import pytest
from flask import Flask, current_app

from livequiz.services import scheduler as scheduler_module
from livequiz.services.scheduler import BackgroundScheduler


class InlineSocketIO:
    """Holds the background task until run(); sleeping advances a fake clock."""

    def __init__(self, now=1000.0):
        self.now = now
        self.slept = []
        self.on_sleep = None

    def time(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds
        if self.on_sleep:
            self.on_sleep()

    def start_background_task(self, target, *args):
        self.task = (target, args)

    def run(self):
        target, args = self.task
        target(*args)


@pytest.fixture()
def sio(monkeypatch):
    fake = InlineSocketIO()
    monkeypatch.setattr(scheduler_module, 'time', SimpleNamespace(time=fake.time))
    return fake


def test_callback_runs_in_app_context(sio):
    app = Flask('scheduler-test')
    seen = []
    handle = BackgroundScheduler(app, sio).call_later(
        2.5, lambda value: seen.append((value, current_app.name)), 'x', label='t')
    assert handle.pending
    sio.run()
    assert seen == [('x', 'scheduler-test')]
    assert handle.fired and not handle.pending
    assert sio.slept == pytest.approx([1.0, 1.0, 0.5])


def test_cancelled_handle_never_fires(sio):
    app = Flask('scheduler-test')
    seen = []
    handle = BackgroundScheduler(app, sio).call_later(1, seen.append, 'x')
    handle.cancel()
    sio.run()
    assert seen == []
    assert handle.fired is False


def test_cancel_wakes_sleeping_worker_early(sio):
    app = Flask('scheduler-test')
    seen = []
    handle = BackgroundScheduler(app, sio, poll_sec=1.0).call_later(600, seen.append, 'x')
    sio.on_sleep = lambda: handle.cancel() if len(sio.slept) == 2 else None
    sio.run()
    assert seen == []
    assert len(sio.slept) == 2
