import os
import sys
import pytest

# Ensure the backend root (containing the `livequiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from livequiz import create_app, socketio
from livequiz.catalog import load_catalog
from livequiz.services.registry import RoomRegistry
from livequiz.services.session import SessionController

HOST_KEY = 'test-host-key'
NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    HOST_KEY = HOST_KEY
    BCRYPT_LOG_ROUNDS = 4
    QUIZ_FILE = None
    PRE_DELAY_MS = 500
    POPUP_SHOW_MS = 7000
    MAX_POINTS = 1000
    LEADERBOARD_SIZE = 15
    FAST_TOP_SIZE = 5
    ROOM_CODE_LENGTH = 6
    MAX_NAME_LENGTH = 24
    ENDED_ROOM_RETENTION_SEC = 0
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = NAMESPACE


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms=1_700_000_000_000.0):
        self.now = start_ms

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class ManualHandle:
    def __init__(self, delay_sec, callback, args, label):
        self.delay_sec = delay_sec
        self.callback = callback
        self.args = args
        self.label = label
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self):
        return not (self.cancelled or self.fired)


class ManualScheduler:
    """Collects deferred calls; tests fire them explicitly."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay_sec, callback, *args, label='timer'):
        handle = ManualHandle(delay_sec, callback, args, label)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if h.pending]

    def fire(self, handle):
        handle.fired = True
        handle.callback(*handle.args)

    def run_pending(self):
        for handle in list(self.pending):
            if handle.pending:
                self.fire(handle)


class RecordingBroadcaster:
    def __init__(self):
        self.events = []
        self.members = {}

    def enter(self, sid, code):
        self.members.setdefault(code, set()).add(sid)

    def publish(self, code, event, payload):
        self.events.append(('room', code, event, payload))

    def send(self, sid, event, payload):
        self.events.append(('sid', sid, event, payload))

    def named(self, event):
        return [e[3] for e in self.events if e[2] == event]

    def sent_to(self, sid, event):
        return [e[3] for e in self.events if e[0] == 'sid' and e[1] == sid and e[2] == event]

    def clear(self):
        self.events.clear()


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def catalog():
    return load_catalog()


@pytest.fixture()
def controller(catalog, broadcaster, scheduler, clock):
    return SessionController(
        catalog,
        RoomRegistry(),
        broadcaster,
        scheduler,
        clock=clock,
        pre_delay_ms=500,
        max_points=1000,
    )


@pytest.fixture()
def flask_app(scheduler, clock):
    # No app context is held here: each HTTP request and Socket.IO event gets its
    # own, so Flask-Login never reuses one client's user for another.
    return create_app(TestConfig, scheduler=scheduler, clock=clock)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def host_client(flask_app):
    http = flask_app.test_client()
    res = http.post('/host-login', json={'key': HOST_KEY})
    assert res.status_code == 200
    test_client = socketio.test_client(flask_app, flask_test_client=http, namespace=NAMESPACE)
    yield test_client
    if test_client.is_connected(NAMESPACE):
        test_client.disconnect(namespace=NAMESPACE)


@pytest.fixture()
def make_player(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)
