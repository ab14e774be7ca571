import os
import sys
import pytest

# Ensure the backend root (containing the `memoryrush` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from memoryrush import create_app, socketio, NAMESPACE
from memoryrush.services.games.coordinator import TurnCoordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    NUM_PAIRS = 2
    MIN_PLAYERS = 2
    MAX_PLAYERS = 2
    LOBBY_GRACE_SEC = 5
    TURN_DURATION_SEC = 30
    TIMER_HEARTBEAT_SEC = 0
    LOG_LEVEL = 'DEBUG'


class RecordingRegistry:
    """In-memory stand-in for the Socket.IO registry."""

    def __init__(self):
        self.connections = {}
        self.broadcasts = []
        self.sent = []

    def register(self, connection_id, player_name):
        self.connections[connection_id] = player_name

    def remove(self, connection_id):
        return self.connections.pop(connection_id, None)

    def name_for(self, connection_id):
        return self.connections.get(connection_id)

    def send(self, connection_id, message):
        self.sent.append((connection_id, message))

    def broadcast(self, message):
        self.broadcasts.append(message)

    def __contains__(self, connection_id):
        return connection_id in self.connections

    def __len__(self):
        return len(self.connections)


class ManualTasks:
    """Collects background tasks instead of starting them."""

    def __init__(self):
        self.pending = []

    def __call__(self, target, *args, **kwargs):
        self.pending.append((target, args, kwargs))

    def run(self, target):
        """Run (and drop) every pending task whose callable is ``target``."""
        matching = [t for t in self.pending if t[0] == target]
        self.pending = [t for t in self.pending if t[0] != target]
        for fn, args, kwargs in matching:
            fn(*args, **kwargs)
        return len(matching)


class FixedShuffle:
    """rng stand-in whose shuffle lays the cards out in a given id order."""

    def __init__(self, ids):
        self.ids = list(ids)

    def shuffle(self, cards):
        remaining = list(cards)
        ordered = []
        for card_id in self.ids:
            card = next(c for c in remaining if c.id == card_id)
            remaining.remove(card)
            ordered.append(card)
        cards[:] = ordered


@pytest.fixture()
def registry():
    return RecordingRegistry()


@pytest.fixture()
def tasks():
    return ManualTasks()


@pytest.fixture()
def make_coordinator(registry, tasks):
    """Build a coordinator wired to the recording registry and manual tasks."""

    def _make(ids=(1, 0, 0, 1), players=2, max_players=None, min_players=None, heartbeat=0):
        num_pairs = len(ids) // 2
        return TurnCoordinator(
            registry,
            num_pairs=num_pairs,
            max_players=max_players or players,
            min_players=min_players or min(players, 2),
            turn_duration=30,
            lobby_grace=5,
            start_background_task=tasks,
            sleep=lambda seconds: None,
            timer_heartbeat=heartbeat,
            rng=FixedShuffle(ids),
        )

    return _make


@pytest.fixture()
def started_game(make_coordinator, registry):
    """Coordinator whose roster filled up and started; registry history cleared."""

    def _start(ids=(1, 0, 0, 1), players=2):
        coordinator = make_coordinator(ids=ids, players=players)
        for n in range(players):
            coordinator.admit(f"sid-{n + 1}")
        assert coordinator.state.active
        registry.broadcasts.clear()
        registry.sent.clear()
        return coordinator

    return _start


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def lines(test_client):
    """Protocol lines received by a Socket.IO test client since the last call."""
    received = test_client.get_received(NAMESPACE)
    return [pkt['args'] for pkt in received if pkt['name'] == 'message']
