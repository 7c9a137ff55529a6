"""
Shared fixtures: a manual clock for the scheduler and an in-memory transport
standing in for the python-socketio connection.
"""

import pytest

from network_client import SyncClient, TransportError
from scheduler import Scheduler


class ManualClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTransport:
    """Records what SyncClient does with it; tests fire the socket events."""

    def __init__(self, on_open, on_frame, on_close, fail_open=False):
        self.on_open = on_open
        self.on_frame = on_frame
        self.on_close = on_close
        self.fail_open = fail_open
        self.fail_send = False
        self.url = None
        self.sent = []
        self.closed = False

    def open(self, url):
        self.url = url
        if self.fail_open:
            raise TransportError("connection refused")

    def send(self, frame):
        if self.fail_send:
            raise TransportError("/ is not a connected namespace.")
        self.sent.append(frame)

    def close(self):
        self.closed = True
        self.on_close()


class TransportFactory:
    def __init__(self):
        self.created = []
        self.fail_next = 0

    def __call__(self, on_open, on_frame, on_close):
        fail = self.fail_next > 0
        if fail:
            self.fail_next -= 1
        transport = FakeTransport(on_open, on_frame, on_close, fail_open=fail)
        self.created.append(transport)
        return transport

    @property
    def last(self):
        return self.created[-1]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)


@pytest.fixture
def transports():
    return TransportFactory()


@pytest.fixture
def sync_client(scheduler, transports):
    return SyncClient('http://game.test', scheduler, transport_factory=transports, reconnect_delay=2.0)


@pytest.fixture
def open_client(sync_client, transports, scheduler):
    """A SyncClient connected as 'alice' with its hello frame already sent."""
    sync_client.connect('alice')
    transports.last.on_open()
    scheduler.run_pending()
    return sync_client


def board_from_picture(*lines):
    """Builds a board from 6 strings, top row first: '.', 'X' (1) or 'O' (2)."""
    assert len(lines) == 6
    cells = {'.': 0, 'X': 1, 'O': 2}
    return tuple(tuple(cells[ch] for ch in line) for line in lines)


# Full board with no four-in-a-row for either player.
DRAWN_BOARD = board_from_picture(
    "XXOOXXO",
    "OOXXOOX",
    "XXOOXXO",
    "OOXXOOX",
    "XXOOXXO",
    "OOXXOOX",
)
