from types import SimpleNamespace

import pytest

from nexmo_client import create_client


class FakeTransport:
    """Records request descriptors and replays a canned (error, response, body)"""

    def __init__(self):
        self.requests = []
        self.reply = (None, SimpleNamespace(status_code=200), '{}')

    def respond(self, body, status_code=200, error=None):
        self.reply = (error, SimpleNamespace(status_code=status_code), body)

    def __call__(self, descriptor, callback):
        self.requests.append(descriptor)
        callback(*self.reply)

    @property
    def last(self):
        return self.requests[-1]


class Recorder:
    """Completion callback that keeps the arguments of every call"""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client(transport):
    return create_client({'key': 'my key', 'secret': 's3cr/t'}, transport=transport)
