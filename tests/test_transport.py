from concurrent.futures import ThreadPoolExecutor

import requests

from nexmo_client import RequestDescriptor, RequestsTransport, TransportError, create_client


class FakeResponse:
    def __init__(self, status_code=200, text='{"ok": true}'):
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response or FakeResponse()
        self.exc = exc
        self.calls = []
        self.closed = False

    def request(self, method, url, headers=None, timeout=None):
        self.calls.append((method, url, headers, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


def test_descriptor_defaults_to_json_accept_header():
    descriptor = RequestDescriptor('GET', 'https://example.com')
    assert descriptor.headers == {'Accept': 'application/json'}


def test_transport_passes_response_and_body():
    session = FakeSession(FakeResponse(201, 'created'))
    transport = RequestsTransport(session=session, timeout=7)
    seen = []

    result = transport(RequestDescriptor('POST', 'https://example.com/x'), lambda *args: seen.append(args))

    assert result is None
    assert session.calls == [('POST', 'https://example.com/x', {'Accept': 'application/json'}, 7)]
    assert seen == [(None, session.response, 'created')]


def test_transport_wraps_request_exceptions():
    cause = requests.exceptions.ConnectionError("refused")
    transport = RequestsTransport(session=FakeSession(exc=cause))
    seen = []

    transport(RequestDescriptor('GET', 'https://example.com'), lambda *args: seen.append(args))

    (error, response, body), = seen
    assert isinstance(error, TransportError)
    assert error.__cause__ is cause
    assert response is None and body is None


def test_transport_runs_on_executor():
    session = FakeSession()
    seen = []
    with ThreadPoolExecutor(max_workers=1) as executor:
        transport = RequestsTransport(session=session, executor=executor)
        future = transport(RequestDescriptor('GET', 'https://example.com'), lambda *args: seen.append(args))
        future.result(timeout=5)

    assert seen == [(None, session.response, '{"ok": true}')]


def test_transport_context_manager_closes_session():
    session = FakeSession()
    with RequestsTransport(session=session):
        pass
    assert session.closed


def test_client_end_to_end_with_requests_transport():
    session = FakeSession(FakeResponse(200, '{"value": 10.5, "autoReload": false}'))
    client = create_client({'key': 'k', 'secret': 's', 'timeout': 3},
                           transport=RequestsTransport(session=session, timeout=3))
    seen = []

    client.get_balance(lambda *args: seen.append(args))

    assert session.calls[0][:2] == ('GET', 'https://rest.nexmo.com/account/get-balance/k/s')
    assert seen == [(False, {'value': 10.5, 'autoReload': False})]


def test_client_builds_default_transport_from_config():
    client = create_client({'key': 'k', 'secret': 's', 'timeout': 4})
    assert isinstance(client.transport, RequestsTransport)
    assert client.transport.timeout == 4
    client.transport.close()


def test_client_returns_future_from_threaded_transport():
    session = FakeSession(FakeResponse(500, 'error'))
    seen = []
    with ThreadPoolExecutor(max_workers=2) as executor:
        client = create_client({'key': 'k', 'secret': 's'},
                               transport=RequestsTransport(session=session, executor=executor))
        future = client.get_numbers(lambda *args: seen.append(args))
        future.result(timeout=5)

    assert seen == [(session.response,)]
