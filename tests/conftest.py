import keyring
import keyring.errors
import pytest
from callmanager.axl import Axl
from callmanager.axl.exceptions import TransportFailure


class FakeTransport:
    """Stands in for UCM. `replies` maps an AXL element name to the reply it gives,
    a callable taking the request, or an exception to raise.
    """

    def __init__(self, replies: dict = None) -> None:
        self.replies = dict(replies or {})
        self.requests: list[tuple[str, dict]] = []

    def invoke(self, procedure: str, request: dict):
        self.requests.append((procedure, request))
        if procedure not in self.replies:
            raise TransportFailure(procedure, "no reply set up")

        reply = self.replies[procedure]
        if callable(reply):
            reply = reply(request)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def procedures(self) -> list[str]:
        return [p for p, _ in self.requests]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def ucm(transport) -> Axl:
    return Axl(transport=transport)


@pytest.fixture
def fake_keyring(monkeypatch):
    """System keyring replaced by a dict of {(service, key): value}"""
    store = {}

    def delete_password(service, key):
        if (service, key) not in store:
            raise keyring.errors.PasswordDeleteError(key)
        del store[(service, key)]

    monkeypatch.setattr(keyring, "get_password", lambda service, key: store.get((service, key)))
    monkeypatch.setattr(
        keyring, "set_password", lambda service, key, value: store.__setitem__((service, key), value)
    )
    monkeypatch.setattr(keyring, "delete_password", delete_password)
    return store
