import pytest
import callmanager.axl.credentials as creds
import callmanager.debug as debug
from callmanager.axl.exceptions import AXLException, UCMNotFoundError, UCMVersionInvalid


class FakeAxl:
    """Stands in for Axl, failing with `errors` in order before it connects"""

    def __init__(self, errors=()):
        self.errors = list(errors)
        self.calls = []

    def __call__(self, username, password, server, port, wsdl=None):
        self.calls.append({"server": server, "port": port, "wsdl": wsdl})
        if self.errors:
            raise self.errors.pop(0)
        return "connected"


@pytest.fixture
def stored(fake_keyring):
    creds.write_credentials("axluser", "secret")
    creds.write_server("ucm.company.com", "8443")
    return fake_keyring


def _answers(monkeypatch, *answers):
    answers = list(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": answers.pop(0))


class TestSetUrlAndPort:
    def test_stored_server(self, stored, monkeypatch):
        axl = FakeAxl()
        monkeypatch.setattr(debug, "Axl", axl)
        assert debug.set_url_and_port() == "connected"
        assert axl.calls == [{"server": "ucm.company.com", "port": "8443", "wsdl": None}]

    def test_asks_for_wsdl(self, stored, monkeypatch, tmp_path):
        wsdl = tmp_path / "AXLAPI.wsdl"
        wsdl.write_text("<definitions/>")
        axl = FakeAxl([UCMVersionInvalid("12.5")])
        monkeypatch.setattr(debug, "Axl", axl)
        _answers(monkeypatch, str(tmp_path / "wrong.wsdl"), str(wsdl))

        assert debug.set_url_and_port() == "connected"
        # same server again, only the schema changed
        assert [c["server"] for c in axl.calls] == ["ucm.company.com", "ucm.company.com"]
        assert axl.calls[-1]["wsdl"] == str(wsdl)
        assert creds.get_wsdl_path() == str(wsdl)
        assert creds.get_server() == ("ucm.company.com", "8443")

    def test_stored_wsdl_used(self, stored, monkeypatch):
        creds.write_wsdl_path("/opt/axlsqltoolkit/schema/12.5/AXLAPI.wsdl")
        axl = FakeAxl()
        monkeypatch.setattr(debug, "Axl", axl)
        debug.set_url_and_port()
        assert axl.calls[0]["wsdl"] == "/opt/axlsqltoolkit/schema/12.5/AXLAPI.wsdl"

    def test_new_server(self, stored, monkeypatch):
        axl = FakeAxl([UCMNotFoundError("https://ucm.company.com:8443")])
        monkeypatch.setattr(debug, "Axl", axl)
        _answers(monkeypatch, "y", "ucm2.company.com:443")

        debug.set_url_and_port()
        assert axl.calls[-1] == {"server": "ucm2.company.com", "port": "443", "wsdl": None}
        assert creds.get_server() == ("ucm2.company.com", "443")

    def test_give_up(self, stored, monkeypatch):
        monkeypatch.setattr(debug, "Axl", FakeAxl([UCMNotFoundError("https://ucm.company.com:8443")]))
        _answers(monkeypatch, "n")
        with pytest.raises(AXLException):
            debug.set_url_and_port()

    def test_clear(self, stored, capsys):
        debug.clear_url_and_port()
        assert creds.get_server()[0] == ""
        assert "cleared" in capsys.readouterr().out
