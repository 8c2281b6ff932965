from types import SimpleNamespace
import pytest
import requests
from zeep.exceptions import Fault, TransportError, ValidationError, XMLParseError
import callmanager.axl.configs as cfg
import callmanager.axl.transport as transport_module
from callmanager.axl import Axl
from callmanager.axl.exceptions import (
    AXLFault,
    DumbProgrammerException,
    InvalidArguments,
    TransportFailure,
    UCMVersionInvalid,
)
from callmanager.axl.helpers import check_type, serialize
from callmanager.axl.transport import AXL_BINDING, ZeepTransport, find_wsdl, parse_version


def _raise(err):
    def func(**kwargs):
        raise err

    return func


class FakeClient:
    """Records how the zeep client was built instead of reading a WSDL"""

    def __init__(self, wsdl, settings=None, transport=None):
        self.wsdl = wsdl
        self.settings = settings
        self.transport = transport
        self.address = None

    def create_service(self, binding, address):
        self.binding = binding
        self.address = address
        return SimpleNamespace()


@pytest.fixture
def fake_client(monkeypatch):
    monkeypatch.setattr(transport_module, "Client", FakeClient)
    monkeypatch.setattr(transport_module, "SqliteCache", lambda: None)


@pytest.fixture
def wsdl_file(tmp_path):
    wsdl = tmp_path / "AXLAPI.wsdl"
    wsdl.write_text("<definitions/>")
    return wsdl


class TestZeepTransport:
    def test_invoke(self):
        service = SimpleNamespace(getCss=lambda **kwargs: {"return": {"css": kwargs}})
        transport = ZeepTransport(service=service)
        assert transport.invoke("getCss", {"uuid": "{C1}"}) == {
            "return": {"css": {"uuid": "{C1}"}}
        }
        assert transport.zeep is None

    def test_unknown_element(self):
        transport = ZeepTransport(service=SimpleNamespace())
        with pytest.raises(TransportFailure) as e:
            transport.invoke("getWidget", {})
        assert e.value.procedure == "getWidget"

    def test_fault(self):
        fault = Fault("Item not valid: The specified Css was not found", code="5007")
        transport = ZeepTransport(service=SimpleNamespace(getCss=_raise(fault)))
        with pytest.raises(AXLFault) as e:
            transport.invoke("getCss", {"uuid": "{C1}"})
        assert e.value.procedure == "getCss"
        assert e.value.code == "5007"
        assert "not found" in str(e.value)

    @pytest.mark.parametrize(
        "err",
        [
            requests.ConnectionError("connection refused"),
            requests.Timeout("read timed out"),
            TransportError("Server returned HTTP status 401"),
            XMLParseError("proxy returned an HTML error page"),
            ValidationError("Missing element name (addCss.css)"),
            TypeError("{http://www.cisco.com/AXL/API/12.5}GetCssReq() got an unexpected keyword argument 'nmae'"),
        ],
    )
    def test_delivery_failure(self, err):
        transport = ZeepTransport(service=SimpleNamespace(listCss=_raise(err)))
        with pytest.raises(TransportFailure) as e:
            transport.invoke("listCss", {})
        assert not isinstance(e.value, AXLFault)
        assert e.value.cause is err

    def test_through_axl(self):
        service = SimpleNamespace(
            listCss=lambda **kwargs: {
                "return": {"css": [{"uuid": "{C1}", "name": "CSS_NYC"}]}
            }
        )
        ucm = Axl(transport=ZeepTransport(service=service))
        assert ucm.list_by_type_and_site("Css", "NYC") == {"{C1}": "CSS_NYC"}

    def test_client_from_configured_wsdl(self, monkeypatch, fake_client, wsdl_file):
        monkeypatch.setattr(cfg, "WSDL_PATH", wsdl_file)
        monkeypatch.setattr(cfg, "TIMEOUT", 7)
        transport = ZeepTransport("axluser", "secret", "ucm.company.com", validate=False)

        assert transport.zeep.wsdl == str(wsdl_file)
        assert transport.zeep.binding == AXL_BINDING
        assert transport.zeep.address == "https://ucm.company.com:8443/axl/"
        zeep_transport = transport.zeep.transport
        assert zeep_transport.operation_timeout == 7
        assert zeep_transport.session.auth.username == "axluser"
        assert zeep_transport.session.verify == cfg.VERIFY_TLS

    def test_wsdl_argument_wins(self, monkeypatch, fake_client, wsdl_file, tmp_path):
        monkeypatch.setattr(cfg, "WSDL_PATH", tmp_path / "nothing-here.wsdl")
        transport = ZeepTransport(
            "axluser", "secret", "ucm.company.com", wsdl=wsdl_file, validate=False
        )
        assert transport.zeep.wsdl == str(wsdl_file)


class TestFindWsdl:
    def test_no_schema_for_version(self, monkeypatch):
        monkeypatch.setattr(cfg, "WSDL_PATH", None)
        with pytest.raises(UCMVersionInvalid) as e:
            find_wsdl("ucm.company.com", "8443", version="12.5")
        assert "set_wsdl_path" in str(e.value)

    def test_configured_path(self, monkeypatch, wsdl_file):
        cfg.set_wsdl_path(str(wsdl_file))
        try:
            assert find_wsdl("ucm.company.com", "8443") == wsdl_file
        finally:
            cfg.set_wsdl_path(None)
        assert cfg.WSDL_PATH is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidArguments):
            find_wsdl("ucm.company.com", "8443", wsdl=tmp_path / "AXLAPI.wsdl")

    def test_bundled_schema(self, monkeypatch, tmp_path):
        schema = tmp_path / "schema" / "12.5"
        schema.mkdir(parents=True)
        (schema / "AXLAPI.wsdl").write_text("<definitions/>")
        monkeypatch.setattr(cfg, "WSDL_PATH", None)
        monkeypatch.setattr(cfg, "AXL_DIR", tmp_path)
        monkeypatch.setattr(transport_module, "get_ucm_version", lambda server, port: "12.5")
        assert find_wsdl("ucm.company.com", "8443") == schema / "AXLAPI.wsdl"


class TestParseVersion:
    @pytest.mark.parametrize(
        "version,expected",
        [("12", "12.0"), ("11.5", "11.5"), ("11.5.1", "11.5"), ("14.0.1.13900", "14.0")],
    )
    def test_versions(self, version, expected):
        assert parse_version(version) == expected

    def test_invalid(self):
        with pytest.raises(InvalidArguments):
            parse_version("latest")


class TestDecorators:
    def test_check_type_needs_type_name(self):
        with pytest.raises(DumbProgrammerException):

            @check_type()
            def no_type(uuid):
                pass

    def test_check_type_unknown_mode(self):
        with pytest.raises(DumbProgrammerException):
            check_type("uuid")

    def test_check_type_marks_func(self):
        @check_type("pattern")
        def by_pattern(pattern, type_name):
            return pattern

        assert by_pattern.check == "type"
        assert by_pattern.mode == "pattern"
        assert by_pattern("1000", "Line") == "1000"

    def test_serialize(self):
        @serialize
        def nothing():
            return None

        @serialize
        def reply():
            return {"return": "{C1}"}

        assert nothing() == {}
        assert reply() == {"return": "{C1}"}
