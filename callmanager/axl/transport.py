import logging
import re
from pathlib import Path
from typing import Any, Protocol, Union
import requests
from zeep import Client, Settings
from zeep.cache import SqliteCache
from zeep.exceptions import Error as ZeepError, Fault
from zeep.transports import Transport
import callmanager.axl.configs as cfg
from callmanager.axl.exceptions import (
    URLInvalidError,
    UCMInvalidError,
    UCMConnectionFailure,
    UCMNotFoundError,
    AXLInvalidCredentials,
    AXLConnectionFailure,
    AXLNotFoundError,
    AXLException,
    UCMException,
    UDSConnectionError,
    UDSParseError,
    UCMVersionInvalid,
    InvalidArguments,
    TransportFailure,
    AXLFault,
)
from callmanager.axl.validation import (
    validate_ucm_server,
    validate_axl_auth,
    get_ucm_version,
)
from callmanager.connection import ucm_session, ucm_url

log = logging.getLogger(__name__)

AXL_BINDING = "{http://www.cisco.com/AXLAPIService/}AXLAPIBinding"


class AXLTransport(Protocol):
    """Anything that can send a request to an AXL element and hand back its reply"""

    def invoke(self, procedure: str, request: dict) -> Any:
        ...


def parse_version(version: str) -> str:
    """Turns a user supplied version like '12', '11.5' or '14.0.1' into a schema version"""
    if (match := re.search(r"^(\d{1,2}(?:\.\d{1})?)", version)) is None:
        raise InvalidArguments(f"{version=} is not a valid UCM version")
    parsed_version = match.group(0)
    if "." not in parsed_version:
        log.debug(
            f"Supplied UCM version '{parsed_version}' didn't have a decimal place, adding '.0' to end."
        )
        parsed_version += ".0"
    return parsed_version


def find_wsdl(server: str, port, version: str = None, wsdl=None) -> Path:
    """Picks the AXLAPI.wsdl to build the client from. In order of preference:
    `wsdl`, `configs.WSDL_PATH`, then the schema under `AXL_DIR / "schema"` for
    `version` (asked of the server when not given).

    :raises InvalidArguments: if a WSDL path was given but there's no file there
    :raises UCMVersionInvalid: if no schema is available for the server's version
    """
    if wsdl is None:
        wsdl = cfg.WSDL_PATH
    if wsdl is not None:
        if not (wsdl_path := Path(wsdl).expanduser()).is_file():
            raise InvalidArguments(f"There is no WSDL file at '{wsdl_path}'")
        return wsdl_path

    if version is not None:
        cucm_version = parse_version(version)
        log.debug(f"Using user supplied version '{cucm_version}'")
    else:
        try:
            cucm_version = get_ucm_version(server, port)
        except (UDSConnectionError, UDSParseError) as err:
            log.exception(err)
            raise
        log.debug(f"Found UCM version: {cucm_version}")

    wsdl_path = cfg.AXL_DIR / "schema" / cucm_version / "AXLAPI.wsdl"
    if not wsdl_path.is_file():
        log.critical(f"A schema for CUCM {cucm_version} is not available")
        raise UCMVersionInvalid(cucm_version)
    return wsdl_path


class ZeepTransport:
    """Sends AXL requests through a Zeep client built from an AXLAPI.wsdl."""

    def __init__(
        self,
        username: str = "",
        password: str = "",
        server: str = "",
        port=cfg.DEFAULT_PORT,
        *,
        version: str = None,
        wsdl: Union[str, Path] = None,
        validate=True,
        service: Any = None,
    ) -> None:
        """Connect to your UCM's AXL server.

        :param username: A user with AXL permissions
        :param password: Password for the given user
        :param server: Base URL for your UCM server (i.e. 'ucm.company.com')
        :param port: Port on the server where UCM can be accessed, defaults to "8443"
        :param version: Optional, use only when there is an issue determining your UCM version, defaults to None
        :param wsdl: Optional path to an AXLAPI.wsdl, see `find_wsdl` for what's used otherwise
        :param validate: Check the server and credentials before building the client, defaults to True
        :param service: Optional, an already created Zeep service proxy to send requests through.
            When given, no client is built and nothing is validated.
        """
        self.server = server
        self.port = port
        if service is not None:
            self.zeep = None
            self.service = service
            return

        if validate:
            log.info(
                f"Attempting to verify {server} on port {port} is a valid UCM server..."
            )
            try:
                ucm_is_valid = validate_ucm_server(server, port)
            except (
                URLInvalidError,
                UCMInvalidError,
                UCMConnectionFailure,
                UCMNotFoundError,
            ):
                log.exception(f"{server} failed validation tests.")
                raise
            if not ucm_is_valid:
                log.error(f"Could not connect to {server}, unknown error occured")
                raise UCMException(f"Could not connect to {server}")

        # * load schema
        wsdl_path = find_wsdl(server, port, version, wsdl)
        log.debug(f"WSDL Path: {wsdl_path}")

        # * validate permissions
        if validate:
            log.info("Validating AXL credentials...")
            try:
                axl_is_valid = validate_axl_auth(server, username, password, port)
            except (
                AXLInvalidCredentials,
                AXLConnectionFailure,
                AXLNotFoundError,
            ) as err:
                log.exception(err)
                raise
            if not axl_is_valid:
                log.error("Could not connect to the AXL API for an unknown reason")
                raise AXLException()

        # * create zeep client
        settings = Settings(
            strict=False, xml_huge_tree=True, xsd_ignore_sequence_order=True
        )
        transport = Transport(
            session=ucm_session(username, password, retries=False),
            timeout=cfg.TIMEOUT,
            operation_timeout=cfg.TIMEOUT,
            cache=SqliteCache(),
        )
        self.zeep = Client(str(wsdl_path), settings=settings, transport=transport)
        self.service = self.zeep.create_service(
            AXL_BINDING, ucm_url(server, port, "/axl/")
        )
        log.info(f"AXL client created for {server}")

    def invoke(self, procedure: str, request: dict) -> Any:
        """Calls the AXL element named `procedure` with the fields in `request`.

        :raises AXLFault: when UCM answers with a SOAP fault
        :raises TransportFailure: when the request can't be built or delivered,
            the reply can't be parsed, or `procedure` doesn't exist
        """
        if (func := getattr(self.service, procedure, None)) is None:
            raise TransportFailure(procedure, "not an AXL element")

        try:
            return func(**request)
        except Fault as e:
            raise AXLFault(procedure, e) from None
        except (ZeepError, requests.RequestException, TypeError) as e:
            # zeep raises TypeError for request fields the element doesn't have
            raise TransportFailure(procedure, e) from e
