"""Checks made before a transport is built: that the server is UCM, that AXL
accepts the credentials, and which version of UCM is running.
"""
import xml.etree.ElementTree as ET
import requests
import validators
from bs4 import BeautifulSoup
import callmanager.axl.configs as cfg
from callmanager.axl.exceptions import (
    URLInvalidError,
    UCMInvalidError,
    UCMNotFoundError,
    UCMConnectionFailure,
    AXLInvalidCredentials,
    AXLNotFoundError,
    AXLConnectionFailure,
    UDSConnectionError,
    UDSParseError,
)
from callmanager.connection import (
    TIMED_OUT,
    UNREACHABLE,
    get_status_code,
    ucm_session,
    ucm_url,
)

UCM_LANDING_TEXT = "Cisco Unified Communications Manager"


def _checked_url(server: str, port, path="") -> str:
    url = ucm_url(server, port, path)
    if not validators.url(url):
        raise URLInvalidError(url)
    return url


def validate_ucm_server(server: str, port=cfg.DEFAULT_PORT) -> bool:
    """Makes sure `server` answers with UCM's landing page.

    :param server: Base URL of the UCM server (i.e. 'ucm.company.com')
    :param port: Port UCM is served on, defaults to "8443"
    :raises URLInvalidError: when the server and port don't make a valid URL
    :raises UCMNotFoundError: when nothing answers at the URL
    :raises UCMConnectionFailure: when the server doesn't answer in time
    :raises UCMInvalidError: when the server answers but isn't UCM
    :return: True for a UCM server, False for any other unexpected HTTP status
    """
    url = _checked_url(server, port)
    status = get_status_code(url)
    if status == UNREACHABLE:
        raise UCMNotFoundError(url)
    elif status == TIMED_OUT:
        raise UCMConnectionFailure(url)
    elif status != 200:
        return False

    with ucm_session() as s:
        page = s.get(url, timeout=cfg.TIMEOUT).text
    if not BeautifulSoup(page, "html.parser").find(string=UCM_LANDING_TEXT):
        raise UCMInvalidError(url)
    return True


def validate_axl_auth(
    server: str, username: str, password: str, port=cfg.DEFAULT_PORT
) -> bool:
    """Makes sure the AXL API at `server` accepts the given credentials.

    :raises URLInvalidError: when the server and port don't make a valid URL
    :raises AXLInvalidCredentials: when AXL answers but rejects the credentials
    :raises AXLNotFoundError: when nothing answers at the AXL URL
    :raises AXLConnectionFailure: when AXL doesn't answer in time
    :return: True if AXL accepted the credentials, False if none were given
        or AXL answered with any other status
    """
    if not all((username, password)):
        return False

    url = _checked_url(server, port, "/axl/")
    status = get_status_code(url, username, password)
    if status == 200:
        return True
    elif status == 401:
        raise AXLInvalidCredentials(url, username)
    elif status == UNREACHABLE:
        raise AXLNotFoundError(url)
    elif status == TIMED_OUT:
        raise AXLConnectionFailure(url)
    else:
        return False


def get_ucm_version(server: str, port=cfg.DEFAULT_PORT) -> str:
    """Asks the UDS service which version of UCM is running.

    :raises UDSConnectionError: if the UDS service can't be reached or doesn't answer with XML
    :raises UDSParseError: if the answer has no version in it
    :return: The major and minor version only (i.e. '12.5')
    """
    url = ucm_url(server, port, "/cucm-uds/version")
    try:
        with ucm_session() as s:
            recv = s.get(url, timeout=cfg.TIMEOUT)
        tree = ET.fromstring(recv.text)
    except (requests.RequestException, ET.ParseError):
        raise UDSConnectionError(url) from None

    if (raw_version := tree.get("version", None)) is None:
        raise UDSParseError(url, "version", recv.text)
    return ".".join(raw_version.split(".")[:2])
