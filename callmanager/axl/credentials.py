"""AXL credentials and the default UCM server, kept in the OS keyring under `KEYRING_SERVICE`."""
import logging
from typing import Tuple
import keyring
import keyring.errors
from stdiomask import getpass
from callmanager.axl.configs import (
    DEFAULT_PORT,
    USERNAME_MAGIC_KEY,
    URL_MAGIC_KEY,
    PORT_MAGIC_KEY,
    WSDL_MAGIC_KEY,
)

log = logging.getLogger(__name__)

KEYRING_SERVICE = "callmanager-axl"


def _stored(key: str) -> str:
    return keyring.get_password(KEYRING_SERVICE, key) or ""


def _store(key: str, value: str) -> None:
    keyring.set_password(KEYRING_SERVICE, key, value)


def _forget(key: str) -> None:
    try:
        keyring.delete_password(KEYRING_SERVICE, key)
    except keyring.errors.PasswordDeleteError:
        log.debug(f"Nothing stored under '{key}' to delete")


# ==== CREDENTIALS ==== #


def get_credentials(enable_manual_entry=True) -> Tuple[str, str]:
    """Stored (username, password), asking for them when either is missing.

    :param enable_manual_entry: Prompt for credentials that aren't stored, defaults to True.
        With False, whatever is missing comes back as "".
    """
    username = _stored(USERNAME_MAGIC_KEY)
    password = _stored(username) if username else ""
    if (not username or not password) and enable_manual_entry:
        return credentials_from_input()
    return username, password


def credentials_from_input() -> Tuple[str, str]:
    username = input("CUCM username: ")
    password = getpass(prompt="CUCM password: ")
    write_credentials(username, password)
    log.info(f"Stored credentials for {username} in the system keyring")
    return username, password


def write_credentials(username: str, password: str) -> None:
    _store(USERNAME_MAGIC_KEY, username)
    _store(username, password)


def delete_credentials() -> None:
    if username := _stored(USERNAME_MAGIC_KEY):
        _forget(username)
        _forget(USERNAME_MAGIC_KEY)


# ==== SERVER ==== #


def get_server() -> Tuple[str, str]:
    """Stored (url, port). The url is "" when none is stored, the port falls back to DEFAULT_PORT"""
    return _stored(URL_MAGIC_KEY), _stored(PORT_MAGIC_KEY) or DEFAULT_PORT


def write_server(url: str, port=DEFAULT_PORT) -> None:
    _store(URL_MAGIC_KEY, url)
    _store(PORT_MAGIC_KEY, str(port))


def get_wsdl_path() -> str:
    """Stored path of the AXLAPI.wsdl to use for the server, "" if there is none"""
    return _stored(WSDL_MAGIC_KEY)


def write_wsdl_path(path: str) -> None:
    _store(WSDL_MAGIC_KEY, str(path))


def clear_server() -> None:
    for key in (URL_MAGIC_KEY, PORT_MAGIC_KEY, WSDL_MAGIC_KEY):
        _forget(key)
