from pathlib import Path
from typing import Optional, Union

AXL_DIR: Path = Path(__file__).parent
DEFAULT_PORT: str = "8443"

USERNAME_MAGIC_KEY: str = "73q0eWFaIE2JJw8FMNeX"
URL_MAGIC_KEY: str = "8Cu16DGzNvunSsDNOTrO"
PORT_MAGIC_KEY: str = "xlGoVnofkKjNSgnwA9Z7"
WSDL_MAGIC_KEY: str = "Qm4TfA0zJrX8cHnWd2Ve"

TIMEOUT = 10
VERIFY_TLS = False
DISABLE_CALL_LOG = False
WSDL_PATH: Optional[Path] = None


def set_timeout(seconds: int) -> None:
    """Changes how long requests to UCM wait before giving up.

    Only affects transports created after this is called.
    """
    global TIMEOUT
    TIMEOUT = seconds


def verify_tls(state: bool) -> None:
    """Most UCM clusters run with self-signed certificates, so TLS verification is off by default.
    Run this with True to turn it back on for transports created afterwards.
    """
    global VERIFY_TLS
    VERIFY_TLS = state


def set_wsdl_path(path: Union[str, Path, None]) -> None:
    """Points new transports at an AXLAPI.wsdl (from the AXL Toolkit on your UCM's
    Plugins page) instead of a schema under `AXL_DIR / "schema" / <version>`.
    Pass None to go back to the version lookup.
    """
    global WSDL_PATH
    WSDL_PATH = None if path is None else Path(path).expanduser()


def turn_off_call_log() -> None:
    global DISABLE_CALL_LOG
    DISABLE_CALL_LOG = True
