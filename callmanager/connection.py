import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth
from urllib.parse import urlparse
from urllib3.util.retry import Retry
import urllib3
import callmanager.axl.configs as cfg

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

USER_AGENT = "callmanager-axl (python-requests)"

# get_status_code results when no HTTP answer came back
UNREACHABLE = -1
TIMED_OUT = 0


def ucm_session(username="", password="", retries=True) -> requests.Session:
    """A session for talking to UCM. TLS verification follows `configs.VERIFY_TLS`.

    :param username: HTTP basic auth user, no auth if both this and `password` are empty
    :param password: HTTP basic auth password
    :param retries: Retry failed connections, defaults to True. The AXL transport
        turns this off so every SOAP request is sent exactly once.
    """
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    s.verify = cfg.VERIFY_TLS
    if username or password:
        s.auth = HTTPBasicAuth(username, password)
    if retries:
        adapter = HTTPAdapter(
            max_retries=Retry(total=5, connect=3, read=3, status=3, backoff_factor=0.1)
        )
        s.mount("https://", adapter)
        s.mount("http://", adapter)
    return s


def ucm_url(server: str, port="", path="") -> str:
    """Builds a full URL out of whatever the user gave as their server,
    i.e. ('ucm.company.com', '8443', '/axl/') -> 'https://ucm.company.com:8443/axl/'
    """
    if not server.startswith(("http://", "https://")):
        server = "https://" + server

    parts = urlparse(server)
    url = f"{parts.scheme}://{parts.netloc}"
    if port:
        url += f":{port}"
    if path:
        return url + parts.path.rstrip("/") + path
    return url + parts.path


def get_status_code(url: str, username="", password="") -> int:
    """HTTP status of a GET on `url`, waiting up to `configs.TIMEOUT` seconds.

    :return: The status code, TIMED_OUT if the server never answered in time,
        or UNREACHABLE if it couldn't be connected to at all
    """
    try:
        with ucm_session(username, password) as s:
            return s.get(url, stream=True, timeout=cfg.TIMEOUT).status_code
    except requests.Timeout:
        return TIMED_OUT
    except requests.RequestException:
        return UNREACHABLE
