from pathlib import Path
from callmanager.axl import Axl
from callmanager.axl.calls import CallLog
from callmanager.axl.credentials import (
    get_credentials,
    delete_credentials,
    get_server,
    write_server,
    get_wsdl_path,
    write_wsdl_path,
    clear_server,
)
from callmanager.axl.configs import DEFAULT_PORT
from callmanager.axl.exceptions import (
    URLInvalidError,
    UCMInvalidError,
    UCMConnectionFailure,
    UCMNotFoundError,
    UCMException,
    AXLInvalidCredentials,
    AXLNotFoundError,
    AXLConnectionFailure,
    AXLException,
    UDSConnectionError,
    UDSParseError,
    UCMVersionInvalid,
    InvalidArguments,
    UnsupportedType,
)
from termcolor import colored
import sys

# The server can't be used, ask for another
SERVER_EXCEPTIONS = (
    URLInvalidError,
    UCMInvalidError,
    UCMConnectionFailure,
    UCMNotFoundError,
    UCMException,
    AXLNotFoundError,
    AXLConnectionFailure,
    UDSConnectionError,
    UDSParseError,
)
# The server is fine, but there's no schema to talk to it with
SCHEMA_EXCEPTIONS = (UCMVersionInvalid, InvalidArguments)


def _server_from_input() -> tuple[str, str]:
    url = input(
        f"Please enter your CUCM URL (use ':[port]' if different than ':{DEFAULT_PORT}'): "
    )
    if ":" in url and (port := url.split(":")[-1]).isnumeric():
        return url.rsplit(":", 1)[0], port
    return url, DEFAULT_PORT


def _wsdl_from_input() -> str:
    while True:
        wsdl = Path(input("Path to AXLAPI.wsdl from the AXL Toolkit: ")).expanduser()
        if wsdl.is_file():
            return str(wsdl)
        print(f"No file found at '{wsdl}'")


def set_url_and_port() -> Axl:
    """Connects to the UCM server stored in the keyring, asking for anything
    that's missing or doesn't work. Whatever connected is stored for next time.
    """
    url, port = get_server()
    wsdl = get_wsdl_path() or None
    while True:
        if not url:
            url, port = _server_from_input()
        try:
            ucm = Axl(*get_credentials(), server=url, port=port, wsdl=wsdl)
        except SCHEMA_EXCEPTIONS as e:
            print(f"\n{e}")
            wsdl = _wsdl_from_input()
        except AXLInvalidCredentials as e:
            print(f"\n{e}, please enter them again.")
            delete_credentials()
        except SERVER_EXCEPTIONS as e:
            print(f"\n'{url}:{port}' didn't work ({type(e).__name__}).")
            if input("Want to try another? [y/n]: ").lower() != "y":
                raise AXLException("could not connect to UCM AXL service") from e
            url = ""
        else:
            write_server(url, port)
            if wsdl is not None:
                write_wsdl_path(wsdl)
            return ucm


def clear_url_and_port(quiet=False) -> None:
    clear_server()
    if not quiet:
        print("URL, port and WSDL path cleared")


def axl_connect() -> None:
    ucm = set_url_and_port()
    print(ucm.cucm, "AXL connection OK")


def print_call_log(calls: CallLog) -> None:
    for n, call in enumerate(calls):
        status = colored("FAILED", "red") if call.failed else colored("ok", "green")
        print(f"{n:>4} {colored(call.procedure, 'cyan')} {call.elapsed:.3f}s {status}")
    print(f"     {len(calls)} calls, {calls.total_time():.3f}s total")


def print_site() -> None:
    if len(sys.argv) < 2:
        print("USAGE: show_site [SITE] [TYPE] [TYPE] ...")
        return

    ucm = set_url_and_port()
    site, types = sys.argv[1], sys.argv[2:]
    if types:
        found = {}
        for type_name in types:
            try:
                found[type_name] = ucm.list_by_type_and_site(type_name, site)
            except UnsupportedType as e:
                print(f"[ERROR]({type_name}): {e}")
    else:
        found = ucm.all_of_site(site)

    for type_name, objects in found.items():
        print(colored(type_name, "cyan"), colored(f"({len(objects)})", "yellow"))
        for key, value in objects.items():
            print(f"  {colored(str(key), 'magenta')}: {value}")

    print("")
    print_call_log(ucm.soap_calls)
