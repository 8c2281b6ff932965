from zeep.exceptions import Fault


class _ServerError(Exception):
    def __init__(self, server: str, *args: object) -> None:
        self.server = server
        super().__init__(*args)


class URLInvalidError(_ServerError):
    def __str__(self) -> str:
        return f"{self.server} is not a valid URL."


class UCMInvalidError(_ServerError):
    def __str__(self) -> str:
        return f"{self.server} is not a valid UCM server."


class UCMConnectionFailure(_ServerError):
    def __str__(self) -> str:
        return f"Could not connect to {self.server}, please check your connection or try again."


class UCMNotFoundError(_ServerError):
    def __str__(self) -> str:
        return f"Could not locate {self.server}, please check that the URL is correct."


class AXLInvalidCredentials(_ServerError):
    def __init__(self, server: str, username: str, *args: object) -> None:
        self.username = username
        super().__init__(server, *args)

    def __str__(self) -> str:
        return f"Credentials not accepted for {self.username} at {self.server}"


class AXLNotFoundError(UCMNotFoundError):
    def __str__(self) -> str:
        return f"Could not find AXL API at {self.server}, is the service activated?"


class AXLConnectionFailure(UCMConnectionFailure):
    pass


class UCMException(Exception):
    def __init__(self, err_cause=None, *args: object) -> None:
        self.err = err_cause
        super().__init__(*args)

    def __str__(self) -> str:
        if self.err is None:
            return "An unknown issue occured when trying to connect to UCM."
        else:
            return f"An error occured when trying to connect to UCM: {self.err}"


class AXLException(UCMException):
    def __str__(self) -> str:
        if self.err is None:
            return "An unknown issue occured when trying to connect to the AXL API."
        else:
            return f"An error occured when trying to connect to the AXL API: {self.err}"


class UDSConnectionError(_ServerError):
    def __str__(self) -> str:
        return f"Could not connect to CUCM UDS service at {self.server}"


class UDSParseError(Exception):
    def __init__(self, url: str, wanted: str, xml_text: str, *args: object) -> None:
        if "cucm-uds" in url:
            self.access_point = "cucm-uds" + url.split("cucm-uds")[-1]
        else:
            self.access_point = url
        self.wanted = wanted
        self.xml = xml_text
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Could not find '{self.wanted}' at {self.access_point}"


class UCMVersionInvalid(Exception):
    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__()

    def __str__(self) -> str:
        return (
            f"No AXL schema is available for CUCM {self.version}, "
            "pass wsdl= or use configs.set_wsdl_path()"
        )


#########################
# ==== CORE ERRORS ==== #
#########################


class AXLClassException(Exception):
    pass


class DumbProgrammerException(AXLClassException):
    pass


class InvalidArguments(AXLClassException):
    pass


class UnsupportedType(AXLClassException):
    def __init__(self, type_name: str, mode: str = "", *args: object) -> None:
        self.type_name = type_name
        self.mode = mode
        super().__init__(*args)

    def __str__(self) -> str:
        if self.mode:
            return f"Object type '{self.type_name}' is not supported for {self.mode}"
        return f"Object type '{self.type_name}' is not supported"


class MalformedReply(AXLClassException):
    def __init__(self, reason: str, reply: object = None, *args: object) -> None:
        self.reason = reason
        self.reply = reply
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Malformed SOAP reply: {self.reason}"


class MissingField(AXLClassException):
    def __init__(self, index: object, field: str, *args: object) -> None:
        self.index = index
        self.field = field
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Record {self.index} does not have a value for '{self.field}'"


class AmbiguousResult(AXLClassException):
    def __init__(self, procedure: str, count: int, *args: object) -> None:
        self.procedure = procedure
        self.count = count
        super().__init__(*args)

    def __str__(self) -> str:
        return f"{self.procedure} returned {self.count} results, not exactly 1 as expected"


class TransportFailure(Exception):
    """Raised when the SOAP transport could not complete a request (network, auth, protocol)."""

    def __init__(self, procedure: str, cause: object = None, *args: object) -> None:
        self.procedure = procedure
        self.cause = cause
        super().__init__(*args)

    def __str__(self) -> str:
        if self.cause is None:
            return f"{self.procedure} failed for an unknown reason"
        return f"{self.procedure} failed: {self.cause}"


class AXLFault(TransportFailure):
    """Exception that handles Zeep Fault exceptions so users don't have to import Fault from Zeep."""

    def __init__(self, procedure: str, zeep_fault: Fault, *args: object) -> None:
        self.message = zeep_fault.message
        self.subcodes = zeep_fault.subcodes
        self.actor = zeep_fault.actor
        self.code = zeep_fault.code
        self.detail = zeep_fault.detail
        super().__init__(procedure, zeep_fault, *args)

    def __str__(self) -> str:
        return f"{self.procedure} faulted: {self.message}"
