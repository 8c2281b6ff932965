from callmanager.axl.axl import Axl
from callmanager.axl.credentials import get_credentials
from callmanager.axl.transport import AXLTransport, ZeepTransport
