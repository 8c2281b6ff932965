from callmanager.axl import Axl, get_credentials
