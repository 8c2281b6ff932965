import logging
from logging.handlers import RotatingFileHandler
import re
import time
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable
import validators
import callmanager.axl.configs as cfg
import callmanager.configs as rootcfg
from callmanager.axl.calls import CallLog, CallRecord
from callmanager.axl.diff import compute_update
from callmanager.axl.exceptions import (
    AmbiguousResult,
    InvalidArguments,
    MissingField,
    UnsupportedType,
)
from callmanager.axl.helpers import check_type, serialize
from callmanager.axl.registry import (
    APICall,
    ListMode,
    ObjectType,
    OBJECT_TYPES,
    DELETE_ORDER,
    CLEAR_DEVICE_POOLS,
    get_object_type,
    search_criteria_for,
    site_types,
)
from callmanager.axl.replies import decode_ack, normalize_reply, phone_lines, project
from callmanager.axl.transport import AXLTransport, ZeepTransport
from callmanager.utils import redacted, reference_name

# LOGGING SETTINGS
logdir = rootcfg.LOG_DIR
if not logdir.is_dir():
    logdir.mkdir(exist_ok=True)
log = logging.getLogger(__name__)
log.setLevel(logging.DEBUG)
f_format = logging.Formatter(
    "%(asctime)s [%(levelname)s]:%(name)s:%(funcName)s - %(message)s"
)
s_format = logging.Formatter("[%(levelname)s]:%(name)s:%(funcName)s - %(message)s")
f_handler = RotatingFileHandler(
    rootcfg.LOG_DIR / f"{__name__}.log",
    maxBytes=(1024 * 1024 * 5),
    backupCount=3,
)
f_handler.setLevel(logging.DEBUG)
f_handler.setFormatter(f_format)
s_handler = logging.StreamHandler()
s_handler.setLevel(logging.WARNING)
s_handler.setFormatter(s_format)
log.addHandler(f_handler)
log.addHandler(s_handler)
log.info(f"----- NEW {__name__} SESSION -----")

SITE_POOL_PATTERN = re.compile(r"^DP_(\w+)")
STANDARD_LOCAL_ROUTE_GROUP = "Standard Local Route Group"


def _search_request(search: dict, returned: dict) -> dict:
    return {"searchCriteria": search, "returnedTags": returned}


class Axl:
    """A synchronous interface for the AXL API.

    Objects are handled generically by type name (see `callmanager.axl.registry`),
    i.e. `ucm.get_by_uuid(uuid, "DevicePool")` or `ucm.list_by_type_and_site("Css", "NYC")`.
    Every SOAP call made is kept in `soap_calls`.
    """

    def __init__(
        self,
        username: str = "",
        password: str = "",
        server: str = "",
        port=cfg.DEFAULT_PORT,
        *,
        version: str = None,
        wsdl: str = None,
        transport: AXLTransport = None,
    ) -> None:
        """Connect to your UCM's AXL server.

        :param username: A user with AXL permissions
        :param password: Password for the given user
        :param server: Base URL for your UCM server (i.e. 'ucm.company.com')
        :param port: Port on the server where UCM can be accessed, defaults to "8443"
        :param version: Optional, use only when there is an issue determining your UCM version, defaults to None
        :param wsdl: Optional path to an AXLAPI.wsdl to use instead of the bundled schema, defaults to None
        :param transport: Optional, an already connected transport. When given, nothing else is needed.
        """
        if transport is None:
            transport = ZeepTransport(
                username, password, server, port, version=version, wsdl=wsdl
            )
        self.transport = transport
        self.cucm = server
        self.soap_calls = CallLog()
        self._procedures = self._build_procedures()

    #################################
    # ==== TEMPLATES & HELPERS ==== #
    #################################

    def _build_procedures(self) -> dict[tuple[APICall, str], Callable[[dict], Any]]:
        """Every (action, type) pair mapped to the call for its AXL element, i.e. (LIST, 'Css') -> listCss"""
        return {
            (action, obj_type.name): partial(
                self._soap_call, obj_type.procedure(action)
            )
            for obj_type in OBJECT_TYPES.values()
            for action in APICall
        }

    def _procedure(self, action: APICall, type_name: str) -> Callable[[dict], Any]:
        try:
            return self._procedures[(action, type_name)]
        except KeyError:
            raise UnsupportedType(type_name, action.value) from None

    def _soap_call(self, procedure: str, request: dict) -> Any:
        """Sends `request` to the AXL element `procedure`, timing and recording the call
        whether it succeeds or not.

        :param procedure: AXL element to be called (i.e. 'listPhone')
        :param request: Fields added to the SOAP call
        :return: The unprocessed reply from the transport
        """
        log.info(f"Performing {procedure}")
        log.debug(f"{procedure} request: {redacted(request)}")
        start = time.perf_counter()
        try:
            reply = self.transport.invoke(procedure, request)
        except Exception as e:
            self._record_call(procedure, time.perf_counter() - start, request, e)
            log.exception(e)
            raise

        elapsed = time.perf_counter() - start
        self._record_call(procedure, elapsed, request, reply)
        log.info(f"{procedure} completed in {elapsed:.3f} sec")
        return reply

    def _record_call(self, procedure: str, elapsed: float, request: dict, reply: Any) -> None:
        if cfg.DISABLE_CALL_LOG:
            return
        self.soap_calls.append(CallRecord(procedure, elapsed, request, reply))

    def _list_records(self, procedure: str, search: dict, returned: dict) -> list[dict]:
        return normalize_reply(
            self._soap_call(procedure, _search_request(search, returned))
        )

    def _update(self, obj_type: ObjectType, canonical: dict, data: Mapping, key: dict) -> Any:
        request = compute_update(canonical, data, key)
        log.debug(f"Update calculated for {obj_type.name} {key}: {redacted(request)}")
        return decode_ack(self._procedure(APICall.UPDATE, obj_type.name)(request))

    ##################
    # ==== LIST ==== #
    ##################

    @check_type()
    def list_by_type_and_site(self, type_name: str, site: str) -> dict:
        """Finds every object of a type belonging to `site`.

        :param type_name: Registered object type (i.e. 'DevicePool', 'RoutePattern')
        :param site: Site code used in the wildcard search (i.e. 'NYC' -> '%NYC%')
        :return: {uuid: name} (or pattern, for pattern types)
        """
        obj_type = get_object_type(type_name)
        if obj_type.list_mode is ListMode.PHONE_TRAVERSAL:
            return self.lines_of_site(site)
        elif obj_type.list_mode is ListMode.DEVICE_POOL_FILTER:
            return self.remote_destination_profiles_of_site(site)

        criteria = search_criteria_for(type_name, site)
        request = _search_request(
            {criteria.search_field: criteria.search_pattern},
            obj_type.returned_tags(),
        )
        reply = self._procedure(APICall.LIST, type_name)(request)
        return project(normalize_reply(reply), criteria.return_field)

    #################
    # ==== GET ==== #
    #################

    @check_type("name")
    def get_by_name(self, name: str, type_name: str) -> dict:
        """Gets the full record of the one object called `name`.

        :raises AmbiguousResult: if anything other than exactly one object comes back
        """
        obj_type = get_object_type(type_name)
        reply = self._procedure(APICall.GET, type_name)({obj_type.name_field: name})
        records = normalize_reply(reply)
        if len(records) != 1:
            raise AmbiguousResult(obj_type.procedure(APICall.GET), len(records))
        return records[0]

    @check_type()
    def get_by_uuid(self, uuid: str, type_name: str) -> dict:
        reply = self._procedure(APICall.GET, type_name)({"uuid": uuid})
        records = normalize_reply(reply)
        return records[0] if records else {}

    @check_type("pattern")
    def get_by_pattern_and_partition(
        self, pattern: str, partition: str, type_name: str
    ) -> dict:
        reply = self._procedure(APICall.GET, type_name)(
            {"pattern": pattern, "routePartitionName": partition}
        )
        records = normalize_reply(reply)
        return records[0] if records else {}

    #################
    # ==== ADD ==== #
    #################

    @check_type()
    def add_by_record(self, data: Mapping, type_name: str) -> Any:
        """Adds a new object. `data` is sent as-is, so it has to be complete for the type.

        :return: The acknowledgement from UCM, usually the new object's UUID
        """
        obj_type = get_object_type(type_name)
        reply = self._procedure(APICall.ADD, type_name)({obj_type.wrapper_key: data})
        return decode_ack(reply)

    ####################
    # ==== UPDATE ==== #
    ####################

    @check_type("name")
    def update_by_record(self, data: Mapping, type_name: str) -> Any:
        """Updates the object named in `data`, only sending the fields that changed.

        'addMembers', 'removeMembers' and 'newName' in `data` are always sent.
        """
        obj_type = get_object_type(type_name)
        name_field = obj_type.name_field
        if not (name := data.get(name_field, None)):
            raise InvalidArguments(f"Data does not contain a valid {name_field} to update")

        canonical = self.get_by_name(name, type_name)
        return self._update(obj_type, canonical, data, {name_field: name})

    @check_type()
    def update_by_uuid(self, data: Mapping, type_name: str) -> Any:
        obj_type = get_object_type(type_name)
        if not (uuid := data.get("uuid", None)):
            raise InvalidArguments("Data does not contain a valid uuid to update")

        canonical = self.get_by_uuid(uuid, type_name)
        return self._update(obj_type, canonical, data, {"uuid": uuid})

    @check_type("pattern")
    def update_by_pattern_and_partition(self, data: Mapping, type_name: str) -> Any:
        obj_type = get_object_type(type_name)
        if not (pattern := data.get("pattern", None)):
            raise InvalidArguments("No pattern set")
        if not (partition := data.get("routePartitionName", None)):
            raise InvalidArguments("No routePartitionName set")

        canonical = self.get_by_pattern_and_partition(pattern, partition, type_name)
        return self._update(
            obj_type,
            canonical,
            data,
            {"pattern": pattern, "routePartitionName": partition},
        )

    ####################
    # ==== REMOVE ==== #
    ####################

    # Removing by name is not supported on purpose: names aren't guaranteed to be
    # unique, and removing the wrong object can't be undone.
    @check_type()
    @serialize
    def delete_by_uuid(self, uuid: str, type_name: str) -> dict:
        return self._procedure(APICall.REMOVE, type_name)({"uuid": uuid})

    ###################
    # ==== SITES ==== #
    ###################

    def lines_of_site(self, site: str) -> dict:
        """Lines have no site to search by, so they're found through the phones
        in the site's device pools.

        :return: {line uuid: pattern}
        """
        lines = {}
        phones = self.list_by_type_and_site("Phone", site)
        for phone_uuid in phones:
            phone = self.get_by_uuid(phone_uuid, "Phone")
            for line in phone_lines(phone):
                dirn = line.get("dirn", None)
                if not isinstance(dirn, Mapping):
                    continue
                if dirn.get("pattern", None) and dirn.get("uuid", None):
                    lines[dirn["uuid"]] = dirn["pattern"]
        return lines

    def remote_destination_profiles_of_site(self, site: str) -> dict:
        """Remote destination profiles can't be searched by device pool, so all of them
        are listed and only the ones in a device pool containing `site` are kept.
        """
        obj_type = get_object_type("RemoteDestinationProfile")
        records = self._list_records(
            obj_type.procedure(APICall.LIST), {"name": "%"}, obj_type.returned_tags()
        )
        matched = [
            r
            for r in records
            if site in str(reference_name(r.get("devicePoolName", None)) or "")
        ]
        return project(matched, obj_type.return_field)

    def all_of_site(self, site: str) -> dict[str, dict]:
        """Lists every type of object for a site. A type that fails to list comes
        back empty instead of stopping the rest.

        :return: {type name: {uuid: name}}
        """
        results: dict[str, dict] = {}
        for obj_type in site_types():
            try:
                results[obj_type.name] = self.list_by_type_and_site(obj_type.name, site)
            except Exception as e:
                log.warning(f"Could not list {obj_type.name} for site '{site}': {e}")
                results[obj_type.name] = {}
        return results

    def all_detailed_of_site(self, site: str) -> dict[str, dict]:
        """Same as `all_of_site`, but with the full record of every object.

        :return: {type name: {uuid: record}}
        """
        results: dict[str, dict] = {}
        for obj_type in site_types():
            try:
                found = self.list_by_type_and_site(obj_type.name, site)
                results[obj_type.name] = {
                    uuid: self.get_by_uuid(uuid, obj_type.name) for uuid in found
                }
            except Exception as e:
                log.warning(
                    f"Could not get {obj_type.name} details for site '{site}': {e}"
                )
                results[obj_type.name] = {}
        return results

    def delete_all_of_site(self, site: str) -> dict[str, dict]:
        """Removes everything belonging to a site, children before parents.
        Device pools have their media resource list and local route group cleared
        before anything they point at is removed.

        :return: {type name: {uuid: acknowledgement or error message}}
        """
        objects = self.all_of_site(site)
        result: dict[str, dict] = {}

        for step in DELETE_ORDER:
            if step == CLEAR_DEVICE_POOLS:
                for uuid in objects.get("DevicePool", {}):
                    try:
                        ack = self._clear_device_pool(uuid)
                    except Exception as e:
                        log.warning(f"Could not clear device pool {uuid}: {e}")
                        ack = f"Error updating object! {e}"
                    result.setdefault(step, {})[uuid] = ack
                continue

            for uuid, name in objects.get(step, {}).items():
                log.info(f"Removing {step} '{name}' ({uuid})")
                try:
                    ack = self.delete_by_uuid(uuid, step)
                except Exception as e:
                    log.warning(f"Could not remove {step} '{name}' ({uuid}): {e}")
                    ack = f"Error deleting object! {e}"
                result.setdefault(step, {})[uuid] = ack

        return result

    def _clear_device_pool(self, uuid: str) -> Any:
        request = {
            "uuid": uuid,
            "mediaResourceListName": "",
            "localRouteGroup": {"name": STANDARD_LOCAL_ROUTE_GROUP, "value": ""},
        }
        return decode_ack(self._procedure(APICall.UPDATE, "DevicePool")(request))

    ####################
    # ==== PHONES ==== #
    ####################

    def get_phone_names(self) -> dict:
        records = self._list_records("listPhone", {"devicePoolName": "%"}, {"name": ""})
        return project(records, "name")

    def list_phones_summary_by_site(self, site: str) -> list[dict]:
        return self._list_records(
            "listPhone",
            {"devicePoolName": f"%{site}%"},
            {
                "name": "",
                "description": "",
                "product": "",
                "callingSearchSpaceName": "",
                "devicePoolName": "",
                "locationName": "",
                "ownerUserName": "",
            },
        )

    def get_directory_numbers_by_name(self, phone_name: str) -> dict:
        """Dial patterns of every line on the phone called `phone_name`"""
        phone = self.get_by_name(phone_name, "Phone")
        if not isinstance(phone.get("lines", None), Mapping):
            raise MissingField(phone_name, "lines")
        dirns = project(phone_lines(phone), "dirn")
        return project(list(dirns.values()), "pattern")

    def lines_of_phone(self, phone_name: str) -> dict:
        """Full records of every line on the phone called `phone_name`, by line uuid"""
        phone = self.get_by_name(phone_name, "Phone")
        lines = {}
        for line in phone_lines(phone):
            dirn = line.get("dirn", None)
            if not isinstance(dirn, Mapping):
                continue
            if dirn.get("pattern", None) and (uuid := dirn.get("uuid", None)):
                lines[uuid] = self.get_by_uuid(uuid, "Line")
        return lines

    ##########################
    # ==== DEVICE POOLS ==== #
    ##########################

    def get_device_pool_names(self) -> dict:
        records = self._list_records("listDevicePool", {"name": "%"}, {"name": ""})
        return project(records, "name")

    def get_site_names(self) -> list[str]:
        """Site codes from every device pool following the 'DP_<SITE>' convention"""
        sites = []
        for pool in self.get_device_pool_names().values():
            if (match := SITE_POOL_PATTERN.match(pool)) is not None:
                sites.append(match.group(1))
            else:
                log.debug(f"Device pool '{pool}' is not named after a site")
        return sites

    ########################
    # ==== ROUTE PLAN ==== #
    ########################

    def get_route_plan(self, pattern: str, partition="%") -> list[dict]:
        return self._list_records(
            "listRoutePlan",
            {"dnOrPattern": pattern, "partition": partition},
            {"dnOrPattern": "", "partition": "", "type": "", "routeDetail": ""},
        )

    ##############################
    # ==== USERS & PROFILES ==== #
    ##############################

    def get_all_users(self) -> list[dict]:
        return self._list_records(
            "listUser",
            {"userid": "%"},
            {"firstName": "", "lastName": "", "userid": "", "primaryExtension": ""},
        )

    def get_remote_destination_profiles(self) -> dict:
        obj_type = get_object_type("RemoteDestinationProfile")
        records = self._list_records(
            obj_type.procedure(APICall.LIST), {"name": "%"}, obj_type.returned_tags()
        )
        return project(records, obj_type.return_field)

    ##################
    # ==== LDAP ==== #
    ##################

    @serialize
    def do_ldap_sync(self, name: str, sync: bool) -> dict:
        """Starts (`sync`=True) or stops (`sync`=False) a sync of the LDAP directory called `name`"""
        return self._soap_call("doLdapSync", {"name": name, "sync": sync})

    @serialize
    def get_ldap_sync_status(self, name: str) -> dict:
        return self._soap_call("getLdapSyncStatus", {"name": name})

    ##################
    # ==== SRST ==== #
    ##################

    def add_srst_router(self, site: str, ip: str) -> Any:
        """Adds an SRST router named 'SRST_<site>' at `ip`"""
        if not site:
            raise InvalidArguments(f"Site name provided '{site}' is not valid")
        if validators.ipv4(ip) is not True:
            raise InvalidArguments(f"IP address provided '{ip}' is not valid")

        return self.add_by_record(
            {
                "name": f"SRST_{site}",
                "ipAddress": ip,
                "port": 2000,
                "SipPort": 5060,
            },
            "Srst",
        )
