"""The object types that the generic list/get/add/update/remove operations accept.

Every type maps onto a family of AXL elements named by convention
(``list<Type>``, ``get<Type>``, ``add<Type>``, ``update<Type>``,
``remove<Type>``). Anything special about a type is declared in its
``ObjectType`` entry instead of being branched on at call sites.
"""
from collections import namedtuple
from dataclasses import dataclass
from enum import Enum, unique
from callmanager.axl.exceptions import UnsupportedType
from callmanager.utils import lower_first


@unique
class APICall(Enum):
    GET = "get"
    ADD = "add"
    LIST = "list"
    UPDATE = "update"
    REMOVE = "remove"


@unique
class ListMode(Enum):
    SEARCH = "search"  # listX with a wildcard on search_field
    PHONE_TRAVERSAL = "phone_traversal"  # only reachable through owning phones
    DEVICE_POOL_FILTER = "device_pool_filter"  # list everything, filter locally
    UNSCOPED = "unscoped"  # not tied to a site


SearchCriteria = namedtuple(
    "SearchCriteria", ("search_field", "search_pattern", "return_field")
)


@dataclass(frozen=True)
class ObjectType:
    name: str
    search_field: str = "name"
    return_tags: tuple[str, ...] = ("name",)
    name_field: str = "name"
    get_by_name: bool = True
    get_by_pattern: bool = False
    list_mode: ListMode = ListMode.SEARCH

    @property
    def return_field(self) -> str:
        return self.return_tags[0]

    @property
    def wrapper_key(self) -> str:
        """Key that add requests nest their data under ('addCss' -> {'css': {...}})"""
        return lower_first(self.name)

    def procedure(self, action: APICall) -> str:
        return action.value + self.name

    def returned_tags(self) -> dict:
        return {tag: "" for tag in self.return_tags}


_PATTERN_TAGS = ("pattern",)
_PARTITION_SEARCH = "routePartitionName"
_POOL_SEARCH = "devicePoolName"

OBJECT_TYPES: dict[str, ObjectType] = {
    t.name: t
    for t in (
        ObjectType("DevicePool"),
        ObjectType("Srst"),
        ObjectType("RoutePartition"),
        ObjectType("Css"),
        ObjectType("Location"),
        ObjectType("Region"),
        ObjectType("CallManagerGroup"),
        ObjectType("ConferenceBridge"),
        ObjectType("Mtp"),
        ObjectType("MediaResourceGroup"),
        ObjectType("MediaResourceList"),
        ObjectType("H323Gateway", search_field=_POOL_SEARCH),
        ObjectType("RouteGroup"),
        ObjectType("RouteList"),
        ObjectType(
            "RoutePattern",
            search_field=_PARTITION_SEARCH,
            return_tags=("pattern", "routePartitionName"),
            get_by_pattern=True,
        ),
        ObjectType(
            "TransPattern",
            search_field=_PARTITION_SEARCH,
            return_tags=_PATTERN_TAGS,
            get_by_name=False,
            get_by_pattern=True,
        ),
        ObjectType("ApplicationDialRules"),
        ObjectType(
            "CallingPartyTransformationPattern",
            search_field=_PARTITION_SEARCH,
            return_tags=_PATTERN_TAGS,
        ),
        ObjectType(
            "CalledPartyTransformationPattern",
            search_field=_PARTITION_SEARCH,
            return_tags=_PATTERN_TAGS,
        ),
        ObjectType("DateTimeGroup"),
        ObjectType("Phone", search_field=_POOL_SEARCH),
        ObjectType(
            "Line",
            search_field="",
            return_tags=_PATTERN_TAGS,
            get_by_name=False,
            get_by_pattern=True,
            list_mode=ListMode.PHONE_TRAVERSAL,
        ),
        ObjectType("CtiRoutePoint", search_field=_POOL_SEARCH),
        ObjectType(
            "HuntPilot",
            search_field=_PARTITION_SEARCH,
            return_tags=_PATTERN_TAGS,
        ),
        ObjectType(
            "RemoteDestinationProfile",
            return_tags=(
                "name",
                "model",
                "callingSearchSpaceName",
                "devicePoolName",
                "userId",
            ),
            list_mode=ListMode.DEVICE_POOL_FILTER,
        ),
        ObjectType(
            "User",
            search_field="userid",
            return_tags=("userid", "firstName", "lastName"),
            name_field="userid",
            list_mode=ListMode.UNSCOPED,
        ),
    )
}

# Need to be asked for directly, never swept up by site
DIRECT_ONLY_TYPES = ("Phone", "Line")


def is_supported(type_name: str) -> bool:
    return isinstance(type_name, str) and type_name in OBJECT_TYPES


def get_object_type(type_name: str) -> ObjectType:
    try:
        return OBJECT_TYPES[type_name]
    except (KeyError, TypeError):
        raise UnsupportedType(str(type_name)) from None


def search_criteria_for(type_name: str, site: str) -> SearchCriteria:
    """Builds the site search for a type.

    :param type_name: Registered object type
    :param site: Site code, wrapped in SQL wildcards for the search
    :return: (field searched, wildcard pattern, field projected from the results)
    """
    obj_type = get_object_type(type_name)
    if obj_type.list_mode is not ListMode.SEARCH:
        raise UnsupportedType(type_name, "site search")
    return SearchCriteria(obj_type.search_field, f"%{site}%", obj_type.return_field)


def site_types() -> list[ObjectType]:
    """Types gathered when collecting everything that belongs to a site, in registry order"""
    return [
        t
        for t in OBJECT_TYPES.values()
        if t.name not in DIRECT_ONLY_TYPES and t.list_mode is not ListMode.UNSCOPED
    ]


# Step in DELETE_ORDER where device pools drop their references to
# media resource lists and local route groups
CLEAR_DEVICE_POOLS = "updateDevicePool"

# Children before parents, otherwise UCM refuses to remove objects still in use
DELETE_ORDER = (
    "RemoteDestinationProfile",
    "HuntPilot",
    "CtiRoutePoint",
    "CalledPartyTransformationPattern",
    "CallingPartyTransformationPattern",
    "ApplicationDialRules",
    "TransPattern",
    CLEAR_DEVICE_POOLS,
    "RouteGroup",
    "H323Gateway",
    "MediaResourceList",
    "MediaResourceGroup",
    "Mtp",
    "ConferenceBridge",
    "DevicePool",
    "CallManagerGroup",
    "Region",
    "Location",
    "Css",
    "RoutePartition",
    "Srst",
)
