from collections.abc import Mapping
from typing import Any
from copy import deepcopy
from callmanager.utils import reference_name

# Operations rather than values; there's nothing on the fetched object to compare them to
UPDATE_DIRECTIVES = ("addMembers", "removeMembers", "newName")


def _differs(current: Any, wanted: Any) -> bool:
    if isinstance(current, Mapping) and not isinstance(wanted, Mapping):
        current = reference_name(current)
    return current != wanted


def compute_update(canonical: Mapping, desired: Mapping, search_key: Mapping) -> dict:
    """Builds an update request that only carries what actually changed.

    AXL update requests replace every field they mention, so sending the whole
    record back risks clobbering values the caller never meant to touch.

    :param canonical: The object as currently stored in UCM
    :param desired: The caller's (partial) version of the object
    :param search_key: Field(s) identifying the object, i.e. {'name': ...}, {'uuid': ...}
        or {'pattern': ..., 'routePartitionName': ...}
    :return: The search key, every field of `canonical` that `desired` changes,
        and any update directives found in `desired`
    """
    request = dict(search_key)

    for field, current in canonical.items():
        if field in request:
            continue
        wanted = desired.get(field, None)
        if wanted is not None and _differs(current, wanted):
            request[field] = deepcopy(wanted)

    for directive in UPDATE_DIRECTIVES:
        if desired.get(directive, None) is not None:
            request[directive] = deepcopy(desired[directive])

    return request
