from collections.abc import Mapping
from typing import Any, Iterable, Union
from copy import deepcopy
from zeep.helpers import serialize_object
from callmanager.axl.exceptions import MalformedReply, MissingField
from callmanager.utils import is_blank


def _to_plain(value: Any) -> Any:
    """Deep copy of a reply value as plain dicts/lists/scalars, order preserved"""
    if isinstance(value, Mapping):
        return {k: _to_plain(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    else:
        return deepcopy(value)


def _serialized(reply: Any) -> Any:
    if reply is None or isinstance(reply, (Mapping, list, str, int, float, bool)):
        return reply
    return serialize_object(reply, dict)


def normalize_reply(reply: Any) -> list[dict]:
    """Turns a SOAP reply into a list of records, no matter how many results came back.

    AXL collapses a single result into a bare element instead of a one-item list,
    so `{'return': {'phone': {...}}}` and `{'return': {'phone': [{...}, {...}]}}`
    both have to come out as lists.

    :param reply: The reply from the transport, as a Zeep object or a mapping
    :raises MalformedReply: when the reply isn't structured or has no 'return'
    :return: The records under 'return', in the order they were received
    """
    data = _serialized(reply)
    if not isinstance(data, Mapping):
        raise MalformedReply("reply is not a structured object", reply)
    if "return" not in data:
        raise MalformedReply("reply does not have a 'return' field", reply)

    returned = data["return"]
    if returned is None:
        return []
    if not isinstance(returned, Mapping):
        raise MalformedReply("'return' does not wrap any elements", reply)
    if not returned:
        return []

    # there is only ever one element under 'return' (i.e. 'phone', 'devicePool')
    result = next(iter(returned.values()))
    if result is None:
        return []
    elif isinstance(result, Mapping):
        return [_to_plain(result)]
    elif isinstance(result, (list, tuple)):
        return [_to_plain(r) for r in result if r is not None]
    else:
        raise MalformedReply("'return' element is not a record or list of records", reply)


def decode_ack(reply: Any) -> Any:
    """Pulls the acknowledgement out of an add/update/remove reply (usually the affected UUID)"""
    data = _serialized(reply)
    if not isinstance(data, Mapping):
        raise MalformedReply("reply is not a structured object", reply)
    if "return" not in data:
        raise MalformedReply("reply does not have a 'return' field", reply)
    return _to_plain(data["return"])


def project(
    records: Iterable[Mapping], field: str, strict: bool = True
) -> dict[Union[str, int], Any]:
    """Reduces records down to the values of one field.

    Records with a UUID are keyed by it. The rest get the next unused integer key.

    :param records: Normalized records
    :param field: Name of the field to keep
    :param strict: Raise on records missing `field` if True, skip them if False
    :raises MissingField: when `strict` and a record has no value for `field`
    """
    projected: dict[Union[str, int], Any] = {}
    next_index = 0
    for i, record in enumerate(records):
        value = record.get(field, None) if isinstance(record, Mapping) else None
        if is_blank(value):
            if strict:
                raise MissingField(i, field)
            continue

        uuid = record.get("uuid", None)
        if uuid:
            projected[uuid] = value
        else:
            while next_index in projected:
                next_index += 1
            projected[next_index] = value
            next_index += 1
    return projected


def phone_lines(phone: Mapping) -> list[dict]:
    """The line entries of a phone record.

    A phone's lines come back as {'line': {...}} with one line or
    {'line': [{...}, ...]} with several, or None with none at all.
    """
    lines = phone.get("lines", None) if isinstance(phone, Mapping) else None
    if not isinstance(lines, Mapping):
        return []

    entries = lines.get("line", None)
    if isinstance(entries, Mapping):
        return [entries]
    elif isinstance(entries, (list, tuple)):
        return [e for e in entries if isinstance(e, Mapping)]
    else:
        return []
