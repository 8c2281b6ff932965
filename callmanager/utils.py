from typing import Any


class _EmptyType:
    """Sentinel for "no value given", where None is a legitimate value."""

    def __repr__(self) -> str:
        return "Empty"

    def __bool__(self) -> bool:
        return False


Empty = _EmptyType()


def lower_first(text: str) -> str:
    """Lower-cases only the first character (i.e. 'H323Gateway' -> 'h323Gateway')"""
    return text[:1].lower() + text[1:]


def reference_name(value: Any) -> Any:
    """AXL returns references to other objects as {'_value_1': name, 'uuid': ...}.
    Gives back the referenced name for those, or the value unchanged otherwise.
    """
    if isinstance(value, dict) and "_value_1" in value:
        return value["_value_1"]
    return value


def is_blank(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == []


_SECRET_SUFFIXES = ("password", "pin", "digestcredentials")
REDACTED = "********"


def _is_secret(field: Any) -> bool:
    return str(field).lower().endswith(_SECRET_SUFFIXES)


def redacted(value: Any) -> Any:
    """Copy of a request that's safe to log: any password or PIN field is masked"""
    if isinstance(value, dict):
        return {
            k: REDACTED if _is_secret(k) and v else redacted(v) for k, v in value.items()
        }
    elif isinstance(value, (list, tuple)):
        return [redacted(v) for v in value]
    return value
