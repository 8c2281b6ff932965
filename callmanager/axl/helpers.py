from functools import wraps
from typing import Callable, TypeVar
from collections.abc import Mapping
import inspect
from zeep.helpers import serialize_object
from callmanager.axl.exceptions import UnsupportedType, DumbProgrammerException
from callmanager.axl.registry import get_object_type
from callmanager.utils import Empty


TCallable = TypeVar("TCallable", bound=Callable)

_MODES = {
    None: None,
    "name": "get_by_name",
    "pattern": "get_by_pattern",
}


"""Decorator that makes sure the func's `type_name` argument is a registered
object type before anything is sent to AXL. If `mode` is given, the type must
also support that kind of lookup:

- "name": get/update by name
- "pattern": get/update by pattern and route partition
"""


def check_type(mode: str = None):
    if mode not in _MODES:
        raise DumbProgrammerException(f"Unknown check_type mode '{mode}'")

    def check_type_decorator(func: TCallable) -> TCallable:
        signature = inspect.signature(func)
        if "type_name" not in signature.parameters:
            raise DumbProgrammerException(f"No 'type_name' param on {func.__name__}()")

        @wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind_partial(*args, **kwargs)
            type_name = bound.arguments.get("type_name", Empty)
            if type_name is Empty:
                raise UnsupportedType("", mode or "")

            obj_type = get_object_type(type_name)
            if mode is not None and not getattr(obj_type, _MODES[mode]):
                raise UnsupportedType(type_name, f"lookup by {mode}")
            return func(*args, **kwargs)

        wrapper.check = "type"
        wrapper.mode = mode
        return wrapper

    return check_type_decorator


"""Decorator that serializes Zeep objects returned by `func` into dicts."""


def serialize(func: TCallable) -> TCallable:
    @wraps(func)
    def wrapper(*args, **kwargs):
        r_value = func(*args, **kwargs)
        if r_value is None:
            return dict()
        elif isinstance(r_value, (Mapping, list, str)):
            return r_value
        else:
            return serialize_object(r_value, dict)

    return wrapper
