"""Classifies JSON-like values into the primitive kinds a schema can name.

The registry answers ``test_type(instance, name)`` for the built-in names
(string, number, integer, boolean, array, object, null, date, any) and for
custom names registered at runtime. Schema-valued types are handled by the
orchestrator because they need a full recursive validation.
"""

import datetime
import logging
import math
from typing import Any, Callable, Dict, Mapping

logger = logging.getLogger(__name__)


class _Undefined:
    """Marker for an absent value (a missing key or array slot)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'UNDEFINED'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNDEFINED = _Undefined()

TypePredicate = Callable[[Any], bool]


def is_undefined(value: Any) -> bool:
    """Returns True when the value is the absent marker."""
    return value is UNDEFINED


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))


def is_integer(value: Any) -> bool:
    if not is_number(value):
        return False
    return isinstance(value, int) or float(value).is_integer()


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_date(value: Any) -> bool:
    return isinstance(value, (datetime.date, datetime.datetime))


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_null(value: Any) -> bool:
    return value is None


def is_any(value: Any) -> bool:
    return value is not UNDEFINED


class TypeRegistry:
    """Name to predicate table used by the ``type`` and ``disallow`` keywords."""

    def __init__(self) -> None:
        self.types: Dict[str, TypePredicate] = {
            'string': is_string,
            'number': is_number,
            'integer': is_integer,
            'boolean': is_boolean,
            'array': is_array,
            'object': is_object,
            'null': is_null,
            'date': is_date,
            'any': is_any,
        }

    def add_type(self, name: str, predicate: TypePredicate) -> None:
        """Registers a custom type name.

        Args:
            name: The type name as it appears in a schema's ``type`` keyword
            predicate: Callable returning True when a value is of that type
        """
        if not callable(predicate):
            raise TypeError(f"Type predicate for '{name}' must be callable")
        logger.debug("Registering type '%s'", name)
        self.types[name] = predicate

    def has_type(self, name: str) -> bool:
        return name in self.types

    def test_type(self, instance: Any, name: str) -> bool:
        """Tests an instance against a named type.

        Unknown type names place no constraint on the instance.
        """
        predicate = self.types.get(name)
        if predicate is None:
            return True
        return bool(predicate(instance))
