"""Named string formats for the ``format`` keyword.

Each format is either a compiled regular expression or a predicate. A
predicate may return a string instead of False to supply its own error
message.
"""

import ipaddress
import logging
import math
import re
from typing import Any, Callable, Dict, Union

from jsonvalidator.helpers import SchemaError

logger = logging.getLogger(__name__)

FormatHandler = Union[re.Pattern, Callable[[str], Any]]
FormatCheck = Union[bool, re.Pattern, str]

_OCTET = r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)'
_RGB_NUMBER = r'\s*\b(?:[0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])\b\s*'
_RGB_PERCENT = r'\s*(?:\d?\d%|100%)+\s*'

DATE_TIME_PATTERN = re.compile(
    r'^\d{4}-(?:0[0-9]|1[0-2])-(?:3[01]|0[1-9]|[12][0-9])[tT ]'
    r'(?:2[0-4]|[01][0-9]):(?:[0-5][0-9]):(?:60|[0-5][0-9])(?:\.\d+)?'
    r'(?:[zZ]|[+-](?:[0-5][0-9]):(?:60|[0-5][0-9]))$'
)
DATE_PATTERN = re.compile(r'^\d{4}-(?:0[0-9]|1[0-2])-(?:3[01]|0[1-9]|[12][0-9])$')
TIME_PATTERN = re.compile(r'^(?:2[0-4]|[01][0-9]):(?:[0-5][0-9]):(?:60|[0-5][0-9])$')
IP_ADDRESS_PATTERN = re.compile(rf'^(?:{_OCTET}\.){{3}}{_OCTET}$')
URI_PATTERN = re.compile(r'^[a-zA-Z][a-zA-Z0-9+\-.]*:[^\s]*$')
COLOR_PATTERN = re.compile(
    r'^(?:#?(?:[0-9A-Fa-f]{3}){1,2}\b'
    r'|aqua|black|blue|fuchsia|gray|green|lime|maroon|navy|olive|orange|purple|red|silver|teal|white|yellow'
    rf'|rgb\({_RGB_NUMBER},{_RGB_NUMBER},{_RGB_NUMBER}\)'
    rf'|rgb\({_RGB_PERCENT},{_RGB_PERCENT},{_RGB_PERCENT}\))$'
)
HOST_NAME_PATTERN = re.compile(
    r'^(?:(?:[a-zA-Z]|[a-zA-Z][a-zA-Z0-9\-]*[a-zA-Z0-9])\.)*'
    r'(?:[A-Za-z]|[A-Za-z][A-Za-z0-9\-]*[A-Za-z0-9])$'
)
ALPHA_PATTERN = re.compile(r'^[a-zA-Z]+$')
ALPHA_NUMERIC_PATTERN = re.compile(r'^[a-zA-Z0-9]+$')
EMAIL_PATTERN = re.compile(
    r"^(?:[\w!#$%&'*+\-/=?^`{|}~]+\.)*[\w!#$%&'*+\-/=?^`{|}~]+@"
    r"(?:(?:(?:[a-zA-Z0-9](?:[a-zA-Z0-9\-](?!\.)){0,61}[a-zA-Z0-9]?\.)+"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9\-](?!$)){0,61}[a-zA-Z0-9]?)"
    rf"|(?:\[(?:{_OCTET}\.){{3}}{_OCTET}\]))$"
)
PHONE_PATTERN = re.compile(r'^\+(?:[0-9] ?){6,14}[0-9]$')


def is_ipv6(text: str) -> bool:
    try:
        ipaddress.IPv6Address(text.strip())
    except ValueError:
        return False
    return True


def is_utc_millisec(text: str) -> bool:
    try:
        value = float(text)
    except ValueError:
        return False
    return math.isfinite(value) and value.is_integer()


def is_regex(text: str) -> bool:
    try:
        re.compile(text)
    except re.error:
        return False
    return True


class FormatRegistry:
    """Table of named formats owned by a validator.

    A new registry comes with the built-in formats. It is extended only through
    ``add_format`` and is not synchronized: configure it before sharing a
    validator between threads.
    """

    def __init__(self) -> None:
        self.formats: Dict[str, FormatHandler] = {
            'date-time': DATE_TIME_PATTERN,
            'date': DATE_PATTERN,
            'time': TIME_PATTERN,
            'ip-address': IP_ADDRESS_PATTERN,
            'ipv4': IP_ADDRESS_PATTERN,
            'ipv6': is_ipv6,
            'uri': URI_PATTERN,
            'color': COLOR_PATTERN,
            'host-name': HOST_NAME_PATTERN,
            'hostname': HOST_NAME_PATTERN,
            'alpha': ALPHA_PATTERN,
            'alpha-numeric': ALPHA_NUMERIC_PATTERN,
            'alphanumeric': ALPHA_NUMERIC_PATTERN,
            'utc-millisec': is_utc_millisec,
            'email': EMAIL_PATTERN,
            'regex': is_regex,
            'phone': PHONE_PATTERN,
        }

    def add_format(self, name: str, handler: Union[str, FormatHandler]) -> None:
        """Registers a named format.

        Args:
            name: The format name used in a schema's ``format`` keyword
            handler: A regular expression (compiled or source string) or a
                predicate taking the stringified instance
        """
        if isinstance(handler, str):
            handler = re.compile(handler)
        elif not isinstance(handler, re.Pattern) and not callable(handler):
            raise TypeError(f"Format '{name}' must be a regular expression or a callable")
        logger.debug("Registering format '%s'", name)
        self.formats[name] = handler

    def has_format(self, name: str) -> bool:
        return name in self.formats

    def is_format(self, text: str, name: str) -> FormatCheck:
        """Checks a string against a named format.

        Returns:
            True when the string conforms. Otherwise False, the failing
            pattern, or a message supplied by a predicate.

        Raises:
            SchemaError: If no format of that name is registered
        """
        handler = self.formats.get(name)
        if handler is None:
            raise SchemaError(f"Unknown format '{name}'")
        if isinstance(handler, re.Pattern):
            return True if handler.search(text) else handler
        outcome = handler(text)
        if isinstance(outcome, str):
            return outcome or False
        return bool(outcome)
