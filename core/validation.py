"""Input validation for endpoints and model preferences."""

from __future__ import annotations

import ipaddress
import re
from typing import Optional

from core.constants import CONTEXT_SIZE_OPTIONS, MAX_PORT, MIN_PORT
from core.errors import InvalidInputError


_HOSTNAME_LABEL = re.compile(r"^[a-zA-Z0-9-]+$")


def parse_port(value: object) -> int:
    """
    Parse a port from an int or a numeric string.

    Raises:
        InvalidInputError: If the value is not an integer in 1-65535.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid port: {value!r}")
    if isinstance(value, int):
        port = value
    elif isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidInputError(f"Invalid port: {value!r}")
        port = int(text)
    else:
        raise InvalidInputError(f"Invalid port: {value!r}")

    if port < MIN_PORT or port > MAX_PORT:
        raise InvalidInputError(f"Port must be between {MIN_PORT} and {MAX_PORT}")
    return port


def is_valid_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def is_valid_ipv6(value: str) -> bool:
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def is_valid_hostname(value: str) -> bool:
    """Check DNS hostname syntax: 1-253 chars, labels of 1-63 alnum/hyphen chars."""
    if not value or len(value) > 253:
        return False
    for label in value.split("."):
        if not label or len(label) > 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not _HOSTNAME_LABEL.match(label):
            return False
    return True


def is_valid_hostname_or_ip(value: str) -> bool:
    return is_valid_ipv4(value) or is_valid_ipv6(value) or is_valid_hostname(value)


def parse_hostname(value: object) -> str:
    """
    Normalize and validate a hostname or IP literal.

    Raises:
        InvalidInputError: If the value is empty or malformed.
    """
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid hostname: {value!r}")
    hostname = value.strip()
    if not hostname:
        raise InvalidInputError("Hostname cannot be empty")
    if not is_valid_hostname_or_ip(hostname):
        raise InvalidInputError("Invalid hostname or IP address format")
    return hostname


def parse_context_size(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Invalid context size: {value!r}")
    if value not in CONTEXT_SIZE_OPTIONS:
        raise InvalidInputError(
            f"Context size must be one of {', '.join(str(v) for v in CONTEXT_SIZE_OPTIONS)}"
        )
    return value


def parse_model_name(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("Model name cannot be empty")
    return value.strip()


def validate_server_configuration(hostname: str, port: int) -> Optional[str]:
    """Return a user-facing message describing what is wrong, or None if valid."""
    if not hostname:
        return "Hostname cannot be empty"
    if isinstance(port, bool) or not isinstance(port, int) or port < MIN_PORT or port > MAX_PORT:
        return f"Port must be between {MIN_PORT} and {MAX_PORT}"
    if not is_valid_hostname_or_ip(hostname):
        return "Invalid hostname or IP address format"
    return None
