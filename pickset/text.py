"""Helpers for parsing and manipulating text.

Address extraction works in two passes: a permissive pattern finds candidate
tokens in free text, then the standard ``ipaddress`` module decides which
candidates are real addresses or networks.
"""

import ipaddress
import re
import secrets
from collections.abc import Iterable
from datetime import datetime, timezone, tzinfo
from typing import overload

from dateutil import tz

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

_IPV4 = r"\d{1,3}(?:\.\d{1,3}){3}"
_IPV4_ADDRESS = re.compile(rf"(?<![\d.]){_IPV4}(?!\d|\.\d)")
_IPV4_CIDR = re.compile(rf"(?<![\d.]){_IPV4}/\d{{1,2}}(?!\d)")

# Hex groups separated by colons, optionally ending in an embedded IPv4
# address. Neighbouring word characters or colons disqualify a candidate, so
# "std::vector" and "12:30:45pm" are never considered.
_IPV6 = rf"(?:[0-9A-F]{{0,4}}:){{2,8}}(?:{_IPV4}|[0-9A-F]{{1,4}})?"
_IPV6_ADDRESS = re.compile(rf"(?<![\w:.]){_IPV6}(?![\w:])", re.IGNORECASE)
_IPV6_CIDR = re.compile(rf"(?<![\w:.]){_IPV6}/\d{{1,3}}(?![\w:])", re.IGNORECASE)


def bytes_to_human(num_bytes: int, precision: int = 2, power: int = 1024) -> str:
    """
    Convert a byte count into an approximate human-friendly size.

    The unit is chosen from the number of decimal digits in ``num_bytes``,
    then the count is divided by the matching power of ``power``.

    Args:
        num_bytes: Number of bytes
        precision: Decimal places in the result
        power: 1024 (binary multiples) or 1000 (decimal multiples)

    Returns:
        Size string such as "462.73KB"

    Raises:
        ValueError: If power is not 1024 or 1000

    Example:
        >>> bytes_to_human(473832)
        '462.73KB'
        >>> bytes_to_human(473832, precision=1, power=1000)
        '473.8KB'
    """
    if power not in (1024, 1000):
        raise ValueError(f"Invalid power {power}; use 1024 or 1000")

    factor = min((len(str(abs(num_bytes))) - 1) // 3, len(_SIZE_UNITS) - 1)
    return f"{num_bytes / power**factor:.{precision}f}{_SIZE_UNITS[factor]}"


def _valid_ipv4(candidate: str) -> bool:
    try:
        ipaddress.IPv4Network(candidate, strict=False)
    except ValueError:
        return False
    return True


def _valid_ipv6(candidate: str) -> bool:
    try:
        ipaddress.IPv6Network(candidate, strict=False)
    except ValueError:
        return False
    return True


def extract_cidrs(text: str) -> list[str]:
    """
    Extract IPv4 CIDR blocks from ``text``, in order of appearance.

    Only fully-qualified blocks match: "10.0.0.0/8" is found, "10/8" and
    "10.0/16" are not.
    """
    return [m for m in _IPV4_CIDR.findall(text) if _valid_ipv4(m)]


def extract_cidrs6(text: str) -> list[str]:
    """Extract IPv6 CIDR blocks such as "2001:db8::/32" from ``text``."""
    return [m for m in _IPV6_CIDR.findall(text) if _valid_ipv6(m)]


def extract_ips(text: str) -> list[str]:
    """Extract IPv4 addresses from ``text``, in order of appearance."""
    return [m for m in _IPV4_ADDRESS.findall(text) if _valid_ipv4(m)]


def extract_ips6(text: str) -> list[str]:
    """
    Extract IPv6 addresses from ``text``, in order of appearance.

    Full, compressed ("fe80::1") and IPv4-embedded ("::ffff:192.0.2.1")
    forms are recognized. Addresses are returned as written.
    """
    return [m for m in _IPV6_ADDRESS.findall(text) if _valid_ipv6(m)]


def generate_id(gmt: bool = False) -> str:
    """
    Return a statistically unique 32-character identifier.

    The current date and time come first so identifiers sort
    chronologically, e.g. "2015-0822195015-715ae8536c9ef3c5".
    """
    zone: tzinfo = timezone.utc if gmt else tz.tzlocal()
    return f"{datetime.now(zone):%Y-%m%d%H%M%S}-{secrets.token_hex(8)}"


def strip_comments(lines: Iterable[str], delimiter: str = "#") -> list[str]:
    """
    Remove blank lines and comments from a sequence of lines.

    Lines that are empty, whitespace-only or start with ``delimiter`` are
    dropped. An inline comment (``delimiter`` and the rest of the line) is
    cut off. Remaining lines are stripped of surrounding whitespace, and any
    that end up empty are dropped too.

    Args:
        lines: Lines to filter, e.g. from ``Path.read_text().splitlines()``
        delimiter: Comment delimiter, e.g. "#" or "//"

    Returns:
        The filtered, stripped lines
    """
    result: list[str] = []
    for line in lines:
        if not line.strip() or line.startswith(delimiter):
            continue
        content = line.split(delimiter, 1)[0].strip()
        if content:
            result.append(content)
    return result


def _pad(value: str, length: int, char: str) -> str:
    # str_pad semantics: the pad string repeats and is cut to fit
    missing = length - len(value)
    if missing <= 0 or not char:
        return value
    return value + (char * (missing // len(char) + 1))[:missing]


@overload
def pad_all(
    lines: str, length: int, char: str = " ", prepend: str = "", append: str = ""
) -> str: ...


@overload
def pad_all(
    lines: list[str],
    length: int,
    char: str = " ",
    prepend: str = "",
    append: str = "",
) -> list[str]: ...


def pad_all(
    lines: str | list[str],
    length: int,
    char: str = " ",
    prepend: str = "",
    append: str = "",
) -> str | list[str]:
    """
    Right-pad every line to ``length``, then wrap it in ``prepend``/``append``.

    Args:
        lines: A newline-separated string or a list of strings
        length: Width each line is padded to; longer lines are left alone
        char: Pad string (repeated and truncated as needed)
        prepend: Added to the start of each line after padding
        append: Added to the end of each line after padding

    Returns:
        A string when given a string, otherwise a list

    Example:
        >>> pad_all("ab\\nc", 3, ".", "|", "|")
        '|ab.|\\n|c..|'
    """
    items = lines.split("\n") if isinstance(lines, str) else lines
    padded = [f"{prepend}{_pad(item, length, char)}{append}" for item in items]
    return "\n".join(padded) if isinstance(lines, str) else padded


def strip_trailing_slash(text: str) -> str:
    """Remove a single trailing "/" from ``text``, if present."""
    return text[:-1] if text.endswith("/") else text
