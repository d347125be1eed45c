"""
Header conventions shared by the swiftfs object handle and uploader
"""

from datetime import datetime, timedelta, UTC
from typing import Mapping

from .models import EPOCH

DIRECTORY_MARKER_CONTENT_TYPE = "application/directory"
MANIFEST_HEADER = "X-Object-Manifest"
STATIC_LARGE_OBJECT_HEADER = "X-Static-Large-Object"
OBJECT_HEADER_PREFIX = "X-Object-"
OBJECT_META_PREFIX = "X-Object-Meta-"
MTIME_HEADER = OBJECT_META_PREFIX + "Mtime"

_URL_SAFE = frozenset(
    b"0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ/."
)


def url_encode(value: str) -> str:
    """
    Percent-encode everything except ASCII alphanumerics, ``/`` and ``.``.

    ``urllib.parse.quote`` always leaves ``-_~`` alone, and the manifest
    header needs ``&`` and friends encoded while keeping ``/``.
    """
    return "".join(
        chr(byte) if byte in _URL_SAFE else f"%{byte:02X}"
        for byte in value.encode("utf-8")
    )


def time_to_float_string(when: datetime) -> str:
    """Format a datetime as seconds since the epoch with 9 fractional digits."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    delta = when - EPOCH
    total_us = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    sign = "-" if total_us < 0 else ""
    seconds, micros = divmod(abs(total_us), 1_000_000)
    return f"{sign}{seconds}.{micros:06d}000"


def float_string_to_time(value: str) -> datetime:
    """Parse the output of :func:`time_to_float_string`; raises ValueError."""
    text = value.strip()
    negative = text.startswith("-")
    whole, _, fraction = text.lstrip("-").partition(".")
    if not whole.isdigit() or (fraction and not fraction.isdigit()):
        raise ValueError(f"Invalid float time '{value}'.")
    micros = int(whole) * 1_000_000 + int((fraction + "000000")[:6])
    if negative:
        micros = -micros
    try:
        return EPOCH + timedelta(microseconds=micros)
    except OverflowError:
        raise ValueError(f"Float time '{value}' out of range.")


def mod_time_headers(when: datetime) -> dict:
    """Return the object headers carrying ``when`` as the mtime."""
    return {MTIME_HEADER: time_to_float_string(when)}


def get_mod_time(headers: Mapping[str, str]) -> datetime:
    """Read the mtime header; raises KeyError or ValueError when unusable."""
    return float_string_to_time(headers[MTIME_HEADER])
