"""Utility helpers shared by the document codec and the mutation engine."""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import math
import typing as typ

from .models import JsonValue, PropertyMap, StructuredDataError


def utc_now() -> dt.datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return dt.datetime.now(dt.UTC)


def epoch_millis(moment: dt.datetime) -> int:
    """Return ``moment`` as integer milliseconds since the Unix epoch."""
    return int(moment.timestamp() * 1000)


def _parse_timestamp(value: dt.datetime | str | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def _format_timestamp(value: dt.datetime) -> str:
    """Format ``value`` as ISO-8601 UTC with millisecond precision and ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.UTC)
    text = value.astimezone(dt.UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def check_structured(value: object, *, where: str = "value") -> JsonValue:
    """Return ``value`` if it is closed structured data, else raise.

    Structured data is ``str``, ``int``, ``float``, ``bool``, ``None``, lists
    of structured data and string-keyed dicts of structured data. Tuples are
    accepted and normalised to lists. Non-finite floats are rejected because
    they have no interchange representation.

    Raises
    ------
    StructuredDataError
        If any nested value falls outside the structured-data shape.
    """
    match value:
        case None | bool() | int() | str():
            return value
        case float():
            if not math.isfinite(value):
                msg = f"{where} must be a finite number, got {value!r}."
                raise StructuredDataError(msg)
            return value
        case list() | tuple():
            return [
                check_structured(item, where=f"{where}[{index}]")
                for index, item in enumerate(value)
            ]
        case dict():
            result: dict[str, JsonValue] = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    msg = f"{where} keys must be strings, got {key!r}."
                    raise StructuredDataError(msg)
                result[key] = check_structured(item, where=f"{where}.{key}")
            return result
        case _:
            msg = f"{where} is not structured data: {type(value).__name__}."
            raise StructuredDataError(msg)


def check_property_map(value: object, *, where: str = "props") -> PropertyMap:
    """Return ``value`` as a property map or raise ``StructuredDataError``."""
    if not isinstance(value, cabc.Mapping):
        msg = f"{where} must be a mapping, got {type(value).__name__}."
        raise StructuredDataError(msg)
    checked = check_structured(dict(value), where=where)
    return typ.cast("PropertyMap", checked)


__all__ = [
    "_format_timestamp",
    "_parse_timestamp",
    "check_property_map",
    "check_structured",
    "epoch_millis",
    "utc_now",
]
