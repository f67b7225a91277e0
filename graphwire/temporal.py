"""Payload codecs for the temporal variants.

Each variant has exactly one textual form:

=============  ==================================
Date           ``YYYY-MM-DD``
Time           ``HH:MM:SS``
DateTime       ``YYYY-MM-DDTHH:MM:SS``
ZonedDateTime  ``YYYY-MM-DDTHH:MM:SS[+HH:MM]``
Duration       ``[-]P[nW][nD][T[nH][nM][n[.ffffff]S]]``
=============  ==================================

Durations are exact ``timedelta`` values, so the calendar units (years and
months) that ISO-8601 allows are rejected: their length depends on the date
they are applied to.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, TypeVar

from .errors import InvalidTemporalLiteralError

T = TypeVar("T")

_DATE = r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
_TIME = r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
_OFFSET = r"\[(?P<sign>[+-])(?P<off_hour>[0-9]{2}):(?P<off_minute>[0-9]{2})\]"

_DATE_REGEX = re.compile(_DATE)
_TIME_REGEX = re.compile(_TIME)
_DATETIME_REGEX = re.compile(f"{_DATE}T{_TIME}")
_ZONED_DATETIME_REGEX = re.compile(f"{_DATE}T{_TIME}{_OFFSET}")
_DURATION_REGEX = re.compile(
    r"(?P<negative>-)?P"
    r"(?:(?P<weeks>[0-9]+)W)?"
    r"(?:(?P<days>[0-9]+)D)?"
    r"(?:T"
    r"(?:(?P<hours>[0-9]+)H)?"
    r"(?:(?P<minutes>[0-9]+)M)?"
    r"(?:(?P<seconds>[0-9]+)(?:\.(?P<fraction>[0-9]{1,6}))?S)?"
    r")?"
)
_CALENDAR_UNITS_REGEX = re.compile(r"-?P(?:[0-9]+Y)?(?:[0-9]+M)?")


def _match(kind: str, regex: "re.Pattern[str]", payload: Any) -> "re.Match[str]":
    if not isinstance(payload, str):
        raise InvalidTemporalLiteralError(kind, payload, "expected a string")
    match = regex.fullmatch(payload)
    if match is None:
        raise InvalidTemporalLiteralError(kind, payload)
    return match


def _build(kind: str, payload: str, factory: Callable[[], T]) -> T:
    try:
        return factory()
    except (ValueError, OverflowError) as err:
        raise InvalidTemporalLiteralError(kind, payload, str(err)) from err


def _date_parts(match: "re.Match[str]") -> tuple:
    return int(match["year"]), int(match["month"]), int(match["day"])


def _time_parts(match: "re.Match[str]") -> tuple:
    return int(match["hour"]), int(match["minute"]), int(match["second"])


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _format_time(value: Any) -> str:
    return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"


def decode_date(payload: Any) -> date:
    match = _match("Date", _DATE_REGEX, payload)
    return _build("Date", payload, lambda: date(*_date_parts(match)))


def encode_date(value: date) -> str:
    return _format_date(value)


def decode_time(payload: Any) -> time:
    match = _match("Time", _TIME_REGEX, payload)
    return _build("Time", payload, lambda: time(*_time_parts(match)))


def encode_time(value: time) -> str:
    return _format_time(value)


def decode_datetime(payload: Any) -> datetime:
    match = _match("DateTime", _DATETIME_REGEX, payload)
    return _build(
        "DateTime", payload, lambda: datetime(*_date_parts(match), *_time_parts(match))
    )


def encode_datetime(value: datetime) -> str:
    return f"{_format_date(value)}T{_format_time(value)}"


def decode_zoned_datetime(payload: Any) -> datetime:
    match = _match("ZonedDateTime", _ZONED_DATETIME_REGEX, payload)
    off_hour = int(match["off_hour"])
    off_minute = int(match["off_minute"])
    if off_hour > 23 or off_minute > 59:
        raise InvalidTemporalLiteralError("ZonedDateTime", payload, "offset out of range")
    offset = timedelta(hours=off_hour, minutes=off_minute)
    if match["sign"] == "-":
        offset = -offset
    return _build(
        "ZonedDateTime",
        payload,
        lambda: datetime(*_date_parts(match), *_time_parts(match), tzinfo=timezone(offset)),
    )


def encode_zoned_datetime(value: datetime) -> str:
    offset = value.utcoffset() or timedelta(0)
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    hours, minutes = divmod(minutes, 60)
    return f"{_format_date(value)}T{_format_time(value)}[{sign}{hours:02d}:{minutes:02d}]"


def decode_duration(payload: Any) -> timedelta:
    match = _match_duration(payload)
    fraction = match["fraction"] or ""
    sign = -1 if match["negative"] else 1
    return _build(
        "Duration",
        payload,
        lambda: sign * timedelta(
            weeks=int(match["weeks"] or 0),
            days=int(match["days"] or 0),
            hours=int(match["hours"] or 0),
            minutes=int(match["minutes"] or 0),
            seconds=int(match["seconds"] or 0),
            microseconds=int(fraction.ljust(6, "0")) if fraction else 0,
        ),
    )


def _match_duration(payload: Any) -> "re.Match[str]":
    if isinstance(payload, str):
        head = _CALENDAR_UNITS_REGEX.match(payload)
        if head is not None and head.group(0).lstrip("-P"):
            raise InvalidTemporalLiteralError(
                "Duration", payload, "years and months have no fixed length"
            )
    match = _match("Duration", _DURATION_REGEX, payload)
    text = payload.lstrip("-")
    if text == "P" or text.endswith("T"):
        raise InvalidTemporalLiteralError("Duration", payload, "no components")
    return match


def encode_duration(value: timedelta) -> str:
    negative = value < timedelta(0)
    value = abs(value)
    hours, remainder = divmod(value.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    date_part = f"{value.days}D" if value.days else ""
    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if value.microseconds:
        fraction = f"{value.microseconds:06d}".rstrip("0")
        time_part += f"{seconds}.{fraction}S"
    elif seconds:
        time_part += f"{seconds}S"

    if not date_part and not time_part:
        return "PT0S"
    text = "P" + date_part + (f"T{time_part}" if time_part else "")
    return f"-{text}" if negative else text
