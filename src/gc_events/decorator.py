"""Parse the time decorator at the start of a log line.

Two styles are recognized:

- unified (JDK 9+): consecutive bracketed fields such as
  ``[2019-02-05T14:47:31.092-0200][0.049s][info][gc,start     ]``
- legacy (JDK 8 and earlier): ``2019-02-05T14:47:31.092-0200: 0.049: ``

A line with neither is undecorated; the caller decides which uptime it
inherits.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from gc_events.errors import DecoratorError
from gc_events.models import Decorator
from gc_events.patterns import DATESTAMP, TIMESTAMP
from gc_events.units import to_millis

# ============================================================
# PATTERNS
# ============================================================

UNIFIED_FIELD: re.Pattern[str] = re.compile(r"\[([^\[\]]*)\]")

UNIFIED_DATESTAMP: re.Pattern[str] = re.compile(DATESTAMP)
UNIFIED_SECONDS: re.Pattern[str] = re.compile(r"(\d+[.,]\d+)s")
UNIFIED_MILLIS: re.Pattern[str] = re.compile(r"(\d+)ms")
UNIFIED_NANOS: re.Pattern[str] = re.compile(r"(\d+)ns")
UNIFIED_PID: re.Pattern[str] = re.compile(r"\d+t?")
UNIFIED_TAGS: re.Pattern[str] = re.compile(r"[a-z][a-z0-9_]*(?:,[a-z0-9_]+)*\s*")

# 2001-09-09 in epoch milliseconds; no JVM uptime gets that far
EPOCH_MILLIS_FLOOR = 10**12
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

LOG_LEVELS = frozenset({"trace", "debug", "info", "warning", "error"})

# Digits and time punctuation only: looks like a time field even if broken
TIME_SHAPED: re.Pattern[str] = re.compile(r"[\d.,:+\-TZ]+(?:s|ms|ns)?")

LEGACY_PREFIX: re.Pattern[str] = re.compile(
    rf"(?:(?P<datestamp>{DATESTAMP}): )?(?:(?P<uptime>{TIMESTAMP}): )?"
)
LEGACY_SHAPED: re.Pattern[str] = re.compile(r"\d[\d.,:+\-TZ]*: ")


def parse_datestamp(text: str) -> datetime:
    """Parse an ISO-8601 datestamp, rejecting impossible calendar values."""
    normalized = text.replace(",", ".")
    fmt = "%Y-%m-%dT%H:%M:%S.%f"
    if normalized[-1] == "Z" or normalized[-5] in "+-":
        fmt += "%z"
    try:
        return datetime.strptime(normalized, fmt)
    except ValueError as exc:
        raise DecoratorError(f"Invalid datestamp: {text!r}") from exc


def _millis_from_field(field: str) -> int | None:
    if match := UNIFIED_SECONDS.fullmatch(field):
        return to_millis(match.group(1))
    if match := UNIFIED_MILLIS.fullmatch(field):
        return int(match.group(1))
    if match := UNIFIED_NANOS.fullmatch(field):
        return int(match.group(1)) // 1_000_000
    return None


def _is_epoch(field: str, millis: int) -> bool:
    """`timemillis` / `timenanos` decorators count from 1970, not from JVM start."""
    return millis >= EPOCH_MILLIS_FLOOR and not UNIFIED_SECONDS.fullmatch(field)


# ============================================================
# UNIFIED DECORATORS
# ============================================================


def _parse_unified(line: str) -> tuple[Decorator | None, str]:
    fields: list[tuple[str, int]] = []
    pos = 0
    while match := UNIFIED_FIELD.match(line, pos):
        pos = match.end()
        fields.append((match.group(1), pos))

    if not fields:
        return None, line

    first = fields[0][0]
    if not (UNIFIED_DATESTAMP.fullmatch(first) or _millis_from_field(first) is not None):
        if TIME_SHAPED.fullmatch(first):
            raise DecoratorError(f"Malformed decorator field: [{first}]")
        return None, line

    values: dict[str, object] = {}
    end = 0
    for field, field_end in fields:
        if UNIFIED_DATESTAMP.fullmatch(field):
            # utctime and time may both be present; keep the first
            values.setdefault("datestamp", parse_datestamp(field))
        elif (millis := _millis_from_field(field)) is not None:
            if _is_epoch(field, millis):
                values.setdefault("datestamp", EPOCH + timedelta(milliseconds=millis))
            elif "uptime_millis" not in values or UNIFIED_MILLIS.fullmatch(field):
                values["uptime_millis"] = millis
        elif TIME_SHAPED.fullmatch(field) and not field.isdigit():
            raise DecoratorError(f"Malformed decorator field: [{field}]")
        elif UNIFIED_PID.fullmatch(field) and "tid" not in values and "level" not in values:
            values["pid" if "pid" not in values else "tid"] = int(field.rstrip("t"))
        elif field in LOG_LEVELS and "level" not in values:
            values["level"] = field
        elif UNIFIED_TAGS.fullmatch(field) and "tags" not in values:
            values["tags"] = field.strip()
        else:
            break
        end = field_end

    return Decorator(style="unified", **values), line[end:].lstrip()


# ============================================================
# LEGACY DECORATORS
# ============================================================


def _parse_legacy(line: str) -> tuple[Decorator | None, str]:
    match = LEGACY_PREFIX.match(line)
    if match is None or match.end() == 0:
        if LEGACY_SHAPED.match(line):
            raise DecoratorError(f"Malformed decorator: {line[:40]!r}")
        return None, line

    datestamp = match.group("datestamp")
    uptime = match.group("uptime")
    decorator = Decorator(
        style="legacy",
        datestamp=parse_datestamp(datestamp) if datestamp else None,
        uptime_millis=to_millis(uptime) if uptime else None,
    )
    body = line[match.end():]
    if LEGACY_SHAPED.match(body):
        raise DecoratorError(f"Malformed decorator: {line[:40]!r}")
    return decorator, body


def parse_decorator(line: str) -> tuple[Decorator | None, str]:
    """Split a raw line into its decorator and its body.

    Returns ``(None, line)`` for an undecorated line. Raises
    :class:`DecoratorError` when the line starts with something shaped like
    a decorator that fails to parse (for example an impossible date).
    """
    if line.startswith("["):
        decorator, body = _parse_unified(line)
        if decorator is not None:
            return decorator, body
    return _parse_legacy(line)
