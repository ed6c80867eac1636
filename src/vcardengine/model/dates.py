"""Date values of BDAY/ANNIVERSARY and friends.

Full dates and date-times go through ``datetime.fromisoformat``, which
accepts both the basic (``19850412T102030Z``) and extended
(``1985-04-12T10:20:30Z``) ISO-8601 forms used across vCard versions.
vCard 4.0 additionally allows reduced-precision values (``--0412``,
``1985``, ``T10``) which ``PartialDate`` models.

Python 3.13+.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

__all__ = [
    "PartialDate",
    "format_date",
    "parse_date",
]


def parse_date(value: str) -> date | datetime:
    """Parse a complete date or date-time.

    Args:
        value: ISO-8601 string, basic or extended

    Returns:
        ``datetime`` if the value has a time part, else ``date``

    Raises:
        ValueError: If the value is not a complete date or date-time
    """
    text = value.strip()
    if "T" in text or "t" in text:
        return datetime.fromisoformat(text)
    return date.fromisoformat(text)


def _format_offset(offset: timedelta | None, *, extended: bool) -> str:
    if offset is None:
        return ""
    if not offset:
        return "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    hours, minutes = divmod(minutes, 60)
    separator = ":" if extended else ""
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def format_date(value: date | datetime, *, extended: bool) -> str:
    """Write a date or date-time in basic or extended ISO-8601 form.

    Example:
        >>> format_date(date(1985, 4, 12), extended=False)
        '19850412'
    """
    if isinstance(value, datetime):
        pattern = "%Y-%m-%dT%H:%M:%S" if extended else "%Y%m%dT%H%M%S"
        return value.strftime(pattern) + _format_offset(value.utcoffset(), extended=extended)
    return value.strftime("%Y-%m-%d" if extended else "%Y%m%d")


_DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?P<year>\d{4})"),
    re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})"),
    re.compile(r"(?P<year>\d{4})-?(?P<month>\d{2})-?(?P<day>\d{2})"),
    re.compile(r"--(?P<month>\d{2})-?(?P<day>\d{2})"),
    re.compile(r"--(?P<month>\d{2})"),
    re.compile(r"---(?P<day>\d{2})"),
)

_ZONE = r"(?P<offset>Z|[-+]\d{2}(?::?\d{2})?)?"

_TIME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?P<hour>\d{2})" + _ZONE),
    re.compile(r"(?P<hour>\d{2}):?(?P<minute>\d{2})" + _ZONE),
    re.compile(r"(?P<hour>\d{2}):?(?P<minute>\d{2}):?(?P<second>\d{2})" + _ZONE),
    re.compile(r"-(?P<minute>\d{2}):?(?P<second>\d{2})" + _ZONE),
    re.compile(r"-(?P<minute>\d{2})" + _ZONE),
    re.compile(r"--(?P<second>\d{2})" + _ZONE),
)

_LIMITS: dict[str, tuple[int, int]] = {
    "month": (1, 12),
    "day": (1, 31),
    "hour": (0, 24),
    "minute": (0, 59),
    "second": (0, 60),
}


def _match_fields(patterns: tuple[re.Pattern[str], ...], text: str) -> dict[str, str]:
    for pattern in patterns:
        match = pattern.fullmatch(text)
        if match is not None:
            return {key: found for key, found in match.groupdict().items() if found is not None}
    msg = f'"{text}" is not a reduced-precision date or time'
    raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class PartialDate:
    """A date and/or time with some components missing (vCard 4.0).

    Attributes:
        year: Four-digit year
        month: 1-12
        day: 1-31
        hour: 0-24
        minute: 0-59
        second: 0-60
        utc_offset: "Z" or a basic-form offset such as "-0500"
    """

    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    utc_offset: str | None = None

    @classmethod
    def parse(cls, value: str) -> PartialDate:
        """Parse a reduced-precision date-and-or-time.

        Raises:
            ValueError: If the value matches none of the allowed shapes
        """
        text = value.strip()
        date_part, separator, time_part = text.partition("T")
        if not date_part and not separator:
            msg = "empty date value"
            raise ValueError(msg)

        fields: dict[str, str] = {}
        if date_part:
            fields.update(_match_fields(_DATE_PATTERNS, date_part))
        if separator:
            fields.update(_match_fields(_TIME_PATTERNS, time_part))

        numbers: dict[str, int] = {}
        for key, found in fields.items():
            if key == "offset":
                continue
            number = int(found)
            low, high = _LIMITS.get(key, (0, 9999))
            if not low <= number <= high:
                msg = f"{key} {number} out of range in {text!r}"
                raise ValueError(msg)
            numbers[key] = number

        offset = fields.get("offset")
        if offset is not None and offset != "Z":
            offset = offset.replace(":", "")
            if len(offset) == 3:
                offset += "00"
        return cls(utc_offset=offset, **numbers)

    @property
    def has_date_component(self) -> bool:
        """True if any of year, month or day is present."""
        return self.year is not None or self.month is not None or self.day is not None

    @property
    def has_time_component(self) -> bool:
        """True if any of hour, minute or second is present."""
        return self.hour is not None or self.minute is not None or self.second is not None

    def to_iso(self, *, extended: bool) -> str:
        """Write the value in basic or extended reduced-precision form."""
        dash = "-" if extended else ""
        colon = ":" if extended else ""
        text = ""

        year, month, day = self.year, self.month, self.day
        if year is not None and month is not None and day is not None:
            text = f"{year:04d}{dash}{month:02d}{dash}{day:02d}"
        elif year is not None and month is not None:
            text = f"{year:04d}-{month:02d}"
        elif year is not None:
            text = f"{year:04d}"
        elif month is not None and day is not None:
            text = f"--{month:02d}{dash}{day:02d}"
        elif month is not None:
            text = f"--{month:02d}"
        elif day is not None:
            text = f"---{day:02d}"

        if self.has_time_component:
            hour, minute, second = self.hour, self.minute, self.second
            text += "T"
            if hour is not None and minute is not None and second is not None:
                text += f"{hour:02d}{colon}{minute:02d}{colon}{second:02d}"
            elif hour is not None and minute is not None:
                text += f"{hour:02d}{colon}{minute:02d}"
            elif hour is not None:
                text += f"{hour:02d}"
            elif minute is not None and second is not None:
                text += f"-{minute:02d}{colon}{second:02d}"
            elif minute is not None:
                text += f"-{minute:02d}"
            else:
                text += f"--{second:02d}"
            if self.utc_offset is not None:
                offset = self.utc_offset
                if extended and offset != "Z":
                    offset = f"{offset[:3]}:{offset[3:]}"
                text += offset
        return text
