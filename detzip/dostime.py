"""
Packed DOS date/time codec used by ZIP headers.

The format stores local wall-clock fields with 2-second resolution and no
zone. Callers resolve the zone before building an ArchiveTimestamp; this
module never consults the host clock or timezone database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .constants import DOS_YEAR_MAX, DOS_YEAR_MIN
from .errors import InvalidTimestamp


@dataclass(frozen=True)
class PackedDateTime:
    date: int
    time: int


@dataclass(frozen=True)
class ArchiveTimestamp:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    def __post_init__(self) -> None:
        if not DOS_YEAR_MIN <= self.year <= DOS_YEAR_MAX:
            raise InvalidTimestamp(
                f"Year {self.year} outside representable range {DOS_YEAR_MIN}..{DOS_YEAR_MAX}"
            )
        try:
            # datetime rejects month 0, day 0, Feb 30, hour 24, second 60, ...
            datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)
        except (TypeError, ValueError) as exc:
            raise InvalidTimestamp(f"Invalid calendar time {self.as_tuple()}: {exc}") from None

    def as_tuple(self) -> tuple:
        return (self.year, self.month, self.day, self.hour, self.minute, self.second)

    def pack(self) -> PackedDateTime:
        return encode(self)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ArchiveTimestamp":
        """Build from an aware datetime, normalised to UTC.

        Naive datetimes are rejected: interpreting them would depend on the
        host's local zone. Sub-second precision is dropped.
        """
        if dt.tzinfo is None or dt.utcoffset() is None:
            raise InvalidTimestamp(f"Naive datetime {dt.isoformat()}; attach a timezone first")
        try:
            utc = dt.astimezone(timezone.utc)
        except OverflowError:
            raise InvalidTimestamp(f"{dt.isoformat()} has no UTC equivalent in datetime range") from None
        return cls(utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second)

    @classmethod
    def parse(cls, text: str) -> "ArchiveTimestamp":
        """Parse ISO-8601 text carrying an explicit offset, e.g. 1986-01-01T03:00:00Z."""
        raw = text.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise InvalidTimestamp(f"Unparseable timestamp: {text!r}") from None
        return cls.from_datetime(dt)


def encode(ts: ArchiveTimestamp) -> PackedDateTime:
    date = ((ts.year - DOS_YEAR_MIN) << 9) | (ts.month << 5) | ts.day
    time = (ts.hour << 11) | (ts.minute << 5) | (ts.second // 2)
    return PackedDateTime(date=date, time=time)


def decode(packed: PackedDateTime) -> ArchiveTimestamp:
    d, t = packed.date, packed.time
    return ArchiveTimestamp(
        year=DOS_YEAR_MIN + (d >> 9),
        month=(d >> 5) & 0x0F,
        day=d & 0x1F,
        hour=t >> 11,
        minute=(t >> 5) & 0x3F,
        second=(t & 0x1F) * 2,
    )
