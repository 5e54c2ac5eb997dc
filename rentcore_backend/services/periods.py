"""
Billing periods.

A period is a calendar month identified by a label such as ``Feb-2026``;
that label is what gets stored on every rent payment row.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator, Optional

import pytz
from dateutil.relativedelta import relativedelta

from rentcore_backend.errors import ValidationError

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_LABEL_RE = re.compile(r"^([A-Za-z]{3})-(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def local_today(tz: Optional[str] = None) -> date:
    zone = pytz.timezone(tz) if tz else pytz.UTC
    return datetime.now(pytz.UTC).astimezone(zone).date()


@dataclass(frozen=True, order=True)
class Period:
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Invalid month number: {self.month}", code="invalid_period")

    def __str__(self) -> str:
        return self.label

    @property
    def label(self) -> str:
        return f"{MONTH_ABBR[self.month - 1]}-{self.year}"

    @property
    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def shift(self, months: int) -> "Period":
        d = self.first_day + relativedelta(months=months)
        return Period(d.year, d.month)

    def next(self) -> "Period":
        return self.shift(1)

    @classmethod
    def from_date(cls, d: date) -> "Period":
        return cls(d.year, d.month)

    @classmethod
    def current(cls, today: Optional[date] = None, tz: Optional[str] = None) -> "Period":
        """Period containing today, evaluated in the given timezone."""
        return cls.from_date(today or local_today(tz))

    @classmethod
    def parse(cls, text) -> "Period":
        """Accepts ``Feb-2026`` labels as well as ``2026-02`` month values."""
        if isinstance(text, Period):
            return text
        if not text or not isinstance(text, str) or not text.strip():
            raise ValidationError("Month parameter is required", code="invalid_period")

        value = text.strip()
        m = _LABEL_RE.match(value)
        if m:
            abbr = m.group(1).capitalize()
            if abbr not in MONTH_ABBR:
                raise ValidationError(f"Unknown month: {value}", code="invalid_period")
            return cls(int(m.group(2)), MONTH_ABBR.index(abbr) + 1)

        m = _ISO_RE.match(value)
        if m:
            return cls(int(m.group(1)), int(m.group(2)))

        raise ValidationError(f"Invalid month format: {value}. Use Mon-YYYY or YYYY-MM", code="invalid_period")


def iter_periods(start: Period, count: int) -> Iterator[Period]:
    period = start
    for _ in range(count):
        yield period
        period = period.next()


def periods_of_year(year: int) -> list:
    return [Period(year, m) for m in range(1, 13)]
