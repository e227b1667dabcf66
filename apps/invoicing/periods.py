# apps/invoicing/periods.py
"""
Calendar-month billing periods.
"""
import calendar
from dataclasses import dataclass
from datetime import date

from django.core.exceptions import ValidationError

from .exceptions import BillingPeriodOpen


@dataclass(frozen=True)
class BillingPeriod:
    """One calendar month, first through last day inclusive."""
    year: int
    month: int

    MIN_YEAR = 2000
    MAX_YEAR = 9999

    @classmethod
    def for_month(cls, month, year):
        """
        Build a period from raw month/year input.

        Raises:
            ValidationError: If month or year is missing, not a number,
                month is outside 1..12, or year is outside MIN_YEAR..MAX_YEAR
        """
        if month in (None, '') or year in (None, ''):
            raise ValidationError('Month and year are required')
        try:
            month = int(month)
            year = int(year)
        except (TypeError, ValueError):
            raise ValidationError('Month and year must be numbers')
        if month < 1 or month > 12:
            raise ValidationError('Invalid month')
        if year < cls.MIN_YEAR or year > cls.MAX_YEAR:
            raise ValidationError('Invalid year')
        return cls(year=year, month=month)

    @property
    def start(self):
        return date(self.year, self.month, 1)

    @property
    def end(self):
        return date(self.year, self.month, self.last_day)

    @property
    def last_day(self):
        return calendar.monthrange(self.year, self.month)[1]

    def overlaps(self, start, end):
        """True if [start, end] shares at least one day with this period."""
        return start <= self.end and end >= self.start

    def contains(self, day):
        return self.year == day.year and self.month == day.month

    def days_remaining(self, today):
        """Days from today until the last day of the period."""
        return self.last_day - today.day

    def ensure_closed(self, today, window_days):
        """
        Refuse billing the current month until its last few days.

        Past and future months are never refused here.

        Raises:
            BillingPeriodOpen: If today falls in this period and more than
                window_days remain before month end
        """
        if self.contains(today) and today.day < self.last_day - window_days:
            raise BillingPeriodOpen(self.days_remaining(today))

    def __str__(self):
        return f"{self.year}-{self.month:02d}"
