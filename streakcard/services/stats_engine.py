"""
Statistics derived from a contribution calendar.

Every function here is pure: it reads the calendar it is given and returns a
fresh value. The calendar is expected in chronological order with unique
dates; nothing is re-sorted.
"""
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Optional, Union

from django.utils import timezone

from ..exceptions import InvalidInput

CONSISTENCY_WINDOW = 90

ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class ActivityDay(NamedTuple):
    """One calendar entry."""
    date: date
    count: int


@dataclass(frozen=True)
class BestDay:
    """The single day with the most contributions."""
    date: Optional[date]
    count: int

    def __bool__(self) -> bool:
        return self.date is not None

    @property
    def label(self) -> str:
        return self.date.isoformat() if self.date else "N/A"


@dataclass(frozen=True)
class BestMonth:
    """The calendar month with the most contributions."""
    year: Optional[int]
    month: Optional[int]
    count: int

    def __bool__(self) -> bool:
        return self.year is not None

    @property
    def label(self) -> str:
        if not self:
            return "N/A"
        return f"{MONTH_ABBREVIATIONS[self.month - 1]} {self.year}"


NO_BEST_DAY = BestDay(date=None, count=0)
NO_BEST_MONTH = BestMonth(year=None, month=None, count=0)


@dataclass(frozen=True)
class StatsSnapshot:
    """All metrics rendered on a badge, computed in one pass."""
    current_streak: int
    max_streak_in_year: int
    most_productive_day: BestDay
    average_weekly_in_year: float
    consistency_90: int
    highest_committed_month: BestMonth
    total_contributions: int
    year: int


DateLike = Union[date, str]


def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        if not ISO_DATE.fullmatch(value):
            raise InvalidInput(f"Date must be YYYY-MM-DD: {value!r}")
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            raise InvalidInput(f"Unparseable date: {value!r}")
    raise InvalidInput(f"Expected a date or YYYY-MM-DD string, got {type(value).__name__}")


def _parse_count(value) -> int:
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"Contribution count must be an integer, got {value!r}")
    if value < 0:
        raise InvalidInput(f"Contribution count must not be negative, got {value}")
    return value


def _parse_day(item) -> ActivityDay:
    if isinstance(item, Mapping):
        if 'date' not in item:
            raise InvalidInput(f"Calendar entry has no date: {item!r}")
        count = item.get('count', item.get('contributionCount'))
        if count is None:
            raise InvalidInput(f"Calendar entry has no count: {item!r}")
        return ActivityDay(_parse_date(item['date']), _parse_count(count))
    if isinstance(item, (tuple, list)) and len(item) == 2:
        return ActivityDay(_parse_date(item[0]), _parse_count(item[1]))
    raise InvalidInput(f"Calendar entry must be a (date, count) pair, got {item!r}")


def parse_calendar(entries) -> List[ActivityDay]:
    """
    Normalize raw calendar entries into ActivityDay values.

    Accepts ActivityDay values, (date, count) pairs and mappings with
    'date' and 'count' (or GitHub's 'contributionCount') keys. Dates may be
    date objects or YYYY-MM-DD strings. Raises InvalidInput on anything else.
    """
    if entries is None or isinstance(entries, (str, bytes, Mapping)) or not isinstance(entries, Iterable):
        raise InvalidInput(f"Calendar must be a sequence of days, got {type(entries).__name__}")
    return [_parse_day(item) for item in entries]


def _round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def _in_year(days: List[ActivityDay], year: int) -> List[ActivityDay]:
    return [day for day in days if day.date.year == year]


def current_streak(calendar, today: DateLike) -> int:
    """
    Count consecutive active days walking back from the latest entry.

    A zero-count entry dated today is skipped rather than treated as a break:
    the user may simply not have contributed yet.
    """
    days = parse_calendar(calendar)
    today = _parse_date(today)

    if days and days[-1].date == today and days[-1].count == 0:
        days = days[:-1]

    streak = 0
    for day in reversed(days):
        if day.count == 0:
            break
        streak += 1
    return streak


def max_streak_in_year(calendar, year: int) -> int:
    """Longest run of active days within a single calendar year."""
    longest = 0
    running = 0
    for day in _in_year(parse_calendar(calendar), year):
        if day.count > 0:
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return longest


def most_productive_day(calendar) -> BestDay:
    """Day with the highest count over the whole calendar; earliest wins ties."""
    best = NO_BEST_DAY
    for day in parse_calendar(calendar):
        if not best or day.count > best.count:
            best = BestDay(date=day.date, count=day.count)
    return best


def average_weekly_in_year(calendar, year: int) -> float:
    """Contributions per week in ``year``, rounded half up to one decimal."""
    days = _in_year(parse_calendar(calendar), year)
    if not days:
        return 0.0

    total = sum(day.count for day in days)
    weeks = max(1, math.ceil(len(days) / 7))
    return float(_round_half_up(total / weeks, 1))


def consistency_90(calendar, window: int = CONSISTENCY_WINDOW) -> int:
    """Percentage of active days among the trailing ``window`` entries."""
    days = parse_calendar(calendar)[-window:]
    if not days:
        return 0

    active = sum(1 for day in days if day.count > 0)
    return int(_round_half_up(100 * active / len(days)))


def highest_committed_month(calendar) -> BestMonth:
    """Month with the greatest summed count; the earliest month wins ties."""
    totals = {}
    for day in parse_calendar(calendar):
        key = (day.date.year, day.date.month)
        totals[key] = totals.get(key, 0) + day.count

    best = NO_BEST_MONTH
    for (year, month), count in totals.items():
        if not best or count > best.count:
            best = BestMonth(year=year, month=month, count=count)
    return best


def build_snapshot(
    calendar,
    total_contributions: int,
    today: Optional[DateLike] = None,
    year: Optional[int] = None,
) -> StatsSnapshot:
    """
    Compute every badge metric for one calendar.

    ``today`` defaults to the current date in the configured time zone and
    ``year`` to the year of ``today``.
    """
    days = parse_calendar(calendar)
    today = _parse_date(today) if today is not None else timezone.localdate()
    if year is None:
        year = today.year
    total_contributions = _parse_count(total_contributions)

    return StatsSnapshot(
        current_streak=current_streak(days, today),
        max_streak_in_year=max_streak_in_year(days, year),
        most_productive_day=most_productive_day(days),
        average_weekly_in_year=average_weekly_in_year(days, year),
        consistency_90=consistency_90(days),
        highest_committed_month=highest_committed_month(days),
        total_contributions=total_contributions,
        year=year,
    )
