"""Date utilities for parsing the --date option and filling the search form"""

import datetime
import re
from typing import List

from dateutil.parser import parse as parse_date
from dateutil.rrule import DAILY, rrule
from loguru import logger

# START:END of plain dates; timestamps carry their own colons
RANGE_PATTERN = re.compile(r"^([^:T ]+):([^:T ]+)$")


def _calendar_date(value: str) -> datetime.date:
    """Parse one date; timestamps carrying an offset are read in UTC"""
    parsed = parse_date(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc)
    return parsed.date()


def parse_date_or_range(date_spec: str) -> List[datetime.date]:
    """
    Parse a date specification that can be a single date or a range.

    Args:
        date_spec: A date such as 2023-03-22 or a range 2023-03-22:2023-03-24

    Returns:
        List of dates, in calendar order for ranges

    Raises:
        ValueError: If the date is invalid or the range ends before it starts
    """
    date_spec = date_spec.strip()
    range_match = RANGE_PATTERN.match(date_spec)
    if range_match:
        start_str, end_str = range_match.groups()
        try:
            start = _calendar_date(start_str)
            end = _calendar_date(end_str)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid date range '{date_spec}': {e}")

        if end < start:
            raise ValueError(
                f"Invalid date range '{date_spec}': end date {end_str} is before start date {start_str}"
            )

        return [dt.date() for dt in rrule(DAILY, dtstart=start, until=end)]

    try:
        return [_calendar_date(date_spec)]
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date '{date_spec}': {e}")


def parse_date_list(date_specs: str) -> List[datetime.date]:
    """
    Parse a comma separated list of dates and date ranges.

    Input order is kept so the search visits dates in the order requested;
    repeated dates are dropped with a warning.
    """
    all_dates = []
    for spec in date_specs.split(","):
        if spec.strip():
            all_dates.extend(parse_date_or_range(spec))

    if not all_dates:
        raise ValueError("No dates provided")

    unique_dates = list(dict.fromkeys(all_dates))
    if len(unique_dates) != len(all_dates):
        logger.warning(f"Removed {len(all_dates) - len(unique_dates)} duplicate dates from input")

    return unique_dates


def format_form_date(date: datetime.date) -> str:
    """Format a date the way the booking form expects it: M/D, no year"""
    return f"{date.month}/{date.day}"
