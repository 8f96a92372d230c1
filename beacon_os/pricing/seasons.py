"""
Seasons and calendar helpers
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator, List, Optional, Sequence

from beacon_os.pricing.types import SeasonDefinition


def is_weekend(day: date) -> bool:
    """Saturday or Sunday"""
    return day.weekday() >= 5


def each_night(check_in: date, check_out: date) -> Iterator[date]:
    """Calendar nights in [check_in, check_out)"""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


def find_season(day: date, seasons: Sequence[SeasonDefinition]) -> Optional[SeasonDefinition]:
    """First season in list order containing the date"""
    for season in seasons:
        if season.contains(day):
            return season
    return None


def default_seasons() -> List[SeasonDefinition]:
    """
    Outer Banks seasons.

    Peak Summer sits inside Summer, so list order decides: Peak first.
    """
    return [
        SeasonDefinition(
            id="peak",
            name="Peak Summer",
            start_date="06-15",
            end_date="08-15",
            multiplier=Decimal("1.5"),
            minimum_stay=7,
        ),
        SeasonDefinition(
            id="summer",
            name="Summer",
            start_date="05-15",
            end_date="09-15",
            multiplier=Decimal("1.3"),
            minimum_stay=5,
        ),
        SeasonDefinition(
            id="spring",
            name="Spring",
            start_date="03-15",
            end_date="05-14",
            multiplier=Decimal("1.1"),
            minimum_stay=3,
        ),
        SeasonDefinition(
            id="fall",
            name="Fall",
            start_date="09-16",
            end_date="11-15",
            multiplier=Decimal("1.1"),
            minimum_stay=3,
        ),
        SeasonDefinition(
            id="winter",
            name="Off Season",
            start_date="11-16",
            end_date="03-14",
            multiplier=Decimal("0.85"),
            minimum_stay=2,
        ),
    ]
