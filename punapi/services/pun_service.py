"""
Service for PUN price queries.

Looks up decoded datasets in the cache and, on a miss, downloads and decodes
a fresh bundle before extracting the requested value.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional, Tuple

import pandas as pd

from ..exceptions import (
    NoRecordForHourError,
    NoRecordsInRangeError,
    UnexpectedDatasetCountError,
)
from ..models import DailyDataset
from ..utils.archive import ArchiveDecoder
from ..utils.cache_utils import DatasetCache, daily_key, monthly_key
from ..utils.scraping import BundleFetcher
from ..utils.time_utils import market_now, month_range, parse_timestamp


def format_price(value: float) -> str:
    """Fixed-point representation with 6 fractional digits."""
    return f"{value:.6f}"


class PunService:
    """Hourly PUN lookups and monthly averages backed by the dataset cache."""

    def __init__(
        self,
        fetcher: BundleFetcher,
        cache: DatasetCache = None,
        decoder: ArchiveDecoder = None,
        timezone: str = "Europe/Rome",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            fetcher: Source of downloaded bundles
            cache: Dataset cache shared by all requests
            decoder: Bundle decoder
            timezone: Market timezone used for "now"
            clock: Overrides the current-time source, mainly for tests
        """
        self.fetcher = fetcher
        self.cache = cache or DatasetCache()
        self.decoder = decoder or ArchiveDecoder()
        self.timezone = timezone
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def now(self) -> datetime:
        return self.clock() if self.clock else market_now(self.timezone)

    def parse_time(self, value: Optional[str]) -> datetime:
        """Parse a time query parameter relative to the current market time."""
        return parse_timestamp(value, self.now())

    def get_hourly_price(self, ts: datetime) -> float:
        """
        PUN for the hour containing ts.

        Hour-slots in the source are 1-based while ts.hour is 0-based. At the
        top of every hour the cached day is refreshed, since the portal
        publishes the new hour's value at that boundary.

        Raises:
            UnexpectedDatasetCountError: the day did not decode to one dataset
            NoRecordForHourError: the day has no record for the hour-slot
        """
        day = ts.date()
        key = daily_key(day)
        datasets = self.cache.get_or_compute(
            key,
            lambda: self._retrieve(key, day, day),
            force_miss=self.now().minute == 0,
        )

        if len(datasets) != 1:
            raise UnexpectedDatasetCountError(
                f"Expected 1 dataset for {day.isoformat()}, got {len(datasets)}")

        hour_slot = ts.hour + 1
        record = datasets[0].find_hour(hour_slot)
        if record is None:
            raise NoRecordForHourError(
                f"No PUN found for {ts.strftime('%Y-%m-%d %H:%M')} (hour-slot {hour_slot})")
        return record.pun

    def get_monthly_average(self, ts: datetime) -> float:
        """
        Mean PUN over every record of the calendar month containing ts.

        Raises:
            NoRecordsInRangeError: the month has no records
        """
        first, last = month_range(ts.date())
        key = monthly_key(first)
        datasets = self.cache.get_or_compute(
            key, lambda: self._retrieve(key, first, last))

        prices = pd.Series(
            [record.pun for dataset in datasets for record in dataset.records],
            dtype='float64',
        )
        if prices.empty:
            raise NoRecordsInRangeError(
                f"No PUN records found between {first.isoformat()} and {last.isoformat()}")
        return float(prices.mean())

    def _retrieve(self, key: str, start: date, end: date) -> Tuple[DailyDataset, ...]:
        self.logger.info(f"Cache miss for {key}")
        with self.fetcher.fetch_bundle(start, end) as bundle:
            return self.decoder.decode(bundle)
