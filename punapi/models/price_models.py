"""
Domain models for PUN price data.
"""

from datetime import date
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class PriceRecord(BaseModel):
    """One hour-slot of one trading day."""
    model_config = ConfigDict(frozen=True)

    date: date
    hour: int  # 1-based hour-slot, 23/24/25 per day around DST changes
    pun: float  # national reference price in EUR/MWh
    market: Optional[str] = None
    # zonal prices (NORD, CNOR, SICI, ...) passed through as published
    zones: Dict[str, float] = {}


class DailyDataset(BaseModel):
    """
    Price records decoded from one XML file of a bundle.

    Records keep the order of the source file, which is not guaranteed to be
    sorted by hour-slot; use find_hour() rather than indexing.
    """
    model_config = ConfigDict(frozen=True)

    source: str = ""
    records: Tuple[PriceRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    @property
    def day(self) -> Optional[date]:
        """Calendar day of the first record, None for an empty dataset."""
        return self.records[0].date if self.records else None

    def find_hour(self, hour: int) -> Optional[PriceRecord]:
        """Return the first record for a 1-based hour-slot, if any."""
        for record in self.records:
            if record.hour == hour:
                return record
        return None

