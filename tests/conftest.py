import zipfile
from contextlib import contextmanager
from datetime import date, datetime

import pytest

from punapi.models import DailyDataset, PriceRecord
from punapi.utils.scraping import BundleFetcher


def make_xml(day: date, prices, zones=("NORD", "SICI")) -> str:
    """NewDataSet document with one Prezzi element per price, hour-slots from 1."""
    rows = []
    for hour, price in enumerate(prices, start=1):
        value = f"{price:.6f}".replace(".", ",")
        zone_xml = "".join(f"<{z}>{value}</{z}>" for z in zones)
        rows.append(
            f"<Prezzi><Data>{day.strftime('%Y%m%d')}</Data><Mercato>MGP</Mercato>"
            f"<Ora>{hour}</Ora><PUN>{value}</PUN>{zone_xml}</Prezzi>"
        )
    return '<?xml version="1.0" encoding="utf-8"?>\n<NewDataSet>' + "".join(rows) + "</NewDataSet>"


def write_bundle(path, entries) -> str:
    """Write a ZIP archive with the given {name: content} entries."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return str(path)


def write_corrupted_bundle(path) -> str:
    """Stored (uncompressed) entry whose payload no longer matches its CRC."""
    content = make_xml(date(2024, 3, 15), [10.0] * 24).encode("utf-8")
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr("20240315MGPPrezzi.xml", content)

    raw = bytearray(path.read_bytes())
    offset = raw.index(b"<Ora>1</Ora>") + len(b"<Ora>")
    raw[offset] = ord("7")
    path.write_bytes(bytes(raw))
    return str(path)


def make_dataset(day: date, prices, hours=None) -> DailyDataset:
    hours = hours or range(1, len(prices) + 1)
    return DailyDataset(
        source=f"{day.strftime('%Y%m%d')}MGPPrezzi.xml",
        records=tuple(PriceRecord(date=day, hour=h, pun=p) for h, p in zip(hours, prices)),
    )


class StubFetcher(BundleFetcher):
    """Yields a fixed bundle and records the requested ranges."""

    def __init__(self, bundle: str = None, error: Exception = None):
        self.bundle = bundle
        self.error = error
        self.calls = []

    @contextmanager
    def fetch_bundle(self, start, end):
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        yield self.bundle


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 10, 30))
