"""
Decoder for the ZIP bundles downloaded from mercatoelettrico.org.

A bundle holds one XML file per trading day in the GME "NewDataSet" format:

    <NewDataSet>
      <Prezzi>
        <Data>20230326</Data>
        <Mercato>MGP</Mercato>
        <Ora>1</Ora>
        <PUN>137,330000</PUN>
        <NORD>137,330000</NORD>
        ...
      </Prezzi>
      ...
    </NewDataSet>

Prices use a comma as decimal separator. The number of Prezzi elements per
file is 24 on normal days, 23 or 25 on DST transition days.
"""

import logging
import os
import zipfile
import zlib
from datetime import datetime
from typing import List, Tuple

from bs4 import BeautifulSoup

from ...exceptions import ArchiveFormatError, PriceFormatError
from ...models import DailyDataset, PriceRecord

RECORD_TAG = 'Prezzi'
ROOT_TAG = 'NewDataSet'
DATE_TAG = 'Data'
MARKET_TAG = 'Mercato'
HOUR_TAG = 'Ora'
PUN_TAG = 'PUN'
NON_ZONE_TAGS = {DATE_TAG, MARKET_TAG, HOUR_TAG, PUN_TAG}


def parse_price(raw: str) -> float:
    """
    Parse a price field published with a comma decimal separator.

    Args:
        raw: Price string like "137,330000"

    Returns:
        Price as float in EUR/MWh

    Raises:
        PriceFormatError: if the field is not a number
    """
    # float() also accepts digit-group underscores, which the source never uses
    if isinstance(raw, str) and '_' in raw:
        raise PriceFormatError(f"Invalid price '{raw}'")
    try:
        return float(raw.strip().replace(',', '.'))
    except (ValueError, AttributeError) as e:
        raise PriceFormatError(f"Invalid price '{raw}': {e}") from e


def encode_price(value: float) -> str:
    """Format a price with 6 significant digits and a comma decimal separator."""
    return f"{value:.6g}".replace('.', ',', 1)


class ArchiveDecoder:
    """
    Turns a downloaded bundle into DailyDatasets, one per XML entry.

    Entry order follows the archive, not the calendar.
    """

    def __init__(self, parser: str = 'xml'):
        self.parser = parser
        self.logger = logging.getLogger(__name__)

    def decode(self, path: str) -> Tuple[DailyDataset, ...]:
        """
        Decode every XML entry of the archive at path.

        Raises:
            ArchiveFormatError: unreadable archive or no XML entries
            PriceFormatError: invalid field in one of the entries
        """
        try:
            archive = zipfile.ZipFile(path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveFormatError(f"Failed to open ZIP file '{path}': {e}") from e

        with archive:
            entries = [
                info for info in archive.infolist()
                if not info.is_dir() and info.filename.lower().endswith('.xml')
            ]
            if not entries:
                raise ArchiveFormatError(
                    f"Expected at least one XML file in ZIP archive '{os.path.basename(path)}', "
                    f"got 0 out of {len(archive.infolist())} entries")

            datasets = []
            for info in entries:
                try:
                    with archive.open(info) as fd:
                        data = fd.read()
                except (zipfile.BadZipFile, zlib.error, RuntimeError,
                        NotImplementedError, OSError) as e:
                    raise ArchiveFormatError(
                        f"Failed to read XML file '{info.filename}' contained in ZIP file: {e}") from e
                datasets.append(self.decode_entry(data, info.filename))

        self.logger.info(
            f"Decoded {len(datasets)} dataset(s) from '{os.path.basename(path)}'")
        return tuple(datasets)

    def decode_entry(self, data: bytes, name: str = '') -> DailyDataset:
        """Decode one NewDataSet XML document."""
        soup = BeautifulSoup(data, self.parser)
        if soup.find(ROOT_TAG) is None:
            raise ArchiveFormatError(
                f"XML file '{name}' has no {ROOT_TAG} element")

        records = [self._decode_record(element, name)
                   for element in soup.find_all(RECORD_TAG)]
        self.logger.debug(f"Decoded {len(records)} records from '{name}'")
        return DailyDataset(source=name, records=tuple(records))

    def _decode_record(self, element, name: str) -> PriceRecord:
        fields = {
            child.name: child.get_text(strip=True)
            for child in element.find_all(recursive=False)
        }

        try:
            day = datetime.strptime(fields[DATE_TAG], "%Y%m%d").date()
        except (KeyError, ValueError) as e:
            raise PriceFormatError(
                f"Invalid or missing {DATE_TAG} in '{name}': {e}") from e

        try:
            hour = int(fields[HOUR_TAG])
        except (KeyError, ValueError) as e:
            raise PriceFormatError(
                f"Invalid or missing {HOUR_TAG} in '{name}': {e}") from e

        if PUN_TAG not in fields:
            raise PriceFormatError(
                f"Missing {PUN_TAG} for hour {hour} in '{name}'")

        zones = {
            tag: parse_price(text)
            for tag, text in fields.items() if tag not in NON_ZONE_TAGS
        }
        return PriceRecord(
            date=day,
            hour=hour,
            pun=parse_price(fields[PUN_TAG]),
            market=fields.get(MARKET_TAG) or None,
            zones=zones,
        )

    def encode_dataset(self, dataset: DailyDataset) -> str:
        """Render a dataset back into the NewDataSet XML format."""
        soup = BeautifulSoup(features=self.parser)
        root = soup.new_tag(ROOT_TAG)
        soup.append(root)

        for record in dataset.records:
            fields: List[Tuple[str, str]] = [
                (DATE_TAG, record.date.strftime("%Y%m%d")),
            ]
            if record.market:
                fields.append((MARKET_TAG, record.market))
            fields.append((HOUR_TAG, str(record.hour)))
            fields.append((PUN_TAG, encode_price(record.pun)))
            fields.extend((zone, encode_price(value))
                          for zone, value in record.zones.items())

            element = soup.new_tag(RECORD_TAG)
            for tag, text in fields:
                child = soup.new_tag(tag)
                child.string = text
                element.append(child)
            root.append(element)

        return str(soup)
