"""
Exception hierarchy for the PUN API.

Every failure raised by the retrieval, decoding and query layers derives from
PunError so the HTTP layer can translate it into a plain-text response.

    PunError
    ├── TimestampFormatError          (client input, HTTP 400)
    ├── RetrievalError                (browser/portal fault, HTTP 500)
    │   └── RetrievalTimeoutError
    ├── DecodingError                 (malformed upstream data, HTTP 500)
    │   ├── ArchiveFormatError
    │   └── PriceFormatError
    └── DataShapeError                (unexpected data shape, HTTP 500)
        ├── UnexpectedDatasetCountError
        ├── NoRecordForHourError
        └── NoRecordsInRangeError
"""


class PunError(Exception):
    """Base class for all PUN API errors."""

    status_code = 500


class TimestampFormatError(PunError, ValueError):
    """The requested time is not in a supported format."""

    status_code = 400


class RetrievalError(PunError):
    """The browser session failed to produce a bundle."""


class RetrievalTimeoutError(RetrievalError):
    """A retrieval step did not complete before the overall deadline."""


class DecodingError(PunError):
    """The downloaded bundle could not be decoded."""


class ArchiveFormatError(DecodingError):
    """The bundle is not a usable archive of XML price files."""


class PriceFormatError(DecodingError, ValueError):
    """A price file contains a field that is not a valid value."""


class DataShapeError(PunError):
    """Decoded data does not have the shape a query needs."""


class UnexpectedDatasetCountError(DataShapeError):
    """A single-day retrieval did not yield exactly one daily dataset."""


class NoRecordForHourError(DataShapeError, LookupError):
    """No price record exists for the requested hour-slot."""


class NoRecordsInRangeError(DataShapeError, LookupError):
    """No price records exist in the requested range."""
