"""
Controller for PUN price endpoints.

Endpoints:
    - GET /?time=YYYY-MM-DD HH:MM: PUN for the hour containing time
    - GET /month?time=YYYY-MM-DD HH:MM: average PUN of the month containing time

Both return the value as plain text with 6 fractional digits. A cache miss
downloads the data from the GME portal, which can take up to the configured
retrieval timeout.
"""

from typing import Optional

from fastapi import Query
from fastapi.responses import PlainTextResponse

from .base_controller import BaseController
from ..exceptions import PunError, TimestampFormatError
from ..services import format_price

TIME_DESCRIPTION = (
    "Time as 'YYYY-MM-DD HH:MM' or 'YYYY-MM-DD' in market-local time. "
    "Defaults to now."
)


class PunController(BaseController):
    """Controller for hourly PUN and monthly average endpoints."""

    def _setup_routes(self):
        """Setup routes for PUN queries."""

        @self.router.get(
            "/",
            response_class=PlainTextResponse,
            tags=["PUN"],
            summary="Get the PUN for one hour",
        )
        def get_pun(time: Optional[str] = Query(None, description=TIME_DESCRIPTION)):
            """Return the PUN of the hour containing the requested time."""
            try:
                ts = self.service.parse_time(time)
            except TimestampFormatError as e:
                return self.handle_exception(e)
            try:
                return PlainTextResponse(format_price(self.service.get_hourly_price(ts)))
            except PunError as e:
                return self.handle_exception(e, "Fetch failed")

        @self.router.get(
            "/month",
            response_class=PlainTextResponse,
            tags=["PUN"],
            summary="Get the monthly average PUN",
        )
        def get_monthly_average(time: Optional[str] = Query(None, description=TIME_DESCRIPTION)):
            """Return the average PUN of the month containing the requested time."""
            try:
                ts = self.service.parse_time(time)
            except TimestampFormatError as e:
                return self.handle_exception(e)
            try:
                return PlainTextResponse(format_price(self.service.get_monthly_average(ts)))
            except PunError as e:
                return self.handle_exception(e, "Monthly average failed")
