"""Reads flight rows from the rendered results page"""

from typing import Callable, Optional

from loguru import logger

from .config import (
    FLIGHT_NUMBER_SELECTOR,
    NONSTOP_FILTER_SELECTOR,
    PRICE_SELECTOR,
    PRICE_UNAVAILABLE,
    RESULT_ROW_SELECTOR,
    RESULTS_SELECTOR,
    SELECTED_DATE_SELECTOR,
    STOPS_SELECTOR,
    TIME_STATUS_SELECTOR,
)
from .exceptions import ExtractionError
from .models import FlightRecord


def log_flight_record(record: FlightRecord) -> None:
    logger.info(record.format_line())


def _clean(text: Optional[str]) -> str:
    return " ".join((text or "").split())


class ResultExtractor:
    """
    Streams the results panel of the current page as FlightRecords.

    Rows are handed to the sink as soon as they are read, in page order.
    A row without a wanna-get-away fare gets PRICE_UNAVAILABLE; any other
    missing element raises ExtractionError and stops the extraction.
    """

    def __init__(
        self,
        surface,
        allow_stops: bool = False,
        sink: Optional[Callable[[FlightRecord], None]] = None,
    ):
        self.surface = surface
        self.allow_stops = allow_stops
        self.sink = sink or log_flight_record

    async def extract_results(self) -> int:
        """Emit every result row; returns the number of rows emitted"""
        route = await self._required_text(RESULTS_SELECTOR, "route label")
        selected_date = await self._required_text(SELECTED_DATE_SELECTOR, "selected date")
        logger.info(f"{route}, {selected_date}")

        if not self.allow_stops:
            await self._apply_nonstop_filter()

        count = priced = 0
        for row in await self.surface.query_all(RESULT_ROW_SELECTOR):
            record = await self._read_row(row)
            self.sink(record)
            count += 1
            priced += record.price_available

        logger.debug(f"Extracted {count} flights ({priced} priced) for {route}")
        return count

    async def _apply_nonstop_filter(self) -> None:
        if await self.surface.query(NONSTOP_FILTER_SELECTOR) is not None:
            await self.surface.click(NONSTOP_FILTER_SELECTOR)
        else:
            logger.info("No non-stop. Showing everything.")

    async def _read_row(self, row) -> FlightRecord:
        flight_number = await row.query_text(FLIGHT_NUMBER_SELECTOR)
        if flight_number is None:
            raise ExtractionError("Result row without a flight number")

        stops = await row.query_text(STOPS_SELECTOR)
        if stops is None:
            raise ExtractionError(f"Flight {_clean(flight_number)} has no stops label")

        time_markers = tuple(_clean(t) for t in await row.query_all_text(TIME_STATUS_SELECTOR))

        price = await row.query_text(PRICE_SELECTOR)

        return FlightRecord(
            flight_number=_clean(flight_number),
            stops=_clean(stops),
            time_markers=time_markers,
            price=_clean(price) if price is not None else PRICE_UNAVAILABLE,
        )

    async def _required_text(self, selector: str, what: str) -> str:
        text = await self.surface.evaluate_text(selector)
        if text is None:
            raise ExtractionError(f"Results page has no {what} ({selector})")
        return _clean(text)
