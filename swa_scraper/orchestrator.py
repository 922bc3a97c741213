"""Drives the booking flow for every (date, origin, destination) combination"""

import datetime
from dataclasses import dataclass
from itertools import product
from typing import Awaitable, Callable, Iterator, List, Optional, Sequence

from loguru import logger

from .airport_resolver import AirportResolver
from .config import (
    BOOKING_URL,
    DEPARTURE_DATE_SELECTOR,
    DESTINATION_FIELD_ID,
    ONE_WAY_SELECTOR,
    ORIGIN_FIELD_ID,
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
)
from .date_utils import format_form_date
from .diagnostics import ScreenshotRecorder
from .extractor import ResultExtractor
from .models import FlightRecord, SearchRequest, SearchSettings, SearchStage, ThrottleState
from .retry import retry
from .submission import SubmissionThrottler


@dataclass
class RunSummary:
    total: int
    completed: int = 0
    flights: int = 0
    throttles: int = 0
    failed: Optional[SearchRequest] = None

    @property
    def succeeded(self) -> bool:
        return self.failed is None and self.completed == self.total


class SearchOrchestrator:
    """
    Runs searches one after another in a single browser tab.

    Each combination starts by navigating to the booking page, so nothing
    carries over between them except the throttle counter (when
    ``settings.carry_throttle_state`` is set). The first combination that
    exhausts its attempts ends the run.
    """

    def __init__(
        self,
        surface,
        settings: SearchSettings,
        console: Optional[Callable[[object, BaseException], Awaitable[None]]] = None,
        recorder: Optional[ScreenshotRecorder] = None,
        keystroke_delay: Optional[Callable[[], float]] = None,
        click_delay: Optional[Callable[[float], float]] = None,
        sink: Optional[Callable[[FlightRecord], None]] = None,
    ):
        """
        Args:
            surface: RenderingSurface shared by all searches; closed by run()
            settings: Run settings
            console: Debug hook awaited once with (surface, error) when a
                combination fails in debug mode
            recorder: Screenshot recorder; defaults to one enabled by debug
            keystroke_delay: Passed to the AirportResolver
            click_delay: Passed to the SubmissionThrottler
            sink: Receives each FlightRecord; defaults to the log
        """
        self.surface = surface
        self.settings = settings
        self.console = console
        self.recorder = recorder or ScreenshotRecorder(
            enabled=settings.debug, directory=settings.screenshot_dir
        )
        self.click_delay = click_delay
        self.throttle_state = ThrottleState()
        self._throttle_states = [self.throttle_state]
        self.stage = SearchStage.NOT_STARTED

        self.resolver = AirportResolver(
            surface,
            settings,
            keystroke_delay=keystroke_delay,
            on_failure=self._capture_failure,
        )
        self.extractor = ResultExtractor(surface, allow_stops=settings.allow_stops, sink=sink)

    @staticmethod
    def combinations(
        origins: Sequence[str],
        destinations: Sequence[str],
        dates: Sequence[datetime.date],
    ) -> Iterator[SearchRequest]:
        """Yield requests with dates outermost, then origins, then destinations"""
        for date, origin, destination in product(dates, origins, destinations):
            yield SearchRequest(origin=origin, destination=destination, date=date)

    async def run(
        self,
        origins: Sequence[str],
        destinations: Sequence[str],
        dates: Sequence[datetime.date],
    ) -> RunSummary:
        requests: List[SearchRequest] = list(self.combinations(origins, destinations, dates))
        summary = RunSummary(total=len(requests))
        request = None

        try:
            for request in requests:
                summary.flights += await self.search_with_retry(request)
                summary.completed += 1
        except Exception as e:
            summary.failed = request
            if not self.settings.debug:
                raise
            logger.exception(f"Search {request} failed: {e}")
            if self.console:
                await self.console(self.surface, e)
        finally:
            summary.throttles = sum(s.consecutive_throttles for s in self._throttle_states)
            self._log_summary(summary)
            await self.surface.close()

        return summary

    async def search_with_retry(self, request: SearchRequest) -> int:
        """Search one combination, redoing the whole flow on failure"""
        state = self.throttle_state
        if not self.settings.carry_throttle_state:
            state = ThrottleState()
            self._throttle_states.append(state)

        logger.info(f"🔍 Starting: {request}")
        flights = await retry(
            lambda: self.search(request, state),
            max_attempts=self.settings.effective_max_attempts,
            on_failure=self._capture_failure,
            description=f"Search {request}",
        )
        logger.success(f"✅ {request}: {flights} flights")
        return flights

    async def search(self, request: SearchRequest, throttle_state: Optional[ThrottleState] = None) -> int:
        """Fill in and submit the booking form once; returns the number of flights"""
        self.stage = SearchStage.NOT_STARTED
        try:
            await self.surface.navigate(BOOKING_URL)
            await self.surface.set_viewport(VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
            self._advance(SearchStage.NAVIGATED)

            await self.surface.wait_for_selector(ONE_WAY_SELECTOR)
            await self.surface.click(ONE_WAY_SELECTOR)
            self._advance(SearchStage.TRIP_TYPE_SET)

            await self.resolver.resolve(request.origin, ORIGIN_FIELD_ID)
            self._advance(SearchStage.ORIGIN_RESOLVED)

            await self.surface.type(DEPARTURE_DATE_SELECTOR, format_form_date(request.date))
            self._advance(SearchStage.DATE_SET)

            await self.resolver.resolve(request.destination, DESTINATION_FIELD_ID)
            self._advance(SearchStage.DESTINATION_RESOLVED)

            throttler = SubmissionThrottler(
                self.surface,
                self.settings,
                state=throttle_state if throttle_state is not None else self.throttle_state,
                click_delay=self.click_delay,
                on_throttle=self._capture_throttle,
            )
            await throttler.submit()
            self._advance(SearchStage.SUBMITTED)

            flights = await self.extractor.extract_results()
            self._advance(SearchStage.EXTRACTED)
            return flights

        except Exception:
            logger.debug(f"{request} failed after stage {self.stage.value}")
            self.stage = SearchStage.FAILED
            raise

    def _advance(self, stage: SearchStage) -> None:
        logger.debug(f"{self.stage.value} → {stage.value}")
        self.stage = stage

    async def _capture_failure(self, attempt: int, error: Exception) -> None:
        await self.recorder.capture(self.surface, f"failure_{attempt}")

    async def _capture_throttle(self, error) -> None:
        await self.recorder.capture(self.surface, "throttle")

    def _log_summary(self, summary: RunSummary) -> None:
        logger.info("=" * 60)
        if summary.succeeded:
            logger.success("✓ Search complete!")
        else:
            logger.error(f"❌ Stopped at {summary.failed}")
        logger.info(f"  Combinations: {summary.completed}/{summary.total}")
        logger.info(f"  Flights:      {summary.flights}")
        logger.info(f"  Throttles:    {summary.throttles}")
        logger.info("=" * 60)
