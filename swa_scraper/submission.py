"""Search form submission with exponential backoff on throttling"""

import asyncio
import math
import random
from typing import Awaitable, Callable, Optional

from loguru import logger

from .config import BACKOFF_CAP_SECONDS, ERROR_BANNER_SELECTOR, RESULTS_SELECTOR, SUBMIT_SELECTOR
from .exceptions import ResourceTimeoutError, ThrottleDetectedError
from .models import SearchSettings, ThrottleState


def backoff_ceiling(throttle_count: int, cap: float = BACKOFF_CAP_SECONDS) -> float:
    """Upper bound of the submit click delay in seconds: min(cap, e^count)"""
    if throttle_count < 0:
        raise ValueError("throttle_count must not be negative")
    # math.exp overflows past ~709
    if throttle_count > 700:
        return cap
    return min(cap, math.exp(throttle_count))


def random_click_delay(ceiling_seconds: float) -> float:
    """Click delay in milliseconds, uniform in [0, ceiling)"""
    return random.uniform(0, ceiling_seconds * 1000)


class SubmissionThrottler:
    """
    Submits the search form until a results page comes back.

    There is no attempt limit: a rate limit always lifts eventually, so the
    loop only backs off harder. The delay is applied as the click's
    press-to-release time, which slows the submission without a separate
    sleep.
    """

    def __init__(
        self,
        surface,
        settings: SearchSettings,
        state: Optional[ThrottleState] = None,
        click_delay: Optional[Callable[[float], float]] = None,
        on_throttle: Optional[Callable[[ThrottleDetectedError], Awaitable[None]]] = None,
    ):
        """
        Args:
            surface: RenderingSurface holding the filled-in booking form
            settings: Run settings (backoff cap, results timeout)
            state: Throttle counter; shared between throttlers to carry
                backoff pressure across searches
            click_delay: Maps the backoff ceiling (seconds) to a click delay
                in milliseconds; defaults to a uniform draw
            on_throttle: Hook awaited on every throttle detection
        """
        self.surface = surface
        self.settings = settings
        self.state = state if state is not None else ThrottleState()
        self.click_delay = click_delay or random_click_delay
        self.on_throttle = on_throttle

    async def submit(self) -> None:
        while True:
            ceiling = backoff_ceiling(
                self.state.consecutive_throttles, self.settings.backoff_cap_seconds
            )
            await self.surface.click(SUBMIT_SELECTOR, delay=self.click_delay(ceiling))

            throttle = await self._detect_throttle()
            if throttle is None:
                return

            if self.on_throttle:
                await self.on_throttle(throttle)
            count = self.state.record_throttle()
            logger.warning(f"Got throttled ({throttle}). Backing off... (throttles: {count})")

    async def _detect_throttle(self) -> Optional[ThrottleDetectedError]:
        """Wait for results or an error banner; return a throttle error or None"""
        selector, element = await self._first_rendered(RESULTS_SELECTOR, ERROR_BANNER_SELECTOR)

        if element is None:
            return ThrottleDetectedError("neither results nor an error banner appeared")

        if selector == ERROR_BANNER_SELECTOR:
            text = await element.text_content() or ""
            if "error" in text.lower():
                return ThrottleDetectedError(text.strip())
            logger.debug(f"Error banner without an error message, continuing: {text.strip()!r}")

        return None

    async def _first_rendered(self, *selectors: str):
        """Race waits on several selectors; first (selector, element) wins"""
        timeout = self.settings.submit_timeout_ms
        tasks = {
            asyncio.ensure_future(self.surface.wait_for_selector(s, timeout=timeout)): s
            for s in selectors
        }
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    try:
                        element = task.result()
                    except ResourceTimeoutError:
                        continue
                    if element is not None:
                        return tasks[task], element
            return None, None
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
