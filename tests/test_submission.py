import math

import pytest

from swa_scraper.config import SUBMIT_SELECTOR
from swa_scraper.exceptions import ThrottleDetectedError
from swa_scraper.models import SearchSettings, ThrottleState
from swa_scraper.submission import SubmissionThrottler, backoff_ceiling, random_click_delay


class RecordingDelay:
    def __init__(self):
        self.ceilings = []

    def __call__(self, ceiling_seconds):
        self.ceilings.append(ceiling_seconds)
        return 0.0


def test_backoff_ceiling_grows_exponentially_to_cap():
    values = [backoff_ceiling(n) for n in range(8)]
    assert values[0] == 1.0
    assert values[1] == pytest.approx(math.e)
    assert values[3] == pytest.approx(math.exp(3))
    assert values[4:] == [30.0] * 4
    assert values == sorted(values)


def test_backoff_ceiling_survives_huge_counts():
    assert backoff_ceiling(10_000) == 30.0
    assert backoff_ceiling(2, cap=5.0) == 5.0


def test_backoff_ceiling_rejects_negative_counts():
    with pytest.raises(ValueError):
        backoff_ceiling(-1)


def test_random_click_delay_is_below_ceiling():
    for _ in range(50):
        assert 0 <= random_click_delay(2.0) <= 2000


@pytest.mark.asyncio
async def test_results_on_first_click(surface):
    delay = RecordingDelay()
    throttler = SubmissionThrottler(surface, SearchSettings(), click_delay=delay)

    await throttler.submit()

    assert delay.ceilings == [1.0]
    assert throttler.state.consecutive_throttles == 0
    assert surface.calls_to("click") == [("click", SUBMIT_SELECTOR, 0.0)]


@pytest.mark.asyncio
async def test_error_banner_twice_then_results(surface, log_messages):
    surface.submit_outcomes = ["error", "error", "results"]
    delay = RecordingDelay()
    throttled = []

    async def on_throttle(error):
        throttled.append(error)

    throttler = SubmissionThrottler(
        surface, SearchSettings(), click_delay=delay, on_throttle=on_throttle
    )
    await throttler.submit()

    assert throttler.state.consecutive_throttles == 2
    assert delay.ceilings == pytest.approx([1.0, math.e, math.exp(2)])
    assert len(surface.calls_to("click")) == 3
    assert all(isinstance(e, ThrottleDetectedError) for e in throttled)
    assert len(throttled) == 2
    assert sum("Got throttled" in m for m in log_messages) == 2


@pytest.mark.asyncio
async def test_timeout_of_both_waits_counts_as_throttle(surface):
    surface.submit_outcomes = ["timeout", "results"]
    throttler = SubmissionThrottler(surface, SearchSettings(), click_delay=RecordingDelay())

    await throttler.submit()
    assert throttler.state.consecutive_throttles == 1


@pytest.mark.asyncio
async def test_banner_without_error_text_is_not_a_throttle(surface):
    surface.submit_outcomes = ["banner"]
    throttler = SubmissionThrottler(surface, SearchSettings(), click_delay=RecordingDelay())

    await throttler.submit()
    assert throttler.state.consecutive_throttles == 0


@pytest.mark.asyncio
async def test_shared_state_keeps_backoff_between_searches(surface):
    state = ThrottleState()
    delay = RecordingDelay()

    surface.submit_outcomes = ["error", "results"]
    await SubmissionThrottler(surface, SearchSettings(), state=state, click_delay=delay).submit()

    surface.submit_outcomes = ["results"]
    await SubmissionThrottler(surface, SearchSettings(), state=state, click_delay=delay).submit()

    assert state.consecutive_throttles == 1
    assert delay.ceilings == pytest.approx([1.0, math.e, math.e])


@pytest.mark.asyncio
async def test_backoff_cap_from_settings(surface):
    surface.submit_outcomes = ["error", "error", "results"]
    delay = RecordingDelay()
    throttler = SubmissionThrottler(
        surface, SearchSettings(backoff_cap_seconds=2.0), click_delay=delay
    )

    await throttler.submit()
    assert delay.ceilings == pytest.approx([1.0, 2.0, 2.0])


@pytest.mark.asyncio
async def test_submit_waits_use_settings_timeout(surface):
    throttler = SubmissionThrottler(
        surface, SearchSettings(submit_timeout_ms=1234), click_delay=RecordingDelay()
    )
    await throttler.submit()

    timeouts = {c[2] for c in surface.calls_to("wait_for_selector")}
    assert timeouts == {1234}
