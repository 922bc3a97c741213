import re
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from loguru import logger

from swa_scraper.config import (
    ERROR_BANNER_SELECTOR,
    FLIGHT_NUMBER_SELECTOR,
    NONSTOP_FILTER_SELECTOR,
    PRICE_SELECTOR,
    RESULT_ROW_SELECTOR,
    RESULTS_SELECTOR,
    SELECTED_DATE_SELECTOR,
    STOPS_SELECTOR,
    SUBMIT_SELECTOR,
    TIME_STATUS_SELECTOR,
)
from swa_scraper.exceptions import ResourceTimeoutError

CANDIDATE_PATTERN = re.compile(r'^\[id\^="(?P<field>[^"]+)--item-"\]$')

AIRPORTS = {
    "SJC": "San Jose, CA - SJC",
    "SFO": "San Francisco, CA - SFO",
    "BUR": "Burbank, CA - BUR",
    "LAX": "Los Angeles, CA - LAX",
}


class FakeElement:
    def __init__(self, text: Optional[str] = "", attrs=None, children=None):
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}

    async def text_content(self):
        return self.text

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def query_text(self, selector):
        return self.children.get(selector)

    async def query_all_text(self, selector):
        return list(self.children.get(selector, []))


def make_row(flight="1234", stops="Nonstop", times=("6:00AM", "7:20AM"), price="$79"):
    children = {
        FLIGHT_NUMBER_SELECTOR: flight,
        STOPS_SELECTOR: stops,
        TIME_STATUS_SELECTOR: list(times),
    }
    if price is not None:
        children[PRICE_SELECTOR] = price
    return FakeElement(children=children)


class FakeSurface:
    """
    In-memory booking site.

    Typing into an airport field and waiting for its popup renders one
    suggestion per known airport whose code equals the typed text, unless
    ``candidate_script[field_id]`` lists the suggestions to show per attempt
    (the last entry repeats). Each submit click consumes one entry of
    ``submit_outcomes``: "results", "error", "banner" (no error text) or
    "timeout".
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.values: Dict[str, str] = {}
        self.focused: Optional[str] = None
        self.candidate_script: Dict[str, List[List[FakeElement]]] = {}
        self.commit_override: Dict[str, str] = {}
        self.current_candidates: Dict[str, List[FakeElement]] = {}
        self.submit_outcomes: List[str] = ["results"]
        self.outcome: Optional[str] = None
        self.texts: Dict[str, str] = {
            RESULTS_SELECTOR: "SJC - BUR",
            SELECTED_DATE_SELECTOR: "Wed, Mar 22",
        }
        self.present = {NONSTOP_FILTER_SELECTOR}
        self.rows: List[FakeElement] = [make_row()]
        self.screenshots: List[Path] = []
        self.closed = 0

    def calls_to(self, method: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == method]

    async def navigate(self, url):
        self.calls.append(("navigate", url))
        self.values = {}

    async def set_viewport(self, width, height):
        self.calls.append(("set_viewport", width, height))

    async def wait_for_selector(self, selector, timeout=None):
        self.calls.append(("wait_for_selector", selector, timeout))

        match = CANDIDATE_PATTERN.match(selector)
        if match:
            field_id = match.group("field")
            candidates = self._render_candidates(field_id)
            self.current_candidates[field_id] = candidates
            if not candidates:
                raise ResourceTimeoutError(selector, timeout)
            return candidates[0]

        if selector == RESULTS_SELECTOR:
            if self.outcome == "results":
                return FakeElement(self.texts[RESULTS_SELECTOR])
            raise ResourceTimeoutError(selector, timeout)

        if selector == ERROR_BANNER_SELECTOR:
            if self.outcome == "error":
                return FakeElement("An error occurred, please try again")
            if self.outcome == "banner":
                return FakeElement("Please review your selection")
            raise ResourceTimeoutError(selector, timeout)

        return FakeElement()

    def _render_candidates(self, field_id):
        script = self.candidate_script.get(field_id)
        if script:
            return script.pop(0) if len(script) > 1 else script[0]
        typed = self.values.get(f"#{field_id}", "")
        return [
            FakeElement(text, attrs={"id": f"{field_id}--item-{i}"})
            for i, (code, text) in enumerate(AIRPORTS.items())
            if code == typed
        ]

    async def click(self, selector, delay=0):
        self.calls.append(("click", selector, delay))

        if selector == SUBMIT_SELECTOR:
            self.outcome = self.submit_outcomes.pop(0) if len(self.submit_outcomes) > 1 else self.submit_outcomes[0]
            return

        for field_id, candidates in self.current_candidates.items():
            for candidate in candidates:
                if selector == f"#{candidate.attrs['id']}":
                    committed = self.commit_override.get(field_id, candidate.text.strip()[-3:])
                    self.values[f"#{field_id}"] = committed
                    return

    async def type(self, selector, text, delay=0):
        self.calls.append(("type", selector, text, delay))
        self.values[selector] = self.values.get(selector, "") + text

    async def focus(self, selector):
        self.calls.append(("focus", selector))
        self.focused = selector

    async def press_key(self, key):
        self.calls.append(("press_key", key))
        if key == "Backspace" and self.focused:
            self.values[self.focused] = self.values.get(self.focused, "")[:-1]

    async def evaluate_text(self, selector):
        return self.texts.get(selector)

    async def evaluate_attribute(self, selector, name):
        return None

    async def input_value(self, selector):
        return self.values.get(selector, "")

    async def query(self, selector):
        return FakeElement() if selector in self.present else None

    async def query_all(self, selector):
        if selector == RESULT_ROW_SELECTOR:
            return list(self.rows)
        match = CANDIDATE_PATTERN.match(selector)
        if match:
            return list(self.current_candidates.get(match.group("field"), []))
        return []

    async def screenshot(self, path):
        self.screenshots.append(Path(path))
        Path(path).write_bytes(b"\x89PNG")

    async def close(self):
        self.closed += 1


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
