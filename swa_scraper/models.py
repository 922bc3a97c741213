"""Data models and enums for the Southwest scraper"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from .config import (
    AUTOCOMPLETE_TIMEOUT_MS,
    BACKOFF_CAP_SECONDS,
    DEFAULT_SCREENSHOT_DIR,
    KEYSTROKE_DELAY_RANGE,
    MAX_ATTEMPTS,
    PRICE_UNAVAILABLE,
    SUBMIT_TIMEOUT_MS,
)


class ErrorType(Enum):
    """Error categories for logging and handling"""

    TRANSIENT = "transient"  # Redo the step
    RATE_LIMIT = "rate_limit"  # Backoff and resubmit
    EXTRACTION = "extraction"  # Results page incomplete
    PERMANENT = "permanent"


class SearchStage(Enum):
    """Progress of a single combination through the booking flow"""

    NOT_STARTED = "not_started"
    NAVIGATED = "navigated"
    TRIP_TYPE_SET = "trip_type_set"
    ORIGIN_RESOLVED = "origin_resolved"
    DATE_SET = "date_set"
    DESTINATION_RESOLVED = "destination_resolved"
    SUBMITTED = "submitted"
    EXTRACTED = "extracted"
    FAILED = "failed"


def normalize_airport_code(code: str) -> str:
    """Upper-case and validate a 3-letter IATA airport code"""
    normalized = code.strip().upper()
    if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
        raise ValueError(f"Invalid airport code: {code!r}")
    return normalized


@dataclass(frozen=True)
class SearchRequest:
    """One (origin, destination, date) combination"""

    origin: str
    destination: str
    date: datetime.date

    def __post_init__(self):
        object.__setattr__(self, "origin", normalize_airport_code(self.origin))
        object.__setattr__(self, "destination", normalize_airport_code(self.destination))

    def __str__(self) -> str:
        return f"{self.origin} → {self.destination} on {self.date.isoformat()}"


@dataclass(frozen=True)
class AutocompleteCandidate:
    element_id: str
    display_text: str

    def matches(self, code: str) -> bool:
        return self.display_text.strip().endswith(code)


@dataclass
class ThrottleState:
    """Consecutive throttle detections; drives the submit backoff"""

    consecutive_throttles: int = 0

    def record_throttle(self) -> int:
        self.consecutive_throttles += 1
        return self.consecutive_throttles


@dataclass(frozen=True)
class FlightRecord:
    flight_number: str
    stops: str
    time_markers: Tuple[str, ...]
    price: str = PRICE_UNAVAILABLE

    @property
    def price_available(self) -> bool:
        return self.price != PRICE_UNAVAILABLE

    def format_line(self) -> str:
        return (
            f"Flight {self.flight_number}, {self.stops}, "
            f"{','.join(self.time_markers)} @ {self.price}"
        )


@dataclass
class SearchSettings:
    """Tunables for one scraper run"""

    allow_stops: bool = False
    debug: bool = False
    headless: Optional[bool] = None  # None follows debug
    max_attempts: int = MAX_ATTEMPTS
    keystroke_delay_ms: Tuple[float, float] = KEYSTROKE_DELAY_RANGE
    autocomplete_timeout_ms: int = AUTOCOMPLETE_TIMEOUT_MS
    submit_timeout_ms: int = SUBMIT_TIMEOUT_MS
    backoff_cap_seconds: float = BACKOFF_CAP_SECONDS
    carry_throttle_state: bool = True
    screenshot_dir: Path = field(default_factory=lambda: DEFAULT_SCREENSHOT_DIR)

    @property
    def effective_max_attempts(self) -> int:
        # Debug mode fails fast so the console sees the broken page
        return 1 if self.debug else self.max_attempts

    @property
    def effective_headless(self) -> bool:
        if self.headless is not None:
            return self.headless
        return not self.debug
