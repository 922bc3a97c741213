"""Southwest Airlines Flight Scraper
Drives the booking form in a real browser and streams one-way fares
"""

__version__ = "0.1.0"

from .airport_resolver import AirportResolver
from .date_utils import format_form_date, parse_date_list, parse_date_or_range
from .diagnostics import DebugConsole, ScreenshotRecorder
from .exceptions import (
    AmbiguousMatchError,
    ExtractionError,
    InputMismatchError,
    ResourceTimeoutError,
    SWAScraperError,
    ThrottleDetectedError,
)
from .extractor import ResultExtractor
from .models import (
    AutocompleteCandidate,
    ErrorType,
    FlightRecord,
    SearchRequest,
    SearchSettings,
    SearchStage,
    ThrottleState,
)
from .orchestrator import RunSummary, SearchOrchestrator
from .retry import retry
from .submission import SubmissionThrottler, backoff_ceiling
from .surface import CamoufoxSurface, RenderingSurface

__all__ = [
    "__version__",
    "AirportResolver",
    "AmbiguousMatchError",
    "AutocompleteCandidate",
    "CamoufoxSurface",
    "DebugConsole",
    "ErrorType",
    "ExtractionError",
    "FlightRecord",
    "InputMismatchError",
    "RenderingSurface",
    "ResourceTimeoutError",
    "ResultExtractor",
    "RunSummary",
    "SWAScraperError",
    "ScreenshotRecorder",
    "SearchOrchestrator",
    "SearchRequest",
    "SearchSettings",
    "SearchStage",
    "SubmissionThrottler",
    "ThrottleDetectedError",
    "ThrottleState",
    "backoff_ceiling",
    "format_form_date",
    "parse_date_list",
    "parse_date_or_range",
    "retry",
]
