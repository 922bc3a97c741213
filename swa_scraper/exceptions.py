"""Custom exception classes for the Southwest scraper"""


class SWAScraperError(Exception):
    """Base exception for scraper errors"""

    pass


class AmbiguousMatchError(SWAScraperError):
    """Raised when the autocomplete popup has zero or several matches for a code"""

    def __init__(self, code: str, matches: int):
        self.code = code
        self.matches = matches
        super().__init__(
            f"Ambiguous or missing match for {code}: {matches} candidates"
        )


class InputMismatchError(SWAScraperError):
    """Raised when the committed airport field differs from the requested code"""

    def __init__(self, expected: str, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Input mismatch, expected {expected}, actual {actual}.")


class ThrottleDetectedError(SWAScraperError):
    """Raised when the booking form answers with an error page instead of results

    The submission throttler keeps retrying on its own, so this error is only
    handed to hooks and logs; it never escapes ``SubmissionThrottler.submit``.
    """

    pass


class ExtractionError(SWAScraperError):
    """Raised when a required element of the results page is missing"""

    pass


class ResourceTimeoutError(SWAScraperError):
    """Raised when waiting for an element exceeds its timeout"""

    def __init__(self, selector: str, timeout_ms):
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms}ms waiting for {selector}")
