"""Configuration constants for the Southwest scraper"""

from pathlib import Path

# Booking page
BOOKING_URL = "https://www.southwest.com/air/booking/"
VIEWPORT_WIDTH = 1080
VIEWPORT_HEIGHT = 1024

# Search form selectors
ONE_WAY_SELECTOR = 'input[value="oneway"]'
ORIGIN_FIELD_ID = "originationAirportCode"
DESTINATION_FIELD_ID = "destinationAirportCode"
DEPARTURE_DATE_SELECTOR = "#departureDate"
SUBMIT_SELECTOR = "#form-mixin--submit-button"

# Results page selectors
RESULTS_SELECTOR = ".price-matrix--airport-codes"
ERROR_BANNER_SELECTOR = ".page-error .message_error"
SELECTED_DATE_SELECTOR = ".calendar-strip--content_selected"
NONSTOP_FILTER_SELECTOR = ".filters--filter-area-nonstop"
RESULT_ROW_SELECTOR = ".air-booking-select-detail"
FLIGHT_NUMBER_SELECTOR = ".air-operations-flight-numbers .actionable--text"
TIME_STATUS_SELECTOR = ".air-operations-time-status"
STOPS_SELECTOR = ".select-detail--number-of-stops"
PRICE_SELECTOR = '[data-test="fare-button--wanna-get-away"] .swa-g-screen-reader-only'

# Shown instead of a fare when the wanna-get-away tier is sold out
PRICE_UNAVAILABLE = "Wanna get away unavailable"

# Retry configuration
MAX_ATTEMPTS = 3

# Human-like typing (milliseconds per keystroke)
KEYSTROKE_DELAY_RANGE = (10, 50)
FIELD_CLEAR_DELETIONS = 6  # 3-letter code plus margin

# Timeouts (milliseconds)
AUTOCOMPLETE_TIMEOUT_MS = 1000
SUBMIT_TIMEOUT_MS = 30000
NAVIGATION_TIMEOUT_MS = 30000

# Throttle backoff
BACKOFF_CAP_SECONDS = 30.0

# Diagnostics
DEFAULT_LOG_FILE = Path("./logs/swa_scraper.log")
DEFAULT_SCREENSHOT_DIR = Path("./logs/screenshots")
