"""Application-wide constants for the TutorHub platform."""

from __future__ import annotations

BRAND_NAME = "TutorHub"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Tutoring marketplace: teacher search, paid bookings, messaging and reviews."

# Text constraints
MIN_BIO_LENGTH = 10
MAX_BIO_LENGTH = 1000
MIN_REVIEW_COMMENT_LENGTH = 3
MAX_REVIEW_COMMENT_LENGTH = 1000
MAX_MESSAGE_LENGTH = 2000

# Review rating bounds
MIN_RATING = 1
MAX_RATING = 5

# Teacher profile bounds (hourly rate in cents)
MIN_HOURLY_RATE_CENTS = 100
MAX_HOURLY_RATE_CENTS = 100_000
MAX_YEARS_EXPERIENCE = 100

# Query limits
DEFAULT_QUERY_LIMIT = 100
DEFAULT_MESSAGE_PAGE_SIZE = 20
MAX_MESSAGE_PAGE_SIZE = 100

# Day of week mapping (0 = Sunday)
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# 24-hour "H:MM" or "HH:MM"
TIME_OF_DAY_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"
