"""
Logging Configuration

Settings for console/file logging of the API and the OpenRouter client.
"""
import os
from pathlib import Path

# =========================
# Output
# =========================

# Rotating log files are written here (default: logs/output/)
LOG_OUTPUT_DIR = os.getenv("LOG_OUTPUT_DIR", str(Path(__file__).parent / "output"))

# Console level; file handlers keep their own levels
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Set to false to log to stdout only
LOG_TO_FILES = os.getenv("LOG_TO_FILES", "true").lower() in ("1", "true", "yes")

# =========================
# Rotation
# =========================

LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(10 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

# =========================
# Content
# =========================

# Characters of prompt/response text kept in request and response records
LOG_PREVIEW_LENGTH = int(os.getenv("LOG_PREVIEW_LENGTH", "200"))

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(request_id)-36s | %(user_id)-20s | %(message)s"

LOG_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(request_id)-36s | %(user_id)-20s | "
    "%(name)s:%(lineno)d | %(message)s"
)

# Metrics lines are pre-serialized JSON
LOG_JSON_FORMAT = "%(message)s"

# =========================
# Files
# =========================

LOG_FILE_REQUESTS = os.getenv("LOG_FILE_REQUESTS", "openrouter_requests.log")
LOG_FILE_ERRORS = os.getenv("LOG_FILE_ERRORS", "openrouter_errors.log")
LOG_FILE_METRICS = os.getenv("LOG_FILE_METRICS", "openrouter_metrics.log")
LOG_FILE_DEBUG = os.getenv("LOG_FILE_DEBUG", "openrouter_debug.log")
