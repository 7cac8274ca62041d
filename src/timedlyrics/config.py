"""Configuration settings for TimedLyrics."""

import os

from .exceptions import ConfigError

# Provider settings (can be overridden via environment variables)
PROVIDER_BASE_URL = os.getenv(
    "TIMEDLYRICS_PROVIDER_BASE_URL", "https://studio-api.prod.suno.com/api/gen"
)
REQUEST_TIMEOUT = float(os.getenv("TIMEDLYRICS_REQUEST_TIMEOUT", "15"))
REQUEST_RETRIES = int(os.getenv("TIMEDLYRICS_REQUEST_RETRIES", "2"))

# Output formats
SUPPORTED_FORMATS = ("lrc", "srt")
DEFAULT_FORMAT = "lrc"

# Source selection
VALID_RATIO_THRESHOLD = float(os.getenv("TIMEDLYRICS_VALID_RATIO", "0.7"))
MAX_MONOTONIC_BREAKS = 1
MONOTONIC_TOLERANCE = 0.001  # 1ms

# Scale inference
SCALE_CANDIDATES = (1.0, 0.1, 0.01, 0.001, 10.0, 100.0)
SCALE_TOLERANCE = float(os.getenv("TIMEDLYRICS_SCALE_TOLERANCE", "0.25"))
MILLISECOND_HINT = 1000.0  # max value above this without a duration => ms

# Relative timing detection
RELATIVE_MIN_DURATION = 10.0
RELATIVE_MAX_END = 5.0
RELATIVE_MAX_END_RATIO = 0.2
RELATIVE_ZERO_START_RATIO = 0.8
RELATIVE_MIN_DISTINCT_STARTS = 3
DEFAULT_RELATIVE_WEIGHT = 0.5

# Envelope-guided expansion
ENVELOPE_SMOOTH_RADIUS = 2
ENVELOPE_LOW_PERCENTILE = float(os.getenv("TIMEDLYRICS_LOW_PERCENTILE", "20"))
ENVELOPE_HIGH_PERCENTILE = float(os.getenv("TIMEDLYRICS_HIGH_PERCENTILE", "85"))
ACTIVATION_WEIGHT = float(os.getenv("TIMEDLYRICS_ACTIVATION_WEIGHT", "0.22"))
EMPHASIS_EXPONENT = float(os.getenv("TIMEDLYRICS_EMPHASIS_EXPONENT", "1.25"))
EMPHASIS_FLOOR = 0.005
LEAD_IN_SECONDS = 0.2
LEAD_OUT_SECONDS = 0.3
MIN_ENVELOPE_SAMPLES = 8
MIN_BOUNDARY_GAP = 0.02

# Prompt repair
STRUCTURAL_LINE_DURATION = 0.35
SECONDS_PER_UNIT_RANGE = (0.08, 0.45)
DEFAULT_SECONDS_PER_UNIT = 0.22
MIN_SAMPLE_LINE_DURATION = 0.1
SYNTH_DURATION_RANGE = (0.7, 5.0)
SYNTH_MIN_FITTED_DURATION = 0.18
LEAD_WINDOW_MIN = 1.2
LEAD_WINDOW_PER_LINE = 0.9
COLLAPSE_OFFSET = 0.01

# Normalization
MIN_LINE_DURATION = 0.02
DEFAULT_LINE_DURATION = 2.5


def validate_config() -> None:
    """Validate configuration values."""
    if not 0.0 < VALID_RATIO_THRESHOLD <= 1.0:
        raise ConfigError("Invalid valid-ratio threshold")

    if not 0.0 < SCALE_TOLERANCE < 1.0:
        raise ConfigError("Invalid scale tolerance")

    if not 0.0 <= ENVELOPE_LOW_PERCENTILE < ENVELOPE_HIGH_PERCENTILE <= 100.0:
        raise ConfigError("Invalid envelope percentile cutoffs")

    if not 0.0 <= ACTIVATION_WEIGHT <= 1.0:
        raise ConfigError("Invalid activation weight")

    if EMPHASIS_EXPONENT <= 0:
        raise ConfigError("Invalid emphasis exponent")

    if REQUEST_TIMEOUT <= 0:
        raise ConfigError("Invalid request timeout")


# Validate config on import
validate_config()
