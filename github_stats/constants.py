"""Constants and configuration values for the commit statistics collector."""

from __future__ import annotations

from datetime import timedelta

# =============================================================================
# API and HTTP Configuration
# =============================================================================

DEFAULT_API_URL = "https://api.github.com"

# GitHub API pagination defaults
API_PAGINATION = {
    'per_page': 100,
    'first_page': 1,
}

# Request headers. The legacy "token" scheme is what older GHE servers accept.
API_HEADERS = {
    'auth_scheme': 'token',
    'accept': 'application/vnd.github.v3+json',
}

# =============================================================================
# Time Windows
# =============================================================================

# ~3 months; a branch without commits inside this window is stale.
STALENESS_WINDOW = timedelta(hours=2160)

DEFAULT_INTERVAL = timedelta(hours=1)

# "since" is sent with minute precision
SINCE_FORMAT = "%Y-%m-%dT%H:%M:00Z"

# =============================================================================
# Collection Defaults
# =============================================================================

COLLECTION_DEFAULTS = {
    'interval': '1h',
    'max_workers': 1,
    'strict_decode': False,
}

# Measurement name carried by every emitted repository record
METRIC_NAME = "github_commits"
