"""Global constants for the GitHub Content Utility.

These values serve as defaults for the HTTP layer and the GitHub App
authentication flow.  Override the environment variables rather than editing
this module.
"""

import os

# GitHub API
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_API_VERSION = os.environ.get("GITHUB_API_VERSION", "2022-11-28")
GITHUB_ACCEPT = "application/vnd.github+json"

# GitHub rejects app assertions that live longer than 10 minutes
JWT_LIFETIME_S = 600
JWT_ALGORITHM = "RS256"

# Transport
HTTP_TIMEOUT_S = float(os.environ.get("HTTP_TIMEOUT_S", 10.0))
PAGE_SIZE = int(os.environ.get("GITHUB_PAGE_SIZE", 100))

# Git
DEFAULT_REFERENCE_BRANCH = "main"

# Logging
DEFAULT_LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
