from __future__ import annotations

# GitHub REST API requests
API_TIMEOUT_SECONDS = 30.0

# Idempotent (GET) retry policy; mutating requests are never retried
READ_RETRY_ATTEMPTS = 3
READ_RETRY_DELAY_SECONDS = 1.0

# Releases and search results are fetched in pages of this size
MAX_PER_PAGE = 100
