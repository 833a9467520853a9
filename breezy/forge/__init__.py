"""GitHub adapters: HTTP transport and the REST client used by reconciliation."""

from .github import ForgeClient, GitHubClient
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "ForgeClient",
    "GitHubClient",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]
