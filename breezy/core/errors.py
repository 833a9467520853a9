"""Process exit codes.

A reconciliation run either completes (``OK``) or aborts with one of the
codes below. The numeric values are part of the action's public contract
and must remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode", "exit_code_for_kind"]


class ErrorCode(IntEnum):
    """Exit codes for the ``breezy`` command.

    - 0: Success (including "skipped, nothing to do")
    - 1: Input error (missing branch/token, unknown archetype, bad directory)
    - 2: Config error (unreadable or malformed config file)
    - 3: Version error (no manifest, or manifest without a version)
    - 4: Forge error (GitHub API request failed)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    VERSION_ERROR = 3
    NETWORK_ERROR = 4


def exit_code_for_kind(kind: str) -> ErrorCode:
    """Map a ``ReleaseError.kind`` to its exit code."""
    if kind == "config_invalid":
        return ErrorCode.CONFIG_ERROR
    if kind in {"version_missing", "version_invalid"}:
        return ErrorCode.VERSION_ERROR
    if kind == "forge_failed":
        return ErrorCode.NETWORK_ERROR
    return ErrorCode.USER_ERROR
