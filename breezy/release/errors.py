"""Error payload for the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "config_invalid",
    "invalid_input",
    "version_missing",
    "version_invalid",
    "forge_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical failure of a reconciliation run.

    Every kind is terminal: the run aborts and no further forge mutation is
    issued. The CLI maps ``kind`` to an exit code.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
