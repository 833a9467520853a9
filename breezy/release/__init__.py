"""Release reconciliation engine.

- version: manifest lookup and prerelease detection
- selection: draft/published classification and the skip decision
- notes: changelog composition
- naming: marker, tag and release-name rendering
- reconcile: run sequencing against the forge client
"""

from __future__ import annotations
