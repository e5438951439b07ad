"""
L4 Execution — Catalog document loading.

Reads the already-downloaded catalog JSON from disk.  Fetching and
refreshing that document is somebody else's job.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from src.core.models.catalog import Catalog
from src.core.services.jdk_install.errors import CatalogUnavailable

logger = logging.getLogger(__name__)


def load_catalog(path: Path | str | None) -> Catalog:
    """Load and validate the catalog document at ``path``.

    Raises:
        CatalogUnavailable: No path, unreadable file or malformed document.
    """
    if path is None:
        raise CatalogUnavailable("No downloadable JDK catalog is configured")

    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogUnavailable(f"Cannot read JDK catalog {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogUnavailable(f"Invalid JSON in JDK catalog {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogUnavailable(
            f"Expected a JSON object in {path}, got {type(data).__name__}"
        )

    try:
        catalog = Catalog.model_validate(data)
    except ValidationError as e:
        raise CatalogUnavailable(f"Malformed JDK catalog {path}: {e}") from e

    logger.debug("Loaded JDK catalog %s (version=%s, %d families)",
                 path, catalog.version, len(catalog.data))
    return catalog
