"""Logic for reading the list of documented versions."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_versions(config: dict[str, Any], source_dir: Path) -> list[str]:
    """Return the ordered version list from config or the versions file.

    Versions listed in the config win. Otherwise the JSON array in
    `<source_dir>/<versions_file>` is used, if present.
    """
    versions = config.get("versions") or []
    if versions:
        return [str(v) for v in versions]

    versions_file = source_dir / config.get("versions_file", "")
    if not versions_file.is_file():
        return []

    data = json.loads(versions_file.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        logger.warning("Ignoring %s: expected a JSON array", versions_file)
        return []
    return [str(v) for v in data]
