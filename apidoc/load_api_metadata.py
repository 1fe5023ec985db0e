"""Logic for loading generator output (api.json) from disk."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

API_DIR = "api"
METADATA_FILE = "api.json"


def metadata_file_for_version(
    source_dir: Path, version: str, *, is_default: bool
) -> Path:
    """Determine where the metadata of a version lives.

    The default version sits at <source_dir>/api/api.json, every other version
    under <source_dir>/<version>/api/api.json.
    """
    root = source_dir if is_default else source_dir / version
    return root / API_DIR / METADATA_FILE


def load_api_metadata(path: Path) -> dict[str, dict[str, Any]]:
    """Load a type name -> type metadata mapping from a generator JSON file."""
    if not path.is_file():
        logger.warning("No API metadata found at %s", path)
        return {}

    data = json.loads(path.read_text(encoding="utf-8"))
    types: dict[str, dict[str, Any]] = {}
    for key, value in (data or {}).items():
        if not isinstance(value, dict):
            continue
        # Generator output keys types by name; keep the two in sync
        value.setdefault("name", key)
        types[str(value["name"])] = value
    return types
