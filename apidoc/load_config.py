"""Logic for loading and merging configuration files."""

import copy
from pathlib import Path
from typing import Any

import yaml

from apidoc.deep_merge import deep_merge

DEFAULT_CONFIG: dict[str, Any] = {
    "base": "/",
    "source_dir": "docs",
    "out_dir": "dist",
    "versions": [],
    "versions_file": ".vuepress/versions.json",
    "markdown": {
        "extensions": ["fenced_code", "tables"],
    },
    "docgen": {
        "node": "node",
        "script": "node_modules/titanium-docgen/index.js",
        "format": "json-raw",
    },
}


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if not p.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        config = deep_merge(config, user_config)
    return config
