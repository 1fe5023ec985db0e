"""Logic for generating API metadata with the external docgen tool."""

import logging
import subprocess
from pathlib import Path
from typing import Any

from apidoc.load_api_metadata import API_DIR

logger = logging.getLogger(__name__)


def docgen_command(
    input_paths: list[str], output_path: Path, docgen: dict[str, Any]
) -> list[str]:
    """Build the docgen command line.

    The first input path is the main docs folder, every further one is added
    with `-a`.
    """
    first, *additional = input_paths
    cmd = [
        str(docgen.get("node", "node")),
        str(docgen["script"]),
        "-f",
        str(docgen.get("format", "json-raw")),
        first,
    ]
    for path in additional:
        cmd.extend(["-a", path])
    cmd.extend(["-o", str(output_path)])
    return cmd


def generate_metadata(
    target_dir: Path,
    input_paths: list[str],
    config: dict[str, Any],
    output_dir: Path | None = None,
) -> Path:
    """Run docgen over the input paths and return the output directory.

    Output goes to `output_dir`, or to <target_dir>/api by default.
    """
    if not input_paths:
        msg = "Please specify at least one path to a folder containing API docs."
        raise ValueError(msg)

    output_path = (output_dir or target_dir / API_DIR).resolve()
    cmd = docgen_command(input_paths, output_path, config["docgen"])
    logger.info("Generating API metadata...")
    logger.debug("Running: %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError:
        logger.error("Failed to generate API metadata.")
        raise
    logger.info("Done! Metadata generated to %s", output_path)
    return output_path
