"""Main orchestration script for generating API metadata and rendering it."""

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path


def run_command(cmd_list: Sequence[str | Path], cwd: Path | str | None = None) -> None:
    """Run a command and exit if it fails."""
    cmd_str = " ".join(str(x) for x in cmd_list)
    print(f"Running: {cmd_str}")
    try:
        subprocess.run(cmd_list, check=True, cwd=cwd)
    except subprocess.CalledProcessError as e:
        print(f"Error executing command: {cmd_str}")
        sys.exit(e.returncode)


def main() -> None:
    """Run the full API reference pipeline."""
    parser = argparse.ArgumentParser(
        description="Generate API metadata with docgen and render it for the site."
    )
    parser.add_argument(
        "input_paths",
        nargs="*",
        help="Folders containing API docs. Skips generation when omitted",
    )
    parser.add_argument(
        "--source-dir",
        default="docs",
        help="Docs source directory (default: docs)",
    )
    parser.add_argument(
        "--out-dir",
        default="dist",
        help="Output directory for rendered metadata (default: dist)",
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file",
    )
    args = parser.parse_args()

    python_exe = sys.executable
    config_args = ["--config", args.config] if args.config else []

    if args.input_paths:
        print("--- Step 1: Generating API metadata ---")
        run_command(
            [
                python_exe,
                "-m",
                "apidoc.cli",
                "metadata",
                args.source_dir,
                *args.input_paths,
                *config_args,
            ]
        )

    print("\n--- Step 2: Rendering API metadata ---")
    run_command(
        [
            python_exe,
            "-m",
            "apidoc.cli",
            "build",
            "--source-dir",
            args.source_dir,
            "--out-dir",
            args.out_dir,
            *config_args,
        ]
    )

    print(f"\nSUCCESS: API metadata rendered in {args.out_dir}")


if __name__ == "__main__":
    main()
