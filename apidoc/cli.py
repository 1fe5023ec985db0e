"""Command line interface for generating and rendering API reference metadata."""

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path

from apidoc.apidoc_pipeline import ApiDocPipeline
from apidoc.generate_metadata import generate_metadata
from apidoc.load_config import load_config
from apidoc.load_versions import load_versions
from apidoc.markdown_renderer import MarkdownRenderer
from apidoc.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


def run_metadata(args: argparse.Namespace) -> int:
    """Generate metadata for the given input paths."""
    config = load_config(args.config)
    output_dir = Path(args.o) if args.o else None
    generate_metadata(Path(args.target_dir), args.input_paths, config, output_dir)
    return 0


def run_build(args: argparse.Namespace) -> int:
    """Render all metadata and write the outputs consumed by the site."""
    config = load_config(args.config)
    source_dir = Path(args.source_dir or config["source_dir"])
    out_dir = Path(args.out_dir or config["out_dir"]).resolve()
    base = args.base or config["base"]

    versions = load_versions(config, source_dir)
    store = MetadataStore()
    store.load_metadata(versions, source_dir=source_dir)

    renderer = MarkdownRenderer(config["markdown"].get("extensions"))
    pipeline = ApiDocPipeline(store, renderer, base)
    processed = pipeline.process_all()
    print(f"Processed {processed} types across {len(store.versions)} version(s)")

    out_dir.mkdir(parents=True, exist_ok=True)
    written = pipeline.write_metadata_snapshots(out_dir)
    (out_dir / "type-links.json").write_text(
        json.dumps(pipeline.type_links(), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    (out_dir / "navigation.json").write_text(
        json.dumps(pipeline.navigation(), indent=2),
        encoding="utf-8",
    )
    print(f"Wrote {written} metadata snapshots into: {out_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands."""
    ap = argparse.ArgumentParser(
        description="Generate and render API reference metadata.",
    )
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    metadata = sub.add_parser(
        "metadata",
        help="Generate required metadata for the API reference docs",
    )
    metadata.add_argument("target_dir", help="Docs source directory")
    metadata.add_argument(
        "input_paths",
        nargs="*",
        help="Folders containing API docs (first one is the main folder)",
    )
    metadata.add_argument("-o", help="Output directory. Defaults to <target_dir>/api/")
    metadata.add_argument("--config", help="Path to configuration file")
    metadata.set_defaults(func=run_metadata)

    build = sub.add_parser("build", help="Render metadata for all API pages")
    build.add_argument("--config", help="Path to configuration file")
    build.add_argument("--source-dir", help="Docs source directory with api.json")
    build.add_argument("--out-dir", help="Output directory for rendered metadata")
    build.add_argument("--base", help="Base path of the site (default: /)")
    build.set_defaults(func=run_build)
    return ap


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except subprocess.CalledProcessError as e:
        return e.returncode or 1


if __name__ == "__main__":
    raise SystemExit(main())
