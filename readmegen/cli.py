"""
readmegen Command-Line Interface

This module provides the CLI entry point for readmegen. It orchestrates the
full pipeline: descriptor -> image ingestion / avatar lookup -> rendering ->
preview or export.

Usage:
    readmegen project.json
    readmegen project.json --output docs
    readmegen --sample --dry-run --view rendered
    readmegen --title "My App" --link "Docs=https://example.com" --badge PWA

Design Principles:
    1. The descriptor is built once from a JSON file, then patched by flags
    2. Safety: --dry-run prints instead of writing; existing files need --force
    3. Lookups never fail the run: a failed avatar fetch keeps the current logo
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from readmegen import __version__
from readmegen.github import get_profile_lookup
from readmegen.images import (
    LOGO_SLOT,
    SCREENSHOT_SLOT,
    ImageError,
    encode_image_file,
    ingest_image,
)
from readmegen.preview import ViewMode, present
from readmegen.renderer import EXPORT_FILENAME, export_readme, render_readme
from readmegen.schema import (
    BADGES,
    Descriptor,
    DescriptorError,
    DescriptorStore,
    Link,
    sample_descriptor,
)


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="readmegen",
        description=(
            "readmegen: generate a centered README.md from a small project descriptor.\n\n"
            "Fields come from a JSON descriptor file and/or command-line flags."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  readmegen project.json              # Write README.md in the current directory\n"
            "  readmegen project.json -o docs      # Write docs/README.md\n"
            "  readmegen --sample --dry-run        # Print the sample README\n"
            "  readmegen project.json --dry-run --view rendered\n"
            "  readmegen --title App --author octocat --fetch-avatar\n"
        ),
    )

    parser.add_argument(
        "descriptor",
        type=str,
        nargs="?",
        default=None,
        help="Path to a JSON descriptor file",
    )

    parser.add_argument(
        "--sample",
        action="store_true",
        help="Start from the built-in sample descriptor",
    )

    # Field overrides
    parser.add_argument("--title", type=str, default=None, help="Project title")
    parser.add_argument("--description", type=str, default=None, help="Project description")
    parser.add_argument("--author", type=str, default=None, help="GitHub handle of the author")
    parser.add_argument(
        "--logo",
        type=str,
        default=None,
        help="Logo image: a URL, or a local file to embed as a data URI",
    )
    parser.add_argument(
        "--screenshot",
        action="append",
        default=[],
        metavar="PATH",
        help="Screenshot image file or URL (repeatable)",
    )
    parser.add_argument(
        "--link",
        action="append",
        default=[],
        metavar="LABEL=URL",
        help="Link for the link row (repeatable; replaces descriptor links)",
    )
    parser.add_argument(
        "--badge",
        action="append",
        default=[],
        choices=list(BADGES),
        help="Toggle a badge (repeatable)",
    )
    parser.add_argument(
        "--fetch-avatar",
        action="store_true",
        help="Use the GitHub avatar of --author as the logo",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help=f"Output directory for {EXPORT_FILENAME} (default: current directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print instead of writing a file",
    )
    parser.add_argument(
        "--view",
        choices=["raw", "rendered"],
        default="raw",
        help="What --dry-run prints: markup source or rendered preview HTML",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing README without prompting",
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed progress information",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log(message: str, quiet: bool = False) -> None:
    """Print a status message to stderr unless quiet."""
    if not quiet:
        print(f"[readmegen] {message}", file=sys.stderr)


def log_verbose(message: str, verbose: bool, quiet: bool) -> None:
    """Print a message only in verbose mode."""
    if verbose and not quiet:
        print(f"  {message}", file=sys.stderr)


def load_descriptor(path: Optional[Path], sample: bool = False) -> Descriptor:
    """
    Load the starting descriptor.

    Raises:
        DescriptorError: If the file is not a valid descriptor
        OSError: If the file cannot be read
    """
    if path is None:
        return sample_descriptor() if sample else Descriptor(links=(Link(),))

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DescriptorError(f"{path} is not valid JSON: {e}") from e
    return Descriptor.from_dict(data)


def parse_link(value: str) -> Link:
    """Parse a ``LABEL=URL`` argument."""
    label, sep, url = value.partition("=")
    if not sep:
        raise DescriptorError(f"Link must look like LABEL=URL: {value!r}")
    return Link(label=label.strip(), url=url.strip())


def _image_ref(value: str) -> str:
    """URLs and data URIs pass through; anything else is read as a local file."""
    if value.startswith(("http://", "https://", "data:", "/")) and not Path(value).is_file():
        return value
    return encode_image_file(value)


def apply_arguments(store: DescriptorStore, args: argparse.Namespace) -> None:
    """Patch the store with every field override given on the command line."""
    if args.title is not None:
        store.set_field("title", args.title)
    if args.description is not None:
        store.set_field("description", args.description)
    if args.author is not None:
        store.set_field("author_handle", args.author)
    if args.link:
        store.set_field("links", [parse_link(value) for value in args.link])
    for identifier in args.badge:
        store.toggle_badge(identifier)
    if args.logo:
        store.apply(ingest_image(LOGO_SLOT, _image_ref(args.logo), store.descriptor))
    for value in args.screenshot:
        store.apply(ingest_image(SCREENSHOT_SLOT, _image_ref(value), store.descriptor))


def run_pipeline(
    store: DescriptorStore,
    output_dir: Path,
    fetch_avatar: bool = False,
    dry_run: bool = False,
    view: ViewMode = ViewMode.RAW,
    force: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """
    Run the readmegen pipeline on a prepared store.

    Args:
        store: Descriptor store holding the edited descriptor
        output_dir: Directory that receives README.md
        fetch_avatar: Look up the author's GitHub avatar first
        dry_run: If True, print to stdout instead of writing
        view: Representation printed by a dry run
        force: If True, overwrite existing file without prompting
        verbose: If True, show detailed progress
        quiet: If True, suppress non-error output

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    output_path = output_dir / EXPORT_FILENAME
    if not dry_run and output_path.exists() and not force:
        print(f"Error: File already exists: {output_path}", file=sys.stderr)
        print("Use --force to overwrite or --dry-run to preview.", file=sys.stderr)
        return 1

    # Step 1: Avatar lookup
    if fetch_avatar:
        handle = store.descriptor.author_handle
        if not handle:
            log("Warning: --fetch-avatar needs an author handle; skipping lookup", quiet=quiet)
        else:
            log(f"Fetching GitHub avatar for {handle}...", quiet=quiet)
            previous_logo = store.descriptor.logo_ref
            store.begin_profile_lookup()
            store.apply(get_profile_lookup().lookup(handle))
            if store.descriptor.logo_ref != previous_logo:
                log_verbose(f"Logo: {store.descriptor.logo_ref}", verbose, quiet)
            else:
                log_verbose("Avatar not found; keeping current logo", verbose, quiet)

    descriptor = store.descriptor
    if verbose and not quiet:
        log_verbose(f"Title: {descriptor.title or '(empty)'}", verbose, quiet)
        log_verbose(f"Badges: {', '.join(b.identifier for b in descriptor.active_badges()) or 'none'}", verbose, quiet)
        log_verbose(f"Links: {len(descriptor.links)}", verbose, quiet)
        log_verbose(f"Screenshots: {len(descriptor.screenshots)}", verbose, quiet)

    # Step 2: Render
    log("Rendering README...", quiet=quiet)
    readme_content = render_readme(descriptor)

    # Step 3: Output
    if dry_run:
        print(present(readme_content, view))
        log("(Dry run - no file written)", quiet=quiet)
        return 0

    try:
        written = export_readme(readme_content, output_dir, force=force)
    except OSError as e:
        print(f"Error writing file: {e}", file=sys.stderr)
        return 1

    log(f"README written to: {written}", quiet=quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    descriptor_path = Path(args.descriptor) if args.descriptor else None

    try:
        store = DescriptorStore(load_descriptor(descriptor_path, sample=args.sample))
        apply_arguments(store, args)
    except (DescriptorError, ImageError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_verbose(f"Applied {store.history} field update(s)", args.verbose, args.quiet)

    output_dir = Path(args.output) if args.output else Path.cwd()

    return run_pipeline(
        store=store,
        output_dir=output_dir,
        fetch_avatar=args.fetch_avatar,
        dry_run=args.dry_run,
        view=ViewMode.parse(args.view),
        force=args.force,
        verbose=args.verbose,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    sys.exit(main())
