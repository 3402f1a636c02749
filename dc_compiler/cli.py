"""
Datacore Script Compiler: command line entry point.

    dc-compile <project_dir> <entry> [output.md] [--minify] [--obfuscate] ...
    dc-compile <project_dir> --list-entries

Paths are relative to the vault root (``--vault``, default: current directory).
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dc_compiler.config import settings
from dc_compiler.core.compiler import compile_project
from dc_compiler.errors import StoreError
from dc_compiler.models import BundleOptions
from dc_compiler.store.base import VaultStore
from dc_compiler.store.factory import get_store
from dc_compiler.utils import get_file_extension, get_file_name, join_path, normalize_path, remove_extension


# ─── Colors ───────────────────────────────────────────────────────────────────
class Colors:
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


def default_output_name(project_dir: str) -> str:
    segments = [s for s in normalize_path(project_dir).split("/") if s]
    return f"compiled-{segments[-1] if segments else 'output'}{settings.NOTE_EXTENSION}"


def default_output_dir(project_dir: str) -> str:
    return join_path(project_dir, settings.DEFAULT_OUTPUT_DIR)


def list_entry_candidates(store: VaultStore, project_dir: str) -> List[str]:
    """Base names of the script files directly inside ``project_dir``."""
    listing = store.list(normalize_path(project_dir))
    names = []
    for path in listing.files:
        ext = get_file_extension(path)
        if ext in settings.SCRIPT_EXTENSIONS:
            names.append(remove_extension(get_file_name(path), ext))
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dc-compile",
        description="Bundle a directory of Datacore script modules into a single compiled note.",
    )
    parser.add_argument("project_dir", help="Project directory, relative to the vault root")
    parser.add_argument("entry", nargs="?", help="Base name of the entry module")
    parser.add_argument("output", nargs="?", help="Output note name (default: compiled-<dir>.md)")
    parser.add_argument("--vault", default=".", help="Vault root directory (default: .)")
    parser.add_argument("--output-dir", help="Output directory (default: <project_dir>/dist)")
    parser.add_argument("--minify", action="store_true", help="Strip comments, diagnostics and whitespace")
    parser.add_argument("--obfuscate", action="store_true", help="Also shorten identifiers (implies --minify)")
    parser.add_argument("--version-string", dest="version", help="Write a VERSION file and tag the header")
    parser.add_argument("--changelog", help="Path to a changelog file to publish as CHANGELOG.md")
    parser.add_argument("--no-usage-notes", action="store_true", help="Omit the demo callouts")
    parser.add_argument("--include", action="append", default=[], metavar="PATH",
                        help="Additional file to copy into the output directory (repeatable)")
    parser.add_argument("--list-entries", action="store_true", help="List candidate entry modules and exit")
    parser.add_argument("--json", action="store_true", help="Print the result record as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format=settings.LOG_FORMAT,
    )

    store = get_store(args.vault)

    if args.list_entries:
        try:
            for name in list_entry_candidates(store, args.project_dir):
                print(name)
        except StoreError as e:
            print(f"{Colors.FAIL}Error: {e.message}{Colors.ENDC}", file=sys.stderr)
            return 1
        return 0

    if not args.entry:
        print(f"{Colors.FAIL}Error: an entry module is required{Colors.ENDC}", file=sys.stderr)
        return 1

    changelog = None
    if args.changelog:
        try:
            changelog = store.read(args.changelog)
        except StoreError as e:
            print(f"{Colors.FAIL}Error: {e.message}{Colors.ENDC}", file=sys.stderr)
            return 1

    options = BundleOptions(
        minify=args.minify or args.obfuscate,
        obfuscate=args.obfuscate,
        version=args.version,
        changelog=changelog,
        output_dir=args.output_dir or default_output_dir(args.project_dir),
        include_usage_notes=not args.no_usage_notes,
        additional_files=args.include,
    )

    print(f"{Colors.OKCYAN}[dc-compile] Compiling {args.project_dir} (entry: {args.entry}){Colors.ENDC}",
          file=sys.stderr)
    result = compile_project(
        store, args.project_dir, args.entry, args.output or default_output_name(args.project_dir), options
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    if not result.success:
        print(f"{Colors.FAIL}Compilation failed: {result.error}{Colors.ENDC}", file=sys.stderr)
        return 1

    print(f"{Colors.OKGREEN}Compiled {result.modules_processed} modules "
          f"and {result.stylesheets_processed} stylesheets -> {result.output_path}{Colors.ENDC}",
          file=sys.stderr)
    for label, path in (("VERSION", result.version_path), ("CHANGELOG", result.changelog_path)):
        if path:
            print(f"  {label}: {path}", file=sys.stderr)
    for path in result.copied_files:
        print(f"  Copied: {path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
