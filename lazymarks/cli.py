"""Command-line front door for lazymarks.

Subcommands scan a workspace into the persisted index and print it as a
numbered listing, a grouped selection list, or a file -> bookmark tree.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import CONFIG_PATH, load_settings
from .controller import BookmarkController
from .documents import FileDocumentSource, document_key
from .gitignore import workspace_ignore_matcher
from .highlight import DEFAULT_STYLE, colorize_line
from .log import setup_logging, shutdown_logging
from .persistence import JsonFileStore, workspace_store_path
from .selection import build_selection_entries, format_listing
from .tree import TreeModel
from .view import BookmarkTreeProvider
from .workspace import glob_matches

NO_RESULTS = "No results\n"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazymarks",
        description="Index inline bookmarks (regex-matched words) across a workspace.",
    )
    parser.add_argument("--config", type=Path, default=None, help=f"Settings file (default: {CONFIG_PATH}).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress and skipped files.")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write a rotating debug log to this file.")

    workspace = argparse.ArgumentParser(add_help=False)
    workspace.add_argument("roots", nargs="*", type=Path, help="Workspace roots. Defaults to current directory.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", parents=[workspace], help="Scan workspace files for bookmarks.")
    scan.add_argument("--skip-gitignored", action="store_true", help="Do not scan git-ignored files.")
    scan.add_argument("--max-files", type=_positive_int, default=None, help="Override search.maxFiles.")
    scan.add_argument("--jobs", type=_positive_int, default=8, help="Parallel document scans.")

    listing = subparsers.add_parser("list", parents=[workspace], help="Print a numbered bookmark listing.")
    listing.add_argument("--path", dest="path_glob", default=None, help="Only files matching this glob.")
    listing.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style for line text.")
    listing.add_argument("--no-color", action="store_true", help="Disable color output.")
    listing.add_argument("--visible", action="append", type=Path, default=None, help="Restrict to these files.")

    select = subparsers.add_parser("select", parents=[workspace], help="Print bookmarks grouped by file.")
    select.add_argument("--path", dest="path_glob", default=None, help="Only files matching this glob.")
    select.add_argument("--visible", action="append", type=Path, default=None, help="Restrict to these files.")

    tree = subparsers.add_parser("tree", parents=[workspace], help="Print the file -> bookmark tree.")
    tree.add_argument("--filter", dest="filter_words", action="append", default=[], help="Word or regex filter.")
    tree.add_argument("--visible", action="append", type=Path, default=None, help="Restrict to these files.")
    tree.add_argument("--skip-gitignored", action="store_true", help="Hide git-ignored files.")

    subparsers.add_parser("reset", parents=[workspace], help="Forget persisted bookmarks.")
    return parser


def _path_filter(pattern: str | None):
    if not pattern:
        return None
    return lambda filepath: glob_matches(filepath, pattern)


def _controller(args: argparse.Namespace, roots: list[Path]) -> BookmarkController:
    settings = load_settings(args.config)
    store = JsonFileStore(workspace_store_path(roots))
    return BookmarkController(settings, FileDocumentSource(roots), store)


def _run_scan(args: argparse.Namespace, controller: BookmarkController, roots: list[Path]) -> int:
    if args.max_files is not None:
        controller.settings = replace(
            controller.settings,
            search=replace(controller.settings.search, max_files=args.max_files),
        )
    count = controller.scan_workspace(roots, skip_gitignored=args.skip_gitignored, max_workers=args.jobs)
    sys.stdout.write(f"Scanned {count} files, {len(controller.index)} with bookmarks.\n")
    return 0


def _visible_paths(paths: list[Path] | None) -> set[str] | None:
    return {str(path.resolve()) for path in paths} if paths else None


def _run_list(args: argparse.Namespace, controller: BookmarkController) -> int:
    lines = format_listing(
        controller.index,
        _path_filter(args.path_glob),
        render_text=lambda entry: colorize_line(entry.text, Path(entry.filepath), args.style, args.no_color),
        visible_paths=_visible_paths(args.visible),
    )
    if not lines:
        sys.stdout.write(NO_RESULTS)
        return 1
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def _run_select(args: argparse.Namespace, controller: BookmarkController) -> int:
    entries = build_selection_entries(controller.index, _path_filter(args.path_glob), _visible_paths(args.visible))
    if not entries:
        sys.stdout.write(NO_RESULTS)
        return 1
    for entry in entries:
        if entry.is_header:
            sys.stdout.write(f"{entry.label}\n")
        else:
            assert entry.range is not None
            sys.stdout.write(f"{entry.label}  [{entry.word}:{entry.range.start.line + 1}]\n")
    return 0


def _run_tree(args: argparse.Namespace, controller: BookmarkController, roots: list[Path]) -> int:
    model = TreeModel(controller.index, controller.styles, controller.documents.resolve_relative_path)
    view = controller.settings.view
    keys = [document_key(path) for path in args.visible or []]
    if keys:
        # --visible turns on visible-files-only for this run.
        view = replace(view, show_visible_files_only=True)
    provider = BookmarkTreeProvider(
        model,
        view,
        controller.settings.all_words(),
        (lambda: keys) if keys else None,
    )
    provider.set_filter_words(args.filter_words)
    if args.skip_gitignored:
        provider.set_ignore_matcher(workspace_ignore_matcher(roots))

    roots_nodes = provider.children()
    if not roots_nodes:
        sys.stdout.write(NO_RESULTS)
        return 1
    for file_node in roots_nodes:
        sys.stdout.write(f"{provider.tree_item(file_node).label}\n")
        for location in provider.children(file_node):
            item = provider.tree_item(location)
            line = location.entry.range.start.line + 1
            sys.stdout.write(f"  {line:>5}  [{location.category}] {item.label}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one subcommand, and return its exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.INFO if args.verbose else logging.WARNING, log_file=args.log_file)
    try:
        roots = [path.resolve() for path in (args.roots or [Path.cwd()])]
        for root in roots:
            if not root.is_dir():
                raise SystemExit(f"Not a directory: {root}")
        controller = _controller(args, roots)

        if args.command == "scan":
            return _run_scan(args, controller, roots)
        if args.command == "list":
            return _run_list(args, controller)
        if args.command == "select":
            return _run_select(args, controller)
        if args.command == "tree":
            return _run_tree(args, controller, roots)
        controller.reset_workspace()
        sys.stdout.write("Bookmarks reset.\n")
        return 0
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())
