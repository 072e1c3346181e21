#!/usr/bin/env python3
"""
Dropbox Paper to Markdown Export Tool - Main CLI Entry Point

Exports every Paper document of a Dropbox account to Markdown, either as
individual files or bundled into a single ZIP archive.
"""

import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from config_loader import ConfigLoader, get_nested
from dropbox_client import DropboxApiError
from exporters import flatten_download_name, get_relative_path
from fetchers import FetcherError
from logger import setup_logging, log_section, log_config
from session_controller import ExportSession
from tui.export_app import PaperExportApp
from views import ConsoleView

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Export Dropbox Paper documents to Markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export every Paper doc as individual Markdown files
  DROPBOX_ACCESS_TOKEN=... python paper_export.py

  # Bundle everything into dropbox-paper-exports.zip
  python paper_export.py --token "$TOKEN" --zip --output-dir ./exports

  # List what would be exported
  python paper_export.py --dry-run

  # Interactive mode with TUI
  python paper_export.py --interactive

  # Verbose logging
  python paper_export.py -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--token',
        type=str,
        help='Dropbox access token (default: dropbox.access_token or $DROPBOX_ACCESS_TOKEN)'
    )

    parser.add_argument(
        '--root-path',
        type=str,
        default=None,
        help="Dropbox folder to search, e.g. /Work (default: entire account)"
    )

    parser.add_argument(
        '--zip',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Bundle all documents into dropbox-paper-exports.zip'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory receiving the exported files'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=None,
        help='Pause between documents in seconds (default: 0.1)'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='List matching documents without exporting them'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write a JSON report of the run to this path'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-i', '--interactive',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Launch interactive TUI'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def resolve_config_path(args: argparse.Namespace) -> Optional[str]:
    """Pick the config file: explicit --config, else config.yaml when present."""
    if args.config:
        return args.config
    if os.path.exists(DEFAULT_CONFIG_PATH):
        return DEFAULT_CONFIG_PATH
    return None


def run_dry_run(session: ExportSession, token: str, logger: logging.Logger) -> int:
    """Authenticate, enumerate and print the documents with their target paths."""
    try:
        files = session.discover(token)
    except (DropboxApiError, FetcherError) as e:
        summary = e.summary if isinstance(e, DropboxApiError) else str(e)
        logger.error(f"Dry-run failed: {summary}")
        print(f"ERROR: {summary}", file=sys.stderr)
        return 1

    print("\n" + "=" * 60)
    print("EXPORT PREVIEW (DRY RUN)")
    print("=" * 60)
    print(f"\nDocuments found: {len(files)}\n")
    for entry in files:
        archive_path = get_relative_path(entry).archive_path
        print(f"  {entry.path_display}")
        print(f"      zip:  {archive_path}")
        print(f"      file: {flatten_download_name(entry)}")
    print("\n" + "=" * 60)

    logger.info("Dry-run complete. No files written.")
    return 0


def run_export(config: dict, args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the export and translate the outcome into an exit code."""
    token = ConfigLoader.resolve_token(config)
    use_zip = get_nested(config, 'export.use_zip', False)

    view = ConsoleView()
    session = ExportSession(config, view)

    if args.dry_run:
        return run_dry_run(session, token, logger)

    # Ctrl+C asks the session to stop at the next document boundary
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: session.stop())
    try:
        report = session.start(token, use_zip)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if report is None:
        return 1 if session.last_error or not token else 0

    print("\n" + report.format_console_report())

    if args.report:
        try:
            report.export_json_report(args.report)
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {str(e)}")

    if report.stopped:
        return 130
    if report.failures:
        logger.warning(f"Export completed with {len(report.failures)} failed documents")
        return 1

    logger.info(f"Export completed successfully into {Path(session.delivery.output_directory).resolve()}")
    return 0


def run_interactive(config: dict) -> int:
    """Launch the textual app."""
    PaperExportApp(config).run()
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        # Setup minimal logging for config loading
        setup_logging(verbosity=args.verbose, console=not args.interactive)
        logger = logging.getLogger('paper_markdown_exporter.cli')

        log_section("Dropbox Paper to Markdown Export")
        logger.info(f"Version: {__version__}")

        config_path = resolve_config_path(args)
        logger.info(f"Loading configuration from {config_path or 'built-in defaults'}")
        config = ConfigLoader.load(config_path)

        # Merge with CLI arguments (CLI takes precedence)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        # Reconfigure logging with config file settings
        setup_logging(
            level=get_nested(config, 'logging.level', 'WARNING'),
            log_file=get_nested(config, 'logging.file'),
            console=not args.interactive
        )
        log_config(config)

        if args.interactive:
            return run_interactive(config)

        return run_export(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
