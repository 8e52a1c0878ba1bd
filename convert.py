#!/usr/bin/env python3
"""
HTML to Markdown Porter - Main CLI Entry Point

Converts exported HTML notes into Markdown files with front matter, rewriting
page links and copying local assets so the result drops into a static site.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config_loader import ConfigLoader
from converters.errors import ConfigurationError
from exporters import MarkdownExporter
from logger import log_config, log_section, setup_logging

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Convert HTML documents to Markdown with front matter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert every HTML file under INPUT_FOLDER
  python convert.py

  # Convert a single file
  python convert.py "notes/My Page.html"

  # Use a YAML configuration file
  python convert.py --config config.yaml

  # Flatten nested tags and use image captions as alt text
  python convert.py --unnest-tags --italics-to-alt

  # Verbose logging
  python convert.py -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'input_file',
        nargs='?',
        help='Single HTML file to convert (skips directory discovery)'
    )

    parser.add_argument('--config', type=str, help='Path to configuration YAML file')
    parser.add_argument('--input-dir', type=str, help='Folder searched for HTML files (INPUT_FOLDER)')
    parser.add_argument('--output-dir', type=str, help='Folder for Markdown output (OUTPUT_FOLDER)')
    parser.add_argument('--asset-dir', type=str, help='Folder receiving copied assets (IMAGE_FOLDER)')
    parser.add_argument('--link-prefix', type=str, help='Prefix for rewritten page links (RELATIVE_LINK_PATH)')
    parser.add_argument('--asset-prefix', type=str, help='Prefix for rewritten asset references (RELATIVE_IMAGE_PATH)')
    parser.add_argument('--ignore-tags', type=str, help='Comma-separated tags to drop (IGNORE_TAGS)')
    parser.add_argument('--ignore-meta', type=str, help='Comma-separated meta fields to drop (IGNORE_META)')
    parser.add_argument('--organizing-tag', type=str, help='Tag used only for organizing notes; never emitted')

    parser.add_argument(
        '--unnest-tags',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Keep only the last segment of parent/child tags (UNNEST_TAGS)'
    )

    parser.add_argument(
        '--italics-to-alt',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Use italic captions following images as alt text (ITALICS_TO_ALT)'
    )

    parser.add_argument('--workers', type=int, help='Documents converted in parallel (MAX_WORKERS)')
    parser.add_argument('--report', type=str, help='Write a JSON report of per-document outcomes')
    parser.add_argument('--progress', action='store_true', help='Show a progress bar')
    parser.add_argument('--log-file', type=str, help='Also log to this file')

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def run_conversion(config, args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute single-file or batch conversion and return the exit code."""
    exporter = MarkdownExporter(config, logger=logger, show_progress=args.progress)

    if args.input_file:
        input_path = Path(args.input_file)
        if not input_path.is_file() or input_path.suffix != '.html':
            logger.error(f"File not found or not an HTML file: {input_path}")
            return 1
        report = exporter.export_files([input_path])
    else:
        try:
            report = exporter.export_all()
        except FileNotFoundError as e:
            logger.error(f"Error reading directory {config.input_folder}: {e}")
            return 1

    if args.report:
        if exporter.write_report(report, args.report):
            logger.info(f"Report saved to {args.report}")
        else:
            logger.warning(f"Failed to write report to {args.report}")

    if report.failed:
        logger.warning(f"Conversion completed with {report.failed} failed document(s)")
        return 1

    logger.info(f"Converted {report.succeeded} document(s) with {report.warning_count} warning(s)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        logger = setup_logging(verbosity=args.verbose, log_file=args.log_file)

        log_section("HTML to Markdown Porter")
        logger.info(f"Version: {__version__}")

        config = ConfigLoader.build(config_path=args.config, args=args)
        log_config(config.to_dict())

        return run_conversion(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nConversion interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
