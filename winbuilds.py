#!/usr/bin/env python3
"""
WinBuilds - Windows Build Tracker

Collects the build tables of the Windows release-information pages,
classifies every build and exports the results as JSON.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add current directory to path
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, get_tracker_settings
from core.errors import WinBuildsError
from core.source_validator import (
    SourceValidator, print_validation_results, print_connection_results
)
from trackers.windows_builds import WindowsBuildsTracker
from trackers.windows_builds.catalog import KNOWN_MAJORS, PRODUCT_KEYS
from trackers.windows_builds.exporter import records_to_json, validate_exports

logger = logging.getLogger(__name__)

TRACKER_NAME = 'windows_builds'

def setup_logging(log_file, verbose=False):
    """Log to a file and stdout"""
    log_dir = os.path.dirname(log_file)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='winbuilds',
        description='WinBuilds - Windows Build Tracker'
    )

    parser.add_argument('--config', '-c',
                        default='config.yaml',
                        help='Path to configuration file')

    parser.add_argument('--product', '-p',
                        choices=list(PRODUCT_KEYS) + ['all'],
                        default='all',
                        help='Which product to collect')

    parser.add_argument('--build', '-b', type=int, choices=KNOWN_MAJORS,
                        metavar='MAJOR',
                        help='Only keep builds with this major build number')

    parser.add_argument('--skip-preview', action='store_true',
                        help='Drop preview releases')

    parser.add_argument('--skip-out-of-band', action='store_true',
                        help='Drop out-of-band releases')

    parser.add_argument('--latest', action='store_true',
                        help='Keep only the newest build of each product')

    parser.add_argument('--export-dir', default=None,
                        help='Directory for the JSON exports (default: export.dir from config)')

    parser.add_argument('--stdout', action='store_true',
                        help='Print the records as JSON instead of writing export files')

    parser.add_argument('--list', action='store_true',
                        help='List configured products')

    parser.add_argument('--validate-sources', action='store_true',
                        help='Validate product sources and override datasets')

    parser.add_argument('--test-connections', action='store_true',
                        help='Test connectivity to sources (use with --validate-sources)')

    parser.add_argument('--validate-exports', action='store_true',
                        help='Check that every exported JSON file is valid')

    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    return parser.parse_args(argv)

def list_products(tracker):
    """List all configured products"""
    print("\n" + "=" * 70)
    print("Configured Products")
    print("=" * 70)

    for key, product in tracker.products.items():
        extraction = product.get('extraction', 'table')
        history = len(product.get('update_history_urls', []))
        print(f"  {key:15} [{extraction:5}] - {product['name']} ({history} update history pages)")

    print()

def run_validate_sources(args):
    """Validate sources, returning the process exit code"""
    validator = SourceValidator()

    results = validator.validate_all(TRACKER_NAME)
    total_errors = print_validation_results(results)

    if args.test_connections:
        print("\n" + "=" * 70)
        print("Testing Connections")
        print("=" * 70)

        connection_results = validator.test_tracker_connections(TRACKER_NAME)
        total_failures = print_connection_results(TRACKER_NAME, connection_results)

        print()
        if total_failures > 0:
            print(f"Connection Summary: {total_failures} source(s) failed")
        else:
            print("Connection Summary: All sources reachable")

    return 1 if total_errors > 0 else 0

def run_validate_exports(export_dir):
    """Validate exported JSON, returning the process exit code"""
    problems = validate_exports(export_dir)

    for problem in problems:
        logger.error(f"Invalid export: {problem}")

    if problems:
        return 1

    logger.info(f"All exports in {export_dir} are valid JSON")
    return 0

def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Configuration error: {str(e)}", file=sys.stderr)
        print("Run with --config to specify a valid configuration file", file=sys.stderr)
        return 1

    setup_logging((config.get('logging') or {}).get('file', 'logs/winbuilds.log'), args.verbose)
    logger.info(f"Configuration loaded from {args.config}")

    export_dir = args.export_dir or (config.get('export') or {}).get('dir', 'exports')

    try:
        if args.validate_sources:
            return run_validate_sources(args)

        if args.validate_exports:
            return run_validate_exports(export_dir)

        settings = get_tracker_settings(config, TRACKER_NAME)
        if not settings.get('enabled', True):
            logger.error(f"Tracker {TRACKER_NAME} is disabled in {args.config}")
            return 1

        tracker = WindowsBuildsTracker(settings)

        if args.list:
            list_products(tracker)
            return 0

        product_keys = list(tracker.products) if args.product == 'all' else [args.product]

        options = {
            'build_filter': args.build,
            'newest_only': args.latest,
        }
        if args.skip_preview:
            options['include_preview'] = False
        if args.skip_out_of_band:
            options['include_out_of_band'] = False

        tracker.scrape(product_keys, **options)

        if args.stdout:
            for product_key in product_keys:
                print(records_to_json(tracker.results[product_key]))
        else:
            tracker.report(export_dir)

        logger.info("\n" + "=" * 70)
        logger.info("WinBuilds run completed successfully")
        logger.info("=" * 70)
        return 0

    except WinBuildsError as e:
        logger.error(f"Run aborted: {str(e)}", exc_info=True)
        return 1

    except Exception as e:
        logger.error(f"Error in WinBuilds: {str(e)}", exc_info=True)
        return 1

if __name__ == "__main__":
    sys.exit(main())
