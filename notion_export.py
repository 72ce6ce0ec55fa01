"""
Notion Database Export

Fetches every record of a Notion database and exports the mapped properties
as flattened rows.

Usage:
    python notion_export.py                                   # config.json + config/settings.ini
    python notion_export.py --config secrets/config.json      # Alternative credentials file
    python notion_export.py --output exports/assets.json      # Export as JSON instead of CSV
    python notion_export.py --preview 20                      # Also print the first 20 rows
    python notion_export.py --no-diagnostics                  # Do not write api_response.json

Credentials file (JSON):
    {"notion_token": "secret_...", "notion_database_id": "..."}
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from common import ConfigLoader, ConfigurationError, LoggerManager
from common.exit_codes import (
    EXIT_SUCCESS,
    EXIT_CONFIG_ERROR,
    EXIT_ARGS_ERROR,
    EXIT_FILE_WRITE,
    EXIT_NETWORK,
    EXIT_API_RESPONSE,
    EXIT_TIMEOUT,
    EXIT_NO_DATA,
    EXIT_INTERRUPTED,
    EXIT_UNKNOWN,
    exit_code_for_status,
)
from processors import (
    DatabaseProcessor,
    NullResponseSink,
    TransportError,
    DecodeError,
    APIResponseError,
    ExportError,
    format_preview,
)

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS = 'config.json'
DEFAULT_SETTINGS = 'config/settings.ini'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Export a Notion database as flattened rows',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Field kinds for the [fields] section (column = Property Name:kind):
  title status float int text clean_text select multi_select date
  url clean_url email phone formula_text formula_number
  rollup_text rollup_formula

Examples:
  %(prog)s                                  Export using config.json and config/settings.ini
  %(prog)s --output exports/assets.json     Export as JSON
  %(prog)s --preview 20                     Print the first 20 rows after export
        """
    )

    parser.add_argument(
        '--config',
        default=DEFAULT_CREDENTIALS,
        help=f'Path to credentials JSON file (default: {DEFAULT_CREDENTIALS})'
    )
    parser.add_argument(
        '--settings',
        help=f'Path to settings INI file (default: {DEFAULT_SETTINGS} if present)'
    )
    parser.add_argument(
        '--output',
        help='Export path, .csv or .json (default: [paths] output_path)'
    )
    parser.add_argument(
        '--preview',
        type=int,
        default=0,
        metavar='N',
        help='Print the first N exported rows'
    )
    parser.add_argument(
        '--no-diagnostics',
        action='store_true',
        help='Do not save raw API responses'
    )
    return parser


def resolve_settings_path(settings_arg: Optional[str]) -> Optional[str]:
    if settings_arg:
        return settings_arg
    if Path(DEFAULT_SETTINGS).exists():
        return DEFAULT_SETTINGS
    return None


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.preview < 0:
        print("Error: --preview must not be negative")
        return EXIT_ARGS_ERROR

    try:
        config = ConfigLoader(args.config, resolve_settings_path(args.settings))
        logger_manager = LoggerManager(config, script_name='notion_export')
        logger_manager.configure_application_logger()
        logger_manager.cleanup_old_logs()

        sink = NullResponseSink() if args.no_diagnostics else None
        processor = DatabaseProcessor(config, sink=sink)
        exported = processor.run(output_path=args.output)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    except APIResponseError as e:
        print(f"Error: {e}")
        return exit_code_for_status(e.status_code)

    except TransportError as e:
        logger.error(f"Network error: {e}")
        print(f"Error: {e}")
        return EXIT_TIMEOUT if e.timed_out else EXIT_NETWORK

    except DecodeError as e:
        logger.error(f"Invalid API response: {e}")
        print(f"Error: {e}")
        return EXIT_API_RESPONSE

    except ExportError as e:
        logger.error(f"Export failed: {e}")
        print(f"Error: {e}")
        return EXIT_FILE_WRITE

    except KeyboardInterrupt:
        logger.info("Export interrupted by user")
        return EXIT_INTERRUPTED

    except Exception as e:
        logger.error(f"Export failed: {e}", exc_info=True)
        print(f"Error: {e}")
        return EXIT_UNKNOWN

    if args.preview:
        print(format_preview(processor.rows, limit=args.preview))

    if not processor.records:
        logger.warning("Database query returned no records")
        return EXIT_NO_DATA

    logger.info(f"Export complete: {exported} rows")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
