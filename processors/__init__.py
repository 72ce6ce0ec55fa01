"""
Processors Package

Fetches Notion database records and flattens their properties.

Main components:
- DatabaseProcessor: Main processing orchestrator
- NotionAPIClient: Query requests and error mapping
- DatabasePaginator: Cursor-following fetch of every record
- FieldProcessor: Config-driven property extraction
- RecordExporter: CSV/JSON export

Usage:
    from common import ConfigLoader
    from processors import DatabaseProcessor

    processor = DatabaseProcessor(ConfigLoader('config.json', 'config/settings.ini'))
    processor.run()
"""

from .api_client import (
    NotionAPIClient,
    NotionAPIError,
    TransportError,
    DecodeError,
    APIResponseError,
)
from .diagnostics import ResponseSink, NullResponseSink, FileResponseSink
from .paginator import DatabasePaginator, PageResult, parse_page
from .field_processor import (
    FieldProcessor,
    FIELD_EXTRACTORS,
    get_properties,
    get_name,
    get_status,
    get_float_value,
    get_int_value,
    get_plain_text_value,
    get_clean_plain_text_value,
    get_select_value,
    get_multi_select_strings,
    get_date_value,
    get_url_value,
    get_clean_url,
    get_clean_email_value,
    get_phone_number_value,
    get_formula_text_value,
    get_formula_number_value,
    get_rollup_plain_text,
    get_rollup_formula_string,
)
from .report_generator import RecordExporter, ExportError, format_preview
from .object_processor import DatabaseProcessor

__all__ = [
    # Main processor
    'DatabaseProcessor',

    # API access
    'NotionAPIClient',
    'NotionAPIError',
    'TransportError',
    'DecodeError',
    'APIResponseError',
    'DatabasePaginator',
    'PageResult',
    'parse_page',

    # Diagnostics
    'ResponseSink',
    'NullResponseSink',
    'FileResponseSink',

    # Field extraction
    'FieldProcessor',
    'FIELD_EXTRACTORS',
    'get_properties',
    'get_name',
    'get_status',
    'get_float_value',
    'get_int_value',
    'get_plain_text_value',
    'get_clean_plain_text_value',
    'get_select_value',
    'get_multi_select_strings',
    'get_date_value',
    'get_url_value',
    'get_clean_url',
    'get_clean_email_value',
    'get_phone_number_value',
    'get_formula_text_value',
    'get_formula_number_value',
    'get_rollup_plain_text',
    'get_rollup_formula_string',

    # Export
    'RecordExporter',
    'ExportError',
    'format_preview',
]
