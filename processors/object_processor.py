"""
Object Processor Module

Main processing orchestrator that coordinates:
- Database queries via NotionAPIClient and DatabasePaginator
- Raw response persistence via a ResponseSink
- Field extraction via FieldProcessor
- Export via RecordExporter

Usage:
    config = ConfigLoader('config.json', 'config/settings.ini')
    processor = DatabaseProcessor(config)
    processor.run()
"""

from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Optional, Dict, Any, List, Union, TYPE_CHECKING

from .api_client import NotionAPIClient
from .diagnostics import ResponseSink, FileResponseSink, NullResponseSink
from .field_processor import FieldProcessor
from .paginator import DatabasePaginator
from .report_generator import RecordExporter

if TYPE_CHECKING:
    from common.config import ConfigLoader

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = 'output/notion_export.csv'
DEFAULT_API_RESPONSE_PATH = 'api_response.json'


class DatabaseProcessor:
    """Fetches a Notion database and exports its records as flattened rows"""

    def __init__(self, config: 'ConfigLoader', session: Optional[Any] = None,
                 sink: Optional[ResponseSink] = None) -> None:
        self.config = config
        self.notion_config = config.get_notion_config()

        self.api_client: NotionAPIClient = NotionAPIClient(self.notion_config, session=session)
        self.sink: ResponseSink = sink if sink is not None else self._create_sink()
        self.paginator: DatabasePaginator = DatabasePaginator(self.api_client, self.sink)

        self.field_processor: FieldProcessor = FieldProcessor(
            config.get_field_mappings(),
            list_separator=config.get('output', 'list_separator', fallback='; '),
        )
        self.output_path: str = config.get('paths', 'output_path', fallback=DEFAULT_OUTPUT_PATH)

        self.records: List[Dict[str, Any]] = []
        self.rows: List[Dict[str, Union[str, float]]] = []

        self._log_startup()

    def _create_sink(self) -> ResponseSink:
        if not self.config.getboolean('diagnostics', 'save_api_response', fallback=True):
            return NullResponseSink()
        return FileResponseSink(self.config.get('paths', 'api_response_path',
                                                fallback=DEFAULT_API_RESPONSE_PATH))

    def _log_startup(self) -> None:
        logger.info("=" * 60)
        logger.info("NOTION DATABASE EXPORT")
        logger.info("=" * 60)
        logger.info(f"Database ID:   {self.notion_config.database_id}")
        logger.info(f"Query URL:     {self.notion_config.query_url}")
        logger.info(f"Fields mapped: {len(self.field_processor.field_mappings)}")
        logger.info("=" * 60)

    def fetch(self) -> List[Dict[str, Any]]:
        self.records = self.paginator.fetch_all()
        return self.records

    def run(self, output_path: Optional[str] = None) -> int:
        """
        Fetch all records, flatten them and export

        Returns:
            Number of rows exported
        """
        start_time: float = time.perf_counter()
        exporter: RecordExporter = RecordExporter(Path(output_path or self.output_path))

        try:
            self.fetch()
        finally:
            self.api_client.close()

        if not self.field_processor.field_mappings:
            logger.warning("No [fields] mappings configured, nothing to export")
            return 0

        self.rows = self.field_processor.extract_records(self.records)
        exporter.export(self.rows, columns=self.field_processor.columns)

        elapsed: float = time.perf_counter() - start_time
        logger.info(f"Processed {len(self.rows)} records in {elapsed:.1f}s")
        return len(self.rows)
