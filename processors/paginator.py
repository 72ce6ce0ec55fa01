"""
Paginator Module

Fetches every record of a database by following next_cursor until the API
reports has_more = false. Records are returned in server order and are never
modified after being collected.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Iterator

from .api_client import NotionAPIClient, NotionAPIError, DecodeError
from .diagnostics import ResponseSink, NullResponseSink

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageResult:
    """One decoded page of a database query"""
    results: List[Dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str = ''


def parse_page(body: str) -> PageResult:
    """
    Decode one query response body

    Missing or mistyped keys are tolerated: no results means an empty page,
    a missing/non-boolean has_more means stop, a missing/non-string
    next_cursor means empty. Non-object entries in results are skipped.

    A JSON null body decodes to an empty page.

    Raises:
        DecodeError: body is not valid JSON or not a JSON object
    """
    try:
        data: Any = json.loads(body)
    except (ValueError, TypeError, RecursionError) as e:
        raise DecodeError(f"Failed to decode API response: {e}") from e

    if data is None:
        return PageResult()
    if not isinstance(data, dict):
        raise DecodeError(f"API response is a JSON {type(data).__name__}, expected an object")

    raw_results: Any = data.get('results')
    results: List[Dict[str, Any]] = []
    if isinstance(raw_results, list):
        results = [item for item in raw_results if isinstance(item, dict)]
        skipped: int = len(raw_results) - len(results)
        if skipped:
            logger.debug(f"Skipped {skipped} non-object entries in results")

    has_more: Any = data.get('has_more')
    next_cursor: Any = data.get('next_cursor')

    return PageResult(
        results=results,
        has_more=has_more if isinstance(has_more, bool) else False,
        next_cursor=next_cursor if isinstance(next_cursor, str) else '',
    )


class DatabasePaginator:
    """Collects all records of a database query, page by page"""

    def __init__(self, client: NotionAPIClient, sink: Optional[ResponseSink] = None) -> None:
        self.client = client
        self.sink: ResponseSink = sink if sink is not None else NullResponseSink()
        self.pages_fetched: int = 0

    def iter_pages(self) -> Iterator[PageResult]:
        """Yield each decoded page; errors propagate from the failing request"""
        start_cursor: str = ''
        self.pages_fetched = 0

        while True:
            body: str = self.client.query_database(start_cursor)
            self.sink.write(body)

            page: PageResult = parse_page(body)
            self.pages_fetched += 1
            logger.debug(f"Page {self.pages_fetched}: {len(page.results)} records, has_more={page.has_more}")
            yield page

            if not page.has_more:
                break

            if not page.next_cursor:
                logger.warning(f"Page {self.pages_fetched} reported has_more without a next_cursor, stopping")
                break

            start_cursor = page.next_cursor

    def fetch_all(self) -> List[Dict[str, Any]]:
        """
        Fetch every record of the database

        Returns:
            All records in the order returned by the server

        Raises:
            NotionAPIError: TransportError, DecodeError or APIResponseError,
                with ``records`` set to the records collected before the failure
        """
        all_records: List[Dict[str, Any]] = []
        self.sink.reset()

        try:
            for page in self.iter_pages():
                all_records.extend(page.results)
        except NotionAPIError as e:
            e.records = list(all_records)
            logger.error(f"Fetch aborted after {self.pages_fetched} pages "
                         f"({len(all_records)} records collected): {e}")
            raise

        logger.info(f"Fetched {len(all_records)} records in {self.pages_fetched} pages")
        return all_records
