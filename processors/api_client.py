"""
API Client Module

Issues database query requests against the Notion API:
- Builds bearer-token headers and the paged query payload
- Owns a single long-lived requests.Session for the process lifetime
- Converts transport failures and error statuses into NotionAPIError subclasses

Requests are not retried: a failed request aborts the fetch.
"""

from __future__ import annotations
import json
import logging
from typing import Optional, Dict, Any, List

import requests

logger: logging.Logger = logging.getLogger(__name__)


class NotionAPIError(Exception):
    """Base error for a failed database fetch

    ``records`` holds whatever was accumulated before the failure.
    """

    def __init__(self, message: str, records: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.records: List[Dict[str, Any]] = records if records is not None else []


class TransportError(NotionAPIError):
    """Network, connection or timeout failure during a page request"""

    def __init__(self, message: str, records: Optional[List[Dict[str, Any]]] = None,
                 timed_out: bool = False) -> None:
        super().__init__(message, records)
        self.timed_out: bool = timed_out


class DecodeError(NotionAPIError):
    """Page response body is not a valid JSON object"""


class APIResponseError(TransportError):
    """HTTP-level transport failure: the API answered with a non-success status code"""

    def __init__(self, message: str, status_code: int,
                 records: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message, records)
        self.status_code: int = status_code


class NotionAPIClient:
    """Sends database query requests using one shared session"""

    def __init__(self, config: 'NotionConfig', session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session: requests.Session = session if session is not None else requests.Session()
        self.query_url: str = config.query_url
        self.timeout: float = config.timeout

    def build_headers(self) -> Dict[str, str]:
        return {
            'Authorization': f"Bearer {self.config.token}",
            'Notion-Version': self.config.notion_version,
            'Content-Type': 'application/json',
        }

    def build_query_payload(self, start_cursor: str = '') -> Dict[str, Any]:
        payload: Dict[str, Any] = {'page_size': self.config.page_size}
        if start_cursor:
            payload['start_cursor'] = start_cursor
        return payload

    def query_database(self, start_cursor: str = '') -> str:
        """
        Request one page of database records

        Args:
            start_cursor: Cursor returned by the previous page, empty for the first page

        Returns:
            Raw response body text

        Raises:
            TransportError: connection failure or timeout
            APIResponseError: non-2xx status
        """
        payload: Dict[str, Any] = self.build_query_payload(start_cursor)
        logger.debug(f"POST {self.query_url} cursor={start_cursor or '<first page>'}")

        try:
            response: requests.Response = self.session.post(
                self.query_url,
                headers=self.build_headers(),
                data=json.dumps(payload),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timed out after {self.timeout}s: {self.query_url}")
            raise TransportError(f"Request timed out after {self.timeout}s: {e}", timed_out=True) from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection failed: {self.query_url}")
            raise TransportError(f"Connection failed: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise TransportError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            error_message: str = self.describe_error(response)
            logger.error(error_message)
            raise APIResponseError(error_message, response.status_code)

        return response.text

    def describe_error(self, response: requests.Response) -> str:
        """Generate detailed error message from API response"""
        status_code: int = response.status_code
        response_text: str = response.text or ''

        if response_text:
            try:
                error_json: Any = json.loads(response_text)
            except json.JSONDecodeError:
                error_json = None

            if isinstance(error_json, dict) and error_json.get('message'):
                additional_info: str = f" API message: {error_json.get('code', 'error')}: {error_json['message']}"
            else:
                additional_info = f" Response body: {response_text[:500]}{'...' if len(response_text) > 500 else ''}"
        else:
            additional_info = " (No response body provided)"

        error_messages: Dict[int, str] = {
            400: f"Bad request. Status code: {status_code} (Bad Request). URL: {self.query_url}{additional_info}",
            401: f"Authentication failed. Status code: {status_code} (Unauthorised). The integration token is missing or invalid. URL: {self.query_url}{additional_info}",
            403: f"Access forbidden. Status code: {status_code} (Forbidden). URL: {self.query_url}{additional_info}",
            404: f"Database not found. Status code: {status_code} (Not Found). Check the database ID and that it is shared with the integration. URL: {self.query_url}{additional_info}",
            429: f"Rate limit exceeded. Status code: {status_code} (Too Many Requests). URL: {self.query_url}{additional_info}",
        }

        if status_code in error_messages:
            return error_messages[status_code]
        elif 400 <= status_code < 500:
            return f"Client error. Status code: {status_code}. URL: {self.query_url}{additional_info}"
        elif 500 <= status_code < 600:
            return f"Server error. Status code: {status_code}. URL: {self.query_url}{additional_info}"
        else:
            return f"Unexpected response. Status code: {status_code}. URL: {self.query_url}{additional_info}"

    def close(self) -> None:
        self.session.close()
