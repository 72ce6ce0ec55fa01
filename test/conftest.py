from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from common import NotionConfig


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, responses: List[Any]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, headers: Optional[Dict[str, str]] = None, data: Optional[str] = None,
             timeout: Optional[float] = None) -> FakeResponse:
        self.calls.append({
            "url": url,
            "headers": headers,
            "payload": json.loads(data) if data else None,
            "timeout": timeout,
        })
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, FakeResponse):
            return item
        if isinstance(item, str):
            return FakeResponse(item)
        return FakeResponse(json.dumps(item))

    def close(self) -> None:
        self.closed = True


class RecordingSink:
    def __init__(self) -> None:
        self.reset_count = 0
        self.bodies: List[str] = []

    def reset(self) -> None:
        self.reset_count += 1

    def write(self, body: str) -> None:
        self.bodies.append(body)


def make_record(index: int) -> Dict[str, Any]:
    return {
        "object": "page",
        "id": f"page-{index}",
        "properties": {
            "Name": {"type": "title", "title": [{"text": {"content": f"Item {index}"}}]},
        },
    }


def make_page(start: int, count: int, next_cursor: Optional[str]) -> Dict[str, Any]:
    return {
        "object": "list",
        "results": [make_record(i) for i in range(start, start + count)],
        "has_more": next_cursor is not None,
        "next_cursor": next_cursor,
    }


@pytest.fixture
def notion_config() -> NotionConfig:
    return NotionConfig(token="secret_abc123", database_id="db123")


@pytest.fixture
def credentials_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"notion_token": "secret_abc123", "notion_database_id": "db123"}),
                    encoding="utf-8")
    return path


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.ini"
    path.write_text(
        "[paths]\n"
        f"base_log_path = {tmp_path / 'logs'}\n"
        f"output_path = {tmp_path / 'out' / 'export.csv'}\n"
        f"api_response_path = {tmp_path / 'api_response.json'}\n"
        "\n"
        "[fields]\n"
        "Name = Name:title\n"
        "Price = Price:float\n"
        "Tags = Tags:multi_select\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def restore_root_logger():
    """Drop handlers installed by LoggerManager so later tests see pytest's own capture."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
