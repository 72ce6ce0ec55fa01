"""
Diagnostics Module

Keeps a copy of the most recent raw API response on disk for troubleshooting.
The paginator hands every page body to a ResponseSink; sinks never raise, so
a failed write cannot change the result of a fetch.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger: logging.Logger = logging.getLogger(__name__)


class ResponseSink(Protocol):
    def reset(self) -> None:
        """Clear any output left by a previous run."""

    def write(self, body: str) -> None:
        """Persist one raw page body."""


class NullResponseSink:
    """Discards responses"""

    def reset(self) -> None:
        pass

    def write(self, body: str) -> None:
        pass


class FileResponseSink:
    """Writes each page body, pretty-printed, over a fixed-name file"""

    def __init__(self, path: Path | str, indent: int = 4) -> None:
        self.path: Path = Path(path)
        self.indent: int = indent

    def reset(self) -> None:
        if self._write_text('{}'):
            logger.info(f"Cleared {self.path} before fetching new data")

    def write(self, body: str) -> None:
        if self._write_text(self.format_body(body)):
            logger.debug(f"API response saved to {self.path}")

    def format_body(self, body: str) -> str:
        """Pretty-print a JSON body, non-JSON bodies are returned verbatim"""
        try:
            parsed: Any = json.loads(body)
            return json.dumps(parsed, indent=self.indent)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Could not format API response as JSON: {e}")
            return body

    def _write_text(self, text: str) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding='utf-8', errors='replace')
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write API response to {self.path}: {e}")
            return False
        return True
