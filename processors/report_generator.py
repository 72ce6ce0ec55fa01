"""
Report Generator Module

Writes flattened database rows to disk and renders console previews.

Output format follows the file suffix:
- .csv: header row from the field mapping order
- .json: indented JSON array of row objects
"""

from __future__ import annotations
import csv
import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence

from tabulate import tabulate

logger: logging.Logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.csv', '.json')


class ExportError(Exception):
    """Raised when flattened rows cannot be written"""
    pass


class RecordExporter:
    """Exports flattened rows as CSV or JSON"""

    def __init__(self, output_path: Path | str) -> None:
        self.output_path: Path = Path(output_path)
        if self.output_path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ExportError(f"Unsupported export format '{self.output_path.suffix}' "
                              f"(expected one of {', '.join(SUPPORTED_SUFFIXES)})")

    def export(self, rows: List[Dict[str, Any]], columns: Optional[Sequence[str]] = None) -> Path:
        """
        Write rows to the output path, replacing any previous export

        Args:
            rows: Flattened rows
            columns: Column order, defaults to the keys of the first row

        Returns:
            Path written
        """
        fieldnames: List[str] = list(columns) if columns is not None else (list(rows[0]) if rows else [])

        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            if self.output_path.suffix.lower() == '.csv':
                self._write_csv(rows, fieldnames)
            else:
                self._write_json(rows)
        except OSError as e:
            raise ExportError(f"Failed to write {self.output_path}: {e}") from e

        logger.info(f"Exported {len(rows)} rows to {self.output_path}")
        return self.output_path

    def _write_csv(self, rows: List[Dict[str, Any]], fieldnames: List[str]) -> None:
        with open(self.output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction='ignore')
            writer.writeheader()
            writer.writerows(rows)

    def _write_json(self, rows: List[Dict[str, Any]]) -> None:
        with open(self.output_path, 'w', encoding='utf-8') as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)


def format_preview(rows: List[Dict[str, Any]], limit: int = 10, max_width: int = 40) -> str:
    """Render the first rows as a console table"""
    if not rows:
        return "(no rows)"

    shown: List[Dict[str, Any]] = []
    for row in rows[:limit]:
        shown.append({
            column: (str(value)[:max_width - 3] + '...' if len(str(value)) > max_width else value)
            for column, value in row.items()
        })

    table: str = tabulate(shown, headers='keys', tablefmt='simple')
    if len(rows) > limit:
        table += f"\n... {len(rows) - limit} more rows"
    return table
