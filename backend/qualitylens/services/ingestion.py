"""
File ingestion — turns an uploaded CSV / JSON file into a Dataset.

Errors here happen strictly before the quality engine runs and are raised as
IngestionError subclasses; routes translate them into HTTP 400s.
"""

import io
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from qualitylens.config import settings
from qualitylens.services.dataset import Dataset

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("csv", "json")


class IngestionError(Exception):
    kind = "IngestionError"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        data = {"message": self.message, "type": self.kind}
        if self.detail:
            data["error"] = self.detail
        return data


class ParseError(IngestionError):
    kind = "ParseError"


class EmptyFileError(IngestionError):
    kind = "EmptyFile"


class InvalidFormatError(IngestionError):
    kind = "InvalidFormat"


class UnsupportedFileTypeError(IngestionError):
    kind = "UnsupportedFileType"


@dataclass
class ParsedFile:
    dataset: Dataset
    file_name: str
    file_size: int
    parse_errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def headers(self) -> list:
        return list(self.dataset.headers)

    @property
    def row_count(self) -> int:
        return self.dataset.row_count

    @property
    def column_count(self) -> int:
        return self.dataset.column_count


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _extension(file_name: str) -> str:
    return os.path.splitext(file_name)[1].lstrip(".").lower()


def _to_python(value: Any) -> Any:
    """numpy scalars -> Python scalars, NaN -> None."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def dataframe_to_dataset(df: pd.DataFrame) -> Dataset:
    headers = [str(col) for col in df.columns]
    rows = [
        {header: _to_python(value) for header, value in zip(headers, record)}
        for record in df.itertuples(index=False, name=None)
    ]
    return Dataset(headers, rows)


# ─────────────────────────────────────────────────────────────────────────────
# Parsers
# ─────────────────────────────────────────────────────────────────────────────

def parse_csv(content: bytes, file_name: str) -> ParsedFile:
    """
    Parse CSV bytes. Only empty fields become missing; tokens such as "N/A",
    "null" or "-" stay as text so the validity check can see them.
    """
    try:
        df = pd.read_csv(
            io.BytesIO(content),
            keep_default_na=False,
            na_values=[""],
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise EmptyFileError("CSV file is empty", str(exc)) from exc
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as exc:
        raise ParseError("Failed to parse CSV file", str(exc)) from exc

    if len(df.columns) == 0:
        raise EmptyFileError("CSV file has no header row")

    dataset = dataframe_to_dataset(df)
    logger.info("Parsed CSV %s: %d rows × %d columns", file_name, dataset.row_count, dataset.column_count)
    return ParsedFile(
        dataset=dataset,
        file_name=file_name,
        file_size=len(content),
        metadata={"delimiter": ","},
    )


def parse_json(content: bytes, file_name: str) -> ParsedFile:
    """Parse an array of objects (headers from the first object) or a single object."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError("Failed to parse JSON file", str(exc)) from exc

    if isinstance(data, list):
        if not data:
            raise EmptyFileError("JSON file is empty")
        if not all(isinstance(item, dict) for item in data):
            raise InvalidFormatError("Invalid JSON format. Expected object or array of objects.")
        headers = list(data[0].keys())
        rows = data
        is_array = True
    elif isinstance(data, dict):
        headers = list(data.keys())
        rows = [data]
        is_array = False
    else:
        raise InvalidFormatError("Invalid JSON format. Expected object or array of objects.")

    dataset = Dataset(headers, rows)
    logger.info("Parsed JSON %s: %d rows × %d columns", file_name, dataset.row_count, dataset.column_count)
    return ParsedFile(
        dataset=dataset,
        file_name=file_name,
        file_size=len(content),
        metadata={"isArray": is_array},
    )


def parse_file(content: bytes, file_name: str) -> ParsedFile:
    extension = _extension(file_name)
    if extension == "csv":
        return parse_csv(content, file_name)
    if extension == "json":
        return parse_json(content, file_name)
    raise UnsupportedFileTypeError(f"Unsupported file type: .{extension}")


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

def validate_parsed_data(parsed: ParsedFile) -> dict:
    """Structural checks; errors make the file unusable, warnings do not."""
    issues = []
    dataset = parsed.dataset

    if dataset.row_count == 0:
        issues.append({"type": "error", "message": "No data rows found in file"})

    if dataset.column_count == 0:
        issues.append({"type": "error", "message": "No column headers found in file"})

    counts: Dict[str, int] = {}
    for header in dataset.headers:
        counts[header] = counts.get(header, 0) + 1
    duplicate_headers = [h for h, n in counts.items() if n > 1]
    if duplicate_headers:
        issues.append({
            "type": "warning",
            "message": f"Duplicate column names found: {', '.join(duplicate_headers)}",
        })

    empty_headers = [h for h in dataset.headers if not h or not str(h).strip()]
    if empty_headers:
        issues.append({
            "type": "warning",
            "message": f"Found {len(empty_headers)} column(s) with empty names",
        })

    expected = set(dataset.headers)
    inconsistent_rows = sum(1 for row in dataset.rows if set(row.keys()) != expected)
    if inconsistent_rows:
        issues.append({
            "type": "warning",
            "message": f"{inconsistent_rows} row(s) have inconsistent column counts",
        })

    return {
        "isValid": not any(i["type"] == "error" for i in issues),
        "issues": issues,
    }


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def get_file_info(file_name: str, file_size: int) -> dict:
    extension = _extension(file_name)
    return {
        "name": file_name,
        "extension": extension,
        "size": file_size,
        "sizeFormatted": format_file_size(file_size),
        "isSupported": extension in SUPPORTED_EXTENSIONS,
        "withinSizeLimit": file_size <= settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024,
    }
