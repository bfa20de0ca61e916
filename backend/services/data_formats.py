"""
Data Format Handlers

Turns an uploaded file into a uniform list of row records
(column name -> scalar), whatever format it arrived in:

DELIMITED TEXT:
- CSV, TSV, TXT (delimiter guessed among , TAB | ;)

SPREADSHEETS:
- Excel (.xlsx, .xls) - first sheet only

JSON:
- JSON (array, object holding an array, or a single object)
- JSONL / NDJSON (one value per line)

Formats that need converting first (Stata, SPSS, R, Parquet, Feather),
media files and databases are recognized so the caller can route the user
to manual assessment instead of mis-parsing them.
"""
import io
import re
import json
import math
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from enum import Enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

import polars as pl
from loguru import logger

from config import AnalysisPolicy
from exceptions import (
    EmptyDatasetError,
    FileTooLargeError,
    ParseError,
    UnsupportedFormatError,
)
from models.statistics import FormatDetection


RawRow = Dict[str, Any]


class DataFormat(str, Enum):
    """Supported data formats"""
    CSV = "csv"
    EXCEL = "excel"
    JSON = "json"
    JSON_LINES = "jsonl"


# File extension to format mapping
EXTENSION_MAP = {
    ".csv": DataFormat.CSV,
    ".tsv": DataFormat.CSV,
    ".txt": DataFormat.CSV,  # Assume delimited text for .txt
    ".xlsx": DataFormat.EXCEL,
    ".xls": DataFormat.EXCEL,
    ".json": DataFormat.JSON,
    ".jsonl": DataFormat.JSON_LINES,
    ".ndjson": DataFormat.JSON_LINES,
}

SUPPORTED_FORMATS = {
    "csv": {"name": "CSV (Comma Separated Values)", "support": "full"},
    "tsv": {"name": "TSV (Tab Separated Values)", "support": "full"},
    "txt": {"name": "Text File (with delimiters)", "support": "partial"},
    "json": {"name": "JSON", "support": "full"},
    "jsonl": {"name": "JSON Lines", "support": "full"},
    "ndjson": {"name": "JSON Lines", "support": "full"},
    "xlsx": {"name": "Excel Spreadsheet", "support": "full"},
    "xls": {"name": "Excel Spreadsheet (Legacy)", "support": "full"},
}

CONVERTIBLE_FORMATS = {
    "dta": {"name": "STATA Data File", "instructions": "Export as CSV from STATA"},
    "sav": {"name": "SPSS Data File", "instructions": "Export as CSV from SPSS"},
    "rds": {"name": "R Data File", "instructions": "Export as CSV from R using write.csv()"},
    "parquet": {"name": "Parquet File", "instructions": "Convert to CSV using pandas or other tools"},
    "feather": {"name": "Feather File", "instructions": "Convert to CSV using pandas"},
}

MULTIMEDIA_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "mp4", "avi", "wav", "mp3"}
DATABASE_EXTENSIONS = {"db", "sqlite", "mdb", "accdb"}

DELIMITERS = [",", "\t", "|", ";"]

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class DatasetFile:
    """An uploaded file: its name (for the extension) and raw bytes"""
    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower().lstrip(".")

    @classmethod
    def from_path(cls, file_path: Union[str, Path]) -> "DatasetFile":
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return cls(filename=file_path.name, content=file_path.read_bytes())


def detect_format(filename: str) -> FormatDetection:
    """Classify an upload by extension: analyzable, manual-only or unknown"""
    extension = Path(filename).suffix.lower().lstrip(".")

    if extension in SUPPORTED_FORMATS:
        fmt = SUPPORTED_FORMATS[extension]
        return FormatDetection(
            detected_format=fmt["name"],
            extension=extension,
            confidence="high",
            support_level=fmt["support"],
        )

    if extension in CONVERTIBLE_FORMATS:
        fmt = CONVERTIBLE_FORMATS[extension]
        return FormatDetection(
            detected_format=fmt["name"],
            extension=extension,
            confidence="high",
            support_level="manual",
            suggestions=[fmt["instructions"]],
        )

    if extension in MULTIMEDIA_EXTENSIONS:
        return FormatDetection(
            detected_format=f"{extension.upper()} (Multimedia)",
            extension=extension,
            confidence="high",
            support_level="manual",
            suggestions=["Use manual assessment for multimedia datasets"],
        )

    if extension in DATABASE_EXTENSIONS:
        return FormatDetection(
            detected_format=f"{extension.upper()} (Database)",
            extension=extension,
            confidence="high",
            support_level="manual",
            suggestions=["Export data to CSV format or use manual assessment"],
        )

    return FormatDetection(
        detected_format=f"Unknown format ({extension or 'no extension'})",
        extension=extension,
        confidence="low",
        support_level="unsupported",
        suggestions=[
            "Convert to CSV, Excel, or JSON format",
            "Use manual assessment instead",
        ],
    )


def validate_upload(file: DatasetFile, policy: Optional[AnalysisPolicy] = None) -> Optional[str]:
    """
    Reject uploads we cannot analyze; return a warning for large ones.

    Raises:
        UnsupportedFormatError: manual-only or unknown format
        FileTooLargeError: above the hard size limit
    """
    policy = policy or AnalysisPolicy()
    detection = detect_format(file.filename)

    if not detection.analyzable:
        hint = "; ".join(detection.suggestions)
        raise UnsupportedFormatError(
            f"{detection.detected_format} cannot be analyzed automatically. {hint}",
            detection,
        )

    if file.size > policy.max_file_bytes:
        raise FileTooLargeError(file.size, policy.max_file_bytes)

    if file.size > policy.warn_file_bytes:
        warning = (
            f"Large file detected ({file.size / 1024 / 1024:.1f}MB). "
            "Processing may take longer than usual."
        )
        logger.warning(warning)
        return warning

    return None


def coerce_cell(value: Optional[str]) -> Any:
    """Dynamic typing for delimited text: numbers and booleans, else the string"""
    if value is None or value == "":
        return None
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        if _INT_RE.match(value):
            return int(value)
        if _FLOAT_RE.match(value):
            number = float(value)
            if math.isfinite(number):
                return number
    except (ValueError, OverflowError):
        # Past the interpreter's int conversion limit; keep the text
        pass
    return value


def _normalize_value(value: Any) -> Any:
    """Flatten whatever a reader produced into a plain scalar"""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _drop_blank_lines(text: str) -> List[str]:
    """Skip blank lines, except those inside a quoted multi-line cell"""
    kept: List[str] = []
    in_quotes = False
    for line in text.splitlines():
        if in_quotes or line.strip():
            kept.append(line)
        if line.count('"') % 2:
            in_quotes = not in_quotes
    return kept


def uniform_rows(records: List[Any]) -> List[RawRow]:
    """Give every row the same columns (union, first-seen order); missing -> None"""
    rows = [r if isinstance(r, dict) else {"value": r} for r in records]

    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(str(key), None)

    return [
        {col: _normalize_value(row.get(col)) for col in columns}
        for row in ({str(k): v for k, v in row.items()} for row in rows)
    ]


class DataReader:
    """
    Universal upload reader with format auto-detection.

    Uses Polars for delimited text and spreadsheets, the json module for
    JSON documents. Always returns row records, never a DataFrame, so every
    downstream component sees the same table shape.
    """

    @staticmethod
    def detect_format(file_path: Union[str, Path]) -> DataFormat:
        """Detect parser backend from extension"""
        ext = Path(file_path).suffix.lower()
        if ext in EXTENSION_MAP:
            return EXTENSION_MAP[ext]
        detection = detect_format(str(file_path))
        raise UnsupportedFormatError(f"Unsupported file format: {ext or 'no extension'}", detection)

    @staticmethod
    def detect_csv_delimiter(text: str) -> str:
        """Auto-detect delimiter by counting candidates in the header line"""
        header = next((line for line in text.splitlines() if line.strip()), "")

        counts = {delimiter: header.count(delimiter) for delimiter in DELIMITERS}

        # Ties resolve to the earlier candidate
        best = max(counts, key=counts.get)
        if counts[best] == 0:
            logger.debug("No delimiter found in header, defaulting to ','")
            return ","
        return best

    @classmethod
    def read(cls, file: DatasetFile) -> List[RawRow]:
        """
        Parse an uploaded file into row records.

        Raises:
            UnsupportedFormatError: unknown extension
            ParseError: malformed content
            EmptyDatasetError: no data rows
        """
        format_type = cls.detect_format(file.filename)
        logger.info(f"Reading {format_type.value} file: {file.filename}")

        readers = {
            DataFormat.CSV: cls._read_csv,
            DataFormat.EXCEL: cls._read_excel,
            DataFormat.JSON: cls._read_json,
            DataFormat.JSON_LINES: cls._read_jsonl,
        }

        rows = readers[format_type](file.content)

        if not rows:
            raise EmptyDatasetError("No data found in file")

        logger.info(f"Loaded {len(rows):,} rows × {len(rows[0])} columns")
        return rows

    @classmethod
    def _read_csv(cls, content: bytes) -> List[RawRow]:
        """Read delimited text; every cell is coerced on its own"""
        text = content.decode("utf-8-sig", errors="replace")

        lines = _drop_blank_lines(text)
        if len(lines) < 2:
            raise EmptyDatasetError("No data rows found after the header")

        delimiter = cls.detect_csv_delimiter(lines[0])
        logger.debug(f"Delimiter found: {delimiter!r}")

        expected = len(lines[0].split(delimiter))
        ragged = sum(1 for line in lines[1:] if len(line.split(delimiter)) > expected)
        if ragged:
            logger.warning(f"CSV parsing warnings: {ragged} line(s) with extra fields were truncated")

        try:
            df = pl.read_csv(
                io.BytesIO("\n".join(lines).encode("utf-8")),
                separator=delimiter,
                has_header=True,
                infer_schema_length=0,  # all columns as strings, coerced per cell below
                truncate_ragged_lines=True,
            )
        except pl.exceptions.NoDataError as e:
            raise EmptyDatasetError(f"No data found in file: {e}")
        except pl.exceptions.PolarsError as e:
            raise ParseError(f"Failed to parse delimited text: {e}")

        return [
            {col: coerce_cell(value) for col, value in record.items()}
            for record in df.iter_rows(named=True)
        ]

    @classmethod
    def _read_excel(cls, content: bytes) -> List[RawRow]:
        """Read Excel file (.xlsx, .xls), first sheet, first row as header"""
        try:
            df = pl.read_excel(
                io.BytesIO(content),
                sheet_id=1,  # First sheet
                infer_schema_length=None,
            )
        except pl.exceptions.NoDataError as e:
            raise EmptyDatasetError(f"Excel file appears to be empty: {e}")
        except Exception as e:
            logger.error(f"Failed to read Excel file: {e}")
            raise ParseError(f"Failed to read Excel file: {e}")

        return uniform_rows(df.to_dicts())

    @classmethod
    def _read_json(cls, content: bytes) -> List[RawRow]:
        """Read JSON: array of records, object holding one, or a single object"""
        try:
            data = json.loads(content.decode("utf-8-sig"), parse_constant=_reject_constant)
        except ValueError as e:
            raise ParseError(f"Invalid JSON format: {e}")

        if isinstance(data, list):
            return uniform_rows(data)
        elif isinstance(data, dict):
            # First array-valued property wins
            for key, value in data.items():
                if isinstance(value, list):
                    logger.debug(f"Using array property '{key}' as rows")
                    return uniform_rows(value)
            # Single record
            return uniform_rows([data])
        else:
            raise ParseError("JSON file does not contain valid data structure")

    @classmethod
    def _read_jsonl(cls, content: bytes) -> List[RawRow]:
        """Read JSON Lines file (one JSON value per line)"""
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid JSON Lines encoding: {e}")

        records = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line, parse_constant=_reject_constant))
            except ValueError as e:
                raise ParseError(f"Invalid JSON on line {line_number}: {e}")

        return uniform_rows(records)


# Convenience function
def read_data(path: Union[str, Path]) -> List[RawRow]:
    """Quick read of a file on disk"""
    return DataReader.read(DatasetFile.from_path(path))
