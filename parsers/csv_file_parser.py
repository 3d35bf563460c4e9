"""
Local inspection of a CSV file chosen for product import.

The backend does the real parse; this only works out what the console
can show before upload (encoding, delimiter, header names, row count)
and lets the mapping editor warn about headers the file does not have.
"""

from io import BytesIO
from typing import Optional

import pandas as pd
import structlog

from exceptions import InvalidCsvFileError
from models.csv_import import CsvFileHints

logger = structlog.get_logger(__name__)

CSV_CONTENT_TYPES = ("text/csv",)

ENCODINGS_TO_TRY = ["utf-8-sig", "utf-8", "cp1252", "latin-1"]
SEPARATORS_TO_TRY = [",", ";", "\t", "|"]


def is_csv_file(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Accept by content type or by .csv extension."""
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type in CSV_CONTENT_TYPES:
        return True
    return bool(filename) and filename.lower().endswith(".csv")


def inspect_csv(
    filename: str,
    content: bytes,
    content_type: Optional[str] = None
) -> CsvFileHints:
    """
    Validate the file choice and compute display hints.

    Args:
        filename: Name of the uploaded file
        content: Raw file bytes
        content_type: Content type reported by the browser

    Returns:
        CsvFileHints; encoding/delimiter stay None if no attempt parsed

    Raises:
        InvalidCsvFileError: Neither content type nor name says CSV
    """
    if not is_csv_file(filename, content_type):
        raise InvalidCsvFileError(filename, content_type)

    hints = CsvFileHints(filename=filename, size_bytes=len(content))
    if not content.strip():
        hints.data_rows = 0
        return hints

    df, encoding, separator = _load_csv(content)
    if df is None:
        logger.warning("csv_hints_unavailable", filename=filename, size_bytes=len(content))
        return hints

    hints.encoding = encoding
    hints.delimiter = separator
    hints.headers = [str(col).strip() for col in df.columns]
    hints.data_rows = len(df)

    logger.info(
        "csv_inspected",
        filename=filename,
        encoding=encoding,
        separator=separator,
        columns=len(hints.headers),
        rows=hints.data_rows
    )
    return hints


def missing_headers(mapping: dict[str, str], headers: list[str]) -> list[str]:
    """
    Mapped column names not found among the file's headers.

    Blank mappings are ignored; comparison is case-insensitive.
    """
    known = {h.strip().lower() for h in headers}
    return [
        column for column in mapping.values()
        if column and column.strip().lower() not in known
    ]


def _load_csv(content: bytes) -> tuple[Optional[pd.DataFrame], Optional[str], Optional[str]]:
    """Try encodings and separators; prefer the first split into several columns."""
    single_column = None

    for enc in ENCODINGS_TO_TRY:
        for sep in SEPARATORS_TO_TRY:
            try:
                df = pd.read_csv(
                    BytesIO(content),
                    sep=sep,
                    encoding=enc,
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=True
                )
            except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
                logger.debug("csv_attempt_failed", encoding=enc, separator=sep, error=str(e))
                continue

            if len(df.columns) > 1:
                return df, enc, sep
            if single_column is None:
                single_column = (df, enc, sep)

    if single_column is not None:
        return single_column
    return None, None, None
