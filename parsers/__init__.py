"""
File parsers module.

Local inspection of uploaded files before they are sent to the backend.
"""

from parsers.csv_file_parser import (
    inspect_csv,
    is_csv_file,
    missing_headers,
)

__all__ = [
    "inspect_csv",
    "is_csv_file",
    "missing_headers",
]
