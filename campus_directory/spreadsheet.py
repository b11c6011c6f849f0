"""Read uploaded user spreadsheets into rows of text cells.

Rows keep the length the file gives them; the importer pads or cuts them
to its seven columns.
"""

import csv
import os
import zipfile
from typing import List
from xml.etree.ElementTree import ParseError

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .errors import ImportFailed

SUPPORTED_EXTENSIONS = (".xlsx", ".csv")


def normalize_cell(value) -> str:
    if value is None:
        return ""
    # Phone numbers typed into Excel come back as numbers.
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_xlsx(path: str) -> List[List[str]]:
    # Passing an open handle skips openpyxl's file-extension check, since
    # temp uploads may not carry one. Broken XML inside the zip raises
    # ParseError, or a SyntaxError subclass when openpyxl runs on lxml.
    try:
        with open(path, "rb") as fh:
            workbook = load_workbook(fh, read_only=True, data_only=True)
            try:
                if not workbook.worksheets:
                    raise ImportFailed("Workbook has no worksheets")
                sheet = workbook.worksheets[0]
                return [[normalize_cell(value) for value in row] for row in sheet.iter_rows(values_only=True)]
            finally:
                workbook.close()
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError, ParseError, SyntaxError) as exc:
        raise ImportFailed(f"Cannot read workbook: {exc}") from exc


def _read_csv(path: str) -> List[List[str]]:
    try:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            return [[normalize_cell(value) for value in row] for row in csv.reader(fh)]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise ImportFailed(f"Cannot read CSV file: {exc}") from exc


def read_rows(path: str, filename: str = "") -> List[List[str]]:
    """Return every row of the first sheet, header included.

    ``filename`` is the name the client uploaded; the stored temp file may
    have no extension, so the format is picked from it when given.

    Raises:
        ImportFailed: The format is unsupported or the file cannot be parsed.
    """
    extension = os.path.splitext((filename or path).lower())[1]
    if extension == ".csv":
        return _read_csv(path)
    if extension == ".xlsx":
        return _read_xlsx(path)
    raise ImportFailed(f"Unsupported spreadsheet type {extension or '(none)'!r}; expected .xlsx or .csv")
