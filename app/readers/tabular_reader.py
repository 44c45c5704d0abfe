"""
app/readers/tabular_reader.py

Turns an uploaded CSV or XLSX file into a header list and labeled rows.

Row numbers follow the source file: the header is line 1 and the first
data row is line 2, so they can be quoted back to the operator as-is.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from app.validators.import_schema_validator import ImportStructureError

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = (".csv",)
XLSX_EXTENSIONS = (".xlsx",)
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS + XLSX_EXTENSIONS

_XLSX_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class ParsedTable:
    """
    Header labels plus ``(row_number, label -> raw value)`` pairs in file order.
    """

    headers: list[str]
    rows: list[tuple[int, dict[str, Any]]] = field(default_factory=list)


class TabularReader:
    """
    Reads the first sheet (XLSX) or the whole file (CSV) into a ParsedTable.
    """

    def read(
        self,
        *,
        content: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> ParsedTable:
        if not content:
            raise ImportStructureError("Uploaded file is empty.")

        file_format = self.detect_format(file_name=file_name, content_type=content_type)
        if file_format == "xlsx":
            return self._read_xlsx(content)
        return self._read_csv(content)

    @staticmethod
    def detect_format(*, file_name: str, content_type: str | None = None) -> str:
        lowered = (file_name or "").strip().lower()
        if lowered.endswith(XLSX_EXTENSIONS):
            return "xlsx"
        if lowered.endswith(CSV_EXTENSIONS):
            return "csv"
        if (content_type or "").strip().lower() in _XLSX_CONTENT_TYPES:
            return "xlsx"
        raise ImportStructureError(
            f"Unsupported file type. Allowed extensions: {', '.join(SUPPORTED_EXTENSIONS)}."
        )

    def _read_csv(self, content: bytes) -> ParsedTable:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImportStructureError("CSV must be UTF-8 encoded.") from exc

        try:
            records = list(csv.reader(io.StringIO(text, newline="")))
        except csv.Error as exc:
            raise ImportStructureError(f"Invalid CSV format: {exc}") from exc

        return self._build_table(records)

    def _read_xlsx(self, content: bytes) -> ParsedTable:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
            raise ImportStructureError("Excel file is empty or invalid.") from exc

        try:
            if not workbook.worksheets:
                raise ImportStructureError("Excel file is empty or invalid.")
            worksheet = workbook.worksheets[0]
            records = [list(values) for values in worksheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

        return self._build_table(records)

    def _build_table(self, records: Iterable[Sequence[Any]]) -> ParsedTable:
        iterator = iter(records)
        header_values = next(iterator, None)
        if not header_values or all(self._is_blank(value) for value in header_values):
            raise ImportStructureError("Header row is missing.")

        headers = ["" if value is None else str(value).strip() for value in header_values]

        rows: list[tuple[int, dict[str, Any]]] = []
        for row_number, values in enumerate(iterator, start=2):
            row: dict[str, Any] = {}
            for index, label in enumerate(headers):
                # Later duplicate headers never override the first occurrence.
                if not label or label in row:
                    continue
                row[label] = values[index] if index < len(values) else None
            rows.append((row_number, row))

        logger.debug("Parsed upload headers=%s data_rows=%d", headers, len(rows))
        return ParsedTable(headers=[label for label in headers if label], rows=rows)

    @staticmethod
    def _is_blank(value: Any) -> bool:
        return value is None or str(value).strip() == ""
