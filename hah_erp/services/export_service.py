"""
Generación de archivos de exportación (CSV y Excel).
"""

import csv
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from io import BytesIO, StringIO
from typing import Any, Iterable, Sequence
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _cell_value(value: Any) -> Any:
    """Normaliza valores para CSV/Excel (Decimal → float, Enum → valor, listas → texto)."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


# ── CSV ──────────────────────────────────────────────
def to_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """CSV con encabezados en español y celdas entrecomilladas cuando hace falta."""
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(
            v.isoformat() if isinstance(v, (date, datetime)) else _cell_value(v)
            for v in row
        )
    return buffer.getvalue()


# ── Excel ────────────────────────────────────────────
def _autosize(ws) -> None:
    for col_idx, column_cells in enumerate(ws.columns, start=1):
        max_length = max(
            (len(str(cell.value)) for cell in column_cells if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, 60)


def _header(ws, row: int, values: Sequence[str]) -> None:
    for col, val in enumerate(values, start=1):
        c = ws.cell(row=row, column=col, value=val)
        c.font = Font(bold=True)
        c.alignment = Alignment(vertical="center")


def to_xlsx(
    title: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    summary: dict[str, Any] | None = None,
) -> bytes:
    """
    Arma un libro con una hoja de detalle y, opcionalmente, una hoja
    "Resumen" con pares campo/valor (totales del reporte).
    """
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    _header(ws, 1, headers)
    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(row, start=1):
            ws.cell(row=row_idx, column=col_idx, value=_cell_value(value))
    _autosize(ws)

    if summary:
        ws_summary = wb.create_sheet("Resumen")
        _header(ws_summary, 1, ["Campo", "Valor"])
        for row_idx, (label, value) in enumerate(summary.items(), start=2):
            ws_summary.cell(row=row_idx, column=1, value=label)
            ws_summary.cell(row=row_idx, column=2, value=_cell_value(value))
        _autosize(ws_summary)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
