"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tabular export helpers (CSV and Excel) shared by the
             beneficiary export and the reporting engine.
-------------------------------------------------------------------------
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Sequence

from django.http import HttpResponse

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
CSV_CONTENT_TYPE = 'text/csv; charset=utf-8'


def _cell_value(value: Any) -> Any:
    if value is None:
        return ''
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        # Excel cannot store timezone-aware datetimes
        return value.replace(tzinfo=None)
    if isinstance(value, (list, tuple, dict)):
        return str(value)
    return value


def render_csv(columns: Sequence[str], rows: List[Sequence[Any]]) -> bytes:
    """
    Render rows as UTF-8 CSV with a BOM for Excel compatibility.
    """
    buffer = io.StringIO()
    buffer.write('\ufeff')
    writer = csv.writer(buffer)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([
            value.isoformat() if isinstance(value, (date, datetime)) else _cell_value(value)
            for value in row
        ])
    return buffer.getvalue().encode('utf-8')


def render_xlsx(columns: Sequence[str], rows: List[Sequence[Any]], title: str = 'Report') -> bytes:
    """
    Render rows as an Excel workbook with a formatted header row.
    """
    from openpyxl import Workbook
    from openpyxl.styles import Font, Alignment, PatternFill
    from openpyxl.utils import get_column_letter

    wb = Workbook()
    ws = wb.active
    # Sheet titles are limited to 31 characters
    ws.title = (title or 'Report')[:31]

    header_fill = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
    header_font = Font(bold=True, color='FFFFFF')

    for col_num, header in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_num)
        cell.value = header
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center')

    for row_num, row in enumerate(rows, 2):
        for col_num, value in enumerate(row, 1):
            ws.cell(row=row_num, column=col_num).value = _cell_value(value)

    for col_num, header in enumerate(columns, 1):
        ws.column_dimensions[get_column_letter(col_num)].width = max(15, len(str(header)) + 2)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def file_response(content: bytes, filename: str, content_type: str) -> HttpResponse:
    """Wrap rendered bytes in a download response."""
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
