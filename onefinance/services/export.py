"""
Export service for ledger data.

Provides functionality to export transactions to XLSX and CSV formats.
"""

import csv
import io
from datetime import datetime
from enum import Enum
from typing import Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from onefinance.db import LedgerDatabase, Transaction
from onefinance.models import TransactionType

HEADERS = [
    "ID",
    "Date",
    "Type",
    "Title",
    "Amount",
    "Category",
    "Account",
    "Notes",
]


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"


class ExportService:
    """Service for exporting ledger transactions to various formats."""

    def __init__(self, database: LedgerDatabase):
        """
        Initialize the export service.

        Args:
            database: Ledger database to read transactions from
        """
        self.database = database

    def _get_transactions(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        period_id: Optional[int] = None,
    ) -> list[Transaction]:
        """
        Get transactions for the requested scope.

        Args:
            year: Year of a single month to export (requires month)
            month: Month of a single month to export (requires year)
            period_id: Ledger period to export

        Returns:
            List of Transaction objects, newest first
        """
        if period_id is not None:
            return self.database.list_transactions(period_id)
        if year is not None or month is not None:
            if year is None or month is None:
                raise ValueError("year and month must be given together")
            return self.database.get_transactions_by_month(year, month)
        return self.database.get_transactions_with_details()

    @staticmethod
    def _row(transaction: Transaction) -> list:
        return [
            transaction.id,
            transaction.date.isoformat(),
            transaction.type.value,
            transaction.title,
            transaction.amount,
            transaction.category_name or "",
            transaction.account_name or "",
            transaction.notes or "",
        ]

    def export_to_csv(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        period_id: Optional[int] = None,
    ) -> io.BytesIO:
        """
        Export transactions to CSV format.

        Returns:
            BytesIO buffer containing the CSV data
        """
        transactions = self._get_transactions(year, month, period_id)

        buffer = io.BytesIO()
        text_buffer = io.StringIO()

        writer = csv.writer(text_buffer)
        writer.writerow(HEADERS)
        for transaction in transactions:
            writer.writerow(self._row(transaction))

        # Convert to bytes
        buffer.write(text_buffer.getvalue().encode("utf-8-sig"))  # BOM for Excel
        buffer.seek(0)

        return buffer

    def export_to_xlsx(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        period_id: Optional[int] = None,
    ) -> io.BytesIO:
        """
        Export transactions to XLSX format with formatting.

        Returns:
            BytesIO buffer containing the XLSX data
        """
        transactions = self._get_transactions(year, month, period_id)

        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Transactions"

        # Define styles
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        income_fill = PatternFill(
            start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"
        )
        expense_fill = PatternFill(
            start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"
        )

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        # Data rows
        for row_idx, transaction in enumerate(transactions, 2):
            fill = (
                income_fill
                if transaction.type == TransactionType.INCOME
                else expense_fill
            )
            for col, value in enumerate(self._row(transaction), 1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                cell.fill = fill
            ws.cell(row=row_idx, column=5).number_format = "#,##0.00"

        column_widths = [8, 12, 10, 30, 15, 20, 18, 40]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        # Freeze header row
        ws.freeze_panes = "A2"

        self._add_summary_sheet(wb, transactions)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return buffer

    def _add_summary_sheet(self, wb: Workbook, transactions: list[Transaction]):
        """Add a summary sheet to the workbook."""
        ws = wb.create_sheet(title="Summary")

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)

        ws.cell(row=1, column=1, value="Ledger Summary").font = title_font
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        income = [t for t in transactions if t.type == TransactionType.INCOME]
        expense = [t for t in transactions if t.type == TransactionType.EXPENSE]
        total_income = sum(t.amount for t in income)
        total_expense = sum(t.amount for t in expense)

        summary_start = 4
        ws.cell(row=summary_start, column=1, value="Type").font = header_font
        ws.cell(row=summary_start, column=2, value="Count").font = header_font
        ws.cell(row=summary_start, column=3, value="Total").font = header_font

        ws.cell(row=summary_start + 1, column=1, value="Income")
        ws.cell(row=summary_start + 1, column=2, value=len(income))
        ws.cell(row=summary_start + 1, column=3, value=total_income)

        ws.cell(row=summary_start + 2, column=1, value="Expense")
        ws.cell(row=summary_start + 2, column=2, value=len(expense))
        ws.cell(row=summary_start + 2, column=3, value=total_expense)

        ws.cell(row=summary_start + 4, column=1, value="Balance").font = header_font
        ws.cell(row=summary_start + 4, column=3, value=total_income - total_expense)

        for row in range(summary_start + 1, summary_start + 5):
            ws.cell(row=row, column=3).number_format = "#,##0.00"

        ws.column_dimensions["A"].width = 15
        ws.column_dimensions["B"].width = 10
        ws.column_dimensions["C"].width = 18

    def export(
        self,
        format: ExportFormat,
        year: Optional[int] = None,
        month: Optional[int] = None,
        period_id: Optional[int] = None,
    ) -> io.BytesIO:
        """Export in the requested format."""
        if ExportFormat(format) == ExportFormat.XLSX:
            return self.export_to_xlsx(year, month, period_id)
        return self.export_to_csv(year, month, period_id)

    def get_filename(
        self,
        format: ExportFormat,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> str:
        """
        Generate a filename for the export.

        Returns:
            Suggested filename, e.g. onefinance_20250401_2025-03.xlsx
        """
        date_str = datetime.now().strftime("%Y%m%d")
        scope = f"_{year}-{month:02d}" if year and month else ""
        return f"onefinance_{date_str}{scope}.{ExportFormat(format).value}"
