"""
Tests for the export and recap services.
"""

import csv
import io

import pytest
from openpyxl import load_workbook

from onefinance.models import TransactionType
from onefinance.services import ExportFormat, ExportService, RecapService


@pytest.fixture
def populated(db, add_tx):
    food = db.create_category("Food")
    cash = db.get_default_account()
    add_tx("2025-03-01", amount=2000, type=TransactionType.INCOME, title="Paycheck")
    add_tx("2025-03-05", amount=45.5, title="Groceries", category_id=food.id, account_id=cash.id)
    add_tx("2025-04-02", amount=900, title="Rent")
    return db


class TestExportService:
    """Tests for CSV and XLSX exports."""

    def test_csv_export(self, populated):
        """Test that the CSV carries a BOM, a header and every row."""
        buffer = ExportService(populated).export_to_csv()
        raw = buffer.getvalue()
        assert raw.startswith(b"\xef\xbb\xbf")

        rows = list(csv.reader(io.StringIO(raw.decode("utf-8-sig"))))
        assert rows[0][:5] == ["ID", "Date", "Type", "Title", "Amount"]
        assert len(rows) == 4
        assert rows[1][3] == "Rent"

    def test_csv_month_filter(self, populated):
        """Test exporting a single month."""
        buffer = ExportService(populated).export_to_csv(year=2025, month=3)
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))
        titles = [row[3] for row in rows[1:]]
        assert titles == ["Groceries", "Paycheck"]
        assert rows[1][5] == "Food"
        assert rows[1][6] == "Cash"

    def test_period_filter(self, populated):
        """Test exporting a period by id."""
        period = populated.find_period(2025, 4)
        buffer = ExportService(populated).export_to_csv(period_id=period.id)
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))
        assert [row[3] for row in rows[1:]] == ["Rent"]

    def test_year_without_month_rejected(self, populated):
        """Test that a month scope needs both year and month."""
        with pytest.raises(ValueError):
            ExportService(populated).export_to_csv(year=2025)

    def test_xlsx_export(self, populated):
        """Test the workbook layout."""
        buffer = ExportService(populated).export(ExportFormat.XLSX)
        wb = load_workbook(buffer)
        assert wb.sheetnames == ["Transactions", "Summary"]

        ws = wb["Transactions"]
        assert ws.freeze_panes == "A2"
        assert ws.max_row == 4
        assert ws.cell(row=1, column=1).value == "ID"

        summary = wb["Summary"]
        assert summary.cell(row=5, column=3).value == 2000
        assert summary.cell(row=6, column=3).value == 945.5
        assert summary.cell(row=8, column=3).value == 1054.5

    def test_filename(self, db):
        """Test suggested export filenames."""
        service = ExportService(db)
        assert service.get_filename(ExportFormat.CSV).endswith(".csv")
        name = service.get_filename(ExportFormat.XLSX, 2025, 3)
        assert name.startswith("onefinance_")
        assert name.endswith("_2025-03.xlsx")


class TestRecapService:
    """Tests for yearly recaps."""

    def test_generate_recap(self, populated):
        """Test the yearly totals."""
        recap = RecapService(populated).generate_recap(2025)
        assert len(recap.months) == 12
        assert recap.income_total == 2000
        assert recap.expense_total == 945.5
        assert recap.net == 1054.5
        assert recap.has_activity

    def test_recap_text(self, populated):
        """Test the plain-text table."""
        service = RecapService(populated)
        text = service.format_recap_text(service.generate_recap(2025))
        assert "Recap for 2025" in text
        assert "Mar" in text
        assert "2,000.00" in text

    def test_recap_invalid_year(self, db):
        """Test that unsupported years are rejected."""
        with pytest.raises(ValueError):
            RecapService(db).generate_recap(1800)

    def test_monthly_chart(self, populated):
        """Test that the chart is a PNG image."""
        service = RecapService(populated)
        chart = service.generate_monthly_chart(service.generate_recap(2025))
        assert chart.getvalue().startswith(b"\x89PNG")

    def test_empty_chart(self, db):
        """Test that a year without activity still renders."""
        service = RecapService(db)
        recap = service.generate_recap(2030)
        assert not recap.has_activity
        assert service.generate_monthly_chart(recap).getvalue().startswith(b"\x89PNG")

    def test_chart_requires_recap(self, db):
        """Test that a missing recap is rejected."""
        with pytest.raises(ValueError):
            RecapService(db).generate_monthly_chart(None)
