"""
Recap service for yearly summaries.

Provides functionality for:
- Per-month income/expense totals of a ledger year
- A plain-text recap for terminal output
- Monthly income vs expense chart visualization
"""

import calendar
import io
import logging
from dataclasses import dataclass, field

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.ticker import FuncFormatter

from onefinance.config import CHART_DPI, CHART_FORMAT, CHART_HEIGHT, CHART_WIDTH
from onefinance.db import LedgerDatabase, MonthlyTotal
from onefinance.db.validators import validate_year

# Non-interactive backend; charts are only ever written to buffers
matplotlib.use("Agg")

logger = logging.getLogger(__name__)


@dataclass
class YearRecap:
    """Income and expense totals for one ledger year."""

    year: int
    months: list[MonthlyTotal] = field(default_factory=list)

    @property
    def income_total(self) -> float:
        return sum(m.income for m in self.months)

    @property
    def expense_total(self) -> float:
        return sum(m.expense for m in self.months)

    @property
    def net(self) -> float:
        return self.income_total - self.expense_total

    @property
    def has_activity(self) -> bool:
        return any(m.income or m.expense for m in self.months)


class RecapService:
    """Service for generating yearly recaps and charts."""

    def __init__(self, database: LedgerDatabase):
        """
        Initialize the recap service.

        Args:
            database: Ledger database to aggregate from
        """
        self.database = database

        try:
            sns.set_theme(style="darkgrid")
        except Exception as e:
            logger.warning(f"Failed to set seaborn theme: {e}")

    def generate_recap(self, year: int) -> YearRecap:
        """
        Build the recap for a year.

        Always covers twelve months; months without transactions are zero.
        """
        validate_year(year)
        months = self.database.get_monthly_totals(year)
        logger.debug(f"Generated recap for {year}")
        return YearRecap(year=year, months=months)

    def format_recap_text(self, recap: YearRecap) -> str:
        """
        Format the recap as a fixed-width table.

        Raises:
            ValueError: If recap is None
        """
        if not recap:
            raise ValueError("recap cannot be None")

        lines = [f"Recap for {recap.year}", ""]
        lines.append(f"{'Month':<10}{'Income':>15}{'Expense':>15}{'Net':>15}")
        lines.append("-" * 55)
        for m in recap.months:
            lines.append(
                f"{calendar.month_abbr[m.month]:<10}"
                f"{m.income:>15,.2f}{m.expense:>15,.2f}{m.net:>15,.2f}"
            )
        lines.append("-" * 55)
        lines.append(
            f"{'Total':<10}{recap.income_total:>15,.2f}"
            f"{recap.expense_total:>15,.2f}{recap.net:>15,.2f}"
        )
        return "\n".join(lines)

    def generate_monthly_chart(self, recap: YearRecap) -> io.BytesIO:
        """
        Generate a bar chart of monthly income vs expense.

        Returns:
            BytesIO buffer containing the PNG image

        Raises:
            ValueError: If recap is None
        """
        if not recap:
            raise ValueError("recap cannot be None")

        fig = None
        try:
            fig, ax = plt.subplots(figsize=(CHART_WIDTH, CHART_HEIGHT))

            if not recap.has_activity:
                ax.text(
                    0.5,
                    0.5,
                    f"No transactions in {recap.year}",
                    ha="center",
                    va="center",
                    fontsize=14,
                )
                ax.set_xlim(0, 1)
                ax.set_ylim(0, 1)
            else:
                df = pd.DataFrame(
                    {
                        "Month": [calendar.month_abbr[m.month] for m in recap.months],
                        "Income": [m.income for m in recap.months],
                        "Expense": [m.expense for m in recap.months],
                    }
                )
                long_df = df.melt(
                    id_vars="Month", var_name="Type", value_name="Amount"
                )
                sns.barplot(
                    data=long_df,
                    x="Month",
                    y="Amount",
                    hue="Type",
                    palette={"Income": "#2ecc71", "Expense": "#e74c3c"},
                    ax=ax,
                )
                # barplot places categories at 0..11
                ax.plot(
                    range(len(df)),
                    df["Income"] - df["Expense"],
                    color="#3498db",
                    linewidth=2,
                    marker="o",
                    label="Net",
                )
                ax.axhline(y=0, color="black", linewidth=0.8, alpha=0.6)
                ax.legend(loc="upper right")
                ax.yaxis.set_major_formatter(FuncFormatter(lambda x, p: f"{x:,.0f}"))

            ax.set_title(
                f"Income vs Expense, {recap.year}", fontsize=14, fontweight="bold"
            )
            ax.set_xlabel("")
            ax.set_ylabel("Amount", fontsize=11)
            plt.tight_layout()

            buf = io.BytesIO()
            fig.savefig(buf, format=CHART_FORMAT, dpi=CHART_DPI, bbox_inches="tight")
            buf.seek(0)

            logger.debug(f"Generated monthly chart for {recap.year}")
            return buf
        except Exception as e:
            logger.error(f"Error generating monthly chart: {e}", exc_info=True)
            raise
        finally:
            # Always close the figure to free memory
            if fig is not None:
                plt.close(fig)
