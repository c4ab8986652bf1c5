"""Chart images for the monthly budget view.

Uses matplotlib's non-interactive backend and returns PNG buffers.
"""
import io

import matplotlib
matplotlib.use("Agg")
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from services.report_service import ReportService
from utils.date_helpers import current_month_str, friendly_month
from utils.logger import get_logger

logger = get_logger(__name__)


class ChartService:
    def __init__(self, report_service: ReportService):
        self._reports = report_service

    def budget_chart(self, month: str | None = None, symbol: str = "$") -> io.BytesIO | None:
        """Bar chart of spent vs budget per category. None when there is nothing to plot."""
        m = month or current_month_str()
        rows = self._reports.get_category_breakdown(m)
        if not rows:
            return None

        labels = [r["category"] for r in rows]
        spent = [r["spent"] for r in rows]
        budgets = [r["budget"] for r in rows]
        colors = [r["color_hex"] for r in rows]
        x = range(len(rows))
        w = 0.38

        fig = Figure(figsize=(8, 4.5), dpi=100, tight_layout=True)
        ax = fig.add_subplot(111)
        ax.bar([i - w / 2 for i in x], budgets, w, color="#D1D5DB", label="Budget")
        ax.bar([i + w / 2 for i in x], spent, w, color=colors, label="Spent")
        ax.set_xticks(list(x))
        ax.set_xticklabels(labels, rotation=20, ha="right")
        ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _: f"{symbol}{v:,.0f}"))
        for spine in ("top", "right"):
            ax.spines[spine].set_visible(False)
        ax.legend(frameon=False)

        summary = self._reports.get_summary(m)
        ax.set_title(
            f"{friendly_month(m)}: spent {symbol}{summary['expense']:,.2f} "
            f"of {symbol}{summary['budget']:,.2f}"
        )

        buf = io.BytesIO()
        fig.savefig(buf, format="png")
        buf.seek(0)
        logger.info("Rendered budget chart for %s (%d categories)", m, len(rows))
        return buf
