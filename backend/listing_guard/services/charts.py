# backend/listing_guard/services/charts.py
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from listing_guard.schemas.assistant import ChartSuggestion, YField
from listing_guard.schemas.dashboard import DashboardAggregate

WEEK_WINDOW = 7
MONTH_WINDOW = 30

_WANTS_LAST_7 = re.compile(r"\b(7|seven)\s*day|last\s*7|past\s*7|weekly\b")
_WANTS_PROFIT = re.compile(r"\bprofit\b|\bmargin\b")

PPC_Y_FIELDS = [YField(field="spend", label="Ad Spend"), YField(field="sales", label="Sales")]
SALES_Y_FIELDS = [YField(field="sales", label="Sales")]
SALES_PROFIT_Y_FIELDS = [YField(field="sales", label="Sales"), YField(field="profit", label="Profit")]


def chart_window(question: Optional[str]) -> int:
    """7 points for weekly / last-7-days questions, 30 otherwise."""
    return WEEK_WINDOW if _WANTS_LAST_7.search((question or "").lower()) else MONTH_WINDOW


def wants_profit(question: Optional[str]) -> bool:
    return bool(_WANTS_PROFIT.search((question or "").lower()))


def _series(dashboard: Any, name: str) -> List[Dict[str, Any]]:
    if isinstance(dashboard, DashboardAggregate):
        rows = getattr(dashboard, name)
    elif isinstance(dashboard, Mapping):
        rows = dashboard.get(name)
    else:
        rows = None
    if not isinstance(rows, list):
        return []
    return [r for r in rows if isinstance(r, Mapping)]


def _bind(chart: ChartSuggestion, rows: List[Dict[str, Any]], window: int, y_fields: List[YField]) -> ChartSuggestion:
    return chart.model_copy(update={
        "data": rows[-window:],
        "xField": chart.xField or "date",
        "yFields": chart.yFields or [y.model_copy() for y in y_fields],
    })


def bind_chart_data(charts: Sequence[ChartSuggestion], question: Optional[str], dashboard: Any) -> List[ChartSuggestion]:
    """
    Attach a bounded slice of time-series data to each chart with a known source.

    Charts with any other ``dataSource`` are returned unchanged (no data), which
    the client reads as "do not render".
    """
    window = chart_window(question)
    sales_y = SALES_PROFIT_Y_FIELDS if wants_profit(question) else SALES_Y_FIELDS

    out: List[ChartSuggestion] = []
    for chart in charts:
        if chart.dataSource == "ppc_datewise":
            out.append(_bind(chart, _series(dashboard, "dateWisePpc"), window, PPC_Y_FIELDS))
        elif chart.dataSource == "sales_datewise":
            out.append(_bind(chart, _series(dashboard, "dateWiseSales"), window, sales_y))
        else:
            out.append(chart)
    return out
