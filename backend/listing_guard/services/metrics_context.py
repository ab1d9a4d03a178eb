# backend/listing_guard/services/metrics_context.py
"""
Reduce the full dashboard aggregate to the compact context the assistant sees.

Derived numbers (gross profit, margins, ACOS/TACOS, wasted spend, issue
totals) use the same formulas as the dashboard screens, so the assistant never
quotes a figure that disagrees with what the seller already sees. List fields
are cut to fixed sizes after sorting to keep the prompt small.
"""
from typing import Any, Dict, List, Mapping, Optional, Union

from listing_guard.schemas.dashboard import (
    AccountHealth,
    AdsSummary,
    AsinProfitability,
    ContextAds,
    ContextIssues,
    ContextProfitability,
    ContextSummary,
    DashboardAggregate,
    DashboardMetricsContext,
    DateRange,
    PpcSummary,
    WastedKeyword,
    WastedSpendSummary,
)

TOP_ASINS_LIMIT = 25
LOW_MARGIN_LIMIT = 15
LOSS_MAKING_LIMIT = 15
ERROR_ASINS_LIMIT = 30
ERROR_DETAILS_LIMIT = 50
WASTED_KEYWORDS_LIMIT = 10
PPC_DATEWISE_LIMIT = 30
CAMPAIGN_SAMPLE_LIMIT = 30

LOW_MARGIN_PCT = 10.0
# attributed sales below this count as "no sales"
WASTED_SALES_EPSILON = 0.01

DashboardLike = Union[DashboardAggregate, Mapping[str, Any], None]
PpcLike = Union[PpcSummary, Mapping[str, Any], None]


def _num(v: Any) -> float:
    """Lenient number parse: bad or missing values read as 0."""
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def _first_set(*values: Optional[float]) -> Optional[float]:
    for v in values:
        if v is not None:
            return v
    return None


def _pct(numerator: float, denominator: float) -> float:
    return (numerator / denominator) * 100


def _rows(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [r for r in (rows or []) if isinstance(r, Mapping)]


# -------------------- Summary --------------------

def _ppc_spend(agg: DashboardAggregate, ppc: Optional[PpcSummary]) -> Optional[float]:
    ads = agg.sponsoredAds
    return _first_set(
        ppc.totalSpend if ppc else None,
        ads.spend if ads else None,
        ads.totalCost if ads else None,
    )


def _ppc_sales(agg: DashboardAggregate, ppc: Optional[PpcSummary]) -> Optional[float]:
    ads = agg.sponsoredAds
    return _first_set(
        ppc.totalSales if ppc else None,
        ads.salesIn30Days if ads else None,
    )


def _total_sales(agg: DashboardAggregate) -> float:
    return agg.totalSales or (agg.economics.totalSales if agg.economics else None) or 0.0


def compute_acos(agg: DashboardAggregate, ppc: Optional[PpcSummary] = None) -> Optional[float]:
    acos = _first_set(
        ppc.overallAcos if ppc else None,
        agg.sponsoredAds.acos if agg.sponsoredAds else None,
    )
    if acos is None:
        spend = _ppc_spend(agg, ppc) or 0.0
        sales = _ppc_sales(agg, ppc) or 0.0
        if spend > 0 and sales > 0:
            acos = _pct(spend, sales)
    return acos


def compute_tacos(agg: DashboardAggregate, ppc: Optional[PpcSummary] = None) -> Optional[float]:
    tacos = agg.sponsoredAds.tacos if agg.sponsoredAds else None
    if tacos is None:
        spend = _ppc_spend(agg, ppc) or 0.0
        total_sales = _total_sales(agg)
        if spend > 0 and total_sales > 0:
            tacos = _pct(spend, total_sales)
    return tacos


def _summary(agg: DashboardAggregate, ppc: Optional[PpcSummary]) -> ContextSummary:
    spend = _ppc_spend(agg, ppc)
    total_sales = _total_sales(agg)

    # ad spend is taken off here, the backend figure does not include it
    backend_gross = agg.grossProfit or (agg.economics.grossProfit if agg.economics else None) or 0.0
    gross_profit = backend_gross - (spend or 0.0)
    margin = _pct(gross_profit, total_sales) if total_sales > 0 else 0.0

    return ContextSummary(
        brand=agg.brand or None,
        country=agg.country or None,
        dateRange=DateRange(startDate=agg.startDate or None, endDate=agg.endDate or None),
        totalSales=total_sales or None,
        grossProfit=gross_profit,
        profitMargin=round(margin, 2),
        ppcSpend=spend,
        accountHealth=agg.accountHealth or AccountHealth(),
    )


# -------------------- Profitability --------------------

def asin_profitability(row: Mapping[str, Any], cogs_values: Mapping[str, Any]) -> AsinProfitability:
    """Net profit and net margin for one ASIN, after cost of goods."""
    asin = row.get("asin")
    # numeric ASINs show up in some exports; COGS are keyed by the string form
    asin = None if asin is None else str(asin)
    sales = _num(row.get("sales"))
    quantity = _num(row.get("quantity"))
    cogs_per_unit = _num(cogs_values.get(asin)) if asin is not None else 0.0

    if row.get("grossProfit") is not None:
        gross_profit = _num(row.get("grossProfit"))
    else:
        fees = _num(row.get("totalFees") or row.get("amazonFees"))
        gross_profit = sales - _num(row.get("ads")) - fees

    total_cogs = cogs_per_unit * quantity
    net_profit = gross_profit - total_cogs
    net_margin = _pct(net_profit, sales) if sales > 0 else 0.0

    return AsinProfitability(**{
        **row,
        "asin": asin,
        "sales": sales,
        "quantity": quantity,
        "grossProfit": round(gross_profit, 2),
        "totalCogs": round(total_cogs, 2),
        "netProfit": round(net_profit, 2),
        "netProfitMargin": round(net_margin, 2),
    })


def _profitability(agg: DashboardAggregate, cogs_values: Mapping[str, Any]) -> ContextProfitability:
    pool = [asin_profitability(r, cogs_values) for r in _rows(agg.profitability)]
    pool.sort(key=lambda p: p.sales, reverse=True)
    pool = pool[:TOP_ASINS_LIMIT]

    loss_making = [p for p in pool if p.netProfit < 0][:LOSS_MAKING_LIMIT]
    low_margin = [p for p in pool if 0 <= p.netProfitMargin < LOW_MARGIN_PCT][:LOW_MARGIN_LIMIT]

    return ContextProfitability(
        topAsins=pool,
        lowMarginAsins=low_margin,
        lossMakingAsins=loss_making,
        totalProfitabilityErrors=agg.totalProfitabilityErrors,
        profitabilityErrorDetails=_rows(agg.profitabilityErrorDetails)[:ERROR_DETAILS_LIMIT],
    )


# -------------------- Ads --------------------

def wasted_spend_summary(keyword_rows: Optional[List[Dict[str, Any]]]) -> Optional[WastedSpendSummary]:
    """Spend on keyword rows with cost but (practically) no attributed sales."""
    if keyword_rows is None:
        return None

    wasted = [
        r for r in _rows(keyword_rows)
        if _num(r.get("cost")) > 0 and _num(r.get("attributedSales30d")) < WASTED_SALES_EPSILON
    ]
    total = sum(_num(r.get("cost")) for r in wasted)
    top = sorted(wasted, key=lambda r: _num(r.get("cost")), reverse=True)[:WASTED_KEYWORDS_LIMIT]

    return WastedSpendSummary(
        wastedSpend=round(total, 2),
        wastedKeywordsCount=len(wasted),
        topWastedKeywords=[
            WastedKeyword(
                keyword=r.get("keyword"),
                spend=_num(r.get("cost")),
                campaignName=r.get("campaignName") or "Unknown Campaign",
            )
            for r in top
        ],
    )


def _ads(agg: DashboardAggregate, ppc: Optional[PpcSummary]) -> ContextAds:
    return ContextAds(
        summary=AdsSummary(
            totalSpend=_ppc_spend(agg, ppc),
            totalSalesFromAds=_ppc_sales(agg, ppc),
            overallAcos=compute_acos(agg, ppc),
            overallTacos=compute_tacos(agg, ppc),
        ),
        wastedSpendSummary=wasted_spend_summary(agg.keywordPerformance),
        ppcDatewiseSample=_rows(agg.dateWisePpc)[-PPC_DATEWISE_LIMIT:],
        campaignSample=_rows(agg.campaignPerformance)[:CAMPAIGN_SAMPLE_LIMIT],
        totalSponsoredAdsErrors=agg.totalSponsoredAdsErrors,
        sponsoredAdsErrorDetails=_rows(agg.sponsoredAdsErrorDetails)[:ERROR_DETAILS_LIMIT],
    )


# -------------------- Issues --------------------

def _issues(agg: DashboardAggregate) -> ContextIssues:
    counters = (
        agg.totalProfitabilityErrors,
        agg.totalSponsoredAdsErrors,
        agg.totalInventoryErrors,
        agg.totalRankingErrors,
        agg.totalConversionErrors,
        agg.totalAccountErrors,
    )
    top_error_asins = sorted(_rows(agg.productErrors), key=lambda r: _num(r.get("errors")), reverse=True)

    return ContextIssues(
        totalErrors=sum(c or 0 for c in counters),
        profitabilityErrors=agg.totalProfitabilityErrors,
        sponsoredAdsErrors=agg.totalSponsoredAdsErrors,
        conversionErrors=agg.totalConversionErrors,
        rankingErrors=agg.totalRankingErrors,
        inventoryErrors=agg.totalInventoryErrors,
        accountErrors=agg.totalAccountErrors,
        topErrorAsins=top_error_asins[:ERROR_ASINS_LIMIT],
    )


# -------------------- Entry point --------------------

def build_metrics_context(
    dashboard: DashboardLike,
    ppc_summary: PpcLike = None,
    cogs_values: Optional[Mapping[str, Any]] = None,
) -> DashboardMetricsContext:
    if dashboard is None:
        return DashboardMetricsContext()

    agg = dashboard if isinstance(dashboard, DashboardAggregate) else DashboardAggregate.model_validate(dashboard)
    ppc: Optional[PpcSummary] = None
    if ppc_summary is not None:
        ppc = ppc_summary if isinstance(ppc_summary, PpcSummary) else PpcSummary.model_validate(ppc_summary)

    return DashboardMetricsContext(
        summary=_summary(agg, ppc),
        profitability=_profitability(agg, cogs_values or {}),
        ads=_ads(agg, ppc),
        issues=_issues(agg),
    )
