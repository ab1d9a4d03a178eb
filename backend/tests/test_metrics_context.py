# backend/tests/test_metrics_context.py
from listing_guard.schemas.dashboard import DashboardAggregate
from listing_guard.services.metrics_context import (
    asin_profitability,
    build_metrics_context,
    wasted_spend_summary,
)


def test_no_dashboard_gives_empty_sections():
    ctx = build_metrics_context(None)
    assert ctx.summary is None and ctx.profitability is None
    assert ctx.ads is None and ctx.issues is None


def test_empty_dashboard_does_not_raise():
    ctx = build_metrics_context({})
    assert ctx.summary.totalSales is None
    assert ctx.summary.grossProfit == 0
    assert ctx.summary.profitMargin == 0
    assert ctx.summary.ppcSpend is None
    assert ctx.ads.summary.overallAcos is None
    assert ctx.ads.summary.overallTacos is None
    assert ctx.ads.wastedSpendSummary is None
    assert ctx.profitability.topAsins == []
    assert ctx.issues.totalErrors == 0


def test_gross_profit_subtracts_ad_spend():
    ctx = build_metrics_context({"totalSales": 1000, "grossProfit": 300, "sponsoredAds": {"spend": 50}})
    assert ctx.summary.grossProfit == 250
    assert ctx.summary.profitMargin == 25.0


def test_zero_sales_margin_is_zero():
    ctx = build_metrics_context({"totalSales": 0, "grossProfit": 300})
    assert ctx.summary.profitMargin == 0


def test_economics_fallbacks():
    ctx = build_metrics_context({"economics": {"totalSales": 200, "grossProfit": 50}})
    assert ctx.summary.totalSales == 200
    assert ctx.summary.grossProfit == 50
    assert ctx.summary.profitMargin == 25.0


def test_ppc_summary_takes_precedence(dashboard):
    ctx = build_metrics_context(dashboard, ppc_summary={"totalSpend": 80, "totalSales": 400, "overallAcos": 19.5})
    assert ctx.summary.ppcSpend == 80
    assert ctx.ads.summary.totalSpend == 80
    assert ctx.ads.summary.totalSalesFromAds == 400
    assert ctx.ads.summary.overallAcos == 19.5
    assert ctx.summary.grossProfit == 220


def test_acos_and_tacos_computed_from_spend(dashboard):
    ctx = build_metrics_context(dashboard)
    assert ctx.ads.summary.overallAcos == 25.0
    assert ctx.ads.summary.overallTacos == 5.0


def test_acos_not_computed_without_spend():
    ctx = build_metrics_context({"totalSales": 100, "sponsoredAds": {"spend": 0, "salesIn30Days": 100}})
    assert ctx.ads.summary.overallAcos is None
    ctx = build_metrics_context({"sponsoredAds": {"spend": 0, "acos": 12.0}})
    assert ctx.ads.summary.overallAcos == 12.0


def test_legacy_total_cost_used_when_spend_missing():
    ctx = build_metrics_context({"sponsoredAds": {"totalCost": 40}})
    assert ctx.summary.ppcSpend == 40


def test_asin_net_profit_uses_cogs():
    p = asin_profitability({"asin": "B01", "sales": 100, "quantity": 10, "grossProfit": 20}, {"B01": 3})
    assert p.totalCogs == 30
    assert p.netProfit == -10
    assert p.netProfitMargin == -10.0


def test_asin_gross_profit_derived_when_missing():
    p = asin_profitability({"asin": "B02", "sales": "100", "ads": 10, "amazonFees": 15}, {})
    assert p.grossProfit == 75
    assert p.netProfitMargin == 75.0


def test_asin_zero_sales_margin_is_zero():
    p = asin_profitability({"asin": "B03", "sales": 0, "grossProfit": -5}, {})
    assert p.netProfitMargin == 0


def test_profitability_lists(dashboard):
    ctx = build_metrics_context(dashboard, cogs_values={"B0LOSS": 3})
    prof = ctx.profitability
    assert [p.asin for p in prof.topAsins] == ["B0GOOD", "B0THIN", "B0LOSS"]
    assert [p.asin for p in prof.lossMakingAsins] == ["B0LOSS"]
    assert [p.asin for p in prof.lowMarginAsins] == ["B0THIN"]


def test_profitability_caps():
    rows = [{"asin": f"B{i:03d}", "sales": i, "grossProfit": -1} for i in range(1, 41)]
    ctx = build_metrics_context({"profitability": rows})
    assert len(ctx.profitability.topAsins) == 25
    assert ctx.profitability.topAsins[0].asin == "B040"
    assert len(ctx.profitability.lossMakingAsins) == 15
    assert ctx.profitability.lossMakingAsins[-1].asin == "B026"


def test_wasted_spend(dashboard):
    summary = wasted_spend_summary(dashboard["keywordPerformance"])
    assert summary.wastedSpend == 20.0
    assert summary.wastedKeywordsCount == 2
    assert [k.keyword for k in summary.topWastedKeywords] == ["red mug", "blue mug"]
    assert summary.topWastedKeywords[1].campaignName == "Unknown Campaign"


def test_wasted_keywords_capped_at_ten():
    rows = [{"keyword": f"kw{i}", "cost": i, "attributedSales30d": 0} for i in range(1, 21)]
    summary = wasted_spend_summary(rows)
    assert summary.wastedKeywordsCount == 20
    assert len(summary.topWastedKeywords) == 10
    assert summary.topWastedKeywords[0].keyword == "kw20"


def test_issue_totals_and_samples(dashboard):
    ctx = build_metrics_context(dashboard)
    assert ctx.issues.totalErrors == 21
    assert ctx.issues.rankingErrors == 5
    assert ctx.issues.topErrorAsins[0]["asin"] == "B0B"
    assert len(ctx.ads.ppcDatewiseSample) == 30
    assert ctx.ads.ppcDatewiseSample[0]["date"] == "2024-05-02"


def test_accepts_model_instance(dashboard):
    agg = DashboardAggregate.model_validate(dashboard)
    assert build_metrics_context(agg) == build_metrics_context(dashboard)


def test_summary_identity_fields(dashboard):
    ctx = build_metrics_context(dashboard)
    assert ctx.summary.brand == "Acme"
    assert ctx.summary.dateRange.startDate == "2024-05-01"
    assert ctx.summary.accountHealth.status == "GOOD"


def test_null_and_scalar_row_entries_are_skipped():
    ctx = build_metrics_context({
        "totalSales": 10,
        "profitability": [None, "junk", {"asin": "B01", "sales": 10, "grossProfit": 2}],
        "keywordPerformance": [None, {"keyword": "mug", "cost": 3, "attributedSales30d": 0}],
        "productErrors": "not a list",
    })
    assert [p.asin for p in ctx.profitability.topAsins] == ["B01"]
    assert ctx.ads.wastedSpendSummary.wastedKeywordsCount == 1
    assert ctx.issues.topErrorAsins == []


def test_numeric_asin_is_read_as_text():
    ctx = build_metrics_context(
        {"profitability": [{"asin": 12345, "sales": 100, "quantity": 2, "grossProfit": 30}]},
        cogs_values={"12345": 5},
    )
    [row] = ctx.profitability.topAsins
    assert row.asin == "12345"
    assert row.totalCogs == 10
    assert row.netProfit == 20
