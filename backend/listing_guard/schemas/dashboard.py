from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

Row = Dict[str, Any]

# ===== Input: raw dashboard aggregate =====
# Every field is optional and rows stay plain dicts: the aggregate comes from
# the dashboard collaborator and may be partial.

class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AccountHealth(_Lenient):
    percentage: Optional[float] = None
    status: Optional[str] = None


class EconomicsMetrics(_Lenient):
    totalSales: Optional[float] = None
    grossProfit: Optional[float] = None


class SponsoredAdsMetrics(_Lenient):
    spend: Optional[float] = None
    totalCost: Optional[float] = None
    salesIn30Days: Optional[float] = None
    acos: Optional[float] = None
    tacos: Optional[float] = None


class PpcSummary(_Lenient):
    totalSpend: Optional[float] = None
    totalSales: Optional[float] = None
    overallAcos: Optional[float] = None


class DashboardAggregate(_Lenient):
    brand: Optional[str] = None
    country: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    accountHealth: Optional[AccountHealth] = None

    totalSales: Optional[float] = None
    grossProfit: Optional[float] = None
    economics: Optional[EconomicsMetrics] = None

    profitability: Optional[List[Row]] = None
    totalProfitabilityErrors: Optional[int] = None
    profitabilityErrorDetails: Optional[List[Row]] = None

    sponsoredAds: Optional[SponsoredAdsMetrics] = None
    keywordPerformance: Optional[List[Row]] = None
    dateWisePpc: Optional[List[Row]] = None
    dateWiseSales: Optional[List[Row]] = None
    campaignPerformance: Optional[List[Row]] = None
    totalSponsoredAdsErrors: Optional[int] = None
    sponsoredAdsErrorDetails: Optional[List[Row]] = None

    totalInventoryErrors: Optional[int] = None
    totalRankingErrors: Optional[int] = None
    totalConversionErrors: Optional[int] = None
    totalAccountErrors: Optional[int] = None
    productErrors: Optional[List[Row]] = None

    @field_validator(
        "profitability", "profitabilityErrorDetails", "keywordPerformance", "dateWisePpc",
        "dateWiseSales", "campaignPerformance", "sponsoredAdsErrorDetails", "productErrors",
        mode="before",
    )
    @classmethod
    def _object_rows(cls, value: Any) -> Optional[List[Any]]:
        # null or scalar entries are skipped, a non-list reads as missing
        if not isinstance(value, list):
            return None
        return [r for r in value if isinstance(r, dict)]


# ===== Output: compact context sent to the assistant =====

class DateRange(BaseModel):
    startDate: Optional[str] = None
    endDate: Optional[str] = None


class ContextSummary(BaseModel):
    brand: Optional[str] = None
    country: Optional[str] = None
    dateRange: DateRange = Field(default_factory=DateRange)
    totalSales: Optional[float] = None
    grossProfit: float = 0.0
    profitMargin: float = 0.0
    ppcSpend: Optional[float] = None
    accountHealth: AccountHealth = Field(default_factory=AccountHealth)


class AsinProfitability(BaseModel):
    model_config = ConfigDict(extra="allow")

    asin: Optional[str] = None
    sales: float = 0.0
    quantity: float = 0.0
    grossProfit: float = 0.0
    totalCogs: float = 0.0
    netProfit: float = 0.0
    netProfitMargin: float = 0.0


class ContextProfitability(BaseModel):
    topAsins: List[AsinProfitability] = Field(default_factory=list)
    lowMarginAsins: List[AsinProfitability] = Field(default_factory=list)
    lossMakingAsins: List[AsinProfitability] = Field(default_factory=list)
    totalProfitabilityErrors: Optional[int] = None
    profitabilityErrorDetails: List[Row] = Field(default_factory=list)


class AdsSummary(BaseModel):
    totalSpend: Optional[float] = None
    totalSalesFromAds: Optional[float] = None
    overallAcos: Optional[float] = None
    overallTacos: Optional[float] = None


class WastedKeyword(BaseModel):
    keyword: Optional[str] = None
    spend: float = 0.0
    campaignName: str = "Unknown Campaign"


class WastedSpendSummary(BaseModel):
    wastedSpend: float = 0.0
    wastedKeywordsCount: int = 0
    topWastedKeywords: List[WastedKeyword] = Field(default_factory=list)


class ContextAds(BaseModel):
    summary: AdsSummary = Field(default_factory=AdsSummary)
    wastedSpendSummary: Optional[WastedSpendSummary] = None
    ppcDatewiseSample: List[Row] = Field(default_factory=list)
    campaignSample: List[Row] = Field(default_factory=list)
    totalSponsoredAdsErrors: Optional[int] = None
    sponsoredAdsErrorDetails: List[Row] = Field(default_factory=list)


class ContextIssues(BaseModel):
    totalErrors: int = 0
    profitabilityErrors: Optional[int] = None
    sponsoredAdsErrors: Optional[int] = None
    conversionErrors: Optional[int] = None
    rankingErrors: Optional[int] = None
    inventoryErrors: Optional[int] = None
    accountErrors: Optional[int] = None
    topErrorAsins: List[Row] = Field(default_factory=list)


class DashboardMetricsContext(BaseModel):
    summary: Optional[ContextSummary] = None
    profitability: Optional[ContextProfitability] = None
    ads: Optional[ContextAds] = None
    issues: Optional[ContextIssues] = None
