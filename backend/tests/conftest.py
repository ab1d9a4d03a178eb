# backend/tests/conftest.py
import json, sys, pathlib, pytest
from fastapi.testclient import TestClient

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]   # .../backend

# Make `from listing_guard.*` importable
sys.path.insert(0, str(BACKEND_DIR))

from listing_guard.services.llm import LLMTransportError  # noqa: E402


class FakeLLM:
    """Stands in for the model: returns canned text or raises a transport error."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, messages):
        self.calls.append({"system_prompt": system_prompt, "messages": messages})
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, str):
            return self.reply
        return json.dumps(self.reply if self.reply is not None else {})


@pytest.fixture()
def fake_llm():
    return FakeLLM


@pytest.fixture()
def failing_llm():
    return FakeLLM(error=LLMTransportError("connection reset"))


@pytest.fixture()
def dashboard():
    """A small but complete dashboard aggregate."""
    return {
        "brand": "Acme",
        "country": "US",
        "startDate": "2024-05-01",
        "endDate": "2024-05-30",
        "accountHealth": {"percentage": 87, "status": "GOOD"},
        "totalSales": 1000,
        "grossProfit": 300,
        "sponsoredAds": {"spend": 50, "salesIn30Days": 200},
        "profitability": [
            {"asin": "B0LOSS", "sales": 100, "quantity": 10, "grossProfit": 20},
            {"asin": "B0THIN", "sales": 400, "quantity": 4, "grossProfit": 30},
            {"asin": "B0GOOD", "sales": 500, "quantity": 5, "grossProfit": 250},
        ],
        "keywordPerformance": [
            {"keyword": "red mug", "campaignName": "Mugs", "cost": 12.5, "attributedSales30d": 0},
            {"keyword": "blue mug", "cost": "7.5", "attributedSales30d": "0.001"},
            {"keyword": "mug", "campaignName": "Mugs", "cost": 30, "attributedSales30d": 90},
            {"keyword": "free mug", "cost": 0, "attributedSales30d": 0},
        ],
        "dateWisePpc": [
            {"date": f"2024-05-{d:02d}", "spend": d, "sales": d * 4} for d in range(1, 31)
        ] + [{"date": "2024-05-31", "spend": 31, "sales": 124}],
        "dateWiseSales": [
            {"date": f"2024-05-{d:02d}", "sales": d * 10, "profit": d * 3} for d in range(1, 32)
        ],
        "totalProfitabilityErrors": 2,
        "totalSponsoredAdsErrors": 3,
        "totalInventoryErrors": 4,
        "totalRankingErrors": 5,
        "totalConversionErrors": 6,
        "totalAccountErrors": 1,
        "productErrors": [
            {"asin": "B0A", "errors": 2},
            {"asin": "B0B", "errors": 9},
        ],
    }


@pytest.fixture()
def client():
    from listing_guard.main import app
    return TestClient(app)
