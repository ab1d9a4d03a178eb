from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from listing_guard.schemas.dashboard import DashboardAggregate, PpcSummary

ChartType = Literal["line", "bar", "pie"]
DataSource = Literal["ppc_datewise", "sales_datewise"]

DATA_SOURCES = ("ppc_datewise", "sales_datewise")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str = ""


class YField(BaseModel):
    field: str
    label: Optional[str] = None


class ChartSuggestion(BaseModel):
    # dataSource is left open: unknown sources pass through without data
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    dataSource: Optional[str] = None
    xField: Optional[str] = None
    yFields: List[YField] = Field(default_factory=list)
    description: Optional[str] = None
    data: Optional[List[Dict[str, Any]]] = None

    @field_validator("id", "title", "type", "dataSource", "xField", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)

    @field_validator("yFields", mode="before")
    @classmethod
    def _coerce_y_fields(cls, value: Any) -> List[Any]:
        # the model sometimes sends bare field names
        if isinstance(value, (str, dict)):
            value = [value]
        if not isinstance(value, list):
            return []
        out: List[Any] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                out.append({"field": item.strip()})
            elif isinstance(item, dict) and item.get("field") is not None:
                label = item.get("label")
                out.append({"field": str(item["field"]), "label": None if label is None else str(label)})
        return out

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> Optional[List[Any]]:
        if not isinstance(value, list):
            return None
        return [r for r in value if isinstance(r, dict)]


class AssistantResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    answer_markdown: str
    chart_suggestions: List[ChartSuggestion] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list)
    suggested_title: Optional[str] = None
    suggested_bullet_points: Optional[List[str]] = None
    suggested_backend_keywords: Optional[str] = None


class ChatRequest(BaseModel):
    message: str
    history: List[Dict[str, Any]] = Field(default_factory=list)
    dashboard: Optional[DashboardAggregate] = None
    ppcSummary: Optional[PpcSummary] = None
    cogsValues: Dict[str, float] = Field(default_factory=dict)
