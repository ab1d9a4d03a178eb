from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

CheckStatus = Literal["Success", "Error"]

# order in which rule results are reported
RULE_NAMES = ("charLim", "restrictedWords", "specialCharacters", "duplicateWords")


class CheckResult(BaseModel):
    status: CheckStatus
    message: str
    howToSolve: str = ""
    # description only: 1-based paragraph the result belongs to
    pointNumber: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.status == "Error"


class FieldAnalysis(BaseModel):
    charLim: Optional[CheckResult] = None
    restrictedWords: Optional[CheckResult] = None
    specialCharacters: Optional[CheckResult] = None
    duplicateWords: Optional[CheckResult] = None
    numberOfErrors: int = 0

    def checks(self) -> Dict[str, CheckResult]:
        """Rule name -> result, for the rules this field was checked against."""
        out: Dict[str, CheckResult] = {}
        for name in RULE_NAMES:
            result = getattr(self, name)
            if result is not None:
                out[name] = result
        return out

    def failing_messages(self) -> List[str]:
        return [r.message for r in self.checks().values() if r.failed]

    @property
    def is_clean(self) -> bool:
        return self.numberOfErrors == 0


class ListingAnalysis(BaseModel):
    title: FieldAnalysis
    bulletPoints: FieldAnalysis
    description: FieldAnalysis
    backendKeywords: Optional[FieldAnalysis] = None
    totalErrors: int = 0


class ListingAnalysisRequest(BaseModel):
    title: str = ""
    bulletPoints: List[str] = Field(default_factory=list)
    description: List[str] = Field(default_factory=list)
    backendKeywords: Optional[str] = None


class BackendKeywordsRequest(BaseModel):
    backendKeywords: Optional[str] = None
