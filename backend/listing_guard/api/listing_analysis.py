# backend/listing_guard/api/listing_analysis.py
from fastapi import APIRouter

from listing_guard.schemas.listing import BackendKeywordsRequest, FieldAnalysis, ListingAnalysis, ListingAnalysisRequest
from listing_guard.services.compliance import analyze_listing, check_backend_keywords

router = APIRouter(prefix="/api/listing", tags=["listing"])


@router.post("/analyze", response_model=ListingAnalysis)
def analyze(req: ListingAnalysisRequest):
    """Pre-submission check of a whole listing. Backend keywords are checked only when sent."""
    return analyze_listing(
        title=req.title,
        bullet_points=req.bulletPoints,
        description=req.description,
        backend_keywords=req.backendKeywords,
        include_backend_keywords="backendKeywords" in req.model_fields_set,
    )


@router.post("/backend-keywords", response_model=FieldAnalysis)
def backend_keywords(req: BackendKeywordsRequest):
    return check_backend_keywords(req.backendKeywords)
