from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import logging

from app.api.deps import get_analyzer, get_notifier, get_pricing_settings, get_store
from app.models.quotation import AnalysisCandidate, OptionalFeatures
from app.services.design_analysis import AnalysisError, DesignAnalyzer
from app.services.notifier import QuoteNotifier
from app.services.quotation import QuotationBuilder, pages_from_analysis
from app.services.settings import PricingSettings
from app.services.store import QuotationStore

logger = logging.getLogger(__name__)
router = APIRouter()


class AnalysisQuotationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    candidates: List[AnalysisCandidate]
    optional_features: OptionalFeatures = Field(default_factory=OptionalFeatures, alias="optionalFeatures")


@router.post("/")
async def analyze_design(
    figma_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    analyzer: DesignAnalyzer = Depends(get_analyzer),
):
    """Accept a Figma URL or an uploaded design file and return suggested pages."""
    content = None
    file_name = None
    if file is not None:
        content = await file.read()
        file_name = file.filename
        logger.debug("Design upload name=%s content_type=%s size=%s", file_name, file.content_type, len(content))

    try:
        candidates = analyzer.analyze(figma_url=figma_url, file_name=file_name, content=content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"candidates": [c.model_dump(by_alias=True) for c in candidates]}


@router.post("/quotation", status_code=201)
async def quotation_from_analysis(
    req: AnalysisQuotationRequest,
    settings: PricingSettings = Depends(get_pricing_settings),
    store: QuotationStore = Depends(get_store),
    notifier: QuoteNotifier = Depends(get_notifier),
):
    pages = pages_from_analysis(req.candidates)
    quotation = QuotationBuilder().build(pages, req.optional_features, settings.active, source="figma_analysis")
    store.save(quotation)
    notifier.notify(quotation)
    return quotation.to_document()
