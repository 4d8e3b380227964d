from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List
import logging

from app.api.deps import get_notifier, get_pricing_settings, get_store
from app.models.quotation import OptionalFeatures, Page
from app.services.export import (
    NO_QUOTATION_MESSAGE,
    empty_state_html,
    export_filename,
    quotation_html,
    quotation_json,
    quotation_pdf,
)
from app.services.notifier import QuoteNotifier
from app.services.pricing import PriceEngine
from app.services.quotation import QuotationBuilder, resize_pages
from app.services.settings import PricingSettings
from app.services.store import QuotationStore

logger = logging.getLogger(__name__)
router = APIRouter()


class QuotationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pages: List[Page]
    optional_features: OptionalFeatures = Field(default_factory=OptionalFeatures, alias="optionalFeatures")


class ResizeRequest(BaseModel):
    pages: List[Page] = Field(default_factory=list)
    count: int = Field(..., ge=0)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


def _load_or_404(store: QuotationStore):
    quotation = store.load()
    if quotation is None:
        raise HTTPException(status_code=404, detail=NO_QUOTATION_MESSAGE)
    return quotation


@router.post("/pages/resize")
async def resize(req: ResizeRequest) -> Dict[str, Any]:
    pages = resize_pages(req.pages, req.count)
    return {"pages": [p.model_dump(by_alias=True) for p in pages]}


@router.post("/estimate")
async def estimate(req: QuotationRequest, settings: PricingSettings = Depends(get_pricing_settings)) -> Dict[str, Any]:
    return PriceEngine().estimate(req.pages, req.optional_features, settings.active)


@router.post("/", status_code=201)
async def create_quotation(
    req: QuotationRequest,
    settings: PricingSettings = Depends(get_pricing_settings),
    store: QuotationStore = Depends(get_store),
    notifier: QuoteNotifier = Depends(get_notifier),
) -> Dict[str, Any]:
    quotation = QuotationBuilder().build(req.pages, req.optional_features, settings.active, source="manual")
    store.save(quotation)
    notifier.notify(quotation)
    return quotation.to_document()


@router.get("/current")
async def current_quotation(request: Request, store: QuotationStore = Depends(get_store)):
    quotation = store.load()
    if _wants_html(request):
        if quotation is None:
            return HTMLResponse(content=empty_state_html())
        return HTMLResponse(content=quotation_html(quotation))

    if quotation is None:
        raise HTTPException(status_code=404, detail=NO_QUOTATION_MESSAGE)
    return quotation.to_document()


@router.get("/current/export.json")
async def export_json(store: QuotationStore = Depends(get_store)):
    quotation = _load_or_404(store)
    headers = {"Content-Disposition": f'attachment; filename="{export_filename("json")}"'}
    return Response(content=quotation_json(quotation), media_type="application/json", headers=headers)


@router.get("/current/export.pdf")
async def export_pdf(store: QuotationStore = Depends(get_store)):
    quotation = _load_or_404(store)
    try:
        pdf = quotation_pdf(quotation)
    except Exception as e:
        logger.exception("Failed to render quotation PDF: %s", e)
        raise HTTPException(status_code=500, detail="Failed to generate PDF. Please try again.")
    headers = {"Content-Disposition": f'attachment; filename="{export_filename("pdf")}"'}
    return Response(content=pdf, media_type="application/pdf", headers=headers)
