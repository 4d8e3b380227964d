from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from typing import Any, Dict
import logging

from app.api.deps import get_pricing_settings
from app.services.settings import PricingSettings
from app.services.validation import parse_config

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def get_pricing(settings: PricingSettings = Depends(get_pricing_settings)) -> Dict[str, Any]:
    return settings.active.model_dump()


@router.put("/")
async def replace_pricing(request: Request, settings: PricingSettings = Depends(get_pricing_settings)):
    """Replace the active configuration with the JSON document in the body.

    The body is taken as raw text so that unparsable input is reported as one
    parse error rather than a framework validation error.
    """
    text = (await request.body()).decode("utf-8", errors="replace")
    errors = settings.replace_from_text(text)
    if errors:
        logger.info("Rejected pricing update with errors=%s", errors)
        return JSONResponse({"errors": errors}, status_code=422)
    return {"status": "saved", "pricing": settings.active.model_dump()}


@router.post("/validate")
async def validate_pricing(request: Request, settings: PricingSettings = Depends(get_pricing_settings)):
    text = (await request.body()).decode("utf-8", errors="replace")
    candidate, errors = parse_config(text)
    if not errors:
        errors = settings.check(candidate)
    return {"valid": not errors, "errors": errors}


@router.post("/reset")
async def reset_pricing(settings: PricingSettings = Depends(get_pricing_settings)):
    config = settings.reset()
    return {"status": "reset", "pricing": config.model_dump()}


@router.get("/export")
async def export_pricing(settings: PricingSettings = Depends(get_pricing_settings)):
    body = settings.export_json()
    headers = {"Content-Disposition": f'attachment; filename="{settings.export_filename()}"'}
    return Response(content=body, media_type="application/json", headers=headers)
