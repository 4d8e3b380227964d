from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os

from app.api import analysis, pricing, quotations
from app.db.session import create_tables
from app.services.design_analysis import DesignAnalyzer
from app.services.notifier import QuoteNotifier
from app.services.pricing import ConfigKeyMissing
from app.services.settings import PricingSettings
from app.services.store import QuotationStore

logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:80").split(",") if o.strip()]

app = FastAPI(title="Website Quotation Engine")

# CORS for frontend dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.pricing = PricingSettings.from_environment()
app.state.store = QuotationStore()
app.state.notifier = QuoteNotifier()
app.state.analyzer = DesignAnalyzer()

# Include routers
app.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
app.include_router(quotations.router, prefix="/quotations", tags=["quotations"])
app.include_router(analysis.router, prefix="/analysis", tags=["analysis"])


@app.exception_handler(ConfigKeyMissing)
async def config_key_missing_handler(request: Request, exc: ConfigKeyMissing):
    logger.error("Pricing config lacks %s.%s for %s %s", exc.section, exc.key, request.method, request.url.path)
    return JSONResponse({"detail": str(exc), "section": exc.section, "key": exc.key}, status_code=422)


@app.on_event("startup")
def on_startup():
    create_tables()
    logger.info("Quotation engine started with tiers=%s", dict(app.state.pricing.active.tiers))


@app.get("/")
async def root():
    return {"status": "ok", "service": "website-quotation-engine"}
