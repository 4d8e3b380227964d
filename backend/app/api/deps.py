from fastapi import Request

from app.services.design_analysis import DesignAnalyzer
from app.services.notifier import QuoteNotifier
from app.services.settings import PricingSettings
from app.services.store import QuotationStore


# Shared services live on app.state so tests can swap them per app instance.

def get_pricing_settings(request: Request) -> PricingSettings:
    return request.app.state.pricing


def get_store(request: Request) -> QuotationStore:
    return request.app.state.store


def get_notifier(request: Request) -> QuoteNotifier:
    return request.app.state.notifier


def get_analyzer(request: Request) -> DesignAnalyzer:
    return request.app.state.analyzer
