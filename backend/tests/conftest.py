import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.quotation import OptionalFeatures, Page, PricingConfig
from app.services.design_analysis import DesignAnalyzer
from app.services.notifier import QuoteNotifier
from app.services.settings import PricingSettings
from app.services.store import MemoryKeyValueStore, QuotationStore

SCENARIO_PRICING = {
    "tiers": {"simple": 1000, "standard": 2500, "advanced": 5000},
    "modifiers": {"animation": 300, "api": 500, "long_page": 800, "reused_component": -200},
    "optional_features": {
        "seo_optimization": 1500,
        "cms_support": 2000,
        "admin_panel": 3500,
        "hosting_support": 500,
    },
}


@pytest.fixture
def pricing_dict():
    # fresh copy per test; tests mutate it
    return {section: dict(values) for section, values in SCENARIO_PRICING.items()}


@pytest.fixture
def config(pricing_dict):
    return PricingConfig.model_validate(pricing_dict)


@pytest.fixture
def standard_page():
    return Page(id=1, tier="standard", is_long_page=True, animations=2, api_integrations=1, reused_components=1)


@pytest.fixture
def no_features():
    return OptionalFeatures()


@pytest.fixture
def memory_store():
    return QuotationStore(MemoryKeyValueStore())


@pytest.fixture
def client(memory_store):
    saved = {key: getattr(app.state, key) for key in ("pricing", "store", "notifier", "analyzer")}
    app.state.pricing = PricingSettings()
    app.state.store = memory_store
    app.state.notifier = QuoteNotifier(webhook_url="")
    app.state.analyzer = DesignAnalyzer()
    try:
        yield TestClient(app)
    finally:
        for key, value in saved.items():
            setattr(app.state, key, value)
