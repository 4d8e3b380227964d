import copy
import logging
from typing import Any, Dict, Iterable, List

from app.models.quotation import MODIFIERS, OptionalFeatures, Page, PricingConfig

logger = logging.getLogger(__name__)

DEFAULT_PRICING: Dict[str, Dict[str, Any]] = {
    "tiers": {
        "simple": 1000,
        "standard": 2500,
        "advanced": 5000,
    },
    "modifiers": {
        "animation": 300,
        "api": 500,
        "long_page": 800,
        "reused_component": -200,  # discount per reused component
    },
    "optional_features": {
        "seo_optimization": 1500,
        "cms_support": 2000,
        "admin_panel": 3500,
        "hosting_support": 500,
    },
}


def default_config() -> PricingConfig:
    return PricingConfig.model_validate(copy.deepcopy(DEFAULT_PRICING))


class ConfigKeyMissing(KeyError):
    """A calculation referenced a tier, modifier or feature the configuration lacks."""

    def __init__(self, section: str, key: str):
        super().__init__(f"{section}.{key}")
        self.section = section
        self.key = key

    def __str__(self) -> str:
        return f"Pricing configuration has no '{self.key}' in '{self.section}'"


class PriceEngine:
    """Rule-based website pricing.

    page price = tier base
               + long_page (if the page is long)
               + animations * animation
               + api_integrations * api
               + reused_components * reused_component

    Prices are not floored at zero: a large reused-component discount can make a
    page negative. Missing configuration keys raise ConfigKeyMissing.
    """

    def _lookup(self, config: PricingConfig, section: str, key: str):
        table = getattr(config, section)
        try:
            return table[key]
        except KeyError:
            raise ConfigKeyMissing(section, key) from None

    def _modifiers(self, config: PricingConfig) -> Dict[str, Any]:
        return {m: self._lookup(config, "modifiers", m) for m in MODIFIERS}

    def page_breakdown(self, page: Page, config: PricingConfig) -> Dict[str, Any]:
        base = self._lookup(config, "tiers", page.tier)
        mods = self._modifiers(config)

        long_page = mods["long_page"] if page.is_long_page else 0
        animations = page.animations * mods["animation"]
        apis = page.api_integrations * mods["api"]
        reused = page.reused_components * mods["reused_component"]

        return {
            "base": base,
            "long_page": long_page,
            "animations": animations,
            "api_integrations": apis,
            "reused_components": reused,
            "total": base + long_page + animations + apis + reused,
        }

    def page_price(self, page: Page, config: PricingConfig):
        return self.page_breakdown(page, config)["total"]

    def optional_features_total(self, selection: OptionalFeatures, config: PricingConfig):
        total = 0
        for feature, enabled in selection.model_dump().items():
            if enabled:
                total += self._lookup(config, "optional_features", feature)
        return total

    def quotation_total(self, pages: Iterable[Page], selection: OptionalFeatures, config: PricingConfig):
        pages_total = sum(self.page_price(p, config) for p in pages)
        return pages_total + self.optional_features_total(selection, config)

    def estimate(self, pages: List[Page], selection: OptionalFeatures, config: PricingConfig) -> Dict[str, Any]:
        """Live figures for a form that has not been saved yet."""
        page_prices = [{"id": p.id, "name": p.name, "price": self.page_price(p, config)} for p in pages]
        pages_total = sum(p["price"] for p in page_prices)
        features_total = self.optional_features_total(selection, config)
        logger.debug("Estimate pages=%s pages_total=%s features_total=%s", len(pages), pages_total, features_total)
        return {
            "pages": page_prices,
            "pages_total": pages_total,
            "features_total": features_total,
            "total": pages_total + features_total,
        }
