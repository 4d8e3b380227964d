import json
import logging
import os
import threading
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.models.quotation import PricingConfig
from app.services.pricing import default_config
from app.services.validation import ConfigValidator, parse_config

logger = logging.getLogger(__name__)

PRICING_CONFIG_PATH = os.getenv("PRICING_CONFIG_PATH")


class InvalidPricingFile(Exception):
    def __init__(self, path: str, errors: List[str]):
        super().__init__(f"{path}: " + "; ".join(errors))
        self.path = path
        self.errors = errors


class PricingSettings:
    """Holds the active pricing configuration.

    The configuration is only ever replaced whole, after validation, under a lock.
    PricingConfig is frozen, so readers can share the active instance.
    """

    def __init__(self, initial: Optional[PricingConfig] = None, validator: Optional[ConfigValidator] = None):
        self._validator = validator or ConfigValidator()
        self._lock = threading.Lock()
        self._active = initial if initial is not None else default_config()

    @classmethod
    def from_environment(cls) -> "PricingSettings":
        """Start from PRICING_CONFIG_PATH when set, else the shipped defaults."""
        if not PRICING_CONFIG_PATH:
            return cls()

        with open(PRICING_CONFIG_PATH, encoding="utf-8") as fh:
            candidate, errors = parse_config(fh.read())
        if not errors:
            errors = ConfigValidator().validate(candidate)
        if errors:
            raise InvalidPricingFile(PRICING_CONFIG_PATH, errors)

        logger.info("Loaded pricing config from %s", PRICING_CONFIG_PATH)
        return cls(PricingConfig.model_validate(candidate))

    @property
    def active(self) -> PricingConfig:
        with self._lock:
            return self._active

    def check(self, candidate: Dict[str, Any]) -> List[str]:
        return self._validator.validate(candidate)

    def replace(self, candidate: Dict[str, Any]) -> List[str]:
        """Swap in `candidate` if it validates; otherwise return the errors and keep the current table."""
        errors = self._validator.validate(candidate)
        if errors:
            logger.warning("Pricing config update rejected with %s error(s)", len(errors))
            return errors

        try:
            new_config = PricingConfig.model_validate(candidate)
        except ValidationError as e:
            # extra, non-numeric entries beside the required keys
            errors = sorted({f"Invalid value in {err['loc'][0]}: {err['loc'][1]}" for err in e.errors() if len(err["loc"]) > 1})
            logger.warning("Pricing config update rejected: %s", errors)
            return errors or [str(e)]

        with self._lock:
            self._active = new_config
        logger.info("Pricing config replaced tiers=%s", dict(new_config.tiers))
        return []

    def replace_from_text(self, text: str) -> List[str]:
        candidate, errors = parse_config(text)
        if errors:
            return errors
        return self.replace(candidate)

    def reset(self) -> PricingConfig:
        with self._lock:
            self._active = default_config()
        logger.info("Pricing config reset to defaults")
        return self.active

    def export_json(self) -> str:
        return json.dumps(self.active.model_dump(), indent=2)

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        return f"pricing_config_{(today or date.today()).isoformat()}.json"
