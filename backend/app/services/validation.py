import json
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from app.models.quotation import MODIFIERS, OPTIONAL_FEATURES, TIERS

logger = logging.getLogger(__name__)

MALFORMED_INPUT = "Invalid JSON format. Please check your syntax."

SECTIONS = ("tiers", "modifiers", "optional_features")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class ConfigValidator:
    """Validation of a candidate pricing configuration.

    Rules (all checked, every violation reported):
    - tiers, modifiers, optional_features must be present as objects
    - tiers simple/standard/advanced must be numbers >= 0
    - modifiers animation/api/long_page/reused_component must be numbers (any sign)
    - optional features seo_optimization/cms_support/admin_panel/hosting_support must be numbers >= 0

    Booleans, NaN and infinities are not numbers here.
    """

    def _check(self, errors: List[str], table: Dict[str, Any], keys, label: str, non_negative: bool) -> None:
        for key in keys:
            value = table.get(key)
            if not _is_number(value) or (non_negative and value < 0):
                errors.append(f"Invalid value for {label}: {key}")

    def validate(self, candidate: Dict[str, Any]) -> List[str]:
        errors: List[str] = []

        for section in SECTIONS:
            if not isinstance(candidate.get(section), dict):
                errors.append(f"Missing required section: {section}")

        tiers = candidate.get("tiers")
        if isinstance(tiers, dict):
            self._check(errors, tiers, TIERS, "tier", non_negative=True)

        modifiers = candidate.get("modifiers")
        if isinstance(modifiers, dict):
            self._check(errors, modifiers, MODIFIERS, "modifier", non_negative=False)

        features = candidate.get("optional_features")
        if isinstance(features, dict):
            self._check(errors, features, OPTIONAL_FEATURES, "feature", non_negative=True)

        if errors:
            logger.debug("Pricing config rejected: %s", errors)
        return errors


def parse_config(text: str) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """Parse JSON text into a candidate config.

    Returns (candidate, []) or (None, [MALFORMED_INPUT]); a parse failure is never
    attributed to a section.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.warning("Unparsable pricing config: %s", e)
        return None, [MALFORMED_INPUT]

    if not isinstance(data, dict):
        logger.warning("Pricing config is not a JSON object: %s", type(data).__name__)
        return None, [MALFORMED_INPUT]

    return data, []
