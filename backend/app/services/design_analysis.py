from typing import Any, Callable, Dict, List, Optional
import json
import logging

from pydantic import ValidationError

from app.models.quotation import AnalysisCandidate

logger = logging.getLogger(__name__)

# Canned result until a real design-analysis backend exists.
MOCK_ANALYSIS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "Homepage",
        "suggestedTier": "advanced",
        "confidence": 92,
        "detectedFeatures": ["Hero section with video", "Complex navigation", "Interactive elements"],
        "estimatedAnimations": 3,
        "estimatedApis": 2,
        "isLongPage": True,
    },
    {
        "id": 2,
        "name": "About Us",
        "suggestedTier": "standard",
        "confidence": 88,
        "detectedFeatures": ["Team grid", "Timeline component", "Contact form"],
        "estimatedAnimations": 1,
        "estimatedApis": 0,
        "isLongPage": True,
    },
    {
        "id": 3,
        "name": "Services",
        "suggestedTier": "standard",
        "confidence": 85,
        "detectedFeatures": ["Service cards", "Pricing table", "CTA buttons"],
        "estimatedAnimations": 2,
        "estimatedApis": 0,
        "isLongPage": False,
    },
    {
        "id": 4,
        "name": "Contact",
        "suggestedTier": "simple",
        "confidence": 95,
        "detectedFeatures": ["Basic form", "Map integration", "Contact info"],
        "estimatedAnimations": 0,
        "estimatedApis": 1,
        "isLongPage": False,
    },
]


class AnalysisError(Exception):
    pass


class DesignAnalyzer:
    """Turns a Figma URL or uploaded design file into candidate pages.

    No design file is actually parsed. Without a `client` the canned result is
    returned; a `client` is any callable taking (figma_url, file_name) and
    returning JSON text with a list of candidates, which is how tests and a
    future real analyser plug in.
    """

    def __init__(self, client: Optional[Callable[[Optional[str], Optional[str]], str]] = None):
        self.client = client

    def _clean_json_text(self, text: str) -> str:
        # tolerate markdown fences or prose around the array
        start = text.find("[")
        end = text.rfind("]")
        if start != -1 and end != -1 and end > start:
            return text[start:end + 1]
        return text

    def _from_client(self, figma_url: Optional[str], file_name: Optional[str]) -> List[Dict[str, Any]]:
        raw = self.client(figma_url, file_name)
        try:
            data = json.loads(self._clean_json_text(raw))
        except ValueError as e:
            logger.exception("Design analysis returned invalid JSON: %s", e)
            raise AnalysisError("Design analysis returned invalid JSON") from e
        if not isinstance(data, list):
            raise AnalysisError("Design analysis must return a list of pages")
        return data

    def analyze(
        self,
        figma_url: Optional[str] = None,
        file_name: Optional[str] = None,
        content: Optional[bytes] = None,
    ) -> List[AnalysisCandidate]:
        figma_url = (figma_url or "").strip() or None
        if figma_url is None and not file_name and not content:
            raise ValueError("Please upload a Figma file or enter a Figma URL first.")

        logger.info("Analysing design url=%s file=%s size=%s", figma_url, file_name, len(content or b""))

        if self.client is not None:
            raw_candidates = self._from_client(figma_url, file_name)
        else:
            logger.debug("No analysis client configured; using mock analysis")
            raw_candidates = MOCK_ANALYSIS

        try:
            candidates = [AnalysisCandidate.model_validate(c) for c in raw_candidates]
        except ValidationError as e:
            logger.warning("Design analysis output does not match the page contract: %s", e)
            raise AnalysisError("Design analysis output does not match the page contract") from e

        logger.info("Design analysis detected %s page(s)", len(candidates))
        return candidates
