import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from app.models.quotation import AnalysisCandidate, OptionalFeatures, Page, PricingConfig, Quotation
from app.services.pricing import PriceEngine

logger = logging.getLogger(__name__)


def default_page(page_id: int) -> Page:
    return Page(id=page_id, name=f"Page {page_id}", tier="simple")


def default_features() -> OptionalFeatures:
    return OptionalFeatures()


def resize_pages(pages: List[Page], count: int) -> List[Page]:
    """Grow or shrink the manual page list to `count` pages.

    New pages get ids continuing from the current maximum. Shrinking drops the
    tail, including any edits made to it; kept pages are returned unchanged.
    """
    if count < 0:
        raise ValueError(f"page count must be >= 0, got {count}")

    current = len(pages)
    if count <= current:
        return list(pages[:count])

    next_id = max((p.id for p in pages), default=0) + 1
    added = [default_page(next_id + i) for i in range(count - current)]
    return list(pages) + added


def update_page(pages: List[Page], page_id: int, **fields: Any) -> List[Page]:
    """Return a new list with `fields` applied to the page whose id matches."""
    updated = []
    for page in pages:
        if page.id == page_id:
            data = page.model_dump()
            data.update(fields)
            page = Page.model_validate(data)
        updated.append(page)
    return updated


def pages_from_analysis(candidates: Iterable[AnalysisCandidate]) -> List[Page]:
    return [
        Page(
            id=c.id,
            name=c.name,
            tier=c.suggested_tier,
            is_long_page=c.is_long_page,
            animations=c.estimated_animations,
            api_integrations=c.estimated_apis,
            reused_components=0,
        )
        for c in candidates
    ]


class QuotationBuilder:
    """Assembles pages, feature selection and a config snapshot into a Quotation.

    Inputs are expected to be well formed already; field-level checks belong to
    whoever produced the pages.
    """

    def __init__(self, engine: Optional[PriceEngine] = None, clock: Optional[Callable[[], datetime]] = None):
        self.engine = engine or PriceEngine()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build(
        self,
        pages: List[Page],
        optional_features: OptionalFeatures,
        config: PricingConfig,
        source: str = "manual",
    ) -> Quotation:
        # pages, features and config are frozen models; the quotation can share them
        page_list = tuple(pages)
        total = self.engine.quotation_total(page_list, optional_features, config)
        quotation = Quotation(
            pages=page_list,
            optional_features=optional_features,
            pricing=config,
            total_price=total,
            created_at=self.clock(),
            source=source,
        )
        logger.info("Built quotation source=%s pages=%s total=%s", source, len(page_list), total)
        return quotation
