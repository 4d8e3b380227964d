import json
import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.db.session import get_engine
from app.models.kv_entry import KVEntry
from app.models.quotation import Quotation
from app.services.pricing import ConfigKeyMissing, PriceEngine

logger = logging.getLogger(__name__)

CURRENT_QUOTATION_KEY = "currentQuotation"
SCHEMA_VERSION = 1


class KeyValueStore:
    """Minimal persistence seam: one JSON string per key."""

    def get(self, key: str) -> Optional[Tuple[str, int]]:
        raise NotImplementedError

    def put(self, key: str, value: str, schema_version: int) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: Dict[str, Tuple[str, int]] = {}

    def get(self, key: str) -> Optional[Tuple[str, int]]:
        return self._data.get(key)

    def put(self, key: str, value: str, schema_version: int) -> None:
        self._data[key] = (value, schema_version)


class SQLKeyValueStore(KeyValueStore):
    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()

    def get(self, key: str) -> Optional[Tuple[str, int]]:
        with Session(self.engine) as session:
            entry = session.get(KVEntry, key)
            if entry is None:
                return None
            return entry.value, entry.schema_version

    def put(self, key: str, value: str, schema_version: int) -> None:
        with Session(self.engine) as session:
            entry = session.get(KVEntry, key)
            if entry is None:
                entry = KVEntry(key=key, value=value, schema_version=schema_version)
            else:
                entry.value = value
                entry.schema_version = schema_version
                entry.updated_at = datetime.now(timezone.utc)
            session.add(entry)
            session.commit()


class QuotationStore:
    """Keeps exactly one quotation, the current one. Last writer wins."""

    def __init__(self, backend: Optional[KeyValueStore] = None, key: str = CURRENT_QUOTATION_KEY):
        self.backend = backend if backend is not None else SQLKeyValueStore()
        self.key = key

    def save(self, quotation: Quotation) -> None:
        payload = json.dumps(quotation.to_document())
        self.backend.put(self.key, payload, SCHEMA_VERSION)
        logger.info("Saved %s total=%s created_at=%s", self.key, quotation.total_price, quotation.created_at.isoformat())

    def load(self) -> Optional[Quotation]:
        """Return the saved quotation, or None when nothing usable is stored."""
        stored = self.backend.get(self.key)
        if stored is None:
            logger.debug("No %s stored", self.key)
            return None

        payload, version = stored
        if version != SCHEMA_VERSION:
            logger.warning("Stored %s has schema_version=%s, expected %s", self.key, version, SCHEMA_VERSION)
            return None

        try:
            quotation = Quotation.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Stored %s could not be decoded: %s", self.key, e)
            return None

        try:
            expected = PriceEngine().quotation_total(quotation.pages, quotation.optional_features, quotation.pricing)
        except ConfigKeyMissing as e:
            logger.warning("Stored %s cannot be repriced: %s", self.key, e)
            return None
        if expected != quotation.total_price:
            logger.warning("Stored %s has totalPrice=%s, its own pricing gives %s", self.key, quotation.total_price, expected)
            return None
        return quotation
