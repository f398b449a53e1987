"""
Prediction record stores.

Both stores implement ``PredictionStore`` (``save``, ``list_predictions``,
``fetch_summary_fields``) and raise PersistenceError on any failure.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from models.record_model import TABLE_NAME
from risk.errors import PersistenceError

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = "risk_prediction, gender, age, bmi, prediction_source"


@runtime_checkable
class PredictionStore(Protocol):
    def save(self, record: dict) -> dict: ...

    def list_predictions(self, page: int, limit: int, risk_level: Optional[int] = None,
                         gender: Optional[int] = None) -> Tuple[List[dict], int]: ...

    def fetch_summary_fields(self) -> List[dict]: ...


class SupabasePredictionStore:
    def __init__(self, client, table: str = TABLE_NAME):
        self.client = client
        self.table = table

    def save(self, record: dict) -> dict:
        try:
            res = self.client.table(self.table).insert([record]).execute()
        except Exception as e:
            raise PersistenceError(f"Insert into {self.table} failed: {e}", cause=e) from e
        if not res.data:
            raise PersistenceError(f"Insert into {self.table} returned no row")
        return res.data[0]

    def _filtered(self, risk_level: Optional[int], gender: Optional[int], *columns, **options):
        query = self.client.table(self.table).select(*columns, **options)
        if risk_level is not None:
            query = query.eq("risk_prediction", risk_level)
        if gender is not None:
            query = query.eq("gender", gender)
        return query

    def list_predictions(self, page: int, limit: int, risk_level: Optional[int] = None,
                         gender: Optional[int] = None) -> Tuple[List[dict], int]:
        offset = (page - 1) * limit
        try:
            if offset > 0:
                # PostgREST answers 416 for a range past the last row
                head = self._filtered(risk_level, gender, "*", count="exact", head=True).execute()
                total = head.count or 0
                if offset >= total:
                    return [], total
            res = (
                self._filtered(risk_level, gender, "*", count="exact")
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Query on {self.table} failed: {e}", cause=e) from e
        return res.data or [], res.count or 0

    def fetch_summary_fields(self) -> List[dict]:
        try:
            res = self.client.table(self.table).select(SUMMARY_FIELDS).execute()
        except Exception as e:
            raise PersistenceError(f"Query on {self.table} failed: {e}", cause=e) from e
        return res.data or []


class InMemoryPredictionStore:
    """Process-local store used when Supabase is not configured."""

    def __init__(self, clock=None):
        self._rows: List[dict] = []
        self._lock = threading.Lock()
        self._next_id = 1
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def save(self, record: dict) -> dict:
        with self._lock:
            row = dict(record)
            row["id"] = self._next_id
            row.setdefault("created_at", self._clock().isoformat())
            self._next_id += 1
            self._rows.append(row)
            return dict(row)

    def list_predictions(self, page: int, limit: int, risk_level: Optional[int] = None,
                         gender: Optional[int] = None) -> Tuple[List[dict], int]:
        with self._lock:
            rows = [
                r for r in self._rows
                if (risk_level is None or r.get("risk_prediction") == risk_level)
                and (gender is None or r.get("gender") == gender)
            ]
        # newest first; insertion order breaks ties
        rows = sorted(enumerate(rows), key=lambda pair: (pair[1]["created_at"], pair[0]), reverse=True)
        offset = (page - 1) * limit
        return [dict(r) for _, r in rows[offset:offset + limit]], len(rows)

    def fetch_summary_fields(self) -> List[dict]:
        fields = [f.strip() for f in SUMMARY_FIELDS.split(",")]
        with self._lock:
            return [{f: r.get(f) for f in fields} for r in self._rows]
