# tourguide/tours/store.py

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol

from tourguide.errors import NotFoundError
from tourguide.tours.models import TourDraft, TourRecord

# Champs fixés à la création, jamais modifiés ensuite
IMMUTABLE_FIELDS = ("id", "created_at")


class TourStore(Protocol):
    """Stockage des circuits, indexés par identifiant."""

    def create(self, draft: TourDraft) -> str:
        ...

    def get(self, tour_id: str) -> TourRecord:
        ...

    def list(self) -> List[TourRecord]:
        ...

    def update(self, tour_id: str, changes: Dict[str, Any]) -> TourRecord:
        ...

    def delete(self, tour_id: str) -> None:
        ...


class InMemoryTourStore:
    """
    Circuits en RAM (simple mais suffisant), perdus au redémarrage.
    Chaque lecture renvoie une copie : l'appelant ne modifie jamais
    l'exemplaire stocké.
    """

    def __init__(self):
        self._tours: Dict[str, TourRecord] = {}
        self._lock = threading.Lock()

    def create(self, draft: TourDraft) -> str:
        tour_id = uuid.uuid4().hex
        record = TourRecord(
            **draft.model_dump(),
            id=tour_id,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._tours[tour_id] = record
        return tour_id

    def get(self, tour_id: str) -> TourRecord:
        with self._lock:
            record = self._tours.get(tour_id)
        if record is None:
            raise NotFoundError(tour_id)
        return record.model_copy(deep=True)

    def list(self) -> List[TourRecord]:
        with self._lock:
            records = list(self._tours.values())
        return [r.model_copy(deep=True) for r in records]

    def update(self, tour_id: str, changes: Dict[str, Any]) -> TourRecord:
        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
        with self._lock:
            current = self._tours.get(tour_id)
            if current is None:
                raise NotFoundError(tour_id)
            updated = TourRecord.model_validate({**current.model_dump(), **changes})
            self._tours[tour_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, tour_id: str) -> None:
        with self._lock:
            if tour_id not in self._tours:
                raise NotFoundError(tour_id)
            del self._tours[tour_id]
