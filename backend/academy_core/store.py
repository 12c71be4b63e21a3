from __future__ import annotations

import logging
from typing import Callable, Dict, List

from .collection import EntityCollection
from .kinds import EntityKind
from .models import Record

logger = logging.getLogger(__name__)

Listener = Callable[[EntityKind, EntityCollection[Record]], None]


class AcademyStore:
    """Owned state container holding one immutable collection per kind.

    Collections are swapped wholesale, so a reader holding an earlier
    snapshot never sees a partially applied mutation.
    """

    def __init__(self) -> None:
        self._collections: Dict[EntityKind, EntityCollection[Record]] = {
            kind: EntityCollection() for kind in EntityKind
        }
        self._listeners: List[Listener] = []

    def snapshot(self, kind: EntityKind) -> EntityCollection[Record]:
        return self._collections[kind]

    def replace(self, kind: EntityKind, collection: EntityCollection[Record]) -> None:
        if collection is self._collections[kind]:
            return
        self._collections[kind] = collection
        for listener in list(self._listeners):
            try:
                listener(kind, collection)
            except Exception:  # pragma: no cover - logging side effect
                logger.exception("Store listener failed for %s", kind.value)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
