"""Content-addressed cache of validated ontologies.

Keys are SHA-256 hashes of the source text and its base IRI. At most one
parse runs per key at a time: the first caller computes under a per-key
future and concurrent callers for the same key wait on it. Failures are
delivered to every waiter and then forgotten, so corrected input can be
retried. The cache is the only shared mutable state in the pipeline.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future

from ontoctl.domain.ontology import ValidatedOntology

logger = logging.getLogger(__name__)


def content_hash(text: str, base_iri: str | None = None) -> str:
    """Cache key for *text* resolved against *base_iri*."""
    payload = text if base_iri is None else f"{base_iri}\n{text}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class OntologyCache:
    """Bounded LRU mapping content hash → ValidatedOntology."""

    def __init__(self, max_entries: int = 32) -> None:
        self._max_entries = max_entries
        self._entries: OrderedDict[str, ValidatedOntology] = OrderedDict()
        self._inflight: dict[str, Future[ValidatedOntology]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get_or_build(self, key: str, build: Callable[[], ValidatedOntology]) -> tuple[ValidatedOntology, bool]:
        """Return ``(ontology, cached)`` for *key*, calling *build* at most once concurrently."""
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached, True
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
                self.misses += 1
        assert future is not None

        if not owner:
            logger.debug("Waiting for in-flight parse of %s", key[:12])
            return future.result(), True

        try:
            ontology = build()
        except BaseException as exc:
            with self._lock:
                del self._inflight[key]
            future.set_exception(exc)
            raise
        with self._lock:
            del self._inflight[key]
            if self._max_entries > 0:
                self._entries[key] = ontology
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted %s from ontology cache", evicted[:12])
        future.set_result(ontology)
        return ontology, False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
