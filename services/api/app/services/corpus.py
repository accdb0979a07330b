"""In-memory embedding corpus loaded once at startup."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
from pydantic import TypeAdapter, ValidationError

from relay_shared import EmbeddingRecord, Settings

logger = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(List[EmbeddingRecord])


class CorpusLoadError(Exception):
    """Raised when the corpus file is missing or does not match the record schema."""


class CorpusStore:
    """Read-only collection of embedding records.

    The vector matrix is flagged non-writeable so concurrent requests can
    share one instance without locking.
    """

    def __init__(self, records: Sequence[EmbeddingRecord] = ()) -> None:
        self._records: Tuple[EmbeddingRecord, ...] = tuple(records)
        if self._records:
            matrix = np.array([record.vector for record in self._records], dtype=np.float64)
        else:
            matrix = np.zeros((0, 0), dtype=np.float64)
        matrix.setflags(write=False)
        self._matrix = matrix

    @classmethod
    def empty(cls) -> "CorpusStore":
        return cls()

    @property
    def records(self) -> Tuple[EmbeddingRecord, ...]:
        return self._records

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def dimension(self) -> int:
        return int(self._matrix.shape[1]) if self._records else 0

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)


def load_corpus(path: Path | str, *, text_limit: int | None = None) -> CorpusStore:
    """Parse a corpus file into a :class:`CorpusStore`.

    Any malformed record rejects the whole file.
    """

    corpus_path = Path(path)
    try:
        raw = corpus_path.read_bytes()
    except OSError as exc:
        raise CorpusLoadError(f"cannot read corpus file {corpus_path}: {exc}") from exc

    try:
        records = _RECORDS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise CorpusLoadError(f"invalid corpus file {corpus_path}: {exc.error_count()} error(s)") from exc

    dimensions = {len(record.vector) for record in records}
    if len(dimensions) > 1:
        raise CorpusLoadError(f"corpus vectors have mixed dimensions: {sorted(dimensions)}")

    if text_limit is not None:
        oversized = [record.id for record in records if len(record.text) > text_limit]
        if oversized:
            raise CorpusLoadError(f"corpus records exceed {text_limit} characters: {oversized[:5]}")

    return CorpusStore(records)


def load_corpus_or_empty(settings: Settings) -> CorpusStore:
    """Load the configured corpus, falling back to an empty store."""

    if not settings.rag_enabled:
        return CorpusStore.empty()

    try:
        corpus = load_corpus(settings.corpus_path, text_limit=settings.corpus_text_limit)
    except CorpusLoadError as exc:
        logger.warning("retrieval disabled, corpus unavailable: %s", exc)
        return CorpusStore.empty()

    logger.info("loaded %d corpus records from %s", len(corpus), settings.corpus_path)
    return corpus
