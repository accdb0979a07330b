"""Offline builder for the retrieval corpus file."""
import json
import logging
import time
from pathlib import Path
from typing import Iterator, List, Tuple

from openai import OpenAI

from relay_shared import EmbeddingRecord, Settings

logger = logging.getLogger(__name__)


def iter_documents(docs_dir: Path) -> Iterator[Tuple[str, str]]:
    """Yield ``(file name, text)`` for every visible regular file, by name."""
    for path in sorted(docs_dir.iterdir(), key=lambda p: p.name):
        if path.name.startswith(".") or not path.is_file():
            continue
        yield path.name, path.read_text(encoding="utf-8")


def embed_text(client: OpenAI, text: str, *, model: str) -> List[float]:
    response = client.embeddings.create(model=model, input=text)
    if not response.data:
        raise ValueError("embeddings response contained no data")
    return list(response.data[0].embedding)


def build_records(
    client: OpenAI,
    docs_dir: Path,
    *,
    settings: Settings,
    delay_seconds: float = 0.2,
) -> List[EmbeddingRecord]:
    records: List[EmbeddingRecord] = []
    for name, text in iter_documents(docs_dir):
        logger.info("Embedding: %s", name)
        vector = embed_text(client, text, model=settings.embedding_model)
        records.append(EmbeddingRecord(id=name, text=text[: settings.corpus_text_limit], vector=vector))
        if delay_seconds:
            time.sleep(delay_seconds)
    return records


def write_corpus(records: List[EmbeddingRecord], output: Path) -> None:
    payload = [{"id": record.id, "text": record.text, "embedding": record.vector} for record in records]
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Wrote %d records to %s", len(records), output)
