"""Load the static retrieval corpus (JSON list of {id, text, metadata})."""

import json
import logging
from pathlib import Path
from types import MappingProxyType

from civicscoach.models import CorpusChunk

logger = logging.getLogger(__name__)

_CORPUS_PATH = Path(__file__).parent / "data" / "corpus_chunks.json"


def load_corpus(corpus_path: Path | None = None) -> tuple[CorpusChunk, ...]:
    """Read the corpus once into an immutable tuple, preserving file order.

    Raises FileNotFoundError if the file is missing and ValueError if it is not
    a JSON list of chunk objects.
    """
    path = corpus_path or _CORPUS_PATH
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Corpus must be a JSON list, got {type(raw).__name__}")

    chunks: list[CorpusChunk] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "text" not in item:
            raise ValueError(f"Corpus entry {i} has no 'text' field")
        chunks.append(
            CorpusChunk(
                id=str(item.get("id") or f"chunk{i}"),
                text=str(item["text"]),
                metadata=MappingProxyType(dict(item.get("metadata") or {})),
            )
        )

    logger.info("Loaded %d corpus chunks from %s", len(chunks), path)
    return tuple(chunks)
