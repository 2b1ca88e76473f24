"""Embedding sample — cosine similarity between short phrases."""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

import reportflow.core.config as config_module
from reportflow.providers.base import EmbeddingProvider

APPLE = "Apple"
RED_FRUIT = "A red, round fruit"
CAT = "Cat"
SPOILED_ANIMAL = "A selfish, self-centred but very cute animal"

SAMPLE_PAIRS: tuple[tuple[str, str], ...] = (
    (APPLE, RED_FRUIT),
    (SPOILED_ANIMAL, RED_FRUIT),
    (CAT, SPOILED_ANIMAL),
)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors of equal length."""
    if len(a) != len(b):
        raise ValueError(f"Vector lengths differ: {len(a)} != {len(b)}")
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    return float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb)))


async def run_embeddings(
    provider: EmbeddingProvider,
    model: str | None = None,
    out: Callable[[str], None] = print,
) -> dict[tuple[str, str], float]:
    """Embed the sample phrases once and print each pair's similarity."""
    model = model or config_module.config.embedding.model
    phrases = [APPLE, RED_FRUIT, CAT, SPOILED_ANIMAL]
    vectors = dict(zip(phrases, await provider.embed(phrases, model=model)))

    scores = {}
    for left, right in SAMPLE_PAIRS:
        score = cosine_similarity(vectors[left], vectors[right])
        out(f"{left} - {right}: {score}")
        scores[(left, right)] = score
    return scores
