"""Synthetic model source for running without network access.

Produces listing items in the same shape as the Hugging Face API, so the
checker cannot tell the two sources apart.
"""

import logging
import random

logger = logging.getLogger(__name__)

# (modelId, tags, likes, downloads, description, createdAt)
CATALOGUE: list[tuple[str, list[str], int, int, str, str]] = [
    (
        "meta-llama/Llama-3.2-3B-Instruct",
        ["text-generation", "pytorch", "llama-3.2", "edge", "license:llama3.2"],
        25420,
        890000,
        "The official Meta Llama 3.2 3B Instruct model, optimized for edge devices.",
        "2024-09-25T00:00:00.000Z",
    ),
    (
        "Qwen/Qwen2.5-72B-Instruct",
        ["text-generation", "transformers", "qwen", "license:apache-2.0"],
        12500,
        450000,
        "Qwen2.5 is the latest series of Qwen large language models, "
        "significantly outperforming previous versions.",
        "2024-09-19T00:00:00.000Z",
    ),
    (
        "mistralai/Mistral-Large-Instruct-2407",
        ["text-generation", "transformers", "123b", "license:other"],
        9800,
        210000,
        "Mistral Large 2 is a new flagship model significantly more capable "
        "than its predecessor.",
        "2024-07-24T00:00:00.000Z",
    ),
    (
        "google/gemma-2-9b-it",
        ["text-generation", "transformers", "gemma2", "license:gemma"],
        6100,
        320000,
        "Gemma 2 9B instruction-tuned, a lightweight open model from Google.",
        "2024-06-27T00:00:00.000Z",
    ),
    (
        "deepseek-ai/DeepSeek-V2.5",
        ["text-generation", "transformers", "moe", "license:other"],
        4200,
        48000,
        "DeepSeek-V2.5 merges the chat and coder lines into one MoE model.",
        "2024-09-05T00:00:00.000Z",
    ),
    (
        "mistralai/Mixtral-8x22B-Instruct-v0.1",
        ["text-generation", "transformers", "moe", "license:apache-2.0"],
        700,
        9500,
        "Sparse mixture-of-experts model with 8 experts of 22B parameters.",
        "2024-04-17T00:00:00.000Z",
    ),
    (
        "microsoft/Phi-3.5-mini-instruct",
        ["text-generation", "transformers", "phi3", "3.8b", "license:mit"],
        3400,
        150000,
        "Phi-3.5-mini is a lightweight model built on synthetic and filtered web data.",
        "2024-08-16T00:00:00.000Z",
    ),
]


class SyntheticProvider:
    """Return a random sample of the built-in catalogue.

    Args:
        count: Number of items per call (capped at the catalogue size).
        seed: Seed for reproducible samples.
    """

    name = "synthetic"

    def __init__(self, count: int = 5, seed: int | None = None) -> None:
        self.count = count
        self._rng = random.Random(seed)

    @property
    def source(self) -> str:
        return "synthetic catalogue"

    async def discover(self) -> list[dict]:
        picks = self._rng.sample(CATALOGUE, min(self.count, len(CATALOGUE)))
        items = []
        for model_id, tags, likes, downloads, description, created_at in picks:
            items.append(
                {
                    "modelId": model_id,
                    "tags": list(tags),
                    "likes": likes + self._rng.randint(0, likes // 10 + 1),
                    "downloads": downloads + self._rng.randint(0, downloads // 10 + 1),
                    "cardData": {"description": description},
                    "createdAt": created_at,
                    "pipeline_tag": "text-generation",
                }
            )
        # Newest first, like the live listing
        items.sort(key=lambda item: item["createdAt"], reverse=True)
        logger.info("Generated %d synthetic listings", len(items))
        return items
