"""Tests for the synthetic discovery provider."""

import asyncio

from llm_checker.sources.normalizer import normalize_candidate
from llm_checker.sources.synthetic import CATALOGUE, SyntheticProvider


def test_items_use_listing_shape():
    items = asyncio.run(SyntheticProvider(count=3, seed=1).discover())
    assert len(items) == 3
    for item in items:
        assert "/" in item["modelId"]
        assert isinstance(item["tags"], list)
        assert item["likes"] >= 0
        assert item["downloads"] >= 0
        assert item["createdAt"]


def test_newest_first():
    items = asyncio.run(SyntheticProvider(count=len(CATALOGUE), seed=2).discover())
    dates = [item["createdAt"] for item in items]
    assert dates == sorted(dates, reverse=True)


def test_count_capped_at_catalogue():
    items = asyncio.run(SyntheticProvider(count=100, seed=3).discover())
    assert len(items) == len(CATALOGUE)


def test_seed_is_reproducible():
    first = asyncio.run(SyntheticProvider(count=4, seed=7).discover())
    second = asyncio.run(SyntheticProvider(count=4, seed=7).discover())
    assert first == second


def test_items_normalize_cleanly():
    items = asyncio.run(SyntheticProvider(count=len(CATALOGUE), seed=4).discover())
    records = {normalize_candidate(item).id: normalize_candidate(item) for item in items}
    assert records["meta-llama/Llama-3.2-3B-Instruct"].parameters == "3B"
    assert records["meta-llama/Llama-3.2-3B-Instruct"].license == "llama3.2"
    assert records["mistralai/Mixtral-8x22B-Instruct-v0.1"].vram_size == "High (>48GB)"
    assert records["deepseek-ai/DeepSeek-V2.5"].parameters == "Unknown"
