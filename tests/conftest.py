"""
Shared pytest fixtures and configuration for mongopage tests.

This module provides common fixtures used across unit and integration tests,
including cursor codecs, a sample article collection held in memory, and a
live MongoDB collection for integration tests.
"""

import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from mongopage import CursorCodec
from tests.helpers.memory import MemoryCollection

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with in-memory collections")
    config.addinivalue_line("markers", "integration: Integration tests against MongoDB")


def make_id(n: int) -> ObjectId:
    """Deterministic ObjectId whose order follows n."""
    return ObjectId(f"{n:024x}")


@pytest.fixture(autouse=True)
def clean_paging_env(monkeypatch) -> None:
    """Keep MONGOPAGE_* variables from the host out of PagingOptions()."""
    for name in ("SECRET", "ALGORITHM", "DEFAULT_LIMIT", "PAGE_SIZE", "PAGE_MARGIN"):
        monkeypatch.delenv(f"MONGOPAGE_{name}", raising=False)


@pytest.fixture
def secret() -> str:
    return "test-secret"


@pytest.fixture
def signed_codec(secret: str) -> CursorCodec:
    """Codec issuing JWT-signed tokens."""
    return CursorCodec(secret=secret)


@pytest.fixture
def plain_codec() -> CursorCodec:
    """Codec issuing unsigned base64 tokens."""
    return CursorCodec()


@pytest.fixture
def articles() -> list[dict[str, Any]]:
    """
    Twelve articles with repeated scores and publication times.

    Scores cycle through 3 values and every two consecutive articles share
    a publication time, so every ordering needs its tiebreakers.
    """
    return [
        {
            "_id": make_id(n),
            "title": f"Article {n}" + (" about mongo" if n % 4 == 0 else ""),
            "score": n % 3,
            "published_at": BASE_TIME + timedelta(hours=n // 2),
            "status": "draft" if n == 5 else "published",
        }
        for n in range(1, 13)
    ]


@pytest.fixture
def memory_collection(articles: list[dict[str, Any]]) -> MemoryCollection:
    return MemoryCollection(articles)


@pytest.fixture(scope="session")
def mongodb_uri() -> str:
    """Get MongoDB URI from environment or default."""
    return os.getenv("MONGODB_URI", "mongodb://localhost:27017")


@pytest.fixture
def mongo_collection(
    mongodb_uri: str, articles: list[dict[str, Any]]
) -> Generator[Collection, None, None]:
    """
    A seeded collection on a live MongoDB server, dropped after the test.

    Skips the test when no server answers.
    """
    client: MongoClient = MongoClient(mongodb_uri, serverSelectionTimeoutMS=500)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip(f"MongoDB is not reachable at {mongodb_uri}")

    collection = client["mongopage_test"]["articles"]
    collection.drop()
    collection.insert_many([dict(a) for a in articles])
    collection.create_index([("title", "text")])

    yield collection

    collection.drop()
    client.close()
