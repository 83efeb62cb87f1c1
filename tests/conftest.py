# tests/conftest.py
import os
import sys
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

# Add the project root to PYTHONPATH so "simple_reviews" can be imported
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from simple_reviews.api import create_app  # noqa: E402
from simple_reviews.config import ReviewsConfig  # noqa: E402
from simple_reviews.storage import ReviewStore  # noqa: E402


BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def store():
    review_store = ReviewStore("sqlite://")
    review_store.create_schema()
    yield review_store
    review_store.dispose()


@pytest.fixture
def add_review(store):
    """
    Insert product reviews. Each call is one hour newer than the last,
    so the most recently added review is the newest.
    """
    counter = {"n": 0}

    def _add(title, sentiment=None, score=None, post_type=ReviewsConfig.POST_TYPE, content=""):
        counter["n"] += 1
        meta = {}
        if sentiment is not None:
            meta["sentiment"] = sentiment
        if score is not None:
            meta["sentiment_score"] = score
        return store.insert_post(
            post_type=post_type,
            title=title,
            content=content,
            meta=meta,
            created_at=BASE_TIME + timedelta(hours=counter["n"]),
        )

    return _add


@pytest.fixture
def client(store):
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client
