# simple_reviews/core.py
# Sentiment query service: mock analysis plus history/outlier reads over stored reviews

import math
import random
from typing import Any, Dict, List, Optional

from .config import ReviewsConfig
from .security import InvalidArgumentException, log_event, sanitize_text_field
from .storage import Post, ReviewStore


# ============================================================================
# ANALYSIS
# ============================================================================

def analyze_sentiment(text: Any, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Mock sentiment analysis. The text content is ignored; a label is picked
    uniformly from the fixed score table. Nothing is persisted.
    """
    clean_text = sanitize_text_field(text)
    if not clean_text:
        raise InvalidArgumentException(
            message="No text provided for analysis.",
            error_code="empty_text",
        )

    rng = rng or random
    label = rng.choice(list(ReviewsConfig.SENTIMENT_SCORES))
    return {"sentiment": label, "score": ReviewsConfig.SENTIMENT_SCORES[label]}


# ============================================================================
# HISTORY & OUTLIERS
# ============================================================================

def get_recent_reviews(store: ReviewStore) -> List[Post]:
    """The most recent product reviews, newest first"""
    return store.get_posts(
        post_type=ReviewsConfig.POST_TYPE,
        limit=ReviewsConfig.HISTORY_PAGE_SIZE,
    )


def get_sentiment(store: ReviewStore, post_id: int) -> str:
    value = store.get_post_meta(post_id, "sentiment")
    return value if value else ReviewsConfig.DEFAULT_SENTIMENT


def get_sentiment_score(store: ReviewStore, post_id: int) -> float:
    """Stored score, or the default when missing, empty, unparseable or not finite"""
    value = store.get_post_meta(post_id, "sentiment_score")
    if value is None or value.strip() == "":
        return ReviewsConfig.DEFAULT_SCORE
    try:
        score = float(value)
    except ValueError:
        score = None

    if score is None or not math.isfinite(score):
        log_event("invalid_sentiment_score", {
            "post_id": post_id,
            "value": value,
            "severity": "medium",
        })
        return ReviewsConfig.DEFAULT_SCORE
    return score


def summarize_review(store: ReviewStore, post: Post) -> Dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "sentiment": get_sentiment(store, post.id),
        "score": get_sentiment_score(store, post.id),
    }


def is_outlier(score: float) -> bool:
    return score < ReviewsConfig.OUTLIER_LOW or score > ReviewsConfig.OUTLIER_HIGH


def get_review_history(store: ReviewStore) -> List[Dict[str, Any]]:
    return [summarize_review(store, post) for post in get_recent_reviews(store)]


def get_review_outliers(store: ReviewStore) -> List[Dict[str, Any]]:
    """
    Reviews from the recent-history window whose score falls outside the
    [OUTLIER_LOW, OUTLIER_HIGH] band. Older reviews are never scanned.
    """
    return [summary for summary in get_review_history(store) if is_outlier(summary["score"])]


__all__ = [
    'analyze_sentiment',
    'get_recent_reviews',
    'get_sentiment',
    'get_sentiment_score',
    'summarize_review',
    'is_outlier',
    'get_review_history',
    'get_review_outliers',
]
