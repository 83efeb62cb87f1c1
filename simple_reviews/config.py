# simple_reviews/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# ============================================================================
# CONFIGURATION
# ============================================================================

class ReviewsConfig:
    """Centralized service configuration"""

    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./simple_reviews.db")

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = _env_int("PORT", 8000)
    SITE_URL = os.getenv("SITE_URL", "http://localhost:8000").rstrip("/")

    # Rendering: "direct" queries storage, "http" calls the history endpoint first
    RENDER_MODE = os.getenv("REVIEWS_RENDER_MODE", "direct").lower()
    HTTP_TIMEOUT = _env_float("REVIEWS_HTTP_TIMEOUT", 3.0)

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.getenv("LOG_DIR") or None

    # REST
    REST_NAMESPACE = "mock-api/v1"
    CONTENT_NAMESPACE = "wp/v2"
    CONTENT_PAGE_SIZE = 10

    # Reviews
    POST_TYPE = "product_review"
    SHORTCODE_TAG = "product_reviews"
    HISTORY_PAGE_SIZE = 5
    DEFAULT_SENTIMENT = "neutral"
    DEFAULT_SCORE = 0.5
    OUTLIER_LOW = 0.3
    OUTLIER_HIGH = 0.7
    SENTIMENT_SCORES = {"positive": 0.9, "negative": 0.2, "neutral": 0.5}

    RENDER_MODES = ["direct", "http"]
