# simple_reviews/shortcodes.py
# Review rendering surface: the [product_reviews] shortcode

import html
import re
from typing import Callable, Dict, Iterable, List, Optional

import requests

from .config import ReviewsConfig
from .core import get_recent_reviews, get_sentiment
from .security import NotFoundException, log_event
from .storage import Post, ReviewStore


REVIEW_STYLES = """<style>
            .review-positive { color: green; font-weight: bold; }
            .review-negative { color: red; font-weight: bold; }
        </style>"""

SENTIMENT_CLASSES = {
    "positive": "review-positive",
    "negative": "review-negative",
}


# ============================================================================
# SHORTCODE REGISTRY
# ============================================================================

class ShortcodeRegistry:
    """Named hooks that content templates expand into generated HTML"""

    def __init__(self):
        self._callbacks: Dict[str, Callable[[], str]] = {}

    def add_shortcode(self, tag: str, callback: Callable[[], str]):
        self._callbacks[tag] = callback

    def exists(self, tag: str) -> bool:
        return tag in self._callbacks

    def tags(self) -> List[str]:
        return list(self._callbacks)

    def render(self, tag: str) -> str:
        if tag not in self._callbacks:
            raise NotFoundException(f"Unknown shortcode: {tag}", "not_found", {"tag": tag})
        return self._callbacks[tag]()

    def do_shortcode(self, content: str) -> str:
        """Replace every [tag] or [tag /] of a registered tag in content"""
        if not self._callbacks or "[" not in content:
            return content

        names = "|".join(re.escape(tag) for tag in sorted(self._callbacks, key=len, reverse=True))
        pattern = re.compile(r"\[(%s)\s*/?\]" % names)
        return pattern.sub(lambda match: self._callbacks[match.group(1)](), content)


# ============================================================================
# RENDERING
# ============================================================================

def render_review_list(store: ReviewStore, posts: Iterable[Post]) -> str:
    """Styled <ul> with one line per review, colored by stored sentiment"""
    output = REVIEW_STYLES
    output += "<ul>"
    for post in posts:
        sentiment = get_sentiment(store, post.id)
        css_class = SENTIMENT_CLASSES.get(sentiment, "")
        output += "<li class='%s'>%s (Sentiment: %s)</li>" % (
            css_class,
            html.escape(post.title),
            html.escape(sentiment),
        )
    output += "</ul>"
    return output


class ProductReviewsShortcode:
    """
    Callback behind [product_reviews].

    direct: query storage for the most recent reviews.
    http:   ask the review-history endpoint for ids, then load those ids from
            storage (store order, not history order). Any request failure
            falls back to the direct query.
    """

    def __init__(self, store: ReviewStore, mode: str = "direct",
                 site_url: str = "http://localhost:8000", timeout: float = 3.0):
        if mode not in ReviewsConfig.RENDER_MODES:
            raise ValueError(f"Unknown render mode: {mode}")
        self.store = store
        self.mode = mode
        self.site_url = site_url.rstrip("/")
        self.timeout = timeout

    @property
    def history_url(self) -> str:
        return f"{self.site_url}/{ReviewsConfig.REST_NAMESPACE}/review-history/"

    def __call__(self) -> str:
        if self.mode == "http":
            posts = self._fetch_via_history_endpoint()
        else:
            posts = get_recent_reviews(self.store)
        return render_review_list(self.store, posts)

    def _fetch_history_ids(self) -> Optional[List[int]]:
        try:
            response = requests.get(self.history_url, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, list):
                raise ValueError("review history must be a JSON array")
            return [int(item["id"]) for item in body]
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            log_event("review_history_request_failed", {
                "url": self.history_url,
                "error": str(e),
                "severity": "medium",
            })
            return None

    def _fetch_via_history_endpoint(self) -> List[Post]:
        post_ids = self._fetch_history_ids()
        if post_ids is None:
            return get_recent_reviews(self.store)
        if not post_ids:
            return []
        return self.store.get_posts(post_type=ReviewsConfig.POST_TYPE, ids=post_ids)


def register_shortcodes(shortcodes: ShortcodeRegistry, store: ReviewStore, config=ReviewsConfig):
    shortcodes.add_shortcode(
        ReviewsConfig.SHORTCODE_TAG,
        ProductReviewsShortcode(
            store,
            mode=config.RENDER_MODE,
            site_url=config.SITE_URL,
            timeout=config.HTTP_TIMEOUT,
        ),
    )
