# tests/test_config.py

from types import SimpleNamespace

import pytest

from simple_reviews import shortcodes
from simple_reviews.config import ReviewsConfig, _env_float, _env_int
from simple_reviews.registry import ContentTypeRegistry, init_plugin
from simple_reviews.shortcodes import ProductReviewsShortcode, ShortcodeRegistry, register_shortcodes


class HttpModeConfig(ReviewsConfig):
    RENDER_MODE = "http"
    SITE_URL = "http://reviews.test"
    HTTP_TIMEOUT = 1.5


class BadModeConfig(ReviewsConfig):
    RENDER_MODE = "cached"


@pytest.mark.parametrize("name,raw,default", [
    ("PORT", "abc", 8000),
    ("PORT", "", 8000),
    ("PORT", "80.5", 8000),
])
def test_env_int_falls_back_on_invalid_value(monkeypatch, name, raw, default):
    monkeypatch.setenv(name, raw)
    assert _env_int(name, default) == default


def test_env_int_reads_valid_value(monkeypatch):
    monkeypatch.setenv("PORT", "9001")
    assert _env_int("PORT", 8000) == 9001


@pytest.mark.parametrize("raw", ["x", "", "three"])
def test_env_float_falls_back_on_invalid_value(monkeypatch, raw):
    monkeypatch.setenv("REVIEWS_HTTP_TIMEOUT", raw)
    assert _env_float("REVIEWS_HTTP_TIMEOUT", 3.0) == 3.0


def test_env_float_reads_valid_value(monkeypatch):
    monkeypatch.setenv("REVIEWS_HTTP_TIMEOUT", "0.25")
    assert _env_float("REVIEWS_HTTP_TIMEOUT", 3.0) == 0.25


def test_env_unset_uses_default(monkeypatch):
    monkeypatch.delenv("REVIEWS_HTTP_TIMEOUT", raising=False)
    assert _env_float("REVIEWS_HTTP_TIMEOUT", 3.0) == 3.0


def test_register_shortcodes_with_http_config(store, add_review, monkeypatch):
    registry = ShortcodeRegistry()
    register_shortcodes(registry, store, HttpModeConfig)
    post = add_review("Via history", sentiment="positive")
    calls = []

    class Response:
        def raise_for_status(self):
            pass

        def json(self):
            return [{"id": post.id}]

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return Response()

    monkeypatch.setattr(shortcodes.requests, "get", fake_get)
    html = registry.render("product_reviews")

    assert calls == [("http://reviews.test/mock-api/v1/review-history/", 1.5)]
    assert "<li class='review-positive'>Via history (Sentiment: positive)</li>" in html


def test_register_shortcodes_uses_config_values(store):
    registry = ShortcodeRegistry()
    register_shortcodes(registry, store, HttpModeConfig)

    callback = registry._callbacks["product_reviews"]
    assert isinstance(callback, ProductReviewsShortcode)
    assert callback.mode == "http"
    assert callback.timeout == 1.5


def test_invalid_render_mode_fails_plugin_init(store):
    state = SimpleNamespace(
        store=store,
        content_types=ContentTypeRegistry(),
        shortcodes=ShortcodeRegistry(),
        config=BadModeConfig,
    )
    with pytest.raises(ValueError, match="Unknown render mode"):
        init_plugin(state)
    assert not state.shortcodes.exists("product_reviews")
