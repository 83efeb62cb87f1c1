# simple_reviews/registry.py
"""Content type registry and the plugin's one-shot initialization."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import ReviewsConfig
from .security import log_event
from .shortcodes import register_shortcodes


@dataclass
class PostType:
    """Schema for a kind of host-managed content record"""
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    public: bool = False
    supports: Tuple[str, ...] = ("title", "editor")
    show_in_rest: bool = False
    rest_base: Optional[str] = None

    def __post_init__(self):
        if not self.rest_base:
            self.rest_base = self.name
        self.supports = tuple(self.supports)


class ContentTypeRegistry:
    """Registered post types, keyed by name"""

    def __init__(self):
        self._types: Dict[str, PostType] = {}

    def register_post_type(self, name: str, **args: Any) -> PostType:
        post_type = PostType(name=name, **args)
        self._types[name] = post_type
        return post_type

    def get(self, name: str) -> Optional[PostType]:
        return self._types.get(name)

    def exists(self, name: str) -> bool:
        return name in self._types

    def rest_types(self) -> List[PostType]:
        return [t for t in self._types.values() if t.show_in_rest]

    def by_rest_base(self, rest_base: str) -> Optional[PostType]:
        for post_type in self.rest_types():
            if post_type.rest_base == rest_base:
                return post_type
        return None


def register_product_review_type(registry: ContentTypeRegistry) -> PostType:
    """Declare the product review record type"""
    return registry.register_post_type(
        ReviewsConfig.POST_TYPE,
        labels={
            "name": "Product Reviews",
            "singular_name": "Product Review",
        },
        public=True,
        supports=("title", "editor", "custom-fields"),
        show_in_rest=True,
    )


def init_plugin(state) -> None:
    """
    Run once from application startup: create the storage schema, register
    the product review type and the review shortcode.

    `state` needs `store`, `content_types`, `shortcodes` and `config`.
    """
    state.store.create_schema()
    register_product_review_type(state.content_types)
    register_shortcodes(state.shortcodes, state.store, state.config)

    log_event("plugin_initialized", {
        "post_type": ReviewsConfig.POST_TYPE,
        "shortcode": ReviewsConfig.SHORTCODE_TAG,
        "render_mode": state.config.RENDER_MODE,
    })
