# simple_reviews/__init__.py
"""Product review record type, mock sentiment endpoints and review shortcode."""

__version__ = "1.0.0"
