# simple_reviews/schemas.py
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


# ------------------------------------------------------
# sentiment
# ------------------------------------------------------
class SentimentResult(BaseModel):
    sentiment: str  # "positive" / "negative" / "neutral"
    score: float


class ReviewSummary(BaseModel):
    id: int
    title: str
    sentiment: str
    score: float


# ------------------------------------------------------
# content api
# ------------------------------------------------------
class PostOut(BaseModel):
    id: int
    type: str
    date: datetime
    title: str
    content: str
    meta: Dict[str, Optional[str]] = {}
