"""Sentiment Scoring.

Lexicon-based polarity per canonical post, emitted as a chronologically
ordered series for charting.  Uses TextBlob's pattern analyzer; each
matched lexicon entry (after negation/intensifier handling) contributes
its polarity to the post score.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Iterable, List, Optional, Tuple

from textblob.sentiments import PatternAnalyzer

from ..schemas.post_schema import CanonicalPost, SentimentLabel, SentimentPoint

logger = logging.getLogger(__name__)


class SentimentAnalyzer:
    """Stateless, reentrant wrapper around TextBlob's lexicon analyzer.

    Create once (the app does this at start-up) and pass it where needed.
    """

    def __init__(self, analyzer: Optional[PatternAnalyzer] = None):
        self._analyzer = analyzer or PatternAnalyzer()

    def analyze(self, text: str) -> Tuple[float, float]:
        """Return ``(score, magnitude)`` for *text*.

        score is the sum of matched-token polarities; magnitude is the sum
        of their absolute values, or ``abs(score)`` when the analyzer gives
        no per-token breakdown.
        """
        if not text or not text.strip():
            return 0.0, 0.0
        try:
            result = self._analyzer.analyze(text, keep_assessments=True)
        except Exception as exc:
            logger.warning("Sentiment analysis failed, scoring as neutral: %s", exc)
            return 0.0, 0.0

        assessments = getattr(result, "assessments", None)
        if assessments is None:
            score = float(result[0])
            return round(score, 4), round(abs(score), 4)

        polarities = [float(entry[1]) for entry in assessments]
        score = sum(polarities, 0.0)
        magnitude = sum((abs(p) for p in polarities), 0.0)
        return round(score, 4), round(magnitude, 4)


def classify(score: float) -> SentimentLabel:
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


def post_text(post: CanonicalPost) -> str:
    """Title, body and comments joined by blank lines."""
    return "\n\n".join([post.title, post.post, *post.comments])


def _timestamp(post: CanonicalPost, now_ms: float) -> float:
    created = post.created_at
    if isinstance(created, (int, float)) and math.isfinite(created):
        return float(created)
    return now_ms


def compute_sentiment_series(
    posts: Iterable[CanonicalPost],
    analyzer: Optional[SentimentAnalyzer] = None,
) -> List[SentimentPoint]:
    """Score every post and return the points sorted by ascending timestamp.

    Posts without ``createdAt`` are stamped with the current time, so they
    cluster at the scoring moment.
    """
    posts = list(posts or [])
    if not posts:
        return []

    analyzer = analyzer or SentimentAnalyzer()
    now_ms = time.time() * 1000

    points: List[SentimentPoint] = []
    for post in posts:
        score, magnitude = analyzer.analyze(post_text(post))
        ts = _timestamp(post, now_ms)
        logger.debug(
            "Sentiment title=%r score=%.3f magnitude=%.3f timestamp=%.0f",
            post.title,
            score,
            magnitude,
            ts,
        )
        points.append(
            SentimentPoint(
                timestamp=ts,
                score=score,
                magnitude=magnitude,
                label=classify(score),
                title=post.title,
            )
        )

    points.sort(key=lambda point: point.timestamp)
    return points
