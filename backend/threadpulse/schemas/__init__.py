# Schemas package
from .post_schema import CandidateLink, CanonicalPost, SentimentLabel, SentimentPoint

__all__ = [
    "CandidateLink",
    "CanonicalPost",
    "SentimentLabel",
    "SentimentPoint",
]
