from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


SentimentLabel = Literal["positive", "neutral", "negative"]


class CandidateLink(BaseModel):
    """A search hit pointing at a Reddit thread.

    Produced by source discovery, consumed by content retrieval.
    """

    title: str = Field(default="", description="Search result title")
    url: str = Field(..., min_length=1, description="Human-facing thread URL")


class CanonicalPost(BaseModel):
    """Normalized ``{title, post, comments}`` record for one Reddit thread.

    This is the unit passed both to the language model (as tool output) and
    to the sentiment stage.  ``title`` and ``post`` are never ``None``.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", description="Thread title")
    post: str = Field(default="", description="Thread self-text body")
    comments: list[str] = Field(
        default_factory=list,
        max_length=5,
        description="Top comments by descending score, removed/deleted/empty bodies excluded",
    )
    created_at: Optional[float] = Field(
        default=None,
        alias="createdAt",
        description="Thread creation time in epoch milliseconds, when known",
    )
    _placeholder: bool = PrivateAttr(default=False)

    @field_validator("title", "post", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @classmethod
    def placeholder(cls, **fields) -> "CanonicalPost":
        """Build a sentinel record that stands in for real threads."""
        post = cls(**fields)
        post._placeholder = True
        return post

    @property
    def is_placeholder(self) -> bool:
        return self._placeholder


class SentimentPoint(BaseModel):
    """One scored, timestamped, labeled datum per canonical post."""

    timestamp: float = Field(..., description="Epoch milliseconds used as the chart x-axis")
    score: float = Field(
        ...,
        description=(
            "Sum of matched TextBlob pattern-lexicon polarities; each word contributes "
            "a fraction in [-1, 1], so values are fractional rather than integer valences"
        ),
    )
    magnitude: float = Field(..., ge=0.0, description="Sum of absolute matched polarities")
    label: SentimentLabel
    title: str = ""
