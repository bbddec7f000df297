"""
Input contract for articles handed to the trending engine.

Articles arrive from an external ingestion layer as loosely shaped records
(camelCase keys, nested ``source`` objects, string timestamps). The
``Article`` model pins down the fields the engine relies on so the
scoring code never has to probe for optional attributes.
"""

import hashlib
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ArticleValidationError
from .time import parse_timestamp

DEFAULT_SOURCE_CREDIBILITY = 0.5


class Article(BaseModel):
    """A news article as seen by the trending engine."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = Field(default=None, description="Article identifier")
    published_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("published_at", "publishedAt"),
        description="Publication timestamp (UTC)"
    )
    title: str = Field(default="", description="Headline")
    text: str = Field(
        default="",
        validation_alias=AliasChoices("text", "description", "summary"),
        description="Body, description or summary"
    )
    source_name: str = Field(
        default="Unknown",
        validation_alias=AliasChoices("source_name", "sourceName")
    )
    source_credibility: float = Field(
        default=DEFAULT_SOURCE_CREDIBILITY,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("source_credibility", "sourceCredibility"),
        description="Precomputed trust weight of the source"
    )
    link: Optional[str] = Field(default=None, validation_alias=AliasChoices("link", "url"))

    @model_validator(mode="before")
    @classmethod
    def flatten_source(cls, data: Any) -> Any:
        """Accept the nested ``source: {name, credibility}`` shape."""
        if isinstance(data, Mapping) and isinstance(data.get("source"), Mapping):
            data = dict(data)
            source = data.pop("source")
            if source.get("name") is not None:
                data.setdefault("source_name", source["name"])
            if source.get("credibility") is not None:
                data.setdefault("source_credibility", source["credibility"])
        return data

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("published_at", mode="before")
    @classmethod
    def validate_published_at(cls, v):
        parsed = parse_timestamp(v)
        if parsed is None:
            raise ValueError("published_at is missing or unparseable")
        return parsed

    @field_validator("title", "text", "source_name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return ""
        return str(v)

    @model_validator(mode="after")
    def validate_content(self) -> "Article":
        """Require some text and fill in a stable id when none was given."""
        if not self.title.strip() and not self.text.strip():
            raise ValueError("article has neither title nor text")
        if self.id is None:
            digest = hashlib.md5(
                f"{self.link or ''}|{self.title}|{self.published_at.isoformat()}".encode("utf-8")
            ).hexdigest()
            object.__setattr__(self, "id", digest[:16])
        return self

    @property
    def content(self) -> str:
        """Text used for keyword extraction."""
        return f"{self.title} {self.text}".strip()


def coerce_article(raw: Union[Article, Dict[str, Any]]) -> Article:
    """
    Validate a raw record against the article contract.

    Raises:
        ArticleValidationError: if the record is malformed
    """
    if isinstance(raw, Article):
        return raw

    article_id = raw.get("id") if isinstance(raw, Mapping) else None
    if not isinstance(raw, Mapping):
        raise ArticleValidationError(f"Article must be a mapping, got {type(raw).__name__}")

    try:
        return Article.model_validate(raw)
    except ValidationError as e:
        raise ArticleValidationError(f"Invalid article {article_id!r}: {e.error_count()} error(s)", article_id) from e
