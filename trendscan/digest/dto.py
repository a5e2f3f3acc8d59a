"""
Digest DTOs.

Pydantic v2 models for the LLM response contract:

    {"trends": [{title, category, summary, why_it_matters, content_angle,
                 script, sources: [{url, platform, title}], engagement_score}]}

Category values come from trendscan.core.enums so the DB and the response
contract never drift.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from trendscan.core.enums import ContentStyle, TrendCategory


class TrendSourceRef(BaseModel):
    """A link backing an analysed trend."""
    model_config = ConfigDict(extra="ignore")

    url: str = ""
    platform: str = ""
    title: str = ""


class TrendAnalysis(BaseModel):
    """
    One analysed trend, as returned by the summarization model.

    `content_angle` also accepts the legacy `tiktok_angle` key. Category is
    matched case-insensitively and a null `sources` reads as no sources.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str = Field(min_length=1)
    category: TrendCategory
    summary: str
    why_it_matters: str
    content_angle: str = Field(validation_alias=AliasChoices("content_angle", "tiktok_angle"))
    script: str
    sources: list[TrendSourceRef] = Field(default_factory=list)
    engagement_score: int = Field(ge=0)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("sources", mode="before")
    @classmethod
    def _null_sources(cls, value):
        return [] if value is None else value


class ScanOptions(BaseModel):
    """
    Caller preferences for one scan.

    Empty lists mean "use the defaults" (default subreddits, no topic boost,
    no personal authors).
    """
    subreddits: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    trusted_authors: list[str] = Field(default_factory=list)
    content_style: ContentStyle = ContentStyle.TIKTOK
