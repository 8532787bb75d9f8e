"""Shared Pydantic data models for the autoblog engine.

These models are the contracts passed between pipeline stages:
topic -> draft -> published article -> social posts / newsletter.
They live for a single run and are never persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# === Enums ===

class SocialPlatform(str, Enum):
    """Closed set of social networks the fan-out posts to."""
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"


class SendMode(str, Enum):
    """Terminal action of a newsletter dispatch."""
    DRAFT = "draft"
    TEST = "test"
    LIVE = "live"


class SlotPosition(str, Enum):
    """Structural anchors for promotion banners, in application order."""
    AFTER_OUTLINE = "after_outline"
    MIDDLE = "middle"
    END = "end"


# === Links ===

class InternalLink(BaseModel):
    """Link to an already published article on the same blog."""
    url: str
    text: str


class ExternalLink(BaseModel):
    """Link to an authoritative third-party page."""
    url: str
    text: str


class PromotionSlot(BaseModel):
    """A product banner bound to one structural position."""
    position: SlotPosition
    link: str = ""
    image: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.link and self.image)


# === Article lifecycle ===

class ArticleDraft(BaseModel):
    """Generated-but-not-yet-published article content."""
    title: str
    body_html: Optional[str] = None
    meta_description: Optional[str] = None
    seo_keywords: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    image_prompt: Optional[str] = None


class PublishedArticle(BaseModel):
    """Article accepted by the blog platform."""
    title: str
    html_body: str
    image_url: str
    public_url: str
    handle: str = ""
    article_id: Optional[int] = None


class SocialPost(BaseModel):
    """Platform-specific promotional copy."""
    platform: SocialPlatform
    text: str


class NewsletterCampaign(BaseModel):
    """Newsletter built for one article, plus what happened to it."""
    subject_line: str
    preview_text: str = ""
    html: str
    send_mode: SendMode = SendMode.DRAFT
    campaign_id: str = ""
    sent: bool = False
