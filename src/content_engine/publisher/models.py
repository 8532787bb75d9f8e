"""Data models for the publisher module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from src.common.config import Settings
from src.common.models import (
    NewsletterCampaign,
    PromotionSlot,
    PublishedArticle,
    SlotPosition,
)
from src.content_engine.social.models import SocialPostOutcome


PROMOTION_ALT_TEXT = "Product Promotion"


@dataclass
class PostProcessingConfig:
    """Configuration for the HTML post-processing steps."""
    slots: list[PromotionSlot] = field(default_factory=list)
    signup_form_html: str = ""
    min_paragraphs_for_links: int = 3
    max_external_links: int = 2
    external_link_positions: tuple[float, ...] = (0.4, 0.7)

    @classmethod
    def from_settings(cls, settings: Settings) -> PostProcessingConfig:
        promo = settings.promotion
        return cls(
            slots=[
                PromotionSlot(
                    position=SlotPosition.AFTER_OUTLINE,
                    link=promo.after_outline_link,
                    image=promo.after_outline_image,
                ),
                PromotionSlot(
                    position=SlotPosition.MIDDLE,
                    link=promo.middle_link,
                    image=promo.middle_image,
                ),
                PromotionSlot(
                    position=SlotPosition.END,
                    link=promo.end_link,
                    image=promo.end_image,
                ),
            ],
            signup_form_html=settings.shopify.signup_form_html,
        )


class RunStage(str, Enum):
    """Where a pipeline run stopped."""
    NO_TOPIC = "no_topic"
    TITLE_FAILED = "title_failed"
    BODY_FAILED = "body_failed"
    META_FAILED = "meta_failed"
    IMAGE_FAILED = "image_failed"
    PUBLISH_REJECTED = "publish_rejected"
    COMPLETED = "completed"


@dataclass
class PipelineResult:
    """Outcome of a single pipeline run."""
    topic: str = ""
    stage: RunStage = RunStage.NO_TOPIC
    requeued: bool = False
    article: Optional[PublishedArticle] = None
    social_outcomes: list[SocialPostOutcome] = field(default_factory=list)
    newsletter: Optional[NewsletterCampaign] = None
    newsletter_error: str = ""

    @property
    def published(self) -> bool:
        return self.article is not None
