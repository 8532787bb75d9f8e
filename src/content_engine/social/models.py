"""Data models for the social fan-out module."""

from __future__ import annotations

from dataclasses import dataclass

from src.common.models import SocialPlatform


@dataclass
class SocialPostOutcome:
    """Result of posting to one platform."""
    platform: SocialPlatform
    success: bool
    text: str = ""
    post_id: str = ""
    error: str = ""
