"""Data models for the content writer module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class GreetingStyle(str, Enum):
    """Newsletter intro voices, picked at random per run."""
    CASUAL_FRIEND = "casual_friend"
    ENTHUSIASTIC_COACH = "enthusiastic_coach"
    WARM_NEIGHBOR = "warm_neighbor"
    FELLOW_RUNNER = "fellow_runner"
    MOTIVATIONAL = "motivational"


GREETING_DESCRIPTIONS: dict[GreetingStyle, str] = {
    GreetingStyle.CASUAL_FRIEND: "like texting a running buddy",
    GreetingStyle.ENTHUSIASTIC_COACH: "like an excited running coach",
    GreetingStyle.WARM_NEIGHBOR: "like a friendly neighbor who loves running",
    GreetingStyle.FELLOW_RUNNER: "like a fellow runner sharing exciting news",
    GreetingStyle.MOTIVATIONAL: "like a supportive teammate cheering you on",
}


@dataclass
class WriterConfig:
    """Configuration for the content writer."""
    provider: Optional[LLMProvider] = None  # None = use default from settings
    model: str = ""  # Empty = use default from settings
    search_model: str = ""
    niche: str = ""  # Empty = use default from settings
    keyword_count: int = 5
    tweet_limit: int = 280
    newsletter_content_chars: int = 3000
