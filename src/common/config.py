"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
The resulting ``Settings`` object is frozen: build it once at startup with
``Settings.load()`` and hand it to each component.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


def _split_csv(value):
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class LLMSettings(BaseModel):
    """LLM provider settings. Web search always goes through OpenAI."""
    model_config = {"frozen": True}

    provider: str = "openai"  # openai or anthropic
    api_key: str = ""
    model: str = "gpt-5.1"
    search_model: str = "gpt-5.1"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    niche: str = "Running"
    fallback_link_domains: list[str] = Field(default_factory=lambda: [
        "runnersworld.com",
        "active.com",
        "verywellfit.com",
        "outsideonline.com",
        "trainingpeaks.com",
        "strava.com/blog",
        "podiumrunner.com",
    ])

    @field_validator("fallback_link_domains", mode="before")
    @classmethod
    def _split_domains(cls, value):
        return _split_csv(value)

    @field_validator("provider")
    @classmethod
    def _check_provider(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("openai", "anthropic"):
            raise ValueError(f"provider must be openai or anthropic, got {value!r}")
        return value


class ShopifySettings(BaseModel):
    """Storefront blog (Shopify Admin API) settings."""
    model_config = {"frozen": True}

    shop_url: str = ""
    blog_id: str = ""
    access_token: str = ""
    api_version: str = "2023-10"
    shop_domain: str = ""
    blog_handle: str = "news"
    author: str = "author"
    signup_form_html: str = '<div class="klaviyo-form-R4UQwA"></div>'
    internal_link_pool: int = 20


class ImageSettings(BaseModel):
    """fal.ai image generation settings."""
    model_config = {"frozen": True}

    api_key: str = ""
    model: str = "fal-ai/flux-pro"
    image_size: str = "landscape_16_9"
    poll_interval_seconds: float = 2.0
    max_polls: int = 300


class PromotionSettings(BaseModel):
    """Product banner slots. A slot needs both a link and an image."""
    model_config = {"frozen": True}

    after_outline_link: str = ""
    after_outline_image: str = ""
    middle_link: str = ""
    middle_image: str = ""
    end_link: str = ""
    end_image: str = ""


class SocialSettings(BaseModel):
    """Credentials for X/Twitter, Facebook and Instagram."""
    model_config = {"frozen": True}

    twitter_consumer_key: str = ""
    twitter_consumer_secret: str = ""
    twitter_access_token: str = ""
    twitter_access_secret: str = ""
    facebook_page_access_token: str = ""
    facebook_page_id: str = ""
    instagram_business_account_id: str = ""
    graph_api_version: str = "v17.0"
    max_workers: int = 3


class NewsletterSettings(BaseModel):
    """Mailchimp newsletter settings."""
    model_config = {"frozen": True}

    enabled: bool = False
    api_key: str = ""
    audience_id: str = ""
    send_mode: str = "draft"  # draft, test or live
    test_emails: list[str] = Field(default_factory=list)
    from_name: str = "RunV"
    reply_to: str = ""

    @field_validator("test_emails", mode="before")
    @classmethod
    def _split_emails(cls, value):
        return _split_csv(value)

    @field_validator("send_mode")
    @classmethod
    def _check_send_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("draft", "test", "live"):
            raise ValueError(f"send_mode must be draft, test or live, got {value!r}")
        return value


class BrandSettings(BaseModel):
    """Brand styling used by the newsletter template."""
    model_config = {"frozen": True}

    logo_url: str = "https://runv.app/wp-content/uploads/2025/06/runV-8-1.png"
    primary_color: str = "#2BEBE2"
    cta_color: str = "#FE6F28"
    website_url: str = "https://runv.app"
    instagram_url: str = ""
    facebook_url: str = ""
    tagline: str = "Your Running & Fitness Update"


class ScheduleSettings(BaseModel):
    """Scheduler, server and topic queue settings."""
    model_config = {"frozen": True}

    articles_per_day: float = Field(default=1, gt=0)
    port: int = 3000
    topics_file: str = str(DATA_DIR / "articles_topics.txt")
    http_timeout_seconds: float = 60.0


class Settings(BaseModel):
    """Top-level application settings."""
    model_config = {"frozen": True}

    llm: LLMSettings = Field(default_factory=LLMSettings)
    shopify: ShopifySettings = Field(default_factory=ShopifySettings)
    image: ImageSettings = Field(default_factory=ImageSettings)
    promotion: PromotionSettings = Field(default_factory=PromotionSettings)
    social: SocialSettings = Field(default_factory=SocialSettings)
    newsletter: NewsletterSettings = Field(default_factory=NewsletterSettings)
    brand: BrandSettings = Field(default_factory=BrandSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)

    @classmethod
    def load(
        cls,
        settings_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Settings:
        """Load settings from YAML, then apply environment overrides.

        Args:
            settings_path: YAML file (default: config/settings.yaml). Missing
                file means defaults.
            env: Environment mapping (default: os.environ).

        Returns:
            Frozen Settings instance.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            # An empty section ("promotion:") loads as None
            data = {name: value for name, value in data.items() if value is not None}

        env = os.environ if env is None else env
        for var, (section, key) in ENV_OVERRIDES.items():
            value = env.get(var)
            if value is None or value == "":
                continue
            section_data = data.get(section) or {}
            section_data[key] = value
            data[section] = section_data

        return cls(**data)


# Environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "OPENAI_API_KEY": ("llm", "api_key"),
    "OPENAI_MODEL": ("llm", "model"),
    "OPENAI_SEARCH_MODEL": ("llm", "search_model"),
    "LLM_PROVIDER": ("llm", "provider"),
    "ANTHROPIC_API_KEY": ("llm", "anthropic_api_key"),
    "ANTHROPIC_MODEL": ("llm", "anthropic_model"),
    "BLOG_NICHE": ("llm", "niche"),
    "EXTERNAL_LINK_DOMAINS": ("llm", "fallback_link_domains"),
    "SHOP_URL": ("shopify", "shop_url"),
    "BLOG_ID": ("shopify", "blog_id"),
    "ACCESS_TOKEN": ("shopify", "access_token"),
    "SHOP_DOMAIN": ("shopify", "shop_domain"),
    "BLOG_HANDLE": ("shopify", "blog_handle"),
    "BLOG_AUTHOR": ("shopify", "author"),
    "SIGNUP_FORM_HTML": ("shopify", "signup_form_html"),
    "FAL_API_KEY": ("image", "api_key"),
    "FAL_MODEL": ("image", "model"),
    "AFTER_OUTLINE_PRODUCT_LINK": ("promotion", "after_outline_link"),
    "AFTER_OUTLINE_PRODUCT_IMAGE": ("promotion", "after_outline_image"),
    "MIDDLE_PRODUCT_LINK": ("promotion", "middle_link"),
    "MIDDLE_PRODUCT_IMAGE": ("promotion", "middle_image"),
    "END_PRODUCT_LINK": ("promotion", "end_link"),
    "END_PRODUCT_IMAGE": ("promotion", "end_image"),
    "TWITTER_CONSUMER_KEY": ("social", "twitter_consumer_key"),
    "TWITTER_CONSUMER_SECRET": ("social", "twitter_consumer_secret"),
    "TWITTER_ACCESS_TOKEN_KEY": ("social", "twitter_access_token"),
    "TWITTER_ACCESS_TOKEN_SECRET": ("social", "twitter_access_secret"),
    "FACEBOOK_PAGE_ACCESS_TOKEN": ("social", "facebook_page_access_token"),
    "FACEBOOK_PAGE_ID": ("social", "facebook_page_id"),
    "INSTAGRAM_BUSINESS_ACCOUNT_ID": ("social", "instagram_business_account_id"),
    "NEWSLETTER_ENABLED": ("newsletter", "enabled"),
    "MAILCHIMP_API_KEY": ("newsletter", "api_key"),
    "MAILCHIMP_AUDIENCE_ID": ("newsletter", "audience_id"),
    "NEWSLETTER_SEND_MODE": ("newsletter", "send_mode"),
    "NEWSLETTER_TEST_EMAILS": ("newsletter", "test_emails"),
    "NEWSLETTER_FROM_NAME": ("newsletter", "from_name"),
    "NEWSLETTER_REPLY_TO": ("newsletter", "reply_to"),
    "BRAND_LOGO_URL": ("brand", "logo_url"),
    "BRAND_PRIMARY_COLOR": ("brand", "primary_color"),
    "BRAND_CTA_COLOR": ("brand", "cta_color"),
    "BRAND_WEBSITE_URL": ("brand", "website_url"),
    "BRAND_INSTAGRAM_URL": ("brand", "instagram_url"),
    "BRAND_FACEBOOK_URL": ("brand", "facebook_url"),
    "BRAND_TAGLINE": ("brand", "tagline"),
    "ARTICLES_PER_DAY": ("schedule", "articles_per_day"),
    "PORT": ("schedule", "port"),
    "TOPICS_FILE": ("schedule", "topics_file"),
}
