"""Tests for shared configuration, errors and models."""

import logging

import pytest
from pydantic import ValidationError

from src.common.config import Settings
from src.common.errors import (
    ContentEngineError,
    NewsletterStepFailed,
    NoTestRecipients,
    PublishRejected,
    SocialPostFailed,
)
from src.common.logging import setup_logging
from src.common.models import PromotionSlot, SlotPosition


class TestSettingsLoad:
    def test_defaults_without_yaml_or_env(self, tmp_path):
        settings = Settings.load(tmp_path / "missing.yaml", env={})
        assert settings.llm.niche == "Running"
        assert settings.shopify.api_version == "2023-10"
        assert settings.shopify.blog_handle == "news"
        assert settings.image.model == "fal-ai/flux-pro"
        assert settings.newsletter.send_mode == "draft"
        assert settings.schedule.port == 3000

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "llm:\n  niche: Cycling\nschedule:\n  articles_per_day: 3\n",
            encoding="utf-8",
        )
        settings = Settings.load(path, env={})
        assert settings.llm.niche == "Cycling"
        assert settings.schedule.articles_per_day == 3

    def test_env_overrides_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("schedule:\n  port: 8080\n", encoding="utf-8")
        settings = Settings.load(
            path,
            env={
                "PORT": "9000",
                "SHOP_URL": "https://shop.myshopify.com",
                "TWITTER_ACCESS_TOKEN_KEY": "tok",
                "NEWSLETTER_SEND_MODE": "LIVE",
            },
        )
        assert settings.schedule.port == 9000
        assert settings.shopify.shop_url == "https://shop.myshopify.com"
        assert settings.social.twitter_access_token == "tok"
        assert settings.newsletter.send_mode == "live"

    def test_empty_env_value_is_ignored(self, tmp_path):
        settings = Settings.load(tmp_path / "none.yaml", env={"BLOG_HANDLE": ""})
        assert settings.shopify.blog_handle == "news"

    def test_comma_separated_lists(self, tmp_path):
        settings = Settings.load(
            tmp_path / "none.yaml",
            env={
                "NEWSLETTER_TEST_EMAILS": "a@runv.app, b@runv.app,,",
                "EXTERNAL_LINK_DOMAINS": "runnersworld.com,strava.com/blog",
            },
        )
        assert settings.newsletter.test_emails == ["a@runv.app", "b@runv.app"]
        assert settings.llm.fallback_link_domains == ["runnersworld.com", "strava.com/blog"]

    def test_invalid_send_mode(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings.load(tmp_path / "none.yaml", env={"NEWSLETTER_SEND_MODE": "blast"})

    def test_llm_provider(self, tmp_path):
        settings = Settings.load(
            tmp_path / "none.yaml",
            env={"LLM_PROVIDER": "Anthropic", "ANTHROPIC_API_KEY": "sk-ant"},
        )
        assert settings.llm.provider == "anthropic"
        assert settings.llm.anthropic_api_key == "sk-ant"
        with pytest.raises(ValidationError):
            Settings.load(tmp_path / "none.yaml", env={"LLM_PROVIDER": "gemini"})

    def test_empty_yaml_section_with_env_override(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("promotion:\nbrand:\n", encoding="utf-8")
        settings = Settings.load(path, env={"END_PRODUCT_LINK": "https://runv.app/shoes"})
        assert settings.promotion.end_link == "https://runv.app/shoes"
        assert settings.brand.website_url == "https://runv.app"

    def test_articles_per_day_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings.load(tmp_path / "none.yaml", env={"ARTICLES_PER_DAY": "0"})

    def test_settings_are_frozen(self, settings):
        with pytest.raises(ValidationError):
            settings.llm.niche = "Swimming"


class TestErrors:
    def test_hierarchy(self):
        for exc in (
            PublishRejected("no"),
            SocialPostFailed("twitter", "no"),
            NewsletterStepFailed("create", "no"),
            NoTestRecipients(),
        ):
            assert isinstance(exc, ContentEngineError)

    def test_publish_rejected_carries_response(self):
        exc = PublishRejected("rejected", status_code=422, body="bad tags")
        assert exc.status_code == 422
        assert exc.body == "bad tags"

    def test_step_and_platform_tags(self):
        assert SocialPostFailed("instagram", "boom").platform == "instagram"
        assert NewsletterStepFailed("content", "boom").step == "content"
        assert NoTestRecipients().step == "test_send"


class TestModels:
    def test_promotion_slot_requires_link_and_image(self):
        assert PromotionSlot(position=SlotPosition.END, link="l", image="i").is_configured
        assert not PromotionSlot(position=SlotPosition.END, link="l").is_configured


class TestLogging:
    def test_no_duplicate_handlers(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        first = setup_logging(module_name="tests.logging")
        second = setup_logging(module_name="tests.logging")
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.INFO

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        logger = setup_logging(module_name="tests.logging.debug")
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert setup_logging(module_name="tests.logging.unknown").level == logging.INFO

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        logger = setup_logging(logging.WARNING, module_name="tests.logging.explicit")
        assert logger.level == logging.WARNING
