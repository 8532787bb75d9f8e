"""Shared test fixtures for the autoblog engine."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings
from src.common.models import PublishedArticle


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def topics_file(tmp_path) -> Path:
    """Path to a (not yet created) topic queue file."""
    return tmp_path / "articles_topics.txt"


@pytest.fixture
def settings(topics_file) -> Settings:
    """Fully configured settings with fake credentials."""
    return Settings(
        llm={"api_key": "sk-test", "model": "gpt-test", "search_model": "gpt-search"},
        shopify={
            "shop_url": "https://runv-store.myshopify.com",
            "blog_id": "12345",
            "access_token": "shpat_test",
            "shop_domain": "runv.app",
        },
        image={"api_key": "fal-test", "poll_interval_seconds": 0, "max_polls": 5},
        promotion={
            "after_outline_link": "https://runv.app/products/shoe",
            "after_outline_image": "https://cdn.runv.app/shoe.png",
        },
        social={
            "twitter_consumer_key": "ck",
            "twitter_consumer_secret": "cs",
            "twitter_access_token": "at",
            "twitter_access_secret": "as",
            "facebook_page_access_token": "fb-token",
            "facebook_page_id": "page-1",
            "instagram_business_account_id": "ig-1",
        },
        newsletter={
            "enabled": True,
            "api_key": "abc123-us21",
            "audience_id": "aud-1",
            "send_mode": "draft",
            "test_emails": ["coach@runv.app"],
        },
        schedule={"topics_file": str(topics_file), "http_timeout_seconds": 5},
    )


@pytest.fixture
def article() -> PublishedArticle:
    """A published article as returned by the Shopify client."""
    return PublishedArticle(
        title="Best trail shoes 2024",
        html_body=(
            "<p>Trail running puts different demands on your feet than road running.</p>"
            "<h2>What to look for</h2><p>Grip, protection and a secure fit matter most "
            "when the ground gets technical and the descents get steep.</p>"
        ),
        image_url="https://fal.media/files/shoe.png",
        public_url="https://runv.app/blogs/news/best-trail-shoes-2024",
        handle="best-trail-shoes-2024",
        article_id=987,
    )


def make_response(status_code: int = 200, json_data=None, text: str | None = None):
    """Build a MagicMock that looks like a requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    if json_data is not None:
        response.json.return_value = json_data
        response.text = text if text is not None else "{json}"
    else:
        response.json.side_effect = ValueError("no json")
        response.text = text or ""
    response.content = b"image-bytes"
    return response


@pytest.fixture
def response_factory():
    return make_response
