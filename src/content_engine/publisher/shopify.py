"""Shopify blog client — internal link candidates and article publishing.

Talks to the Shopify Admin REST API with a private-app access token.

Usage:
    client = ShopifyClient(settings)
    links = client.fetch_internal_links()
    article = client.publish(draft, html, image_url)
"""

from __future__ import annotations

from datetime import datetime, timezone

import requests

from src.common.config import Settings
from src.common.errors import PublishRejected
from src.common.logging import setup_logging
from src.common.models import ArticleDraft, InternalLink, PublishedArticle

from .processor import PostProcessor

logger = setup_logging(module_name="publisher.shopify")


class ShopifyClient:
    """Creates and lists articles of one Shopify blog."""

    def __init__(
        self,
        settings: Settings,
        processor: PostProcessor | None = None,
        session: requests.Session | None = None,
    ):
        self.shop = settings.shopify
        self.timeout = settings.schedule.http_timeout_seconds
        self.processor = processor or PostProcessor()
        self.session = session or requests.Session()

    @property
    def articles_url(self) -> str:
        return (
            f"{self.shop.shop_url.rstrip('/')}/admin/api/{self.shop.api_version}"
            f"/blogs/{self.shop.blog_id}/articles.json"
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.shop.access_token,
        }

    @property
    def shop_domain(self) -> str:
        """Public storefront domain; derived from the shop URL if not set."""
        if self.shop.shop_domain:
            return self.shop.shop_domain
        return (
            self.shop.shop_url.replace("https://", "")
            .replace("http://", "")
            .rstrip("/")
            .replace(".myshopify.com", ".com")
        )

    def public_url(self, handle: str) -> str:
        return f"https://{self.shop_domain}/blogs/{self.shop.blog_handle}/{handle}"

    def fetch_internal_links(self, max_links: int | None = None) -> list[InternalLink]:
        """List recent published articles as internal link candidates.

        Any failure is logged and yields an empty list.
        """
        limit = max_links or self.shop.internal_link_pool
        try:
            response = self.session.get(
                self.articles_url,
                headers=self.headers,
                params={"limit": limit, "published_status": "published"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            articles = response.json().get("articles") or []
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching internal links: %s", exc)
            return []

        links = [
            InternalLink(url=self.public_url(article["handle"]), text=article["title"])
            for article in articles
            if article.get("handle") and article.get("title")
        ]
        if not links:
            logger.info("No existing articles found for internal linking")
        else:
            logger.info("Found %d internal links available", len(links))
        return links

    def publish(
        self,
        draft: ArticleDraft,
        html: str,
        image_url: str,
        tags: list[str] | None = None,
    ) -> PublishedArticle:
        """Create the article and return its public URL.

        Raises:
            PublishRejected: On a transport error or any status other than 201.
        """
        body_html = self.processor.append_signup_form(html)
        payload = {
            "article": {
                "blog_id": self.shop.blog_id,
                "title": draft.title,
                "author": self.shop.author,
                "body_html": body_html,
                "summary_html": draft.meta_description or "",
                "published_at": datetime.now(timezone.utc).isoformat(),
                "tags": ", ".join(draft.seo_keywords if tags is None else tags),
                "image": {"src": image_url},
            }
        }

        try:
            response = self.session.post(
                self.articles_url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PublishRejected(f"Error creating article on Shopify: {exc}") from exc

        if response.status_code != 201:
            raise PublishRejected(
                f"Shopify rejected article (HTTP {response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

        article = response.json().get("article") or {}
        handle = article.get("handle", "")
        public_url = self.public_url(handle)
        logger.info("Article created on Shopify: %s", public_url)

        return PublishedArticle(
            title=draft.title,
            html_body=html,
            image_url=image_url,
            public_url=public_url,
            handle=handle,
            article_id=article.get("id"),
        )
