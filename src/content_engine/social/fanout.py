"""Social fan-out — promotional copy + posting for every platform.

Each platform is an independent task: generate copy, strip markdown links,
post. Tasks run on a small thread pool; a failure in one never affects the
others, and every task yields a ``SocialPostOutcome``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from src.common.errors import SocialPostFailed
from src.common.logging import setup_logging
from src.common.models import PublishedArticle, SocialPlatform
from src.content_engine.content_writer.writer import ContentWriter

from .models import SocialPostOutcome
from .platforms import BasePoster, strip_markdown_links

logger = setup_logging(module_name="social.fanout")

PLATFORMS = [SocialPlatform.TWITTER, SocialPlatform.FACEBOOK, SocialPlatform.INSTAGRAM]


class SocialFanout:
    """Posts one article to all configured social platforms."""

    def __init__(
        self,
        writer: ContentWriter,
        posters: dict[SocialPlatform, BasePoster],
        max_workers: int = 3,
    ):
        self.writer = writer
        self.posters = posters
        self.max_workers = max(1, max_workers)

    def run(self, article: PublishedArticle, summary: str) -> list[SocialPostOutcome]:
        """Fan out to every platform and collect outcomes in platform order."""
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="fanout"
        ) as pool:
            futures = [
                pool.submit(self.post_to_platform, platform, article, summary)
                for platform in PLATFORMS
            ]
            outcomes = [future.result() for future in futures]

        succeeded = sum(1 for outcome in outcomes if outcome.success)
        logger.info("Social fan-out complete: %d/%d platforms", succeeded, len(outcomes))
        return outcomes

    def post_to_platform(
        self,
        platform: SocialPlatform,
        article: PublishedArticle,
        summary: str,
    ) -> SocialPostOutcome:
        poster = self.posters.get(platform)
        if poster is None or not poster.is_configured:
            logger.warning("%s is not configured, skipping", platform.value)
            return SocialPostOutcome(platform, success=False, error="not configured")

        text = self.writer.generate_social_copy(
            platform, article.title, summary, article.public_url
        )
        if not text:
            return SocialPostOutcome(platform, success=False, error="copy generation failed")

        text = strip_markdown_links(text)
        try:
            post_id = poster.post(text, article.image_url)
        except SocialPostFailed as exc:
            logger.error("Error posting to %s: %s", platform.value, exc)
            return SocialPostOutcome(platform, success=False, text=text, error=str(exc))

        return SocialPostOutcome(platform, success=True, text=text, post_id=post_id)
