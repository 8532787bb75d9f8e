"""Full publishing pipeline — topic to published article plus promotion.

Orchestrates the complete flow:
topic -> ContentWriter -> PostProcessor -> image -> Shopify -> social + newsletter

Requeue policy: a topic is put back at the front of the queue when the
title, body or meta description cannot be generated. Image and publish
failures end the run without requeue, and social/newsletter failures only
affect their own step.

Usage:
    pipeline = ArticlePipeline.from_settings(Settings.load())
    result = pipeline.run()
"""

from __future__ import annotations

from typing import Optional

from src.common.config import Settings
from src.common.errors import (
    EmptyQueue,
    ImageGenerationFailed,
    NewsletterStepFailed,
    PublishRejected,
)
from src.common.logging import setup_logging
from src.common.models import ArticleDraft, PublishedArticle
from src.content_engine.content_writer.writer import ContentWriter
from src.content_engine.image_producer.fal import FalImageProducer
from src.content_engine.newsletter.dispatcher import NewsletterDispatcher
from src.content_engine.social.fanout import SocialFanout
from src.content_engine.social.platforms import build_posters
from src.content_engine.topic_queue.queue import TopicQueue

from .link_finder import ExternalLinkFinder
from .models import PipelineResult, PostProcessingConfig, RunStage
from .processor import PostProcessor, select_internal_links
from .shopify import ShopifyClient

logger = setup_logging(module_name="publisher.pipeline")


class ArticlePipeline:
    """End-to-end pipeline from a queued topic to a promoted article.

    Steps:
    1. Take a topic from the queue (or generate a title)
    2. Generate body, meta description, image prompt and keywords
    3. Post-process the HTML (markup, banners, external links)
    4. Generate the featured image
    5. Publish to Shopify
    6. Fan out to social platforms
    7. Dispatch the newsletter
    """

    def __init__(
        self,
        settings: Settings,
        queue: TopicQueue,
        writer: ContentWriter,
        processor: PostProcessor,
        link_finder: ExternalLinkFinder,
        shopify: ShopifyClient,
        image_producer: FalImageProducer,
        fanout: SocialFanout,
        newsletter: NewsletterDispatcher,
    ):
        self.settings = settings
        self.queue = queue
        self.writer = writer
        self.processor = processor
        self.link_finder = link_finder
        self.shopify = shopify
        self.image_producer = image_producer
        self.fanout = fanout
        self.newsletter = newsletter

    @classmethod
    def from_settings(cls, settings: Settings) -> ArticlePipeline:
        """Wire every component from one Settings object."""
        writer = ContentWriter(settings)
        processor = PostProcessor(PostProcessingConfig.from_settings(settings))
        return cls(
            settings=settings,
            queue=TopicQueue(settings.schedule.topics_file),
            writer=writer,
            processor=processor,
            link_finder=ExternalLinkFinder(writer),
            shopify=ShopifyClient(settings, processor=processor),
            image_producer=FalImageProducer(settings),
            fanout=SocialFanout(
                writer, build_posters(settings), max_workers=settings.social.max_workers
            ),
            newsletter=NewsletterDispatcher(settings, writer),
        )

    def run(self, topic: Optional[str] = None) -> PipelineResult:
        """Execute one pipeline run.

        Args:
            topic: Use this topic instead of taking one from the queue. A
                topic given here is never requeued.

        Returns:
            PipelineResult describing where the run stopped.
        """
        from_queue = topic is None
        if from_queue:
            topic = self._next_topic()
        topic = (topic or "").strip()
        result = PipelineResult(topic=topic)

        # Step 1: Title
        title = topic or self.writer.generate_title()
        if not title:
            logger.error("Failed to generate article title")
            result.stage = RunStage.TITLE_FAILED
            return result
        logger.info("Step 1: Writing article: %s", title)

        # Step 2: Body with internal links
        internal_links = select_internal_links(
            self.shopify.fetch_internal_links(), self.settings.shopify.internal_link_pool
        )
        body = self.writer.generate_body(title, internal_links)
        if not body:
            logger.error("Failed to generate article content")
            return self._abort(result, RunStage.BODY_FAILED, from_queue)

        meta_description = self.writer.generate_meta_description(title)
        if not meta_description:
            logger.error("Failed to generate meta description")
            return self._abort(result, RunStage.META_FAILED, from_queue)

        image_prompt = self.writer.generate_image_prompt(title)
        if not image_prompt:
            logger.warning("Image prompt generation failed, using title as prompt")
            image_prompt = title

        keywords = self.writer.generate_seo_keywords(title)
        if keywords is None:
            logger.warning("SEO keyword generation failed, publishing without tags")
            keywords = []

        draft = ArticleDraft(
            title=title,
            body_html=body,
            meta_description=meta_description,
            seo_keywords=keywords,
            image_prompt=image_prompt,
        )

        # Step 3: Post-process
        logger.info("Step 3: Post-processing article HTML...")
        external_links = self.link_finder.find(title)
        html = self.processor.process(body, external_links)

        # Step 4: Featured image
        logger.info("Step 4: Generating featured image...")
        try:
            image_url = self.image_producer.produce_featured_image(image_prompt)
        except ImageGenerationFailed as exc:
            logger.error("Failed to generate image, article not published: %s", exc)
            result.stage = RunStage.IMAGE_FAILED
            return result

        # Step 5: Publish
        logger.info("Step 5: Publishing to Shopify...")
        try:
            article = self.shopify.publish(draft, html, image_url, keywords)
        except PublishRejected as exc:
            logger.error("%s %s", exc, exc.body[:500])
            result.stage = RunStage.PUBLISH_REJECTED
            return result
        result.article = article
        result.stage = RunStage.COMPLETED

        # Step 6: Social fan-out
        summary = self.writer.generate_summary(title, html)
        draft.summary = summary
        if summary:
            logger.info("Step 6: Posting to social media...")
            result.social_outcomes = self.fanout.run(article, summary)
        else:
            logger.error("Failed to generate article summary, skipping social media")

        # Step 7: Newsletter
        self._send_newsletter(article, result)

        logger.info("Pipeline complete: %s", article.public_url)
        return result

    def _next_topic(self) -> Optional[str]:
        try:
            return self.queue.dequeue()
        except EmptyQueue:
            logger.info("No topics in queue, generating a title")
            return None

    def _abort(self, result: PipelineResult, stage: RunStage, from_queue: bool) -> PipelineResult:
        result.stage = stage
        if from_queue and result.topic:
            self.queue.requeue(result.topic)
            result.requeued = True
            logger.info("Topic requeued: %s", result.topic)
        return result

    def _send_newsletter(self, article: PublishedArticle, result: PipelineResult) -> None:
        if not self.settings.newsletter.enabled:
            logger.info("Newsletter disabled, skipping")
            return
        logger.info("Step 7: Sending newsletter...")
        try:
            result.newsletter = self.newsletter.dispatch(article)
        except NewsletterStepFailed as exc:
            logger.error("Newsletter failed at %s: %s", exc.step, exc)
            result.newsletter_error = str(exc)
