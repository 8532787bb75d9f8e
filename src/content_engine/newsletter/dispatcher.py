"""Newsletter dispatcher — email for a published article, sent via Mailchimp.

Steps: build HTML + subject -> create campaign -> set content -> terminal
action chosen by send mode:
- draft: leave the campaign unsent for manual review
- test:  send to the configured test addresses
- live:  send to the whole audience
"""

from __future__ import annotations

import html as html_lib
from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.common.config import Settings
from src.common.errors import NewsletterStepFailed, NoTestRecipients
from src.common.logging import setup_logging
from src.common.models import NewsletterCampaign, PublishedArticle, SendMode
from src.content_engine.content_writer.writer import ContentWriter

from .mailchimp import MailchimpClient

logger = setup_logging(module_name="newsletter.dispatcher")

PARAGRAPH_STYLE = "color: #666666; font-size: 16px; line-height: 1.6; margin: 0 0 15px 0;"
MIN_HTML_LENGTH = 100
EXCERPT_CHARS = 300
PREVIEW_CHARS = 100


def plain_text(html: str) -> str:
    return BeautifulSoup(html, "lxml").get_text(separator=" ", strip=True)


def style_paragraphs(html: str) -> str:
    """Apply the email paragraph style to every <p> of an HTML fragment."""
    soup = BeautifulSoup(html, "lxml")
    for paragraph in soup.find_all("p"):
        paragraph["style"] = PARAGRAPH_STYLE
    body = soup.body
    if body is None:
        return str(soup)
    return "".join(str(child) for child in body.children)


class NewsletterDispatcher:
    """Builds and dispatches the newsletter for one article."""

    def __init__(
        self,
        settings: Settings,
        writer: ContentWriter,
        client: MailchimpClient | None = None,
        templates_dir: Path | None = None,
    ):
        self.settings = settings
        self.config = settings.newsletter
        self.writer = writer
        self.client = client or MailchimpClient(
            self.config.api_key, timeout=settings.schedule.http_timeout_seconds
        )
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml", "html.jinja2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def send_mode(self) -> SendMode:
        return SendMode(self.config.send_mode)

    def build_html(self, article: PublishedArticle, intro: str | None) -> str:
        """Render the email; falls back to a plain excerpt when intro is None."""
        if intro:
            body = style_paragraphs(intro)
        else:
            excerpt = html_lib.escape(plain_text(article.html_body)[:EXCERPT_CHARS], quote=False)
            body = f'<p style="{PARAGRAPH_STYLE}">{excerpt}...</p>'

        template = self.env.get_template("newsletter.html.jinja2")
        return template.render(
            title=article.title,
            body=body,
            image_url=article.image_url,
            article_url=article.public_url,
            brand=self.settings.brand,
            from_name=self.config.from_name,
        )

    def build_campaign(self, article: PublishedArticle) -> NewsletterCampaign:
        intro = self.writer.generate_newsletter_intro(article.title, article.html_body)
        html = self.build_html(article, intro)
        return NewsletterCampaign(
            subject_line=self.writer.generate_newsletter_subject(article.title),
            preview_text=plain_text(article.html_body)[:PREVIEW_CHARS],
            html=html,
            send_mode=self.send_mode,
        )

    def dispatch(self, article: PublishedArticle) -> NewsletterCampaign:
        """Create, fill and (depending on send mode) send the campaign.

        Raises:
            NewsletterStepFailed: On missing configuration or any API error.
            NoTestRecipients: In test mode with no test addresses.
        """
        if not self.config.enabled:
            raise NewsletterStepFailed("config", "newsletter is disabled")
        if not self.config.api_key:
            raise NewsletterStepFailed("config", "Mailchimp API key not configured")
        if not self.config.audience_id:
            raise NewsletterStepFailed("config", "Mailchimp audience ID not configured")

        logger.info(
            "Newsletter settings - Mode: %s, From: %s",
            self.config.send_mode,
            self.config.from_name,
        )
        campaign = self.build_campaign(article)
        if len(campaign.html) < MIN_HTML_LENGTH:
            raise NewsletterStepFailed("build", "newsletter HTML is empty or too short")

        campaign.campaign_id = self.client.create_campaign(
            self.config.audience_id,
            {
                "subject_line": campaign.subject_line,
                "preview_text": campaign.preview_text,
                "title": f"Newsletter: {article.title[:50]}",
                "from_name": self.config.from_name,
                "reply_to": self.config.reply_to or "noreply@example.com",
                "auto_footer": True,
            },
        )
        self.client.set_content(campaign.campaign_id, campaign.html)

        if campaign.send_mode == SendMode.LIVE:
            self.client.send(campaign.campaign_id)
            campaign.sent = True
            logger.info("Newsletter sent to all subscribers")
        elif campaign.send_mode == SendMode.TEST:
            emails = list(self.config.test_emails)
            if not emails:
                raise NoTestRecipients(
                    "No test emails configured, set NEWSLETTER_TEST_EMAILS"
                )
            self.client.send_test(campaign.campaign_id, emails)
            campaign.sent = True
            logger.info("Test newsletter sent to: %s", ", ".join(emails))
        else:
            logger.info("Draft mode - newsletter saved as draft (campaign %s)", campaign.campaign_id)

        return campaign
