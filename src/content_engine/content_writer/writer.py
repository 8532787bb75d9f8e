"""Content Writer — LLM-powered generation for every piece of article copy.

Each public ``generate_*`` method is one independent completion with its own
prompt. None of them raise: a failed call (API error, missing key, empty
reply) is logged and returned as ``None`` so the pipeline can decide whether
the missing field is fatal or just degrades the output.

Usage:
    writer = ContentWriter(settings)
    body = writer.generate_body("Best trail shoes 2024", internal_links)
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Callable, Optional

import anthropic
import openai

from src.common.config import Settings
from src.common.errors import GenerationFailed
from src.common.logging import setup_logging
from src.common.models import InternalLink, SocialPlatform

from .models import GREETING_DESCRIPTIONS, LLMProvider, WriterConfig
from .prompts import (
    build_body_prompt,
    build_image_prompt_prompt,
    build_meta_description_prompt,
    build_newsletter_intro_prompt,
    build_seo_keywords_prompt,
    build_social_prompt,
    build_summary_prompt,
    build_title_prompt,
)

logger = setup_logging(module_name="content_writer")

NEWSLETTER_SUBJECT_PREFIXES = [
    "📖 New Post:",
    "✨ Fresh Content:",
    "🎯 Just Published:",
    "💪 New Article:",
    "🏃 Running Update:",
]

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_FENCE_RE = re.compile(r"```(?:html)?")
_BRACES_RE = re.compile(r"\{[^}]*\}")
# Any bracketed token mentioning a url or link; "{{...}}" counts as one token.
# A "[...]" followed by "(" is a markdown link and is left alone.
_PLACEHOLDER_RE = re.compile(
    r"\{\{[^{}]*?(?:url|link)[^{}]*?\}\}"
    r"|\[[^\[\]]*?(?:url|link)[^\[\]]*?\](?!\()"
    r"|\{[^{}]*?(?:url|link)[^{}]*?\}"
    r"|<[^<>]*?(?:url|link)[^<>]*?>",
    re.IGNORECASE,
)


# --- Text clean-up helpers ---

def strip_quotes(text: str) -> str:
    """Remove every double quote from a single-shot reply."""
    return text.replace('"', "")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text)


def clean_generated_html(text: str) -> str:
    """Tidy an HTML body reply: markdown bold, code fences, brace artefacts."""
    text = _BOLD_RE.sub(r"<b>\1</b>", text)
    text = strip_code_fences(text)
    text = _BRACES_RE.sub("", text)
    return text.strip()


def resolve_url_placeholders(text: str, url: str) -> str:
    """Replace tokens like ``[article_url]``, ``[Insert link]`` or
    ``{{link}}`` with the real URL."""
    return _PLACEHOLDER_RE.sub(url, text)


def fit_to_limit(text: str, url: str, limit: int) -> str:
    """Trim text to ``limit`` characters without cutting the article URL."""
    if len(text) <= limit:
        return text

    if url and url in text:
        remainder = " ".join(text.replace(url, " ").split())
        room = limit - len(url) - 1
        if room <= 1:
            return url[:limit]
        if len(remainder) > room:
            remainder = remainder[: room - 1].rstrip() + "…"
        return f"{remainder} {url}"

    return text[: limit - 1].rstrip() + "…"


def time_of_day(hour: int) -> str:
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


class ContentWriter:
    """Generates titles, bodies, SEO fields and promo copy via OpenAI or Claude.

    Clients are created lazily from the API keys in ``settings.llm`` unless
    injected. ``search`` always uses OpenAI.
    """

    def __init__(
        self,
        settings: Settings,
        config: WriterConfig | None = None,
        client: openai.OpenAI | None = None,
        anthropic_client: anthropic.Anthropic | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.config = config or WriterConfig()
        self._client = client
        self._anthropic_client = anthropic_client
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def provider(self) -> LLMProvider:
        return self.config.provider or LLMProvider(self.settings.llm.provider)

    @property
    def model(self) -> str:
        if self.config.model:
            return self.config.model
        if self.provider == LLMProvider.ANTHROPIC:
            return self.settings.llm.anthropic_model
        return self.settings.llm.model

    @property
    def search_model(self) -> str:
        return self.config.search_model or self.settings.llm.search_model

    @property
    def niche(self) -> str:
        return self.config.niche or self.settings.llm.niche

    # --- LLM Integration ---

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            api_key = self.settings.llm.api_key
            if not api_key:
                raise GenerationFailed("OPENAI_API_KEY not set in environment")
            self._client = openai.OpenAI(api_key=api_key)
        return self._client

    @property
    def anthropic_client(self) -> anthropic.Anthropic:
        if self._anthropic_client is None:
            api_key = self.settings.llm.anthropic_api_key
            if not api_key:
                raise GenerationFailed("ANTHROPIC_API_KEY not set in environment")
            self._anthropic_client = anthropic.Anthropic(api_key=api_key)
        return self._anthropic_client

    def _call_llm(self, prompt: str) -> str:
        """Run one completion on the configured provider.

        Raises:
            GenerationFailed: If the reply is empty.
            openai.OpenAIError, anthropic.AnthropicError: On API/transport errors.
        """
        if self.provider == LLMProvider.ANTHROPIC:
            text = self._call_anthropic(prompt)
        else:
            text = self._call_openai(prompt)
        text = text.strip()
        if not text:
            raise GenerationFailed("empty completion")
        return text

    def _call_openai(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""

    def _call_anthropic(self, prompt: str) -> str:
        response = self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=self.settings.llm.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

    def search(self, prompt: str) -> str:
        """Run a web-search-augmented completion via the Responses API.

        Unlike the ``generate_*`` methods this raises on failure, so callers
        can fall back to a plain completion.

        Raises:
            GenerationFailed: If the reply has no text.
            openai.OpenAIError: On API/transport errors or non-success status.
        """
        response = self.client.responses.create(
            model=self.search_model,
            tools=[{"type": "web_search"}],
            input=prompt,
        )
        text = (response.output_text or "").strip()
        if not text:
            raise GenerationFailed("empty web search response")
        return text

    def complete(self, label: str, prompt: str) -> Optional[str]:
        """Run a completion, logging and returning None on failure."""
        try:
            return self._call_llm(prompt)
        except (openai.OpenAIError, anthropic.AnthropicError, GenerationFailed) as exc:
            logger.error("Error generating %s: %s", label, exc)
            return None

    # --- Article fields ---

    def generate_title(self) -> Optional[str]:
        """Generate a fresh article title (used when the topic queue is empty)."""
        text = self.complete("article title", build_title_prompt(self.niche))
        if text is None:
            return None
        title = strip_quotes(text).strip()
        logger.info("Generated title: %s", title)
        return title or None

    def generate_body(
        self,
        title: str,
        internal_links: list[InternalLink] | None = None,
    ) -> Optional[str]:
        """Generate the article body HTML, embedding up to 3 internal links."""
        internal_links = internal_links or []
        logger.info(
            "Generating article with %d internal links available", len(internal_links)
        )
        text = self.complete(
            "article body", build_body_prompt(self.niche, title, internal_links)
        )
        if text is None:
            return None
        body = clean_generated_html(text)
        return body or None

    def generate_meta_description(self, title: str) -> Optional[str]:
        text = self.complete(
            "meta description", build_meta_description_prompt(self.niche, title)
        )
        return strip_quotes(text).strip() if text else None

    def generate_image_prompt(self, title: str) -> Optional[str]:
        return self.complete("image prompt", build_image_prompt_prompt(title))

    def generate_seo_keywords(self, title: str) -> Optional[list[str]]:
        """Generate exactly ``keyword_count`` comma-separated SEO keywords.

        Extra terms are dropped; a reply with fewer terms counts as a failure.
        """
        count = self.config.keyword_count
        text = self.complete(
            "SEO keywords", build_seo_keywords_prompt(self.niche, title, count)
        )
        if text is None:
            return None

        terms = [
            term.strip().strip("'").strip()
            for term in strip_quotes(text).replace("\n", ",").split(",")
        ]
        terms = [term for term in terms if term]
        if len(terms) < count:
            logger.warning("Expected %d SEO keywords, got %d: %s", count, len(terms), text)
            return None

        keywords = terms[:count]
        logger.info("SEO Keywords: %s", ", ".join(keywords))
        return keywords

    def generate_summary(self, title: str, body: str) -> Optional[str]:
        text = self.complete("article summary", build_summary_prompt(title, body))
        return strip_quotes(text).strip() if text else None

    # --- Promotion copy ---

    def generate_social_copy(
        self,
        platform: SocialPlatform,
        title: str,
        summary: str,
        url: str,
    ) -> Optional[str]:
        """Generate ready-to-post copy for one platform.

        URL placeholders are resolved to ``url``; twitter copy is capped at
        ``tweet_limit`` characters.
        """
        text = self.complete(
            f"{platform.value} post", build_social_prompt(platform, title, summary, url)
        )
        if text is None:
            return None

        post = resolve_url_placeholders(strip_quotes(text).strip(), url)
        if platform == SocialPlatform.TWITTER:
            post = fit_to_limit(post, url, self.config.tweet_limit)
        logger.info("Generated %s post: %s", platform.value, post)
        return post

    def generate_newsletter_intro(self, title: str, content: str) -> Optional[str]:
        """Generate the newsletter intro + teaser as ``<p>`` HTML."""
        now = self._clock()
        style = self._rng.choice(list(GREETING_DESCRIPTIONS.values()))
        prompt = build_newsletter_intro_prompt(
            brand_name=self.settings.newsletter.from_name,
            niche=self.niche,
            title=title,
            content=content[: self.config.newsletter_content_chars],
            style=style,
            day_of_week=now.strftime("%A"),
            time_of_day=time_of_day(now.hour),
            month=now.strftime("%B"),
        )
        text = self.complete("newsletter body", prompt)
        if text is None:
            return None

        body = strip_code_fences(text).strip()
        if "<p" not in body:
            body = "<p>" + body.replace("\n\n", "</p><p>").replace("\n", "<br>") + "</p>"
        logger.info("Generated newsletter body (%d chars)", len(body))
        return body

    def generate_newsletter_subject(self, title: str) -> str:
        """Random prefix plus the first 8 words of the title."""
        prefix = self._rng.choice(NEWSLETTER_SUBJECT_PREFIXES)
        words = " ".join(title.split()[:8])
        return f"{prefix} {words}"
