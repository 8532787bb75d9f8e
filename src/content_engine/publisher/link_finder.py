"""External link discovery for article bodies.

Asks the model (with web search) for authoritative pages about the topic,
falling back to a plain completion restricted to a known domain allow-list.
Replies are free-form text, so parsing is strict first (whole reply is JSON)
and lenient second (first top-level JSON array inside the text).
"""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import urlparse

import openai

from src.common.errors import GenerationFailed
from src.common.logging import setup_logging
from src.common.models import ExternalLink
from src.content_engine.content_writer.prompts import (
    build_external_links_fallback_prompt,
    build_external_links_search_prompt,
)
from src.content_engine.content_writer.writer import ContentWriter, strip_code_fences

logger = setup_logging(module_name="publisher.link_finder")

_DECODER = json.JSONDecoder()


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _first_json_array(text: str) -> list[Any] | None:
    """Decode the first top-level JSON array embedded in free text."""
    for match in re.finditer(r"\[", text):
        try:
            value, _ = _DECODER.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(value, list):
            return value
    return None


def parse_external_links_json(text: str) -> list[ExternalLink]:
    """Parse ``[{"url": ..., "text": ...}]`` out of a model reply.

    Malformed entries (not an object, missing or blank fields, non-http(s)
    URL) are dropped; the batch never fails as a whole.
    """
    if not text:
        return []

    cleaned = strip_code_fences(text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = _first_json_array(cleaned)

    if not isinstance(data, list):
        logger.warning("No JSON array found in external links reply")
        return []

    links = []
    for item in data:
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        anchor = item.get("text")
        if not isinstance(url, str) or not isinstance(anchor, str):
            continue
        url, anchor = url.strip(), anchor.strip()
        if not anchor or not _is_http_url(url):
            continue
        links.append(ExternalLink(url=url, text=anchor))

    logger.info("Parsed %d valid external links", len(links))
    return links


class ExternalLinkFinder:
    """Finds external links for a topic using the content writer's client."""

    def __init__(self, writer: ContentWriter, fallback_domains: list[str] | None = None):
        self.writer = writer
        self.fallback_domains = (
            fallback_domains
            if fallback_domains is not None
            else list(writer.settings.llm.fallback_link_domains)
        )

    def find(self, topic: str) -> list[ExternalLink]:
        """Return external links for ``topic``; empty list if both paths fail."""
        logger.info("Searching for external links related to: %s", topic)
        try:
            reply = self.writer.search(build_external_links_search_prompt(topic))
        except (openai.OpenAIError, GenerationFailed) as exc:
            logger.warning("Web search for external links failed (%s), using fallback", exc)
            return self.find_fallback(topic)

        links = parse_external_links_json(reply)
        if not links:
            logger.info("Could not parse links from web search, using fallback")
            return self.find_fallback(topic)
        return links

    def find_fallback(self, topic: str) -> list[ExternalLink]:
        """Ask for links from the allow-listed domains without web search."""
        prompt = build_external_links_fallback_prompt(
            self.writer.niche, topic, self.fallback_domains
        )
        reply = self.writer.complete("fallback external links", prompt)
        if reply is None:
            return []
        return parse_external_links_json(reply)
