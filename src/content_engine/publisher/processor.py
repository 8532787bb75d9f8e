"""Post-processor — turns generated article HTML into publish-ready HTML.

Handles, in this order:
- Stripping disallowed markup (h1, styles)
- Product promotion banners at fixed structural anchors
- External links appended to two body paragraphs
- Signup form appended at publish time

The steps mutate the document and are not idempotent (except the strip);
run them once per article.
"""

from __future__ import annotations

import math
import random

from bs4 import BeautifulSoup, NavigableString, Tag

from src.common.logging import setup_logging
from src.common.models import ExternalLink, InternalLink, PromotionSlot, SlotPosition

from .models import PROMOTION_ALT_TEXT, PostProcessingConfig

logger = setup_logging(module_name="publisher.processor")

_SLOT_ORDER = [SlotPosition.AFTER_OUTLINE, SlotPosition.MIDDLE, SlotPosition.END]


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _body(soup: BeautifulSoup) -> Tag:
    return soup.body or soup


def _inner_html(soup: BeautifulSoup) -> str:
    """Serialize the children of <body> (the fragment we were given)."""
    body = soup.body
    if body is None:
        return str(soup)
    return "".join(str(child) for child in body.children)


def select_internal_links(
    links: list[InternalLink],
    limit: int,
    rng: random.Random | None = None,
) -> list[InternalLink]:
    """Shuffle internal link candidates and keep at most ``limit``."""
    shuffled = list(links)
    (rng or random).shuffle(shuffled)
    return shuffled[:limit]


class PostProcessor:
    """Applies the HTML transformations between generation and publishing."""

    def __init__(self, config: PostProcessingConfig | None = None):
        self.config = config or PostProcessingConfig()

    def process(self, html: str, external_links: list[ExternalLink] | None = None) -> str:
        """Strip markup, inject banners, then inject external links."""
        html = self.strip_disallowed_markup(html)
        html = self.inject_promotion_banners(html, self.config.slots)
        if external_links:
            html = self.inject_external_links(html, external_links)
        return html

    def strip_disallowed_markup(self, html: str) -> str:
        """Remove h1 headings, <style> blocks, stylesheet links and style attributes."""
        soup = _parse(html)

        for tag in soup.find_all(["h1", "style"]):
            tag.decompose()
        for link in soup.find_all("link"):
            if "stylesheet" in (link.get("rel") or []):
                link.decompose()
        for tag in soup.find_all(style=True):
            del tag["style"]

        return _inner_html(soup)

    def inject_promotion_banners(self, html: str, slots: list[PromotionSlot]) -> str:
        """Insert a clickable banner after each configured slot's anchor.

        Order is fixed: after the first list, after the middle paragraph
        (index ``floor(count / 2)``), after the last top-level element.
        """
        by_position = {slot.position: slot for slot in slots if slot.is_configured}
        if not by_position:
            return html

        soup = _parse(html)
        for position in _SLOT_ORDER:
            slot = by_position.get(position)
            if slot is None:
                continue

            anchor = self._find_anchor(soup, position)
            if anchor is None:
                logger.warning("No anchor for %s banner, skipping", position.value)
                continue

            anchor.insert_after(self._banner(soup, slot))
            logger.info("Inserted %s promotion banner", position.value)

        return _inner_html(soup)

    def inject_external_links(self, html: str, links: list[ExternalLink]) -> str:
        """Append up to two external links to paragraphs at 40% and 70%.

        Documents with fewer than ``min_paragraphs_for_links`` paragraphs are
        returned unchanged.
        """
        if not links:
            return html

        soup = _parse(html)
        paragraphs = soup.find_all("p")
        count = len(paragraphs)
        if count < self.config.min_paragraphs_for_links:
            logger.info("Not enough paragraphs for external links (%d)", count)
            return html

        max_links = min(self.config.max_external_links, len(links))
        positions = [
            math.floor(count * fraction) for fraction in self.config.external_link_positions
        ]

        added = 0
        for pos in positions:
            if added >= max_links:
                break
            if pos >= count:
                continue

            link = links[added]
            anchor = soup.new_tag(
                "a", href=link.url, target="_blank", rel="noopener noreferrer"
            )
            anchor.string = link.text

            paragraph = paragraphs[pos]
            paragraph.append(NavigableString(" ("))
            paragraph.append(anchor)
            paragraph.append(NavigableString(")"))
            added += 1
            logger.info("Added external link: %s", link.url)

        return _inner_html(soup)

    def append_signup_form(self, html: str) -> str:
        return html + self.config.signup_form_html

    # --- Internal helpers ---

    def _find_anchor(self, soup: BeautifulSoup, position: SlotPosition) -> Tag | None:
        if position == SlotPosition.AFTER_OUTLINE:
            return soup.find("ul")
        if position == SlotPosition.MIDDLE:
            paragraphs = soup.find_all("p")
            if not paragraphs:
                return None
            return paragraphs[len(paragraphs) // 2]
        top_level = _body(soup).find_all(recursive=False)
        return top_level[-1] if top_level else None

    def _banner(self, soup: BeautifulSoup, slot: PromotionSlot) -> Tag:
        link = soup.new_tag("a", href=slot.link, target="_blank", rel="noopener")
        link.append(
            soup.new_tag(
                "img",
                src=slot.image,
                alt=PROMOTION_ALT_TEXT,
                style="width:100%;height:auto;",
            )
        )
        return link
