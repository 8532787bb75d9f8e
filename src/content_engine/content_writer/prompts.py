"""Prompt templates for every generation call.

Each builder returns the full user prompt for one independent completion.
The niche (e.g. "Running") is injected so the same templates serve any blog.
"""

from __future__ import annotations

from src.common.models import InternalLink, SocialPlatform


def format_internal_links(links: list[InternalLink]) -> str:
    """Render internal link candidates as a numbered list for the body prompt.

    Returns an empty string when there are no candidates.
    """
    if not links:
        return ""

    lines = ["INTERNAL LINKS TO USE (choose 3 that fit naturally with your content):"]
    for index, link in enumerate(links, start=1):
        lines.append(f'{index}. "{link.text}" - {link.url}')
    return "\n".join(lines) + "\n"


def build_title_prompt(niche: str) -> str:
    return (
        f"Generate a long, SEO-friendly {niche} blog article title within one of "
        f"these categories: {niche}. The title must include relevant SEO keywords. "
        "Return only the title without any other text and without quotation marks."
    )


def build_body_prompt(niche: str, title: str, internal_links: list[InternalLink]) -> str:
    """Build the article body prompt, with the internal-linking rule if needed."""
    prompt = (
        f"write a {niche} blog article with detailed informations about the topic: \n"
        f"{title}\n\n"
        " Make it long and more detailed and informative, in HTML format:\n"
        "1. without header and footer\n"
        "2. the first thing must be an introduction within a paragraph\n"
        "3. the second thing is the article outline, with the functionality to jump to sections\n"
        "4. section titles must be within an h2\n"
        "5. use lists (ul - ol) to make things clear and organized\n"
        "6. highlight important things using bold style\n"
        "7. optimized for SEO (use relevant tags for the best SEO ranking)\n"
        "8. adjust it to be readable and coherent, and make it long with a focus on "
        "improving its search engine visibility by strategically integrating relevant "
        "keywords. Keep a conversational tone and simplify complex sentences while "
        "keeping the information accurate and comprehensive.\n"
        "Do not use an h1 heading anywhere.\n"
        "When optimizing for SEO, include relevant keywords naturally. Break down long "
        "paragraphs, use bullet points where necessary, and ensure a smooth flow of ideas."
    )

    links_text = format_internal_links(internal_links)
    if links_text:
        prompt += (
            "\n\nINTERNAL LINKING REQUIREMENT:\n"
            "You MUST include exactly 3 internal links from the list below. Insert them "
            "naturally within relevant paragraphs as HTML anchor tags.\n"
            'Format: <a href="URL">anchor text</a>\n'
            "Choose links that relate to the content and flow naturally in context.\n\n"
            f"{links_text}"
        )

    return prompt + "\n\n###"


def build_meta_description_prompt(niche: str, title: str) -> str:
    return (
        f"Generate a well-optimized meta description for a {niche} article about this "
        f"topic: \n{title}\n\n. Include relevant keywords and make it SEO-friendly to "
        "improve search engine visibility.###"
    )


def build_image_prompt_prompt(title: str) -> str:
    return (
        "Write me a detailed prompt for an AI text to image model for generating a blog "
        f"article feature image about the topic: \n{title}\n\n. You must imagine how the "
        "image should look like for this title and describe it in details for this AI, "
        "it will just design what you described. Reply and return only the detailed "
        "prompt without any other irrelevant text, because your reply will be sent "
        "directly to the AI text to image model. The prompt should start with "
        "'Design an eye catching...' and give it a short title to place within the "
        "image that will accomplish the article title and explain the title style"
    )


def build_seo_keywords_prompt(niche: str, title: str, count: int = 5) -> str:
    return (
        f'Generate a list of {count} relevant SEO keywords for a {niche} blog article '
        f'titled: "{title}". Return the {count} keywords as a comma-separated string '
        "without any additional text."
    )


def build_summary_prompt(title: str, body: str) -> str:
    return f"Summarize the following article in a few sentences:\nTitle: {title}\nContent: {body}\n\n###"


_SOCIAL_INSTRUCTIONS: dict[SocialPlatform, tuple[str, str, str]] = {
    SocialPlatform.TWITTER: (
        "Create a concise and engaging tweet for Twitter about the following article",
        "Make sure it's within 280 characters, includes relevant hashtags, and is engaging to readers.",
        "Twitter",
    ),
    SocialPlatform.FACEBOOK: (
        "Write a Facebook post introducing the following article",
        "Make it engaging and suitable for Facebook audience.",
        "Facebook",
    ),
    SocialPlatform.INSTAGRAM: (
        "Craft an engaging Instagram caption for a post about the following article",
        "Include relevant hashtags and make it engaging.",
        "Instagram",
    ),
}


def build_social_prompt(
    platform: SocialPlatform,
    title: str,
    summary: str,
    url: str,
) -> str:
    """Build the promo-copy prompt for one platform."""
    opening, constraints, account = _SOCIAL_INSTRUCTIONS[platform]
    return (
        f"{opening}:\nTitle: {title}\nSummary: {summary}\n\n"
        f"Include a call-to-action to read the full article here: {url}. {constraints} "
        f"Important: Your reply will directly be posted to our {account} account so reply "
        "with just the post content without any additional text also Don't include any "
        "placeholder like [article_url]###"
    )


def build_newsletter_intro_prompt(
    brand_name: str,
    niche: str,
    title: str,
    content: str,
    style: str,
    day_of_week: str,
    time_of_day: str,
    month: str,
) -> str:
    """Build the newsletter body prompt (personal intro + teaser)."""
    return f"""\
You are writing a newsletter email for {brand_name}, a {niche.lower()} brand.

Article Title: {title}

Article Content Summary:
{content}

Current Context: It's {day_of_week} {time_of_day} in {month}.

Write the newsletter with TWO parts:

**PART 1 - PERSONAL INTRO (VERY IMPORTANT):**
Write a warm, informal greeting that sounds {style}. This intro should:
- Start with a casual, friendly greeting (NOT "Dear subscriber" - think "Hey there!" or "Hi friend!" or "Happy {day_of_week}!")
- Be 2-3 sentences max
- Sound genuinely human and conversational
- Can reference the day/week/season naturally
- Build excitement for what's coming
- DO NOT use the subscriber's name (we don't have it)

**PART 2 - MAIN CONTENT:**
After the intro, write the main newsletter body that:
1. Transitions naturally from the intro
2. Highlights 2-3 key takeaways from the article
3. Creates curiosity without giving everything away
4. Ends with a teaser that encourages clicking "Read Full Article"
5. Uses a friendly, energetic tone

Total length: 120-180 words (including intro).

Format as clean HTML with <p> tags. Do NOT include the article title as a heading, header, or any buttons - just the intro and body content.
Do NOT use bullet points or lists - write in flowing paragraph style.
IMPORTANT: Return ONLY the HTML content without any code fences. Just return the raw HTML directly.

Write the newsletter now:"""


def build_external_links_search_prompt(topic: str) -> str:
    return f"""\
Search the web for authoritative, high-quality articles related to: "{topic}"

Find 3 real, existing web pages from reputable sources (NOT Wikipedia) such as
major publications in this field, sports news sites, health/fitness sites,
technology review sites, or official brand/manufacturer websites.

For each link, provide:
1. The exact, full URL (must be a real, working link)
2. A short anchor text (2-5 words) that describes what the link is about

IMPORTANT: Return ONLY valid JSON in this exact format, nothing else:
[
  {{"url": "https://example.com/article", "text": "Anchor text here"}},
  {{"url": "https://example.com/article2", "text": "Another anchor"}}
]

Return ONLY the JSON array, no explanation or other text."""


def build_external_links_fallback_prompt(niche: str, topic: str, domains: list[str]) -> str:
    domain_lines = "\n".join(f"- {domain}" for domain in domains)
    return f"""\
You are an expert on {niche.lower()}, fitness, and sports.

For the topic "{topic}", suggest 3 authoritative external websites that would have relevant content.

Choose only from these well-known sources:
{domain_lines}

Return ONLY valid JSON in this exact format:
[
  {{"url": "https://www.runnersworld.com/", "text": "Runner's World"}},
  {{"url": "https://www.active.com/running", "text": "Active Running"}}
]

Return ONLY the JSON array."""
