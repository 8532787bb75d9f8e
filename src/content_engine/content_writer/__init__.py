# Content Writer — LLM writer for article, SEO and promotion copy
"""
Content Writer module.

Every artefact (title, body, meta description, image prompt, keywords,
summary, social copy, newsletter intro) is an independent completion.
"""

from .models import GreetingStyle, LLMProvider, WriterConfig
from .prompts import format_internal_links
from .writer import ContentWriter, clean_generated_html

__all__ = [
    "ContentWriter",
    "GreetingStyle",
    "LLMProvider",
    "WriterConfig",
    "clean_generated_html",
    "format_internal_links",
]
