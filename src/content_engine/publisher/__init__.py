# Publisher — post-processing, Shopify publishing and the full article pipeline
"""
Publisher module for turning generated content into a published article.

Handles markup stripping, promotion banners, external link discovery and
injection, the signup form, Shopify article creation, and the pipeline that
wires every component together.
"""

from .link_finder import ExternalLinkFinder, parse_external_links_json
from .models import PipelineResult, PostProcessingConfig, RunStage
from .pipeline import ArticlePipeline
from .processor import PostProcessor, select_internal_links
from .shopify import ShopifyClient

__all__ = [
    "ArticlePipeline",
    "ExternalLinkFinder",
    "PipelineResult",
    "PostProcessingConfig",
    "PostProcessor",
    "RunStage",
    "ShopifyClient",
    "parse_external_links_json",
    "select_internal_links",
]
