# Social — promotional fan-out to X/Twitter, Facebook and Instagram
from .fanout import PLATFORMS, SocialFanout
from .models import SocialPostOutcome
from .platforms import (
    FacebookPoster,
    InstagramPoster,
    TwitterPoster,
    build_posters,
    strip_markdown_links,
)

__all__ = [
    "PLATFORMS",
    "FacebookPoster",
    "InstagramPoster",
    "SocialFanout",
    "SocialPostOutcome",
    "TwitterPoster",
    "build_posters",
    "strip_markdown_links",
]
