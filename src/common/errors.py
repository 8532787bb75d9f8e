"""Error taxonomy shared by all pipeline components.

Components raise these at their seams; the orchestrator catches them,
logs, and applies the requeue policy.
"""

from __future__ import annotations


class ContentEngineError(Exception):
    """Base class for every pipeline error."""


class EmptyQueue(ContentEngineError):
    """The topic queue has no lines."""


class GenerationFailed(ContentEngineError):
    """A language-model call returned no usable content."""


class ImageGenerationFailed(ContentEngineError):
    """The image backend did not return an image URL."""


class PublishRejected(ContentEngineError):
    """The blog platform did not create the article."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SocialPostFailed(ContentEngineError):
    """Posting to a single social platform failed."""

    def __init__(self, platform: str, message: str):
        super().__init__(f"{platform}: {message}")
        self.platform = platform


class NewsletterStepFailed(ContentEngineError):
    """A newsletter step (config, create, content, send) failed."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class NoTestRecipients(NewsletterStepFailed):
    """Send mode is ``test`` but no test addresses are configured."""

    def __init__(self, message: str = "no test recipients configured"):
        super().__init__("test_send", message)
