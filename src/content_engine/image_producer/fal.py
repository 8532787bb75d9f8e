"""Featured image generation through the fal.ai queue API.

Flow: submit the prompt to ``queue.fal.run/<model>``, poll the returned
status URL until the request completes, then fetch the result and take the
first image URL.
"""

from __future__ import annotations

import time
from typing import Callable

import requests

from src.common.config import Settings
from src.common.errors import ImageGenerationFailed
from src.common.logging import setup_logging

logger = setup_logging(module_name="image_producer")

FAL_QUEUE_BASE = "https://queue.fal.run"


class FalImageProducer:
    """Generates one featured image per article."""

    def __init__(
        self,
        settings: Settings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = settings.image
        self.timeout = settings.schedule.http_timeout_seconds
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Key {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def produce_featured_image(self, prompt: str) -> str:
        """Generate an image for ``prompt`` and return its hosted URL.

        Raises:
            ImageGenerationFailed: On any failure, including a result with
                no images.
        """
        if not prompt or not prompt.strip():
            raise ImageGenerationFailed("Empty image prompt")
        if not self.config.api_key:
            raise ImageGenerationFailed("FAL_API_KEY not set in environment")

        try:
            submitted = self._request(
                "POST",
                f"{FAL_QUEUE_BASE}/{self.config.model}",
                json={"prompt": prompt, "image_size": self.config.image_size},
            )
            request_id = submitted.get("request_id", "")
            status_url = submitted.get("status_url") or (
                f"{FAL_QUEUE_BASE}/{self.config.model}/requests/{request_id}/status"
            )
            response_url = submitted.get("response_url") or (
                f"{FAL_QUEUE_BASE}/{self.config.model}/requests/{request_id}"
            )
            logger.info("Submitted image request %s", request_id)

            self._wait_for_completion(status_url)
            result = self._request("GET", response_url)
        except requests.RequestException as exc:
            raise ImageGenerationFailed(f"fal request failed: {exc}") from exc

        images = result.get("images") or []
        if not images or not images[0].get("url"):
            raise ImageGenerationFailed("fal returned no images")

        image_url = images[0]["url"]
        logger.info("fal: %s", image_url)
        return image_url

    def _wait_for_completion(self, status_url: str) -> None:
        for _ in range(self.config.max_polls):
            status = self._request("GET", status_url, params={"logs": 1})
            state = status.get("status")

            if state == "COMPLETED":
                if status.get("error"):
                    raise ImageGenerationFailed(f"fal error: {status['error']}")
                return
            if state == "IN_PROGRESS":
                for entry in status.get("logs") or []:
                    logger.info("fal: %s", entry.get("message", ""))
            elif state not in ("IN_QUEUE",):
                raise ImageGenerationFailed(f"Unexpected fal status: {state}")

            self._sleep(self.config.poll_interval_seconds)

        raise ImageGenerationFailed(
            f"Image not ready after {self.config.max_polls} polls"
        )

    def _request(self, method: str, url: str, **kwargs) -> dict:
        response = self.session.request(
            method, url, headers=self.headers, timeout=self.timeout, **kwargs
        )
        if response.status_code >= 400:
            raise ImageGenerationFailed(
                f"fal HTTP {response.status_code}: {response.text[:300]}"
            )
        return response.json()
